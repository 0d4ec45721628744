"""Load TOML build declarations.

A declaration holds the fragment catalog, the root project and the modules:

    [fragments.java-common-properties.properties]
    group = "io.clusterless"
    repoUserName = { system_property = "publish.repo.userName" }

    [modules.clusterless-commons-core]
    conventions = ["java-library-conventions"]
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from j_conventions.exceptions import DeclarationNotFoundError, DeclarationParseError
from j_conventions.models import BuildDeclaration


def _format_validation_error(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ()))
        lines.append(f"  {where or '<root>'}: {err.get('msg')}")
    return "\n".join(lines)


def parse_declaration(data: dict[str, Any], source: str = "<declaration>") -> BuildDeclaration:
    """Validate an already-parsed TOML document.

    Raises:
        DeclarationParseError: If the document does not describe a valid build.
    """
    try:
        return BuildDeclaration.model_validate(data)
    except ValidationError as exc:
        raise DeclarationParseError(f"Invalid build declaration {source}:\n{_format_validation_error(exc)}") from exc


def parse_declaration_text(text: str, source: str = "<declaration>") -> BuildDeclaration:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise DeclarationParseError(f"Failed to parse build declaration {source}: {exc}") from exc
    return parse_declaration(data, source)


def load_declaration(path: str | Path) -> BuildDeclaration:
    """Read and validate a build declaration file.

    Raises:
        DeclarationNotFoundError: If the file does not exist.
        DeclarationParseError: If TOML or validation fails.
    """
    decl_path = Path(path)
    if not decl_path.exists():
        raise DeclarationNotFoundError(f"Build declaration not found: {decl_path}")
    try:
        text = decl_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DeclarationParseError(f"Failed to read build declaration: {decl_path}") from exc
    return parse_declaration_text(text, str(decl_path))
