from __future__ import annotations

from pathlib import Path

import pytest

from j_conventions.declaration import load_declaration, parse_declaration, parse_declaration_text
from j_conventions.exceptions import DeclarationNotFoundError, DeclarationParseError
from j_conventions.models import BuildDeclaration


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_load_sample_declaration(sample_declaration_path: Path) -> None:
    decl = load_declaration(sample_declaration_path)

    assert isinstance(decl, BuildDeclaration)
    assert list(decl.fragments) == [
        "java-common-properties",
        "java-common-conventions",
        "java-library-conventions",
    ]
    assert list(decl.modules) == ["clusterless-commons-core", "clusterless-commons-aws"]
    assert decl.root.conventions == ["java-common-properties"]
    assert decl.root.repositories["sonatype"].name == "sonatype"

    props = decl.fragments["java-common-properties"].properties
    assert props["group"].value == "io.clusterless"
    assert props["repoUserName"].system_property == "publish.repo.userName"


def test_module_dependencies_accept_strings_and_tables(sample_declaration_path: Path) -> None:
    core = load_declaration(sample_declaration_path).modules["clusterless-commons-core"]
    first, *_, last = core.dependencies
    assert first.configuration == "implementation"
    assert first.coordinate == "org.jetbrains:annotations"
    assert last.configuration == "testImplementation"
    assert last.gav().version == "5.9.3"


def test_plugin_entries_accept_pinned_versions(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "conventions.toml",
        """
[fragments.publishing]
plugins = ["maven-publish", { id = "io.github.gradle-nexus.publish-plugin", version = "1.3.0" }]
""",
    )
    plugins = load_declaration(path).fragments["publishing"].plugins
    assert [p.id for p in plugins] == ["maven-publish", "io.github.gradle-nexus.publish-plugin"]
    assert plugins[1].version == "1.3.0"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(DeclarationNotFoundError):
        load_declaration(tmp_path / "missing.toml")


def test_invalid_toml_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "conventions.toml", "[fragments.broken\n")
    with pytest.raises(DeclarationParseError, match="Failed to parse"):
        load_declaration(path)


def test_validation_error_names_location() -> None:
    text = """
[modules.core]
dependencies = ["not-a-coordinate"]
"""
    with pytest.raises(DeclarationParseError) as info:
        parse_declaration_text(text, "inline.toml")
    message = str(info.value)
    assert "inline.toml" in message
    assert "modules.core.dependencies.0" in message


def test_bad_credential_source_is_rejected() -> None:
    data = {
        "root": {
            "repositories": {
                "sonatype": {"url": "https://example.invalid/", "username": ["vault:token"]},
            }
        }
    }
    with pytest.raises(DeclarationParseError, match="Invalid credential source"):
        parse_declaration(data)


def test_bad_constraint_key_is_rejected() -> None:
    with pytest.raises(DeclarationParseError):
        parse_declaration({"fragments": {"f": {"constraints": {"guava": "31.1-jre"}}}})
