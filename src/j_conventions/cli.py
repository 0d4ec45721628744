"""Typer CLI entry point for j-conventions."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from j_conventions.build import BuildContext, BuildResult, configure_build
from j_conventions.config import BuildConfig
from j_conventions.declaration import load_declaration
from j_conventions.exceptions import ConventionError
from j_conventions.graph import composition_graph, fragment_cycles
from j_conventions.pom import render_pom, write_pom
from j_conventions.publication import publish_all
from j_conventions.staging import StagingDirectoryCollaborator
from j_conventions.visualize import build_module_tree, build_publication_table
from j_conventions.visualize_html import export_pyvis

app = typer.Typer(add_completion=False, help="Compose build conventions onto modules and assemble publications.")
console = Console()
err_console = Console(stderr=True)

FileOption = Annotated[
    Optional[Path],
    typer.Option("--file", "-f", help="Build declaration (default: $JCONV_DECLARATION or conventions.toml)."),
]
DefineOption = Annotated[
    Optional[list[str]],
    typer.Option("--define", "-D", help="System property as key=value. Repeatable."),
]
LogLevelOption = Annotated[
    Optional[str],
    typer.Option("--log-level", help="Logging level (default: $JCONV_LOG_LEVEL or WARNING)."),
]


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise typer.Exit(code=1)


def parse_defines(defines: list[str] | None) -> dict[str, str]:
    """Turn `key=value` strings into a system property mapping.

    A bare `key` defines an empty value, like `-Dkey` does for the JVM.
    """
    props: dict[str, str] = {}
    for item in defines or []:
        key, _, value = item.partition("=")
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Invalid system property '{item}', expected key=value")
        props[key] = value
    return props


def _setup(log_level: str | None) -> BuildConfig:
    config = BuildConfig.from_env()
    if log_level:
        config.log_level = log_level.upper()
    try:
        config.validate()
    except ValueError as exc:
        _fail(str(exc))

    logging.basicConfig(
        level=config.logging_level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    return config


def _build(config: BuildConfig, file: Path | None, defines: list[str] | None) -> BuildResult:
    declaration = load_declaration(file or config.declaration_path)
    return configure_build(declaration, BuildContext(system_properties=parse_defines(defines)))


@app.command()
def configure(
    file: FileOption = None,
    define: DefineOption = None,
    log_level: LogLevelOption = None,
) -> None:
    """Apply conventions to every module and print the result."""
    config = _setup(log_level)
    try:
        result = _build(config, file, define)
    except ConventionError as exc:
        _fail(str(exc))

    props = Table(title="Build properties")
    props.add_column("Key")
    props.add_column("Value")
    for key, value in sorted(result.store.snapshot().items()):
        shown = "[dim]<set>[/dim]" if key in ("repoUserName", "repoPassword") else value
        props.add_row(key, shown)
    console.print(props)

    for module in result.modules.values():
        console.print(build_module_tree(module))


@app.command()
def pom(
    module: Annotated[str, typer.Argument(help="Module whose POM to render.")],
    file: FileOption = None,
    define: DefineOption = None,
    out: Annotated[Optional[Path], typer.Option("--out", help="Directory to write the POM into.")] = None,
    log_level: LogLevelOption = None,
) -> None:
    """Render the POM a module would publish."""
    config = _setup(log_level)
    try:
        result = _build(config, file, define)
    except ConventionError as exc:
        _fail(str(exc))

    descriptor = result.descriptors.get(module)
    if descriptor is None:
        _fail(f"Module '{module}' has no publication")

    if out is None:
        console.print(render_pom(descriptor).decode("utf-8"), markup=False, highlight=False, soft_wrap=True)
        return
    console.print(f"[green]Wrote[/green] {write_pom(descriptor, out)}")


@app.command()
def publish(
    file: FileOption = None,
    define: DefineOption = None,
    module: Annotated[
        Optional[list[str]],
        typer.Option("--module", "-m", help="Only publish these modules. Repeatable."),
    ] = None,
    out: Annotated[Optional[Path], typer.Option("--out", help="Staging directory.")] = None,
    log_level: LogLevelOption = None,
) -> None:
    """Assemble publications and stage them for upload."""
    config = _setup(log_level)
    try:
        result = _build(config, file, define)
    except ConventionError as exc:
        _fail(str(exc))

    selected = list(result.descriptors.values())
    if module:
        unknown = sorted(set(module) - set(result.descriptors))
        if unknown:
            _fail(f"No publication for module(s): {', '.join(unknown)}")
        selected = [d for d in selected if d.module in module]

    console.print(build_publication_table(selected))

    collaborator = StagingDirectoryCollaborator(out or config.output_dir)
    results = publish_all(selected, collaborator)
    for r in results:
        if r.is_success:
            console.print(f"[green]Staged[/green] {r.module}")
        else:
            console.print(f"[bold red]Failed[/bold red] {r.module}: {escape(str(r.error))}")

    if not all(r.is_success for r in results):
        raise typer.Exit(code=1)


@app.command()
def graph(
    file: FileOption = None,
    out: Annotated[Path, typer.Option("--out", help="Output HTML file path.")] = Path("conventions.html"),
    log_level: LogLevelOption = None,
) -> None:
    """Export an interactive HTML graph of modules, conventions and plugins (Pyvis)."""
    config = _setup(log_level)
    try:
        declaration = load_declaration(file or config.declaration_path)
    except ConventionError as exc:
        _fail(str(exc))

    for cycle in fragment_cycles(declaration.fragments):
        console.print(f"[yellow]Warning:[/yellow] convention cycle {' -> '.join(cycle)}")

    out_path = export_pyvis(composition_graph(declaration), out)
    console.print(f"[green]Wrote[/green] {out_path}")


def main() -> None:
    """Console-script entry point."""
    app()
