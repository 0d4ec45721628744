"""Rich rendering utilities for configured modules and publications."""

from __future__ import annotations

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from j_conventions.module import Module
from j_conventions.publication import PublicationDescriptor


def build_module_tree(module: Module) -> Tree:
    """Build a Rich Tree describing what the conventions did to a module.

    Args:
        module: A configured module.

    Returns:
        A Rich Tree object for rendering.
    """
    coords = f"{module.group or '?'}:{module.name}:{module.version or '?'}"
    root = Tree(f"[bold]{coords}[/bold]")

    fragments = root.add("conventions")
    if not module.applied_fragments:
        fragments.add("[dim]none[/dim]")
    for name in module.applied_fragments:
        fragments.add(name)

    plugins = root.add("plugins")
    for plugin_id in module.plugins:
        version = module.plugin_versions.get(plugin_id)
        plugins.add(f"{plugin_id} {version}" if version else plugin_id)

    java = module.java
    if java.language_version is not None:
        extras = [name for name, on in (("sources", java.sources_jar), ("javadoc", java.javadoc_jar)) if on]
        suffix = f" (+{', '.join(extras)} jars)" if extras else ""
        root.add(f"java toolchain {java.language_version}{suffix}")
    if module.testing.framework:
        root.add(f"tests: {module.testing.framework} {module.testing.version or ''}".rstrip())

    if module.constraints:
        constraints = root.add("constraints")
        for coordinate, version in sorted(module.constraints.items()):
            constraints.add(f"{coordinate} -> {version}")

    deps = module.resolved_dependencies()
    if deps:
        branch = root.add("dependencies")
        for dep in deps:
            branch.add(f"{dep.configuration}: {dep.gav.compact()}")

    tasks = root.add("tasks")
    for task in module.tasks:
        changed = {k: v for k, v in task.fields.items() if v is not None}
        tasks.add(escape(f"{task.name} {changed}") if changed else task.name)
    for name, count in module.tasks.pending().items():
        tasks.add(f"[yellow]{name}[/yellow] [dim]({count} change(s) waiting for the task)[/dim]")

    return root


def build_publication_table(descriptors: list[PublicationDescriptor]) -> Table:
    table = Table(title="Publications")
    table.add_column("Module")
    table.add_column("Coordinates")
    table.add_column("Repository")
    table.add_column("Credentials")
    table.add_column("Signed")

    for d in descriptors:
        repo = d.repository
        if repo is None:
            target, creds = "[dim]none[/dim]", "-"
        else:
            target = repo.url_for(d.gav.version)
            if repo.credentials.is_complete:
                creds = "[green]resolved[/green]"
            elif repo.credentials.is_empty:
                creds = "[red]unresolved[/red]" if repo.requires_auth else "[dim]not required[/dim]"
            else:
                creds = "[yellow]partial[/yellow]"
        table.add_row(d.module, d.gav.compact(), target, creds, "yes" if d.signing_required else "no")
    return table
