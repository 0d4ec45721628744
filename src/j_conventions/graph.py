from __future__ import annotations

from collections.abc import Mapping

import networkx as nx

from j_conventions.exceptions import ModuleOrderError
from j_conventions.models import BuildDeclaration, ConventionFragment, ModuleDeclaration


def module_graph(modules: Mapping[str, ModuleDeclaration]) -> nx.DiGraph:
    """Build a graph where A -> B means A must be configured before B."""
    g = nx.DiGraph()
    for name in modules:
        g.add_node(name)
    for name, decl in modules.items():
        for dep in decl.depends_on:
            if dep not in modules:
                raise ModuleOrderError(f"Module '{name}' depends on unknown module '{dep}'")
            g.add_edge(dep, name)
    return g


def configuration_order(modules: Mapping[str, ModuleDeclaration]) -> list[str]:
    """Return module names so that every module follows the modules it depends on.

    Independent modules keep their declaration order.

    Raises:
        ModuleOrderError: On unknown or cyclic `depends_on` edges.
    """
    g = module_graph(modules)
    position = {name: i for i, name in enumerate(modules)}
    try:
        return list(nx.lexicographical_topological_sort(g, key=position.__getitem__))
    except nx.NetworkXUnfeasible:
        cycle = [u for u, _ in nx.find_cycle(g)]
        raise ModuleOrderError(
            f"Module configure-before cycle: {' -> '.join([*cycle, cycle[0]])}"
        ) from None


def fragment_graph(catalog: Mapping[str, ConventionFragment]) -> nx.DiGraph:
    """Fragment -> prerequisite-fragment edges (plugin ids that name fragments)."""
    g = nx.DiGraph()
    for name, fragment in catalog.items():
        g.add_node(name)
        for request in fragment.plugins:
            if request.id in catalog:
                g.add_edge(name, request.id)
    return g


def fragment_cycles(catalog: Mapping[str, ConventionFragment]) -> list[list[str]]:
    """Every elementary cycle among fragment prerequisites, each closed on its start."""
    return sorted([*cycle, cycle[0]] for cycle in nx.simple_cycles(fragment_graph(catalog)))


def composition_graph(declaration: BuildDeclaration) -> nx.DiGraph:
    """Graph of modules, the fragments they apply and the plugins those request.

    Node attribute `kind` is one of "root", "module", "fragment", "plugin".
    Module -> fragment edges carry the declared `order`. Module -> module edges
    carry `depends_on=True`.
    """
    g = nx.DiGraph()
    catalog = declaration.fragments

    def add_requests(fragment_name: str, fragment: ConventionFragment) -> None:
        for request in fragment.plugins:
            kind = "fragment" if request.id in catalog else "plugin"
            g.add_node(request.id, kind=kind)
            g.add_edge(fragment_name, request.id)

    for name, fragment in catalog.items():
        g.add_node(name, kind="fragment")
        add_requests(name, fragment)

    g.add_node(":", kind="root")
    for i, name in enumerate(declaration.root.conventions):
        if name not in g:
            g.add_node(name, kind="fragment")
        g.add_edge(":", name, order=i)

    for module_name, decl in declaration.modules.items():
        g.add_node(module_name, kind="module")
        for i, name in enumerate(decl.conventions):
            if name not in g:
                g.add_node(name, kind="fragment")
            g.add_edge(module_name, name, order=i)
        for request in decl.plugins:
            if request.id not in g:
                g.add_node(request.id, kind="fragment" if request.id in catalog else "plugin")
            g.add_edge(module_name, request.id)
        for dep in decl.depends_on:
            if dep not in g:
                g.add_node(dep, kind="module")
            g.add_edge(module_name, dep, depends_on=True)

    return g
