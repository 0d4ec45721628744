from __future__ import annotations

from pathlib import Path

import pytest

from j_conventions.declaration import load_declaration
from j_conventions.exceptions import ModuleOrderError
from j_conventions.graph import composition_graph, configuration_order, fragment_cycles
from j_conventions.models import BuildDeclaration, ConventionFragment, ModuleDeclaration
from j_conventions.visualize_html import export_pyvis


def _modules(**depends_on: list[str]) -> dict[str, ModuleDeclaration]:
    return {name: ModuleDeclaration(name=name, depends_on=deps) for name, deps in depends_on.items()}


def test_independent_modules_keep_declaration_order() -> None:
    assert configuration_order(_modules(zeta=[], alpha=[], mid=[])) == ["zeta", "alpha", "mid"]


def test_dependency_is_configured_first() -> None:
    order = configuration_order(_modules(aws=["core"], docs=[], core=[]))
    assert order.index("core") < order.index("aws")
    assert order == ["docs", "core", "aws"]


def test_unknown_dependency_is_rejected() -> None:
    with pytest.raises(ModuleOrderError, match="unknown module 'missing'"):
        configuration_order(_modules(aws=["missing"]))


def test_cycle_is_reported_with_path() -> None:
    with pytest.raises(ModuleOrderError) as info:
        configuration_order(_modules(a=["b"], b=["a"]))
    assert "a -> b -> a" in str(info.value) or "b -> a -> b" in str(info.value)


def test_fragment_cycles() -> None:
    catalog = {
        "a": ConventionFragment(name="a", plugins=["b"]),
        "b": ConventionFragment(name="b", plugins=["a", "java"]),
        "c": ConventionFragment(name="c", plugins=["a"]),
    }
    cycles = fragment_cycles(catalog)
    assert len(cycles) == 1
    assert set(cycles[0]) == {"a", "b"}
    assert cycles[0][0] == cycles[0][-1]


def test_sample_has_no_fragment_cycles(sample_declaration_path: Path) -> None:
    assert fragment_cycles(load_declaration(sample_declaration_path).fragments) == []


def test_composition_graph_kinds_and_order(sample_declaration_path: Path) -> None:
    g = composition_graph(load_declaration(sample_declaration_path))

    assert g.nodes[":"]["kind"] == "root"
    assert g.nodes["clusterless-commons-core"]["kind"] == "module"
    assert g.nodes["java-library-conventions"]["kind"] == "fragment"
    assert g.nodes["signing"]["kind"] == "plugin"
    assert g.edges["clusterless-commons-core", "java-library-conventions"]["order"] == 0
    assert g.edges["clusterless-commons-aws", "clusterless-commons-core"]["depends_on"] is True
    assert g.has_edge("java-common-conventions", "java-common-properties")


def test_export_pyvis_writes_html(tmp_path: Path, sample_declaration_path: Path) -> None:
    out = export_pyvis(composition_graph(load_declaration(sample_declaration_path)), tmp_path / "g" / "graph.html")
    html = out.read_text(encoding="utf-8")
    assert "clusterless-commons-core" in html
    assert "java-library-conventions" in html


def test_depends_on_targets_are_module_nodes() -> None:
    decl = BuildDeclaration(
        modules={
            "aws": ModuleDeclaration(name="aws", depends_on=["core", "legacy"]),
            "core": ModuleDeclaration(name="core"),
        }
    )
    g = composition_graph(decl)
    assert g.nodes["core"]["kind"] == "module"
    assert g.nodes["legacy"]["kind"] == "module"
    assert g.edges["aws", "core"]["depends_on"] is True
