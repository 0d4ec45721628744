from __future__ import annotations

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from j_conventions.cli import app, parse_defines

runner = CliRunner()

CREDENTIALS = ["-D", "publish.repo.userName=me", "-D", "publish.repo.password=pw"]


def test_parse_defines() -> None:
    assert parse_defines(["a=1", "b=x=y", "flag"]) == {"a": "1", "b": "x=y", "flag": ""}
    assert parse_defines(None) == {}


def test_parse_defines_rejects_empty_key() -> None:
    with pytest.raises(typer.BadParameter):
        parse_defines(["=value"])


def test_configure_prints_modules(sample_declaration_path: Path) -> None:
    res = runner.invoke(app, ["configure", "--file", str(sample_declaration_path), *CREDENTIALS])
    assert res.exit_code == 0, res.output
    assert "io.clusterless:clusterless-commons-core:0.11" in res.output
    assert "io.clusterless:clusterless-commons-aws:0.11" in res.output
    assert "<set>" in res.output
    assert "pw" not in res.output.split()


def test_configure_reads_declaration_from_env(monkeypatch: pytest.MonkeyPatch, sample_declaration_path: Path) -> None:
    monkeypatch.setenv("JCONV_DECLARATION", str(sample_declaration_path))
    res = runner.invoke(app, ["configure"])
    assert res.exit_code == 0, res.output
    assert "clusterless-commons-core" in res.output


def test_missing_declaration_fails(tmp_path: Path) -> None:
    res = runner.invoke(app, ["configure", "--file", str(tmp_path / "nope.toml")])
    assert res.exit_code == 1
    assert "Error:" in res.output


def test_bad_log_level_fails(sample_declaration_path: Path) -> None:
    res = runner.invoke(app, ["configure", "--file", str(sample_declaration_path), "--log-level", "loud"])
    assert res.exit_code == 1
    assert "Unsupported log level" in res.output


def test_pom_prints_xml(sample_declaration_path: Path) -> None:
    res = runner.invoke(app, ["pom", "clusterless-commons-core", "--file", str(sample_declaration_path)])
    assert res.exit_code == 0, res.output
    assert "<artifactId>clusterless-commons-core</artifactId>" in res.output
    assert "<scope>compile</scope>" in res.output


def test_pom_writes_file(tmp_path: Path, sample_declaration_path: Path) -> None:
    res = runner.invoke(
        app,
        ["pom", "clusterless-commons-aws", "--file", str(sample_declaration_path), "--out", str(tmp_path)],
    )
    assert res.exit_code == 0, res.output
    assert (tmp_path / "clusterless-commons-aws-0.11.pom").is_file()


def test_pom_for_unknown_module_fails(sample_declaration_path: Path) -> None:
    res = runner.invoke(app, ["pom", "nope", "--file", str(sample_declaration_path)])
    assert res.exit_code == 1
    assert "has no publication" in res.output


def test_publish_stages_every_module(tmp_path: Path, sample_declaration_path: Path) -> None:
    res = runner.invoke(
        app,
        ["publish", "--file", str(sample_declaration_path), "--out", str(tmp_path), *CREDENTIALS],
    )
    assert res.exit_code == 0, res.output
    assert "Staged clusterless-commons-core" in res.output
    assert "Staged clusterless-commons-aws" in res.output
    assert (tmp_path / "clusterless-commons-core" / "publication.json").is_file()
    assert (tmp_path / "clusterless-commons-aws" / "clusterless-commons-aws-0.11.pom").is_file()


def test_publish_uses_environment_credentials(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, sample_declaration_path: Path
) -> None:
    monkeypatch.setenv("GPR_USERNAME", "octocat")
    monkeypatch.setenv("GPR_TOKEN", "ghp_x")
    res = runner.invoke(
        app,
        ["publish", "--file", str(sample_declaration_path), "--out", str(tmp_path), "-m", "clusterless-commons-core"],
    )
    assert res.exit_code == 0, res.output
    assert (tmp_path / "clusterless-commons-core").is_dir()
    assert not (tmp_path / "clusterless-commons-aws").exists()


def test_publish_without_credentials_fails_per_module(tmp_path: Path, sample_declaration_path: Path) -> None:
    res = runner.invoke(app, ["publish", "--file", str(sample_declaration_path), "--out", str(tmp_path)])
    assert res.exit_code == 1
    assert "Failed" in res.output
    assert not (tmp_path / "clusterless-commons-core").exists()


def test_publish_unknown_module_fails(tmp_path: Path, sample_declaration_path: Path) -> None:
    res = runner.invoke(
        app,
        ["publish", "--file", str(sample_declaration_path), "--out", str(tmp_path), "-m", "nope"],
    )
    assert res.exit_code == 1
    assert "nope" in res.output


def test_graph_writes_html(tmp_path: Path, sample_declaration_path: Path) -> None:
    out = tmp_path / "conventions.html"
    res = runner.invoke(app, ["graph", "--file", str(sample_declaration_path), "--out", str(out)])
    assert res.exit_code == 0, res.output
    assert out.is_file()
    assert "clusterless-commons-aws" in out.read_text(encoding="utf-8")
