from __future__ import annotations

import json
from pathlib import Path

import pytest
from lxml import etree

from j_conventions.build import BuildContext, configure_build
from j_conventions.declaration import load_declaration
from j_conventions.pom import POM_NS, render_pom, write_pom
from j_conventions.staging import StagingDirectoryCollaborator

NS = {"m": POM_NS}


@pytest.fixture
def descriptors(sample_declaration_path: Path):
    context = BuildContext(environ={"GPR_USERNAME": "octocat", "GPR_TOKEN": "ghp_secret"})
    return configure_build(load_declaration(sample_declaration_path), context).descriptors


def test_rendered_pom_carries_coordinates_and_metadata(descriptors) -> None:
    root = etree.fromstring(render_pom(descriptors["clusterless-commons-core"]))

    assert root.tag == f"{{{POM_NS}}}project"
    assert root.findtext("m:modelVersion", namespaces=NS) == "4.0.0"
    assert root.findtext("m:groupId", namespaces=NS) == "io.clusterless"
    assert root.findtext("m:artifactId", namespaces=NS) == "clusterless-commons-core"
    assert root.findtext("m:version", namespaces=NS) == "0.11"
    assert root.findtext("m:name", namespaces=NS) == "Clusterless Commons"
    assert root.findtext("m:inceptionYear", namespaces=NS) == "2023"
    assert root.xpath("m:licenses/m:license/m:name/text()", namespaces=NS) == ["Mozilla Public License, v. 2.0"]
    assert root.xpath("m:developers/m:developer/m:id/text()", namespaces=NS) == ["cwensel"]
    assert root.findtext("m:scm/m:url", namespaces=NS) == "https://github.com/ClusterlessHQ/clusterless-commons/"


def test_rendered_pom_lists_published_dependencies(descriptors) -> None:
    root = etree.fromstring(render_pom(descriptors["clusterless-commons-core"]))

    deps = {
        d.findtext("m:artifactId", namespaces=NS): (
            d.findtext("m:version", namespaces=NS),
            d.findtext("m:scope", namespaces=NS),
        )
        for d in root.xpath("m:dependencies/m:dependency", namespaces=NS)
    }
    assert deps["slf4j-api"] == ("2.0.9", "compile")
    assert deps["guava"] == ("31.1-jre", "runtime")
    assert "junit-jupiter" not in deps


def test_rendered_pom_keeps_build_settings_out(descriptors) -> None:
    text = render_pom(descriptors["clusterless-commons-core"]).decode("utf-8")
    assert text.startswith("<?xml")
    assert "Clusterless Commons 0.11 API" not in text
    assert "ghp_secret" not in text


def test_write_pom(tmp_path: Path, descriptors) -> None:
    path = write_pom(descriptors["clusterless-commons-aws"], tmp_path / "out")
    assert path == tmp_path / "out" / "clusterless-commons-aws-0.11.pom"
    root = etree.parse(str(path)).getroot()
    artifacts = root.xpath("m:dependencies/m:dependency/m:artifactId/text()", namespaces=NS)
    assert "clusterless-commons-core" in artifacts


def test_staging_collaborator_writes_pom_and_manifest(tmp_path: Path, descriptors) -> None:
    collaborator = StagingDirectoryCollaborator(tmp_path)
    collaborator.upload(descriptors["clusterless-commons-core"])

    module_dir = tmp_path / "clusterless-commons-core"
    assert (module_dir / "clusterless-commons-core-0.11.pom").is_file()

    manifest_text = (module_dir / "publication.json").read_text(encoding="utf-8")
    assert "ghp_secret" not in manifest_text
    manifest = json.loads(manifest_text)
    assert manifest["gav"]["version"] == "0.11"
    assert manifest["repository"]["credentials"]["username"] == "octocat"
    assert "clusterless-commons-core-0.11-javadoc.jar.sha1" in manifest["files_to_sign"]
    assert len(collaborator.staged) == 2
