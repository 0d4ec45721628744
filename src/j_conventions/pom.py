"""Render publication descriptors as Maven pom.xml documents using lxml."""

from __future__ import annotations

from pathlib import Path

from lxml import etree

from j_conventions.publication import PublicationDescriptor


POM_NS = "http://maven.apache.org/POM/4.0.0"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
SCHEMA_LOCATION = f"{POM_NS} https://maven.apache.org/xsd/maven-4.0.0.xsd"


def _child(parent: etree._Element, tag: str, text: str | None = None) -> etree._Element:
    el = etree.SubElement(parent, f"{{{POM_NS}}}{tag}")
    if text is not None:
        el.text = text
    return el


def _optional(parent: etree._Element, tag: str, text: str | None) -> None:
    if text:
        _child(parent, tag, text)


def build_pom(descriptor: PublicationDescriptor) -> etree._Element:
    """Build the POM element tree for a descriptor.

    Only the literal metadata, coordinates and published dependencies are
    written; build settings stay with the build.
    """
    root = etree.Element(f"{{{POM_NS}}}project", nsmap={None: POM_NS, "xsi": XSI_NS})
    root.set(f"{{{XSI_NS}}}schemaLocation", SCHEMA_LOCATION)

    _child(root, "modelVersion", "4.0.0")
    _child(root, "groupId", descriptor.gav.group_id)
    _child(root, "artifactId", descriptor.gav.artifact_id)
    _child(root, "version", descriptor.gav.version)

    pom = descriptor.pom
    _optional(root, "name", pom.name)
    _optional(root, "description", pom.description)
    _optional(root, "url", pom.url)
    _optional(root, "inceptionYear", pom.inception_year)

    if pom.licenses:
        licenses = _child(root, "licenses")
        for lic in pom.licenses:
            node = _child(licenses, "license")
            _child(node, "name", lic.name)
            _optional(node, "url", lic.url)
            _optional(node, "distribution", lic.distribution)

    if pom.developers:
        developers = _child(root, "developers")
        for dev in pom.developers:
            node = _child(developers, "developer")
            _child(node, "id", dev.id)
            _optional(node, "name", dev.name)
            _optional(node, "email", dev.email)

    if pom.scm_url:
        scm = _child(root, "scm")
        _child(scm, "url", pom.scm_url)

    if descriptor.dependencies:
        deps = _child(root, "dependencies")
        for dep in descriptor.dependencies:
            node = _child(deps, "dependency")
            _child(node, "groupId", dep.gav.group_id)
            _child(node, "artifactId", dep.gav.artifact_id)
            _child(node, "version", dep.gav.version)
            _child(node, "scope", dep.scope)

    return root


def render_pom(descriptor: PublicationDescriptor) -> bytes:
    return etree.tostring(build_pom(descriptor), pretty_print=True, xml_declaration=True, encoding="UTF-8")


def write_pom(descriptor: PublicationDescriptor, out_dir: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / descriptor.pom_file_name()
    path.write_bytes(render_pom(descriptor))
    return path
