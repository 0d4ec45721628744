"""Pytest configuration and fixtures for j-conventions tests."""
from __future__ import annotations

from pathlib import Path

import pytest

from j_conventions.composition import CompositionResolver
from j_conventions.models import ConventionFragment
from j_conventions.plugins import PluginRegistry
from j_conventions.properties import PropertyStore


REPO_ROOT = Path(__file__).resolve().parent.parent

CREDENTIAL_ENV_VARS = ("GPR_USERNAME", "GPR_TOKEN", "MCR_USERNAME", "MCR_PASSWORD")


@pytest.fixture(autouse=True)
def clean_credential_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials from the developer's shell out of the tests."""
    for name in CREDENTIAL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("JCONV_DECLARATION", raising=False)
    monkeypatch.delenv("JCONV_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("JCONV_LOG_LEVEL", raising=False)


@pytest.fixture
def sample_declaration_path() -> Path:
    return REPO_ROOT / "conventions.toml"


@pytest.fixture
def catalog() -> dict[str, ConventionFragment]:
    fragments = [
        ConventionFragment(
            name="base",
            properties={"group": "io.clusterless", "version": "0.11"},
        ),
        ConventionFragment(
            name="library",
            plugins=["base", "java-library", "maven-publish"],
            project={"group": "${group}", "version": "${version}"},
            constraints={"com.google.guava:guava": "31.1-jre"},
        ),
        ConventionFragment(
            name="shared-toolchain",
            plugins=["java"],
            java={"language_version": 11},
            testing={"framework": "junit-jupiter", "version": "5.9.3"},
        ),
        ConventionFragment(
            name="javadoc-settings",
            tasks={"javadoc": {"title": "API ${version}", "fail_on_error": False}},
        ),
    ]
    return {f.name: f for f in fragments}


@pytest.fixture
def store() -> PropertyStore:
    return PropertyStore()


@pytest.fixture
def resolver(catalog: dict[str, ConventionFragment], store: PropertyStore) -> CompositionResolver:
    return CompositionResolver(catalog, PluginRegistry.default(), store)
