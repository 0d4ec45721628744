"""Runtime state of a module while conventions are applied to it."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from j_conventions.models import GAV, UNKNOWN_VERSION, DependencyDeclaration
from j_conventions.tasks import TaskRegistry


# Gradle configuration -> Maven scope of the published POM. Configurations
# not listed here are not published.
PUBLISHED_SCOPES = {
    "api": "compile",
    "implementation": "runtime",
    "runtimeOnly": "runtime",
}


@dataclass
class JavaExtension:
    language_version: int | None = None
    sources_jar: bool = False
    javadoc_jar: bool = False


@dataclass
class TestingExtension:
    framework: str | None = None
    version: str | None = None


@dataclass
class ResolvedDependency:
    gav: GAV
    configuration: str

    @property
    def scope(self) -> str | None:
        return PUBLISHED_SCOPES.get(self.configuration)


@dataclass
class Module:
    """A subproject being configured.

    Every field is owned by this module alone; fragments shared between
    modules only describe changes, they never hold module state.
    """

    name: str
    group: str | None = None
    version: str | None = None
    plugins: list[str] = field(default_factory=list)
    plugin_versions: dict[str, str] = field(default_factory=dict)
    configurations: list[str] = field(default_factory=list)
    constraints: dict[str, str] = field(default_factory=dict)
    repositories: list[str] = field(default_factory=list)
    dependencies: list[DependencyDeclaration] = field(default_factory=list)
    project_dependencies: list[str] = field(default_factory=list)
    java: JavaExtension = field(default_factory=JavaExtension)
    testing: TestingExtension = field(default_factory=TestingExtension)
    applied_fragments: list[str] = field(default_factory=list)
    # PropertyStore contents as of the end of this module's configuration.
    properties: dict[str, str] | None = None
    tasks: TaskRegistry = field(init=False)

    def __post_init__(self) -> None:
        self.tasks = TaskRegistry(owner=self.name)

    def has_plugin(self, plugin_id: str) -> bool:
        return plugin_id in self.plugins

    def add_configuration(self, name: str) -> None:
        if name not in self.configurations:
            self.configurations.append(name)

    def constraint_for(self, gav: GAV) -> str | None:
        return self.constraints.get(gav.key())

    def resolved_dependencies(self) -> list[ResolvedDependency]:
        """External dependencies with versions filled in from constraints.

        An explicit version wins; otherwise the constraint applies; otherwise
        the version is "Unknown".
        """
        resolved: list[ResolvedDependency] = []
        for dep in self.dependencies:
            gav = dep.gav()
            if gav.version == UNKNOWN_VERSION:
                gav = gav.model_copy(update={"version": self.constraint_for(gav) or UNKNOWN_VERSION})
            resolved.append(ResolvedDependency(gav=gav, configuration=dep.configuration))
        return resolved

    def state(self) -> dict[str, Any]:
        """Return a plain-data view of the module, for comparison and display."""
        return {
            "name": self.name,
            "group": self.group,
            "version": self.version,
            "plugins": list(self.plugins),
            "configurations": list(self.configurations),
            "constraints": dict(self.constraints),
            "repositories": list(self.repositories),
            "java": {
                "language_version": self.java.language_version,
                "sources_jar": self.java.sources_jar,
                "javadoc_jar": self.java.javadoc_jar,
            },
            "testing": {"framework": self.testing.framework, "version": self.testing.version},
            "tasks": {t.name: dict(t.fields) for t in self.tasks},
            "pending_tasks": self.tasks.pending(),
            "applied_fragments": list(self.applied_fragments),
        }
