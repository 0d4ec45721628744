"""Build plugins the composition engine knows how to apply.

A plugin is the unit the external build tool understands: applying it adds
configurations and registers tasks on a module. Conventions only refer to
plugins by id; anything the registry cannot locate is an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from j_conventions.exceptions import UnknownPluginError
from j_conventions.module import Module

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Plugin:
    """A plugin id plus the module changes applying it makes.

    Attributes:
        id: Plugin identifier (e.g. "java-library").
        implies: Plugin ids applied first, as the build tool would.
        configurations: Dependency configurations the plugin adds.
        tasks: Task name -> default task fields.
    """

    id: str
    implies: tuple[str, ...] = ()
    configurations: tuple[str, ...] = ()
    tasks: dict[str, dict[str, Any]] = field(default_factory=dict)

    def apply(self, module: Module) -> None:
        for name in self.configurations:
            module.add_configuration(name)
        for name, defaults in self.tasks.items():
            module.tasks.register(name, plugin=self.id, **defaults)


BUILTIN_PLUGINS = (
    Plugin(
        id="java",
        configurations=("implementation", "compileOnly", "runtimeOnly", "testImplementation", "testRuntimeOnly"),
        tasks={
            "compileJava": {"encoding": None},
            "jar": {},
            "javadoc": {"title": None, "fail_on_error": True, "encoding": None},
            "test": {"framework": None},
        },
    ),
    Plugin(id="java-library", implies=("java",), configurations=("api",)),
    Plugin(
        id="maven-publish",
        tasks={
            "generatePomFileForMavenJavaPublication": {},
            "publish": {},
        },
    ),
    Plugin(id="signing", tasks={"sign": {"use_gpg_cmd": False}}),
    Plugin(
        id="io.github.gradle-nexus.publish-plugin",
        tasks={
            "publishToSonatype": {},
            "closeAndReleaseSonatypeStagingRepository": {},
        },
    ),
)


class PluginRegistry:
    """Lookup table of plugins by id."""

    def __init__(self, plugins: tuple[Plugin, ...] | list[Plugin] = ()) -> None:
        self._plugins: dict[str, Plugin] = {}
        for plugin in plugins:
            self.register(plugin)

    @classmethod
    def default(cls) -> PluginRegistry:
        return cls(BUILTIN_PLUGINS)

    def register(self, plugin: Plugin) -> None:
        self._plugins[plugin.id] = plugin

    def lookup(self, plugin_id: str) -> Plugin | None:
        return self._plugins.get(plugin_id)

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._plugins

    def apply(self, module: Module, plugin: Plugin, version: str | None = None) -> None:
        """Apply `plugin` and whatever it implies. Re-applying is a no-op.

        Raises:
            UnknownPluginError: If an implied plugin id is not registered.
        """
        if module.has_plugin(plugin.id):
            return
        for implied in plugin.implies:
            dependency = self.lookup(implied)
            if dependency is None:
                raise UnknownPluginError(implied, module.name)
            self.apply(module, dependency)
        logger.debug("%s: applying plugin %s", module.name, plugin.id)
        module.plugins.append(plugin.id)
        if version:
            module.plugin_versions[plugin.id] = version
        plugin.apply(module)
