"""Apply convention fragments to modules.

Fragments are applied in the module's declared order. For every fragment:

1. its plugin ids are applied; an id that names another fragment applies
   that fragment first (a prerequisite), anything else must be a known plugin;
2. its dependency constraints are merged, last write wins;
3. its task changes are queued with configure-on-creation semantics;
4. its PropertyStore writes and project coordinates are applied;
5. its java/testing/repository settings are merged.

A fragment already applied to a module is skipped, so applying the same
list twice leaves the module unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from j_conventions.exceptions import CyclicFragmentError, UnknownFragmentError, UnknownPluginError
from j_conventions.models import (
    ConventionFragment,
    JavaConvention,
    PluginRequest,
    PropertyWrite,
    TestingConvention,
)
from j_conventions.module import Module
from j_conventions.plugins import PluginRegistry
from j_conventions.properties import PropertyStore
from j_conventions.tasks import Task

logger = logging.getLogger(__name__)


class CompositionResolver:
    """Layer convention fragments onto modules.

    Args:
        catalog: Fragment name -> fragment definition, shared by all modules.
        plugins: Registry used for plugin ids that are not fragments.
        store: The build's PropertyStore, passed by reference.
        system_properties: Values for `PropertyWrite.system_property` lookups.
    """

    def __init__(
        self,
        catalog: Mapping[str, ConventionFragment],
        plugins: PluginRegistry,
        store: PropertyStore,
        system_properties: Mapping[str, str] | None = None,
    ) -> None:
        self.catalog = catalog
        self.plugins = plugins
        self.store = store
        self.system_properties: Mapping[str, str] = system_properties or {}

    def apply(self, module: Module, fragment_names: Iterable[str]) -> Module:
        """Apply fragments to `module` in the given order.

        Raises:
            UnknownFragmentError: If a name is not in the catalog.
            UnknownPluginError: If a fragment requests a plugin that cannot be located.
            CyclicFragmentError: If a fragment transitively applies itself.
        """
        for name in fragment_names:
            fragment = self.catalog.get(name)
            if fragment is None:
                raise UnknownFragmentError(name, module.name)
            self._apply_fragment(module, fragment, [])
        return module

    def apply_plugins(self, module: Module, requests: Iterable[PluginRequest]) -> None:
        """Apply module-level plugin requests (outside of any fragment)."""
        for request in requests:
            self._apply_plugin(module, request, None, [])

    def merge_constraints(self, module: Module, constraints: Mapping[str, str]) -> None:
        for coordinate, version in constraints.items():
            previous = module.constraints.get(coordinate)
            if previous is not None and previous != version:
                logger.debug("%s: constraint %s %s -> %s", module.name, coordinate, previous, version)
            module.constraints[coordinate] = version

    def configure_tasks(self, module: Module, tasks: Mapping[str, Mapping[str, Any]]) -> None:
        for task_name, changes in tasks.items():
            module.tasks.configure(task_name, self._task_action(dict(changes)))

    def merge_java(self, module: Module, java: JavaConvention) -> None:
        if java.language_version is not None:
            module.java.language_version = java.language_version
        if java.sources_jar is not None:
            module.java.sources_jar = java.sources_jar
        if java.javadoc_jar is not None:
            module.java.javadoc_jar = java.javadoc_jar
        for task_name in ("compileJava", "javadoc", "test"):
            module.tasks.configure(task_name, self._toolchain_action(module))

    def merge_testing(self, module: Module, testing: TestingConvention) -> None:
        if testing.framework is not None:
            module.testing.framework = testing.framework
        if testing.version is not None:
            module.testing.version = testing.version
        # The test task picks the framework up whenever it gets registered.
        module.tasks.configure("test", self._test_framework_action(module))

    def _apply_fragment(self, module: Module, fragment: ConventionFragment, path: list[str]) -> None:
        if fragment.name in path:
            cycle = path[path.index(fragment.name):] + [fragment.name]
            raise CyclicFragmentError(cycle, module.name)
        if fragment.name in module.applied_fragments:
            logger.debug("%s: fragment %s already applied", module.name, fragment.name)
            return

        path = [*path, fragment.name]
        logger.debug("%s: applying fragment %s", module.name, fragment.name)

        for request in fragment.plugins:
            self._apply_plugin(module, request, fragment.name, path)

        self.merge_constraints(module, fragment.constraints)
        self.configure_tasks(module, fragment.tasks)

        for key, write in fragment.properties.items():
            self.store.set(key, self._property_value(write))

        if fragment.project is not None:
            if fragment.project.group is not None:
                module.group = self.store.interpolate(fragment.project.group)
            if fragment.project.version is not None:
                module.version = self.store.interpolate(fragment.project.version)

        if fragment.java is not None:
            self.merge_java(module, fragment.java)
        if fragment.testing is not None:
            self.merge_testing(module, fragment.testing)
        for repository in fragment.repositories:
            if repository not in module.repositories:
                module.repositories.append(repository)

        module.applied_fragments.append(fragment.name)

    def _apply_plugin(
        self,
        module: Module,
        request: PluginRequest,
        fragment_name: str | None,
        path: list[str],
    ) -> None:
        prerequisite = self.catalog.get(request.id)
        if prerequisite is not None:
            self._apply_fragment(module, prerequisite, path)
            return

        plugin = self.plugins.lookup(request.id)
        if plugin is None:
            raise UnknownPluginError(request.id, module.name, fragment_name)
        self.plugins.apply(module, plugin, request.version)

    def _property_value(self, write: PropertyWrite) -> str | None:
        if write.system_property is not None:
            value = self.system_properties.get(write.system_property)
            if value is not None:
                return value
        if write.value is None:
            return None
        return self.store.interpolate(write.value)

    def _task_action(self, changes: dict[str, Any]):
        def action(task: Task) -> None:
            # Interpolated against the store as it is when the task materializes.
            task.update(
                {k: self.store.interpolate(v) if isinstance(v, str) else v for k, v in changes.items()}
            )

        return action

    def _toolchain_action(self, module: Module):
        def action(task: Task) -> None:
            task.update({"toolchain": module.java.language_version})

        return action

    def _test_framework_action(self, module: Module):
        def action(task: Task) -> None:
            framework = module.testing.framework
            if framework and module.testing.version:
                framework = f"{framework}:{module.testing.version}"
            task.update({"framework": framework})

        return action
