"""Configure a whole multi-module build from its declaration.

Order of evaluation for one build invocation:

1. create a fresh PropertyStore;
2. apply the root conventions (global property seeding) to the root project;
3. configure every module in configure-before order, snapshotting the
   store into `Module.properties` as each one finishes;
4. assemble that module's publication descriptor, if it declares one,
   before the next module is configured.

Any configuration error aborts the build. Nothing here touches the network.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from j_conventions.composition import CompositionResolver
from j_conventions.credentials import CredentialResolver
from j_conventions.graph import configuration_order
from j_conventions.models import BuildDeclaration, ModuleDeclaration
from j_conventions.module import Module
from j_conventions.plugins import PluginRegistry
from j_conventions.properties import PropertyStore
from j_conventions.publication import (
    PublicationAssembler,
    PublicationDescriptor,
    RepositoryDescriptor,
    repository_descriptor,
)

logger = logging.getLogger(__name__)

ROOT_MODULE = ":"


@dataclass
class BuildContext:
    """Process inputs for one build: system properties and environment."""

    system_properties: dict[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))


@dataclass
class BuildResult:
    store: PropertyStore
    root: Module
    modules: dict[str, Module]
    descriptors: dict[str, PublicationDescriptor]
    staging_repositories: list[RepositoryDescriptor]

    @property
    def order(self) -> list[str]:
        return list(self.modules)


def configure_module(resolver: CompositionResolver, declaration: ModuleDeclaration) -> Module:
    """Apply a module's conventions, then its own overrides on top."""
    module = Module(name=declaration.name)
    resolver.apply(module, declaration.conventions)

    resolver.apply_plugins(module, declaration.plugins)
    resolver.merge_constraints(module, declaration.constraints)
    if declaration.java is not None:
        resolver.merge_java(module, declaration.java)
    if declaration.testing is not None:
        resolver.merge_testing(module, declaration.testing)
    resolver.configure_tasks(module, declaration.tasks)

    module.dependencies = list(declaration.dependencies)
    module.project_dependencies = list(declaration.depends_on)
    module.properties = resolver.store.snapshot()
    return module


def configure_build(
    declaration: BuildDeclaration,
    context: BuildContext | None = None,
    plugins: PluginRegistry | None = None,
) -> BuildResult:
    """Configure every module of `declaration` and assemble their publications."""
    context = context or BuildContext()
    store = PropertyStore()
    resolver = CompositionResolver(
        declaration.fragments,
        plugins or PluginRegistry.default(),
        store,
        context.system_properties,
    )

    root = Module(name=ROOT_MODULE)
    resolver.apply(root, declaration.root.conventions)
    logger.info("Seeded %d build properties from root conventions", len(store))

    credentials = CredentialResolver(context.system_properties, context.environ, store)
    staging = [repository_descriptor(t, credentials) for t in declaration.root.repositories.values()]

    assembler = PublicationAssembler(credentials, store)
    modules: dict[str, Module] = {}
    descriptors: dict[str, PublicationDescriptor] = {}
    for name in configuration_order(declaration.modules):
        module = configure_module(resolver, declaration.modules[name])
        modules[name] = module
        logger.info("Configured module %s (%s)", name, ", ".join(module.applied_fragments) or "no conventions")

        # Assembled before the next module can write to the store.
        publication = declaration.modules[name].publication
        if publication is not None:
            descriptors[name] = assembler.assemble(module, publication, modules)

    return BuildResult(
        store=store,
        root=root,
        modules=modules,
        descriptors=descriptors,
        staging_repositories=staging,
    )
