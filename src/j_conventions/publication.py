"""Assemble publication descriptors and hand them to a publisher.

Assembly never fails on missing credentials, so a build can always produce
its descriptors locally. Credentials are checked right before upload by
`ensure_uploadable`, and a failure there only affects the module being
published.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from j_conventions.credentials import CredentialResolver, ResolvedCredentials
from j_conventions.exceptions import ConventionError, MissingCoordinatesError, MissingCredentialsError
from j_conventions.models import GAV, PomMetadata, PublicationDeclaration, RepositoryTarget
from j_conventions.module import Module
from j_conventions.properties import PropertyStore

logger = logging.getLogger(__name__)

# Store keys that hold secrets and never travel with a descriptor.
SECRET_KEYS = frozenset({"repoUserName", "repoPassword"})
CHECKSUM_EXTENSIONS = ("md5", "sha1")


class PublishedArtifact(BaseModel):
    model_config = ConfigDict(frozen=True)

    classifier: str | None = None
    extension: str = "jar"

    def file_name(self, gav: GAV) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        return f"{gav.artifact_id}-{gav.version}{suffix}.{self.extension}"


class PublishedDependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    gav: GAV
    scope: str


class RepositoryDescriptor(BaseModel):
    """A target repository with its credentials already resolved."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    snapshot_url: str | None = None
    credentials: ResolvedCredentials = Field(default_factory=ResolvedCredentials)
    requires_auth: bool = True

    def url_for(self, version: str) -> str:
        if self.snapshot_url and version.endswith("-SNAPSHOT"):
            return self.snapshot_url
        return self.url


class PublicationDescriptor(BaseModel):
    """Everything the external publisher needs to upload one module."""

    model_config = ConfigDict(frozen=True)

    module: str
    publication: str
    gav: GAV
    pom: PomMetadata
    artifacts: tuple[PublishedArtifact, ...] = ()
    dependencies: tuple[PublishedDependency, ...] = ()
    repository: RepositoryDescriptor | None = None
    signing_required: bool = False
    build_properties: tuple[tuple[str, str], ...] = ()

    def pom_file_name(self) -> str:
        return f"{self.gav.artifact_id}-{self.gav.version}.pom"

    def files(self) -> list[str]:
        return [a.file_name(self.gav) for a in self.artifacts] + [self.pom_file_name()]

    def files_to_sign(self) -> list[str]:
        """Files the signer must cover: every artifact, the POM, and their checksums."""
        if not self.signing_required:
            return []
        signed: list[str] = []
        for name in self.files():
            signed.append(name)
            signed.extend(f"{name}.{ext}" for ext in CHECKSUM_EXTENSIONS)
        return signed


def repository_descriptor(target: RepositoryTarget, resolver: CredentialResolver) -> RepositoryDescriptor:
    credentials = resolver.resolve_pair(target.username, target.password)
    if target.requires_auth and not credentials.is_complete and not credentials.is_empty:
        logger.warning("Repository %s: only one of username/password resolved", target.name)
    return RepositoryDescriptor(
        name=target.name,
        url=target.url,
        snapshot_url=target.snapshot_url,
        credentials=credentials,
        requires_auth=target.requires_auth,
    )


class PublicationAssembler:
    """Build the immutable PublicationDescriptor for a configured module."""

    def __init__(self, resolver: CredentialResolver, store: PropertyStore) -> None:
        self.resolver = resolver
        self.store = store

    def assemble(
        self,
        module: Module,
        declaration: PublicationDeclaration,
        siblings: Mapping[str, Module] | None = None,
    ) -> PublicationDescriptor:
        """Assemble the descriptor for `module`.

        Group and version come from the module, falling back to the
        properties the module saw when it was configured (`Module.properties`),
        or the live PropertyStore for a module configured outside a build.
        Literal POM metadata is copied verbatim.

        Raises:
            MissingCoordinatesError: If no group or version is available.
        """
        properties = self._properties(module)
        gav = GAV(
            group_id=self._coordinate(module, "group"),
            artifact_id=declaration.artifact_id or module.name,
            version=self._coordinate(module, "version"),
        )

        dependencies = [
            PublishedDependency(gav=dep.gav, scope=dep.scope)
            for dep in module.resolved_dependencies()
            if dep.scope is not None
        ]
        for name in module.project_dependencies:
            sibling = (siblings or {}).get(name)
            if sibling is None:
                continue
            dependencies.append(
                PublishedDependency(
                    gav=GAV(
                        group_id=self._coordinate(sibling, "group"),
                        artifact_id=sibling.name,
                        version=self._coordinate(sibling, "version"),
                    ),
                    scope="runtime",
                )
            )

        repository = None
        if declaration.repository is not None:
            repository = repository_descriptor(declaration.repository, self.resolver)

        descriptor = PublicationDescriptor(
            module=module.name,
            publication=declaration.name,
            gav=gav,
            pom=declaration.pom,
            artifacts=tuple(self._artifacts(module)),
            dependencies=tuple(dependencies),
            repository=repository,
            signing_required=declaration.sign,
            build_properties=tuple((k, v) for k, v in properties.items() if k not in SECRET_KEYS),
        )
        logger.debug("%s: assembled publication %s for %s", module.name, declaration.name, gav.compact())
        return descriptor

    def _properties(self, module: Module) -> dict[str, str]:
        if module.properties is not None:
            return dict(module.properties)
        return self.store.snapshot()

    def _coordinate(self, module: Module, key: str) -> str:
        value = getattr(module, key) or self._properties(module).get(key)
        if not value:
            raise MissingCoordinatesError(module.name, key)
        return value

    @staticmethod
    def _artifacts(module: Module) -> list[PublishedArtifact]:
        if not module.has_plugin("java"):
            return []
        artifacts = [PublishedArtifact()]
        if module.java.sources_jar:
            artifacts.append(PublishedArtifact(classifier="sources"))
        if module.java.javadoc_jar:
            artifacts.append(PublishedArtifact(classifier="javadoc"))
        return artifacts


def ensure_uploadable(descriptor: PublicationDescriptor) -> None:
    """Check a descriptor right before upload.

    Raises:
        MissingCredentialsError: If the target requires authentication and
            neither username nor password resolved.
    """
    repository = descriptor.repository
    if repository is None or not repository.requires_auth:
        return
    if repository.credentials.is_empty:
        raise MissingCredentialsError(descriptor.module, repository.name)


class PublishCollaborator(Protocol):
    """The external mechanism that signs and uploads artifacts."""

    def upload(self, descriptor: PublicationDescriptor) -> None: ...


@dataclass
class PublishResult:
    module: str
    repository: str | None = None
    error: ConventionError | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None


def publish_all(
    descriptors: Iterable[PublicationDescriptor],
    collaborator: PublishCollaborator,
) -> list[PublishResult]:
    """Upload each descriptor; a failing module does not stop the others."""
    results: list[PublishResult] = []
    for descriptor in descriptors:
        repository = descriptor.repository.name if descriptor.repository else None
        try:
            ensure_uploadable(descriptor)
            collaborator.upload(descriptor)
        except ConventionError as exc:
            logger.error("Publishing %s failed: %s", descriptor.module, exc)
            results.append(PublishResult(module=descriptor.module, repository=repository, error=exc))
            continue
        results.append(PublishResult(module=descriptor.module, repository=repository))
    return results
