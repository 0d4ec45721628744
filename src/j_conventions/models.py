"""Pydantic models for convention fragments and module build declarations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from j_conventions.credentials import parse_source


UNKNOWN_VERSION = "Unknown"


class GAV(BaseModel):
    """Maven coordinates (GroupId, ArtifactId, Version)."""

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: str = Field(default=UNKNOWN_VERSION, min_length=1)

    @classmethod
    def parse(cls, text: str) -> GAV:
        """Parse `group:artifact` or `group:artifact:version`."""
        parts = [p.strip() for p in (text or "").split(":")]
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Expected 'group:artifact[:version]', got '{text}'")
        if len(parts) == 2:
            return cls(group_id=parts[0], artifact_id=parts[1])
        return cls(group_id=parts[0], artifact_id=parts[1], version=parts[2])

    def key(self) -> str:
        """Return the version-less `groupId:artifactId` used for constraints."""
        return f"{self.group_id}:{self.artifact_id}"

    def compact(self) -> str:
        """Return a compact string representation.

        Returns:
            A string like `groupId:artifactId:version`.
        """
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


class PluginRequest(BaseModel):
    """A plugin (or convention fragment) id, optionally pinned to a version."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    version: str | None = None


class PropertyWrite(BaseModel):
    """A PropertyStore write.

    With `system_property` set, the value is read from that system property
    and `value` serves as the fallback. A write that yields nothing clears
    the key.
    """

    value: str | None = None
    system_property: str | None = None


class ProjectCoordinates(BaseModel):
    group: str | None = None
    version: str | None = None


class JavaConvention(BaseModel):
    language_version: int | None = Field(default=None, ge=1)
    sources_jar: bool | None = None
    javadoc_jar: bool | None = None


class TestingConvention(BaseModel):
    framework: str | None = None
    version: str | None = None


def _coerce_plugins(value: Any) -> Any:
    if not isinstance(value, list):
        return value
    return [{"id": item} if isinstance(item, str) else item for item in value]


def _name_entries(value: Any) -> Any:
    """Fill each table's `name` from its key in the declaration."""
    if not isinstance(value, dict):
        return value
    return {k: {"name": k, **v} if isinstance(v, dict) else v for k, v in value.items()}


def _check_constraint_keys(value: dict[str, str]) -> dict[str, str]:
    for coordinate in value:
        GAV.parse(coordinate)
    return value


class ConventionFragment(BaseModel):
    """A named, reusable bundle of build configuration."""

    name: str = Field(..., min_length=1)
    description: str | None = None
    plugins: list[PluginRequest] = Field(default_factory=list)
    constraints: dict[str, str] = Field(default_factory=dict)
    tasks: dict[str, dict[str, Any]] = Field(default_factory=dict)
    properties: dict[str, PropertyWrite] = Field(default_factory=dict)
    project: ProjectCoordinates | None = None
    java: JavaConvention | None = None
    testing: TestingConvention | None = None
    repositories: list[str] = Field(default_factory=list)

    @field_validator("plugins", mode="before")
    @classmethod
    def _plugin_requests(cls, value: Any) -> Any:
        return _coerce_plugins(value)

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_properties(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {k: {"value": v} if isinstance(v, str) else v for k, v in value.items()}

    @field_validator("constraints")
    @classmethod
    def _valid_constraints(cls, value: dict[str, str]) -> dict[str, str]:
        return _check_constraint_keys(value)


class DependencyDeclaration(BaseModel):
    """An external dependency declared by a module.

    Without a version, the module's constraint for the coordinate applies.
    """

    configuration: str = "implementation"
    coordinate: str

    @model_validator(mode="before")
    @classmethod
    def _from_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"coordinate": value}
        return value

    @field_validator("coordinate")
    @classmethod
    def _valid_coordinate(cls, value: str) -> str:
        GAV.parse(value)
        return value

    def gav(self) -> GAV:
        return GAV.parse(self.coordinate)


class License(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    url: str | None = None
    distribution: str | None = "repo"


class Developer(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    email: str | None = None


class PomMetadata(BaseModel):
    """Literal POM metadata, copied verbatim into the publication."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    description: str | None = None
    url: str | None = None
    inception_year: str | None = None
    licenses: tuple[License, ...] = ()
    developers: tuple[Developer, ...] = ()
    scm_url: str | None = None


class RepositoryTarget(BaseModel):
    """A remote repository plus the credential source chains used to log into it.

    Source specs look like `sysprop:NAME`, `env:NAME` or `property:KEY`.
    """

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    snapshot_url: str | None = None
    username: list[str] = Field(default_factory=list)
    password: list[str] = Field(default_factory=list)
    requires_auth: bool = True

    @field_validator("username", "password")
    @classmethod
    def _valid_sources(cls, value: list[str]) -> list[str]:
        for spec in value:
            parse_source(spec)
        return value


class PublicationDeclaration(BaseModel):
    name: str = "mavenJava"
    artifact_id: str | None = None
    pom: PomMetadata = Field(default_factory=PomMetadata)
    repository: RepositoryTarget | None = None
    sign: bool = False


class ModuleDeclaration(BaseModel):
    """A subproject: ordered conventions plus module-specific overrides."""

    name: str = Field(..., min_length=1)
    conventions: list[str] = Field(default_factory=list)
    plugins: list[PluginRequest] = Field(default_factory=list)
    constraints: dict[str, str] = Field(default_factory=dict)
    dependencies: list[DependencyDeclaration] = Field(default_factory=list)
    depends_on: list[str] = Field(default_factory=list)
    java: JavaConvention | None = None
    testing: TestingConvention | None = None
    tasks: dict[str, dict[str, Any]] = Field(default_factory=dict)
    publication: PublicationDeclaration | None = None

    @field_validator("plugins", mode="before")
    @classmethod
    def _plugin_requests(cls, value: Any) -> Any:
        return _coerce_plugins(value)

    @field_validator("constraints")
    @classmethod
    def _valid_constraints(cls, value: dict[str, str]) -> dict[str, str]:
        return _check_constraint_keys(value)


class RootDeclaration(BaseModel):
    """The root project: global property seeding and staging repositories."""

    conventions: list[str] = Field(default_factory=list)
    repositories: dict[str, RepositoryTarget] = Field(default_factory=dict)

    @field_validator("repositories", mode="before")
    @classmethod
    def _name_repositories(cls, value: Any) -> Any:
        return _name_entries(value)


class BuildDeclaration(BaseModel):
    """A whole multi-module build: fragment catalog, root project and modules."""

    fragments: dict[str, ConventionFragment] = Field(default_factory=dict)
    root: RootDeclaration = Field(default_factory=RootDeclaration)
    modules: dict[str, ModuleDeclaration] = Field(default_factory=dict)

    @field_validator("fragments", "modules", mode="before")
    @classmethod
    def _named_tables(cls, value: Any) -> Any:
        return _name_entries(value)
