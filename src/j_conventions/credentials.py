"""Credential resolution from ranked sources.

A secret is resolved by walking an explicit, ordered list of sources and
taking the first non-empty value. Sources are plain values so the fallback
chain can be declared, inspected and tested like any other configuration:

    username = ["property:repoUserName", "env:GPR_USERNAME"]
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from pydantic import BaseModel, ConfigDict, SecretStr

if TYPE_CHECKING:
    from j_conventions.properties import PropertyStore

logger = logging.getLogger(__name__)


class _Unresolved:
    """Marker for a secret that no source could provide."""

    _instance: _Unresolved | None = None

    def __new__(cls) -> _Unresolved:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED = _Unresolved()


@dataclass(frozen=True)
class SystemPropertySource:
    """Read a system property (a `-D name=value` build argument)."""

    name: str
    prefix = "sysprop"

    def read(self, resolver: CredentialResolver) -> str | None:
        return resolver.system_properties.get(self.name)


@dataclass(frozen=True)
class EnvironmentVariableSource:
    """Read an environment variable."""

    name: str
    prefix = "env"

    def read(self, resolver: CredentialResolver) -> str | None:
        return resolver.environ.get(self.name)


@dataclass(frozen=True)
class PropertyStoreSource:
    """Read a key previously written to the build's PropertyStore."""

    name: str
    prefix = "property"

    def read(self, resolver: CredentialResolver) -> str | None:
        if resolver.store is None:
            return None
        return resolver.store.get(self.name, None)


CredentialSource = Union[SystemPropertySource, EnvironmentVariableSource, PropertyStoreSource]

_SOURCE_TYPES = {cls.prefix: cls for cls in (SystemPropertySource, EnvironmentVariableSource, PropertyStoreSource)}


def parse_source(spec: str) -> CredentialSource:
    """Parse a source spec such as `env:GPR_TOKEN`.

    Raises:
        ValueError: If the prefix is unknown or the name is empty.
    """
    prefix, sep, name = (spec or "").partition(":")
    source_type = _SOURCE_TYPES.get(prefix.strip())
    if not sep or source_type is None or not name.strip():
        expected = ", ".join(f"{p}:NAME" for p in _SOURCE_TYPES)
        raise ValueError(f"Invalid credential source '{spec}', expected one of: {expected}")
    return source_type(name.strip())


def describe_source(source: CredentialSource) -> str:
    return f"{source.prefix}:{source.name}"


class ResolvedCredentials(BaseModel):
    """Username/password pair; either side may be unresolved (None)."""

    model_config = ConfigDict(frozen=True)

    username: str | None = None
    password: SecretStr | None = None

    @property
    def is_complete(self) -> bool:
        return self.username is not None and self.password is not None

    @property
    def is_empty(self) -> bool:
        return self.username is None and self.password is None


class CredentialResolver:
    """Resolve secrets against system properties, the environment and the PropertyStore.

    Resolution is a pure read of state that already exists when the build
    starts. There is no error path: when every source comes back empty the
    result is `UNRESOLVED` and the consumer decides whether that is fatal.
    """

    def __init__(
        self,
        system_properties: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
        store: PropertyStore | None = None,
    ) -> None:
        self.system_properties: Mapping[str, str] = system_properties or {}
        self.environ: Mapping[str, str] = os.environ if environ is None else environ
        self.store = store

    def resolve(self, name: str, sources: Iterable[CredentialSource | str]) -> str | _Unresolved:
        """Return the first non-empty value among `sources`, else `UNRESOLVED`.

        A present-but-empty value counts as absent.
        """
        for source in sources:
            if isinstance(source, str):
                source = parse_source(source)
            value = source.read(self)
            if value:
                logger.debug("Resolved %s from %s", name, describe_source(source))
                return value
        logger.debug("No source yielded a value for %s", name)
        return UNRESOLVED

    def resolve_pair(
        self,
        username_sources: Iterable[CredentialSource | str],
        password_sources: Iterable[CredentialSource | str],
    ) -> ResolvedCredentials:
        username = self.resolve("username", username_sources)
        password = self.resolve("password", password_sources)
        return ResolvedCredentials(
            username=username or None,
            password=SecretStr(password) if password else None,
        )
