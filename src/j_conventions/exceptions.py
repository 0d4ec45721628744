"""Custom exceptions for j-conventions."""

from __future__ import annotations


class ConventionError(Exception):
    """Base exception for j-conventions."""


class DeclarationNotFoundError(ConventionError):
    """Raised when a build declaration file cannot be found."""


class DeclarationParseError(ConventionError):
    """Raised when a build declaration cannot be parsed or validated."""


class UnknownFragmentError(ConventionError):
    """Raised when a module declares a convention fragment that is not in the catalog."""

    def __init__(self, fragment: str, module: str) -> None:
        super().__init__(f"Unknown convention fragment '{fragment}' declared by module '{module}'")
        self.fragment = fragment
        self.module = module


class UnknownPluginError(ConventionError):
    """Raised when a plugin id resolves to neither a fragment nor a registered plugin."""

    def __init__(self, plugin_id: str, module: str, fragment: str | None = None) -> None:
        where = f"fragment '{fragment}'" if fragment else "the module declaration"
        super().__init__(f"Plugin '{plugin_id}' requested by {where} in module '{module}' cannot be located")
        self.plugin_id = plugin_id
        self.module = module
        self.fragment = fragment


class CyclicFragmentError(ConventionError):
    """Raised when a fragment transitively applies itself."""

    def __init__(self, path: list[str], module: str) -> None:
        super().__init__(f"Convention cycle in module '{module}': {' -> '.join(path)}")
        self.path = path
        self.module = module


class ModuleOrderError(ConventionError):
    """Raised when configure-before edges between modules form a cycle or name unknown modules."""


class MissingCredentialsError(ConventionError):
    """Raised at upload time when an authenticated repository has no resolved credentials."""

    def __init__(self, module: str, repository: str) -> None:
        super().__init__(
            f"No credentials resolved for repository '{repository}' while publishing module '{module}'"
        )
        self.module = module
        self.repository = repository


class MissingCoordinatesError(ConventionError):
    """Raised when a module reaches publication without a group or version."""

    def __init__(self, module: str, field: str) -> None:
        super().__init__(f"Module '{module}' has no {field}; set it in a convention or the property store")
        self.module = module
        self.field = field
