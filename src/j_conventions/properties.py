"""Build-scoped property store shared by every convention fragment.

The store is created once per build invocation, seeded by the root
conventions, and then passed by reference into every fragment application.
Reads always see the current value; nothing is snapshotted unless a caller
asks for `snapshot()`.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Iterator, Mapping
from typing import Any

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")


class _Absent:
    """Sentinel returned for keys that were never set."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


class PropertyStore:
    """Mutable key/value store visible to all fragments of one build.

    Access is serialized with a lock so modules may be configured from
    several threads; ordering between modules is still the caller's job.
    """

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()
        for key, value in (initial or {}).items():
            self.set(key, value)

    def set(self, key: str, value: str | None) -> None:
        """Overwrite `key`. A `None` value clears it."""
        with self._lock:
            if value is None:
                self._values.pop(key, None)
            else:
                self._values[key] = str(value)

    def get(self, key: str, default: Any = ABSENT) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)

    def snapshot(self) -> dict[str, str]:
        """Return a point-in-time copy of the store."""
        with self._lock:
            return dict(self._values)

    def interpolate(self, value: str) -> str:
        """Resolve ${...} placeholders against the store.

        Unknown placeholders are preserved as-is. Values that themselves
        contain placeholders are expanded a few levels deep.
        """
        current = value
        for _ in range(5):
            changed = False

            def _sub(m: re.Match[str]) -> str:
                nonlocal changed
                replacement = self.get(m.group(1))
                if replacement:
                    changed = True
                    return replacement
                return m.group(0)

            current = _PLACEHOLDER_RE.sub(_sub, current)
            if not changed:
                break
        return current

    def __repr__(self) -> str:
        return f"PropertyStore(keys={sorted(self.snapshot())})"
