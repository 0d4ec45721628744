"""Module task registry with configure-on-creation semantics.

Conventions often configure a task before the plugin that creates it has
been applied. Instead of failing, `configure()` records the action against
the task name; the action runs as soon as the task is registered, or
immediately if the task already exists.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class Task:
    """A named unit of work handed to the external build executor."""

    name: str
    plugin: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    def update(self, changes: dict[str, Any]) -> None:
        self.fields.update(changes)


TaskAction = Callable[[Task], None]


class TaskRegistry:
    def __init__(self, owner: str) -> None:
        self.owner = owner
        self._tasks: dict[str, Task] = {}
        self._pending: dict[str, list[TaskAction]] = {}

    def register(self, name: str, *, plugin: str | None = None, **defaults: Any) -> Task:
        """Create a task and run every action queued for its name.

        Registering an existing name returns the existing task unchanged.
        """
        existing = self._tasks.get(name)
        if existing is not None:
            return existing

        task = Task(name=name, plugin=plugin, fields=dict(defaults))
        self._tasks[name] = task
        pending = self._pending.pop(name, [])
        if pending:
            logger.debug("%s: applying %d deferred action(s) to task '%s'", self.owner, len(pending), name)
        for action in pending:
            action(task)
        return task

    def configure(self, name: str, action: TaskAction) -> None:
        task = self._tasks.get(name)
        if task is None:
            logger.debug("%s: deferring configuration of task '%s' until it is registered", self.owner, name)
            self._pending.setdefault(name, []).append(action)
            return
        action(task)

    def named(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def pending(self) -> dict[str, int]:
        """Task names with queued actions and how many are waiting."""
        return {name: len(actions) for name, actions in self._pending.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __len__(self) -> int:
        return len(self._tasks)
