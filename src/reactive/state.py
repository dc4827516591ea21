"""
Local component state.

Values are per instance; names are fixed by the component's schema. A write
that compares equal to the current value is dropped without a change entry
or observer call.
"""

import copy
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from core.logging_config import get_logger

logger = get_logger(__name__)

Observer = Callable[[Any, Any], Any]
Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class StateChange:
    """One recorded state transition."""

    name: str
    old_value: Any
    new_value: Any
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "timestamp": self.timestamp,
        }


def values_equal(left: Any, right: Any) -> bool:
    """Deep equality that treats comparison errors as "different"."""
    if left is right:
        return True
    try:
        return bool(left == right) and type(left) is type(right)
    except Exception:
        return False


class StateContainer:
    """
    Named state slots with change log and per-name observers.

    Examples:
        >>> state = StateContainer({"count": 0})
        >>> state.set("count", 1).new_value
        1
        >>> state.set("count", 1) is None
        True
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})
        self._changes: list[StateChange] = []
        self._observers: dict[str, list[Observer]] = {}
        self.generation = 0

    def names(self) -> Iterable[str]:
        return self._values.keys()

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def get(self, name: str) -> Any:
        return self._values[name]

    def set(self, name: str, value: Any) -> StateChange | None:
        """
        Store ``value`` under ``name`` unless it equals the current value.

        Observers for ``name`` run after the value is stored, in
        subscription order, with ``(new, old)``.

        Returns:
            The recorded change, or None for a no-op write
        """
        old = self._values.get(name)
        if name in self._values and values_equal(old, value):
            logger.debug("state_write_skipped", state=name)
            return None

        self._values[name] = value
        change = StateChange(name, old, value)
        self._changes.append(change)
        self.generation += 1

        for observer in list(self._observers.get(name, ())):
            observer(value, old)
        return change

    def subscribe(self, name: str, callback: Observer) -> Unsubscribe:
        """Call ``callback(new, old)`` after each change to ``name``."""
        observers = self._observers.setdefault(name, [])
        observers.append(callback)

        def unsubscribe() -> None:
            try:
                observers.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    def snapshot(self) -> dict[str, Any]:
        """Deep copy of every value."""
        return copy.deepcopy(self._values)

    def items(self) -> list[tuple[str, Any]]:
        return list(self._values.items())

    @property
    def changes(self) -> tuple[StateChange, ...]:
        return tuple(self._changes)

    def drain_changes(self) -> list[StateChange]:
        """Return the change log and start a new one."""
        drained, self._changes = self._changes, []
        return drained

    def __len__(self) -> int:
        return len(self._values)
