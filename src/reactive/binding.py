"""Two-way bindings over a getter/setter pair."""

import copy
import dataclasses
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel

from core.errors import BindingReadOnlyError
from core.logging_config import get_logger

from .state import values_equal

logger = get_logger(__name__)

Getter = Callable[[], Any]
Setter = Callable[[Any], Any]


def _read_step(container: Any, key: Any) -> Any:
    if container is None:
        return None
    if isinstance(container, Mapping):
        return container.get(key)
    if isinstance(container, Sequence) and not isinstance(container, (str, bytes)) and isinstance(key, int):
        return container[key] if -len(container) <= key < len(container) else None
    return getattr(container, str(key), None)


def _write_step(container: Any, key: Any, value: Any) -> Any:
    """Return a copy of ``container`` with ``key`` replaced; the original is untouched."""
    if container is None:
        return {key: value}
    if isinstance(container, Mapping):
        updated = dict(container)
        updated[key] = value
        return updated
    if isinstance(container, (list, tuple)) and isinstance(key, int):
        items = list(container)
        if key == len(items):
            items.append(value)
        else:
            items[key] = value
        return tuple(items) if isinstance(container, tuple) else items
    if isinstance(container, BaseModel):
        return container.model_copy(update={str(key): value})
    if dataclasses.is_dataclass(container) and not isinstance(container, type):
        return dataclasses.replace(container, **{str(key): value})

    clone = copy.copy(container)
    setattr(clone, str(key), value)
    return clone


def read_path(root: Any, path: Sequence[Any]) -> Any:
    """Follow ``path`` into ``root``; a missing step yields None."""
    node = root
    for key in path:
        node = _read_step(node, key)
        if node is None:
            return None
    return node


def write_path(root: Any, path: Sequence[Any], value: Any) -> Any:
    """Rebuild ``root`` with the value at ``path`` replaced."""
    if not path:
        return value
    head, rest = path[0], path[1:]
    child = _read_step(root, head)
    return _write_step(root, head, write_path(child, rest, value))


class Binding:
    """
    Read/write indirection over a value that lives somewhere else.

    Examples:
        >>> cell = Binding.variable({"user": {"name": "Ada"}})
        >>> name = cell.project("user", "name")
        >>> name.set("Grace")
        >>> cell.value
        {'user': {'name': 'Grace'}}
    """

    def __init__(self, getter: Getter, setter: Setter | None = None, *, name: str = "") -> None:
        self._getter = getter
        self._setter = setter
        self.name = name
        self._listeners: list[Callable[[Any, Any], Any]] = []

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def constant(cls, value: Any) -> "Binding":
        """Read-only binding to a fixed value."""
        return cls(lambda: value, name="constant")

    @classmethod
    def variable(cls, initial: Any = None, *, name: str = "variable") -> "Binding":
        """Binding that owns its own storage cell."""
        cell = [initial]

        def setter(value: Any) -> None:
            cell[0] = value

        return cls(lambda: cell[0], setter, name=name)

    @classmethod
    def to_state(cls, component: Any, state_name: str) -> "Binding":
        """Binding that reads and writes a component's state slot."""
        component.get_state(state_name)
        return cls(
            lambda: component.get_state(state_name),
            lambda value: component.set_state(state_name, value),
            name=state_name,
        )

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def is_read_only(self) -> bool:
        return self._setter is None

    def get(self) -> Any:
        return self._getter()

    def set(self, value: Any) -> None:
        """
        Write through the setter and notify change listeners.

        Raises:
            BindingReadOnlyError: If the binding has no setter
        """
        if self._setter is None:
            raise BindingReadOnlyError(f"Binding '{self.name or 'anonymous'}' is read-only")
        old = self._getter()
        self._setter(value)
        if not values_equal(old, value):
            for listener in list(self._listeners):
                listener(value, old)

    @property
    def value(self) -> Any:
        return self.get()

    @value.setter
    def value(self, new_value: Any) -> None:
        self.set(new_value)

    def on_change(self, callback: Callable[[Any, Any], Any]) -> Callable[[], None]:
        """Call ``callback(new, old)`` after writes that change the value."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    # ------------------------------------------------------------------
    # Derived bindings
    # ------------------------------------------------------------------

    def map(self, transform: Callable[[Any], Any], inverse: Callable[[Any], Any] | None = None) -> "Binding":
        """
        Derived binding reading ``transform(value)``.

        Writable only when ``inverse`` is given; writes store ``inverse(v)``
        through this binding.
        """
        setter = None
        if inverse is not None:
            def setter(value: Any) -> None:
                self.set(inverse(value))

        return Binding(lambda: transform(self.get()), setter, name=f"{self.name}.map")

    def project(self, *path: Any) -> "Binding":
        """
        Binding onto a nested key, index or attribute path.

        Writes rebuild the containing structure and store it through this
        binding, so the original value object is never mutated.
        """
        if not path:
            return self

        def getter() -> Any:
            return read_path(self.get(), path)

        setter = None
        if not self.is_read_only:
            def setter(value: Any) -> None:
                self.set(write_path(self.get(), path, value))

        label = ".".join(str(step) for step in path)
        return Binding(getter, setter, name=f"{self.name}.{label}" if self.name else label)

    def __repr__(self) -> str:
        mode = "ro" if self.is_read_only else "rw"
        return f"<Binding {self.name or 'anonymous'} {mode}>"
