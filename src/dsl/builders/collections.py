"""Iteration helpers for building repeated content."""

import inspect
from typing import Any, Callable, Iterable

from ..element import Element


def _positional_arity(fn: Callable[..., Any]) -> int:
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return 1
    if any(p.kind is p.VAR_POSITIONAL for p in params):
        return 2
    return sum(1 for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD))


class CollectionBuilders:
    """Loops over data that place their output at the current position."""

    def each(self, items: Iterable[Any], block: Callable[..., Any]) -> list[Element]:
        """
        Call ``block(item)`` (or ``block(item, index)``) for every item.

        Elements land wherever a plain call would put them; the list of
        elements returned by the block is handed back for convenience.
        """
        with_index = _positional_arity(block) >= 2
        returned: list[Element] = []
        for index, item in enumerate(items):
            result = block(item, index) if with_index else block(item)
            if isinstance(result, Element):
                returned.append(result)
        return returned

    def repeat(self, count: int, block: Callable[[int], Any]) -> list[Element]:
        return self.each(range(int(count)), lambda index: block(index))

    def fragment(self, block: Callable[[], Any]) -> list[Element]:
        """Build elements without placing them; the caller decides where they go."""
        return self.collect(block)
