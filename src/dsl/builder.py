"""The DSL surface: every builder function bound to one element factory."""

from typing import TYPE_CHECKING

from .builders import (
    CollectionBuilders,
    ContainerBuilders,
    FormBuilders,
    HTMLBuilders,
    LayoutBuilders,
    TableBuilders,
)
from .context import ElementFactory

if TYPE_CHECKING:
    from .context import DSLContext


class Builder(
    LayoutBuilders,
    HTMLBuilders,
    FormBuilders,
    ContainerBuilders,
    CollectionBuilders,
    TableBuilders,
    ElementFactory,
):
    """
    Builder interface handed to component bodies.

    Bound to a DSLContext it registers top-level elements as context roots;
    created standalone (``Builder()``) it returns them to the caller.

    Examples:
        >>> ui = Builder()
        >>> stack = ui.vstack(lambda: [ui.text("a"), ui.text("b")], spacing=4)
        >>> len(stack.children)
        2
    """

    def __init__(self, context: "DSLContext | None" = None) -> None:
        ElementFactory.__init__(self, context)

    def __repr__(self) -> str:
        bound = "bound" if self.context is not None else "standalone"
        return f"<Builder {bound} frames={len(self._frames)}>"


def builder() -> Builder:
    """Standalone builder for ad-hoc composition outside any component."""
    return Builder()
