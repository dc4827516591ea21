"""DSL execution context and the element registration protocol.

Placement rule for every element created through a builder:

1. the innermost open nesting parent, if any, gets it as a child;
2. otherwise the innermost open :class:`Collector` captures it;
3. otherwise the bound :class:`DSLContext` registers it as a pending root;
4. otherwise it is returned unregistered and the caller owns it.

Inside a context, a block's elements nest directly under their parent.
Outside one, the block runs against a fresh collector and the captured
elements are appended afterwards, so ad-hoc composition never drops a node.
"""

from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Callable, Iterator

from core.config import get_settings
from core.errors import ComponentDepthExceeded, RegistrationInvariantViolation
from core.logging_config import get_logger

from .element import Element, Markup

if TYPE_CHECKING:
    from .builder import Builder

logger = get_logger(__name__)

Block = Callable[[], Any]


class Collector:
    """Ordered, identity-keyed capture of elements created at one level."""

    def __init__(self) -> None:
        self.elements: list[Element] = []
        self._ids: set[int] = set()

    def add(self, element: Element) -> bool:
        """Capture ``element``; returns False if it was already captured."""
        if id(element) in self._ids:
            return False
        self._ids.add(id(element))
        self.elements.append(element)
        return True

    def discard(self, element: Element) -> bool:
        if id(element) not in self._ids:
            return False
        self._ids.discard(id(element))
        self.elements = [e for e in self.elements if e is not element]
        return True

    def __contains__(self, element: object) -> bool:
        return id(element) in self._ids

    def __iter__(self) -> Iterator[Element]:
        return iter(list(self.elements))

    def __len__(self) -> int:
        return len(self.elements)


def _flatten(result: Any) -> Iterator[Any]:
    if isinstance(result, (list, tuple)):
        for item in result:
            yield from _flatten(item)
    elif result is not None:
        yield result


class ElementFactory:
    """
    The ``create_element`` primitive plus the nesting and collector frames.

    A factory is bound to at most one DSLContext. Without one it works as a
    standalone helper: top-level elements come back unregistered.
    """

    def __init__(self, context: "DSLContext | None" = None) -> None:
        self._context = context
        self._frames: list[Element | Collector] = []

    @property
    def context(self) -> "DSLContext | None":
        return self._context

    @property
    def owner(self) -> Any:
        """Component that owns the bound context, if any."""
        context = self.context
        return context.owner if context is not None else None

    @property
    def current_parent(self) -> Element | None:
        frame = self._frames[-1] if self._frames else None
        return frame if isinstance(frame, Element) else None

    def create_element(
        self,
        tag: str,
        content: Any = None,
        attributes: dict[str, Any] | None = None,
        block: Block | None = None,
        **attrs: Any,
    ) -> Element:
        """
        Build an element, place it, and run its block with it as the parent.

        Args:
            tag: HTML tag name
            content: Text content (escaped unless it is Markup)
            attributes: Attribute mapping in keyword style
            block: Zero-argument callable producing the element's children
            **attrs: More attributes (``class_``, ``aria_label``, ``data={}``)

        Returns:
            The new element
        """
        element = Element(tag, content, attributes, context=self.context, factory=self)
        if attrs:
            element.merge_attributes(attrs)
        self._place(element)

        if block is not None:
            self.build(element, block)
        return element

    def adopt_raw(self, element: Element) -> Element:
        """Place an element built outside ``create_element`` (raw content)."""
        self._place(element)
        return element

    def claim(self, element: Element) -> Element:
        """
        Take back an element placed at the current level so it can be moved.

        Covers elements built as call arguments (``card(header=ui.text(...))``):
        they were placed before the receiving builder ran and must not
        render twice.
        """
        frame = self._frames[-1] if self._frames else None
        if isinstance(frame, Collector):
            frame.discard(element)
        elif element.parent is not None and element.parent is frame:
            element.detach()
        elif element.root_context is not None and element.root_context is self.context:
            element.detach()
        return element

    def _place(self, element: Element) -> None:
        frame = self._frames[-1] if self._frames else None
        if isinstance(frame, Element):
            frame.append_child(element)
        elif isinstance(frame, Collector):
            frame.add(element)
        elif self.context is not None:
            self.context.register(element)

    def build(self, element: Element, block: Block) -> Element:
        """Run ``block`` with ``element`` as the nesting parent and adopt its result."""
        with self.nest(element):
            result = block()
        self._adopt(element, result)
        return element

    @contextmanager
    def nest(self, element: Element) -> Iterator[Element]:
        """Scope in which new elements become children of ``element``."""
        if self.context is not None:
            self._frames.append(element)
            try:
                yield element
            finally:
                self._frames.pop()
            return

        collector = Collector()
        self._frames.append(collector)
        try:
            yield element
        finally:
            self._frames.pop()
        for child in collector:
            element.append_child(child)

    def collect(self, block: Block) -> list[Element]:
        """
        Capture the top-level elements a block creates.

        The result is the side-effect-collected elements in creation order,
        followed by any returned elements that are neither collected nor
        registered elsewhere. Captured elements are unregistered; the caller
        decides where they go.
        """
        collector = Collector()
        self._frames.append(collector)
        try:
            result = block()
        finally:
            self._frames.pop()

        for item in _flatten(result):
            if isinstance(item, Element) and item not in collector and not item.is_registered:
                collector.add(item)
        return collector.elements

    def _adopt(self, element: Element, result: Any) -> None:
        for item in _flatten(result):
            if isinstance(item, Element):
                if item is element or item.is_registered or element.contains(item):
                    continue
                element.append_child(item)
            elif isinstance(item, str):
                if element.content is None and not element.children:
                    element.content = item
            else:
                logger.debug("block_result_ignored", tag=element.tag, type=type(item).__name__)


class DSLContext:
    """
    Per-render collector of root elements.

    A context is created for one render, filled through its builder and
    flushed once. Contexts do not nest: a nested component render opens its
    own context one level deeper.
    """

    def __init__(
        self,
        owner: Any = None,
        parent_depth: int = 0,
        max_depth: int | None = None,
    ) -> None:
        limit = max_depth if max_depth is not None else get_settings().maximum_component_depth
        self.depth = parent_depth + 1
        if self.depth > limit:
            logger.error("component_depth_exceeded", depth=self.depth, max_depth=limit)
            raise ComponentDepthExceeded(self.depth, limit)

        self.owner = owner
        self._pending: list[Element] = []
        self._builder: Builder | None = None

    @property
    def builder(self) -> "Builder":
        """The builder bound to this context."""
        if self._builder is None:
            from .builder import Builder

            self._builder = Builder(self)
        return self._builder

    @property
    def pending_roots(self) -> tuple[Element, ...]:
        return tuple(self._pending)

    def register(self, element: Element) -> bool:
        """
        Add ``element`` to the pending roots, once.

        Returns:
            False if it is already a pending root of this context

        Raises:
            RegistrationInvariantViolation: If it is a child or a root elsewhere
        """
        if element.root_context is self:
            logger.debug("duplicate_registration_skipped", tag=element.tag)
            return False
        if element.parent is not None or element.root_context is not None:
            raise RegistrationInvariantViolation(
                f"<{element.tag}> is already placed and cannot become a context root"
            )

        element._mark_root(self)
        self._pending.append(element)
        logger.debug("element_registered", tag=element.tag, root_count=len(self._pending))
        return True

    def release(self, element: Element) -> bool:
        """Remove a pending root so it can be placed elsewhere."""
        for index, root in enumerate(self._pending):
            if root is element:
                del self._pending[index]
                element._mark_root(None)
                return True
        return False

    def flush(self) -> Markup:
        """Render pending roots in registration order, then clear them."""
        roots, self._pending = self._pending, []
        parts = []
        for element in roots:
            element._mark_root(None)
            parts.append(element.render())

        markup = Markup("".join(parts))
        logger.debug("context_flushed", root_count=len(roots), length=len(markup))
        return markup

    def render(self, block: Callable[["Builder"], Any]) -> Markup:
        """Run ``block(builder)`` and flush."""
        result = block(self.builder)
        for item in _flatten(result):
            if isinstance(item, Element) and not item.is_registered:
                self.register(item)
        return self.flush()

    def __len__(self) -> int:
        return len(self._pending)


def render_block(block: Callable[["Builder"], Any], owner: Any = None, parent_depth: int = 0) -> Markup:
    """Render a builder block inside a fresh context."""
    return DSLContext(owner=owner, parent_depth=parent_depth).render(block)
