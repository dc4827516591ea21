"""Element tree nodes and markup serialisation."""

import html
import weakref
from typing import TYPE_CHECKING, Any, Iterator, Mapping

from core.errors import RegistrationInvariantViolation
from core.logging_config import get_logger

from .modifiers import StyleModifiers
from .sanitize import attribute_name, is_valid_attribute_name
from .styles import class_names, is_safe_css_class

if TYPE_CHECKING:
    from .context import DSLContext, ElementFactory

logger = get_logger(__name__)

VOID_TAGS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)

AttributeValue = str | bool


class Markup(str):
    """String that is already safe to embed in HTML without escaping."""

    __slots__ = ()

    def __html__(self) -> "Markup":
        return self

    def __repr__(self) -> str:
        return f"Markup({str.__repr__(self)})"


def escape(value: Any) -> Markup:
    """Escape text for embedding, passing pre-escaped markup through."""
    if hasattr(value, "__html__"):
        return Markup(value.__html__())
    return Markup(html.escape(str(value), quote=True))


def raw(text: str) -> Markup:
    """Mark trusted text as pre-escaped markup."""
    return Markup(text)


def join_markup(parts: Any) -> Markup:
    """Concatenate a sequence of markup fragments, escaping plain strings."""
    return Markup("".join(escape(part) for part in parts))


class Element(StyleModifiers):
    """
    A single tag in the tree being built.

    An element is a root of exactly one DSLContext, a child of exactly one
    other element, or unregistered (owned by whoever holds it). Style
    modifiers mutate the element and return it for chaining; they never
    touch registration.
    """

    def __init__(
        self,
        tag: str,
        content: Any = None,
        attributes: Mapping[str, Any] | None = None,
        *,
        context: "DSLContext | None" = None,
        factory: "ElementFactory | None" = None,
    ) -> None:
        if not isinstance(tag, str) or not tag.strip():
            raise ValueError("Element tag must be a non-empty string")

        self.tag = tag.strip().lower()
        self.content = content
        self.attributes: dict[str, AttributeValue] = {}
        self.children: list[Element] = []

        self._parent_ref: weakref.ref[Element] | None = None
        self._root_ref: weakref.ref[DSLContext] | None = None
        self._context_ref = weakref.ref(context) if context is not None else None
        self._factory_ref = weakref.ref(factory) if factory is not None else None
        self._nesting: list[Any] = []

        if attributes:
            self.merge_attributes(attributes)

    # ------------------------------------------------------------------
    # Registration bookkeeping
    # ------------------------------------------------------------------

    @property
    def parent(self) -> "Element | None":
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def root_context(self) -> "DSLContext | None":
        """Context whose pending roots currently hold this element."""
        return self._root_ref() if self._root_ref is not None else None

    @property
    def owning_context(self) -> "DSLContext | None":
        """Context the element was created under, if any."""
        return self._context_ref() if self._context_ref is not None else None

    @property
    def factory(self) -> "ElementFactory | None":
        """Builder that created this element, if it is still alive."""
        return self._factory_ref() if self._factory_ref is not None else None

    @property
    def is_registered(self) -> bool:
        return self.parent is not None or self.root_context is not None

    def contains(self, other: "Element") -> bool:
        """Check ``other`` is this element or one of its descendants."""
        node: Element | None = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    def append_child(self, child: "Element") -> bool:
        """
        Attach ``child`` as the last child.

        Returns:
            False if ``child`` is already a child of this element

        Raises:
            RegistrationInvariantViolation: If ``child`` already occupies
                another position or attaching it would create a cycle
        """
        if not isinstance(child, Element):
            raise TypeError(f"Children must be Elements, got {type(child).__name__}")
        if child.parent is self:
            return False
        if child.parent is not None or child.root_context is not None:
            raise RegistrationInvariantViolation(
                f"<{child.tag}> is already registered and cannot also become a child of <{self.tag}>"
            )
        if child.contains(self):
            raise RegistrationInvariantViolation(f"<{child.tag}> cannot be nested inside itself")

        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        return True

    def remove_child(self, child: "Element") -> bool:
        for index, existing in enumerate(self.children):
            if existing is child:
                del self.children[index]
                child._parent_ref = None
                return True
        return False

    def detach(self) -> "Element":
        """Take this element out of its current position, leaving it unregistered."""
        parent = self.parent
        if parent is not None:
            parent.remove_child(self)
        context = self.root_context
        if context is not None:
            context.release(self)
        return self

    def _mark_root(self, context: "DSLContext | None") -> None:
        self._root_ref = weakref.ref(context) if context is not None else None

    # ------------------------------------------------------------------
    # Attribute bag
    # ------------------------------------------------------------------

    def add_class(self, *classes: str | None) -> "Element":
        """Append class tokens, dropping any that are not plain identifiers."""
        tokens = []
        for entry in classes:
            if not entry:
                continue
            for token in str(entry).split():
                if is_safe_css_class(token):
                    tokens.append(token)
                else:
                    logger.warning("unsafe_class_dropped", tag=self.tag, token=token)
        if tokens:
            self.attributes["class"] = class_names(self.attributes.get("class"), *tokens)
        return self

    def set_attribute(self, name: str, value: Any) -> "Element":
        """Set one attribute; ``class`` and ``style`` accumulate instead of overwrite."""
        if not is_valid_attribute_name(name):
            logger.warning("unsafe_attribute_dropped", tag=self.tag, attribute=name)
            return self
        if name == "class":
            return self.add_class(value)
        if value is None or value is False:
            self.attributes.pop(name, None)
            return self
        if name == "style":
            existing = self.attributes.get("style")
            declaration = str(value).strip().rstrip(";")
            self.attributes["style"] = f"{existing}; {declaration}" if existing else declaration
            return self
        self.attributes[name] = value if value is True else str(value)
        return self

    def merge_attributes(self, attributes: Mapping[str, Any]) -> "Element":
        """Apply a mapping of keyword-style names (``aria_label``, ``class_``)."""
        for key, value in attributes.items():
            if key in ("data", "aria") and isinstance(value, Mapping):
                for sub_key, sub_value in value.items():
                    self.set_attribute(f"{key}-{attribute_name(sub_key)}", sub_value)
                continue
            self.set_attribute(attribute_name(key), value)
        return self

    @property
    def classes(self) -> list[str]:
        return str(self.attributes.get("class", "")).split()

    # ------------------------------------------------------------------
    # Nesting via ``with``
    # ------------------------------------------------------------------

    def __enter__(self) -> "Element":
        factory = self.factory
        if factory is None:
            raise RuntimeError(f"<{self.tag}> was not created by a builder and cannot nest children")
        scope = factory.nest(self)
        scope.__enter__()
        self._nesting.append(scope)
        return self

    def __exit__(self, *exc_info: Any) -> bool | None:
        scope = self._nesting.pop()
        return scope.__exit__(*exc_info)

    # ------------------------------------------------------------------
    # Traversal and rendering
    # ------------------------------------------------------------------

    def walk(self) -> Iterator["Element"]:
        """Yield this element and all descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def _render_attributes(self) -> str:
        parts = []
        for name, value in self.attributes.items():
            if value is True:
                parts.append(f" {name}")
            elif value is not False and value is not None:
                parts.append(f' {name}="{html.escape(str(value), quote=True)}"')
        return "".join(parts)

    def render(self) -> Markup:
        """Serialize this element and its subtree."""
        opening = f"<{self.tag}{self._render_attributes()}>"
        if self.tag in VOID_TAGS:
            return Markup(opening)

        parts = [opening]
        if self.content is not None:
            parts.append(escape(self.content))
        parts.extend(child.render() for child in self.children)
        parts.append(f"</{self.tag}>")
        return Markup("".join(parts))

    def __html__(self) -> Markup:
        return self.render()

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"<Element {self.tag} children={len(self.children)} attrs={list(self.attributes)}>"


class RawContent(Element):
    """Opaque markup embedded in the tree (nested component output, slot content)."""

    def __init__(self, markup: Any, **kwargs: Any) -> None:
        super().__init__("template", escape(markup) if markup is not None else Markup(""), **kwargs)

    def render(self) -> Markup:
        return Markup(self.content)

    def append_child(self, child: Element) -> bool:
        raise RegistrationInvariantViolation("Raw content cannot have children")
