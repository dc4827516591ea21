"""Text, media and plain HTML element builders."""

from typing import Any, Callable

from core.logging_config import get_logger

from ..element import Element, Markup, RawContent
from ..sanitize import validate_image_src, validate_link_href
from ..styles import class_names

logger = get_logger(__name__)

SPINNER_SIZES = {"sm": "h-4 w-4", "md": "h-8 w-8", "lg": "h-12 w-12"}


def _split(content: Any, block: Any) -> tuple[Any, Any]:
    """Allow the first positional argument to be either text or a block."""
    if callable(content) and block is None:
        return None, content
    return content, block


class HTMLBuilders:
    """Builders for text, headings, sections, lists and media."""

    def _tag(self, tag: str, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        content, block = _split(content, block)
        return self.create_element(tag, content, None, block, **attrs)

    # ==================================================================
    # Text
    # ==================================================================

    def text(self, content: Any = "", **attrs: Any) -> Element:
        """Inline text run."""
        return self.create_element("span", "" if content is None else content, None, **attrs)

    def label(self, content: Any = None, block: Any = None, *, for_: str | None = None, **attrs: Any) -> Element:
        if for_ is not None:
            attrs["for_"] = for_
        return self._tag("label", content, block, **attrs)

    def p(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("p", content, block, **attrs)

    def h1(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("h1", content, block, **attrs)

    def h2(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("h2", content, block, **attrs)

    def h3(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("h3", content, block, **attrs)

    def h4(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("h4", content, block, **attrs)

    def h5(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("h5", content, block, **attrs)

    def h6(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("h6", content, block, **attrs)

    def link(self, title: Any = None, destination: str = "#", block: Any = None, **attrs: Any) -> Element:
        """Anchor whose ``href`` is validated; rejected URLs become ``#``."""
        title, block = _split(title, block)
        attrs["href"] = validate_link_href(destination)
        return self.create_element("a", title, None, block, **attrs)

    # ==================================================================
    # Generic containers
    # ==================================================================

    def div(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("div", content, block, **attrs)

    def span(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("span", content, block, **attrs)

    def section(self, block: Any = None, **attrs: Any) -> Element:
        return self._tag("section", None, block, **attrs)

    def article(self, block: Any = None, **attrs: Any) -> Element:
        return self._tag("article", None, block, **attrs)

    def header(self, block: Any = None, **attrs: Any) -> Element:
        return self._tag("header", None, block, **attrs)

    def footer(self, block: Any = None, **attrs: Any) -> Element:
        return self._tag("footer", None, block, **attrs)

    def nav(self, block: Any = None, **attrs: Any) -> Element:
        return self._tag("nav", None, block, **attrs)

    def main(self, block: Any = None, **attrs: Any) -> Element:
        return self._tag("main", None, block, **attrs)

    def aside(self, block: Any = None, **attrs: Any) -> Element:
        return self._tag("aside", None, block, **attrs)

    # ==================================================================
    # Lists
    # ==================================================================

    def list_view(self, block: Any = None, *, ordered: bool = False, **attrs: Any) -> Element:
        """Unordered (default) or ordered list."""
        return self.create_element("ol" if ordered else "ul", None, None, block, **attrs)

    def ul(self, block: Any = None, **attrs: Any) -> Element:
        return self.list_view(block, **attrs)

    def ol(self, block: Any = None, **attrs: Any) -> Element:
        return self.list_view(block, ordered=True, **attrs)

    def list_item(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("li", content, block, **attrs)

    li = list_item

    # ==================================================================
    # Media
    # ==================================================================

    def image(self, src: str | None = None, alt: str = "", **attrs: Any) -> Element:
        """
        Image with a validated source.

        Raises:
            ValueError: If ``src`` is missing
        """
        if not src:
            raise ValueError("image requires a src")
        safe_src = validate_image_src(src)
        if safe_src != src:
            logger.warning("image_source_replaced", src=src)
        attrs.setdefault("loading", "lazy")
        return self.create_element("img", None, {"src": safe_src, "alt": alt}, **attrs)

    def icon(self, name: str, size: int = 16, **attrs: Any) -> Element:
        """Placeholder icon box sized in pixels."""
        pixels = int(size)
        attributes = {
            "class": "inline-block",
            "style": f"width: {pixels}px; height: {pixels}px",
            "data-icon": name,
            "aria-hidden": "true",
        }
        return self.create_element("span", "", attributes, **attrs)

    def spinner(self, size: str = "md", **attrs: Any) -> Element:
        classes = class_names(
            "animate-spin rounded-full border-2 border-gray-300 border-t-blue-600",
            SPINNER_SIZES.get(size, SPINNER_SIZES["md"]),
        )
        return self.create_element("div", None, {"class": classes, "role": "status"}, **attrs)

    # ==================================================================
    # Embedding
    # ==================================================================

    def raw(self, markup: str) -> Element:
        """Embed trusted markup without escaping."""
        return self.adopt_raw(RawContent(Markup(markup), context=self.context, factory=self))

    def embed(self, content: Any) -> Element:
        """
        Embed slot content, markup or an element at the current position.

        Strings are escaped, ``Markup`` is inserted as-is, the empty slot
        sentinel renders nothing, and elements are moved here.
        """
        if isinstance(content, Element):
            self.claim(content)
            self._place(content)
            return content
        if content is None or not content:
            return self.adopt_raw(RawContent(Markup(""), context=self.context, factory=self))
        return self.adopt_raw(RawContent(content, context=self.context, factory=self))

    def component(self, component: Any, **props: Any) -> Element:
        """
        Render a nested component and embed its markup.

        Args:
            component: Component instance, or a Component class to construct
            **props: Props when ``component`` is a class

        Returns:
            Raw content element holding the child's markup
        """
        owner = self.owner
        if isinstance(component, type):
            env = getattr(owner, "env", None)
            component = component(env=env, **props) if env is not None else component(**props)

        if owner is not None and hasattr(owner, "render_nested"):
            markup = owner.render_nested(component)
        else:
            depth = self.context.depth if self.context is not None else 0
            markup = component.render(parent_depth=depth)
        return self.adopt_raw(RawContent(Markup(markup), context=self.context, factory=self))

    list = list_view
