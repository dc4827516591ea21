"""Chainable style modifiers.

Every method validates its input through :mod:`dsl.styles`, mutates the
element's attribute bag and returns the element, so calls chain:

    ui.text("Hi").padding_x(4).corner_radius("md").background("blue", 600)
"""

from typing import Any, Callable

from core.logging_config import get_logger

from .sanitize import sanitize_data_key
from .styles import (
    is_safe_css_class,
    safe_class,
    safe_color_class,
    sanitize_css_value,
)

logger = get_logger(__name__)

TEXT_ALIGNMENTS = ("left", "center", "right", "justify", "start", "end")
FLEX_ALIGNMENTS = {"start": "start", "leading": "start", "top": "start", "center": "center",
                   "end": "end", "trailing": "end", "bottom": "end", "stretch": "stretch",
                   "baseline": "baseline"}
JUSTIFICATIONS = ("start", "end", "center", "between", "around", "evenly", "stretch")
CURSORS = ("auto", "default", "pointer", "wait", "text", "move", "not-allowed", "grab")
OBJECT_FITS = ("contain", "cover", "fill", "none", "scale-down")
OVERFLOWS = ("auto", "hidden", "visible", "scroll", "clip")
ANIMATIONS = ("none", "spin", "ping", "pulse", "bounce")
VARIANTS = ("hover", "focus", "active", "disabled", "group-hover", "dark", "sm", "md", "lg", "xl", "2xl")


def _bounded(prefix: str, value: Any, maximum: int, keywords: tuple[str, ...], fallback: str = "1") -> str:
    token = str(value)
    if token in keywords or (token.isdigit() and 1 <= int(token) <= maximum):
        return f"{prefix}-{token}"
    return f"{prefix}-{fallback}"


class StyleModifiers:
    """Mixin of fluent styling methods over ``add_class``/``set_attribute``."""

    # Provided by Element
    tag: str

    def add_class(self, *classes: str | None) -> Any:  # pragma: no cover - overridden
        raise NotImplementedError

    def set_attribute(self, name: str, value: Any) -> Any:  # pragma: no cover - overridden
        raise NotImplementedError

    # ==================================================================
    # Raw utilities
    # ==================================================================

    def tw(self, *classes: str) -> Any:
        """Append utility classes verbatim (unsafe tokens are dropped)."""
        return self.add_class(*classes)

    def _spacing(self, prefix: str, value: Any) -> Any:
        return self.add_class(safe_class(prefix, value))

    # ==================================================================
    # Spacing
    # ==================================================================

    def padding(self, value: Any = 4) -> Any:
        return self._spacing("p", value)

    p = padding

    def padding_x(self, value: Any) -> Any:
        return self._spacing("px", value)

    px = padding_x

    def padding_y(self, value: Any) -> Any:
        return self._spacing("py", value)

    py = padding_y

    def padding_top(self, value: Any) -> Any:
        return self._spacing("pt", value)

    def padding_bottom(self, value: Any) -> Any:
        return self._spacing("pb", value)

    def padding_left(self, value: Any) -> Any:
        return self._spacing("pl", value)

    def padding_right(self, value: Any) -> Any:
        return self._spacing("pr", value)

    def margin(self, value: Any = 4) -> Any:
        return self._spacing("m", value)

    m = margin

    def margin_x(self, value: Any) -> Any:
        return self._spacing("mx", value)

    mx = margin_x

    def margin_y(self, value: Any) -> Any:
        return self._spacing("my", value)

    my = margin_y

    def margin_top(self, value: Any) -> Any:
        return self._spacing("mt", value)

    def margin_bottom(self, value: Any) -> Any:
        return self._spacing("mb", value)

    def margin_left(self, value: Any) -> Any:
        return self._spacing("ml", value)

    def margin_right(self, value: Any) -> Any:
        return self._spacing("mr", value)

    def margin_x_auto(self) -> Any:
        return self.add_class("mx-auto")

    def gap(self, value: Any) -> Any:
        return self._spacing("gap", value)

    # ==================================================================
    # Color
    # ==================================================================

    def background(self, color: Any, shade: Any = None) -> Any:
        return self.add_class(safe_color_class("bg", color, shade))

    bg = background

    def foreground_color(self, color: Any, shade: Any = None) -> Any:
        return self.add_class(safe_color_class("text", color, shade))

    text_color = foreground_color

    def border_color(self, color: Any, shade: Any = None) -> Any:
        return self.add_class(safe_color_class("border", color, shade))

    def ring(self, width: Any = None, color: Any = None) -> Any:
        widths = ("0", "1", "2", "4", "8")
        self.add_class(f"ring-{width}" if str(width) in widths else "ring")
        if color is not None:
            self.add_class(safe_color_class("ring", color))
        return self

    # ==================================================================
    # Typography
    # ==================================================================

    def font_size(self, size: Any) -> Any:
        return self.add_class(safe_class("text-size", size))

    text_size = font_size

    def font_weight(self, weight: Any) -> Any:
        return self.add_class(safe_class("font-weight", weight))

    def bold(self) -> Any:
        return self.add_class("font-bold")

    def italic(self) -> Any:
        return self.add_class("italic")

    def underline(self) -> Any:
        return self.add_class("underline")

    def text_align(self, alignment: str) -> Any:
        value = str(alignment).lower()
        return self.add_class(f"text-{value}" if value in TEXT_ALIGNMENTS else "text-left")

    def line_clamp(self, lines: int) -> Any:
        count = int(lines)
        return self.add_class(f"line-clamp-{count}" if 1 <= count <= 6 else "line-clamp-none")

    def truncate(self) -> Any:
        return self.add_class("truncate")

    # ==================================================================
    # Shape
    # ==================================================================

    def corner_radius(self, size: Any = "md") -> Any:
        return self.add_class(safe_class("rounded", size))

    rounded = corner_radius

    def shadow(self, size: Any = None) -> Any:
        return self.add_class(safe_class("shadow", size or ""))

    def border(self, width: Any = None, color: Any = None) -> Any:
        self.add_class("border" if width in (None, 1, "1") else safe_class("border", width))
        if color is not None:
            self.border_color(color)
        return self

    def border_t(self) -> Any:
        return self.add_class("border-t")

    def border_b(self) -> Any:
        return self.add_class("border-b")

    def border_l(self) -> Any:
        return self.add_class("border-l")

    def border_r(self) -> Any:
        return self.add_class("border-r")

    # ==================================================================
    # Sizing
    # ==================================================================

    def width(self, value: Any) -> Any:
        return self._spacing("w", value)

    w = width

    def height(self, value: Any) -> Any:
        return self._spacing("h", value)

    h = height

    def w_full(self) -> Any:
        return self.add_class("w-full")

    def h_full(self) -> Any:
        return self.add_class("h-full")

    def max_w(self, size: Any) -> Any:
        return self.add_class(safe_class("max-w", size))

    def min_h(self, value: Any) -> Any:
        return self._spacing("min-h", value)

    def frame(
        self,
        width: Any = None,
        height: Any = None,
        max_width: Any = None,
        min_height: Any = None,
    ) -> Any:
        """Apply any combination of size constraints at once."""
        if width is not None:
            self.width(width)
        if height is not None:
            self.height(height)
        if max_width is not None:
            self.max_w(max_width)
        if min_height is not None:
            self.min_h(min_height)
        return self

    def aspect_ratio(self, ratio: Any) -> Any:
        return self.add_class(safe_class("aspect", ratio))

    # ==================================================================
    # Layout
    # ==================================================================

    def flex(self, direction: str | None = None) -> Any:
        self.add_class("flex")
        if direction in ("row", "col", "row-reverse", "col-reverse"):
            self.add_class(f"flex-{direction}")
        return self

    def grid(self, columns: Any = None) -> Any:
        self.add_class("grid")
        if columns is not None:
            self.add_class(safe_class("grid-cols", columns))
        return self

    def block(self) -> Any:
        return self.add_class("block")

    def inline_flex(self) -> Any:
        return self.add_class("inline-flex")

    def hidden(self, is_hidden: bool = True) -> Any:
        return self.add_class("hidden") if is_hidden else self

    def items(self, alignment: str) -> Any:
        value = FLEX_ALIGNMENTS.get(str(alignment).lower(), "center")
        return self.add_class(f"items-{value}")

    def justify(self, justification: str) -> Any:
        value = str(justification).lower()
        return self.add_class(f"justify-{value}" if value in JUSTIFICATIONS else "justify-start")

    def flex_grow(self, grow: bool = True) -> Any:
        return self.add_class("grow" if grow else "grow-0")

    def flex_shrink(self, shrink: bool = True) -> Any:
        return self.add_class("shrink" if shrink else "shrink-0")

    def col_span(self, span: Any) -> Any:
        return self.add_class(_bounded("col-span", span, 12, ("full",)))

    def row_span(self, span: Any) -> Any:
        return self.add_class(_bounded("row-span", span, 6, ("full",)))

    def order(self, position: Any) -> Any:
        return self.add_class(_bounded("order", position, 12, ("first", "last", "none"), "none"))

    # ==================================================================
    # Positioning
    # ==================================================================

    def relative(self) -> Any:
        return self.add_class("relative")

    def absolute(self) -> Any:
        return self.add_class("absolute")

    def fixed(self) -> Any:
        return self.add_class("fixed")

    def sticky(self) -> Any:
        return self.add_class("sticky")

    def inset(self, value: Any = 0) -> Any:
        return self._spacing("inset", value)

    def top(self, value: Any = 0) -> Any:
        return self._spacing("top", value)

    def bottom(self, value: Any = 0) -> Any:
        return self._spacing("bottom", value)

    def left(self, value: Any = 0) -> Any:
        return self._spacing("left", value)

    def right(self, value: Any = 0) -> Any:
        return self._spacing("right", value)

    def z_index(self, value: Any) -> Any:
        return self.add_class(safe_class("z", value))

    # ==================================================================
    # Effects
    # ==================================================================

    def opacity(self, value: Any) -> Any:
        if isinstance(value, float) and value <= 1:
            value = int(round(value * 100))
        return self.add_class(safe_class("opacity", value))

    def scale(self, value: Any) -> Any:
        return self.add_class(safe_class("scale", value))

    def rotate(self, degrees: Any) -> Any:
        value = str(degrees).lstrip("-")
        allowed = ("0", "1", "2", "3", "6", "12", "45", "90", "180")
        if value not in allowed:
            return self.add_class("rotate-0")
        return self.add_class(f"-rotate-{value}" if str(degrees).startswith("-") else f"rotate-{value}")

    def transition(self, kind: Any = "all", duration: Any = None) -> Any:
        self.add_class(safe_class("transition", kind))
        if duration is not None:
            self.duration(duration)
        return self

    def duration(self, milliseconds: Any) -> Any:
        return self.add_class(safe_class("duration", milliseconds))

    def cursor(self, kind: str) -> Any:
        value = str(kind).lower()
        return self.add_class(f"cursor-{value}" if value in CURSORS else "cursor-auto")

    def object_fit(self, fit: str) -> Any:
        value = str(fit).lower()
        return self.add_class(f"object-{value}" if value in OBJECT_FITS else "object-cover")

    def overflow(self, value: str, axis: str | None = None) -> Any:
        kind = str(value).lower() if str(value).lower() in OVERFLOWS else "auto"
        prefix = f"overflow-{axis}" if axis in ("x", "y") else "overflow"
        return self.add_class(f"{prefix}-{kind}")

    def animate(self, animation: str) -> Any:
        value = str(animation).lower()
        return self.add_class(f"animate-{value}" if value in ANIMATIONS else "animate-none")

    def variant(self, name: str, *classes: str) -> Any:
        """Prefix validated utility tokens with a state or breakpoint variant."""
        if name not in VARIANTS:
            logger.warning("unknown_variant_dropped", variant=name)
            return self
        tokens = [f"{name}:{token}" for entry in classes for token in str(entry).split()]
        return self.add_class(*[t for t in tokens if is_safe_css_class(t)])

    def hover(self, *classes: str) -> Any:
        return self.variant("hover", *classes)

    def focus(self, *classes: str) -> Any:
        return self.variant("focus", *classes)

    def active(self, *classes: str) -> Any:
        return self.variant("active", *classes)

    def dark(self, *classes: str) -> Any:
        return self.variant("dark", *classes)

    def sm(self, *classes: str) -> Any:
        return self.variant("sm", *classes)

    def md(self, *classes: str) -> Any:
        return self.variant("md", *classes)

    def lg(self, *classes: str) -> Any:
        return self.variant("lg", *classes)

    def xl(self, *classes: str) -> Any:
        return self.variant("xl", *classes)

    # ==================================================================
    # Attributes
    # ==================================================================

    def attr(self, name: str, value: Any = True) -> Any:
        return self.set_attribute(name, value)

    def id(self, value: str) -> Any:
        return self.set_attribute("id", value)

    def title(self, value: str) -> Any:
        return self.set_attribute("title", value)

    def style(self, declaration: str) -> Any:
        return self.set_attribute("style", sanitize_css_value(declaration))

    def data(self, **values: Any) -> Any:
        for key, value in values.items():
            self.set_attribute(sanitize_data_key(key), value)
        return self

    def aria(self, **values: Any) -> Any:
        for key, value in values.items():
            self.set_attribute(f"aria-{key.replace('_', '-')}", value)
        return self

    def role(self, value: str) -> Any:
        return self.set_attribute("role", value)

    def disabled(self, is_disabled: bool = True) -> Any:
        self.set_attribute("disabled", bool(is_disabled))
        return self.add_class("opacity-50", "cursor-not-allowed") if is_disabled else self

    def tab_index(self, index: int) -> Any:
        return self.set_attribute("tabindex", int(index))

    # ==================================================================
    # Events
    # ==================================================================

    def on(self, event: str, handler: Callable[..., Any] | str) -> Any:
        """
        Wire a client event to a server-side action or a client descriptor.

        A callable is registered with the component that owns the element's
        context and referenced by id; a string is emitted as the raw
        ``data-action`` descriptor.
        """
        event_name = "".join(ch for ch in str(event).lower() if ch.isalnum())
        if isinstance(handler, str):
            descriptor = "".join(ch for ch in handler if ch.isalnum() or ch in "-_>#:.@")
            return self.set_attribute("data-action", f"{event_name}->{descriptor}")

        context = getattr(self, "owning_context", None)
        owner = context.owner if context is not None else None
        if owner is None:
            logger.warning("event_handler_without_component", tag=self.tag, event_name=event_name)
            return self

        action_id = owner.register_action(handler)
        self.set_attribute("data-action", f"{event_name}->swift-ui#handleAction")
        return self.set_attribute("data-action-id", action_id)

    def on_click(self, handler: Callable[..., Any] | str) -> Any:
        return self.on("click", handler)

    def on_change(self, handler: Callable[..., Any] | str) -> Any:
        return self.on("change", handler)

    def on_submit(self, handler: Callable[..., Any] | str) -> Any:
        return self.on("submit", handler)
