"""Card, badge, alert and other composite containers."""

from typing import Any

from ..element import Element, Markup
from ..styles import class_names, safe_class, spacing_from_pixels

ELEVATION_SHADOWS = {0: "", 1: "shadow", 2: "shadow-md", 3: "shadow-lg", 4: "shadow-xl"}

ALERT_STYLES = {
    "info": "bg-blue-50 text-blue-800 border-blue-200",
    "success": "bg-green-50 text-green-800 border-green-200",
    "warning": "bg-yellow-50 text-yellow-800 border-yellow-200",
    "error": "bg-red-50 text-red-800 border-red-200",
}

BADGE_STYLES = {
    "gray": "bg-gray-100 text-gray-800",
    "blue": "bg-blue-100 text-blue-800",
    "green": "bg-green-100 text-green-800",
    "red": "bg-red-100 text-red-800",
    "yellow": "bg-yellow-100 text-yellow-800",
}


def elevation_shadow(elevation: Any) -> str:
    """Shadow class for a card elevation level."""
    try:
        level = int(elevation)
    except (TypeError, ValueError):
        level = 1
    if level <= 0:
        return ""
    return ELEVATION_SHADOWS.get(level, "shadow-2xl")


class ContainerBuilders:
    """Composite containers built from the primitives."""

    def _section(self, value: Any, classes: str) -> Element:
        """One card section holding a block, an element, markup or text."""
        if isinstance(value, Element):
            return self.create_element("div", None, {"class": classes}, lambda: value)
        if callable(value):
            return self.create_element("div", None, {"class": classes}, value)
        content = value if isinstance(value, Markup) else str(value)
        return self.create_element("div", content, {"class": classes})

    def card(
        self,
        block: Any = None,
        *,
        elevation: int = 1,
        padding: int | None = None,
        header: Any = None,
        content: Any = None,
        actions: Any = None,
        **attrs: Any,
    ) -> Element:
        """
        Rounded white surface with an elevation shadow.

        Args:
            block: Body builder
            elevation: 0 (flat) to 5+ (``shadow-2xl``)
            padding: Inner padding in pixels
            header: Header section (block, element, markup or text)
            content: Content section
            actions: Footer actions section

        Returns:
            The card element
        """
        sections = [
            (value, classes)
            for value, classes in ((header, "p-4 border-b"), (content, "p-4"), (actions, "p-4 border-t"))
            if value is not None
        ]
        for value, _ in sections:
            if isinstance(value, Element):
                self.claim(value)

        classes = class_names(
            "rounded-lg bg-white",
            elevation_shadow(elevation),
            safe_class("p", spacing_from_pixels(padding)) if padding is not None else None,
        )
        card = self.create_element("div", None, {"class": classes}, **attrs)

        if sections:
            with self.nest(card):
                for value, section_classes in sections:
                    self._section(value, section_classes)
        if block is not None:
            self.build(card, block)
        return card

    def card_header(self, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("div", None, {"class": "p-4 border-b"}, block, **attrs)

    def card_content(self, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("div", None, {"class": "p-4"}, block, **attrs)

    def card_footer(self, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("div", None, {"class": "p-4 border-t"}, block, **attrs)

    def badge(self, text: Any, *, color: str = "gray", **attrs: Any) -> Element:
        classes = class_names(
            "inline-flex items-center rounded-full px-2.5 py-0.5 text-xs font-medium",
            BADGE_STYLES.get(color, BADGE_STYLES["gray"]),
        )
        return self.create_element("span", text, {"class": classes}, **attrs)

    def alert(self, message: Any = None, block: Any = None, *, kind: str = "info", **attrs: Any) -> Element:
        if callable(message) and block is None:
            message, block = None, message
        classes = class_names("rounded-md border p-4", ALERT_STYLES.get(kind, ALERT_STYLES["info"]))
        return self.create_element("div", message, {"class": classes, "role": "alert"}, block, **attrs)

    def progress(self, value: float, total: float = 100, **attrs: Any) -> Element:
        """Progress bar; the filled width is clamped to 0-100%."""
        percent = 0 if total <= 0 else max(0, min(100, round(value / total * 100)))

        def bar() -> None:
            self.create_element("div", None, {"class": "h-2 rounded-full bg-blue-600", "style": f"width: {percent}%"})

        attributes = {
            "class": "w-full h-2 rounded-full bg-gray-200",
            "role": "progressbar",
            "aria-valuenow": percent,
            "aria-valuemin": 0,
            "aria-valuemax": 100,
        }
        return self.create_element("div", None, attributes, bar, **attrs)

    def modal(self, block: Any = None, *, is_open: bool = False, title: str | None = None, **attrs: Any) -> Element:
        """Dialog overlay; hidden unless ``is_open``."""
        overlay_classes = class_names("fixed inset-0 z-50 flex items-center justify-center bg-black/50", None if is_open else "hidden")

        def dialog() -> None:
            def body() -> Any:
                if title is not None:
                    self.create_element("h2", title, {"class": "text-lg font-semibold mb-4"})
                return block() if block is not None else None

            self.create_element("div", None, {"class": "rounded-lg bg-white p-6 shadow-xl max-w-lg w-full"}, body)

        attributes = {"class": overlay_classes, "role": "dialog", "aria-modal": "true"}
        return self.create_element("div", None, attributes, dialog, **attrs)
