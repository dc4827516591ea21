"""Form control builders."""

from typing import Any

from ..element import Element
from ..sanitize import validate_link_href

INPUT_CLASSES = "block w-full rounded-md border border-gray-300 px-3 py-2"
INPUT_TYPES = ("text", "email", "password", "number", "search", "tel", "url", "date", "time", "hidden")
FORM_METHODS = ("get", "post")


class FormBuilders:
    """Builders for forms, buttons and inputs."""

    def form(self, block: Any = None, *, action: str = "#", method: str = "post", **attrs: Any) -> Element:
        """Form whose ``action`` is validated like a link target."""
        verb = str(method).lower()
        attributes = {
            "action": validate_link_href(action),
            "method": verb if verb in FORM_METHODS else "post",
        }
        return self.create_element("form", None, attributes, block, **attrs)

    def button(self, title: Any = None, block: Any = None, *, type: str = "button", **attrs: Any) -> Element:
        if callable(title) and block is None:
            title, block = None, title
        kind = type if type in ("button", "submit", "reset") else "button"
        return self.create_element("button", title, {"type": kind}, block, **attrs)

    def textfield(
        self,
        name: str,
        value: Any = "",
        *,
        placeholder: str = "",
        type: str = "text",
        **attrs: Any,
    ) -> Element:
        attributes = {
            "type": type if type in INPUT_TYPES else "text",
            "name": name,
            "value": "" if value is None else value,
            "placeholder": placeholder or None,
            "class": INPUT_CLASSES,
        }
        return self.create_element("input", None, attributes, **attrs)

    def secure_field(self, name: str, *, placeholder: str = "", **attrs: Any) -> Element:
        return self.textfield(name, "", placeholder=placeholder, type="password", **attrs)

    def textarea(self, name: str, value: Any = "", *, rows: int = 3, placeholder: str = "", **attrs: Any) -> Element:
        attributes = {"name": name, "rows": int(rows), "placeholder": placeholder or None, "class": INPUT_CLASSES}
        return self.create_element("textarea", "" if value is None else value, attributes, **attrs)

    def toggle(self, name: str, is_on: bool = False, *, label: str | None = None, **attrs: Any) -> Element:
        """Switch-styled checkbox, optionally wrapped in a label."""
        attributes = {"type": "checkbox", "name": name, "role": "switch", "checked": bool(is_on), "class": "sr-only peer"}
        if label is None:
            return self.create_element("input", None, attributes, **attrs)

        def contents() -> None:
            self.create_element("input", None, attributes, **attrs)
            self.create_element("span", label, {"class": "ml-2"})

        return self.create_element("label", None, {"class": "inline-flex items-center cursor-pointer"}, contents)

    def checkbox(self, name: str, checked: bool = False, *, value: Any = "1", **attrs: Any) -> Element:
        attributes = {"type": "checkbox", "name": name, "value": value, "checked": bool(checked)}
        return self.create_element("input", None, attributes, **attrs)

    def radio(self, name: str, value: Any, *, checked: bool = False, **attrs: Any) -> Element:
        attributes = {"type": "radio", "name": name, "value": value, "checked": bool(checked)}
        return self.create_element("input", None, attributes, **attrs)

    def slider(
        self,
        name: str,
        value: float = 50,
        *,
        min: float = 0,
        max: float = 100,
        step: float = 1,
        **attrs: Any,
    ) -> Element:
        """Range input; ``value`` is clamped into ``[min, max]``."""
        if min > max:
            min, max = max, min
        clamped = value if min <= value <= max else (min if value < min else max)
        attributes = {"type": "range", "name": name, "value": clamped, "min": min, "max": max, "step": step, "class": "w-full"}
        return self.create_element("input", None, attributes, **attrs)

    def select(self, name: str, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("select", None, {"name": name, "class": INPUT_CLASSES}, block, **attrs)

    def option(self, value: Any, text: Any = None, *, selected: bool = False, **attrs: Any) -> Element:
        content = value if text is None else text
        return self.create_element("option", content, {"value": value, "selected": bool(selected)}, **attrs)
