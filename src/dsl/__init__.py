"""Declarative HTML element DSL."""

from .element import Element, Markup, RawContent, escape, join_markup, raw
from .context import Collector, DSLContext, ElementFactory, render_block
from .builder import Builder, builder
from .modifiers import StyleModifiers
from .styles import (
    class_names,
    is_safe_css_class,
    safe_class,
    sanitize_css_value,
    spacing_from_pixels,
)
from .sanitize import validate_image_src, validate_link_href, validate_url

__all__ = [
    # Tree
    "Element",
    "Markup",
    "RawContent",
    "escape",
    "join_markup",
    "raw",
    # Registration
    "Collector",
    "DSLContext",
    "ElementFactory",
    "render_block",
    # Builders
    "Builder",
    "builder",
    "StyleModifiers",
    # Sanitisation
    "class_names",
    "is_safe_css_class",
    "safe_class",
    "sanitize_css_value",
    "spacing_from_pixels",
    "validate_image_src",
    "validate_link_href",
    "validate_url",
]
