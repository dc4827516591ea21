"""Safe utility-class construction.

Every value that ends up in a generated ``class`` attribute passes through
here. Functions never raise on bad input: unknown or malformed values fall
back to a fixed, known-good class so user data can never inject markup or
arbitrary CSS.
"""

import re
from typing import Any

from core.logging_config import get_logger

logger = get_logger(__name__)

# ============================================================================
# Allowed Values
# ============================================================================

VALID_COLORS = frozenset(
    """
    white black red blue green yellow gray purple pink orange indigo
    slate zinc neutral stone amber teal cyan sky violet fuchsia rose
    emerald lime transparent current inherit
    """.split()
)
UNSHADED_COLORS = frozenset({"white", "black", "transparent", "current", "inherit"})

VALID_SHADES = ("50", "100", "200", "300", "400", "500", "600", "700", "800", "900", "950")

VALID_SPACING = (
    "0 px 0.5 1 1.5 2 2.5 3 3.5 4 5 6 7 8 9 10 11 12 "
    "14 16 20 24 28 32 36 40 44 48 52 56 60 64 72 80 96 "
    "auto full 1/2 1/3 2/3 1/4 2/4 3/4"
).split()

SPACING_PREFIXES = frozenset(
    """
    p px py pt pb pl pr m mx my mt mb ml mr
    space-x space-y gap gap-x gap-y
    w h min-w min-h max-h inset top bottom left right
    """.split()
)
MARGIN_PREFIXES = frozenset({"m", "mx", "my", "mt", "mb", "ml", "mr"})

VALID_MAX_WIDTHS = (
    "none xs sm md lg xl 2xl 3xl 4xl 5xl 6xl 7xl full min max fit prose "
    "screen-sm screen-md screen-lg screen-xl screen-2xl"
).split()

VALID_ASPECTS = ("auto", "square", "video", "wide", "1/1", "3/2", "4/3", "5/4", "16/9", "16/10", "21/9")
VALID_GRID_COLS = tuple(str(n) for n in range(1, 13)) + ("none", "subgrid")
VALID_SHADOWS = ("none", "sm", "md", "lg", "xl", "2xl", "inner")
VALID_ROUNDED = ("none", "sm", "md", "lg", "xl", "2xl", "3xl", "full")
VALID_TEXT_SIZES = ("xs", "sm", "base", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "8xl", "9xl")
VALID_FONT_WEIGHTS = (
    "thin", "extralight", "light", "normal", "medium", "semibold", "bold", "extrabold", "black",
)
VALID_TRANSITIONS = ("none", "all", "colors", "opacity", "shadow", "transform")
VALID_DURATIONS = ("75", "100", "150", "200", "300", "500", "700", "1000")
VALID_SCALES = ("0", "50", "75", "90", "95", "100", "105", "110", "125", "150")
VALID_OPACITIES = ("0", "5", "10", "20", "25", "30", "40", "50", "60", "70", "75", "80", "90", "95", "100")
VALID_Z_INDEX = ("0", "10", "20", "30", "40", "50", "auto")
VALID_BORDER_WIDTHS = ("0", "2", "4", "8")

# Tailwind token: optional variant prefixes ("hover:", "md:"), then an
# identifier that may carry fractions, decimals or an arbitrary value.
CSS_IDENTIFIER = re.compile(r"^(?:[a-z0-9-]+:)*-?[a-zA-Z0-9_\-/.]+(?:\[[a-zA-Z0-9_\-/.,()%#]+\])?$")

PIXEL_TO_SPACING = {
    0: "0", 1: "px", 2: "0.5", 4: "1", 6: "1.5", 8: "2", 10: "2.5", 12: "3",
    14: "3.5", 16: "4", 20: "5", 24: "6", 28: "7", 32: "8", 36: "9", 40: "10",
    44: "11", 48: "12", 56: "14", 64: "16", 80: "20", 96: "24", 112: "28",
    128: "32", 144: "36", 160: "40", 176: "44", 192: "48", 208: "52",
    224: "56", 240: "60", 256: "64", 288: "72", 320: "80", 384: "96",
}

_DANGEROUS_CSS = re.compile(r"expression\s*\(|javascript:|url\s*\(|@import|behavior\s*:", re.IGNORECASE)


# ============================================================================
# Helpers
# ============================================================================


def _token(value: Any) -> str:
    """Normalize a raw value to the string form used in class names."""
    if isinstance(value, bool):
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip().lower()


def is_safe_css_class(token: Any) -> bool:
    """Check a single class token is a plain utility identifier."""
    if not isinstance(token, str) or not token:
        return False
    return bool(CSS_IDENTIFIER.match(token))


# ============================================================================
# Category Validators
# ============================================================================


def safe_color_class(prefix: str, color: Any, shade: Any = None) -> str:
    """Build ``bg-*``/``text-*``/``border-*`` color classes.

    Args:
        prefix: Utility prefix (bg, text, border, ring)
        color: Color name, optionally with a shade ("blue-600")
        shade: Explicit shade, overrides one embedded in ``color``

    Returns:
        Valid color class; ``bg-gray-500``-style fallback otherwise
    """
    default_shade = "900" if prefix == "text" else "500"
    fallback = f"{prefix}-gray-{default_shade}"

    name = _token(color)
    if not name:
        return fallback
    if "-" in name and shade is None:
        name, _, shade = name.rpartition("-")

    if name not in VALID_COLORS:
        logger.warning("unsafe_color_rejected", prefix=prefix, value=str(color))
        return fallback
    if name in UNSHADED_COLORS:
        return f"{prefix}-{name}"

    shade_str = _token(shade) if shade is not None else default_shade
    if shade_str not in VALID_SHADES:
        shade_str = default_shade
    return f"{prefix}-{name}-{shade_str}"


def safe_bg_class(color: Any, shade: Any = None) -> str:
    """Background color class, falling back to ``bg-gray-500``."""
    return safe_color_class("bg", color, shade)


def safe_text_class(color: Any, shade: Any = None) -> str:
    """Text color class, falling back to ``text-gray-900``."""
    return safe_color_class("text", color, shade)


def safe_spacing_class(prefix: str, value: Any) -> str:
    """
    Build a spacing class on the fixed step scale.

    Args:
        prefix: One of SPACING_PREFIXES (p, mx, space-y, gap, ...)
        value: Step value ("4", 4, "1/2", "auto")

    Returns:
        ``{prefix}-{value}`` with ``/`` kept for fractions, or ``{prefix}-0``
    """
    if prefix not in SPACING_PREFIXES:
        logger.warning("unknown_spacing_prefix", prefix=prefix)
        return "p-0"

    step = _token(value)
    if step.startswith("-") and step[1:] in VALID_SPACING and prefix in MARGIN_PREFIXES:
        return f"-{prefix}-{step[1:]}"
    if step not in VALID_SPACING:
        logger.warning("unsafe_spacing_rejected", prefix=prefix, value=str(value))
        return f"{prefix}-0"
    return f"{prefix}-{step}"


def safe_grid_cols_class(columns: Any) -> str:
    """Grid column class, falling back to ``grid-cols-1``."""
    value = _token(columns)
    return f"grid-cols-{value}" if value in VALID_GRID_COLS else "grid-cols-1"


def safe_shadow_class(size: Any) -> str:
    """Shadow class, falling back to ``shadow``."""
    value = _token(size)
    if value in ("", "default", "base"):
        return "shadow"
    return f"shadow-{value}" if value in VALID_SHADOWS else "shadow"


def safe_rounded_class(size: Any) -> str:
    """Border radius class, falling back to ``rounded``."""
    value = _token(size)
    if value in ("", "default", "base"):
        return "rounded"
    return f"rounded-{value}" if value in VALID_ROUNDED else "rounded"


def safe_text_size_class(size: Any) -> str:
    """Font size class, falling back to ``text-base``."""
    value = _token(size)
    return f"text-{value}" if value in VALID_TEXT_SIZES else "text-base"


def safe_font_weight_class(weight: Any) -> str:
    """Font weight class, falling back to ``font-normal``."""
    value = _token(weight)
    return f"font-{value}" if value in VALID_FONT_WEIGHTS else "font-normal"


def safe_aspect_class(ratio: Any) -> str:
    """Aspect ratio class, falling back to ``aspect-square``."""
    value = _token(ratio)
    if value in ("auto", "square", "video"):
        return f"aspect-{value}"
    if value in VALID_ASPECTS:
        return f"aspect-[{value}]"
    return "aspect-square"


def safe_max_width_class(size: Any) -> str:
    """Max width class, falling back to ``max-w-full``."""
    value = _token(size)
    return f"max-w-{value}" if value in VALID_MAX_WIDTHS else "max-w-full"


def _choice(prefix: str, allowed: tuple[str, ...], fallback: str):
    def validate(value: Any) -> str:
        token = _token(value)
        return f"{prefix}-{token}" if token in allowed else fallback

    return validate


_CATEGORIES = {
    "bg": safe_bg_class,
    "text": safe_text_class,
    "border-color": lambda v: safe_color_class("border", v),
    "ring-color": lambda v: safe_color_class("ring", v),
    "grid-cols": safe_grid_cols_class,
    "shadow": safe_shadow_class,
    "rounded": safe_rounded_class,
    "text-size": safe_text_size_class,
    "font-weight": safe_font_weight_class,
    "aspect": safe_aspect_class,
    "max-w": safe_max_width_class,
    "transition": _choice("transition", VALID_TRANSITIONS, "transition"),
    "duration": _choice("duration", VALID_DURATIONS, "duration-300"),
    "scale": _choice("scale", VALID_SCALES, "scale-100"),
    "opacity": _choice("opacity", VALID_OPACITIES, "opacity-100"),
    "z": _choice("z", VALID_Z_INDEX, "z-0"),
    "border": _choice("border", VALID_BORDER_WIDTHS, "border"),
}


def safe_class(category: str, value: Any) -> str:
    """
    Map a style category and raw value to a class usable verbatim in markup.

    Args:
        category: Style category ("bg", "p", "grid-cols", "shadow", ...)
        value: Raw, possibly user-supplied value

    Returns:
        Validated class string; a safe default on any invalid input
    """
    if category in SPACING_PREFIXES:
        return safe_spacing_class(category, value)
    validator = _CATEGORIES.get(category)
    if validator is None:
        logger.warning("unknown_style_category", category=category)
        return ""
    return validator(value)


# ============================================================================
# Spacing Conversion
# ============================================================================


def spacing_from_pixels(value: Any) -> str:
    """
    Convert a pixel measurement to the nearest spacing step.

    Args:
        value: Pixel count (numbers) or an already-converted step (strings)

    Returns:
        Spacing step string ("4" for 16px)
    """
    if isinstance(value, str):
        return value
    pixels = int(value)
    if pixels in PIXEL_TO_SPACING:
        return PIXEL_TO_SPACING[pixels]
    units = round(pixels / 4.0, 1)
    return str(int(units)) if units.is_integer() else str(units)


def sanitize_css_value(value: Any) -> str:
    """Strip constructs that could escape an inline ``style`` declaration."""
    text = str(value)
    text = _DANGEROUS_CSS.sub("", text)
    return re.sub(r"[<>\"';{}\\]", "", text).strip()


def class_names(*parts: Any) -> str:
    """Join class fragments, skipping empty ones and de-duplicating tokens."""
    seen: dict[str, None] = {}
    for part in parts:
        if not part:
            continue
        for token in str(part).split():
            seen.setdefault(token, None)
    return " ".join(seen)


__all__ = [
    "VALID_COLORS",
    "VALID_SPACING",
    "is_safe_css_class",
    "safe_class",
    "safe_color_class",
    "safe_bg_class",
    "safe_text_class",
    "safe_spacing_class",
    "safe_grid_cols_class",
    "safe_shadow_class",
    "safe_rounded_class",
    "safe_text_size_class",
    "safe_font_weight_class",
    "safe_aspect_class",
    "safe_max_width_class",
    "spacing_from_pixels",
    "sanitize_css_value",
    "class_names",
]
