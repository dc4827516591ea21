"""Layout builders: stacks, grids, spacers, scroll views."""

from typing import Any, Mapping

from core.logging_config import get_logger

from ..element import Element
from ..styles import class_names, safe_class, safe_grid_cols_class, spacing_from_pixels

logger = get_logger(__name__)

STACK_ALIGNMENTS = {
    "top": "start",
    "leading": "start",
    "start": "start",
    "center": "center",
    "bottom": "end",
    "trailing": "end",
    "end": "end",
}

GRID_LADDER = {
    1: "grid-cols-1",
    2: "grid-cols-1 sm:grid-cols-2",
    3: "grid-cols-1 sm:grid-cols-2 lg:grid-cols-3",
    4: "grid-cols-1 sm:grid-cols-2 lg:grid-cols-3 xl:grid-cols-4",
    5: "grid-cols-1 sm:grid-cols-2 md:grid-cols-3 lg:grid-cols-4 xl:grid-cols-5",
    6: "grid-cols-2 sm:grid-cols-3 lg:grid-cols-4 xl:grid-cols-6",
}
BREAKPOINTS = ("base", "sm", "md", "lg", "xl", "2xl")

GRID_ALIGN = {"start": "items-start", "center": "items-center", "end": "items-end", "stretch": "items-stretch"}
GRID_JUSTIFY = {
    "start": "justify-start",
    "center": "justify-center",
    "end": "justify-end",
    "between": "justify-between",
    "around": "justify-around",
    "evenly": "justify-evenly",
}
GRID_AUTO_ROWS = {"min": "auto-rows-min", "max": "auto-rows-max", "fr": "auto-rows-fr", "auto": "auto-rows-auto"}
GRID_AUTO_FLOW = {
    "row": "grid-flow-row",
    "column": "grid-flow-col",
    "dense": "grid-flow-dense",
    "row_dense": "grid-flow-row-dense",
    "column_dense": "grid-flow-col-dense",
}


def stack_alignment(alignment: Any) -> str:
    """Map a stack alignment name to its flex ``items-*`` value."""
    return STACK_ALIGNMENTS.get(str(alignment).lower(), "center")


def _is_positive(value: Any) -> bool:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value > 0
    return value not in (None, "", "0", False)


def grid_columns_class(columns: Any, min_item_width: Any = None) -> str:
    """
    Column classes for a grid.

    ``min_item_width`` wins over ``columns``; a mapping is applied per
    breakpoint; an integer follows the responsive ladder.
    """
    if min_item_width is not None:
        try:
            width = int(min_item_width)
        except (TypeError, ValueError):
            logger.warning("invalid_min_item_width", value=str(min_item_width))
        else:
            if width > 0:
                return f"grid-cols-[repeat(auto-fit,minmax({width}px,1fr))]"

    if isinstance(columns, Mapping):
        parts = []
        for breakpoint, count in columns.items():
            name = str(breakpoint)
            if name not in BREAKPOINTS:
                logger.warning("unknown_breakpoint_dropped", breakpoint=name)
                continue
            cols = safe_grid_cols_class(count)
            parts.append(cols if name == "base" else f"{name}:{cols}")
        return " ".join(parts) or "grid-cols-1"

    if isinstance(columns, int) and not isinstance(columns, bool) and columns in GRID_LADDER:
        return GRID_LADDER[columns]
    return safe_grid_cols_class(columns)


class LayoutBuilders:
    """Stack, grid and spacing primitives."""

    def vstack(
        self,
        block: Any = None,
        *,
        spacing: Any = 8,
        alignment: str = "center",
        **attrs: Any,
    ) -> Element:
        """Vertical flex column; children separated by ``space-y-{spacing}``."""
        classes = ["flex", "flex-col", f"items-{stack_alignment(alignment)}"]
        if _is_positive(spacing):
            classes.append(safe_class("space-y", spacing))
        return self.create_element("div", None, {"class": " ".join(classes)}, block, **attrs)

    def hstack(
        self,
        block: Any = None,
        *,
        spacing: Any = 8,
        alignment: str = "center",
        **attrs: Any,
    ) -> Element:
        """Horizontal flex row; children separated by ``space-x-{spacing}``."""
        classes = ["flex", "flex-row", f"items-{stack_alignment(alignment)}"]
        if _is_positive(spacing):
            classes.append(safe_class("space-x", spacing))
        return self.create_element("div", None, {"class": " ".join(classes)}, block, **attrs)

    def zstack(self, block: Any = None, **attrs: Any) -> Element:
        """Overlay container; children position themselves absolutely."""
        return self.create_element("div", None, {"class": "relative"}, block, **attrs)

    def grid(
        self,
        block: Any = None,
        *,
        columns: Any = 2,
        spacing: Any = 8,
        row_spacing: Any = None,
        column_spacing: Any = None,
        min_item_width: Any = None,
        align: str | None = "stretch",
        justify: str | None = "start",
        auto_rows: Any = None,
        auto_flow: str | None = None,
        masonry: bool = False,
        **attrs: Any,
    ) -> Element:
        """
        CSS grid container.

        Args:
            block: Children builder
            columns: Count (responsive ladder) or mapping of breakpoint to count
            spacing: Gap step used for both axes unless overridden
            row_spacing: Row gap step
            column_spacing: Column gap step
            min_item_width: Minimum item width in pixels (auto-fit columns)
            align: Item alignment (start, center, end, stretch)
            justify: Content justification (start, center, end, between, ...)
            auto_rows: min, max, fr, auto, or a pixel height
            auto_flow: row, column, dense, row_dense, column_dense
            masonry: Mark the grid for masonry layout

        Returns:
            The grid element
        """
        classes = ["grid", grid_columns_class(columns, min_item_width)]

        row_gap = spacing if row_spacing is None else row_spacing
        column_gap = spacing if column_spacing is None else column_spacing
        if row_gap == column_gap:
            classes.append(safe_class("gap", row_gap))
        else:
            if _is_positive(column_gap):
                classes.append(safe_class("gap-x", column_gap))
            if _is_positive(row_gap):
                classes.append(safe_class("gap-y", row_gap))

        if align and str(align) in GRID_ALIGN:
            classes.append(GRID_ALIGN[str(align)])
        if justify and str(justify) in GRID_JUSTIFY:
            classes.append(GRID_JUSTIFY[str(justify)])

        if auto_rows is not None:
            if str(auto_rows) in GRID_AUTO_ROWS:
                classes.append(GRID_AUTO_ROWS[str(auto_rows)])
            elif isinstance(auto_rows, int) and not isinstance(auto_rows, bool) and auto_rows > 0:
                classes.append(f"auto-rows-[{auto_rows}px]")

        if auto_flow and str(auto_flow) in GRID_AUTO_FLOW:
            classes.append(GRID_AUTO_FLOW[str(auto_flow)])

        if masonry:
            classes.append("masonry-grid")
            attrs.setdefault("data_masonry", "true")

        return self.create_element("div", None, {"class": " ".join(classes)}, block, **attrs)

    def lazy_vgrid(self, block: Any = None, *, columns: Any = 2, spacing: Any = 8, **attrs: Any) -> Element:
        """Row-flowing grid, the vertical counterpart of ``lazy_hgrid``."""
        return self.grid(block, columns=columns, spacing=spacing, auto_flow="row", **attrs)

    def lazy_hgrid(self, block: Any = None, *, rows: int = 2, spacing: Any = 8, **attrs: Any) -> Element:
        """Column-flowing grid with a fixed row count."""
        row_count = rows if isinstance(rows, int) and 1 <= rows <= 6 else 1
        classes = class_names("grid grid-flow-col", f"grid-rows-{row_count}", safe_class("gap", spacing))
        return self.create_element("div", None, {"class": classes}, block, **attrs)

    def grid_item(self, block: Any = None, *, span: Any = None, row_span: Any = None, **attrs: Any) -> Element:
        element = self.create_element("div", None, None, block, **attrs)
        if span is not None:
            element.col_span(span)
        if row_span is not None:
            element.row_span(row_span)
        return element

    def scroll_view(self, block: Any = None, *, axis: str = "vertical", **attrs: Any) -> Element:
        overflow = {"vertical": "overflow-y-auto", "horizontal": "overflow-x-auto"}.get(axis, "overflow-auto")
        return self.create_element("div", None, {"class": overflow}, block, **attrs)

    def spacer(self, min_length: int | None = None, **attrs: Any) -> Element:
        """Flexible space filling the remaining room in a stack."""
        attributes: dict[str, Any] = {"class": "flex-1"}
        if min_length is not None:
            attributes["style"] = f"min-height: {int(min_length)}px"
        return self.create_element("div", None, attributes, **attrs)

    def divider(self, **attrs: Any) -> Element:
        return self.create_element("hr", None, {"class": "border-t border-gray-300"}, **attrs)

    def padded(self, block: Any = None, *, pixels: int = 16, **attrs: Any) -> Element:
        """Container padded by a pixel amount converted to the spacing scale."""
        padding = safe_class("p", spacing_from_pixels(pixels))
        return self.create_element("div", None, {"class": padding}, block, **attrs)
