"""Table tags, simple tables, data tables and pagination controls."""

import math
from datetime import date, datetime
from typing import Any, Callable, Iterable, Literal, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

from core.logging_config import get_logger

from ..element import Element
from ..styles import class_names

logger = get_logger(__name__)

HEADER_CELL_CLASSES = "px-6 py-3 text-left text-xs font-medium text-gray-500 uppercase tracking-wider"
BODY_CELL_CLASSES = "px-6 py-4 whitespace-nowrap"
PAGE_BUTTON_CLASSES = "px-3 py-1 border rounded-md text-sm"
CURRENT_PAGE_CLASSES = "px-3 py-1 rounded-md text-sm bg-blue-600 text-white"

STATUS_BADGES = {
    "Active": "bg-green-100 text-green-800",
    "Inactive": "bg-gray-100 text-gray-800",
    "Pending": "bg-yellow-100 text-yellow-800",
    "Error": "bg-red-100 text-red-800",
}

ROW_ACTIONS = {
    "edit": ("Edit", "text-indigo-600 hover:text-indigo-900"),
    "delete": ("Delete", "text-red-600 hover:text-red-900"),
    "view": ("View", "text-gray-600 hover:text-gray-900"),
}

# Page number buttons are only listed up to this many pages
MAX_LISTED_PAGES = 5

CellFormat = Literal["text", "badge", "avatar", "currency", "date", "actions", "custom"]


class Column(BaseModel):
    """One data table column: where its value comes from and how the cell renders."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: Any = None
    label: str = ""
    format: CellFormat = "text"
    sortable: bool = False
    header_class: str = HEADER_CELL_CLASSES
    cell_class: str = BODY_CELL_CLASSES
    badge_map: dict[str, str] | None = None
    currency: str = "$"
    date_format: str | None = None
    actions: tuple[Any, ...] = ()
    render: Callable[..., Any] | None = None

    @property
    def heading(self) -> str:
        if self.label:
            return self.label
        return str(self.key).replace("_", " ").title() if isinstance(self.key, str) else ""


def _lookup(row: Any, key: Any) -> Any:
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, str(key), None)


def column_value(row: Any, key: Any) -> Any:
    """
    Read a cell value from a row.

    ``key`` is a mapping key or attribute name, a list/tuple path through
    nested rows, or a callable over the row.
    """
    if callable(key):
        return key(row)
    if isinstance(key, (list, tuple)):
        value = row
        for part in key:
            if value is None:
                return None
            value = _lookup(value, part)
        return value
    return _lookup(row, key)


def format_currency(value: Any, symbol: str = "$") -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{symbol}{value:,.2f}"
    return f"{symbol}{value}"


def format_date(value: Any, fmt: str | None = None) -> str:
    """Format a date, datetime or ISO string; anything unparseable is shown as is."""
    if value is None or value == "":
        return ""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, (date, datetime)):
        return value.strftime(fmt or "%b %d, %Y")
    return str(value)


def initials(name: Any) -> str:
    return "".join(part[0] for part in str(name or "").split()).upper()


class TableBuilders:
    """Table markup from raw tags up to a paginated data table."""

    # ==================================================================
    # Tags
    # ==================================================================

    def table(self, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("table", None, None, block, **attrs)

    def thead(self, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("thead", None, None, block, **attrs)

    def tbody(self, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("tbody", None, None, block, **attrs)

    def tr(self, block: Any = None, **attrs: Any) -> Element:
        return self.create_element("tr", None, None, block, **attrs)

    def th(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("th", content, block, **attrs)

    def td(self, content: Any = None, block: Any = None, **attrs: Any) -> Element:
        return self._tag("td", content, block, **attrs)

    # ==================================================================
    # Tables
    # ==================================================================

    def simple_table(
        self,
        headers: Sequence[Any],
        rows: Iterable[Sequence[Any]],
        *,
        table_class: str = "min-w-full",
        **attrs: Any,
    ) -> Element:
        """Plain table of escaped values; the header row is omitted when ``headers`` is empty."""
        rows = list(rows)

        def head() -> None:
            self.tr(lambda: [self.th(header, class_="px-4 py-2 text-left") for header in headers])

        def body() -> None:
            for row in rows:
                self.tr(lambda row=row: [self.td(cell, class_="px-4 py-2") for cell in row], class_="border-t")

        def contents() -> None:
            if headers:
                self.thead(head)
            self.tbody(body)

        return self.div(
            lambda: self.div(lambda: self.table(contents, class_=table_class), class_="overflow-x-auto"),
            **attrs,
        )

    def data_table(
        self,
        data: Iterable[Any],
        columns: Iterable[Column | Mapping[str, Any]],
        *,
        title: str | None = None,
        add_button: Mapping[str, Any] | None = None,
        search: Mapping[str, Any] | None = None,
        sortable: bool = True,
        paginate: bool = False,
        per_page: int = 10,
        current_page: int = 1,
        total_count: int | None = None,
        empty_message: str = "No data available",
        elevation: int = 2,
        table_class: str = "min-w-full divide-y divide-gray-200",
        **attrs: Any,
    ) -> Element:
        """
        Card holding a formatted table with optional title bar, search and pagination.

        Args:
            data: Rows (mappings or objects)
            columns: ``Column`` models or mappings of their fields
            title: Heading shown in the title bar
            add_button: ``{"text": ..., "destination": ...}`` link in the title bar
            search: ``{"name", "value", "placeholder"}`` for a search field
            sortable: Whether columns marked sortable get a sort control
            paginate: Show pagination below a non-empty table
            total_count: Rows across all pages; defaults to ``len(data)``

        Returns:
            The outer container element
        """
        rows = list(data)
        specs = [column if isinstance(column, Column) else Column.model_validate(column) for column in columns]

        def title_bar() -> None:
            def bar() -> None:
                if title:
                    self.h2(title, class_="text-xl font-semibold text-gray-900")
                else:
                    self.div()
                if add_button:
                    label = add_button.get("text", "Add")
                    self.link(
                        label,
                        add_button.get("destination", "#"),
                        class_="rounded-md bg-blue-600 px-4 py-2 font-medium text-white hover:bg-blue-700",
                    )

            self.div(lambda: self.hstack(bar, class_="justify-between"), class_="px-6 py-4 border-b")

        def search_bar() -> None:
            self.div(
                lambda: self.textfield(
                    search.get("name", "search"),
                    search.get("value", ""),
                    placeholder=search.get("placeholder", "Search..."),
                ),
                class_="px-6 py-4 border-b",
            )

        def header_cell(column: Column) -> Element:
            if not (sortable and column.sortable):
                return self.th(column.heading, class_=column.header_class)

            def control() -> Element:
                return self.button(
                    lambda: [self.text(column.heading), self.span("↕", class_="ml-2 text-gray-400")],
                    class_="group inline-flex items-center",
                    data={"sort": column.key if isinstance(column.key, str) else None},
                )

            return self.th(control, class_=column.header_class)

        def grid() -> None:
            self.thead(lambda: self.tr(lambda: [header_cell(column) for column in specs]), class_="bg-gray-50 border-b")

            def body() -> None:
                for row in rows:
                    self.tr(
                        lambda row=row: [
                            self.td(lambda column=column: self._table_cell(row, column), class_=column.cell_class)
                            for column in specs
                        ],
                        class_="hover:bg-gray-50",
                    )

            self.tbody(body, class_="bg-white divide-y divide-gray-200")

        def scroller() -> None:
            if not rows:
                self.div(lambda: self.text(empty_message, class_="text-gray-500"), class_="text-center py-12")
            else:
                self.table(grid, class_=table_class)

        def contents() -> None:
            if title or add_button:
                title_bar()
            if search:
                search_bar()
            self.div(scroller, class_="overflow-x-auto")
            if paginate and rows:
                self.pagination(
                    current_page,
                    len(rows) if total_count is None else total_count,
                    per_page=per_page,
                )

        return self.div(lambda: self.card(contents, elevation=elevation), **attrs)

    def _table_cell(self, row: Any, column: Column) -> Any:
        value = column_value(row, column.key)
        kind = column.format
        if kind == "badge":
            return self.status_badge(value, column.badge_map)
        if kind == "avatar":
            return self._avatar(value)
        if kind == "currency":
            return self.text(format_currency(value, column.currency))
        if kind == "date":
            return self.text(format_date(value, column.date_format))
        if kind == "actions":
            return self._row_actions(row, column.actions)
        if kind == "custom" and column.render is not None:
            return column.render(value, row)
        return self.text("" if value is None else value)

    def status_badge(self, value: Any, badge_map: Mapping[str, str] | None = None) -> Element:
        """Pill coloured by status name; unmapped values are gray."""
        styles = STATUS_BADGES if badge_map is None else badge_map
        classes = class_names(
            "px-2 inline-flex text-xs leading-5 font-semibold rounded-full",
            styles.get(str(value), "bg-gray-100 text-gray-800"),
        )
        return self.create_element("span", "" if value is None else value, {"class": classes})

    def _avatar(self, name: Any) -> Element:
        def contents() -> None:
            self.div(
                lambda: self.span(initials(name), class_="text-sm font-medium text-gray-600"),
                class_="h-10 w-10 rounded-full bg-gray-200 flex items-center justify-center",
            )
            self.text("" if name is None else name, class_="font-medium text-gray-900")

        return self.hstack(contents, spacing=3)

    def _row_actions(self, row: Any, actions: Iterable[Any]) -> Element:
        def contents() -> None:
            for action in actions:
                if isinstance(action, Mapping):
                    path = action.get("path", "#")
                    self.link(
                        action.get("label", ""),
                        path(row) if callable(path) else path,
                        class_=action.get("class", "text-indigo-600 hover:text-indigo-900"),
                    )
                elif action in ROW_ACTIONS:
                    label, classes = ROW_ACTIONS[action]
                    self.link(label, "#", class_=classes)
                else:
                    logger.debug("row_action_ignored", action=str(action))

        return self.hstack(contents, spacing=2)

    # ==================================================================
    # Pagination
    # ==================================================================

    def pagination(self, current_page: int, total_count: int, *, per_page: int = 10, **attrs: Any) -> Element:
        """
        Results summary with previous/next buttons.

        Page number buttons are listed when there are at most five pages.
        Every button carries ``data-page`` with the page it leads to.
        """
        per_page = max(1, int(per_page))
        total_count = max(0, int(total_count))
        total_pages = max(1, math.ceil(total_count / per_page))
        page = min(max(1, int(current_page)), total_pages)

        first = (page - 1) * per_page + 1 if total_count else 0
        last = min(page * per_page, total_count)

        def step(label: str, target: int, enabled: bool) -> Element:
            button = self.button(label, class_=PAGE_BUTTON_CLASSES, data={"page": target})
            return button if enabled else button.disabled()

        def buttons() -> None:
            step("Previous", page - 1, page > 1)
            if total_pages <= MAX_LISTED_PAGES:
                for number in range(1, total_pages + 1):
                    if number == page:
                        self.button(str(number), class_=CURRENT_PAGE_CLASSES, data={"page": number}, aria={"current": "page"})
                    else:
                        self.button(str(number), class_=PAGE_BUTTON_CLASSES, data={"page": number})
            step("Next", page + 1, page < total_pages)

        def bar() -> None:
            self.text(f"Showing {first} to {last} of {total_count} results", class_="text-sm text-gray-700")
            self.hstack(buttons, spacing=2)

        return self.create_element(
            "div", None, {"class": "px-6 py-4 border-t"}, lambda: self.hstack(bar, class_="justify-between"), **attrs
        )
