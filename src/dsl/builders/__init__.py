"""Builder-function library, split by concern and composed into ``dsl.Builder``."""

from .layout import LayoutBuilders, grid_columns_class, stack_alignment
from .html_elements import HTMLBuilders
from .forms import FormBuilders
from .containers import ContainerBuilders, elevation_shadow
from .collections import CollectionBuilders
from .tables import Column, TableBuilders, column_value, format_currency, format_date

__all__ = [
    "LayoutBuilders",
    "HTMLBuilders",
    "FormBuilders",
    "ContainerBuilders",
    "CollectionBuilders",
    "TableBuilders",
    "Column",
    "column_value",
    "format_currency",
    "format_date",
    "grid_columns_class",
    "stack_alignment",
    "elevation_shadow",
]
