"""Reactive state: local state, bindings, shared stores and transport payloads."""

from .state import StateChange, StateContainer, values_equal
from .binding import Binding
from .store import (
    ObservableStore,
    StoreChange,
    StoreDiff,
    StoreRegistry,
    StoreTransaction,
    compute_diff,
)
from .rendering import ActionEvent, LiveUpdatePayload, wrap_reactive

__all__ = [
    "StateChange",
    "StateContainer",
    "values_equal",
    "Binding",
    "ObservableStore",
    "StoreChange",
    "StoreDiff",
    "StoreRegistry",
    "StoreTransaction",
    "compute_diff",
    "ActionEvent",
    "LiveUpdatePayload",
    "wrap_reactive",
]
