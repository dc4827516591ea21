"""Prop resolution and validation with the Result pattern."""

import copy
from typing import TYPE_CHECKING, Any, Mapping

from returns.result import Failure, Result, Success

from core.errors import ComponentError, MissingRequiredProp, PropTypeMismatch

from .schema import PropField, call_with_optional

if TYPE_CHECKING:
    from .base import Component

_UNSET = object()


def check_prop_value(component: str, field: PropField, value: Any) -> Result[Any, ComponentError]:
    """
    Check one value against a prop declaration.

    Args:
        component: Component class name for error messages
        field: Prop declaration
        value: Candidate value

    Returns:
        Success with the value, or Failure with the error to raise
    """
    if value is None:
        if field.required:
            return Failure(MissingRequiredProp(component, field.name))
        return Success(None)
    if not field.accepts(value):
        return Failure(PropTypeMismatch(component, field.name, field.types, value))
    return Success(value)


def resolve_prop(
    instance: "Component",
    field: PropField,
    supplied: Mapping[str, Any],
) -> Result[Any, ComponentError]:
    """
    Resolve a prop from the supplied keywords, falling back to its default.

    A default factory is evaluated in component context; a literal default
    is deep-copied so instances never share it.
    """
    value = supplied.get(field.name, _UNSET)
    if value is _UNSET:
        if field.default_factory is not None:
            value = call_with_optional(field.default_factory, instance)
        else:
            value = copy.deepcopy(field.default)
    return check_prop_value(type(instance).__name__, field, value)
