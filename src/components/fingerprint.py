"""
Content-addressed fingerprints over props, state and observed data.

``canonicalize`` reduces a value to a string that depends only on its
structure. Every scalar form carries its type, so ``None``, ``"nil"``,
``True``, ``1`` and ``1.0`` never share a form. Values it does not
understand fall back to ``Type#id``, which differs per instance and
therefore defeats memoization for that field.
"""

import dataclasses
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from core.hash import Algorithm, hash_fields
from reactive.binding import Binding

NIL = "nil"


def _digest(parts: Iterable[str], algorithm: Algorithm) -> str:
    # Length prefixes keep field boundaries unambiguous whatever the parts contain
    return hash_fields(*(f"{len(part)}:{part}" for part in parts), algorithm=algorithm)


def canonicalize(value: Any, algorithm: Algorithm = Algorithm.XXHASH64) -> str:
    """
    Canonical string form of ``value``.

    Examples:
        >>> canonicalize(None)
        'nil'
        >>> canonicalize(True)
        'bool:true'
        >>> canonicalize("nil")
        'str:nil'
        >>> canonicalize({"b": 1, "a": 2}) == canonicalize({"a": 2, "b": 1})
        True
        >>> canonicalize([1, 2]) == canonicalize([2, 1])
        False
    """
    if value is None:
        return NIL
    if isinstance(value, bool):
        return "bool:true" if value else "bool:false"
    if isinstance(value, Enum):
        return f"enum:{type(value).__qualname__}:{canonicalize(value.value, algorithm)}"
    if isinstance(value, str):
        return "str:" + value
    if isinstance(value, int):
        return f"int:{value}"
    if isinstance(value, float):
        return f"float:{value!r}"
    if isinstance(value, Decimal):
        return f"decimal:{value}"
    if isinstance(value, (datetime, date, time)):
        return f"{type(value).__name__}:{value.isoformat()}"

    if isinstance(value, Binding):
        return canonicalize(value.get(), algorithm)

    if isinstance(value, BaseModel):
        return "model:" + _digest(
            [type(value).__qualname__, canonicalize(value.model_dump(), algorithm)], algorithm
        )
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        fields = {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        return "data:" + _digest([type(value).__qualname__, canonicalize(fields, algorithm)], algorithm)

    if isinstance(value, Mapping):
        pairs = sorted(
            _digest([canonicalize(k, algorithm), canonicalize(v, algorithm)], algorithm) for k, v in value.items()
        )
        return "map:" + _digest(pairs, algorithm)
    if isinstance(value, (list, tuple)):
        return "list:" + _digest((canonicalize(item, algorithm) for item in value), algorithm)
    if isinstance(value, (set, frozenset)):
        return "set:" + _digest(sorted(canonicalize(item, algorithm) for item in value), algorithm)

    return f"{type(value).__qualname__}#{id(value)}"


def fingerprint(
    component_type: type,
    props: Mapping[str, Any],
    state: Mapping[str, Any],
    extra: Iterable[tuple[str, Any]] = (),
    algorithm: Algorithm = Algorithm.XXHASH64,
) -> str:
    """
    Digest of a component's render inputs.

    ``props`` and ``state`` are taken in their iteration order, which is the
    declaration order for components. ``extra`` carries binding values and
    observed store snapshots as ``(label, value)`` pairs.
    """
    parts = [f"{component_type.__module__}.{component_type.__qualname__}"]
    parts.extend(f"prop:{name}:{canonicalize(value, algorithm)}" for name, value in props.items())
    parts.extend(f"state:{name}:{canonicalize(value, algorithm)}" for name, value in state.items())
    parts.extend(f"{label}:{canonicalize(value, algorithm)}" for label, value in extra)
    return _digest(parts, algorithm)
