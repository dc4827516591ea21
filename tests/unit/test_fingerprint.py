"""Tests for render fingerprints."""

from dataclasses import dataclass
from datetime import date
from enum import Enum

from hypothesis import given, strategies as st
from pydantic import BaseModel

from components.fingerprint import NIL, canonicalize, fingerprint
from core.hash import Algorithm
from reactive.binding import Binding


class Size(Enum):
    SMALL = "s"


@dataclass
class Point:
    x: int
    y: int


class Item(BaseModel):
    name: str


class Widget:
    pass


class Gadget:
    pass


json_values = st.recursive(
    st.none() | st.booleans() | st.integers() | st.text(max_size=10),
    lambda children: st.lists(children, max_size=4) | st.dictionaries(st.text(max_size=5), children, max_size=4),
    max_leaves=10,
)


def test_scalars():
    """Scalars have readable canonical forms."""
    assert canonicalize(None) == NIL
    assert canonicalize(True) == "bool:true"
    assert canonicalize(False) == "bool:false"
    assert canonicalize(3) == "int:3"
    assert canonicalize("a") == "str:a"
    assert canonicalize(Size.SMALL) == "enum:Size:str:s"
    assert canonicalize(date(2024, 1, 2)) == "date:2024-01-02"


def test_scalars_of_different_types_differ():
    """Sentinels and typed scalars never share a form with a string."""
    assert canonicalize(None) != canonicalize("nil")
    assert canonicalize(True) != canonicalize("true")
    assert canonicalize(False) != canonicalize("false")
    assert len({canonicalize(1), canonicalize(1.0), canonicalize(True), canonicalize("1")}) == 4
    assert canonicalize(Size.SMALL) != canonicalize("s")


def test_mapping_separators_are_unambiguous():
    """Keys and values containing separators do not run together."""
    assert canonicalize({"a:b": "c"}) != canonicalize({"a": "b:c"})
    assert canonicalize({"a": "b\x00c"}) != canonicalize({"a\x00b": "c"})
    assert canonicalize(["a\x00b"]) != canonicalize(["a", "b"])
    assert canonicalize(["a", "b"]) != canonicalize(["a:b"])


def test_mapping_order_independent():
    """Equal mappings canonicalize equally regardless of order."""
    assert canonicalize({"a": 1, "b": [1, 2]}) == canonicalize({"b": [1, 2], "a": 1})


def test_sequence_order_sensitive():
    """Reordering a list changes the canonical form."""
    assert canonicalize([1, 2]) != canonicalize([2, 1])


def test_sets_order_independent():
    """Sets canonicalize by content."""
    assert canonicalize({"x", "y"}) == canonicalize({"y", "x"})


def test_structured_values():
    """Models and dataclasses canonicalize by field values."""
    assert canonicalize(Point(1, 2)) == canonicalize(Point(1, 2))
    assert canonicalize(Point(1, 2)) != canonicalize(Point(2, 1))
    assert canonicalize(Item(name="a")) == canonicalize(Item(name="a"))
    assert canonicalize(Item(name="a")).startswith("model:")


def test_binding_uses_current_value():
    """Bindings canonicalize as their current value."""
    cell = Binding.variable(5)

    assert canonicalize(cell) == "int:5"
    cell.set(6)
    assert canonicalize(cell) == canonicalize(6)


def test_opaque_objects_fall_back_to_identity():
    """Unknown objects differ per instance."""
    first, second = Widget(), Widget()

    assert canonicalize(first) == canonicalize(first)
    assert canonicalize(first) != canonicalize(second)
    assert canonicalize(first).startswith("Widget#")


def test_fingerprint_includes_component_type():
    """Different classes with equal inputs differ."""
    assert fingerprint(Widget, {"a": 1}, {}) != fingerprint(Gadget, {"a": 1}, {})


def test_fingerprint_distinguishes_props_from_state():
    """The same name and value as prop or state differ."""
    assert fingerprint(Widget, {"a": 1}, {}) != fingerprint(Widget, {}, {"a": 1})


def test_fingerprint_extra_inputs():
    """Extra labelled inputs participate in the digest."""
    base = fingerprint(Widget, {}, {})

    assert fingerprint(Widget, {}, {}, [("store:cart", {"n": 1})]) != base
    assert fingerprint(Widget, {}, {}, [("store:cart", {"n": 1})]) == fingerprint(
        Widget, {}, {}, [("store:cart", {"n": 1})]
    )


def test_fingerprint_algorithms():
    """Algorithms produce digests of their own length."""
    assert len(fingerprint(Widget, {}, {}, algorithm=Algorithm.XXHASH64)) == 16
    assert len(fingerprint(Widget, {}, {}, algorithm=Algorithm.SHA256)) == 64


@given(json_values)
def test_canonicalize_deterministic(value):
    """Property test: canonicalization is deterministic."""
    assert canonicalize(value) == canonicalize(value)


@given(st.dictionaries(st.text(max_size=5), st.integers(), max_size=6))
def test_fingerprint_ignores_dict_insertion_order(values):
    """Property test: nested dict order never changes a fingerprint."""
    reordered = dict(reversed(list(values.items())))

    assert fingerprint(Widget, {"data": values}, {}) == fingerprint(Widget, {"data": reordered}, {})


@given(st.text(max_size=8), st.text(min_size=1, max_size=8))
def test_fingerprint_prop_boundaries(first, second):
    """Property test: moving text between two props changes the fingerprint."""
    assert fingerprint(Widget, {"a": first, "b": second}, {}) != fingerprint(
        Widget, {"a": first + second, "b": ""}, {}
    )
