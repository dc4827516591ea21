"""Tests for two-way bindings."""

from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from core.errors import BindingReadOnlyError
from reactive.binding import Binding, read_path, write_path


@dataclass(frozen=True)
class Address:
    city: str


class User(BaseModel):
    name: str
    tags: list[str] = []


# ============================================================================
# Basic access
# ============================================================================

def test_variable_read_write():
    """Variables own their storage."""
    cell = Binding.variable(1, name="count")

    cell.set(2)
    assert cell.get() == 2

    cell.value = 3
    assert cell.value == 3
    assert not cell.is_read_only


def test_constant_is_read_only():
    """Constants reject writes."""
    constant = Binding.constant("fixed")

    assert constant.is_read_only
    with pytest.raises(BindingReadOnlyError):
        constant.set("other")
    assert constant.get() == "fixed"


def test_listeners_fire_on_change_only():
    """Change listeners skip writes of an equal value."""
    cell = Binding.variable(1)
    calls = []
    unsubscribe = cell.on_change(lambda new, old: calls.append((new, old)))

    cell.set(1)
    cell.set(2)
    unsubscribe()
    cell.set(3)

    assert calls == [(2, 1)]


# ============================================================================
# Derived bindings
# ============================================================================

def test_map_without_inverse_is_read_only():
    """A mapped binding without an inverse only reads."""
    celsius = Binding.variable(100)
    label = celsius.map(lambda c: f"{c}C")

    assert label.get() == "100C"
    assert label.is_read_only
    with pytest.raises(BindingReadOnlyError):
        label.set("5C")


def test_map_with_inverse_writes_through():
    """Writes through a mapped binding store the inverse."""
    celsius = Binding.variable(0)
    fahrenheit = celsius.map(lambda c: c * 9 / 5 + 32, lambda f: (f - 32) * 5 / 9)

    fahrenheit.set(212)

    assert celsius.get() == 100
    assert fahrenheit.get() == 212


def test_project_into_mapping():
    """Projected writes rebuild the parent without mutating it."""
    original = {"user": {"name": "Ada", "role": "admin"}}
    cell = Binding.variable(original)
    name = cell.project("user", "name")

    name.set("Grace")

    assert cell.get() == {"user": {"name": "Grace", "role": "admin"}}
    assert original["user"]["name"] == "Ada"


def test_project_empty_path_is_identity():
    """Projecting nothing returns the same binding."""
    cell = Binding.variable(1)

    assert cell.project() is cell


def test_project_missing_path_reads_none():
    """Missing steps read as None."""
    cell = Binding.variable({"a": {}})

    assert cell.project("a", "b", "c").get() is None


def test_project_list_index():
    """Integer steps index into sequences."""
    cell = Binding.variable({"items": ["a", "b"]})

    cell.project("items", 1).set("B")

    assert cell.get() == {"items": ["a", "B"]}


def test_project_model_and_dataclass():
    """Models and dataclasses are copied, not mutated."""
    user = User(name="Ada")
    user_cell = Binding.variable(user)
    user_cell.project("name").set("Grace")

    address_cell = Binding.variable(Address(city="Paris"))
    address_cell.project("city").set("Rome")

    assert user_cell.get().name == "Grace"
    assert user.name == "Ada"
    assert address_cell.get() == Address(city="Rome")


def test_project_of_read_only_is_read_only():
    """Projections inherit read-only parents."""
    projected = Binding.constant({"a": 1}).project("a")

    assert projected.get() == 1
    assert projected.is_read_only


# ============================================================================
# Path helpers
# ============================================================================

def test_write_path_creates_missing_mappings():
    """Writing through a missing step creates a mapping."""
    assert write_path({}, ["a", "b"], 1) == {"a": {"b": 1}}


def test_write_path_appends_at_end():
    """Writing one past the end appends."""
    assert write_path([1, 2], [2], 3) == [1, 2, 3]
    assert write_path((1,), [0], 9) == (9,)


def test_read_path_out_of_range():
    """Out-of-range indices read as None."""
    assert read_path([1], [5]) is None
    assert read_path("text", [0]) is None
