"""
Component declarations.

Props, state, computed values, slots, bindings and observed stores are
declared as descriptors in the class body. When the class is created they
are gathered, together with everything inherited, into one frozen
:class:`ComponentSchema` stored on ``cls.__schema__``. Per-instance values
live on the instance, keyed by the same names; the schema is never mutated
after the class exists.
"""

import inspect
import re
import types
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict

from core.errors import DefinitionError

from .caching import CacheOptions


# ============================================================================
# Frozen field models
# ============================================================================


class _Field(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str


class PropField(_Field):
    """Declared prop: accepted types, required flag and default."""

    types: tuple[Any, ...] = ()
    required: bool = False
    default: Any = None
    default_factory: Optional[Callable[..., Any]] = None
    description: str = ""

    def accepts(self, value: Any) -> bool:
        """Runtime type check; ``float`` props also take ints, never bools."""
        if not self.types or value is None:
            return True
        if isinstance(value, self.types):
            return True
        return float in self.types and isinstance(value, int) and not isinstance(value, bool)


class StateField(_Field):
    initial: Any = None
    factory: Optional[Callable[..., Any]] = None


class ComputedField(_Field):
    fn: Callable[..., Any]


class SlotField(_Field):
    required: bool = False
    description: str = ""


class BindingField(_Field):
    default: Any = None


class ObservedField(_Field):
    store_id: Union[str, Callable[..., str]]
    initial: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class ComponentSchema:
    """Everything a component class declares, fixed at class creation."""

    props: Mapping[str, PropField] = field(default_factory=lambda: MappingProxyType({}))
    state: Mapping[str, StateField] = field(default_factory=lambda: MappingProxyType({}))
    computed: Mapping[str, ComputedField] = field(default_factory=lambda: MappingProxyType({}))
    slots: Mapping[str, SlotField] = field(default_factory=lambda: MappingProxyType({}))
    bindings: Mapping[str, BindingField] = field(default_factory=lambda: MappingProxyType({}))
    observed: Mapping[str, ObservedField] = field(default_factory=lambda: MappingProxyType({}))
    effects: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))
    memoize: bool = True
    reactive: bool | None = None
    cache: CacheOptions | None = None
    collection_prop: str = ""

    @property
    def is_reactive(self) -> bool:
        if self.reactive is not None:
            return self.reactive
        return bool(self.state or self.effects or self.observed)

    def kind_of(self, name: str) -> str | None:
        for kind in ("props", "state", "computed", "slots", "bindings", "observed"):
            if name in getattr(self, kind):
                return kind
        return None


# ============================================================================
# Descriptors
# ============================================================================


def _normalize_types(declared: Any) -> tuple[Any, ...]:
    if declared is None:
        return ()
    if isinstance(declared, tuple):
        items = declared
    elif isinstance(declared, types.UnionType) or get_origin(declared) is Union:
        items = get_args(declared)
    else:
        items = (declared,)

    normalized = []
    for item in items:
        if item is None or item is type(None):
            continue
        origin = get_origin(item)
        target = origin if origin is not None else item
        if not isinstance(target, type):
            raise DefinitionError(f"Prop type must be a class or tuple of classes, got {item!r}")
        normalized.append(target)
    return tuple(normalized)


class Declaration:
    """Base descriptor; records its attribute name."""

    kind = ""

    def __init__(self) -> None:
        self.name = ""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def to_field(self) -> _Field:
        raise NotImplementedError


class prop(Declaration):
    """
    Typed, validated constructor argument.

    Examples:
        >>> class Greeting(Component):
        ...     name = prop(str, required=True)
        ...     size = prop((int, float), default=16)
    """

    kind = "props"

    def __init__(
        self,
        type: Any = None,
        *,
        required: bool = False,
        default: Any = None,
        default_factory: Callable[..., Any] | None = None,
        description: str = "",
    ) -> None:
        super().__init__()
        self.types = _normalize_types(type)
        self.required = required
        self.default = default
        self.default_factory = default_factory
        self.description = description

    def to_field(self) -> PropField:
        return PropField(
            name=self.name,
            types=self.types,
            required=self.required,
            default=self.default,
            default_factory=self.default_factory,
            description=self.description,
        )

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.get_prop(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        raise AttributeError(f"Prop '{self.name}' is read-only; use update_props()")


class state(Declaration):
    """Per-instance mutable value; writes go through ``set_state``."""

    kind = "state"

    def __init__(self, initial: Any = None, *, factory: Callable[..., Any] | None = None) -> None:
        super().__init__()
        self.initial = initial
        self.factory = factory

    def to_field(self) -> StateField:
        return StateField(name=self.name, initial=self.initial, factory=self.factory)

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.get_state(self.name)

    def __set__(self, instance: Any, value: Any) -> None:
        instance.set_state(self.name, value)


class computed(Declaration):
    """Derived value recomputed from props and state on every read."""

    kind = "computed"

    def __init__(self, fn: Callable[[Any], Any]) -> None:
        super().__init__()
        self.fn = fn
        self.__doc__ = fn.__doc__

    def to_field(self) -> ComputedField:
        return ComputedField(name=self.name, fn=self.fn)

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return self.fn(instance)


class slot(Declaration):
    """Named content hole; reading it yields markup, a callable, or EMPTY."""

    kind = "slots"

    def __init__(self, *, required: bool = False, description: str = "") -> None:
        super().__init__()
        self.required = required
        self.description = description

    def to_field(self) -> SlotField:
        return SlotField(name=self.name, required=self.required, description=self.description)

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.slot_content(self.name)


class binding(Declaration):
    """Constructor argument holding a Binding into some other owner's value."""

    kind = "bindings"

    def __init__(self, default: Any = None) -> None:
        super().__init__()
        self.default = default

    def to_field(self) -> BindingField:
        return BindingField(name=self.name, default=self.default)

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.get_binding(self.name)


class observed(Declaration):
    """
    Shared store this component reads from.

    ``store_id`` is a fixed id or a callable receiving the component (for
    ids derived from props). The store's data is part of the fingerprint.
    """

    kind = "observed"

    def __init__(self, store_id: str | Callable[[Any], str], initial: dict[str, Any] | None = None) -> None:
        super().__init__()
        self.store_id = store_id
        self.initial = initial

    def to_field(self) -> ObservedField:
        return ObservedField(name=self.name, store_id=self.store_id, initial=self.initial)

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        return instance.observed_store(self.name)


def observe(*state_names: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Register a method as an effect for one or more state slots.

    The method is called as ``method(new, old)`` after each change.
    """
    if not state_names:
        raise DefinitionError("observe() needs at least one state name")

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        fn.__observes__ = tuple(getattr(fn, "__observes__", ())) + state_names  # type: ignore[attr-defined]
        return fn

    return decorator


# ============================================================================
# Schema construction
# ============================================================================

_KINDS = ("props", "state", "computed", "slots", "bindings", "observed")


def default_collection_prop(class_name: str) -> str:
    """``ProductCardComponent`` -> ``product_card``."""
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", class_name).lower()
    return snake[: -len("_component")] if snake.endswith("_component") else snake


def build_schema(
    cls: type,
    parent: ComponentSchema | None,
    reserved: frozenset[str],
    *,
    memoize: bool | None = None,
    reactive: bool | None = None,
    cache: CacheOptions | None = None,
    collection_prop: str | None = None,
) -> ComponentSchema:
    """
    Gather declarations from ``cls`` on top of ``parent`` into a new schema.

    Raises:
        DefinitionError: On a name declared under two kinds, a name that
            shadows a Component method, or an effect on undeclared state
    """
    merged: dict[str, dict[str, Any]] = {
        kind: dict(getattr(parent, kind)) if parent is not None else {} for kind in _KINDS
    }
    owners: dict[str, str] = {name: kind for kind in _KINDS for name in merged[kind]}

    for name, value in vars(cls).items():
        if not isinstance(value, Declaration):
            continue
        if name in reserved:
            raise DefinitionError(f"{cls.__name__}.{name} shadows a Component attribute")
        previous = owners.get(name)
        if previous is not None and previous != value.kind:
            raise DefinitionError(
                f"{cls.__name__}.{name} is declared as both {previous} and {value.kind}"
            )
        merged[value.kind][name] = value.to_field()
        owners[name] = value.kind

    # Plain attributes overriding an inherited declaration remove it
    for name, kind in list(owners.items()):
        if name in vars(cls) and not isinstance(vars(cls)[name], Declaration):
            merged[kind].pop(name, None)

    effects: dict[str, list[str]] = {
        key: list(names) for key, names in (parent.effects.items() if parent is not None else ())
    }
    for attr, member in vars(cls).items():
        observed_states = getattr(member, "__observes__", None)
        if not observed_states or not callable(member):
            continue
        for state_name in observed_states:
            if state_name not in merged["state"]:
                raise DefinitionError(f"{cls.__name__}.{attr} observes undeclared state '{state_name}'")
            bucket = effects.setdefault(state_name, [])
            if attr not in bucket:
                bucket.append(attr)

    if cache is not None and not isinstance(cache, CacheOptions):
        raise DefinitionError(f"{cls.__name__}: cache= must be CacheOptions, got {type(cache).__name__}")

    return ComponentSchema(
        props=MappingProxyType(merged["props"]),
        state=MappingProxyType(merged["state"]),
        computed=MappingProxyType(merged["computed"]),
        slots=MappingProxyType(merged["slots"]),
        bindings=MappingProxyType(merged["bindings"]),
        observed=MappingProxyType(merged["observed"]),
        effects=MappingProxyType({key: tuple(names) for key, names in effects.items()}),
        memoize=memoize if memoize is not None else (parent.memoize if parent is not None else True),
        reactive=reactive if reactive is not None else (parent.reactive if parent is not None else None),
        cache=cache if cache is not None else (parent.cache if parent is not None else None),
        collection_prop=collection_prop or default_collection_prop(cls.__name__),
    )


def call_with_optional(fn: Callable[..., Any], arg: Any) -> Any:
    """
    Call ``fn(arg)`` when it has a required positional parameter, else ``fn()``.

    Builtins such as ``list`` take an optional positional and get ``fn()``.
    """
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return fn()
    takes_arg = any(
        p.kind is p.VAR_POSITIONAL
        or (p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD) and p.default is p.empty)
        for p in params
    )
    return fn(arg) if takes_arg else fn()
