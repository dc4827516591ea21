"""
Server-rendered components.

A component declares its props, state, computed values, slots, bindings and
observed stores in the class body, and builds its markup in ``body(ui)``.
``render()`` memoizes on a fingerprint of everything the body can read, so
re-rendering unchanged input returns the previous markup without running
the body again.
"""

import copy
import time
import weakref
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Iterable, Mapping

from returns.result import Failure, Result

from core.errors import ComponentError, UnknownProp, UnknownState
from core.id import is_action_id, new_action_id, new_component_id
from core.json import safe_json_dumps, safe_json_loads
from core.logging_config import LogContext, get_logger
from dsl.context import DSLContext
from dsl.element import Element, Markup
from reactive.binding import Binding
from reactive.rendering import ActionEvent, LiveUpdatePayload, wrap_reactive
from reactive.state import StateChange, StateContainer, values_equal
from reactive.store import ObservableStore, StoreDiff

from .caching import CacheOptions, MemoizedOutput, cache_key
from .environment import RenderEnvironment
from .fingerprint import fingerprint
from .schema import ComponentSchema, build_schema, call_with_optional
from .slots import EMPTY, as_markup, render_thunk, take_element, thunk_signature
from .validation import check_prop_value, resolve_prop

if TYPE_CHECKING:
    from dsl.builder import Builder

    from .collection import ComponentCollection

logger = get_logger(__name__)

IDENTITY_PREFIX = "swift_ui_component_"


class Component:
    """
    Base class for declarative server-side components.

    Examples:
        >>> class Counter(Component):
        ...     count = state(0)
        ...
        ...     def body(self, ui):
        ...         ui.text(f"Count: {self.count}")
        >>> counter = Counter()
        >>> "Count: 0" in counter.render()
        True
    """

    __schema__: ClassVar[ComponentSchema] = ComponentSchema()

    def __init_subclass__(
        cls,
        *,
        memoize: bool | None = None,
        reactive: bool | None = None,
        cache: CacheOptions | None = None,
        collection_prop: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        parent = getattr(cls.__mro__[1], "__schema__", None)
        cls.__schema__ = build_schema(
            cls,
            parent,
            RESERVED_NAMES,
            memoize=memoize,
            reactive=reactive,
            cache=cache,
            collection_prop=collection_prop,
        )

    def __init__(self, *, env: RenderEnvironment | None = None, **props: Any) -> None:
        """
        Validate props and initialise state.

        Raises:
            UnknownProp: For keywords that are neither props nor bindings
            MissingRequiredProp: If a required prop resolves to None
            PropTypeMismatch: If a prop value has an undeclared type
        """
        schema = self.__schema__
        name = type(self).__name__

        if env is None:
            from core.container import get_environment

            env = get_environment()
        self.env = env
        self.component_id = new_component_id()
        self.identity = IDENTITY_PREFIX + self.component_id.rsplit("_", 1)[-1]

        unknown = [key for key in props if key not in schema.props and key not in schema.bindings]
        if unknown:
            raise UnknownProp(name, unknown)

        self._props: dict[str, Any] = {}
        for field in schema.props.values():
            result = resolve_prop(self, field, props)
            if isinstance(result, Failure):
                raise result.failure()
            self._props[field.name] = result.unwrap()

        self._bindings: dict[str, Binding] = {}
        for field in schema.bindings.values():
            value = props.get(field.name, copy.deepcopy(field.default))
            self._bindings[field.name] = value if isinstance(value, Binding) else Binding.variable(value, name=field.name)

        initial = {
            field.name: call_with_optional(field.factory, self) if field.factory else copy.deepcopy(field.initial)
            for field in schema.state.values()
        }
        self._state = StateContainer(initial)
        for state_name, methods in schema.effects.items():
            for method_name in methods:
                self._state.subscribe(state_name, getattr(self, method_name))

        self._slots: dict[str, Any] = {}
        self._actions: dict[str, Callable[..., Any]] = {}
        self._memo: MemoizedOutput | None = None
        self._nested_dependencies: dict[str, tuple[ObservableStore, int]] = {}
        self._rendered_dependencies: dict[str, tuple[ObservableStore, int]] = {}
        self._depth = 0
        self.needs_rerender = False
        self.render_count = 0

        self._stores: dict[str, ObservableStore] = {}
        self._store_unsubscribers: list[Callable[[], None]] = []
        for field in schema.observed.values():
            self._observe_store(field.name, field.store_id, field.initial)

        logger.debug("component_created", component=name, component_id=self.component_id)

    # ==================================================================
    # Props
    # ==================================================================

    def props(self) -> dict[str, Any]:
        return dict(self._props)

    def get_prop(self, name: str) -> Any:
        try:
            return self._props[name]
        except KeyError:
            raise UnknownProp(type(self).__name__, [name]) from None

    def update_props(self, changes: Mapping[str, Any]) -> list[Result[Any, ComponentError]]:
        """
        Apply new prop values, skipping undeclared names and bad types.

        Returns:
            One Result per entry, in order
        """
        name = type(self).__name__
        results: list[Result[Any, ComponentError]] = []
        for prop_name, value in changes.items():
            field = self.__schema__.props.get(prop_name)
            if field is None:
                logger.warning("prop_update_unknown", component=name, prop=prop_name)
                results.append(Failure(UnknownProp(name, [prop_name])))
                continue

            result = check_prop_value(name, field, value)
            if isinstance(result, Failure):
                logger.warning("prop_update_rejected", component=name, prop=prop_name, error=str(result.failure()))
            elif not values_equal(self._props[prop_name], value):
                self._props[prop_name] = value
                self.needs_rerender = True
            results.append(result)
        return results

    def should_update(self, new_props: Mapping[str, Any]) -> bool:
        """Whether applying ``new_props`` would change the fingerprint."""
        name = type(self).__name__
        candidate = dict(self._props)
        for prop_name, value in new_props.items():
            field = self.__schema__.props.get(prop_name)
            if field is not None and not isinstance(check_prop_value(name, field, value), Failure):
                candidate[prop_name] = value
        return self._fingerprint_for(candidate) != self.current_fingerprint()

    # ==================================================================
    # State
    # ==================================================================

    def _check_state(self, name: str) -> None:
        if name not in self.__schema__.state:
            raise UnknownState(type(self).__name__, name)

    def get_state(self, name: str) -> Any:
        self._check_state(name)
        return self._state.get(name)

    def set_state(self, name: str, value: Any) -> StateChange | None:
        """
        Write a state slot.

        Equal values are dropped. Otherwise the change is recorded, the
        component is flagged for re-render, then ``@observe`` effects and
        instance observers run with ``(new, old)``.
        """
        self._check_state(name)
        if values_equal(self._state.get(name), value):
            return None
        self.needs_rerender = True
        change = self._state.set(name, value)
        logger.debug("state_changed", component=type(self).__name__, state=name)
        return change

    def update_state(self, name: str, fn: Callable[[Any], Any]) -> StateChange | None:
        """Set ``name`` to ``fn(copy_of_current)``."""
        return self.set_state(name, fn(copy.deepcopy(self.get_state(name))))

    def on_state_change(self, name: str, callback: Callable[[Any, Any], Any]) -> Callable[[], None]:
        self._check_state(name)
        return self._state.subscribe(name, callback)

    def state_values(self) -> dict[str, Any]:
        return self._state.snapshot()

    @property
    def changes(self) -> tuple[StateChange, ...]:
        return self._state.changes

    def bind(self, state_name: str) -> Binding:
        """Two-way binding onto one of this component's state slots."""
        self._check_state(state_name)
        return Binding.to_state(self, state_name)

    def get_binding(self, name: str) -> Binding:
        try:
            return self._bindings[name]
        except KeyError:
            raise ComponentError(f"{type(self).__name__} has no binding '{name}'", type(self).__name__) from None

    def computed_values(self) -> dict[str, Any]:
        return {name: field.fn(self) for name, field in self.__schema__.computed.items()}

    def key_value(self, name: str) -> Any:
        """Value of a prop or state slot, for cache keys."""
        if name in self._props:
            return self._props[name]
        return self.get_state(name)

    # ==================================================================
    # Observed stores
    # ==================================================================

    def _observe_store(self, name: str, store_id: Any, initial: dict[str, Any] | None) -> None:
        resolved = store_id(self) if callable(store_id) else store_id
        store = self.env.stores.find_or_create(resolved, initial)
        self._stores[name] = store

        handler = weakref.WeakMethod(self._on_store_change)

        def deliver(diff: StoreDiff) -> None:
            method = handler()
            if method is not None:
                method(name, diff)

        self._store_unsubscribers.append(store.subscribe(deliver, observer=self))

    def _on_store_change(self, name: str, diff: StoreDiff) -> None:
        self.needs_rerender = True
        logger.debug("observed_store_changed", component=type(self).__name__, store=diff.store_id, binding=name)

    def observed_store(self, name: str) -> ObservableStore:
        try:
            return self._stores[name]
        except KeyError:
            raise ComponentError(f"{type(self).__name__} observes no store '{name}'", type(self).__name__) from None

    def close(self) -> None:
        """Drop store subscriptions."""
        for unsubscribe in self._store_unsubscribers:
            unsubscribe()
        self._store_unsubscribers.clear()

    # ==================================================================
    # Slots
    # ==================================================================

    def _check_slot(self, name: str) -> None:
        if name not in self.__schema__.slots:
            raise ComponentError(f"{type(self).__name__} has no slot '{name}'", type(self).__name__)

    def with_slot(self, name: str, content: Any) -> "Component":
        """
        Fill a slot with text, markup, an element or a ``(ui, *args)`` thunk.

        Slot content is not part of the fingerprint, so filling one drops
        the memoized markup.
        """
        self._check_slot(name)
        if isinstance(content, Element):
            content = take_element(content)
        self._slots[name] = content
        self.invalidate()
        return self

    def has_slot(self, name: str) -> bool:
        self._check_slot(name)
        content = self._slots.get(name)
        return content is not None and content is not EMPTY

    def slot_content(self, name: str, *args: Any) -> Any:
        """
        Content for a slot.

        Returns:
            EMPTY when unfilled; markup for static content and builder
            thunks; a callable for thunks that take extra arguments, unless
            those arguments are passed here
        """
        self._check_slot(name)
        content = self._slots.get(name)
        if content is None or content is EMPTY:
            return EMPTY
        if not callable(content):
            return as_markup(content)

        _, extra = thunk_signature(content)
        if extra == 0 or args:
            return render_thunk(content, args, owner=self, parent_depth=self._depth)

        def parameterized(*call_args: Any) -> Markup:
            return render_thunk(content, call_args, owner=self, parent_depth=self._depth)

        return parameterized

    def missing_required_slots(self) -> list[str]:
        return [
            name for name, field in self.__schema__.slots.items() if field.required and not self.has_slot(name)
        ]

    # ==================================================================
    # Actions
    # ==================================================================

    def register_action(self, handler: Callable[..., Any]) -> str:
        """Register a server-side handler and return the id the client sends back."""
        action_id = new_action_id()
        self._actions[action_id] = handler
        return action_id

    def registered_actions(self) -> list[str]:
        return list(self._actions)

    def execute_action(self, action_id: str, event: Any = None) -> Any:
        """
        Run a registered handler with an ActionEvent.

        ``event`` may be an ActionEvent, a mapping, or a JSON payload.
        Malformed and unknown ids are logged and return None.
        """
        name = type(self).__name__
        if not is_action_id(action_id):
            logger.warning("malformed_action_id", component=name, action_id=action_id)
            return None
        handler = self._actions.get(action_id)
        if handler is None:
            logger.warning("unknown_action", component=name, action_id=action_id)
            return None

        if event is None:
            event = ActionEvent(action_id=action_id)
        elif isinstance(event, (str, bytes)):
            event = ActionEvent.from_json(event)
        elif isinstance(event, Mapping):
            event = ActionEvent.model_validate({**event, "action_id": action_id})
        return call_with_optional(handler, event)

    # ==================================================================
    # Rendering
    # ==================================================================

    def body(self, ui: "Builder") -> Any:
        """Declarative block building this component's markup."""
        raise NotImplementedError(f"{type(self).__name__} must implement body(ui)")

    def _fingerprint_for(self, props: Mapping[str, Any]) -> str:
        extra: list[tuple[str, Any]] = [(f"binding:{n}", b.get()) for n, b in self._bindings.items()]
        extra.extend((f"store:{n}", store.snapshot()) for n, store in self._stores.items())
        return fingerprint(
            type(self),
            props,
            dict(self._state.items()),
            extra,
            algorithm=self.env.settings.fingerprint_algorithm,
        )

    def current_fingerprint(self) -> str:
        """Digest of props, state, binding values and observed store data."""
        return self._fingerprint_for(self._props)

    @property
    def memoization_enabled(self) -> bool:
        return self.env.settings.memoization_enabled and self.__schema__.memoize

    @property
    def is_reactive(self) -> bool:
        return self.env.settings.reactive_wrapping and self.__schema__.is_reactive

    def _record(self, outcome: str, duration: float | None = None) -> None:
        if self.env.metrics is not None:
            self.env.metrics.record_render(type(self).__name__, outcome, duration)

    def _execute_body(self, parent_depth: int) -> Markup:
        name = type(self).__name__
        context = DSLContext(
            owner=self,
            parent_depth=parent_depth,
            max_depth=self.env.settings.maximum_component_depth,
        )
        self._depth = context.depth
        self._actions.clear()
        self.render_count += 1

        missing = self.missing_required_slots()
        if missing:
            logger.warning("required_slots_missing", component=name, slots=missing)

        start = time.perf_counter()
        try:
            markup = context.render(self.body)
        except Exception as e:
            if self.env.metrics is not None:
                self.env.metrics.record_render_error(name, type(e).__name__)
            raise
        self._record("rendered", time.perf_counter() - start)
        return markup

    def render(self, parent_depth: int = 0) -> Markup:
        """
        Render to markup.

        The fingerprint is taken before the body runs. A matching memo is
        returned as is; otherwise the body runs in a fresh context (or the
        fragment cache supplies it), the output is wrapped for the client
        when the component is reactive, and the memo is replaced.

        The memo also records the version of every store read by this
        component and by the components nested in its body, so a store
        change below a memoized parent still forces the body to run.
        """
        name = type(self).__name__
        with LogContext(component=name, component_id=self.component_id):
            current = self.current_fingerprint()
            own = self._store_versions()
            if self.memoization_enabled and self._memo is not None and self._memo.matches(current):
                logger.debug("render_memoized", fingerprint=current)
                self._record("memoized")
                return self._memo.markup

            options = self.__schema__.cache
            self._nested_dependencies = {}
            if options is not None:
                settings = self.env.settings
                key = cache_key(self, settings.cache_version, settings.fingerprint_algorithm)
                inner, hit = self.env.fragments.fetch(
                    key, lambda: self._execute_body(parent_depth), options.expires_in
                )
                if hit:
                    self._record("fragment_cached")
            else:
                inner = self._execute_body(parent_depth)

            markup = wrap_reactive(self, inner) if self.is_reactive else inner
            self._rendered_dependencies = {**self._nested_dependencies, **own}
            if self.memoization_enabled:
                self._memo = MemoizedOutput(markup, current, tuple(self._rendered_dependencies.values()))
            self.needs_rerender = False
            logger.debug("component_rendered", fingerprint=current, length=len(markup))
            return markup

    def _store_versions(self) -> dict[str, tuple[ObservableStore, int]]:
        return {store.id: (store, store.version) for store in self._stores.values()}

    def render_nested(self, child: "Component") -> Markup:
        """Render a child component one context level below this one."""
        markup = Markup(child.render(parent_depth=self._depth))
        self._nested_dependencies.update(child.rendered_dependencies)
        return markup

    @property
    def rendered_dependencies(self) -> dict[str, tuple[ObservableStore, int]]:
        """Stores read by the last render of this component and its children, with the versions seen."""
        return dict(self._rendered_dependencies)

    def invalidate(self) -> None:
        """Forget the memoized markup."""
        self._memo = None

    @property
    def memoized_output(self) -> MemoizedOutput | None:
        return self._memo

    def __html__(self) -> Markup:
        return self.render()

    # ==================================================================
    # Transport
    # ==================================================================

    def serialized_props(self) -> str:
        return safe_json_dumps(self._props, sort_keys=True)

    def live_update_payload(self) -> LiveUpdatePayload:
        """Fingerprint plus JSON-safe props and state for the update channel."""
        changes = [change.to_dict() for change in self._state.changes]
        return LiveUpdatePayload(
            component_id=self.identity,
            component_class=type(self).__name__,
            fingerprint=self.current_fingerprint(),
            props=safe_json_loads(self.serialized_props()),
            state=safe_json_loads(safe_json_dumps(dict(self._state.items()), sort_keys=True)),
            needs_rerender=self.needs_rerender,
            changes=safe_json_loads(safe_json_dumps(changes)),
        )

    # ==================================================================
    # Collections
    # ==================================================================

    @classmethod
    def with_collection(
        cls,
        items: Iterable[Any],
        *,
        env: RenderEnvironment | None = None,
        **shared: Any,
    ) -> "ComponentCollection":
        """One instance per item; see ComponentCollection."""
        from .collection import ComponentCollection

        return ComponentCollection(cls, items, env=env, **shared)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.identity}>"


RESERVED_NAMES = frozenset(
    {name for name in vars(Component) if not name.startswith("__")}
    | {"env", "component_id", "identity", "needs_rerender", "render_count"}
)
