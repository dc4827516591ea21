"""Tests for component declarations, rendering, slots and actions."""

import pytest
from returns.result import Failure, Success
from structlog.testing import capture_logs

from components import (
    EMPTY,
    CacheOptions,
    Component,
    FragmentCache,
    ItemIteration,
    RenderEnvironment,
    binding,
    computed,
    observe,
    observed,
    prop,
    slot,
    state,
)
from core.config import Settings
from core.errors import (
    ComponentDepthExceeded,
    ComponentError,
    DefinitionError,
    MissingRequiredProp,
    PropTypeMismatch,
    UnknownProp,
    UnknownState,
)
from core.id import new_action_id
from dsl import Builder, Markup


def sample(metrics, name, labels=None):
    return metrics.registry.get_sample_value(name, labels or {})


# ============================================================================
# Test components
# ============================================================================

class Greeting(Component):
    name = prop(str, required=True)
    punctuation = prop(str, default="!")

    def body(self, ui):
        ui.text(f"Hello, {self.name}{self.punctuation}")


class Counter(Component):
    count = state(0)

    def increment(self):
        self.count = self.count + 1

    def body(self, ui):
        ui.text(f"Count: {self.count}")
        ui.button("Add").on_click(self.increment)


class Cart(Component):
    items = prop(list, default=[])
    size = prop(float, default=1.0)

    @computed
    def total(self):
        return sum(item["price"] for item in self.items)

    def body(self, ui):
        ui.text(f"Total: {self.total}")


EFFECT_LOG = []


class Toggle(Component):
    on = state(False)

    @observe("on")
    def record(self, new, old):
        EFFECT_LOG.append((new, old))

    def body(self, ui):
        ui.text("on" if self.on else "off")


class Panel(Component):
    header = slot()
    footer = slot()
    row = slot()

    def body(self, ui):
        ui.div(lambda: [ui.embed(self.header), ui.embed(self.footer)])


class Dialog(Component):
    content = slot(required=True)

    def body(self, ui):
        ui.embed(self.content)


class Field(Component):
    value = binding()

    def body(self, ui):
        ui.text(str(self.value.get()))


class Static(Component, memoize=False):
    def body(self, ui):
        ui.text("static")


@pytest.fixture(autouse=True)
def clear_effect_log():
    EFFECT_LOG.clear()


# ============================================================================
# Construction and props
# ============================================================================

class TestProps:
    """Prop resolution and validation."""

    def test_props_resolved_with_defaults(self, env):
        greeting = Greeting(env=env, name="Ada")

        assert greeting.name == "Ada"
        assert greeting.props() == {"name": "Ada", "punctuation": "!"}

    def test_missing_required_prop(self, env):
        with pytest.raises(MissingRequiredProp) as exc_info:
            Greeting(env=env)
        assert exc_info.value.prop == "name"

    def test_type_mismatch(self, env):
        with pytest.raises(PropTypeMismatch):
            Greeting(env=env, name=42)

    def test_unknown_prop(self, env):
        with pytest.raises(UnknownProp) as exc_info:
            Greeting(env=env, name="Ada", colour="red")
        assert exc_info.value.names == ["colour"]

    def test_float_prop_accepts_int_but_not_bool(self, env):
        assert Cart(env=env, size=2).size == 2
        with pytest.raises(PropTypeMismatch):
            Cart(env=env, size=True)

    def test_literal_default_not_shared(self, env):
        first = Cart(env=env)
        second = Cart(env=env)
        first.items.append({"price": 1})

        assert second.items == []

    def test_default_factory_receives_component(self, env):
        class Named(Component):
            label = prop(str, default_factory=lambda component: type(component).__name__)
            tags = prop(list, default_factory=list)

            def body(self, ui):
                ui.text(self.label)

        named = Named(env=env)
        assert named.label == "Named"
        assert named.tags == []

    def test_props_are_read_only(self, env):
        greeting = Greeting(env=env, name="Ada")
        with pytest.raises(AttributeError):
            greeting.name = "Bob"

    def test_update_props_results(self, env):
        greeting = Greeting(env=env, name="Ada")

        results = greeting.update_props({"name": "Bob", "nope": 1, "punctuation": 5})

        assert isinstance(results[0], Success)
        assert isinstance(results[1], Failure)
        assert isinstance(results[1].failure(), UnknownProp)
        assert isinstance(results[2].failure(), PropTypeMismatch)
        assert greeting.props() == {"name": "Bob", "punctuation": "!"}
        assert greeting.needs_rerender

    def test_should_update(self, env):
        greeting = Greeting(env=env, name="Ada")

        assert not greeting.should_update({"name": "Ada"})
        assert greeting.should_update({"name": "Bob"})
        assert not greeting.should_update({"punctuation": 5})
        assert greeting.name == "Ada"


# ============================================================================
# State
# ============================================================================

class TestState:
    """State writes, effects and observers."""

    def test_state_is_per_instance(self, env):
        first = Counter(env=env)
        second = Counter(env=env)
        first.count = 3

        assert second.count == 0

    def test_set_state_records_change(self, env):
        counter = Counter(env=env)

        change = counter.set_state("count", 1)

        assert (change.name, change.old_value, change.new_value) == ("count", 0, 1)
        assert counter.needs_rerender
        assert counter.changes == (change,)

    def test_equal_write_is_noop(self, env):
        counter = Counter(env=env)

        assert counter.set_state("count", 0) is None
        assert not counter.needs_rerender
        assert counter.changes == ()

    def test_unknown_state(self, env):
        counter = Counter(env=env)
        with pytest.raises(UnknownState):
            counter.set_state("missing", 1)
        with pytest.raises(KeyError):
            counter.get_state("missing")

    def test_update_state_works_on_copy(self, env):
        class Todo(Component):
            items = state(factory=list)

            def body(self, ui):
                ui.text(str(len(self.items)))

        todo = Todo(env=env)
        before = todo.items

        todo.update_state("items", lambda items: items + ["a"])

        assert todo.items == ["a"]
        assert before == []

    def test_observe_effect_and_instance_observer(self, env):
        toggle = Toggle(env=env)
        seen = []
        unsubscribe = toggle.on_state_change("on", lambda new, old: seen.append(new))

        toggle.on = True
        unsubscribe()
        toggle.on = False

        assert EFFECT_LOG == [(True, False), (False, True)]
        assert seen == [True]

    def test_computed_values(self, env):
        cart = Cart(env=env, items=[{"price": 2}, {"price": 3}])

        assert cart.total == 5
        assert cart.computed_values() == {"total": 5}

    def test_state_values_are_copies(self, env):
        counter = Counter(env=env)
        values = counter.state_values()
        values["count"] = 99

        assert counter.count == 0


# ============================================================================
# Rendering and memoization
# ============================================================================

class TestRender:
    """Render, memo and reactive wrapper."""

    def test_render_escapes_props(self, env):
        markup = Greeting(env=env, name="<script>").render()

        assert "&lt;script&gt;" in markup
        assert "<script>" not in markup

    def test_memoized_render_skips_body(self, env, metrics):
        greeting = Greeting(env=env, name="Ada")

        first = greeting.render()
        second = greeting.render()

        assert first == second
        assert greeting.render_count == 1
        assert greeting.memoized_output.fingerprint == greeting.current_fingerprint()
        assert sample(metrics, "swiftui_renders_total", {"component": "Greeting", "outcome": "memoized"}) == 1

    def test_prop_update_rerenders(self, env):
        greeting = Greeting(env=env, name="Ada")
        greeting.render()

        greeting.update_props({"name": "Bob"})
        markup = greeting.render()

        assert "Hello, Bob!" in markup
        assert greeting.render_count == 2
        assert not greeting.needs_rerender

    def test_invalidate_forces_body(self, env):
        greeting = Greeting(env=env, name="Ada")
        greeting.render()

        greeting.invalidate()
        greeting.render()

        assert greeting.memoized_output is not None
        assert greeting.render_count == 2

    def test_state_change_between_lookalike_values_rerenders(self, env):
        class Label(Component):
            value = state(None)

            def body(self, ui):
                ui.text(repr(self.value))

        label = Label(env=env)
        assert "None" in label.render()

        label.set_state("value", "nil")
        assert "nil" in label.render()

        label.set_state("value", True)
        label.render()
        label.set_state("value", "true")

        assert "true" in label.render()
        assert label.render_count == 4

    def test_memo_tracks_stores_read_by_nested_components(self, env):
        class StatusBadge(Component):
            status = observed("status", initial={"label": "idle"})

            def body(self, ui):
                ui.text(self.status.get("label"))

        class Shell(Component):
            def body(self, ui):
                ui.div(lambda: ui.component(StatusBadge))

        shell = Shell(env=env)
        shell.render()
        shell.render()
        assert shell.render_count == 1
        assert shell.memoized_output.is_fresh()

        env.stores.find("status").set("label", "busy")

        assert not shell.memoized_output.is_fresh()
        assert "busy" in shell.render()
        assert shell.render_count == 2

    def test_memoize_option_off(self, env):
        component = Static(env=env)
        component.render()
        component.render()

        assert component.render_count == 2
        assert component.memoized_output is None

    def test_memoization_disabled_by_settings(self, metrics):
        env = RenderEnvironment.create(settings=Settings(memoization_enabled=False), metrics=metrics)
        greeting = Greeting(env=env, name="Ada")
        greeting.render()
        greeting.render()

        assert greeting.render_count == 2

    def test_reactive_wrapper(self, env):
        counter = Counter(env=env)
        markup = counter.render()

        assert counter.identity.startswith("swift_ui_component_")
        assert markup.startswith("<div")
        assert f'id="{counter.identity}"' in markup
        assert 'data-controller="swift-ui-component"' in markup
        assert 'data-swift-ui-component-component-class-value="Counter"' in markup
        assert "Count: 0" in markup

    def test_stateless_component_is_not_wrapped(self, env):
        greeting = Greeting(env=env, name="Ada")

        assert not greeting.is_reactive
        assert greeting.render() == "<span>Hello, Ada!</span>"

    def test_reactive_option_overrides(self, env):
        class Plain(Component, reactive=False):
            count = state(0)

            def body(self, ui):
                ui.text("plain")

        assert not Plain(env=env).is_reactive
        assert Counter(env=env).is_reactive

    def test_identity_stable(self, env):
        counter = Counter(env=env)
        identity = counter.identity
        counter.render()
        counter.count = 5
        counter.render()

        assert counter.identity == identity

    def test_nested_component(self, env):
        class Page(Component):
            def body(self, ui):
                ui.vstack(lambda: [ui.component(Greeting, name="Ada"), ui.text("after")])

        markup = Page(env=env).render()

        assert markup.index("Hello, Ada!") < markup.index("after")

    def test_depth_limit(self, metrics):
        env = RenderEnvironment.create(settings=Settings(maximum_component_depth=3), metrics=metrics)

        class Recursive(Component):
            def body(self, ui):
                ui.component(Recursive)

        with pytest.raises(ComponentDepthExceeded) as exc_info:
            Recursive(env=env).render()

        assert exc_info.value.max_depth == 3
        assert sample(
            metrics, "swiftui_render_errors_total",
            {"component": "Recursive", "error_type": "ComponentDepthExceeded"},
        ) >= 1

    def test_body_required(self, env):
        class Empty(Component):
            pass

        with pytest.raises(NotImplementedError):
            Empty(env=env).render()


# ============================================================================
# Slots
# ============================================================================

class TestSlots:
    """Slot content kinds."""

    def test_unfilled_slot_is_empty(self, env):
        panel = Panel(env=env)

        assert panel.header is EMPTY
        assert not panel.header
        assert not panel.has_slot("header")
        assert panel.render() == "<div></div>"

    def test_text_slot_is_escaped(self, env):
        panel = Panel(env=env).with_slot("header", "<b>Title</b>")

        assert panel.header == "&lt;b&gt;Title&lt;/b&gt;"

    def test_thunk_slot(self, env):
        panel = Panel(env=env).with_slot("footer", lambda ui: ui.text("bye"))

        assert panel.footer == "<span>bye</span>"
        assert "<span>bye</span>" in panel.render()

    def test_parameterized_slot(self, env):
        panel = Panel(env=env).with_slot("row", lambda ui, item: ui.text(item))

        row = panel.row
        assert callable(row)
        assert row("first") == "<span>first</span>"
        assert panel.slot_content("row", "second") == "<span>second</span>"

    def test_element_slot(self, env):
        element = Builder().text("built")
        panel = Panel(env=env).with_slot("header", element)

        assert panel.header == "<span>built</span>"

    def test_with_slot_drops_memo(self, env):
        panel = Panel(env=env)
        panel.render()

        panel.with_slot("header", "later")

        assert panel.memoized_output is None
        assert "later" in panel.render()
        assert panel.render_count == 2

    def test_required_slot(self, env):
        dialog = Dialog(env=env)

        assert dialog.missing_required_slots() == ["content"]
        assert dialog.render() == ""

        dialog.with_slot("content", "hello")
        assert dialog.missing_required_slots() == []
        assert dialog.render() == "hello"

    def test_unknown_slot(self, env):
        with pytest.raises(ComponentError):
            Panel(env=env).with_slot("sidebar", "x")


# ============================================================================
# Bindings
# ============================================================================

class TestBindings:
    """Parent state shared with children through bindings."""

    def test_child_writes_parent_state(self, env):
        parent = Counter(env=env)
        child = Field(env=env, value=parent.bind("count"))

        child.value.set(7)

        assert parent.count == 7
        assert child.render() == "<span>7</span>"

    def test_binding_value_in_fingerprint(self, env):
        parent = Counter(env=env)
        child = Field(env=env, value=parent.bind("count"))
        before = child.current_fingerprint()

        parent.count = 1

        assert child.current_fingerprint() != before

    def test_plain_value_wrapped(self, env):
        child = Field(env=env, value=3)

        assert child.value.get() == 3
        assert child.get_binding("value") is child.value

    def test_bind_unknown_state(self, env):
        with pytest.raises(UnknownState):
            Counter(env=env).bind("missing")


# ============================================================================
# Actions
# ============================================================================

class TestActions:
    """Server-side handlers registered from bodies."""

    def test_click_handler_registered(self, env):
        counter = Counter(env=env)
        markup = counter.render()
        [action_id] = counter.registered_actions()

        assert f'data-action-id="{action_id}"' in markup

        counter.execute_action(action_id)
        assert counter.count == 1
        assert counter.needs_rerender

    def test_actions_replaced_on_rerender(self, env):
        counter = Counter(env=env)
        counter.render()
        [first] = counter.registered_actions()

        counter.execute_action(first)
        counter.render()

        assert counter.registered_actions() != [first]
        assert len(counter.registered_actions()) == 1
        assert "Count: 1" in counter.render()

    def test_event_payloads(self, env):
        counter = Counter(env=env)
        events = []
        action_id = counter.register_action(lambda event: events.append(event))

        counter.execute_action(action_id, {"value": 5})
        counter.execute_action(action_id, '{"value": "x", "extra": 1}')

        assert events[0].value == 5
        assert events[0].action_id == action_id
        assert events[1].value == "x"
        assert events[1].model_extra == {"extra": 1}

    def test_unknown_action(self, env):
        with capture_logs() as logs:
            assert Counter(env=env).execute_action(new_action_id()) is None
        assert [entry["event"] for entry in logs if entry["log_level"] == "warning"] == ["unknown_action"]

    def test_malformed_action_id(self, env):
        counter = Counter(env=env)
        counter.render()
        [action_id] = counter.registered_actions()

        with capture_logs() as logs:
            assert counter.execute_action("act_missing") is None
            assert counter.execute_action(action_id.replace("act_", "cmp_")) is None

        assert counter.count == 0
        assert [entry["event"] for entry in logs if entry["log_level"] == "warning"] == [
            "malformed_action_id",
            "malformed_action_id",
        ]


# ============================================================================
# Class definitions
# ============================================================================

class TestDefinitions:
    """Declaration errors surface at class creation."""

    def test_schema_collected_with_inheritance(self):
        class Base(Component):
            title = prop(str)

        class Child(Base):
            count = state(0)

        assert list(Child.__schema__.props) == ["title"]
        assert list(Child.__schema__.state) == ["count"]
        assert list(Base.__schema__.state) == []

    def test_schema_is_read_only(self):
        with pytest.raises(TypeError):
            Greeting.__schema__.props["other"] = None

    def test_name_declared_twice(self):
        class Base(Component):
            title = prop(str)

        with pytest.raises(DefinitionError):
            class Child(Base):
                title = state("")

    def test_reserved_name(self):
        with pytest.raises(DefinitionError):
            class Bad(Component):
                render = prop(str)

    def test_effect_on_undeclared_state(self):
        with pytest.raises(DefinitionError):
            class Bad(Component):
                @observe("missing")
                def effect(self, new, old):
                    pass

    def test_observe_needs_names(self):
        with pytest.raises(DefinitionError):
            observe()

    def test_cache_must_be_options(self):
        with pytest.raises(DefinitionError):
            class Bad(Component, cache={"expires_in": 10}):
                pass


# ============================================================================
# Transport
# ============================================================================

class TestTransport:
    """Payloads for the live update channel."""

    def test_live_update_payload(self, env):
        counter = Counter(env=env)
        counter.count = 2
        payload = counter.live_update_payload()

        assert payload.component_id == counter.identity
        assert payload.component_class == "Counter"
        assert payload.fingerprint == counter.current_fingerprint()
        assert payload.state == {"count": 2}
        assert payload.needs_rerender
        assert [change["name"] for change in payload.changes] == ["count"]
        assert payload.has_changed(None)
        assert not payload.has_changed(counter.current_fingerprint())

    def test_serialized_props_sorted(self, env):
        greeting = Greeting(env=env, name="Ada", punctuation="?")

        assert greeting.serialized_props() == '{"name":"Ada","punctuation":"?"}'


# ============================================================================
# Collections
# ============================================================================

class ProductCard(Component, collection_prop="product"):
    product = prop(dict, required=True)
    product_counter = prop(int)
    product_iteration = prop(ItemIteration)

    def body(self, ui):
        ui.text(f"{self.product_counter}:{self.product['name']}")


class LineItem(Component):
    line_item = prop(str)

    def body(self, ui):
        ui.text(self.line_item)


class TestCollections:
    """One instance per item."""

    def test_collection_props(self, env):
        collection = ProductCard.with_collection([{"name": "a"}, {"name": "b"}], env=env)
        first, second = collection.components

        assert len(collection) == 2
        assert first.product == {"name": "a"}
        assert first.product_iteration.first
        assert second.product_iteration.last
        assert collection.render() == "<span>0:a</span><span>1:b</span>"

    def test_default_collection_prop(self, env):
        collection = LineItem.with_collection(["x", "y"], env=env)

        assert LineItem.__schema__.collection_prop == "line_item"
        assert [item.line_item for item in collection] == ["x", "y"]

    def test_shared_props(self, env):
        collection = Greeting.with_collection(
            [{"name": "Ada"}, {"name": "Bob"}], env=env, punctuation="?"
        )

        assert collection.render() == "<span>Hello, Ada?</span><span>Hello, Bob?</span>"


# ============================================================================
# Fragment cache
# ============================================================================

class Banner(Component, cache=CacheOptions()):
    title = prop(str)

    def body(self, ui):
        ui.h1(self.title)


class Badge(Component, cache=CacheOptions(key_attributes=("label",), version="2")):
    label = prop(str)
    tone = prop(str, default="gray")

    def body(self, ui):
        ui.text(f"{self.label}/{self.tone}")


class TestFragmentCache:
    """Class-level cache shared across instances."""

    def test_second_instance_hits_cache(self, env, metrics):
        first = Banner(env=env, title="Hi")
        second = Banner(env=env, title="Hi")

        assert first.render() == second.render()
        assert first.render_count == 1
        assert second.render_count == 0
        assert sample(metrics, "swiftui_renders_total", {"component": "Banner", "outcome": "fragment_cached"}) == 1

    def test_different_props_miss(self, env):
        Banner(env=env, title="Hi").render()
        other = Banner(env=env, title="Bye")

        assert "Bye" in other.render()
        assert other.render_count == 1

    def test_key_attributes(self, env):
        Badge(env=env, label="new", tone="green").render()
        markup = Badge(env=env, label="new", tone="red").render()

        assert markup == "<span>new/green</span>"

    def test_cleared_cache(self, env):
        Banner(env=env, title="Hi").render()
        env.fragments.clear()
        again = Banner(env=env, title="Hi")
        again.render()

        assert again.render_count == 1

    def test_fetch_produces_once_per_key(self):
        cache = FragmentCache(max_size=4)
        calls = []

        def produce():
            calls.append(1)
            return Markup("<p>x</p>")

        assert cache.fetch("k", produce) == (Markup("<p>x</p>"), False)
        assert cache.fetch("k", produce) == (Markup("<p>x</p>"), True)
        assert cache.fetch("k", produce, expires_in=30) == (Markup("<p>x</p>"), False)
        assert len(calls) == 2
        assert (cache.stats.hits, cache.stats.misses) == (1, 1)
        assert len(cache) == 2

    def test_empty_fragment_is_a_hit(self):
        cache = FragmentCache()
        cache.fetch("k", lambda: Markup(""))

        assert cache.fetch("k", lambda: Markup("<p>late</p>")) == (Markup(""), True)
