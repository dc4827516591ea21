"""
End-to-end component scenarios.

Each test drives components the way a request handler would: render,
deliver an event or a store change, and render again.
"""

import gc

import pytest

from components import Component, binding, observed, prop, state

pytestmark = pytest.mark.scenario


class Counter(Component):
    count = state(0)

    def increment(self):
        self.count += 1

    def body(self, ui):
        ui.vstack(lambda: [
            ui.text(f"Count: {self.count}"),
            ui.button("+").on_click(self.increment),
        ], spacing=2)


class Scoreboard(Component):
    scores = observed("scores", initial={"home": 0, "away": 0})

    def body(self, ui):
        ui.text(f"{self.scores.get('home')} - {self.scores.get('away')}")


class TeamScore(Component):
    team = prop(str, required=True)
    record = observed(lambda component: f"team:{component.team}", initial={"wins": 0})

    def body(self, ui):
        ui.text(f"{self.team}: {self.record.get('wins')}")


class NameInput(Component):
    value = binding("")

    def rename(self, event):
        self.value.set(event.value)

    def body(self, ui):
        ui.textfield("name", self.value.get()).on_change(self.rename)


class Profile(Component):
    name = state("anonymous")

    def body(self, ui):
        ui.card(
            header=lambda: ui.h2(f"Hello {self.name}"),
            content=lambda: ui.component(NameInput(env=self.env, value=self.bind("name"))),
        )


def test_counter_increments_through_action(env):
    """A click handler changes state and the next render shows it."""
    counter = Counter(env=env)
    first = counter.render()
    [action_id] = counter.registered_actions()

    counter.execute_action(action_id, {"event_type": "click"})
    second = counter.render()

    assert "Count: 0" in first
    assert "Count: 1" in second
    assert first != second
    assert counter.render_count == 2
    assert not counter.needs_rerender


def test_live_update_detects_stale_client(env):
    """The payload fingerprint moves when state changes."""
    counter = Counter(env=env)
    counter.render()
    sent = counter.live_update_payload().fingerprint

    counter.set_state("count", 5)
    payload = counter.live_update_payload()

    assert payload.has_changed(sent)
    assert payload.needs_rerender
    assert payload.state == {"count": 5}


def test_store_change_marks_observer_for_rerender(env):
    """Updating an observed store invalidates the memo."""
    board = Scoreboard(env=env)
    assert "0 - 0" in board.render()

    env.stores.find("scores").set("home", 2)

    assert board.needs_rerender
    assert "2 - 0" in board.render()
    assert board.render_count == 2


def test_store_shared_between_components(env):
    """Every observer of a store sees the same data."""
    first = Scoreboard(env=env)
    second = Scoreboard(env=env)
    first.render()
    second.render()

    store = env.stores.find("scores")
    store.update(lambda tx: tx.update({"home": 1, "away": 3}))

    assert store.subscriber_count == 2
    assert first.needs_rerender and second.needs_rerender
    assert "1 - 3" in first.render()
    assert "1 - 3" in second.render()


def test_store_id_derived_from_props(env):
    """Store ids may be computed from the component."""
    red = TeamScore(env=env, team="red")
    blue = TeamScore(env=env, team="blue")

    env.stores.find("team:red").set("wins", 4)

    assert red.needs_rerender
    assert not blue.needs_rerender
    assert "red: 4" in red.render()
    assert sorted(env.stores.store_ids()) == ["team:blue", "team:red"]


def test_closed_component_stops_observing(env):
    """close() drops the component's store subscriptions."""
    board = Scoreboard(env=env)
    board.render()
    board.close()

    env.stores.find("scores").set("away", 1)

    assert not board.needs_rerender
    assert env.stores.find("scores").subscriber_count == 0


def test_collected_component_is_not_kept_alive(env):
    """Stores hold their observers weakly."""
    Scoreboard(env=env)
    gc.collect()

    store = env.stores.find("scores")
    store.set("home", 9)

    assert store.subscriber_count == 0


def test_child_input_writes_parent_state(env):
    """A child edits parent state through a binding and the parent re-renders."""
    profile = Profile(env=env)
    assert "Hello anonymous" in profile.render()

    child = NameInput(env=env, value=profile.bind("name"))
    child.render()
    [action_id] = child.registered_actions()
    child.execute_action(action_id, '{"event_type": "change", "value": "Ada"}')

    assert profile.name == "Ada"
    assert profile.needs_rerender
    assert "Hello Ada" in profile.render()


def test_nested_collection_render(env):
    """Components render inside other components and stacks."""

    class Row(Component):
        label = prop(str)

        def body(self, ui):
            ui.text(self.label)

    class Table(Component):
        rows = prop(list, default_factory=list)

        def body(self, ui):
            ui.vstack(lambda: [ui.component(Row, label=label) for label in self.rows])

    markup = Table(env=env, rows=["a", "b", "c"]).render()

    assert markup.startswith('<div class="flex flex-col items-center space-y-8">')
    assert markup.index("<span>a</span>") < markup.index("<span>b</span>") < markup.index("<span>c</span>")


def test_store_change_below_memoized_parent(env):
    """A parent re-renders when a store read only by a nested child moves."""

    class Page(Component):
        title = prop(str, default="Match")

        def body(self, ui):
            ui.vstack(lambda: [ui.h2(self.title), ui.component(Scoreboard)])

    page = Page(env=env)
    assert "0 - 0" in page.render()

    env.stores.find("scores").set("home", 5)
    markup = page.render()

    assert "5 - 0" in markup
    assert page.render_count == 2
    assert "scores" in page.rendered_dependencies
