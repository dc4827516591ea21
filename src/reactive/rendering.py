"""
Transport-facing models.

The live-update channel itself is external; this module only produces what
it needs: the reactive wrapper markup, a JSON payload with fingerprint and
props, and the event model client actions arrive as.
"""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from core.json import safe_json_dumps, safe_json_loads
from dsl.element import Element, Markup, RawContent

if TYPE_CHECKING:
    from components.base import Component

CONTROLLER = "swift-ui-component"


class LiveUpdatePayload(BaseModel):
    """Everything the transport needs to decide whether to push an update."""

    component_id: str = Field(..., description="Stable client-side identity")
    component_class: str
    fingerprint: str
    props: dict[str, Any] = Field(default_factory=dict)
    state: dict[str, Any] = Field(default_factory=dict)
    needs_rerender: bool = False
    changes: list[dict[str, Any]] = Field(default_factory=list)

    def has_changed(self, previous_fingerprint: str | None) -> bool:
        """True when the client holding ``previous_fingerprint`` is stale."""
        return previous_fingerprint != self.fingerprint

    def to_json(self) -> str:
        return safe_json_dumps(self.model_dump(mode="json"))


class ActionEvent(BaseModel):
    """Client event routed to a registered component action."""

    model_config = ConfigDict(extra="allow")

    action_id: str | None = None
    event_type: str = "click"
    target_id: str | None = None
    value: Any = None
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_json(cls, payload: str | bytes) -> "ActionEvent":
        """
        Build from a client JSON payload.

        Raises:
            JSONParseError: If the payload is not valid JSON or too deep
            pydantic.ValidationError: If the decoded object does not fit
        """
        return cls.model_validate(safe_json_loads(payload))


def wrap_reactive(component: "Component", markup: str) -> Markup:
    """Wrap rendered markup in the client controller container."""
    attributes = {
        "id": component.identity,
        "data-controller": CONTROLLER,
        f"data-{CONTROLLER}-component-id-value": component.identity,
        f"data-{CONTROLLER}-component-class-value": type(component).__name__,
        "data-turbo-permanent": True,
    }
    container = Element("div", None, attributes)
    container.append_child(RawContent(Markup(markup)))
    return container.render()
