"""Render one component instance per item of a collection."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Mapping

from dsl.element import Markup

if TYPE_CHECKING:
    from .base import Component
    from .environment import RenderEnvironment


@dataclass(frozen=True)
class ItemIteration:
    """Position of an item within its collection."""

    index: int
    size: int

    @property
    def first(self) -> bool:
        return self.index == 0

    @property
    def last(self) -> bool:
        return self.index == self.size - 1

    @property
    def even(self) -> bool:
        return self.index % 2 == 0

    @property
    def odd(self) -> bool:
        return not self.even


class ComponentCollection:
    """
    Instances of one component class built from a list of items.

    Each item is passed as the class's ``collection_prop``. A mapping item
    also fills any declared props it names. ``<prop>_counter`` and
    ``<prop>_iteration`` are set when the class declares them.
    """

    def __init__(
        self,
        component_class: type["Component"],
        items: Iterable[Any],
        *,
        env: "RenderEnvironment | None" = None,
        **shared: Any,
    ) -> None:
        self.component_class = component_class
        self.items = list(items)
        self.env = env
        self.shared = shared
        self._components: list["Component"] | None = None

    def _props_for(self, item: Any, index: int) -> dict[str, Any]:
        schema = self.component_class.__schema__
        prop_name = schema.collection_prop
        props = dict(self.shared)

        if isinstance(item, Mapping) and prop_name not in schema.props:
            props.update({key: value for key, value in item.items() if key in schema.props})
        else:
            if isinstance(item, Mapping):
                props.update({key: value for key, value in item.items() if key in schema.props and key != prop_name})
            props[prop_name] = item

        if f"{prop_name}_counter" in schema.props:
            props[f"{prop_name}_counter"] = index
        if f"{prop_name}_iteration" in schema.props:
            props[f"{prop_name}_iteration"] = ItemIteration(index, len(self.items))
        return props

    @property
    def components(self) -> list["Component"]:
        """Instances, built on first access."""
        if self._components is None:
            self._components = [
                self.component_class(env=self.env, **self._props_for(item, index))
                for index, item in enumerate(self.items)
            ]
        return self._components

    def render(self, parent_depth: int = 0) -> Markup:
        return Markup("".join(component.render(parent_depth=parent_depth) for component in self.components))

    def __html__(self) -> Markup:
        return self.render()

    def __iter__(self) -> Iterator["Component"]:
        return iter(self.components)

    def __len__(self) -> int:
        return len(self.items)
