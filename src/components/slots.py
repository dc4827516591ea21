"""Named content holes filled by the caller."""

import inspect
from typing import Any, Callable

from dsl.context import DSLContext
from dsl.element import Element, Markup, escape


class _Empty:
    """Falsy placeholder for a slot with no content; renders as nothing."""

    _instance: "_Empty | None" = None

    def __new__(cls) -> "_Empty":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __html__(self) -> Markup:
        return Markup("")

    def __str__(self) -> str:
        return ""

    def __len__(self) -> int:
        return 0

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = _Empty()

SlotThunk = Callable[..., Any]


def thunk_signature(fn: Callable[..., Any]) -> tuple[bool, int]:
    """
    How a slot thunk wants to be called.

    Returns:
        ``(takes_builder, extra_args)``: whether the first positional
        parameter is the builder, and how many caller arguments follow it
    """
    try:
        params = list(inspect.signature(fn).parameters.values())
    except (TypeError, ValueError):
        return True, 0
    positional = [p for p in params if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
    variadic = any(p.kind is p.VAR_POSITIONAL for p in params)
    if not positional:
        return variadic, 1 if variadic else 0
    return True, (len(positional) - 1) + (1 if variadic else 0)


def render_thunk(
    thunk: SlotThunk,
    args: tuple[Any, ...] = (),
    owner: Any = None,
    parent_depth: int = 0,
) -> Markup:
    """
    Run a slot thunk in its own context and serialise what it builds.

    A thunk that builds nothing may return text or markup instead.
    """
    takes_builder, _ = thunk_signature(thunk)
    returned: list[Any] = []

    def block(ui: Any) -> Any:
        result = thunk(ui, *args) if takes_builder else thunk(*args)
        returned.append(result)
        return result

    markup = DSLContext(owner=owner, parent_depth=parent_depth).render(block)
    if markup:
        return markup

    result = returned[0] if returned else None
    if isinstance(result, str) or hasattr(result, "__html__"):
        return escape(result)
    return Markup("")


def take_element(element: Element) -> Element:
    """Detach an element built elsewhere so it can be held as slot content."""
    factory = element.factory
    if factory is not None:
        factory.claim(element)
    return element.detach()


def as_markup(content: Any) -> Any:
    """Normalise non-callable slot content to embeddable markup."""
    if content is None or content is EMPTY:
        return EMPTY
    if isinstance(content, Element):
        return content.render()
    return escape(content)
