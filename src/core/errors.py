"""Error taxonomy for the DSL, component and reactive layers."""

from typing import Any


class SwiftUIError(Exception):
    """Base class for all library errors."""


# ============================================================================
# Component construction and usage
# ============================================================================


class ComponentError(SwiftUIError):
    """Component construction or usage failed."""

    def __init__(self, message: str, component: str | None = None) -> None:
        super().__init__(message)
        self.component = component


class MissingRequiredProp(ComponentError):
    """A required prop was not supplied and has no default."""

    def __init__(self, component: str, prop: str) -> None:
        super().__init__(f"Required prop '{prop}' is missing for {component}", component)
        self.prop = prop


class PropTypeMismatch(ComponentError, TypeError):
    """A prop value does not match its declared type."""

    def __init__(
        self,
        component: str,
        prop: str,
        expected: tuple[type, ...],
        actual: Any,
    ) -> None:
        names = " | ".join(t.__name__ for t in expected)
        super().__init__(
            f"Prop '{prop}' of {component} must be {names}, got {type(actual).__name__}",
            component,
        )
        self.prop = prop
        self.expected = expected
        self.actual = actual


class UnknownProp(ComponentError, TypeError):
    """Constructor received a keyword that is not a declared prop."""

    def __init__(self, component: str, names: list[str]) -> None:
        super().__init__(f"Unknown prop(s) for {component}: {', '.join(sorted(names))}", component)
        self.names = names


class UnknownState(ComponentError, KeyError):
    """A state slot name is not declared on the component."""

    def __init__(self, component: str, name: str) -> None:
        ComponentError.__init__(self, f"{component} has no state '{name}'", component)
        self.name = name

    def __str__(self) -> str:
        return self.args[0]


class DefinitionError(SwiftUIError):
    """Component class declaration is invalid."""


# ============================================================================
# DSL tree building
# ============================================================================


class RegistrationInvariantViolation(SwiftUIError):
    """An element would occupy more than one position in the tree.

    This is a programming error in a builder, never a user-facing condition.
    """


class ComponentDepthExceeded(SwiftUIError):
    """Nested DSL contexts went deeper than the configured maximum."""

    def __init__(self, depth: int, max_depth: int) -> None:
        super().__init__(
            f"Maximum component nesting depth ({max_depth}) exceeded at depth {depth}"
        )
        self.depth = depth
        self.max_depth = max_depth


# ============================================================================
# Reactive layer
# ============================================================================


class StoreAccessError(SwiftUIError):
    """Store data touched outside its update critical section."""


class BindingReadOnlyError(SwiftUIError, AttributeError):
    """Write attempted through a binding without a setter."""


__all__ = [
    "SwiftUIError",
    "ComponentError",
    "MissingRequiredProp",
    "PropTypeMismatch",
    "UnknownProp",
    "UnknownState",
    "DefinitionError",
    "RegistrationInvariantViolation",
    "ComponentDepthExceeded",
    "StoreAccessError",
    "BindingReadOnlyError",
]
