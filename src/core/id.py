"""ID Generation System.

ULID-based identifiers for component instances, store subscriptions and
registered actions.

Features:
- ULIDs: Lexicographically sortable, timestamp-based
- Type-safe: NewType wrappers for different ID categories
- Prefixed: Type-specific prefixes for debugging (cmp_*, sub_*, act_*)
"""

from typing import NewType
from ulid import ULID

# ============================================================================
# Type-Safe ID Wrappers
# ============================================================================

ComponentID = NewType("ComponentID", str)
"""Component instance identifier (client-side correlation)"""

SubscriptionID = NewType("SubscriptionID", str)
"""Store subscription identifier"""

ActionID = NewType("ActionID", str)
"""Registered component action identifier"""

# ============================================================================
# ID Prefixes
# ============================================================================


class Prefix:
    """ID prefix constants."""

    COMPONENT = "cmp"
    SUBSCRIPTION = "sub"
    ACTION = "act"


# ============================================================================
# ULID Generator
# ============================================================================


class Generator:
    """ULID generator.

    Monotonic within the same millisecond; safe to share across threads.
    """

    def generate(self) -> str:
        """Generate a new ULID."""
        return str(ULID())

    def generate_with_prefix(self, prefix: str) -> str:
        """Generate ULID with type prefix."""
        return f"{prefix}_{self.generate()}"


def _ulid_part(id_str: str) -> str:
    return id_str.rsplit("_", 1)[-1]


_generator = Generator()

# ============================================================================
# Typed ID Generators
# ============================================================================


def new_component_id() -> ComponentID:
    """Generate new component ID."""
    return ComponentID(_generator.generate_with_prefix(Prefix.COMPONENT))


def new_subscription_id() -> SubscriptionID:
    """Generate new subscription ID."""
    return SubscriptionID(_generator.generate_with_prefix(Prefix.SUBSCRIPTION))


def new_action_id() -> ActionID:
    """Generate new action ID."""
    return ActionID(_generator.generate_with_prefix(Prefix.ACTION))


# ============================================================================
# Validation and Parsing
# ============================================================================


def is_valid(id_str: str) -> bool:
    """Check if string is a valid (optionally prefixed) ULID.

    Args:
        id_str: ID string to validate

    Returns:
        True if valid ULID format
    """
    ulid_part = _ulid_part(id_str)
    if len(ulid_part) != 26:
        return False
    try:
        ULID.from_str(ulid_part)
        return True
    except ValueError:
        return False


def extract_prefix(id_str: str) -> str | None:
    """Extract prefix from prefixed ID.

    Args:
        id_str: Prefixed ID string

    Returns:
        Prefix string or None if no prefix
    """
    parts = id_str.rsplit("_", 1)
    return parts[0] if len(parts) == 2 else None


def is_action_id(id_str: str) -> bool:
    """Check if ID is an action ID."""
    return extract_prefix(id_str) == Prefix.ACTION and is_valid(id_str)
