"""
Enumeration definitions for the Renew Admin backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models and to store cleanly in TEXT columns.
"""

from enum import Enum


class Level(str, Enum):
    """
    Levels of the classification hierarchy.

    B1 is the top-level label (e.g., a housing project), B2 and B3 are the
    second and third classification labels, and DETAIL is the free-text
    description attached to an entry.
    """
    B1 = "B1"
    B2 = "B2"
    B3 = "B3"
    DETAIL = "DETAIL"


class ScopeType(str, Enum):
    """
    Scope of an operator-configured percentage override.

    - B2: percentage for one B2 value under a B1
    - B3: percentage for one B3 value under a B1/B2 pair
    - B3_DETAIL: percentage for one distinct trimmed detail under B1/B2/B3

    B2 and B3 overrides replace the displayed percentage; B3_DETAIL overrides
    are attached alongside the natural percentage as ``configuredPercentage``.
    """
    B2 = "B2"
    B3 = "B3"
    B3_DETAIL = "B3_DETAIL"

    @classmethod
    def for_level(cls, level: Level) -> "ScopeType":
        """Map a distribution level (B2/B3) to the override scope keyed by it."""
        if level == Level.B2:
            return cls.B2
        if level == Level.B3:
            return cls.B3
        raise ValueError(f"No override scope for level {level.value}")


class UserRole(str, Enum):
    """Account roles; only admins may import data or edit percentages."""
    ADMIN = "admin"
    USER = "user"


__all__ = ['Level', 'ScopeType', 'UserRole']
