"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - FamilyId, ParentId, ChildId wrap opaque strings — never interpret their content
    - FamilyStatus values are the persisted/wire representation (upper-case strings)
    - LIVING_PARENTS_BY_STATUS is the single source of truth for status/parent-count pairing

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (ADR: DTOs cross the API boundary)
    - ABANDONED has no entry in LIVING_PARENTS_BY_STATUS: it is constrained by children, not parents
    - WIDOWED allows zero living parents: the last living parent of a family may die
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

FamilyId = NewType("FamilyId", str)
ParentId = NewType("ParentId", str)
ChildId = NewType("ChildId", str)


# ─── Limits ──────────────────────────────────────────────────────

MAX_PARENTS: int = 2
MIN_PARENT_AGE: int = 18
MAX_PARENT_AGE: int = 150
MIN_PARENT_CHILD_AGE_GAP: int = 12
MIN_NAME_LENGTH: int = 2


# ─── Enums ───────────────────────────────────────────────────────

class FamilyStatus(str, Enum):
    """Family lifecycle states — maps to DB `status` column."""
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"
    ABANDONED = "ABANDONED"


LIVING_PARENTS_BY_STATUS: dict[FamilyStatus, frozenset[int]] = {
    FamilyStatus.SINGLE: frozenset({1}),
    FamilyStatus.MARRIED: frozenset({2}),
    FamilyStatus.DIVORCED: frozenset({1}),
    FamilyStatus.WIDOWED: frozenset({0, 1}),
}


def parse_status(value: "FamilyStatus | str") -> FamilyStatus:
    """Coerce a wire value to FamilyStatus. Case-insensitive; raises ValueError."""
    if isinstance(value, FamilyStatus):
        return value
    return FamilyStatus(str(value).strip().upper())
