"""Domain Types — verifies identity types, status enum and status parsing.

Tests:
    - NewType wrappers are transparent strings
    - FamilyStatus has exactly five states
    - parse_status is case-insensitive and rejects unknown values
    - Living-parent expectations cover every status except ABANDONED
    - WIDOWED accepts zero or one living parent
"""

import pytest

from family_service.core.domain_types import (
    FamilyId, ParentId, ChildId,
    FamilyStatus, LIVING_PARENTS_BY_STATUS, parse_status,
)


def test_identity_types_wrap_str():
    assert FamilyId("f1") == "f1"
    assert ParentId("p1") == "p1"
    assert ChildId("c1") == "c1"


def test_family_status_has_five_states():
    assert {s.value for s in FamilyStatus} == {
        "SINGLE", "MARRIED", "DIVORCED", "WIDOWED", "ABANDONED",
    }


def test_parse_status_ignores_case_and_whitespace():
    assert parse_status(" married ") is FamilyStatus.MARRIED
    assert parse_status("Widowed") is FamilyStatus.WIDOWED


def test_parse_status_passes_enum_through():
    assert parse_status(FamilyStatus.SINGLE) is FamilyStatus.SINGLE


def test_parse_status_rejects_unknown_value():
    with pytest.raises(ValueError):
        parse_status("ENGAGED")


def test_abandoned_has_no_living_parent_expectation():
    assert FamilyStatus.ABANDONED not in LIVING_PARENTS_BY_STATUS
    assert LIVING_PARENTS_BY_STATUS[FamilyStatus.MARRIED] == {2}


def test_widowed_allows_zero_or_one_living_parent():
    assert LIVING_PARENTS_BY_STATUS[FamilyStatus.WIDOWED] == {0, 1}
