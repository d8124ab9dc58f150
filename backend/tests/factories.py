"""Test factories — canonical parents, children and families on a fixed clock.

TODAY is the reference date every aggregate/service test validates against;
all birth and death dates below sit safely before it.
"""

from datetime import date, datetime, timezone

from family_service.core.domain_types import FamilyStatus
from family_service.core.family import Family
from family_service.core.family_dto import ChildDTO, ParentDTO
from family_service.core.person import Child, Parent

TODAY = date(2024, 6, 15)


def at(year: int, month: int = 1, day: int = 1) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def parent(
    pid="p1", first="John", last="Doe", born=None, died=None,
) -> Parent:
    return Parent(pid, first, last, born or at(1980, 1, 1), died)


def child(cid="c1", first="Alice", last="Doe", born=None) -> Child:
    return Child(cid, first, last, born or at(2010, 5, 5))


def parent_dto(pid="p1", first="John", last="Doe", born=None) -> ParentDTO:
    return ParentDTO(pid, first, last, born or at(1980, 1, 1))


def child_dto(cid="c1", first="Alice", last="Doe", born=None) -> ChildDTO:
    return ChildDTO(cid, first, last, born or at(2010, 5, 5))


def john() -> Parent:
    return parent("p1", "John", "Doe", at(1980, 1, 1))


def jane() -> Parent:
    return parent("p2", "Jane", "Doe", at(1982, 3, 3))


def married_family(fid="f1", children=()) -> Family:
    return Family.create(fid, FamilyStatus.MARRIED, [john(), jane()], children, TODAY)


def single_family(fid="f2", children=()) -> Family:
    return Family.create(fid, FamilyStatus.SINGLE, [john()], children, TODAY)
