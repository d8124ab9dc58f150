"""Family DTOs — read-only projections that cross the core boundary.

Invariants:
    - Frozen: a DTO handed out by the service cannot mutate the aggregate it came from
    - Tuples preserve parent/child order exactly as stored in the aggregate
    - Dates are the aggregate's own UTC datetimes: no truncation, no reformatting
    - DTO -> aggregate -> DTO is equal for UTC-aware input; naive input comes back
      UTC-aware (same wall-clock value) and is stable from the second round trip on
    - parent_count / children_count are derived; FamilyDTO.from_parts computes them

Design Decisions:
    - Dataclasses, not pydantic: core stays free of API-layer dependencies; the
      API schemas (schemas/family.py) convert from these
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class PersonDTO:
    id: str
    first_name: str
    last_name: str
    birth_date: datetime
    death_date: datetime | None = None


@dataclass(frozen=True)
class ParentDTO(PersonDTO):
    pass


@dataclass(frozen=True)
class ChildDTO(PersonDTO):
    pass


@dataclass(frozen=True)
class FamilyDTO:
    id: str
    status: str
    parents: tuple[ParentDTO, ...] = field(default_factory=tuple)
    children: tuple[ChildDTO, ...] = field(default_factory=tuple)
    parent_count: int = 0
    children_count: int = 0

    @classmethod
    def from_parts(
        cls,
        id: str,
        status: str,
        parents: tuple[ParentDTO, ...] | list[ParentDTO],
        children: tuple[ChildDTO, ...] | list[ChildDTO] = (),
    ) -> "FamilyDTO":
        parents, children = tuple(parents), tuple(children)
        return cls(
            id=id, status=status, parents=parents, children=children,
            parent_count=len(parents), children_count=len(children),
        )
