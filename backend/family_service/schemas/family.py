"""Family Schemas — Pydantic models for the /api/v1/families endpoints.

Invariants:
    - Ids bounded by the persistence column width (64), names by 100
    - status fields accept any casing of a FamilyStatus name and normalise to it
    - Dates are ISO-8601; naive values are read as UTC by the core entities

Design Decisions:
    - Name/date rules (letters only, not in the future, ...) are NOT duplicated here:
      core/person.py owns them and reports every problem at once
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from family_service.core.domain_types import parse_status
from family_service.core.family_dto import (
    ChildDTO, FamilyDTO, ParentDTO, PersonDTO,
)


def _normalise_status(v: str | None) -> str | None:
    if v is None:
        return None
    return parse_status(v).value


class PersonPayload(BaseModel):
    """Parent or child as submitted by a client."""
    id: str = Field(min_length=1, max_length=64)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    birth_date: datetime
    death_date: datetime | None = None

    def to_parent_dto(self) -> ParentDTO:
        return ParentDTO(**self.model_dump())

    def to_child_dto(self) -> ChildDTO:
        return ChildDTO(**self.model_dump())


class FamilyCreate(BaseModel):
    """New family; id optional (generated when omitted)."""
    id: str | None = Field(None, max_length=64)
    status: str
    parents: list[PersonPayload] = Field(min_length=1)
    children: list[PersonPayload] = []

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str | None) -> str | None:
        return _normalise_status(v)

    def to_dto(self) -> FamilyDTO:
        return FamilyDTO.from_parts(
            self.id or "",
            self.status,
            [p.to_parent_dto() for p in self.parents],
            [c.to_child_dto() for c in self.children],
        )


class AddParentRequest(BaseModel):
    """Parent to attach, with an optional status transition applied in the same step."""
    parent: PersonPayload
    status: str | None = None

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str | None) -> str | None:
        return _normalise_status(v)


class MarkDeceasedRequest(BaseModel):
    death_date: datetime


class DivorceRequest(BaseModel):
    """custodial_parent_id moves to a new family together with child_ids."""
    custodial_parent_id: str = Field(min_length=1, max_length=64)
    child_ids: list[str] = []
    new_family_id: str | None = Field(None, max_length=64)


class StatusChangeRequest(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str | None) -> str | None:
        return _normalise_status(v)


class PersonResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    birth_date: datetime
    death_date: datetime | None = None

    @classmethod
    def from_dto(cls, dto: PersonDTO) -> "PersonResponse":
        return cls(
            id=dto.id,
            first_name=dto.first_name,
            last_name=dto.last_name,
            birth_date=dto.birth_date,
            death_date=dto.death_date,
        )


class FamilyResponse(BaseModel):
    """Family response — public-facing projection of a FamilyDTO."""
    id: str
    status: str
    parents: list[PersonResponse]
    children: list[PersonResponse]
    parent_count: int
    children_count: int

    @classmethod
    def from_dto(cls, dto: FamilyDTO) -> "FamilyResponse":
        return cls(
            id=dto.id,
            status=dto.status,
            parents=[PersonResponse.from_dto(p) for p in dto.parents],
            children=[PersonResponse.from_dto(c) for c in dto.children],
            parent_count=dto.parent_count,
            children_count=dto.children_count,
        )
