"""Person Entities — Parent and Child, validated at construction.

Invariants:
    - id non-blank; names stripped, >= 2 chars, letters/spaces/hyphens/apostrophes only
    - birth_date and death_date are aware UTC datetimes (naive input taken as UTC)
    - birth_date not in the future; death_date (if any) strictly after birth_date, not in the future
    - Parents are at most MAX_PARENT_AGE years old
    - Instances are immutable: mark_deceased returns a new Parent

Design Decisions:
    - Frozen dataclasses: the Family aggregate swaps whole tuples on mutation, so no
      entity can change behind its back (ADR: replace, don't patch)
    - Construction collects every field error before raising (one ValidationError);
      mark_deceased fails fast because each precondition is independently fatal
    - Minimum parent age is a FAMILY invariant (checked at validation time), not here
"""

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import TypeVar

from family_service.core.age_math import age_on, as_utc, to_date, today_utc
from family_service.core.domain_types import MAX_PARENT_AGE, MIN_NAME_LENGTH
from family_service.core.errors import ParentAlreadyDeceasedError, ValidationError
from family_service.core.family_dto import ChildDTO, ParentDTO, PersonDTO
from family_service.core.validation_pipeline import ValidationResult

P = TypeVar("P", bound="Person")

_NAME_PUNCTUATION = frozenset(" -'")


def _is_valid_name(name: str) -> bool:
    return all(ch.isalpha() or ch in _NAME_PUNCTUATION for ch in name)


def check_death_date(
    birth_date: datetime, death_date: datetime, today: date | None = None,
) -> str | None:
    """Return the first problem with a death date, or None."""
    if not death_date > birth_date:
        return "death date must be after birth date"
    if to_date(death_date) > (today or today_utc()):
        return "death date cannot be in the future"
    return None


@dataclass(frozen=True)
class Person:
    """Shared shape of parents and children."""
    id: str
    first_name: str
    last_name: str
    birth_date: datetime
    death_date: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", (self.id or "").strip())
        object.__setattr__(self, "first_name", (self.first_name or "").strip())
        object.__setattr__(self, "last_name", (self.last_name or "").strip())
        if isinstance(self.birth_date, datetime):
            object.__setattr__(self, "birth_date", as_utc(self.birth_date))
        if isinstance(self.death_date, datetime):
            object.__setattr__(self, "death_date", as_utc(self.death_date))
        self._validation_result().raise_if_invalid(
            f"invalid {type(self).__name__.lower()}",
        )

    def _validation_result(self) -> ValidationResult:
        result = ValidationResult()
        if not self.id:
            result.add("id is required", "ID")
        for label, value in (("FirstName", self.first_name), ("LastName", self.last_name)):
            if len(value) < MIN_NAME_LENGTH:
                result.add(f"must be at least {MIN_NAME_LENGTH} characters long", label)
            elif not _is_valid_name(value):
                result.add("must contain only letters, spaces, hyphens and apostrophes", label)
        if not isinstance(self.birth_date, datetime):
            result.add("birth date is required", "BirthDate")
            return result
        if to_date(self.birth_date) > today_utc():
            result.add("birth date cannot be in the future", "BirthDate")
        if self.death_date is not None:
            if not isinstance(self.death_date, datetime):
                result.add("death date must be a datetime", "DeathDate")
            else:
                problem = check_death_date(self.birth_date, self.death_date)
                if problem:
                    result.add(problem, "DeathDate")
        return result

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_deceased(self) -> bool:
        return self.death_date is not None

    @property
    def identity_key(self) -> tuple[str, str, date]:
        """(first name, last name, birth date) — duplicate detection key."""
        return (self.first_name, self.last_name, to_date(self.birth_date))

    def age(self, on: date | None = None) -> int:
        return age_on(self.birth_date, on)

    def _to_dto(self, dto_type: type[PersonDTO]) -> PersonDTO:
        return dto_type(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            birth_date=self.birth_date,
            death_date=self.death_date,
        )

    @classmethod
    def from_dto(cls: type[P], dto: PersonDTO) -> P:
        return cls(
            id=dto.id,
            first_name=dto.first_name,
            last_name=dto.last_name,
            birth_date=dto.birth_date,
            death_date=dto.death_date,
        )


@dataclass(frozen=True)
class Parent(Person):
    """Adult member of a family. Never removed, only marked deceased."""

    def _validation_result(self) -> ValidationResult:
        result = super()._validation_result()
        if isinstance(self.birth_date, datetime) and self.age() > MAX_PARENT_AGE:
            result.add(f"age cannot exceed {MAX_PARENT_AGE} years", "BirthDate")
        return result

    def mark_deceased(self, death_date: datetime, today: date | None = None) -> "Parent":
        if self.is_deceased:
            raise ParentAlreadyDeceasedError(self.id)
        death_date = as_utc(death_date)
        problem = check_death_date(self.birth_date, death_date, today)
        if problem:
            raise ValidationError(problem, "DeathDate")
        return replace(self, death_date=death_date)

    def to_dto(self) -> ParentDTO:
        return self._to_dto(ParentDTO)


@dataclass(frozen=True)
class Child(Person):
    """Child member of a family; belongs to exactly one family at a time."""

    def to_dto(self) -> ChildDTO:
        return self._to_dto(ChildDTO)
