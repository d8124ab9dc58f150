"""Family Domain Service — load, mutate, validate, save against the repository port.

Invariants:
    - One use case = one load, in-memory mutations, one save; divorce stores both
      families through a single all-or-nothing save_all
    - Every family passes the ComplexRuleValidator pipeline BEFORE any save; a pipeline
      failure raises its aggregated ValidationError and nothing is persisted
    - Blank ids fail with ValidationError before the repository is touched
    - Missing families raise ResourceNotFoundError; DatabaseError from the repository
      propagates unchanged
    - Errors are annotated with the failing use case (context.operation) and re-raised
      with their original type; nothing is swallowed
    - Cancellation is asyncio-native: CancelledError is never caught here

Design Decisions:
    - No logging inside: LoggingFamilyService decorates this class (ADR: core stays
      free of side-effecting dependencies)
    - add_parent takes an optional explicit status: the SINGLE -> MARRIED pairing is
      the caller's decision, not an implicit side effect
    - clock injectable: age rules are deterministic under test
"""

import functools
from datetime import date, datetime
from typing import Callable

from family_service.core.age_math import today_utc
from family_service.core.errors import (
    ErrorContext, FamilyServiceError, ResourceNotFoundError, ValidationError,
)
from family_service.core.family import Family
from family_service.core.family_dto import ChildDTO, FamilyDTO, ParentDTO
from family_service.core.person import Child, Parent
from family_service.core.repository_protocols import FamilyRepository
from family_service.core.validation_pipeline import ValidationContext
from family_service.core.validation_rules import ComplexRuleValidator


def use_case(operation: str):
    """Annotate FamilyServiceErrors raised by the wrapped coroutine with `operation`."""
    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except FamilyServiceError as e:
                if e.context.operation is None:
                    e.context.operation = operation
                raise
        return wrapper
    return decorator


def _require(value: str | None, field: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field} is required", field)
    return value.strip()


class FamilyDomainService:
    """Coordinates Family aggregate mutations with persistence."""

    def __init__(
        self,
        repository: FamilyRepository,
        validator: ComplexRuleValidator | None = None,
        clock: Callable[[], date] = today_utc,
    ):
        self._repo = repository
        self._validator = validator or ComplexRuleValidator()
        self._clock = clock

    # ─── Helpers ────────────────────────────────────────────────

    async def _load(self, family_id: str) -> Family:
        family = await self._repo.get_by_id(family_id)
        if family is None:
            raise ResourceNotFoundError(
                "Family", family_id, ErrorContext(family_id=family_id),
            )
        return family

    async def _persist(self, *families: Family) -> None:
        ctx = ValidationContext(today=self._clock())
        for family in families:
            try:
                self._validator.validate_family(family, ctx)
            except ValidationError as e:
                e.context.family_id = family.id
                raise
        if len(families) == 1:
            await self._repo.save(families[0])
        else:
            await self._repo.save_all(*families)

    # ─── Commands ───────────────────────────────────────────────

    @use_case("create_family")
    async def create_family(self, dto: FamilyDTO) -> FamilyDTO:
        family = Family.from_dto(dto, self._clock())
        if dto.id and await self._repo.get_by_id(family.id) is not None:
            raise ValidationError(
                f"family '{family.id}' already exists", "id",
                context=ErrorContext(family_id=family.id),
            )
        await self._persist(family)
        return family.to_dto()

    @use_case("add_parent")
    async def add_parent(
        self, family_id: str, parent: ParentDTO, status: str | None = None,
    ) -> FamilyDTO:
        family = await self._load(_require(family_id, "family_id"))
        today = self._clock()
        family.add_parent(Parent.from_dto(parent), today)
        if status is not None:
            family.change_status(status, today)
        await self._persist(family)
        return family.to_dto()

    @use_case("add_child")
    async def add_child(self, family_id: str, child: ChildDTO) -> FamilyDTO:
        family = await self._load(_require(family_id, "family_id"))
        family.add_child(Child.from_dto(child), self._clock())
        await self._persist(family)
        return family.to_dto()

    @use_case("remove_child")
    async def remove_child(self, family_id: str, child_id: str) -> FamilyDTO:
        family_id = _require(family_id, "family_id")
        child_id = _require(child_id, "child_id")
        family = await self._load(family_id)
        family.remove_child(child_id, self._clock())
        await self._persist(family)
        return family.to_dto()

    @use_case("mark_parent_deceased")
    async def mark_parent_deceased(
        self, family_id: str, parent_id: str, death_date: datetime,
    ) -> FamilyDTO:
        family_id = _require(family_id, "family_id")
        parent_id = _require(parent_id, "parent_id")
        if death_date is None:
            raise ValidationError("death_date is required", "death_date")
        family = await self._load(family_id)
        family.mark_parent_deceased(parent_id, death_date, self._clock())
        await self._persist(family)
        return family.to_dto()

    @use_case("divorce")
    async def divorce(
        self,
        family_id: str,
        custodial_parent_id: str,
        child_ids: list[str] | None = None,
        new_family_id: str | None = None,
    ) -> tuple[FamilyDTO, FamilyDTO]:
        family_id = _require(family_id, "family_id")
        custodial_parent_id = _require(custodial_parent_id, "custodial_parent_id")
        family = await self._load(family_id)
        if new_family_id and await self._repo.get_by_id(new_family_id) is not None:
            raise ValidationError(
                f"family '{new_family_id}' already exists", "new_family_id",
            )
        original, created = family.divorce(
            custodial_parent_id, child_ids or [], new_family_id, self._clock(),
        )
        await self._persist(original, created)
        return original.to_dto(), created.to_dto()

    @use_case("change_status")
    async def change_status(self, family_id: str, status: str) -> FamilyDTO:
        family = await self._load(_require(family_id, "family_id"))
        family.change_status(status, self._clock())
        await self._persist(family)
        return family.to_dto()

    @use_case("delete_family")
    async def delete_family(self, family_id: str) -> None:
        family_id = _require(family_id, "family_id")
        if not await self._repo.delete(family_id):
            raise ResourceNotFoundError(
                "Family", family_id, ErrorContext(family_id=family_id),
            )

    # ─── Queries ────────────────────────────────────────────────

    @use_case("get_family")
    async def get_family(self, family_id: str) -> FamilyDTO:
        family = await self._load(_require(family_id, "family_id"))
        return family.to_dto()

    @use_case("get_all_families")
    async def get_all_families(self) -> list[FamilyDTO]:
        return [f.to_dto() for f in await self._repo.get_all()]

    @use_case("find_families_by_parent")
    async def find_families_by_parent(self, parent_id: str) -> list[FamilyDTO]:
        parent_id = _require(parent_id, "parent_id")
        return [f.to_dto() for f in await self._repo.find_by_parent_id(parent_id)]

    @use_case("find_family_by_child")
    async def find_family_by_child(self, child_id: str) -> FamilyDTO:
        child_id = _require(child_id, "child_id")
        family = await self._repo.find_by_child_id(child_id)
        if family is None:
            raise ResourceNotFoundError("Family for child", child_id)
        return family.to_dto()
