"""Family Aggregate — the consistency boundary for a family and its members.

Invariants:
    - 1 <= parents <= 2 (living or deceased); parents are never removed, only marked deceased
    - MARRIED <=> two living parents; SINGLE/DIVORCED => one living parent;
      WIDOWED => at most one living parent
    - ABANDONED => at least one child
    - No duplicate parent id, child id, or (first name, last name, birth date) parent
    - Every child born strictly after, and >= 12 full years after, every parent
    - Every parent >= 18 full years old at validation time
    - A failed mutation leaves the aggregate untouched: mutations build a candidate,
      check it, and only then swap state in

Design Decisions:
    - No transition table: status changes are side effects of mark_parent_deceased,
      divorce and the explicit change_status (ADR: transitions live with their cause)
    - add_parent does NOT change status and skips the status checks: pairing it with a
      transition (e.g. SINGLE -> MARRIED) is the caller's job; the rule pipeline rejects
      the inconsistent intermediate state if the caller forgets
    - create() aggregates every violation; mutations fail fast on the first one
    - Last living parent dying moves the family to WIDOWED with no living parent, with or
      without children; ABANDONED is only ever set explicitly (create or change_status)
"""

from datetime import date, datetime
from typing import Iterable, Iterator
from uuid import uuid4

from family_service.core.age_math import today_utc
from family_service.core.domain_types import (
    FamilyId, FamilyStatus, MAX_PARENTS, MIN_PARENT_AGE, MIN_PARENT_CHILD_AGE_GAP,
    parse_status,
)
from family_service.core.errors import (
    AbandonedFamilyRequiresChildError, ChildExistsError,
    DivorceRequiresTwoParentsError, FamilyNotMarriedError,
    FamilyStatusUpdateFailedError, FamilyTooManyParentsError,
    ParentDuplicateError, ParentExistsError, ResourceNotFoundError,
    ValidationError,
)
from family_service.core.family_dto import FamilyDTO
from family_service.core.person import Child, Parent
from family_service.core.validation_pipeline import RuleViolation, ValidationResult
from family_service.core.validation_rules import (
    abandoned_problem, age_gap_problem, birth_order_problem,
    living_parents_problem, parent_age_problem,
)


def _coerce_status(status: FamilyStatus | str) -> FamilyStatus:
    try:
        return parse_status(status)
    except ValueError:
        raise ValidationError(f"invalid status '{status}'", "Status") from None


def _duplicates(values: Iterable) -> list:
    seen, dupes = set(), []
    for value in values:
        if value in seen:
            dupes.append(value)
        seen.add(value)
    return dupes


class Family:
    """Family aggregate root. Build with Family.create or Family.from_dto."""

    def __init__(
        self,
        family_id: str,
        status: FamilyStatus,
        parents: tuple[Parent, ...],
        children: tuple[Child, ...],
    ):
        # Unvalidated: callers outside this module go through create()
        self._id = FamilyId(family_id)
        self._status = status
        self._parents = parents
        self._children = children

    # ─── Construction ───────────────────────────────────────────

    @classmethod
    def create(
        cls,
        family_id: str | None,
        status: FamilyStatus | str,
        parents: Iterable[Parent],
        children: Iterable[Child] = (),
        today: date | None = None,
    ) -> "Family":
        """Validated factory. Generates a UUID4 id when none is given."""
        family = cls(
            (family_id or "").strip() or str(uuid4()),
            _coerce_status(status),
            tuple(parents),
            tuple(children),
        )
        family.validate(today)
        return family

    @classmethod
    def from_dto(cls, dto: FamilyDTO, today: date | None = None) -> "Family":
        return cls.create(
            dto.id,
            dto.status,
            [Parent.from_dto(p) for p in dto.parents],
            [Child.from_dto(c) for c in dto.children],
            today,
        )

    def to_dto(self) -> FamilyDTO:
        return FamilyDTO.from_parts(
            self._id,
            self._status.value,
            [p.to_dto() for p in self._parents],
            [c.to_dto() for c in self._children],
        )

    # ─── Read access ────────────────────────────────────────────

    @property
    def id(self) -> str:
        return self._id

    @property
    def status(self) -> FamilyStatus:
        return self._status

    @property
    def parents(self) -> tuple[Parent, ...]:
        return self._parents

    @property
    def children(self) -> tuple[Child, ...]:
        return self._children

    @property
    def living_parents(self) -> tuple[Parent, ...]:
        return tuple(p for p in self._parents if not p.is_deceased)

    @property
    def parent_count(self) -> int:
        return len(self._parents)

    @property
    def children_count(self) -> int:
        return len(self._children)

    def find_parent(self, parent_id: str) -> Parent | None:
        return next((p for p in self._parents if p.id == parent_id), None)

    def find_child(self, child_id: str) -> Child | None:
        return next((c for c in self._children if c.id == child_id), None)

    def __repr__(self) -> str:
        return (
            f"Family(id={self._id!r}, status={self._status.value}, "
            f"parents={len(self._parents)}, children={len(self._children)})"
        )

    # ─── Invariants ─────────────────────────────────────────────

    def _iter_violations(
        self, today: date, include_status: bool = True,
    ) -> Iterator[RuleViolation]:
        for i, p in enumerate(self._parents):
            if not isinstance(p, Parent):
                yield RuleViolation(f"parent at index {i} is not a Parent", "Parents")
                return
        for i, c in enumerate(self._children):
            if not isinstance(c, Child):
                yield RuleViolation(f"child at index {i} is not a Child", "Children")
                return

        if not self._parents:
            yield RuleViolation("family must have at least one parent", "Parents")
        if len(self._parents) > MAX_PARENTS:
            yield RuleViolation("family cannot have more than two parents", "Parents")
        for parent_id in _duplicates(p.id for p in self._parents):
            yield RuleViolation(f"duplicate parent id '{parent_id}'", "Parents")
        if _duplicates(p.identity_key for p in self._parents):
            yield RuleViolation("duplicate parent in family", "Parents")
        for child_id in _duplicates(c.id for c in self._children):
            yield RuleViolation(f"duplicate child id '{child_id}'", "Children")

        for parent in self._parents:
            problem = parent_age_problem(parent, today, MIN_PARENT_AGE)
            if problem:
                yield RuleViolation(problem, "Parents")
        for child in self._children:
            for parent in self._parents:
                problem = (
                    birth_order_problem(parent, child)
                    or age_gap_problem(parent, child, MIN_PARENT_CHILD_AGE_GAP)
                )
                if problem:
                    yield RuleViolation(problem, "Children")

        if include_status:
            problem = living_parents_problem(self._status, len(self.living_parents))
            if problem:
                yield RuleViolation(problem, "Status")
            problem = abandoned_problem(self._status, self._children)
            if problem:
                yield RuleViolation(problem, "Status")

    def check(self, today: date | None = None) -> ValidationResult:
        """Every structural violation of the current state."""
        result = ValidationResult()
        result.extend(self._iter_violations(today or today_utc()))
        return result

    def validate(self, today: date | None = None) -> None:
        self.check(today).raise_if_invalid(f"invalid family '{self._id}'")

    def _fail_fast(self, today: date | None, include_status: bool = True) -> None:
        violation = next(
            self._iter_violations(today or today_utc(), include_status), None,
        )
        if violation is not None:
            raise ValidationError(violation.message, violation.field, (violation,))

    # ─── Mutations ──────────────────────────────────────────────

    def _evolve(
        self,
        status: FamilyStatus | None = None,
        parents: tuple[Parent, ...] | None = None,
        children: tuple[Child, ...] | None = None,
    ) -> "Family":
        return Family(
            self._id,
            status if status is not None else self._status,
            parents if parents is not None else self._parents,
            children if children is not None else self._children,
        )

    def _commit(self, candidate: "Family") -> None:
        self._status = candidate._status
        self._parents = candidate._parents
        self._children = candidate._children

    def add_parent(self, parent: Parent, today: date | None = None) -> None:
        if not isinstance(parent, Parent):
            raise ValidationError("parent is required", "Parent")
        if len(self._parents) >= MAX_PARENTS:
            raise FamilyTooManyParentsError()
        for existing in self._parents:
            if existing.id == parent.id:
                raise ParentExistsError(parent.id)
            if existing.identity_key == parent.identity_key:
                raise ParentDuplicateError()

        candidate = self._evolve(parents=self._parents + (parent,))
        candidate._fail_fast(today, include_status=False)
        self._commit(candidate)

    def add_child(self, child: Child, today: date | None = None) -> None:
        if not isinstance(child, Child):
            raise ValidationError("child is required", "Child")
        if self.find_child(child.id) is not None:
            raise ChildExistsError(child.id)

        candidate = self._evolve(children=self._children + (child,))
        candidate._fail_fast(today)
        self._commit(candidate)

    def remove_child(self, child_id: str, today: date | None = None) -> Child:
        child = self.find_child(child_id)
        if child is None:
            raise ResourceNotFoundError("Child", child_id)
        if self._status == FamilyStatus.ABANDONED and len(self._children) == 1:
            raise AbandonedFamilyRequiresChildError()

        candidate = self._evolve(
            children=tuple(c for c in self._children if c.id != child_id),
        )
        candidate._fail_fast(today)
        self._commit(candidate)
        return child

    def mark_parent_deceased(
        self, parent_id: str, death_date: datetime, today: date | None = None,
    ) -> None:
        parent = self.find_parent(parent_id)
        if parent is None:
            raise ResourceNotFoundError("Parent", parent_id)
        deceased = parent.mark_deceased(death_date, today)

        living_before = len(self.living_parents)
        status = self._status
        if (status == FamilyStatus.MARRIED and living_before == 2) or living_before == 1:
            status = FamilyStatus.WIDOWED

        candidate = self._evolve(
            status=status,
            parents=tuple(deceased if p.id == parent_id else p for p in self._parents),
        )
        result = candidate.check(today)
        if not result.is_valid:
            raise FamilyStatusUpdateFailedError(
                f"marking parent '{parent_id}' deceased leaves family inconsistent: "
                f"{'; '.join(result.messages)}",
                tuple(result.violations),
            )
        self._commit(candidate)

    def divorce(
        self,
        custodial_parent_id: str,
        child_ids: Iterable[str] = (),
        new_family_id: str | None = None,
        today: date | None = None,
    ) -> tuple["Family", "Family"]:
        """Split a married family.

        The custodial parent and the children listed in `child_ids` move to a new
        family; the other parent keeps this family id and the remaining children.
        Both families end DIVORCED. Returns (this family, new family).
        """
        if self._status != FamilyStatus.MARRIED:
            raise FamilyNotMarriedError(self._status.value)
        if len(self._parents) != 2:
            raise DivorceRequiresTwoParentsError(len(self._parents))

        custodial = self.find_parent(custodial_parent_id)
        if custodial is None:
            raise ResourceNotFoundError("Parent", custodial_parent_id)
        remaining = next(p for p in self._parents if p.id != custodial_parent_id)

        child_ids = list(child_ids)
        dupes = _duplicates(child_ids)
        if dupes:
            raise ValidationError(f"duplicate child id '{dupes[0]}' in divorce", "child_ids")
        for child_id in child_ids:
            if self.find_child(child_id) is None:
                raise ResourceNotFoundError("Child", child_id)
        if new_family_id and new_family_id.strip() == self._id:
            raise ValidationError("new family id must differ from the original", "new_family_id")

        moving = set(child_ids)
        new_family = Family.create(
            new_family_id,
            FamilyStatus.DIVORCED,
            [custodial],
            [c for c in self._children if c.id in moving],
            today,
        )
        candidate = self._evolve(
            status=FamilyStatus.DIVORCED,
            parents=(remaining,),
            children=tuple(c for c in self._children if c.id not in moving),
        )
        candidate._fail_fast(today)
        self._commit(candidate)
        return self, new_family

    def change_status(self, status: FamilyStatus | str, today: date | None = None) -> None:
        """Explicit transition; the resulting state must be fully consistent."""
        new_status = _coerce_status(status)
        candidate = self._evolve(status=new_status)
        result = candidate.check(today)
        if not result.is_valid:
            raise FamilyStatusUpdateFailedError(
                f"cannot change status from {self._status.value} to {new_status.value}: "
                f"{'; '.join(result.messages)}",
                tuple(result.violations),
            )
        self._commit(candidate)
