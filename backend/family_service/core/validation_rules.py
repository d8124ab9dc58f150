"""Family Rules — independent, composable checks over a family's membership and status.

Invariants:
    - Every rule is PURE: reads the family, returns RuleViolation or None, never mutates
    - Parent-count rules count LIVING parents: deceased parents stay attached historically
    - Age rules use calendar-exact full years (age_math.full_years_between)
    - The *_problem helpers are the single source of truth shared with the Family
      aggregate's own invariant checks, so both layers always agree

Design Decisions:
    - Rules typed against FamilyLike Protocol: no import of family.py, no isinstance probing
    - Each rule reports its FIRST failure; the pipeline aggregates across rules
    - Factories build the two standard pipelines; thresholds injectable from settings
"""

from datetime import date
from typing import Protocol, Sequence

from family_service.core.age_math import full_years_between
from family_service.core.domain_types import (
    FamilyStatus, LIVING_PARENTS_BY_STATUS,
    MIN_PARENT_AGE, MIN_PARENT_CHILD_AGE_GAP,
)
from family_service.core.person import Child, Parent
from family_service.core.validation_pipeline import (
    CompositeRule, Pipeline, RuleViolation, ValidationContext, ValidationResult,
)


class FamilyLike(Protocol):
    """Structural contract the rules read from."""

    @property
    def id(self) -> str: ...
    @property
    def status(self) -> FamilyStatus: ...
    @property
    def parents(self) -> tuple[Parent, ...]: ...
    @property
    def children(self) -> tuple[Child, ...]: ...
    @property
    def living_parents(self) -> tuple[Parent, ...]: ...


# ─── Shared checks ──────────────────────────────────────────────

def parent_age_problem(parent: Parent, today: date, minimum_age: int) -> str | None:
    if parent.age(today) < minimum_age:
        return (
            f"parent '{parent.id}' does not meet minimum age requirement "
            f"({minimum_age} years)"
        )
    return None


def birth_order_problem(parent: Parent, child: Child) -> str | None:
    if not child.birth_date > parent.birth_date:
        return f"child '{child.id}' has birth date before parent '{parent.id}'"
    return None


def age_gap_problem(parent: Parent, child: Child, minimum_gap: int) -> str | None:
    if full_years_between(parent.birth_date, child.birth_date) < minimum_gap:
        return (
            f"child '{child.id}' has too small age gap with parent '{parent.id}' "
            f"(minimum {minimum_gap} years)"
        )
    return None


def living_parents_problem(status: FamilyStatus, living: int) -> str | None:
    """Status vs living-parent count, both directions of MARRIED <=> 2."""
    allowed = LIVING_PARENTS_BY_STATUS.get(status)
    if allowed is not None and living not in allowed:
        most = max(allowed)
        plural = "parent" if most == 1 else "parents"
        quantity = f"exactly {most}" if len(allowed) == 1 else f"at most {most}"
        return f"{status.value.lower()} family must have {quantity} living {plural}"
    if living == 2 and status != FamilyStatus.MARRIED:
        return f"{status.value.lower()} family cannot have two living parents"
    return None


def abandoned_problem(status: FamilyStatus, children: Sequence[Child]) -> str | None:
    if status == FamilyStatus.ABANDONED and not children:
        return "abandoned family must have at least one child"
    return None


# ─── Leaf rules ─────────────────────────────────────────────────

class ParentMinimumAgeRule:
    """Every parent is at least `minimum_age` full years old."""

    def __init__(self, minimum_age: int = MIN_PARENT_AGE):
        self.minimum_age = minimum_age

    def validate(self, ctx: ValidationContext, family: FamilyLike) -> RuleViolation | None:
        for parent in family.parents:
            problem = parent_age_problem(parent, ctx.today, self.minimum_age)
            if problem:
                return RuleViolation(problem, "Parents")
        return None


class ChildBirthOrderRule:
    """Every child is born strictly after every parent."""

    def validate(self, ctx: ValidationContext, family: FamilyLike) -> RuleViolation | None:
        for child in family.children:
            for parent in family.parents:
                problem = birth_order_problem(parent, child)
                if problem:
                    return RuleViolation(problem, "Children")
        return None


class FamilyStatusRule:
    """SINGLE has one living parent, MARRIED has two."""

    def validate(self, ctx: ValidationContext, family: FamilyLike) -> RuleViolation | None:
        living = len(family.living_parents)
        if family.status == FamilyStatus.MARRIED and living != 2:
            return RuleViolation("married family must have exactly two living parents", "Status")
        if family.status == FamilyStatus.SINGLE and living != 1:
            return RuleViolation("single family must have exactly one living parent", "Status")
        return None


class FamilyConsistencyRule:
    """Living-parent count matches the status, for all statuses."""

    def validate(self, ctx: ValidationContext, family: FamilyLike) -> RuleViolation | None:
        problem = living_parents_problem(family.status, len(family.living_parents))
        return RuleViolation(problem, "Family") if problem else None


class ParentChildAgeGapRule:
    """At least `minimum_gap` full years between each parent and each child."""

    def __init__(self, minimum_gap: int = MIN_PARENT_CHILD_AGE_GAP):
        self.minimum_gap = minimum_gap

    def validate(self, ctx: ValidationContext, family: FamilyLike) -> RuleViolation | None:
        for child in family.children:
            for parent in family.parents:
                problem = age_gap_problem(parent, child, self.minimum_gap)
                if problem:
                    return RuleViolation(problem, "Family")
        return None


class FamilyStatusConsistencyRule:
    """WIDOWED keeps at most one living parent; ABANDONED keeps at least one child."""

    def validate(self, ctx: ValidationContext, family: FamilyLike) -> RuleViolation | None:
        if family.status == FamilyStatus.WIDOWED and len(family.living_parents) > 1:
            return RuleViolation(
                "widowed family must have at most one living parent", "Family",
            )
        problem = abandoned_problem(family.status, family.children)
        return RuleViolation(problem, "Family") if problem else None


# ─── Pipelines ──────────────────────────────────────────────────

def create_family_validation_pipeline(
    minimum_parent_age: int = MIN_PARENT_AGE,
) -> Pipeline[FamilyLike]:
    return Pipeline(
        ParentMinimumAgeRule(minimum_parent_age),
        ChildBirthOrderRule(),
        FamilyStatusRule(),
    )


class ComplexRuleValidator:
    """Cross-entity checks run by the service before every save."""

    def __init__(
        self,
        minimum_parent_age: int = MIN_PARENT_AGE,
        minimum_age_gap: int = MIN_PARENT_CHILD_AGE_GAP,
    ):
        self.pipeline: Pipeline[FamilyLike] = Pipeline(
            CompositeRule(
                "family_composition",
                FamilyConsistencyRule(),
                FamilyStatusConsistencyRule(),
            ),
            CompositeRule(
                "lineage",
                ParentMinimumAgeRule(minimum_parent_age),
                ChildBirthOrderRule(),
                ParentChildAgeGapRule(minimum_age_gap),
            ),
        )

    def validate(
        self, family: FamilyLike, ctx: ValidationContext | None = None,
    ) -> ValidationResult:
        return self.pipeline.validate(ctx or ValidationContext(), family)

    def validate_family(self, family: FamilyLike, ctx: ValidationContext | None = None) -> None:
        """Raise ValidationError carrying every violation, or return None."""
        self.validate(family, ctx).raise_if_invalid(
            f"family '{family.id}' failed validation",
        )
