"""Validation Pipeline — ordered rules, composite rule trees, fail-soft aggregation.

Invariants:
    - Pipeline.validate runs EVERY rule; a failing rule never stops later rules
    - CompositeRule fails iff at least one child fails, reporting
      "composite rule '<name>' failed" with the child violations as causes
    - Rules are pure: validating the same entity twice yields equal results
    - A pipeline is bound to one entity type (Pipeline[Family]) — no runtime type probing

Design Decisions:
    - Rule as Protocol, CompositeRule as an explicit tree node: failure aggregation is a
      post-order traversal, no inheritance chain (ADR: composition over inheritance)
    - Rules RETURN violations, the caller decides to raise: same shape as the core
      enforce_* checks (return error or None)
    - ValidationContext carries `today` so age rules are deterministic under test
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Generic, Iterable, Protocol, TypeVar

from family_service.core.age_math import today_utc
from family_service.core.errors import ValidationError

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)


@dataclass(frozen=True)
class RuleViolation:
    """A single validation failure, optionally wrapping sub-failures."""
    message: str
    field: str | None = None
    causes: tuple["RuleViolation", ...] = ()

    def to_dict(self) -> dict:
        data: dict = {"message": self.message, "field": self.field}
        if self.causes:
            data["causes"] = [c.to_dict() for c in self.causes]
        return data

    def flatten(self) -> list[str]:
        """Leaf messages, post-order."""
        if not self.causes:
            return [self.message]
        return [m for cause in self.causes for m in cause.flatten()]


@dataclass(frozen=True)
class ValidationContext:
    """Context value handed to every rule."""
    today: date = field(default_factory=today_utc)


class Rule(Protocol[T_contra]):
    """Pure predicate over an entity."""
    def validate(
        self, ctx: ValidationContext, entity: T_contra,
    ) -> RuleViolation | None: ...


@dataclass
class ValidationResult:
    """Ordered collection of violations from one validation pass."""
    violations: list[RuleViolation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        return [v.message for v in self.violations]

    def add(self, message: str, field: str | None = None) -> None:
        self.violations.append(RuleViolation(message, field))

    def add_violation(self, violation: RuleViolation | None) -> None:
        if violation is not None:
            self.violations.append(violation)

    def extend(self, violations: Iterable[RuleViolation]) -> None:
        self.violations.extend(violations)

    def to_error(self, summary: str = "validation failed") -> ValidationError | None:
        if self.is_valid:
            return None
        field_name = self.violations[0].field if len(self.violations) == 1 else None
        return ValidationError(
            f"{summary}: {'; '.join(self.messages)}",
            field_name,
            tuple(self.violations),
        )

    def raise_if_invalid(self, summary: str = "validation failed") -> None:
        error = self.to_error(summary)
        if error is not None:
            raise error


def _run_all(
    rules: Iterable[Rule[T]], ctx: ValidationContext, entity: T,
) -> ValidationResult:
    result = ValidationResult()
    for rule in rules:
        result.add_violation(rule.validate(ctx, entity))
    return result


class Pipeline(Generic[T]):
    """Ordered rules applied to one entity type, aggregating every failure."""

    def __init__(self, *rules: Rule[T]):
        self._rules: list[Rule[T]] = list(rules)

    @property
    def rules(self) -> tuple[Rule[T], ...]:
        return tuple(self._rules)

    def add_rule(self, rule: Rule[T]) -> None:
        self._rules.append(rule)

    def validate(self, ctx: ValidationContext, entity: T) -> ValidationResult:
        return _run_all(self._rules, ctx, entity)


class CompositeRule(Generic[T]):
    """Named group of rules that fails as a single unit."""

    def __init__(self, name: str, *rules: Rule[T]):
        self.name = name
        self._rules: list[Rule[T]] = list(rules)

    def validate(self, ctx: ValidationContext, entity: T) -> RuleViolation | None:
        result = _run_all(self._rules, ctx, entity)
        if result.is_valid:
            return None
        return RuleViolation(
            f"composite rule '{self.name}' failed",
            self.name,
            tuple(result.violations),
        )
