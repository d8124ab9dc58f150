"""Validation Pipeline — fail-soft aggregation and composite rule trees.

Tests:
    - Every rule runs even after a failure; violations kept in rule order
    - CompositeRule reports one named violation with child causes
    - Validating twice yields equal results
    - ValidationResult.to_error builds the aggregated ValidationError
"""

import pytest

from family_service.core.errors import ValidationError
from family_service.core.validation_pipeline import (
    CompositeRule, Pipeline, RuleViolation, ValidationContext, ValidationResult,
)

from tests.factories import TODAY


class _Fails:
    def __init__(self, message, field=None):
        self.message, self.field = message, field
        self.calls = 0

    def validate(self, ctx, entity):
        self.calls += 1
        return RuleViolation(self.message, self.field)


class _Passes:
    def __init__(self):
        self.calls = 0

    def validate(self, ctx, entity):
        self.calls += 1
        return None


CTX = ValidationContext(today=TODAY)


def test_pipeline_runs_every_rule():
    first, second, third = _Fails("a"), _Passes(), _Fails("b")
    result = Pipeline(first, second, third).validate(CTX, object())
    assert result.messages == ["a", "b"]
    assert (first.calls, second.calls, third.calls) == (1, 1, 1)


def test_empty_pipeline_is_valid():
    assert Pipeline().validate(CTX, object()).is_valid


def test_add_rule_appends():
    pipeline = Pipeline(_Passes())
    pipeline.add_rule(_Fails("late"))
    assert len(pipeline.rules) == 2
    assert pipeline.validate(CTX, object()).messages == ["late"]


def test_composite_reports_named_failure_with_causes():
    rule = CompositeRule("lineage", _Fails("x", "Parents"), _Passes(), _Fails("y"))
    violation = rule.validate(CTX, object())
    assert violation.message == "composite rule 'lineage' failed"
    assert violation.field == "lineage"
    assert [c.message for c in violation.causes] == ["x", "y"]
    assert violation.flatten() == ["x", "y"]


def test_composite_passes_when_children_pass():
    assert CompositeRule("ok", _Passes(), _Passes()).validate(CTX, object()) is None


def test_nested_composites_flatten_post_order():
    inner = CompositeRule("inner", _Fails("deep"))
    outer = CompositeRule("outer", inner, _Fails("shallow"))
    assert outer.validate(CTX, object()).flatten() == ["deep", "shallow"]


def test_validation_is_idempotent():
    pipeline = Pipeline(_Fails("a"), CompositeRule("g", _Fails("b")))
    entity = object()
    assert pipeline.validate(CTX, entity) == pipeline.validate(CTX, entity)


def test_to_error_joins_messages():
    result = ValidationResult()
    result.add("first", "A")
    result.add("second", "B")
    err = result.to_error("family 'f1' failed validation")
    assert isinstance(err, ValidationError)
    assert err.message == "family 'f1' failed validation: first; second"
    assert err.field is None
    assert len(err.violations) == 2


def test_raise_if_invalid_noop_when_valid():
    ValidationResult().raise_if_invalid()


def test_raise_if_invalid_single_violation_keeps_field():
    result = ValidationResult()
    result.add_violation(RuleViolation("bad", "Status"))
    result.add_violation(None)
    with pytest.raises(ValidationError) as exc:
        result.raise_if_invalid()
    assert exc.value.field == "Status"
