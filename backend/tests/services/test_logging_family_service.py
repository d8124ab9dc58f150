"""Logging Decorator — outcome records and transparent pass-through.

Tests:
    - Success: INFO record with operation, family_id, duration_ms
    - Client errors (validation, domain, not found) logged at WARNING with error_code
    - Infrastructure errors at ERROR; unexpected exceptions at ERROR with traceback
    - Results and exceptions are returned/raised unchanged
"""

import logging
from unittest.mock import AsyncMock

import pytest

from family_service.core.errors import (
    DatabaseError, FamilyTooManyParentsError, ResourceNotFoundError,
)
from family_service.services.logging_family_service import LoggingFamilyService

from tests.factories import at, child, child_dto, married_family, parent_dto

LOGGER = "family_service.services.logging_family_service"


@pytest.fixture
def logged(service):
    return LoggingFamilyService(service)


def _outcome_records(caplog):
    return [r for r in caplog.records if r.name == LOGGER and r.levelno >= logging.INFO]


async def test_success_logged_at_info(logged, repo, caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER)
    repo.seed(married_family("f1"))

    result = await logged.add_child("f1", child_dto())

    assert result.children_count == 1
    (record,) = _outcome_records(caplog)
    assert record.levelno == logging.INFO
    assert record.operation == "add_child"
    assert record.family_id == "f1"
    assert record.duration_ms >= 0


async def test_start_logged_at_debug(logged, repo, caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER)
    repo.seed(married_family("f1"))
    await logged.get_family("f1")
    assert any(
        r.levelno == logging.DEBUG and r.getMessage() == "get_family started"
        for r in caplog.records
    )


async def test_domain_error_logged_at_warning(logged, repo, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    repo.seed(married_family("f1"))

    with pytest.raises(FamilyTooManyParentsError):
        await logged.add_parent("f1", parent_dto("p3", "Jim", born=at(1975)))

    (record,) = _outcome_records(caplog)
    assert record.levelno == logging.WARNING
    assert record.error_code == "FAMILY_TOO_MANY_PARENTS"


async def test_not_found_logged_at_warning(logged, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    with pytest.raises(ResourceNotFoundError):
        await logged.get_family("missing")
    (record,) = _outcome_records(caplog)
    assert record.levelno == logging.WARNING
    assert record.error_code == "RESOURCE_NOT_FOUND"


async def test_database_error_logged_at_error(logged, repo, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    repo.seed(married_family("f1", [child()]))
    repo.fail_on_save = True

    with pytest.raises(DatabaseError):
        await logged.remove_child("f1", "c1")

    (record,) = _outcome_records(caplog)
    assert record.levelno == logging.ERROR
    assert record.error_code == "DATABASE_ERROR"


async def test_unexpected_exception_logged_with_traceback(caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    inner = AsyncMock()
    inner.get_all_families.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        await LoggingFamilyService(inner).get_all_families()

    (record,) = _outcome_records(caplog)
    assert record.levelno == logging.ERROR
    assert record.exc_info is not None


async def test_arguments_passed_through():
    inner = AsyncMock()
    inner.divorce.return_value = ("a", "b")
    result = await LoggingFamilyService(inner).divorce("f1", "p2", ["c1"], "f9")
    assert result == ("a", "b")
    inner.divorce.assert_awaited_once_with("f1", "p2", ["c1"], "f9")


async def test_delete_logged_with_family_id(logged, repo, caplog):
    caplog.set_level(logging.INFO, logger=LOGGER)
    repo.seed(married_family("f1"))

    assert await logged.delete_family("f1") is None

    (record,) = _outcome_records(caplog)
    assert record.operation == "delete_family"
    assert record.family_id == "f1"
    assert "f1" not in repo.rows
