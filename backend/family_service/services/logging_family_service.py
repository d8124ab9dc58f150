"""Logging Decorator — structured logs around every family use case.

Invariants:
    - Wraps any FamilyOperations implementation; results and exceptions pass through untouched
    - One INFO record per success, one WARNING (client error) or ERROR (infrastructure)
      record per FamilyServiceError, ERROR with traceback for anything else
    - Extra fields (operation, family_id, error_code, duration_ms) feed the JSON formatter

Design Decisions:
    - Decorator over logging inside the domain service (ADR: cross-cutting concerns at
      the seam, core trivially testable)
    - Explicit delegating methods over __getattr__ magic: the wrapped surface is visible
"""

import logging
import time
from datetime import datetime
from typing import Awaitable, TypeVar

from family_service.core.errors import ErrorCategory, FamilyServiceError
from family_service.core.family_dto import ChildDTO, FamilyDTO, ParentDTO
from family_service.core.repository_protocols import FamilyOperations

logger = logging.getLogger(__name__)

R = TypeVar("R")

_CLIENT_CATEGORIES = {
    ErrorCategory.VALIDATION,
    ErrorCategory.BUSINESS_RULE,
    ErrorCategory.RESOURCE_NOT_FOUND,
}


class LoggingFamilyService:
    """FamilyOperations decorator that logs outcome and duration."""

    def __init__(self, inner: FamilyOperations):
        self._inner = inner

    async def _run(
        self, operation: str, family_id: str | None, call: Awaitable[R],
    ) -> R:
        started = time.perf_counter()
        logger.debug(
            f"{operation} started",
            extra={"operation": operation, "family_id": family_id},
        )
        try:
            result = await call
        except FamilyServiceError as e:
            level = logging.WARNING if e.category in _CLIENT_CATEGORIES else logging.ERROR
            logger.log(
                level,
                f"{operation} failed: {e.message}",
                extra={
                    "operation": operation,
                    "family_id": family_id or e.context.family_id,
                    "error_code": e.code,
                    "duration_ms": _elapsed_ms(started),
                },
            )
            raise
        except Exception:
            logger.error(
                f"{operation} failed unexpectedly",
                exc_info=True,
                extra={
                    "operation": operation,
                    "family_id": family_id,
                    "duration_ms": _elapsed_ms(started),
                },
            )
            raise
        logger.info(
            f"{operation} succeeded",
            extra={
                "operation": operation,
                "family_id": family_id,
                "duration_ms": _elapsed_ms(started),
            },
        )
        return result

    async def create_family(self, dto: FamilyDTO) -> FamilyDTO:
        return await self._run("create_family", dto.id or None, self._inner.create_family(dto))

    async def get_family(self, family_id: str) -> FamilyDTO:
        return await self._run("get_family", family_id, self._inner.get_family(family_id))

    async def get_all_families(self) -> list[FamilyDTO]:
        return await self._run("get_all_families", None, self._inner.get_all_families())

    async def add_parent(
        self, family_id: str, parent: ParentDTO, status: str | None = None,
    ) -> FamilyDTO:
        return await self._run(
            "add_parent", family_id, self._inner.add_parent(family_id, parent, status),
        )

    async def add_child(self, family_id: str, child: ChildDTO) -> FamilyDTO:
        return await self._run(
            "add_child", family_id, self._inner.add_child(family_id, child),
        )

    async def remove_child(self, family_id: str, child_id: str) -> FamilyDTO:
        return await self._run(
            "remove_child", family_id, self._inner.remove_child(family_id, child_id),
        )

    async def mark_parent_deceased(
        self, family_id: str, parent_id: str, death_date: datetime,
    ) -> FamilyDTO:
        return await self._run(
            "mark_parent_deceased", family_id,
            self._inner.mark_parent_deceased(family_id, parent_id, death_date),
        )

    async def divorce(
        self,
        family_id: str,
        custodial_parent_id: str,
        child_ids: list[str] | None = None,
        new_family_id: str | None = None,
    ) -> tuple[FamilyDTO, FamilyDTO]:
        return await self._run(
            "divorce", family_id,
            self._inner.divorce(family_id, custodial_parent_id, child_ids, new_family_id),
        )

    async def change_status(self, family_id: str, status: str) -> FamilyDTO:
        return await self._run(
            "change_status", family_id, self._inner.change_status(family_id, status),
        )

    async def delete_family(self, family_id: str) -> None:
        return await self._run(
            "delete_family", family_id, self._inner.delete_family(family_id),
        )

    async def find_families_by_parent(self, parent_id: str) -> list[FamilyDTO]:
        return await self._run(
            "find_families_by_parent", None,
            self._inner.find_families_by_parent(parent_id),
        )

    async def find_family_by_child(self, child_id: str) -> FamilyDTO:
        return await self._run(
            "find_family_by_child", None, self._inner.find_family_by_child(child_id),
        )


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
