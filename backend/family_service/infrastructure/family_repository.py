"""Family Repository — SQLAlchemy implementation of the FamilyRepository port.

Invariants:
    - save() replaces the family's membership wholesale and commits; order kept via position
    - save_all() commits once for the whole batch; a failure rolls every family back
    - delete() removes the family row and, by cascade, all of its member rows
    - Member rows are reconciled by id (update in place, add new, orphan-delete removed)
    - Loaded rows are rebuilt through Family.create: a stored family is re-validated
    - Every SQLAlchemy failure surfaces as DatabaseError; a stored row that no longer
      forms a valid family surfaces as DatabaseError("load") too
    - get_by_id / find_by_child_id return None when nothing matches

Design Decisions:
    - Session injected per request (FastAPI dependency), repository holds no state
    - Child uniqueness across families is left to the family_children primary key
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from family_service.core.errors import DatabaseError, ValidationError
from family_service.core.family import Family
from family_service.core.person import Child, Parent, Person
from family_service.infrastructure.database import database_error
from family_service.models.family import ChildRecord, FamilyRecord, ParentRecord

logger = logging.getLogger(__name__)

M = TypeVar("M", ParentRecord, ChildRecord)


def _sync_members(
    existing: Iterable[M], people: Iterable[Person], record_type: type[M],
) -> list[M]:
    by_id = {r.id: r for r in existing}
    synced = []
    for position, person in enumerate(people):
        record = by_id.get(person.id) or record_type(id=person.id)
        record.position = position
        record.first_name = person.first_name
        record.last_name = person.last_name
        record.birth_date = person.birth_date
        record.death_date = person.death_date
        synced.append(record)
    return synced


def _to_family(record: FamilyRecord) -> Family:
    try:
        return Family.create(
            record.id,
            record.status,
            [
                Parent(p.id, p.first_name, p.last_name, p.birth_date, p.death_date)
                for p in record.parents
            ],
            [
                Child(c.id, c.first_name, c.last_name, c.birth_date, c.death_date)
                for c in record.children
            ],
        )
    except ValidationError as e:
        logger.error(
            f"Stored family failed validation: {e.message}",
            extra={"family_id": record.id},
        )
        raise DatabaseError(f"stored family '{record.id}' is invalid", "load") from e


class SqlAlchemyFamilyRepository:
    """FamilyRepository backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, family_id: str) -> Family | None:
        try:
            record = await self.db.get(FamilyRecord, family_id)
        except SQLAlchemyError as e:
            raise database_error(e, "query") from e
        return _to_family(record) if record else None

    async def save(self, family: Family) -> None:
        await self.save_all(family)

    async def save_all(self, *families: Family) -> None:
        """Stage every family, then commit once; any failure rolls the whole batch back."""
        try:
            records = [await self._record_for(family) for family in families]
            # Shared across the batch so a child moving between families is re-parented
            children = {c.id: c for record in records for c in record.children}
            for record, family in zip(records, families):
                record.status = family.status.value
                record.updated_at = datetime.now(timezone.utc)
                record.parents = _sync_members(record.parents, family.parents, ParentRecord)
                record.children = _sync_members(
                    children.values(), family.children, ChildRecord,
                )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise database_error(e, "save") from e

    async def delete(self, family_id: str) -> bool:
        try:
            record = await self.db.get(FamilyRecord, family_id)
            if record is None:
                return False
            await self.db.delete(record)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise database_error(e, "delete") from e
        return True

    async def _record_for(self, family: Family) -> FamilyRecord:
        record = await self.db.get(FamilyRecord, family.id)
        if record is None:
            record = FamilyRecord(id=family.id, parents=[], children=[])
            self.db.add(record)
        return record

    async def get_all(self) -> list[Family]:
        query = select(FamilyRecord).order_by(FamilyRecord.created_at, FamilyRecord.id)
        return await self._fetch(query)

    async def find_by_parent_id(self, parent_id: str) -> list[Family]:
        query = (
            select(FamilyRecord)
            .join(FamilyRecord.parents)
            .where(ParentRecord.id == parent_id)
            .order_by(FamilyRecord.created_at, FamilyRecord.id)
        )
        return await self._fetch(query)

    async def find_by_child_id(self, child_id: str) -> Family | None:
        query = (
            select(FamilyRecord)
            .join(FamilyRecord.children)
            .where(ChildRecord.id == child_id)
        )
        try:
            result = await self.db.execute(query)
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise database_error(e, "query") from e
        return _to_family(record) if record else None

    async def _fetch(self, query) -> list[Family]:
        try:
            result = await self.db.execute(query)
            records = result.scalars().unique().all()
        except SQLAlchemyError as e:
            raise database_error(e, "query") from e
        return [_to_family(r) for r in records]
