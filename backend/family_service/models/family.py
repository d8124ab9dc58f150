"""Family ORM — persists a family with its ordered parents and children.

Invariants:
    - families.id is the aggregate id (opaque string, caller- or UUID-generated)
    - family_parents PK (family_id, id): a parent may appear in several families over time
    - family_children PK id: a child belongs to exactly one family at a time
    - position preserves the aggregate's parent/child order
    - Members are owned: replacing a family's member list deletes orphans

Design Decisions:
    - Member tables over a JSON column: lookups by parent/child id are plain indexed
      joins on both PostgreSQL and SQLite (ADR: one adapter for prod and tests)
    - selectin loading: the repository always needs the whole aggregate
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from family_service.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FamilyRecord(Base):
    """Family aggregate root row."""
    __tablename__ = "families"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow,
    )

    parents: Mapped[list["ParentRecord"]] = relationship(
        "ParentRecord", back_populates="family",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="ParentRecord.position",
    )
    children: Mapped[list["ChildRecord"]] = relationship(
        "ChildRecord", back_populates="family",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="ChildRecord.position",
    )


class ParentRecord(Base):
    """Parent row, owned by one family."""
    __tablename__ = "family_parents"

    family_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("families.id", ondelete="CASCADE"), primary_key=True,
    )
    id: Mapped[str] = mapped_column(String(64), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    death_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    family: Mapped["FamilyRecord"] = relationship("FamilyRecord", back_populates="parents")


class ChildRecord(Base):
    """Child row; the primary key makes a child unique across all families."""
    __tablename__ = "family_children"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    family_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("families.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    death_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    family: Mapped["FamilyRecord"] = relationship("FamilyRecord", back_populates="children")
