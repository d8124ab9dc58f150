"""ORM Models — SQLAlchemy declarative models for persisted families.

Invariants:
    - All models inherit from Base (db/base.py)
    - FamilyRecord is the aggregate root row; members are owned rows scoped by family_id

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs (ADR: standard SQLAlchemy pattern)
"""

from family_service.models.family import FamilyRecord, ParentRecord, ChildRecord  # noqa: F401
