"""Initial schema — families, family_parents, family_children.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "families",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_families_status", "families", ["status"])

    op.create_table(
        "family_parents",
        sa.Column(
            "family_id", sa.String(64),
            sa.ForeignKey("families.id", ondelete="CASCADE"), primary_key=True,
        ),
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("birth_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("death_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_family_parents_id", "family_parents", ["id"])

    op.create_table(
        "family_children",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "family_id", sa.String(64),
            sa.ForeignKey("families.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("birth_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("death_date", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_family_children_family_id", "family_children", ["family_id"])


def downgrade() -> None:
    op.drop_table("family_children")
    op.drop_table("family_parents")
    op.drop_table("families")
