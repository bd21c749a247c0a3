"""Initial HALO schema: tenants and their workflows.

Revision ID: 001_halo_initial
Revises:
Create Date: 2026-10-18

"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001_halo_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _has_table(bind, name: str) -> bool:
    return sa.inspect(bind).has_table(name)


def _has_index(bind, table_name: str, index_name: str) -> bool:
    indexes = sa.inspect(bind).get_indexes(table_name)
    return any(idx.get("name") == index_name for idx in indexes)


def upgrade() -> None:
    bind = op.get_bind()

    if not _has_table(bind, "tenant"):
        op.create_table(
            "tenant",
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("subdomain", sa.String(length=100), nullable=False),
            sa.Column("settings", sa.JSON(), nullable=True),
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.PrimaryKeyConstraint("id"),
        )
    if _has_table(bind, "tenant") and not _has_index(bind, "tenant", "ix_tenant_subdomain"):
        op.create_index("ix_tenant_subdomain", "tenant", ["subdomain"], unique=True)

    if not _has_table(bind, "workflow"):
        op.create_table(
            "workflow",
            sa.Column("tenant_id", sa.Uuid(), nullable=False),
            sa.Column("name", sa.String(length=200), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
            sa.Column("steps", sa.JSON(), nullable=False),
            sa.Column("execution_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("version", sa.Integer(), nullable=False),
            sa.Column("id", sa.Uuid(), nullable=False),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
            sa.ForeignKeyConstraint(["tenant_id"], ["tenant.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
    if _has_table(bind, "workflow") and not _has_index(bind, "workflow", "ix_workflow_tenant_id"):
        op.create_index("ix_workflow_tenant_id", "workflow", ["tenant_id"], unique=False)


def downgrade() -> None:
    bind = op.get_bind()
    if _has_table(bind, "workflow"):
        op.drop_table("workflow")
    if _has_table(bind, "tenant"):
        op.drop_table("tenant")
