"""election timeline stages

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision  = "002"
down_revision = "001"
branch_labels = None
depends_on    = None


def upgrade() -> None:
    op.create_table(
        "election_timeline",
        sa.Column("id",                  sa.String(36),              primary_key=True),
        sa.Column("stage_name",          sa.String(100),             nullable=False),
        sa.Column("start_time",          sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time",            sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_active",           sa.Boolean(),               nullable=False, server_default="false"),
        sa.Column("is_publicly_visible", sa.Boolean(),               nullable=False, server_default="false"),
        sa.Column("created_at",          sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at",          sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("election_timeline")
