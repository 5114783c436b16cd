"""Create accounts table.

Revision ID: 001_create_accounts
Revises:
Create Date: 2026-10-19

App startup also runs Base.metadata.create_all, so the table may already exist.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_create_accounts"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    inspector = sa.inspect(op.get_bind())
    if "accounts" in inspector.get_table_names():
        return
    op.create_table(
        "accounts",
        sa.Column("email", sa.String(length=320), primary_key=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("subscription_tier", sa.String(length=16), nullable=False, server_default="free"),
        sa.Column("monthly_search_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_reset_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("external_payment_id", sa.String(), nullable=True),
        sa.Column("external_subscription_id", sa.String(), nullable=True),
        sa.Column("upgraded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_payment_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_table("accounts")
