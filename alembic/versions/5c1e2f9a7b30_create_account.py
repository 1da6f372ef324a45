"""create account

Revision ID: 5c1e2f9a7b30
Revises:
Create Date: 2026-10-17 18:05:12.410233

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision = '5c1e2f9a7b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "account",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("avatar_url", sa.String(), nullable=False),
        sa.Column("cover_url", sa.String(), nullable=False, server_default=""),
        sa.Column("refresh_token", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_account_user_name", "account", ["user_name"], unique=True)
    op.create_index("ix_account_email", "account", ["email"], unique=True)
    op.create_index("ix_account_full_name", "account", ["full_name"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_account_full_name", table_name="account")
    op.drop_index("ix_account_email", table_name="account")
    op.drop_index("ix_account_user_name", table_name="account")
    op.drop_table("account")
