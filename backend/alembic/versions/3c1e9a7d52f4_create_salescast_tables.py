"""create users, whitelist and forecasts tables

Revision ID: 3c1e9a7d52f4
Revises:
Create Date: 2026-10-19 10:04:51.218734

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3c1e9a7d52f4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("google_id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="Individual"),
        sa.Column(
            "manager_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('Individual', 'Manager', 'Admin')", name="ck_users_role"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_google_id"), "users", ["google_id"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=False)
    op.create_index(op.f("ix_users_manager_id"), "users", ["manager_id"], unique=False)

    op.create_table(
        "whitelist",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("email", name="uq_whitelist_email"),
    )
    op.create_index(op.f("ix_whitelist_id"), "whitelist", ["id"], unique=False)

    op.create_table(
        "forecasts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("period_month", sa.Date(), nullable=False),
        sa.Column("quota", sa.Numeric(14, 2), nullable=False),
        sa.Column("commit_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("best_case", sa.Numeric(14, 2), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "period_month", name="uq_forecasts_user_period"),
    )
    op.create_index(op.f("ix_forecasts_id"), "forecasts", ["id"], unique=False)
    op.create_index("ix_forecasts_period_month", "forecasts", ["period_month"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_forecasts_period_month", table_name="forecasts")
    op.drop_index(op.f("ix_forecasts_id"), table_name="forecasts")
    op.drop_table("forecasts")

    op.drop_index(op.f("ix_whitelist_id"), table_name="whitelist")
    op.drop_table("whitelist")

    op.drop_index(op.f("ix_users_manager_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_google_id"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")
