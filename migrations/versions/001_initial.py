"""Create users, pregnancies and pairing_requests tables.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Mirror of the identity directory; rows are written by the chat service
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"])

    op.create_table(
        "pregnancies",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner_id", sa.String(length=255), nullable=False),
        sa.Column("partner_id", sa.String(length=255), nullable=True),
        sa.Column("partner_status", sa.String(length=20), nullable=True),
        sa.Column("partner_permission", sa.String(length=20), nullable=True),
        sa.Column("partner_name", sa.String(length=100), nullable=True),
        sa.Column(
            "display_partner_card",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.Column("coowner_id", sa.String(length=255), nullable=True),
        sa.Column("coowner_name", sa.String(length=255), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("calculation_method", sa.String(length=20), nullable=True),
        sa.Column("cycle_length", sa.Integer(), nullable=False, server_default="28"),
        sa.Column("baby_name", sa.String(length=100), nullable=True),
        sa.Column("mom_name", sa.String(length=100), nullable=True),
        sa.Column("mom_birthday", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=20), nullable=True),
        sa.Column("parent_role", sa.String(length=20), nullable=True),
        sa.Column("profile_photo", sa.Text(), nullable=True),
        sa.Column(
            "outcome", sa.String(length=20), nullable=False, server_default="ongoing"
        ),
        sa.Column("outcome_date", sa.Date(), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_pregnancies_owner_id"), "pregnancies", ["owner_id"], unique=True
    )
    op.create_index(op.f("ix_pregnancies_partner_id"), "pregnancies", ["partner_id"])
    op.create_index(op.f("ix_pregnancies_coowner_id"), "pregnancies", ["coowner_id"])

    op.create_table(
        "pairing_requests",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("requester_id", sa.String(length=255), nullable=False),
        sa.Column("requester_name", sa.String(length=100), nullable=True),
        sa.Column("target_email", sa.String(length=255), nullable=False),
        sa.Column("target_id", sa.String(length=255), nullable=True),
        sa.Column(
            "status", sa.String(length=20), nullable=False, server_default="pending"
        ),
        sa.Column("permission", sa.String(length=20), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_pairing_requests_target_id"), "pairing_requests", ["target_id"]
    )
    op.create_index(op.f("ix_pairing_requests_status"), "pairing_requests", ["status"])


def downgrade() -> None:
    op.drop_index(op.f("ix_pairing_requests_status"), table_name="pairing_requests")
    op.drop_index(op.f("ix_pairing_requests_target_id"), table_name="pairing_requests")
    op.drop_table("pairing_requests")

    op.drop_index(op.f("ix_pregnancies_coowner_id"), table_name="pregnancies")
    op.drop_index(op.f("ix_pregnancies_partner_id"), table_name="pregnancies")
    op.drop_index(op.f("ix_pregnancies_owner_id"), table_name="pregnancies")
    op.drop_table("pregnancies")

    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
