"""Invite codes, supporters and code attempts.

Revision ID: 002_invite_codes
Revises: 001_initial
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002_invite_codes"
down_revision: str | None = "001_initial"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "invite_codes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("pregnancy_id", sa.Uuid(), nullable=False),
        sa.Column("code_hash", sa.String(length=60), nullable=False),
        sa.Column("code_prefix", sa.String(length=4), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column(
            "permission", sa.String(length=20), nullable=False, server_default="read"
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("redeemed_by", sa.String(length=255), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("role IN ('father', 'support')", name="ck_invite_role"),
        sa.CheckConstraint(
            "permission IN ('read', 'write')", name="ck_invite_permission"
        ),
        sa.ForeignKeyConstraint(
            ["pregnancy_id"], ["pregnancies.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_invite_codes_pregnancy_id"), "invite_codes", ["pregnancy_id"]
    )
    op.create_index(op.f("ix_invite_codes_expires_at"), "invite_codes", ["expires_at"])

    op.create_table(
        "supporters",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("pregnancy_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=100), nullable=True),
        sa.Column(
            "permission", sa.String(length=10), nullable=False, server_default="read"
        ),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("invited_via_code_id", sa.Uuid(), nullable=True),
        sa.Column("removed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "display_partner_card",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
        ),
        sa.ForeignKeyConstraint(
            ["pregnancy_id"], ["pregnancies.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["invited_via_code_id"], ["invite_codes.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "pregnancy_id", "user_id", name="uq_supporter_pregnancy_user"
        ),
    )
    op.create_index(op.f("ix_supporters_pregnancy_id"), "supporters", ["pregnancy_id"])
    op.create_index(op.f("ix_supporters_user_id"), "supporters", ["user_id"])

    op.create_table(
        "code_attempts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column(
            "attempted_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("success", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_code_attempts_user_attempted",
        "code_attempts",
        ["user_id", "attempted_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_code_attempts_user_attempted", table_name="code_attempts")
    op.drop_table("code_attempts")

    op.drop_index(op.f("ix_supporters_user_id"), table_name="supporters")
    op.drop_index(op.f("ix_supporters_pregnancy_id"), table_name="supporters")
    op.drop_table("supporters")

    op.drop_index(op.f("ix_invite_codes_expires_at"), table_name="invite_codes")
    op.drop_index(op.f("ix_invite_codes_pregnancy_id"), table_name="invite_codes")
    op.drop_table("invite_codes")
