"""Create groups, users and the content tables counted per user; seed default groups.

Revision ID: 20261018000000
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261018000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    groups = op.create_table(
        "tsms_groups",
        sa.Column("gid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("group_name", sa.String(length=64), nullable=False),
        sa.Column("staff_user", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("staff_root", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("gid"),
    )
    op.bulk_insert(
        groups,
        [
            {"gid": 1, "group_name": "Root Administrators", "staff_user": True, "staff_root": True},
            {"gid": 2, "group_name": "Staff", "staff_user": True, "staff_root": False},
            {"gid": 3, "group_name": "Members", "staff_user": False, "staff_root": False},
        ],
    )

    op.create_table(
        "tsms_users",
        sa.Column("uid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("gid", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("can_msg", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_submit", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("can_comment", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("registered_ip", sa.String(length=64), nullable=False, server_default=""),
        sa.Column(
            "join_date",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("last_visit", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_active", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_ip", sa.String(length=64), nullable=False, server_default=""),
        sa.ForeignKeyConstraint(["gid"], ["tsms_groups.gid"]),
        sa.PrimaryKeyConstraint("uid"),
    )
    # Case-insensitive uniqueness; the service maps violations of these to Conflict.
    op.create_index(
        "uq_users_username_lower",
        "tsms_users",
        [sa.text("lower(username)")],
        unique=True,
    )
    op.create_index(
        "uq_users_email_lower",
        "tsms_users",
        [sa.text("lower(email)")],
        unique=True,
    )

    op.create_table(
        "tsms_comments",
        sa.Column("cid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("cid"),
    )
    op.create_index(op.f("ix_tsms_comments_uid"), "tsms_comments", ["uid"], unique=False)

    op.create_table(
        "tsms_resources",
        sa.Column("rid", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("queue_code", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("rid"),
    )
    op.create_index(op.f("ix_tsms_resources_uid"), "tsms_resources", ["uid"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_tsms_resources_uid"), table_name="tsms_resources")
    op.drop_table("tsms_resources")
    op.drop_index(op.f("ix_tsms_comments_uid"), table_name="tsms_comments")
    op.drop_table("tsms_comments")
    op.drop_index("uq_users_email_lower", table_name="tsms_users")
    op.drop_index("uq_users_username_lower", table_name="tsms_users")
    op.drop_table("tsms_users")
    op.drop_table("tsms_groups")
