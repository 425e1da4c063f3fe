"""Initial database schema - users, user permissions, sidebar configurations

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18
"""
import uuid
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from estate_admin.db.seed_sidebar import DEFAULT_CONFIG_NAMES, DEFAULT_SIDEBAR_ITEMS

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- Users ---
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255)),
        sa.Column("role", sa.String(20), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'employee', 'user')", name="ck_users_role"),
    )
    op.create_index("ix_users_username", "users", ["username"])
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])

    # --- User permissions ---
    op.create_table(
        "user_permissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True),
        sa.Column("permissions", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_user_permissions_user_id", "user_permissions", ["user_id"])

    # --- Sidebar configurations ---
    sidebar_configs = op.create_table(
        "sidebar_configs",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("items", postgresql.JSONB, nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("version", sa.Integer, nullable=False, server_default=sa.text("1")),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "role", name="uq_sidebar_user_role"),
        sa.CheckConstraint("role IN ('admin', 'employee', 'user')", name="ck_sidebar_configs_role"),
    )
    op.create_index("ix_sidebar_configs_role", "sidebar_configs", ["role"])
    op.create_index("ix_sidebar_configs_user_id", "sidebar_configs", ["user_id"])
    # At most one default per role
    op.create_index(
        "uq_sidebar_default_role",
        "sidebar_configs",
        ["role"],
        unique=True,
        postgresql_where=sa.text("is_default"),
    )

    # --- Seed role defaults ---
    op.bulk_insert(
        sidebar_configs,
        [
            {
                "id": uuid.uuid4(),
                "name": name,
                "role": role.value,
                "is_default": True,
                "items": DEFAULT_SIDEBAR_ITEMS,
                "version": 1,
            }
            for role, name in DEFAULT_CONFIG_NAMES.items()
        ],
    )


def downgrade() -> None:
    op.drop_index("uq_sidebar_default_role", table_name="sidebar_configs")
    op.drop_table("sidebar_configs")
    op.drop_table("user_permissions")
    op.drop_table("users")
