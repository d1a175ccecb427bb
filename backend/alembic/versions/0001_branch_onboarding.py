"""Branch onboarding tables — setup process, provisioning records, audit log.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-19

Run with:
    alembic upgrade head
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "branches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("code", sa.String(50), nullable=False, unique=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("branch_type", sa.String(20)),
        sa.Column("status", sa.String(20), server_default="setup"),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("operating_hours", sa.JSON(), nullable=True),
        sa.Column("settings", sa.JSON(), nullable=True),
        sa.Column("setup_completed_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # ── Setup process ────────────────────────────────────────

    op.create_table(
        "branch_setups",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("branch_id", sa.String(36), sa.ForeignKey("branches.id"),
                  nullable=False, unique=True, index=True),
        sa.Column("status", sa.String(20), server_default="in_progress"),
        sa.Column("current_step", sa.Integer(), server_default="1"),
        sa.Column("completed_steps", sa.JSON(), server_default="[]"),
        sa.Column("setup_data", sa.JSON(), server_default="{}"),
        sa.Column("started_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("started_by", sa.String(36)),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("completed_by", sa.String(36)),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    # ── Provisioning records ─────────────────────────────────

    op.create_table(
        "branch_modules",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("branch_id", sa.String(36), sa.ForeignKey("branches.id"), nullable=False, index=True),
        sa.Column("module_code", sa.String(50), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), server_default=sa.false()),
        sa.Column("enabled_by", sa.String(36)),
        sa.Column("enabled_at", sa.DateTime()),
        sa.Column("settings", sa.JSON(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("branch_id", "module_code", name="uq_branch_module"),
    )

    op.create_table(
        "branch_staff",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("branch_id", sa.String(36), sa.ForeignKey("branches.id"), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30)),
        sa.Column("role", sa.String(50), server_default="cashier"),
        sa.Column("status", sa.String(20), server_default="invited"),
        sa.Column("account_id", sa.String(36)),
        sa.Column("invited_by", sa.String(36)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("branch_id", "email", name="uq_branch_staff_email"),
    )

    op.create_table(
        "inventory_policies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("branch_id", sa.String(36), sa.ForeignKey("branches.id"),
                  nullable=False, unique=True, index=True),
        sa.Column("sync_from_hq", sa.Boolean(), server_default=sa.true()),
        sa.Column("low_stock_threshold", sa.Integer(), server_default="10"),
        sa.Column("auto_reorder", sa.Boolean(), server_default=sa.false()),
        sa.Column("updated_by", sa.String(36)),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "branch_payment_methods",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("branch_id", sa.String(36), sa.ForeignKey("branches.id"), nullable=False, index=True),
        sa.Column("code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_enabled", sa.Boolean(), server_default=sa.true()),
        sa.Column("sort_order", sa.Integer(), server_default="0"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "printer_configs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("branch_id", sa.String(36), sa.ForeignKey("branches.id"), nullable=False, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("printer_type", sa.String(20), server_default="receipt"),
        sa.Column("ip_address", sa.String(100)),
        sa.Column("port", sa.Integer(), server_default="9100"),
        sa.Column("is_default", sa.Boolean(), server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )

    op.create_table(
        "store_settings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("branch_id", sa.String(36), sa.ForeignKey("branches.id"), nullable=False, index=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text()),
        sa.Column("data_type", sa.String(20), server_default="string"),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("branch_id", "category", "key", name="uq_store_setting"),
    )

    # ── Audit ────────────────────────────────────────────────

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), index=True),
        sa.Column("action", sa.String(50), nullable=False, index=True),
        sa.Column("branch_id", sa.String(36), nullable=False, index=True),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36)),
        sa.Column("summary", sa.Text()),
        sa.Column("details", sa.JSON()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False, index=True),
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("store_settings")
    op.drop_table("printer_configs")
    op.drop_table("branch_payment_methods")
    op.drop_table("inventory_policies")
    op.drop_table("branch_staff")
    op.drop_table("branch_modules")
    op.drop_table("branch_setups")
    op.drop_table("branches")
