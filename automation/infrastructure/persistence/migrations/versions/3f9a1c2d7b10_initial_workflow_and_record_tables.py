"""Initial schema: workflow rules, executions, and record tables

Revision ID: 3f9a1c2d7b10
Revises:
Create Date: 2026-10-19 10:12:41.318207

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RECORD_TABLES = (
    "account",
    "contact",
    "opportunity",
    "task",
    "notification",
    "activity",
    "aircraft",
    "work_order",
)


def _scoped_columns() -> list[sa.Column]:
    """id, organization_id, created_at, updated_at (OrganizationScopedModel)."""
    return [
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("organization_id", sa.String(), nullable=False),
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
    ]


def upgrade() -> None:
    """Create initial schema."""
    # Workflow rules
    op.create_table(
        "workflow_rule",
        *_scoped_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.Column("trigger_type", sa.String(length=32), nullable=False),
        sa.Column("object_type", sa.String(length=64), nullable=False),
        sa.Column("conditions", sa.JSON(), nullable=False),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("last_triggered", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "times_triggered", sa.Integer(), server_default=sa.text("0"), nullable=False
        ),
        sa.CheckConstraint(
            "trigger_type IN ('RECORD_CREATED', 'RECORD_UPDATED', 'FIELD_CHANGED', 'TIME_BASED')",
            name="workflow_rule_trigger_type_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_workflow_rule_organization_id"),
        "workflow_rule",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        "ix_workflow_rule_dispatch",
        "workflow_rule",
        ["organization_id", "object_type", "trigger_type", "is_active"],
        unique=False,
    )

    # Workflow executions (audit trail)
    op.create_table(
        "workflow_execution",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("organization_id", sa.String(), nullable=False),
        sa.Column("workflow_rule_id", sa.String(), nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("result", sa.JSON(), nullable=False),
        sa.Column(
            "executed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.CheckConstraint(
            "status IN ('SUCCESS', 'FAILED')", name="workflow_execution_status_check"
        ),
        sa.ForeignKeyConstraint(
            ["workflow_rule_id"], ["workflow_rule.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_workflow_execution_organization_id"),
        "workflow_execution",
        ["organization_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_workflow_execution_workflow_rule_id"),
        "workflow_execution",
        ["workflow_rule_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_workflow_execution_entity_id"),
        "workflow_execution",
        ["entity_id"],
        unique=False,
    )
    op.create_index(
        "ix_workflow_execution_rule_executed_at",
        "workflow_execution",
        ["workflow_rule_id", "executed_at"],
        unique=False,
    )

    # Record store
    op.create_table(
        "account",
        *_scoped_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=True),
        sa.Column("industry", sa.String(length=128), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_account_owner_id"), "account", ["owner_id"], unique=False)

    op.create_table(
        "contact",
        *_scoped_columns(),
        sa.Column("first_name", sa.String(length=128), nullable=True),
        sa.Column("last_name", sa.String(length=128), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_contact_account_id"), "contact", ["account_id"], unique=False)
    op.create_index(op.f("ix_contact_owner_id"), "contact", ["owner_id"], unique=False)

    op.create_table(
        "opportunity",
        *_scoped_columns(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("stage", sa.String(length=64), nullable=True),
        sa.Column("pipeline", sa.String(length=64), nullable=True),
        sa.Column("amount", sa.Numeric(precision=14, scale=2), nullable=True),
        sa.Column("probability", sa.Integer(), nullable=True),
        sa.Column("close_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("contact_id", sa.String(), nullable=True),
        sa.Column("aircraft_id", sa.String(), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_opportunity_stage"), "opportunity", ["stage"], unique=False)
    op.create_index(
        op.f("ix_opportunity_account_id"), "opportunity", ["account_id"], unique=False
    )
    op.create_index(
        op.f("ix_opportunity_owner_id"), "opportunity", ["owner_id"], unique=False
    )

    op.create_table(
        "task",
        *_scoped_columns(),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), server_default="TODO", nullable=False),
        sa.Column("priority", sa.String(length=32), nullable=True),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("contact_id", sa.String(), nullable=True),
        sa.Column("opportunity_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_task_owner_id"), "task", ["owner_id"], unique=False)

    op.create_table(
        "notification",
        *_scoped_columns(),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("type", sa.String(length=32), server_default="info", nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("link", sa.String(length=1024), nullable=True),
        sa.Column(
            "is_read", sa.Boolean(), server_default=sa.text("false"), nullable=False
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_notification_user_id"), "notification", ["user_id"], unique=False
    )

    op.create_table(
        "activity",
        *_scoped_columns(),
        sa.Column("type", sa.String(length=32), server_default="NOTE", nullable=False),
        sa.Column("subject", sa.String(length=500), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("contact_id", sa.String(), nullable=True),
        sa.Column("opportunity_id", sa.String(), nullable=True),
        sa.Column("aircraft_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_activity_account_id"), "activity", ["account_id"], unique=False
    )

    op.create_table(
        "aircraft",
        *_scoped_columns(),
        sa.Column("make", sa.String(length=128), nullable=True),
        sa.Column("model", sa.String(length=128), nullable=True),
        sa.Column("tail_number", sa.String(length=32), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_aircraft_account_id"), "aircraft", ["account_id"], unique=False
    )

    op.create_table(
        "work_order",
        *_scoped_columns(),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("aircraft_id", sa.String(), nullable=True),
        sa.Column("account_id", sa.String(), nullable=True),
        sa.Column("owner_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_work_order_aircraft_id"), "work_order", ["aircraft_id"], unique=False
    )
    op.create_index(
        op.f("ix_work_order_owner_id"), "work_order", ["owner_id"], unique=False
    )

    for table in RECORD_TABLES:
        op.create_index(
            op.f(f"ix_{table}_organization_id"), table, ["organization_id"], unique=False
        )


def downgrade() -> None:
    """Drop all tables."""
    for table in reversed(RECORD_TABLES):
        op.drop_table(table)
    op.drop_table("workflow_execution")
    op.drop_table("workflow_rule")
