"""WorkflowRule and WorkflowExecution ORM models. Record-driven automation."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from automation.domain.enums import TriggerType
from automation.infrastructure.persistence.database import Base
from automation.infrastructure.persistence.models.mixins import (
    CuidMixin,
    OrganizationMixin,
    OrganizationScopedModel,
)
from automation.shared.enums import WorkflowExecutionStatus


def _in_check(column: str, values: list[str]) -> str:
    return "{} IN ({})".format(
        column, ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    )


class WorkflowRule(OrganizationScopedModel, Base):
    """Workflow rule definition. Table: workflow_rule. Conditions + actions JSON."""

    __tablename__ = "workflow_rule"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=sa.text("true")
    )
    trigger_type: Mapped[str] = mapped_column(String(32), nullable=False)
    object_type: Mapped[str] = mapped_column(String(64), nullable=False)
    conditions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    actions: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    last_triggered: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    times_triggered: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )

    __table_args__ = (
        Index(
            "ix_workflow_rule_dispatch",
            "organization_id",
            "object_type",
            "trigger_type",
            "is_active",
        ),
        CheckConstraint(
            _in_check("trigger_type", TriggerType.values()),
            name="workflow_rule_trigger_type_check",
        ),
    )


class WorkflowExecution(CuidMixin, OrganizationMixin, Base):
    """Workflow execution audit (append-only). Table: workflow_execution."""

    __tablename__ = "workflow_execution"

    workflow_rule_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow_rule.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    result: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    executed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index(
            "ix_workflow_execution_rule_executed_at",
            "workflow_rule_id",
            "executed_at",
        ),
        CheckConstraint(
            _in_check("status", WorkflowExecutionStatus.values()),
            name="workflow_execution_status_check",
        ),
    )
