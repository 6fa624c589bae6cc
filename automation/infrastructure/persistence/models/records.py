"""Record-store ORM models the workflow engine reads, updates, and creates.

Column attributes are snake_case; the engine sees records as dicts with the
record store's camelCase field names (owner_id <-> ownerId), mapped in
automation.infrastructure.persistence.repositories.record_repo.
"""

from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from automation.infrastructure.persistence.database import Base
from automation.infrastructure.persistence.models.mixins import OrganizationScopedModel


class Account(OrganizationScopedModel, Base):
    """Customer account. Table: account."""

    __tablename__ = "account"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)


class Contact(OrganizationScopedModel, Base):
    """Person at an account. Table: contact."""

    __tablename__ = "contact"

    first_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    account_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)


class Opportunity(OrganizationScopedModel, Base):
    """Sales opportunity. Table: opportunity."""

    __tablename__ = "opportunity"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    stage: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    pipeline: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    probability: Mapped[int | None] = mapped_column(Integer, nullable=True)
    close_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    account_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    contact_id: Mapped[str | None] = mapped_column(String, nullable=True)
    aircraft_id: Mapped[str | None] = mapped_column(String, nullable=True)
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)


class Task(OrganizationScopedModel, Base):
    """Follow-up task (e.g. created by the create_task action). Table: task."""

    __tablename__ = "task"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default="TODO", server_default="TODO"
    )
    priority: Mapped[str | None] = mapped_column(String(32), nullable=True)
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    account_id: Mapped[str | None] = mapped_column(String, nullable=True)
    contact_id: Mapped[str | None] = mapped_column(String, nullable=True)
    opportunity_id: Mapped[str | None] = mapped_column(String, nullable=True)


class Notification(OrganizationScopedModel, Base):
    """In-app notification for a user. Table: notification."""

    __tablename__ = "notification"

    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="info", server_default="info"
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    link: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )


class Activity(OrganizationScopedModel, Base):
    """Logged activity (note, call, meeting). Table: activity."""

    __tablename__ = "activity"

    type: Mapped[str] = mapped_column(
        String(32), nullable=False, default="NOTE", server_default="NOTE"
    )
    subject: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)
    account_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    contact_id: Mapped[str | None] = mapped_column(String, nullable=True)
    opportunity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    aircraft_id: Mapped[str | None] = mapped_column(String, nullable=True)


class Aircraft(OrganizationScopedModel, Base):
    """Aircraft tracked for an account. Table: aircraft."""

    __tablename__ = "aircraft"

    make: Mapped[str | None] = mapped_column(String(128), nullable=True)
    model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    tail_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    account_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True)


class WorkOrder(OrganizationScopedModel, Base):
    """Maintenance work order. Table: work_order."""

    __tablename__ = "work_order"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    aircraft_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    account_id: Mapped[str | None] = mapped_column(String, nullable=True)
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
