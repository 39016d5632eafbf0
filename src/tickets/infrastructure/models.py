"""
Ticket Infrastructure Models
=============================

SQLAlchemy ORM models for the ticket module.

These are the database representations of our domain entities.
They belong in the infrastructure layer, not the domain layer.
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String, Text, Uuid
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database import Base
from src.config import TicketStatus, TicketPriority, DEFAULT_CATEGORY_CODE, DEFAULT_COMMENT_AUTHOR


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketModel(Base):
    """
    Database model for Ticket entity.

    Maps to the 'tickets' table. `customer_id` is a plain nullable
    reference: removing a subscriber never removes their tickets.
    """
    __tablename__ = "tickets"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    status: Mapped[str] = mapped_column(String(50), nullable=False, default=TicketStatus.OPEN)
    priority: Mapped[str] = mapped_column(String(50), nullable=False, default=TicketPriority.MEDIUM)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True, default=DEFAULT_CATEGORY_CODE)

    customer_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_escalated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("status in ('open', 'in_progress', 'closed')", name="ck_tickets_status"),
        CheckConstraint("priority in ('low', 'medium', 'high')", name="ck_tickets_priority"),
    )


class CategoryModel(Base):
    """
    Database model for the category catalog.

    Maps to the 'ticket_categories' table.
    """
    __tablename__ = "ticket_categories"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    code: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sla_hours: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("sla_hours > 0", name="ck_ticket_categories_sla_hours"),
    )


class CommentModel(Base):
    """
    Database model for ticket comments.

    Maps to the 'ticket_comments' table. Rows are only ever inserted.
    """
    __tablename__ = "ticket_comments"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    ticket_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False, default=DEFAULT_COMMENT_AUTHOR)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
