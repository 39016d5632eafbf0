"""
Ticket Domain Entities
=======================

Pure Python domain entities for the ticket lifecycle.

Following Domain-Driven Design principles, these entities contain
business logic and are free of infrastructure concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from src.config import TicketStatus, TicketPriority, DEFAULT_COMMENT_AUTHOR
from src.core import TicketStateException, ValidationException


def is_overdue(ticket: "Ticket", now: Optional[datetime] = None) -> bool:
    """
    Overdue predicate shared by list/detail badges and dashboard stats.

    A ticket is overdue when it has a due date, that due date is in the
    past and the ticket is not closed.
    """
    if ticket.due_date is None or ticket.status == TicketStatus.CLOSED:
        return False
    now = now or datetime.now(timezone.utc)
    return ticket.due_date < now


@dataclass
class Category:
    """
    Ticket category from the configurable catalog.

    `code` is the stable key referenced by tickets; `sla_hours` is the
    time allotted to resolve a ticket of this category.
    """

    code: str
    name: str
    sla_hours: int
    description: str = ""
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.code or not self.code.strip():
            raise ValidationException("Category code is required", field="code")
        if self.sla_hours <= 0:
            raise ValidationException("SLA hours must be greater than zero", field="sla_hours")


@dataclass(frozen=True)
class Comment:
    """Immutable entry in a ticket's comment log."""

    ticket_id: str
    content: str
    author_name: str = DEFAULT_COMMENT_AUTHOR
    id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Ticket:
    """
    Ticket entity representing a support ticket.

    Holds the escalation state transition; validation of field values
    against the category catalog lives in `TicketRules`.
    """

    title: str
    category: str
    created_at: datetime
    description: str = ""
    status: str = TicketStatus.OPEN
    priority: str = TicketPriority.MEDIUM
    id: Optional[str] = None
    customer_id: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    is_escalated: bool = False

    @property
    def is_closed(self) -> bool:
        return self.status == TicketStatus.CLOSED

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return is_overdue(self, now)

    @property
    def can_escalate(self) -> bool:
        """Escalation is only offered on open, not yet escalated tickets."""
        return not self.is_escalated and not self.is_closed

    def ensure_can_escalate(self) -> None:
        if self.is_escalated:
            raise TicketStateException(self.id or "", "escalate", "ticket is already escalated")
        if self.is_closed:
            raise TicketStateException(self.id or "", "escalate", "ticket is closed")

    def apply_escalation(self, reassign_to: Optional[str] = None) -> None:
        """
        Mark the ticket escalated.

        Priority is forced to high even when it already is; the assignee
        is only replaced when a reassignment target is given.
        """
        self.ensure_can_escalate()
        self.is_escalated = True
        self.priority = TicketPriority.HIGH
        if reassign_to:
            self.assigned_to = reassign_to


@dataclass
class TicketStats:
    """Dashboard aggregates over a set of tickets."""

    total: int = 0
    open: int = 0
    in_progress: int = 0
    closed: int = 0
    high_priority: int = 0
    escalated: int = 0
    overdue: int = 0
    by_category: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "open": self.open,
            "in_progress": self.in_progress,
            "closed": self.closed,
            "high_priority": self.high_priority,
            "escalated": self.escalated,
            "overdue": self.overdue,
            "by_category": dict(self.by_category),
        }
