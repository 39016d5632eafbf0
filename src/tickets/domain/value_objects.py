"""
Ticket Value Objects
=====================

Stateless rules and immutable value objects for the ticket domain:
due-date calculation, field validation, escalation notes and dashboard
aggregates.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, field_validator

from src.config import (
    TicketStatus, TicketPriority,
    VALID_STATUSES, VALID_PRIORITIES,
    DEFAULT_SLA_HOURS, DEFAULT_CATEGORY_CODE,
)
from src.core import ValidationException
from src.tickets.domain.entities import Category, Ticket, TicketStats, is_overdue


class DueDateCalculator:
    """
    Pure functions for SLA due-date calculations.

    Only used when a ticket is created; edits never recompute a due date.
    """

    @staticmethod
    def calculate_due_date(reference: datetime, sla_hours: int) -> datetime:
        """Return `reference + sla_hours`."""
        return reference + timedelta(hours=sla_hours)

    @staticmethod
    def resolve_sla(
        catalog: Sequence[Category],
        category_code: Optional[str],
        default_sla_hours: int = DEFAULT_SLA_HOURS,
        default_category_code: str = DEFAULT_CATEGORY_CODE,
    ) -> Tuple[str, int]:
        """
        Resolve the category code and SLA hours for a new ticket.

        An empty catalog yields the sentinel category and the fixed default
        SLA. With a populated catalog an omitted code falls back to the
        sentinel when the catalog has it, otherwise to the first category.
        Unknown codes are left for `TicketRules` to reject.

        Returns:
            Tuple of (category_code, sla_hours)
        """
        if not catalog:
            return category_code or default_category_code, default_sla_hours

        codes = [c.code for c in catalog]
        code = category_code or (
            default_category_code if default_category_code in codes else codes[0]
        )
        for category in catalog:
            if category.code == code:
                return code, category.sla_hours
        return code, default_sla_hours


class TicketRules:
    """Validation of ticket writes. Pure; raises on the first violation."""

    @staticmethod
    def validate(
        *,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        category: Optional[str] = None,
        title: Optional[str] = None,
        catalog: Sequence[Category] = (),
        require_title: bool = False,
        default_category_code: str = DEFAULT_CATEGORY_CODE,
    ) -> None:
        """
        Validate the fields being written. `None` means "not being written".

        Raises:
            ValidationException: on the first invalid field
        """
        if require_title or title is not None:
            if title is None or not title.strip():
                raise ValidationException("Title is required", field="title")

        if status is not None and status not in VALID_STATUSES:
            raise ValidationException(
                f"Invalid status '{status}'. Must be one of {VALID_STATUSES}",
                field="status"
            )

        if priority is not None and priority not in VALID_PRIORITIES:
            raise ValidationException(
                f"Invalid priority '{priority}'. Must be one of {VALID_PRIORITIES}",
                field="priority"
            )

        if category is not None:
            known = [c.code for c in catalog] or [default_category_code]
            if category not in known:
                raise ValidationException(
                    f"Unknown category '{category}'. Must be one of {known}",
                    field="category"
                )


@dataclass(frozen=True)
class EscalationNote:
    """Audit comment written when a ticket is escalated."""

    reason: str
    reassign_to: Optional[str] = None

    @classmethod
    def create(cls, reason: Optional[str], reassign_to: Optional[str] = None) -> "EscalationNote":
        reason = (reason or "").strip()
        if not reason:
            raise ValidationException("Escalation reason is required", field="reason")
        reassign_to = (reassign_to or "").strip() or None
        return cls(reason=reason, reassign_to=reassign_to)

    @property
    def content(self) -> str:
        text = f"SYSTEM: Ticket escalated. Reason: {self.reason.rstrip('.')}."
        if self.reassign_to:
            text += f" Reassigned to {self.reassign_to}."
        return text


class TicketStatistics:
    """Aggregate counts for the dashboard."""

    @staticmethod
    def calculate(tickets: Iterable[Ticket], now: Optional[datetime] = None) -> TicketStats:
        now = now or datetime.now(timezone.utc)
        tickets = list(tickets)

        statuses = Counter(t.status for t in tickets)
        return TicketStats(
            total=len(tickets),
            open=statuses[TicketStatus.OPEN],
            in_progress=statuses[TicketStatus.IN_PROGRESS],
            closed=statuses[TicketStatus.CLOSED],
            high_priority=sum(1 for t in tickets if t.priority == TicketPriority.HIGH),
            escalated=sum(1 for t in tickets if t.is_escalated),
            overdue=sum(1 for t in tickets if is_overdue(t, now)),
            by_category=dict(Counter(t.category for t in tickets)),
        )


class CategorySeed(BaseModel):
    """A single category entry in the YAML catalog."""
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    sla_hours: int = Field(gt=0, description="Hours allotted to resolve")
    description: str = ""

    def to_domain(self) -> Category:
        return Category(
            code=self.code,
            name=self.name,
            sla_hours=self.sla_hours,
            description=self.description,
        )


class CategoryCatalogConfig(BaseModel):
    """
    Default category catalog loaded from YAML.

    Seeds the `ticket_categories` table on first start.
    """
    categories: List[CategorySeed] = Field(default_factory=list)

    @field_validator("categories")
    @classmethod
    def validate_unique_codes(cls, v: List[CategorySeed]) -> List[CategorySeed]:
        codes = [c.code for c in v]
        duplicates = {code for code in codes if codes.count(code) > 1}
        if duplicates:
            raise ValueError(f"duplicate category codes: {sorted(duplicates)}")
        return v
