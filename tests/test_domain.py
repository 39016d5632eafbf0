from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.core import TicketStateException, ValidationException
from src.tickets.domain import (
    Category,
    DueDateCalculator,
    EscalationNote,
    Ticket,
    TicketRules,
    TicketStatistics,
    is_overdue,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

CATALOG = [
    Category(code="billing", name="Billing", sla_hours=24),
    Category(code="internet_issue", name="Internet Issue", sla_hours=4),
]


def _ticket(**overrides) -> Ticket:
    values = {"title": "Slow connection", "category": "internet_issue", "created_at": NOW}
    values.update(overrides)
    return Ticket(**values)


def test_due_date_is_created_plus_sla() -> None:
    created = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
    assert DueDateCalculator.calculate_due_date(created, 4) == datetime(2024, 1, 1, 4, 0, tzinfo=timezone.utc)


def test_resolve_sla_uses_catalog_hours() -> None:
    assert DueDateCalculator.resolve_sla(CATALOG, "billing") == ("billing", 24)


def test_resolve_sla_empty_catalog_falls_back_to_default() -> None:
    assert DueDateCalculator.resolve_sla([], None) == ("internet_issue", 24)
    assert DueDateCalculator.resolve_sla([], "billing", default_sla_hours=12) == ("billing", 12)


def test_resolve_sla_omitted_code_prefers_default_category() -> None:
    assert DueDateCalculator.resolve_sla(CATALOG, None) == ("internet_issue", 4)


def test_resolve_sla_omitted_code_without_default_uses_first_entry() -> None:
    catalog = [Category(code="hardware", name="Hardware", sla_hours=48)]
    assert DueDateCalculator.resolve_sla(catalog, None) == ("hardware", 48)


def test_rules_accept_valid_write() -> None:
    TicketRules.validate(
        status="in_progress", priority="high", category="billing",
        title="Router down", catalog=CATALOG, require_title=True,
    )


@pytest.mark.parametrize(
    "fields, bad_field",
    [
        ({"status": "resolved"}, "status"),
        ({"priority": "urgent"}, "priority"),
        ({"category": "fiber"}, "category"),
        ({"title": "   "}, "title"),
    ],
)
def test_rules_reject_invalid_fields(fields, bad_field) -> None:
    with pytest.raises(ValidationException) as exc_info:
        TicketRules.validate(catalog=CATALOG, **fields)
    assert exc_info.value.details["field"] == bad_field


def test_rules_require_title_on_create() -> None:
    with pytest.raises(ValidationException):
        TicketRules.validate(catalog=CATALOG, require_title=True)


def test_rules_empty_catalog_only_accepts_default_category() -> None:
    TicketRules.validate(category="internet_issue", catalog=[])
    with pytest.raises(ValidationException):
        TicketRules.validate(category="billing", catalog=[])


def test_category_requires_positive_sla() -> None:
    with pytest.raises(ValidationException):
        Category(code="billing", name="Billing", sla_hours=0)


def test_overdue_predicate() -> None:
    past = NOW - timedelta(hours=1)
    assert is_overdue(_ticket(due_date=past), NOW)
    assert not is_overdue(_ticket(due_date=past, status="closed"), NOW)
    assert not is_overdue(_ticket(due_date=None), NOW)
    assert not is_overdue(_ticket(due_date=NOW + timedelta(minutes=1)), NOW)


def test_escalation_note_content() -> None:
    note = EscalationNote.create("No dial tone", "Tier 2 Support")
    assert note.content == "SYSTEM: Ticket escalated. Reason: No dial tone. Reassigned to Tier 2 Support."
    assert EscalationNote.create("  No dial tone ").content == "SYSTEM: Ticket escalated. Reason: No dial tone."
    assert EscalationNote.create("Outage.").content == "SYSTEM: Ticket escalated. Reason: Outage."


@pytest.mark.parametrize("reason", ["", "   ", None])
def test_escalation_note_requires_reason(reason) -> None:
    with pytest.raises(ValidationException):
        EscalationNote.create(reason)


def test_apply_escalation_forces_high_priority_and_reassigns() -> None:
    ticket = _ticket(priority="low", assigned_to="Dana")
    ticket.apply_escalation("Tier 2 Support")
    assert ticket.is_escalated
    assert ticket.priority == "high"
    assert ticket.assigned_to == "Tier 2 Support"
    assert not ticket.can_escalate


def test_apply_escalation_keeps_assignee_without_target() -> None:
    ticket = _ticket(assigned_to="Dana")
    ticket.apply_escalation()
    assert ticket.assigned_to == "Dana"


def test_escalation_guards() -> None:
    with pytest.raises(TicketStateException):
        _ticket(is_escalated=True).ensure_can_escalate()
    with pytest.raises(TicketStateException):
        _ticket(status="closed").apply_escalation()


def test_statistics_status_counts_sum_to_total() -> None:
    past = NOW - timedelta(hours=2)
    tickets = [
        _ticket(status="open", priority="high", due_date=past),
        _ticket(status="in_progress", is_escalated=True, priority="high", category="billing"),
        _ticket(status="closed", due_date=past),
        _ticket(status="open"),
    ]
    stats = TicketStatistics.calculate(tickets, NOW)

    assert stats.total == 4
    assert stats.open + stats.in_progress + stats.closed == stats.total
    assert (stats.open, stats.in_progress, stats.closed) == (2, 1, 1)
    assert stats.high_priority == 2
    assert stats.escalated == 1
    assert stats.overdue == 1
    assert stats.by_category == {"internet_issue": 3, "billing": 1}


def test_statistics_empty() -> None:
    stats = TicketStatistics.calculate([], NOW)
    assert stats.total == 0
    assert stats.overdue == 0
