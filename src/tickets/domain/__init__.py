"""
Ticket Domain Layer
===================

Contains:
- Entities: Ticket, Category, Comment, TicketStats
- Value Objects & Rules: DueDateCalculator, TicketRules, EscalationNote,
  TicketStatistics, CategoryCatalogConfig
- The shared overdue predicate `is_overdue`

This layer has no dependencies on infrastructure - pure Python business logic.
"""

from src.tickets.domain.entities import (
    Ticket,
    Category,
    Comment,
    TicketStats,
    is_overdue,
)
from src.tickets.domain.value_objects import (
    DueDateCalculator,
    TicketRules,
    EscalationNote,
    TicketStatistics,
    CategorySeed,
    CategoryCatalogConfig,
)

__all__ = [
    # Entities
    "Ticket",
    "Category",
    "Comment",
    "TicketStats",
    "is_overdue",
    # Value Objects & Services
    "DueDateCalculator",
    "TicketRules",
    "EscalationNote",
    "TicketStatistics",
    "CategorySeed",
    "CategoryCatalogConfig",
]
