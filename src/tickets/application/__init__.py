"""
Ticket Application Layer
========================

Contains:
- Services: Orchestrate business logic and coordinate with repositories
- DTOs: Data transfer objects for API serialization

This layer depends on the domain layer and repository interfaces,
but not on concrete infrastructure implementations.
"""

from src.tickets.application.dto import (
    TicketCreateDTO,
    TicketUpdateDTO,
    TicketQueryDTO,
    EscalationRequest,
    CommentCreateDTO,
    CategoryCreateDTO,
    CategoryUpdateDTO,
    TicketResponse,
    CommentResponse,
    EscalationResponse,
    CategoryResponse,
    TicketStatsResponse,
    DashboardResponse,
)
from src.tickets.application.services import (
    TicketService,
    CategoryService,
    DashboardService,
    ITicketRepository,
    ICategoryCatalog,
    ICommentStore,
)

__all__ = [
    # DTOs
    "TicketCreateDTO",
    "TicketUpdateDTO",
    "TicketQueryDTO",
    "EscalationRequest",
    "CommentCreateDTO",
    "CategoryCreateDTO",
    "CategoryUpdateDTO",
    "TicketResponse",
    "CommentResponse",
    "EscalationResponse",
    "CategoryResponse",
    "TicketStatsResponse",
    "DashboardResponse",
    # Services
    "TicketService",
    "CategoryService",
    "DashboardService",
    # Repository Interfaces
    "ITicketRepository",
    "ICategoryCatalog",
    "ICommentStore",
]
