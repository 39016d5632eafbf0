"""
Ticket Controllers (API Routes)
================================

FastAPI routes for tickets, comments, the category catalog and the
dashboard.

Controllers are thin - they delegate to application services.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings, get_settings, Permission
from src.infrastructure.database import get_session
from src.shared.api.permissions import require_permission
from src.tickets.application import (
    TicketService, CategoryService, DashboardService,
    TicketCreateDTO, TicketUpdateDTO, TicketQueryDTO,
    EscalationRequest, CommentCreateDTO,
    CategoryCreateDTO, CategoryUpdateDTO,
    TicketResponse, CommentResponse, EscalationResponse,
    CategoryResponse, TicketStatsResponse, DashboardResponse,
)
from src.tickets.application.dto import TicketStatusStr, TicketPriorityStr
from src.tickets.infrastructure import (
    SQLAlchemyTicketRepository,
    SQLAlchemyCategoryRepository,
    SQLAlchemyCommentRepository,
)

router = APIRouter()


# ========== Example payloads for Swagger ==========

TICKET_CREATE_EXAMPLE = {
    "title": "No dial tone on fiber line",
    "description": "Subscriber reports the ONT is online but the voice port is dead.",
    "priority": "medium",
    "category": "internet_issue",
    "customer_id": "5f0c1a52-6a3e-4d55-9d8e-0b7b3c1f2a10",
    "assigned_to": "Dana Whitfield"
}

ESCALATION_EXAMPLE = {
    "reason": "No dial tone",
    "reassign_to": "Tier 2 Support"
}


# ========== Dependencies ==========

async def get_ticket_service(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings)
) -> TicketService:
    """Get ticket service instance."""
    return TicketService(
        SQLAlchemyTicketRepository(session),
        SQLAlchemyCategoryRepository(session),
        SQLAlchemyCommentRepository(session),
        settings,
    )


async def get_category_service(
    session: AsyncSession = Depends(get_session)
) -> CategoryService:
    """Get category service instance."""
    return CategoryService(SQLAlchemyCategoryRepository(session))


async def get_dashboard_service(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings)
) -> DashboardService:
    """Get dashboard service instance."""
    return DashboardService(SQLAlchemyTicketRepository(session), settings)


# ========== Tickets ==========

@router.post(
    "/tickets",
    response_model=TicketResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Tickets"],
    summary="Create a ticket",
    description="""
    Create a ticket in status `open`.

    When `due_date` is omitted it is set to creation time plus the category's
    SLA hours. With an empty category catalog the default category
    (`internet_issue`) and a 24 hour SLA are used.
    """,
    openapi_extra={
        "requestBody": {"content": {"application/json": {"example": TICKET_CREATE_EXAMPLE}}}
    }
)
async def create_ticket(
    request: TicketCreateDTO,
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.create_ticket(request)
    return TicketResponse.from_domain(ticket)


@router.get(
    "/tickets",
    response_model=List[TicketResponse],
    tags=["Tickets"],
    summary="List tickets",
    description="Newest first. `q` matches title, description or assignee."
)
async def list_tickets(
    ticket_status: Optional[TicketStatusStr] = Query(None, alias="status", description="open, in_progress or closed"),
    priority: Optional[TicketPriorityStr] = Query(None, description="low, medium or high"),
    category: Optional[str] = Query(None, description="Category code"),
    customer_id: Optional[str] = Query(None, description="Subscriber reference"),
    q: Optional[str] = Query(None, description="Search term"),
    overdue: Optional[bool] = Query(None, description="Only overdue (true) or not overdue (false)"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: TicketService = Depends(get_ticket_service)
):
    query = TicketQueryDTO(
        status=ticket_status,
        priority=priority,
        category=category,
        customer_id=customer_id,
        search=q,
        overdue=overdue,
        limit=limit,
        offset=offset,
    )
    tickets = await service.list_tickets(query)
    return [TicketResponse.from_domain(t) for t in tickets]


@router.get(
    "/tickets/{ticket_id}",
    response_model=TicketResponse,
    tags=["Tickets"],
    summary="Get a ticket"
)
async def get_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    return TicketResponse.from_domain(await service.get_ticket(ticket_id))


@router.patch(
    "/tickets/{ticket_id}",
    response_model=TicketResponse,
    tags=["Tickets"],
    summary="Update a ticket",
    description="Partial update. The due date is only changed when sent explicitly."
)
async def update_ticket(
    ticket_id: str,
    request: TicketUpdateDTO,
    service: TicketService = Depends(get_ticket_service)
):
    ticket = await service.update_ticket(ticket_id, request)
    return TicketResponse.from_domain(ticket)


@router.delete(
    "/tickets/{ticket_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Tickets"],
    summary="Delete a ticket",
    dependencies=[Depends(require_permission(Permission.DELETE_RECORDS))]
)
async def delete_ticket(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    await service.delete_ticket(ticket_id)


@router.post(
    "/tickets/{ticket_id}/escalate",
    response_model=EscalationResponse,
    tags=["Tickets"],
    summary="Escalate a ticket",
    description="""
    Escalate an open or in-progress ticket.

    Appends one audit comment authored by `System`, forces priority to `high`,
    sets `is_escalated` and, when `reassign_to` is given, replaces the assignee.

    Returns 422 for an empty reason and 409 when the ticket is already
    escalated or closed; nothing is written in either case.
    """,
    openapi_extra={
        "requestBody": {"content": {"application/json": {"example": ESCALATION_EXAMPLE}}}
    }
)
async def escalate_ticket(
    ticket_id: str,
    request: EscalationRequest,
    service: TicketService = Depends(get_ticket_service)
):
    ticket, comment = await service.escalate_ticket(
        ticket_id, request.reason, request.reassign_to
    )
    return EscalationResponse(
        ticket=TicketResponse.from_domain(ticket),
        comment=CommentResponse.from_domain(comment),
    )


# ========== Comments ==========

@router.get(
    "/tickets/{ticket_id}/comments",
    response_model=List[CommentResponse],
    tags=["Comments"],
    summary="List a ticket's comments, oldest first"
)
async def list_comments(
    ticket_id: str,
    service: TicketService = Depends(get_ticket_service)
):
    comments = await service.list_comments(ticket_id)
    return [CommentResponse.from_domain(c) for c in comments]


@router.post(
    "/tickets/{ticket_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Comments"],
    summary="Add a comment"
)
async def add_comment(
    ticket_id: str,
    request: CommentCreateDTO,
    service: TicketService = Depends(get_ticket_service)
):
    comment = await service.add_comment(ticket_id, request)
    return CommentResponse.from_domain(comment)


# ========== Categories ==========

@router.get(
    "/categories",
    response_model=List[CategoryResponse],
    tags=["Categories"],
    summary="List the category catalog"
)
async def list_categories(
    service: CategoryService = Depends(get_category_service)
):
    categories = await service.list_categories()
    return [CategoryResponse.from_domain(c) for c in categories]


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Categories"],
    summary="Add a category",
    dependencies=[Depends(require_permission(Permission.MANAGE_SETTINGS))]
)
async def create_category(
    request: CategoryCreateDTO,
    service: CategoryService = Depends(get_category_service)
):
    return CategoryResponse.from_domain(await service.create_category(request))


@router.patch(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    tags=["Categories"],
    summary="Update a category",
    description="Existing tickets keep their due dates when an SLA changes.",
    dependencies=[Depends(require_permission(Permission.MANAGE_SETTINGS))]
)
async def update_category(
    category_id: str,
    request: CategoryUpdateDTO,
    service: CategoryService = Depends(get_category_service)
):
    return CategoryResponse.from_domain(await service.update_category(category_id, request))


@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Categories"],
    summary="Delete a category",
    dependencies=[Depends(require_permission(Permission.MANAGE_SETTINGS))]
)
async def delete_category(
    category_id: str,
    service: CategoryService = Depends(get_category_service)
):
    await service.delete_category(category_id)


# ========== Dashboard ==========

@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    tags=["Dashboard"],
    summary="Ticket counts and most recent tickets",
    description="""
    Counts by status (`open + in_progress + closed == total`), high priority,
    escalated and overdue tickets, plus the most recent tickets.

    A ticket is overdue when its due date has passed and it is not closed.
    """
)
async def get_dashboard(
    service: DashboardService = Depends(get_dashboard_service)
):
    stats, recent = await service.get_dashboard()
    return DashboardResponse(
        summary=TicketStatsResponse.from_domain(stats),
        recent_tickets=[TicketResponse.from_domain(t) for t in recent],
    )


# Export router for inclusion in main app
tickets_router = router
