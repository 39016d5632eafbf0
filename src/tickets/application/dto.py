"""
Ticket Application DTOs
========================

Data Transfer Objects for the ticket API layer.

These Pydantic models handle serialization/deserialization and validation
for API requests and responses. Each entity gets an explicit create and
update struct; updates only carry the fields the caller actually sent.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Literal
from datetime import datetime, timezone

from src.tickets.domain import Ticket, Category, Comment, TicketStats, is_overdue


# ========== Type Aliases for Literals ==========
TicketStatusStr = Literal["open", "in_progress", "closed"]
TicketPriorityStr = Literal["low", "medium", "high"]


# ========== Request DTOs ==========

class TicketCreateDTO(BaseModel):
    """DTO for creating a ticket. New tickets always start open."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=500, description="Short summary")
    description: str = Field(default="", description="Free-text description")
    priority: TicketPriorityStr = Field(default="medium", description="Ticket priority")
    category: Optional[str] = Field(None, min_length=1, description="Category code")
    customer_id: Optional[str] = Field(None, description="Subscriber reference")
    assigned_to: Optional[str] = Field(None, description="Assignee name")
    due_date: Optional[datetime] = Field(
        None,
        description="Explicit due date; computed from the category SLA when omitted"
    )


class TicketUpdateDTO(BaseModel):
    """
    DTO for a partial ticket update.

    Only fields present in the payload are applied. Sending `null` clears
    one of the optional references (customer, assignee, due date, notes).
    """
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = None
    status: Optional[TicketStatusStr] = None
    priority: Optional[TicketPriorityStr] = None
    category: Optional[str] = Field(None, min_length=1)
    customer_id: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    resolution_notes: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class EscalationRequest(BaseModel):
    """Request body for escalating a ticket."""
    reason: str = Field(..., description="Why the ticket is being escalated")
    reassign_to: Optional[str] = Field(None, description="New assignee, if any")


class CommentCreateDTO(BaseModel):
    """DTO for adding a comment to a ticket."""
    content: str = Field(..., min_length=1, description="Comment text")
    author_name: Optional[str] = Field(None, description="Free-text author name")


class CategoryCreateDTO(BaseModel):
    """DTO for adding a category to the catalog."""
    code: str = Field(..., min_length=1, max_length=100, description="Stable category key")
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    sla_hours: int = Field(..., gt=0, description="Hours allotted to resolve")
    description: str = Field(default="")


class CategoryUpdateDTO(BaseModel):
    """DTO for editing a category. The code is a stable key and cannot change."""
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    sla_hours: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class TicketQueryDTO(BaseModel):
    """Filters for the ticket list."""
    status: Optional[TicketStatusStr] = None
    priority: Optional[TicketPriorityStr] = None
    category: Optional[str] = None
    customer_id: Optional[str] = None
    search: Optional[str] = Field(None, description="Matches title, description or assignee")
    overdue: Optional[bool] = None
    limit: int = Field(default=100, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)

    def repository_filters(self, now: Optional[datetime] = None) -> dict:
        """
        Filters the repository applies before paginating.

        `overdue` is evaluated against `now`, which is added to the filters
        whenever the overdue filter is set.
        """
        filters = self.model_dump(
            include={"status", "priority", "category", "customer_id", "search", "overdue"},
            exclude_none=True,
        )
        if "overdue" in filters:
            filters["now"] = now or datetime.now(timezone.utc)
        return filters


# ========== Response DTOs ==========

class TicketResponse(BaseModel):
    """Response model for a ticket, including derived badges."""
    id: str
    title: str
    description: str
    status: TicketStatusStr
    priority: TicketPriorityStr
    category: str
    created_at: datetime
    customer_id: Optional[str] = None
    assigned_to: Optional[str] = None
    due_date: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    is_escalated: bool = False
    is_overdue: bool = Field(False, description="Due date passed and ticket not closed")
    can_escalate: bool = Field(False, description="Whether escalation is allowed")

    @classmethod
    def from_domain(cls, ticket: Ticket, now: Optional[datetime] = None) -> "TicketResponse":
        return cls(
            id=ticket.id or "",
            title=ticket.title,
            description=ticket.description,
            status=ticket.status,
            priority=ticket.priority,
            category=ticket.category,
            created_at=ticket.created_at,
            customer_id=ticket.customer_id,
            assigned_to=ticket.assigned_to,
            due_date=ticket.due_date,
            resolution_notes=ticket.resolution_notes,
            is_escalated=ticket.is_escalated,
            is_overdue=is_overdue(ticket, now),
            can_escalate=ticket.can_escalate,
        )


class CommentResponse(BaseModel):
    """Response model for a ticket comment."""
    id: str
    ticket_id: str
    content: str
    author_name: str
    created_at: datetime

    @classmethod
    def from_domain(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id or "",
            ticket_id=comment.ticket_id,
            content=comment.content,
            author_name=comment.author_name,
            created_at=comment.created_at,
        )


class EscalationResponse(BaseModel):
    """Response model for an escalation: the updated ticket and its audit comment."""
    ticket: TicketResponse
    comment: CommentResponse


class CategoryResponse(BaseModel):
    """Response model for a catalog category."""
    id: str
    code: str
    name: str
    sla_hours: int
    description: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, category: Category) -> "CategoryResponse":
        return cls(
            id=category.id or "",
            code=category.code,
            name=category.name,
            sla_hours=category.sla_hours,
            description=category.description,
            created_at=category.created_at,
        )


class TicketStatsResponse(BaseModel):
    """Summary statistics for the dashboard."""
    total: int
    open: int
    in_progress: int
    closed: int
    high_priority: int
    escalated: int
    overdue: int
    by_category: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, stats: TicketStats) -> "TicketStatsResponse":
        return cls(**stats.to_dict())


class DashboardResponse(BaseModel):
    """Response model for the dashboard."""
    summary: TicketStatsResponse
    recent_tickets: List[TicketResponse] = Field(default_factory=list)
