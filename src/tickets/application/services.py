"""
Ticket Application Services
============================

Application services orchestrate business logic and coordinate between
domain entities and repositories.

Following SOLID principles:
- Single Responsibility: Each service has one clear purpose
- Dependency Inversion: Depend on abstractions (repositories), not concrete implementations
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from abc import ABC, abstractmethod

from src.config import Settings, TicketStatus
from src.core import ResourceNotFoundException, ValidationException
from src.shared.infrastructure.logging import get_logger, log_latency
from src.tickets.domain import (
    Ticket, Category, Comment, TicketStats,
    DueDateCalculator, TicketRules, EscalationNote, TicketStatistics,
    CategoryCatalogConfig,
)
from src.tickets.application.dto import (
    TicketCreateDTO, TicketUpdateDTO, TicketQueryDTO,
    CommentCreateDTO, CategoryCreateDTO, CategoryUpdateDTO,
)

logger = get_logger(__name__)

# Fields that must always hold a value; a null in an update is ignored
_REQUIRED_TICKET_FIELDS = {"title", "description", "status", "priority", "category"}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive datetimes from callers are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ========== Repository Interfaces (Dependency Inversion) ==========

class ITicketRepository(ABC):
    """Interface for ticket data access."""

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        """Get ticket by ID."""

    @abstractmethod
    async def create(self, ticket: Ticket) -> Ticket:
        """Persist a new ticket and return it with its generated ID."""

    @abstractmethod
    async def update(self, ticket: Ticket) -> Ticket:
        """Persist changes to an existing ticket."""

    @abstractmethod
    async def delete(self, ticket_id: str) -> bool:
        """Delete a ticket and its comments. Returns False if it did not exist."""

    @abstractmethod
    async def list(
        self,
        filters: dict,
        limit: Optional[int] = 100,
        offset: int = 0
    ) -> List[Ticket]:
        """
        List tickets, newest first.

        Filter keys: status, priority, category, customer_id, search, and
        overdue together with the `now` it is evaluated against. Filters
        are applied before limit and offset.
        """


class ICategoryCatalog(ABC):
    """Interface for the category catalog."""

    @abstractmethod
    async def list_categories(self) -> List[Category]:
        """List all categories ordered by name."""

    @abstractmethod
    async def get_by_id(self, category_id: str) -> Optional[Category]:
        """Get category by ID."""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[Category]:
        """Get category by its code."""

    @abstractmethod
    async def create(self, category: Category) -> Category:
        """Add a category."""

    @abstractmethod
    async def update(self, category: Category) -> Category:
        """Persist changes to a category."""

    @abstractmethod
    async def delete(self, category_id: str) -> bool:
        """Delete a category. Returns False if it did not exist."""


class ICommentStore(ABC):
    """Interface for the append-only comment log."""

    @abstractmethod
    async def append(self, ticket_id: str, content: str, author: str) -> Comment:
        """Append a comment to a ticket's log."""

    @abstractmethod
    async def list_for_ticket(self, ticket_id: str) -> List[Comment]:
        """List a ticket's comments, oldest first."""


# ========== Application Services ==========

class TicketService:
    """
    Service for the ticket lifecycle: create, edit, escalate, delete and
    comment.

    Every write is validated against the category catalog before anything
    is persisted.
    """

    def __init__(
        self,
        ticket_repository: ITicketRepository,
        category_catalog: ICategoryCatalog,
        comment_store: ICommentStore,
        settings: Settings
    ):
        self._ticket_repo = ticket_repository
        self._catalog = category_catalog
        self._comments = comment_store
        self._settings = settings

    async def create_ticket(
        self,
        dto: TicketCreateDTO,
        now: Optional[datetime] = None
    ) -> Ticket:
        """
        Create a ticket in status open.

        The due date is computed from the category SLA unless the caller
        supplied one.
        """
        created_at = now or datetime.now(timezone.utc)
        catalog = await self._catalog.list_categories()

        category_code, sla_hours = DueDateCalculator.resolve_sla(
            catalog,
            dto.category,
            default_sla_hours=self._settings.default_sla_hours,
            default_category_code=self._settings.default_category_code,
        )
        TicketRules.validate(
            status=TicketStatus.OPEN,
            priority=dto.priority,
            category=category_code,
            title=dto.title,
            catalog=catalog,
            require_title=True,
            default_category_code=self._settings.default_category_code,
        )

        due_date = _as_utc(dto.due_date) or DueDateCalculator.calculate_due_date(created_at, sla_hours)

        ticket = Ticket(
            title=dto.title.strip(),
            description=dto.description,
            status=TicketStatus.OPEN,
            priority=dto.priority,
            category=category_code,
            created_at=created_at,
            customer_id=dto.customer_id,
            assigned_to=dto.assigned_to,
            due_date=due_date,
        )
        ticket = await self._ticket_repo.create(ticket)

        logger.info(
            "Ticket created",
            extra={
                "ticket_id": ticket.id,
                "category": ticket.category,
                "sla_hours": sla_hours,
                "due_date": ticket.due_date.isoformat() if ticket.due_date else None,
            }
        )
        return ticket

    async def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = await self._ticket_repo.get_by_id(ticket_id)
        if ticket is None:
            raise ResourceNotFoundException("Ticket", ticket_id)
        return ticket

    async def list_tickets(
        self,
        query: TicketQueryDTO,
        now: Optional[datetime] = None
    ) -> List[Ticket]:
        return await self._ticket_repo.list(
            query.repository_filters(now), limit=query.limit, offset=query.offset
        )

    async def update_ticket(self, ticket_id: str, dto: TicketUpdateDTO) -> Ticket:
        """
        Apply a partial update.

        The due date is never recomputed here, even when the category
        changes; it only moves when the caller sends one.
        """
        ticket = await self.get_ticket(ticket_id)
        changes = {
            key: value for key, value in dto.changes().items()
            if value is not None or key not in _REQUIRED_TICKET_FIELDS
        }
        if not changes:
            return ticket

        catalog = await self._catalog.list_categories() if "category" in changes else []
        TicketRules.validate(
            status=changes.get("status"),
            priority=changes.get("priority"),
            category=changes.get("category"),
            title=changes.get("title"),
            catalog=catalog,
            default_category_code=self._settings.default_category_code,
        )

        if "title" in changes:
            changes["title"] = changes["title"].strip()
        if "due_date" in changes:
            changes["due_date"] = _as_utc(changes["due_date"])
        for key, value in changes.items():
            setattr(ticket, key, value)

        ticket = await self._ticket_repo.update(ticket)
        logger.info(
            "Ticket updated",
            extra={"ticket_id": ticket.id, "fields": sorted(changes)}
        )
        return ticket

    async def delete_ticket(self, ticket_id: str) -> None:
        deleted = await self._ticket_repo.delete(ticket_id)
        if not deleted:
            raise ResourceNotFoundException("Ticket", ticket_id)
        logger.info("Ticket deleted", extra={"ticket_id": ticket_id})

    async def escalate_ticket(
        self,
        ticket_id: str,
        reason: str,
        reassign_to: Optional[str] = None
    ) -> Tuple[Ticket, Comment]:
        """
        Escalate a ticket.

        Writes exactly one audit comment, then forces priority to high,
        flags the ticket and applies the optional reassignment. Nothing is
        written when the reason is empty or the ticket cannot be escalated,
        and the ticket is left untouched if the comment cannot be appended.

        Raises:
            ValidationException: empty reason
            TicketStateException: already escalated or closed
            ResourceNotFoundException: unknown ticket
        """
        note = EscalationNote.create(reason, reassign_to)
        ticket = await self.get_ticket(ticket_id)
        ticket.ensure_can_escalate()

        comment = await self._comments.append(
            ticket.id, note.content, self._settings.system_author_name
        )
        ticket.apply_escalation(note.reassign_to)
        ticket = await self._ticket_repo.update(ticket)

        logger.info(
            "Ticket escalated",
            extra={
                "ticket_id": ticket.id,
                "reassigned_to": note.reassign_to,
                "comment_id": comment.id,
            }
        )
        return ticket, comment

    async def list_comments(self, ticket_id: str) -> List[Comment]:
        await self.get_ticket(ticket_id)
        return await self._comments.list_for_ticket(ticket_id)

    async def add_comment(self, ticket_id: str, dto: CommentCreateDTO) -> Comment:
        content = dto.content.strip()
        if not content:
            raise ValidationException("Comment content is required", field="content")
        author = (dto.author_name or "").strip() or self._settings.default_comment_author

        await self.get_ticket(ticket_id)
        comment = await self._comments.append(ticket_id, content, author)
        logger.info(
            "Comment added",
            extra={"ticket_id": ticket_id, "comment_id": comment.id}
        )
        return comment


class CategoryService:
    """Service for maintaining the category catalog."""

    def __init__(self, category_catalog: ICategoryCatalog):
        self._catalog = category_catalog

    async def list_categories(self) -> List[Category]:
        return await self._catalog.list_categories()

    async def create_category(self, dto: CategoryCreateDTO) -> Category:
        code = dto.code.strip()
        if await self._catalog.get_by_code(code) is not None:
            raise ValidationException(f"Category code '{code}' already exists", field="code")

        category = await self._catalog.create(Category(
            code=code,
            name=dto.name.strip(),
            sla_hours=dto.sla_hours,
            description=dto.description,
        ))
        logger.info(
            "Category created",
            extra={"category_code": category.code, "sla_hours": category.sla_hours}
        )
        return category

    async def update_category(self, category_id: str, dto: CategoryUpdateDTO) -> Category:
        category = await self._catalog.get_by_id(category_id)
        if category is None:
            raise ResourceNotFoundException("Category", category_id)

        changes = dto.changes()
        # Category re-validates its fields before anything is stored
        category = await self._catalog.update(replace(category, **changes))
        logger.info(
            "Category updated",
            extra={"category_code": category.code, "fields": sorted(changes)}
        )
        return category

    async def delete_category(self, category_id: str) -> None:
        deleted = await self._catalog.delete(category_id)
        if not deleted:
            raise ResourceNotFoundException("Category", category_id)
        logger.info("Category deleted", extra={"category_id": category_id})

    async def seed_defaults(self, config: CategoryCatalogConfig) -> int:
        """
        Populate an empty catalog from configuration.

        Returns:
            Number of categories inserted (0 when the catalog already has entries)
        """
        if await self._catalog.list_categories():
            return 0

        for seed in config.categories:
            await self._catalog.create(seed.to_domain())

        logger.info("Seeded default categories", extra={"count": len(config.categories)})
        return len(config.categories)


class DashboardService:
    """Service producing the dashboard aggregates."""

    def __init__(self, ticket_repository: ITicketRepository, settings: Settings):
        self._ticket_repo = ticket_repository
        self._settings = settings

    async def get_dashboard(
        self,
        now: Optional[datetime] = None
    ) -> Tuple[TicketStats, List[Ticket]]:
        """
        Returns:
            Tuple of (stats over all tickets, most recent tickets)
        """
        now = now or datetime.now(timezone.utc)
        tickets = await self._ticket_repo.list({}, limit=None)

        with log_latency(logger, "dashboard_stats", tickets=len(tickets)):
            stats = TicketStatistics.calculate(tickets, now)

        return stats, tickets[: self._settings.dashboard_recent_limit]
