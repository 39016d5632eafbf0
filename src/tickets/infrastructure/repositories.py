"""
Ticket Infrastructure Repositories
===================================

Concrete implementations of repository interfaces using SQLAlchemy.

This layer contains the data access logic - how we store and retrieve
entities from the database.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import UUID, uuid4

import yaml
from sqlalchemy import and_, delete, not_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import TicketStatus
from src.core import ConfigurationException, RepositoryException
from src.shared.infrastructure.logging import get_logger
from src.tickets.application import ITicketRepository, ICategoryCatalog, ICommentStore
from src.tickets.domain import Ticket, Category, Comment, CategoryCatalogConfig
from src.tickets.infrastructure.models import TicketModel, CategoryModel, CommentModel

logger = get_logger(__name__)


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; every stored timestamp is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _overdue_clause(now: datetime):
    """SQL form of `is_overdue`: due date set, in the past, ticket not closed."""
    return and_(
        TicketModel.due_date.is_not(None),
        TicketModel.due_date < now.astimezone(timezone.utc),
        TicketModel.status != TicketStatus.CLOSED,
    )


class SQLAlchemyTicketRepository(ITicketRepository):
    """
    SQLAlchemy implementation of ticket repository.

    Handles persistence of Ticket entities using async SQLAlchemy.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _to_domain(model: TicketModel) -> Ticket:
        return Ticket(
            id=str(model.id),
            title=model.title,
            description=model.description or "",
            status=model.status,
            priority=model.priority,
            category=model.category,
            created_at=_as_utc(model.created_at),
            customer_id=model.customer_id,
            assigned_to=model.assigned_to,
            due_date=_as_utc(model.due_date),
            resolution_notes=model.resolution_notes,
            is_escalated=bool(model.is_escalated),
        )

    async def _get_model(self, ticket_id: str) -> Optional[TicketModel]:
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            return None
        return await self._session.get(TicketModel, ticket_uuid)

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        model = await self._get_model(ticket_id)
        return self._to_domain(model) if model else None

    async def create(self, ticket: Ticket) -> Ticket:
        model = TicketModel(
            id=uuid4(),
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
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(model)

    async def update(self, ticket: Ticket) -> Ticket:
        model = await self._get_model(ticket.id or "")
        if not model:
            raise RepositoryException(f"Ticket {ticket.id} not found")

        model.title = ticket.title
        model.description = ticket.description
        model.status = ticket.status
        model.priority = ticket.priority
        model.category = ticket.category
        model.customer_id = ticket.customer_id
        model.assigned_to = ticket.assigned_to
        model.due_date = ticket.due_date
        model.resolution_notes = ticket.resolution_notes
        model.is_escalated = ticket.is_escalated

        await self._session.flush()
        return self._to_domain(model)

    async def delete(self, ticket_id: str) -> bool:
        model = await self._get_model(ticket_id)
        if not model:
            return False

        # SQLite does not enforce ON DELETE CASCADE unless foreign keys are enabled
        await self._session.execute(
            delete(CommentModel).where(CommentModel.ticket_id == model.id)
        )
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def list(
        self,
        filters: dict,
        limit: Optional[int] = 100,
        offset: int = 0
    ) -> List[Ticket]:
        stmt = select(TicketModel)

        conditions = []
        for key in ("status", "priority", "category", "customer_id"):
            if key in filters:
                value = filters[key]
                column = getattr(TicketModel, key)
                if isinstance(value, list):
                    conditions.append(column.in_(value))
                else:
                    conditions.append(column == value)

        search = (filters.get("search") or "").strip()
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(
                TicketModel.title.ilike(pattern),
                TicketModel.description.ilike(pattern),
                TicketModel.assigned_to.ilike(pattern),
            ))

        if filters.get("overdue") is not None:
            overdue = _overdue_clause(filters.get("now") or datetime.now(timezone.utc))
            conditions.append(overdue if filters["overdue"] else not_(overdue))

        if conditions:
            stmt = stmt.where(and_(*conditions))

        stmt = stmt.order_by(TicketModel.created_at.desc())
        stmt = stmt.limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]


class SQLAlchemyCategoryRepository(ICategoryCatalog):
    """SQLAlchemy implementation of the category catalog."""

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _to_domain(model: CategoryModel) -> Category:
        return Category(
            id=str(model.id),
            code=model.code,
            name=model.name,
            sla_hours=model.sla_hours,
            description=model.description or "",
            created_at=_as_utc(model.created_at),
        )

    async def _get_model(self, category_id: str) -> Optional[CategoryModel]:
        category_uuid = _parse_uuid(category_id)
        if category_uuid is None:
            return None
        return await self._session.get(CategoryModel, category_uuid)

    async def list_categories(self) -> List[Category]:
        stmt = select(CategoryModel).order_by(CategoryModel.name.asc())
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        model = await self._get_model(category_id)
        return self._to_domain(model) if model else None

    async def get_by_code(self, code: str) -> Optional[Category]:
        stmt = select(CategoryModel).where(CategoryModel.code == code)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model else None

    async def create(self, category: Category) -> Category:
        model = CategoryModel(
            id=uuid4(),
            code=category.code,
            name=category.name,
            sla_hours=category.sla_hours,
            description=category.description,
            created_at=category.created_at or datetime.now(timezone.utc),
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(model)

    async def update(self, category: Category) -> Category:
        model = await self._get_model(category.id or "")
        if not model:
            raise RepositoryException(f"Category {category.id} not found")

        model.name = category.name
        model.sla_hours = category.sla_hours
        model.description = category.description

        await self._session.flush()
        return self._to_domain(model)

    async def delete(self, category_id: str) -> bool:
        model = await self._get_model(category_id)
        if not model:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True


class SQLAlchemyCommentRepository(ICommentStore):
    """SQLAlchemy implementation of the append-only comment log."""

    def __init__(self, session: AsyncSession):
        self._session = session

    @staticmethod
    def _to_domain(model: CommentModel) -> Comment:
        return Comment(
            id=str(model.id),
            ticket_id=str(model.ticket_id),
            content=model.content,
            author_name=model.author_name,
            created_at=_as_utc(model.created_at),
        )

    async def append(self, ticket_id: str, content: str, author: str) -> Comment:
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            raise RepositoryException(f"Invalid ticket ID: {ticket_id}")

        model = CommentModel(
            id=uuid4(),
            ticket_id=ticket_uuid,
            content=content,
            author_name=author,
            created_at=datetime.now(timezone.utc),
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_domain(model)

    async def list_for_ticket(self, ticket_id: str) -> List[Comment]:
        ticket_uuid = _parse_uuid(ticket_id)
        if ticket_uuid is None:
            return []

        stmt = (
            select(CommentModel)
            .where(CommentModel.ticket_id == ticket_uuid)
            .order_by(CommentModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]


class YAMLCategoryConfigProvider:
    """
    Loads the default category catalog from YAML.

    A missing file yields an empty catalog, which leaves tickets on the
    default category and SLA.
    """

    def __init__(self, config_path: Path | str):
        self._config_path = Path(config_path)

    def load(self) -> CategoryCatalogConfig:
        if not self._config_path.exists():
            logger.warning(f"Category config file not found: {self._config_path}, using empty catalog")
            return CategoryCatalogConfig()

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            return CategoryCatalogConfig(**data)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigurationException(
                f"Invalid category config {self._config_path}: {e}"
            ) from e
