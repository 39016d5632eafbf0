"""Shared fixtures: in-memory stores for service tests and an API client on SQLite."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.config import Settings, get_settings
from src.core import RepositoryException
from src.tickets.application import (
    ICategoryCatalog,
    ICommentStore,
    ITicketRepository,
    TicketService,
)
from src.tickets.domain import Category, Comment, Ticket, is_overdue

ROOT = Path(__file__).resolve().parents[1]


class InMemoryTicketRepository(ITicketRepository):
    """Stores copies so callers only see changes after `update`."""

    def __init__(self) -> None:
        self.tickets: dict[str, Ticket] = {}

    async def get_by_id(self, ticket_id: str) -> Optional[Ticket]:
        ticket = self.tickets.get(ticket_id)
        return replace(ticket) if ticket else None

    async def create(self, ticket: Ticket) -> Ticket:
        stored = replace(ticket, id=str(uuid4()))
        self.tickets[stored.id] = stored
        return replace(stored)

    async def update(self, ticket: Ticket) -> Ticket:
        if ticket.id not in self.tickets:
            raise RepositoryException(f"Ticket {ticket.id} not found")
        self.tickets[ticket.id] = replace(ticket)
        return replace(ticket)

    async def delete(self, ticket_id: str) -> bool:
        return self.tickets.pop(ticket_id, None) is not None

    async def list(self, filters: dict, limit: Optional[int] = 100, offset: int = 0) -> List[Ticket]:
        tickets = sorted(self.tickets.values(), key=lambda t: t.created_at, reverse=True)
        for key in ("status", "priority", "category", "customer_id"):
            if key in filters:
                tickets = [t for t in tickets if getattr(t, key) == filters[key]]
        if filters.get("overdue") is not None:
            tickets = [t for t in tickets if is_overdue(t, filters["now"]) == filters["overdue"]]
        end = None if limit is None else offset + limit
        return [replace(t) for t in tickets[offset:end]]


class InMemoryCategoryCatalog(ICategoryCatalog):
    def __init__(self, categories: Optional[List[Category]] = None) -> None:
        self.categories: dict[str, Category] = {}
        for category in categories or []:
            category.id = category.id or str(uuid4())
            self.categories[category.id] = category

    async def list_categories(self) -> List[Category]:
        return sorted(self.categories.values(), key=lambda c: c.name)

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        return self.categories.get(category_id)

    async def get_by_code(self, code: str) -> Optional[Category]:
        return next((c for c in self.categories.values() if c.code == code), None)

    async def create(self, category: Category) -> Category:
        stored = replace(category, id=str(uuid4()))
        self.categories[stored.id] = stored
        return stored

    async def update(self, category: Category) -> Category:
        self.categories[category.id] = category
        return category

    async def delete(self, category_id: str) -> bool:
        return self.categories.pop(category_id, None) is not None


class InMemoryCommentStore(ICommentStore):
    def __init__(self) -> None:
        self.comments: List[Comment] = []

    async def append(self, ticket_id: str, content: str, author: str) -> Comment:
        comment = Comment(
            ticket_id=ticket_id,
            content=content,
            author_name=author,
            id=str(uuid4()),
            created_at=datetime.now(timezone.utc),
        )
        self.comments.append(comment)
        return comment

    async def list_for_ticket(self, ticket_id: str) -> List[Comment]:
        return [c for c in self.comments if c.ticket_id == ticket_id]


class FailingCommentStore(InMemoryCommentStore):
    async def append(self, ticket_id: str, content: str, author: str) -> Comment:
        raise RepositoryException("comment store unavailable")


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, environment="test", database_url="sqlite+aiosqlite://")


@pytest.fixture
def catalog() -> InMemoryCategoryCatalog:
    return InMemoryCategoryCatalog([
        Category(code="internet_issue", name="Internet Issue", sla_hours=4),
        Category(code="billing", name="Billing", sla_hours=24),
        Category(code="installation", name="Installation", sla_hours=72),
    ])


@pytest.fixture
def ticket_repo() -> InMemoryTicketRepository:
    return InMemoryTicketRepository()


@pytest.fixture
def comment_store() -> InMemoryCommentStore:
    return InMemoryCommentStore()


@pytest.fixture
def ticket_service(ticket_repo, catalog, comment_store, settings) -> TicketService:
    return TicketService(ticket_repo, catalog, comment_store, settings)


@pytest.fixture
def client(tmp_path: Path, monkeypatch) -> TestClient:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'tickets.db'}")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("CATEGORY_CONFIG_PATH", str(ROOT / "categories.yaml"))
    get_settings.cache_clear()

    from src.main import app

    with TestClient(app) as test_client:
        yield test_client

    get_settings.cache_clear()
