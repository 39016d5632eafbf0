"""
Ticket Infrastructure Layer
===========================

Infrastructure implementations for the ticket module:
- Models: SQLAlchemy ORM models
- Repositories: Data access layer and the YAML category catalog loader
"""

from src.tickets.infrastructure.models import TicketModel, CategoryModel, CommentModel
from src.tickets.infrastructure.repositories import (
    SQLAlchemyTicketRepository,
    SQLAlchemyCategoryRepository,
    SQLAlchemyCommentRepository,
    YAMLCategoryConfigProvider,
)

__all__ = [
    "TicketModel",
    "CategoryModel",
    "CommentModel",
    "SQLAlchemyTicketRepository",
    "SQLAlchemyCategoryRepository",
    "SQLAlchemyCommentRepository",
    "YAMLCategoryConfigProvider",
]
