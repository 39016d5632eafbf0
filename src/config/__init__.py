"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List


# Fallbacks used when the category catalog is empty
DEFAULT_SLA_HOURS = 24
DEFAULT_CATEGORY_CODE = "internet_issue"

SYSTEM_AUTHOR_NAME = "System"
DEFAULT_COMMENT_AUTHOR = "Support Agent"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety. A single instance is
    passed explicitly to the services that need it.
    """

    # ========== Application ==========
    app_name: str = Field(default="Nexus ISP Manager", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/nexus",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Ticket Categories ==========
    category_config_path: Path = Field(
        default=Path("categories.yaml"),
        description="Path to the default category catalog YAML file"
    )
    seed_default_categories: bool = Field(
        default=True,
        description="Seed the catalog from YAML when the table is empty"
    )
    default_sla_hours: int = Field(
        default=DEFAULT_SLA_HOURS,
        description="SLA used when the category catalog is empty",
        gt=0
    )
    default_category_code: str = Field(
        default=DEFAULT_CATEGORY_CODE,
        description="Category code used when the catalog is empty",
        min_length=1
    )

    # ========== Comments ==========
    system_author_name: str = Field(
        default=SYSTEM_AUTHOR_NAME,
        description="Author recorded on automated audit comments"
    )
    default_comment_author: str = Field(
        default=DEFAULT_COMMENT_AUTHOR,
        description="Author used when a comment omits one"
    )

    # ========== Dashboard ==========
    dashboard_recent_limit: int = Field(
        default=5,
        description="Number of recent tickets shown on the dashboard",
        ge=0,
        le=100
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# ========== Constants ==========

class TicketStatus(str):
    """Ticket lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class TicketPriority(str):
    """Ticket priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StaffRole(str):
    """Staff roles recognised by the static permission map."""
    ADMIN = "admin"
    MANAGER = "manager"
    SUPPORT = "support"
    TECHNICIAN = "technician"


class Permission(str):
    """Permissions granted per staff role."""
    DELETE_RECORDS = "delete_records"
    MANAGE_SETTINGS = "manage_settings"
    MANAGE_NETWORK = "manage_network"


# ========== Lists for validation ==========

VALID_STATUSES = [
    TicketStatus.OPEN, TicketStatus.IN_PROGRESS, TicketStatus.CLOSED
]
VALID_PRIORITIES = [
    TicketPriority.LOW, TicketPriority.MEDIUM, TicketPriority.HIGH
]
