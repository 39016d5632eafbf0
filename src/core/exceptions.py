"""
Core Exceptions
================

Custom exceptions for the application following clean architecture principles.

These exceptions define domain-specific errors that can be caught and handled
appropriately at the application boundaries.
"""

from typing import Optional


class ApplicationException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DomainException(ApplicationException):
    """Base exception for domain logic violations."""


class RepositoryException(ApplicationException):
    """Base exception for repository/data access errors."""


class ValidationException(ApplicationException):
    """Exception for validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.field = field
        if field and details is None:
            details = {"field": field}
        super().__init__(message, details)


class ResourceNotFoundException(ApplicationException):
    """Exception when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict] = None
    ):
        self.resource_type = resource_type
        self.resource_id = resource_id
        message = f"{resource_type}"
        if resource_id:
            message += f" with id '{resource_id}'"
        message += " not found"
        super().__init__(message, details)


class PermissionDeniedException(ApplicationException):
    """Exception when the caller's role lacks a required permission."""

    def __init__(self, permission: str, role: str):
        self.permission = permission
        self.role = role
        super().__init__(
            f"Role '{role}' does not have permission '{permission}'",
            {"permission": permission, "role": role}
        )


class ConfigurationException(ApplicationException):
    """Exception for configuration errors."""


class TicketStateException(DomainException):
    """Exception raised when a ticket is not in a valid state for an action."""

    def __init__(
        self,
        ticket_id: str,
        action: str,
        reason: str,
        details: Optional[dict] = None
    ):
        self.ticket_id = ticket_id
        self.action = action
        self.reason = reason
        super().__init__(
            f"Cannot {action} ticket {ticket_id}: {reason}",
            details or {"ticket_id": ticket_id, "action": action}
        )
