"""
Static Permission Check
========================

Role-based permission map for staff actions. The caller's role arrives in
the `X-Staff-Role` header; there is no identity system behind it.
"""

from typing import Callable, Dict, FrozenSet, Optional

from fastapi import Header

from src.config import Permission, StaffRole
from src.core import PermissionDeniedException

ROLE_PERMISSIONS: Dict[str, FrozenSet[str]] = {
    StaffRole.ADMIN: frozenset({
        Permission.DELETE_RECORDS,
        Permission.MANAGE_SETTINGS,
        Permission.MANAGE_NETWORK,
    }),
    StaffRole.MANAGER: frozenset({
        Permission.DELETE_RECORDS,
        Permission.MANAGE_SETTINGS,
    }),
    StaffRole.TECHNICIAN: frozenset({Permission.MANAGE_NETWORK}),
    StaffRole.SUPPORT: frozenset(),
}


def has_permission(role: Optional[str], permission: str) -> bool:
    return permission in ROLE_PERMISSIONS.get((role or "").lower(), frozenset())


def require_permission(permission: str) -> Callable[..., str]:
    """
    Build a FastAPI dependency that rejects callers lacking `permission`.

    Usage:
        @router.delete("/{id}", dependencies=[Depends(require_permission(Permission.DELETE_RECORDS))])
    """

    async def dependency(
        x_staff_role: str = Header(default=StaffRole.SUPPORT, alias="X-Staff-Role"),
    ) -> str:
        if not has_permission(x_staff_role, permission):
            raise PermissionDeniedException(permission, x_staff_role)
        return x_staff_role

    return dependency
