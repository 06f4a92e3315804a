"""
Security guards for role-based access control.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from backend.app.models.enums import UserRole
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import InsufficientPermissionsError


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.delete("/entries/{entry_id}")
        async def delete_entry(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role_str = current_user.get("role")

        if not user_role_str:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Role information missing from token"
            )

        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )

        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


# Staff who may write to the ledger
require_staff = require_role([UserRole.ADMIN, UserRole.OPERATOR])
require_admin = require_role([UserRole.ADMIN])


def enforce_payment_edit_permissions(current_user: dict, fields: set) -> None:
    """
    Operators may only correct a payment's mode and proof file.
    Amount and date corrections are admin-only.
    """
    if current_user.get("role") == UserRole.ADMIN.value:
        return

    restricted = sorted(fields - {"mode", "file_url"})
    if restricted:
        raise InsufficientPermissionsError(
            "Operators can only change payment mode and proof",
            details={"fields": restricted}
        )
