"""
Security guards for role-based and ownership-based access control.

Provides dependencies for protecting endpoints.
"""

from fastapi import Depends
from pixledger.app.core.dependencies import get_current_user
from pixledger.app.core.exceptions import InsufficientPermissionsError
from pixledger.app.models.enums import AccountType


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """
    Dependency for admin-only endpoints.

    Usage:
        @router.get("/accounts")
        async def list_accounts(admin: dict = Depends(require_admin)):
            ...

    Returns:
        Token payload if admin, raises 403 otherwise
    """
    if current_user.get("role") != AccountType.ADMIN.value:
        raise InsufficientPermissionsError("Admin access required")

    return current_user


def verify_ownership(resource_owner_id: int, current_user: dict) -> bool:
    """
    Verify that the current account owns the resource.

    Admins can access everything; everyone else only their own account's
    resources.
    """
    if current_user.get("role") == AccountType.ADMIN.value:
        return True
    return current_user.get("account_id") == resource_owner_id


class OwnershipGuard:
    """
    Class-based ownership guard.

    Usage:
        ownership_guard = OwnershipGuard()

        @router.get("/accounts/{account_id}")
        async def get_account(account_id: int, current_user: dict = Depends(get_current_user)):
            ownership_guard.enforce(account_id, current_user, "account")
            ...
    """

    def enforce(
        self,
        resource_owner_id: int,
        current_user: dict,
        resource_name: str = "resource"
    ):
        """
        Enforce ownership validation.

        Raises:
            InsufficientPermissionsError: If ownership check fails
        """
        if not verify_ownership(resource_owner_id, current_user):
            raise InsufficientPermissionsError(
                f"Access denied. You do not have permission to access this {resource_name}."
            )


ownership_guard = OwnershipGuard()
