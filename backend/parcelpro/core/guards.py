"""
Security guards for role-based and ownership-based access control.

All authorization decisions go through AccessPolicy; route handlers only
declare which check they need.
"""

from typing import Optional
from fastapi import Depends
from backend.parcelpro.core.dependencies import get_current_identity
from backend.parcelpro.core.exceptions import InsufficientPermissionsError
from backend.parcelpro.db.store import EntityStore, get_store
from backend.parcelpro.models.enums import UserRole
from backend.parcelpro.models.user import User


class AccessPolicy:
    """
    Role and ownership checks against the stored User record.

    Usage:
        policy = AccessPolicy(store)
        admin = await policy.require_role(identity, UserRole.ADMIN)
    """

    def __init__(self, store: EntityStore):
        self.store = store

    async def load_user(self, identity: dict) -> Optional[User]:
        return await self.store.find_one(User, User.email == identity.get("email"))

    async def require_role(self, identity: dict, *roles: UserRole) -> User:
        """
        Load the caller's User and require one of ``roles``.

        A caller with no User record is denied the same way as a caller
        holding the wrong role.

        Raises:
            InsufficientPermissionsError (403)
        """
        user = await self.load_user(identity)

        if user is None:
            raise InsufficientPermissionsError("Forbidden access: unknown user")

        if user.role not in roles:
            raise InsufficientPermissionsError(
                f"Forbidden access. Required role: {', '.join(r.value for r in roles)}"
            )

        return user

    @staticmethod
    def require_self(identity: dict, target_email: Optional[str]) -> None:
        """
        Require the caller to be the owner of ``target_email``'s data.

        Raises:
            InsufficientPermissionsError (403)
        """
        if not target_email or identity.get("email", "").lower() != target_email.lower():
            raise InsufficientPermissionsError("Forbidden access: you can only access your own data")

    @staticmethod
    def require_same_user(user: User, target_id: Optional[str]) -> None:
        """Require ``target_id`` to be the caller's own user ID."""
        if user.id != target_id:
            raise InsufficientPermissionsError("Forbidden access: you can only access your own records")


async def get_access_policy(store: EntityStore = Depends(get_store)) -> AccessPolicy:
    return AccessPolicy(store)


def require_role(*roles: UserRole):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/users/admin")
        async def list_users(admin: User = Depends(require_role(UserRole.ADMIN))):
            ...

    Returns:
        FastAPI dependency resolving to the caller's User record
    """
    async def role_checker(
        identity: dict = Depends(get_current_identity),
        policy: AccessPolicy = Depends(get_access_policy)
    ) -> User:
        return await policy.require_role(identity, *roles)

    return role_checker


require_admin = require_role(UserRole.ADMIN)
require_delivery_person = require_role(UserRole.DELIVERY_PERSON)
