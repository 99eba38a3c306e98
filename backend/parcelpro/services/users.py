"""
User Service.

Signup, role management and delivery person profile completion.
"""

import logging
from typing import Optional, Tuple

from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from backend.parcelpro.core.exceptions import InsufficientPermissionsError, ResourceNotFoundError
from backend.parcelpro.db.store import EntityStore, get_store
from backend.parcelpro.models.enums import UserRole
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.user import UserCreate

logger = logging.getLogger("parcelpro.users")


class UserService:

    def __init__(self, store: EntityStore):
        self.store = store

    async def signup(self, data: UserCreate) -> Tuple[Optional[User], bool]:
        """
        Register a user, idempotent on email.

        Returns:
            (user, created). When the email is already registered the
            existing record is returned with ``created=False``.

        Raises:
            InsufficientPermissionsError if the payload asks for the Admin role
        """
        if data.role == UserRole.ADMIN:
            raise InsufficientPermissionsError("Admin users cannot be registered via API")

        existing = await self.store.find_one(User, User.email == data.email)
        if existing is not None:
            return existing, False

        user = User(
            email=data.email,
            name=data.name,
            role=data.role,
            image=data.image,
            phone=data.phone,
            verified=False,
            delivered_count=0,
        )
        try:
            await self.store.insert(user)
        except IntegrityError:
            # A concurrent signup for the same email committed first.
            await self.store.rollback()
            existing = await self.store.find_one(User, User.email == data.email)
            if existing is None:
                raise
            return existing, False

        logger.info("User %s signed up as %s", user.email, user.role.value)
        return user, True

    async def get_by_email(self, email: str) -> User:
        user = await self.store.find_one(User, User.email == email)
        if user is None:
            raise ResourceNotFoundError("User", email)
        return user

    async def change_role(self, admin: User, user_id, role: UserRole) -> User:
        user = await self.store.get_by_id(User, user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)

        if user.role != role:
            previous = user.role
            await self.store.update(User, User.id == user.id, values={"role": role})
            await self.store.refresh(user)
            logger.info(
                "Admin %s changed role of %s from %s to %s",
                admin.email, user.email, previous.value, role.value
            )
        return user

    async def complete_delivery_profile(self, delivery_man: User, phone: str) -> User:
        """Store the phone number and mark the delivery person verified."""
        await self.store.update(
            User,
            User.id == delivery_man.id,
            values={"phone": phone, "verified": True},
        )
        await self.store.refresh(delivery_man)
        return delivery_man


async def get_user_service(store: EntityStore = Depends(get_store)) -> UserService:
    return UserService(store)
