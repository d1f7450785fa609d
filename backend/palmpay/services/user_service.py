"""
PalmPay Backend — User Service
================================

What:  Account holders and their payment cards, including user deletion.
Who:   Called by routes/users.py.

Deletion (manual cascade):
    No ON DELETE CASCADE exists on the user-owned tables, so a user is
    removed by deleting its dependents first, in USER_DEPENDENTS order,
    then the users row. All statements run in the request's transaction:
    either everything is deleted or, on any failure, nothing is.
"""

import logging
from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from palmpay.exceptions import DatabaseError, NotFoundError, PalmPayError
from palmpay.models.user import AuthenticationLog, Card, PalmTemplate, User
from palmpay.schemas.user import (
    CardCreate,
    CardResponse,
    UserCreate,
    UserDetail,
    UserSummary,
)

logger = logging.getLogger(__name__)

# Deleted in this order before the users row itself
USER_DEPENDENTS = (Card, PalmTemplate, AuthenticationLog)


class UserService:

    async def list_users(self, db: AsyncSession) -> List[UserSummary]:
        try:
            result = await db.execute(select(User).order_by(User.created_at.desc()))
            return [UserSummary.model_validate(u) for u in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching users: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch users")

    async def create_user(self, db: AsyncSession, data: UserCreate) -> UserSummary:
        try:
            user = User(display_name=data.display_name, email=data.email)
            db.add(user)
            await db.flush()
            logger.info("User created: %s", user.id)
            return UserSummary.model_validate(user)
        except Exception as e:
            logger.error("Error creating user: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create user")

    async def get_user(self, db: AsyncSession, user_id: str) -> UserDetail:
        """
        One user with cards and palm templates.

        Raises:
            NotFoundError: unknown user id (→ 404)
        """
        try:
            result = await db.execute(
                select(User)
                .where(User.id == user_id)
                .options(selectinload(User.cards), selectinload(User.palm_templates))
            )
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFoundError(message="User not found", resource="user", resource_id=user_id)
            return UserDetail.model_validate(user)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error fetching user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch user")

    async def find_by_display_name(self, db: AsyncSession, display_name: str) -> UserSummary:
        """
        Case-insensitive exact match on display_name; first hit wins.

        Raises:
            NotFoundError: no user has this name (→ 404)
        """
        try:
            result = await db.execute(
                select(User)
                .where(func.lower(User.display_name) == display_name.lower())
                .order_by(User.created_at.asc())
                .limit(1)
            )
            user = result.scalar_one_or_none()
            if user is None:
                raise NotFoundError(message="User not found", resource="user")
            return UserSummary.model_validate(user)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error searching users by name: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to search users")

    async def ensure_user_exists(self, db: AsyncSession, user_id: str) -> User:
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(message="User not found", resource="user", resource_id=user_id)
        return user

    async def list_cards(self, db: AsyncSession, user_id: str) -> List[CardResponse]:
        try:
            result = await db.execute(
                select(Card).where(Card.user_id == user_id).order_by(Card.created_at.asc())
            )
            return [CardResponse.model_validate(c) for c in result.scalars().all()]
        except Exception as e:
            logger.error("Error fetching cards for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch cards")

    async def add_card(self, db: AsyncSession, user_id: str, data: CardCreate) -> CardResponse:
        try:
            await self.ensure_user_exists(db, user_id)
            card = Card(user_id=user_id, **data.model_dump())
            db.add(card)
            await db.flush()
            logger.info("Card ending %s added for user %s", card.last4, user_id)
            return CardResponse.model_validate(card)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error adding card for %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to add card")

    async def delete_user(self, db: AsyncSession, user_id: str) -> None:
        """
        Delete a user and everything it owns.

        Raises:
            NotFoundError: unknown user id (→ 404); nothing is deleted
        """
        try:
            await self.ensure_user_exists(db, user_id)

            for model in USER_DEPENDENTS:
                result = await db.execute(delete(model).where(model.user_id == user_id))
                logger.debug("Deleted %d %s rows for user %s", result.rowcount, model.__tablename__, user_id)

            await db.execute(delete(User).where(User.id == user_id))
            await db.flush()
            logger.info("User %s deleted", user_id)
        except PalmPayError:
            raise
        except Exception as e:
            logger.error("Error deleting user %s: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete user")


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
