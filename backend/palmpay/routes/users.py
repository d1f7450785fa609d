"""
PalmPay Backend — User Route Handlers (v1)
============================================

Route Inventory:
    GET    /api/v1/users
    POST   /api/v1/users
    GET    /api/v1/users/search/by-name?displayName=
    GET    /api/v1/users/{user_id}
    DELETE /api/v1/users/{user_id}
    GET    /api/v1/users/{user_id}/cards
    POST   /api/v1/users/{user_id}/cards
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from palmpay.database import get_db_session
from palmpay.exceptions import ValidationError
from palmpay.schemas.common import ErrorResponse
from palmpay.schemas.user import (
    CardCreate,
    CardEnvelope,
    CardListResponse,
    DeleteUserResponse,
    UserCreate,
    UserEnvelope,
    UserSummary,
    UserSummaryEnvelope,
)
from palmpay.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

_NOT_FOUND = {404: {"description": "User not found", "model": ErrorResponse}}


@router.get("", response_model=List[UserSummary], summary="List users")
async def list_users(
    db: AsyncSession = Depends(get_db_session),
) -> List[UserSummary]:
    return await user_service.list_users(db)


@router.post("", response_model=UserSummaryEnvelope, summary="Create a user")
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> UserSummaryEnvelope:
    user = await user_service.create_user(db, body)
    return UserSummaryEnvelope(user=user)


# Declared before /{user_id} so "search" is never taken for an id
@router.get(
    "/search/by-name",
    response_model=UserSummaryEnvelope,
    responses={
        400: {"description": "displayName missing", "model": ErrorResponse},
        **_NOT_FOUND,
    },
    summary="Find a user by display name (case-insensitive, exact)",
)
async def search_by_name(
    display_name: Optional[str] = Query(default=None, alias="displayName"),
    db: AsyncSession = Depends(get_db_session),
) -> UserSummaryEnvelope:
    if not display_name:
        raise ValidationError(message="displayName query parameter is required", field="displayName")
    user = await user_service.find_by_display_name(db, display_name)
    return UserSummaryEnvelope(user=user)


@router.get(
    "/{user_id}",
    response_model=UserEnvelope,
    responses=_NOT_FOUND,
    summary="Fetch a user with cards and palm templates",
)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    user = await user_service.get_user(db, user_id)
    return UserEnvelope(user=user)


@router.delete(
    "/{user_id}",
    response_model=DeleteUserResponse,
    responses=_NOT_FOUND,
    summary="Delete a user with its cards, palm templates and auth logs",
)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DeleteUserResponse:
    await user_service.delete_user(db, user_id)
    return DeleteUserResponse(success=True, message="User deleted successfully")


@router.get(
    "/{user_id}/cards",
    response_model=CardListResponse,
    summary="List a user's cards",
)
async def list_cards(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> CardListResponse:
    cards = await user_service.list_cards(db, user_id)
    return CardListResponse(cards=cards)


@router.post(
    "/{user_id}/cards",
    response_model=CardEnvelope,
    responses=_NOT_FOUND,
    summary="Add a card to a user",
)
async def add_card(
    user_id: str,
    body: CardCreate,
    db: AsyncSession = Depends(get_db_session),
) -> CardEnvelope:
    card = await user_service.add_card(db, user_id, body)
    return CardEnvelope(card=card)
