"""
User business logic for the REST routes.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from . import schemas

logger = logging.getLogger(__name__)


def to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=str(user_row["id"]),
        phone_number=user_row.get("phone_number"),
        email=user_row.get("email"),
        username=user_row.get("username"),
        display_name=user_row.get("display_name"),
        role=schemas.Role(user_row.get("role") or schemas.Role.USER.value),
        created_at=user_row["created_at"],
    )


async def get_user(store: Any, user_id: str) -> schemas.UserResponse:
    try:
        user_row = await store.get_user(user_id)
    except Exception as exc:
        logger.exception("user_fetch_failed user_id=%s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user",
        ) from exc

    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with ID {user_id} not found",
        )
    return to_user_response(user_row)


async def update_user(
    store: Any,
    user_id: str,
    payload: schemas.UserUpdateRequest,
) -> schemas.UserResponse:
    # TODO: restrict to the user themself (or an admin) once request authentication lands.
    changes = payload.changes()
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No update data provided",
        )

    try:
        user_row = await store.update_user(user_id, changes)
    except Exception as exc:
        logger.exception("user_update_failed user_id=%s", user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update user",
        ) from exc

    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with ID {user_id} not found or update failed",
        )
    logger.info("user_updated user_id=%s fields=%s", user_id, ",".join(sorted(changes)))
    return to_user_response(user_row)
