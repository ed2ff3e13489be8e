"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from . import schemas, service
from .dependencies import get_user_store

router = APIRouter(prefix="/api/users")


@router.get("/me", response_model=schemas.UserResponse)
async def get_me() -> schemas.UserResponse:
    """
    Current caller's record. Request authentication is not wired yet.
    """
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required. Please provide a valid token.",
    )


@router.get("/{user_id}", response_model=schemas.UserResponse)
async def get_user(
    user_id: str,
    store=Depends(get_user_store),
) -> schemas.UserResponse:
    return await service.get_user(store, user_id)


@router.patch("/{user_id}", response_model=schemas.UserResponse)
async def update_user(
    user_id: str,
    payload: schemas.UserUpdateRequest,
    store=Depends(get_user_store),
) -> schemas.UserResponse:
    return await service.update_user(store, user_id, payload)


@router.get("/")
async def list_users() -> dict:
    """
    Admin-only listing; admin checks are not wired yet.
    """
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Admin access required",
    )
