"""
User API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserResponse(BaseModel):
    id: str
    phone_number: str | None = None
    email: str | None = None
    username: str | None = None
    display_name: str | None = None
    role: Role = Role.USER
    created_at: datetime


class UserUpdateRequest(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=100)

    def changes(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)
