"""
User persistence helpers.

This module is the user store handed to the webhook synchronizer and the
user routes. All operations are keyed on `users.id` (the identity provider's
user id). A missing row is reported as `None`; failures raise `StoreError`.
"""

from __future__ import annotations

from typing import Any

import asyncpg

try:
    from core import db
except ModuleNotFoundError:
    from api.core import db


USER_COLUMNS = ("id", "phone_number", "email", "username", "display_name", "role", "created_at")

# `id`, `role` and `created_at` are never written through update_user.
UPDATABLE_COLUMNS = frozenset({"phone_number", "email", "username", "display_name"})

_SELECT_COLUMNS = ", ".join(USER_COLUMNS)


class StoreError(RuntimeError):
    pass


class DuplicateUserError(StoreError):
    pass


async def get_user(user_id: str) -> dict | None:
    try:
        return await db.fetch_one(
            f"""
            SELECT {_SELECT_COLUMNS}
            FROM users
            WHERE id = $1
            """,
            user_id,
        )
    except (asyncpg.PostgresError, OSError) as exc:
        raise StoreError(f"Failed to fetch user {user_id}.") from exc


async def insert_user(record: dict[str, Any]) -> dict:
    try:
        row = await db.fetch_one(
            f"""
            INSERT INTO users (id, phone_number, email, username, role, created_at)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING {_SELECT_COLUMNS}
            """,
            record["id"],
            record.get("phone_number"),
            record.get("email"),
            record.get("username"),
            record.get("role", "user"),
            record["created_at"],
        )
    except asyncpg.UniqueViolationError as exc:
        raise DuplicateUserError(f"User {record['id']} already exists.") from exc
    except (asyncpg.PostgresError, OSError) as exc:
        raise StoreError(f"Failed to insert user {record['id']}.") from exc
    if row is None:
        raise StoreError(f"Failed to insert user {record['id']}.")
    return row


async def update_user(user_id: str, fields: dict[str, Any]) -> dict | None:
    """
    Apply a partial update and return the updated row (or None if absent).
    """
    unknown = set(fields) - UPDATABLE_COLUMNS
    if unknown:
        raise ValueError(f"Columns are not updatable: {', '.join(sorted(unknown))}")
    if not fields:
        return await get_user(user_id)

    columns = sorted(fields)
    # Column names come from the whitelist above, values are bound parameters.
    assignments = ", ".join(f"{column} = ${index}" for index, column in enumerate(columns, start=2))
    try:
        return await db.fetch_one(
            f"""
            UPDATE users
            SET {assignments}
            WHERE id = $1
            RETURNING {_SELECT_COLUMNS}
            """,
            user_id,
            *(fields[column] for column in columns),
        )
    except (asyncpg.PostgresError, OSError) as exc:
        raise StoreError(f"Failed to update user {user_id}.") from exc
