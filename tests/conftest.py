from __future__ import annotations

import base64
import copy
import json
import sys
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from svix.webhooks import Webhook

API_ROOT = Path(__file__).resolve().parents[1] / "api"
if str(API_ROOT) not in sys.path:
    sys.path.insert(0, str(API_ROOT))

from users.dependencies import get_user_store
from users.repository import UPDATABLE_COLUMNS, DuplicateUserError, StoreError

WEBHOOK_SECRET = "whsec_" + base64.b64encode(b"kontaktar-test-signing-key").decode("ascii")


class InMemoryUserStore:
    """User store double that records every call."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_with: Exception | None = None

    @property
    def mutations(self) -> list[tuple[str, Any]]:
        return [call for call in self.calls if call[0] in {"insert_user", "update_user"}]

    async def get_user(self, user_id: str) -> dict | None:
        self.calls.append(("get_user", user_id))
        if self.fail_with is not None:
            raise self.fail_with
        row = self.rows.get(user_id)
        return copy.deepcopy(row) if row is not None else None

    async def insert_user(self, record: dict[str, Any]) -> dict:
        self.calls.append(("insert_user", copy.deepcopy(record)))
        if self.fail_with is not None:
            raise self.fail_with
        if record["id"] in self.rows:
            raise DuplicateUserError(f"User {record['id']} already exists.")
        row = {"display_name": None, **record}
        self.rows[record["id"]] = row
        return copy.deepcopy(row)

    async def update_user(self, user_id: str, fields: dict[str, Any]) -> dict | None:
        self.calls.append(("update_user", (user_id, dict(fields))))
        if self.fail_with is not None:
            raise self.fail_with
        if set(fields) - UPDATABLE_COLUMNS:
            raise ValueError("not updatable")
        row = self.rows.get(user_id)
        if row is None:
            return None
        row.update(fields)
        return copy.deepcopy(row)


def sign_headers(
    body: bytes,
    *,
    secret: str = WEBHOOK_SECRET,
    msg_id: str = "msg_2abc",
    timestamp: int | None = None,
) -> dict[str, str]:
    ts = int(time.time()) if timestamp is None else timestamp
    return {
        "svix-id": msg_id,
        "svix-timestamp": str(ts),
        "svix-signature": Webhook(secret).sign(
            msg_id=msg_id,
            timestamp=datetime.fromtimestamp(ts, tz=timezone.utc),
            data=body.decode("utf-8"),
        ),
    }


def event_body(event_type: str, data: dict[str, Any]) -> bytes:
    return json.dumps({"type": event_type, "object": "event", "data": data}).encode("utf-8")


@pytest.fixture()
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture()
def client(store: InMemoryUserStore, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CLERK_WEBHOOK_SECRET", WEBHOOK_SECRET)

    from main import app

    app.dependency_overrides[get_user_store] = lambda: store
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


__all__ = ["InMemoryUserStore", "StoreError", "WEBHOOK_SECRET", "event_body", "sign_headers"]
