"""
Webhook synchronizer: identity-provider events -> `users` rows.

Flow per delivery:
1. signature headers present?       no  -> 400
2. endpoint secret configured?      no  -> 500
3. signature valid?                 no  -> 400
4. decode event, apply at most one store write

`user.deleted` never removes the local row; the row is kept so anything
referencing the user stays valid.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from users.repository import DuplicateUserError

from . import events, security

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncOutcome(str, Enum):
    PROCESSED = "processed"
    IGNORED = "ignored"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"


@dataclass(frozen=True)
class SyncResult:
    outcome: SyncOutcome
    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def processed(cls) -> "SyncResult":
        return cls(SyncOutcome.PROCESSED, 200, {"success": True})

    @classmethod
    def ignored(cls) -> "SyncResult":
        return cls(SyncOutcome.IGNORED, 200, {"received": True})

    @classmethod
    def client_error(cls, message: str) -> "SyncResult":
        return cls(SyncOutcome.CLIENT_ERROR, 400, {"error": message})

    @classmethod
    def server_error(cls, message: str) -> "SyncResult":
        return cls(SyncOutcome.SERVER_ERROR, 500, {"error": message})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WebhookSynchronizer:
    """
    Verify and apply one webhook delivery against a user store.

    `store` needs `insert_user(record)` and `update_user(user_id, fields)`
    with the semantics of `users.repository`.
    """

    def __init__(
        self,
        store: Any,
        secret: str | None,
        *,
        store_timeout_s: float = 10.0,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._store = store
        self._secret = secret
        self._store_timeout_s = store_timeout_s
        self._clock = clock

    async def handle(self, headers: Mapping[str, str], body: bytes) -> SyncResult:
        sig_headers = security.extract_headers(headers)
        if sig_headers is None:
            logger.warning("webhook_rejected reason=missing_headers")
            return SyncResult.client_error("Missing svix headers")

        try:
            security.verify_signature(self._secret, sig_headers, body)
        except security.WebhookConfigError as exc:
            logger.error("webhook_misconfigured msg_id=%s error=%s", sig_headers.msg_id, exc)
            return SyncResult.server_error("Webhook secret is not configured")
        except security.WebhookVerificationError as exc:
            logger.warning("webhook_rejected msg_id=%s reason=%s", sig_headers.msg_id, exc)
            return SyncResult.client_error("Error verifying webhook")

        try:
            event = events.decode_event(body)
        except events.EventDecodeError as exc:
            logger.warning("webhook_rejected msg_id=%s reason=%s", sig_headers.msg_id, exc)
            return SyncResult.client_error("Invalid webhook payload")

        logger.info("webhook_event_received type=%s user_id=%s", event.type, event.user_id)
        result = await self.apply(event)
        logger.info(
            "webhook_event type=%s user_id=%s outcome=%s",
            event.type,
            event.user_id,
            result.outcome.value,
        )
        return result

    async def apply(self, event: events.WebhookEvent) -> SyncResult:
        """
        Apply an already verified event to the store.
        """
        try:
            if isinstance(event, events.UserCreated):
                return await self._apply_created(event)
            if isinstance(event, events.UserUpdated):
                return await self._apply_updated(event)
        except Exception:
            # Details stay in the log; callers only see a generic message.
            logger.exception("webhook_store_failed type=%s user_id=%s", event.type, event.user_id)
            return SyncResult.server_error("Internal server error")

        # user.deleted and unknown types: acknowledged, nothing written.
        return SyncResult.ignored()

    async def _apply_created(self, event: events.UserCreated) -> SyncResult:
        record = {
            "id": event.user_id,
            **event.fields.as_dict(),
            "role": "user",
            "created_at": self._clock(),
        }
        try:
            await self._call(self._store.insert_user(record))
        except DuplicateUserError:
            # Redelivered user.created: converge onto the existing row.
            logger.info("webhook_duplicate_create user_id=%s converging=update", event.user_id)
            await self._call(self._store.update_user(event.user_id, event.fields.as_dict()))
        return SyncResult.processed()

    async def _apply_updated(self, event: events.UserUpdated) -> SyncResult:
        row = await self._call(self._store.update_user(event.user_id, event.fields.as_dict()))
        if row is None:
            logger.warning("webhook_update_missing_user user_id=%s", event.user_id)
            return SyncResult.ignored()
        return SyncResult.processed()

    async def _call(self, operation: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self._store_timeout_s)
        except asyncio.TimeoutError as exc:
            raise TimeoutError(f"Store operation timed out after {self._store_timeout_s}s") from exc

