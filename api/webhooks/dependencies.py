"""
Builds the webhook synchronizer for a request.
"""

from __future__ import annotations

from fastapi import Depends

from core import settings
from users.dependencies import get_user_store

from .service import WebhookSynchronizer


def get_synchronizer(store=Depends(get_user_store)) -> WebhookSynchronizer:
    return WebhookSynchronizer(
        store,
        settings.webhook_secret(),
        store_timeout_s=settings.store_timeout_seconds(),
    )
