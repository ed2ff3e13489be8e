"""
FastAPI router for identity-provider webhooks.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from .dependencies import get_synchronizer
from .service import WebhookSynchronizer

router = APIRouter(prefix="/api/webhooks")


@router.post("/clerk")
async def clerk_webhook(
    request: Request,
    synchronizer: WebhookSynchronizer = Depends(get_synchronizer),
) -> JSONResponse:
    """
    Receive a signed Clerk user lifecycle event.

    The raw body is verified before it is parsed.
    """
    body = await request.body()
    result = await synchronizer.handle(request.headers, body)
    return JSONResponse(status_code=result.status_code, content=result.body)
