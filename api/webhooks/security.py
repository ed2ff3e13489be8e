"""
Webhook signature helpers.

Clerk signs deliveries with Svix. A signed request carries three headers
(`svix-id`, `svix-timestamp`, `svix-signature`); checking them against the
endpoint secret (`whsec_<base64>`) is delegated to the `svix` SDK, which also
enforces its five-minute timestamp window.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Mapping

from svix.webhooks import Webhook
from svix.webhooks import WebhookVerificationError as SvixVerificationError

SECRET_PREFIX = "whsec_"

_HEADER_NAMES = {
    "id": ("svix-id", "webhook-id"),
    "timestamp": ("svix-timestamp", "webhook-timestamp"),
    "signature": ("svix-signature", "webhook-signature"),
}


class WebhookVerificationError(RuntimeError):
    pass


class WebhookConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class SignatureHeaders:
    msg_id: str
    timestamp: str
    signature: str

    def as_svix_headers(self) -> dict[str, str]:
        return {
            "svix-id": self.msg_id,
            "svix-timestamp": self.timestamp,
            "svix-signature": self.signature,
        }


def extract_headers(headers: Mapping[str, str]) -> SignatureHeaders | None:
    """
    Pick the three signature headers out of a request's headers.

    Returns None if any of them is missing or blank.
    """
    lowered = {str(k).lower(): v for k, v in headers.items()}
    values: dict[str, str] = {}
    for key, names in _HEADER_NAMES.items():
        value = next((lowered[name] for name in names if (lowered.get(name) or "").strip()), None)
        if value is None:
            return None
        values[key] = value.strip()
    return SignatureHeaders(
        msg_id=values["id"],
        timestamp=values["timestamp"],
        signature=values["signature"],
    )


def build_webhook(secret: str | None) -> Webhook:
    raw = (secret or "").strip()
    if not raw.removeprefix(SECRET_PREFIX):
        raise WebhookConfigError("Webhook secret is not configured.")
    try:
        return Webhook(raw)
    except (ValueError, RuntimeError) as exc:
        raise WebhookConfigError("Webhook secret is not valid base64.") from exc


def verify_signature(secret: str | None, sig_headers: SignatureHeaders, body: bytes | str) -> None:
    """
    Raise `WebhookVerificationError` unless the body is signed with `secret`.

    A bad secret raises `WebhookConfigError` before anything is compared.
    """
    webhook = build_webhook(secret)
    try:
        webhook.verify(body, sig_headers.as_svix_headers())
    except json.JSONDecodeError:
        # The SDK parses the body only after a signature matched.
        return None
    except SvixVerificationError as exc:
        raise WebhookVerificationError(str(exc)) from exc
    except ValueError as exc:
        # Non UTF-8 body or a malformed signature entry.
        raise WebhookVerificationError("Malformed signed request.") from exc
