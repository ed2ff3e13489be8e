"""
Identity-provider webhook events.

The JSON body is decoded once, here, into one of four event types:

- `UserCreated` / `UserUpdated`: carry a `UserFields` snapshot
- `UserDeleted`: carries only the user id
- `UnknownEvent`: any other `type`, kept for logging

Payload shape for user events:

    {"type": "user.created",
     "data": {"id": "user_...",
              "phone_numbers": [{"phone_number": "+354..."}],
              "email_addresses": [{"email_address": "a@b.is"}],
              "username": "bob"}}
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

USER_CREATED = "user.created"
USER_UPDATED = "user.updated"
USER_DELETED = "user.deleted"


class EventDecodeError(RuntimeError):
    pass


class _PhoneNumber(BaseModel):
    model_config = ConfigDict(extra="ignore")

    phone_number: str | None = None


class _EmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email_address: str | None = None


class _UserData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    phone_numbers: list[_PhoneNumber] | None = None
    email_addresses: list[_EmailAddress] | None = None
    username: str | None = None


class _DeletedData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None


def first_or_none(items: list[Any] | None, field: str) -> str | None:
    """
    Return `field` of the first element of `items`, or None.

    None is returned when the list is absent or empty, when the first
    element lacks the field, or when the value is an empty string. An empty
    value is never stored as "".
    """
    if not items:
        return None
    first = items[0]
    value = first.get(field) if isinstance(first, dict) else getattr(first, field, None)
    if not isinstance(value, str) or not value.strip():
        return None
    return value


@dataclass(frozen=True)
class UserFields:
    phone_number: str | None
    email: str | None
    username: str | None

    def as_dict(self) -> dict[str, str | None]:
        return asdict(self)


@dataclass(frozen=True)
class UserCreated:
    user_id: str
    fields: UserFields
    type: str = USER_CREATED


@dataclass(frozen=True)
class UserUpdated:
    user_id: str
    fields: UserFields
    type: str = USER_UPDATED


@dataclass(frozen=True)
class UserDeleted:
    user_id: str | None
    type: str = USER_DELETED


@dataclass(frozen=True)
class UnknownEvent:
    type: str
    user_id: str | None = None


WebhookEvent = Union[UserCreated, UserUpdated, UserDeleted, UnknownEvent]


def _user_fields(data: _UserData) -> UserFields:
    return UserFields(
        phone_number=first_or_none(data.phone_numbers, "phone_number"),
        email=first_or_none(data.email_addresses, "email_address"),
        username=data.username or None,
    )


def _parse_user_data(raw: Any, event_type: str) -> _UserData:
    try:
        data = _UserData.model_validate(raw)
    except ValidationError as exc:
        raise EventDecodeError(f"Invalid {event_type} payload.") from exc
    if not data.id.strip():
        raise EventDecodeError(f"Invalid {event_type} payload: empty user id.")
    return data


def decode_event(body: bytes | str) -> WebhookEvent:
    """
    Decode a verified webhook body into an event.
    """
    try:
        payload = json.loads(body)
    except (TypeError, ValueError) as exc:
        raise EventDecodeError("Webhook body is not valid JSON.") from exc

    if not isinstance(payload, dict):
        raise EventDecodeError("Webhook body must be a JSON object.")
    event_type = payload.get("type")
    if not isinstance(event_type, str) or not event_type.strip():
        raise EventDecodeError("Webhook body has no event type.")

    raw_data = payload.get("data")
    if event_type in (USER_CREATED, USER_UPDATED):
        data = _parse_user_data(raw_data, event_type)
        if event_type == USER_CREATED:
            return UserCreated(user_id=data.id, fields=_user_fields(data))
        return UserUpdated(user_id=data.id, fields=_user_fields(data))

    if event_type == USER_DELETED:
        try:
            deleted = _DeletedData.model_validate(raw_data or {})
        except ValidationError as exc:
            raise EventDecodeError("Invalid user.deleted payload.") from exc
        return UserDeleted(user_id=deleted.id)

    user_id = raw_data.get("id") if isinstance(raw_data, dict) else None
    return UnknownEvent(type=event_type, user_id=user_id if isinstance(user_id, str) else None)
