"""Helpers shared by the ticketing services."""

from datetime import UTC, datetime
from typing import TypeVar

from ticketing.domain import Event, Principal
from ticketing.domain.errors import ForbiddenError, InvalidIdError, InvalidInputError, NotOwnerError
from ticketing.domain.statuses import Role
from ticketing.domain.value_objects import EntityId

IdT = TypeVar("IdT", bound=EntityId)


def utcnow() -> datetime:
    return datetime.now(UTC)


def parse_id(id_type: type[IdT], raw: str, kind: str) -> IdT:
    """Parse a raw identifier, raising InvalidIdError for anything but a UUID."""
    try:
        return id_type.from_string(raw)
    except (TypeError, ValueError, AttributeError):
        raise InvalidIdError(kind) from None


def require_role(principal: Principal | None, *roles: Role) -> Principal:
    if principal is None or principal.role not in roles:
        raise ForbiddenError()
    return principal


def ensure_event_manager(principal: Principal, event: Event) -> None:
    """Admins manage every event; organizers only the events they own."""
    if principal.is_admin:
        return
    if principal.role is not Role.ORGANIZER or not principal.owns(event.organizer_email):
        raise NotOwnerError()


def positive_int(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"{field} must be a positive integer")
    return value


def required_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"{field} is required")
    return text
