"""Domain error codes for the ticketing module."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_ID = "INVALID_ID"

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TIER_NOT_FOUND = "TIER_NOT_FOUND"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    PAYOUT_NOT_FOUND = "PAYOUT_NOT_FOUND"
    CAGNOTTE_NOT_FOUND = "CAGNOTTE_NOT_FOUND"
    CONTRIBUTION_NOT_FOUND = "CONTRIBUTION_NOT_FOUND"
    AGENT_NOT_FOUND = "AGENT_NOT_FOUND"

    NOT_OWNER = "NOT_OWNER"
    FORBIDDEN = "FORBIDDEN"
    AGENT_BLOCKED = "AGENT_BLOCKED"

    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    RESTORE_CONFLICT = "RESTORE_CONFLICT"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CAGNOTTE_CLOSED = "CAGNOTTE_CLOSED"
    ALREADY_PAID_OUT = "ALREADY_PAID_OUT"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def details(self) -> dict[str, Any]:
        """Extra, user-safe fields exposed alongside the message."""
        return {}


class InvalidInputError(DomainError):
    """Raised when input is missing or malformed. No mutation is attempted."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.VALIDATION_ERROR, message=message)


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
        self.kind = kind


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class TierNotFoundError(DomainError):
    """Raised when a ticket tier is absent, or belongs to another event."""

    def __init__(self, tier_id: str) -> None:
        super().__init__(
            code=ErrorCode.TIER_NOT_FOUND,
            message="Ticket tier not found for this event",
        )
        self.tier_id = tier_id

    def details(self) -> dict[str, Any]:
        return {"tier_id": self.tier_id}


class BookingNotFoundError(DomainError):
    def __init__(self, booking_id: str) -> None:
        super().__init__(code=ErrorCode.BOOKING_NOT_FOUND, message="Booking not found")
        self.booking_id = booking_id


class PayoutNotFoundError(DomainError):
    def __init__(self, payout_id: str) -> None:
        super().__init__(code=ErrorCode.PAYOUT_NOT_FOUND, message="Payout not found")
        self.payout_id = payout_id


class CagnotteNotFoundError(DomainError):
    def __init__(self, cagnotte_id: str) -> None:
        super().__init__(code=ErrorCode.CAGNOTTE_NOT_FOUND, message="Cagnotte not found")
        self.cagnotte_id = cagnotte_id


class ContributionNotFoundError(DomainError):
    def __init__(self, contribution_id: str) -> None:
        super().__init__(
            code=ErrorCode.CONTRIBUTION_NOT_FOUND,
            message="Contribution not found",
        )
        self.contribution_id = contribution_id


class AgentNotFoundError(DomainError):
    def __init__(self, agent_id: str) -> None:
        super().__init__(code=ErrorCode.AGENT_NOT_FOUND, message="Agent not found")
        self.agent_id = agent_id


class NotOwnerError(DomainError):
    """Raised when the caller does not own the targeted resource."""

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.NOT_OWNER, message="Access denied")


class ForbiddenError(DomainError):
    """Raised when the caller's role does not allow the operation."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(code=ErrorCode.FORBIDDEN, message=message)


class AgentBlockedError(DomainError):
    def __init__(self) -> None:
        super().__init__(code=ErrorCode.AGENT_BLOCKED, message="Agent is blocked")


class InsufficientStockError(DomainError):
    """Raised under lock when a tier cannot cover the requested quantity."""

    def __init__(self, tier_id: str, tier_name: str, available: int, requested: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_STOCK,
            message=f"Insufficient stock for {tier_name}: {available} left, {requested} requested",
        )
        self.tier_id = tier_id
        self.tier_name = tier_name
        self.available = available
        self.requested = requested

    def details(self) -> dict[str, Any]:
        return {
            "tier_id": self.tier_id,
            "tier_name": self.tier_name,
            "available": self.available,
            "requested": self.requested,
        }


class RestoreConflictError(DomainError):
    """Raised when a cancelled booking's stock was resold before restoration."""

    def __init__(self, booking_id: str, available: int, required: int) -> None:
        super().__init__(
            code=ErrorCode.RESTORE_CONFLICT,
            message=(
                f"Insufficient stock to restore booking: only {available} "
                f"available, {required} required"
            ),
        )
        self.booking_id = booking_id
        self.available = available
        self.required = required

    def details(self) -> dict[str, Any]:
        return {"available": self.available, "required": self.required}


class InvalidTransitionError(DomainError):
    def __init__(self, entity: str, current: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot move {entity} from {current} to {target}",
        )
        self.current = current
        self.target = target

    def details(self) -> dict[str, Any]:
        return {"current": self.current, "target": self.target}


class CagnotteClosedError(DomainError):
    def __init__(self, status: str) -> None:
        super().__init__(
            code=ErrorCode.CAGNOTTE_CLOSED,
            message="This cagnotte is not accepting contributions",
        )
        self.status = status


class AlreadyPaidOutError(DomainError):
    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ALREADY_PAID_OUT,
            message="A payout has already been made for this cagnotte",
        )


class InsufficientBalanceError(DomainError):
    """Raised when a payout request exceeds the organizer's computed balance."""

    def __init__(self, available: int, requested: int) -> None:
        super().__init__(
            code=ErrorCode.INSUFFICIENT_BALANCE,
            message=f"Requested {requested} XOF exceeds available balance of {available} XOF",
        )
        self.available = available
        self.requested = requested

    def details(self) -> dict[str, Any]:
        return {"available": self.available, "requested": self.requested}
