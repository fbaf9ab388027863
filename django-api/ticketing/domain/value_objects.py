"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Self
from uuid import UUID


@dataclass(frozen=True)
class EntityId:
    """UUID-backed identifier. Subclasses name the entity they identify."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(str(value)))

    def __str__(self) -> str:
        return str(self.value)


class EventId(EntityId):
    """Unique identifier for an Event."""


class TicketTierId(EntityId):
    """Unique identifier for a TicketTier."""


class BookingId(EntityId):
    """Unique identifier for a Booking."""


class PayoutId(EntityId):
    """Unique identifier for a Payout."""


class CagnotteId(EntityId):
    """Unique identifier for a Cagnotte."""


class ContributionId(EntityId):
    """Unique identifier for a CagnotteContribution."""


class AgentId(EntityId):
    """Unique identifier for an Agent."""


@dataclass(frozen=True)
class Money:
    """Whole units of local currency (XOF has no minor unit)."""

    amount: int

    def __post_init__(self) -> None:
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    def __add__(self, other: "Money") -> "Money":
        return Money(self.amount + other.amount)

    def times(self, factor: int) -> "Money":
        return Money(self.amount * factor)

    def __str__(self) -> str:
        return f"{self.amount} XOF"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing stock."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


class PromoType(StrEnum):
    NONE = "none"
    PERCENTAGE = "percentage"
    FIXED_PRICE = "fixed_price"


@dataclass(frozen=True)
class Promotion:
    """Tagged promotion attached to a ticket tier.

    A promotion with an unlock code only applies when the buyer presents
    that code; one without a code applies to every buyer.
    """

    type: PromoType = PromoType.NONE
    value: int = 0
    code: str | None = None

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Promotion value cannot be negative")
        if self.type is PromoType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage promotion cannot exceed 100")

    def applies_to(self, code: str | None) -> bool:
        if self.type is PromoType.NONE:
            return False
        if not self.code:
            return True
        return bool(code) and code.strip().casefold() == self.code.strip().casefold()

    def unit_price(self, base: Money, code: str | None = None) -> Money:
        """Return the price a buyer presenting ``code`` pays for one unit."""
        if not self.applies_to(code):
            return base
        if self.type is PromoType.PERCENTAGE:
            discount = base.amount * self.value // 100
            return Money(max(0, base.amount - discount))
        return Money(self.value)


NO_PROMOTION = Promotion()
