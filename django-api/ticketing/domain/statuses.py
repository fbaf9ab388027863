"""Status enumerations and the transition tables that govern them."""

from enum import StrEnum


class Role(StrEnum):
    CUSTOMER = "customer"
    ORGANIZER = "organizer"
    ADMIN = "admin"
    AGENT = "agent"


class BookingStatus(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


# Settled bookings count toward revenue, wallet balance and check-in validity.
SETTLED_BOOKING_STATUSES = frozenset({BookingStatus.PAID, BookingStatus.CONFIRMED})


class SalesChannel(StrEnum):
    CHECKOUT = "checkout"
    POINT_OF_SALE = "pos"
    FREE = "free"


class PaymentMethod(StrEnum):
    CASH = "cash"
    CARD = "card"


class PayoutMethod(StrEnum):
    WAVE = "wave"
    ORANGE_MONEY = "orange_money"
    BANK = "bank"

    @classmethod
    def parse(cls, raw: str) -> "PayoutMethod":
        value = (raw or "").strip().lower()
        if value == "om":
            return cls.ORANGE_MONEY
        return cls(value)


class PayoutStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    PROCESSING = "processing"
    PAID = "paid"
    REJECTED = "rejected"


# Payouts in these states are deducted from the organizer's balance.
COMMITTED_PAYOUT_STATUSES = frozenset(
    {
        PayoutStatus.PENDING,
        PayoutStatus.APPROVED,
        PayoutStatus.PROCESSING,
        PayoutStatus.PAID,
    }
)

PAYOUT_TRANSITIONS: dict[PayoutStatus, frozenset[PayoutStatus]] = {
    PayoutStatus.PENDING: frozenset(
        {PayoutStatus.APPROVED, PayoutStatus.PROCESSING, PayoutStatus.PAID, PayoutStatus.REJECTED}
    ),
    PayoutStatus.APPROVED: frozenset(
        {PayoutStatus.PROCESSING, PayoutStatus.PAID, PayoutStatus.REJECTED}
    ),
    PayoutStatus.PROCESSING: frozenset({PayoutStatus.PAID, PayoutStatus.REJECTED}),
    PayoutStatus.PAID: frozenset(),
    PayoutStatus.REJECTED: frozenset(),
}


class CagnotteStatus(StrEnum):
    PENDING_VALIDATION = "pending_validation"
    ONLINE = "online"
    REJECTED = "rejected"
    PENDING_DOCUMENTS = "pending_documents"
    PENDING_PAYOUT = "pending_payout"
    COMPLETED = "completed"


CAGNOTTE_TRANSITIONS: dict[CagnotteStatus, frozenset[CagnotteStatus]] = {
    CagnotteStatus.PENDING_VALIDATION: frozenset(
        {CagnotteStatus.ONLINE, CagnotteStatus.REJECTED, CagnotteStatus.PENDING_DOCUMENTS}
    ),
    CagnotteStatus.PENDING_DOCUMENTS: frozenset(
        {CagnotteStatus.PENDING_VALIDATION, CagnotteStatus.ONLINE, CagnotteStatus.REJECTED}
    ),
    CagnotteStatus.ONLINE: frozenset(
        {CagnotteStatus.REJECTED, CagnotteStatus.PENDING_DOCUMENTS, CagnotteStatus.PENDING_PAYOUT}
    ),
    CagnotteStatus.PENDING_PAYOUT: frozenset({CagnotteStatus.ONLINE, CagnotteStatus.COMPLETED}),
    CagnotteStatus.REJECTED: frozenset({CagnotteStatus.PENDING_VALIDATION}),
    CagnotteStatus.COMPLETED: frozenset(),
}


class ContributionStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    PAID_OUT = "paid_out"


class AgentStatus(StrEnum):
    ACTIVE = "active"
    BLOCKED = "blocked"
