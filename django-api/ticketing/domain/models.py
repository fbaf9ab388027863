"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in ticketing/models.py (persistence layer).
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from uuid import uuid4

from ticketing.domain.errors import InvalidTransitionError
from ticketing.domain.statuses import (
    CAGNOTTE_TRANSITIONS,
    PAYOUT_TRANSITIONS,
    SETTLED_BOOKING_STATUSES,
    AgentStatus,
    BookingStatus,
    CagnotteStatus,
    ContributionStatus,
    PaymentMethod,
    PayoutMethod,
    PayoutStatus,
    Role,
    SalesChannel,
)
from ticketing.domain.value_objects import (
    NO_PROMOTION,
    AgentId,
    BookingId,
    CagnotteId,
    Capacity,
    ContributionId,
    EventId,
    Money,
    PayoutId,
    Promotion,
    TicketTierId,
)

ANONYMOUS_CONTRIBUTOR = "Anonyme"

AGENT_CODE_PREFIX = "AGT-"
# Excludes 0, O, 1 and I.
AGENT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
AGENT_CODE_LENGTH = 4


@dataclass(frozen=True)
class Principal:
    """Verified caller identity as returned by session verification."""

    subject_id: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def owns(self, owner_email: str) -> bool:
        return self.email.casefold() == owner_email.casefold()


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    organizer_email: str
    name: str
    location: str
    starts_at: datetime | None
    created_at: datetime


@dataclass(frozen=True)
class TicketTier:
    """Domain representation of a purchasable tier and its stock counters."""

    id: TicketTierId
    event_id: EventId
    name: str
    price: Money
    quantity: Capacity
    available: Capacity
    promotion: Promotion = NO_PROMOTION

    def __post_init__(self) -> None:
        if self.available.value > self.quantity.value:
            raise ValueError("Available stock cannot exceed total quantity")

    @property
    def sold(self) -> int:
        return self.quantity.value - self.available.value

    def unit_price(self, promo_code: str | None = None) -> Money:
        return self.promotion.unit_price(self.price, promo_code)

    def with_available(self, available: int) -> "TicketTier":
        return replace(self, available=Capacity(available))


@dataclass(frozen=True)
class CartLine:
    """One requested line of a cart or point-of-sale order."""

    tier_id: str
    quantity: int


@dataclass(frozen=True)
class Buyer:
    name: str | None = None
    email: str | None = None
    phone: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Invite"


@dataclass(frozen=True)
class Booking:
    """Domain representation of one purchase/reservation record."""

    id: BookingId
    event_id: EventId
    ticket_tier_id: TicketTierId | None
    quantity: int
    total_amount: Money
    status: BookingStatus
    channel: SalesChannel
    buyer: Buyer = field(default_factory=Buyer)
    payment_method: PaymentMethod | None = None
    customer_subject: str | None = None
    previous_status: BookingStatus | None = None
    checked_in: bool = False
    checked_in_at: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def new(
        cls,
        *,
        event_id: EventId,
        tier_id: TicketTierId,
        quantity: int,
        unit_price: Money,
        status: BookingStatus,
        channel: SalesChannel,
        buyer: Buyer,
        payment_method: PaymentMethod | None = None,
        customer_subject: str | None = None,
    ) -> "Booking":
        return cls(
            id=BookingId(uuid4()),
            event_id=event_id,
            ticket_tier_id=tier_id,
            quantity=quantity,
            total_amount=unit_price.times(quantity),
            status=status,
            channel=channel,
            buyer=buyer,
            payment_method=payment_method,
            customer_subject=customer_subject,
        )

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_BOOKING_STATUSES

    @property
    def is_cancelled(self) -> bool:
        return self.status is BookingStatus.CANCELLED

    def cancelled(self) -> "Booking":
        return replace(self, status=BookingStatus.CANCELLED, previous_status=self.status)

    def restored(self) -> "Booking":
        """Return the booking back in the settled status it held before cancellation.

        The recorded total is kept as-is; restoration never re-prices.
        """
        if not self.is_cancelled:
            raise InvalidTransitionError("booking", self.status, BookingStatus.CONFIRMED)
        status = self.previous_status
        if status not in SETTLED_BOOKING_STATUSES:
            status = BookingStatus.CONFIRMED
        return replace(self, status=status, previous_status=None)

    def with_check_in(self, checked_in: bool, at: datetime) -> "Booking":
        return replace(self, checked_in=checked_in, checked_in_at=at if checked_in else None)


@dataclass(frozen=True)
class CheckInStats:
    total: int
    scanned: int


@dataclass(frozen=True)
class LedgerEntry:
    """A booking as it appears in an organizer's transaction history."""

    booking_id: BookingId
    title: str
    amount: int
    status: BookingStatus
    created_at: datetime


@dataclass(frozen=True)
class Payout:
    """Domain representation of an organizer withdrawal request."""

    id: PayoutId
    organizer_email: str
    amount: Money
    method: PayoutMethod
    destination: str
    status: PayoutStatus = PayoutStatus.PENDING
    note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def transitioned(self, target: PayoutStatus, note: str | None = None) -> "Payout":
        if target is not self.status and target not in PAYOUT_TRANSITIONS[self.status]:
            raise InvalidTransitionError("payout", self.status, target)
        return replace(self, status=target, note=note if note is not None else self.note)


@dataclass(frozen=True)
class Cagnotte:
    """Domain representation of a crowd-fundraising pot."""

    id: CagnotteId
    organizer_email: str
    title: str
    goal_amount: Money
    min_contribution: Money
    status: CagnotteStatus = CagnotteStatus.PENDING_VALIDATION
    description: str = ""
    admin_notes: str | None = None
    rejection_reason: str | None = None
    paid_out_amount: Money = Money(0)
    validated_at: datetime | None = None
    closed_at: datetime | None = None
    created_at: datetime | None = None

    def transitioned(
        self,
        target: CagnotteStatus,
        at: datetime,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> "Cagnotte":
        if target is not self.status and target not in CAGNOTTE_TRANSITIONS[self.status]:
            raise InvalidTransitionError("cagnotte", self.status, target)
        changes: dict = {"status": target}
        if admin_notes is not None:
            changes["admin_notes"] = admin_notes
        if rejection_reason is not None:
            changes["rejection_reason"] = rejection_reason
        if target is CagnotteStatus.ONLINE:
            changes["validated_at"] = at
        elif target is CagnotteStatus.COMPLETED:
            changes["closed_at"] = at
        return replace(self, **changes)


@dataclass(frozen=True)
class Contribution:
    """Domain representation of one contribution to a cagnotte."""

    id: ContributionId
    cagnotte_id: CagnotteId
    contributor_name: str
    amount: Money
    status: ContributionStatus = ContributionStatus.PENDING
    contributor_email: str | None = None
    contributor_phone: str | None = None
    payment_method: str = "wave"
    message: str | None = None
    is_anonymous: bool = False
    created_at: datetime | None = None

    @property
    def public_name(self) -> str:
        return ANONYMOUS_CONTRIBUTOR if self.is_anonymous else self.contributor_name


@dataclass(frozen=True)
class CagnottePayout:
    id: str
    cagnotte_id: CagnotteId
    organizer_email: str
    amount: Money
    payment_method: str
    receipt_number: str
    admin_subject: str
    payment_reference: str | None = None
    notes: str | None = None
    processed_at: datetime | None = None


@dataclass(frozen=True)
class Agent:
    """Check-in staff account scoped to some or all of an organizer's events."""

    id: AgentId
    organizer_email: str
    name: str
    code: str
    status: AgentStatus = AgentStatus.ACTIVE
    all_events: bool = False
    event_ids: frozenset[EventId] = frozenset()
    scans: int = 0
    is_online: bool = False
    last_active_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status is AgentStatus.ACTIVE

    def can_access(self, event: Event) -> bool:
        if self.all_events:
            return event.organizer_email.casefold() == self.organizer_email.casefold()
        return event.id in self.event_ids

    def online_at(self, now: datetime, window: timedelta) -> bool:
        """Best-effort liveness for display; not a correctness guarantee."""
        if not self.is_online or self.last_active_at is None:
            return False
        return now - self.last_active_at < window
