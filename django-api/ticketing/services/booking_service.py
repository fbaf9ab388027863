"""Booking State Machine - creates, cancels, restores and checks in bookings.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Open exactly one transaction per mutating operation
- Return domain models or raise domain errors

Lock order: a sale locks tiers in request order; cancel and restore lock the
booking row, then its tier.
"""

import logging
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager

from ticketing.domain import (
    Booking,
    BookingId,
    Buyer,
    CartLine,
    Event,
    EventId,
    Money,
    Principal,
    TicketTier,
    TicketTierId,
)
from ticketing.domain.errors import (
    BookingNotFoundError,
    EventNotFoundError,
    InsufficientStockError,
    InvalidInputError,
    RestoreConflictError,
)
from ticketing.domain.statuses import BookingStatus, PaymentMethod, Role, SalesChannel
from ticketing.services.common import (
    ensure_event_manager,
    parse_id,
    positive_int,
    require_role,
    utcnow,
)
from ticketing.services.inventory_ledger import InventoryLedger
from ticketing.stores.interfaces import BookingStore, EventStore, TierStore

logger = logging.getLogger(__name__)

BookingsCallback = Callable[[list[Booking]], None]


class BookingService:
    """Service for the booking lifecycle."""

    def __init__(
        self,
        events: EventStore,
        tiers: TierStore,
        bookings: BookingStore,
        on_committed: BookingsCallback | None = None,
    ) -> None:
        self._events = events
        self._bookings = bookings
        self._ledger = InventoryLedger(tiers)
        self._on_committed = on_committed

    @property
    def ledger(self) -> InventoryLedger:
        return self._ledger

    def ledger_transaction(self) -> AbstractContextManager[None]:
        """Transaction for callers composing several ``book_lines`` calls."""
        return self._bookings.atomic()

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._events.get_event(parse_id(EventId, event_id, "event"))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def checkout(
        self,
        event_id: str,
        lines: Sequence[CartLine],
        buyer: Buyer,
        promo_code: str | None = None,
        customer: Principal | None = None,
    ) -> list[Booking]:
        """Book every cart line as ``paid`` at its promotional price, or nothing."""
        event = self.get_event(event_id)
        with self._bookings.atomic():
            booked = self.book_lines(
                event,
                lines,
                status=BookingStatus.PAID,
                channel=SalesChannel.CHECKOUT,
                buyer=buyer,
                price_for=lambda tier: tier.unit_price(promo_code),
                customer_subject=customer.subject_id if customer else None,
            )
        bookings = [booking for booking, _ in booked]
        logger.info("Checkout committed on event %s: %d bookings", event.id, len(bookings))
        return bookings

    def claim_free(
        self,
        event_id: str,
        tier_id: str,
        buyer: Buyer,
        customer: Principal | None = None,
    ) -> Booking:
        """Claim one ``confirmed`` unit of a tier whose effective price is zero."""
        event = self.get_event(event_id)
        with self._bookings.atomic():
            [(booking, tier)] = self.book_lines(
                event,
                [CartLine(tier_id=tier_id, quantity=1)],
                status=BookingStatus.CONFIRMED,
                channel=SalesChannel.FREE,
                buyer=buyer,
                price_for=lambda tier: tier.unit_price(),
                customer_subject=customer.subject_id if customer else None,
            )
            if booking.total_amount.amount != 0:
                raise InvalidInputError(f"{tier.name} is not a free ticket")
        logger.info("Free ticket claimed on event %s: booking %s", event.id, booking.id)
        return booking

    def book_lines(
        self,
        event: Event,
        lines: Sequence[CartLine],
        *,
        status: BookingStatus,
        channel: SalesChannel,
        buyer: Buyer,
        price_for: Callable[[TicketTier], Money],
        payment_method: PaymentMethod | None = None,
        customer_subject: str | None = None,
    ) -> list[tuple[Booking, TicketTier]]:
        """Reserve and record one booking per line; must run inside ``atomic()``.

        The first line that cannot be served raises and the caller's
        transaction rolls back every line before it.
        """
        if not lines:
            raise InvalidInputError("At least one item is required")
        parsed = [
            (
                parse_id(TicketTierId, line.tier_id, "ticket tier"),
                positive_int(line.quantity, "quantity"),
            )
            for line in lines
        ]
        booked = []
        for tier_id, quantity in parsed:
            tier = self._ledger.reserve(tier_id, quantity, event_id=event.id)
            booking = self._bookings.add_booking(
                Booking.new(
                    event_id=event.id,
                    tier_id=tier.id,
                    quantity=quantity,
                    unit_price=price_for(tier),
                    status=status,
                    channel=channel,
                    buyer=buyer,
                    payment_method=payment_method,
                    customer_subject=customer_subject,
                )
            )
            booked.append((booking, tier))
        if self._on_committed is not None:
            bookings = [booking for booking, _ in booked]
            self._bookings.on_commit(lambda: self._on_committed(bookings))
        return booked

    def _managed_booking(
        self, principal: Principal, booking: Booking | None, raw_id: str
    ) -> Booking:
        if booking is None:
            raise BookingNotFoundError(raw_id)
        event = self._events.get_event(booking.event_id)
        if event is None:
            raise EventNotFoundError(str(booking.event_id))
        ensure_event_manager(principal, event)
        return booking

    def cancel(self, principal: Principal, booking_id: str) -> Booking:
        """Cancel a booking and release its stock. Cancelling twice releases once."""
        require_role(principal, Role.ORGANIZER, Role.ADMIN)
        parsed = parse_id(BookingId, booking_id, "booking")
        with self._bookings.atomic():
            booking = self._managed_booking(
                principal, self._bookings.lock_booking(parsed), booking_id
            )
            if booking.is_cancelled:
                return booking
            if booking.ticket_tier_id is not None:
                self._ledger.release(booking.ticket_tier_id, booking.quantity)
            booking = self._bookings.save_booking(booking.cancelled())
        logger.info("Booking %s cancelled by %s", booking.id, principal.subject_id)
        return booking

    def restore(self, principal: Principal, booking_id: str) -> Booking:
        """Bring a cancelled booking back, re-taking its stock at current availability.

        The recorded total is kept; the booking is not re-priced.

        Raises:
            RestoreConflictError: If the released stock was sold in the meantime.
        """
        require_role(principal, Role.ORGANIZER, Role.ADMIN)
        parsed = parse_id(BookingId, booking_id, "booking")
        with self._bookings.atomic():
            booking = self._managed_booking(
                principal, self._bookings.lock_booking(parsed), booking_id
            )
            restored = booking.restored()
            if booking.ticket_tier_id is not None:
                try:
                    self._ledger.reserve(booking.ticket_tier_id, booking.quantity)
                except InsufficientStockError as exc:
                    raise RestoreConflictError(
                        booking_id=str(booking.id),
                        available=exc.available,
                        required=booking.quantity,
                    ) from None
            booking = self._bookings.save_booking(restored)
        logger.info(
            "Booking %s restored to %s by %s", booking.id, booking.status, principal.subject_id
        )
        return booking

    def set_check_in(self, principal: Principal, booking_id: str, checked_in: bool) -> Booking:
        """Set the check-in flag. Setting the current value again changes nothing."""
        require_role(principal, Role.ORGANIZER, Role.ADMIN)
        parsed = parse_id(BookingId, booking_id, "booking")
        with self._bookings.atomic():
            booking = self._managed_booking(
                principal, self._bookings.lock_booking(parsed), booking_id
            )
            if booking.checked_in == checked_in:
                return booking
            booking = self._bookings.save_booking(booking.with_check_in(checked_in, utcnow()))
        logger.info("Booking %s check-in set to %s", booking.id, checked_in)
        return booking

    def list_guests(self, principal: Principal, event_id: str) -> list[Booking]:
        require_role(principal, Role.ORGANIZER, Role.ADMIN)
        event = self.get_event(event_id)
        ensure_event_manager(principal, event)
        return self._bookings.list_for_event(event.id)
