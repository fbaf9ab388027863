"""Point-of-Sale transaction - multi-line sales at the door, all or nothing."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ticketing.domain import Buyer, CartLine, Money, Principal
from ticketing.domain.errors import InvalidInputError
from ticketing.domain.statuses import BookingStatus, PaymentMethod, Role, SalesChannel
from ticketing.services.booking_service import BookingService
from ticketing.services.common import ensure_event_manager, require_role

logger = logging.getLogger(__name__)

CURRENCY = "XOF"


@dataclass(frozen=True)
class SaleLine:
    booking_id: str
    tier_id: str
    tier_name: str
    quantity: int
    unit_price: Money
    line_total: Money


@dataclass(frozen=True)
class Sale:
    """Outcome of a committed point-of-sale transaction."""

    event_id: str
    event_title: str
    payment_method: PaymentMethod
    buyer: Buyer
    lines: tuple[SaleLine, ...]
    total: Money
    currency: str = CURRENCY


class PointOfSale:
    """Sells tickets on behalf of the organizer who owns the event."""

    def __init__(self, bookings: BookingService) -> None:
        self._bookings = bookings

    def sell(
        self,
        principal: Principal,
        event_id: str,
        lines: Sequence[CartLine],
        buyer: Buyer | None = None,
        payment_method: str = PaymentMethod.CASH.value,
    ) -> Sale:
        """Sell every line at the tier's base price in one transaction.

        Ownership is verified before any tier is locked. Each tier is locked
        and re-checked in the order the lines were given; the first line that
        cannot be served aborts the whole sale.

        Raises:
            NotOwnerError: If the caller does not own the event.
            TierNotFoundError: If a tier is missing or belongs to another event.
            InsufficientStockError: Naming the first tier that lacked stock.
        """
        require_role(principal, Role.ORGANIZER, Role.ADMIN)
        try:
            method = PaymentMethod((payment_method or PaymentMethod.CASH.value).lower())
        except ValueError:
            raise InvalidInputError("payment_method must be cash or card") from None
        buyer = buyer or Buyer()

        event = self._bookings.get_event(event_id)
        ensure_event_manager(principal, event)

        with self._bookings.ledger_transaction():
            booked = self._bookings.book_lines(
                event,
                lines,
                status=BookingStatus.PAID,
                channel=SalesChannel.POINT_OF_SALE,
                buyer=buyer,
                price_for=lambda tier: tier.price,
                payment_method=method,
                customer_subject=principal.subject_id,
            )

        sale_lines = tuple(
            SaleLine(
                booking_id=str(booking.id),
                tier_id=str(tier.id),
                tier_name=tier.name,
                quantity=booking.quantity,
                unit_price=tier.price,
                line_total=booking.total_amount,
            )
            for booking, tier in booked
        )
        total = Money(sum(line.line_total.amount for line in sale_lines))
        logger.info(
            "POS sale on event %s by %s: %d lines, %s",
            event.id,
            principal.subject_id,
            len(sale_lines),
            total,
        )
        return Sale(
            event_id=str(event.id),
            event_title=event.name,
            payment_method=method,
            buyer=buyer,
            lines=sale_lines,
            total=total,
        )
