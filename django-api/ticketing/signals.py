"""Post-commit notification signals.

Services schedule these through ``store.on_commit`` so receivers only ever
see committed state. Receiver failures are logged and never reach the
request that committed the work.
"""

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.dispatch import Signal, receiver

from ticketing.domain import Booking, Cagnotte, CagnottePayout, Payout
from ticketing.domain.statuses import PayoutStatus

logger = logging.getLogger(__name__)

bookings_confirmed = Signal()
payout_status_changed = Signal()
cagnotte_disbursed = Signal()


def _send(signal: Signal, sender, **kwargs) -> None:
    for handler, result in signal.send_robust(sender=sender, **kwargs):
        if isinstance(result, Exception):
            logger.error(
                "Receiver %s failed",
                getattr(handler, "__qualname__", handler),
                exc_info=(type(result), result, result.__traceback__),
            )


def announce_bookings(bookings: list[Booking]) -> None:
    _send(bookings_confirmed, sender=Booking, bookings=bookings)


def announce_payout_status(payout: Payout, previous: PayoutStatus) -> None:
    _send(payout_status_changed, sender=Payout, payout=payout, previous=previous)


def announce_disbursement(cagnotte: Cagnotte, payout: CagnottePayout) -> None:
    _send(cagnotte_disbursed, sender=Cagnotte, cagnotte=cagnotte, payout=payout)


@receiver(bookings_confirmed)
def email_booking_confirmation(sender, bookings: list[Booking], **kwargs):
    """Email each buyer one confirmation listing their bookings."""
    by_email: dict[str, list[Booking]] = {}
    for booking in bookings:
        if booking.buyer.email:
            by_email.setdefault(booking.buyer.email, []).append(booking)
    for email, own in by_email.items():
        lines = "\n".join(
            f"- {booking.id}: {booking.quantity} ticket(s), {booking.total_amount}"
            for booking in own
        )
        send_mail(
            subject="Your tickets are confirmed",
            message=f"Hello {own[0].buyer.display_name},\n\n{lines}\n",
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[email],
        )
        logger.info("Booking confirmation sent for %d bookings", len(own))


@receiver(payout_status_changed)
def email_payout_status(sender, payout: Payout, previous: PayoutStatus, **kwargs):
    send_mail(
        subject=f"Payout {payout.status}",
        message=(
            f"Your payout of {payout.amount} moved from {previous} to {payout.status}."
            + (f"\n\n{payout.note}" if payout.note else "")
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[payout.organizer_email],
    )


@receiver(cagnotte_disbursed)
def email_disbursement_receipt(sender, cagnotte: Cagnotte, payout: CagnottePayout, **kwargs):
    send_mail(
        subject=f"Cagnotte paid out - {payout.receipt_number}",
        message=(
            f"{cagnotte.title}: {payout.amount} paid by {payout.payment_method}.\n"
            f"Receipt: {payout.receipt_number}"
        ),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[cagnotte.organizer_email],
    )
