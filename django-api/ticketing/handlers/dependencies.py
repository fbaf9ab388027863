"""Wires services to their Django stores and post-commit side channels."""

from datetime import timedelta

from django.conf import settings

from ticketing import signals
from ticketing.services.agent_service import AgentService
from ticketing.services.booking_service import BookingService
from ticketing.services.cagnotte_service import CagnotteService
from ticketing.services.point_of_sale import PointOfSale
from ticketing.services.wallet_service import WalletService
from ticketing.stores.django_store import (
    DjangoAgentStore,
    DjangoBookingStore,
    DjangoCagnotteStore,
    DjangoEventStore,
    DjangoPayoutStore,
    DjangoTierStore,
)


def booking_service() -> BookingService:
    return BookingService(
        events=DjangoEventStore(),
        tiers=DjangoTierStore(),
        bookings=DjangoBookingStore(),
        on_committed=signals.announce_bookings,
    )


def point_of_sale() -> PointOfSale:
    return PointOfSale(booking_service())


def wallet_service() -> WalletService:
    return WalletService(
        bookings=DjangoBookingStore(),
        payouts=DjangoPayoutStore(),
        on_status_changed=signals.announce_payout_status,
    )


def cagnotte_service() -> CagnotteService:
    return CagnotteService(
        cagnottes=DjangoCagnotteStore(),
        on_disbursed=signals.announce_disbursement,
    )


def agent_service() -> AgentService:
    return AgentService(
        agents=DjangoAgentStore(),
        events=DjangoEventStore(),
        bookings=DjangoBookingStore(),
        online_window=timedelta(seconds=settings.AGENT_ONLINE_WINDOW_SECONDS),
    )
