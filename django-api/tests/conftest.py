"""Pytest configuration and shared fixtures."""

import pytest
from django.db.models import Sum
from rest_framework.test import APIClient

from ticketing import models
from ticketing.domain import Principal
from ticketing.domain.statuses import BookingStatus, Role
from ticketing.handlers import dependencies
from ticketing.handlers.auth import sign_session


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


# Principals


@pytest.fixture
def organizer() -> Principal:
    return Principal(subject_id="org-1", email="org@example.com", role=Role.ORGANIZER)


@pytest.fixture
def rival() -> Principal:
    return Principal(subject_id="org-2", email="rival@example.com", role=Role.ORGANIZER)


@pytest.fixture
def admin() -> Principal:
    return Principal(subject_id="admin-1", email="admin@example.com", role=Role.ADMIN)


@pytest.fixture
def customer() -> Principal:
    return Principal(subject_id="cust-1", email="buyer@example.com", role=Role.CUSTOMER)


@pytest.fixture
def authenticate():
    """Attach a signed Bearer session for ``principal`` to ``client``."""

    def _authenticate(client: APIClient, principal: Principal) -> APIClient:
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {sign_session(principal)}")
        return client

    return _authenticate


# Rows


@pytest.fixture
def organizer_row(db, organizer) -> models.Organizer:
    return models.Organizer.objects.create(email=organizer.email, name="Dakar Live")


@pytest.fixture
def rival_row(db, rival) -> models.Organizer:
    return models.Organizer.objects.create(email=rival.email, name="Rival Shows")


@pytest.fixture
def event(organizer_row) -> models.Event:
    return models.Event.objects.create(
        organizer=organizer_row, name="Sabar Night", location="Dakar"
    )


@pytest.fixture
def rival_event(rival_row) -> models.Event:
    return models.Event.objects.create(organizer=rival_row, name="Other Night", location="Thies")


@pytest.fixture
def make_tier(event):
    def _make(
        name: str = "Standard",
        price: int = 5000,
        quantity: int = 10,
        available: int | None = None,
        event_row: models.Event | None = None,
        **promotion,
    ) -> models.TicketTier:
        return models.TicketTier.objects.create(
            event=event_row or event,
            name=name,
            price=price,
            quantity=quantity,
            available=quantity if available is None else available,
            **promotion,
        )

    return _make


@pytest.fixture
def tier(make_tier) -> models.TicketTier:
    return make_tier()


@pytest.fixture
def assert_stock_consistent():
    """Check a tier's counters against the bookings that hold its stock."""

    def _check(tier_row: models.TicketTier) -> None:
        tier_row.refresh_from_db()
        assert 0 <= tier_row.available <= tier_row.quantity
        held = (
            models.Booking.objects.filter(ticket_tier=tier_row)
            .exclude(status=BookingStatus.CANCELLED.value)
            .aggregate(total=Sum("quantity"))["total"]
            or 0
        )
        assert tier_row.quantity - tier_row.available == held

    return _check


# Services wired to the Django stores


@pytest.fixture
def booking_service(db):
    return dependencies.booking_service()


@pytest.fixture
def point_of_sale(db):
    return dependencies.point_of_sale()


@pytest.fixture
def wallet_service(db):
    return dependencies.wallet_service()


@pytest.fixture
def cagnotte_service(db):
    return dependencies.cagnotte_service()


@pytest.fixture
def agent_service(db):
    return dependencies.agent_service()
