"""Tests for organizer wallets and payout requests."""

import uuid

import pytest

from ticketing import models
from ticketing.domain import Buyer, CartLine, Money, Principal
from ticketing.domain.errors import (
    ForbiddenError,
    InsufficientBalanceError,
    InvalidInputError,
    InvalidTransitionError,
    PayoutNotFoundError,
)
from ticketing.domain.statuses import PayoutMethod, PayoutStatus, Role


@pytest.fixture
def revenue(point_of_sale, admin, event, make_tier):
    """10000 XOF of settled sales on the organizer's event."""
    tier = make_tier(price=5000, quantity=10)
    point_of_sale.sell(admin, str(event.id), [CartLine(tier_id=str(tier.id), quantity=2)])
    return tier


@pytest.mark.django_db
class TestBalance:
    def test_balance_is_settled_revenue_minus_committed_payouts(
        self, wallet_service, organizer, revenue
    ):
        assert wallet_service.balance(organizer.email) == 10000
        wallet_service.request_payout(organizer, 4000, "wave", "+221770000000")
        assert wallet_service.balance(organizer.email) == 6000

    def test_cancelled_booking_leaves_balance(
        self, wallet_service, booking_service, organizer, event, revenue
    ):
        [booking] = booking_service.checkout(
            str(event.id), [CartLine(str(revenue.id), 1)], Buyer(name="Ami")
        )
        assert wallet_service.balance(organizer.email) == 15000
        booking_service.cancel(organizer, str(booking.id))
        assert wallet_service.balance(organizer.email) == 10000

    def test_rejected_payout_frees_balance(self, wallet_service, organizer, admin, revenue):
        payout = wallet_service.request_payout(organizer, 10000, "bank", "SN012 0000")
        wallet_service.transition_payout(admin, str(payout.id), "rejected", note="Wrong IBAN")
        assert wallet_service.balance(organizer.email) == 10000

    def test_summary(self, wallet_service, organizer, revenue):
        wallet_service.request_payout(organizer, 3000, "om", "+221770000000")
        summary = wallet_service.summary(organizer)
        assert summary.total_sales == 10000
        assert summary.paid_count == 1
        assert summary.payout_sum == 3000
        assert summary.available == 7000
        assert len(summary.payouts) == 1
        assert summary.payouts[0].method is PayoutMethod.ORANGE_MONEY
        assert [entry.amount for entry in summary.transactions] == [10000]


@pytest.mark.django_db
class TestRequestPayout:
    def test_request_creates_pending_payout(self, wallet_service, organizer, revenue):
        payout = wallet_service.request_payout(organizer, 10000, "wave", "+221770000000")
        assert payout.status is PayoutStatus.PENDING
        assert payout.amount == Money(10000)
        assert payout.organizer_email == organizer.email

    def test_request_beyond_balance_reports_available(self, wallet_service, organizer, revenue):
        wallet_service.request_payout(organizer, 8000, "wave", "+221770000000")
        with pytest.raises(InsufficientBalanceError) as exc_info:
            wallet_service.request_payout(organizer, 2001, "wave", "+221770000000")
        assert exc_info.value.available == 2000
        assert wallet_service.list_payouts(organizer)[0].amount == Money(8000)

    def test_payout_of_whole_balance_empties_wallet(self, wallet_service, organizer, revenue):
        """Given a request for exactly the balance, it succeeds and nothing is left."""
        wallet_service.request_payout(organizer, 10000, "wave", "+221770000000")
        assert wallet_service.balance(organizer.email) == 0
        with pytest.raises(InsufficientBalanceError) as exc_info:
            wallet_service.request_payout(organizer, 1, "wave", "+221770000000")
        assert exc_info.value.available == 0

    def test_mixed_case_owner_email_keeps_one_organizer(
        self, wallet_service, point_of_sale, make_tier
    ):
        owner = models.Organizer.objects.create(email="Org.Mixed@Example.com")
        event = models.Event.objects.create(organizer=owner, name="Mbalax Live")
        tier = make_tier(price=1000, quantity=5, event_row=event)
        principal = Principal(
            subject_id="org-3", email="org.mixed@example.com", role=Role.ORGANIZER
        )
        point_of_sale.sell(principal, str(event.id), [CartLine(str(tier.id), 5)])

        payout = wallet_service.request_payout(principal, 5000, "wave", "+221770000000")

        assert models.Organizer.objects.filter(email__iexact=owner.email).count() == 1
        assert models.Payout.objects.get(pk=payout.id.value).organizer_id == owner.id
        assert wallet_service.balance(principal.email) == 0

    def test_organizer_without_sales(self, wallet_service, rival):
        with pytest.raises(InsufficientBalanceError) as exc_info:
            wallet_service.request_payout(rival, 1, "wave", "+221770000000")
        assert exc_info.value.available == 0

    @pytest.mark.parametrize(
        ("amount", "method", "destination"),
        [(0, "wave", "x"), (100, "cheque", "x"), (100, "wave", "  ")],
    )
    def test_invalid_requests(
        self, wallet_service, organizer, revenue, amount, method, destination
    ):
        with pytest.raises(InvalidInputError):
            wallet_service.request_payout(organizer, amount, method, destination)

    def test_only_organizers_request(self, wallet_service, admin):
        with pytest.raises(ForbiddenError):
            wallet_service.request_payout(admin, 100, "wave", "x")


@pytest.mark.django_db
class TestTransitionPayout:
    def test_admin_moves_payout_forward(self, wallet_service, organizer, admin, revenue):
        payout = wallet_service.request_payout(organizer, 5000, "wave", "+221770000000")
        approved = wallet_service.transition_payout(admin, str(payout.id), "approved")
        paid = wallet_service.transition_payout(admin, str(payout.id), "paid", note="Sent")
        assert approved.status is PayoutStatus.APPROVED
        assert paid.status is PayoutStatus.PAID
        assert paid.note == "Sent"
        assert wallet_service.balance(organizer.email) == 5000

    def test_paid_payout_cannot_be_rejected(self, wallet_service, organizer, admin, revenue):
        payout = wallet_service.request_payout(organizer, 5000, "wave", "+221770000000")
        wallet_service.transition_payout(admin, str(payout.id), "paid")
        with pytest.raises(InvalidTransitionError):
            wallet_service.transition_payout(admin, str(payout.id), "rejected")

    def test_list_all_filters_by_status(self, wallet_service, organizer, admin, revenue):
        first = wallet_service.request_payout(organizer, 1000, "wave", "+221770000000")
        wallet_service.request_payout(organizer, 1000, "wave", "+221770000000")
        wallet_service.transition_payout(admin, str(first.id), "approved")
        assert len(wallet_service.list_all(admin)) == 2
        assert [p.id for p in wallet_service.list_all(admin, "approved")] == [first.id]
        with pytest.raises(InvalidInputError):
            wallet_service.list_all(admin, "lost")

    def test_status_is_case_insensitive(self, wallet_service, organizer, admin, revenue):
        payout = wallet_service.request_payout(organizer, 1000, "wave", "+221770000000")
        approved = wallet_service.transition_payout(admin, str(payout.id), " Approved ")
        assert approved.status is PayoutStatus.APPROVED
        assert [p.id for p in wallet_service.list_all(admin, "APPROVED")] == [payout.id]

    def test_only_admin_transitions(self, wallet_service, organizer, revenue):
        payout = wallet_service.request_payout(organizer, 1000, "wave", "+221770000000")
        with pytest.raises(ForbiddenError):
            wallet_service.transition_payout(organizer, str(payout.id), "paid")

    def test_unknown_payout(self, wallet_service, admin):
        with pytest.raises(PayoutNotFoundError):
            wallet_service.transition_payout(admin, str(uuid.uuid4()), "paid")

    def test_status_change_emails_organizer_after_commit(
        self,
        wallet_service,
        organizer,
        admin,
        revenue,
        mailoutbox,
        django_capture_on_commit_callbacks,
    ):
        payout = wallet_service.request_payout(organizer, 1000, "wave", "+221770000000")
        with django_capture_on_commit_callbacks(execute=True):
            wallet_service.transition_payout(admin, str(payout.id), "approved")
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [organizer.email]
