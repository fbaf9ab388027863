"""Tests for the booking lifecycle: checkout, free claims, cancel, restore and check-in."""

import uuid

import pytest

from ticketing import models
from ticketing.domain import Buyer, CartLine, Money
from ticketing.domain.errors import (
    BookingNotFoundError,
    EventNotFoundError,
    ForbiddenError,
    InsufficientStockError,
    InvalidIdError,
    InvalidInputError,
    InvalidTransitionError,
    NotOwnerError,
    RestoreConflictError,
    TierNotFoundError,
)
from ticketing.domain.statuses import BookingStatus, SalesChannel

BUYER = Buyer(name="Awa Diop", email="awa@example.com", phone="+221770000001")


def _line(tier, quantity=1) -> CartLine:
    return CartLine(tier_id=str(tier.id), quantity=quantity)


@pytest.mark.django_db
class TestCheckout:
    def test_checkout_books_every_line_as_paid(
        self, booking_service, event, make_tier, assert_stock_consistent
    ):
        standard = make_tier(name="Standard", price=5000, quantity=10)
        vip = make_tier(name="VIP", price=20000, quantity=2)

        bookings = booking_service.checkout(
            str(event.id), [_line(standard, 3), _line(vip, 2)], BUYER
        )

        assert [b.status for b in bookings] == [BookingStatus.PAID, BookingStatus.PAID]
        assert [b.channel for b in bookings] == [SalesChannel.CHECKOUT] * 2
        assert [b.total_amount for b in bookings] == [Money(15000), Money(40000)]
        assert bookings[0].buyer == BUYER
        assert_stock_consistent(standard)
        assert_stock_consistent(vip)
        assert vip.available == 0

    def test_checkout_applies_coded_promotion(self, booking_service, event, make_tier):
        tier = make_tier(price=10000, promo_type="percentage", promo_value=20, promo_code="SABAR")

        [without] = booking_service.checkout(str(event.id), [_line(tier)], BUYER)
        [with_code] = booking_service.checkout(
            str(event.id), [_line(tier)], BUYER, promo_code="sabar"
        )

        assert without.total_amount == Money(10000)
        assert with_code.total_amount == Money(8000)

    def test_checkout_records_customer_subject(self, booking_service, event, tier, customer):
        [booking] = booking_service.checkout(str(event.id), [_line(tier)], BUYER, customer=customer)
        assert booking.customer_subject == customer.subject_id

    def test_checkout_is_all_or_nothing(
        self, booking_service, event, make_tier, assert_stock_consistent
    ):
        """Given a second line beyond stock, no booking is written and no stock moves."""
        plenty = make_tier(name="Standard", quantity=10)
        scarce = make_tier(name="VIP", quantity=1)

        with pytest.raises(InsufficientStockError) as exc_info:
            booking_service.checkout(str(event.id), [_line(plenty, 4), _line(scarce, 2)], BUYER)

        assert exc_info.value.tier_id == str(scarce.id)
        assert models.Booking.objects.count() == 0
        assert_stock_consistent(plenty)
        assert plenty.available == 10

    def test_checkout_rejects_tier_of_another_event(
        self, booking_service, event, make_tier, rival_event
    ):
        foreign = make_tier(event_row=rival_event)
        with pytest.raises(TierNotFoundError):
            booking_service.checkout(str(event.id), [_line(foreign)], BUYER)

    def test_checkout_validation(self, booking_service, event, tier):
        with pytest.raises(InvalidIdError):
            booking_service.checkout("nope", [_line(tier)], BUYER)
        with pytest.raises(EventNotFoundError):
            booking_service.checkout(str(uuid.uuid4()), [_line(tier)], BUYER)
        with pytest.raises(InvalidInputError):
            booking_service.checkout(str(event.id), [], BUYER)
        with pytest.raises(InvalidInputError):
            booking_service.checkout(str(event.id), [_line(tier, 0)], BUYER)
        with pytest.raises(InvalidIdError):
            booking_service.checkout(str(event.id), [CartLine("bad", 1)], BUYER)


@pytest.mark.django_db
class TestFreeClaim:
    def test_free_tier_claim_is_confirmed(
        self, booking_service, event, make_tier, assert_stock_consistent
    ):
        free = make_tier(name="Invitation", price=0, quantity=3)
        booking = booking_service.claim_free(str(event.id), str(free.id), BUYER)
        assert booking.status is BookingStatus.CONFIRMED
        assert booking.channel is SalesChannel.FREE
        assert booking.quantity == 1
        assert booking.total_amount == Money(0)
        assert_stock_consistent(free)

    def test_fully_discounted_tier_counts_as_free(self, booking_service, event, make_tier):
        tier = make_tier(price=5000, promo_type="percentage", promo_value=100)
        booking = booking_service.claim_free(str(event.id), str(tier.id), BUYER)
        assert booking.total_amount == Money(0)

    def test_paid_tier_claim_rolls_back(
        self, booking_service, event, tier, assert_stock_consistent
    ):
        with pytest.raises(InvalidInputError):
            booking_service.claim_free(str(event.id), str(tier.id), BUYER)
        assert models.Booking.objects.count() == 0
        assert_stock_consistent(tier)


@pytest.fixture
def paid_booking(booking_service, event, tier):
    [booking] = booking_service.checkout(str(event.id), [_line(tier, 2)], BUYER)
    return booking


@pytest.mark.django_db
class TestCancelRestore:
    def test_cancel_releases_stock(
        self, booking_service, organizer, paid_booking, tier, assert_stock_consistent
    ):
        cancelled = booking_service.cancel(organizer, str(paid_booking.id))
        assert cancelled.status is BookingStatus.CANCELLED
        assert cancelled.previous_status is BookingStatus.PAID
        assert_stock_consistent(tier)
        assert tier.available == 10

    def test_cancel_twice_releases_once(
        self, booking_service, organizer, paid_booking, tier, assert_stock_consistent
    ):
        booking_service.cancel(organizer, str(paid_booking.id))
        again = booking_service.cancel(organizer, str(paid_booking.id))
        assert again.status is BookingStatus.CANCELLED
        assert_stock_consistent(tier)
        assert tier.available == 10

    def test_restore_retakes_stock_and_keeps_amount(
        self, booking_service, admin, paid_booking, tier, assert_stock_consistent
    ):
        booking_service.cancel(admin, str(paid_booking.id))
        tier.price = 9000
        tier.save(update_fields=["price"])

        restored = booking_service.restore(admin, str(paid_booking.id))

        assert restored.status is BookingStatus.PAID
        assert restored.total_amount == paid_booking.total_amount
        assert_stock_consistent(tier)
        assert tier.available == 8

    def test_restore_conflict_when_stock_was_resold(
        self, booking_service, organizer, event, make_tier, assert_stock_consistent
    ):
        """Given the released units sold to someone else, restore fails with the numbers."""
        tier = make_tier(quantity=2)
        [first] = booking_service.checkout(str(event.id), [_line(tier, 2)], BUYER)
        booking_service.cancel(organizer, str(first.id))
        booking_service.checkout(str(event.id), [_line(tier, 1)], BUYER)

        with pytest.raises(RestoreConflictError) as exc_info:
            booking_service.restore(organizer, str(first.id))

        assert exc_info.value.details() == {"available": 1, "required": 2}
        stored = models.Booking.objects.get(pk=first.id.value)
        assert stored.status == BookingStatus.CANCELLED.value
        assert_stock_consistent(tier)

    def test_restore_requires_cancelled_booking(self, booking_service, organizer, paid_booking):
        with pytest.raises(InvalidTransitionError):
            booking_service.restore(organizer, str(paid_booking.id))

    def test_cancel_of_deleted_tier_booking(self, booking_service, organizer, paid_booking, tier):
        tier.delete()
        cancelled = booking_service.cancel(organizer, str(paid_booking.id))
        assert cancelled.status is BookingStatus.CANCELLED
        assert cancelled.ticket_tier_id is None

    def test_only_owner_or_admin_may_cancel(self, booking_service, rival, customer, paid_booking):
        with pytest.raises(NotOwnerError):
            booking_service.cancel(rival, str(paid_booking.id))
        with pytest.raises(ForbiddenError):
            booking_service.cancel(customer, str(paid_booking.id))

    def test_unknown_booking(self, booking_service, organizer):
        with pytest.raises(BookingNotFoundError):
            booking_service.cancel(organizer, str(uuid.uuid4()))


@pytest.mark.django_db
class TestCheckIn:
    def test_organizer_sets_and_clears_check_in(self, booking_service, organizer, paid_booking):
        checked = booking_service.set_check_in(organizer, str(paid_booking.id), True)
        assert checked.checked_in
        assert checked.checked_in_at is not None

        cleared = booking_service.set_check_in(organizer, str(paid_booking.id), False)
        assert not cleared.checked_in
        assert cleared.checked_in_at is None

    def test_repeating_current_value_changes_nothing(
        self, booking_service, organizer, paid_booking
    ):
        first = booking_service.set_check_in(organizer, str(paid_booking.id), True)
        second = booking_service.set_check_in(organizer, str(paid_booking.id), True)
        assert second.checked_in_at == first.checked_in_at

    def test_rival_cannot_check_in(self, booking_service, rival, paid_booking):
        with pytest.raises(NotOwnerError):
            booking_service.set_check_in(rival, str(paid_booking.id), True)


@pytest.mark.django_db
class TestGuestList:
    def test_lists_event_bookings(self, booking_service, organizer, event, paid_booking):
        guests = booking_service.list_guests(organizer, str(event.id))
        assert [guest.id for guest in guests] == [paid_booking.id]

    def test_rival_cannot_list(self, booking_service, rival, event):
        with pytest.raises(NotOwnerError):
            booking_service.list_guests(rival, str(event.id))


@pytest.mark.django_db
class TestConfirmationSignal:
    def test_committed_checkout_emails_buyer(
        self, booking_service, event, tier, mailoutbox, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            booking_service.checkout(str(event.id), [_line(tier, 2)], BUYER)
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [BUYER.email]
        assert mailoutbox[0].subject == "Your tickets are confirmed"

    def test_failed_checkout_sends_nothing(
        self, booking_service, event, make_tier, mailoutbox, django_capture_on_commit_callbacks
    ):
        scarce = make_tier(quantity=1)
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with pytest.raises(InsufficientStockError):
                booking_service.checkout(str(event.id), [_line(scarce, 2)], BUYER)
        assert callbacks == []
        assert mailoutbox == []
