"""Tests for point-of-sale transactions."""

import pytest

from ticketing import models
from ticketing.domain import Buyer, CartLine, Money
from ticketing.domain.errors import (
    ForbiddenError,
    InsufficientStockError,
    InvalidInputError,
    NotOwnerError,
    TierNotFoundError,
)
from ticketing.domain.statuses import BookingStatus, PaymentMethod, SalesChannel


def _line(tier, quantity=1) -> CartLine:
    return CartLine(tier_id=str(tier.id), quantity=quantity)


@pytest.mark.django_db
class TestSell:
    def test_sale_returns_lines_and_total(
        self, point_of_sale, organizer, event, make_tier, assert_stock_consistent
    ):
        standard = make_tier(name="Standard", price=5000, quantity=10)
        vip = make_tier(name="VIP", price=20000, quantity=5)

        sale = point_of_sale.sell(
            organizer,
            str(event.id),
            [_line(standard, 2), _line(vip, 1)],
            buyer=Buyer(name="Fatou"),
            payment_method="card",
        )

        assert sale.event_title == "Sabar Night"
        assert sale.payment_method is PaymentMethod.CARD
        assert sale.currency == "XOF"
        assert sale.total == Money(30000)
        assert [(line.tier_name, line.quantity) for line in sale.lines] == [
            ("Standard", 2),
            ("VIP", 1),
        ]
        assert sale.lines[0].unit_price == Money(5000)
        assert sale.lines[0].line_total == Money(10000)
        assert sale.buyer.name == "Fatou"
        assert_stock_consistent(standard)
        assert_stock_consistent(vip)

    def test_sale_bookings_are_paid_pos_records(self, point_of_sale, organizer, event, tier):
        sale = point_of_sale.sell(organizer, str(event.id), [_line(tier, 2)])
        row = models.Booking.objects.get(pk=sale.lines[0].booking_id)
        assert row.status == BookingStatus.PAID.value
        assert row.channel == SalesChannel.POINT_OF_SALE.value
        assert row.payment_method == PaymentMethod.CASH.value
        assert row.customer_subject == organizer.subject_id

    def test_sale_ignores_promotions(self, point_of_sale, organizer, event, make_tier):
        tier = make_tier(price=8000, promo_type="fixed_price", promo_value=1000)
        sale = point_of_sale.sell(organizer, str(event.id), [_line(tier)])
        assert sale.total == Money(8000)

    def test_sale_is_all_or_nothing(
        self, point_of_sale, organizer, event, make_tier, assert_stock_consistent
    ):
        """Given a second line that overdraws, the first line's stock is untouched."""
        first = make_tier(name="Standard", quantity=10)
        second = make_tier(name="VIP", quantity=1)

        with pytest.raises(InsufficientStockError) as exc_info:
            point_of_sale.sell(organizer, str(event.id), [_line(first, 5), _line(second, 2)])

        assert exc_info.value.tier_name == "VIP"
        assert models.Booking.objects.count() == 0
        assert_stock_consistent(first)
        assert first.available == 10

    def test_admin_may_sell_for_any_event(self, point_of_sale, admin, event, tier):
        sale = point_of_sale.sell(admin, str(event.id), [_line(tier)])
        assert sale.total == Money(5000)

    def test_rival_cannot_sell(self, point_of_sale, rival, event, tier, assert_stock_consistent):
        with pytest.raises(NotOwnerError):
            point_of_sale.sell(rival, str(event.id), [_line(tier)])
        assert_stock_consistent(tier)

    def test_customer_cannot_sell(self, point_of_sale, customer, event, tier):
        with pytest.raises(ForbiddenError):
            point_of_sale.sell(customer, str(event.id), [_line(tier)])

    def test_foreign_tier_rejected(self, point_of_sale, organizer, event, make_tier, rival_event):
        foreign = make_tier(event_row=rival_event)
        with pytest.raises(TierNotFoundError):
            point_of_sale.sell(organizer, str(event.id), [_line(foreign)])

    def test_unknown_payment_method(self, point_of_sale, organizer, event, tier):
        with pytest.raises(InvalidInputError):
            point_of_sale.sell(organizer, str(event.id), [_line(tier)], payment_method="bitcoin")


@pytest.mark.django_db
class TestSellAgainstShrinkingStock:
    def test_second_sale_of_six_from_ten_fails(
        self, point_of_sale, organizer, event, make_tier, assert_stock_consistent
    ):
        """Given ten units and two sales of six, only the first goes through."""
        tier = make_tier(quantity=10)

        point_of_sale.sell(organizer, str(event.id), [_line(tier, 6)])
        with pytest.raises(InsufficientStockError) as exc_info:
            point_of_sale.sell(organizer, str(event.id), [_line(tier, 6)])

        assert exc_info.value.tier_id == str(tier.id)
        assert models.Booking.objects.count() == 1
        assert_stock_consistent(tier)
        assert tier.available == 4

    def test_mixed_quantities_succeed_while_running_sum_fits(
        self, point_of_sale, organizer, event, make_tier, assert_stock_consistent
    ):
        tier = make_tier(quantity=10)
        outcomes = []
        for quantity in [4, 3, 5, 2]:
            try:
                point_of_sale.sell(organizer, str(event.id), [_line(tier, quantity)])
            except InsufficientStockError:
                outcomes.append((quantity, False))
            else:
                outcomes.append((quantity, True))

        assert outcomes == [(4, True), (3, True), (5, False), (2, True)]
        assert_stock_consistent(tier)
        assert tier.available == 1
