"""Concurrency tests for row-locked stock and balance checks.

Row locks are only real on PostgreSQL; on other backends these are skipped.
Run with: DB_ENGINE=django.db.backends.postgresql pytest tests/test_concurrency.py -v
"""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest
from django.db import connection, connections

from ticketing import models
from ticketing.domain import Buyer, CartLine
from ticketing.domain.errors import InsufficientBalanceError, InsufficientStockError
from ticketing.handlers import dependencies

pytestmark = [
    pytest.mark.django_db(transaction=True),
    pytest.mark.skipif(
        connection.vendor != "postgresql", reason="row locks require PostgreSQL"
    ),
]

WORKERS = 8


def _race(worker, count=WORKERS):
    """Run ``worker`` in ``count`` threads released together; return outcomes."""
    barrier = Barrier(count)

    def run(index):
        barrier.wait()
        try:
            return worker(index)
        except Exception as exc:
            return exc
        finally:
            connections.close_all()

    with ThreadPoolExecutor(max_workers=count) as pool:
        return list(pool.map(run, range(count)))


class TestStockRace:
    def test_last_unit_sold_once(self, event, make_tier, assert_stock_consistent):
        """Given one unit left and eight buyers, exactly one checkout succeeds."""
        tier = make_tier(quantity=1)

        def buy(index):
            return dependencies.booking_service().checkout(
                str(event.id),
                [CartLine(tier_id=str(tier.id), quantity=1)],
                Buyer(name=f"Buyer {index}"),
            )

        outcomes = _race(buy)

        successes = [o for o in outcomes if isinstance(o, list)]
        failures = [o for o in outcomes if isinstance(o, InsufficientStockError)]
        assert len(successes) == 1
        assert len(failures) == WORKERS - 1
        assert_stock_consistent(tier)
        assert tier.available == 0

    def test_two_sales_of_six_from_ten(self, organizer, event, make_tier, assert_stock_consistent):
        tier = make_tier(quantity=10)

        def sell(index):
            return dependencies.point_of_sale().sell(
                organizer, str(event.id), [CartLine(str(tier.id), 6)]
            )

        outcomes = _race(sell, count=2)

        assert sum(1 for o in outcomes if isinstance(o, InsufficientStockError)) == 1
        assert_stock_consistent(tier)
        assert tier.available == 4

    def test_mixed_quantities_never_oversell(self, event, make_tier, assert_stock_consistent):
        """Given requests summing past stock, every refused one would not have fit."""
        tier = make_tier(quantity=10)
        quantities = [4, 3, 5, 2, 6, 1, 3, 2]

        def buy(index):
            return dependencies.booking_service().checkout(
                str(event.id),
                [CartLine(str(tier.id), quantities[index])],
                Buyer(name=f"Buyer {index}"),
            )

        outcomes = _race(buy, count=len(quantities))

        sold = sum(q for q, o in zip(quantities, outcomes) if isinstance(o, list))
        refused = [q for q, o in zip(quantities, outcomes) if isinstance(o, InsufficientStockError)]
        assert len(refused) + sum(1 for o in outcomes if isinstance(o, list)) == len(quantities)
        assert_stock_consistent(tier)
        assert tier.available == 10 - sold
        assert all(q > tier.available for q in refused)

    def test_opposite_line_orders_stay_consistent(
        self, organizer, event, make_tier, assert_stock_consistent
    ):
        first = make_tier(name="A", quantity=WORKERS)
        second = make_tier(name="B", quantity=WORKERS)

        def sell(index):
            lines = [CartLine(str(first.id), 1), CartLine(str(second.id), 1)]
            if index % 2:
                lines.reverse()
            return dependencies.point_of_sale().sell(organizer, str(event.id), lines)

        outcomes = _race(sell)

        assert models.Booking.objects.count() == 2 * sum(
            1 for o in outcomes if not isinstance(o, Exception)
        )
        assert_stock_consistent(first)
        assert_stock_consistent(second)


class TestBalanceRace:
    def test_concurrent_payouts_never_overdraw(self, organizer, admin, event, make_tier):
        tier = make_tier(price=1000, quantity=10)
        dependencies.point_of_sale().sell(admin, str(event.id), [CartLine(str(tier.id), 10)])

        def withdraw(index):
            return dependencies.wallet_service().request_payout(
                organizer, 4000, "wave", "+221770000000"
            )

        outcomes = _race(withdraw)

        assert sum(1 for o in outcomes if isinstance(o, InsufficientBalanceError)) == WORKERS - 2
        assert dependencies.wallet_service().balance(organizer.email) == 2000
