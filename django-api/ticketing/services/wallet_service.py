"""Payout / Wallet Ledger.

An organizer's balance is derived, never stored:

    settled booking revenue - payouts pending, approved, processing or paid

Payout requests for one organizer run in a critical section keyed by the
organizer so two concurrent requests cannot both pass the balance check.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from uuid import uuid4

from ticketing.domain import LedgerEntry, Money, Payout, PayoutId, Principal
from ticketing.domain.errors import (
    InsufficientBalanceError,
    InvalidInputError,
    PayoutNotFoundError,
)
from ticketing.domain.statuses import PayoutMethod, PayoutStatus, Role
from ticketing.services.common import parse_id, positive_int, require_role, required_text
from ticketing.stores.interfaces import BookingStore, PayoutStore

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30

PayoutCallback = Callable[[Payout, PayoutStatus], None]


@dataclass(frozen=True)
class WalletSummary:
    total_sales: int
    paid_count: int
    payout_sum: int
    available: int
    payouts: list[Payout]
    transactions: list[LedgerEntry]


class WalletService:
    """Service for organizer balances and payout requests."""

    def __init__(
        self,
        bookings: BookingStore,
        payouts: PayoutStore,
        on_status_changed: PayoutCallback | None = None,
    ) -> None:
        self._bookings = bookings
        self._payouts = payouts
        self._on_status_changed = on_status_changed

    def balance(self, organizer_email: str) -> int:
        """Current balance; negative when payouts exceed settled revenue."""
        total_sales, _ = self._bookings.settled_totals(organizer_email)
        return total_sales - self._payouts.committed_total(organizer_email)

    def summary(self, principal: Principal) -> WalletSummary:
        require_role(principal, Role.ORGANIZER)
        total_sales, paid_count = self._bookings.settled_totals(principal.email)
        payout_sum = self._payouts.committed_total(principal.email)
        return WalletSummary(
            total_sales=total_sales,
            paid_count=paid_count,
            payout_sum=payout_sum,
            available=max(0, total_sales - payout_sum),
            payouts=self._payouts.list_for_organizer(principal.email, HISTORY_LIMIT),
            transactions=self._bookings.recent_transactions(principal.email, HISTORY_LIMIT),
        )

    def request_payout(
        self, principal: Principal, amount: int, method: str, destination: str
    ) -> Payout:
        """Create a ``pending`` payout if ``amount`` fits the balance at request time.

        Raises:
            InsufficientBalanceError: Carrying the computed available balance.
        """
        require_role(principal, Role.ORGANIZER)
        amount = positive_int(amount, "amount")
        try:
            payout_method = PayoutMethod.parse(method)
        except ValueError:
            raise InvalidInputError("method must be wave, orange_money or bank") from None
        destination = required_text(destination, "destination")

        with self._payouts.atomic():
            self._payouts.lock_organizer(principal.email)
            available = self.balance(principal.email)
            if amount > available:
                logger.info(
                    "Payout of %d refused for %s: balance %d",
                    amount,
                    principal.subject_id,
                    available,
                )
                raise InsufficientBalanceError(available=max(0, available), requested=amount)
            payout = self._payouts.add_payout(
                Payout(
                    id=PayoutId(uuid4()),
                    organizer_email=principal.email,
                    amount=Money(amount),
                    method=payout_method,
                    destination=destination,
                )
            )
        logger.info("Payout %s requested by %s: %d", payout.id, principal.subject_id, amount)
        return payout

    def list_payouts(self, principal: Principal) -> list[Payout]:
        require_role(principal, Role.ORGANIZER)
        return self._payouts.list_for_organizer(principal.email, HISTORY_LIMIT)

    def list_all(self, principal: Principal, status: str | None = None) -> list[Payout]:
        require_role(principal, Role.ADMIN)
        if not status:
            return self._payouts.list_all()
        try:
            return self._payouts.list_all(PayoutStatus(status.strip().lower()))
        except ValueError:
            raise InvalidInputError(f"Unknown payout status: {status}") from None

    def transition_payout(
        self, principal: Principal, payout_id: str, status: str, note: str | None = None
    ) -> Payout:
        """Move a payout forward in its lifecycle. The balance is not re-checked.

        Re-applying the current status only updates the note.
        """
        require_role(principal, Role.ADMIN)
        parsed = parse_id(PayoutId, payout_id, "payout")
        try:
            target = PayoutStatus((status or "").strip().lower())
        except ValueError:
            raise InvalidInputError(f"Unknown payout status: {status}") from None

        with self._payouts.atomic():
            payout = self._payouts.lock_payout(parsed)
            if payout is None:
                raise PayoutNotFoundError(payout_id)
            previous = payout.status
            payout = self._payouts.save_payout(payout.transitioned(target, note))
            if self._on_status_changed is not None and previous is not payout.status:
                changed = payout
                self._payouts.on_commit(lambda: self._on_status_changed(changed, previous))
        logger.info("Payout %s moved from %s to %s", payout.id, previous, payout.status)
        return payout
