"""Cagnotte (fundraising pot) engine.

Only ``completed`` contributions count toward a cagnotte's collected total.
Lock order: the cagnotte row, then contribution rows.
"""

import logging
import secrets
import string
from collections.abc import Callable
from dataclasses import dataclass, replace
from uuid import uuid4

from ticketing.domain import (
    Cagnotte,
    CagnotteId,
    CagnottePayout,
    Contribution,
    ContributionId,
    Money,
    Principal,
)
from ticketing.domain.errors import (
    AlreadyPaidOutError,
    CagnotteClosedError,
    CagnotteNotFoundError,
    ContributionNotFoundError,
    InvalidInputError,
    InvalidTransitionError,
    NotOwnerError,
)
from ticketing.domain.statuses import CagnotteStatus, ContributionStatus, Role
from ticketing.services.common import (
    parse_id,
    positive_int,
    require_role,
    required_text,
    utcnow,
)
from ticketing.stores.interfaces import CagnotteStore

logger = logging.getLogger(__name__)

RECEIPT_PREFIX = "REC"
RECEIPT_ALPHABET = string.ascii_uppercase + string.digits

DisbursedCallback = Callable[[Cagnotte, CagnottePayout], None]


def generate_receipt_number() -> str:
    stamp = utcnow().strftime("%Y%m%d%H%M%S")
    suffix = "".join(secrets.choice(RECEIPT_ALPHABET) for _ in range(6))
    return f"{RECEIPT_PREFIX}-{stamp}-{suffix}"


@dataclass(frozen=True)
class CagnotteSummary:
    cagnotte: Cagnotte
    collected: int
    contributor_count: int


class CagnotteService:
    """Service for cagnottes, their contributions and disbursement."""

    def __init__(
        self,
        cagnottes: CagnotteStore,
        on_disbursed: DisbursedCallback | None = None,
        receipt_factory: Callable[[], str] = generate_receipt_number,
    ) -> None:
        self._cagnottes = cagnottes
        self._on_disbursed = on_disbursed
        self._receipt_factory = receipt_factory

    def _locked(self, cagnotte_id: str) -> Cagnotte:
        cagnotte = self._cagnottes.lock_cagnotte(parse_id(CagnotteId, cagnotte_id, "cagnotte"))
        if cagnotte is None:
            raise CagnotteNotFoundError(cagnotte_id)
        return cagnotte

    def create(
        self,
        principal: Principal,
        title: str,
        goal_amount: int,
        min_contribution: int = 0,
        description: str = "",
    ) -> Cagnotte:
        require_role(principal, Role.ORGANIZER)
        title = required_text(title, "title")
        goal = positive_int(goal_amount, "goal_amount")
        if not isinstance(min_contribution, int) or isinstance(min_contribution, bool):
            raise InvalidInputError("min_contribution must be a non-negative integer")
        if min_contribution < 0:
            raise InvalidInputError("min_contribution must be a non-negative integer")
        with self._cagnottes.atomic():
            cagnotte = self._cagnottes.add_cagnotte(
                Cagnotte(
                    id=CagnotteId(uuid4()),
                    organizer_email=principal.email,
                    title=title,
                    goal_amount=Money(goal),
                    min_contribution=Money(min_contribution),
                    description=description or "",
                )
            )
        logger.info("Cagnotte %s created by %s", cagnotte.id, principal.subject_id)
        return cagnotte

    def get(self, cagnotte_id: str) -> CagnotteSummary:
        parsed = parse_id(CagnotteId, cagnotte_id, "cagnotte")
        cagnotte = self._cagnottes.get_cagnotte(parsed)
        if cagnotte is None:
            raise CagnotteNotFoundError(cagnotte_id)
        return CagnotteSummary(
            cagnotte=cagnotte,
            collected=self._cagnottes.collected_amount(parsed),
            contributor_count=self._cagnottes.contributor_count(parsed),
        )

    def list_contributions(self, cagnotte_id: str) -> list[Contribution]:
        """Completed contributions, newest first. Read ``public_name`` for display."""
        summary = self.get(cagnotte_id)
        return self._cagnottes.completed_contributions(summary.cagnotte.id)

    def contribute(
        self,
        cagnotte_id: str,
        contributor_name: str,
        amount: int,
        contributor_email: str | None = None,
        contributor_phone: str | None = None,
        message: str | None = None,
        is_anonymous: bool = False,
        payment_method: str = "wave",
    ) -> Contribution:
        """Record a ``pending`` contribution; it counts once confirmed.

        Raises:
            CagnotteClosedError: If the cagnotte is not online.
            InvalidInputError: If the amount is below the cagnotte's minimum.
        """
        name = required_text(contributor_name, "contributor_name")
        amount = positive_int(amount, "amount")
        with self._cagnottes.atomic():
            cagnotte = self._locked(cagnotte_id)
            if cagnotte.status is not CagnotteStatus.ONLINE:
                raise CagnotteClosedError(cagnotte.status)
            if amount < cagnotte.min_contribution.amount:
                raise InvalidInputError(
                    f"Minimum contribution is {cagnotte.min_contribution.amount} XOF"
                )
            contribution = self._cagnottes.add_contribution(
                Contribution(
                    id=ContributionId(uuid4()),
                    cagnotte_id=cagnotte.id,
                    contributor_name=name,
                    amount=Money(amount),
                    contributor_email=contributor_email or None,
                    contributor_phone=contributor_phone or None,
                    payment_method=payment_method or "wave",
                    message=message or None,
                    is_anonymous=bool(is_anonymous),
                )
            )
        logger.info("Contribution %s pending on cagnotte %s", contribution.id, cagnotte.id)
        return contribution

    def confirm_contribution(self, principal: Principal, contribution_id: str) -> Contribution:
        """Flip a pending contribution to ``completed`` once payment is confirmed."""
        require_role(principal, Role.ADMIN)
        parsed = parse_id(ContributionId, contribution_id, "contribution")
        found = self._cagnottes.get_contribution(parsed)
        if found is None:
            raise ContributionNotFoundError(contribution_id)
        with self._cagnottes.atomic():
            cagnotte = self._locked(str(found.cagnotte_id))
            contribution = self._cagnottes.lock_contribution(parsed)
            if contribution is None:
                raise ContributionNotFoundError(contribution_id)
            if contribution.status is ContributionStatus.COMPLETED:
                return contribution
            if contribution.status is ContributionStatus.PAID_OUT:
                raise AlreadyPaidOutError()
            if cagnotte.status is CagnotteStatus.COMPLETED:
                raise CagnotteClosedError(cagnotte.status)
            contribution = self._cagnottes.save_contribution(
                replace(contribution, status=ContributionStatus.COMPLETED)
            )
        logger.info("Contribution %s completed", contribution.id)
        return contribution

    def request_payout(self, principal: Principal, cagnotte_id: str) -> Cagnotte:
        """Ask for the pot's collected funds; moves the cagnotte to ``pending_payout``."""
        require_role(principal, Role.ORGANIZER)
        with self._cagnottes.atomic():
            cagnotte = self._locked(cagnotte_id)
            if not principal.owns(cagnotte.organizer_email):
                raise NotOwnerError()
            if cagnotte.status is not CagnotteStatus.ONLINE:
                raise InvalidTransitionError(
                    "cagnotte", cagnotte.status, CagnotteStatus.PENDING_PAYOUT
                )
            if self._cagnottes.collected_amount(cagnotte.id) <= 0:
                raise InvalidInputError("No collected funds to pay out")
            cagnotte = self._cagnottes.save_cagnotte(
                cagnotte.transitioned(CagnotteStatus.PENDING_PAYOUT, utcnow())
            )
        logger.info("Payout requested for cagnotte %s", cagnotte.id)
        return cagnotte

    def transition_status(
        self,
        principal: Principal,
        cagnotte_id: str,
        status: str,
        admin_notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> Cagnotte:
        """Admin moderation of the cagnotte lifecycle.

        ``completed`` is only reached through ``disburse``.
        """
        require_role(principal, Role.ADMIN)
        try:
            target = CagnotteStatus(status)
        except ValueError:
            raise InvalidInputError(f"Unknown cagnotte status: {status}") from None
        if target is CagnotteStatus.COMPLETED:
            raise InvalidInputError("A cagnotte is completed by disbursing its funds")
        with self._cagnottes.atomic():
            cagnotte = self._locked(cagnotte_id)
            previous = cagnotte.status
            cagnotte = self._cagnottes.save_cagnotte(
                cagnotte.transitioned(target, utcnow(), admin_notes, rejection_reason)
            )
        logger.info("Cagnotte %s moved from %s to %s", cagnotte.id, previous, cagnotte.status)
        return cagnotte

    def disburse(
        self,
        principal: Principal,
        cagnotte_id: str,
        payment_method: str,
        payment_reference: str | None = None,
        notes: str | None = None,
    ) -> CagnottePayout:
        """Pay the collected funds out and close the cagnotte, in one transaction."""
        require_role(principal, Role.ADMIN)
        method = required_text(payment_method, "payment_method")
        with self._cagnottes.atomic():
            cagnotte = self._locked(cagnotte_id)
            if self._cagnottes.has_completed_payout(cagnotte.id):
                raise AlreadyPaidOutError()
            if cagnotte.status is not CagnotteStatus.PENDING_PAYOUT:
                raise InvalidTransitionError("cagnotte", cagnotte.status, CagnotteStatus.COMPLETED)
            collected = self._cagnottes.collected_amount(cagnotte.id)
            if collected <= 0:
                raise InvalidInputError("No collected funds to pay out")

            payout = self._cagnottes.add_cagnotte_payout(
                CagnottePayout(
                    id="",
                    cagnotte_id=cagnotte.id,
                    organizer_email=cagnotte.organizer_email,
                    amount=Money(collected),
                    payment_method=method,
                    receipt_number=self._receipt_factory(),
                    admin_subject=principal.subject_id,
                    payment_reference=payment_reference or None,
                    notes=notes or None,
                )
            )
            self._cagnottes.mark_contributions_paid_out(cagnotte.id)
            closed = cagnotte.transitioned(CagnotteStatus.COMPLETED, utcnow())
            cagnotte = self._cagnottes.save_cagnotte(
                replace(closed, paid_out_amount=Money(collected))
            )
            if self._on_disbursed is not None:
                self._cagnottes.on_commit(lambda: self._on_disbursed(cagnotte, payout))
        logger.info(
            "Cagnotte %s disbursed: %d, receipt %s", cagnotte.id, collected, payout.receipt_number
        )
        return payout

    def wallet(self, principal: Principal) -> dict[str, int]:
        """Cagnotte totals across the organizer's pots."""
        require_role(principal, Role.ORGANIZER)
        totals = self._cagnottes.wallet_totals(principal.email)
        return {
            **totals,
            "balance": max(0, totals["total_collected"] - totals["total_withdrawn"]),
        }
