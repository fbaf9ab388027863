"""Django ORM implementation of the ticketing stores.

Row locks use ``select_for_update``; they are real row locks on PostgreSQL
and degrade to whole-database serialization on SQLite.
"""

import logging
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from ticketing import models
from ticketing.domain import (
    Agent,
    AgentId,
    Booking,
    BookingId,
    Buyer,
    Cagnotte,
    CagnotteId,
    CagnottePayout,
    Capacity,
    CheckInStats,
    Contribution,
    ContributionId,
    Event,
    EventId,
    LedgerEntry,
    Money,
    Payout,
    PayoutId,
    PromoType,
    Promotion,
    TicketTier,
    TicketTierId,
)
from ticketing.domain.statuses import (
    COMMITTED_PAYOUT_STATUSES,
    SETTLED_BOOKING_STATUSES,
    AgentStatus,
    BookingStatus,
    CagnotteStatus,
    ContributionStatus,
    PaymentMethod,
    PayoutMethod,
    PayoutStatus,
    SalesChannel,
)
from ticketing.stores.interfaces import (
    AgentStore,
    BookingStore,
    CagnotteStore,
    EventStore,
    PayoutStore,
    TierStore,
)

logger = logging.getLogger(__name__)

_SETTLED = [status.value for status in SETTLED_BOOKING_STATUSES]
_COMMITTED = [status.value for status in COMMITTED_PAYOUT_STATUSES]


def organizer_row(email: str) -> models.Organizer:
    """Return the organizer for ``email`` in any letter case, creating it if missing."""
    email = email.strip()
    organizer = models.Organizer.objects.filter(email__iexact=email).first()
    if organizer is None:
        organizer = models.Organizer.objects.create(email=email.lower())
    return organizer


def _to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        organizer_email=row.organizer.email,
        name=row.name,
        location=row.location,
        starts_at=row.starts_at,
        created_at=row.created_at,
    )


def _to_tier(row: models.TicketTier) -> TicketTier:
    return TicketTier(
        id=TicketTierId(row.id),
        event_id=EventId(row.event_id),
        name=row.name,
        price=Money(row.price),
        quantity=Capacity(row.quantity),
        available=Capacity(row.available),
        promotion=Promotion(
            type=PromoType(row.promo_type),
            value=row.promo_value,
            code=row.promo_code,
        ),
    )


def _to_booking(row: models.Booking) -> Booking:
    return Booking(
        id=BookingId(row.id),
        event_id=EventId(row.event_id),
        ticket_tier_id=TicketTierId(row.ticket_tier_id) if row.ticket_tier_id else None,
        quantity=row.quantity,
        total_amount=Money(row.total_amount),
        status=BookingStatus(row.status),
        channel=SalesChannel(row.channel),
        buyer=Buyer(name=row.buyer_name, email=row.buyer_email, phone=row.buyer_phone),
        payment_method=PaymentMethod(row.payment_method) if row.payment_method else None,
        customer_subject=row.customer_subject,
        previous_status=BookingStatus(row.previous_status) if row.previous_status else None,
        checked_in=row.checked_in,
        checked_in_at=row.checked_in_at,
        created_at=row.created_at,
    )


def _to_payout(row: models.Payout) -> Payout:
    return Payout(
        id=PayoutId(row.id),
        organizer_email=row.organizer.email,
        amount=Money(row.amount),
        method=PayoutMethod(row.method),
        destination=row.destination,
        status=PayoutStatus(row.status),
        note=row.note,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_cagnotte(row: models.Cagnotte) -> Cagnotte:
    return Cagnotte(
        id=CagnotteId(row.id),
        organizer_email=row.organizer.email,
        title=row.title,
        goal_amount=Money(row.goal_amount),
        min_contribution=Money(row.min_contribution),
        status=CagnotteStatus(row.status),
        description=row.description,
        admin_notes=row.admin_notes,
        rejection_reason=row.rejection_reason,
        paid_out_amount=Money(row.paid_out_amount),
        validated_at=row.validated_at,
        closed_at=row.closed_at,
        created_at=row.created_at,
    )


def _to_contribution(row: models.CagnotteContribution) -> Contribution:
    return Contribution(
        id=ContributionId(row.id),
        cagnotte_id=CagnotteId(row.cagnotte_id),
        contributor_name=row.contributor_name,
        amount=Money(row.amount),
        status=ContributionStatus(row.status),
        contributor_email=row.contributor_email,
        contributor_phone=row.contributor_phone,
        payment_method=row.payment_method,
        message=row.message,
        is_anonymous=row.is_anonymous,
        created_at=row.created_at,
    )


def _to_agent(row: models.Agent) -> Agent:
    return Agent(
        id=AgentId(row.id),
        organizer_email=row.organizer.email,
        name=row.full_name,
        code=row.code,
        status=AgentStatus(row.status),
        all_events=row.all_events,
        event_ids=frozenset(EventId(event.pk) for event in row.events.all()),
        scans=row.scans,
        is_online=row.is_online,
        last_active_at=row.last_active_at,
        created_at=row.created_at,
    )


class DjangoTransactionalStore:
    """Transaction primitives backed by the default database connection."""

    def atomic(self) -> AbstractContextManager[None]:
        return transaction.atomic()

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback, robust=True)


class DjangoEventStore(DjangoTransactionalStore, EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.select_related("organizer").filter(pk=event_id.value).first()
        return _to_event(row) if row else None

    def list_events_for_organizer(self, organizer_email: str) -> list[Event]:
        rows = models.Event.objects.select_related("organizer").filter(
            organizer__email__iexact=organizer_email
        )
        return [_to_event(row) for row in rows]

    def owned_event_ids(self, organizer_email: str, event_ids: Iterable[EventId]) -> set[EventId]:
        wanted = [event_id.value for event_id in event_ids]
        owned = models.Event.objects.filter(
            pk__in=wanted, organizer__email__iexact=organizer_email
        ).values_list("id", flat=True)
        return {EventId(pk) for pk in owned}


class DjangoTierStore(DjangoTransactionalStore, TierStore):
    def get_tier(self, tier_id: TicketTierId) -> TicketTier | None:
        row = models.TicketTier.objects.filter(pk=tier_id.value).first()
        return _to_tier(row) if row else None

    def lock_tier(self, tier_id: TicketTierId) -> TicketTier | None:
        row = models.TicketTier.objects.select_for_update().filter(pk=tier_id.value).first()
        return _to_tier(row) if row else None

    def save_available(self, tier: TicketTier) -> None:
        models.TicketTier.objects.filter(pk=tier.id.value).update(available=tier.available.value)


class DjangoBookingStore(DjangoTransactionalStore, BookingStore):
    def get_booking(self, booking_id: BookingId) -> Booking | None:
        row = models.Booking.objects.filter(pk=booking_id.value).first()
        return _to_booking(row) if row else None

    def lock_booking(self, booking_id: BookingId) -> Booking | None:
        row = models.Booking.objects.select_for_update().filter(pk=booking_id.value).first()
        return _to_booking(row) if row else None

    def add_booking(self, booking: Booking) -> Booking:
        row = models.Booking.objects.create(
            id=booking.id.value,
            event_id=booking.event_id.value,
            ticket_tier_id=booking.ticket_tier_id.value if booking.ticket_tier_id else None,
            quantity=booking.quantity,
            total_amount=booking.total_amount.amount,
            status=booking.status.value,
            channel=booking.channel.value,
            payment_method=booking.payment_method.value if booking.payment_method else None,
            customer_subject=booking.customer_subject,
            buyer_name=booking.buyer.name,
            buyer_email=booking.buyer.email,
            buyer_phone=booking.buyer.phone,
        )
        return _to_booking(row)

    def save_booking(self, booking: Booking) -> Booking:
        models.Booking.objects.filter(pk=booking.id.value).update(
            status=booking.status.value,
            previous_status=booking.previous_status.value if booking.previous_status else None,
            checked_in=booking.checked_in,
            checked_in_at=booking.checked_in_at,
            updated_at=timezone.now(),
        )
        return _to_booking(models.Booking.objects.get(pk=booking.id.value))

    def list_for_event(self, event_id: EventId) -> list[Booking]:
        rows = models.Booking.objects.filter(event_id=event_id.value)
        return [_to_booking(row) for row in rows]

    def check_in_stats(self, event_id: EventId) -> CheckInStats:
        counts = models.Booking.objects.filter(
            event_id=event_id.value, status__in=_SETTLED
        ).aggregate(
            total=Count("id"),
            scanned=Count("id", filter=Q(checked_in=True)),
        )
        return CheckInStats(total=counts["total"], scanned=counts["scanned"])

    def settled_totals(self, organizer_email: str) -> tuple[int, int]:
        totals = models.Booking.objects.filter(
            event__organizer__email__iexact=organizer_email, status__in=_SETTLED
        ).aggregate(amount=Sum("total_amount"), count=Count("id"))
        return totals["amount"] or 0, totals["count"]

    def recent_transactions(self, organizer_email: str, limit: int) -> list[LedgerEntry]:
        rows = (
            models.Booking.objects.select_related("event")
            .filter(event__organizer__email__iexact=organizer_email)
            .order_by("-created_at")[:limit]
        )
        return [
            LedgerEntry(
                booking_id=BookingId(row.id),
                title=row.event.name,
                amount=row.total_amount,
                status=BookingStatus(row.status),
                created_at=row.created_at,
            )
            for row in rows
        ]


class DjangoPayoutStore(DjangoTransactionalStore, PayoutStore):
    def lock_organizer(self, organizer_email: str) -> None:
        organizer = organizer_row(organizer_email)
        models.Organizer.objects.select_for_update().get(pk=organizer.pk)

    def committed_total(self, organizer_email: str) -> int:
        total = models.Payout.objects.filter(
            organizer__email__iexact=organizer_email, status__in=_COMMITTED
        ).aggregate(total=Sum("amount"))["total"]
        return total or 0

    def add_payout(self, payout: Payout) -> Payout:
        row = models.Payout.objects.create(
            id=payout.id.value,
            organizer=organizer_row(payout.organizer_email),
            amount=payout.amount.amount,
            method=payout.method.value,
            destination=payout.destination,
            status=payout.status.value,
            note=payout.note,
        )
        return _to_payout(row)

    def lock_payout(self, payout_id: PayoutId) -> Payout | None:
        row = (
            models.Payout.objects.select_for_update(of=("self",))
            .select_related("organizer")
            .filter(pk=payout_id.value)
            .first()
        )
        return _to_payout(row) if row else None

    def save_payout(self, payout: Payout) -> Payout:
        row = models.Payout.objects.select_related("organizer").get(pk=payout.id.value)
        row.status = payout.status.value
        row.note = payout.note
        row.save(update_fields=["status", "note", "updated_at"])
        return _to_payout(row)

    def list_for_organizer(self, organizer_email: str, limit: int) -> list[Payout]:
        rows = models.Payout.objects.select_related("organizer").filter(
            organizer__email__iexact=organizer_email
        )[:limit]
        return [_to_payout(row) for row in rows]

    def list_all(self, status: PayoutStatus | None = None) -> list[Payout]:
        rows = models.Payout.objects.select_related("organizer")
        if status is not None:
            rows = rows.filter(status=status.value)
        return [_to_payout(row) for row in rows]


class DjangoCagnotteStore(DjangoTransactionalStore, CagnotteStore):
    def add_cagnotte(self, cagnotte: Cagnotte) -> Cagnotte:
        row = models.Cagnotte.objects.create(
            id=cagnotte.id.value,
            organizer=organizer_row(cagnotte.organizer_email),
            title=cagnotte.title,
            description=cagnotte.description,
            goal_amount=cagnotte.goal_amount.amount,
            min_contribution=cagnotte.min_contribution.amount,
            status=cagnotte.status.value,
        )
        return _to_cagnotte(row)

    def get_cagnotte(self, cagnotte_id: CagnotteId) -> Cagnotte | None:
        row = (
            models.Cagnotte.objects.select_related("organizer")
            .filter(pk=cagnotte_id.value)
            .first()
        )
        return _to_cagnotte(row) if row else None

    def lock_cagnotte(self, cagnotte_id: CagnotteId) -> Cagnotte | None:
        row = (
            models.Cagnotte.objects.select_for_update(of=("self",))
            .select_related("organizer")
            .filter(pk=cagnotte_id.value)
            .first()
        )
        return _to_cagnotte(row) if row else None

    def save_cagnotte(self, cagnotte: Cagnotte) -> Cagnotte:
        row = models.Cagnotte.objects.select_related("organizer").get(pk=cagnotte.id.value)
        row.status = cagnotte.status.value
        row.admin_notes = cagnotte.admin_notes
        row.rejection_reason = cagnotte.rejection_reason
        row.paid_out_amount = cagnotte.paid_out_amount.amount
        row.validated_at = cagnotte.validated_at
        row.closed_at = cagnotte.closed_at
        row.save()
        return _to_cagnotte(row)

    def add_contribution(self, contribution: Contribution) -> Contribution:
        row = models.CagnotteContribution.objects.create(
            id=contribution.id.value,
            cagnotte_id=contribution.cagnotte_id.value,
            contributor_name=contribution.contributor_name,
            contributor_email=contribution.contributor_email,
            contributor_phone=contribution.contributor_phone,
            amount=contribution.amount.amount,
            payment_method=contribution.payment_method,
            message=contribution.message,
            is_anonymous=contribution.is_anonymous,
            status=contribution.status.value,
        )
        return _to_contribution(row)

    def get_contribution(self, contribution_id: ContributionId) -> Contribution | None:
        row = models.CagnotteContribution.objects.filter(pk=contribution_id.value).first()
        return _to_contribution(row) if row else None

    def lock_contribution(self, contribution_id: ContributionId) -> Contribution | None:
        row = (
            models.CagnotteContribution.objects.select_for_update()
            .filter(pk=contribution_id.value)
            .first()
        )
        return _to_contribution(row) if row else None

    def save_contribution(self, contribution: Contribution) -> Contribution:
        models.CagnotteContribution.objects.filter(pk=contribution.id.value).update(
            status=contribution.status.value
        )
        return _to_contribution(models.CagnotteContribution.objects.get(pk=contribution.id.value))

    def _completed(self, cagnotte_id: CagnotteId):
        return models.CagnotteContribution.objects.filter(
            cagnotte_id=cagnotte_id.value, status=ContributionStatus.COMPLETED.value
        )

    def collected_amount(self, cagnotte_id: CagnotteId) -> int:
        return self._completed(cagnotte_id).aggregate(total=Sum("amount"))["total"] or 0

    def contributor_count(self, cagnotte_id: CagnotteId) -> int:
        return self._completed(cagnotte_id).count()

    def completed_contributions(self, cagnotte_id: CagnotteId) -> list[Contribution]:
        return [_to_contribution(row) for row in self._completed(cagnotte_id)]

    def mark_contributions_paid_out(self, cagnotte_id: CagnotteId) -> int:
        return self._completed(cagnotte_id).update(status=ContributionStatus.PAID_OUT.value)

    def has_completed_payout(self, cagnotte_id: CagnotteId) -> bool:
        return models.CagnottePayout.objects.filter(
            cagnotte_id=cagnotte_id.value, status="completed"
        ).exists()

    def add_cagnotte_payout(self, payout: CagnottePayout) -> CagnottePayout:
        row = models.CagnottePayout.objects.create(
            cagnotte_id=payout.cagnotte_id.value,
            organizer=organizer_row(payout.organizer_email),
            amount=payout.amount.amount,
            payment_method=payout.payment_method,
            payment_reference=payout.payment_reference,
            notes=payout.notes,
            receipt_number=payout.receipt_number,
            admin_subject=payout.admin_subject,
        )
        return CagnottePayout(
            id=str(row.id),
            cagnotte_id=payout.cagnotte_id,
            organizer_email=row.organizer.email,
            amount=Money(row.amount),
            payment_method=row.payment_method,
            receipt_number=row.receipt_number,
            admin_subject=row.admin_subject,
            payment_reference=row.payment_reference,
            notes=row.notes,
            processed_at=row.processed_at,
        )

    def wallet_totals(self, organizer_email: str) -> dict[str, int]:
        owned = Q(cagnotte__organizer__email__iexact=organizer_email)
        received = models.CagnotteContribution.objects.filter(
            owned,
            status__in=[ContributionStatus.COMPLETED.value, ContributionStatus.PAID_OUT.value],
        ).aggregate(
            collected=Sum("amount"),
            contributors=Count(
                "contributor_email",
                distinct=True,
                filter=Q(status=ContributionStatus.COMPLETED.value),
            ),
        )
        withdrawn = models.CagnottePayout.objects.filter(
            organizer__email__iexact=organizer_email
        ).aggregate(total=Sum("amount"))["total"]
        online = models.Cagnotte.objects.filter(
            organizer__email__iexact=organizer_email, status=CagnotteStatus.ONLINE.value
        ).count()
        return {
            "cagnotte_count": online,
            "contributor_count": received["contributors"],
            "total_collected": received["collected"] or 0,
            "total_withdrawn": withdrawn or 0,
        }


class DjangoAgentStore(DjangoTransactionalStore, AgentStore):
    def _rows(self):
        return models.Agent.objects.select_related("organizer")

    def add_agent(self, agent: Agent) -> Agent:
        row = models.Agent.objects.create(
            id=agent.id.value,
            organizer=organizer_row(agent.organizer_email),
            full_name=agent.name,
            code=agent.code,
            status=agent.status.value,
            all_events=agent.all_events,
        )
        row.events.set([event_id.value for event_id in agent.event_ids])
        return _to_agent(row)

    def get_agent(self, agent_id: AgentId) -> Agent | None:
        row = self._rows().filter(pk=agent_id.value).first()
        return _to_agent(row) if row else None

    def lock_agent(self, agent_id: AgentId) -> Agent | None:
        row = self._rows().select_for_update(of=("self",)).filter(pk=agent_id.value).first()
        return _to_agent(row) if row else None

    def get_agent_by_code(self, code: str) -> Agent | None:
        row = self._rows().filter(code=code.strip().upper()).first()
        return _to_agent(row) if row else None

    def save_agent(self, agent: Agent) -> Agent:
        row = self._rows().get(pk=agent.id.value)
        row.full_name = agent.name
        row.code = agent.code
        row.status = agent.status.value
        row.all_events = agent.all_events
        row.scans = agent.scans
        row.is_online = agent.is_online
        row.last_active_at = agent.last_active_at
        row.save()
        row.events.set([event_id.value for event_id in agent.event_ids])
        return _to_agent(row)

    def delete_agent(self, agent_id: AgentId) -> None:
        deleted, _ = models.Agent.objects.filter(pk=agent_id.value).delete()
        logger.debug("Deleted %d agent rows for %s", deleted, agent_id)

    def list_for_organizer(self, organizer_email: str) -> list[Agent]:
        rows = self._rows().filter(organizer__email__iexact=organizer_email).prefetch_related(
            "events"
        )
        return [_to_agent(row) for row in rows]
