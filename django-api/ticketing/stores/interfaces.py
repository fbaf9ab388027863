"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Every store exposes the
transaction primitives of the backing database so services can open one
explicit transaction per logical operation without knowing the ORM.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from contextlib import AbstractContextManager

from ticketing.domain import (
    Agent,
    AgentId,
    Booking,
    BookingId,
    Cagnotte,
    CagnotteId,
    CagnottePayout,
    CheckInStats,
    Contribution,
    ContributionId,
    Event,
    EventId,
    LedgerEntry,
    Payout,
    PayoutId,
    TicketTier,
    TicketTierId,
)
from ticketing.domain.statuses import PayoutStatus


class TransactionalStore(ABC):
    """Transaction boundary shared by every store."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Open a transaction; exiting with an exception rolls it back."""
        ...

    @abstractmethod
    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` after the current transaction commits.

        Callback failures must never undo the committed work.
        """
        ...


class EventStore(TransactionalStore):
    """Interface for event lookups."""

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def list_events_for_organizer(self, organizer_email: str) -> list[Event]:
        """Return the organizer's events, newest first."""
        ...

    @abstractmethod
    def owned_event_ids(self, organizer_email: str, event_ids: Iterable[EventId]) -> set[EventId]:
        """Return the subset of ``event_ids`` owned by the organizer."""
        ...


class TierStore(TransactionalStore):
    """Interface for the Inventory Ledger rows."""

    @abstractmethod
    def get_tier(self, tier_id: TicketTierId) -> TicketTier | None:
        """Return a tier without locking it."""
        ...

    @abstractmethod
    def lock_tier(self, tier_id: TicketTierId) -> TicketTier | None:
        """Return the tier with its row locked until the transaction ends.

        Must be called inside ``atomic()``; the value returned is the latest
        committed state at lock time.
        """
        ...

    @abstractmethod
    def save_available(self, tier: TicketTier) -> None:
        """Persist ``tier.available``. ``quantity`` is never written."""
        ...


class BookingStore(TransactionalStore):
    """Interface for booking records."""

    @abstractmethod
    def get_booking(self, booking_id: BookingId) -> Booking | None: ...

    @abstractmethod
    def lock_booking(self, booking_id: BookingId) -> Booking | None:
        """Return the booking with its row locked until the transaction ends."""
        ...

    @abstractmethod
    def add_booking(self, booking: Booking) -> Booking: ...

    @abstractmethod
    def save_booking(self, booking: Booking) -> Booking:
        """Persist status and check-in fields of an existing booking."""
        ...

    @abstractmethod
    def list_for_event(self, event_id: EventId) -> list[Booking]: ...

    @abstractmethod
    def check_in_stats(self, event_id: EventId) -> CheckInStats:
        """Count settled bookings of an event and how many are checked in."""
        ...

    @abstractmethod
    def settled_totals(self, organizer_email: str) -> tuple[int, int]:
        """Return (sum of amounts, count) of settled bookings across the organizer's events."""
        ...

    @abstractmethod
    def recent_transactions(self, organizer_email: str, limit: int) -> list[LedgerEntry]: ...


class PayoutStore(TransactionalStore):
    """Interface for organizer payout requests."""

    @abstractmethod
    def lock_organizer(self, organizer_email: str) -> None:
        """Enter the per-organizer critical section for the current transaction."""
        ...

    @abstractmethod
    def committed_total(self, organizer_email: str) -> int:
        """Sum of payouts that are pending, approved, processing or paid."""
        ...

    @abstractmethod
    def add_payout(self, payout: Payout) -> Payout: ...

    @abstractmethod
    def lock_payout(self, payout_id: PayoutId) -> Payout | None: ...

    @abstractmethod
    def save_payout(self, payout: Payout) -> Payout: ...

    @abstractmethod
    def list_for_organizer(self, organizer_email: str, limit: int) -> list[Payout]: ...

    @abstractmethod
    def list_all(self, status: PayoutStatus | None = None) -> list[Payout]: ...


class CagnotteStore(TransactionalStore):
    """Interface for fundraising pots, their contributions and disbursements."""

    @abstractmethod
    def add_cagnotte(self, cagnotte: Cagnotte) -> Cagnotte: ...

    @abstractmethod
    def get_cagnotte(self, cagnotte_id: CagnotteId) -> Cagnotte | None: ...

    @abstractmethod
    def lock_cagnotte(self, cagnotte_id: CagnotteId) -> Cagnotte | None: ...

    @abstractmethod
    def save_cagnotte(self, cagnotte: Cagnotte) -> Cagnotte: ...

    @abstractmethod
    def add_contribution(self, contribution: Contribution) -> Contribution: ...

    @abstractmethod
    def get_contribution(self, contribution_id: ContributionId) -> Contribution | None: ...

    @abstractmethod
    def lock_contribution(self, contribution_id: ContributionId) -> Contribution | None: ...

    @abstractmethod
    def save_contribution(self, contribution: Contribution) -> Contribution: ...

    @abstractmethod
    def collected_amount(self, cagnotte_id: CagnotteId) -> int:
        """Sum of completed contributions only."""
        ...

    @abstractmethod
    def contributor_count(self, cagnotte_id: CagnotteId) -> int: ...

    @abstractmethod
    def completed_contributions(self, cagnotte_id: CagnotteId) -> list[Contribution]: ...

    @abstractmethod
    def mark_contributions_paid_out(self, cagnotte_id: CagnotteId) -> int: ...

    @abstractmethod
    def has_completed_payout(self, cagnotte_id: CagnotteId) -> bool: ...

    @abstractmethod
    def add_cagnotte_payout(self, payout: CagnottePayout) -> CagnottePayout: ...

    @abstractmethod
    def wallet_totals(self, organizer_email: str) -> dict[str, int]:
        """Return online count, distinct contributors, collected and paid out totals."""
        ...


class AgentStore(TransactionalStore):
    """Interface for check-in agents and their event access scope."""

    @abstractmethod
    def add_agent(self, agent: Agent) -> Agent: ...

    @abstractmethod
    def get_agent(self, agent_id: AgentId) -> Agent | None: ...

    @abstractmethod
    def lock_agent(self, agent_id: AgentId) -> Agent | None: ...

    @abstractmethod
    def get_agent_by_code(self, code: str) -> Agent | None: ...

    @abstractmethod
    def save_agent(self, agent: Agent) -> Agent:
        """Persist name, code, status, scope, counters and liveness."""
        ...

    @abstractmethod
    def delete_agent(self, agent_id: AgentId) -> None: ...

    @abstractmethod
    def list_for_organizer(self, organizer_email: str) -> list[Agent]: ...
