"""Agent access control - check-in staff, their event scope and door scans.

Lock order for a scan: the agent row, then the booking row.
"""

import logging
import secrets
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import timedelta
from uuid import uuid4

from ticketing.domain import (
    Agent,
    AgentId,
    Booking,
    BookingId,
    CheckInStats,
    Event,
    EventId,
    Principal,
)
from ticketing.domain.errors import (
    AgentBlockedError,
    AgentNotFoundError,
    BookingNotFoundError,
    EventNotFoundError,
    ForbiddenError,
    InvalidInputError,
)
from ticketing.domain.models import AGENT_CODE_ALPHABET, AGENT_CODE_LENGTH, AGENT_CODE_PREFIX
from ticketing.domain.statuses import AgentStatus, Role
from ticketing.services.common import parse_id, require_role, required_text, utcnow
from ticketing.stores.interfaces import AgentStore, BookingStore, EventStore

logger = logging.getLogger(__name__)

DEFAULT_ONLINE_WINDOW = timedelta(seconds=120)
MAX_CODE_ATTEMPTS = 10

SCAN_SUCCESS = "success"
SCAN_ALREADY = "already"


def generate_agent_code() -> str:
    suffix = "".join(secrets.choice(AGENT_CODE_ALPHABET) for _ in range(AGENT_CODE_LENGTH))
    return f"{AGENT_CODE_PREFIX}{suffix}"


def ensure_agent_access(agent: Agent, event: Event) -> None:
    """Raise unless the agent may mutate check-in state for the event."""
    if not agent.is_active:
        raise AgentBlockedError()
    if not agent.can_access(event):
        raise ForbiddenError("Agent has no access to this event")


def require_active_agent(agents: AgentStore, principal: Principal, lock: bool = True) -> Agent:
    """Load the agent behind a scan session, locking its row by default."""
    require_role(principal, Role.AGENT)
    agent_id = parse_id(AgentId, principal.subject_id, "agent")
    agent = agents.lock_agent(agent_id) if lock else agents.get_agent(agent_id)
    if agent is None:
        raise ForbiddenError("Agent session is no longer valid")
    if not agent.is_active:
        raise AgentBlockedError()
    return agent


@dataclass(frozen=True)
class ScanResult:
    status: str
    booking: Booking
    event: Event
    stats: CheckInStats
    agent: Agent


@dataclass(frozen=True)
class AccessibleEvent:
    event: Event
    stats: CheckInStats


class AgentService:
    """Service for agent management and agent-side check-in."""

    def __init__(
        self,
        agents: AgentStore,
        events: EventStore,
        bookings: BookingStore,
        online_window: timedelta = DEFAULT_ONLINE_WINDOW,
        code_factory: Callable[[], str] = generate_agent_code,
    ) -> None:
        self._agents = agents
        self._events = events
        self._bookings = bookings
        self._online_window = online_window
        self._code_factory = code_factory

    def _unique_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self._code_factory()
            if self._agents.get_agent_by_code(code) is None:
                return code
        raise RuntimeError("Could not generate a unique agent code")

    def _owned_agent(self, principal: Principal, agent_id: str, lock: bool = False) -> Agent:
        require_role(principal, Role.ORGANIZER)
        parsed = parse_id(AgentId, agent_id, "agent")
        agent = self._agents.lock_agent(parsed) if lock else self._agents.get_agent(parsed)
        if agent is None or not principal.owns(agent.organizer_email):
            raise AgentNotFoundError(agent_id)
        return agent

    def _scope(
        self, principal: Principal, all_events: bool, event_ids: Iterable[str]
    ) -> frozenset[EventId]:
        if all_events:
            return frozenset()
        wanted = {parse_id(EventId, raw, "event") for raw in event_ids}
        if not wanted:
            return frozenset()
        owned = self._events.owned_event_ids(principal.email, wanted)
        if owned != wanted:
            raise ForbiddenError("Some events do not belong to you")
        return frozenset(wanted)

    def create(
        self,
        principal: Principal,
        name: str,
        all_events: bool = False,
        event_ids: Iterable[str] = (),
    ) -> Agent:
        require_role(principal, Role.ORGANIZER)
        name = required_text(name, "name")
        scope = self._scope(principal, all_events, event_ids)
        with self._agents.atomic():
            agent = self._agents.add_agent(
                Agent(
                    id=AgentId(uuid4()),
                    organizer_email=principal.email,
                    name=name,
                    code=self._unique_code(),
                    all_events=all_events,
                    event_ids=scope,
                )
            )
        logger.info("Agent %s created for %s", agent.id, principal.subject_id)
        return agent

    def list_agents(self, principal: Principal) -> list[Agent]:
        """Return the organizer's agents with ``is_online`` reflecting the heartbeat window."""
        require_role(principal, Role.ORGANIZER)
        now = utcnow()
        return [
            replace(agent, is_online=agent.online_at(now, self._online_window))
            for agent in self._agents.list_for_organizer(principal.email)
        ]

    def replace_access(
        self,
        principal: Principal,
        agent_id: str,
        all_events: bool,
        event_ids: Iterable[str] = (),
    ) -> Agent:
        """Replace the agent's whole event scope."""
        scope = self._scope(principal, all_events, event_ids)
        with self._agents.atomic():
            agent = self._owned_agent(principal, agent_id, lock=True)
            agent = self._agents.save_agent(
                replace(agent, all_events=all_events, event_ids=scope)
            )
        logger.info(
            "Agent %s access replaced: all_events=%s, %d events",
            agent.id,
            all_events,
            len(scope),
        )
        return agent

    def set_status(self, principal: Principal, agent_id: str, status: str) -> Agent:
        try:
            target = AgentStatus(status)
        except ValueError:
            raise InvalidInputError("status must be active or blocked") from None
        with self._agents.atomic():
            agent = self._owned_agent(principal, agent_id, lock=True)
            changes = {"status": target}
            if target is AgentStatus.BLOCKED:
                changes["is_online"] = False
            agent = self._agents.save_agent(replace(agent, **changes))
        logger.info("Agent %s status set to %s", agent.id, target)
        return agent

    def regenerate_code(self, principal: Principal, agent_id: str) -> Agent:
        with self._agents.atomic():
            agent = self._owned_agent(principal, agent_id, lock=True)
            agent = self._agents.save_agent(replace(agent, code=self._unique_code()))
        logger.info("Agent %s code regenerated", agent.id)
        return agent

    def delete(self, principal: Principal, agent_id: str) -> None:
        with self._agents.atomic():
            agent = self._owned_agent(principal, agent_id, lock=True)
            self._agents.delete_agent(agent.id)
        logger.info("Agent %s deleted by %s", agent.id, principal.subject_id)

    def login(self, code: str) -> Agent:
        """Resolve an access code to an active agent and mark it online."""
        code = required_text(code, "code").upper()
        found = self._agents.get_agent_by_code(code)
        if found is None:
            raise AgentNotFoundError(code)
        with self._agents.atomic():
            agent = self._agents.lock_agent(found.id)
            if agent is None:
                raise AgentNotFoundError(code)
            if not agent.is_active:
                raise AgentBlockedError()
            agent = self._agents.save_agent(
                replace(agent, is_online=True, last_active_at=utcnow())
            )
        logger.info("Agent %s logged in", agent.id)
        return agent

    def ping(self, principal: Principal) -> Agent:
        with self._agents.atomic():
            agent = require_active_agent(self._agents, principal)
            return self._agents.save_agent(
                replace(agent, is_online=True, last_active_at=utcnow())
            )

    def accessible_events(self, principal: Principal) -> list[AccessibleEvent]:
        agent = require_active_agent(self._agents, principal, lock=False)
        return [
            AccessibleEvent(event=event, stats=self._bookings.check_in_stats(event.id))
            for event in self._events.list_events_for_organizer(agent.organizer_email)
            if agent.can_access(event)
        ]

    def scan(self, principal: Principal, booking_code: str) -> ScanResult:
        """Check a booking in at the door.

        A second scan of the same booking reports ``already`` and does not
        count toward the agent's scans.
        """
        booking_id = parse_id(BookingId, (booking_code or "").strip(), "booking")
        with self._agents.atomic():
            agent = require_active_agent(self._agents, principal)
            booking = self._bookings.lock_booking(booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_code)
            event = self._events.get_event(booking.event_id)
            if event is None:
                raise EventNotFoundError(str(booking.event_id))
            ensure_agent_access(agent, event)
            if not booking.is_settled:
                raise InvalidInputError(f"Ticket is not valid for entry ({booking.status})")

            now = utcnow()
            if booking.checked_in:
                status = SCAN_ALREADY
                agent = replace(agent, is_online=True, last_active_at=now)
            else:
                status = SCAN_SUCCESS
                booking = self._bookings.save_booking(booking.with_check_in(True, now))
                agent = replace(agent, scans=agent.scans + 1, is_online=True, last_active_at=now)
            agent = self._agents.save_agent(agent)
            stats = self._bookings.check_in_stats(event.id)
        logger.info("Agent %s scanned booking %s: %s", agent.id, booking.id, status)
        return ScanResult(status=status, booking=booking, event=event, stats=stats, agent=agent)
