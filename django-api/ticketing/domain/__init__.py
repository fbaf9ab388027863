from ticketing.domain.models import (
    Agent,
    Booking,
    Buyer,
    Cagnotte,
    CagnottePayout,
    CartLine,
    CheckInStats,
    Contribution,
    Event,
    LedgerEntry,
    Payout,
    Principal,
    TicketTier,
)
from ticketing.domain.value_objects import (
    AgentId,
    BookingId,
    CagnotteId,
    Capacity,
    ContributionId,
    EventId,
    Money,
    PayoutId,
    PromoType,
    Promotion,
    TicketTierId,
)

__all__ = [
    "Agent",
    "Booking",
    "Buyer",
    "Cagnotte",
    "CagnottePayout",
    "CartLine",
    "CheckInStats",
    "Contribution",
    "Event",
    "LedgerEntry",
    "Payout",
    "Principal",
    "TicketTier",
    "AgentId",
    "BookingId",
    "CagnotteId",
    "ContributionId",
    "EventId",
    "PayoutId",
    "TicketTierId",
    "Money",
    "Capacity",
    "PromoType",
    "Promotion",
]
