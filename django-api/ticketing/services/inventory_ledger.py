"""Inventory Ledger - the only code that writes a tier's ``available`` counter.

Every read-check-write of ``available`` happens on a row locked by
``TierStore.lock_tier`` inside the caller's transaction. Nothing here caches
stock between calls.
"""

import logging

from ticketing.domain import EventId, TicketTier, TicketTierId
from ticketing.domain.errors import InsufficientStockError, TierNotFoundError
from ticketing.services.common import positive_int
from ticketing.stores.interfaces import TierStore

logger = logging.getLogger(__name__)


class InventoryLedger:
    """Reserve and release units of a ticket tier."""

    def __init__(self, tiers: TierStore) -> None:
        self._tiers = tiers

    def reserve(
        self, tier_id: TicketTierId, quantity: int, event_id: EventId | None = None
    ) -> TicketTier:
        """Take ``quantity`` units from the tier and return its locked, updated state.

        Must run inside ``atomic()``; the lock is held until commit or rollback.

        Raises:
            TierNotFoundError: If the tier does not exist or belongs to another event.
            InsufficientStockError: If fewer than ``quantity`` units are available.
        """
        positive_int(quantity, "quantity")
        tier = self._tiers.lock_tier(tier_id)
        if tier is None or (event_id is not None and tier.event_id != event_id):
            raise TierNotFoundError(str(tier_id))
        if tier.available.value < quantity:
            logger.info(
                "Insufficient stock on tier %s: %d available, %d requested",
                tier.id,
                tier.available.value,
                quantity,
            )
            raise InsufficientStockError(
                tier_id=str(tier.id),
                tier_name=tier.name,
                available=tier.available.value,
                requested=quantity,
            )
        updated = tier.with_available(tier.available.value - quantity)
        self._tiers.save_available(updated)
        return updated

    def release(self, tier_id: TicketTierId, quantity: int) -> TicketTier | None:
        """Give ``quantity`` units back to the tier, clamped to its total quantity.

        Returns None when the tier no longer exists.
        """
        positive_int(quantity, "quantity")
        tier = self._tiers.lock_tier(tier_id)
        if tier is None:
            logger.warning("Release of %d units skipped: tier %s is gone", quantity, tier_id)
            return None
        restored = tier.available.value + quantity
        if restored > tier.quantity.value:
            logger.warning(
                "Release on tier %s clamped from %d to %d",
                tier.id,
                restored,
                tier.quantity.value,
            )
            restored = tier.quantity.value
        updated = tier.with_available(restored)
        self._tiers.save_available(updated)
        return updated

    def peek(self, tier_id: TicketTierId) -> int:
        tier = self._tiers.get_tier(tier_id)
        if tier is None:
            raise TierNotFoundError(str(tier_id))
        return tier.available.value
