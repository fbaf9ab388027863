"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models

from ticketing.domain.statuses import (
    AgentStatus,
    BookingStatus,
    CagnotteStatus,
    ContributionStatus,
    PaymentMethod,
    PayoutMethod,
    PayoutStatus,
    SalesChannel,
)
from ticketing.domain.value_objects import PromoType


def _choices(enum) -> list[tuple[str, str]]:
    return [(member.value, member.name.replace("_", " ").title()) for member in enum]


class Organizer(models.Model):
    """Account holder that owns events, agents, payouts and cagnottes.

    The row also serves as the per-organizer lock for payout requests.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.email


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organizer = models.ForeignKey(Organizer, on_delete=models.CASCADE, related_name="events")
    name = models.CharField(max_length=255)
    location = models.CharField(max_length=255, blank=True)
    starts_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organizer", "-created_at"], name="event_organizer_created_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class TicketTier(models.Model):
    """Persistence model for ticket tiers and their stock counters."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tiers")
    name = models.CharField(max_length=100)
    price = models.PositiveIntegerField()
    quantity = models.PositiveIntegerField()
    available = models.PositiveIntegerField()
    promo_type = models.CharField(
        max_length=20, choices=_choices(PromoType), default=PromoType.NONE.value
    )
    promo_value = models.PositiveIntegerField(default=0)
    promo_code = models.CharField(max_length=50, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["event"], name="tier_event_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(available__lte=models.F("quantity")),
                name="tier_available_within_quantity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price}"


class Booking(models.Model):
    """Persistence model for bookings."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="bookings")
    ticket_tier = models.ForeignKey(
        TicketTier, on_delete=models.SET_NULL, related_name="bookings", blank=True, null=True
    )
    quantity = models.PositiveIntegerField()
    total_amount = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=_choices(BookingStatus))
    previous_status = models.CharField(
        max_length=20, choices=_choices(BookingStatus), blank=True, null=True
    )
    channel = models.CharField(max_length=20, choices=_choices(SalesChannel))
    payment_method = models.CharField(
        max_length=20, choices=_choices(PaymentMethod), blank=True, null=True
    )
    customer_subject = models.CharField(max_length=64, blank=True, null=True)
    buyer_name = models.CharField(max_length=255, blank=True, null=True)
    buyer_email = models.EmailField(blank=True, null=True)
    buyer_phone = models.CharField(max_length=32, blank=True, null=True)
    checked_in = models.BooleanField(default=False)
    checked_in_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["event", "status"], name="booking_event_status_idx"),
            models.Index(fields=["ticket_tier", "status"], name="booking_tier_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.id} ({self.status})"


class Payout(models.Model):
    """Persistence model for organizer payout requests."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organizer = models.ForeignKey(Organizer, on_delete=models.CASCADE, related_name="payouts")
    amount = models.PositiveIntegerField()
    method = models.CharField(max_length=20, choices=_choices(PayoutMethod))
    destination = models.CharField(max_length=255)
    status = models.CharField(
        max_length=20, choices=_choices(PayoutStatus), default=PayoutStatus.PENDING.value
    )
    note = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organizer", "status"], name="payout_organizer_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.organizer} - {self.amount} ({self.status})"


class Cagnotte(models.Model):
    """Persistence model for fundraising pots."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organizer = models.ForeignKey(Organizer, on_delete=models.CASCADE, related_name="cagnottes")
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    goal_amount = models.PositiveIntegerField()
    min_contribution = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=_choices(CagnotteStatus),
        default=CagnotteStatus.PENDING_VALIDATION.value,
    )
    admin_notes = models.TextField(blank=True, null=True)
    rejection_reason = models.TextField(blank=True, null=True)
    paid_out_amount = models.PositiveIntegerField(default=0)
    validated_at = models.DateTimeField(blank=True, null=True)
    closed_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title


class CagnotteContribution(models.Model):
    """Persistence model for contributions to a cagnotte."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    cagnotte = models.ForeignKey(Cagnotte, on_delete=models.CASCADE, related_name="contributions")
    contributor_name = models.CharField(max_length=255)
    contributor_email = models.EmailField(blank=True, null=True)
    contributor_phone = models.CharField(max_length=32, blank=True, null=True)
    amount = models.PositiveIntegerField()
    payment_method = models.CharField(max_length=20, default="wave")
    message = models.TextField(blank=True, null=True)
    is_anonymous = models.BooleanField(default=False)
    status = models.CharField(
        max_length=20,
        choices=_choices(ContributionStatus),
        default=ContributionStatus.PENDING.value,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["cagnotte", "status"], name="contribution_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.contributor_name} - {self.amount}"


class CagnottePayout(models.Model):
    """Persistence model for the disbursement of a cagnotte's funds."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    cagnotte = models.ForeignKey(Cagnotte, on_delete=models.CASCADE, related_name="disbursements")
    organizer = models.ForeignKey(
        Organizer, on_delete=models.CASCADE, related_name="cagnotte_payouts"
    )
    amount = models.PositiveIntegerField()
    status = models.CharField(max_length=20, default="completed")
    payment_method = models.CharField(max_length=20)
    payment_reference = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    receipt_number = models.CharField(max_length=64, unique=True)
    admin_subject = models.CharField(max_length=64)
    processed_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.receipt_number


class Agent(models.Model):
    """Persistence model for check-in agents."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organizer = models.ForeignKey(Organizer, on_delete=models.CASCADE, related_name="agents")
    full_name = models.CharField(max_length=255)
    code = models.CharField(max_length=16, unique=True)
    status = models.CharField(
        max_length=20, choices=_choices(AgentStatus), default=AgentStatus.ACTIVE.value
    )
    all_events = models.BooleanField(default=False)
    events = models.ManyToManyField(Event, blank=True, related_name="agents")
    scans = models.PositiveIntegerField(default=0)
    is_online = models.BooleanField(default=False)
    last_active_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.code})"
