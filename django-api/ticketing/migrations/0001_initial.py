import uuid

import django.db.models.deletion
from django.db import migrations, models

BOOKING_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("paid", "Paid"),
    ("confirmed", "Confirmed"),
    ("cancelled", "Cancelled"),
]
CAGNOTTE_STATUS_CHOICES = [
    ("pending_validation", "Pending Validation"),
    ("online", "Online"),
    ("rejected", "Rejected"),
    ("pending_documents", "Pending Documents"),
    ("pending_payout", "Pending Payout"),
    ("completed", "Completed"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Organizer",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("name", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name="Event",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("location", models.CharField(blank=True, max_length=255)),
                ("starts_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="ticketing.organizer",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["organizer", "-created_at"], name="event_organizer_created_idx"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketTier",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                ("price", models.PositiveIntegerField()),
                ("quantity", models.PositiveIntegerField()),
                ("available", models.PositiveIntegerField()),
                (
                    "promo_type",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("percentage", "Percentage"),
                            ("fixed_price", "Fixed Price"),
                        ],
                        default="none",
                        max_length=20,
                    ),
                ),
                ("promo_value", models.PositiveIntegerField(default=0)),
                ("promo_code", models.CharField(blank=True, max_length=50, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tiers",
                        to="ticketing.event",
                    ),
                ),
            ],
            options={
                "indexes": [models.Index(fields=["event"], name="tier_event_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("available__lte", models.F("quantity"))),
                        name="tier_available_within_quantity",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Booking",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("quantity", models.PositiveIntegerField()),
                ("total_amount", models.PositiveIntegerField()),
                ("status", models.CharField(choices=BOOKING_STATUS_CHOICES, max_length=20)),
                (
                    "previous_status",
                    models.CharField(
                        blank=True, choices=BOOKING_STATUS_CHOICES, max_length=20, null=True
                    ),
                ),
                (
                    "channel",
                    models.CharField(
                        choices=[
                            ("checkout", "Checkout"),
                            ("pos", "Point Of Sale"),
                            ("free", "Free"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        blank=True,
                        choices=[("cash", "Cash"), ("card", "Card")],
                        max_length=20,
                        null=True,
                    ),
                ),
                ("customer_subject", models.CharField(blank=True, max_length=64, null=True)),
                ("buyer_name", models.CharField(blank=True, max_length=255, null=True)),
                ("buyer_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("buyer_phone", models.CharField(blank=True, max_length=32, null=True)),
                ("checked_in", models.BooleanField(default=False)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bookings",
                        to="ticketing.event",
                    ),
                ),
                (
                    "ticket_tier",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="bookings",
                        to="ticketing.tickettier",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["event", "status"], name="booking_event_status_idx"),
                    models.Index(
                        fields=["ticket_tier", "status"], name="booking_tier_status_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payout",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("amount", models.PositiveIntegerField()),
                (
                    "method",
                    models.CharField(
                        choices=[
                            ("wave", "Wave"),
                            ("orange_money", "Orange Money"),
                            ("bank", "Bank"),
                        ],
                        max_length=20,
                    ),
                ),
                ("destination", models.CharField(max_length=255)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("processing", "Processing"),
                            ("paid", "Paid"),
                            ("rejected", "Rejected"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("note", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payouts",
                        to="ticketing.organizer",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["organizer", "status"], name="payout_organizer_status_idx"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Cagnotte",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                ("goal_amount", models.PositiveIntegerField()),
                ("min_contribution", models.PositiveIntegerField(default=0)),
                (
                    "status",
                    models.CharField(
                        choices=CAGNOTTE_STATUS_CHOICES,
                        default="pending_validation",
                        max_length=20,
                    ),
                ),
                ("admin_notes", models.TextField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("paid_out_amount", models.PositiveIntegerField(default=0)),
                ("validated_at", models.DateTimeField(blank=True, null=True)),
                ("closed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cagnottes",
                        to="ticketing.organizer",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="CagnotteContribution",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("contributor_name", models.CharField(max_length=255)),
                ("contributor_email", models.EmailField(blank=True, max_length=254, null=True)),
                ("contributor_phone", models.CharField(blank=True, max_length=32, null=True)),
                ("amount", models.PositiveIntegerField()),
                ("payment_method", models.CharField(default="wave", max_length=20)),
                ("message", models.TextField(blank=True, null=True)),
                ("is_anonymous", models.BooleanField(default=False)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("paid_out", "Paid Out"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "cagnotte",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="contributions",
                        to="ticketing.cagnotte",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["cagnotte", "status"], name="contribution_status_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="CagnottePayout",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("amount", models.PositiveIntegerField()),
                ("status", models.CharField(default="completed", max_length=20)),
                ("payment_method", models.CharField(max_length=20)),
                ("payment_reference", models.CharField(blank=True, max_length=255, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("receipt_number", models.CharField(max_length=64, unique=True)),
                ("admin_subject", models.CharField(max_length=64)),
                ("processed_at", models.DateTimeField(auto_now_add=True)),
                (
                    "cagnotte",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="disbursements",
                        to="ticketing.cagnotte",
                    ),
                ),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="cagnotte_payouts",
                        to="ticketing.organizer",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="Agent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("full_name", models.CharField(max_length=255)),
                ("code", models.CharField(max_length=16, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("blocked", "Blocked")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("all_events", models.BooleanField(default=False)),
                ("scans", models.PositiveIntegerField(default=0)),
                ("is_online", models.BooleanField(default=False)),
                ("last_active_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "events",
                    models.ManyToManyField(
                        blank=True, related_name="agents", to="ticketing.event"
                    ),
                ),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="agents",
                        to="ticketing.organizer",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
