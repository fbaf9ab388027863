from django.contrib import admin

from ticketing.models import (
    Agent,
    Booking,
    Cagnotte,
    CagnotteContribution,
    CagnottePayout,
    Event,
    Organizer,
    Payout,
    TicketTier,
)


class TicketTierInline(admin.TabularInline):
    model = TicketTier
    extra = 1


class ContributionInline(admin.TabularInline):
    model = CagnotteContribution
    extra = 0
    readonly_fields = ["amount", "status", "created_at"]


@admin.register(Organizer)
class OrganizerAdmin(admin.ModelAdmin):
    list_display = ["email", "name", "created_at"]
    search_fields = ["email", "name"]


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "organizer", "location", "starts_at"]
    search_fields = ["name", "location"]
    inlines = [TicketTierInline]


@admin.register(TicketTier)
class TicketTierAdmin(admin.ModelAdmin):
    list_display = ["name", "event", "price", "quantity", "available", "promo_type"]
    list_filter = ["event"]
    # Stock only moves through the booking services.
    readonly_fields = ["available"]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = [
        "id", "event", "ticket_tier", "quantity", "total_amount", "status", "checked_in"
    ]
    list_filter = ["status", "channel", "checked_in"]
    search_fields = ["buyer_name", "buyer_email"]
    readonly_fields = ["quantity", "total_amount", "status", "previous_status"]


@admin.register(Payout)
class PayoutAdmin(admin.ModelAdmin):
    list_display = ["organizer", "amount", "method", "status", "created_at"]
    list_filter = ["status", "method"]


@admin.register(Cagnotte)
class CagnotteAdmin(admin.ModelAdmin):
    list_display = ["title", "organizer", "goal_amount", "status", "paid_out_amount"]
    list_filter = ["status"]
    inlines = [ContributionInline]


@admin.register(CagnottePayout)
class CagnottePayoutAdmin(admin.ModelAdmin):
    list_display = ["receipt_number", "cagnotte", "amount", "payment_method", "processed_at"]


@admin.register(Agent)
class AgentAdmin(admin.ModelAdmin):
    list_display = ["full_name", "organizer", "code", "status", "all_events", "scans"]
    list_filter = ["status"]
