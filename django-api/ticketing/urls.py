from django.urls import path

from ticketing.handlers import (
    AdminBookingView,
    AdminCagnotteDisburseView,
    AdminCagnotteStatusView,
    AdminContributionConfirmView,
    AdminPayoutDetailView,
    AdminPayoutListView,
    AgentAccessView,
    AgentDetailView,
    AgentListView,
    BookingCheckInView,
    CagnotteContributionsView,
    CagnotteDetailView,
    CagnottePayoutRequestView,
    CagnotteWalletView,
    CheckoutView,
    FreeTicketView,
    GuestListView,
    OrganizerBookingView,
    OrganizerCagnotteView,
    PayoutRequestView,
    ScanCheckInView,
    ScanEventsView,
    ScanLoginView,
    ScanPingView,
    SellView,
    WalletView,
)

urlpatterns = [
    # Public
    path("events/<str:event_id>/checkout", CheckoutView.as_view(), name="checkout"),
    path("events/<str:event_id>/free-tickets", FreeTicketView.as_view(), name="free-tickets"),
    path("cagnottes/<str:cagnotte_id>", CagnotteDetailView.as_view(), name="cagnotte-detail"),
    path(
        "cagnottes/<str:cagnotte_id>/contributions",
        CagnotteContributionsView.as_view(),
        name="cagnotte-contributions",
    ),
    # Organizer
    path("organizer/events/<str:event_id>/sell", SellView.as_view(), name="event-sell"),
    path("organizer/events/<str:event_id>/guests", GuestListView.as_view(), name="event-guests"),
    path(
        "organizer/bookings/<str:booking_id>",
        OrganizerBookingView.as_view(),
        name="organizer-booking",
    ),
    path(
        "organizer/bookings/<str:booking_id>/check-in",
        BookingCheckInView.as_view(),
        name="booking-check-in",
    ),
    path("organizer/wallet", WalletView.as_view(), name="wallet"),
    path("organizer/wallet/payouts", PayoutRequestView.as_view(), name="wallet-payouts"),
    path("organizer/cagnottes", OrganizerCagnotteView.as_view(), name="organizer-cagnottes"),
    path(
        "organizer/cagnottes/<str:cagnotte_id>/request-payout",
        CagnottePayoutRequestView.as_view(),
        name="cagnotte-request-payout",
    ),
    path("organizer/cagnotte-wallet", CagnotteWalletView.as_view(), name="cagnotte-wallet"),
    path("organizer/agents", AgentListView.as_view(), name="agent-list"),
    path("organizer/agents/<str:agent_id>", AgentDetailView.as_view(), name="agent-detail"),
    path(
        "organizer/agents/<str:agent_id>/access",
        AgentAccessView.as_view(),
        name="agent-access",
    ),
    # Admin
    path("admin/bookings/<str:booking_id>", AdminBookingView.as_view(), name="admin-booking"),
    path("admin/payouts", AdminPayoutListView.as_view(), name="admin-payouts"),
    path(
        "admin/payouts/<str:payout_id>",
        AdminPayoutDetailView.as_view(),
        name="admin-payout-detail",
    ),
    path(
        "admin/cagnottes/<str:cagnotte_id>/status",
        AdminCagnotteStatusView.as_view(),
        name="admin-cagnotte-status",
    ),
    path(
        "admin/cagnottes/<str:cagnotte_id>/disburse",
        AdminCagnotteDisburseView.as_view(),
        name="admin-cagnotte-disburse",
    ),
    path(
        "admin/contributions/<str:contribution_id>/confirm",
        AdminContributionConfirmView.as_view(),
        name="admin-contribution-confirm",
    ),
    # Agent scan session
    path("scan/login", ScanLoginView.as_view(), name="scan-login"),
    path("scan/ping", ScanPingView.as_view(), name="scan-ping"),
    path("scan/events", ScanEventsView.as_view(), name="scan-events"),
    path("scan/check-in", ScanCheckInView.as_view(), name="scan-check-in"),
]
