from ticketing.handlers.views import (
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

__all__ = [
    "AdminBookingView",
    "AdminCagnotteDisburseView",
    "AdminCagnotteStatusView",
    "AdminContributionConfirmView",
    "AdminPayoutDetailView",
    "AdminPayoutListView",
    "AgentAccessView",
    "AgentDetailView",
    "AgentListView",
    "BookingCheckInView",
    "CagnotteContributionsView",
    "CagnotteDetailView",
    "CagnottePayoutRequestView",
    "CagnotteWalletView",
    "CheckoutView",
    "FreeTicketView",
    "GuestListView",
    "OrganizerBookingView",
    "OrganizerCagnotteView",
    "PayoutRequestView",
    "ScanCheckInView",
    "ScanEventsView",
    "ScanLoginView",
    "ScanPingView",
    "SellView",
    "WalletView",
]
