"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Never contain business logic
- Never expose internal error details

Domain errors propagate to ``ticketing.handlers.errors.api_exception_handler``,
which renders them.
"""

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView

from ticketing.domain import Principal
from ticketing.domain.statuses import Role
from ticketing.handlers import dependencies
from ticketing.handlers import serializers as s
from ticketing.handlers.auth import ScanSessionAuthentication, sign_session
from ticketing.handlers.permissions import IsAdmin, IsAgent, IsOrganizer, IsOrganizerOrAdmin
from ticketing.services.point_of_sale import CURRENCY


def _valid(serializer_class, request: Request) -> dict:
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def _principal(request: Request) -> Principal | None:
    return request.auth if isinstance(request.auth, Principal) else None


class WriteThrottledView(APIView):
    """Applies the view's ``throttle_scope`` to writes only."""

    def get_throttles(self):
        if self.request.method in ("GET", "HEAD", "OPTIONS"):
            return []
        return [ScopedRateThrottle()]


# Public


class CheckoutView(APIView):
    """Handler for POST /api/events/{event_id}/checkout"""

    permission_classes = [AllowAny]

    def post(self, request: Request, event_id: str) -> Response:
        data = _valid(s.CheckoutInputSerializer, request)
        bookings = dependencies.booking_service().checkout(
            event_id,
            s.cart_lines_from(data["items"]),
            s.buyer_from(data.get("buyer")),
            promo_code=data.get("promo_code") or None,
            customer=_principal(request),
        )
        return Response(
            {
                "bookings": s.BookingSerializer(bookings, many=True).data,
                "total": sum(booking.total_amount.amount for booking in bookings),
                "currency": CURRENCY,
            },
            status=status.HTTP_201_CREATED,
        )


class FreeTicketView(APIView):
    """Handler for POST /api/events/{event_id}/free-tickets"""

    permission_classes = [AllowAny]

    def post(self, request: Request, event_id: str) -> Response:
        data = _valid(s.FreeTicketInputSerializer, request)
        booking = dependencies.booking_service().claim_free(
            event_id,
            data["tier_id"],
            s.buyer_from(data.get("buyer")),
            customer=_principal(request),
        )
        return Response(s.BookingSerializer(booking).data, status=status.HTTP_201_CREATED)


class CagnotteDetailView(APIView):
    """Handler for GET /api/cagnottes/{cagnotte_id}"""

    permission_classes = [AllowAny]

    def get(self, request: Request, cagnotte_id: str) -> Response:
        summary = dependencies.cagnotte_service().get(cagnotte_id)
        return Response(s.CagnotteSummarySerializer(summary).data)


class CagnotteContributionsView(WriteThrottledView):
    """Handler for GET/POST /api/cagnottes/{cagnotte_id}/contributions"""

    permission_classes = [AllowAny]
    throttle_scope = "contributions"

    def get(self, request: Request, cagnotte_id: str) -> Response:
        contributions = dependencies.cagnotte_service().list_contributions(cagnotte_id)
        return Response(s.PublicContributionSerializer(contributions, many=True).data)

    def post(self, request: Request, cagnotte_id: str) -> Response:
        data = _valid(s.ContributionInputSerializer, request)
        contribution = dependencies.cagnotte_service().contribute(cagnotte_id, **data)
        return Response(
            s.ContributionSerializer(contribution).data, status=status.HTTP_201_CREATED
        )


# Organizer


class SellView(APIView):
    """Handler for POST /api/organizer/events/{event_id}/sell"""

    permission_classes = [IsOrganizerOrAdmin]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "sales"

    def post(self, request: Request, event_id: str) -> Response:
        data = _valid(s.SaleInputSerializer, request)
        sale = dependencies.point_of_sale().sell(
            request.auth,
            event_id,
            s.cart_lines_from(data["items"]),
            buyer=s.buyer_from(data.get("customer")),
            payment_method=data["payment_method"],
        )
        return Response(s.SaleSerializer(sale).data, status=status.HTTP_201_CREATED)


class GuestListView(APIView):
    """Handler for GET /api/organizer/events/{event_id}/guests"""

    permission_classes = [IsOrganizerOrAdmin]

    def get(self, request: Request, event_id: str) -> Response:
        bookings = dependencies.booking_service().list_guests(request.auth, event_id)
        return Response(s.BookingSerializer(bookings, many=True).data)


class BookingCheckInView(APIView):
    """Handler for PATCH /api/organizer/bookings/{booking_id}/check-in"""

    permission_classes = [IsOrganizerOrAdmin]

    def patch(self, request: Request, booking_id: str) -> Response:
        data = _valid(s.CheckInInputSerializer, request)
        booking = dependencies.booking_service().set_check_in(
            request.auth, booking_id, data["checked_in"]
        )
        return Response(s.BookingSerializer(booking).data)


class OrganizerBookingView(APIView):
    """Handler for PATCH /api/organizer/bookings/{booking_id}"""

    permission_classes = [IsOrganizerOrAdmin]
    action_serializer = s.BookingActionSerializer

    def patch(self, request: Request, booking_id: str) -> Response:
        action = _valid(self.action_serializer, request)["action"]
        service = dependencies.booking_service()
        if action == "cancel":
            booking = service.cancel(request.auth, booking_id)
        elif action == "restore":
            booking = service.restore(request.auth, booking_id)
        else:
            booking = service.set_check_in(request.auth, booking_id, action == "force_checkin")
        return Response(s.BookingSerializer(booking).data)


class WalletView(APIView):
    """Handler for GET /api/organizer/wallet"""

    permission_classes = [IsOrganizer]

    def get(self, request: Request) -> Response:
        summary = dependencies.wallet_service().summary(request.auth)
        return Response(s.WalletSummarySerializer(summary).data)


class PayoutRequestView(WriteThrottledView):
    """Handler for GET/POST /api/organizer/wallet/payouts"""

    permission_classes = [IsOrganizer]
    throttle_scope = "payouts"

    def get(self, request: Request) -> Response:
        payouts = dependencies.wallet_service().list_payouts(request.auth)
        return Response(s.PayoutSerializer(payouts, many=True).data)

    def post(self, request: Request) -> Response:
        data = _valid(s.PayoutRequestSerializer, request)
        payout = dependencies.wallet_service().request_payout(
            request.auth, data["amount"], data["method"], data["destination"]
        )
        return Response(s.PayoutSerializer(payout).data, status=status.HTTP_201_CREATED)


class OrganizerCagnotteView(APIView):
    """Handler for POST /api/organizer/cagnottes"""

    permission_classes = [IsOrganizer]

    def post(self, request: Request) -> Response:
        data = _valid(s.CagnotteCreateSerializer, request)
        cagnotte = dependencies.cagnotte_service().create(request.auth, **data)
        return Response(s.CagnotteSerializer(cagnotte).data, status=status.HTTP_201_CREATED)


class CagnottePayoutRequestView(APIView):
    """Handler for POST /api/organizer/cagnottes/{cagnotte_id}/request-payout"""

    permission_classes = [IsOrganizer]

    def post(self, request: Request, cagnotte_id: str) -> Response:
        cagnotte = dependencies.cagnotte_service().request_payout(request.auth, cagnotte_id)
        return Response(s.CagnotteSerializer(cagnotte).data)


class CagnotteWalletView(APIView):
    """Handler for GET /api/organizer/cagnotte-wallet"""

    permission_classes = [IsOrganizer]

    def get(self, request: Request) -> Response:
        return Response(dependencies.cagnotte_service().wallet(request.auth))


class AgentListView(APIView):
    """Handler for GET/POST /api/organizer/agents"""

    permission_classes = [IsOrganizer]

    def get(self, request: Request) -> Response:
        agents = dependencies.agent_service().list_agents(request.auth)
        return Response(s.AgentSerializer(agents, many=True).data)

    def post(self, request: Request) -> Response:
        data = _valid(s.AgentCreateSerializer, request)
        agent = dependencies.agent_service().create(
            request.auth, data["name"], data["all_events"], data["event_ids"]
        )
        return Response(s.AgentSerializer(agent).data, status=status.HTTP_201_CREATED)


class AgentDetailView(APIView):
    """Handler for PATCH/DELETE /api/organizer/agents/{agent_id}"""

    permission_classes = [IsOrganizer]

    def patch(self, request: Request, agent_id: str) -> Response:
        data = _valid(s.AgentUpdateSerializer, request)
        service = dependencies.agent_service()
        agent = None
        if "status" in data:
            agent = service.set_status(request.auth, agent_id, data["status"])
        if data["regenerate_code"]:
            agent = service.regenerate_code(request.auth, agent_id)
        return Response(s.AgentSerializer(agent).data)

    def delete(self, request: Request, agent_id: str) -> Response:
        dependencies.agent_service().delete(request.auth, agent_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AgentAccessView(APIView):
    """Handler for PUT /api/organizer/agents/{agent_id}/access"""

    permission_classes = [IsOrganizer]

    def put(self, request: Request, agent_id: str) -> Response:
        data = _valid(s.AgentAccessSerializer, request)
        agent = dependencies.agent_service().replace_access(
            request.auth, agent_id, data["all_events"], data["event_ids"]
        )
        return Response(s.AgentSerializer(agent).data)


# Admin


class AdminBookingView(OrganizerBookingView):
    """Handler for PATCH /api/admin/bookings/{booking_id}"""

    permission_classes = [IsAdmin]
    action_serializer = s.AdminBookingActionSerializer


class AdminPayoutListView(APIView):
    """Handler for GET /api/admin/payouts"""

    permission_classes = [IsAdmin]

    def get(self, request: Request) -> Response:
        payouts = dependencies.wallet_service().list_all(
            request.auth, request.query_params.get("status")
        )
        return Response(s.PayoutSerializer(payouts, many=True).data)


class AdminPayoutDetailView(APIView):
    """Handler for PATCH /api/admin/payouts/{payout_id}"""

    permission_classes = [IsAdmin]

    def patch(self, request: Request, payout_id: str) -> Response:
        data = _valid(s.PayoutStatusSerializer, request)
        payout = dependencies.wallet_service().transition_payout(
            request.auth, payout_id, data["status"], data.get("note") or None
        )
        return Response(s.PayoutSerializer(payout).data)


class AdminCagnotteStatusView(APIView):
    """Handler for PUT /api/admin/cagnottes/{cagnotte_id}/status"""

    permission_classes = [IsAdmin]

    def put(self, request: Request, cagnotte_id: str) -> Response:
        data = _valid(s.CagnotteStatusSerializer, request)
        cagnotte = dependencies.cagnotte_service().transition_status(
            request.auth,
            cagnotte_id,
            data["status"],
            admin_notes=data.get("admin_notes") or None,
            rejection_reason=data.get("rejection_reason") or None,
        )
        return Response(s.CagnotteSerializer(cagnotte).data)


class AdminCagnotteDisburseView(APIView):
    """Handler for POST /api/admin/cagnottes/{cagnotte_id}/disburse"""

    permission_classes = [IsAdmin]

    def post(self, request: Request, cagnotte_id: str) -> Response:
        data = _valid(s.DisburseSerializer, request)
        payout = dependencies.cagnotte_service().disburse(request.auth, cagnotte_id, **data)
        return Response(s.CagnottePayoutSerializer(payout).data, status=status.HTTP_201_CREATED)


class AdminContributionConfirmView(APIView):
    """Handler for POST /api/admin/contributions/{contribution_id}/confirm"""

    permission_classes = [IsAdmin]

    def post(self, request: Request, contribution_id: str) -> Response:
        contribution = dependencies.cagnotte_service().confirm_contribution(
            request.auth, contribution_id
        )
        return Response(s.ContributionSerializer(contribution).data)


# Agent scan session


class ScanLoginView(APIView):
    """Handler for POST /api/scan/login"""

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        data = _valid(s.ScanLoginSerializer, request)
        agent = dependencies.agent_service().login(data["code"])
        token = sign_session(
            Principal(subject_id=str(agent.id), email=agent.organizer_email, role=Role.AGENT)
        )
        return Response({"token": token, "agent": s.AgentSerializer(agent).data})


class ScanSessionView(APIView):
    authentication_classes = [ScanSessionAuthentication]
    permission_classes = [IsAgent]


class ScanPingView(ScanSessionView):
    """Handler for POST /api/scan/ping"""

    def post(self, request: Request) -> Response:
        agent = dependencies.agent_service().ping(request.auth)
        return Response({"ok": True, "last_active_at": agent.last_active_at})


class ScanEventsView(ScanSessionView):
    """Handler for GET /api/scan/events"""

    def get(self, request: Request) -> Response:
        events = dependencies.agent_service().accessible_events(request.auth)
        return Response(s.AccessibleEventSerializer(events, many=True).data)


class ScanCheckInView(ScanSessionView):
    """Handler for POST /api/scan/check-in"""

    def post(self, request: Request) -> Response:
        data = _valid(s.ScanCheckInSerializer, request)
        result = dependencies.agent_service().scan(request.auth, data["code"])
        return Response(s.ScanResultSerializer(result).data)
