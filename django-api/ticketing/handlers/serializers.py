"""Serializers for request input and for rendering domain models.

Input serializers only check request shape; business rules stay in services.
Output serializers read frozen domain dataclasses, never ORM rows.
"""

from rest_framework import serializers

from ticketing.domain import Buyer, CartLine
from ticketing.domain.statuses import AgentStatus, CagnotteStatus, PaymentMethod, PayoutStatus


def _choices(enum) -> list[str]:
    return [member.value for member in enum]


# Input


class BuyerSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)


def buyer_from(data: dict | None) -> Buyer:
    data = data or {}
    return Buyer(
        name=data.get("name") or None,
        email=data.get("email") or None,
        phone=data.get("phone") or None,
    )


class CartLineSerializer(serializers.Serializer):
    tier_id = serializers.CharField()
    quantity = serializers.IntegerField(min_value=1)


def cart_lines_from(items: list[dict]) -> list[CartLine]:
    return [CartLine(tier_id=item["tier_id"], quantity=item["quantity"]) for item in items]


class CheckoutInputSerializer(serializers.Serializer):
    items = CartLineSerializer(many=True, allow_empty=False)
    buyer = BuyerSerializer(required=False)
    promo_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FreeTicketInputSerializer(serializers.Serializer):
    tier_id = serializers.CharField()
    buyer = BuyerSerializer(required=False)


class SaleInputSerializer(serializers.Serializer):
    items = CartLineSerializer(many=True, allow_empty=False)
    customer = BuyerSerializer(required=False)
    payment_method = serializers.ChoiceField(
        choices=_choices(PaymentMethod), default=PaymentMethod.CASH.value
    )


class CheckInInputSerializer(serializers.Serializer):
    checked_in = serializers.BooleanField()


class BookingActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=["cancel", "restore"])


class AdminBookingActionSerializer(serializers.Serializer):
    action = serializers.ChoiceField(
        choices=["cancel", "restore", "force_checkin", "cancel_checkin"]
    )


class PayoutRequestSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1)
    method = serializers.CharField()
    destination = serializers.CharField(max_length=255)


class PayoutStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=_choices(PayoutStatus))
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class CagnotteCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    goal_amount = serializers.IntegerField(min_value=1)
    min_contribution = serializers.IntegerField(min_value=0, default=0)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class ContributionInputSerializer(serializers.Serializer):
    contributor_name = serializers.CharField(max_length=255)
    amount = serializers.IntegerField(min_value=1)
    contributor_email = serializers.EmailField(required=False, allow_blank=True, allow_null=True)
    contributor_phone = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=32
    )
    message = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_anonymous = serializers.BooleanField(default=False)
    payment_method = serializers.CharField(required=False, default="wave", max_length=20)


class CagnotteStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=_choices(CagnotteStatus))
    admin_notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    rejection_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class DisburseSerializer(serializers.Serializer):
    payment_method = serializers.CharField(max_length=20)
    payment_reference = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AgentAccessSerializer(serializers.Serializer):
    all_events = serializers.BooleanField(default=False)
    event_ids = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class AgentCreateSerializer(AgentAccessSerializer):
    name = serializers.CharField(max_length=255)


class AgentUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=_choices(AgentStatus), required=False)
    regenerate_code = serializers.BooleanField(default=False)

    def validate(self, attrs):
        if "status" not in attrs and not attrs.get("regenerate_code"):
            raise serializers.ValidationError("Provide status or regenerate_code")
        return attrs


class ScanLoginSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=16)


class ScanCheckInSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=64)


# Output


class EventSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    location = serializers.CharField()
    starts_at = serializers.DateTimeField()


class CheckInStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    scanned = serializers.IntegerField()


class BookingSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    ticket_tier_id = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    total_amount = serializers.IntegerField(source="total_amount.amount")
    status = serializers.CharField()
    channel = serializers.CharField()
    payment_method = serializers.CharField(allow_null=True)
    buyer_name = serializers.CharField(source="buyer.name", allow_null=True)
    buyer_email = serializers.CharField(source="buyer.email", allow_null=True)
    buyer_phone = serializers.CharField(source="buyer.phone", allow_null=True)
    checked_in = serializers.BooleanField()
    checked_in_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)


class SaleLineSerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    tier_id = serializers.CharField()
    tier_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.IntegerField(source="unit_price.amount")
    line_total = serializers.IntegerField(source="line_total.amount")


class SaleSerializer(serializers.Serializer):
    event_id = serializers.CharField()
    event_title = serializers.CharField()
    payment_method = serializers.CharField()
    total = serializers.IntegerField(source="total.amount")
    currency = serializers.CharField()
    customer = BuyerSerializer(source="buyer")
    lines = SaleLineSerializer(many=True)


class PayoutSerializer(serializers.Serializer):
    id = serializers.CharField()
    organizer_email = serializers.CharField()
    amount = serializers.IntegerField(source="amount.amount")
    method = serializers.CharField()
    destination = serializers.CharField()
    status = serializers.CharField()
    note = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)
    updated_at = serializers.DateTimeField(allow_null=True)


class LedgerEntrySerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    title = serializers.CharField()
    amount = serializers.IntegerField()
    status = serializers.CharField()
    created_at = serializers.DateTimeField()


class WalletSummarySerializer(serializers.Serializer):
    total_sales = serializers.IntegerField()
    paid_count = serializers.IntegerField()
    payout_sum = serializers.IntegerField()
    available = serializers.IntegerField()
    payouts = PayoutSerializer(many=True)
    transactions = LedgerEntrySerializer(many=True)


class CagnotteSerializer(serializers.Serializer):
    id = serializers.CharField()
    organizer_email = serializers.CharField()
    title = serializers.CharField()
    description = serializers.CharField()
    goal_amount = serializers.IntegerField(source="goal_amount.amount")
    min_contribution = serializers.IntegerField(source="min_contribution.amount")
    status = serializers.CharField()
    admin_notes = serializers.CharField(allow_null=True)
    rejection_reason = serializers.CharField(allow_null=True)
    paid_out_amount = serializers.IntegerField(source="paid_out_amount.amount")
    validated_at = serializers.DateTimeField(allow_null=True)
    closed_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)


class CagnotteSummarySerializer(serializers.Serializer):
    cagnotte = CagnotteSerializer()
    collected_amount = serializers.IntegerField(source="collected")
    contributor_count = serializers.IntegerField()


class ContributionSerializer(serializers.Serializer):
    id = serializers.CharField()
    cagnotte_id = serializers.CharField()
    contributor_name = serializers.CharField()
    amount = serializers.IntegerField(source="amount.amount")
    status = serializers.CharField()
    is_anonymous = serializers.BooleanField()
    message = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)


class PublicContributionSerializer(serializers.Serializer):
    contributor_name = serializers.CharField(source="public_name")
    amount = serializers.IntegerField(source="amount.amount")
    message = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)


class CagnottePayoutSerializer(serializers.Serializer):
    id = serializers.CharField()
    cagnotte_id = serializers.CharField()
    amount = serializers.IntegerField(source="amount.amount")
    payment_method = serializers.CharField()
    payment_reference = serializers.CharField(allow_null=True)
    notes = serializers.CharField(allow_null=True)
    receipt_number = serializers.CharField()
    processed_at = serializers.DateTimeField(allow_null=True)


class AgentSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    code = serializers.CharField()
    status = serializers.CharField()
    all_events = serializers.BooleanField()
    event_ids = serializers.SerializerMethodField()
    scans = serializers.IntegerField()
    is_online = serializers.BooleanField()
    last_active_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField(allow_null=True)

    def get_event_ids(self, agent) -> list[str]:
        return sorted(str(event_id) for event_id in agent.event_ids)


class AccessibleEventSerializer(serializers.Serializer):
    event = EventSerializer()
    stats = CheckInStatsSerializer()


class ScanResultSerializer(serializers.Serializer):
    status = serializers.CharField()
    booking = BookingSerializer()
    event = EventSerializer()
    stats = CheckInStatsSerializer()
