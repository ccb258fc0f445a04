from rest_framework import serializers

from apps.core.serializers import (
    EstimatedValueField,
    TimestampedModelSerializer,
    UserShortSerializer,
)
from apps.disputes.api.serializers import DisputeSerializer
from apps.swap_offers.api.serializers import SwapOfferSummarySerializer
from apps.swap_offers.models import SwapCategory
from apps.swap_requests.models import (
    NegotiationStatus,
    RequestMessage,
    RequestNegotiation,
    RequestPriority,
    SwapRequest,
)


class RequestMessageSerializer(TimestampedModelSerializer):
    sender = UserShortSerializer(read_only=True)

    class Meta:
        model = RequestMessage
        fields = ["id", "sequence", "sender", "body", "is_read", "created_at"]
        read_only_fields = fields


class RequestNegotiationSerializer(TimestampedModelSerializer):
    proposed_by = UserShortSerializer(read_only=True)

    class Meta:
        model = RequestNegotiation
        fields = [
            "id",
            "sequence",
            "proposed_by",
            "changes",
            "status",
            "responded_by",
            "responded_at",
            "created_at",
        ]
        read_only_fields = fields


class SwapRequestSerializer(TimestampedModelSerializer):
    """Request with its offer summary, thread and negotiation log"""

    requester = UserShortSerializer(read_only=True)
    offer_owner = UserShortSerializer(read_only=True)
    offer = SwapOfferSummarySerializer(read_only=True)
    offer_in_return = serializers.SerializerMethodField()
    return_value = EstimatedValueField(prefix="return_value")
    dispute = DisputeSerializer(source="*", read_only=True)
    messages = RequestMessageSerializer(many=True, read_only=True)
    negotiations = RequestNegotiationSerializer(many=True, read_only=True)
    unread_count = serializers.SerializerMethodField()
    transaction_id = serializers.SerializerMethodField()

    class Meta:
        model = SwapRequest
        fields = [
            "id",
            "requester",
            "offer_owner",
            "offer",
            "offer_in_return",
            "return_value",
            "message",
            "proposed_terms",
            "proposed_start_date",
            "proposed_end_date",
            "actual_start_date",
            "actual_end_date",
            "check_in_date",
            "check_out_date",
            "number_of_guests",
            "special_requests",
            "is_urgent",
            "priority",
            "status",
            "version",
            "completed_by",
            "completed_at",
            "completion_notes",
            "dispute",
            "messages",
            "negotiations",
            "unread_count",
            "transaction_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_offer_in_return(self, obj) -> dict:
        return {
            "title": obj.return_title,
            "description": obj.return_description,
            "category": obj.return_category,
            "duration": obj.return_duration,
            "availability": {
                "startDate": obj.return_available_from,
                "endDate": obj.return_available_until,
            },
        }

    def get_unread_count(self, obj) -> int:
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return 0
        return obj.unread_count(request.user.id)

    def get_transaction_id(self, obj):
        txn = getattr(obj, "transaction", None)
        return txn.pk if txn is not None else None


class SwapRequestListSerializer(SwapRequestSerializer):
    class Meta(SwapRequestSerializer.Meta):
        fields = [
            f
            for f in SwapRequestSerializer.Meta.fields
            if f not in ("messages", "negotiations")
        ]
        read_only_fields = fields


class SwapRequestCreateSerializer(serializers.Serializer):
    offer_id = serializers.IntegerField(min_value=1)
    message = serializers.CharField(max_length=1000)
    proposed_terms = serializers.CharField(max_length=1000, required=False, allow_blank=True)

    return_title = serializers.CharField(max_length=200)
    return_description = serializers.CharField(max_length=1000)
    return_category = serializers.ChoiceField(choices=SwapCategory.choices)
    return_value_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    return_value_currency = serializers.CharField(max_length=3, min_length=3, required=False)
    return_duration = serializers.CharField(max_length=100, required=False, allow_blank=True)
    return_available_from = serializers.DateTimeField(required=False, allow_null=True)
    return_available_until = serializers.DateTimeField(required=False, allow_null=True)

    proposed_start_date = serializers.DateTimeField(required=False, allow_null=True)
    proposed_end_date = serializers.DateTimeField(required=False, allow_null=True)
    check_in_date = serializers.DateField(required=False, allow_null=True)
    check_out_date = serializers.DateField(required=False, allow_null=True)
    number_of_guests = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    special_requests = serializers.CharField(max_length=500, required=False, allow_blank=True)
    is_urgent = serializers.BooleanField(required=False)
    priority = serializers.ChoiceField(choices=RequestPriority.choices, required=False)


class RequestResponseSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(
        choices=[("accepted", "Accept"), ("rejected", "Reject"), ("negotiating", "Negotiate")]
    )
    message = serializers.CharField(max_length=2000, required=False, allow_blank=True)


class MessageCreateSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=2000)


class NegotiationCreateSerializer(serializers.Serializer):
    changes = serializers.CharField(max_length=1000)


class NegotiationResponseSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(
        choices=[
            (NegotiationStatus.ACCEPTED.value, "Accept"),
            (NegotiationStatus.REJECTED.value, "Reject"),
        ]
    )


class RequestCompleteSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
