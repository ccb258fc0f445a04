from rest_framework import serializers

from apps.core.serializers import TimestampedModelSerializer, UserShortSerializer
from apps.disputes.api.serializers import DisputeSerializer
from apps.swap_transactions.models import (
    DeliverableKind,
    FeedbackCategory,
    ParticipantRole,
    SwapTransaction,
    TransactionDeliverable,
    TransactionFeedback,
    TransactionParticipant,
)


class TransactionParticipantSerializer(serializers.ModelSerializer):
    user = UserShortSerializer(read_only=True)
    offered = serializers.SerializerMethodField()
    received = serializers.SerializerMethodField()

    class Meta:
        model = TransactionParticipant
        fields = ["user", "role", "offered", "received"]
        read_only_fields = fields

    def get_offered(self, obj) -> dict:
        return {
            "title": obj.offered_title,
            "description": obj.offered_description,
            "category": obj.offered_category,
            "value": {
                "amount": str(obj.offered_value) if obj.offered_value is not None else None,
                "currency": obj.offered_currency,
            },
        }

    def get_received(self, obj) -> dict:
        return {
            "title": obj.received_title,
            "description": obj.received_description,
            "category": obj.received_category,
        }


class TransactionFeedbackSerializer(TimestampedModelSerializer):
    class Meta:
        model = TransactionFeedback
        fields = [
            "id",
            "from_user",
            "to_user",
            "rating",
            "comment",
            "categories",
            "submitted_at",
            "is_verified",
        ]
        read_only_fields = fields


class TransactionDeliverableSerializer(serializers.ModelSerializer):
    class Meta:
        model = TransactionDeliverable
        fields = ["id", "title", "description", "url", "kind"]
        read_only_fields = fields


class SwapTransactionSerializer(TimestampedModelSerializer):
    participants = TransactionParticipantSerializer(many=True, read_only=True)
    value_exchange = serializers.SerializerMethodField()
    feedback = TransactionFeedbackSerializer(many=True, read_only=True)
    deliverables = TransactionDeliverableSerializer(many=True, read_only=True)
    dispute = DisputeSerializer(source="*", read_only=True)
    average_rating = serializers.DecimalField(
        max_digits=3, decimal_places=2, read_only=True, allow_null=True
    )
    duration_days = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = SwapTransaction
        fields = [
            "id",
            "request",
            "transaction_type",
            "status",
            "version",
            "participants",
            "value_exchange",
            "start_date",
            "end_date",
            "actual_start_date",
            "actual_end_date",
            "completed_at",
            "completed_by",
            "completion_notes",
            "deliverables",
            "feedback",
            "average_rating",
            "duration_days",
            "dispute",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_value_exchange(self, obj) -> dict:
        return {
            "totalValue": str(obj.value_total),
            "valueDifference": str(obj.value_difference),
            "isBalanced": obj.is_balanced,
            "currency": obj.value_currency,
        }


class FeedbackCategoryRatingSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=FeedbackCategory.choices)
    rating = serializers.IntegerField(min_value=1, max_value=5)


class FeedbackCreateSerializer(serializers.Serializer):
    to_user = serializers.IntegerField(min_value=1)
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(max_length=500, required=False, allow_blank=True)
    categories = FeedbackCategoryRatingSerializer(many=True, required=False)


class DeliverableInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    url = serializers.URLField(required=False, allow_blank=True)
    kind = serializers.ChoiceField(choices=DeliverableKind.choices, required=False)


class TransactionCompleteSerializer(serializers.Serializer):
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    deliverables = DeliverableInputSerializer(many=True, required=False)


class RevalueSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=ParticipantRole.choices)
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, allow_null=True
    )
