from rest_framework import serializers

from apps.core.serializers import (
    EstimatedValueField,
    TimestampedModelSerializer,
    UserShortSerializer,
)
from apps.swap_offers.models import OfferStatus, SkillLevel, SwapCategory, SwapOffer


class SwapOfferSerializer(TimestampedModelSerializer):
    """Read view of an offer"""

    owner = UserShortSerializer(read_only=True)
    estimated_value = EstimatedValueField(
        prefix="estimated_value", flexible_attr="estimated_value_is_flexible"
    )
    availability = serializers.SerializerMethodField()
    rating = serializers.SerializerMethodField()
    is_available = serializers.BooleanField(read_only=True)

    class Meta:
        model = SwapOffer
        fields = [
            "id",
            "owner",
            "category",
            "subcategory",
            "title",
            "description",
            "tags",
            "wants_in_return",
            "preferred_categories",
            "estimated_value",
            "skill_level",
            "experience",
            "availability",
            "accommodation",
            "views",
            "requests",
            "rating",
            "status",
            "is_public",
            "is_verified",
            "is_available",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_availability(self, obj) -> dict:
        return {
            "startDate": obj.available_from,
            "endDate": obj.available_until,
            "isRecurring": obj.is_recurring,
        }

    def get_rating(self, obj) -> dict:
        return {"average": str(obj.rating_average), "count": obj.rating_count}


class SwapOfferSummarySerializer(serializers.ModelSerializer):
    """Compact offer used for related offers and request listings"""

    class Meta:
        model = SwapOffer
        fields = ["id", "title", "category", "status", "owner_id"]
        read_only_fields = fields


class EstimatedValueInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    isFlexible = serializers.BooleanField(required=False)


class AvailabilityInputSerializer(serializers.Serializer):
    startDate = serializers.DateTimeField(required=False, allow_null=True)
    endDate = serializers.DateTimeField(required=False, allow_null=True)
    isRecurring = serializers.BooleanField(required=False)


class SwapOfferWriteSerializer(serializers.Serializer):
    """
    Create/update input. Nested `estimatedValue` and `availability` blocks
    are flattened onto model field names; business rules are checked by
    OfferValidationService.
    """

    category = serializers.ChoiceField(choices=SwapCategory.choices)
    subcategory = serializers.CharField(max_length=100, required=False, allow_blank=True)
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(max_length=2000)
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False, allow_empty=True
    )
    wants_in_return = serializers.CharField(
        max_length=1000, required=False, allow_blank=True
    )
    preferred_categories = serializers.ListField(
        child=serializers.ChoiceField(choices=SwapCategory.choices),
        required=False,
        allow_empty=True,
    )
    estimated_value = EstimatedValueInputSerializer(required=False)
    skill_level = serializers.ChoiceField(choices=SkillLevel.choices, required=False)
    experience = serializers.CharField(max_length=500, required=False, allow_blank=True)
    availability = AvailabilityInputSerializer(required=False)
    accommodation = serializers.DictField(required=False, allow_null=True)
    is_public = serializers.BooleanField(required=False)

    def validate(self, attrs):
        value = attrs.pop("estimated_value", None)
        if value is not None:
            if "amount" in value:
                attrs["estimated_value_amount"] = value["amount"]
            if "currency" in value:
                attrs["estimated_value_currency"] = value["currency"].upper()
            if "isFlexible" in value:
                attrs["estimated_value_is_flexible"] = value["isFlexible"]

        window = attrs.pop("availability", None)
        if window is not None:
            if "startDate" in window:
                attrs["available_from"] = window["startDate"]
            if "endDate" in window:
                attrs["available_until"] = window["endDate"]
            if "isRecurring" in window:
                attrs["is_recurring"] = window["isRecurring"]
        return attrs


class OfferStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OfferStatus.choices)
