from rest_framework import serializers

from apps.core.serializers import TimestampedModelSerializer, UserShortSerializer
from apps.swap_offers.models import SwapCategory
from apps.users.models import SwapProfile


class SwapStatsSerializer(serializers.Serializer):
    totalOffers = serializers.IntegerField(source="total_offers", read_only=True)
    totalRequests = serializers.IntegerField(source="total_requests", read_only=True)
    totalCompleted = serializers.IntegerField(source="total_completed", read_only=True)
    averageRating = serializers.DecimalField(
        source="average_rating", max_digits=3, decimal_places=2, read_only=True
    )
    totalRatings = serializers.IntegerField(source="total_ratings", read_only=True)


class SwapProfileSerializer(TimestampedModelSerializer):
    """Swap stats (read-only) plus editable swap preferences."""

    user = UserShortSerializer(read_only=True)
    swap_stats = SwapStatsSerializer(source="*", read_only=True)
    preferred_categories = serializers.ListField(
        child=serializers.ChoiceField(choices=SwapCategory.choices),
        required=False,
        allow_empty=True,
    )

    class Meta:
        model = SwapProfile
        fields = [
            "user",
            "swap_stats",
            "is_available_for_swaps",
            "swap_bio",
            "preferred_categories",
            "max_distance",
            "preferred_communication",
            "created_at",
            "updated_at",
        ]

    def validate_preferred_categories(self, value):
        # keep first occurrence order, drop repeats
        return list(dict.fromkeys(value))
