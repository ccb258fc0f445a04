from rest_framework import serializers

from apps.disputes.models import DisputeReason, RESOLUTION_STATUSES


class DisputeRaiseSerializer(serializers.Serializer):
    """Input for raising a dispute on a request or transaction."""

    reason = serializers.ChoiceField(choices=DisputeReason.choices)
    description = serializers.CharField(max_length=2000)


class DisputeResolutionSerializer(serializers.Serializer):
    """Moderator input for moving a dispute forward."""

    status = serializers.ChoiceField(choices=[(s.value, s.label) for s in RESOLUTION_STATUSES])
    resolution = serializers.CharField(max_length=2000, required=False, allow_blank=True)


class DisputeSerializer(serializers.Serializer):
    """Read view of the dispute block embedded in requests and transactions."""

    raisedBy = serializers.IntegerField(source="dispute_raised_by_id", read_only=True)
    reason = serializers.CharField(source="dispute_reason", read_only=True)
    description = serializers.CharField(source="dispute_description", read_only=True)
    raisedAt = serializers.DateTimeField(source="dispute_raised_at", read_only=True)
    status = serializers.CharField(source="dispute_status", read_only=True)
    resolution = serializers.CharField(source="dispute_resolution", read_only=True)
    resolvedAt = serializers.DateTimeField(source="dispute_resolved_at", read_only=True)
    resolvedBy = serializers.IntegerField(source="dispute_resolved_by_id", read_only=True)

    def to_representation(self, instance):
        if not instance.has_dispute:
            return None
        return super().to_representation(instance)
