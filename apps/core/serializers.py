from rest_framework import serializers
from django.contrib.auth import get_user_model


User = get_user_model()


class TimestampedModelSerializer(serializers.ModelSerializer):
    class Meta:
        abstract = True

    created_at = serializers.DateTimeField(read_only=True, required=False)
    updated_at = serializers.DateTimeField(read_only=True, required=False)


class UserShortSerializer(serializers.ModelSerializer):
    """Serializer for a short representation of the user."""

    full_name = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "first_name", "last_name", "full_name"]

    def get_full_name(self, obj):
        return obj.get_full_name()


class EstimatedValueField(serializers.DictField):
    """
    Read-only `{amount, currency, isFlexible}` view over the flat
    estimated-value columns of a model.
    """

    def __init__(self, prefix, flexible_attr=None, **kwargs):
        self.prefix = prefix
        self.flexible_attr = flexible_attr
        kwargs.setdefault("read_only", True)
        kwargs.setdefault("source", "*")
        super().__init__(**kwargs)

    def to_representation(self, obj):
        amount = getattr(obj, f"{self.prefix}_amount")
        value = {
            "amount": str(amount) if amount is not None else None,
            "currency": getattr(obj, f"{self.prefix}_currency"),
        }
        if self.flexible_attr:
            value["isFlexible"] = getattr(obj, self.flexible_attr)
        return value
