import django_filters

from apps.swap_requests.models import RequestStatus, SwapRequest


class SwapRequestFilter(django_filters.FilterSet):
    """Filters over the caller's own requests"""

    type = django_filters.ChoiceFilter(
        choices=(("sent", "Sent"), ("received", "Received")), method="filter_type"
    )
    status = django_filters.MultipleChoiceFilter(choices=RequestStatus.choices)
    offer = django_filters.NumberFilter(field_name="offer_id")
    is_urgent = django_filters.BooleanFilter()

    class Meta:
        model = SwapRequest
        fields = ["status", "offer", "is_urgent"]

    def __init__(self, data=None, queryset=None, *, actor=None, **kwargs):
        self.actor = actor
        super().__init__(data, queryset=queryset, **kwargs)

    def filter_type(self, queryset, name, value):
        if self.actor is None:
            return queryset
        if value == "sent":
            return queryset.filter(requester_id=self.actor.user_id)
        return queryset.filter(offer_owner_id=self.actor.user_id)
