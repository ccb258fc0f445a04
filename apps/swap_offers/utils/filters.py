import django_filters
from django.db.models import Q

from apps.swap_offers.models import SkillLevel, SwapCategory, SwapOffer


class SwapOfferFilter(django_filters.FilterSet):
    """Catalog filtering for public offers"""

    SORT_CHOICES = (
        ("newest", "Newest first"),
        ("rating", "Highest rated"),
        ("views", "Most viewed"),
    )
    SORT_ORDERING = {
        "newest": ("-created_at",),
        "rating": ("-rating_average", "-rating_count"),
        "views": ("-views", "-created_at"),
    }

    category = django_filters.ChoiceFilter(choices=SwapCategory.choices)
    subcategory = django_filters.CharFilter(lookup_expr="icontains")
    skill_level = django_filters.ChoiceFilter(choices=SkillLevel.choices)
    owner = django_filters.NumberFilter(field_name="owner_id")
    tags = django_filters.CharFilter(method="filter_tags")
    search = django_filters.CharFilter(method="filter_search")
    exclude_own = django_filters.BooleanFilter(method="filter_exclude_own")
    sort = django_filters.ChoiceFilter(choices=SORT_CHOICES, method="filter_sort")

    class Meta:
        model = SwapOffer
        fields = ["category", "subcategory", "skill_level", "owner"]

    def __init__(self, data=None, queryset=None, *, actor=None, **kwargs):
        self.actor = actor
        super().__init__(data, queryset=queryset, **kwargs)

    def filter_tags(self, queryset, name, value):
        """Comma-separated tags; an offer matches if it carries any of them."""
        tags = [tag.strip().lower() for tag in value.split(",") if tag.strip()]
        if not tags:
            return queryset
        condition = Q()
        for tag in tags:
            # Matches the quoted element inside the stored JSON array
            condition |= Q(tags__icontains=f'"{tag}"')
        return queryset.filter(condition)

    def filter_search(self, queryset, name, value):
        term = value.strip()
        if not term:
            return queryset
        return queryset.filter(
            Q(title__icontains=term)
            | Q(description__icontains=term)
            | Q(subcategory__icontains=term)
            | Q(tags__icontains=term)
        )

    def filter_exclude_own(self, queryset, name, value):
        if value and self.actor is not None:
            return queryset.exclude(owner_id=self.actor.user_id)
        return queryset

    def filter_sort(self, queryset, name, value):
        return queryset.order_by(*self.SORT_ORDERING.get(value, ("-created_at",)))
