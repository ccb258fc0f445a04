import logging

from django.db.models import F
from django.db.models.functions import Greatest

from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.utils.cache_manager import CacheManager
from apps.users.models import SwapProfile

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ("total_offers", "total_requests", "total_completed")


def _invalidate_stats(user_ids):
    for user_id in user_ids:
        CacheManager.invalidate_on_commit("swap_profile", user_id=user_id)


class SwapProfileService:
    """Read/write access to a user's swap stats and preferences."""

    @staticmethod
    def get_profile(user_id) -> SwapProfile:
        profile, _ = SwapProfile.objects.select_related("user").get_or_create(
            user_id=user_id
        )
        return profile

    @staticmethod
    def increment(user_ids, field, delta=1):
        """
        Atomically add `delta` to one swap counter for each of `user_ids`.
        Decrements never take a counter below zero.
        """
        if field not in COUNTER_FIELDS:
            raise ValueError(f"'{field}' is not a swap counter")
        if not isinstance(user_ids, (list, tuple, set)):
            user_ids = [user_ids]
        user_ids = set(user_ids)

        expression = F(field) + delta if delta >= 0 else Greatest(F(field) + delta, 0)
        updated = SwapProfile.objects.filter(user_id__in=user_ids).update(
            **{field: expression}
        )
        if updated != len(user_ids):
            logger.warning(
                f"Swap counter {field} updated for {updated} of {len(user_ids)} users"
            )
        _invalidate_stats(user_ids)
        return updated

    @staticmethod
    def update_preferences(user_id, **changes) -> SwapProfile:
        try:
            profile = SwapProfile.objects.select_related("user").get(user_id=user_id)
        except SwapProfile.DoesNotExist:
            raise NotFoundError("User profile not found.")

        allowed = {
            "is_available_for_swaps",
            "swap_bio",
            "preferred_categories",
            "max_distance",
            "preferred_communication",
        }
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(f"Unknown swap preference(s): {', '.join(sorted(unknown))}")

        for name, value in changes.items():
            setattr(profile, name, value)
        profile.save(update_fields=[*changes.keys(), "updated_at"])
        _invalidate_stats([user_id])
        return profile
