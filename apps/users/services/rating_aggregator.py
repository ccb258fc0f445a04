import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import NotFoundError, ValidationError
from apps.core.utils.cache_manager import CacheManager
from apps.users.models import SwapProfile

logger = logging.getLogger("profiles_performance")

MIN_RATING = 1
MAX_RATING = 5
RATING_PLACES = Decimal("0.01")


def validate_rating(rating) -> int:
    """Ratings are whole stars from 1 to 5."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number between 1 and 5.")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError("Rating must be between 1 and 5.")
    return rating


def incremental_mean(average, count: int, rating) -> Tuple[Decimal, int]:
    """
    Fold one new rating into a running mean.

        new_average = (average * count + rating) / (count + 1)

    The result is rounded to two places and clamped to [0, 5]. Shared by
    user profiles and offers.
    """
    validate_rating(rating)
    average = Decimal(str(average or 0))
    count = int(count or 0)

    new_count = count + 1
    new_average = (average * count + Decimal(rating)) / Decimal(new_count)
    new_average = min(max(new_average, Decimal("0")), Decimal(MAX_RATING))
    return new_average.quantize(RATING_PLACES, rounding=ROUND_HALF_UP), new_count


class RatingAggregator:
    """Maintains the running average rating on users' swap profiles."""

    @staticmethod
    @transaction.atomic
    def apply(user_id, rating) -> SwapProfile:
        """
        Apply one feedback rating to `user_id`'s swap stats.

        The profile row is locked for the read-compute-write so concurrent
        feedback for the same user is serialized and no rating is lost.
        """
        start_time = timezone.now()
        validate_rating(rating)

        try:
            profile = SwapProfile.objects.select_for_update().get(user_id=user_id)
        except SwapProfile.DoesNotExist:
            raise NotFoundError("User profile not found.")

        profile.average_rating, profile.total_ratings = incremental_mean(
            profile.average_rating, profile.total_ratings, rating
        )
        profile.save(update_fields=["average_rating", "total_ratings", "updated_at"])

        CacheManager.invalidate_on_commit("swap_profile", user_id=user_id)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Applied rating {rating} to user {user_id} "
            f"(avg={profile.average_rating}, n={profile.total_ratings}) in {duration:.2f}ms"
        )
        return profile
