from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel


class CommunicationPreference(models.TextChoices):
    EMAIL = "email", _("Email")
    PHONE = "phone", _("Phone")
    VIDEO_CALL = "video-call", _("Video call")
    IN_PERSON = "in-person", _("In person")
    MIXED = "mixed", _("Mixed")


class SwapProfile(BaseModel):
    """
    Per-user swap marketplace profile: running stats (`swapStats`) and
    matching preferences (`swapPreferences`).

    Counters are only ever changed with F() expressions and the rating
    pair only under a row lock (see RatingAggregator).
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="swap_profile"
    )

    # swapStats
    total_offers = models.PositiveIntegerField(default=0)
    total_requests = models.PositiveIntegerField(default=0)
    total_completed = models.PositiveIntegerField(default=0)
    average_rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    total_ratings = models.PositiveIntegerField(default=0)

    # swapPreferences
    is_available_for_swaps = models.BooleanField(default=True)
    swap_bio = models.CharField(max_length=500, blank=True)
    preferred_categories = models.JSONField(default=list, blank=True)
    max_distance = models.PositiveIntegerField(
        default=50, validators=[MinValueValidator(1), MaxValueValidator(1000)]
    )
    preferred_communication = models.CharField(
        max_length=20,
        choices=CommunicationPreference.choices,
        default=CommunicationPreference.MIXED,
    )

    class Meta:
        db_table = "swap_profiles"
        verbose_name = _("swap profile")
        indexes = [
            models.Index(fields=["-average_rating"], name="swap_profil_average_7a8b9c_idx"),
        ]

    def __str__(self):
        return f"Swap profile of {self.user}"

    @property
    def swap_stats(self):
        return {
            "totalOffers": self.total_offers,
            "totalRequests": self.total_requests,
            "totalCompleted": self.total_completed,
            "averageRating": self.average_rating,
            "totalRatings": self.total_ratings,
        }
