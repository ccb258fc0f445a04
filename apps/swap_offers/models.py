from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel


class SwapCategory(models.TextChoices):
    SKILL = "skill", _("Skill")
    SERVICE = "service", _("Service")
    ACCOMMODATION = "accommodation", _("Accommodation")
    ITEM = "item", _("Item")
    OTHER = "other", _("Other")


class OfferStatus(models.TextChoices):
    ACTIVE = "active", _("Active")
    INACTIVE = "inactive", _("Inactive")
    PAUSED = "paused", _("Paused")
    COMPLETED = "completed", _("Completed")


class SkillLevel(models.TextChoices):
    BEGINNER = "beginner", _("Beginner")
    INTERMEDIATE = "intermediate", _("Intermediate")
    ADVANCED = "advanced", _("Advanced")
    EXPERT = "expert", _("Expert")


class PropertyType(models.TextChoices):
    APARTMENT = "apartment", _("Apartment")
    HOUSE = "house", _("House")
    CONDO = "condo", _("Condo")
    STUDIO = "studio", _("Studio")
    ROOM = "room", _("Room")
    OTHER = "other", _("Other")


class SwapOffer(BaseModel):
    """
    A standing listing an alumnus is willing to trade.

    `views` and `requests` only ever grow and are written with F()
    expressions; `rating_average`/`rating_count` are only written by
    OfferCatalogService.apply_rating under a row lock.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="swap_offers"
    )

    # Identity
    category = models.CharField(max_length=20, choices=SwapCategory.choices)
    subcategory = models.CharField(max_length=100, blank=True)
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=2000)
    tags = models.JSONField(default=list, blank=True)

    # Commercial terms
    wants_in_return = models.TextField(max_length=1000, blank=True)
    preferred_categories = models.JSONField(default=list, blank=True)
    estimated_value_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0"))],
    )
    estimated_value_currency = models.CharField(max_length=3, default="USD")
    estimated_value_is_flexible = models.BooleanField(default=True)

    # Skill details
    skill_level = models.CharField(
        max_length=20, choices=SkillLevel.choices, default=SkillLevel.INTERMEDIATE
    )
    experience = models.CharField(max_length=500, blank=True)

    # Availability window
    available_from = models.DateTimeField(null=True, blank=True)
    available_until = models.DateTimeField(null=True, blank=True)
    is_recurring = models.BooleanField(default=False)

    # Category-conditional payload, required for accommodation
    accommodation = models.JSONField(null=True, blank=True)

    # Engagement
    views = models.PositiveIntegerField(default=0)
    requests = models.PositiveIntegerField(default=0)

    # Rating
    rating_average = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0), MaxValueValidator(5)],
    )
    rating_count = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=20, choices=OfferStatus.choices, default=OfferStatus.ACTIVE
    )
    is_public = models.BooleanField(default=True)
    is_verified = models.BooleanField(default=False)

    class Meta:
        db_table = "swap_offers"
        verbose_name = _("swap offer")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category", "status"], name="swap_offers_categor_1f2e3d_idx"),
            models.Index(fields=["owner", "status"], name="swap_offers_owner_i_4c5b6a_idx"),
            models.Index(fields=["-rating_average"], name="swap_offers_rating__7d8e9f_idx"),
            models.Index(fields=["-views"], name="swap_offers_views_0a1b2c_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.get_category_display()})"

    @property
    def is_available(self):
        """Active, and inside the availability window when one is set."""
        if self.status != OfferStatus.ACTIVE:
            return False
        if self.available_from and self.available_until:
            return self.available_from <= timezone.now() <= self.available_until
        return True

    @property
    def is_accommodation(self):
        return self.category == SwapCategory.ACCOMMODATION
