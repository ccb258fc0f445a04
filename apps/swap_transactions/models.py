from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Avg
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel, VersionedModel
from apps.disputes.models import DisputeFields
from apps.swap_offers.models import SwapCategory


class TransactionStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    IN_PROGRESS = "in_progress", _("In Progress")
    COMPLETED = "completed", _("Completed")
    CANCELLED = "cancelled", _("Cancelled")
    DISPUTED = "disputed", _("Disputed")


class TransactionType(models.TextChoices):
    SKILL_SWAP = "skill_swap", _("Skill swap")
    SERVICE_SWAP = "service_swap", _("Service swap")
    ACCOMMODATION_SWAP = "accommodation_swap", _("Accommodation swap")
    ITEM_SWAP = "item_swap", _("Item swap")
    MIXED = "mixed", _("Mixed")


CATEGORY_TRANSACTION_TYPES = {
    SwapCategory.SKILL: TransactionType.SKILL_SWAP,
    SwapCategory.SERVICE: TransactionType.SERVICE_SWAP,
    SwapCategory.ACCOMMODATION: TransactionType.ACCOMMODATION_SWAP,
    SwapCategory.ITEM: TransactionType.ITEM_SWAP,
}


class ParticipantRole(models.TextChoices):
    REQUESTER = "requester", _("Requester")
    OFFER_OWNER = "offer_owner", _("Offer owner")


class FeedbackCategory(models.TextChoices):
    COMMUNICATION = "communication", _("Communication")
    QUALITY = "quality", _("Quality")
    TIMELINESS = "timeliness", _("Timeliness")
    VALUE = "value", _("Value")
    OVERALL = "overall", _("Overall")


class DeliverableKind(models.TextChoices):
    DOCUMENT = "document", _("Document")
    LINK = "link", _("Link")
    PHOTO = "photo", _("Photo")
    OTHER = "other", _("Other")


class SwapTransaction(DisputeFields, VersionedModel):
    """
    The record of an agreed swap between the two participants of a
    request. Value fields are always rewritten together with the
    participant value they derive from.
    """

    request = models.OneToOneField(
        "swap_requests.SwapRequest",
        on_delete=models.PROTECT,
        related_name="transaction",
    )
    transaction_type = models.CharField(
        max_length=30, choices=TransactionType.choices, default=TransactionType.MIXED
    )
    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.PENDING,
        db_index=True,
    )

    # Timeline
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    actual_start_date = models.DateTimeField(null=True, blank=True)
    actual_end_date = models.DateTimeField(null=True, blank=True)

    # Value exchange
    value_total = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    value_difference = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    is_balanced = models.BooleanField(default=True)
    value_currency = models.CharField(max_length=3, default="USD")

    # Completion
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    completion_notes = models.TextField(max_length=1000, blank=True)
    notes = models.TextField(max_length=1000, blank=True)

    class Meta:
        db_table = "swap_transactions"
        verbose_name = _("swap transaction")
        ordering = ["-created_at"]

    def __str__(self):
        return f"Swap transaction {self.pk} ({self.status})"

    def participant_ids(self):
        return {p.user_id for p in self.participants.all()}

    def participant(self, role):
        for participant in self.participants.all():
            if participant.role == role:
                return participant
        return None

    def other_participant_id(self, user_id):
        for participant in self.participants.all():
            if participant.user_id != user_id:
                return participant.user_id
        return None

    @property
    def average_rating(self):
        value = self.feedback.aggregate(avg=Avg("rating"))["avg"]
        return round(Decimal(value), 2) if value is not None else None

    @property
    def duration_days(self):
        start = self.actual_start_date or self.start_date
        end = self.actual_end_date or self.end_date
        if not start or not end:
            return None
        return (end - start).days


class TransactionParticipant(BaseModel):
    """One side of a transaction: what it gives and what it gets."""

    transaction = models.ForeignKey(
        SwapTransaction, on_delete=models.CASCADE, related_name="participants"
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="swap_participations"
    )
    role = models.CharField(max_length=20, choices=ParticipantRole.choices)

    offered_title = models.CharField(max_length=200, blank=True)
    offered_description = models.TextField(max_length=2000, blank=True)
    offered_category = models.CharField(max_length=20, choices=SwapCategory.choices, blank=True)
    offered_value = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    offered_currency = models.CharField(max_length=3, default="USD")

    received_title = models.CharField(max_length=200, blank=True)
    received_description = models.TextField(max_length=2000, blank=True)
    received_category = models.CharField(max_length=20, choices=SwapCategory.choices, blank=True)

    class Meta:
        db_table = "swap_transaction_participants"
        ordering = ["transaction", "role"]
        constraints = [
            models.UniqueConstraint(
                fields=["transaction", "role"], name="unique_transaction_participant_role"
            ),
            models.UniqueConstraint(
                fields=["transaction", "user"], name="unique_transaction_participant_user"
            ),
        ]

    def __str__(self):
        return f"{self.role} {self.user_id} on transaction {self.transaction_id}"


class TransactionFeedback(BaseModel):
    transaction = models.ForeignKey(
        SwapTransaction, on_delete=models.CASCADE, related_name="feedback"
    )
    from_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="given_swap_feedback"
    )
    to_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_swap_feedback",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(max_length=500, blank=True)
    # [{"category": "communication", "rating": 5}, ...]
    categories = models.JSONField(default=list, blank=True)
    submitted_at = models.DateTimeField(auto_now_add=True)
    is_verified = models.BooleanField(default=False)

    class Meta:
        db_table = "swap_transaction_feedback"
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["transaction", "from_user", "to_user"],
                name="unique_transaction_feedback_pair",
            ),
        ]

    def __str__(self):
        return f"{self.rating}* from {self.from_user_id} to {self.to_user_id}"


class TransactionDeliverable(BaseModel):
    transaction = models.ForeignKey(
        SwapTransaction, on_delete=models.CASCADE, related_name="deliverables"
    )
    title = models.CharField(max_length=200)
    description = models.TextField(max_length=1000, blank=True)
    url = models.URLField(blank=True)
    kind = models.CharField(
        max_length=20, choices=DeliverableKind.choices, default=DeliverableKind.OTHER
    )

    class Meta:
        db_table = "swap_transaction_deliverables"

    def __str__(self):
        return self.title
