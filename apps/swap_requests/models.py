from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel, VersionedModel
from apps.disputes.models import DisputeFields
from apps.swap_offers.models import SwapCategory


class RequestStatus(models.TextChoices):
    PENDING = "pending", _("Pending")
    ACCEPTED = "accepted", _("Accepted")
    REJECTED = "rejected", _("Rejected")
    NEGOTIATING = "negotiating", _("Negotiating")
    CONFIRMED = "confirmed", _("Confirmed")
    IN_PROGRESS = "in_progress", _("In Progress")
    COMPLETED = "completed", _("Completed")
    CANCELLED = "cancelled", _("Cancelled")
    DISPUTED = "disputed", _("Disputed")


ACTIVE_REQUEST_STATUSES = (
    RequestStatus.PENDING,
    RequestStatus.ACCEPTED,
    RequestStatus.NEGOTIATING,
    RequestStatus.CONFIRMED,
    RequestStatus.IN_PROGRESS,
)

TERMINAL_REQUEST_STATUSES = (
    RequestStatus.REJECTED,
    RequestStatus.COMPLETED,
    RequestStatus.CANCELLED,
    RequestStatus.DISPUTED,
)

# Statuses in which the terms are still open for negotiation
OPEN_TERMS_STATUSES = (
    RequestStatus.PENDING,
    RequestStatus.ACCEPTED,
    RequestStatus.NEGOTIATING,
)


class RequestPriority(models.TextChoices):
    LOW = "low", _("Low")
    MEDIUM = "medium", _("Medium")
    HIGH = "high", _("High")


class NegotiationStatus(models.TextChoices):
    PROPOSED = "proposed", _("Proposed")
    ACCEPTED = "accepted", _("Accepted")
    REJECTED = "rejected", _("Rejected")


class SwapRequest(DisputeFields, VersionedModel):
    """
    A proposal from `requester` to trade against one offer.

    `offer_owner` is copied from the offer when the request is made and
    is only used for listings; decisions always check the offer's current
    owner (`live_owner_id`). Messages and negotiation entries live in
    their own append-only tables.
    """

    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="sent_swap_requests"
    )
    offer_owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_swap_requests",
    )
    offer = models.ForeignKey(
        "swap_offers.SwapOffer",
        on_delete=models.SET_NULL,
        null=True,
        related_name="swap_requests",
    )

    # What the requester gives in return
    return_title = models.CharField(max_length=200, blank=True)
    return_description = models.TextField(max_length=1000, blank=True)
    return_category = models.CharField(
        max_length=20, choices=SwapCategory.choices, blank=True
    )
    return_value_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    return_value_currency = models.CharField(max_length=3, default="USD")
    return_duration = models.CharField(max_length=100, blank=True)
    return_available_from = models.DateTimeField(null=True, blank=True)
    return_available_until = models.DateTimeField(null=True, blank=True)

    message = models.TextField(max_length=1000)
    proposed_terms = models.TextField(max_length=1000, blank=True)

    # Timeline
    proposed_start_date = models.DateTimeField(null=True, blank=True)
    proposed_end_date = models.DateTimeField(null=True, blank=True)
    actual_start_date = models.DateTimeField(null=True, blank=True)
    actual_end_date = models.DateTimeField(null=True, blank=True)

    # Accommodation stays
    check_in_date = models.DateField(null=True, blank=True)
    check_out_date = models.DateField(null=True, blank=True)
    number_of_guests = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1)]
    )
    special_requests = models.TextField(max_length=500, blank=True)

    is_urgent = models.BooleanField(default=False)
    priority = models.CharField(
        max_length=10, choices=RequestPriority.choices, default=RequestPriority.MEDIUM
    )

    status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        default=RequestStatus.PENDING,
        db_index=True,
    )

    # Completion
    completed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    completion_notes = models.TextField(max_length=1000, blank=True)

    class Meta:
        db_table = "swap_requests"
        verbose_name = _("swap request")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["requester", "offer"],
                condition=Q(status__in=ACTIVE_REQUEST_STATUSES),
                name="unique_active_swap_request",
            ),
        ]
        indexes = [
            models.Index(fields=["requester", "status"], name="swap_reques_request_3e4f5a_idx"),
            models.Index(fields=["offer_owner", "status"], name="swap_reques_offer_o_6b7c8d_idx"),
        ]

    def __str__(self):
        return f"Swap request {self.pk} ({self.status})"

    def participant_ids(self):
        return {self.requester_id, self.offer_owner_id}

    @property
    def live_owner_id(self):
        """Owner of the offer as it is now, None once the offer is gone."""
        if self.offer_id is None:
            return None
        return self.offer.owner_id

    def other_participant_id(self, user_id):
        return self.offer_owner_id if user_id == self.requester_id else self.requester_id

    @property
    def is_terminal(self):
        return self.status in TERMINAL_REQUEST_STATUSES

    def unread_count(self, user_id):
        """Messages in the thread not written by `user_id` and not yet read."""
        return self.messages.filter(is_read=False).exclude(sender_id=user_id).count()


class RequestMessage(BaseModel):
    """One entry of a request's message thread."""

    request = models.ForeignKey(
        SwapRequest, on_delete=models.CASCADE, related_name="messages"
    )
    sequence = models.PositiveIntegerField()
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+"
    )
    body = models.TextField(max_length=2000)
    is_read = models.BooleanField(default=False)

    class Meta:
        db_table = "swap_request_messages"
        ordering = ["request", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["request", "sequence"], name="unique_request_message_sequence"
            ),
        ]

    def __str__(self):
        return f"Message {self.sequence} on request {self.request_id}"


class RequestNegotiation(BaseModel):
    """A proposed change of terms, answered by the other participant."""

    request = models.ForeignKey(
        SwapRequest, on_delete=models.CASCADE, related_name="negotiations"
    )
    sequence = models.PositiveIntegerField()
    proposed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+"
    )
    changes = models.TextField(max_length=1000)
    status = models.CharField(
        max_length=10,
        choices=NegotiationStatus.choices,
        default=NegotiationStatus.PROPOSED,
    )
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "swap_request_negotiations"
        ordering = ["request", "sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["request", "sequence"], name="unique_request_negotiation_sequence"
            ),
        ]

    def __str__(self):
        return f"Negotiation {self.sequence} on request {self.request_id} ({self.status})"
