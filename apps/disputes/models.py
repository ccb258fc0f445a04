from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class DisputeReason(models.TextChoices):
    """
    An enumeration of possible reasons for a dispute.
    """

    NON_COMPLETION = "non_completion", _("Swap Not Completed")
    POOR_QUALITY = "poor_quality", _("Poor Quality")
    MISREPRESENTATION = "misrepresentation", _("Misrepresented Offer")
    PAYMENT_ISSUE = "payment_issue", _("Payment Issue")
    OTHER = "other", _("Other")


class DisputeStatus(models.TextChoices):
    """
    An enumeration of possible statuses for a dispute.
    """

    OPEN = "open", _("Open")
    UNDER_REVIEW = "under_review", _("Under Review")
    RESOLVED = "resolved", _("Resolved")
    CLOSED = "closed", _("Closed")


RESOLUTION_STATUSES = (
    DisputeStatus.UNDER_REVIEW,
    DisputeStatus.RESOLVED,
    DisputeStatus.CLOSED,
)


class DisputeFields(models.Model):
    """
    The dispute block shared by swap requests and swap transactions.

    At most one dispute per record; raising one moves the record to its
    `disputed` status and a moderator walks it through review to a
    resolution.
    """

    dispute_raised_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("Participant who raised the dispute"),
    )
    dispute_reason = models.CharField(
        max_length=30, choices=DisputeReason.choices, blank=True
    )
    dispute_description = models.TextField(max_length=2000, blank=True)
    dispute_raised_at = models.DateTimeField(null=True, blank=True)
    dispute_status = models.CharField(
        max_length=20, choices=DisputeStatus.choices, blank=True
    )
    dispute_resolution = models.TextField(blank=True)
    dispute_resolved_at = models.DateTimeField(null=True, blank=True)
    dispute_resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text=_("Moderator who handled the dispute"),
    )

    class Meta:
        abstract = True

    @property
    def has_dispute(self):
        return bool(self.dispute_status)
