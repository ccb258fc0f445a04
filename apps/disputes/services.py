import logging

from django.db import transaction
from django.utils import timezone

from apps.core.actors import SwapAction
from apps.core.exceptions import ConflictError, ValidationError
from .models import DisputeReason, DisputeStatus, RESOLUTION_STATUSES

logger = logging.getLogger(__name__)


class DisputeService:
    """
    Dispute handling shared by swap requests and swap transactions.

    Callers pass the record (a `VersionedModel` carrying `DisputeFields`),
    the capability to check and the statuses a dispute may be raised
    from; the record's own status machine does the rest.
    """

    @staticmethod
    @transaction.atomic
    def raise_dispute(
        record,
        actor,
        reason,
        description,
        from_statuses,
        disputed_status,
        participate_action,
    ):
        """
        Move `record` to `disputed_status` with an open dispute.
        """
        actor.require(
            participate_action,
            record,
            "Only participants can raise a dispute.",
        )
        if reason not in DisputeReason.values:
            raise ValidationError(f"Unknown dispute reason '{reason}'.")
        if not description or not description.strip():
            raise ValidationError("A dispute description is required.")

        record.transition(
            from_statuses,
            disputed_status,
            dispute_raised_by_id=actor.user_id,
            dispute_reason=reason,
            dispute_description=description.strip(),
            dispute_raised_at=timezone.now(),
            dispute_status=DisputeStatus.OPEN,
            dispute_resolution="",
            dispute_resolved_at=None,
            dispute_resolved_by=None,
        )
        logger.info(
            f"Dispute raised on {record._meta.model_name} {record.pk} "
            f"by user {actor.user_id} ({reason})"
        )
        return record

    @staticmethod
    @transaction.atomic
    def resolve_dispute(record, actor, status, resolution, disputed_status):
        """
        Moderator update of the dispute block: under review, resolved or
        closed, with a resolution note.
        """
        actor.require(
            SwapAction.DISPUTE_RESOLVE,
            record,
            "Only moderators can resolve disputes.",
        )
        if status not in RESOLUTION_STATUSES:
            raise ValidationError(f"Invalid resolution status '{status}'.")
        if record.status != disputed_status or not record.has_dispute:
            raise ConflictError("There is no dispute to resolve.")
        if record.dispute_status in (DisputeStatus.RESOLVED, DisputeStatus.CLOSED):
            raise ConflictError("This dispute has already been settled.")
        if status != DisputeStatus.UNDER_REVIEW and not (resolution or "").strip():
            raise ValidationError("A resolution note is required to settle a dispute.")

        changes = {
            "dispute_status": status,
            "dispute_resolution": (resolution or "").strip(),
            "dispute_resolved_by_id": actor.user_id,
        }
        if status != DisputeStatus.UNDER_REVIEW:
            changes["dispute_resolved_at"] = timezone.now()

        record.bump(**changes)
        logger.info(
            f"Dispute on {record._meta.model_name} {record.pk} moved to {status} "
            f"by moderator {actor.user_id}"
        )
        return record
