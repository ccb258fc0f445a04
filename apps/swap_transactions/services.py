import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.actors import SwapAction
from apps.core.exceptions import ConflictError, NotFoundError, ValidationError
from apps.disputes.services import DisputeService
from apps.notifications.events import (
    DISPUTE_RAISED,
    TRANSACTION_COMPLETED,
    emit_swap_event,
)
from apps.swap_offers.services import OfferCatalogService
from apps.swap_transactions.models import (
    CATEGORY_TRANSACTION_TYPES,
    DeliverableKind,
    FeedbackCategory,
    ParticipantRole,
    SwapTransaction,
    TransactionDeliverable,
    TransactionFeedback,
    TransactionParticipant,
    TransactionStatus,
    TransactionType,
)
from apps.swap_transactions.utils.filters import SwapTransactionFilter
from apps.users.services.rating_aggregator import RatingAggregator, validate_rating
from apps.users.services.swap_profile import SwapProfileService

logger = logging.getLogger("transactions_performance")

MONEY_PLACES = Decimal("0.01")


def compute_value_exchange(first, second, tolerance=None) -> Dict[str, object]:
    """
    Value exchange of two offered amounts; missing amounts count as 0.

        total = first + second
        difference = |first - second|
        is_balanced = difference <= tolerance * total
    """
    if tolerance is None:
        tolerance = settings.SWAP_SETTINGS["BALANCE_TOLERANCE"]
    first = Decimal(str(first or 0))
    second = Decimal(str(second or 0))

    total = (first + second).quantize(MONEY_PLACES)
    difference = abs(first - second).quantize(MONEY_PLACES)
    return {
        "total": total,
        "difference": difference,
        "is_balanced": difference <= Decimal(str(tolerance)) * total,
    }


def derive_transaction_type(*categories) -> str:
    """Same category on both sides gives its swap type, anything else is mixed."""
    present = {category for category in categories if category}
    if len(present) == 1:
        return CATEGORY_TRANSACTION_TYPES.get(present.pop(), TransactionType.MIXED)
    return TransactionType.MIXED


def _parse_amount(amount) -> Optional[Decimal]:
    if amount is None:
        return None
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError("Value must be a number.")
    if value < 0:
        raise ValidationError("Value cannot be negative.")
    return value.quantize(MONEY_PLACES)


class TransactionLedgerService:
    """
    Keeps the SwapTransaction record of a confirmed request: its two
    participants, the value exchange, feedback and completion.
    """

    @staticmethod
    def _get(transaction_id) -> SwapTransaction:
        try:
            return (
                SwapTransaction.objects.select_related("request", "request__offer")
                .prefetch_related("participants")
                .get(pk=transaction_id)
            )
        except (SwapTransaction.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Swap transaction not found.")

    @staticmethod
    def get_transaction(transaction_id, actor) -> SwapTransaction:
        txn = TransactionLedgerService._get(transaction_id)
        actor.require(
            SwapAction.TRANSACTION_VIEW, txn, "You are not part of this swap transaction."
        )
        return txn

    @staticmethod
    def list_transactions(actor, filters=None):
        queryset = (
            SwapTransaction.objects.filter(participants__user_id=actor.user_id)
            .select_related("request", "request__offer")
            .prefetch_related("participants")
            .distinct()
        )
        filterset = SwapTransactionFilter(filters or {}, queryset=queryset)
        if not filterset.is_valid():
            raise ValidationError({k: list(v) for k, v in filterset.errors.items()})
        return filterset.qs

    @staticmethod
    @transaction.atomic
    def open(swap_request) -> SwapTransaction:
        """
        Create the transaction for `swap_request`, or return the existing
        one. The requester gives what it offered in return and receives
        the offer; the owner gives the offer and receives the return.
        """
        from apps.swap_requests.models import RequestStatus

        existing = SwapTransaction.objects.filter(request=swap_request).first()
        if existing is not None:
            return existing

        start_time = timezone.now()
        offer = swap_request.offer
        offer_title = offer.title if offer else ""
        offer_description = offer.description if offer else ""
        offer_category = offer.category if offer else ""
        offer_value = offer.estimated_value_amount if offer else None
        currency = (
            offer.estimated_value_currency if offer else swap_request.return_value_currency
        )

        exchange = compute_value_exchange(swap_request.return_value_amount, offer_value)
        started = swap_request.status in (RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED)

        try:
            with transaction.atomic():
                txn = SwapTransaction.objects.create(
                    request=swap_request,
                    transaction_type=derive_transaction_type(
                        offer_category, swap_request.return_category
                    ),
                    status=(
                        TransactionStatus.IN_PROGRESS if started else TransactionStatus.PENDING
                    ),
                    start_date=swap_request.proposed_start_date,
                    end_date=swap_request.proposed_end_date,
                    actual_start_date=swap_request.actual_start_date if started else None,
                    value_total=exchange["total"],
                    value_difference=exchange["difference"],
                    is_balanced=exchange["is_balanced"],
                    value_currency=currency,
                )
                TransactionParticipant.objects.bulk_create(
                    [
                        TransactionParticipant(
                            transaction=txn,
                            user_id=swap_request.requester_id,
                            role=ParticipantRole.REQUESTER,
                            offered_title=swap_request.return_title,
                            offered_description=swap_request.return_description,
                            offered_category=swap_request.return_category,
                            offered_value=swap_request.return_value_amount,
                            offered_currency=swap_request.return_value_currency,
                            received_title=offer_title,
                            received_description=offer_description,
                            received_category=offer_category,
                        ),
                        TransactionParticipant(
                            transaction=txn,
                            user_id=swap_request.offer_owner_id,
                            role=ParticipantRole.OFFER_OWNER,
                            offered_title=offer_title,
                            offered_description=offer_description,
                            offered_category=offer_category,
                            offered_value=offer_value,
                            offered_currency=currency,
                            received_title=swap_request.return_title,
                            received_description=swap_request.return_description,
                            received_category=swap_request.return_category,
                        ),
                    ]
                )
        except IntegrityError:
            return SwapTransaction.objects.get(request=swap_request)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Swap transaction {txn.pk} opened for request {swap_request.pk} "
            f"({txn.transaction_type}, balanced={txn.is_balanced}) in {duration:.2f}ms"
        )
        return txn

    @staticmethod
    @transaction.atomic
    def start_for_request(swap_request) -> SwapTransaction:
        """Open the request's transaction if needed and make sure it is running."""
        txn = TransactionLedgerService.open(swap_request)
        if txn.status == TransactionStatus.PENDING:
            txn.transition(
                [TransactionStatus.PENDING],
                TransactionStatus.IN_PROGRESS,
                actual_start_date=swap_request.actual_start_date or timezone.now(),
            )
        return txn

    @staticmethod
    @transaction.atomic
    def cancel_for_request(swap_request) -> Optional[SwapTransaction]:
        txn = SwapTransaction.objects.filter(request=swap_request).first()
        if txn is None or txn.status not in (
            TransactionStatus.PENDING,
            TransactionStatus.IN_PROGRESS,
        ):
            return txn
        txn.transition(
            [TransactionStatus.PENDING, TransactionStatus.IN_PROGRESS],
            TransactionStatus.CANCELLED,
        )
        logger.info(f"Swap transaction {txn.pk} cancelled with request {swap_request.pk}")
        return txn

    @staticmethod
    @transaction.atomic
    def revalue(transaction_id, actor, role, amount) -> SwapTransaction:
        """
        Change what one side's contribution is worth; the value exchange
        is recomputed in the same write.
        """
        if role not in ParticipantRole.values:
            raise ValidationError(f"Unknown participant role '{role}'.")
        amount = _parse_amount(amount)

        txn = TransactionLedgerService._get(transaction_id)
        actor.require(
            SwapAction.TRANSACTION_REVALUE,
            txn,
            "Only participants or moderators can change transaction values.",
        )
        if txn.status in (TransactionStatus.COMPLETED, TransactionStatus.CANCELLED):
            raise ConflictError(f"Cannot change values of a {txn.status} transaction.")

        participants = {
            p.role: p
            for p in TransactionParticipant.objects.select_for_update().filter(transaction=txn)
        }
        participants[role].offered_value = amount
        participants[role].save(update_fields=["offered_value", "updated_at"])

        exchange = compute_value_exchange(
            participants[ParticipantRole.REQUESTER].offered_value,
            participants[ParticipantRole.OFFER_OWNER].offered_value,
        )
        txn.bump(
            value_total=exchange["total"],
            value_difference=exchange["difference"],
            is_balanced=exchange["is_balanced"],
        )
        logger.info(
            f"Swap transaction {txn.pk} revalued: total={txn.value_total}, "
            f"difference={txn.value_difference}, balanced={txn.is_balanced}"
        )
        return txn

    @staticmethod
    def _clean_categories(categories) -> List[dict]:
        cleaned = []
        seen = set()
        for item in categories or []:
            if not isinstance(item, dict):
                raise ValidationError("Each category rating needs a category and a rating.")
            category = item.get("category")
            if category not in FeedbackCategory.values:
                raise ValidationError(f"Unknown feedback category '{category}'.")
            if category in seen:
                raise ValidationError(f"Category '{category}' rated twice.")
            seen.add(category)
            cleaned.append({"category": category, "rating": validate_rating(item.get("rating"))})
        return cleaned

    @staticmethod
    @transaction.atomic
    def add_feedback(
        transaction_id, actor, to_user_id, rating, comment="", categories=None
    ) -> TransactionFeedback:
        """
        One rating per ordered pair of participants. Updates the rated
        user's profile and, for requester -> owner feedback, the offer.
        """
        start_time = timezone.now()
        txn = TransactionLedgerService._get(transaction_id)
        actor.require(
            SwapAction.TRANSACTION_PARTICIPATE,
            txn,
            "Only participants can leave feedback on this swap.",
        )
        if to_user_id == actor.user_id or to_user_id not in txn.participant_ids():
            raise ValidationError("Feedback must be addressed to the other participant.")
        validate_rating(rating)
        comment = (comment or "").strip()
        if len(comment) > 500:
            raise ValidationError("Comment cannot exceed 500 characters.")
        categories = TransactionLedgerService._clean_categories(categories)

        if txn.status in (TransactionStatus.PENDING, TransactionStatus.CANCELLED):
            raise ConflictError(f"Feedback is not accepted on a {txn.status} transaction.")

        duplicate = "You have already left feedback for this participant."
        if TransactionFeedback.objects.filter(
            transaction=txn, from_user_id=actor.user_id, to_user_id=to_user_id
        ).exists():
            raise ConflictError(duplicate)
        try:
            with transaction.atomic():
                feedback = TransactionFeedback.objects.create(
                    transaction=txn,
                    from_user_id=actor.user_id,
                    to_user_id=to_user_id,
                    rating=rating,
                    comment=comment,
                    categories=categories,
                )
        except IntegrityError:
            raise ConflictError(duplicate)

        RatingAggregator.apply(to_user_id, rating)

        requester = txn.participant(ParticipantRole.REQUESTER)
        owner = txn.participant(ParticipantRole.OFFER_OWNER)
        if (
            actor.user_id == requester.user_id
            and to_user_id == owner.user_id
            and txn.request.offer_id is not None
        ):
            OfferCatalogService.apply_rating(txn.request.offer_id, rating)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Feedback {feedback.pk} ({rating}*) on transaction {txn.pk} stored in {duration:.2f}ms"
        )
        return feedback

    @staticmethod
    def _clean_deliverables(deliverables) -> List[dict]:
        cleaned = []
        for item in deliverables or []:
            title = (item.get("title") or "").strip() if isinstance(item, dict) else ""
            if not title:
                raise ValidationError("Each deliverable needs a title.")
            kind = item.get("kind") or DeliverableKind.OTHER
            if kind not in DeliverableKind.values:
                raise ValidationError(f"Unknown deliverable kind '{kind}'.")
            cleaned.append(
                {
                    "title": title[:200],
                    "description": item.get("description") or "",
                    "url": item.get("url") or "",
                    "kind": kind,
                }
            )
        return cleaned

    @staticmethod
    @transaction.atomic
    def complete(transaction_id, actor, notes="", deliverables=None) -> SwapTransaction:
        txn = TransactionLedgerService._get(transaction_id)
        actor.require(
            SwapAction.TRANSACTION_PARTICIPATE,
            txn,
            "Only participants can complete this swap.",
        )
        deliverables = TransactionLedgerService._clean_deliverables(deliverables)

        now = timezone.now()
        txn.transition(
            [TransactionStatus.IN_PROGRESS],
            TransactionStatus.COMPLETED,
            completed_at=now,
            completed_by_id=actor.user_id,
            completion_notes=(notes or "").strip(),
            actual_end_date=now,
        )
        TransactionDeliverable.objects.bulk_create(
            [TransactionDeliverable(transaction=txn, **item) for item in deliverables]
        )

        participant_ids = txn.participant_ids()
        SwapProfileService.increment(list(participant_ids), "total_completed")
        offer = txn.request.offer
        emit_swap_event(
            TRANSACTION_COMPLETED,
            participant_ids,
            transaction_id=txn.pk,
            request_id=txn.request_id,
            offer_title=offer.title if offer else "",
        )
        logger.info(f"Swap transaction {txn.pk} completed by user {actor.user_id}")
        return txn

    @staticmethod
    @transaction.atomic
    def raise_dispute(transaction_id, actor, reason, description) -> SwapTransaction:
        txn = TransactionLedgerService._get(transaction_id)
        DisputeService.raise_dispute(
            txn,
            actor,
            reason,
            description,
            from_statuses=[TransactionStatus.PENDING, TransactionStatus.IN_PROGRESS],
            disputed_status=TransactionStatus.DISPUTED,
            participate_action=SwapAction.TRANSACTION_PARTICIPATE,
        )
        emit_swap_event(
            DISPUTE_RAISED,
            [txn.other_participant_id(actor.user_id)],
            actor_name=actor.user.get_full_name(),
            resource="swap transaction",
            resource_id=txn.pk,
        )
        return txn

    @staticmethod
    @transaction.atomic
    def resolve_dispute(transaction_id, actor, status, resolution) -> SwapTransaction:
        txn = TransactionLedgerService._get(transaction_id)
        return DisputeService.resolve_dispute(
            txn, actor, status, resolution, TransactionStatus.DISPUTED
        )

    @staticmethod
    def get_feedback_between(transaction_id, user_a, user_b):
        return TransactionFeedback.objects.filter(transaction_id=transaction_id).filter(
            Q(from_user_id=user_a, to_user_id=user_b)
            | Q(from_user_id=user_b, to_user_id=user_a)
        )
