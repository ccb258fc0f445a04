import logging
from typing import Any, Dict, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.actors import SwapAction
from apps.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from apps.core.utils.sequence import append_sequenced
from apps.disputes.services import DisputeService
from apps.notifications.events import (
    DISPUTE_RAISED,
    REQUEST_CONFIRMED,
    REQUEST_CREATED,
    REQUEST_RESPONDED,
    emit_swap_event,
)
from apps.swap_offers.models import OfferStatus, SwapCategory
from apps.swap_offers.services import OfferCatalogService
from apps.swap_requests.models import (
    ACTIVE_REQUEST_STATUSES,
    OPEN_TERMS_STATUSES,
    NegotiationStatus,
    RequestMessage,
    RequestNegotiation,
    RequestStatus,
    SwapRequest,
)
from apps.swap_requests.utils.filters import SwapRequestFilter
from apps.swap_transactions.services import TransactionLedgerService
from apps.users.services.swap_profile import SwapProfileService

logger = logging.getLogger("requests_performance")

REQUEST_FIELDS = (
    "return_title",
    "return_description",
    "return_category",
    "return_value_amount",
    "return_value_currency",
    "return_duration",
    "return_available_from",
    "return_available_until",
    "message",
    "proposed_terms",
    "proposed_start_date",
    "proposed_end_date",
    "check_in_date",
    "check_out_date",
    "number_of_guests",
    "special_requests",
    "is_urgent",
    "priority",
)

RESPONSE_DECISIONS = (
    RequestStatus.ACCEPTED,
    RequestStatus.REJECTED,
    RequestStatus.NEGOTIATING,
)


class NegotiationValidationService:
    @staticmethod
    def validate_request_payload(payload: dict, offer) -> Dict[str, Any]:
        """
        Returns {"is_valid": bool, "errors": {field: message}} for a new
        request against `offer`.
        """
        errors = {}

        message = (payload.get("message") or "").strip()
        if not message:
            errors["message"] = "A message to the offer owner is required"
        elif len(message) > 1000:
            errors["message"] = "Message cannot exceed 1000 characters"

        return_title = (payload.get("return_title") or "").strip()
        if not return_title:
            errors["return_title"] = "Say what you offer in return"
        elif len(return_title) > 200:
            errors["return_title"] = "Return offer title cannot exceed 200 characters"

        return_description = (payload.get("return_description") or "").strip()
        if not return_description:
            errors["return_description"] = "Describe what you offer in return"
        elif len(return_description) > 1000:
            errors["return_description"] = "Return offer description cannot exceed 1000 characters"

        if payload.get("return_category") not in SwapCategory.values:
            errors["return_category"] = (
                f"Return category must be one of: {', '.join(SwapCategory.values)}"
            )

        pairs = (
            ("proposed_start_date", "proposed_end_date", "Proposed end date must be after the start date"),
            ("check_in_date", "check_out_date", "Check-out date must be after check-in date"),
            ("return_available_from", "return_available_until", "Return availability end must be after its start"),
        )
        for start_field, end_field, error in pairs:
            start, end = payload.get(start_field), payload.get(end_field)
            if start and end and start >= end:
                errors[end_field] = error

        guests = payload.get("number_of_guests")
        if guests is not None:
            if guests < 1:
                errors["number_of_guests"] = "Number of guests must be at least 1"
            elif offer.is_accommodation and isinstance(offer.accommodation, dict):
                max_guests = offer.accommodation.get("maxGuests")
                if isinstance(max_guests, int) and guests > max_guests:
                    errors["number_of_guests"] = (
                        f"This accommodation hosts at most {max_guests} guests"
                    )

        return {"is_valid": len(errors) == 0, "errors": errors}


class NegotiationService:
    """
    The swap request state machine:

        pending -> accepted | rejected | negotiating
        accepted | negotiating -> confirmed
        confirmed -> in_progress -> completed
        any non-terminal -> cancelled | disputed

    Every status write is a compare-and-set through
    `SwapRequest.transition`.
    """

    @staticmethod
    def _get(request_id) -> SwapRequest:
        try:
            return SwapRequest.objects.select_related(
                "offer", "requester", "offer_owner"
            ).get(pk=request_id)
        except (SwapRequest.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Swap request not found.")

    @staticmethod
    def _event_context(swap_request, actor=None, **extra):
        context = {
            "request_id": swap_request.pk,
            "offer_id": swap_request.offer_id,
            "offer_title": swap_request.offer.title if swap_request.offer_id else "",
        }
        if actor is not None:
            context["actor_name"] = actor.user.get_full_name()
        context.update(extra)
        return context

    @staticmethod
    def get_request(request_id, actor) -> SwapRequest:
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_VIEW, swap_request, "You are not part of this swap request."
        )
        return swap_request

    @staticmethod
    def list_requests(actor, filters=None):
        """Requests the actor takes part in, narrowed by `type` and `status`."""
        queryset = SwapRequest.objects.filter(
            Q(requester_id=actor.user_id) | Q(offer_owner_id=actor.user_id)
        ).select_related("offer", "requester", "offer_owner")
        filterset = SwapRequestFilter(filters or {}, queryset=queryset, actor=actor)
        if not filterset.is_valid():
            raise ValidationError({k: list(v) for k, v in filterset.errors.items()})
        return filterset.qs

    @staticmethod
    @transaction.atomic
    def create_request(actor, offer_id, payload: dict) -> SwapRequest:
        """
        Open a `pending` request against an active, public offer the
        actor does not own. One live request per (requester, offer).
        """
        start_time = timezone.now()
        offer = OfferCatalogService.get_live_offer(offer_id, lock=True)
        if not offer.is_public:
            raise NotFoundError("Swap offer not found.")
        if offer.status != OfferStatus.ACTIVE:
            raise ConflictError("This offer is not accepting requests.")
        actor.require(SwapAction.REQUEST_CREATE, offer, "You cannot request your own offer.")

        result = NegotiationValidationService.validate_request_payload(payload, offer)
        if not result["is_valid"]:
            raise ValidationError(result["errors"])

        if SwapRequest.objects.filter(
            requester_id=actor.user_id, offer=offer, status__in=ACTIVE_REQUEST_STATUSES
        ).exists():
            raise ConflictError("You already have an active request for this offer.")

        data = {key: payload[key] for key in REQUEST_FIELDS if key in payload}
        for key in ("message", "return_title", "return_description"):
            data[key] = data[key].strip()
        try:
            with transaction.atomic():
                swap_request = SwapRequest.objects.create(
                    requester_id=actor.user_id,
                    offer_owner_id=offer.owner_id,
                    offer=offer,
                    status=RequestStatus.PENDING,
                    **data,
                )
        except IntegrityError:
            raise ConflictError("You already have an active request for this offer.")

        OfferCatalogService.record_request_opened(offer.id)
        SwapProfileService.increment(actor.user_id, "total_requests")
        emit_swap_event(
            REQUEST_CREATED,
            [offer.owner_id],
            **NegotiationService._event_context(swap_request, actor),
        )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Swap request {swap_request.pk} created in {duration:.2f}ms")
        return swap_request

    @staticmethod
    @transaction.atomic
    def respond(request_id, actor, decision, message=None) -> SwapRequest:
        """Offer owner accepts, rejects or opens negotiation on a pending request."""
        if decision not in RESPONSE_DECISIONS:
            raise ValidationError(f"Unknown response '{decision}'.")

        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_RESPOND,
            swap_request,
            "Only the offer owner can respond to this request.",
        )
        swap_request.transition([RequestStatus.PENDING], decision)

        if message and message.strip():
            NegotiationService._append_message(swap_request, actor, message)

        emit_swap_event(
            REQUEST_RESPONDED,
            [swap_request.requester_id],
            **NegotiationService._event_context(swap_request, actor, decision=decision),
        )
        logger.info(f"Swap request {swap_request.pk} {decision} by user {actor.user_id}")
        return swap_request

    @staticmethod
    @transaction.atomic
    def add_negotiation(request_id, actor, changes) -> RequestNegotiation:
        """Propose changed terms while the request is not yet confirmed."""
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_PARTICIPATE,
            swap_request,
            "Only participants can negotiate this request.",
        )
        if swap_request.status not in OPEN_TERMS_STATUSES:
            raise ConflictError(
                f"Terms cannot be negotiated on a {swap_request.status} request."
            )
        changes = (changes or "").strip()
        if not changes:
            raise ValidationError("Describe the proposed changes.")
        if len(changes) > 1000:
            raise ValidationError("Proposed changes cannot exceed 1000 characters.")

        entry = append_sequenced(
            RequestNegotiation,
            "request",
            swap_request,
            proposed_by_id=actor.user_id,
            changes=changes,
            status=NegotiationStatus.PROPOSED,
        )
        logger.info(f"Negotiation {entry.sequence} proposed on request {swap_request.pk}")
        return entry

    @staticmethod
    @transaction.atomic
    def respond_to_negotiation(
        request_id, negotiation_id, actor, decision
    ) -> Tuple[SwapRequest, RequestNegotiation]:
        """
        The participant who did not propose an entry accepts or rejects it.
        Accepting confirms an accepted/negotiating request and opens its
        transaction.
        """
        if decision not in (NegotiationStatus.ACCEPTED, NegotiationStatus.REJECTED):
            raise ValidationError(f"Unknown negotiation response '{decision}'.")

        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_PARTICIPATE,
            swap_request,
            "Only participants can answer this negotiation.",
        )
        try:
            entry = RequestNegotiation.objects.get(pk=negotiation_id, request=swap_request)
        except (RequestNegotiation.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Negotiation entry not found.")

        if entry.proposed_by_id == actor.user_id:
            raise AuthorizationError("You cannot answer your own proposal.")
        if swap_request.status not in OPEN_TERMS_STATUSES:
            raise ConflictError(
                f"Proposals cannot be answered on a {swap_request.status} request."
            )

        now = timezone.now()
        answered = RequestNegotiation.objects.filter(
            pk=entry.pk, status=NegotiationStatus.PROPOSED
        ).update(status=decision, responded_by_id=actor.user_id, responded_at=now)
        if not answered:
            raise ConflictError("This proposal has already been answered.")
        entry.refresh_from_db()

        if decision == NegotiationStatus.ACCEPTED and swap_request.status in (
            RequestStatus.ACCEPTED,
            RequestStatus.NEGOTIATING,
        ):
            NegotiationService._confirm(swap_request, actor)

        return swap_request, entry

    @staticmethod
    def _confirm(swap_request, actor):
        swap_request.transition(
            [RequestStatus.ACCEPTED, RequestStatus.NEGOTIATING], RequestStatus.CONFIRMED
        )
        TransactionLedgerService.open(swap_request)
        emit_swap_event(
            REQUEST_CONFIRMED,
            swap_request.participant_ids(),
            **NegotiationService._event_context(swap_request, actor),
        )
        logger.info(f"Swap request {swap_request.pk} confirmed")

    @staticmethod
    @transaction.atomic
    def confirm(request_id, actor) -> SwapRequest:
        """Requester takes an accepted request as-is."""
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_CONFIRM,
            swap_request,
            "Only the requester can confirm this request.",
        )
        if swap_request.status != RequestStatus.ACCEPTED:
            raise ConflictError(
                f"Cannot move swap request from '{swap_request.status}' to 'confirmed'."
            )
        NegotiationService._confirm(swap_request, actor)
        return swap_request

    @staticmethod
    @transaction.atomic
    def start(request_id, actor) -> SwapRequest:
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_PARTICIPATE, swap_request, "Only participants can start this swap."
        )
        swap_request.transition(
            [RequestStatus.CONFIRMED],
            RequestStatus.IN_PROGRESS,
            actual_start_date=timezone.now(),
        )
        TransactionLedgerService.start_for_request(swap_request)
        logger.info(f"Swap request {swap_request.pk} started by user {actor.user_id}")
        return swap_request

    @staticmethod
    def _append_message(swap_request, actor, text) -> RequestMessage:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Message cannot be empty.")
        if len(text) > 2000:
            raise ValidationError("Message cannot exceed 2000 characters.")
        return append_sequenced(
            RequestMessage, "request", swap_request, sender_id=actor.user_id, body=text
        )

    @staticmethod
    @transaction.atomic
    def add_message(request_id, actor, text) -> RequestMessage:
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_PARTICIPATE,
            swap_request,
            "Only participants can message on this request.",
        )
        if swap_request.is_terminal:
            raise ConflictError(f"This request is already {swap_request.status}.")
        return NegotiationService._append_message(swap_request, actor, text)

    @staticmethod
    def mark_messages_read(request_id, actor) -> int:
        """Mark the other participant's messages as read; returns how many."""
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_PARTICIPATE, swap_request, "You are not part of this swap request."
        )
        return (
            swap_request.messages.filter(is_read=False)
            .exclude(sender_id=actor.user_id)
            .update(is_read=True)
        )

    @staticmethod
    def unread_count(swap_request, user_id) -> int:
        return swap_request.unread_count(user_id)

    @staticmethod
    @transaction.atomic
    def complete(request_id, actor, notes="") -> SwapRequest:
        """
        Either participant marks the swap done. A confirmed request that
        was never started is started at the same moment.
        """
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_PARTICIPATE,
            swap_request,
            "Only participants can complete this swap.",
        )
        now = timezone.now()
        swap_request.transition(
            [RequestStatus.IN_PROGRESS, RequestStatus.CONFIRMED],
            RequestStatus.COMPLETED,
            actual_start_date=swap_request.actual_start_date or now,
            actual_end_date=now,
            completed_at=now,
            completed_by_id=actor.user_id,
            completion_notes=(notes or "").strip(),
        )
        TransactionLedgerService.start_for_request(swap_request)
        logger.info(f"Swap request {swap_request.pk} completed by user {actor.user_id}")
        return swap_request

    @staticmethod
    @transaction.atomic
    def cancel(request_id, actor) -> SwapRequest:
        swap_request = NegotiationService._get(request_id)
        actor.require(
            SwapAction.REQUEST_PARTICIPATE,
            swap_request,
            "Only participants can cancel this request.",
        )
        swap_request.transition(ACTIVE_REQUEST_STATUSES, RequestStatus.CANCELLED)
        TransactionLedgerService.cancel_for_request(swap_request)
        logger.info(f"Swap request {swap_request.pk} cancelled by user {actor.user_id}")
        return swap_request

    @staticmethod
    @transaction.atomic
    def raise_dispute(request_id, actor, reason, description) -> SwapRequest:
        swap_request = NegotiationService._get(request_id)
        DisputeService.raise_dispute(
            swap_request,
            actor,
            reason,
            description,
            from_statuses=ACTIVE_REQUEST_STATUSES,
            disputed_status=RequestStatus.DISPUTED,
            participate_action=SwapAction.REQUEST_PARTICIPATE,
        )
        emit_swap_event(
            DISPUTE_RAISED,
            [swap_request.other_participant_id(actor.user_id)],
            **NegotiationService._event_context(
                swap_request, actor, resource="swap request", resource_id=swap_request.pk
            ),
        )
        return swap_request

    @staticmethod
    @transaction.atomic
    def resolve_dispute(request_id, actor, status, resolution) -> SwapRequest:
        swap_request = NegotiationService._get(request_id)
        return DisputeService.resolve_dispute(
            swap_request, actor, status, resolution, RequestStatus.DISPUTED
        )
