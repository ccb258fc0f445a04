from datetime import date
from decimal import Decimal

import pytest

from apps.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from apps.disputes.models import DisputeStatus
from apps.swap_offers.models import OfferStatus, SwapOffer
from apps.swap_offers.services import OfferCatalogService
from apps.swap_requests.models import (
    NegotiationStatus,
    RequestStatus,
    SwapRequest,
)
from apps.swap_requests.services import NegotiationService, NegotiationValidationService
from apps.swap_transactions.models import ParticipantRole, SwapTransaction, TransactionStatus
from apps.users.models import SwapProfile


@pytest.mark.django_db
class TestCreateRequest:
    def test_creates_pending_request(self, owner, requester, make_offer, make_request):
        offer = make_offer(owner)

        swap_request = make_request(requester, offer, is_urgent=True)

        assert swap_request.status == RequestStatus.PENDING
        assert swap_request.offer_owner_id == owner.id
        assert swap_request.is_urgent is True
        offer.refresh_from_db()
        assert offer.requests == 1
        assert SwapProfile.objects.get(user=requester).total_requests == 1

    def test_duplicate_live_request_conflicts(self, owner, requester, make_offer, make_request):
        offer = make_offer(owner)
        make_request(requester, offer)

        with pytest.raises(ConflictError):
            make_request(requester, offer, message="Trying again")

        assert SwapRequest.objects.filter(requester=requester, offer=offer).count() == 1
        offer.refresh_from_db()
        assert offer.requests == 1

    def test_new_request_allowed_after_rejection(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        offer = make_offer(owner)
        first = make_request(requester, offer)
        NegotiationService.respond(first.id, actor_for(owner), RequestStatus.REJECTED)

        second = make_request(requester, offer)

        assert second.id != first.id

    def test_owner_cannot_request_own_offer(self, owner, make_offer, make_request):
        offer = make_offer(owner)
        with pytest.raises(AuthorizationError):
            make_request(owner, offer)

    def test_inactive_offer_rejects_requests(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        offer = make_offer(owner)
        OfferCatalogService.set_status(offer.id, actor_for(owner), OfferStatus.PAUSED)

        with pytest.raises(ConflictError):
            make_request(requester, offer)

    def test_message_required(self, owner, requester, make_offer, make_request):
        offer = make_offer(owner)
        with pytest.raises(ValidationError):
            make_request(requester, offer, message="   ")

    def test_guests_capped_by_accommodation(self):
        offer = SwapOffer(category="accommodation", accommodation={"maxGuests": 2})
        today = date.today()

        result = NegotiationValidationService.validate_request_payload(
            {
                "message": "Summer stay",
                "return_title": "Airport pickup",
                "return_description": "Pickup and drop-off for the whole stay",
                "return_category": "service",
                "number_of_guests": 3,
                "check_in_date": today,
                "check_out_date": today,
            },
            offer,
        )

        assert set(result["errors"]) == {"number_of_guests", "check_out_date"}

    def test_return_offer_required(self, owner, requester, make_offer, actor_for):
        offer = make_offer(owner)

        with pytest.raises(ValidationError) as exc:
            NegotiationService.create_request(
                actor_for(requester), offer.id, {"message": "Happy to swap"}
            )

        assert set(exc.value.detail) == {"return_title", "return_description", "return_category"}
        assert not SwapRequest.objects.filter(offer=offer).exists()

    def test_return_category_must_be_known(self):
        result = NegotiationValidationService.validate_request_payload(
            {
                "message": "Happy to swap",
                "return_title": "Bike tune-up",
                "return_description": "Full service of a road bike",
                "return_category": "bartering",
            },
            SwapOffer(category="skill"),
        )

        assert set(result["errors"]) == {"return_category"}

    def test_private_offer_is_not_found(self, owner, requester, make_offer, make_request):
        offer = make_offer(owner, is_public=False)

        with pytest.raises(NotFoundError):
            make_request(requester, offer)

        assert not SwapRequest.objects.filter(offer=offer).exists()


@pytest.mark.django_db
class TestRespond:
    def test_second_response_conflicts(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        swap_request = make_request(requester, make_offer(owner))

        accepted = NegotiationService.respond(
            swap_request.id, actor_for(owner), RequestStatus.ACCEPTED, "Sounds good"
        )
        assert accepted.status == RequestStatus.ACCEPTED
        assert accepted.version == 1
        assert accepted.messages.get().body == "Sounds good"

        with pytest.raises(ConflictError):
            NegotiationService.respond(swap_request.id, actor_for(owner), RequestStatus.REJECTED)

        swap_request.refresh_from_db()
        assert swap_request.status == RequestStatus.ACCEPTED

    def test_only_live_owner_responds(self, owner, requester, make_offer, make_request, actor_for):
        swap_request = make_request(requester, make_offer(owner))

        with pytest.raises(AuthorizationError):
            NegotiationService.respond(
                swap_request.id, actor_for(requester), RequestStatus.ACCEPTED
            )

    def test_unknown_decision(self, owner, requester, make_offer, make_request, actor_for):
        swap_request = make_request(requester, make_offer(owner))
        with pytest.raises(ValidationError):
            NegotiationService.respond(swap_request.id, actor_for(owner), "completed")


@pytest.mark.django_db
class TestNegotiation:
    def test_negotiation_confirms_and_opens_transaction(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        swap_request = make_request(requester, make_offer(owner))
        NegotiationService.respond(swap_request.id, actor_for(owner), RequestStatus.NEGOTIATING)

        first = NegotiationService.add_negotiation(
            swap_request.id, actor_for(requester), "Could we do Tuesdays?"
        )
        second = NegotiationService.add_negotiation(
            swap_request.id, actor_for(requester), "Or Thursdays"
        )
        assert (first.sequence, second.sequence) == (1, 2)

        with pytest.raises(AuthorizationError):
            NegotiationService.respond_to_negotiation(
                swap_request.id, first.id, actor_for(requester), NegotiationStatus.ACCEPTED
            )

        NegotiationService.respond_to_negotiation(
            swap_request.id, first.id, actor_for(owner), NegotiationStatus.REJECTED
        )
        swap_request.refresh_from_db()
        assert swap_request.status == RequestStatus.NEGOTIATING

        confirmed, entry = NegotiationService.respond_to_negotiation(
            swap_request.id, second.id, actor_for(owner), NegotiationStatus.ACCEPTED
        )
        assert entry.status == NegotiationStatus.ACCEPTED
        assert entry.responded_by_id == owner.id
        assert confirmed.status == RequestStatus.CONFIRMED

        txn = SwapTransaction.objects.get(request=swap_request)
        assert txn.status == TransactionStatus.PENDING
        assert txn.participant(ParticipantRole.REQUESTER).user_id == requester.id
        assert txn.participant(ParticipantRole.OFFER_OWNER).received_title == "Spanish lessons"

    def test_proposal_answered_once(self, owner, requester, make_offer, make_request, actor_for):
        swap_request = make_request(requester, make_offer(owner))
        entry = NegotiationService.add_negotiation(
            swap_request.id, actor_for(owner), "Two sessions instead of three"
        )
        NegotiationService.respond_to_negotiation(
            swap_request.id, entry.id, actor_for(requester), NegotiationStatus.REJECTED
        )

        with pytest.raises(ConflictError):
            NegotiationService.respond_to_negotiation(
                swap_request.id, entry.id, actor_for(requester), NegotiationStatus.ACCEPTED
            )

    def test_accepting_on_pending_request_does_not_confirm(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        swap_request = make_request(requester, make_offer(owner))
        entry = NegotiationService.add_negotiation(
            swap_request.id, actor_for(requester), "Longer sessions"
        )

        swap_request, _ = NegotiationService.respond_to_negotiation(
            swap_request.id, entry.id, actor_for(owner), NegotiationStatus.ACCEPTED
        )

        assert swap_request.status == RequestStatus.PENDING
        assert not SwapTransaction.objects.exists()

    def test_no_negotiation_once_confirmed(self, confirmed_request, requester, actor_for):
        with pytest.raises(ConflictError):
            NegotiationService.add_negotiation(
                confirmed_request.id, actor_for(requester), "One more thing"
            )

    def test_stale_proposal_cannot_be_accepted_once_confirmed(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        swap_request = make_request(requester, make_offer(owner))
        NegotiationService.respond(swap_request.id, actor_for(owner), RequestStatus.NEGOTIATING)
        stale = NegotiationService.add_negotiation(
            swap_request.id, actor_for(owner), "Three sessions"
        )
        agreed = NegotiationService.add_negotiation(
            swap_request.id, actor_for(owner), "Two longer sessions"
        )
        NegotiationService.respond_to_negotiation(
            swap_request.id, agreed.id, actor_for(requester), NegotiationStatus.ACCEPTED
        )

        with pytest.raises(ConflictError):
            NegotiationService.respond_to_negotiation(
                swap_request.id, stale.id, actor_for(requester), NegotiationStatus.ACCEPTED
            )

        stale.refresh_from_db()
        assert stale.status == NegotiationStatus.PROPOSED


@pytest.mark.django_db
class TestConfirmStartComplete:
    def test_confirm_opens_transaction_with_value_exchange(self, confirmed_request):
        assert confirmed_request.status == RequestStatus.CONFIRMED

        txn = confirmed_request.transaction
        assert txn.value_total == Decimal("170.00")
        assert txn.value_difference == Decimal("30.00")
        assert txn.is_balanced is True
        assert txn.transaction_type == "skill_swap"

    def test_only_requester_confirms(self, owner, requester, make_offer, make_request, actor_for):
        swap_request = make_request(requester, make_offer(owner))
        NegotiationService.respond(swap_request.id, actor_for(owner), RequestStatus.ACCEPTED)

        with pytest.raises(AuthorizationError):
            NegotiationService.confirm(swap_request.id, actor_for(owner))

    def test_deactivated_requester_cannot_confirm(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        swap_request = make_request(requester, make_offer(owner))
        NegotiationService.respond(swap_request.id, actor_for(owner), RequestStatus.ACCEPTED)
        requester.is_active = False
        requester.save(update_fields=["is_active"])

        with pytest.raises(AuthorizationError):
            NegotiationService.confirm(swap_request.id, actor_for(requester))

        swap_request.refresh_from_db()
        assert swap_request.status == RequestStatus.ACCEPTED

    def test_confirm_requires_accepted(self, owner, requester, make_offer, make_request, actor_for):
        swap_request = make_request(requester, make_offer(owner))
        with pytest.raises(ConflictError):
            NegotiationService.confirm(swap_request.id, actor_for(requester))

    def test_start_then_complete(self, confirmed_request, owner, requester, actor_for):
        started = NegotiationService.start(confirmed_request.id, actor_for(owner))
        assert started.status == RequestStatus.IN_PROGRESS
        assert started.actual_start_date is not None
        assert started.transaction.status == TransactionStatus.IN_PROGRESS

        completed = NegotiationService.complete(
            confirmed_request.id, actor_for(requester), "  All good  "
        )
        assert completed.status == RequestStatus.COMPLETED
        assert completed.completed_by_id == requester.id
        assert completed.completion_notes == "All good"

    def test_complete_straight_from_confirmed(self, confirmed_request, owner, actor_for):
        completed = NegotiationService.complete(confirmed_request.id, actor_for(owner))

        assert completed.status == RequestStatus.COMPLETED
        assert completed.actual_start_date is not None
        assert completed.transaction.status == TransactionStatus.IN_PROGRESS

    def test_outsider_cannot_start(self, confirmed_request, make_user, actor_for):
        with pytest.raises(AuthorizationError):
            NegotiationService.start(confirmed_request.id, actor_for(make_user()))


@pytest.mark.django_db
class TestMessages:
    def test_thread_and_unread_counts(self, owner, requester, make_offer, make_request, actor_for):
        swap_request = make_request(requester, make_offer(owner))

        NegotiationService.add_message(swap_request.id, actor_for(requester), "Hi!")
        NegotiationService.add_message(swap_request.id, actor_for(requester), "Still keen?")
        reply = NegotiationService.add_message(swap_request.id, actor_for(owner), "Yes")

        assert reply.sequence == 3
        assert NegotiationService.unread_count(swap_request, owner.id) == 2
        assert NegotiationService.unread_count(swap_request, requester.id) == 1

        assert NegotiationService.mark_messages_read(swap_request.id, actor_for(owner)) == 2
        assert NegotiationService.unread_count(swap_request, owner.id) == 0
        assert NegotiationService.unread_count(swap_request, requester.id) == 1

    def test_empty_message_rejected(self, owner, requester, make_offer, make_request, actor_for):
        swap_request = make_request(requester, make_offer(owner))
        with pytest.raises(ValidationError):
            NegotiationService.add_message(swap_request.id, actor_for(owner), "  ")

    def test_no_messages_on_terminal_request(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        swap_request = make_request(requester, make_offer(owner))
        NegotiationService.cancel(swap_request.id, actor_for(requester))

        with pytest.raises(ConflictError):
            NegotiationService.add_message(swap_request.id, actor_for(owner), "Wait")


@pytest.mark.django_db
class TestCancelAndDispute:
    def test_cancel_confirmed_request_cancels_transaction(
        self, confirmed_request, owner, actor_for
    ):
        cancelled = NegotiationService.cancel(confirmed_request.id, actor_for(owner))

        assert cancelled.status == RequestStatus.CANCELLED
        assert cancelled.transaction.status == TransactionStatus.CANCELLED
        with pytest.raises(ConflictError):
            NegotiationService.cancel(confirmed_request.id, actor_for(owner))

    def test_dispute_and_resolution(self, confirmed_request, requester, moderator, actor_for):
        disputed = NegotiationService.raise_dispute(
            confirmed_request.id, actor_for(requester), "non_completion", "Never showed up"
        )
        assert disputed.status == RequestStatus.DISPUTED
        assert disputed.dispute_status == DisputeStatus.OPEN
        assert disputed.dispute_raised_by_id == requester.id

        with pytest.raises(AuthorizationError):
            NegotiationService.resolve_dispute(
                confirmed_request.id, actor_for(requester), DisputeStatus.RESOLVED, "Done"
            )
        with pytest.raises(ValidationError):
            NegotiationService.resolve_dispute(
                confirmed_request.id, actor_for(moderator), DisputeStatus.RESOLVED, ""
            )

        resolved = NegotiationService.resolve_dispute(
            confirmed_request.id, actor_for(moderator), DisputeStatus.RESOLVED, "Refund agreed"
        )
        assert resolved.dispute_status == DisputeStatus.RESOLVED
        assert resolved.dispute_resolved_by_id == moderator.id
        assert resolved.dispute_resolved_at is not None

        with pytest.raises(ConflictError):
            NegotiationService.resolve_dispute(
                confirmed_request.id, actor_for(moderator), DisputeStatus.CLOSED, "Again"
            )

    def test_dispute_needs_known_reason(self, confirmed_request, requester, actor_for):
        with pytest.raises(ValidationError):
            NegotiationService.raise_dispute(
                confirmed_request.id, actor_for(requester), "boredom", "Meh"
            )

    def test_list_requests_by_type_and_status(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        sent = make_request(requester, make_offer(owner))
        received = make_request(owner, make_offer(requester, title="Sourdough class"))
        NegotiationService.respond(received.id, actor_for(requester), RequestStatus.REJECTED)
        actor = actor_for(requester)

        def ids(**filters):
            return {r.id for r in NegotiationService.list_requests(actor, filters)}

        assert ids() == {sent.id, received.id}
        assert ids(type="sent") == {sent.id}
        assert ids(type="received") == {received.id}
        assert ids(status=["rejected"]) == {received.id}

    def test_request_hidden_from_outsiders(self, confirmed_request, make_user, moderator, actor_for):
        with pytest.raises(AuthorizationError):
            NegotiationService.get_request(confirmed_request.id, actor_for(make_user()))
        assert NegotiationService.get_request(confirmed_request.id, actor_for(moderator))
