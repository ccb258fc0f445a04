from decimal import Decimal

import pytest

from apps.core.exceptions import AuthorizationError, ConflictError, ValidationError
from apps.swap_offers.models import SwapOffer
from apps.swap_requests.services import NegotiationService
from apps.swap_transactions.models import (
    ParticipantRole,
    SwapTransaction,
    TransactionStatus,
    TransactionType,
)
from apps.swap_transactions.services import (
    TransactionLedgerService,
    compute_value_exchange,
    derive_transaction_type,
)
from apps.users.models import SwapProfile


@pytest.fixture
def running_transaction(confirmed_request, owner, actor_for):
    NegotiationService.start(confirmed_request.id, actor_for(owner))
    return SwapTransaction.objects.get(request=confirmed_request)


class TestValueExchange:
    def test_balanced_within_tolerance(self):
        assert compute_value_exchange(Decimal("100"), Decimal("70")) == {
            "total": Decimal("170.00"),
            "difference": Decimal("30.00"),
            "is_balanced": True,
        }

    def test_unbalanced_beyond_tolerance(self):
        result = compute_value_exchange(Decimal("100"), Decimal("50"))
        assert result["difference"] == Decimal("50.00")
        assert result["is_balanced"] is False

    def test_missing_values_count_as_zero(self):
        assert compute_value_exchange(None, None) == {
            "total": Decimal("0.00"),
            "difference": Decimal("0.00"),
            "is_balanced": True,
        }
        assert compute_value_exchange(Decimal("10"), None)["is_balanced"] is False

    def test_custom_tolerance(self):
        assert compute_value_exchange(100, 50, tolerance=Decimal("0.5"))["is_balanced"]

    def test_transaction_type(self):
        assert derive_transaction_type("item", "item") == TransactionType.ITEM_SWAP
        assert derive_transaction_type("skill", "") == TransactionType.SKILL_SWAP
        assert derive_transaction_type("skill", "service") == TransactionType.MIXED
        assert derive_transaction_type("other", "other") == TransactionType.MIXED


@pytest.mark.django_db
class TestOpen:
    def test_open_is_idempotent(self, confirmed_request):
        first = confirmed_request.transaction

        again = TransactionLedgerService.open(confirmed_request)

        assert again.pk == first.pk
        assert SwapTransaction.objects.count() == 1
        assert first.participants.count() == 2

    def test_participants_mirror_each_other(self, confirmed_request, owner, requester):
        txn = confirmed_request.transaction
        req = txn.participant(ParticipantRole.REQUESTER)
        own = txn.participant(ParticipantRole.OFFER_OWNER)

        assert (req.user_id, own.user_id) == (requester.id, owner.id)
        assert req.offered_title == own.received_title == "Spanish lessons"
        assert own.offered_title == req.received_title == "Python mentoring"
        assert own.offered_value == Decimal("100.00")
        assert txn.participant_ids() == {owner.id, requester.id}
        assert txn.other_participant_id(owner.id) == requester.id


@pytest.mark.django_db
class TestRevalue:
    def test_revalue_recomputes_exchange(self, confirmed_request, requester, actor_for):
        txn = confirmed_request.transaction

        txn = TransactionLedgerService.revalue(
            txn.id, actor_for(requester), ParticipantRole.REQUESTER, "50"
        )

        assert txn.value_total == Decimal("150.00")
        assert txn.value_difference == Decimal("50.00")
        assert txn.is_balanced is False
        assert txn.participant(ParticipantRole.REQUESTER).offered_value == Decimal("50.00")

    def test_moderator_may_revalue(self, confirmed_request, moderator, actor_for):
        txn = TransactionLedgerService.revalue(
            confirmed_request.transaction.id,
            actor_for(moderator),
            ParticipantRole.OFFER_OWNER,
            Decimal("70"),
        )
        assert txn.value_difference == Decimal("0.00")
        assert txn.is_balanced is True

    def test_outsider_cannot_revalue(self, confirmed_request, make_user, actor_for):
        with pytest.raises(AuthorizationError):
            TransactionLedgerService.revalue(
                confirmed_request.transaction.id,
                actor_for(make_user()),
                ParticipantRole.REQUESTER,
                "10",
            )

    def test_negative_value_rejected(self, confirmed_request, requester, actor_for):
        with pytest.raises(ValidationError):
            TransactionLedgerService.revalue(
                confirmed_request.transaction.id,
                actor_for(requester),
                ParticipantRole.REQUESTER,
                "-5",
            )


@pytest.mark.django_db
class TestFeedback:
    def test_feedback_updates_profile_and_offer(
        self, running_transaction, owner, requester, actor_for
    ):
        feedback = TransactionLedgerService.add_feedback(
            running_transaction.id,
            actor_for(requester),
            owner.id,
            5,
            "Great mentor",
            [{"category": "communication", "rating": 4}],
        )

        assert feedback.rating == 5
        profile = SwapProfile.objects.get(user=owner)
        assert (profile.average_rating, profile.total_ratings) == (Decimal("5.00"), 1)
        offer = SwapOffer.objects.get(pk=running_transaction.request.offer_id)
        assert (offer.rating_average, offer.rating_count) == (Decimal("5.00"), 1)

    def test_owner_feedback_leaves_offer_rating_alone(
        self, running_transaction, owner, requester, actor_for
    ):
        TransactionLedgerService.add_feedback(
            running_transaction.id, actor_for(owner), requester.id, 3
        )

        assert SwapProfile.objects.get(user=requester).average_rating == Decimal("3.00")
        offer = SwapOffer.objects.get(pk=running_transaction.request.offer_id)
        assert offer.rating_count == 0

    def test_duplicate_feedback_conflicts(self, running_transaction, owner, requester, actor_for):
        TransactionLedgerService.add_feedback(
            running_transaction.id, actor_for(requester), owner.id, 4
        )

        with pytest.raises(ConflictError):
            TransactionLedgerService.add_feedback(
                running_transaction.id, actor_for(requester), owner.id, 1
            )

        profile = SwapProfile.objects.get(user=owner)
        assert (profile.average_rating, profile.total_ratings) == (Decimal("4.00"), 1)

    def test_feedback_must_target_other_participant(
        self, running_transaction, requester, make_user, actor_for
    ):
        with pytest.raises(ValidationError):
            TransactionLedgerService.add_feedback(
                running_transaction.id, actor_for(requester), requester.id, 5
            )
        with pytest.raises(ValidationError):
            TransactionLedgerService.add_feedback(
                running_transaction.id, actor_for(requester), make_user().id, 5
            )

    def test_feedback_rejected_before_start(self, confirmed_request, owner, requester, actor_for):
        with pytest.raises(ConflictError):
            TransactionLedgerService.add_feedback(
                confirmed_request.transaction.id, actor_for(requester), owner.id, 5
            )

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, running_transaction, owner, requester, actor_for, rating):
        with pytest.raises(ValidationError):
            TransactionLedgerService.add_feedback(
                running_transaction.id, actor_for(requester), owner.id, rating
            )

    def test_repeated_category_rejected(self, running_transaction, owner, requester, actor_for):
        with pytest.raises(ValidationError):
            TransactionLedgerService.add_feedback(
                running_transaction.id,
                actor_for(requester),
                owner.id,
                5,
                categories=[
                    {"category": "quality", "rating": 5},
                    {"category": "quality", "rating": 4},
                ],
            )

    def test_feedback_allowed_after_completion(
        self, running_transaction, owner, requester, actor_for
    ):
        TransactionLedgerService.complete(running_transaction.id, actor_for(owner))

        feedback = TransactionLedgerService.add_feedback(
            running_transaction.id, actor_for(owner), requester.id, 4
        )

        assert feedback.pk is not None
        feedback_pair = TransactionLedgerService.get_feedback_between(
            running_transaction.id, owner.id, requester.id
        )
        assert list(feedback_pair) == [feedback]


@pytest.mark.django_db
class TestComplete:
    def test_complete_counts_for_both(self, running_transaction, owner, requester, actor_for):
        txn = TransactionLedgerService.complete(
            running_transaction.id,
            actor_for(requester),
            "Learned a lot",
            [{"title": "Session notes", "url": "https://example.com/notes", "kind": "link"}],
        )

        assert txn.status == TransactionStatus.COMPLETED
        assert txn.completed_by_id == requester.id
        assert txn.deliverables.get().kind == "link"
        for user in (owner, requester):
            assert SwapProfile.objects.get(user=user).total_completed == 1

    def test_complete_requires_running_transaction(
        self, confirmed_request, requester, actor_for
    ):
        with pytest.raises(ConflictError):
            TransactionLedgerService.complete(
                confirmed_request.transaction.id, actor_for(requester)
            )

    def test_deliverable_needs_title(self, running_transaction, requester, actor_for):
        with pytest.raises(ValidationError):
            TransactionLedgerService.complete(
                running_transaction.id, actor_for(requester), deliverables=[{"url": ""}]
            )


@pytest.mark.django_db
class TestTransactionDisputes:
    def test_dispute_running_transaction(self, running_transaction, owner, moderator, actor_for):
        txn = TransactionLedgerService.raise_dispute(
            running_transaction.id, actor_for(owner), "poor_quality", "Half the sessions"
        )
        assert txn.status == TransactionStatus.DISPUTED

        txn = TransactionLedgerService.resolve_dispute(
            running_transaction.id, actor_for(moderator), "under_review", ""
        )
        assert txn.dispute_status == "under_review"
        assert txn.dispute_resolved_at is None

    def test_completed_transaction_cannot_be_disputed(
        self, running_transaction, owner, actor_for
    ):
        TransactionLedgerService.complete(running_transaction.id, actor_for(owner))

        with pytest.raises(ConflictError):
            TransactionLedgerService.raise_dispute(
                running_transaction.id, actor_for(owner), "other", "Too late"
            )

    def test_list_transactions(self, running_transaction, owner, make_user, actor_for):
        assert list(TransactionLedgerService.list_transactions(actor_for(owner))) == [
            running_transaction
        ]
        assert not TransactionLedgerService.list_transactions(
            actor_for(owner), {"status": ["completed"]}
        ).exists()
        assert not TransactionLedgerService.list_transactions(actor_for(make_user())).exists()
