from django.test import TestCase
from django.contrib.auth import get_user_model

from apps.core.exceptions import ConcurrencyError, ConflictError
from apps.core.utils.sequence import append_sequenced
from apps.swap_offers.models import SwapOffer
from apps.swap_requests.models import RequestMessage, RequestStatus, SwapRequest

User = get_user_model()


class VersionedTransitionTest(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@test.com", password="testpass123")
        self.requester = User.objects.create_user(
            email="requester@test.com", password="testpass123"
        )
        self.offer = SwapOffer.objects.create(
            owner=self.owner,
            category="skill",
            title="Guitar lessons",
            description="Beginner friendly",
        )
        self.swap_request = SwapRequest.objects.create(
            requester=self.requester,
            offer_owner=self.owner,
            offer=self.offer,
            message="Interested!",
        )

    def test_transition_bumps_version(self):
        self.assertEqual(self.swap_request.version, 0)

        self.swap_request.transition([RequestStatus.PENDING], RequestStatus.ACCEPTED)

        self.assertEqual(self.swap_request.status, RequestStatus.ACCEPTED)
        self.assertEqual(self.swap_request.version, 1)

    def test_transition_from_wrong_status_conflicts(self):
        self.swap_request.transition([RequestStatus.PENDING], RequestStatus.REJECTED)

        with self.assertRaises(ConflictError):
            self.swap_request.transition([RequestStatus.PENDING], RequestStatus.ACCEPTED)

    def test_stale_copy_losing_status_race_conflicts(self):
        stale = SwapRequest.objects.get(pk=self.swap_request.pk)
        self.swap_request.transition([RequestStatus.PENDING], RequestStatus.ACCEPTED)

        with self.assertRaises(ConflictError):
            stale.transition([RequestStatus.PENDING], RequestStatus.REJECTED)

        self.swap_request.refresh_from_db()
        self.assertEqual(self.swap_request.status, RequestStatus.ACCEPTED)

    def test_stale_version_with_same_status_is_concurrency_error(self):
        stale = SwapRequest.objects.get(pk=self.swap_request.pk)
        self.swap_request.bump(proposed_terms="Two sessions a week")

        with self.assertRaises(ConcurrencyError):
            stale.transition([RequestStatus.PENDING], RequestStatus.ACCEPTED)

    def test_bump_rejects_stale_version(self):
        stale = SwapRequest.objects.get(pk=self.swap_request.pk)
        self.swap_request.bump(is_urgent=True)

        with self.assertRaises(ConcurrencyError):
            stale.bump(is_urgent=False)

        self.swap_request.refresh_from_db()
        self.assertTrue(self.swap_request.is_urgent)
        self.assertEqual(self.swap_request.version, 1)


class AppendSequencedTest(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(email="owner@test.com", password="testpass123")
        self.requester = User.objects.create_user(
            email="requester@test.com", password="testpass123"
        )
        self.first = SwapRequest.objects.create(
            requester=self.requester, offer_owner=self.owner, message="First"
        )
        self.second = SwapRequest.objects.create(
            requester=self.requester, offer_owner=self.owner, message="Second"
        )

    def test_sequences_are_contiguous_per_parent(self):
        for body in ("hello", "hi", "when works?"):
            append_sequenced(
                RequestMessage, "request", self.first, sender=self.requester, body=body
            )
        other = append_sequenced(
            RequestMessage, "request", self.second, sender=self.owner, body="hey"
        )

        self.assertEqual(
            list(self.first.messages.values_list("sequence", "body")),
            [(1, "hello"), (2, "hi"), (3, "when works?")],
        )
        self.assertEqual(other.sequence, 1)
