from decimal import Decimal
from unittest import mock

import pytest
from kombu.exceptions import OperationalError

from apps.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from apps.swap_offers.models import OfferStatus, SwapOffer
from apps.swap_offers.services import OfferCatalogService, OfferValidationService
from apps.users.models import SwapProfile


def accommodation_payload(**details):
    return {
        "category": "accommodation",
        "title": "Flat in Lisbon",
        "description": "Two bedroom flat near the river",
        "accommodation": {"propertyType": "apartment", **details},
    }


class TestOfferValidation:
    def test_valid_skill_offer(self, skill_offer_payload):
        result = OfferValidationService.validate_offer(skill_offer_payload)
        assert result == {"is_valid": True, "errors": {}}

    def test_accommodation_requires_max_guests(self):
        result = OfferValidationService.validate_offer(accommodation_payload())

        assert not result["is_valid"]
        assert result["errors"]["accommodation.maxGuests"] == (
            "Maximum guests must be at least 1 for accommodation offers"
        )

    def test_accommodation_requires_property_type(self):
        payload = accommodation_payload(maxGuests=2)
        payload["accommodation"].pop("propertyType")

        result = OfferValidationService.validate_offer(payload)

        assert result["errors"] == {
            "accommodation.propertyType": "Property type is required for accommodation offers"
        }

    def test_availability_window_must_be_ordered(self, skill_offer_payload):
        from django.utils import timezone

        now = timezone.now()
        payload = {**skill_offer_payload, "available_from": now, "available_until": now}

        result = OfferValidationService.validate_offer(payload)

        assert "available_until" in result["errors"]

    def test_clean_normalizes_tags_and_drops_accommodation(self, skill_offer_payload):
        payload = {
            **skill_offer_payload,
            "tags": ["Python", " python ", "Django", ""],
            "accommodation": {"maxGuests": 2},
        }

        cleaned = OfferValidationService.clean(payload)

        assert cleaned["tags"] == ["python", "django"]
        assert cleaned["accommodation"] is None

    def test_negative_value_rejected(self, skill_offer_payload):
        payload = {**skill_offer_payload, "estimated_value_amount": Decimal("-1")}
        with pytest.raises(ValidationError):
            OfferValidationService.clean(payload)


@pytest.mark.django_db
class TestCreateOffer:
    def test_create_offer_counts_towards_profile(self, owner, make_offer):
        offer = make_offer(owner)

        assert offer.status == OfferStatus.ACTIVE
        assert offer.owner_id == owner.id
        assert offer.views == 0 and offer.requests == 0
        assert offer.rating_average == Decimal("0.00") and offer.rating_count == 0
        assert SwapProfile.objects.get(user=owner).total_offers == 1

    def test_accommodation_without_max_guests_is_rejected(self, owner, actor_for):
        with pytest.raises(ValidationError):
            OfferCatalogService.create_offer(actor_for(owner), accommodation_payload())

        assert not SwapOffer.objects.exists()
        assert SwapProfile.objects.get(user=owner).total_offers == 0

    def test_accommodation_offer(self, owner, actor_for):
        offer = OfferCatalogService.create_offer(
            actor_for(owner), accommodation_payload(maxGuests=4, bedrooms=2)
        )
        assert offer.accommodation["maxGuests"] == 4

    def test_inactive_member_cannot_list(self, make_user, actor_for, skill_offer_payload):
        user = make_user(is_active=False)
        with pytest.raises(AuthorizationError):
            OfferCatalogService.create_offer(actor_for(user), skill_offer_payload)


@pytest.mark.django_db
class TestViewCounting:
    def test_two_views_count_twice(self, owner, make_offer):
        offer = make_offer(owner)

        assert OfferCatalogService.record_view(offer.id)
        assert OfferCatalogService.record_view(offer.id)

        offer.refresh_from_db()
        assert offer.views == 2

    def test_reading_someone_elses_offer_counts_a_view(
        self, owner, requester, make_offer, actor_for
    ):
        offer = make_offer(owner)

        OfferCatalogService.get_offer(offer.id, actor_for(requester))
        OfferCatalogService.get_offer(offer.id, actor_for(requester))
        OfferCatalogService.get_offer(offer.id, actor_for(owner))

        offer.refresh_from_db()
        assert offer.views == 2

    def test_missing_offer_view_is_ignored(self):
        assert OfferCatalogService.record_view(424242) is False

    def test_broker_outage_does_not_break_reads(self, owner, requester, make_offer, actor_for):
        offer = make_offer(owner)

        with mock.patch(
            "apps.swap_offers.tasks.record_offer_view.delay",
            side_effect=OperationalError("broker down"),
        ):
            fetched, _ = OfferCatalogService.get_offer(offer.id, actor_for(requester))

        assert fetched.id == offer.id

    def test_private_offer_hidden_from_others(self, owner, requester, make_offer, actor_for):
        offer = make_offer(owner, is_public=False)

        with pytest.raises(NotFoundError):
            OfferCatalogService.get_offer(offer.id, actor_for(requester))
        fetched, _ = OfferCatalogService.get_offer(offer.id, actor_for(owner))
        assert fetched.id == offer.id


@pytest.mark.django_db
class TestRelatedOffers:
    def test_related_offers_exclude_current_and_inactive(self, owner, make_offer, actor_for):
        first = make_offer(owner, title="First")
        second = make_offer(owner, title="Second")
        paused = make_offer(owner, title="Paused")
        OfferCatalogService.set_status(paused.id, actor_for(owner), OfferStatus.PAUSED)

        _, related = OfferCatalogService.get_offer(first.id, record_view=False)

        assert [offer.id for offer in related] == [second.id]

    def test_related_offers_limited_to_three(self, owner, make_offer):
        offers = [make_offer(owner, title=f"Offer {n}") for n in range(5)]

        _, related = OfferCatalogService.get_offer(offers[0].id, record_view=False)

        assert len(related) == 3
        assert offers[0] not in related


@pytest.mark.django_db
class TestOfferLifecycle:
    def test_owner_sets_any_status(self, owner, make_offer, actor_for):
        offer = make_offer(owner)

        offer = OfferCatalogService.set_status(offer.id, actor_for(owner), OfferStatus.COMPLETED)
        assert offer.status == OfferStatus.COMPLETED
        offer = OfferCatalogService.set_status(offer.id, actor_for(owner), OfferStatus.ACTIVE)
        assert offer.status == OfferStatus.ACTIVE

    def test_moderator_can_pause(self, owner, moderator, make_offer, actor_for):
        offer = make_offer(owner)
        offer = OfferCatalogService.set_status(offer.id, actor_for(moderator), OfferStatus.PAUSED)
        assert offer.status == OfferStatus.PAUSED

    def test_stranger_cannot_set_status(self, owner, requester, make_offer, actor_for):
        offer = make_offer(owner)
        with pytest.raises(AuthorizationError):
            OfferCatalogService.set_status(offer.id, actor_for(requester), OfferStatus.INACTIVE)

    def test_unknown_status(self, owner, make_offer, actor_for):
        offer = make_offer(owner)
        with pytest.raises(ValidationError):
            OfferCatalogService.set_status(offer.id, actor_for(owner), "archived")

    def test_update_validates_merged_state(self, owner, make_offer, actor_for):
        offer = make_offer(owner)

        updated = OfferCatalogService.update_offer(
            offer.id, actor_for(owner), {"title": "  Advanced Python  ", "views": 999}
        )
        assert updated.title == "Advanced Python"
        assert updated.views == 0

        with pytest.raises(ValidationError):
            OfferCatalogService.update_offer(
                offer.id, actor_for(owner), {"category": "accommodation"}
            )

    def test_delete_blocked_by_live_request(
        self, owner, requester, make_offer, make_request, actor_for
    ):
        from apps.swap_requests.services import NegotiationService

        offer = make_offer(owner)
        swap_request = make_request(requester, offer)

        with pytest.raises(ConflictError):
            OfferCatalogService.delete_offer(offer.id, actor_for(owner))

        NegotiationService.cancel(swap_request.id, actor_for(requester))
        OfferCatalogService.delete_offer(offer.id, actor_for(owner))

        assert not SwapOffer.objects.filter(pk=offer.id).exists()
        swap_request.refresh_from_db()
        assert swap_request.offer_id is None
        assert SwapProfile.objects.get(user=owner).total_offers == 0


@pytest.mark.django_db
class TestCatalogQueries:
    def test_filters(self, owner, requester, make_offer, actor_for):
        python = make_offer(owner)
        guitar = make_offer(
            owner, title="Guitar lessons", description="Acoustic basics", tags=["music"]
        )
        flat = make_offer(
            requester,
            **accommodation_payload(maxGuests=2),
        )
        hidden = make_offer(owner, title="Hidden", is_public=False)
        actor = actor_for(requester)

        def ids(**filters):
            return {offer.id for offer in OfferCatalogService.list_offers(actor, filters)}

        assert ids() == {python.id, guitar.id, flat.id}
        assert hidden.id not in ids()
        assert ids(category="accommodation") == {flat.id}
        assert ids(tags="music,cooking") == {guitar.id}
        assert ids(search="acoustic") == {guitar.id}
        assert ids(exclude_own="true") == {python.id, guitar.id}
        assert ids(owner=str(requester.id)) == {flat.id}

    def test_invalid_filter(self, requester, actor_for):
        with pytest.raises(ValidationError):
            list(OfferCatalogService.list_offers(actor_for(requester), {"category": "boats"}))

    def test_sort_by_rating(self, owner, requester, make_offer, actor_for):
        low = make_offer(owner, title="Low")
        high = make_offer(owner, title="High")
        SwapOffer.objects.filter(pk=high.pk).update(rating_average=Decimal("4.80"), rating_count=3)

        offers = list(OfferCatalogService.list_offers(actor_for(requester), {"sort": "rating"}))

        assert [offer.id for offer in offers] == [high.id, low.id]

    def test_recommendations(self, owner, requester, make_offer, actor_for):
        from apps.users.services.swap_profile import SwapProfileService

        SwapProfileService.update_preferences(requester.id, preferred_categories=["accommodation"])
        flat = make_offer(owner, **accommodation_payload(maxGuests=3))
        top_rated = make_offer(owner, title="Top rated")
        make_offer(owner, title="Unrated")
        own = make_offer(requester, title="Mine")
        SwapOffer.objects.filter(pk__in=[top_rated.pk, own.pk]).update(
            rating_average=Decimal("4.90")
        )

        recommended = OfferCatalogService.recommendations(actor_for(requester))

        assert [offer.id for offer in recommended] == [flat.id, top_rated.id]
