from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    User = get_user_model()
    counter = {"n": 0}

    def factory(**kwargs):
        counter["n"] += 1
        defaults = {
            "email": f"alum{counter['n']}@example.com",
            "password": "testpassword123",
            "first_name": "Alum",
            "last_name": str(counter["n"]),
        }
        defaults.update(kwargs)
        return User.objects.create_user(**defaults)

    return factory


@pytest.fixture
def owner(make_user):
    return make_user(email="owner@example.com", first_name="Olive", last_name="Owner")


@pytest.fixture
def requester(make_user):
    return make_user(email="requester@example.com", first_name="Remy", last_name="Requester")


@pytest.fixture
def moderator(make_user):
    from apps.users.models import UserRole

    return make_user(email="mod@example.com", role=UserRole.MODERATOR)


@pytest.fixture
def actor_for():
    from apps.core.actors import Actor

    return Actor.from_user


@pytest.fixture
def skill_offer_payload():
    return {
        "category": "skill",
        "title": "Python mentoring",
        "description": "Weekly code reviews and pairing sessions",
        "tags": ["Python", "Django"],
        "wants_in_return": "Help with Spanish",
        "estimated_value_amount": Decimal("100.00"),
    }


@pytest.fixture
def make_offer(skill_offer_payload, actor_for):
    from apps.swap_offers.services import OfferCatalogService

    def factory(owner, **overrides):
        payload = {**skill_offer_payload, **overrides}
        return OfferCatalogService.create_offer(actor_for(owner), payload)

    return factory


@pytest.fixture
def make_request(actor_for):
    from apps.swap_requests.services import NegotiationService

    def factory(requester, offer, **overrides):
        payload = {
            "message": "I would love to swap for this",
            "return_title": "Spanish lessons",
            "return_description": "Weekly conversation practice for beginners",
            "return_category": "skill",
            "return_value_amount": Decimal("70.00"),
        }
        payload.update(overrides)
        return NegotiationService.create_request(actor_for(requester), offer.id, payload)

    return factory


@pytest.fixture
def confirmed_request(owner, requester, make_offer, make_request, actor_for):
    """An accepted request the requester has confirmed; its transaction is open."""
    from apps.swap_requests.services import NegotiationService

    offer = make_offer(owner)
    swap_request = make_request(requester, offer)
    NegotiationService.respond(swap_request.id, actor_for(owner), "accepted")
    return NegotiationService.confirm(swap_request.id, actor_for(requester))
