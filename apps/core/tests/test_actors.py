from types import SimpleNamespace

import pytest

from apps.core.actors import Actor, SwapAction, SwapPolicy
from apps.core.exceptions import AuthorizationError
from apps.users.models import UserRole


@pytest.mark.django_db
class TestSwapPolicy:
    def test_owner_can_manage_own_offer(self, owner, actor_for):
        offer = SimpleNamespace(owner_id=owner.id)
        assert actor_for(owner).can_perform(SwapAction.OFFER_MANAGE, offer)

    def test_stranger_cannot_manage_offer(self, owner, requester, actor_for):
        offer = SimpleNamespace(owner_id=owner.id)
        assert not actor_for(requester).can_perform(SwapAction.OFFER_MANAGE, offer)

    def test_moderator_can_manage_any_offer(self, owner, moderator, actor_for):
        offer = SimpleNamespace(owner_id=owner.id)
        assert actor_for(moderator).can_perform(SwapAction.OFFER_MANAGE, offer)

    def test_staff_counts_as_moderator(self, make_user, actor_for):
        staff = make_user(is_staff=True)
        assert actor_for(staff).is_moderator

    def test_owner_cannot_request_own_offer(self, owner, actor_for):
        offer = SimpleNamespace(owner_id=owner.id)
        assert not actor_for(owner).can_perform(SwapAction.REQUEST_CREATE, offer)

    def test_respond_uses_live_owner(self, owner, requester, actor_for):
        request = SimpleNamespace(live_owner_id=owner.id)
        assert actor_for(owner).can_perform(SwapAction.REQUEST_RESPOND, request)
        assert not actor_for(requester).can_perform(SwapAction.REQUEST_RESPOND, request)

    def test_only_requester_confirms(self, owner, requester, moderator, actor_for):
        request = SimpleNamespace(requester_id=requester.id)
        assert actor_for(requester).can_perform(SwapAction.REQUEST_CONFIRM, request)
        assert not actor_for(owner).can_perform(SwapAction.REQUEST_CONFIRM, request)
        assert not actor_for(moderator).can_perform(SwapAction.REQUEST_CONFIRM, request)

    def test_nobody_responds_once_offer_is_gone(self, owner, actor_for):
        request = SimpleNamespace(live_owner_id=None)
        assert not actor_for(owner).can_perform(SwapAction.REQUEST_RESPOND, request)

    def test_only_participants_participate(self, owner, requester, moderator, actor_for):
        request = SimpleNamespace(participant_ids=lambda: {owner.id, requester.id})
        assert actor_for(requester).can_perform(SwapAction.REQUEST_PARTICIPATE, request)
        assert not actor_for(moderator).can_perform(SwapAction.REQUEST_PARTICIPATE, request)
        assert actor_for(moderator).can_perform(SwapAction.REQUEST_VIEW, request)

    def test_inactive_actor_is_denied_everything(self, make_user, actor_for):
        user = make_user(is_active=False)
        assert not actor_for(user).can_perform(SwapAction.OFFER_CREATE)

    def test_unknown_action_is_denied(self, owner, actor_for):
        assert not actor_for(owner).can_perform("offer.teleport")

    def test_require_raises_with_message(self, owner, requester, actor_for):
        offer = SimpleNamespace(owner_id=owner.id)
        with pytest.raises(AuthorizationError, match="Hands off"):
            actor_for(requester).require(SwapAction.OFFER_MANAGE, offer, "Hands off")

    def test_policy_overrides(self, owner):
        policy = SwapPolicy(overrides={SwapAction.OFFER_CREATE: lambda actor, entity: False})
        actor = Actor.from_user(owner, policy=policy)
        assert not actor.can_perform(SwapAction.OFFER_CREATE)


def test_anonymous_user_has_no_actor():
    from django.contrib.auth.models import AnonymousUser

    with pytest.raises(AuthorizationError):
        Actor.from_user(AnonymousUser())


@pytest.mark.django_db
def test_actor_reads_role_from_user(make_user):
    user = make_user(role=UserRole.ADMIN)
    actor = Actor.from_user(user)
    assert actor.user_id == user.id
    assert actor.has_role(UserRole.ADMIN)
    assert actor.is_moderator
