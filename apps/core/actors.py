"""
Caller identity and capability checks for the swap services.

Views resolve the authenticated user into an `Actor` once and hand it to
every service call. Services never compare role strings themselves; they
ask `actor.require(action, entity)` and the `SwapPolicy` capability table
decides.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from apps.core.exceptions import AuthorizationError
from apps.users.models import UserRole

logger = logging.getLogger(__name__)

MODERATOR_ROLES = (UserRole.MODERATOR, UserRole.ADMIN, UserRole.SUPER_ADMIN)


class SwapAction:
    OFFER_CREATE = "offer.create"
    OFFER_MANAGE = "offer.manage"
    REQUEST_CREATE = "request.create"
    REQUEST_RESPOND = "request.respond"
    REQUEST_CONFIRM = "request.confirm"
    REQUEST_PARTICIPATE = "request.participate"
    REQUEST_VIEW = "request.view"
    TRANSACTION_PARTICIPATE = "transaction.participate"
    TRANSACTION_VIEW = "transaction.view"
    TRANSACTION_REVALUE = "transaction.revalue"
    DISPUTE_RESOLVE = "dispute.resolve"


class SwapPolicy:
    """
    Capability table: action -> predicate(actor, entity).

    Entities are duck-typed: offers expose `owner_id`, requests and
    transactions expose `participant_ids()`, and requests expose
    `requester_id` and `live_owner_id` (the owner of the offer as it is
    now, not the copy taken when the request was created).
    """

    def __init__(self, overrides: Optional[Dict[str, Callable]] = None):
        self.rules = {
            SwapAction.OFFER_CREATE: self._any_member,
            SwapAction.OFFER_MANAGE: self._owner_or_moderator,
            SwapAction.REQUEST_CREATE: self._not_offer_owner,
            SwapAction.REQUEST_RESPOND: self._live_offer_owner,
            SwapAction.REQUEST_CONFIRM: self._requester,
            SwapAction.REQUEST_PARTICIPATE: self._participant,
            SwapAction.REQUEST_VIEW: self._participant_or_moderator,
            SwapAction.TRANSACTION_PARTICIPATE: self._participant,
            SwapAction.TRANSACTION_VIEW: self._participant_or_moderator,
            SwapAction.TRANSACTION_REVALUE: self._participant_or_moderator,
            SwapAction.DISPUTE_RESOLVE: self._moderator,
        }
        if overrides:
            self.rules.update(overrides)

    def allows(self, actor, action, entity=None) -> bool:
        rule = self.rules.get(action)
        if rule is None:
            logger.warning(f"No capability rule registered for '{action}'")
            return False
        if not actor.is_active():
            return False
        return bool(rule(actor, entity))

    @staticmethod
    def _any_member(actor, entity):
        return True

    @staticmethod
    def _moderator(actor, entity):
        return actor.is_moderator

    @staticmethod
    def _owner_or_moderator(actor, entity):
        return actor.is_moderator or entity.owner_id == actor.user_id

    @staticmethod
    def _not_offer_owner(actor, entity):
        return entity.owner_id != actor.user_id

    @staticmethod
    def _live_offer_owner(actor, entity):
        return entity.live_owner_id is not None and entity.live_owner_id == actor.user_id

    @staticmethod
    def _requester(actor, entity):
        return entity.requester_id == actor.user_id

    @staticmethod
    def _participant(actor, entity):
        return actor.user_id in entity.participant_ids()

    @classmethod
    def _participant_or_moderator(cls, actor, entity):
        return actor.is_moderator or cls._participant(actor, entity)


default_policy = SwapPolicy()


@dataclass(frozen=True)
class Actor:
    """The authenticated caller as the services see it."""

    user: Any
    role: str = UserRole.ALUMNI
    active: bool = True
    staff: bool = False
    policy: SwapPolicy = field(default=default_policy, compare=False, repr=False)

    @classmethod
    def from_user(cls, user, policy: Optional[SwapPolicy] = None) -> "Actor":
        if user is None or not user.is_authenticated:
            raise AuthorizationError("Authentication required.")
        return cls(
            user=user,
            role=getattr(user, "role", UserRole.ALUMNI),
            active=user.is_active,
            staff=user.is_staff,
            policy=policy or default_policy,
        )

    @property
    def user_id(self):
        return self.user.pk

    def has_role(self, *roles) -> bool:
        return self.role in roles

    def is_active(self) -> bool:
        return self.active

    @property
    def is_moderator(self) -> bool:
        return self.staff or self.has_role(*MODERATOR_ROLES)

    def can_perform(self, action, entity=None) -> bool:
        return self.policy.allows(self, action, entity)

    def require(self, action, entity=None, message=None):
        if not self.can_perform(action, entity):
            raise AuthorizationError(
                message or "You are not allowed to perform this action."
            )
        return self
