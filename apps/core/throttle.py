import logging
import time

from django.core.cache import cache
from rest_framework.throttling import UserRateThrottle

logger = logging.getLogger(__name__)


class BaseCacheThrottle(UserRateThrottle):
    """
    Sliding-window throttle kept in the default cache. Subclasses set
    `scope`; the rate comes from REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"].
    """

    def get_cache_key(self, request, view):
        if request.user.is_authenticated:
            ident = f"user:{request.user.pk}"
        else:
            ident = f"ip:{self.get_ident(request)}"
        return f"throttle:{self.scope}:{ident}"

    def allow_request(self, request, view):
        if self.rate is None:
            return True

        self.key = self.get_cache_key(request, view)
        self.now = time.time()
        window_start = self.now - self.duration
        self.history = [ts for ts in cache.get(self.key, []) if ts > window_start]

        if len(self.history) >= self.num_requests:
            logger.warning(
                f"Throttled {self.scope} for {self.key}: "
                f"{len(self.history)}/{self.num_requests} in {self.duration}s"
            )
            return False

        self.history.append(self.now)
        cache.set(self.key, self.history, self.duration)
        return True

    def wait(self):
        """Seconds until the oldest request leaves the window."""
        if not getattr(self, "history", None):
            return None
        return max(self.duration - (self.now - self.history[0]), 0)


class ActionThrottleMixin:
    """
    Picks throttles per viewset action from `action_throttles`; actions
    without an entry fall back to the configured defaults.
    """

    action_throttles = {}

    def get_throttles(self):
        throttle_class = self.action_throttles.get(getattr(self, "action", None))
        if throttle_class is not None:
            return [throttle_class()]
        return super().get_throttles()
