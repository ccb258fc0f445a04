from apps.core.throttle import BaseCacheThrottle


class SwapFeedbackThrottle(BaseCacheThrottle):
    """Rate limiting for transaction feedback"""

    scope = "swap_feedback"
