from apps.core.throttle import BaseCacheThrottle


class SwapRequestCreateThrottle(BaseCacheThrottle):
    """Rate limiting for new swap requests"""

    scope = "swap_request_create"


class SwapRequestRespondThrottle(BaseCacheThrottle):
    """Rate limiting for owner responses and status moves"""

    scope = "swap_request_respond"


class SwapMessageThrottle(BaseCacheThrottle):
    """Rate limiting for request messages"""

    scope = "swap_message"


class SwapNegotiationThrottle(BaseCacheThrottle):
    """Rate limiting for negotiation proposals and answers"""

    scope = "swap_negotiation"
