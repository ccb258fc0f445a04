from apps.core.throttle import BaseCacheThrottle


class SwapOfferCreateThrottle(BaseCacheThrottle):
    """Rate limiting for listing new offers"""

    scope = "swap_offer_create"


class SwapOfferUpdateThrottle(BaseCacheThrottle):
    """Rate limiting for offer edits, status changes and deletes"""

    scope = "swap_offer_update"
