from apps.core.throttle import BaseCacheThrottle


class DisputeRateThrottle(BaseCacheThrottle):
    """Throttle for raising disputes on requests and transactions"""

    scope = "dispute_create"
