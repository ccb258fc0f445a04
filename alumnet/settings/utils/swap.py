from decimal import Decimal

# Swap marketplace business rules
SWAP_SETTINGS = {
    # Value exchange
    "BALANCE_TOLERANCE": Decimal("0.2"),  # |v1 - v2| <= 20% of total
    # Catalog
    "MAX_TAGS": 20,
    "RELATED_OFFERS_LIMIT": 3,
    "RECOMMENDATIONS_LIMIT": 10,
    "RECOMMENDATIONS_PER_SOURCE": 5,
    "TOP_RATED_THRESHOLD": Decimal("4.0"),
    # Message/negotiation log sequence allocation
    "SEQUENCE_ALLOCATION_ATTEMPTS": 3,
    # Caching
    "CACHE_TIMEOUT_SHORT": 300,  # 5 minutes
}
