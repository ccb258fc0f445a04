# Cache key templates per resource, filled by CacheKeyManager.
# Templates containing "*" are patterns, deleted only on backends with
# delete_pattern (django-redis).
CACHE_KEY_TEMPLATES = {
    "swap_offer": {
        "related": "swap_offer:related:{owner_id}",
        "recommendations": "swap_offer:recommendations:{user_id}",
        "recommendations_all": "swap_offer:recommendations:*",
    },
    "swap_profile": {
        "stats": "swap_profile:stats:{user_id}",
    },
}
