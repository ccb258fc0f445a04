import logging

from django.core.cache import cache
from django.db import transaction

from .cache_key_manager import CacheKeyManager

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Invalidation of cache keys/patterns per resource, driven by
    settings.CACHE_KEY_TEMPLATES.
    """

    @staticmethod
    def invalidate(resource_name: str, **kwargs):
        """
        Invalidate every key of `resource_name` whose placeholders can be
        filled from `kwargs`.

        Exact templates are deleted with delete_many. Wildcard templates
        need a backend with pattern deletion (django-redis); other
        backends skip them.

            CacheManager.invalidate("swap_offer", owner_id=7)
        """
        templates = CacheKeyManager.get_available_templates(resource_name)
        if not templates:
            logger.warning(f"No cache templates found for resource '{resource_name}'")
            return

        exact_keys = []
        patterns = []
        for key_name, raw_template in templates.items():
            placeholders = CacheKeyManager.get_template_placeholders(
                resource_name, key_name
            )
            if any(name not in kwargs for name in placeholders):
                continue
            if "*" in raw_template:
                patterns.append(
                    CacheKeyManager.make_pattern(resource_name, key_name, **kwargs)
                )
            else:
                exact_keys.append(
                    CacheKeyManager.make_key(resource_name, key_name, **kwargs)
                )

        if exact_keys:
            cache.delete_many(exact_keys)

        delete_pattern = getattr(cache, "delete_pattern", None)
        if delete_pattern is not None:
            for pattern in patterns:
                delete_pattern(pattern)

        logger.debug(
            f"Invalidated {len(exact_keys)} keys and {len(patterns)} patterns "
            f"for '{resource_name}'"
        )

    @staticmethod
    def invalidate_key(resource_name: str, key_name: str, **kwargs):
        """Invalidate a single exact key."""
        cache.delete(CacheKeyManager.make_key(resource_name, key_name, **kwargs))

    @staticmethod
    def invalidate_on_commit(resource_name: str, **kwargs):
        """
        Invalidate now and again once the surrounding transaction commits,
        so a read in between cannot keep pre-commit data cached.
        """
        CacheManager.invalidate(resource_name, **kwargs)
        transaction.on_commit(lambda: CacheManager.invalidate(resource_name, **kwargs))
