import logging
import re
from typing import Dict, List

from django.conf import settings

logger = logging.getLogger(__name__)


class CacheKeyManager:
    """
    Builds cache keys and wildcard patterns from settings.CACHE_KEY_TEMPLATES.

        CacheKeyManager.make_key("swap_offer", "related", owner_id=42)
        # "swap_offer:related:42"

    Keys are unprefixed; the cache backend adds KEY_PREFIX.
    """

    @staticmethod
    def _get_template(resource_name: str, key_name: str) -> str:
        templates = getattr(settings, "CACHE_KEY_TEMPLATES", {})
        if resource_name not in templates:
            raise KeyError(f"No templates for resource '{resource_name}'")
        resource_templates = templates[resource_name]
        if key_name not in resource_templates:
            raise KeyError(f"No key '{key_name}' for resource '{resource_name}'")
        return resource_templates[key_name]

    @staticmethod
    def _fill(raw_template: str, **kwargs) -> str:
        try:
            return raw_template.format(**kwargs)
        except KeyError as e:
            logger.error(
                f"[CacheKeyManager] Missing argument '{e.args[0]}' when formatting '{raw_template}'"
            )
            raise

    @staticmethod
    def make_key(resource_name: str, key_name: str, **kwargs) -> str:
        """Build an exact cache key (template must not contain '*')."""
        raw_template = CacheKeyManager._get_template(resource_name, key_name)
        return CacheKeyManager._fill(raw_template, **kwargs)

    @staticmethod
    def make_pattern(resource_name: str, key_name: str, **kwargs) -> str:
        """Build a wildcard pattern (template must contain '*')."""
        raw_template = CacheKeyManager._get_template(resource_name, key_name)
        if "*" not in raw_template:
            raise ValueError(f"Template '{raw_template}' has no wildcard")
        return CacheKeyManager._fill(raw_template, **kwargs)

    @staticmethod
    def get_available_templates(resource_name: str) -> Dict[str, str]:
        return getattr(settings, "CACHE_KEY_TEMPLATES", {}).get(resource_name, {})

    @staticmethod
    def get_template_placeholders(resource_name: str, key_name: str) -> List[str]:
        raw_template = CacheKeyManager._get_template(resource_name, key_name)
        return re.findall(r"\{([^}]+)\}", raw_template)
