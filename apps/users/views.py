import logging

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from drf_spectacular.utils import extend_schema

from apps.core.utils.cache_key_manager import CacheKeyManager
from apps.core.views import BaseAPIView
from apps.users.schema import SWAP_PROFILE_GET_SCHEMA, SWAP_PROFILE_UPDATE_SCHEMA
from apps.users.serializers import SwapProfileSerializer
from apps.users.services.swap_profile import SwapProfileService

logger = logging.getLogger("profiles_performance")


class SwapProfileView(BaseAPIView):
    """
    The caller's swap profile: `swapStats` and `swapPreferences`.
    """

    @extend_schema(**SWAP_PROFILE_GET_SCHEMA)
    def get(self, request):
        start_time = timezone.now()
        cache_key = CacheKeyManager.make_key(
            "swap_profile", "stats", user_id=request.user.id
        )
        data = cache.get(cache_key)
        if data is None:
            profile = SwapProfileService.get_profile(request.user.id)
            data = SwapProfileSerializer(profile).data
            cache.set(cache_key, data, settings.SWAP_SETTINGS["CACHE_TIMEOUT_SHORT"])
            duration = (timezone.now() - start_time).total_seconds() * 1000
            logger.info(f"Swap profile of user {request.user.id} built in {duration:.2f}ms")

        return self.success_response(data=data)

    @extend_schema(**SWAP_PROFILE_UPDATE_SCHEMA)
    def patch(self, request):
        start_time = timezone.now()
        profile = SwapProfileService.get_profile(request.user.id)
        serializer = SwapProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        profile = SwapProfileService.update_preferences(
            request.user.id, **serializer.validated_data
        )
        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Updated swap profile of user {request.user.id} in {duration:.2f}ms")
        return self.success_response(
            data=SwapProfileSerializer(profile).data,
            message="Swap profile updated successfully",
        )
