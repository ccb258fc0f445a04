import logging

from django.conf import settings
from django.utils import timezone
from django.utils.deprecation import MiddlewareMixin


class SwapTimingMiddleware(MiddlewareMixin):
    """
    Times requests under the swap API prefixes and logs each one to
    "{area}_performance" (offers, requests, transactions, profiles).
    Requests slower than SLOW_REQUEST_THRESHOLD_SEC are logged as warnings.
    """

    def process_request(self, request):
        for prefix, area in settings.PERFORMANCE_API_PREFIXES.items():
            if request.path.startswith(prefix):
                request._swap_timing = (area, timezone.now())
                break

    def process_response(self, request, response):
        timing = getattr(request, "_swap_timing", None)
        if timing is None:
            return response

        area, start_time = timing
        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger = logging.getLogger(f"{area}_performance")
        line = (
            f"{request.method} {request.path} -> {response.status_code} "
            f"in {duration:.2f}ms"
        )
        if duration > settings.SLOW_REQUEST_THRESHOLD_SEC * 1000:
            logger.warning(f"Slow {area} request: {line}")
        else:
            logger.info(line)

        response["X-Response-Time"] = f"{duration:.2f}ms"
        return response
