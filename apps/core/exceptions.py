import logging

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, Throttled
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class SwapError(APIException):
    """
    Root of the typed business errors raised by the swap services.

    Services raise these synchronously; the DRF exception handler below
    renders them in the standard error envelope.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("The request could not be processed.")
    default_code = "swap_error"


class ValidationError(SwapError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Invalid input.")
    default_code = "validation_error"


class AuthorizationError(SwapError):
    """Actor lacks the role or relationship the operation requires."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("You are not allowed to perform this action.")
    default_code = "authorization_error"


class NotFoundError(SwapError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Not found.")
    default_code = "not_found"


class ConflictError(SwapError):
    """Invariant violation or illegal state transition."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("The request conflicts with the current state.")
    default_code = "conflict"


class ConcurrencyError(SwapError):
    """Optimistic version check failed, the caller should reload and retry."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = _("The record was modified concurrently, please retry.")
    default_code = "concurrency_conflict"


THROTTLE_MESSAGES = {
    "swap_offer_create": "Too many offers created. Please wait before listing another.",
    "swap_request_create": "Too many swap requests. Please wait before proposing another swap.",
    "swap_message": "Too many messages. Please slow down.",
    "swap_feedback": "Too many feedback submissions. Please try again later.",
    "dispute_create": "Too many disputes raised. Please wait before raising another.",
}


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, list) and detail:
        return _first_message(detail[0])
    return str(detail)


def custom_exception_handler(exc, context):
    """
    Render swap errors, validation errors and throttling in the API's
    error envelope. Everything else keeps DRF's default behaviour.
    """
    response = exception_handler(exc, context)
    if response is None:
        return response

    if isinstance(exc, Throttled):
        view = context.get("view", None)
        throttles = [] if view is None else getattr(view, "get_throttles", lambda: [])()
        scope = None
        if throttles:
            scope = getattr(throttles[0], "scope", None)

        wait_seconds = int(exc.wait) if exc.wait is not None else None

        if scope in THROTTLE_MESSAGES:
            detail = THROTTLE_MESSAGES[scope]
        elif wait_seconds is not None:
            detail = f"Request rate limit exceeded. Please wait {wait_seconds} seconds and try again."
        else:
            detail = "Request rate limit exceeded. Please try again later."

        response.data = {
            "status": "error",
            "status_code": status.HTTP_429_TOO_MANY_REQUESTS,
            "message": detail,
            "retry_after": wait_seconds,
        }
        response.status_code = status.HTTP_429_TOO_MANY_REQUESTS
        return response

    if isinstance(exc, SwapError):
        logger.info(f"{exc.__class__.__name__}: {exc.detail}")
        response.data = {
            "status": "error",
            "status_code": exc.status_code,
            "message": _first_message(exc.detail),
            "code": exc.default_code,
            "data": exc.detail if isinstance(exc.detail, (dict, list)) else None,
        }
        return response

    if isinstance(exc, DRFValidationError):
        response.data = {
            "status": "error",
            "status_code": response.status_code,
            "message": _first_message(exc.detail),
            "code": "validation_error",
            "data": exc.detail,
        }
        return response

    response.data = {
        "status": "error",
        "status_code": response.status_code,
        "message": _first_message(response.data.get("detail", response.data))
        if isinstance(response.data, dict)
        else _first_message(response.data),
        "data": None,
    }
    return response
