from drf_spectacular.utils import OpenApiResponse

from .serializers import SwapProfileSerializer

SWAP_PROFILE_GET_SCHEMA = {
    "summary": "Get my swap profile",
    "responses": {
        200: OpenApiResponse(
            response=SwapProfileSerializer,
            description="Swap stats and preferences",
        ),
        401: OpenApiResponse(description="Authentication required"),
    },
    "tags": ["Swap profile"],
}

SWAP_PROFILE_UPDATE_SCHEMA = {
    "summary": "Update my swap preferences",
    "request": SwapProfileSerializer,
    "responses": {
        200: OpenApiResponse(
            response=SwapProfileSerializer,
            description="Swap profile updated",
        ),
        400: OpenApiResponse(description="Invalid preferences"),
        401: OpenApiResponse(description="Authentication required"),
    },
    "tags": ["Swap profile"],
}
