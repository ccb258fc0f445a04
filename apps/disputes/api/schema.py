from drf_spectacular.utils import extend_schema, OpenApiResponse

from .serializers import DisputeRaiseSerializer, DisputeResolutionSerializer


def dispute_action_schemas(resource, response_serializer):
    """`dispute` / `resolve_dispute` action schemas for a swap resource."""
    return {
        "dispute": extend_schema(
            summary=f"Raise a dispute on a {resource}",
            request=DisputeRaiseSerializer,
            responses={
                200: OpenApiResponse(
                    response=response_serializer,
                    description="Dispute raised",
                ),
                400: OpenApiResponse(description="Bad request"),
                403: OpenApiResponse(description="Not a participant"),
                409: OpenApiResponse(description="Not disputable in current status"),
            },
        ),
        "resolve_dispute": extend_schema(
            summary=f"Resolve a {resource} dispute (moderators only)",
            request=DisputeResolutionSerializer,
            responses={
                200: OpenApiResponse(
                    response=response_serializer,
                    description="Dispute updated",
                ),
                400: OpenApiResponse(description="Bad request"),
                403: OpenApiResponse(description="Permission denied"),
                409: OpenApiResponse(description="No open dispute"),
            },
        ),
    }
