from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from apps.disputes.api.schema import dispute_action_schemas
from .serializers import (
    MessageCreateSerializer,
    NegotiationCreateSerializer,
    NegotiationResponseSerializer,
    RequestCompleteSerializer,
    RequestMessageSerializer,
    RequestNegotiationSerializer,
    RequestResponseSerializer,
    SwapRequestCreateSerializer,
    SwapRequestListSerializer,
    SwapRequestSerializer,
)

CONFLICT = OpenApiResponse(description="Not allowed in the current status")
FORBIDDEN = OpenApiResponse(description="Not a participant")


def _status_move(summary, request=None):
    return extend_schema(
        summary=summary,
        request=request,
        responses={200: SwapRequestSerializer, 403: FORBIDDEN, 409: CONFLICT},
        tags=["Swap requests"],
    )


SWAP_REQUEST_VIEW_SET_SCHEMA = {
    "list": extend_schema(
        summary="My swap requests",
        parameters=[
            OpenApiParameter(name="type", description="sent | received", required=False, type=str),
            OpenApiParameter(name="status", description="Request status", required=False, type=str),
        ],
        responses={200: SwapRequestListSerializer(many=True)},
        tags=["Swap requests"],
    ),
    "retrieve": extend_schema(
        summary="Swap request detail",
        responses={200: SwapRequestSerializer, 403: FORBIDDEN, 404: OpenApiResponse(description="Not found")},
        tags=["Swap requests"],
    ),
    "create": extend_schema(
        summary="Request a swap against an offer",
        request=SwapRequestCreateSerializer,
        responses={
            201: SwapRequestSerializer,
            400: OpenApiResponse(description="Invalid request"),
            409: OpenApiResponse(description="Offer inactive or request already open"),
        },
        tags=["Swap requests"],
    ),
    "respond": _status_move("Offer owner accepts, rejects or negotiates", RequestResponseSerializer),
    "confirm": _status_move("Requester confirms an accepted request"),
    "start": _status_move("Start a confirmed swap"),
    "cancel": _status_move("Cancel a request"),
    "complete": _status_move("Mark the swap as completed", RequestCompleteSerializer),
    "messages": extend_schema(
        summary="Post a message on the request thread",
        request=MessageCreateSerializer,
        responses={201: RequestMessageSerializer, 403: FORBIDDEN, 409: CONFLICT},
        tags=["Swap requests"],
    ),
    "mark_read": extend_schema(
        summary="Mark the other participant's messages as read",
        request=None,
        responses={200: OpenApiResponse(description="Number of messages marked")},
        tags=["Swap requests"],
    ),
    "negotiations": extend_schema(
        summary="Propose changed terms",
        request=NegotiationCreateSerializer,
        responses={201: RequestNegotiationSerializer, 403: FORBIDDEN, 409: CONFLICT},
        tags=["Swap requests"],
    ),
    "respond_to_negotiation": extend_schema(
        summary="Accept or reject a proposal",
        request=NegotiationResponseSerializer,
        responses={200: SwapRequestSerializer, 403: FORBIDDEN, 409: CONFLICT},
        tags=["Swap requests"],
    ),
    **dispute_action_schemas("swap request", SwapRequestSerializer),
}
