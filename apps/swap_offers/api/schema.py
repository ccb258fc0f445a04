from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from .serializers import OfferStatusSerializer, SwapOfferSerializer, SwapOfferWriteSerializer

OFFER_LIST_PARAMETERS = [
    OpenApiParameter(name="category", description="Offer category", required=False, type=str),
    OpenApiParameter(name="subcategory", description="Subcategory contains", required=False, type=str),
    OpenApiParameter(name="tags", description="Comma-separated tags, any match", required=False, type=str),
    OpenApiParameter(name="search", description="Text search over title, description and tags", required=False, type=str),
    OpenApiParameter(name="owner", description="Owner user id", required=False, type=int),
    OpenApiParameter(name="exclude_own", description="Hide the caller's own offers", required=False, type=bool),
    OpenApiParameter(name="sort", description="newest | rating | views", required=False, type=str),
]

SWAP_OFFER_VIEW_SET_SCHEMA = {
    "list": extend_schema(
        summary="Browse active public offers",
        parameters=OFFER_LIST_PARAMETERS,
        responses={200: SwapOfferSerializer(many=True)},
        tags=["Swap offers"],
    ),
    "retrieve": extend_schema(
        summary="Offer detail with related offers by the same owner",
        responses={
            200: OpenApiResponse(response=SwapOfferSerializer, description="Offer retrieved"),
            404: OpenApiResponse(description="Offer not found"),
        },
        tags=["Swap offers"],
    ),
    "create": extend_schema(
        summary="List a new offer",
        request=SwapOfferWriteSerializer,
        responses={
            201: OpenApiResponse(response=SwapOfferSerializer, description="Offer created"),
            400: OpenApiResponse(description="Invalid offer"),
        },
        tags=["Swap offers"],
    ),
    "update": extend_schema(
        summary="Replace an offer (owner or moderator)",
        request=SwapOfferWriteSerializer,
        responses={200: SwapOfferSerializer, 403: OpenApiResponse(description="Not allowed")},
        tags=["Swap offers"],
    ),
    "partial_update": extend_schema(
        summary="Edit an offer (owner or moderator)",
        request=SwapOfferWriteSerializer,
        responses={200: SwapOfferSerializer, 403: OpenApiResponse(description="Not allowed")},
        tags=["Swap offers"],
    ),
    "destroy": extend_schema(
        summary="Delete an offer without active requests",
        responses={
            204: OpenApiResponse(description="Offer deleted"),
            409: OpenApiResponse(description="Offer has active requests"),
        },
        tags=["Swap offers"],
    ),
    "set_status": extend_schema(
        summary="Set offer status",
        request=OfferStatusSerializer,
        responses={200: SwapOfferSerializer},
        tags=["Swap offers"],
    ),
    "recommendations": extend_schema(
        summary="Recommended offers for the caller",
        responses={200: SwapOfferSerializer(many=True)},
        tags=["Swap offers"],
    ),
    "mine": extend_schema(
        summary="The caller's own offers in any status",
        responses={200: SwapOfferSerializer(many=True)},
        tags=["Swap offers"],
    ),
}
