import logging

from django.utils import timezone
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.throttle import ActionThrottleMixin
from apps.core.views import BaseViewSet
from apps.swap_offers.models import SwapOffer
from apps.swap_offers.services import OfferCatalogService
from apps.swap_offers.utils.rate_limiting import (
    SwapOfferCreateThrottle,
    SwapOfferUpdateThrottle,
)
from .schema import SWAP_OFFER_VIEW_SET_SCHEMA
from .serializers import (
    OfferStatusSerializer,
    SwapOfferSerializer,
    SwapOfferWriteSerializer,
)

logger = logging.getLogger("offers_performance")


@extend_schema_view(**SWAP_OFFER_VIEW_SET_SCHEMA)
class SwapOfferViewSet(ActionThrottleMixin, BaseViewSet):
    """
    Offer catalog endpoints. Reads are open to any signed-in member;
    writes go through OfferCatalogService, which checks ownership.
    """

    queryset = SwapOffer.objects.select_related("owner")
    serializer_class = SwapOfferSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_serializer_class(self):
        if self.action in ("create", "update", "partial_update"):
            return SwapOfferWriteSerializer
        if self.action == "set_status":
            return OfferStatusSerializer
        return SwapOfferSerializer

    action_throttles = {
        "create": SwapOfferCreateThrottle,
        "update": SwapOfferUpdateThrottle,
        "partial_update": SwapOfferUpdateThrottle,
        "destroy": SwapOfferUpdateThrottle,
        "set_status": SwapOfferUpdateThrottle,
    }

    def list(self, request, *args, **kwargs):
        queryset = OfferCatalogService.list_offers(self.get_actor(), request.query_params)
        return self.paginated_response(queryset, SwapOfferSerializer)

    def retrieve(self, request, pk=None, *args, **kwargs):
        offer, related = OfferCatalogService.get_offer(pk, self.get_actor())
        return self.success_response(
            data={
                "offer": SwapOfferSerializer(offer).data,
                "related_offers": SwapOfferSerializer(related, many=True).data,
            },
            message="Swap offer retrieved successfully",
        )

    def create(self, request, *args, **kwargs):
        start_time = timezone.now()
        serializer = SwapOfferWriteSerializer(data=request.data)
        if not serializer.is_valid():
            return self.error_response(
                message="Invalid offer data", data=serializer.errors
            )

        offer = OfferCatalogService.create_offer(self.get_actor(), serializer.validated_data)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Offer create request handled in {duration:.2f}ms")
        return self.success_response(
            data=SwapOfferSerializer(offer).data,
            message="Swap offer created successfully",
            status_code=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        serializer = SwapOfferWriteSerializer(data=request.data, partial=partial)
        if not serializer.is_valid():
            return self.error_response(
                message="Invalid offer data", data=serializer.errors
            )

        offer = OfferCatalogService.update_offer(pk, self.get_actor(), serializer.validated_data)
        return self.success_response(
            data=SwapOfferSerializer(offer).data,
            message="Swap offer updated successfully",
        )

    def destroy(self, request, pk=None, *args, **kwargs):
        OfferCatalogService.delete_offer(pk, self.get_actor())
        return self.success_response(
            message="Swap offer deleted successfully",
            status_code=status.HTTP_204_NO_CONTENT,
        )

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = OfferStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        offer = OfferCatalogService.set_status(
            pk, self.get_actor(), serializer.validated_data["status"]
        )
        return self.success_response(
            data=SwapOfferSerializer(offer).data,
            message=f"Swap offer is now {offer.status}",
        )

    @action(detail=False, methods=["get"])
    def recommendations(self, request):
        offers = OfferCatalogService.recommendations(self.get_actor())
        return self.success_response(
            data=SwapOfferSerializer(offers, many=True).data,
            message="Recommended swap offers",
        )

    @action(detail=False, methods=["get"])
    def mine(self, request):
        queryset = OfferCatalogService.list_owner_offers(self.get_actor())
        return self.paginated_response(queryset, SwapOfferSerializer)
