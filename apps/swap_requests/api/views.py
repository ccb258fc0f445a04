import logging

from django.utils import timezone
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.throttle import ActionThrottleMixin
from apps.core.views import BaseViewSet
from apps.disputes.api.serializers import DisputeRaiseSerializer, DisputeResolutionSerializer
from apps.disputes.utils.rate_limiting import DisputeRateThrottle
from apps.swap_requests.models import SwapRequest
from apps.swap_requests.services import NegotiationService
from apps.swap_requests.utils.rate_limiting import (
    SwapMessageThrottle,
    SwapNegotiationThrottle,
    SwapRequestCreateThrottle,
    SwapRequestRespondThrottle,
)
from .schema import SWAP_REQUEST_VIEW_SET_SCHEMA
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

logger = logging.getLogger("requests_performance")


@extend_schema_view(**SWAP_REQUEST_VIEW_SET_SCHEMA)
class SwapRequestViewSet(ActionThrottleMixin, BaseViewSet):
    """
    Swap request lifecycle. Every action delegates to NegotiationService;
    business errors surface through the project exception handler.
    """

    queryset = SwapRequest.objects.select_related("offer", "requester", "offer_owner")
    serializer_class = SwapRequestSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "head", "options"]
    lookup_value_regex = r"\d+"

    action_throttles = {
        "create": SwapRequestCreateThrottle,
        "respond": SwapRequestRespondThrottle,
        "confirm": SwapRequestRespondThrottle,
        "start": SwapRequestRespondThrottle,
        "cancel": SwapRequestRespondThrottle,
        "complete": SwapRequestRespondThrottle,
        "messages": SwapMessageThrottle,
        "negotiations": SwapNegotiationThrottle,
        "respond_to_negotiation": SwapNegotiationThrottle,
        "dispute": DisputeRateThrottle,
    }

    def _detail(self, swap_request, message, status_code=status.HTTP_200_OK):
        return self.success_response(
            data=SwapRequestSerializer(swap_request, context={"request": self.request}).data,
            message=message,
            status_code=status_code,
        )

    def list(self, request, *args, **kwargs):
        queryset = NegotiationService.list_requests(self.get_actor(), request.query_params)
        return self.paginated_response(queryset, SwapRequestListSerializer)

    def retrieve(self, request, pk=None, *args, **kwargs):
        swap_request = NegotiationService.get_request(pk, self.get_actor())
        return self._detail(swap_request, "Swap request retrieved successfully")

    def create(self, request, *args, **kwargs):
        start_time = timezone.now()
        serializer = SwapRequestCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.error_response(
                message="Invalid swap request data", data=serializer.errors
            )

        payload = dict(serializer.validated_data)
        offer_id = payload.pop("offer_id")
        swap_request = NegotiationService.create_request(self.get_actor(), offer_id, payload)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Swap request create handled in {duration:.2f}ms")
        return self._detail(
            swap_request, "Swap request sent successfully", status.HTTP_201_CREATED
        )

    @action(detail=True, methods=["post"])
    def respond(self, request, pk=None):
        serializer = RequestResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        swap_request = NegotiationService.respond(
            pk,
            self.get_actor(),
            serializer.validated_data["decision"],
            serializer.validated_data.get("message"),
        )
        return self._detail(swap_request, f"Swap request {swap_request.status}")

    @action(detail=True, methods=["post"])
    def confirm(self, request, pk=None):
        swap_request = NegotiationService.confirm(pk, self.get_actor())
        return self._detail(swap_request, "Swap request confirmed")

    @action(detail=True, methods=["post"])
    def start(self, request, pk=None):
        swap_request = NegotiationService.start(pk, self.get_actor())
        return self._detail(swap_request, "Swap started")

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        swap_request = NegotiationService.cancel(pk, self.get_actor())
        return self._detail(swap_request, "Swap request cancelled")

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        serializer = RequestCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        swap_request = NegotiationService.complete(
            pk, self.get_actor(), serializer.validated_data.get("notes", "")
        )
        return self._detail(swap_request, "Swap completed")

    @action(detail=True, methods=["post"])
    def messages(self, request, pk=None):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = NegotiationService.add_message(
            pk, self.get_actor(), serializer.validated_data["text"]
        )
        return self.success_response(
            data=RequestMessageSerializer(message).data,
            message="Message sent",
            status_code=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="messages/read")
    def mark_read(self, request, pk=None):
        updated = NegotiationService.mark_messages_read(pk, self.get_actor())
        return self.success_response(
            data={"updated": updated}, message="Messages marked as read"
        )

    @action(detail=True, methods=["post"])
    def negotiations(self, request, pk=None):
        serializer = NegotiationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = NegotiationService.add_negotiation(
            pk, self.get_actor(), serializer.validated_data["changes"]
        )
        return self.success_response(
            data=RequestNegotiationSerializer(entry).data,
            message="Proposal added",
            status_code=status.HTTP_201_CREATED,
        )

    @action(
        detail=True,
        methods=["post"],
        url_path=r"negotiations/(?P<negotiation_id>\d+)/respond",
    )
    def respond_to_negotiation(self, request, pk=None, negotiation_id=None):
        serializer = NegotiationResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        swap_request, entry = NegotiationService.respond_to_negotiation(
            pk, negotiation_id, self.get_actor(), serializer.validated_data["decision"]
        )
        return self._detail(swap_request, f"Proposal {entry.status}")

    @action(detail=True, methods=["post"])
    def dispute(self, request, pk=None):
        serializer = DisputeRaiseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        swap_request = NegotiationService.raise_dispute(
            pk,
            self.get_actor(),
            serializer.validated_data["reason"],
            serializer.validated_data["description"],
        )
        return self._detail(swap_request, "Dispute raised")

    @action(detail=True, methods=["post"], url_path="dispute/resolve")
    def resolve_dispute(self, request, pk=None):
        serializer = DisputeResolutionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        swap_request = NegotiationService.resolve_dispute(
            pk,
            self.get_actor(),
            serializer.validated_data["status"],
            serializer.validated_data.get("resolution", ""),
        )
        return self._detail(swap_request, f"Dispute {swap_request.dispute_status}")
