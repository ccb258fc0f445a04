import logging

from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.throttle import ActionThrottleMixin
from apps.core.views import BaseViewSet
from apps.disputes.api.serializers import DisputeRaiseSerializer, DisputeResolutionSerializer
from apps.disputes.utils.rate_limiting import DisputeRateThrottle
from apps.swap_transactions.models import SwapTransaction
from apps.swap_transactions.services import TransactionLedgerService
from apps.swap_transactions.utils.rate_limiting import SwapFeedbackThrottle
from .schema import SWAP_TRANSACTION_VIEW_SET_SCHEMA
from .serializers import (
    FeedbackCreateSerializer,
    RevalueSerializer,
    SwapTransactionSerializer,
    TransactionCompleteSerializer,
    TransactionFeedbackSerializer,
)

logger = logging.getLogger("transactions_performance")


@extend_schema_view(**SWAP_TRANSACTION_VIEW_SET_SCHEMA)
class SwapTransactionViewSet(ActionThrottleMixin, BaseViewSet):
    """
    Read access and participant actions on swap transactions. Transactions
    are opened by the request lifecycle, never through this API.
    """

    queryset = SwapTransaction.objects.all()
    serializer_class = SwapTransactionSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ["get", "post", "head", "options"]
    lookup_value_regex = r"\d+"

    action_throttles = {
        "feedback": SwapFeedbackThrottle,
        "dispute": DisputeRateThrottle,
    }

    def create(self, request, *args, **kwargs):
        return self.error_response(
            message="Transactions are opened when a swap request is confirmed.",
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        )

    def _detail(self, txn, message):
        return self.success_response(data=SwapTransactionSerializer(txn).data, message=message)

    def list(self, request, *args, **kwargs):
        queryset = TransactionLedgerService.list_transactions(
            self.get_actor(), request.query_params
        )
        return self.paginated_response(queryset, SwapTransactionSerializer)

    def retrieve(self, request, pk=None, *args, **kwargs):
        txn = TransactionLedgerService.get_transaction(pk, self.get_actor())
        return self._detail(txn, "Swap transaction retrieved successfully")

    @action(detail=True, methods=["post"])
    def feedback(self, request, pk=None):
        serializer = FeedbackCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        feedback = TransactionLedgerService.add_feedback(
            pk,
            self.get_actor(),
            data["to_user"],
            data["rating"],
            data.get("comment", ""),
            [dict(item) for item in data.get("categories", [])],
        )
        return self.success_response(
            data=TransactionFeedbackSerializer(feedback).data,
            message="Feedback submitted",
            status_code=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        serializer = TransactionCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = TransactionLedgerService.complete(
            pk,
            self.get_actor(),
            serializer.validated_data.get("notes", ""),
            [dict(item) for item in serializer.validated_data.get("deliverables", [])],
        )
        return self._detail(txn, "Swap transaction completed")

    @action(detail=True, methods=["post"])
    def revalue(self, request, pk=None):
        serializer = RevalueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = TransactionLedgerService.revalue(
            pk,
            self.get_actor(),
            serializer.validated_data["role"],
            serializer.validated_data["amount"],
        )
        return self._detail(txn, "Transaction values updated")

    @action(detail=True, methods=["post"])
    def dispute(self, request, pk=None):
        serializer = DisputeRaiseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = TransactionLedgerService.raise_dispute(
            pk,
            self.get_actor(),
            serializer.validated_data["reason"],
            serializer.validated_data["description"],
        )
        return self._detail(txn, "Dispute raised")

    @action(detail=True, methods=["post"], url_path="dispute/resolve")
    def resolve_dispute(self, request, pk=None):
        serializer = DisputeResolutionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = TransactionLedgerService.resolve_dispute(
            pk,
            self.get_actor(),
            serializer.validated_data["status"],
            serializer.validated_data.get("resolution", ""),
        )
        return self._detail(txn, f"Dispute {txn.dispute_status}")
