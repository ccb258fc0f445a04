from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema

from apps.disputes.api.schema import dispute_action_schemas
from .serializers import (
    FeedbackCreateSerializer,
    RevalueSerializer,
    SwapTransactionSerializer,
    TransactionCompleteSerializer,
    TransactionFeedbackSerializer,
)

SWAP_TRANSACTION_VIEW_SET_SCHEMA = {
    "list": extend_schema(
        summary="My swap transactions",
        parameters=[
            OpenApiParameter(name="status", description="Transaction status", required=False, type=str),
            OpenApiParameter(name="transaction_type", description="Swap type", required=False, type=str),
        ],
        responses={200: SwapTransactionSerializer(many=True)},
        tags=["Swap transactions"],
    ),
    "retrieve": extend_schema(
        summary="Swap transaction detail",
        responses={200: SwapTransactionSerializer, 403: OpenApiResponse(description="Not a participant")},
        tags=["Swap transactions"],
    ),
    "feedback": extend_schema(
        summary="Rate the other participant",
        request=FeedbackCreateSerializer,
        responses={
            201: TransactionFeedbackSerializer,
            400: OpenApiResponse(description="Invalid feedback"),
            409: OpenApiResponse(description="Duplicate feedback or wrong status"),
        },
        tags=["Swap transactions"],
    ),
    "complete": extend_schema(
        summary="Complete an in-progress transaction",
        request=TransactionCompleteSerializer,
        responses={200: SwapTransactionSerializer, 409: OpenApiResponse(description="Not in progress")},
        tags=["Swap transactions"],
    ),
    "revalue": extend_schema(
        summary="Change the value offered by one side",
        request=RevalueSerializer,
        responses={200: SwapTransactionSerializer},
        tags=["Swap transactions"],
    ),
    **dispute_action_schemas("swap transaction", SwapTransactionSerializer),
}
