from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ModelViewSet
import logging

from apps.core.actors import Actor

logger = logging.getLogger(__name__)


class BaseResponseMixin:
    """
    Standardizes response format across the application.
    All responses have the format:
    {
        "status": "success" | "error",
        "status_code": int,
        "message": str,
        "data": Any | None
    }
    """

    def success_response(
        self, data=None, message="Success", status_code=status.HTTP_200_OK
    ):
        """Send a success response"""
        response_data = {
            "status": "success",
            "status_code": status_code,
            "message": message,
            "data": data,
        }
        return Response(response_data, status=status_code)

    def error_response(
        self,
        message="An error occurred",
        status_code=status.HTTP_400_BAD_REQUEST,
        data=None,
    ):
        """Send an error response"""
        response_data = {
            "status": "error",
            "message": message,
            "data": data,
            "status_code": status_code,
        }
        return Response(response_data, status=status_code)

    def get_actor(self):
        """The authenticated caller wrapped for the service layer."""
        if not hasattr(self, "_actor"):
            self._actor = Actor.from_user(self.request.user)
        return self._actor


class BaseViewSet(ModelViewSet, BaseResponseMixin):
    """
    Base ViewSet with the standard envelope on `list` and `retrieve`.

    Writes in subclasses go through their service layer; business errors
    raised there propagate to `custom_exception_handler`.
    """

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        return self.paginated_response(queryset)

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance)
        return self.success_response(
            data=serializer.data,
            message=f"{self.get_model_name()} retrieved successfully",
        )

    def paginated_response(self, queryset, serializer_class=None):
        serializer_class = serializer_class or self.get_serializer_class()
        context = self.get_serializer_context()
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = serializer_class(page, many=True, context=context)
            return self.get_paginated_response(serializer.data)

        serializer = serializer_class(queryset, many=True, context=context)
        return self.success_response(
            data=serializer.data,
            message=f"{self.get_model_name()} list retrieved successfully",
        )

    def get_model_name(self) -> str:
        """
        Helper method to get the model name for messages.
        """
        return self.__class__.__name__.replace("ViewSet", "")


class BaseAPIView(APIView, BaseResponseMixin):
    """APIView with the standard response envelope."""
