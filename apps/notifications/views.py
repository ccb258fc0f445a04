from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.views import BaseResponseMixin
from apps.notifications.models import Notification
from apps.notifications.serializers import MarkReadSerializer, NotificationSerializer
from apps.notifications.services.notification_service import NotificationService


class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet, BaseResponseMixin):
    """The caller's in-app notifications."""

    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = Notification.objects.filter(recipient=self.request.user)
        if self.request.query_params.get("unread") in ("1", "true", "True"):
            queryset = queryset.filter(is_read=False)
        return queryset

    @action(detail=False, methods=["post"], url_path="read")
    def mark_read(self, request):
        serializer = MarkReadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = NotificationService.mark_read(
            request.user, serializer.validated_data.get("ids")
        )
        return self.success_response(
            data={"updated": updated}, message="Notifications marked as read"
        )
