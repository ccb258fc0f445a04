import logging
from typing import Any, Dict, Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.notifications.models import Notification, NotificationTemplate

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES = {
    "offer.created": 'Your offer "{offer_title}" is now live.',
    "request.created": '{actor_name} sent you a swap request for "{offer_title}".',
    "request.responded": 'Your swap request for "{offer_title}" was {decision}.',
    "request.confirmed": 'The swap for "{offer_title}" is confirmed.',
    "transaction.completed": 'The swap for "{offer_title}" has been completed.',
    "dispute.raised": "{actor_name} raised a dispute on {resource} #{resource_id}.",
}


class _FormatContext(dict):
    def __missing__(self, key):
        return ""


class NotificationService:
    """Stores and reads back in-app notifications for swap events."""

    @staticmethod
    def render(event: str, context: Dict[str, Any]) -> str:
        """
        Active template body for `event`, falling back to the built-in
        message. Placeholders missing from `context` render empty.
        """
        template = NotificationTemplate.objects.filter(event=event, is_active=True).first()
        body = template.body if template is not None else DEFAULT_MESSAGES.get(event, event)
        return body.format_map(_FormatContext(context))

    @staticmethod
    def send_notification(recipient_id, event: str, context: Dict[str, Any]) -> Optional[Notification]:
        User = get_user_model()
        if not User.objects.filter(pk=recipient_id, is_active=True).exists():
            logger.warning(f"Skipping {event} notification for unknown user {recipient_id}")
            return None

        notification = Notification.objects.create(
            recipient_id=recipient_id,
            event=event,
            message=NotificationService.render(event, context),
            data=context,
        )
        logger.info(f"Stored {event} notification {notification.id} for user {recipient_id}")
        return notification

    @staticmethod
    def mark_read(recipient, notification_ids=None) -> int:
        queryset = Notification.objects.filter(recipient=recipient, is_read=False)
        if notification_ids:
            queryset = queryset.filter(id__in=notification_ids)
        return queryset.update(is_read=True, read_at=timezone.now())
