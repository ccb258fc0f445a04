import logging

from celery import shared_task

from apps.core.tasks import BaseTaskWithRetry
from apps.notifications.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@shared_task(bind=True, base=BaseTaskWithRetry)
def deliver_swap_notification(self, recipient_id: int, event: str, context: dict):
    """
    Store the in-app notification for one recipient of a swap event.

    Args:
        recipient_id: The user who should receive the notification.
        event: The swap event name (maps to a NotificationTemplate).
        context: Values used to format the template body.
    """
    notification = NotificationService.send_notification(recipient_id, event, context)
    if notification is None:
        return None
    return notification.id
