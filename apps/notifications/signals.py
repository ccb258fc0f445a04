import logging

from django.dispatch import receiver

from .events import swap_event

logger = logging.getLogger(__name__)


@receiver(swap_event)
def queue_swap_notifications(sender, event, recipients, context, **kwargs):
    """Hand each recipient's notification to the worker."""
    from apps.notifications.tasks import deliver_swap_notification

    for recipient_id in recipients:
        deliver_swap_notification.delay(recipient_id, event, context)
    logger.debug(f"Queued {len(recipients)} notifications for {event}")
