"""
Swap lifecycle events.

Services call `emit_swap_event()` inside their atomic block; the signal
is only sent once the surrounding transaction commits, and receivers are
called with `send_robust` so a failing subscriber never reaches the
caller.
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

# kwargs: event, recipients, context
swap_event = Signal()

OFFER_CREATED = "offer.created"
REQUEST_CREATED = "request.created"
REQUEST_RESPONDED = "request.responded"
REQUEST_CONFIRMED = "request.confirmed"
TRANSACTION_COMPLETED = "transaction.completed"
DISPUTE_RAISED = "dispute.raised"


def _send(event, recipients, context):
    responses = swap_event.send_robust(
        sender=event, event=event, recipients=recipients, context=context
    )
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                f"Swap event receiver {getattr(receiver, '__name__', receiver)} "
                f"failed for {event}: {response}",
                exc_info=response,
            )


def emit_swap_event(event, recipients, **context):
    """Queue `event` for delivery after the current transaction commits."""
    recipients = [pk for pk in dict.fromkeys(recipients) if pk is not None]
    if not recipients:
        return
    transaction.on_commit(lambda: _send(event, recipients, context))
