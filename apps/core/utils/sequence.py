import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Max

from apps.core.exceptions import ConcurrencyError

logger = logging.getLogger(__name__)


def append_sequenced(model, parent_field, parent, **fields):
    """
    Append a row to an ordered, append-only log keyed by (parent, sequence).

    The next sequence is read as MAX + 1 and written in a savepoint; a
    concurrent append that took the same number trips the
    (parent, sequence) unique constraint and the allocation is retried.
    The parent row itself is never locked.
    """
    attempts = settings.SWAP_SETTINGS["SEQUENCE_ALLOCATION_ATTEMPTS"]
    lookup = {parent_field: parent}

    for attempt in range(1, attempts + 1):
        last = model.objects.filter(**lookup).aggregate(last=Max("sequence"))["last"]
        try:
            with transaction.atomic():
                return model.objects.create(
                    sequence=(last or 0) + 1, **lookup, **fields
                )
        except IntegrityError:
            logger.info(
                f"{model.__name__} sequence collision on {parent_field}={parent.pk}, "
                f"attempt {attempt}/{attempts}"
            )

    raise ConcurrencyError(
        f"Could not append to {model._meta.verbose_name} log, please retry."
    )
