from celery import Task
from django.db import OperationalError as DatabaseOperationalError
from kombu.exceptions import OperationalError as BrokerOperationalError


class BaseTaskWithRetry(Task):
    """
    Base class for tasks touching the database or the broker: transient
    connection failures are retried with exponential backoff.
    """

    autoretry_for = (DatabaseOperationalError, BrokerOperationalError)
    retry_kwargs = {"max_retries": 3}
    retry_backoff = True
    retry_backoff_max = 60
    retry_jitter = True
