import os

from celery import Celery

from .settings.utils.get_env import env

# Default settings module for the 'celery' program
if env.get("DEBUG", default="False") == "True":
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "alumnet.settings.dev")
else:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "alumnet.settings.prod")

app = Celery("alumnet")

# All celery-related configuration keys carry a `CELERY_` prefix in settings
app.config_from_object("django.conf:settings", namespace="CELERY")
app.conf.broker_connection_retry_on_startup = True

app.autodiscover_tasks()
