from django.apps import AppConfig


class SwapRequestsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.swap_requests"
    verbose_name = "Swap requests"
