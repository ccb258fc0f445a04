from django.apps import AppConfig


class SwapOffersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.swap_offers"
    verbose_name = "Swap offers"
