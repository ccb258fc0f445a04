from django.apps import AppConfig


class SwapTransactionsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.swap_transactions"
    verbose_name = "Swap transactions"
