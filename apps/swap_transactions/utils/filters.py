import django_filters

from apps.swap_transactions.models import SwapTransaction, TransactionStatus, TransactionType


class SwapTransactionFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=TransactionStatus.choices)
    transaction_type = django_filters.ChoiceFilter(choices=TransactionType.choices)
    is_balanced = django_filters.BooleanFilter()

    class Meta:
        model = SwapTransaction
        fields = ["status", "transaction_type", "is_balanced"]
