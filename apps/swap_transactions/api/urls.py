from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import SwapTransactionViewSet

router = DefaultRouter()
router.register(r"swap/transactions", SwapTransactionViewSet, basename="swap-transaction")

urlpatterns = [
    path("", include(router.urls)),
]
