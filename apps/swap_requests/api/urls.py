from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import SwapRequestViewSet

router = DefaultRouter()
router.register(r"swap/requests", SwapRequestViewSet, basename="swap-request")

urlpatterns = [
    path("", include(router.urls)),
]
