from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import SwapOfferViewSet

router = DefaultRouter()
router.register(r"swap/offers", SwapOfferViewSet, basename="swap-offer")

urlpatterns = [
    path("", include(router.urls)),
]
