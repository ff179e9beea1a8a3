"""URL routing for discounts."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import DiscountViewSet

router = DefaultRouter()
router.register(r"", DiscountViewSet, basename="discount")

urlpatterns = [
    path("", include(router.urls)),
]
