"""URL routing for the catalog."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import DressViewSet, JewelryViewSet

router = DefaultRouter()
router.register(r"dresses", DressViewSet, basename="dress")
router.register(r"jewelry", JewelryViewSet, basename="jewelry")

urlpatterns = [
    path("", include(router.urls)),
]
