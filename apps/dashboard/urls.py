"""URL routing for dashboard endpoints."""

from django.urls import path  # type: ignore

from .views import AdminOverviewView, CustomerOverviewView


urlpatterns = [
    path('admin/', AdminOverviewView.as_view(), name='dashboard-admin'),
    path('me/', CustomerOverviewView.as_view(), name='dashboard-customer'),
]
