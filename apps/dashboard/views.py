"""API views for dashboard summaries.

Admins get store-wide figures, customers get a summary of their own
bookings. Both are computed on request from the bookings table.
"""

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model  # type: ignore
from django.db import models  # type: ignore
from rest_framework.permissions import IsAuthenticated  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.domain.lifecycle import ACTIVE_STATUSES
from apps.bookings.models import Booking
from apps.bookings.serializers import BookingSerializer
from apps.catalog.models import Dress, Jewelry
from apps.users.permissions import IsStoreAdmin

RECENT_BOOKINGS_LIMIT = 5


class AdminOverviewView(APIView):
    """Revenue, active rentals, catalog size, customers and recent bookings."""

    permission_classes = [IsAuthenticated, IsStoreAdmin]

    def get(self, request, format=None):  # type: ignore
        User = get_user_model()
        bookings = Booking.objects.select_related("user")

        total_revenue = (
            bookings.filter(status=Booking.Status.RETURNED, payment_status=Booking.PaymentStatus.PAID)
            .aggregate(total=models.Sum("total_amount"))
            .get("total")
            or Decimal("0.00")
        )
        recent = bookings.order_by("-created_at", "-id")[:RECENT_BOOKINGS_LIMIT]

        return Response(
            {
                "total_revenue": total_revenue,
                "active_rentals": bookings.filter(status__in=ACTIVE_STATUSES).count(),
                "total_products": Dress.objects.count() + Jewelry.objects.count(),
                "total_customers": User.objects.filter(role=User.Role.CUSTOMER).count(),
                "recent_bookings": BookingSerializer(recent, many=True).data,
            }
        )


class CustomerOverviewView(APIView):
    """The signed-in customer's open rentals and latest booking."""

    permission_classes = [IsAuthenticated]

    def get(self, request, format=None):  # type: ignore
        bookings = Booking.objects.filter(user=request.user)
        latest = bookings.order_by("-created_at", "-id").first()
        return Response(
            {
                "active_rentals": bookings.exclude(status=Booking.Status.RETURNED).count(),
                "total_bookings": bookings.count(),
                "latest_booking": BookingSerializer(latest).data if latest else None,
            }
        )
