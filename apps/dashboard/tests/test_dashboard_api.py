"""API tests for dashboard summaries."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.catalog.models import Dress, Jewelry
from apps.users.models import AppUser


class DashboardAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = AppUser.objects.create_user(email="admin@example.com", role=AppUser.Role.ADMIN)
        self.asha = AppUser.objects.create_user(email="asha@example.com")
        self.ravi = AppUser.objects.create_user(email="ravi@example.com")
        Dress.objects.create(name="Red Lehenga", price=Decimal("1500.00"))
        Dress.objects.create(name="Blue Gown", price=Decimal("900.00"))
        Jewelry.objects.create(name="Kundan Necklace", price=Decimal("500.00"))

        rows = [
            (self.asha, Booking.Status.RETURNED, Booking.PaymentStatus.PAID, "6500.00"),
            (self.asha, Booking.Status.RETURNED, Booking.PaymentStatus.PENDING, "1000.00"),
            (self.asha, Booking.Status.SHIPPED, Booking.PaymentStatus.PAID, "3000.00"),
            (self.ravi, Booking.Status.CONFIRMED, Booking.PaymentStatus.PAID, "2500.00"),
            (self.ravi, Booking.Status.DELIVERED, Booking.PaymentStatus.PAID, "2500.00"),
            (self.ravi, Booking.Status.PENDING_PAYMENT, Booking.PaymentStatus.PENDING, "2500.00"),
            (self.ravi, Booking.Status.RETURNED, Booking.PaymentStatus.PAID, "1500.00"),
        ]
        today = timezone.localdate()
        for index, (user, booking_status, payment_status, total) in enumerate(rows):
            Booking.objects.create(
                user=user,
                order_reference=f"REF{index}",
                product_type="dresses",
                product_id=1,
                product_name="Red Lehenga",
                rental_start=today + timedelta(days=index),
                rental_end=today + timedelta(days=index),
                status=booking_status,
                payment_status=payment_status,
                total_amount=Decimal(total),
            )

    def test_admin_overview(self):
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("dashboard-admin"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(str(response.data["total_revenue"])), Decimal("8000.00"))
        self.assertEqual(response.data["active_rentals"], 3)
        self.assertEqual(response.data["total_products"], 3)
        self.assertEqual(response.data["total_customers"], 2)
        self.assertEqual(len(response.data["recent_bookings"]), 5)
        self.assertEqual(response.data["recent_bookings"][0]["order_reference"], "REF6")

    def test_admin_overview_requires_admin(self):
        self.client.force_authenticate(self.asha)
        response = self.client.get(reverse("dashboard-admin"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_overview(self):
        self.client.force_authenticate(self.asha)

        response = self.client.get(reverse("dashboard-customer"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["active_rentals"], 1)
        self.assertEqual(response.data["total_bookings"], 3)
        self.assertEqual(response.data["latest_booking"]["order_reference"], "REF2")

    def test_customer_without_bookings(self):
        newcomer = AppUser.objects.create_user(email="new@example.com")
        self.client.force_authenticate(newcomer)
        response = self.client.get(reverse("dashboard-customer"))
        self.assertEqual(response.data["active_rentals"], 0)
        self.assertIsNone(response.data["latest_booking"])
