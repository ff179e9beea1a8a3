"""API tests for cart checkout, booking listing and admin lifecycle actions."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.core import mail
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.catalog.models import Dress, Jewelry
from apps.discounts.models import Discount
from apps.users.models import AppUser


class CheckoutAPITests(APITestCase):
    def setUp(self) -> None:
        self.customer = AppUser.objects.create_user(
            email="asha@example.com",
            display_name="Asha",
            phone_number="+919800000001",
            address="12 MG Road",
            city="Indore",
            state="MP",
            zip_code="452001",
        )
        self.dress = Dress.objects.create(
            name="Red Lehenga Classic",
            price=Decimal("1500.00"),
            style="lehenga",
            image_url="https://cdn.example.com/red.jpg",
        )
        self.necklace = Jewelry.objects.create(
            name="Kundan Necklace",
            price=Decimal("500.00"),
            jewelry_type="necklace",
        )
        self.start = timezone.localdate() + timedelta(days=3)
        self.quote_url = reverse("cart-quote")
        self.checkout_url = reverse("cart-checkout")

    def _items(self):
        return [
            {
                "product_type": "dresses",
                "product_id": self.dress.id,
                "start": self.start.isoformat(),
                "end": (self.start + timedelta(days=2)).isoformat(),
            },
            {
                "product_type": "jewelry",
                "product_id": self.necklace.id,
                "start": self.start.isoformat(),
            },
        ]

    def test_quote_is_public(self):
        response = self.client.post(
            self.quote_url,
            {"items": self._items(), "city": "Indore", "zip": "452011"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["subtotal"]), Decimal("5000.00"))
        self.assertEqual(Decimal(response.data["shipping_fee"]), Decimal("0.00"))
        self.assertEqual(Decimal(response.data["security_deposit"]), Decimal("4000.00"))
        self.assertEqual(Decimal(response.data["total"]), Decimal("9000.00"))
        self.assertEqual(len(response.data["lines"]), 2)

    def test_quote_with_unknown_code(self):
        response = self.client.post(
            self.quote_url,
            {"items": self._items(), "discount_code": "nope"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["reason"], "invalid")

    def test_quote_outside_service_city(self):
        response = self.client.post(
            self.quote_url,
            {"items": self._items(), "city": "Bhopal"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("city", response.data)

    def test_same_product_twice_is_rejected(self):
        items = self._items()
        items.append(dict(items[0]))
        response = self.client.post(self.quote_url, {"items": items}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("non_field_errors", response.data)

    def test_checkout_requires_authentication(self):
        response = self.client.post(
            self.checkout_url,
            {"items": self._items(), "transaction_id": "UPI12345"},
            format="json",
        )
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_checkout_creates_bookings_and_sends_email(self):
        Discount.objects.create(
            code="SAVE10",
            discount_type=Discount.DiscountType.PERCENTAGE,
            value=Decimal("10"),
            expiry=timezone.now() + timedelta(days=5),
        )
        self.client.force_authenticate(self.customer)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(
                self.checkout_url,
                {"items": self._items(), "discount_code": "save10", "transaction_id": "UPI12345"},
                format="json",
            )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        bookings = Booking.objects.filter(order_reference=response.data["order_reference"])
        self.assertEqual(bookings.count(), 2)
        # 5000 - 500 discount + 150 shipping + 4000 deposits
        self.assertEqual(sum(b.total_amount for b in bookings), Decimal("8650.00"))
        self.assertEqual(Decimal(str(response.data["total"])), Decimal("8650.00"))
        for booking in bookings:
            self.assertEqual(booking.status, Booking.Status.PENDING_PAYMENT)
            self.assertEqual(booking.shipping_city, "Indore")
            self.assertEqual(booking.transaction_id, "UPI12345")
            self.assertEqual(booking.discount_code, "SAVE10")

        self.dress.refresh_from_db()
        self.assertEqual(len(self.dress.unavailable_dates), 3)
        self.assertEqual(len(mail.outbox), 2)
        self.assertIn("awaiting confirmation", mail.outbox[0].subject)

    def test_checkout_conflict_rolls_back_whole_order(self):
        self.necklace.unavailable_dates = [self.start.isoformat()]
        self.necklace.save()
        self.client.force_authenticate(self.customer)

        response = self.client.post(
            self.checkout_url,
            {"items": self._items(), "transaction_id": "UPI12345"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["conflicts"], [self.start.isoformat()])
        self.assertFalse(Booking.objects.exists())
        self.dress.refresh_from_db()
        self.assertEqual(self.dress.unavailable_dates, [])

    def test_checkout_requires_transaction_id(self):
        self.client.force_authenticate(self.customer)
        response = self.client.post(
            self.checkout_url,
            {"items": self._items(), "transaction_id": "123"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("transaction_id", response.data)


class BookingLifecycleAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = AppUser.objects.create_user(email="admin@example.com", role=AppUser.Role.ADMIN)
        self.customer = AppUser.objects.create_user(email="asha@example.com", display_name="Asha")
        self.other = AppUser.objects.create_user(email="ravi@example.com")
        today = timezone.localdate()
        self.booking = Booking.objects.create(
            user=self.customer,
            order_reference="ABC123",
            product_type="dresses",
            product_id=1,
            product_name="Red Lehenga",
            rental_start=today + timedelta(days=3),
            rental_end=today + timedelta(days=5),
            total_amount=Decimal("6500.00"),
        )
        Booking.objects.create(
            user=self.customer,
            order_reference="ABC124",
            product_type="jewelry",
            product_id=2,
            product_name="Necklace",
            rental_start=today + timedelta(days=10),
            rental_end=today + timedelta(days=10),
        )
        self.status_url = reverse("booking-set-status", kwargs={"pk": self.booking.pk})
        self.payment_url = reverse("booking-set-payment-status", kwargs={"pk": self.booking.pk})

    def test_customer_lists_own_bookings_latest_rental_first(self):
        Booking.objects.create(
            user=self.other,
            order_reference="ZZZ999",
            product_type="dresses",
            product_id=3,
            product_name="Other",
            rental_start=timezone.localdate(),
            rental_end=timezone.localdate(),
        )
        self.client.force_authenticate(self.customer)

        response = self.client.get(reverse("booking-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual([item["order_reference"] for item in results], ["ABC124", "ABC123"])

    def test_customer_cannot_see_other_booking(self):
        self.client.force_authenticate(self.other)
        response = self.client.get(reverse("booking-detail", kwargs={"pk": self.booking.pk}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_customer_cannot_change_status(self):
        self.client.force_authenticate(self.customer)
        response = self.client.patch(self.payment_url, {"payment_status": "paid"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_marking_paid_confirms_and_emails(self):
        self.client.force_authenticate(self.admin)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(self.payment_url, {"payment_status": "paid"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.PAID)
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn("confirmed", mail.outbox[0].subject)
        self.assertEqual(mail.outbox[0].to, ["asha@example.com"])

    def test_shipping_unpaid_booking_is_refused(self):
        self.client.force_authenticate(self.admin)
        response = self.client.patch(self.status_url, {"status": "shipped", "confirm": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_skip_needs_confirmation(self):
        self.booking.payment_status = Booking.PaymentStatus.PAID
        self.booking.status = Booking.Status.CONFIRMED
        self.booking.save()
        self.client.force_authenticate(self.admin)

        response = self.client.patch(self.status_url, {"status": "delivered"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(response.data["requires_confirmation"])

        response = self.client.patch(self.status_url, {"status": "delivered", "confirm": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "delivered")

    def test_paid_does_not_regress_later_status(self):
        self.booking.payment_status = Booking.PaymentStatus.FAILED
        self.booking.status = Booking.Status.PENDING_PAYMENT
        self.booking.save()
        self.client.force_authenticate(self.admin)

        response = self.client.patch(self.payment_url, {"payment_status": "paid"}, format="json")
        self.assertEqual(response.data["status"], "confirmed")

        response = self.client.patch(self.status_url, {"status": "shipped"}, format="json")
        self.assertEqual(response.data["status"], "shipped")

        response = self.client.patch(self.payment_url, {"payment_status": "paid"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "shipped")

    def test_admin_filters_by_status(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse("booking-list"), {"status": "pending payment"})
        results = response.data["results"] if isinstance(response.data, dict) else response.data
        self.assertEqual(len(results), 2)
