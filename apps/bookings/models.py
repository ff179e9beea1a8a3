"""Booking models for the rental storefront."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.catalog.models import PRODUCT_TYPE_CHOICES
from shared.domain.value_objects import RentalPeriod

from .domain import lifecycle


def _money(**kwargs):  # type: ignore
    return models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"), **kwargs)


class Booking(models.Model):
    """
    One rented product for one inclusive range of days.

    The product is snapshotted (type, id, name, image) so later catalog edits
    do not rewrite history. Bookings placed together share ``order_reference``.
    """

    class Status(models.TextChoices):
        PENDING_PAYMENT = lifecycle.PENDING_PAYMENT, _("Pending payment")
        CONFIRMED = lifecycle.CONFIRMED, _("Confirmed")
        SHIPPED = lifecycle.SHIPPED, _("Shipped")
        DELIVERED = lifecycle.DELIVERED, _("Delivered")
        RETURNED = lifecycle.RETURNED, _("Returned")

    class PaymentStatus(models.TextChoices):
        PENDING = lifecycle.PAYMENT_PENDING, _("Pending")
        PAID = lifecycle.PAYMENT_PAID, _("Paid")
        FAILED = lifecycle.PAYMENT_FAILED, _("Failed")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    order_reference = models.CharField(max_length=16, db_index=True, editable=False)

    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES)
    product_id = models.PositiveBigIntegerField()
    product_name = models.CharField(max_length=200)
    product_image_url = models.URLField(max_length=500, blank=True)

    rental_start = models.DateField()
    rental_end = models.DateField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING_PAYMENT,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    transaction_id = models.CharField(max_length=100, blank=True)

    rental_days = models.PositiveSmallIntegerField(default=1)
    price_per_day = _money(help_text=_("Product price per day at the time of booking."))
    line_total = _money()
    security_deposit = _money()
    shipping_fee = _money()
    taxes = _money()
    discount_amount = _money()
    discount_code = models.CharField(max_length=50, blank=True)
    total_amount = _money()
    currency = models.CharField(max_length=3, default="INR")

    shipping_name = models.CharField(max_length=150, blank=True)
    shipping_phone = models.CharField(max_length=20, blank=True)
    shipping_address = models.CharField(max_length=255, blank=True)
    shipping_city = models.CharField(max_length=100, blank=True)
    shipping_state = models.CharField(max_length=100, blank=True)
    shipping_zip = models.CharField(max_length=20, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-rental_start", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(rental_end__gte=models.F("rental_start")),
                name="booking_valid_rental_period",
            ),
        ]
        indexes = [
            models.Index(fields=["product_type", "product_id"]),
            models.Index(fields=["status"]),
            models.Index(fields=["user", "rental_start"]),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} ({self.product_type}/{self.product_id}) {self.rental_start}..{self.rental_end}"

    @staticmethod
    def generate_order_reference() -> str:
        return secrets.token_hex(5).upper()

    @property
    def period(self) -> RentalPeriod:
        return RentalPeriod(self.rental_start, self.rental_end)
