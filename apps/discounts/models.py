"""Discount code model."""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class DiscountQuerySet(models.QuerySet):
    def offers(self, now=None):  # type: ignore
        """Codes a customer can still use, latest expiry first."""
        now = now or timezone.now()
        return self.filter(status=Discount.Status.ACTIVE, expiry__gte=now).order_by("-expiry")

    def outdated(self, now=None):  # type: ignore
        now = now or timezone.now()
        return self.filter(status=Discount.Status.ACTIVE, expiry__lt=now)


class Discount(models.Model):
    class DiscountType(models.TextChoices):
        PERCENTAGE = "percentage", _("Percentage")
        FIXED = "fixed", _("Fixed amount")

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        EXPIRED = "expired", _("Expired")

    code = models.CharField(max_length=50, unique=True)
    title = models.CharField(max_length=200, blank=True)
    description = models.TextField(blank=True)
    discount_type = models.CharField(
        max_length=20,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )
    value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    min_order_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    expiry = models.DateTimeField()
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = DiscountQuerySet.as_manager()

    class Meta:
        verbose_name = _("Discount")
        verbose_name_plural = _("Discounts")
        ordering = ["-expiry"]

    def __str__(self) -> str:
        return self.code

    def save(self, *args, **kwargs):  # type: ignore
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)


def normalize_code(code: str | None) -> str:
    return (code or "").strip().upper()
