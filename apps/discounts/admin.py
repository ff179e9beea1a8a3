"""Admin registrations for discounts."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Discount


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ("code", "title", "discount_type", "value", "min_order_amount", "expiry", "status")
    list_filter = ("discount_type", "status")
    search_fields = ("code", "title")
