"""Admin registrations for bookings."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "order_reference",
        "user",
        "product_type",
        "product_name",
        "rental_start",
        "rental_end",
        "status",
        "payment_status",
        "total_amount",
    )
    list_filter = ("status", "payment_status", "product_type")
    search_fields = ("order_reference", "product_name", "user__email", "transaction_id")
    date_hierarchy = "rental_start"
    readonly_fields = (
        "order_reference",
        "product_type",
        "product_id",
        "product_name",
        "rental_start",
        "rental_end",
        "status",
        "payment_status",
        "created_at",
        "updated_at",
    )
