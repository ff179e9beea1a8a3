"""Admin registrations for the catalog."""

from __future__ import annotations

from django.contrib import admin  # type: ignore

from .models import Dress, Jewelry


class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "price", "availability", "created_at")
    list_filter = ("availability",)
    search_fields = ("name", "hint")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Dress)
class DressAdmin(ProductAdmin):
    list_display = ProductAdmin.list_display + ("style",)
    list_filter = ProductAdmin.list_filter + ("style",)
    filter_horizontal = ("related_products",)


@admin.register(Jewelry)
class JewelryAdmin(ProductAdmin):
    list_display = ProductAdmin.list_display + ("jewelry_type",)
    list_filter = ProductAdmin.list_filter + ("jewelry_type",)
