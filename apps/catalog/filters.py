"""FilterSet definitions for catalog listings."""

from __future__ import annotations

from datetime import date

import django_filters  # type: ignore

from apps.bookings.domain.availability import is_range_blocked

from .models import Dress, Jewelry


class ProductFilterSet(django_filters.FilterSet):
    """Filters common to dresses and jewelry."""

    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")
    price_min = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    availability = django_filters.BooleanFilter(field_name="availability")

    # CSV of product ids, used by the cart and wishlist to fetch a known set
    ids = django_filters.CharFilter(method="filter_ids")

    # Only products free for the whole range
    available_from = django_filters.DateFilter(method="filter_available")
    available_to = django_filters.DateFilter(method="filter_available")

    def filter_ids(self, queryset, name, value):  # type: ignore
        if not value:
            return queryset
        try:
            ids = [int(x) for x in str(value).replace(" ", "").split(",") if x]
        except ValueError:
            return queryset.none()
        return queryset.filter(pk__in=ids)

    def filter_available(self, queryset, name, value):  # type: ignore
        start: date | None = self.form.cleaned_data.get("available_from")
        end: date | None = self.form.cleaned_data.get("available_to") or start
        if start is None:
            return queryset
        if name == "available_to" and self.form.cleaned_data.get("available_from"):
            # Handled once, when the filter runs for available_from
            return queryset
        free_ids = [
            product.pk
            for product in queryset.filter(availability=True)
            if not is_range_blocked(start, end, product.unavailable_dates or [])
        ]
        return queryset.filter(pk__in=free_ids)


class DressFilterSet(ProductFilterSet):
    style = django_filters.CharFilter(field_name="style", lookup_expr="iexact")

    class Meta:
        model = Dress
        fields = ["style", "availability"]


class JewelryFilterSet(ProductFilterSet):
    type = django_filters.CharFilter(field_name="jewelry_type", lookup_expr="iexact")

    class Meta:
        model = Jewelry
        fields = ["availability"]
