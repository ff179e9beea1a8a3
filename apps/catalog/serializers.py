"""Serializers for the catalog."""

from __future__ import annotations

from datetime import date

from rest_framework import serializers  # type: ignore

from shared.domain.value_objects import DAY_TOKEN_FORMAT

from .models import Dress, Jewelry

PRODUCT_FIELDS = [
    "id",
    "product_type",
    "name",
    "description",
    "price",
    "image_url",
    "images",
    "hint",
    "availability",
    "unavailable_dates",
    "created_at",
    "updated_at",
]

PRODUCT_READ_ONLY = ["id", "images", "hint", "created_at", "updated_at"]


class DayTokenListField(serializers.ListField):
    child = serializers.DateField(input_formats=[DAY_TOKEN_FORMAT, "iso-8601"])

    def to_internal_value(self, data):  # type: ignore
        days = super().to_internal_value(data)
        return sorted({day.strftime(DAY_TOKEN_FORMAT) for day in days})

    def to_representation(self, value):  # type: ignore
        return list(value or [])


class ProductSerializer(serializers.ModelSerializer):
    product_type = serializers.ReadOnlyField()
    unavailable_dates = DayTokenListField(required=False)

    def update(self, instance, validated_data):  # type: ignore
        image_url = validated_data.pop("image_url", None)
        if image_url is not None and image_url != instance.image_url:
            instance.set_image(image_url)
        return super().update(instance, validated_data)


class DressSerializer(ProductSerializer):
    related_product_ids = serializers.PrimaryKeyRelatedField(
        source="related_products",
        queryset=Dress.objects.all(),
        many=True,
        required=False,
    )

    class Meta:
        model = Dress
        fields = PRODUCT_FIELDS + ["style", "related_product_ids"]
        read_only_fields = PRODUCT_READ_ONLY


class JewelrySerializer(ProductSerializer):
    type = serializers.CharField(source="jewelry_type", required=False, allow_blank=True)

    class Meta:
        model = Jewelry
        fields = PRODUCT_FIELDS + ["type"]
        read_only_fields = PRODUCT_READ_ONLY


class DateRangeQuerySerializer(serializers.Serializer):
    """``start``/``end`` pair; a missing end means a single day."""

    start = serializers.DateField()
    end = serializers.DateField(required=False)

    def validate(self, attrs):  # type: ignore
        start: date = attrs["start"]
        end: date = attrs.get("end") or start
        if end < start:
            raise serializers.ValidationError("Return date cannot be before the start date.")
        attrs["end"] = end
        return attrs
