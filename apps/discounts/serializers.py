"""Serializers for discounts."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Discount, normalize_code


class DiscountSerializer(serializers.ModelSerializer):
    type = serializers.ChoiceField(source="discount_type", choices=Discount.DiscountType.choices)

    class Meta:
        model = Discount
        fields = [
            "id",
            "code",
            "title",
            "description",
            "type",
            "value",
            "min_order_amount",
            "expiry",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        value = normalize_code(value)
        if not value:
            raise serializers.ValidationError("Code is required.")
        existing = Discount.objects.filter(code=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("A discount with this code already exists.")
        return value

    def validate(self, attrs):  # type: ignore
        discount_type = attrs.get("discount_type", getattr(self.instance, "discount_type", None))
        value = attrs.get("value", getattr(self.instance, "value", None))
        if discount_type == Discount.DiscountType.PERCENTAGE and value is not None and value > 100:
            raise serializers.ValidationError({"value": "Percentage cannot exceed 100."})
        return attrs


class OfferSerializer(serializers.ModelSerializer):
    type = serializers.ReadOnlyField(source="discount_type")

    class Meta:
        model = Discount
        fields = ["code", "title", "description", "type", "value", "min_order_amount", "expiry"]


class ApplyDiscountSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
