"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.catalog.models import PRODUCT_TYPE_CHOICES
from apps.users.models import PHONE_VALIDATOR

from .models import Booking


class BookingSerializer(serializers.ModelSerializer):
    """Booking as shown to the customer and in the back-office."""

    user_id = serializers.ReadOnlyField(source="user.id")
    user_email = serializers.ReadOnlyField(source="user.email")
    shipping = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "order_reference",
            "user_id",
            "user_email",
            "product_type",
            "product_id",
            "product_name",
            "product_image_url",
            "rental_start",
            "rental_end",
            "status",
            "payment_status",
            "transaction_id",
            "rental_days",
            "price_per_day",
            "line_total",
            "security_deposit",
            "shipping_fee",
            "taxes",
            "discount_code",
            "discount_amount",
            "total_amount",
            "currency",
            "shipping",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_shipping(self, obj: Booking) -> dict:
        return {
            "name": obj.shipping_name,
            "phone": obj.shipping_phone,
            "address": obj.shipping_address,
            "city": obj.shipping_city,
            "state": obj.shipping_state,
            "zip": obj.shipping_zip,
        }


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.Status.choices)
    confirm = serializers.BooleanField(default=False)


class PaymentStatusChangeSerializer(serializers.Serializer):
    payment_status = serializers.ChoiceField(choices=Booking.PaymentStatus.choices)
    confirm = serializers.BooleanField(default=False)


class CartItemSerializer(serializers.Serializer):
    product_type = serializers.ChoiceField(choices=PRODUCT_TYPE_CHOICES)
    product_id = serializers.IntegerField(min_value=1)
    start = serializers.DateField()
    end = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):  # type: ignore
        end = attrs.get("end")
        if end is not None and end < attrs["start"]:
            raise serializers.ValidationError({"end": "Return date cannot be before the start date."})
        return attrs


class CartQuoteRequestSerializer(serializers.Serializer):
    items = CartItemSerializer(many=True, allow_empty=False)
    discount_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip = serializers.CharField(max_length=20, required=False, allow_blank=True)


class ShippingAddressSerializer(serializers.Serializer):
    """Delivery address; missing fields are filled from the customer profile."""

    name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, validators=[PHONE_VALIDATOR])
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    state = serializers.CharField(max_length=100, required=False, allow_blank=True)
    zip = serializers.CharField(max_length=20, required=False, allow_blank=True)

    PROFILE_FIELDS = {
        "name": "display_name",
        "phone": "phone_number",
        "address": "address",
        "city": "city",
        "state": "state",
        "zip": "zip_code",
    }

    def with_profile_defaults(self, user) -> dict:  # type: ignore
        data = dict(self.validated_data)
        for key, attr in self.PROFILE_FIELDS.items():
            if not data.get(key):
                data[key] = getattr(user, attr, "") or ""
        return data


class CheckoutSerializer(serializers.Serializer):
    items = CartItemSerializer(many=True, allow_empty=False)
    discount_code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    shipping = ShippingAddressSerializer(required=False)
    transaction_id = serializers.CharField(min_length=5, max_length=100)


class PricedLineSerializer(serializers.Serializer):
    product_type = serializers.CharField()
    product_id = serializers.IntegerField()
    name = serializers.CharField()
    start = serializers.DateField()
    end = serializers.DateField()
    price_per_day = serializers.DecimalField(max_digits=10, decimal_places=2)
    days = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartQuoteSerializer(serializers.Serializer):
    lines = PricedLineSerializer(many=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    taxes = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    security_deposit = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_code = serializers.CharField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
