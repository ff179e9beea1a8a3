"""Serializers for user-related API endpoints."""

from __future__ import annotations

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import PHONE_VALIDATOR, AppUser

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Profile as seen by the user and by the back-office."""

    zip = serializers.CharField(source="zip_code", required=False, allow_blank=True)

    class Meta:
        model = User
        fields = [
            "id",
            "uid",
            "email",
            "display_name",
            "phone_number",
            "role",
            "address",
            "city",
            "state",
            "zip",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "uid",
            "email",
            "role",
            "created_at",
            "updated_at",
        ]


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a customer may change on their own profile."""

    phone_number = serializers.CharField(
        validators=[PHONE_VALIDATOR], required=False, allow_blank=True
    )
    zip = serializers.CharField(source="zip_code", required=False, allow_blank=True)

    class Meta:
        model = User
        fields = [
            "display_name",
            "phone_number",
            "address",
            "city",
            "state",
            "zip",
        ]


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=AppUser.Role.choices)
