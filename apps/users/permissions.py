"""Permission classes shared by the storefront APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_store_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_store_admin") and user.is_store_admin()


class IsStoreAdmin(permissions.BasePermission):
    """Only admins of the back-office."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_store_admin(request.user)


class IsStoreAdminOrReadOnly(permissions.BasePermission):
    """Anyone can read, only admins can write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return is_store_admin(request.user)
