"""User API views."""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .permissions import IsStoreAdmin
from .serializers import ProfileUpdateSerializer, RoleUpdateSerializer, UserSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class UserViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Customer management.

    - `me` returns or updates the current user's profile
    - listing, retrieval and role changes are for the back-office only
    """

    serializer_class = UserSerializer
    queryset = User.objects.all()
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        role = self.request.query_params.get("role")
        if role:
            qs = qs.filter(role=role)
        return qs

    @action(
        detail=False,
        methods=["get", "patch"],
        permission_classes=[permissions.IsAuthenticated],
    )
    def me(self, request):
        """Current user's profile; PATCH updates contact and delivery details."""
        if request.method == "GET":
            return Response(UserSerializer(request.user).data)

        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(UserSerializer(request.user).data)

    @action(detail=True, methods=["patch"])
    def role(self, request, pk=None):
        """Promote a customer to admin or demote an admin."""
        user = self.get_object()
        serializer = RoleUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        if user.pk == request.user.pk and serializer.validated_data["role"] != User.Role.ADMIN:
            return Response(
                {"detail": "You cannot remove your own admin role."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        user.change_role(serializer.validated_data["role"])
        logger.info(f"User {user.pk} role changed to {user.role} by {request.user.pk}")
        return Response(UserSerializer(user).data)
