"""API views for the booking domain."""

from __future__ import annotations

import logging

from django.apps import apps as django_apps  # type: ignore
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.users.permissions import IsStoreAdmin, is_store_admin

from .checkout import CartError, CheckoutService, cart_items_from
from .domain.lifecycle import InvalidTransition, TransitionRequiresConfirmation
from .domain.pricing import DeliveryUnavailable, DiscountRejected
from .models import Booking
from .serializers import (
    BookingSerializer,
    CartQuoteRequestSerializer,
    CartQuoteSerializer,
    CheckoutSerializer,
    PaymentStatusChangeSerializer,
    ShippingAddressSerializer,
    StatusChangeSerializer,
)
from .services import (
    BookingConflictError,
    InvalidRentalPeriod,
    ProductNotFound,
    ProductUnavailable,
    change_payment_status,
    change_status,
)

logger = logging.getLogger(__name__)


def get_message_bus():  # type: ignore
    return django_apps.get_app_config("bookings").message_bus


def checkout_error_response(exc: Exception) -> Response:
    """Translate checkout domain errors into API responses."""
    if isinstance(exc, ProductNotFound):
        return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, DiscountRejected):
        return Response(
            {"discount_code": [str(exc)], "reason": exc.reason},
            status=status.HTTP_400_BAD_REQUEST,
        )
    if isinstance(exc, DeliveryUnavailable):
        return Response({"city": [str(exc)]}, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(exc, BookingConflictError):
        return Response(
            {"non_field_errors": [str(exc)], "conflicts": exc.conflicts},
            status=status.HTTP_400_BAD_REQUEST,
        )
    return Response({"non_field_errors": [str(exc)]}, status=status.HTTP_400_BAD_REQUEST)


CHECKOUT_ERRORS = (
    ProductNotFound,
    ProductUnavailable,
    InvalidRentalPeriod,
    BookingConflictError,
    DiscountRejected,
    DeliveryUnavailable,
    CartError,
)


def transition_error_response(exc: InvalidTransition) -> Response:
    code = status.HTTP_409_CONFLICT if isinstance(exc, TransitionRequiresConfirmation) else status.HTTP_400_BAD_REQUEST
    return Response(
        {
            "detail": str(exc),
            "current": exc.current,
            "requested": exc.target,
            "requires_confirmation": isinstance(exc, TransitionRequiresConfirmation),
        },
        status=code,
    )


class IsBookingOwnerOrAdmin(permissions.BasePermission):
    """Customers see their own bookings, admins see everything."""

    def has_object_permission(self, request, view, obj: Booking):  # type: ignore
        if is_store_admin(request.user):
            return True
        return obj.user_id == request.user.id


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Bookings are created by checkout and changed by admin actions only."""

    queryset = Booking.objects.select_related("user").order_by("-rental_start", "-created_at")
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated, IsBookingOwnerOrAdmin]

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if not is_store_admin(user):
            return qs.filter(user=user)
        params = self.request.query_params
        if params.get("status"):
            qs = qs.filter(status=params["status"])
        if params.get("payment_status"):
            qs = qs.filter(payment_status=params["payment_status"])
        if params.get("user"):
            qs = qs.filter(user_id=params["user"])
        if params.get("order_reference"):
            qs = qs.filter(order_reference=params["order_reference"].upper())
        return qs

    @action(detail=True, methods=["patch"], url_path="status", permission_classes=[permissions.IsAuthenticated, IsStoreAdmin])
    def set_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        payload = StatusChangeSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            booking = change_status(
                booking.pk,
                payload.validated_data["status"],
                confirm=payload.validated_data["confirm"],
                bus=get_message_bus(),
            )
        except InvalidTransition as exc:
            return transition_error_response(exc)
        return Response(self.get_serializer(booking).data)

    @action(detail=True, methods=["patch"], url_path="payment", permission_classes=[permissions.IsAuthenticated, IsStoreAdmin])
    def set_payment_status(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        payload = PaymentStatusChangeSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            booking = change_payment_status(
                booking.pk,
                payload.validated_data["payment_status"],
                confirm=payload.validated_data["confirm"],
                bus=get_message_bus(),
            )
        except InvalidTransition as exc:
            return transition_error_response(exc)
        return Response(self.get_serializer(booking).data)


class CartViewSet(viewsets.ViewSet):
    """Quote a cart and turn it into bookings."""

    permission_classes = [permissions.AllowAny]

    def get_checkout_service(self) -> CheckoutService:
        return CheckoutService(get_message_bus())

    @action(detail=False, methods=["post"])
    def quote(self, request):  # type: ignore
        payload = CartQuoteRequestSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data
        try:
            quote = self.get_checkout_service().quote(
                cart_items_from(data["items"]),
                data.get("discount_code"),
                data.get("city"),
                data.get("zip"),
            )
        except CHECKOUT_ERRORS as exc:
            return checkout_error_response(exc)
        return Response(CartQuoteSerializer(quote).data)

    @action(detail=False, methods=["post"], permission_classes=[permissions.IsAuthenticated])
    def checkout(self, request):  # type: ignore
        payload = CheckoutSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        shipping_serializer = ShippingAddressSerializer(data=request.data.get("shipping") or {})
        shipping_serializer.is_valid(raise_exception=True)
        shipping = shipping_serializer.with_profile_defaults(request.user)

        try:
            bookings = self.get_checkout_service().place_order(
                request.user,
                cart_items_from(data["items"]),
                discount_code=data.get("discount_code"),
                shipping=shipping,
                transaction_id=data["transaction_id"],
            )
        except CHECKOUT_ERRORS as exc:
            logger.info(f"Checkout rejected for user {request.user.pk}: {exc}")
            return checkout_error_response(exc)

        return Response(
            {
                "order_reference": bookings[0].order_reference,
                "total": sum(booking.total_amount for booking in bookings),
                "bookings": BookingSerializer(bookings, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )
