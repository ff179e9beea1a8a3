"""API views for discount codes."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.domain.pricing import DiscountRejected
from apps.users.permissions import IsStoreAdmin

from .models import Discount, normalize_code
from .serializers import ApplyDiscountSerializer, DiscountSerializer, OfferSerializer
from .services import evaluate_code


class DiscountViewSet(viewsets.ModelViewSet):
    """Admin management of discount codes plus public offers/apply."""

    queryset = Discount.objects.all()
    serializer_class = DiscountSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]

    @action(detail=False, methods=["get"], url_path=r"by-code/(?P<code>[^/.]+)")
    def by_code(self, request, code=None):  # type: ignore
        discount = get_object_or_404(Discount, code=normalize_code(code))
        return Response(self.get_serializer(discount).data)

    @action(detail=False, methods=["get"], permission_classes=[permissions.AllowAny])
    def offers(self, request):  # type: ignore
        serializer = OfferSerializer(Discount.objects.offers(), many=True)
        return Response(serializer.data)

    @action(detail=False, methods=["post"], permission_classes=[permissions.AllowAny])
    def apply(self, request):  # type: ignore
        """Evaluate a code against a subtotal without touching anything."""
        payload = ApplyDiscountSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        subtotal = payload.validated_data["subtotal"]
        try:
            discount, amount = evaluate_code(payload.validated_data["code"], subtotal)
        except DiscountRejected as exc:
            return Response(
                {"code": [str(exc)], "reason": exc.reason},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(
            {
                "code": discount.code,
                "title": discount.title,
                "discount": amount,
                "subtotal": subtotal,
                "total": subtotal - amount,
            }
        )
