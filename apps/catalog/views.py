"""API views for the rental catalog."""

from __future__ import annotations

import logging

from django.db import transaction  # type: ignore
from django_filters.rest_framework import DjangoFilterBackend  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.filters import OrderingFilter, SearchFilter  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.bookings.domain.availability import blocked_days, expand_range_to_day_tokens, is_range_blocked
from apps.users.permissions import IsStoreAdmin, IsStoreAdminOrReadOnly
from shared.domain.value_objects import day_token

from .filters import DressFilterSet, JewelryFilterSet
from .models import Dress, Jewelry
from .serializers import DateRangeQuerySerializer, DressSerializer, JewelrySerializer

logger = logging.getLogger(__name__)


class ProductViewSet(viewsets.ModelViewSet):
    """Public catalog reads, admin writes, calendar helpers."""

    permission_classes = [IsStoreAdminOrReadOnly]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    search_fields = ["name", "hint", "description"]
    ordering_fields = ["price", "created_at", "name"]

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def availability(self, request, pk=None):  # type: ignore
        """Is the product free for ``start``..``end`` (inclusive) and which days are not."""
        product = self.get_object()
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        start = query.validated_data["start"]
        end = query.validated_data["end"]
        unavailable = product.unavailable_dates or []
        blocked = (not product.availability) or is_range_blocked(start, end, unavailable)
        return Response(
            {
                "product_type": product.product_type,
                "product_id": product.pk,
                "start": start,
                "end": end,
                "available": not blocked,
                "blocked_dates": [day_token(day) for day in blocked_days(start, end, unavailable)],
            }
        )

    @action(
        detail=True,
        methods=["post"],
        url_path="block-dates",
        permission_classes=[permissions.IsAuthenticated, IsStoreAdmin],
    )
    def block_dates(self, request, pk=None):  # type: ignore
        """Manually add a range of days to the product's unavailable dates."""
        query = DateRangeQuerySerializer(data=request.data)
        query.is_valid(raise_exception=True)
        tokens = expand_range_to_day_tokens(query.validated_data["start"], query.validated_data["end"])

        with transaction.atomic():
            product = self.get_queryset().select_for_update().get(pk=self.get_object().pk)
            added = product.add_unavailable_dates(tokens)
            product.save(update_fields=["unavailable_dates", "updated_at"])

        logger.info(f"Admin {request.user.pk} blocked {len(added)} days on {product.product_type}/{product.pk}")
        serializer = self.get_serializer(product)
        return Response(serializer.data, status=status.HTTP_200_OK)


class DressViewSet(ProductViewSet):
    queryset = Dress.objects.prefetch_related("related_products")
    serializer_class = DressSerializer
    filterset_class = DressFilterSet

    @action(detail=True, methods=["get"], permission_classes=[permissions.AllowAny])
    def related(self, request, pk=None):  # type: ignore
        dress = self.get_object()
        serializer = self.get_serializer(dress.related_products.all(), many=True)
        return Response(serializer.data)


class JewelryViewSet(ProductViewSet):
    queryset = Jewelry.objects.all()
    serializer_class = JewelrySerializer
    filterset_class = JewelryFilterSet
