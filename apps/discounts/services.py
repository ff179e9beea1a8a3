"""Discount lookup and evaluation."""

from __future__ import annotations

import logging
from decimal import Decimal

from django.utils import timezone  # type: ignore

from apps.bookings.domain.pricing import DiscountRejected, discount_amount

from .models import Discount, normalize_code

logger = logging.getLogger(__name__)


def get_discount_by_code(code: str | None) -> Discount | None:
    """Case-insensitive lookup: codes are stored upper-cased."""
    code = normalize_code(code)
    if not code:
        return None
    return Discount.objects.filter(code=code).first()


def evaluate_code(code: str | None, subtotal: Decimal, now=None) -> tuple[Discount, Decimal]:  # type: ignore
    """
    Resolve ``code`` and compute its amount for ``subtotal``

    Raises DiscountRejected with reason ``invalid`` for unknown codes, or the
    evaluation reason otherwise.
    """
    discount = get_discount_by_code(code)
    if discount is None:
        raise DiscountRejected(DiscountRejected.INVALID)
    return discount, discount_amount(discount, subtotal, now)


def expire_outdated_discounts(now=None) -> int:  # type: ignore
    now = now or timezone.now()
    updated = Discount.objects.outdated(now).update(status=Discount.Status.EXPIRED, updated_at=now)
    if updated:
        logger.info(f"Marked {updated} discount codes as expired")
    return updated
