"""
Pricing Calculator

Per-day rental pricing for a cart: line totals, discount evaluation, the
static shipping policy, security deposits and the final total. Policy
constants come from ``settings.STOREFRONT`` so deployments can tune them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, List, Sequence

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import as_date

TWO_PLACES = Decimal("0.01")

DEFAULT_POLICY = {
    "SERVICE_CITY": "indore",
    "FREE_SHIPPING_ZIPS": ["452011"],
    "STANDARD_SHIPPING_FEE": "150.00",
    "SECURITY_DEPOSIT_PER_ITEM": "2000.00",
    "TAX_RATE": "0",
    "CURRENCY": "INR",
}


class DiscountRejected(Exception):
    """Discount code cannot be applied to this cart."""

    INVALID = "invalid"
    EXPIRED = "expired"
    MIN_ORDER_NOT_MET = "min_order_not_met"

    MESSAGES = {
        INVALID: "Invalid discount code.",
        EXPIRED: "This discount code has expired.",
        MIN_ORDER_NOT_MET: "Minimum order amount not met for this code.",
    }

    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        super().__init__(message or self.MESSAGES.get(reason, reason))


class DeliveryUnavailable(Exception):
    """Shipping address is outside the service area."""


def policy(key: str) -> Any:
    overrides = getattr(settings, "STOREFRONT", {}) or {}
    return overrides.get(key, DEFAULT_POLICY.get(key))


def quantize(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def rental_days(start: date | datetime, end: date | datetime) -> int:
    """Inclusive number of calendar days, zero when end precedes start."""
    days = (as_date(end) - as_date(start)).days + 1
    return max(days, 0)


def line_item_total(price_per_day: Decimal, days: int) -> Decimal:
    return quantize(Decimal(price_per_day) * days)


def discount_amount(discount: Any, subtotal: Decimal, now: datetime | None = None) -> Decimal:
    """
    Amount taken off ``subtotal`` by ``discount``

    ``discount`` is anything exposing ``discount_type``, ``value``,
    ``min_order_amount``, ``expiry`` and ``status`` (the Discount model does).
    Raises DiscountRejected when the code is expired or the order is too small.
    """
    if discount is None:
        raise DiscountRejected(DiscountRejected.INVALID)

    now = now or timezone.now()
    if discount.status == "expired" or (discount.expiry is not None and discount.expiry < now):
        raise DiscountRejected(DiscountRejected.EXPIRED)

    subtotal = Decimal(subtotal)
    if subtotal < Decimal(discount.min_order_amount or 0):
        raise DiscountRejected(DiscountRejected.MIN_ORDER_NOT_MET)

    value = Decimal(discount.value)
    if discount.discount_type == "fixed":
        amount = value
    else:
        amount = subtotal * value / Decimal(100)
    return quantize(amount)


def discount_amount_or_zero(discount: Any, subtotal: Decimal, now: datetime | None = None) -> Decimal:
    try:
        return discount_amount(discount, subtotal, now)
    except DiscountRejected:
        return Decimal("0.00")


def shipping_fee(city: str | None, zip_code: str | None) -> Decimal:
    """
    Static delivery policy

    Only the service city is delivered to. An empty city is treated as the
    service city so a quote can be shown before the address is filled in.
    """
    city = (city or "").strip().lower()
    if city and city != str(policy("SERVICE_CITY")).lower():
        raise DeliveryUnavailable(f"Sorry, we do not deliver to {city.title()} yet.")
    if (zip_code or "").strip() in policy("FREE_SHIPPING_ZIPS"):
        return Decimal("0.00")
    return quantize(Decimal(policy("STANDARD_SHIPPING_FEE")))


def security_deposit(item_count: int) -> Decimal:
    return quantize(Decimal(policy("SECURITY_DEPOSIT_PER_ITEM")) * item_count)


def taxes(subtotal: Decimal) -> Decimal:
    return quantize(Decimal(subtotal) * Decimal(policy("TAX_RATE")))


def final_total(
    subtotal: Decimal,
    taxes: Decimal,
    shipping_fee: Decimal,
    security_deposit: Decimal,
    discount: Decimal,
) -> Decimal:
    return quantize(subtotal + taxes + shipping_fee + security_deposit - discount)


@dataclass
class PricedLine:
    product_type: str
    product_id: int
    name: str
    start: date
    end: date
    price_per_day: Decimal
    days: int
    total: Decimal


@dataclass
class CartQuote:
    lines: List[PricedLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0.00")
    taxes: Decimal = Decimal("0.00")
    shipping_fee: Decimal = Decimal("0.00")
    security_deposit: Decimal = Decimal("0.00")
    discount: Decimal = Decimal("0.00")
    discount_code: str = ""
    total: Decimal = Decimal("0.00")
    currency: str = "INR"

    def allocate(self) -> List[dict]:
        """
        Split cart totals across lines so each booking carries its share

        Every line keeps its own total and one deposit. The discount and taxes
        are split proportionally to line totals with the rounding remainder on
        the last line; shipping lands on the first line. The shares add up to
        ``total`` exactly.
        """
        shares = []
        per_item_deposit = quantize(Decimal(policy("SECURITY_DEPOSIT_PER_ITEM")))
        remaining_discount = self.discount
        remaining_taxes = self.taxes
        for index, line in enumerate(self.lines):
            last = index == len(self.lines) - 1
            if last:
                line_discount = remaining_discount
                line_taxes = remaining_taxes
            elif self.subtotal:
                line_discount = quantize(self.discount * line.total / self.subtotal)
                line_taxes = quantize(self.taxes * line.total / self.subtotal)
            else:
                line_discount = Decimal("0.00")
                line_taxes = Decimal("0.00")
            remaining_discount -= line_discount
            remaining_taxes -= line_taxes
            line_shipping = self.shipping_fee if index == 0 else Decimal("0.00")
            shares.append(
                {
                    "line": line,
                    "security_deposit": per_item_deposit,
                    "shipping_fee": line_shipping,
                    "taxes": line_taxes,
                    "discount": line_discount,
                    "total": final_total(line.total, line_taxes, line_shipping, per_item_deposit, line_discount),
                }
            )
        return shares


def quote_cart(
    lines: Sequence[PricedLine],
    discount: Any = None,
    city: str | None = None,
    zip_code: str | None = None,
    now: datetime | None = None,
) -> CartQuote:
    """
    Price a cart of already-priced lines

    A supplied discount that fails evaluation raises DiscountRejected; pass
    ``discount=None`` to quote without one.
    """
    subtotal = quantize(sum((line.total for line in lines), Decimal("0")))
    quote = CartQuote(lines=list(lines), subtotal=subtotal, currency=str(policy("CURRENCY")))
    quote.taxes = taxes(subtotal)
    quote.shipping_fee = shipping_fee(city, zip_code) if lines else Decimal("0.00")
    quote.security_deposit = security_deposit(len(lines))
    if discount is not None:
        quote.discount = discount_amount(discount, subtotal, now)
        quote.discount_code = discount.code
    quote.total = final_total(
        quote.subtotal, quote.taxes, quote.shipping_fee, quote.security_deposit, quote.discount
    )
    return quote
