"""Cart quoting and order placement."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Sequence

from django.utils import timezone  # type: ignore

from apps.discounts.services import get_discount_by_code
from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork

from .domain.availability import conflicting_tokens, expand_range_to_day_tokens
from .domain.pricing import CartQuote, DiscountRejected, PricedLine, line_item_total, quote_cart, rental_days
from .models import Booking
from .services import (
    BookingConflictError,
    BookingDraft,
    ProductRef,
    ProductUnavailable,
    check_rental_period,
    commit_booking,
    load_product,
    overbooking_allowed,
)

logger = logging.getLogger(__name__)


class CartError(Exception):
    """Cart content is not acceptable as a whole."""


@dataclass(frozen=True)
class CartItem:
    product_type: str
    product_id: int
    start: date
    end: date | None = None

    @property
    def ref(self) -> ProductRef:
        return ProductRef(self.product_type, self.product_id)

    @property
    def rental_end(self) -> date:
        return self.end or self.start


class CheckoutService:
    """
    Prices carts and turns them into bookings

    The message bus is passed in so booking events raised while placing an
    order reach the handlers wired at startup.
    """

    def __init__(self, bus: MessageBus | None = None):
        self.bus = bus

    def price_items(self, items: Sequence[CartItem], today: date | None = None) -> List[PricedLine]:
        """
        Validate every cart line and price it at the product's current rate

        A product may appear only once. Every line must be bookable: the
        product exists, is switched on and is free for the whole period.
        Product rows are locked in (type, id) order regardless of the cart
        order; the priced lines keep the cart order.
        """
        if not items:
            raise CartError("Your cart is empty.")
        today = today or timezone.localdate()
        seen = set()
        for item in items:
            if item.ref in seen:
                raise CartError(f"Product {item.ref} is already in the cart.")
            seen.add(item.ref)

        products = {ref: load_product(ref) for ref in sorted(seen)}

        lines = []
        for item in items:
            product = products[item.ref]
            if not product.availability:
                raise ProductUnavailable(f"{product.name} is currently unavailable.")
            check_rental_period(item.start, item.rental_end, today)
            conflicts = conflicting_tokens(
                product.unavailable_dates or [],
                expand_range_to_day_tokens(item.start, item.rental_end),
            )
            if conflicts and not overbooking_allowed():
                raise BookingConflictError(conflicts, f"{product.name} is not available on: {', '.join(conflicts)}.")

            days = rental_days(item.start, item.rental_end)
            lines.append(
                PricedLine(
                    product_type=item.product_type,
                    product_id=product.pk,
                    name=product.name,
                    start=item.start,
                    end=item.rental_end,
                    price_per_day=product.price,
                    days=days,
                    total=line_item_total(product.price, days),
                )
            )
        return lines

    def quote(
        self,
        items: Sequence[CartItem],
        discount_code: str | None = None,
        city: str | None = None,
        zip_code: str | None = None,
        today: date | None = None,
    ) -> CartQuote:
        discount = None
        if discount_code:
            discount = get_discount_by_code(discount_code)
            if discount is None:
                raise DiscountRejected(DiscountRejected.INVALID)
        lines = self.price_items(items, today)
        return quote_cart(lines, discount, city, zip_code)

    def place_order(
        self,
        user: Any,
        items: Sequence[CartItem],
        discount_code: str | None = None,
        shipping: dict | None = None,
        transaction_id: str = "",
        today: date | None = None,
    ) -> List[Booking]:
        """
        Commit one booking per cart line in a single transaction

        The quote is recomputed under the same transaction, so prices and
        availability are the ones the bookings are written with. Any failure
        rolls back the whole order.
        """
        shipping = dict(shipping or {})
        with DjangoUnitOfWork(self.bus):
            quote = self.quote(items, discount_code, shipping.get("city"), shipping.get("zip"), today)
            order_reference = Booking.generate_order_reference()
            bookings = []
            for share in quote.allocate():
                line: PricedLine = share["line"]
                draft = BookingDraft(
                    user=user,
                    rental_start=line.start,
                    rental_end=line.end,
                    order_reference=order_reference,
                    transaction_id=transaction_id,
                    discount_code=quote.discount_code,
                    amounts={
                        "line_total": line.total,
                        "security_deposit": share["security_deposit"],
                        "shipping_fee": share["shipping_fee"],
                        "taxes": share["taxes"],
                        "discount_amount": share["discount"],
                        "total_amount": share["total"],
                    },
                    shipping=shipping,
                )
                bookings.append(
                    commit_booking(draft, ProductRef(line.product_type, line.product_id), bus=self.bus, today=today)
                )

        logger.info(
            f"Order {order_reference} placed by user {user.pk}: "
            f"{len(bookings)} bookings, total {quote.total} {quote.currency}"
        )
        return bookings


def cart_items_from(data: Iterable[dict]) -> List[CartItem]:
    return [
        CartItem(
            product_type=item["product_type"],
            product_id=item["product_id"],
            start=item["start"],
            end=item.get("end"),
        )
        for item in data
    ]
