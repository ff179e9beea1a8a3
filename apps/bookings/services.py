"""Domain services for booking workflows.

``commit_booking`` is the one place that writes a booking together with the
product's booked-days index. Lifecycle changes made by admins also go
through here so every accepted change is recorded as a domain event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, NamedTuple

from django.conf import settings  # type: ignore
from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.catalog.models import RentalProduct, product_model_for
from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import RentalPeriod

from .domain import lifecycle
from .domain.availability import conflicting_tokens, expand_range_to_day_tokens, merge_day_tokens
from .domain.events import BookingPaymentConfirmed, BookingPlaced, BookingStatusChanged
from .domain.pricing import line_item_total, policy, security_deposit
from .models import Booking

logger = logging.getLogger(__name__)


class BookingConflictError(Exception):
    """Raised when some of the requested days are already taken."""

    def __init__(self, conflicts: list[str], message: str | None = None):
        self.conflicts = conflicts
        super().__init__(message or f"Product is not available on: {', '.join(conflicts)}.")


class ProductNotFound(Exception):
    pass


class ProductUnavailable(Exception):
    """Product exists but its availability switch is off."""


class InvalidRentalPeriod(Exception):
    pass


class ProductRef(NamedTuple):
    product_type: str
    product_id: int

    def __str__(self) -> str:
        return f"{self.product_type}/{self.product_id}"


@dataclass
class BookingDraft:
    """
    Everything needed to write one booking

    ``amounts`` holds the booking's share of the cart totals (see
    ``CartQuote.allocate``). When empty, the booking is priced on its own:
    line total plus one security deposit.
    """
    user: Any
    rental_start: date
    rental_end: date
    order_reference: str = ""
    transaction_id: str = ""
    discount_code: str = ""
    amounts: dict = field(default_factory=dict)
    shipping: dict = field(default_factory=dict)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def overbooking_allowed() -> bool:
    return bool(getattr(settings, "STOREFRONT", {}).get("ALLOW_OVERBOOKING", False))


def load_product(product_ref: ProductRef) -> RentalProduct:
    """Fetch the product, locking its row when called inside a transaction."""
    try:
        model = product_model_for(product_ref.product_type)
    except KeyError:
        raise ProductNotFound(f"Unknown product type '{product_ref.product_type}'.") from None
    product = _lock_queryset_if_possible(model.objects.filter(pk=product_ref.product_id)).first()
    if product is None:
        raise ProductNotFound(f"Product {product_ref} does not exist.")
    return product


def check_rental_period(start: date, end: date, today: date | None = None) -> RentalPeriod:
    today = today or timezone.localdate()
    try:
        period = RentalPeriod(start, end)
    except ValueError as exc:
        raise InvalidRentalPeriod(str(exc)) from None
    if period.start < today:
        raise InvalidRentalPeriod("Rental cannot start in the past.")
    return period


def commit_booking(
    draft: BookingDraft,
    product_ref: ProductRef,
    *,
    bus: MessageBus | None = None,
    today: date | None = None,
) -> Booking:
    """
    Write a booking and block its days on the product, atomically

    The product row is read under a lock and its ``unavailable_dates`` are
    re-checked against the requested days before anything is written. On
    any error nothing is persisted.
    """
    with DjangoUnitOfWork(bus) as uow:
        product = load_product(product_ref)

        if not product.availability:
            raise ProductUnavailable(f"{product.name} is currently unavailable.")
        period = check_rental_period(draft.rental_start, draft.rental_end, today)

        tokens = expand_range_to_day_tokens(period.start, period.end)
        existing = product.unavailable_dates or []
        conflicts = conflicting_tokens(existing, tokens)
        if conflicts:
            if not overbooking_allowed():
                raise BookingConflictError(conflicts)
            logger.warning(f"Overbooking {product_ref} on {', '.join(conflicts)}")

        days = len(period)
        line_total = line_item_total(product.price, days)
        amounts = {
            "line_total": line_total,
            "security_deposit": security_deposit(1),
            "shipping_fee": Decimal("0.00"),
            "taxes": Decimal("0.00"),
            "discount_amount": Decimal("0.00"),
        }
        amounts.update(draft.amounts)
        if "total_amount" not in draft.amounts:
            amounts["total_amount"] = (
                amounts["line_total"]
                + amounts["taxes"]
                + amounts["shipping_fee"]
                + amounts["security_deposit"]
                - amounts["discount_amount"]
            )

        booking = Booking.objects.create(
            user=draft.user,
            order_reference=draft.order_reference or Booking.generate_order_reference(),
            product_type=product_ref.product_type,
            product_id=product.pk,
            product_name=product.name,
            product_image_url=product.image_url,
            rental_start=draft.rental_start,
            rental_end=draft.rental_end,
            transaction_id=draft.transaction_id,
            rental_days=days,
            price_per_day=product.price,
            discount_code=draft.discount_code,
            currency=str(policy("CURRENCY")),
            **amounts,
            **{f"shipping_{key}": value for key, value in draft.shipping.items()},
        )

        product.unavailable_dates = merge_day_tokens(existing, tokens)
        product.save(update_fields=["unavailable_dates", "updated_at"])

        uow.record(
            BookingPlaced(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                product_type=product_ref.product_type,
                product_id=product.pk,
                user_id=draft.user.pk,
                rental_start=booking.rental_start,
                rental_end=booking.rental_end,
                order_reference=booking.order_reference,
            )
        )

    logger.info(
        f"Booking {booking.pk} committed for {product_ref} "
        f"{booking.rental_start}..{booking.rental_end} (order {booking.order_reference})"
    )
    return booking


def _load_booking_for_update(booking_id: int) -> Booking:
    return _lock_queryset_if_possible(Booking.objects.filter(pk=booking_id)).get()


def _save_change(uow: DjangoUnitOfWork, booking: Booking, change: lifecycle.Change) -> None:
    old_status = booking.status
    old_payment_status = booking.payment_status
    booking.status = change.status
    booking.payment_status = change.payment_status
    booking.save(update_fields=["status", "payment_status", "updated_at"])

    if change.status_changed:
        uow.record(
            BookingStatusChanged(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                old_status=old_status,
                new_status=change.status,
            )
        )
    if change.payment_confirmed:
        uow.record(
            BookingPaymentConfirmed(
                aggregate_id=booking.pk,
                booking_id=booking.pk,
                old_payment_status=old_payment_status,
            )
        )
    logger.info(
        f"Booking {booking.pk}: status {old_status} -> {change.status}, "
        f"payment {old_payment_status} -> {change.payment_status}"
    )


def change_status(
    booking_id: int,
    target: str,
    *,
    confirm: bool = False,
    bus: MessageBus | None = None,
) -> Booking:
    """Move a booking to ``target``. Raises lifecycle.InvalidTransition subclasses."""
    with DjangoUnitOfWork(bus) as uow:
        booking = _load_booking_for_update(booking_id)
        change = lifecycle.apply_status(booking.status, booking.payment_status, target, confirm)
        if change.changed:
            _save_change(uow, booking, change)
    return booking


def change_payment_status(
    booking_id: int,
    target: str,
    *,
    confirm: bool = False,
    bus: MessageBus | None = None,
) -> Booking:
    """Set the payment status; paying a booking awaiting payment confirms it."""
    with DjangoUnitOfWork(bus) as uow:
        booking = _load_booking_for_update(booking_id)
        change = lifecycle.apply_payment(booking.status, booking.payment_status, target, confirm)
        if change.changed:
            _save_change(uow, booking, change)
    return booking
