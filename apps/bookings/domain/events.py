"""
Booking Domain Events

Published by the message bus after the transaction that recorded them
commits.
"""

from dataclasses import dataclass
from datetime import date

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingPlaced(DomainEvent):
    """
    A booking was written and its days were added to the product index

    Triggers:
    - "booking received" email to the customer
    """
    booking_id: int
    product_type: str
    product_id: int
    user_id: int
    rental_start: date
    rental_end: date
    order_reference: str = ""


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    booking_id: int
    old_status: str
    new_status: str


@dataclass(kw_only=True)
class BookingPaymentConfirmed(DomainEvent):
    """
    Payment status became ``paid``

    Triggers:
    - "booking confirmed" email to the customer
    """
    booking_id: int
    old_payment_status: str
