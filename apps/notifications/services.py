"""Notification services for sending booking emails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import escape, strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


class EmailSender:
    """
    Sends HTML email through the configured Django mail backend

    Errors from the backend propagate so the calling task can retry.
    """

    def __init__(self, from_email: str | None = None):
        self.from_email = from_email or settings.DEFAULT_FROM_EMAIL

    def send(self, recipient_email: str, subject: str, html_message: str) -> None:
        send_mail(
            subject=subject,
            message=strip_tags(html_message),
            from_email=self.from_email,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
        logger.info(f"Email sent to {recipient_email}: {subject}")


def _customer_name(booking: "Booking") -> str:
    user = booking.user
    return escape(user.display_name or user.email)


def _bookings_url() -> str:
    return f"{settings.STOREFRONT_SITE_URL.rstrip('/')}/dashboard/bookings"


def _order_summary(booking: "Booking") -> str:
    currency = escape(booking.currency)
    transaction = escape(booking.transaction_id or "N/A")
    return f"""
        <h2>Order Summary:</h2>
        <ul>
            <li><strong>Product:</strong> {escape(booking.product_name)}</li>
            <li><strong>Rental Period:</strong> {booking.period}</li>
            <li><strong>Total Amount:</strong> {booking.total_amount} {currency}</li>
            <li><strong>Transaction ID:</strong> {transaction}</li>
        </ul>
        <p>You can view your order details here: <a href="{_bookings_url()}">My Bookings</a></p>
    """


def send_booking_received_email(booking: "Booking", sender: EmailSender | None = None) -> None:
    """Order received, payment is being verified."""
    sender = sender or EmailSender()
    subject = f"Your {settings.STOREFRONT_NAME} order is awaiting confirmation (Order #{booking.order_reference})"
    html_message = f"""
    <html>
    <body>
        <h1>Thank you for your order, {_customer_name(booking)}!</h1>
        <p>We've received your order and it is awaiting payment confirmation.
        We'll notify you again as soon as your order is confirmed.</p>
        {_order_summary(booking)}
        <p>Thanks for choosing {settings.STOREFRONT_NAME}!</p>
    </body>
    </html>
    """
    sender.send(booking.user.email, subject, html_message)


def send_booking_confirmed_email(booking: "Booking", sender: EmailSender | None = None) -> None:
    """Payment verified, booking confirmed."""
    sender = sender or EmailSender()
    subject = f"Your {settings.STOREFRONT_NAME} booking is confirmed (Order #{booking.order_reference})"
    html_message = f"""
    <html>
    <body>
        <h1>Good news, {_customer_name(booking)}!</h1>
        <p>Your payment has been verified and your booking is confirmed.</p>
        {_order_summary(booking)}
        <p>Thanks for choosing {settings.STOREFRONT_NAME}!</p>
    </body>
    </html>
    """
    sender.send(booking.user.email, subject, html_message)
