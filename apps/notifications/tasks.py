"""Celery tasks delivering booking emails.

Tasks are enqueued after the booking transaction commits and retried with
exponential backoff when the mail backend fails, so delivery is
at-least-once and never blocks or fails a booking.
"""

from __future__ import annotations

import logging
from smtplib import SMTPException

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from .services import send_booking_confirmed_email as _send_confirmed
from .services import send_booking_received_email as _send_received

logger = logging.getLogger(__name__)

RETRY_OPTIONS = {
    "autoretry_for": (SMTPException, OSError),
    "retry_backoff": True,
    "retry_backoff_max": 600,
    "retry_jitter": True,
    "max_retries": 5,
}


def _load_booking(booking_id: int) -> Booking | None:
    try:
        return Booking.objects.select_related("user").get(pk=booking_id)
    except Booking.DoesNotExist:
        logger.error(f"Booking {booking_id} not found for email notification")
        return None


@shared_task(bind=True, name="notifications.send_booking_received_email", **RETRY_OPTIONS)
def send_booking_received_email(self, booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    if booking is None:
        return False
    if self.request.retries:
        logger.warning(f"Retrying booking received email for {booking_id} (attempt {self.request.retries + 1})")
    _send_received(booking)
    return True


@shared_task(bind=True, name="notifications.send_booking_confirmed_email", **RETRY_OPTIONS)
def send_booking_confirmed_email(self, booking_id: int) -> bool:
    booking = _load_booking(booking_id)
    if booking is None:
        return False
    if self.request.retries:
        logger.warning(f"Retrying booking confirmed email for {booking_id} (attempt {self.request.retries + 1})")
    _send_confirmed(booking)
    return True
