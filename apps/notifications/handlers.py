"""Message bus handlers that hand booking events to the email tasks."""

from __future__ import annotations

import logging

from kombu.exceptions import OperationalError  # type: ignore

from apps.bookings.domain.events import BookingPaymentConfirmed, BookingPlaced
from shared.application.message_bus import MessageBus

from . import tasks

logger = logging.getLogger(__name__)


def _enqueue(task, booking_id: int) -> None:
    # Retries only start once the broker has accepted the task.
    try:
        task.delay(booking_id)
    except OperationalError:
        logger.error(
            f"Could not queue {task.name} for booking {booking_id}; the email must be resent manually",
            exc_info=True,
        )


def on_booking_placed(event: BookingPlaced) -> None:
    _enqueue(tasks.send_booking_received_email, event.booking_id)


def on_booking_payment_confirmed(event: BookingPaymentConfirmed) -> None:
    _enqueue(tasks.send_booking_confirmed_email, event.booking_id)


def register(bus: MessageBus) -> None:
    bus.register_event_handler(BookingPlaced, on_booking_placed)
    bus.register_event_handler(BookingPaymentConfirmed, on_booking_payment_confirmed)
