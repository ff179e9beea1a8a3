"""Bookings application config.

Builds the message bus once at startup and registers the event handlers.
Services receive the bus from here rather than from a module global.
"""

from __future__ import annotations

import logging

from django.apps import AppConfig  # type: ignore

logger = logging.getLogger(__name__)


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"

    message_bus = None

    def ready(self) -> None:
        from apps.notifications import handlers as notification_handlers
        from shared.application.message_bus import MessageBus

        from .domain.events import BookingStatusChanged

        bus = MessageBus()
        notification_handlers.register(bus)
        bus.register_event_handler(BookingStatusChanged, log_status_change)
        self.message_bus = bus
        logger.debug("Booking message bus ready")


def log_status_change(event) -> None:  # type: ignore
    logger.info(f"Booking {event.booking_id} moved from '{event.old_status}' to '{event.new_status}'")
