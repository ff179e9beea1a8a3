"""
Unit of Work Pattern

Wraps a database transaction and makes sure domain events recorded inside
it reach the message bus only after the transaction has committed.
"""

from typing import List
import logging

from django.db import transaction

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork(bus) as uow:
            product = Dress.objects.select_for_update().get(pk=product_id)
            booking = Booking.objects.create(...)
            uow.record(BookingPlaced(booking_id=booking.pk, ...))
        # BookingPlaced is published after commit

    Nested units of work join the outer transaction; their events are
    published when the outermost transaction commits.
    """

    def __init__(self, bus: MessageBus | None = None):
        self._bus = bus
        self._events: List[DomainEvent] = []
        self._transaction = None

    def __enter__(self):
        """Start database transaction"""
        self._transaction = transaction.atomic()
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Complete or rollback transaction"""
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def record(self, event: DomainEvent):
        self._events.append(event)

    def commit(self):
        """
        Schedule collected events for publishing

        Events go through transaction.on_commit() so they are only sent
        once the database commit succeeds.
        """
        logger.debug(f"Committing transaction with {len(self._events)} events")

        events = self._events.copy()
        self._events.clear()

        if events and self._bus is not None:
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        """Rollback changes and discard events"""
        logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    def _publish_events(self, events: List[DomainEvent]):
        logger.info(f"Publishing {len(events)} domain events after commit")
        self._bus.publish_events(events)
