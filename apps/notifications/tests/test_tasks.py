from datetime import timedelta
from decimal import Decimal
from smtplib import SMTPException
from unittest import mock

import pytest
from celery.exceptions import Retry
from django.core import mail
from django.utils import timezone
from kombu.exceptions import OperationalError

from apps.bookings.domain.events import BookingPaymentConfirmed, BookingPlaced
from apps.bookings.models import Booking
from apps.notifications import handlers, tasks
from apps.users.models import AppUser
from shared.application.message_bus import MessageBus


@pytest.fixture
def booking(db):
    user = AppUser.objects.create_user(email="asha@example.com", display_name="Asha <3")
    start = timezone.localdate() + timedelta(days=2)
    return Booking.objects.create(
        user=user,
        order_reference="A1B2C3D4E5",
        product_type="dresses",
        product_id=1,
        product_name="Red Lehenga",
        rental_start=start,
        rental_end=start + timedelta(days=2),
        total_amount=Decimal("6500.00"),
        transaction_id="UPI12345",
    )


@pytest.mark.django_db
def test_received_email_contains_order_summary(booking):
    assert tasks.send_booking_received_email.delay(booking.pk).get() is True

    assert len(mail.outbox) == 1
    message = mail.outbox[0]
    assert message.to == ["asha@example.com"]
    assert "A1B2C3D4E5" in message.subject
    html = message.alternatives[0][0]
    assert "Red Lehenga" in html
    assert "6500.00" in html
    assert "UPI12345" in html
    assert "Asha &lt;3" in html


@pytest.mark.django_db
def test_confirmed_email(booking):
    tasks.send_booking_confirmed_email.delay(booking.pk)
    assert "confirmed" in mail.outbox[0].subject


@pytest.mark.django_db
def test_missing_booking_is_not_retried():
    assert tasks.send_booking_received_email.delay(424242).get() is False
    assert mail.outbox == []


@pytest.mark.django_db
def test_mail_failure_schedules_retry(booking):
    with mock.patch("apps.notifications.services.send_mail", side_effect=SMTPException("down")):
        with mock.patch.object(tasks.send_booking_received_email, "retry", side_effect=Retry()) as retry:
            with pytest.raises(Retry):
                tasks.send_booking_received_email(booking.pk)

    assert retry.called


def test_handlers_enqueue_tasks():
    bus = MessageBus()
    handlers.register(bus)

    with mock.patch.object(tasks.send_booking_received_email, "delay") as received, \
            mock.patch.object(tasks.send_booking_confirmed_email, "delay") as confirmed:
        bus.publish_events(
            [
                BookingPlaced(
                    booking_id=7,
                    product_type="dresses",
                    product_id=1,
                    user_id=1,
                    rental_start=timezone.localdate(),
                    rental_end=timezone.localdate(),
                ),
                BookingPaymentConfirmed(booking_id=7, old_payment_status="pending"),
            ]
        )

    received.assert_called_once_with(7)
    confirmed.assert_called_once_with(7)


def test_broker_outage_is_logged_with_booking_id():
    event = BookingPaymentConfirmed(booking_id=42, old_payment_status="pending")

    with mock.patch.object(
        tasks.send_booking_confirmed_email, "delay", side_effect=OperationalError("broker down")
    ), mock.patch.object(handlers, "logger") as logger:
        handlers.on_booking_payment_confirmed(event)

    logger.error.assert_called_once()
    message = logger.error.call_args.args[0]
    assert "booking 42" in message
    assert tasks.send_booking_confirmed_email.name in message
