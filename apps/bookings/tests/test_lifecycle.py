import pytest

from apps.bookings.domain import lifecycle
from apps.bookings.domain.lifecycle import (
    TransitionGuardFailed,
    TransitionRequiresConfirmation,
    UnknownStatus,
    apply_payment,
    apply_status,
)


@pytest.mark.parametrize(
    "current,target",
    [
        (lifecycle.CONFIRMED, lifecycle.SHIPPED),
        (lifecycle.SHIPPED, lifecycle.DELIVERED),
        (lifecycle.DELIVERED, lifecycle.RETURNED),
    ],
)
def test_forward_single_step_is_allowed(current, target):
    change = apply_status(current, lifecycle.PAYMENT_PAID, target)
    assert change.status == target
    assert change.status_changed


def test_skipping_a_step_needs_confirmation():
    with pytest.raises(TransitionRequiresConfirmation):
        apply_status(lifecycle.CONFIRMED, lifecycle.PAYMENT_PAID, lifecycle.DELIVERED)

    change = apply_status(lifecycle.CONFIRMED, lifecycle.PAYMENT_PAID, lifecycle.DELIVERED, confirm=True)
    assert change.status == lifecycle.DELIVERED


def test_going_back_needs_confirmation():
    with pytest.raises(TransitionRequiresConfirmation):
        apply_status(lifecycle.SHIPPED, lifecycle.PAYMENT_PAID, lifecycle.CONFIRMED)


def test_fulfilment_requires_payment_even_with_confirmation():
    with pytest.raises(TransitionGuardFailed):
        apply_status(lifecycle.PENDING_PAYMENT, lifecycle.PAYMENT_PENDING, lifecycle.CONFIRMED, confirm=True)


def test_same_status_is_a_no_op():
    change = apply_status(lifecycle.SHIPPED, lifecycle.PAYMENT_PAID, lifecycle.SHIPPED)
    assert not change.changed


def test_unknown_status_is_rejected():
    with pytest.raises(UnknownStatus):
        apply_status(lifecycle.CONFIRMED, lifecycle.PAYMENT_PAID, "lost")


def test_paying_a_pending_booking_confirms_it():
    change = apply_payment(lifecycle.PENDING_PAYMENT, lifecycle.PAYMENT_PENDING, lifecycle.PAYMENT_PAID)
    assert change.status == lifecycle.CONFIRMED
    assert change.payment_status == lifecycle.PAYMENT_PAID
    assert change.status_changed
    assert change.payment_confirmed


def test_failed_payment_can_be_retried():
    change = apply_payment(lifecycle.PENDING_PAYMENT, lifecycle.PAYMENT_FAILED, lifecycle.PAYMENT_PAID)
    assert change.status == lifecycle.CONFIRMED


def test_leaving_paid_needs_confirmation():
    with pytest.raises(TransitionRequiresConfirmation):
        apply_payment(lifecycle.PENDING_PAYMENT, lifecycle.PAYMENT_PAID, lifecycle.PAYMENT_FAILED)


def test_shipped_booking_must_stay_paid():
    with pytest.raises(TransitionGuardFailed):
        apply_payment(lifecycle.SHIPPED, lifecycle.PAYMENT_PAID, lifecycle.PAYMENT_PENDING, confirm=True)


def test_same_payment_status_is_a_no_op():
    change = apply_payment(lifecycle.SHIPPED, lifecycle.PAYMENT_PAID, lifecycle.PAYMENT_PAID)
    assert not change.changed
    assert change.status == lifecycle.SHIPPED
