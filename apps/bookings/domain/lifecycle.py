"""
Booking lifecycle

    pending payment -> confirmed -> shipped -> delivered -> returned

Admins move bookings along by hand. Single forward steps are always fine;
anything else (skipping a step, going back) must be confirmed explicitly.
Fulfilment states require the booking to be paid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

PENDING_PAYMENT = "pending payment"
CONFIRMED = "confirmed"
SHIPPED = "shipped"
DELIVERED = "delivered"
RETURNED = "returned"

STATUS_ORDER: Tuple[str, ...] = (PENDING_PAYMENT, CONFIRMED, SHIPPED, DELIVERED, RETURNED)
ACTIVE_STATUSES: Tuple[str, ...] = (CONFIRMED, SHIPPED, DELIVERED)

PAYMENT_PENDING = "pending"
PAYMENT_PAID = "paid"
PAYMENT_FAILED = "failed"

PAYMENT_STATUSES: Tuple[str, ...] = (PAYMENT_PENDING, PAYMENT_PAID, PAYMENT_FAILED)

STATUS_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    current: frozenset({STATUS_ORDER[index + 1]}) if index + 1 < len(STATUS_ORDER) else frozenset()
    for index, current in enumerate(STATUS_ORDER)
}

PAYMENT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PAYMENT_PENDING: frozenset({PAYMENT_PAID, PAYMENT_FAILED}),
    PAYMENT_FAILED: frozenset({PAYMENT_PENDING, PAYMENT_PAID}),
    PAYMENT_PAID: frozenset(),
}


class InvalidTransition(Exception):
    """Requested status change is not allowed."""

    def __init__(self, current: str, target: str, message: str | None = None):
        self.current = current
        self.target = target
        super().__init__(message or f"Cannot move booking from '{current}' to '{target}'.")


class UnknownStatus(InvalidTransition):
    def __init__(self, current: str, target: str):
        super().__init__(current, target, f"Unknown status '{target}'.")


class TransitionRequiresConfirmation(InvalidTransition):
    """Change is allowed only when the admin confirms it."""

    def __init__(self, current: str, target: str):
        super().__init__(
            current,
            target,
            f"Moving booking from '{current}' to '{target}' is not a single forward step; confirm to proceed.",
        )


class TransitionGuardFailed(InvalidTransition):
    """Change is blocked by a precondition that confirmation cannot override."""


@dataclass(frozen=True)
class Change:
    """Outcome of applying a change: the resulting pair and whether anything moved."""

    status: str
    payment_status: str
    status_changed: bool
    payment_changed: bool

    @property
    def changed(self) -> bool:
        return self.status_changed or self.payment_changed

    @property
    def payment_confirmed(self) -> bool:
        return self.payment_changed and self.payment_status == PAYMENT_PAID


def requires_payment(status: str) -> bool:
    return STATUS_ORDER.index(status) >= STATUS_ORDER.index(CONFIRMED)


def check_status_transition(current: str, target: str, payment_status: str, confirm: bool = False) -> bool:
    """
    Validate a status change, returning False for a same-state no-op

    Raises TransitionGuardFailed when a fulfilment state is requested on an
    unpaid booking and TransitionRequiresConfirmation for skips or reversals
    without ``confirm``.
    """
    if target not in STATUS_ORDER:
        raise UnknownStatus(current, target)
    if target == current:
        return False
    if requires_payment(target) and payment_status != PAYMENT_PAID:
        raise TransitionGuardFailed(
            current, target, f"Booking must be paid before it can be marked '{target}'."
        )
    if target not in STATUS_TRANSITIONS.get(current, frozenset()) and not confirm:
        raise TransitionRequiresConfirmation(current, target)
    return True


def check_payment_transition(current: str, target: str, status: str, confirm: bool = False) -> bool:
    if target not in PAYMENT_STATUSES:
        raise UnknownStatus(current, target)
    if target == current:
        return False
    if target != PAYMENT_PAID and requires_payment(status):
        raise TransitionGuardFailed(
            current, target, f"A booking that is '{status}' must stay paid; move it back first."
        )
    if target not in PAYMENT_TRANSITIONS.get(current, frozenset()) and not confirm:
        raise TransitionRequiresConfirmation(current, target)
    return True


def apply_status(status: str, payment_status: str, target: str, confirm: bool = False) -> Change:
    changed = check_status_transition(status, target, payment_status, confirm)
    return Change(
        status=target if changed else status,
        payment_status=payment_status,
        status_changed=changed,
        payment_changed=False,
    )


def apply_payment(status: str, payment_status: str, target: str, confirm: bool = False) -> Change:
    """
    Change the payment status

    Marking a ``pending payment`` booking as paid also confirms it. Bookings
    already further along keep their status.
    """
    changed = check_payment_transition(payment_status, target, status, confirm)
    new_status = status
    if changed and target == PAYMENT_PAID and status == PENDING_PAYMENT:
        new_status = CONFIRMED
    return Change(
        status=new_status,
        payment_status=target if changed else payment_status,
        status_changed=new_status != status,
        payment_changed=changed,
    )
