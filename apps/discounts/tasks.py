"""Celery tasks for discounts."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import expire_outdated_discounts as _expire_outdated_discounts

logger = logging.getLogger(__name__)


@shared_task(name="discounts.expire_outdated_discounts")
def expire_outdated_discounts() -> int:
    """Periodic sweep flipping past-expiry codes to ``expired``."""
    updated = _expire_outdated_discounts()
    logger.debug(f"Discount expiry sweep finished, {updated} updated")
    return updated
