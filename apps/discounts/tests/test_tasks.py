from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from apps.discounts.models import Discount
from apps.discounts.tasks import expire_outdated_discounts


@pytest.mark.django_db
def test_sweep_marks_only_past_expiry_codes():
    now = timezone.now()
    past = Discount.objects.create(code="PAST", value=Decimal("5"), expiry=now - timedelta(hours=1))
    future = Discount.objects.create(code="FUTURE", value=Decimal("5"), expiry=now + timedelta(hours=1))

    assert expire_outdated_discounts.delay().get() == 1

    past.refresh_from_db()
    future.refresh_from_db()
    assert past.status == Discount.Status.EXPIRED
    assert future.status == Discount.Status.ACTIVE


@pytest.mark.django_db
def test_sweep_is_idempotent():
    Discount.objects.create(code="PAST", value=Decimal("5"), expiry=timezone.now() - timedelta(hours=1))
    expire_outdated_discounts()
    assert expire_outdated_discounts() == 0
