import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("prency_rentals")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Flip discount codes past their expiry to "expired" - every 15 minutes
    "expire-outdated-discounts": {
        "task": "discounts.expire_outdated_discounts",
        "schedule": crontab(minute="*/15"),
    },
}
