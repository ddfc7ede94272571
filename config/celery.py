import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("studio_booking")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Cancel unpaid holds past their TTL - every minute
    "expire-stale-holds": {
        "task": "bookings.expire_stale_holds",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Confirmed bookings whose session has started - every 5 minutes
    "start-due-bookings": {
        "task": "bookings.start_due_bookings",
        "schedule": crontab(minute="*/5"),
        "options": {"expires": 240},
    },
    # Sessions that have ended - every 5 minutes
    "complete-finished-bookings": {
        "task": "bookings.complete_finished_bookings",
        "schedule": crontab(minute="*/5"),
        "options": {"expires": 240},
    },
    # Archive applied payment events past retention - daily at 03:30
    "archive-processed-payment-events": {
        "task": "payments.archive_processed_events",
        "schedule": crontab(hour=3, minute=30),
    },
}
