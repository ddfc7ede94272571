import django.utils.timezone
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PaymentEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_id", models.CharField(max_length=255, unique=True)),
                (
                    "event_type",
                    models.CharField(
                        choices=[
                            ("session_completed", "Session completed"),
                            ("session_expired", "Session expired"),
                            ("payment_succeeded", "Payment succeeded"),
                            ("payment_failed", "Payment failed"),
                            ("refund_issued", "Refund issued"),
                        ],
                        max_length=32,
                    ),
                ),
                (
                    "booking_ref",
                    models.CharField(
                        db_index=True,
                        help_text="Payment session reference the event points at.",
                        max_length=255,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("currency", models.CharField(blank=True, max_length=3)),
                ("payload", models.JSONField(blank=True, default=dict)),
                ("received_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("applied", models.BooleanField(default=False)),
                (
                    "outcome",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("applied", "Transition applied"),
                            ("noop", "Nothing to change"),
                            ("illegal", "Dropped as illegal transition"),
                            ("unknown_booking", "No booking for session"),
                        ],
                        max_length=20,
                    ),
                ),
                ("note", models.CharField(blank=True, max_length=255)),
                ("applied_at", models.DateTimeField(blank=True, null=True)),
                ("archived_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "verbose_name": "Payment event",
                "verbose_name_plural": "Payment events",
                "ordering": ["received_at"],
                "indexes": [
                    models.Index(fields=["booking_ref", "received_at"], name="payment_event_ref_idx"),
                    models.Index(fields=["applied", "applied_at"], name="payment_event_applied_idx"),
                ],
            },
        ),
    ]
