import django.core.validators
import django.db.models.deletion
from decimal import Decimal

from django.db import migrations, models

import apps.studios.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Studio",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                ("phone", models.CharField(blank=True, max_length=32)),
                (
                    "timezone",
                    models.CharField(
                        default=apps.studios.models.default_timezone,
                        help_text="IANA timezone name used for opening hours.",
                        max_length=64,
                        validators=[apps.studios.models.validate_timezone],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Studio",
                "verbose_name_plural": "Studios",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("recording", "Recording"),
                            ("mixing", "Mixing"),
                            ("mastering", "Mastering"),
                            ("consultation", "Consultation"),
                            ("other", "Other"),
                        ],
                        default="recording",
                        max_length=20,
                    ),
                ),
                (
                    "duration_minutes",
                    models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("price", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=10)),
                ("currency", models.CharField(default="USD", max_length=3)),
                ("requires_deposit", models.BooleanField(default=False)),
                (
                    "deposit_percentage",
                    models.PositiveSmallIntegerField(
                        default=50,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "min_advance_hours",
                    models.PositiveIntegerField(
                        default=24, help_text="Bookings must start at least this many hours from now."
                    ),
                ),
                (
                    "max_advance_days",
                    models.PositiveIntegerField(
                        default=30, help_text="Bookings may start at most this many days from now."
                    ),
                ),
                ("active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "studio",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="services",
                        to="studios.studio",
                    ),
                ),
            ],
            options={
                "verbose_name": "Service",
                "verbose_name_plural": "Services",
                "ordering": ["studio", "name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("duration_minutes__gt", 0)),
                        name="service_positive_duration",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("requires_deposit", False),
                            models.Q(("deposit_percentage__gt", 0), ("deposit_percentage__lte", 100)),
                            _connector="OR",
                        ),
                        name="service_valid_deposit_percentage",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AvailabilityWindow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "weekday",
                    models.PositiveSmallIntegerField(
                        choices=[
                            (0, "Sunday"),
                            (1, "Monday"),
                            (2, "Tuesday"),
                            (3, "Wednesday"),
                            (4, "Thursday"),
                            (5, "Friday"),
                            (6, "Saturday"),
                        ]
                    ),
                ),
                ("open_time", models.TimeField()),
                ("close_time", models.TimeField()),
                ("is_available", models.BooleanField(default=True)),
                (
                    "studio",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="availability_windows",
                        to="studios.studio",
                    ),
                ),
            ],
            options={
                "verbose_name": "Availability window",
                "verbose_name_plural": "Availability windows",
                "ordering": ["studio", "weekday"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("studio", "weekday"), name="availability_one_window_per_weekday"
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("is_available", False),
                            ("close_time__gt", models.F("open_time")),
                            _connector="OR",
                        ),
                        name="availability_close_after_open",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="BlockedTime",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("reason", models.CharField(blank=True, max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "studio",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="blocked_times",
                        to="studios.studio",
                    ),
                ),
            ],
            options={
                "verbose_name": "Blocked time",
                "verbose_name_plural": "Blocked times",
                "ordering": ["start_time"],
                "indexes": [
                    models.Index(fields=["studio", "start_time", "end_time"], name="blocked_time_span_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_time__gt", models.F("start_time"))),
                        name="blocked_time_valid_interval",
                    ),
                ],
            },
        ),
    ]
