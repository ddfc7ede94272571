from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("payments", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="paymentevent",
            name="outcome",
            field=models.CharField(
                blank=True,
                choices=[
                    ("applied", "Transition applied"),
                    ("noop", "Nothing to change"),
                    ("illegal", "Dropped as illegal transition"),
                    ("unknown_booking", "No booking for session"),
                    ("deferred", "Waiting for the payment it refunds"),
                ],
                max_length=20,
            ),
        ),
    ]
