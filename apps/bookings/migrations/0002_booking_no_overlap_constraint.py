"""Exclusion constraint keeping occupying bookings of a studio disjoint.

PostgreSQL only. Other backends rely on the allocator's studio lock.
"""

from django.db import migrations

CREATE_CONSTRAINT = [
    "CREATE EXTENSION IF NOT EXISTS btree_gist",
    """
    ALTER TABLE bookings_booking
        ADD CONSTRAINT booking_no_overlap
        EXCLUDE USING gist (
            studio_id WITH =,
            tstzrange(start_time, end_time, '[)') WITH &&
        )
        WHERE (status NOT IN ('cancelled', 'no_show'))
    """,
]

DROP_CONSTRAINT = ["ALTER TABLE bookings_booking DROP CONSTRAINT IF EXISTS booking_no_overlap"]


def add_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    for statement in CREATE_CONSTRAINT:
        schema_editor.execute(statement)


def drop_exclusion_constraint(apps, schema_editor):
    if schema_editor.connection.vendor != "postgresql":
        return
    for statement in DROP_CONSTRAINT:
        schema_editor.execute(statement)


class Migration(migrations.Migration):

    dependencies = [
        ("bookings", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(add_exclusion_constraint, drop_exclusion_constraint),
    ]
