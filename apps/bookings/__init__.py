"""Bookings app package.

This app encapsulates the booking engine: conflict detection against
opening hours and existing bookings, atomic allocation of holds, the
booking state machine with optimistic versioning, and the periodic tasks
that expire unpaid holds and advance bookings through their session.
Overlapping allocations are rejected inside a single transaction and, on
PostgreSQL, by an exclusion constraint.
"""
