"""Payments app package.

This app receives payment gateway webhooks, records every delivery in an
append-only ledger and reconciles the events against booking state. It
also holds the payment gateway port used to open checkout sessions.
"""
