"""Integration tests for the payment webhook endpoint."""

from __future__ import annotations

import json
import time
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal
from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.bookings.models import Booking
from apps.payments import tasks
from apps.payments.models import PaymentEvent
from apps.payments.signatures import SIGNATURE_HEADER, sign_payload
from apps.studios.models import Service, Studio

SECRET = "test-webhook-secret"


@override_settings(PAYMENT_WEBHOOK_SECRET=SECRET)
class PaymentWebhookTests(TestCase):
    def setUp(self) -> None:
        studio = Studio.objects.create(name="Studio A", timezone="UTC")
        service = Service.objects.create(
            studio=studio,
            name="Recording session",
            duration_minutes=60,
            price=Decimal("100.00"),
            requires_deposit=True,
            deposit_percentage=30,
        )
        start = datetime(2030, 1, 7, 10, tzinfo=dt_timezone.utc)
        self.booking = Booking.objects.create(
            studio=studio,
            service=service,
            client_name="Ada Client",
            client_email="ada@example.com",
            start_time=start,
            end_time=start + timedelta(hours=1),
            total_price=service.price,
            requires_deposit=True,
            deposit_percentage=30,
            payment_session_ref="cs_live_1",
        )
        self.url = reverse("payment-webhook")

    def _event(self, **overrides) -> dict:
        event = {
            "event_id": "evt_1",
            "event_type": "session_completed",
            "payment_session_ref": "cs_live_1",
            "amount": 3000,
            "currency": "USD",
            "timestamp": int(time.time()),
        }
        event.update(overrides)
        return event

    def _post(self, body: bytes, secret: str = SECRET, signed: bool = True):
        headers = {SIGNATURE_HEADER: sign_payload(body, secret)} if signed else {}
        return self.client.post(self.url, data=body, content_type="application/json", headers=headers)

    def test_deposit_confirms_booking_once(self) -> None:
        body = json.dumps(self._event()).encode()

        first = self._post(body)
        second = self._post(body)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(first.json(), {"status": "ok", "outcome": "applied", "duplicate": False})
        self.assertEqual(second.json(), {"status": "ok", "outcome": "applied", "duplicate": True})
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.Status.CONFIRMED)
        self.assertEqual(self.booking.payment_status, Booking.PaymentStatus.DEPOSIT_PAID)
        self.assertEqual(PaymentEvent.objects.count(), 1)

    def test_bad_signature_is_401_and_not_recorded(self) -> None:
        body = json.dumps(self._event()).encode()

        self.assertEqual(self._post(body, secret="wrong").status_code, 401)
        self.assertEqual(self._post(body, signed=False).status_code, 401)
        self.assertFalse(PaymentEvent.objects.exists())

    def test_invalid_json_is_400(self) -> None:
        self.assertEqual(self._post(b"{not json").status_code, 400)

    def test_malformed_event_is_400(self) -> None:
        response = self._post(json.dumps(self._event(amount="lots")).encode())

        self.assertEqual(response.status_code, 400)
        self.assertIn("amount", response.json()["errors"])

    def test_unsupported_event_is_acknowledged(self) -> None:
        response = self._post(json.dumps(self._event(event_type="customer.updated")).encode())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ignored"})
        self.assertFalse(PaymentEvent.objects.exists())

    def test_illegal_event_is_still_acknowledged(self) -> None:
        Booking.objects.filter(pk=self.booking.pk).update(
            status=Booking.Status.CANCELLED, payment_status=Booking.PaymentStatus.EXPIRED
        )

        response = self._post(json.dumps(self._event()).encode())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["outcome"], "illegal")

    def test_refund_before_payment_is_deferred(self) -> None:
        body = json.dumps(self._event(event_type="refund_issued")).encode()

        response = self._post(body)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["outcome"], "deferred")
        self.assertFalse(PaymentEvent.objects.get().applied)

    def test_unknown_session_is_acknowledged(self) -> None:
        response = self._post(json.dumps(self._event(payment_session_ref="cs_other")).encode())

        self.assertEqual(response.json()["outcome"], "unknown_booking")

    def test_database_outage_is_503(self) -> None:
        body = json.dumps(self._event()).encode()
        with patch(
            "apps.payments.ledger.PaymentEvent.objects.get_or_create",
            side_effect=OperationalError("database is locked"),
        ):
            response = self._post(body)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(self._post(body).json()["outcome"], "applied")

    def test_get_is_not_allowed(self) -> None:
        self.assertEqual(self.client.get(self.url).status_code, 405)


class ArchiveTaskTests(TestCase):
    def test_archives_only_old_applied_events(self) -> None:
        now = timezone.now()
        old = PaymentEvent.objects.create(
            event_id="evt_old", event_type="payment_failed", booking_ref="cs_1",
            applied=True, outcome="noop", applied_at=now - timedelta(days=120),
        )
        recent = PaymentEvent.objects.create(
            event_id="evt_recent", event_type="payment_failed", booking_ref="cs_1",
            applied=True, outcome="noop", applied_at=now - timedelta(days=1),
        )
        pending = PaymentEvent.objects.create(event_id="evt_pending", event_type="payment_failed", booking_ref="cs_1")

        self.assertEqual(tasks.archive_processed_events(), {"archived": 1})

        old.refresh_from_db()
        recent.refresh_from_db()
        pending.refresh_from_db()
        self.assertIsNotNone(old.archived_at)
        self.assertIsNone(recent.archived_at)
        self.assertIsNone(pending.archived_at)
