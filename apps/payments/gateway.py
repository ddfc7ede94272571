"""
Payment gateway port

The booking service opens a checkout session for every hold through a
PaymentGateway. The HTTP implementation talks to the provider's REST API;
without an API key (or in DEBUG) it emulates the provider locally.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

import requests
from django.conf import settings
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from django.utils.module_loading import import_string

from apps.bookings.models import Booking, hold_ttl
from shared.domain.value_objects import Money

from .errors import PaymentGatewayError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentSession:
    reference: str
    checkout_url: str
    expires_at: datetime | None = None


class PaymentGateway(ABC):
    """Port to the external payment provider."""

    @abstractmethod
    def create_session(self, booking: Booking, amount_due: Money) -> PaymentSession:
        """Open a checkout session for ``amount_due``. Raises PaymentGatewayError."""


class HttpPaymentGateway(PaymentGateway):
    """REST client for the payment provider's checkout sessions."""

    def __init__(self, api_key: str | None = None, base_url: str | None = None, timeout: float | None = None):
        self.api_key = settings.PAYMENT_GATEWAY_API_KEY if api_key is None else api_key
        self.base_url = (base_url or settings.PAYMENT_GATEWAY_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS

    @property
    def sandbox(self) -> bool:
        return settings.DEBUG or not self.api_key

    def create_session(self, booking: Booking, amount_due: Money) -> PaymentSession:
        expires_at = (booking.created_at or timezone.now()) + hold_ttl()
        logger.info(f"Opening payment session for booking {booking.pk}, amount {amount_due}")

        if self.sandbox:
            logger.warning("Payment gateway emulation in use (DEBUG or no API key)")
            reference = f"cs_sandbox_{uuid.uuid4().hex[:24]}"
            return PaymentSession(
                reference=reference,
                checkout_url=f"{settings.SITE_URL}/payments/sandbox/{reference}",
                expires_at=expires_at,
            )

        payload = {
            "amount": amount_due.to_minor_units(),
            "currency": amount_due.currency.lower(),
            "client_reference_id": str(booking.pk),
            "customer_email": booking.client_email,
            "description": f"{booking.service.name} on {booking.start_time:%Y-%m-%d %H:%M}",
            "expires_at": int(expires_at.timestamp()),
            "success_url": f"{settings.SITE_URL}/bookings/{booking.pk}/success",
            "cancel_url": f"{settings.SITE_URL}/bookings/{booking.pk}/cancelled",
            "metadata": {
                "booking_id": str(booking.pk),
                "studio_id": str(booking.studio_id),
                "payment_type": "deposit" if booking.requires_deposit else "full",
            },
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Idempotency-Key": f"booking-{booking.pk}-v{booking.version}",
        }

        try:
            response = requests.post(
                f"{self.base_url}/checkout/sessions",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
            session = PaymentSession(
                reference=result["id"],
                checkout_url=result["url"],
                expires_at=parse_datetime(str(result["expires_at"])) if result.get("expires_at") else expires_at,
            )
        except requests.RequestException as exc:
            logger.error(f"Payment gateway request failed for booking {booking.pk}: {exc}")
            raise PaymentGatewayError() from exc
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(f"Unexpected payment gateway response for booking {booking.pk}: {exc}")
            raise PaymentGatewayError() from exc

        logger.info(f"Payment session {session.reference} opened for booking {booking.pk}")
        return session


def get_payment_gateway() -> PaymentGateway:
    return import_string(settings.PAYMENT_GATEWAY_CLASS)()
