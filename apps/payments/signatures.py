"""HMAC-SHA256 signatures of webhook deliveries.

Header format: ``t=<unix timestamp>,v1=<hex digest>`` where the digest is
computed over ``"<timestamp>.<raw request body>"``.
"""

from __future__ import annotations

import hashlib
import hmac
import time

from .errors import SignatureInvalidError

SIGNATURE_HEADER = "X-Payment-Signature"
SCHEME = "v1"


def compute_signature(payload: bytes, secret: str, timestamp: int) -> str:
    signed = f"{timestamp}.".encode("utf-8") + payload
    return hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()


def sign_payload(payload: bytes, secret: str, timestamp: int | None = None) -> str:
    """Build a signature header value for ``payload``."""

    timestamp = int(time.time()) if timestamp is None else timestamp
    return f"t={timestamp},{SCHEME}={compute_signature(payload, secret, timestamp)}"


def _parse_header(header: str) -> tuple[int, list[str]]:
    timestamp = None
    signatures = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError as exc:
                raise SignatureInvalidError("Malformed signature timestamp") from exc
        elif key == SCHEME and value:
            signatures.append(value)
    if timestamp is None or not signatures:
        raise SignatureInvalidError("Malformed signature header")
    return timestamp, signatures


def verify_signature(
    payload: bytes,
    header: str | None,
    secret: str,
    *,
    tolerance: int,
    now: int | None = None,
) -> int:
    """Check ``header`` against ``payload``; return the signed timestamp.

    Raises SignatureInvalidError for a missing or malformed header, an
    unknown digest, or a timestamp outside ``tolerance`` seconds.
    """

    if not secret:
        raise SignatureInvalidError("Webhook secret is not configured")
    if not header:
        raise SignatureInvalidError("Missing signature header")

    timestamp, signatures = _parse_header(header)
    expected = compute_signature(payload, secret, timestamp)
    if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
        raise SignatureInvalidError("Signature mismatch")

    now = int(time.time()) if now is None else now
    if abs(now - timestamp) > tolerance:
        raise SignatureInvalidError("Signature timestamp outside tolerance")
    return timestamp
