"""Serializers for payment webhooks."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore


class WebhookEventSerializer(serializers.Serializer):
    """Validates the envelope of a gateway webhook delivery."""

    event_id = serializers.CharField(max_length=255)
    event_type = serializers.CharField(max_length=64)
    payment_session_ref = serializers.CharField(max_length=255)
    amount = serializers.IntegerField(min_value=0, required=False, default=0)
    currency = serializers.RegexField(r"^[A-Za-z]{3}$", required=False, allow_blank=True, default="")
    timestamp = serializers.IntegerField(min_value=0)
    failure_message = serializers.CharField(required=False, allow_blank=True, default="")

