"""Quote DRF serializers for API input/output."""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.quotes.constants import (
    MAX_EXPIRY_DAYS,
    MAX_MESSAGE_LENGTH,
    MAX_SPECIFICATIONS_LENGTH,
    QuoteAction,
)
from modules.quotes.models import QuoteMessage, QuoteRequest

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateQuoteRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    requested_price = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
        required=False,
        allow_null=True,
    )
    specifications = serializers.CharField(
        max_length=MAX_SPECIFICATIONS_LENGTH,
        required=False,
        allow_blank=True,
        allow_null=True,
    )
    expires_in_days = serializers.IntegerField(
        min_value=1, max_value=MAX_EXPIRY_DAYS, required=False, allow_null=True
    )


class RespondToQuoteSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=QuoteAction.choices)
    counter_offer = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=Decimal("0.01"),
        required=False,
        allow_null=True,
    )
    message = serializers.CharField(
        max_length=MAX_MESSAGE_LENGTH,
        required=False,
        allow_blank=True,
        allow_null=True,
    )


class AddQuoteMessageSerializer(serializers.Serializer):
    message = serializers.CharField(max_length=MAX_MESSAGE_LENGTH)


class CancelQuoteSerializer(serializers.Serializer):
    reason = serializers.CharField(
        max_length=MAX_MESSAGE_LENGTH,
        required=False,
        allow_blank=True,
        allow_null=True,
    )


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class QuoteMessageSerializer(serializers.ModelSerializer):
    sender_username = serializers.CharField(source="sender.username", read_only=True)

    class Meta:
        model = QuoteMessage
        fields = ["id", "sender_id", "sender_username", "message", "created_at"]
        read_only_fields = fields


class QuoteRequestSerializer(serializers.ModelSerializer):
    """Read serializer with product summary and the message thread."""

    product_name = serializers.CharField(source="product.name", read_only=True)
    messages = QuoteMessageSerializer(many=True, read_only=True)

    class Meta:
        model = QuoteRequest
        fields = [
            "id",
            "product_id",
            "product_name",
            "customer_id",
            "artisan_id",
            "requested_price",
            "specifications",
            "status",
            "counter_offer",
            "last_offer_by",
            "final_price",
            "expires_at",
            "messages",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class QuoteRequestListSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = QuoteRequest
        fields = [
            "id",
            "product_id",
            "product_name",
            "customer_id",
            "artisan_id",
            "status",
            "requested_price",
            "counter_offer",
            "final_price",
            "expires_at",
            "created_at",
        ]
        read_only_fields = fields
