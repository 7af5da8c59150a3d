"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).  Business
logic lives in the Service Layer, which receives Pydantic DTOs from
``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus, PaymentMethod
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderFromCartSerializer(serializers.Serializer):
    address_id = serializers.UUIDField()
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices, default=PaymentMethod.CREDIT_CARD
    )
    notes = serializers.CharField(
        required=False, default="", allow_blank=True, max_length=1000
    )


class CreateOrderFromQuoteSerializer(CreateOrderFromCartSerializer):
    quote_request_id = serializers.UUIDField()


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)
    note = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=500
    )

    def validate_status(self, value: str) -> str:
        value = value.strip().upper()
        if value not in OrderStatus.values:
            raise serializers.ValidationError(f"Unknown status '{value}'.")
        return value


class CancelOrderSerializer(serializers.Serializer):
    note = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=500
    )


class ProcessPaymentSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=255)


class UpdateShippingInfoSerializer(serializers.Serializer):
    tracking_number = serializers.CharField(
        required=False, allow_blank=True, max_length=100
    )
    tracking_url = serializers.URLField(
        required=False, allow_blank=True, max_length=500
    )
    estimated_delivery = serializers.DateField(required=False, allow_null=True)

    def validate(self, attrs):
        if not any(attrs.get(field) for field in ("tracking_number", "tracking_url")) and (
            attrs.get("estimated_delivery") is None
        ):
            raise serializers.ValidationError(
                "Provide at least one shipping field to update."
            )
        return attrs


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Read serializer for order items with the product snapshot."""

    product_name = serializers.SerializerMethodField()
    line_total = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "seller_id",
            "product_name",
            "quantity",
            "price",
            "line_total",
            "product_data",
        ]
        read_only_fields = fields

    def get_product_name(self, obj: OrderItem) -> str:
        return obj.product_data.get("name", "")


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "status",
            "note",
            "created_by_id",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "buyer_id",
            "status",
            "payment_method",
            "payment_status",
            "payment_intent_id",
            "subtotal",
            "tax",
            "shipping_cost",
            "discount",
            "total",
            "shipping_address",
            "quote_request_id",
            "notes",
            "tracking_number",
            "tracking_url",
            "estimated_delivery",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "buyer_id",
            "status",
            "payment_status",
            "total",
            "created_at",
        ]
        read_only_fields = fields
