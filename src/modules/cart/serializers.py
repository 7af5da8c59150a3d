"""Cart DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.cart.models import CartItem


class AddToCartSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=0)


class CartItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    unit_price = serializers.DecimalField(
        source="product.effective_price",
        max_digits=10,
        decimal_places=2,
        read_only=True,
    )
    available = serializers.IntegerField(source="product.quantity", read_only=True)

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "unit_price",
            "quantity",
            "available",
            "created_at",
        ]
        read_only_fields = fields


class CartSummarySerializer(serializers.Serializer):
    items = CartItemSerializer(many=True, read_only=True)
    total_quantity = serializers.IntegerField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
