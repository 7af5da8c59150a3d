"""Order domain constants.

Status and payment enumerations, the transition adjacency table and the
per-role permission table consulted by ``OrderStateMachine``.
"""

from django.db import models

from modules.accounts.models import UserRole


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PAID = "PAID", "Paid"
    PROCESSING = "PROCESSING", "Processing"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"
    REFUNDED = "REFUNDED", "Refunded"


class PaymentStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"
    REFUNDED = "REFUNDED", "Refunded"


class PaymentMethod(models.TextChoices):
    CREDIT_CARD = "CREDIT_CARD", "Credit card"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank transfer"
    PAYPAL = "PAYPAL", "PayPal"
    CASH_ON_DELIVERY = "CASH_ON_DELIVERY", "Cash on delivery"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.SHIPPED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.SHIPPED: {
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: set(),
    OrderStatus.REFUNDED: set(),
}

# ROLE_TRANSITIONS[role][from_status] -> statuses that role may move to.
# Only consulted after VALID_TRANSITIONS has accepted the move.
ROLE_TRANSITIONS: dict[str, dict[str, set[str]]] = {
    UserRole.ADMIN: VALID_TRANSITIONS,
    UserRole.ARTISAN: {
        OrderStatus.PAID: {OrderStatus.PROCESSING},
        OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
        OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    },
    UserRole.CUSTOMER: {
        OrderStatus.PENDING: {OrderStatus.CANCELLED},
        OrderStatus.PAID: {OrderStatus.CANCELLED},
        OrderStatus.PROCESSING: {OrderStatus.CANCELLED},
        OrderStatus.SHIPPED: {OrderStatus.CANCELLED},
    },
}

# Shipping details can only be edited while the parcel is being prepared
# or is on its way.
SHIPPING_EDITABLE_STATES: set[str] = {OrderStatus.PROCESSING, OrderStatus.SHIPPED}

ORDER_NUMBER_MAX_RETRIES = 5
ORDER_NUMBER_SEQUENCE_WIDTH = 4
