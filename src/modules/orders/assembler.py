"""Builds orders from a validated cart or an accepted quote.

Both paths share the same tail: draw an order number, price the lines,
persist the order with its items and an "Order created" history row, then
take the stock.  Everything runs inside the caller's transaction, so a
failed stock decrement leaves no order behind.

Money rules:
- unit price is the product's effective price (discount if set) for cart
  orders, and the quote's ``final_price`` for quote orders;
- ``subtotal = sum(price * quantity)``;
- ``tax = ORDER_TAX_RATE * subtotal`` rounded half-up to cents;
- ``total = subtotal + tax + shipping_cost - discount``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.conf import settings

from modules.accounts.exceptions import AddressNotFound, UserNotFound
from modules.cart.exceptions import CartValidationFailed
from modules.orders.constants import OrderStatus, PaymentStatus

if TYPE_CHECKING:
    from modules.accounts.models import Address, User
    from modules.accounts.repositories.interfaces import (
        IAddressRepository,
        IUserRepository,
    )
    from modules.cart.repositories.interfaces import ICartRepository
    from modules.cart.validators import CartValidator
    from modules.catalog.ledger import InventoryLedger
    from modules.orders.dtos import CreateOrderFromCartDTO, CreateOrderFromQuoteDTO
    from modules.orders.models import Order
    from modules.orders.numbering import OrderNumberGenerator
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.quotes.negotiator import QuoteNegotiator

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")
CREATED_NOTE = "Order created"


class OrderAssembler:
    def __init__(
        self,
        order_repository: IOrderRepository,
        user_repository: IUserRepository,
        address_repository: IAddressRepository,
        cart_repository: ICartRepository,
        cart_validator: CartValidator,
        ledger: InventoryLedger,
        number_generator: OrderNumberGenerator,
        negotiator: QuoteNegotiator,
        tax_rate: Optional[Decimal] = None,
        shipping_cost: Optional[Decimal] = None,
    ) -> None:
        self._order_repo = order_repository
        self._user_repo = user_repository
        self._address_repo = address_repository
        self._cart_repo = cart_repository
        self._validator = cart_validator
        self._ledger = ledger
        self._numbers = number_generator
        self._negotiator = negotiator
        self._tax_rate = Decimal(
            tax_rate if tax_rate is not None else settings.ORDER_TAX_RATE
        )
        self._shipping_cost = Decimal(
            shipping_cost if shipping_cost is not None else settings.ORDER_SHIPPING_COST
        )

    # ------------------------------------------------------------------
    # Origins
    # ------------------------------------------------------------------

    def from_cart(self, user_id: UUID, dto: CreateOrderFromCartDTO) -> Order:
        """Turn the user's cart into a PENDING order and take the stock.

        The cart itself is left untouched; clearing it is the service's
        job once the transaction has committed.
        """
        buyer = self._load_buyer(user_id)
        address = self._load_address(dto.address_id, buyer)

        result = self._validator.validate(buyer.id)
        if not result.valid:
            raise CartValidationFailed(
                result.reason or "Cart is not valid for checkout.",
                details=[item.model_dump(mode="json") for item in result.invalid_items],
            )

        lines = [
            {
                "product_id": cart_item.product.id,
                "seller_id": cart_item.product.seller_id,
                "quantity": cart_item.quantity,
                "price": cart_item.product.effective_price,
                "product_data": cart_item.product.snapshot(),
            }
            for cart_item in self._cart_repo.list_for_user(buyer.id)
        ]
        order = self._persist(buyer, address, lines, dto.payment_method, dto.notes)
        logger.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            origin="cart",
            item_count=len(lines),
        )
        return order

    def from_quote(self, user_id: UUID, dto: CreateOrderFromQuoteDTO) -> Order:
        """Turn an ACCEPTED quote into a single-item order and complete the quote."""
        buyer = self._load_buyer(user_id)
        quote = self._negotiator.load_accepted_for_order(dto.quote_request_id, buyer.id)
        address = self._load_address(dto.address_id, buyer)

        product = quote.product
        product_data = product.snapshot()
        product_data["custom_specifications"] = quote.specifications
        lines = [
            {
                "product_id": product.id,
                "seller_id": quote.artisan_id,
                "quantity": 1,
                "price": quote.final_price,
                "product_data": product_data,
            }
        ]
        order = self._persist(
            buyer,
            address,
            lines,
            dto.payment_method,
            dto.notes,
            quote_request_id=quote.id,
        )
        self._negotiator.complete_via_order(quote)
        logger.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            origin="quote",
            quote_id=str(quote.id),
        )
        return order

    # ------------------------------------------------------------------
    # Pricing
    # ------------------------------------------------------------------

    def price(self, lines: List[Dict[str, Any]]) -> Dict[str, Decimal]:
        subtotal = sum(
            (Decimal(line["price"]) * line["quantity"] for line in lines),
            Decimal("0.00"),
        ).quantize(CENT)
        tax = (subtotal * self._tax_rate).quantize(CENT, rounding=ROUND_HALF_UP)
        shipping_cost = self._shipping_cost.quantize(CENT)
        discount = Decimal("0.00")
        return {
            "subtotal": subtotal,
            "tax": tax,
            "shipping_cost": shipping_cost,
            "discount": discount,
            "total": subtotal + tax + shipping_cost - discount,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _persist(
        self,
        buyer: User,
        address: Address,
        lines: List[Dict[str, Any]],
        payment_method: str,
        notes: Optional[str],
        quote_request_id: Optional[UUID] = None,
    ) -> Order:
        order = self._order_repo.create(
            {
                "order_number": self._numbers.next_number(),
                "buyer_id": buyer.id,
                "address_id": address.id,
                "shipping_address": address.as_snapshot(),
                "status": OrderStatus.PENDING,
                "payment_method": payment_method,
                "payment_status": PaymentStatus.PENDING,
                "quote_request_id": quote_request_id,
                "notes": notes or "",
                **self.price(lines),
            },
            lines,
        )
        self._order_repo.add_history(
            order_id=order.id,
            status=OrderStatus.PENDING,
            note=CREATED_NOTE,
            created_by_id=buyer.id,
        )
        self._ledger.decrement_many(
            (line["product_id"], line["quantity"]) for line in lines
        )
        return order

    def _load_buyer(self, user_id: UUID) -> User:
        buyer = self._user_repo.get_by_id(str(user_id))
        if not buyer:
            raise UserNotFound(f"User {user_id} not found.")
        return buyer

    def _load_address(self, address_id: UUID, buyer: User) -> Address:
        address = self._address_repo.get_for_user(str(address_id), str(buyer.id))
        if not address:
            raise AddressNotFound(f"Address {address_id} not found.")
        return address
