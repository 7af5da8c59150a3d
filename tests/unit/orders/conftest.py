from __future__ import annotations

from decimal import Decimal

import pytest

from modules.accounts.repositories import AddressDjangoRepository, UserDjangoRepository
from modules.cart.repositories import CartDjangoRepository
from modules.cart.validators import CartValidator
from modules.catalog.ledger import InventoryLedger
from modules.catalog.repositories import ProductDjangoRepository
from modules.orders.assembler import OrderAssembler
from modules.orders.numbering import OrderNumberGenerator
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.orders.state_machine import OrderStateMachine
from modules.quotes.negotiator import QuoteNegotiator
from modules.quotes.repositories import QuoteDjangoRepository


class RecordingBus:
    def __init__(self) -> None:
        self.events = []

    def subscribe(self, event_class, handler) -> None:
        pass

    def publish(self, event) -> None:
        self.events.append(event)


@pytest.fixture()
def bus():
    return RecordingBus()


@pytest.fixture()
def ledger():
    return InventoryLedger()


@pytest.fixture()
def negotiator():
    return QuoteNegotiator(
        quote_repository=QuoteDjangoRepository(),
        product_repository=ProductDjangoRepository(),
        user_repository=UserDjangoRepository(),
    )


@pytest.fixture()
def assembler(ledger, negotiator):
    order_repo = OrderDjangoRepository()
    cart_repo = CartDjangoRepository()
    return OrderAssembler(
        order_repository=order_repo,
        user_repository=UserDjangoRepository(),
        address_repository=AddressDjangoRepository(),
        cart_repository=cart_repo,
        cart_validator=CartValidator(cart_repo),
        ledger=ledger,
        number_generator=OrderNumberGenerator(order_repo, prefix="AC"),
        negotiator=negotiator,
        tax_rate=Decimal("0.10"),
        shipping_cost=Decimal("0.00"),
    )


@pytest.fixture()
def state_machine(ledger):
    return OrderStateMachine(OrderDjangoRepository(), UserDjangoRepository(), ledger)


@pytest.fixture()
def order_service(assembler, state_machine, bus):
    return OrderService(
        order_repository=OrderDjangoRepository(),
        cart_repository=CartDjangoRepository(),
        assembler=assembler,
        state_machine=state_machine,
        event_bus=bus,
    )
