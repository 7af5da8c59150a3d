"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.  Domain errors
are rendered by ``domain_error_response``; the view never swallows
generic exceptions.
"""

from __future__ import annotations

from uuid import UUID

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.repositories import (
    AddressDjangoRepository,
    UserDjangoRepository,
)
from modules.cart.repositories import CartDjangoRepository
from modules.cart.validators import CartValidator
from modules.catalog.ledger import InventoryLedger
from modules.catalog.repositories import ProductDjangoRepository
from modules.core.exceptions import DomainError, Forbidden
from modules.core.responses import domain_error_response
from modules.orders.assembler import OrderAssembler
from modules.orders.dtos import (
    CreateOrderFromCartDTO,
    CreateOrderFromQuoteDTO,
    UpdateOrderStatusDTO,
    UpdateShippingInfoDTO,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.numbering import OrderNumberGenerator
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.serializers import (
    CancelOrderSerializer,
    CreateOrderFromCartSerializer,
    CreateOrderFromQuoteSerializer,
    OrderListSerializer,
    OrderSerializer,
    ProcessPaymentSerializer,
    StatusHistorySerializer,
    UpdateOrderStatusSerializer,
    UpdateShippingInfoSerializer,
)
from modules.orders.services import OrderService
from modules.orders.state_machine import OrderStateMachine
from modules.quotes.negotiator import QuoteNegotiator
from modules.quotes.repositories import QuoteDjangoRepository
from shared.infrastructure.bus import event_bus


def build_order_service() -> OrderService:
    order_repo = OrderDjangoRepository()
    user_repo = UserDjangoRepository()
    product_repo = ProductDjangoRepository()
    cart_repo = CartDjangoRepository()
    ledger = InventoryLedger()
    assembler = OrderAssembler(
        order_repository=order_repo,
        user_repository=user_repo,
        address_repository=AddressDjangoRepository(),
        cart_repository=cart_repo,
        cart_validator=CartValidator(cart_repo),
        ledger=ledger,
        number_generator=OrderNumberGenerator(order_repo),
        negotiator=QuoteNegotiator(
            quote_repository=QuoteDjangoRepository(),
            product_repository=product_repo,
            user_repository=user_repo,
        ),
    )
    return OrderService(
        order_repository=order_repo,
        cart_repository=cart_repo,
        assembler=assembler,
        state_machine=OrderStateMachine(order_repo, user_repo, ledger),
        event_bus=event_bus,
    )


def _invalid_id() -> Response:
    return Response(
        {"detail": "Invalid order ID format."},
        status=status.HTTP_400_BAD_REQUEST,
    )


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Does **not** extend ``ModelViewSet``; all writes go through the
    service layer.  ``GET /orders/`` lists the caller's purchases, or the
    orders containing their products with ``?as=seller``.
    """

    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    search_fields = ["order_number"]
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._repo = OrderDjangoRepository()
        self._service = build_order_service()

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttle scopes."""
        throttle_scope: str | None
        if self.action in {"create", "from_quote"}:
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Order.objects.none()
        user = self.request.user
        if self.request.query_params.get("as") == "seller":
            return self._repo.queryset_for_seller(user.id)
        if user.is_admin and self.request.query_params.get("as") == "admin":
            return self._repo.queryset_all()
        return self._repo.queryset_for_buyer(user.id)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/ (checkout the cart)"""
        serializer = CreateOrderFromCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateOrderFromCartDTO(**serializer.validated_data)
        try:
            order = self._service.create_order_from_cart(request.user.id, dto)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["post"], url_path="from-quote")
    def from_quote(self, request: Request) -> Response:
        """POST /api/v1/orders/from-quote/"""
        serializer = CreateOrderFromQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateOrderFromQuoteDTO(**serializer.validated_data)
        try:
            order = self._service.create_order_from_quote(request.user.id, dto)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = OrderListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(
                pk, request.user.id, is_admin=request.user.is_admin
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(
        detail=False,
        methods=["get"],
        url_path=r"by-number/(?P<order_number>[A-Za-z0-9\-]+)",
    )
    def by_number(self, request: Request, order_number: str) -> Response:
        """GET /api/v1/orders/by-number/{order_number}/"""
        try:
            order = self._service.get_order_by_number(
                order_number, request.user.id, is_admin=request.user.is_admin
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["get"])
    def history(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/history/"""
        try:
            rows = self._service.get_status_history(
                pk, request.user.id, is_admin=request.user.is_admin
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(StatusHistorySerializer(rows, many=True).data)

    # ------------------------------------------------------------------
    # Status Update
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/"""
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order_id = UUID(pk)
        except ValueError:
            return _invalid_id()
        try:
            order = self._service.update_order_status(
                order_id,
                UpdateOrderStatusDTO(**serializer.validated_data),
                actor_id=request.user.id,
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Cancels an order and puts its items back in stock.
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order_id = UUID(pk)
        except ValueError:
            return _invalid_id()
        try:
            order = self._service.cancel_order(
                order_id,
                actor_id=request.user.id,
                note=serializer.validated_data.get("note"),
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"])
    def pay(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/pay/

        Records a completed payment for the caller's own order.
        """
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = self._service.get_order(
                pk, request.user.id, is_admin=request.user.is_admin
            )
            if order.buyer_id != request.user.id and not request.user.is_admin:
                raise Forbidden("Only the buyer can pay for this order.")
            order = self._service.process_payment(
                order.id, serializer.validated_data["payment_intent_id"]
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["patch"])
    def shipping(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/shipping/"""
        serializer = UpdateShippingInfoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = {
            key: value
            for key, value in serializer.validated_data.items()
            if value not in ("", None)
        }
        try:
            order_id = UUID(pk)
        except ValueError:
            return _invalid_id()
        try:
            order = self._service.update_shipping_info(
                order_id, request.user.id, UpdateShippingInfoDTO(**data)
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(OrderSerializer(order).data)
