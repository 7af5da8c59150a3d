"""Cart API views.

Routes (all scoped to the authenticated user):
- ``GET    /cart/``                 cart lines and subtotal
- ``POST   /cart/``                 add a product
- ``PATCH  /cart/{product_id}/``    set quantity (0 removes the line)
- ``DELETE /cart/{product_id}/``    remove a product
- ``POST   /cart/clear/``           empty the cart
- ``GET    /cart/validate/``        checkout pre-check
"""

from __future__ import annotations

from uuid import UUID

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.accounts.repositories import UserDjangoRepository
from modules.cart.dtos import AddToCartDTO, CartItemRemoved, UpdateCartItemDTO
from modules.cart.repositories import CartDjangoRepository
from modules.cart.serializers import (
    AddToCartSerializer,
    CartItemSerializer,
    CartSummarySerializer,
    UpdateCartItemSerializer,
)
from modules.cart.services import CartService
from modules.cart.validators import CartValidator
from modules.catalog.repositories import ProductDjangoRepository
from modules.core.exceptions import DomainError
from modules.core.responses import domain_error_response


def build_cart_service() -> CartService:
    cart_repo = CartDjangoRepository()
    return CartService(
        cart_repository=cart_repo,
        product_repository=ProductDjangoRepository(),
        user_repository=UserDjangoRepository(),
        validator=CartValidator(cart_repo),
    )


class CartViewSet(GenericViewSet):
    """ViewSet over ``CartService``; ``pk`` is the product id."""

    serializer_class = CartItemSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_cart_service()

    def list(self, request: Request) -> Response:
        summary = self._service.get_cart(request.user.id)
        return Response(CartSummarySerializer(summary).data)

    def create(self, request: Request) -> Response:
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = AddToCartDTO(**serializer.validated_data)
        try:
            item = self._service.add_to_cart(request.user.id, dto)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(CartItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            item_id = UUID(pk)
        except ValueError:
            return Response(
                {"detail": "Invalid product ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            result = self._service.update_item_quantity(
                request.user.id,
                item_id,
                UpdateCartItemDTO(**serializer.validated_data),
            )
        except DomainError as exc:
            return domain_error_response(exc)

        if isinstance(result, CartItemRemoved):
            return Response({"removed": True, "product_id": str(result.product_id)})
        return Response(CartItemSerializer(result.item).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            item_id = UUID(pk)
        except ValueError:
            return Response(
                {"detail": "Invalid product ID format."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            self._service.remove_from_cart(request.user.id, item_id)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["post"])
    def clear(self, request: Request) -> Response:
        try:
            removed = self._service.clear_cart(request.user.id)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response({"removed": removed})

    @action(detail=False, methods=["get"])
    def validate(self, request: Request) -> Response:
        result = self._service.validate_for_checkout(request.user.id)
        return Response(result.model_dump(mode="json"))
