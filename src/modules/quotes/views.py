"""Quote API views.

Exposes ``QuoteService`` over HTTP.  Listing and retrieval only ever show
quotes the authenticated user is a party to (admins see all).
"""

from __future__ import annotations

from uuid import UUID

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.accounts.repositories import UserDjangoRepository
from modules.catalog.repositories import ProductDjangoRepository
from modules.core.exceptions import DomainError
from modules.core.responses import domain_error_response
from modules.quotes.dtos import (
    AddQuoteMessageDTO,
    CancelQuoteDTO,
    CreateQuoteRequestDTO,
    RespondToQuoteDTO,
)
from modules.quotes.filters import QuoteRequestFilter
from modules.quotes.models import QuoteRequest
from modules.quotes.negotiator import QuoteNegotiator
from modules.quotes.repositories import QuoteDjangoRepository
from modules.quotes.serializers import (
    AddQuoteMessageSerializer,
    CancelQuoteSerializer,
    CreateQuoteRequestSerializer,
    QuoteMessageSerializer,
    QuoteRequestListSerializer,
    QuoteRequestSerializer,
    RespondToQuoteSerializer,
)
from modules.quotes.services import QuoteService
from shared.infrastructure.bus import event_bus


def build_quote_service() -> QuoteService:
    quote_repo = QuoteDjangoRepository()
    return QuoteService(
        quote_repository=quote_repo,
        negotiator=QuoteNegotiator(
            quote_repository=quote_repo,
            product_repository=ProductDjangoRepository(),
            user_repository=UserDjangoRepository(),
        ),
        event_bus=event_bus,
    )


def _invalid_id() -> Response:
    return Response(
        {"detail": "Invalid quote ID format."},
        status=status.HTTP_400_BAD_REQUEST,
    )


class QuoteViewSet(GenericViewSet):
    """ViewSet for quote negotiation.

    Does **not** extend ``ModelViewSet``; every write goes through
    ``QuoteService``.
    """

    serializer_class = QuoteRequestSerializer
    filterset_class = QuoteRequestFilter
    ordering_fields = ["created_at", "expires_at", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, OrderingFilter]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._repo = QuoteDjangoRepository()
        self._service = build_quote_service()

    def get_throttles(self) -> list[BaseThrottle]:
        self.throttle_scope = "quote_creation" if self.action == "create" else None
        return super().get_throttles()

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return QuoteRequest.objects.none()
        user = self.request.user
        return self._repo.queryset_for_user(user.id, is_admin=user.is_admin)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/quotes/"""
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = QuoteRequestListSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/quotes/{pk}/"""
        try:
            quote = self._service.get_quote_request(
                pk, request.user.id, is_admin=request.user.is_admin
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(QuoteRequestSerializer(quote).data)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/quotes/"""
        serializer = CreateQuoteRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = CreateQuoteRequestDTO(**serializer.validated_data)
        try:
            quote = self._service.create_quote_request(request.user.id, dto)
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(
            QuoteRequestSerializer(quote).data, status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=["post"])
    def respond(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/quotes/{pk}/respond/ (artisan side)"""
        serializer = RespondToQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            quote_id = UUID(pk)
        except ValueError:
            return _invalid_id()
        try:
            quote = self._service.respond_to_quote_request(
                quote_id,
                request.user.id,
                RespondToQuoteDTO(**serializer.validated_data),
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(QuoteRequestSerializer(quote).data)

    @action(detail=True, methods=["post"], url_path="counter-response")
    def counter_response(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/quotes/{pk}/counter-response/ (customer side)"""
        serializer = RespondToQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            quote_id = UUID(pk)
        except ValueError:
            return _invalid_id()
        try:
            quote = self._service.respond_to_counter_offer(
                quote_id,
                request.user.id,
                RespondToQuoteDTO(**serializer.validated_data),
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(QuoteRequestSerializer(quote).data)

    @action(detail=True, methods=["post"])
    def messages(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/quotes/{pk}/messages/"""
        serializer = AddQuoteMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            quote_id = UUID(pk)
        except ValueError:
            return _invalid_id()
        try:
            message = self._service.add_message_to_quote(
                quote_id,
                request.user.id,
                AddQuoteMessageDTO(**serializer.validated_data),
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(
            QuoteMessageSerializer(message).data, status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/quotes/{pk}/cancel/"""
        serializer = CancelQuoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            quote_id = UUID(pk)
        except ValueError:
            return _invalid_id()
        try:
            quote = self._service.cancel_quote_request(
                quote_id,
                request.user.id,
                CancelQuoteDTO(**serializer.validated_data),
            )
        except DomainError as exc:
            return domain_error_response(exc)
        return Response(QuoteRequestSerializer(quote).data)
