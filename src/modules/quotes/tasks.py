"""Celery tasks for the quotes module."""

import structlog
from celery import shared_task

from modules.accounts.repositories import UserDjangoRepository
from modules.catalog.repositories import ProductDjangoRepository
from modules.quotes.negotiator import QuoteNegotiator
from modules.quotes.repositories import QuoteDjangoRepository
from modules.quotes.services import QuoteService
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="quotes.cleanup_expired_quotes")
def cleanup_expired_quotes():
    """Periodic sweep moving overdue PENDING quotes to EXPIRED."""
    quote_repo = QuoteDjangoRepository()
    service = QuoteService(
        quote_repository=quote_repo,
        negotiator=QuoteNegotiator(
            quote_repository=quote_repo,
            product_repository=ProductDjangoRepository(),
            user_repository=UserDjangoRepository(),
        ),
        event_bus=event_bus,
    )
    expired = service.cleanup_expired_quotes()
    logger.info("cleanup_expired_quotes.executed", expired=expired)
    return {"expired": expired}
