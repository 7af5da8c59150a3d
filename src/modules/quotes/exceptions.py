"""Quote negotiation exceptions."""

from __future__ import annotations

from modules.core.exceptions import (
    DomainValidationError,
    Forbidden,
    InvalidState,
    NotFound,
)


class QuoteNotFound(NotFound):
    default_code = "QUOTE_NOT_FOUND"


class QuoteForbidden(Forbidden):
    """The actor is not allowed to act on this quote."""


class CannotQuoteOwnProduct(Forbidden):
    default_code = "CANNOT_QUOTE_OWN_PRODUCT"


class ProductNotCustomizable(DomainValidationError):
    default_code = "PRODUCT_NOT_CUSTOMIZABLE"


class RequestedPriceTooLow(DomainValidationError):
    default_code = "REQUESTED_PRICE_TOO_LOW"


class InvalidQuoteState(InvalidState):
    """The action is not valid from the quote's current status."""

    default_code = "INVALID_QUOTE_STATE"


class NoPriceSpecified(DomainValidationError):
    """Accepting would leave the quote without a final price."""

    default_code = "NO_PRICE_SPECIFIED"


class MissingCounterOffer(DomainValidationError):
    default_code = "MISSING_COUNTER_OFFER"


class UnnecessaryCounterOffer(DomainValidationError):
    default_code = "UNNECESSARY_COUNTER_OFFER"


class NoFinalPrice(InvalidState):
    """An ACCEPTED quote without a final price cannot become an order."""

    default_code = "NO_FINAL_PRICE"
