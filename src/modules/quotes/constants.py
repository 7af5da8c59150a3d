"""Quote negotiation constants.

A quote moves PENDING -> (COUNTER_OFFERED <-> COUNTER_OFFERED)* ->
ACCEPTED -> COMPLETED, or ends in REJECTED / EXPIRED.  ``last_offer_by``
records whose counter-offer is on the table, which decides who may
respond next.
"""

from decimal import Decimal

from django.db import models


class QuoteStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COUNTER_OFFERED = "COUNTER_OFFERED", "Counter offered"
    ACCEPTED = "ACCEPTED", "Accepted"
    REJECTED = "REJECTED", "Rejected"
    COMPLETED = "COMPLETED", "Completed"
    EXPIRED = "EXPIRED", "Expired"


class QuoteAction(models.TextChoices):
    ACCEPT = "accept", "Accept"
    REJECT = "reject", "Reject"
    COUNTER = "counter", "Counter"


class QuoteParty(models.TextChoices):
    ARTISAN = "ARTISAN", "Artisan"
    CUSTOMER = "CUSTOMER", "Customer"


CANCELLABLE_STATUSES: set[str] = {QuoteStatus.PENDING, QuoteStatus.COUNTER_OFFERED}

MESSAGEABLE_STATUSES: set[str] = {
    QuoteStatus.PENDING,
    QuoteStatus.COUNTER_OFFERED,
    QuoteStatus.ACCEPTED,
}

PRICED_STATUSES: set[str] = {QuoteStatus.ACCEPTED, QuoteStatus.COMPLETED}

# A requested price below this share of the listed price is refused.
MIN_REQUESTED_PRICE_RATIO = Decimal("0.5")

MAX_EXPIRY_DAYS = 30
MAX_SPECIFICATIONS_LENGTH = 2000
MAX_MESSAGE_LENGTH = 1000
