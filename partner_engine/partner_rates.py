"""
Partner Rate Overrides

Partner-specific commission rates consulted before the standard referral rate.
"""

from decimal import Decimal
from typing import Mapping, Protocol

from .validators import validate_rate

DEFAULT_PARTNER_RATES = {
    "partner-premium-001": Decimal("0.18"),
    "partner-premium-002": Decimal("0.18"),
    "partner-strategic-001": Decimal("0.22"),
}


class PartnerRateLookup(Protocol):
    def rate_for(self, partner_id: str) -> Decimal | None: ...


class PartnerRateTable:
    """In-memory partner rate lookup. Rates are validated on construction."""

    def __init__(self, rates: Mapping[str, object] | None = None):
        source = DEFAULT_PARTNER_RATES if rates is None else rates
        self._rates = {str(partner_id): validate_rate(rate) for partner_id, rate in source.items()}

    def rate_for(self, partner_id: str) -> Decimal | None:
        return self._rates.get(partner_id)
