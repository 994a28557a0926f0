"""
Commission Calculator

Handles partnership commission calculation for referral, reseller, MSP,
custom, partner-specific and tiered commissions. All methods are pure:
identical inputs always produce identical outputs.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from ..errors import InvalidRate
from ..models import CommissionTier, CommissionType
from ..partner_rates import PartnerRateLookup, PartnerRateTable
from ..validators import validate_amount, validate_finite, validate_probability, validate_rate
from .money import quantize_money
from .split import CommissionSplitter
from .tiers import DEFAULT_TIERS, TieredCommissionCalculator


class CommissionCalculator:
    """Calculates commissions; holds only read-only configuration."""

    REFERRAL_RATE = CommissionType.REFERRAL.default_rate
    RESELLER_RATE = CommissionType.RESELLER.default_rate
    MSP_RATE = CommissionType.MSP.default_rate

    def __init__(
        self,
        partner_rates: PartnerRateLookup | None = None,
        tiers: Sequence[CommissionTier] = DEFAULT_TIERS,
    ):
        self.partner_rates = partner_rates if partner_rates is not None else PartnerRateTable()
        self.tiered = TieredCommissionCalculator(tiers)
        self.splitter = CommissionSplitter()

    def _calculate_flat(self, amount, rate) -> Decimal:
        value = validate_amount(amount)
        return quantize_money(value * validate_rate(rate))

    def calculate_referral_commission(self, amount, rate=REFERRAL_RATE) -> Decimal:
        """Referral commission (15% standard)."""
        return self._calculate_flat(amount, rate)

    def calculate_reseller_commission(self, amount, rate=RESELLER_RATE) -> Decimal:
        """Reseller commission (30% standard)."""
        return self._calculate_flat(amount, rate)

    def calculate_msp_commission(self, amount, rate=MSP_RATE) -> Decimal:
        """MSP commission (25% standard)."""
        return self._calculate_flat(amount, rate)

    def calculate_commission(self, amount, commission_type, rate=None) -> Decimal:
        """
        Calculate a commission by type.

        An explicit rate wins over the type's standard rate. Custom
        commissions have no standard rate, so they require one.
        """
        commission_type = CommissionType(commission_type)
        if rate is None:
            rate = commission_type.default_rate
            if rate is None:
                raise InvalidRate(f"A rate is required for {commission_type.value} commissions")
        return self._calculate_flat(amount, rate)

    def calculate_tiered_commission(self, amount) -> Decimal:
        return self.tiered.calculate(amount)

    def resolve_partner_rate(self, partner_id: str | None, fallback=REFERRAL_RATE) -> Decimal | None:
        """Partner override if configured, otherwise the fallback (standard referral rate)."""
        if partner_id is not None:
            override = self.partner_rates.rate_for(partner_id)
            if override is not None:
                return override
        return fallback

    def calculate_partner_commission(self, amount, partner_id: str) -> Decimal:
        return self._calculate_flat(amount, self.resolve_partner_rate(partner_id))

    def calculate_weighted_value(self, amount, probability) -> Decimal:
        """amount x probability / 100, unrounded (75% of 100,000 is exactly 75,000)."""
        value = validate_amount(amount)
        return value * validate_probability(probability) / Decimal(100)

    def aggregate_commissions(self, commissions: Iterable) -> Decimal:
        """Sum of the entries rounded to the cent. Negative entries (clawbacks) are allowed."""
        total = sum((validate_finite(c) for c in commissions), Decimal("0"))
        return quantize_money(total)

    def split_commission(self, total, partner_count: int) -> list[Decimal]:
        return self.splitter.split_even(total, partner_count)

    def split_commission_custom(self, total, percentages: Sequence) -> list[Decimal]:
        return self.splitter.split_custom(total, percentages)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

_default = CommissionCalculator()

calculate_referral_commission = _default.calculate_referral_commission
calculate_reseller_commission = _default.calculate_reseller_commission
calculate_msp_commission = _default.calculate_msp_commission
calculate_commission = _default.calculate_commission
calculate_tiered_commission = _default.calculate_tiered_commission
calculate_partner_commission = _default.calculate_partner_commission
calculate_weighted_value = _default.calculate_weighted_value
aggregate_commissions = _default.aggregate_commissions
split_commission = _default.split_commission
split_commission_custom = _default.split_commission_custom
