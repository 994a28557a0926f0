"""
Tiered Commission Calculator

Progressive (marginal bracket) commissions: each tier's rate applies only to
the part of the amount that falls inside that tier.
"""

from decimal import Decimal
from typing import Sequence

from ..errors import InvalidTierSchedule
from ..models import CommissionTier
from ..validators import validate_amount, validate_rate
from .money import quantize_money

DEFAULT_TIERS = (
    CommissionTier(Decimal("0"), Decimal("100000"), Decimal("0.10")),
    CommissionTier(Decimal("100000"), Decimal("500000"), Decimal("0.15")),
    CommissionTier(Decimal("500000"), None, Decimal("0.20")),
)


def validate_tier_schedule(tiers: Sequence[CommissionTier]) -> tuple[CommissionTier, ...]:
    """
    Check that tiers cover [0, infinity) with no gaps or overlaps.

    The first tier starts at 0, each ceiling is the next floor, and only the
    final tier is unbounded.
    """
    if not tiers:
        raise InvalidTierSchedule("Tier schedule cannot be empty")

    expected_floor = Decimal("0")
    last = len(tiers) - 1
    for i, tier in enumerate(tiers):
        validate_rate(tier.rate)
        if tier.lower_bound != expected_floor:
            raise InvalidTierSchedule(
                f"Tier {i} must start at {expected_floor}, got: {tier.lower_bound}"
            )
        if tier.upper_bound is None:
            if i != last:
                raise InvalidTierSchedule(f"Only the final tier may be unbounded (tier {i})")
            break
        if tier.upper_bound <= tier.lower_bound:
            raise InvalidTierSchedule(
                f"Tier {i} upper_bound must exceed lower_bound, got: "
                f"[{tier.lower_bound}, {tier.upper_bound})"
            )
        expected_floor = tier.upper_bound
    else:
        raise InvalidTierSchedule("Final tier must be unbounded (upper_bound=None)")

    return tuple(tiers)


class TieredCommissionCalculator:
    """Calculates commissions against a validated tier schedule."""

    def __init__(self, tiers: Sequence[CommissionTier] = DEFAULT_TIERS):
        self.tiers = validate_tier_schedule(tiers)

    def calculate(self, amount) -> Decimal:
        """
        Sum each tier's contribution, then round once.

        E.g. 250,000 -> 100,000 x 10% + 150,000 x 15% = 32,500
        """
        remaining = validate_amount(amount)
        commission = Decimal("0")

        for tier in self.tiers:
            if remaining <= 0:
                break

            if tier.upper_bound is None:
                allocated = remaining
            else:
                allocated = min(remaining, tier.upper_bound - tier.lower_bound)

            commission += allocated * tier.rate
            remaining -= allocated

        return quantize_money(commission)
