"""
Calculators Package

Provides all commission calculation components.
"""

from .commission import CommissionCalculator
from .money import quantize_money
from .split import CommissionSplitter
from .tiers import DEFAULT_TIERS, TieredCommissionCalculator, validate_tier_schedule

__all__ = [
    "CommissionCalculator",
    "CommissionSplitter",
    "TieredCommissionCalculator",
    "DEFAULT_TIERS",
    "quantize_money",
    "validate_tier_schedule",
]
