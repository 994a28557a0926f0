"""
Commission Splitter

Divides a total commission between several partners, either evenly or by
explicit percentages.
"""

from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Sequence

from ..errors import InvalidPartnerCount, InvalidSplitPercentages
from ..validators import validate_amount
from .money import money_precision, quantize_money


class CommissionSplitter:
    """Splits commissions across partners."""

    # Float inputs such as [1/3, 1/3, 1/3] never sum to exactly 1.0
    SPLIT_TOLERANCE = Decimal("0.0001")

    def split_even(self, total, partner_count: int) -> list[Decimal]:
        """
        Split evenly, flooring each share to the cent.

        The last partner absorbs the remainder so the parts always sum to the
        rounded total, e.g. 10000 / 3 -> [3333.33, 3333.33, 3333.34].
        """
        total = quantize_money(validate_amount(total))
        if isinstance(partner_count, bool) or not isinstance(partner_count, int) or partner_count <= 0:
            raise InvalidPartnerCount(f"Partner count must be greater than 0, got: {partner_count!r}")

        with localcontext() as ctx:
            ctx.prec = money_precision(total)
            share = quantize_money(total / partner_count, rounding=ROUND_DOWN)
            splits = [share] * partner_count
            splits[-1] = total - share * (partner_count - 1)
        return splits

    def split_custom(self, total, percentages: Sequence) -> list[Decimal]:
        """Split by percentages (fractions of 1), preserving input order."""
        total = validate_amount(total)

        shares = []
        for i, pct in enumerate(percentages):
            if isinstance(pct, bool) or not isinstance(pct, (int, float, Decimal)):
                raise InvalidSplitPercentages(f"Split percentage {i} must be a number, got: {pct!r}")
            value = Decimal(str(pct))
            if not value.is_finite() or not (0 <= value <= 1):
                raise InvalidSplitPercentages(f"Split percentage {i} must be between 0 and 1, got: {pct}")
            shares.append(value)

        if abs(sum(shares, Decimal("0")) - 1) > self.SPLIT_TOLERANCE:
            raise InvalidSplitPercentages("Split percentages must sum to 1.0")

        return [quantize_money(total * pct) for pct in shares]
