from decimal import ROUND_HALF_UP, Decimal, localcontext

CENT = Decimal("0.01")


def money_precision(value: Decimal) -> int:
    """Significant digits needed to hold value to the cent."""
    return max(28, value.adjusted() + 3)


def quantize_money(value: Decimal, rounding=ROUND_HALF_UP) -> Decimal:
    """Round to 2 decimal places, half away from zero by default."""
    with localcontext() as ctx:
        ctx.prec = money_precision(value)
        return value.quantize(CENT, rounding=rounding)
