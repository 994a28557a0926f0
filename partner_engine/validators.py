"""
Input Validation for the Partnership Engine

Converts raw numeric input to Decimal and enforces the amount, rate and
probability constraints. Every check raises a typed EngineError; values are
never clamped or coerced into range.
"""

from decimal import Decimal

from .errors import (
    InfiniteAmount,
    InvalidActor,
    InvalidAmount,
    InvalidProbability,
    InvalidRate,
    NegativeAmount,
)

NUMERIC_TYPES = (int, float, Decimal)


def _to_decimal(value, error_cls, label: str) -> Decimal:
    """Build a Decimal through str() so float noise never leaks in."""
    if isinstance(value, bool) or not isinstance(value, NUMERIC_TYPES):
        raise error_cls(f"Invalid {label}: must be a number, got: {value!r}")
    return Decimal(str(value))


def validate_finite(amount) -> Decimal:
    """Return amount as a Decimal, or raise if it is NaN or infinite. Sign is not checked."""
    value = _to_decimal(amount, InvalidAmount, "amount")
    if value.is_nan():
        raise InvalidAmount("Invalid amount: must be a number")
    if value.is_infinite():
        raise InfiniteAmount("Invalid amount: cannot be infinity")
    return value


def validate_amount(amount) -> Decimal:
    """Return amount as a Decimal, or raise if it is NaN, infinite or negative."""
    value = validate_finite(amount)
    if value < 0:
        raise NegativeAmount(f"Commission amount cannot be negative, got: {value}")
    return value


def validate_rate(rate) -> Decimal:
    value = _to_decimal(rate, InvalidRate, "rate")
    if not value.is_finite() or not (0 <= value <= 1):
        raise InvalidRate(f"Commission rate must be between 0 and 1, got: {value}")
    return value


def validate_probability(probability) -> Decimal:
    value = _to_decimal(probability, InvalidProbability, "probability")
    if not value.is_finite() or not (0 <= value <= 100):
        raise InvalidProbability(f"Probability must be between 0 and 100, got: {value}")
    return value


def validate_actor(actor_id) -> str:
    if not isinstance(actor_id, str) or not actor_id.strip():
        raise InvalidActor(f"actor_id must be a non-empty string, got: {actor_id!r}")
    return actor_id
