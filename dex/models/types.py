"""Shared type definitions for request and response models."""

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from dex.math import MAX_RAW, ONE_18

# Largest whole amount a 256-bit, 18-decimal value can hold
MAX_WHOLE_AMOUNT = MAX_RAW // ONE_18


def validate_decimal_amount(value: Any) -> str:
    """Validate that a value is a non-negative decimal number.

    Amounts travel as strings so that no float ever touches them. Integers
    are accepted and converted.

    Args:
        value: Value to validate (string or int)

    Returns:
        The amount as a decimal string

    Raises:
        ValueError: If value is not a finite, non-negative decimal number, or
            is too large for a 256-bit fixed-point amount
    """
    if isinstance(value, bool):
        raise ValueError(f"Amount must be a decimal string, got {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Amount cannot be negative: {value}")
        if value > MAX_WHOLE_AMOUNT:
            raise ValueError("Amount exceeds the 256-bit fixed-point range")
        return str(value)

    # Floats are rejected along with every other non-string type
    if not isinstance(value, str):
        raise ValueError(f"Amount must be a decimal string, got {type(value).__name__}")

    try:
        parsed = Decimal(value.strip())
    except InvalidOperation as err:
        raise ValueError(f"Amount must be a decimal number string: '{value}'") from err

    if not parsed.is_finite():
        raise ValueError(f"Amount must be finite: '{value}'")
    if parsed < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    # Compare magnitudes by exponent so huge exponents are never expanded
    if not parsed.is_zero() and parsed.adjusted() > len(str(MAX_WHOLE_AMOUNT)) - 1:
        raise ValueError("Amount exceeds the 256-bit fixed-point range")

    return value.strip()


# Non-negative decimal amount as string (validated)
DecimalAmount = Annotated[
    str,
    BeforeValidator(validate_decimal_amount),
    Field(description="Non-negative decimal amount as string"),
]

# Opaque asset identifier, safe to use as a URL path segment
AssetSymbol = Annotated[
    str,
    Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_.:\-]+$"),
]
