"""Fixed-point decimal arithmetic for pool accounting.

All amounts, rates and claim quantities are stored as integers scaled by
10^18. Example: 1.5 is stored as 1_500_000_000_000_000_000.

Every operation that can lose precision comes in a `_down` (floor) and an
`_up` (ceiling) variant, so each call site states its rounding explicitly:
amounts the pool pays out round down, amounts the pool is owed round up.

Usage pattern:
    from dex.math import FixedPoint

    x = FixedPoint.from_decimal(Decimal("1000"))
    y = FixedPoint.from_decimal(Decimal("50"))
    share = x.mul_div_down(y, x + y)  # floor(x * y / (x + y))
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import ClassVar

from dex.errors import ArithmeticOverflow, DivisionByZero, InvalidAmount, Underflow

__all__ = [
    "FixedPoint",
    "FP",
    "DECIMALS",
    "ONE_18",
    "MAX_RAW",
]

DECIMALS = 18
ONE_18 = 10**DECIMALS

# Raw values must fit in an unsigned 256-bit word
MAX_RAW = 2**256 - 1
_MAX_RAW_DIGITS = len(str(MAX_RAW))


def _check_bounds(raw: int, op: str) -> int:
    if raw < 0:
        raise Underflow(f"Underflow in {op}: result {raw} is negative")
    if raw > MAX_RAW:
        raise ArithmeticOverflow(f"Overflow in {op}: result exceeds 2^256-1")
    return raw


def _div_up(numerator: int, denominator: int) -> int:
    if numerator == 0:
        return 0
    return (numerator - 1) // denominator + 1


class FixedPoint:
    """Non-negative 18-decimal fixed-point number stored as int.

    Values are immutable and hashable. Arithmetic never silently drops
    digits: construction rejects inputs with more than 18 fractional
    digits, and every multiply or divide names its rounding direction.

    Attributes:
        raw: The underlying integer scaled by 10^18 (read-only)
    """

    ONE: ClassVar[int] = ONE_18

    __slots__ = ("_raw",)
    _raw: int

    def __init__(self, raw: int) -> None:
        """Create a FixedPoint from a raw scaled integer.

        Raises:
            TypeError: If raw is not an int
            Underflow: If raw is negative
            ArithmeticOverflow: If raw exceeds 2^256-1
        """
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise TypeError(f"FixedPoint requires int, got {type(raw).__name__}")
        self._raw = _check_bounds(raw, "construction")

    # --- Construction ---

    @classmethod
    def from_raw(cls, raw: int) -> FixedPoint:
        """Create from a raw value (already scaled by 10^18)."""
        return cls(raw)

    @classmethod
    def from_int(cls, i: int) -> FixedPoint:
        """Create from a whole number (will be scaled by 10^18)."""
        if isinstance(i, bool) or not isinstance(i, int):
            raise TypeError(f"FixedPoint.from_int requires int, got {type(i).__name__}")
        if i < 0:
            raise InvalidAmount(f"Amount cannot be negative: {i}")
        return cls(i * cls.ONE)

    @classmethod
    def from_decimal(cls, d: Decimal) -> FixedPoint:
        """Create from a Decimal, exactly.

        Raises:
            InvalidAmount: If d is negative, not finite, or has more than
                18 fractional digits
            ArithmeticOverflow: If the scaled value exceeds 2^256-1
        """
        if not d.is_finite():
            raise InvalidAmount(f"Amount must be finite, got {d}")
        if d < 0:
            raise InvalidAmount(f"Amount cannot be negative: {d}")

        if d.is_zero():
            return cls(0)

        _, digits, exponent = d.as_tuple()
        # Drop trailing zeros so the last digit is significant
        significant = len(digits)
        while digits[significant - 1] == 0:
            significant -= 1
        shift = int(exponent) + len(digits) - significant + DECIMALS

        # Range checks run on digit counts, before any power of ten is built
        if shift < 0:
            raise InvalidAmount(f"Amount {d} has more than {DECIMALS} fractional digits")
        if significant + shift > _MAX_RAW_DIGITS:
            raise ArithmeticOverflow(f"Amount {d} exceeds the representable range")

        coefficient = int("".join(map(str, digits[:significant])))
        raw = coefficient * 10**shift
        if raw > MAX_RAW:
            raise ArithmeticOverflow(f"Amount {d} exceeds the representable range")
        return cls(raw)

    @classmethod
    def parse(cls, value: FixedPoint | Decimal | int | str) -> FixedPoint:
        """Coerce a caller-supplied quantity into a FixedPoint.

        Floats are rejected: they cannot represent most decimal amounts.

        Raises:
            InvalidAmount: If value is malformed or of an unsupported type
        """
        if isinstance(value, FixedPoint):
            return value
        if isinstance(value, Decimal):
            return cls.from_decimal(value)
        if isinstance(value, bool):
            raise InvalidAmount(f"Amount must be numeric, got {value!r}")
        if isinstance(value, int):
            return cls.from_int(value)
        if isinstance(value, str):
            try:
                parsed = Decimal(value.strip())
            except InvalidOperation as err:
                raise InvalidAmount(f"Amount is not a decimal number: '{value}'") from err
            return cls.from_decimal(parsed)
        raise InvalidAmount(f"Unsupported amount type: {type(value).__name__}")

    @classmethod
    def zero(cls) -> FixedPoint:
        """Create a FixedPoint with value 0."""
        return cls(0)

    @classmethod
    def one(cls) -> FixedPoint:
        """Create a FixedPoint with value 1."""
        return cls(cls.ONE)

    # --- Conversion ---

    @property
    def raw(self) -> int:
        """The underlying integer scaled by 10^18."""
        return self._raw

    def to_decimal(self) -> Decimal:
        """Convert to Decimal exactly (trailing zeros stripped)."""
        whole, frac = divmod(self._raw, self.ONE)
        if frac == 0:
            return Decimal(whole)
        return Decimal(f"{whole}.{frac:0{DECIMALS}d}".rstrip("0"))

    def is_zero(self) -> bool:
        return self._raw == 0

    def __bool__(self) -> bool:
        return self._raw != 0

    def __repr__(self) -> str:
        return f"FixedPoint({self.to_decimal()})"

    def __str__(self) -> str:
        # Plain notation, never exponent form
        return format(self.to_decimal(), "f")

    def __hash__(self) -> int:
        return hash(self._raw)

    # --- Exact arithmetic ---

    def __add__(self, other: FixedPoint) -> FixedPoint:
        """Add two values.

        Raises:
            ArithmeticOverflow: If the sum exceeds 2^256-1
        """
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return FixedPoint(_check_bounds(self._raw + other._raw, "add"))

    def __sub__(self, other: FixedPoint) -> FixedPoint:
        """Subtract other from self.

        Raises:
            Underflow: If the result would be negative
        """
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return FixedPoint(_check_bounds(self._raw - other._raw, "sub"))

    def complement(self) -> FixedPoint:
        """Return 1 - self.

        Raises:
            Underflow: If self > 1
        """
        return FixedPoint(_check_bounds(self.ONE - self._raw, "complement"))

    # --- Rounded arithmetic ---

    def mul_down(self, other: FixedPoint) -> FixedPoint:
        """Multiply with floor rounding: (a * b) // 10^18"""
        return FixedPoint(_check_bounds((self._raw * other._raw) // self.ONE, "mul_down"))

    def mul_up(self, other: FixedPoint) -> FixedPoint:
        """Multiply with ceiling rounding."""
        return FixedPoint(_check_bounds(_div_up(self._raw * other._raw, self.ONE), "mul_up"))

    def div_down(self, other: FixedPoint) -> FixedPoint:
        """Divide with floor rounding: (a * 10^18) // b

        Raises:
            DivisionByZero: If other is zero
        """
        if other._raw == 0:
            raise DivisionByZero(f"Division by zero: {self} / 0")
        return FixedPoint(_check_bounds((self._raw * self.ONE) // other._raw, "div_down"))

    def div_up(self, other: FixedPoint) -> FixedPoint:
        """Divide with ceiling rounding.

        Raises:
            DivisionByZero: If other is zero
        """
        if other._raw == 0:
            raise DivisionByZero(f"Division by zero: {self} / 0")
        return FixedPoint(_check_bounds(_div_up(self._raw * self.ONE, other._raw), "div_up"))

    def mul_div_down(self, numerator: FixedPoint, denominator: FixedPoint) -> FixedPoint:
        """Compute self * numerator / denominator with a single floor rounding.

        Raises:
            DivisionByZero: If denominator is zero
        """
        if denominator._raw == 0:
            raise DivisionByZero(f"Division by zero: {self} * {numerator} / 0")
        return FixedPoint(
            _check_bounds((self._raw * numerator._raw) // denominator._raw, "mul_div_down")
        )

    def mul_div_up(self, numerator: FixedPoint, denominator: FixedPoint) -> FixedPoint:
        """Compute self * numerator / denominator with a single ceiling rounding.

        Raises:
            DivisionByZero: If denominator is zero
        """
        if denominator._raw == 0:
            raise DivisionByZero(f"Division by zero: {self} * {numerator} / 0")
        return FixedPoint(
            _check_bounds(_div_up(self._raw * numerator._raw, denominator._raw), "mul_div_up")
        )

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self._raw == other._raw

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self._raw < other._raw

    def __le__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self._raw <= other._raw

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self._raw > other._raw

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self._raw >= other._raw

    def exact_mul(self, other: FixedPoint) -> Decimal:
        """Multiply without rounding, returning an exact Decimal.

        Used for invariant checks such as the constant product, where the
        result may need up to 36 fractional digits.
        """
        product = self._raw * other._raw
        digits = tuple(int(c) for c in str(product))
        return Decimal((0, digits, -2 * DECIMALS))

    def min(self, other: FixedPoint) -> FixedPoint:
        return self if self._raw <= other._raw else other

    def max(self, other: FixedPoint) -> FixedPoint:
        return self if self._raw >= other._raw else other


# Convenience alias for concise code
FP = FixedPoint
