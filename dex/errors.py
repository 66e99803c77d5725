"""Error classes for the exchange engine.

Every failure the engine can report is a DexError subclass. Errors are
raised before any pool state is mutated, so callers can retry with
corrected input against an unchanged pool.
"""


class DexError(Exception):
    """Base error for exchange engine operations."""

    code = "dex_error"


class InvalidAmount(DexError):
    """Non-positive, negative, or malformed quantity."""

    code = "invalid_amount"


class InvalidFeeRate(InvalidAmount):
    """Fee rate must be in range [0, 1)."""

    code = "invalid_fee_rate"


class IdenticalAssets(DexError):
    """A pool needs two different assets."""

    code = "identical_assets"


class PoolAlreadyExists(DexError):
    """A pool for this asset pair is already registered."""

    code = "pool_already_exists"


class PoolNotFound(DexError):
    """No pool is registered for this asset pair."""

    code = "pool_not_found"


class UnknownAsset(DexError):
    """The asset does not belong to the pool."""

    code = "unknown_asset"


class RatioMismatch(DexError):
    """Deposit amounts do not match the pool's reserve ratio."""

    code = "ratio_mismatch"


class InsufficientClaim(DexError):
    """Claim amount exceeds the outstanding claim supply."""

    code = "insufficient_claim"


class InsufficientLiquidity(DexError):
    """The pool cannot cover the requested output."""

    code = "insufficient_liquidity"


class SlippageExceeded(DexError):
    """Swap result falls outside the caller's limit."""

    code = "slippage_exceeded"


class FixedPointError(DexError, ArithmeticError):
    """Base class for fixed-point arithmetic errors."""

    code = "arithmetic_error"


class ArithmeticOverflow(FixedPointError):
    """Result exceeds the representable range."""

    code = "arithmetic_overflow"


class Underflow(FixedPointError):
    """Subtraction would produce a negative result."""

    code = "arithmetic_underflow"


class DivisionByZero(FixedPointError):
    """Division by zero."""

    code = "division_by_zero"


__all__ = [
    "DexError",
    "InvalidAmount",
    "InvalidFeeRate",
    "IdenticalAssets",
    "PoolAlreadyExists",
    "PoolNotFound",
    "UnknownAsset",
    "RatioMismatch",
    "InsufficientClaim",
    "InsufficientLiquidity",
    "SlippageExceeded",
    "FixedPointError",
    "ArithmeticOverflow",
    "Underflow",
    "DivisionByZero",
]
