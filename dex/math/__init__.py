"""Mathematical utilities for the exchange engine.

This package provides the numeric primitive used by every pool operation:
- FixedPoint: 18-decimal fixed-point arithmetic with explicit rounding
"""

from dex.math.fixed_point import FP, MAX_RAW, ONE_18, FixedPoint

__all__ = ["FixedPoint", "FP", "ONE_18", "MAX_RAW"]
