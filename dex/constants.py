"""Protocol constants for the exchange engine.

Centralizes pool parameters that are fixed by the protocol rather than
chosen per pool.
"""

from decimal import Decimal

# Claim tokens minted when a pool is first funded (or refunded after being
# drained), independent of deposit size. Every later mint or burn is
# proportional to this baseline.
BOOTSTRAP_CLAIM_SUPPLY = Decimal("100")

# Fee applied when a pool is created without an explicit rate (0.3%)
DEFAULT_FEE_RATE = Decimal("0.003")

# Allowed deviation, in raw fixed-point units, when checking that a deposit
# matches the reserve ratio. One unit means either amount may be off from
# the exact proportional amount by at most 10^-18.
RATIO_TOLERANCE_UNITS = 1

# Separator used for human readable pair names ("X/Y")
PAIR_SEPARATOR = "/"
