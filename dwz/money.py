"""
Currency rounding.

Rounding is passed explicitly to the components that need it rather than
being applied globally, so the same projection can be run at cent or whole
dollar precision.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_EVEN


@dataclass(frozen=True)
class RoundingPolicy:
    """Round-half-even to a fixed number of decimal places."""
    places: int = 2

    @property
    def quantum(self) -> Decimal:
        return Decimal(1).scaleb(-self.places)

    def __call__(self, value: float) -> float:
        # repr gives the shortest string that round-trips, so 0.125 stays 0.125
        return float(Decimal(repr(float(value))).quantize(self.quantum, rounding=ROUND_HALF_EVEN))


CENTS = RoundingPolicy(places=2)
WHOLE_DOLLARS = RoundingPolicy(places=0)
