"""
Retirement spend-down.

Withdrawals for a year ending at or before preservation age come entirely from
the unrestricted pool (the bridge). After that the unrestricted pool is drawn
first and the restricted pool covers any remainder. Both pools then grow at
the real return.
"""

from typing import List

from .bands import band_label_at, band_multiplier_at
from .params import DecumulationResult, Household, PathPoint, Phase


def phase_for_year(start_age: int, preservation_age: int) -> Phase:
    """Phase of the year starting at start_age."""
    return Phase.BRIDGE if start_age < preservation_age else Phase.RETIREMENT


def simulate_retirement(household: Household, retire_age: int, s_base: float,
                        unrestricted: float, restricted: float) -> DecumulationResult:
    """
    Spend down from retire_age to life expectancy.

    The bridge pool may go negative when s_base is unaffordable during the
    bridge; detecting that is left to the caller (see solver.assess_bridge).

    Args:
        household: Supplies bands, preservation age, life expectancy and return
        retire_age: Age at the start of the first retirement year
        s_base: Base annual spending, scaled by the band multiplier each year
        unrestricted: Unrestricted balance at retire_age
        restricted: Restricted balance at retire_age

    Returns:
        DecumulationResult with terminal total wealth and the per-year path
    """
    bands = household.bands
    preservation_age = household.preservation_age
    growth = 1 + household.real_return
    path: List[PathPoint] = []

    age = retire_age
    while age < household.life_expectancy:
        next_age = age + 1
        spend = s_base * band_multiplier_at(next_age, bands)

        if next_age <= preservation_age:
            unrestricted -= spend
        else:
            from_unrestricted = min(unrestricted, spend)
            unrestricted -= from_unrestricted
            restricted -= spend - from_unrestricted

        unrestricted *= growth
        restricted *= growth
        path.append(PathPoint(next_age, unrestricted, restricted, unrestricted + restricted,
                              phase_for_year(age, preservation_age),
                              band_label_at(next_age, bands)))
        age = next_age

    return DecumulationResult(terminal_total=unrestricted + restricted, path=tuple(path))
