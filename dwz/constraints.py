"""
Binding-constraint classification.

Two ceilings bound base spending for a given retirement age:

- the bridge ceiling: the unrestricted pool alone must fund every year ending
  at or before preservation age;
- the horizon ceiling: both pools together must fund every year to life
  expectancy and still leave the bequest.

Whichever is lower (within a small tolerance) is the binding constraint.
"""

import math

from .params import BindingConstraint, BridgeTolerance, ConstraintKind, Household
from .solver import bridge_years, discounted_multipliers


def banded_annuity_factor(household: Household, retire_age: int, n_years: int) -> float:
    """PV at retire_age of one unit of base spending over n_years, band multipliers applied."""
    return float(discounted_multipliers(household, retire_age, n_years).sum())


def analyze_binding_constraint(household: Household, retire_age: int, s_base: float,
                               unrestricted: float, restricted: float,
                               tolerance: BridgeTolerance = BridgeTolerance()) -> BindingConstraint:
    """
    Classify the retirement at retire_age as bridge-limited or horizon-limited.

    Bridge-limited when the bridge ceiling is clearly below the horizon ceiling,
    or when s_base already sits on the bridge ceiling. Retiring at or after
    preservation age has no bridge years and is always horizon-limited.

    Args:
        household: Supplies bands, ages, return and bequest
        retire_age: First year of retirement
        s_base: Solved sustainable base spend at retire_age
        unrestricted: Unrestricted balance at retire_age
        restricted: Restricted balance at retire_age
        tolerance: Epsilon used for both comparisons

    Returns:
        BindingConstraint
    """
    n_bridge = bridge_years(household, retire_age)
    n_total = max(0, household.life_expectancy - retire_age)
    epsilon = tolerance.epsilon(s_base)

    a_bridge = banded_annuity_factor(household, retire_age, n_bridge)
    a_total = banded_annuity_factor(household, retire_age, n_total)

    s_bridge_max = unrestricted / a_bridge if n_bridge > 0 and a_bridge > 0 else math.inf

    if a_total > 0:
        bequest_pv = household.bequest / (1 + household.real_return) ** n_total
        s_total_max = max(0.0, (unrestricted + restricted - bequest_pv) / a_total)
    else:
        s_total_max = math.inf

    bridge_limited = n_bridge > 0 and (
        s_bridge_max + epsilon < s_total_max or abs(s_base - s_bridge_max) <= epsilon
    )

    if bridge_limited:
        kind = ConstraintKind.BRIDGE
        at_age = min(household.preservation_age, household.life_expectancy)
    else:
        kind = ConstraintKind.HORIZON
        at_age = household.life_expectancy

    return BindingConstraint(
        kind=kind,
        at_age=at_age,
        s_bridge_max=s_bridge_max,
        s_total_max=s_total_max,
        epsilon=epsilon,
    )
