"""
Sustainable-spend solver and bridge assessment.

For a candidate retirement age the solver finds the base spending level that
drives terminal total wealth at life expectancy down to the bequest target.
Terminal wealth is strictly decreasing in spending, so plain bisection is
enough: expand an upper bracket by doubling, then bisect for a fixed number
of iterations.
"""

import logging
from dataclasses import dataclass

import numpy as np

from .accumulation import accumulate_until
from .bands import multipliers_for
from .decumulation import simulate_retirement
from .money import CENTS, RoundingPolicy
from .params import (
    BridgeAssessment,
    BridgeTolerance,
    Household,
    SolveResult,
    SolverSettings,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Discounting Helpers
# =============================================================================

def bridge_years(household: Household, retire_age: int) -> int:
    """Retirement years ending at or before preservation age (and within the horizon)."""
    return max(0, min(household.preservation_age, household.life_expectancy) - retire_age)


def discounted_multipliers(household: Household, retire_age: int, n_years: int) -> np.ndarray:
    """
    Band multipliers for the first n_years of retirement, discounted to retire_age.

    Spending for the k-th year (ending at retire_age + k) is withdrawn at the
    start of that year, so it is discounted by (1 + r)^(k - 1).

    Returns:
        Array of length n_years; sums to the banded annuity factor
    """
    if n_years <= 0:
        return np.zeros(0)
    k = np.arange(1, n_years + 1)
    multipliers = multipliers_for(retire_age + k, household.bands)
    return multipliers / (1 + household.real_return) ** (k - 1)


def compute_bridge_pv(household: Household, retire_age: int, s_base: float) -> float:
    """Present value at retire_age of spending during the bridge years."""
    n = bridge_years(household, retire_age)
    return float(s_base * discounted_multipliers(household, retire_age, n).sum())


# =============================================================================
# Sustainable Spend
# =============================================================================

@dataclass
class BisectionState:
    """Bracket for sBase: terminal wealth is above the bequest at low, at or below it at high."""
    low: float
    high: float
    iterations: int = 0


def solve_sbase(household: Household, retire_age: int, unrestricted: float, restricted: float,
                settings: SolverSettings = SolverSettings()) -> SolveResult:
    """
    Solve sBase given balances already projected to retire_age.

    Always runs the full iteration budget and always returns a value; when even
    zero spending misses the bequest the result converges to 0.

    Args:
        household: Supplies bands, ages, return and bequest
        retire_age: First year of retirement
        unrestricted: Unrestricted balance at retire_age
        restricted: Restricted balance at retire_age
        settings: Iteration budget and bracket ceiling

    Returns:
        SolveResult with sBase (the upper bracket) and the retirement path at that level
    """
    def terminal(s_base: float) -> float:
        return simulate_retirement(household, retire_age, s_base, unrestricted, restricted).terminal_total

    state = BisectionState(low=0.0, high=settings.initial_upper)

    for _ in range(settings.max_expansions):
        if state.high >= settings.max_upper:
            break
        if terminal(state.high) <= household.bequest:
            break
        state.high *= 2
        state.iterations += 1

    for _ in range(settings.bisection_iterations):
        mid = 0.5 * (state.low + state.high)
        if terminal(mid) > household.bequest:
            state.low = mid
        else:
            state.high = mid
        state.iterations += 1

    result = simulate_retirement(household, retire_age, state.high, unrestricted, restricted)
    logger.debug("solved sBase=%.2f at age %s after %d iterations",
                 state.high, retire_age, state.iterations)
    return SolveResult(s_base=state.high, terminal_total=result.terminal_total,
                       path=result.path, iterations=state.iterations)


def solve_sbase_for_age(household: Household, retire_age: int,
                        settings: SolverSettings = SolverSettings(),
                        rounding: RoundingPolicy = CENTS) -> SolveResult:
    """Project balances to retire_age, then solve sBase from there."""
    accumulated = accumulate_until(household, retire_age, rounding)
    return solve_sbase(household, retire_age, accumulated.unrestricted,
                       accumulated.restricted, settings)


# =============================================================================
# Bridge Assessment
# =============================================================================

def _covered_years(household: Household, retire_age: int, s_base: float,
                   unrestricted: float, n_years: int, epsilon: float) -> int:
    """Bridge years the unrestricted pool lasts when spent down with growth."""
    growth = 1 + household.real_return
    balance = unrestricted
    spend = s_base * multipliers_for(retire_age + np.arange(1, n_years + 1), household.bands)
    covered = 0
    for amount in spend:
        balance -= amount
        if balance < -epsilon:
            break
        covered += 1
        balance *= growth
    return covered


def assess_bridge(household: Household, retire_age: int, s_base: float, unrestricted: float,
                  tolerance: BridgeTolerance = BridgeTolerance()) -> BridgeAssessment:
    """
    Compare the unrestricted balance at retirement with the bridge requirement.

    Covered when have + epsilon >= need, epsilon = tolerance.epsilon(s_base).
    Retiring at or after preservation age has no bridge and is always covered.
    """
    n = bridge_years(household, retire_age)
    need = compute_bridge_pv(household, retire_age, s_base)
    epsilon = tolerance.epsilon(s_base)
    covered = n == 0 or unrestricted + epsilon >= need
    return BridgeAssessment(
        years=n,
        need_pv=need,
        have=unrestricted,
        covered=covered,
        epsilon=epsilon,
        covered_years=_covered_years(household, retire_age, s_base, unrestricted, n, epsilon),
    )
