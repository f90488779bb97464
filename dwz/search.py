"""
Retirement-age search.

Runs the whole pipeline (accumulate -> solve -> assess bridge -> classify) for
candidate retirement ages:

- find_earliest_viable: first age whose bridge is covered, or only the pinned
  age when the household forces one
- find_earliest_age_for_plan: earliest age whose sustainable spend meets a
  target, by binary search over ages
"""

import logging
import math
from dataclasses import replace
from typing import Dict, Optional

from .accumulation import accumulate_until
from .constraints import analyze_binding_constraint
from .money import CENTS, RoundingPolicy
from .params import (
    BridgeTolerance,
    EarliestForPlanResult,
    Household,
    RetirementPlan,
    SolverSettings,
)
from .solver import assess_bridge, solve_sbase

logger = logging.getLogger(__name__)

# Slack when comparing a solved spend with a target plan spend
PLAN_SPEND_TOLERANCE = 1e-6


def evaluate_retirement_age(household: Household, retire_age: int,
                            settings: SolverSettings = SolverSettings(),
                            tolerance: BridgeTolerance = BridgeTolerance(),
                            rounding: RoundingPolicy = CENTS) -> RetirementPlan:
    """
    Evaluate retiring at retire_age, viable or not.

    Returns:
        RetirementPlan with sBase, bridge assessment, binding constraint and the
        full accumulation + retirement path
    """
    accumulated = accumulate_until(household, retire_age, rounding)
    solved = solve_sbase(household, retire_age, accumulated.unrestricted,
                         accumulated.restricted, settings)
    bridge = assess_bridge(household, retire_age, solved.s_base,
                           accumulated.unrestricted, tolerance)
    constraint = analyze_binding_constraint(household, retire_age, solved.s_base,
                                            accumulated.unrestricted, accumulated.restricted,
                                            tolerance)
    return RetirementPlan(
        retire_age=retire_age,
        s_base=solved.s_base,
        bridge=bridge,
        constraint=constraint,
        path=accumulated.path + solved.path,
    )


def search_ceiling(household: Household) -> int:
    """Oldest retirement age the unconstrained search considers."""
    return max(household.current_age + 1, household.life_expectancy - 1)


def find_earliest_viable(household: Household,
                         settings: SolverSettings = SolverSettings(),
                         tolerance: BridgeTolerance = BridgeTolerance(),
                         rounding: RoundingPolicy = CENTS) -> Optional[RetirementPlan]:
    """
    Earliest retirement age whose bridge is covered.

    When household.retire_age is set only that age is evaluated. Returns None
    when no age in range is viable.
    """
    if household.retire_age is not None:
        plan = evaluate_retirement_age(household, household.retire_age, settings, tolerance, rounding)
        if not plan.viable:
            logger.debug("forced retirement at %s not viable (need %.2f, have %.2f)",
                         household.retire_age, plan.bridge.need_pv, plan.bridge.have)
            return None
        return plan

    for age in range(household.current_age + 1, search_ceiling(household) + 1):
        plan = evaluate_retirement_age(household, age, settings, tolerance, rounding)
        if plan.viable:
            logger.debug("earliest viable age %s with sBase=%.2f", age, plan.s_base)
            return plan

    logger.debug("no viable retirement age up to %s", search_ceiling(household))
    return None


def find_earliest_age_for_plan(household: Household, plan_spend: float,
                               hi_age_hint: Optional[int] = None,
                               settings: SolverSettings = SolverSettings(),
                               tolerance: BridgeTolerance = BridgeTolerance(),
                               rounding: RoundingPolicy = CENTS) -> EarliestForPlanResult:
    """
    Earliest age at which a viable retirement sustains at least plan_spend.

    Sustainable spend rises with retirement age, so the feasible ages form a
    tail and a binary search finds its start. The hint, when given, bounds the
    search from above; if the hinted age is not feasible the search widens to
    the full ceiling before giving up.

    Args:
        household: Household snapshot (any forced retire_age is ignored)
        plan_spend: Target base spend; non-positive or non-finite values are not searched
        hi_age_hint: Optional upper bound for the search

    Returns:
        EarliestForPlanResult (earliest_age None when no age qualifies)
    """
    if not math.isfinite(plan_spend) or plan_spend <= 0:
        return EarliestForPlanResult(plan=plan_spend, earliest_age=None, at_age_spend=None, evaluations=0)

    cache: Dict[int, Optional[RetirementPlan]] = {}

    def viable_plan(age: int) -> Optional[RetirementPlan]:
        if age not in cache:
            cache[age] = find_earliest_viable(replace(household, retire_age=age),
                                              settings, tolerance, rounding)
        return cache[age]

    def feasible(age: int) -> bool:
        plan = viable_plan(age)
        return plan is not None and plan.s_base + PLAN_SPEND_TOLERANCE >= plan_spend

    low = household.current_age + 1
    ceiling = search_ceiling(household)
    high = ceiling if hi_age_hint is None else min(max(hi_age_hint, low), ceiling)

    if not feasible(high):
        if high == ceiling or not feasible(ceiling):
            return EarliestForPlanResult(plan=plan_spend, earliest_age=None, at_age_spend=None,
                                         evaluations=len(cache))
        low, high = high + 1, ceiling

    while low < high:
        mid = (low + high) // 2
        if feasible(mid):
            high = mid
        else:
            low = mid + 1

    logger.debug("earliest age for plan %.2f is %s (%d evaluations)", plan_spend, high, len(cache))
    return EarliestForPlanResult(plan=plan_spend, earliest_age=high,
                                 at_age_spend=viable_plan(high).s_base, evaluations=len(cache))
