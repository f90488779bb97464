"""
Savings-split optimizer.

Chooses the share of pre-retirement savings to send to the restricted pool.
The objective is the earliest achievable retirement age (or, with a target
spend, the earliest age sustaining that spend), evaluated by running the full
accumulate -> solve -> search pipeline for each candidate fraction.

The objective is a step function of the fraction (ages are integers) with wide
plateaus, so the search is derivative-free: a coarse grid over
[0, max_fraction], then a few passes of a smaller grid inside a shrinking
window around the best point. Ties go to the higher fraction.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

import numpy as np

from .accumulation import MAX_ELIGIBLE_PEOPLE, cap_headroom, split_savings
from .allocator import allocate_concessional_by_mtr
from .money import CENTS, RoundingPolicy
from .params import (
    BridgeTolerance,
    CapPolicy,
    Household,
    Objective,
    OptimizerSettings,
    SavingsSplitResult,
    SensitivityPoint,
    SolverSettings,
    SplitConstraints,
)
from .search import find_earliest_age_for_plan, find_earliest_viable

logger = logging.getLogger(__name__)

# Sensitivity fractions closer than this are treated as the same point
SENSITIVITY_MIN_GAP = 1e-3


@dataclass
class SearchWindow:
    """Current best candidate and the refinement window around it."""
    best: SensitivityPoint
    width: float
    passes: int = 0


def is_better(candidate: SensitivityPoint, incumbent: SensitivityPoint) -> bool:
    """Earlier age wins; equal ages go to the higher fraction."""
    if candidate.earliest_age != incumbent.earliest_age:
        return candidate.earliest_age < incumbent.earliest_age
    return candidate.fraction > incumbent.fraction


def split_constraints(household: Household, policy: CapPolicy) -> SplitConstraints:
    eligible = min(MAX_ELIGIBLE_PEOPLE, max(0, policy.eligible_people))
    cap_total = cap_headroom(policy.split_policy(0.0), household.employer_contribution)
    return SplitConstraints(
        cap_per_person=policy.cap_per_person,
        eligible_people=eligible,
        cap_total=cap_total,
        contribution_tax_rate=min(1.0, max(0.0, policy.contribution_tax_rate)),
    )


def sensitivity_fractions(best: float, max_fraction: float, settings: OptimizerSettings) -> List[float]:
    """
    Fractions sampled around the optimum for explanation.

    Offsets are clamped to [0, max_fraction] and de-duplicated; if clamping
    leaves fewer than settings.sensitivity_points, midpoints of the widest gaps
    fill the sample back up.
    """
    fractions: List[float] = []
    for offset in settings.sensitivity_offsets:
        f = min(max_fraction, max(0.0, best + offset))
        if all(abs(f - existing) > SENSITIVITY_MIN_GAP for existing in fractions):
            fractions.append(f)
    fractions.sort()

    while 2 <= len(fractions) < settings.sensitivity_points:
        gaps = np.diff(fractions)
        i = int(np.argmax(gaps))
        if gaps[i] <= 2 * SENSITIVITY_MIN_GAP:
            break
        fractions.insert(i + 1, 0.5 * (fractions[i] + fractions[i + 1]))
    return fractions


def optimize_savings_split(household: Household, policy: CapPolicy,
                           target_spend: Optional[float] = None,
                           hi_age_hint: Optional[int] = None,
                           settings: OptimizerSettings = OptimizerSettings(),
                           solver_settings: SolverSettings = SolverSettings(),
                           tolerance: BridgeTolerance = BridgeTolerance(),
                           rounding: RoundingPolicy = CENTS) -> SavingsSplitResult:
    """
    Recommend the restricted-pool share of savings.

    Args:
        household: Household snapshot; its own split policy is replaced per candidate
        policy: Cap, eligibility, tax rates, mode and max fraction to search within
        target_spend: When given, rank fractions by the earliest age sustaining this spend
        hi_age_hint: Upper age bound passed to the target-spend search
        settings: Grid size, refinement passes and sensitivity sample

    Returns:
        SavingsSplitResult. earliest_age is inf when no candidate is achievable.
    """
    objective = Objective.EARLIEST_AGE if target_spend is None else Objective.EARLIEST_AGE_FOR_PLAN
    constraints = split_constraints(household, policy)
    max_fraction = min(1.0, max(0.0, policy.max_fraction))

    if target_spend is not None and (not math.isfinite(target_spend) or target_spend <= 0):
        return SavingsSplitResult(
            recommended_fraction=0.0, earliest_age=math.inf, spend=0.0, cap_binding=False,
            sensitivity=(), constraints=constraints, evaluations=0,
            objective=objective, target_spend=target_spend,
        )

    memo: Dict[float, SensitivityPoint] = {}

    def evaluate(fraction: float) -> SensitivityPoint:
        key = round(float(fraction), settings.memo_decimals)
        if key in memo:
            return memo[key]
        candidate = replace(household, split_policy=policy.split_policy(key))
        if objective is Objective.EARLIEST_AGE:
            plan = find_earliest_viable(candidate, solver_settings, tolerance, rounding)
            point = SensitivityPoint(
                fraction=key,
                earliest_age=plan.retire_age if plan is not None else math.inf,
                spend=plan.s_base if plan is not None else 0.0,
            )
        else:
            found = find_earliest_age_for_plan(candidate, target_spend, hi_age_hint,
                                               solver_settings, tolerance, rounding)
            point = SensitivityPoint(
                fraction=key,
                earliest_age=found.earliest_age if found.earliest_age is not None else math.inf,
                spend=found.at_age_spend if found.at_age_spend is not None else 0.0,
            )
        memo[key] = point
        return point

    # Nothing to split, or no room in the restricted pool: every fraction is equivalent
    if household.annual_savings <= 0 or constraints.cap_total <= 0 or max_fraction <= 0:
        best = evaluate(0.0)
        logger.debug("savings split short-circuited to 0 (savings=%.2f, cap room=%.2f)",
                     household.annual_savings, constraints.cap_total)
        return SavingsSplitResult(
            recommended_fraction=0.0, earliest_age=best.earliest_age, spend=best.spend,
            cap_binding=False, sensitivity=(best,), constraints=constraints,
            evaluations=len(memo), objective=objective, target_spend=target_spend,
            grid=(best,),
        )

    grid = [evaluate(f) for f in np.linspace(0.0, max_fraction, max(2, settings.grid_points))]
    window = SearchWindow(best=grid[0], width=settings.window)
    for point in grid[1:]:
        if is_better(point, window.best):
            window.best = point

    for _ in range(settings.refine_iterations):
        low = max(0.0, window.best.fraction - window.width)
        high = min(max_fraction, window.best.fraction + window.width)
        for f in np.linspace(low, high, max(2, settings.refine_points)):
            point = evaluate(f)
            if is_better(point, window.best):
                window.best = point
        window.width *= settings.shrink
        window.passes += 1
        logger.debug("refinement pass %d: best fraction %.4f, age %s",
                     window.passes, window.best.fraction, window.best.earliest_age)

    best = window.best
    if not math.isfinite(best.earliest_age):
        # No fraction reaches a viable age
        logger.debug("no achievable retirement age for any fraction after %d evaluations", len(memo))
        return SavingsSplitResult(
            recommended_fraction=0.0, earliest_age=math.inf, spend=0.0, cap_binding=False,
            sensitivity=(), constraints=constraints, evaluations=len(memo),
            objective=objective, target_spend=target_spend, grid=tuple(grid),
        )

    sensitivity = tuple(evaluate(f) for f in sensitivity_fractions(best.fraction, max_fraction, settings))

    split = split_savings(household.annual_savings, policy.split_policy(best.fraction),
                          household.employer_contribution, rounding)
    cap_binding = household.annual_savings * best.fraction >= split.cap_headroom - 1e-9

    allocation = None
    if policy.people:
        allocation = allocate_concessional_by_mtr(split.restricted_gross, policy.people)

    logger.debug("recommended fraction %.4f (age %s, spend %.2f) after %d evaluations",
                 best.fraction, best.earliest_age, best.spend, len(memo))
    return SavingsSplitResult(
        recommended_fraction=best.fraction,
        earliest_age=best.earliest_age,
        spend=best.spend,
        cap_binding=cap_binding,
        sensitivity=sensitivity,
        constraints=constraints,
        evaluations=len(memo),
        objective=objective,
        target_spend=target_spend,
        allocation=allocation,
        grid=tuple(grid),
    )


def optimize_savings_split_for_plan(household: Household, policy: CapPolicy, plan_spend: float,
                                    hi_age_hint: Optional[int] = None,
                                    settings: OptimizerSettings = OptimizerSettings(),
                                    solver_settings: SolverSettings = SolverSettings(),
                                    tolerance: BridgeTolerance = BridgeTolerance(),
                                    rounding: RoundingPolicy = CENTS) -> SavingsSplitResult:
    """Recommend the split that reaches plan_spend at the earliest age."""
    return optimize_savings_split(household, policy, target_spend=plan_spend,
                                  hi_age_hint=hi_age_hint, settings=settings,
                                  solver_settings=solver_settings, tolerance=tolerance,
                                  rounding=rounding)
