"""
Pre-retirement accumulation.

Projects both pools forward one year at a time. Each year applies, in order:
employer contributions, the savings split, any inflows landing at that age,
then real growth on both pools.
"""

import logging
from typing import List, Optional

from .money import CENTS, RoundingPolicy
from .params import (
    AGE_MATCH_TOLERANCE,
    EMPLOYER_CONTRIBUTION_TAX,
    AccumulationResult,
    ContributionMode,
    ContributionSplit,
    ContributionSplitPolicy,
    Household,
    PathPoint,
    Phase,
    Pool,
)

logger = logging.getLogger(__name__)

MAX_ELIGIBLE_PEOPLE = 2


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def cap_headroom(policy: ContributionSplitPolicy, employer_gross: float) -> float:
    """Restricted-pool room left after employer contributions for the year."""
    eligible = _clamp(policy.eligible_people, 0, MAX_ELIGIBLE_PEOPLE)
    return max(0.0, policy.cap_per_person * eligible - max(0.0, employer_gross))


def split_savings(savings: float, policy: Optional[ContributionSplitPolicy],
                  employer_gross: float = 0.0,
                  rounding: RoundingPolicy = CENTS) -> ContributionSplit:
    """
    Split one year's savings between the pools.

    The restricted leg is the desired fraction of savings, limited by the cap
    headroom left after employer contributions. In GROSS_DEFERRAL mode both
    legs are taxed (contribution tax and outside tax). In NET_FIXED mode only
    the restricted leg is taxed and the rest of savings passes through as is.
    Without a policy everything goes to the unrestricted pool.

    Args:
        savings: Annual savings (no-op when <= 0)
        policy: Split policy, or None
        employer_gross: Employer contributions for the year, gross
        rounding: Applied to the taxed legs

    Returns:
        ContributionSplit with gross and net amounts per pool
    """
    if savings <= 0:
        headroom = cap_headroom(policy, employer_gross) if policy else 0.0
        return ContributionSplit(0.0, 0.0, 0.0, 0.0, headroom)

    if policy is None:
        return ContributionSplit(0.0, savings, 0.0, savings, 0.0)

    fraction = _clamp(policy.restricted_fraction, 0.0, 1.0)
    contribution_tax = _clamp(policy.contribution_tax_rate, 0.0, 1.0)
    outside_tax = _clamp(policy.outside_tax_rate, 0.0, 1.0)

    headroom = cap_headroom(policy, employer_gross)
    restricted_gross = min(savings * fraction, headroom)
    restricted_net = rounding(restricted_gross * (1 - contribution_tax))

    if policy.mode is ContributionMode.GROSS_DEFERRAL:
        unrestricted_gross = max(0.0, savings - restricted_gross)
        unrestricted_net = rounding(unrestricted_gross * (1 - outside_tax))
    else:
        unrestricted_gross = savings - restricted_gross
        unrestricted_net = unrestricted_gross

    return ContributionSplit(
        restricted_gross=restricted_gross,
        unrestricted_gross=unrestricted_gross,
        restricted_net=restricted_net,
        unrestricted_net=unrestricted_net,
        cap_headroom=headroom,
    )


def accumulate_until(household: Household, target_age: int,
                     rounding: RoundingPolicy = CENTS) -> AccumulationResult:
    """
    Project both pools from the household's current age to target_age.

    Each recorded point holds the balances at the end of a year, tagged with
    the age reached. When target_age is at or below the current age the
    balances are returned unchanged with an empty path.
    """
    unrestricted = household.unrestricted_balance
    restricted = household.restricted_balance
    employer_gross = max(0.0, household.employer_contribution)
    growth = 1 + household.real_return
    path: List[PathPoint] = []

    age = household.current_age
    while age < target_age:
        if employer_gross > 0:
            restricted += rounding(employer_gross * (1 - EMPLOYER_CONTRIBUTION_TAX))

        split = split_savings(household.annual_savings, household.split_policy,
                              employer_gross, rounding)
        unrestricted += split.unrestricted_net
        restricted += split.restricted_net

        for inflow in household.future_inflows:
            if abs(age - inflow.age) < AGE_MATCH_TOLERANCE and inflow.amount > 0:
                if inflow.destination is Pool.RESTRICTED:
                    restricted += inflow.amount
                else:
                    unrestricted += inflow.amount

        unrestricted *= growth
        restricted *= growth
        age += 1
        path.append(PathPoint(age, unrestricted, restricted, unrestricted + restricted,
                              Phase.ACCUMULATION))

    logger.debug("accumulated to age %s: unrestricted=%.2f restricted=%.2f",
                 age, unrestricted, restricted)
    return AccumulationResult(age=age, unrestricted=unrestricted, restricted=restricted,
                              path=tuple(path))
