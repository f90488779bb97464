"""
Concessional-cap allocation across household members.

A restricted-pool contribution saves the most tax when it comes from the
highest marginal-tax-rate earner, so the allocator fills headroom in tiers of
descending marginal rate. Members whose rates are within MTR_TIER_TOLERANCE
share a tier and split its amount pro-rata by headroom.
"""

import logging
import math
from typing import List, Sequence

from .money import WHOLE_DOLLARS, RoundingPolicy
from .params import AllocationResult, PersonAllocation, PersonHeadroom

logger = logging.getLogger(__name__)

MTR_TIER_TOLERANCE = 1e-4


def _tier_positions(people: Sequence[PersonHeadroom]) -> List[List[int]]:
    """Input positions grouped into marginal-rate tiers, highest rate first."""
    ordered = sorted(range(len(people)),
                     key=lambda i: (-people[i].marginal_rate, people[i].person_id, i))
    tiers: List[List[int]] = []
    for i in ordered:
        if tiers and abs(people[tiers[-1][0]].marginal_rate - people[i].marginal_rate) <= MTR_TIER_TOLERANCE:
            tiers[-1].append(i)
        else:
            tiers.append([i])
    return tiers


def group_by_marginal_rate(people: Sequence[PersonHeadroom]) -> List[List[PersonHeadroom]]:
    """Tiers of people with (near-)equal marginal rates, highest rate first."""
    return [[people[i] for i in tier] for tier in _tier_positions(people)]


def _round_preserving_total(exact: List[float], headroom: List[float],
                            priority: List[int], rounding: RoundingPolicy) -> List[float]:
    """
    Round each amount down to the rounding step, then hand the leftover steps
    to the largest remainders so the parts add up to the rounded total.
    """
    step = 10.0 ** -rounding.places
    floors = [math.floor(amount / step + 1e-9) * step for amount in exact]
    target = rounding(sum(exact))
    leftover = int(round((target - sum(floors)) / step))

    rank = {i: r for r, i in enumerate(priority)}
    by_remainder = sorted(range(len(exact)), key=lambda i: (-(exact[i] - floors[i]), rank[i]))
    for i in by_remainder:
        if leftover <= 0:
            break
        if floors[i] + step <= headroom[i] + 1e-9:
            floors[i] += step
            leftover -= 1
    return [rounding(amount) for amount in floors]


def allocate_concessional_by_mtr(total: float, people: Sequence[PersonHeadroom],
                                 rounding: RoundingPolicy = WHOLE_DOLLARS) -> AllocationResult:
    """
    Allocate a restricted-pool contribution across people by descending marginal rate.

    People are tracked by position, so repeated person ids are allocated separately.

    Args:
        total: Amount to allocate (non-positive or non-finite allocates nothing)
        people: Headroom and marginal rate per person; negative headroom counts as zero
        rounding: Per-person amounts are rounded to this precision

    Returns:
        AllocationResult in the input order of people. The total allocated is
        min(total, sum of headroom), and nobody receives more than their headroom.
    """
    headroom = [max(0.0, p.headroom) for p in people]
    requested = total if math.isfinite(total) and total > 0 else 0.0
    remaining = min(requested, sum(headroom))

    exact = [0.0] * len(people)
    priority: List[int] = []
    for tier in _tier_positions(people):
        priority.extend(tier)
        tier_room = sum(headroom[i] for i in tier)
        give = min(remaining, tier_room)
        if give <= 0:
            continue
        for i in tier:
            exact[i] = give * headroom[i] / tier_room
        remaining -= give

    amounts = _round_preserving_total(exact, headroom, priority, rounding) if exact else []
    per_person = tuple(PersonAllocation(p.person_id, amount) for p, amount in zip(people, amounts))
    allocated = sum(a.amount for a in per_person)
    logger.debug("allocated %.0f of %.0f requested across %d people", allocated, requested, len(people))
    return AllocationResult(per_person=per_person, total_allocated=allocated)
