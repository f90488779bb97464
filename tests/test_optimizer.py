"""
Tests for the savings-split optimizer.

Uses a small grid and a short horizon to keep the full pipeline cheap.
"""

import math
from dataclasses import replace

import pytest

from dwz import (
    CapPolicy,
    ContributionMode,
    Household,
    Objective,
    OptimizerSettings,
    PersonHeadroom,
    SensitivityPoint,
    cap_headroom,
    find_earliest_viable,
    flat_schedule,
    optimize_savings_split,
    optimize_savings_split_for_plan,
    sensitivity_fractions,
)
from dwz.optimizer import is_better, split_constraints


FAST = OptimizerSettings(grid_points=6, refine_iterations=1, refine_points=3)


@pytest.fixture(scope="module")
def household():
    return Household(
        current_age=50,
        preservation_age=60,
        life_expectancy=75,
        unrestricted_balance=50_000,
        restricted_balance=200_000,
        real_return=0.02,
        annual_savings=40_000,
        bands=flat_schedule(75),
    )


@pytest.fixture(scope="module")
def policy():
    return CapPolicy(cap_per_person=30_000, eligible_people=1, mode=ContributionMode.NET_FIXED)


@pytest.fixture(scope="module")
def result(household, policy):
    return optimize_savings_split(household, policy, settings=FAST)


# =============================================================================
# Ranking and sampling
# =============================================================================

def test_earlier_age_beats_higher_fraction():
    assert is_better(SensitivityPoint(0.2, 55, 0), SensitivityPoint(0.8, 56, 0))
    assert not is_better(SensitivityPoint(0.8, 56, 0), SensitivityPoint(0.2, 55, 0))


def test_ties_go_to_higher_fraction():
    assert is_better(SensitivityPoint(0.6, 55, 0), SensitivityPoint(0.3, 55, 0))
    assert is_better(SensitivityPoint(0.6, math.inf, 0), SensitivityPoint(0.3, math.inf, 0))
    assert not is_better(SensitivityPoint(0.3, 55, 0), SensitivityPoint(0.6, 55, 0))


def test_sensitivity_sample_around_interior_optimum():
    fractions = sensitivity_fractions(0.5, 1.0, OptimizerSettings())
    assert fractions == pytest.approx([0.4, 0.45, 0.5, 0.55, 0.6])


def test_sensitivity_sample_filled_at_boundary():
    fractions = sensitivity_fractions(0.0, 1.0, OptimizerSettings())
    assert len(fractions) == 5
    assert fractions[0] == 0.0
    assert fractions[-1] == pytest.approx(0.10)
    assert fractions == sorted(fractions)


def test_sensitivity_sample_with_no_room():
    assert sensitivity_fractions(0.0, 0.0, OptimizerSettings()) == [0.0]


# =============================================================================
# Optimizer
# =============================================================================

def test_recommended_fraction_is_the_best_grid_point(result):
    ages = [p.earliest_age for p in result.grid]
    assert result.earliest_age == min(ages)
    assert 0.0 <= result.recommended_fraction <= 1.0
    assert result.objective is Objective.EARLIEST_AGE
    assert result.achievable


def test_recommended_outcome_matches_pipeline(household, policy, result):
    planned = replace(household, split_policy=policy.split_policy(result.recommended_fraction))
    plan = find_earliest_viable(planned)
    assert plan.retire_age == result.earliest_age
    assert plan.s_base == pytest.approx(result.spend)


def test_no_higher_fraction_reaches_the_same_age(result):
    tied = [p for p in result.grid if p.earliest_age == result.earliest_age]
    assert result.recommended_fraction >= max(p.fraction for p in tied)


def test_sensitivity_sample_is_bounded(result):
    fractions = [p.fraction for p in result.sensitivity]
    assert 1 <= len(fractions) <= 5
    assert fractions == sorted(fractions)
    assert result.recommended_fraction in fractions


def test_evaluations_are_memoised(result):
    upper = FAST.grid_points + FAST.refine_iterations * FAST.refine_points + FAST.sensitivity_points
    assert result.evaluations <= upper


def test_constraints_reported(result):
    assert result.constraints.cap_total == 30_000
    assert result.constraints.eligible_people == 1


def test_cap_binding_flag(household, policy):
    # 40k savings: any fraction at or above 75% fills the 30k cap
    settings = OptimizerSettings(grid_points=2, refine_iterations=0)
    full = optimize_savings_split(household, replace(policy, max_fraction=1.0), settings=settings)
    if full.recommended_fraction >= 0.75:
        assert full.cap_binding
    small = optimize_savings_split(household, replace(policy, max_fraction=0.5), settings=settings)
    assert small.recommended_fraction <= 0.5
    assert not small.cap_binding


def test_zero_savings_short_circuits(household, policy):
    result = optimize_savings_split(replace(household, annual_savings=0.0), policy, settings=FAST)
    assert result.recommended_fraction == 0.0
    assert result.evaluations == 1
    assert not result.cap_binding


def test_employer_contributions_exhausting_cap(household, policy):
    result = optimize_savings_split(replace(household, employer_contribution=35_000), policy,
                                    settings=FAST)
    assert result.recommended_fraction == 0.0
    assert result.constraints.cap_total == 0
    assert not result.cap_binding


def test_employer_contributions_reduce_cap_total(household, policy):
    result = optimize_savings_split(replace(household, employer_contribution=12_000), policy,
                                    settings=FAST)
    assert result.constraints.cap_total == pytest.approx(18_000)


def test_cap_total_matches_projector_headroom(household, policy):
    for eligible in (0, 1, 1.5, 3):
        capped = replace(policy, eligible_people=eligible)
        constraints = split_constraints(replace(household, employer_contribution=5_000), capped)
        assert constraints.cap_total == pytest.approx(cap_headroom(capped.split_policy(0.0), 5_000)), (
            f"cap_total disagrees with projector headroom for {eligible} eligible people"
        )


def test_nothing_achievable_recommends_zero(policy):
    stuck = Household(current_age=50, preservation_age=95, life_expectancy=90,
                      restricted_balance=700_000, real_return=0.0, annual_savings=20_000)
    result = optimize_savings_split(stuck, policy, settings=FAST)
    assert not result.achievable
    assert result.recommended_fraction == 0.0
    assert result.sensitivity == ()
    assert not result.cap_binding
    assert result.allocation is None

    planned = optimize_savings_split_for_plan(stuck, policy, 10_000, settings=FAST)
    assert planned.recommended_fraction == 0.0
    assert planned.sensitivity == ()


def test_max_fraction_respected(household, policy):
    result = optimize_savings_split(household, replace(policy, max_fraction=0.3), settings=FAST)
    assert result.recommended_fraction <= 0.3
    assert all(p.fraction <= 0.3 for p in result.sensitivity)


def test_allocation_of_recommended_contribution(household, policy):
    people = (PersonHeadroom("p1", 20_000, 0.47), PersonHeadroom("p2", 20_000, 0.345))
    result = optimize_savings_split(household, replace(policy, eligible_people=2, people=people),
                                    settings=FAST)
    contribution = min(household.annual_savings * result.recommended_fraction, 60_000)
    assert result.allocation.total_allocated == pytest.approx(min(contribution, 40_000), abs=1)
    assert result.allocation.amount_for("p1") >= result.allocation.amount_for("p2")


def test_optimizer_is_deterministic(household, policy, result):
    assert optimize_savings_split(household, policy, settings=FAST) == result


# =============================================================================
# Plan-spend objective
# =============================================================================

@pytest.mark.parametrize("plan_spend", [0.0, -5.0, math.nan])
def test_invalid_plan_spend(household, policy, plan_spend):
    result = optimize_savings_split_for_plan(household, policy, plan_spend, settings=FAST)
    assert result.recommended_fraction == 0.0
    assert math.isinf(result.earliest_age)
    assert result.evaluations == 0


def test_plan_spend_objective(household, policy, result):
    target = 0.9 * result.spend
    planned = optimize_savings_split_for_plan(household, policy, target, settings=FAST)
    assert planned.objective is Objective.EARLIEST_AGE_FOR_PLAN
    assert planned.achievable
    assert planned.spend + 1e-6 >= target
    assert planned.earliest_age <= max(p.earliest_age for p in planned.grid)


def test_unreachable_plan_spend(household, policy):
    planned = optimize_savings_split_for_plan(household, policy, 10_000_000, settings=FAST)
    assert not planned.achievable
