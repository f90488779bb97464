"""
Tests for the decumulation simulator, sustainable-spend solver and bridge assessment.
"""

import numpy as np
import pytest

from dwz import (
    BridgeTolerance,
    Household,
    Phase,
    SolverSettings,
    SpendingBand,
    assess_bridge,
    compute_bridge_pv,
    simulate_retirement,
    solve_sbase,
    solve_sbase_for_age,
)


# =============================================================================
# Decumulation
# =============================================================================

def test_bridge_years_draw_only_unrestricted():
    household = Household(current_age=40, preservation_age=45, life_expectancy=50, real_return=0.0)
    result = simulate_retirement(household, 40, 10_000, unrestricted=100_000, restricted=100_000)

    phases = [p.phase for p in result.path]
    assert phases == [Phase.BRIDGE] * 5 + [Phase.RETIREMENT] * 5
    assert result.path[4].unrestricted == pytest.approx(50_000)
    assert result.path[4].restricted == pytest.approx(100_000)
    # After preservation the unrestricted pool is drawn first
    assert result.path[-1].unrestricted == pytest.approx(0)
    assert result.path[-1].restricted == pytest.approx(100_000)
    assert result.terminal_total == pytest.approx(100_000)


def test_restricted_pool_covers_remainder_after_preservation():
    household = Household(current_age=60, preservation_age=60, life_expectancy=64, real_return=0.0)
    result = simulate_retirement(household, 60, 10_000, unrestricted=15_000, restricted=50_000)
    assert result.path[0].unrestricted == pytest.approx(5_000)
    assert result.path[1].unrestricted == pytest.approx(0)
    assert result.path[1].restricted == pytest.approx(45_000)
    assert result.terminal_total == pytest.approx(25_000)


def test_unaffordable_bridge_goes_negative():
    household = Household(current_age=40, preservation_age=45, life_expectancy=50, real_return=0.0)
    result = simulate_retirement(household, 40, 10_000, unrestricted=20_000, restricted=100_000)
    assert result.ran_out_in_bridge
    assert result.terminal_total == pytest.approx(20_000)


def test_band_multiplier_applies_to_year_end_age():
    bands = (SpendingBand(61, 2.0), SpendingBand(70, 1.0))
    household = Household(current_age=60, preservation_age=60, life_expectancy=63,
                          real_return=0.0, bands=bands)
    result = simulate_retirement(household, 60, 1_000, unrestricted=10_000, restricted=0)
    assert result.path[0].total == pytest.approx(8_000)
    assert result.path[1].total == pytest.approx(7_000)
    assert result.path[2].total == pytest.approx(6_000)


# =============================================================================
# Solver
# =============================================================================

def test_zero_return_is_simple_division():
    """$100k over 10 years at zero real return sustains $10k a year."""
    household = Household(current_age=60, preservation_age=60, life_expectancy=70,
                          unrestricted_balance=100_000, real_return=0.0)
    result = solve_sbase_for_age(household, 60)
    assert result.s_base == pytest.approx(10_000, rel=1e-8)
    assert result.terminal_total == pytest.approx(0, abs=1e-4)
    assert len(result.path) == 10


def test_bequest_is_left_at_life_expectancy():
    household = Household(current_age=60, preservation_age=60, life_expectancy=70,
                          unrestricted_balance=100_000, real_return=0.0, bequest=20_000)
    result = solve_sbase_for_age(household, 60)
    assert result.s_base == pytest.approx(8_000, rel=1e-8)
    assert result.terminal_total == pytest.approx(20_000, abs=1e-4)


def test_positive_return_matches_annuity_due():
    """Spending is withdrawn at the start of each year before growth."""
    r, n, wealth = 0.04, 20, 500_000
    household = Household(current_age=65, preservation_age=60, life_expectancy=65 + n,
                          unrestricted_balance=wealth, real_return=r)
    annuity_due = sum((1 + r) ** -k for k in range(n))
    result = solve_sbase_for_age(household, 65)
    assert result.s_base == pytest.approx(wealth / annuity_due, rel=1e-8)


def test_solver_handles_zero_wealth():
    household = Household(current_age=60, preservation_age=60, life_expectancy=70)
    result = solve_sbase_for_age(household, 60)
    assert result.s_base == pytest.approx(0, abs=1e-6)


def test_solver_runs_fixed_budget():
    household = Household(current_age=60, preservation_age=60, life_expectancy=70,
                          unrestricted_balance=100_000, real_return=0.0)
    settings = SolverSettings(bisection_iterations=10)
    coarse = solve_sbase(household, 60, 100_000, 0.0, settings)
    fine = solve_sbase(household, 60, 100_000, 0.0)
    assert abs(fine.s_base - 10_000) < abs(coarse.s_base - 10_000) + 1e-12
    assert coarse.s_base >= 10_000 - 1e-9


def test_upper_bracket_respects_ceiling():
    household = Household(current_age=60, preservation_age=60, life_expectancy=61,
                          unrestricted_balance=1e9, real_return=0.0)
    result = solve_sbase_for_age(household, 60, SolverSettings(max_upper=1_000.0))
    assert result.s_base <= 1_024.0


def test_sustainable_spend_rises_with_retirement_age():
    household = Household(current_age=45, preservation_age=60, life_expectancy=90,
                          unrestricted_balance=200_000, restricted_balance=300_000,
                          real_return=0.03, annual_savings=30_000)
    spends = [solve_sbase_for_age(household, age).s_base for age in range(46, 70, 3)]
    assert all(b >= a for a, b in zip(spends, spends[1:])), (
        f"Expected non-decreasing spend by retirement age, got {np.round(spends, 2)}"
    )


def test_sustainable_spend_falls_with_longer_horizon():
    spends = []
    for life_expectancy in (80, 85, 90, 95):
        household = Household(current_age=65, preservation_age=60, life_expectancy=life_expectancy,
                              unrestricted_balance=400_000, restricted_balance=400_000,
                              real_return=0.02)
        spends.append(solve_sbase_for_age(household, 65).s_base)
    assert all(b <= a for a, b in zip(spends, spends[1:]))


def test_doubling_wealth_doubles_spend():
    base = Household(current_age=50, preservation_age=60, life_expectancy=90,
                     unrestricted_balance=150_000, restricted_balance=250_000,
                     real_return=0.035, annual_savings=20_000)
    doubled = Household(current_age=50, preservation_age=60, life_expectancy=90,
                        unrestricted_balance=300_000, restricted_balance=500_000,
                        real_return=0.035, annual_savings=40_000)
    single = solve_sbase_for_age(base, 58).s_base
    double = solve_sbase_for_age(doubled, 58).s_base
    assert double == pytest.approx(2 * single, rel=1e-6)


def test_solver_is_deterministic():
    household = Household(current_age=50, unrestricted_balance=123_456, restricted_balance=654_321,
                          real_return=0.031, annual_savings=12_345)
    assert solve_sbase_for_age(household, 57) == solve_sbase_for_age(household, 57)


# =============================================================================
# Bridge assessment
# =============================================================================

@pytest.fixture
def bridge_household():
    return Household(current_age=50, preservation_age=60, life_expectancy=90, real_return=0.0)


def test_bridge_pv_at_zero_return(bridge_household):
    assert compute_bridge_pv(bridge_household, 55, 10_000) == pytest.approx(50_000)


def test_bridge_pv_discounts_from_retirement():
    household = Household(preservation_age=60, life_expectancy=90, real_return=0.05)
    expected = 10_000 * (1 + 1 / 1.05)
    assert compute_bridge_pv(household, 58, 10_000) == pytest.approx(expected)


def test_bridge_covered_within_epsilon(bridge_household):
    bridge = assess_bridge(bridge_household, 55, 10_000, unrestricted=50_000 - 0.5)
    assert bridge.covered
    assert bridge.epsilon == pytest.approx(20.0)


def test_bridge_short_beyond_epsilon(bridge_household):
    bridge = assess_bridge(bridge_household, 55, 10_000, unrestricted=49_900)
    assert not bridge.covered
    assert bridge.years == 5
    assert bridge.need_pv == pytest.approx(50_000)
    assert bridge.shortfall == pytest.approx(100)


def test_bridge_epsilon_is_tunable(bridge_household):
    tolerance = BridgeTolerance(floor=500.0, fraction=0.0)
    assert assess_bridge(bridge_household, 55, 10_000, 49_600, tolerance).covered


def test_no_bridge_at_or_after_preservation(bridge_household):
    bridge = assess_bridge(bridge_household, 60, 50_000, unrestricted=0.0)
    assert bridge.years == 0
    assert bridge.need_pv == 0
    assert bridge.covered


def test_covered_years_counts_funded_bridge_years(bridge_household):
    bridge = assess_bridge(bridge_household, 55, 10_000, unrestricted=25_000)
    assert bridge.covered_years == 2
