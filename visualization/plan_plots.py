"""
Retirement plan charts.

This module provides plotting functions for a single evaluated retirement age:
the wealth path of both pools, the spending profile and the bridge check.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import TYPE_CHECKING

from dwz import multipliers_for

from .styles import COLORS
from .helpers import (
    add_preservation_line,
    add_retirement_line,
    add_zero_line,
    format_currency_axis,
    shade_phases,
)

if TYPE_CHECKING:
    from dwz import Household, RetirementPlan


def plot_wealth_path(plan: 'RetirementPlan', household: 'Household', ax: plt.Axes) -> None:
    """Unrestricted, restricted and total balances by age, shaded by phase."""
    ages = plan.ages
    shade_phases(ax, ages, [p.phase.value for p in plan.path])

    ax.plot(ages, plan.unrestricted, color=COLORS['unrestricted'], linewidth=2, label='Unrestricted')
    ax.plot(ages, plan.restricted, color=COLORS['restricted'], linewidth=2, label='Restricted')
    ax.plot(ages, plan.totals, color=COLORS['total'], linewidth=2.5, linestyle='--', label='Total')

    add_retirement_line(ax, plan.retire_age)
    if plan.retire_age < household.preservation_age < household.life_expectancy:
        add_preservation_line(ax, household.preservation_age)
    if household.bequest > 0:
        ax.axhline(y=household.bequest, color='gray', linestyle=':', alpha=0.7, label='Bequest')
    add_zero_line(ax)

    ax.set_xlabel('Age')
    ax.set_ylabel('Balance (real $)')
    ax.set_title(f'Wealth Path (retire at {plan.retire_age})')
    format_currency_axis(ax)
    ax.legend(loc='upper right', fontsize=8)


def plot_spending_profile(plan: 'RetirementPlan', household: 'Household', ax: plt.Axes) -> None:
    """Annual spending by age in retirement, stepping with the band multipliers."""
    ages = np.arange(plan.retire_age + 1, household.life_expectancy + 1)
    spend = plan.s_base * multipliers_for(ages, household.bands)

    ax.step(ages, spend, where='pre', color=COLORS['spend'], linewidth=2, label='Spending')
    ax.axhline(y=plan.s_base, color='gray', linestyle='--', alpha=0.6,
               label=f'Base ${plan.s_base:,.0f}')
    if plan.retire_age < household.preservation_age < household.life_expectancy:
        add_preservation_line(ax, household.preservation_age)

    ax.set_xlabel('Age')
    ax.set_ylabel('Spending (real $ / yr)')
    ax.set_title('Sustainable Spending by Age')
    format_currency_axis(ax)
    ax.set_ylim(bottom=0)
    ax.legend(loc='upper right', fontsize=8)


def plot_bridge_check(plan: 'RetirementPlan', ax: plt.Axes) -> None:
    """Bridge requirement against unrestricted assets at retirement."""
    bridge = plan.bridge
    labels = ['Need (PV)', 'Have']
    values = [bridge.need_pv, bridge.have]
    colors = [COLORS['bridge'], COLORS['unrestricted']]

    bars = ax.bar(labels, values, color=colors, alpha=0.85)
    for bar, value in zip(bars, values):
        ax.annotate(f'${value:,.0f}', (bar.get_x() + bar.get_width() / 2, bar.get_height()),
                    ha='center', va='bottom', fontsize=9)

    status = 'covered' if bridge.covered else f'short ${bridge.shortfall:,.0f}'
    ax.set_title(f'Bridge: {bridge.years} yrs, {status}')
    ax.set_ylabel('Real $')
    format_currency_axis(ax)
