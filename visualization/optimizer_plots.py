"""
Savings-split optimizer charts.

Shows how the earliest retirement age and sustainable spend respond to the
restricted-pool fraction, and how the recommended contribution is shared
between household members.
"""

import math

import numpy as np
import matplotlib.pyplot as plt
from typing import TYPE_CHECKING

from .styles import COLORS, PERSON_COLORS
from .helpers import format_currency_axis, format_percent_axis

if TYPE_CHECKING:
    from dwz import SavingsSplitResult


def plot_split_sensitivity(result: 'SavingsSplitResult', ax: plt.Axes) -> None:
    """
    Earliest age (left axis) and spend (right axis) across candidate fractions.

    Uses the coarse grid when available, otherwise the sensitivity sample.
    Fractions with no achievable age are marked along the top of the chart.
    """
    points = sorted(result.grid or result.sensitivity, key=lambda p: p.fraction)
    fractions = np.array([p.fraction for p in points])
    ages = np.array([p.earliest_age for p in points], dtype=float)
    spend = np.array([p.spend for p in points])
    feasible = np.isfinite(ages)

    ax.step(fractions[feasible], ages[feasible], where='mid', color=COLORS['optimal'],
            linewidth=2, label='Earliest age')
    if (~feasible).any():
        top = ages[feasible].max() + 1 if feasible.any() else 1
        ax.scatter(fractions[~feasible], np.full((~feasible).sum(), top),
                   marker='x', color=COLORS['infeasible'], label='Not achievable')
    ax.axvline(x=result.recommended_fraction, color='gray', linestyle='--', alpha=0.7,
               label=f'Recommended {result.recommended_fraction:.0%}')

    ax.set_xlabel('Share of savings to restricted pool')
    ax.set_ylabel('Earliest retirement age')
    format_percent_axis(ax)

    ax2 = ax.twinx()
    ax2.plot(fractions, spend, color=COLORS['spend'], linewidth=1.5, alpha=0.7, label='Spend at that age')
    ax2.set_ylabel('Sustainable spend')
    format_currency_axis(ax2)
    ax2.grid(False)

    title = 'Savings Split Sensitivity'
    if result.cap_binding:
        title += ' (cap binds)'
    if not math.isfinite(result.earliest_age):
        title += ' (not achievable)'
    ax.set_title(title)

    handles, labels = ax.get_legend_handles_labels()
    handles2, labels2 = ax2.get_legend_handles_labels()
    ax.legend(handles + handles2, labels + labels2, loc='upper right', fontsize=8)


def plot_contribution_allocation(result: 'SavingsSplitResult', ax: plt.Axes) -> None:
    """Per-person share of the recommended restricted-pool contribution."""
    if result.allocation is None or not result.allocation.per_person:
        ax.text(0.5, 0.5, 'No per-person breakdown', ha='center', va='center',
                transform=ax.transAxes)
        ax.set_axis_off()
        return

    people = result.allocation.per_person
    labels = [p.person_id for p in people]
    amounts = [p.amount for p in people]
    colors = [PERSON_COLORS[i % len(PERSON_COLORS)] for i in range(len(people))]

    ax.bar(labels, amounts, color=colors, alpha=0.85)
    ax.set_title(f'Contribution Allocation (total ${result.allocation.total_allocated:,.0f})')
    ax.set_ylabel('Gross contribution')
    format_currency_axis(ax)
