"""
PDF Report Page Creation Functions.

This module contains functions that create multi-panel figure pages for PDF reports.
These are higher-level layouts that combine multiple charts into a single page.
"""

import matplotlib.pyplot as plt
from typing import Optional, Tuple, TYPE_CHECKING

from .plan_plots import plot_bridge_check, plot_spending_profile, plot_wealth_path
from .optimizer_plots import plot_contribution_allocation, plot_split_sensitivity

if TYPE_CHECKING:
    from dwz import Household, RetirementPlan, SavingsSplitResult


def create_plan_page(
    plan: 'RetirementPlan',
    household: 'Household',
    figsize: Tuple[int, int] = (14, 10),
) -> plt.Figure:
    """
    Create the plan page: wealth path across the top, spending and bridge below.

    Args:
        plan: RetirementPlan from find_earliest_viable or evaluate_retirement_age
        household: Household the plan was computed for
        figsize: Figure size tuple

    Returns:
        matplotlib Figure
    """
    fig = plt.figure(figsize=figsize)
    gs = fig.add_gridspec(2, 2, hspace=0.35, wspace=0.25)

    plot_wealth_path(plan, household, fig.add_subplot(gs[0, :]))
    plot_spending_profile(plan, household, fig.add_subplot(gs[1, 0]))
    plot_bridge_check(plan, fig.add_subplot(gs[1, 1]))

    limit = 'bridge' if plan.constraint.kind.value == 'bridge' else 'horizon'
    fig.suptitle(f'Retire at {plan.retire_age}: ${plan.s_base:,.0f}/yr base spend '
                 f'({limit}-limited at age {plan.constraint.at_age})',
                 fontsize=16, fontweight='bold')
    return fig


def create_optimizer_page(
    result: 'SavingsSplitResult',
    figsize: Tuple[int, int] = (14, 6),
    title: Optional[str] = None,
) -> plt.Figure:
    """Create the savings-split page: sensitivity chart and per-person allocation."""
    fig, (ax_left, ax_right) = plt.subplots(1, 2, figsize=figsize,
                                            gridspec_kw={'width_ratios': [2, 1]})
    plot_split_sensitivity(result, ax_left)
    plot_contribution_allocation(result, ax_right)

    if title is None:
        title = f'Recommended split: {result.recommended_fraction:.0%} to restricted pool'
    fig.suptitle(title, fontsize=16, fontweight='bold')
    fig.tight_layout()
    return fig
