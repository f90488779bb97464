"""
Visualization module for die-with-zero retirement planning.

This module holds all matplotlib code for the project, keeping rendering out
of the dwz planning core.

Submodules:
- styles: Color schemes, fonts, and style constants
- helpers: Common plotting utilities
- plan_plots: Wealth path, spending profile and bridge charts for one plan
- optimizer_plots: Savings-split sensitivity and allocation charts
- report_pages: Multi-panel PDF pages
"""

# Import styles and helpers
from .styles import (
    COLORS,
    PERSON_COLORS,
    apply_standard_style,
)

from .helpers import (
    add_retirement_line,
    add_preservation_line,
    add_zero_line,
    format_currency_axis,
    format_percent_axis,
    shade_phases,
)

# Plan charts
from .plan_plots import (
    plot_wealth_path,
    plot_spending_profile,
    plot_bridge_check,
)

# Optimizer charts
from .optimizer_plots import (
    plot_split_sensitivity,
    plot_contribution_allocation,
)

# Report pages
from .report_pages import (
    create_plan_page,
    create_optimizer_page,
)

__all__ = [
    # Styles
    'COLORS',
    'PERSON_COLORS',
    'apply_standard_style',
    # Helpers
    'add_retirement_line',
    'add_preservation_line',
    'add_zero_line',
    'format_currency_axis',
    'format_percent_axis',
    'shade_phases',
    # Plan charts
    'plot_wealth_path',
    'plot_spending_profile',
    'plot_bridge_check',
    # Optimizer charts
    'plot_split_sensitivity',
    'plot_contribution_allocation',
    # Report pages
    'create_plan_page',
    'create_optimizer_page',
]
