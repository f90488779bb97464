"""
Plot utility functions and helpers for retirement plan visualization.

This module provides common plotting utilities used across visualization modules.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Sequence

from .styles import COLORS


def add_retirement_line(ax: plt.Axes, retire_age: float) -> None:
    """Add a vertical line at retirement."""
    ax.axvline(x=retire_age, color='gray', linestyle='--', alpha=0.7,
               label='Retirement', linewidth=1.5)


def add_preservation_line(ax: plt.Axes, preservation_age: float) -> None:
    """Add a vertical line where the restricted pool unlocks."""
    ax.axvline(x=preservation_age, color=COLORS['preservation'], linestyle=':', alpha=0.8,
               label='Preservation age', linewidth=1.5)


def add_zero_line(ax: plt.Axes, alpha: float = 0.3) -> None:
    """Add a horizontal line at y=0."""
    ax.axhline(y=0, color='gray', linestyle='-', alpha=alpha)


def format_currency_axis(ax: plt.Axes, axis: str = 'y') -> None:
    """Format axis labels as currency in thousands."""
    def currency_formatter(x, pos):
        return f'${x / 1000:,.0f}k'

    if axis == 'y':
        ax.yaxis.set_major_formatter(plt.FuncFormatter(currency_formatter))
    else:
        ax.xaxis.set_major_formatter(plt.FuncFormatter(currency_formatter))


def format_percent_axis(ax: plt.Axes, axis: str = 'x') -> None:
    """Format axis labels as whole percentages of a 0-1 fraction."""
    def percent_formatter(x, pos):
        return f'{x:.0%}'

    if axis == 'y':
        ax.yaxis.set_major_formatter(plt.FuncFormatter(percent_formatter))
    else:
        ax.xaxis.set_major_formatter(plt.FuncFormatter(percent_formatter))


def shade_phases(ax: plt.Axes, ages: np.ndarray, phases: Sequence[str], alpha: float = 0.08) -> None:
    """
    Shade the background of each contiguous run of the same phase.

    Args:
        ax: Matplotlib axes to shade
        ages: End-of-year ages of the path points
        phases: Phase value ('accum', 'bridge', 'retire') per point
        alpha: Shading transparency
    """
    if len(ages) == 0:
        return
    start = 0
    for i in range(1, len(ages) + 1):
        if i == len(ages) or phases[i] != phases[start]:
            # A point at age a covers the year (a - 1, a]
            ax.axvspan(ages[start] - 1, ages[i - 1], color=COLORS.get(phases[start], 'gray'),
                       alpha=alpha, linewidth=0)
            start = i
