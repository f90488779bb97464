"""
Centralized style definitions for retirement plan visualization.

This module provides consistent colors, fonts, and styles across all plots.
"""

import matplotlib.pyplot as plt

# Set consistent style for all figures
plt.style.use('seaborn-v0_8-whitegrid')

# Main color scheme (colorblind-friendly: blue-orange palette)
COLORS = {
    # Primary colors (colorblind-safe)
    'blue': '#1A759F',
    'orange': '#E07A5F',
    'teal': '#2A9D8F',
    'amber': '#E9C46A',

    # Pools
    'unrestricted': '#457B9D',  # Outside investments
    'restricted': '#E07A5F',    # Preserved pool
    'total': '#1D3557',         # Combined wealth

    # Phases (used for background shading)
    'accum': '#2A9D8F',
    'bridge': '#E9C46A',
    'retire': '#95a5a6',

    # Markers and outcomes
    'preservation': '#BC6C25',
    'spend': '#0077B6',
    'optimal': '#1A759F',
    'infeasible': '#BC6C25',
}

# Person colors for allocation charts (colorblind-safe)
PERSON_COLORS = ['#1A759F', '#E9C46A', '#2A9D8F', '#BC6C25']


def apply_standard_style():
    """Apply standard matplotlib style settings."""
    plt.rcParams.update({
        'font.size': 12,
        'axes.titlesize': 14,
        'axes.labelsize': 12,
        'legend.fontsize': 10,
        'figure.titlesize': 16,
    })
