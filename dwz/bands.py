"""
Age-band spending schedules.

A schedule is a tuple of SpendingBand ordered by strictly increasing end age.
The multiplier for the year ending at age `a` comes from the first band whose
end age is at or after `a`; ages past the last band use the last band's
multiplier; an empty schedule is flat at 1.0.
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

import numpy as np

from .params import SpendingBand

logger = logging.getLogger(__name__)


# Default go-go / slow-go / no-go profile
DEFAULT_GO_GO_MULTIPLIER = 1.10
DEFAULT_SLOW_GO_MULTIPLIER = 1.00
DEFAULT_NO_GO_MULTIPLIER = 0.85
DEFAULT_GO_GO_END = 60
DEFAULT_SLOW_GO_END = 75

MIN_MULTIPLIER = 0.50
MAX_MULTIPLIER = 1.50


# =============================================================================
# Lookups
# =============================================================================

def band_multiplier_at(age: float, bands: Sequence[SpendingBand]) -> float:
    """Spending multiplier for the year ending at `age`."""
    if not bands:
        return 1.0
    for band in bands:
        if age <= band.end_age:
            return band.multiplier
    return bands[-1].multiplier


def band_label_at(age: float, bands: Sequence[SpendingBand]) -> str:
    if not bands:
        return "flat"
    for band in bands:
        if age <= band.end_age:
            return band.label
    return bands[-1].label


def spend_for_year(s_base: float, age: float, bands: Sequence[SpendingBand]) -> float:
    """Spending for the year ending at `age`."""
    return s_base * band_multiplier_at(age, bands)


def multipliers_for(ages: np.ndarray, bands: Sequence[SpendingBand]) -> np.ndarray:
    """
    Vectorized band_multiplier_at.

    Args:
        ages: End-of-year ages
        bands: Spending schedule

    Returns:
        Array of multipliers, same shape as ages
    """
    ages = np.asarray(ages, dtype=float)
    if not bands:
        return np.ones_like(ages)
    end_ages = np.array([b.end_age for b in bands], dtype=float)
    multipliers = np.array([b.multiplier for b in bands], dtype=float)
    idx = np.searchsorted(end_ages, ages, side='left')
    return multipliers[np.minimum(idx, len(bands) - 1)]


# =============================================================================
# Schedule Construction
# =============================================================================

def flat_schedule(life_expectancy: int) -> Tuple[SpendingBand, ...]:
    """Single band at multiplier 1.0 covering the whole horizon."""
    return (SpendingBand(end_age=life_expectancy, multiplier=1.0, label="flat"),)


@dataclass(frozen=True)
class BandSettings:
    """User-facing go-go / slow-go / no-go settings."""
    go_go_end: int = DEFAULT_GO_GO_END
    slow_go_end: int = DEFAULT_SLOW_GO_END
    go_go_multiplier: float = DEFAULT_GO_GO_MULTIPLIER
    slow_go_multiplier: float = DEFAULT_SLOW_GO_MULTIPLIER
    no_go_multiplier: float = DEFAULT_NO_GO_MULTIPLIER


def normalize_band_settings(settings: BandSettings, retire_age: int,
                            life_expectancy: int) -> Tuple[BandSettings, List[str]]:
    """
    Clamp multipliers and repair band ordering.

    Multipliers are clamped to [0.50, 1.50]. End ages are forced into
    retire_age <= go_go_end < slow_go_end < life_expectancy where the horizon
    leaves room for it.

    Returns:
        (normalized settings, list of human-readable warnings)
    """
    warnings = []

    def clamp_multiplier(name: str, value: float) -> float:
        clamped = min(MAX_MULTIPLIER, max(MIN_MULTIPLIER, value))
        if clamped != value:
            warnings.append(f"{name} multiplier {value:.2f} clamped to {clamped:.2f}")
        return clamped

    go_go = clamp_multiplier("go-go", settings.go_go_multiplier)
    slow_go = clamp_multiplier("slow-go", settings.slow_go_multiplier)
    no_go = clamp_multiplier("no-go", settings.no_go_multiplier)

    go_go_end = settings.go_go_end
    slow_go_end = settings.slow_go_end

    if go_go_end < retire_age:
        warnings.append(f"go-go end {go_go_end} moved to retirement age {retire_age}")
        go_go_end = retire_age
    if slow_go_end <= go_go_end:
        warnings.append(f"slow-go end {slow_go_end} moved after go-go end {go_go_end}")
        slow_go_end = go_go_end + 1
    if slow_go_end >= life_expectancy:
        moved = max(go_go_end + 1, life_expectancy - 1)
        warnings.append(f"slow-go end {slow_go_end} moved before life expectancy {life_expectancy}")
        slow_go_end = moved

    for message in warnings:
        logger.debug("band settings: %s", message)

    normalized = replace(
        settings,
        go_go_end=go_go_end,
        slow_go_end=slow_go_end,
        go_go_multiplier=go_go,
        slow_go_multiplier=slow_go,
        no_go_multiplier=no_go,
    )
    return normalized, warnings


def age_banded_schedule(life_expectancy: int,
                        settings: BandSettings = BandSettings()) -> Tuple[SpendingBand, ...]:
    """
    Three-band go-go / slow-go / no-go schedule.

    The no-go band extends at least to life expectancy. Settings are used as
    given; run them through normalize_band_settings first to clamp them.
    """
    no_go_end = max(life_expectancy, settings.slow_go_end + 1)
    return (
        SpendingBand(end_age=settings.go_go_end, multiplier=settings.go_go_multiplier, label="go-go"),
        SpendingBand(end_age=settings.slow_go_end, multiplier=settings.slow_go_multiplier, label="slow-go"),
        SpendingBand(end_age=no_go_end, multiplier=settings.no_go_multiplier, label="no-go"),
    )
