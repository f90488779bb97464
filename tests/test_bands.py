"""
Tests for spending-band schedules and the rounding policy.
"""

import numpy as np
import pytest

from dwz import (
    CENTS,
    WHOLE_DOLLARS,
    BandSettings,
    RoundingPolicy,
    SpendingBand,
    age_banded_schedule,
    band_label_at,
    band_multiplier_at,
    flat_schedule,
    multipliers_for,
    normalize_band_settings,
    spend_for_year,
)


@pytest.fixture
def three_bands():
    return (
        SpendingBand(60, 1.10, "go-go"),
        SpendingBand(75, 1.00, "slow-go"),
        SpendingBand(90, 0.85, "no-go"),
    )


def test_band_end_age_is_inclusive(three_bands):
    assert band_multiplier_at(60, three_bands) == 1.10
    assert band_multiplier_at(61, three_bands) == 1.00
    assert band_multiplier_at(75, three_bands) == 1.00
    assert band_multiplier_at(76, three_bands) == 0.85


def test_ages_past_last_band_use_last_multiplier(three_bands):
    assert band_multiplier_at(100, three_bands) == 0.85
    assert band_label_at(100, three_bands) == "no-go"


def test_empty_schedule_is_flat():
    assert band_multiplier_at(70, ()) == 1.0
    assert band_label_at(70, ()) == "flat"
    assert spend_for_year(40_000, 70, ()) == 40_000


def test_vectorized_lookup_matches_scalar(three_bands):
    ages = np.arange(40, 101)
    expected = [band_multiplier_at(a, three_bands) for a in ages]
    np.testing.assert_allclose(multipliers_for(ages, three_bands), expected)
    np.testing.assert_allclose(multipliers_for(ages, ()), np.ones(len(ages)))


def test_flat_schedule():
    bands = flat_schedule(90)
    assert len(bands) == 1
    assert bands[0].end_age == 90
    assert bands[0].multiplier == 1.0


def test_default_schedule_profile():
    bands = age_banded_schedule(90)
    assert [b.label for b in bands] == ["go-go", "slow-go", "no-go"]
    assert [b.multiplier for b in bands] == [1.10, 1.00, 0.85]
    assert [b.end_age for b in bands] == [60, 75, 90]


def test_default_schedule_reaches_life_expectancy():
    bands = age_banded_schedule(70)
    assert bands[-1].end_age > bands[-2].end_age
    assert bands[-1].end_age >= 70


def test_normalize_clamps_multipliers():
    settings = BandSettings(go_go_multiplier=2.0, no_go_multiplier=0.1)
    normalized, warnings = normalize_band_settings(settings, retire_age=55, life_expectancy=90)
    assert normalized.go_go_multiplier == 1.5
    assert normalized.no_go_multiplier == 0.5
    assert normalized.slow_go_multiplier == 1.0
    assert len(warnings) == 2


def test_normalize_repairs_age_order():
    settings = BandSettings(go_go_end=50, slow_go_end=50)
    normalized, warnings = normalize_band_settings(settings, retire_age=55, life_expectancy=90)
    assert normalized.go_go_end == 55
    assert normalized.slow_go_end == 56
    assert warnings


def test_normalize_keeps_slow_go_before_life_expectancy():
    normalized, _ = normalize_band_settings(BandSettings(slow_go_end=95), retire_age=55,
                                            life_expectancy=90)
    assert normalized.go_go_end < normalized.slow_go_end < 90


def test_valid_settings_produce_no_warnings():
    normalized, warnings = normalize_band_settings(BandSettings(), retire_age=55, life_expectancy=90)
    assert warnings == []
    assert normalized == BandSettings()


# =============================================================================
# Rounding
# =============================================================================

def test_rounding_is_half_even():
    assert WHOLE_DOLLARS(2.5) == 2.0
    assert WHOLE_DOLLARS(3.5) == 4.0
    assert CENTS(0.125) == 0.12
    assert CENTS(0.135) == 0.14


def test_rounding_precision_is_configurable():
    assert RoundingPolicy(places=1)(12.25) == 12.2
    assert CENTS(33_333.33 * 0.85) == 28_333.33
