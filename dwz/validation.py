"""
Caller-side input checks.

The planning functions clamp out-of-range rates and amounts but assume the
ages and band schedule make sense. Their behavior on a household that fails
these checks is unspecified; callers should run validate_household first.
"""

from typing import List

from .params import Household


class InvalidHouseholdError(ValueError):
    """Raised when a household cannot be planned for."""

    def __init__(self, problems: List[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


def household_problems(household: Household) -> List[str]:
    """List everything wrong with a household's ages and schedule (empty when valid)."""
    problems = []
    if household.current_age < 0:
        problems.append(f"current age {household.current_age} is negative")
    if household.life_expectancy <= household.current_age:
        problems.append(f"life expectancy {household.life_expectancy} must exceed "
                        f"current age {household.current_age}")
    if household.preservation_age < 0:
        problems.append(f"preservation age {household.preservation_age} is negative")
    if household.retire_age is not None and not (
            household.current_age <= household.retire_age < household.life_expectancy):
        problems.append(f"retirement age {household.retire_age} must lie in "
                        f"[{household.current_age}, {household.life_expectancy})")
    if household.real_return <= -1:
        problems.append(f"real return {household.real_return} must exceed -100%")

    end_ages = [band.end_age for band in household.bands]
    if any(b <= a for a, b in zip(end_ages, end_ages[1:])):
        problems.append(f"band end ages {end_ages} must be strictly increasing")
    if any(band.multiplier < 0 for band in household.bands):
        problems.append("band multipliers must be non-negative")
    return problems


def validate_household(household: Household) -> Household:
    """
    Check a household before planning.

    Returns:
        The household unchanged

    Raises:
        InvalidHouseholdError: listing every problem found
    """
    problems = household_problems(household)
    if problems:
        raise InvalidHouseholdError(problems)
    return household
