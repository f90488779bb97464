"""
Household construction from individual members.

The planning core works on one combined Household. These helpers fold one or
two people into that snapshot using jurisdiction rules, and derive each
person's remaining concessional room for the allocator.
"""

import datetime
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .params import (
    ContributionSplitPolicy,
    FutureInflow,
    Household,
    PersonHeadroom,
    SpendingBand,
)
from .rules import (
    JurisdictionRules,
    employer_contribution,
    marginal_tax_rate,
    preservation_age_for,
    rules_for_financial_year,
)


@dataclass(frozen=True)
class Person:
    """One household member."""
    person_id: str
    age: int
    salary: float = 0.0
    unrestricted_balance: float = 0.0
    restricted_balance: float = 0.0
    birth_date: Optional[datetime.date] = None
    preservation_age: Optional[int] = None    # Overrides the birth-date lookup


def person_preservation_age(person: Person, rules: JurisdictionRules) -> int:
    if person.preservation_age is not None:
        return person.preservation_age
    return preservation_age_for(person.birth_date, rules)


def household_from_people(people: Sequence[Person],
                          life_expectancy: int,
                          real_return: float,
                          annual_savings: float = 0.0,
                          bequest: float = 0.0,
                          bands: Tuple[SpendingBand, ...] = (),
                          split_policy: Optional[ContributionSplitPolicy] = None,
                          future_inflows: Tuple[FutureInflow, ...] = (),
                          retire_age: Optional[int] = None,
                          rules: Optional[JurisdictionRules] = None) -> Household:
    """
    Combine household members into one planning snapshot.

    The household's age is the oldest member's age, its preservation age is
    the earliest member's, balances are summed, and the employer contribution
    is each salary times the guarantee rate.

    Args:
        people: One or more members
        life_expectancy: Planning horizon for the household
        real_return: Real annual return on both pools
        annual_savings: Household savings per year before retirement
        bequest: Terminal wealth target
        bands: Spending schedule
        split_policy: Contribution split, if any
        future_inflows: One-off inflows
        retire_age: Forced retirement age, if any
        rules: Jurisdiction rules (current financial year by default)

    Returns:
        Household
    """
    if not people:
        raise ValueError("household_from_people needs at least one person")
    if rules is None:
        rules = rules_for_financial_year()

    return Household(
        current_age=max(p.age for p in people),
        preservation_age=min(person_preservation_age(p, rules) for p in people),
        life_expectancy=life_expectancy,
        unrestricted_balance=sum(p.unrestricted_balance for p in people),
        restricted_balance=sum(p.restricted_balance for p in people),
        real_return=real_return,
        annual_savings=annual_savings,
        bequest=bequest,
        retire_age=retire_age,
        bands=bands,
        split_policy=split_policy,
        employer_contribution=sum(employer_contribution(p.salary, rules) for p in people),
        future_inflows=future_inflows,
    )


def person_headrooms(people: Sequence[Person],
                     rules: Optional[JurisdictionRules] = None) -> Tuple[PersonHeadroom, ...]:
    """Concessional cap left after employer contributions, with each person's marginal rate."""
    if rules is None:
        rules = rules_for_financial_year()
    return tuple(
        PersonHeadroom(
            person_id=p.person_id,
            headroom=max(0.0, rules.concessional_cap - employer_contribution(p.salary, rules)),
            marginal_rate=marginal_tax_rate(p.salary, rules),
        )
        for p in people
    )
