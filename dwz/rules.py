"""
Jurisdiction rule data: contribution caps, guarantee rates, tax brackets and
preservation ages.

Rules are plain configuration. The planning core never looks them up on its
own; callers build a Household (see household.py) or a CapPolicy from them.
"""

import datetime
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Tuple


# =============================================================================
# Rule Types
# =============================================================================

@dataclass(frozen=True)
class TaxBracket:
    """Income up to `up_to` (None = no upper limit) is taxed at `rate`."""
    up_to: Optional[float]
    rate: float


@dataclass(frozen=True)
class PreservationStep:
    """People born before `born_before` reach preservation at `age`."""
    born_before: datetime.date
    age: int


DEFAULT_BRACKETS: Tuple[TaxBracket, ...] = (
    TaxBracket(18_200, 0.0),
    TaxBracket(45_000, 0.16),
    TaxBracket(135_000, 0.30),
    TaxBracket(190_000, 0.37),
    TaxBracket(None, 0.45),
)

DEFAULT_PRESERVATION_TABLE: Tuple[PreservationStep, ...] = (
    PreservationStep(datetime.date(1960, 7, 1), 55),
    PreservationStep(datetime.date(1961, 7, 1), 56),
    PreservationStep(datetime.date(1962, 7, 1), 57),
    PreservationStep(datetime.date(1963, 7, 1), 58),
    PreservationStep(datetime.date(1964, 7, 1), 59),
)


@dataclass(frozen=True)
class JurisdictionRules:
    """Rules for one financial year."""
    financial_year: str = "2025-26"
    concessional_cap: float = 30_000.0      # Per person, per year
    guarantee_rate: float = 0.12            # Employer contribution as a share of salary
    contributions_tax_rate: float = 0.15
    preservation_age: int = 60              # Used when no birth date is known
    medicare_levy: float = 0.02
    medicare_threshold: float = 25_000.0    # Levy applies at or above this income
    max_marginal_rate: float = 0.65
    brackets: Tuple[TaxBracket, ...] = DEFAULT_BRACKETS
    preservation_table: Tuple[PreservationStep, ...] = field(default=DEFAULT_PRESERVATION_TABLE, repr=False)


RULES_BY_YEAR = {
    "2024-25": JurisdictionRules(financial_year="2024-25", guarantee_rate=0.115),
    "2025-26": JurisdictionRules(financial_year="2025-26", guarantee_rate=0.12),
}

DEFAULT_FINANCIAL_YEAR = "2025-26"


# =============================================================================
# Lookup and Construction
# =============================================================================

def financial_year_for(year: int, month: int) -> str:
    """Financial year label ("2025-26") containing the given calendar month; years roll on 1 July."""
    start = year if month >= 7 else year - 1
    return f"{start}-{(start + 1) % 100:02d}"


def rules_for_financial_year(financial_year: Optional[str] = None) -> JurisdictionRules:
    """
    Bundled rules for a financial year.

    Unknown years fall back to the most recent bundled year.
    """
    if financial_year is None:
        financial_year = DEFAULT_FINANCIAL_YEAR
    return RULES_BY_YEAR.get(financial_year, RULES_BY_YEAR[DEFAULT_FINANCIAL_YEAR])


def rules_from_mapping(data: Mapping[str, Any], base: Optional[JurisdictionRules] = None) -> JurisdictionRules:
    """
    Build rules from an opaque mapping (e.g. parsed JSON).

    Keys match the JurisdictionRules field names. Absent keys keep the value
    from `base` (the bundled current-year rules by default); unknown keys are
    ignored. Brackets may be given as [[up_to, rate], ...] with up_to null for
    the top bracket.

    Args:
        data: Mapping of rule values
        base: Rules supplying defaults for absent keys

    Returns:
        JurisdictionRules
    """
    if base is None:
        base = rules_for_financial_year(data.get("financial_year"))

    values = {}
    for f in fields(JurisdictionRules):
        if f.name not in data or f.name in ("brackets", "preservation_table"):
            continue
        values[f.name] = type(getattr(base, f.name))(data[f.name])

    if "brackets" in data:
        values["brackets"] = tuple(
            TaxBracket(None if up_to is None else float(up_to), float(rate))
            for up_to, rate in data["brackets"]
        )

    return replace(base, **values)


# =============================================================================
# Derived Rates
# =============================================================================

def income_tax_rate(income: float, rules: JurisdictionRules) -> float:
    """Bracket rate applying to the last dollar of income."""
    for bracket in rules.brackets:
        if bracket.up_to is None or income <= bracket.up_to:
            return bracket.rate
    return rules.brackets[-1].rate if rules.brackets else 0.0


def marginal_tax_rate(income: float, rules: JurisdictionRules) -> float:
    """
    Marginal tax rate including the Medicare levy.

    The levy applies at or above the threshold. The combined rate is capped
    at rules.max_marginal_rate.
    """
    rate = income_tax_rate(income, rules)
    if income >= rules.medicare_threshold:
        rate += rules.medicare_levy
    return min(rate, rules.max_marginal_rate)


def preservation_age_for(birth_date: Optional[datetime.date], rules: JurisdictionRules) -> int:
    """Preservation age for someone born on `birth_date` (rules default when unknown)."""
    if birth_date is None:
        return rules.preservation_age
    for step in rules.preservation_table:
        if birth_date < step.born_before:
            return step.age
    return rules.preservation_age


def employer_contribution(salary: float, rules: JurisdictionRules) -> float:
    """Gross employer guarantee contribution for a salary."""
    return max(0.0, salary) * rules.guarantee_rate
