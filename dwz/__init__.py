"""
Core module for die-with-zero retirement planning.

This module provides the planning components:
- Parameter and result dataclasses (params.py), rounding (money.py) and
  jurisdiction rules (rules.py)
- Spending schedules (bands.py)
- Projection engines: accumulation and retirement spend-down
  (accumulation.py, decumulation.py)
- Sustainable-spend solver, bridge assessment and constraint classification
  (solver.py, constraints.py)
- Retirement-age search (search.py)
- Savings-split optimizer and concessional-cap allocator (optimizer.py, allocator.py)
"""

import logging

# Constants
from .params import (
    EMPLOYER_CONTRIBUTION_TAX,
    DEFAULT_CONTRIBUTION_TAX,
    AGE_MATCH_TOLERANCE,
)

# Parameter dataclasses
from .params import (
    ContributionMode,
    Pool,
    Phase,
    ConstraintKind,
    Objective,
    SpendingBand,
    ContributionSplitPolicy,
    FutureInflow,
    Household,
    SolverSettings,
    BridgeTolerance,
    OptimizerSettings,
    CapPolicy,
    PersonHeadroom,
    # Result dataclasses
    PathPoint,
    ContributionSplit,
    AccumulationResult,
    DecumulationResult,
    SolveResult,
    BridgeAssessment,
    BindingConstraint,
    RetirementPlan,
    EarliestForPlanResult,
    PersonAllocation,
    AllocationResult,
    SensitivityPoint,
    SplitConstraints,
    SavingsSplitResult,
)

# Rounding
from .money import RoundingPolicy, CENTS, WHOLE_DOLLARS

# Jurisdiction rules
from .rules import (
    TaxBracket,
    PreservationStep,
    JurisdictionRules,
    RULES_BY_YEAR,
    financial_year_for,
    rules_for_financial_year,
    rules_from_mapping,
    income_tax_rate,
    marginal_tax_rate,
    preservation_age_for,
    employer_contribution,
)

# Spending schedules
from .bands import (
    BandSettings,
    band_multiplier_at,
    band_label_at,
    spend_for_year,
    multipliers_for,
    flat_schedule,
    age_banded_schedule,
    normalize_band_settings,
)

# Projection engines
from .accumulation import cap_headroom, split_savings, accumulate_until
from .decumulation import phase_for_year, simulate_retirement

# Solver and classification
from .solver import (
    BisectionState,
    bridge_years,
    discounted_multipliers,
    compute_bridge_pv,
    solve_sbase,
    solve_sbase_for_age,
    assess_bridge,
)
from .constraints import banded_annuity_factor, analyze_binding_constraint

# Search
from .search import (
    evaluate_retirement_age,
    search_ceiling,
    find_earliest_viable,
    find_earliest_age_for_plan,
)

# Allocation and optimization
from .allocator import group_by_marginal_rate, allocate_concessional_by_mtr
from .optimizer import (
    SearchWindow,
    sensitivity_fractions,
    optimize_savings_split,
    optimize_savings_split_for_plan,
)

# Households and validation
from .household import Person, household_from_people, person_headrooms
from .validation import InvalidHouseholdError, household_problems, validate_household

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Constants
    'EMPLOYER_CONTRIBUTION_TAX',
    'DEFAULT_CONTRIBUTION_TAX',
    'AGE_MATCH_TOLERANCE',
    # Params
    'ContributionMode',
    'Pool',
    'Phase',
    'ConstraintKind',
    'Objective',
    'SpendingBand',
    'ContributionSplitPolicy',
    'FutureInflow',
    'Household',
    'SolverSettings',
    'BridgeTolerance',
    'OptimizerSettings',
    'CapPolicy',
    'PersonHeadroom',
    # Results
    'PathPoint',
    'ContributionSplit',
    'AccumulationResult',
    'DecumulationResult',
    'SolveResult',
    'BridgeAssessment',
    'BindingConstraint',
    'RetirementPlan',
    'EarliestForPlanResult',
    'PersonAllocation',
    'AllocationResult',
    'SensitivityPoint',
    'SplitConstraints',
    'SavingsSplitResult',
    # Rounding
    'RoundingPolicy',
    'CENTS',
    'WHOLE_DOLLARS',
    # Rules
    'TaxBracket',
    'PreservationStep',
    'JurisdictionRules',
    'RULES_BY_YEAR',
    'financial_year_for',
    'rules_for_financial_year',
    'rules_from_mapping',
    'income_tax_rate',
    'marginal_tax_rate',
    'preservation_age_for',
    'employer_contribution',
    # Bands
    'BandSettings',
    'band_multiplier_at',
    'band_label_at',
    'spend_for_year',
    'multipliers_for',
    'flat_schedule',
    'age_banded_schedule',
    'normalize_band_settings',
    # Projection
    'cap_headroom',
    'split_savings',
    'accumulate_until',
    'phase_for_year',
    'simulate_retirement',
    # Solver
    'BisectionState',
    'bridge_years',
    'discounted_multipliers',
    'compute_bridge_pv',
    'solve_sbase',
    'solve_sbase_for_age',
    'assess_bridge',
    'banded_annuity_factor',
    'analyze_binding_constraint',
    # Search
    'evaluate_retirement_age',
    'search_ceiling',
    'find_earliest_viable',
    'find_earliest_age_for_plan',
    # Optimization
    'group_by_marginal_rate',
    'allocate_concessional_by_mtr',
    'SearchWindow',
    'sensitivity_fractions',
    'optimize_savings_split',
    'optimize_savings_split_for_plan',
    # Households
    'Person',
    'household_from_people',
    'person_headrooms',
    'InvalidHouseholdError',
    'household_problems',
    'validate_household',
]
