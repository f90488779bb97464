"""
Core parameter and result dataclasses for die-with-zero retirement planning.

This module holds every value type passed between the planning components:
household snapshots, spending bands, contribution policies, path points and
the results produced by the solver, search and optimizer. All monetary amounts
are real (today's) dollars per year.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np


# =============================================================================
# Constants
# =============================================================================

# Contributions tax applied to employer (guarantee) contributions
EMPLOYER_CONTRIBUTION_TAX = 0.15

# Default contributions tax for salary-sacrificed savings
DEFAULT_CONTRIBUTION_TAX = 0.15

# Ages are compared with this tolerance when matching inflow triggers
AGE_MATCH_TOLERANCE = 1e-9


# =============================================================================
# Enumerations
# =============================================================================

class ContributionMode(Enum):
    """How pre-retirement savings are taxed when split between pools."""
    GROSS_DEFERRAL = "gross_deferral"  # Savings are pre-tax; both legs taxed
    NET_FIXED = "net_fixed"            # Only the restricted leg is taxed


class Pool(Enum):
    """Destination pool for a one-off inflow."""
    UNRESTRICTED = "unrestricted"
    RESTRICTED = "restricted"


class Phase(Enum):
    """Life phase a path point belongs to."""
    ACCUMULATION = "accum"
    BRIDGE = "bridge"
    RETIREMENT = "retire"


class ConstraintKind(Enum):
    """Which constraint caps sustainable spending."""
    BRIDGE = "bridge"
    HORIZON = "horizon"


class Objective(Enum):
    """What the savings-split optimizer ranks candidate fractions by."""
    EARLIEST_AGE = "earliest_age"
    EARLIEST_AGE_FOR_PLAN = "earliest_age_for_plan"


# =============================================================================
# Household Inputs
# =============================================================================

@dataclass(frozen=True)
class SpendingBand:
    """One band of the spending schedule; applies to years ending at or before end_age."""
    end_age: int               # Inclusive upper age of the band
    multiplier: float          # Scales base spending inside the band
    label: str = ""            # e.g. "go-go", "slow-go", "no-go"


@dataclass(frozen=True)
class ContributionSplitPolicy:
    """How annual savings are divided between the unrestricted and restricted pools."""
    restricted_fraction: float = 0.0                  # Desired share of savings to the restricted pool
    cap_per_person: float = 30_000.0                  # Annual concessional cap per person
    eligible_people: int = 1                          # People able to contribute (clamped to 0..2)
    contribution_tax_rate: float = DEFAULT_CONTRIBUTION_TAX
    outside_tax_rate: float = 0.0                     # Only applied in GROSS_DEFERRAL mode
    mode: ContributionMode = ContributionMode.NET_FIXED


@dataclass(frozen=True)
class FutureInflow:
    """A one-off amount (inheritance, downsizing) landing at a given age."""
    age: float
    amount: float
    destination: Pool = Pool.UNRESTRICTED


@dataclass(frozen=True)
class Household:
    """
    Snapshot of a household's planning inputs.

    Snapshots are never mutated; the projector and search produce derived
    snapshots with dataclasses.replace.
    """
    # Ages
    current_age: int = 45
    preservation_age: int = 60     # Age the restricted pool unlocks
    life_expectancy: int = 90      # Planning horizon

    # Balances
    unrestricted_balance: float = 0.0
    restricted_balance: float = 0.0

    # Economics
    real_return: float = 0.04      # Real annual return on both pools
    annual_savings: float = 0.0    # Pre-retirement savings per year
    bequest: float = 0.0           # Terminal total wealth target

    # Optional inputs
    retire_age: Optional[int] = None                      # Forces the retirement age
    bands: Tuple[SpendingBand, ...] = ()                  # Empty means flat spending
    split_policy: Optional[ContributionSplitPolicy] = None
    employer_contribution: float = 0.0                    # Gross, paid into the restricted pool
    future_inflows: Tuple[FutureInflow, ...] = ()

    @property
    def total_balance(self) -> float:
        return self.unrestricted_balance + self.restricted_balance


# =============================================================================
# Settings
# =============================================================================

@dataclass(frozen=True)
class SolverSettings:
    """Iteration budget for the sustainable-spend bisection."""
    initial_upper: float = 1.0           # First upper bracket for sBase
    max_expansions: int = 32             # Doublings allowed while searching for an upper bracket
    max_upper: float = 5_000_000.0       # Upper bracket is never doubled past this
    bisection_iterations: int = 50


@dataclass(frozen=True)
class BridgeTolerance:
    """Slack allowed when comparing bridge assets with the bridge requirement."""
    floor: float = 1.0         # Minimum epsilon in dollars
    fraction: float = 0.002    # Epsilon as a share of sBase

    def epsilon(self, s_base: float) -> float:
        return max(self.floor, self.fraction * s_base)


@dataclass(frozen=True)
class OptimizerSettings:
    """Grid and refinement settings for the savings-split optimizer."""
    grid_points: int = 21                  # Coarse grid size over [0, max_fraction]
    refine_iterations: int = 2             # Local refinement passes
    window: float = 0.15                   # Half-width of the first refinement window
    shrink: float = 0.5                    # Window multiplier applied after each pass
    refine_points: int = 5                 # Grid size inside each refinement window
    sensitivity_offsets: Tuple[float, ...] = (-0.10, -0.05, 0.0, 0.05, 0.10)
    sensitivity_points: int = 5
    memo_decimals: int = 4                 # Fractions are memoised at this precision


@dataclass(frozen=True)
class CapPolicy:
    """Contribution constraints the optimizer searches within."""
    cap_per_person: float = 30_000.0
    eligible_people: int = 1
    contribution_tax_rate: float = DEFAULT_CONTRIBUTION_TAX
    outside_tax_rate: float = 0.0
    max_fraction: float = 1.0
    mode: ContributionMode = ContributionMode.NET_FIXED
    people: Tuple["PersonHeadroom", ...] = ()   # Optional per-person breakdown of the recommendation

    def split_policy(self, fraction: float) -> ContributionSplitPolicy:
        """Contribution policy sending the given fraction of savings to the restricted pool."""
        return ContributionSplitPolicy(
            restricted_fraction=fraction,
            cap_per_person=self.cap_per_person,
            eligible_people=self.eligible_people,
            contribution_tax_rate=self.contribution_tax_rate,
            outside_tax_rate=self.outside_tax_rate,
            mode=self.mode,
        )


# =============================================================================
# Path and Result Types
# =============================================================================

@dataclass(frozen=True)
class PathPoint:
    """Balances at the end of the year ending at `age`."""
    age: int
    unrestricted: float
    restricted: float
    total: float
    phase: Phase
    band_label: str = ""


@dataclass(frozen=True)
class ContributionSplit:
    """One year's savings after the split and contribution taxes."""
    restricted_gross: float
    unrestricted_gross: float
    restricted_net: float
    unrestricted_net: float
    cap_headroom: float        # Restricted-pool room left after employer contributions


@dataclass(frozen=True)
class AccumulationResult:
    """Balances at the target age plus the path that led there."""
    age: int
    unrestricted: float
    restricted: float
    path: Tuple[PathPoint, ...]

    @property
    def total(self) -> float:
        return self.unrestricted + self.restricted


@dataclass(frozen=True)
class DecumulationResult:
    """Outcome of spending down from retirement to life expectancy."""
    terminal_total: float
    path: Tuple[PathPoint, ...]

    @property
    def ran_out_in_bridge(self) -> bool:
        """True if the unrestricted pool went negative before the restricted pool unlocked."""
        return any(p.phase is Phase.BRIDGE and p.unrestricted < 0 for p in self.path)


@dataclass(frozen=True)
class SolveResult:
    """Sustainable base spending for a fixed retirement age."""
    s_base: float
    terminal_total: float
    path: Tuple[PathPoint, ...]
    iterations: int = 0


@dataclass(frozen=True)
class BridgeAssessment:
    """Whether the unrestricted pool funds spending until the restricted pool unlocks."""
    years: int                 # Retirement years ending at or before preservation age
    need_pv: float             # PV at retirement of spending over those years
    have: float                # Unrestricted balance at retirement
    covered: bool
    epsilon: float = 0.0
    covered_years: int = 0     # Bridge years the unrestricted pool actually lasts

    @property
    def shortfall(self) -> float:
        return max(0.0, self.need_pv - self.have)


@dataclass(frozen=True)
class BindingConstraint:
    """Which constraint caps spending, with the two candidate maxima."""
    kind: ConstraintKind
    at_age: int                # Preservation age when bridge-limited, life expectancy otherwise
    s_bridge_max: float        # inf when there are no bridge years
    s_total_max: float
    epsilon: float


@dataclass(frozen=True)
class RetirementPlan:
    """Full evaluation of retiring at a given age."""
    retire_age: int
    s_base: float
    bridge: BridgeAssessment
    constraint: BindingConstraint
    path: Tuple[PathPoint, ...]

    @property
    def viable(self) -> bool:
        return self.bridge.covered

    @property
    def ages(self) -> np.ndarray:
        return np.array([p.age for p in self.path])

    @property
    def unrestricted(self) -> np.ndarray:
        return np.array([p.unrestricted for p in self.path])

    @property
    def restricted(self) -> np.ndarray:
        return np.array([p.restricted for p in self.path])

    @property
    def totals(self) -> np.ndarray:
        return np.array([p.total for p in self.path])


@dataclass(frozen=True)
class EarliestForPlanResult:
    """Earliest age that sustains a target plan spend."""
    plan: float
    earliest_age: Optional[int]
    at_age_spend: Optional[float]
    evaluations: int


# =============================================================================
# Allocation and Optimizer Results
# =============================================================================

@dataclass(frozen=True)
class PersonHeadroom:
    """A contributor's remaining concessional room and marginal tax rate."""
    person_id: str
    headroom: float
    marginal_rate: float


@dataclass(frozen=True)
class PersonAllocation:
    person_id: str
    amount: float


@dataclass(frozen=True)
class AllocationResult:
    per_person: Tuple[PersonAllocation, ...]
    total_allocated: float

    def amount_for(self, person_id: str) -> float:
        for allocation in self.per_person:
            if allocation.person_id == person_id:
                return allocation.amount
        return 0.0


@dataclass(frozen=True)
class SensitivityPoint:
    """Outcome of one candidate restricted-pool fraction."""
    fraction: float
    earliest_age: float        # inf when no age is viable
    spend: float               # sBase at that age (0 when none)


@dataclass(frozen=True)
class SplitConstraints:
    cap_per_person: float
    eligible_people: int
    cap_total: float           # Room left after employer contributions
    contribution_tax_rate: float


@dataclass(frozen=True)
class SavingsSplitResult:
    """Recommended split of savings between the two pools."""
    recommended_fraction: float
    earliest_age: float                       # inf when nothing is achievable
    spend: float
    cap_binding: bool
    sensitivity: Tuple[SensitivityPoint, ...]
    constraints: SplitConstraints
    evaluations: int
    objective: Objective = Objective.EARLIEST_AGE
    target_spend: Optional[float] = None
    allocation: Optional[AllocationResult] = None
    grid: Tuple[SensitivityPoint, ...] = field(default=(), repr=False)

    @property
    def achievable(self) -> bool:
        return math.isfinite(self.earliest_age)
