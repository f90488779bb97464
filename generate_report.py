"""
Die-With-Zero Retirement Plan Report

Builds a household from command-line inputs, finds the earliest viable
retirement age and the recommended savings split, and writes a PDF with the
wealth path, spending profile, bridge check and split sensitivity.
"""

import logging
from dataclasses import replace
from typing import Optional

import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.backends.backend_pdf import PdfPages

from dwz import (
    BandSettings,
    CapPolicy,
    ContributionMode,
    FutureInflow,
    Household,
    Person,
    Pool,
    RetirementPlan,
    SavingsSplitResult,
    age_banded_schedule,
    evaluate_retirement_age,
    find_earliest_viable,
    flat_schedule,
    household_from_people,
    normalize_band_settings,
    optimize_savings_split,
    person_headrooms,
    rules_for_financial_year,
    validate_household,
)
from visualization import apply_standard_style, create_optimizer_page, create_plan_page


def path_to_frame(plan: RetirementPlan) -> pd.DataFrame:
    """Year-by-year path as a DataFrame indexed by age."""
    frame = pd.DataFrame(
        {
            'unrestricted': [p.unrestricted for p in plan.path],
            'restricted': [p.restricted for p in plan.path],
            'total': [p.total for p in plan.path],
            'phase': [p.phase.value for p in plan.path],
            'band': [p.band_label for p in plan.path],
        },
        index=pd.Index([p.age for p in plan.path], name='age'),
    )
    return frame


def summary_series(plan: Optional[RetirementPlan], split: SavingsSplitResult) -> pd.Series:
    """Headline numbers for the console."""
    rows = {
        'Earliest viable age': plan.retire_age if plan else 'none',
        'Base spend ($/yr)': f'{plan.s_base:,.0f}' if plan else '-',
        'Binding constraint': plan.constraint.kind.value if plan else '-',
        'Bridge years': plan.bridge.years if plan else '-',
        'Bridge need (PV)': f'{plan.bridge.need_pv:,.0f}' if plan else '-',
        'Bridge have': f'{plan.bridge.have:,.0f}' if plan else '-',
        'Recommended restricted share': f'{split.recommended_fraction:.0%}',
        'Age at recommended split': split.earliest_age,
        'Cap binds': split.cap_binding,
        'Optimizer evaluations': split.evaluations,
    }
    return pd.Series(rows, name='value')


def generate_plan_pdf(
    output_path: str,
    household: Household,
    plan: RetirementPlan,
    split: SavingsSplitResult,
    verbose: bool = True,
) -> str:
    """
    Write the plan report.

    Page 1: plan at the earliest viable (or forced) age
    Page 2: savings split sensitivity and per-person allocation

    Args:
        verbose: If True, print progress

    Returns:
        Path to generated PDF file
    """
    apply_standard_style()

    with PdfPages(output_path) as pdf:
        if verbose:
            print(f"Generating Page 1: Retirement Plan (retire at {plan.retire_age})...")
        fig = create_plan_page(plan, household)
        pdf.savefig(fig, bbox_inches='tight')
        plt.close(fig)

        if verbose:
            print("Generating Page 2: Savings Split...")
        fig = create_optimizer_page(split)
        pdf.savefig(fig, bbox_inches='tight')
        plt.close(fig)

    return output_path


def main(
    output_path: str = 'dwz_plan.pdf',
    ages: tuple = (45,),
    salaries: tuple = (120_000,),
    unrestricted_balance: float = 300_000,
    restricted_balance: float = 400_000,
    life_expectancy: int = 90,
    real_return: float = 0.04,
    annual_savings: float = 40_000,
    bequest: float = 0.0,
    retire_age: Optional[int] = None,
    flat_spending: bool = False,
    mode: ContributionMode = ContributionMode.NET_FIXED,
    max_fraction: float = 1.0,
    target_spend: Optional[float] = None,
    inflow_age: Optional[float] = None,
    inflow_amount: float = 0.0,
    inflow_to_restricted: bool = False,
    financial_year: Optional[str] = None,
    show_path: bool = False,
    verbose: bool = True,
):
    """
    Plan a household's retirement and write the PDF report.

    Args:
        output_path: Path for output PDF file
        ages: Current age of each household member
        salaries: Salary of each household member (drives employer contributions)
        unrestricted_balance: Household unrestricted balance
        restricted_balance: Household restricted balance
        life_expectancy: Planning horizon
        real_return: Real annual return on both pools
        annual_savings: Household savings per year before retirement
        bequest: Terminal wealth target
        retire_age: Force this retirement age instead of searching
        flat_spending: Use a flat schedule instead of go-go / slow-go / no-go
        mode: How savings are taxed when split
        max_fraction: Largest restricted-pool share the optimizer may recommend
        target_spend: Optimize for the earliest age sustaining this spend
        inflow_age: Age of a one-off inflow
        inflow_amount: Size of the inflow
        inflow_to_restricted: Send the inflow to the restricted pool
        financial_year: Rules year, e.g. "2024-25"
        show_path: Print the year-by-year path
        verbose: If True, print progress
    """
    rules = rules_for_financial_year(financial_year)
    people = [
        Person(person_id=f'person{i + 1}', age=age, salary=salary)
        for i, (age, salary) in enumerate(zip(ages, salaries))
    ]

    household = household_from_people(
        people,
        life_expectancy=life_expectancy,
        real_return=real_return,
        annual_savings=annual_savings,
        bequest=bequest,
        retire_age=retire_age,
        rules=rules,
    )
    household = replace(household, unrestricted_balance=unrestricted_balance,
                        restricted_balance=restricted_balance)

    if flat_spending:
        bands = flat_schedule(life_expectancy)
    else:
        settings, warnings = normalize_band_settings(BandSettings(), household.current_age + 1,
                                                     life_expectancy)
        for message in warnings:
            print(f"Warning: spending bands: {message}")
        bands = age_banded_schedule(life_expectancy, settings)

    inflows = ()
    if inflow_age is not None and inflow_amount > 0:
        destination = Pool.RESTRICTED if inflow_to_restricted else Pool.UNRESTRICTED
        inflows = (FutureInflow(inflow_age, inflow_amount, destination),)

    policy = CapPolicy(
        cap_per_person=rules.concessional_cap,
        eligible_people=len(people),
        contribution_tax_rate=rules.contributions_tax_rate,
        max_fraction=max_fraction,
        mode=mode,
        people=person_headrooms(people, rules),
    )
    household = validate_household(replace(household, bands=bands, future_inflows=inflows))

    if verbose:
        print("Optimizing savings split...")
    split = optimize_savings_split(household, policy, target_spend=target_spend)
    planned = replace(household, split_policy=policy.split_policy(split.recommended_fraction))

    if verbose:
        print("Searching for earliest viable retirement age...")
    plan = find_earliest_viable(planned)
    report_plan = plan
    if report_plan is None:
        fallback_age = retire_age if retire_age is not None else max(household.current_age + 1,
                                                                         household.preservation_age)
        print(f"Warning: no viable retirement age; charting retirement at {fallback_age} instead")
        report_plan = evaluate_retirement_age(planned, fallback_age)

    output = generate_plan_pdf(output_path, planned, report_plan, split, verbose=verbose)
    if verbose:
        print(f"PDF generated: {output}")

    print("\nPlan Summary:")
    print("-" * 50)
    print(summary_series(plan, split).to_string())
    if show_path:
        print("\nYear-by-Year Path:")
        print(path_to_frame(report_plan).round(0).to_string())

    return output


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(
        description='Generate a die-with-zero retirement plan PDF'
    )
    parser.add_argument('-o', '--output', default='dwz_plan.pdf',
                       help='Output PDF file path')
    parser.add_argument('--ages', type=int, nargs='+', default=[45],
                       help='Current age of each household member (default: 45)')
    parser.add_argument('--salaries', type=float, nargs='+', default=[120_000],
                       help='Salary of each household member (default: 120000)')
    parser.add_argument('--unrestricted', type=float, default=300_000,
                       help='Unrestricted balance (default: 300000)')
    parser.add_argument('--restricted', type=float, default=400_000,
                       help='Restricted (preserved) balance (default: 400000)')
    parser.add_argument('--life-expectancy', type=int, default=90,
                       help='Planning horizon (default: 90)')
    parser.add_argument('--real-return', type=float, default=0.04,
                       help='Real annual return (default: 0.04 = 4%%)')
    parser.add_argument('--savings', type=float, default=40_000,
                       help='Annual savings before retirement (default: 40000)')
    parser.add_argument('--bequest', type=float, default=0.0,
                       help='Terminal wealth target (default: 0)')
    parser.add_argument('--retire-age', type=int, default=None,
                       help='Force a retirement age instead of searching')
    parser.add_argument('--flat', action='store_true',
                       help='Flat spending instead of go-go / slow-go / no-go bands')
    parser.add_argument('--gross-deferral', action='store_true',
                       help='Treat savings as pre-tax salary (taxes both legs of the split)')
    parser.add_argument('--max-fraction', type=float, default=1.0,
                       help='Largest restricted-pool share to consider (default: 1.0)')
    parser.add_argument('--target-spend', type=float, default=None,
                       help='Optimize for the earliest age sustaining this base spend')
    parser.add_argument('--inflow-age', type=float, default=None,
                       help='Age of a one-off inflow (inheritance, downsizing)')
    parser.add_argument('--inflow-amount', type=float, default=0.0,
                       help='Amount of the one-off inflow')
    parser.add_argument('--inflow-to-restricted', action='store_true',
                       help='Send the inflow to the restricted pool')
    parser.add_argument('--financial-year', default=None,
                       help='Rules year, e.g. 2024-25 (default: latest bundled)')
    parser.add_argument('--show-path', action='store_true',
                       help='Print the year-by-year path')
    parser.add_argument('-v', '--verbose', action='store_true',
                       help='Log solver and optimizer detail')
    parser.add_argument('-q', '--quiet', action='store_true',
                       help='Suppress progress output')

    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(levelname)s - %(message)s')

    if len(args.salaries) != len(args.ages):
        parser.error('--salaries needs one value per --ages entry')

    main(
        output_path=args.output,
        ages=tuple(args.ages),
        salaries=tuple(args.salaries),
        unrestricted_balance=args.unrestricted,
        restricted_balance=args.restricted,
        life_expectancy=args.life_expectancy,
        real_return=args.real_return,
        annual_savings=args.savings,
        bequest=args.bequest,
        retire_age=args.retire_age,
        flat_spending=args.flat,
        mode=ContributionMode.GROSS_DEFERRAL if args.gross_deferral else ContributionMode.NET_FIXED,
        max_fraction=args.max_fraction,
        target_spend=args.target_spend,
        inflow_age=args.inflow_age,
        inflow_amount=args.inflow_amount,
        inflow_to_restricted=args.inflow_to_restricted,
        financial_year=args.financial_year,
        show_path=args.show_path,
        verbose=not args.quiet,
    )
