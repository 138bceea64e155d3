"""CLI entry point for a single household projection."""

from household_sim.catalogs import estimated_total
from household_sim.config import parse_args
from household_sim.goals import goal_progress
from household_sim.models import Household, SimulationParams, SimulationResult
from household_sim.simulation import active_dependents, simulate_household


def _print_header(household: Household, params: SimulationParams, result: SimulationResult):
    rate = params.inflation_rate if params.inflation_rate is not None else household.inflation_rate
    start = params.start_date
    opening = sum(a.balance for a in household.accounts)
    print("=" * 80)
    print(f"Household projection ({start.isoformat()} to {result.end_date.isoformat()})")
    print(f"  Opening balance: {opening:,.0f} across {len(household.accounts)} account(s) / inflation {rate:.1f}%/year")
    for account in household.accounts:
        deposit = account.monthly_deposit + account.employer_deposit
        print(
            f"    {account.name}: {account.balance:,.0f}, return {account.annual_return:.1f}%,"
            f" fee {account.management_fee:.2f}%, deposit {deposit:,.0f}/month"
        )
    if params.extra_monthly_deposit > 0:
        print(f"  Extra monthly deposit: {params.extra_monthly_deposit:,.0f} (split across accounts)")
    members = active_dependents(household.members, params.include_planned_children)
    if members:
        parts = []
        for m in members:
            age = m.age_years(start)
            parts.append(f"{m.name} ({m.member_type}, {age})" if age is not None else f"{m.name} ({m.member_type})")
        print(f"  Members: {', '.join(parts)}")
    for catalog in household.catalogs:
        print(f"  Catalog '{catalog.name}': {len(catalog.rules)} rules, ~{estimated_total(catalog):,.0f} per child in today's money")
    print(f"  Withdrawal policy: {params.withdrawal_policy}")
    print("=" * 80)
    print()


def _print_row(label: str, value: float, fmt: str = "{:>18,.0f}"):
    print(f"{label:<28} " + fmt.format(value))


def _print_summary(result: SimulationResult):
    s = result.summary
    print("\n[Final position]")
    print("-" * 80)
    _print_row("Final balance", s.final_balance)
    _print_row("Final balance (today's money)", s.final_balance_real)
    _print_row("Total deposited", s.total_deposited)
    _print_row("Total withdrawn", s.total_withdrawn)
    _print_row("Total returns", s.total_returns)
    _print_row("Total returns (today's money)", s.total_returns_real)
    _print_row("Total fees", -s.total_fees)
    _print_row("Child expenses", -s.total_child_expenses)
    print("-" * 80)
    _print_row("Effective return", s.effective_return_rate, fmt="{:>17.1f}%")
    _print_row("Effective return (real)", s.effective_return_rate_real, fmt="{:>17.1f}%")
    _print_row("Inflation factor", s.total_inflation_factor, fmt="{:>18.3f}")


def _print_yearly_log(result: SimulationResult):
    print("\n[Yearly timeline sample]")
    print("-" * 100)
    print(
        f"{'Date':<12} {'Assets':>16} {'Assets (real)':>16} {'Deposits':>14} {'Returns':>14} {'Child exp.':>12} {'Income':>10}"
    )
    print("-" * 100)
    timeline = result.timeline
    for i, p in enumerate(timeline):
        if i % 12 == 0 or i == len(timeline) - 1:
            print(
                f"{p.date.isoformat():<12} "
                f"{p.total_assets:>16,.0f} "
                f"{p.total_assets_real:>16,.0f} "
                f"{p.total_deposits:>14,.0f} "
                f"{p.total_returns:>14,.0f} "
                f"{p.total_child_expenses:>12,.0f} "
                f"{p.monthly_income:>10,.0f}"
            )
    print("-" * 100)


def _print_events(result: SimulationResult, limit: int = 20):
    dated = [(p.date, e) for p in result.timeline for e in p.events]
    if not dated:
        return
    print(f"\n[Events] ({len(dated)} total, first {min(limit, len(dated))} shown)")
    for d, event in dated[:limit]:
        print(f"  {d.isoformat()}  {event}")


def _print_goals(household: Household, result: SimulationResult, params: SimulationParams):
    if not result.goals_analysis:
        return
    print("\n[Goals]")
    print("-" * 100)
    print(f"{'Goal':<24} {'Target date':<12} {'Target':>12} {'Projected':>12} {'Saved':>6} {'Status':<8} {'Extra/month':>12}")
    print("-" * 100)
    goals = {g.id: g for g in household.goals}
    today = params.today or params.start_date
    for analysis in result.goals_analysis:
        target_date = analysis.target_date.isoformat() if analysis.target_date else "end"
        status = "on track" if analysis.is_achievable else "short"
        saved = f"{goal_progress(goals[analysis.goal_id], today).progress_percent}%"
        print(
            f"{analysis.goal_name:<24} {target_date:<12} "
            f"{analysis.target_amount:>12,.0f} {analysis.projected_amount:>12,.0f} "
            f"{saved:>6} {status:<8} {analysis.required_extra_monthly:>12,.0f}"
        )
    print("-" * 100)


def main():
    """Run one projection and print the report."""
    household, params, _ = parse_args("Household net worth projection")
    result = simulate_household(household, params)

    _print_header(household, params, result)
    _print_summary(result)
    _print_yearly_log(result)
    _print_events(result)
    _print_goals(household, result, params)


if __name__ == "__main__":
    main()
