"""CLI entry point for scenario comparison."""

from household_sim.config import parse_args
from household_sim.scenarios import SCENARIOS, run_scenarios


def print_parameters():
    """Print scenario parameters"""
    print("=" * 80)
    print("[Scenario comparison]")
    print("=" * 80)
    print()

    print("[Parameters]")
    print("-" * 80)
    print(f"{'Scenario':<16} {'Inflation':>10} {'Return shift':>14}")
    print("-" * 80)
    for name, scenario in SCENARIOS.items():
        print(f"{name:<16} {scenario['inflation_rate']:>9.1f}% {scenario['return_shift']:>+12.1f}pt")
    print("-" * 80)
    print()


def print_results(all_results):
    """Print simulation results"""
    print("=" * 80)
    print("[Results]")
    print("=" * 80)
    print()
    print(
        f"{'Scenario':<16} {'Final balance':>16} {'Real balance':>16} {'Returns':>14} {'Fees':>12} {'Real return':>12}"
    )
    print("-" * 100)
    for name, result in all_results.items():
        s = result.summary
        print(
            f"{name:<16} "
            f"{s.final_balance:>16,.0f} "
            f"{s.final_balance_real:>16,.0f} "
            f"{s.total_returns:>14,.0f} "
            f"{s.total_fees:>12,.0f} "
            f"{s.effective_return_rate_real:>11.1f}%"
        )
    print("-" * 100)

    goal_names = [g.goal_name for g in next(iter(all_results.values())).goals_analysis] if all_results else []
    if goal_names:
        print()
        print("[Goals achieved]")
        print("-" * 80)
        print(f"{'Scenario':<16} " + " ".join(f"{n[:14]:>14}" for n in goal_names))
        print("-" * 80)
        for name, result in all_results.items():
            cells = ["yes" if g.is_achievable else "no" for g in result.goals_analysis]
            print(f"{name:<16} " + " ".join(f"{c:>14}" for c in cells))
        print("-" * 80)


def main():
    household, params, _ = parse_args("Scenario comparison")
    print_parameters()
    results = run_scenarios(household, params)
    print_results(results)


if __name__ == "__main__":
    main()
