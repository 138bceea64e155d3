"""CLI entry point for chart generation."""

import sys
from pathlib import Path

from household_sim.charts import plot_breakdown, plot_cashflow, plot_trajectory
from household_sim.config import parse_args
from household_sim.scenarios import run_scenarios
from household_sim.simulation import simulate_household


def _add_chart_args(parser):
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--scenarios", action="store_true",
        help="draw every scenario preset on the trajectory chart",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="output filename suffix (e.g. base → trajectory-base.png)",
    )


def main():
    household, params, args = parse_args("Household projection charts", _add_chart_args)
    output_dir = args.output
    chart_name = args.name

    print(f"Simulating from {params.start_date.isoformat()}...", file=sys.stderr)
    result = simulate_household(household, params)

    markers = [(e.date, e.amount, e.description or "deposit") for e in params.extra_deposits]
    markers += [(e.date, -e.amount, e.description or "withdrawal") for e in params.withdrawal_events]
    markers = sorted(m for m in markers if params.start_date <= m[0] <= result.end_date)

    if args.scenarios:
        print("Running scenario presets...", file=sys.stderr)
        trajectories = run_scenarios(household, params)
    else:
        trajectories = {"projection": result}
    path = plot_trajectory(trajectories, output_dir, name=chart_name, event_markers=markers)
    print(f"  → {path}", file=sys.stderr)

    if household.accounts:
        account_names = {a.id: a.name for a in household.accounts}
        path = plot_breakdown(result, output_dir, name=chart_name, account_names=account_names)
        print(f"  → {path}", file=sys.stderr)
    else:
        print("  breakdown: no accounts (skipped)", file=sys.stderr)

    path = plot_cashflow(result, output_dir, name=chart_name)
    print(f"  → {path}", file=sys.stderr)

    print("Done", file=sys.stderr)


if __name__ == "__main__":
    main()
