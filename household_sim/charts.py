"""Chart generation for household projection results."""

from datetime import date
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from household_sim.models import SimulationResult

# Scenario color mapping
SCENARIO_COLORS = {
    "low": "#d62728",        # red
    "standard": "#1f77b4",   # blue
    "high": "#2ca02c",       # green
    "stagflation": "#ff7f0e",  # orange
}

DEFAULT_COLOR = "#7f7f7f"
COLOR_DEPOSIT = "#27ae60"
COLOR_EXPENSE = "#c0392b"


def _format_amount_axis(ax: plt.Axes):
    """Thousands separators on Y, years on X."""
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    )
    ax.xaxis.set_major_locator(mdates.YearLocator(base=5))
    ax.xaxis.set_major_formatter(mdates.DateFormatter("%Y"))


def _save(fig: plt.Figure, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_trajectory(
    results: dict[str, SimulationResult], output_path: Path, name: str = "",
    event_markers: list[tuple[date, float, str]] | None = None,
) -> Path:
    """Generate a line chart of total assets, nominal (solid) and real (dashed).

    Args:
        results: {label: SimulationResult}; one line pair per label.
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "base" → "trajectory-base.png").
        event_markers: one-off events [(date, signed_amount, label), ...].

    Returns:
        Path to the generated PNG file.
    """
    if not results:
        raise ValueError("No results for trajectory chart")

    fig, ax = plt.subplots(figsize=(14, 8))

    for label, result in results.items():
        dates = [p.date for p in result.timeline]
        color = SCENARIO_COLORS.get(label, DEFAULT_COLOR)
        ax.plot(dates, [p.total_assets for p in result.timeline], label=f"{label} (nominal)", color=color, linewidth=2)
        ax.plot(
            dates, [p.total_assets_real for p in result.timeline],
            label=f"{label} (today's money)", color=color, linewidth=1.5, linestyle="--",
        )

    ax.set_xlabel("Year")
    ax.set_ylabel("Total assets")
    ax.set_title("Net worth projection")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_amount_axis(ax)

    if event_markers:
        y_lo, y_hi = ax.get_ylim()
        for i, (evt_date, evt_amount, evt_label) in enumerate(event_markers):
            color = COLOR_DEPOSIT if evt_amount > 0 else COLOR_EXPENSE
            ax.axvline(evt_date, color="#888888", linewidth=0.7, linestyle=":", alpha=0.4, zorder=3)
            sign = "+" if evt_amount > 0 else "-"
            # Alternate y-position across 4 levels in the lower portion
            y_pos = y_lo + (y_hi - y_lo) * (0.05 + 0.07 * (i % 4))
            ax.annotate(
                f"{sign}{evt_label} {abs(evt_amount):,.0f}",
                xy=(evt_date, y_pos),
                fontsize=10, color=color,
                ha="center", va="bottom",
                bbox=dict(boxstyle="round,pad=0.5", fc="white", ec=color, alpha=0.9, linewidth=0.8),
                zorder=10,
            )

    return _save(fig, output_path, "trajectory", name)


def plot_breakdown(
    result: SimulationResult, output_path: Path, name: str = "",
    account_names: dict[str, str] | None = None,
) -> Path:
    """Stacked per-account balances over time.

    account_names: account id -> display name; ids are shown when missing.
    """
    if not result.timeline:
        raise ValueError("Empty timeline for breakdown chart")
    account_ids = list(result.timeline[0].accounts_breakdown)
    if not account_ids:
        raise ValueError("No accounts for breakdown chart")
    account_names = account_names or {}

    fig, ax = plt.subplots(figsize=(14, 8))
    dates = [p.date for p in result.timeline]
    series = [[p.accounts_breakdown.get(a, 0.0) for p in result.timeline] for a in account_ids]
    ax.stackplot(
        dates, *series,
        labels=[account_names.get(a, a) for a in account_ids],
        alpha=0.75,
    )

    ax.set_xlabel("Year")
    ax.set_ylabel("Balance")
    ax.set_title("Balance by account")
    ax.axhline(0, color="black", linewidth=1.0, zorder=5)
    ax.legend(loc="upper left", fontsize=9)
    ax.grid(True, alpha=0.3)
    _format_amount_axis(ax)

    return _save(fig, output_path, "breakdown", name)


def plot_cashflow(result: SimulationResult, output_path: Path, name: str = "") -> Path:
    """Cumulative deposits, returns, fees, child expenses and withdrawals."""
    if not result.timeline:
        raise ValueError("Empty timeline for cashflow chart")

    fig, ax = plt.subplots(figsize=(14, 8))
    dates = [p.date for p in result.timeline]
    lines = [
        ("Deposits", "total_deposits", "#1f77b4", "-"),
        ("Returns", "total_returns", "#2ca02c", "-"),
        ("Fees", "total_fees", "#7f7f7f", ":"),
        ("Child expenses", "total_child_expenses", "#fc8d62", "--"),
        ("Withdrawals", "total_withdrawals", "#d62728", "--"),
    ]
    for label, attr, color, style in lines:
        ax.plot(dates, [getattr(p, attr) for p in result.timeline], label=label, color=color, linestyle=style, linewidth=1.8)

    ax.set_xlabel("Year")
    ax.set_ylabel("Cumulative amount (nominal)")
    ax.set_title("Cumulative cash flows")
    ax.legend(loc="upper left", fontsize=9)
    ax.grid(True, alpha=0.3)
    _format_amount_axis(ax)

    return _save(fig, output_path, "cashflow", name)
