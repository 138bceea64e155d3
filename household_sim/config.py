"""TOML household loader with CLI > config > default resolution."""

import argparse
import sys
import tomllib
from collections.abc import Callable
from datetime import date
from pathlib import Path

from household_sim.catalogs import DEFAULT_CATALOG_ID, default_catalog
from household_sim.models import (
    AGE_MONTHS,
    AGE_YEARS,
    DEFAULT_INFLATION_RATE,
    DEFAULT_YEARLY_EXPENSE_MONTH,
    LIFE_EVENT,
    POLICIES,
    SKIP,
    Account,
    Dependent,
    ExpenseCatalog,
    ExpenseRule,
    ExtraDeposit,
    Goal,
    Household,
    IncomeRecord,
    SimulationParams,
    WithdrawalEvent,
    YearlyExpense,
)
from household_sim.simulation import validate_household, validate_params

DEFAULT_CONFIG_PATH = Path("household.toml")

# Long spellings accepted for rule triggers in household files
TRIGGER_ALIASES = {
    "age_in_months": AGE_MONTHS,
    "age_in_years": AGE_YEARS,
    "life_event": LIFE_EVENT,
}

DEFAULTS = {
    "start_date": "",  # empty = today
    "end_date": "",
    "end_age": None,
    "target_member": None,
    "inflation_rate": None,  # None = household default_inflation_rate
    "extra_monthly_deposit": 0.0,
    "withdrawal_policy": SKIP,
    "include_planned_children": True,
    "apply_deposit_fees": False,
    "today": "",
}


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file: {path}: {e}", file=sys.stderr)
        raise SystemExit(1)


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared simulation flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="household file path (default: household.toml)")
    parser.add_argument("--start-date", type=str, default=None, help="first simulated month, YYYY-MM-DD (default: today)")
    parser.add_argument("--end-date", type=str, default=None, help="last simulated date, YYYY-MM-DD")
    parser.add_argument("--end-age", type=int, default=None, help="run until the target member reaches this age")
    parser.add_argument("--target-member", type=str, default=None, help="member id for --end-age (default: the 'self' member)")
    parser.add_argument("--inflation-rate", type=float, default=None, help=f"%%/year (default: household setting, else {DEFAULT_INFLATION_RATE})")
    parser.add_argument("--extra-monthly-deposit", type=float, default=None, help=f"split evenly across accounts (default: {d['extra_monthly_deposit']:.0f})")
    parser.add_argument("--withdrawal-policy", type=str, default=None, choices=POLICIES, help=f"when accounts cannot cover an expense (default: {d['withdrawal_policy']})")
    parser.add_argument("--exclude-planned-children", dest="include_planned_children", action="store_const", const=False, default=None, help="leave planned children out of the run")
    parser.add_argument("--apply-deposit-fees", action="store_true", default=None, help="deduct each account's deposit_fee from recurring deposits")
    parser.add_argument("--today", type=str, default=None, help="reference date for goal top-up math, YYYY-MM-DD (default: today)")
    return parser


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > household.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def _parse_date(value, field: str) -> date | None:
    """TOML dates arrive as date objects, CLI and quoted TOML values as ISO strings."""
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"{field}: invalid date '{value}' (expected YYYY-MM-DD)") from None


def _require(entry: dict, key: str, table: str):
    if key not in entry:
        raise ValueError(f"[[{table}]] entry is missing '{key}'")
    return entry[key]


def _build_rule(entry: dict, index: int, catalog_id: str) -> ExpenseRule:
    table = "catalogs.rules"
    trigger = _require(entry, "trigger", table)
    return ExpenseRule(
        id=str(entry.get("id", f"{catalog_id}-{index}")),
        name=_require(entry, "name", table),
        trigger=TRIGGER_ALIASES.get(trigger, trigger),
        trigger_value=int(_require(entry, "value", table)),
        trigger_value_end=entry.get("value_end"),
        amount=float(_require(entry, "amount", table)),
        recurrence=_require(entry, "recurrence", table),
        sort_order=int(entry.get("sort_order", index)),
    )


def build_household(raw: dict) -> Household:
    """Build a Household snapshot from the TOML tables of a household file."""
    accounts = [
        Account(
            id=str(_require(a, "id", "accounts")),
            name=a.get("name", str(a["id"])),
            balance=float(a.get("balance", 0.0)),
            annual_return=float(a.get("annual_return", 0.0)),
            management_fee=float(a.get("management_fee", 0.0)),
            deposit_fee=float(a.get("deposit_fee", 0.0)),
            monthly_deposit=float(a.get("monthly_deposit", 0.0)),
            employer_deposit=float(a.get("employer_deposit", 0.0)),
        )
        for a in raw.get("accounts", [])
    ]
    members = [
        Dependent(
            id=str(_require(m, "id", "members")),
            name=m.get("name", str(m["id"])),
            member_type=_require(m, "type", "members"),
            birth_date=_parse_date(m.get("birth_date"), f"member '{m['id']}' birth_date"),
            expected_birth_date=_parse_date(
                m.get("expected_birth_date"), f"member '{m['id']}' expected_birth_date",
            ),
        )
        for m in raw.get("members", [])
    ]
    income = [
        IncomeRecord(
            member_id=str(_require(i, "member", "income")),
            amount=float(_require(i, "amount", "income")),
            effective_date=_parse_date(_require(i, "effective_date", "income"), "income effective_date"),
        )
        for i in raw.get("income", [])
    ]

    catalogs = []
    for c in raw.get("catalogs", []):
        catalog_id = str(_require(c, "id", "catalogs"))
        catalogs.append(ExpenseCatalog(
            id=catalog_id,
            name=c.get("name", catalog_id),
            rules=[_build_rule(r, i, catalog_id) for i, r in enumerate(c.get("rules", []), start=1)],
            is_default=bool(c.get("default", False)),
        ))
    # Households without their own default fall back to the standard template
    if not any(c.is_default for c in catalogs) and all(c.id != DEFAULT_CATALOG_ID for c in catalogs):
        catalogs.append(default_catalog())

    assignments = {
        str(_require(a, "child", "assignments")): str(_require(a, "catalog", "assignments"))
        for a in raw.get("assignments", [])
    }
    goals = [
        Goal(
            id=str(_require(g, "id", "goals")),
            name=g.get("name", str(g["id"])),
            target_amount=float(_require(g, "target_amount", "goals")),
            target_date=_parse_date(g.get("target_date"), f"goal '{g['id']}' target_date"),
            target_age=g.get("target_age"),
            linked_account_id=g.get("account"),
            linked_member_id=g.get("member"),
            monthly_contribution=float(g.get("monthly_contribution", 0.0)),
            current_amount=float(g.get("current_amount", 0.0)),
            priority=int(g.get("priority", 5)),
        )
        for g in raw.get("goals", [])
    ]
    return Household(
        accounts=accounts,
        members=members,
        income=income,
        catalogs=catalogs,
        assignments=assignments,
        goals=goals,
        inflation_rate=float(raw.get("default_inflation_rate", DEFAULT_INFLATION_RATE)),
    )


def build_params(r: dict, raw: dict) -> SimulationParams:
    """Build SimulationParams from resolved config dict and the file's event tables."""
    extra_deposits = [
        ExtraDeposit(
            date=_parse_date(_require(e, "date", "extra_deposits"), "extra deposit date"),
            amount=float(_require(e, "amount", "extra_deposits")),
            account_id=e.get("account"),
            description=e.get("description", ""),
        )
        for e in raw.get("extra_deposits", [])
    ]
    withdrawal_events = [
        WithdrawalEvent(
            date=_parse_date(_require(e, "date", "withdrawals"), "withdrawal date"),
            amount=float(_require(e, "amount", "withdrawals")),
            account_id=e.get("account"),
            description=e.get("description", ""),
        )
        for e in raw.get("withdrawals", [])
    ]
    yearly_expenses = [
        YearlyExpense(
            name=_require(e, "name", "yearly_expenses"),
            amount=float(_require(e, "amount", "yearly_expenses")),
            month=int(e.get("month", DEFAULT_YEARLY_EXPENSE_MONTH)),
            adjust_for_inflation=bool(e.get("adjust_for_inflation", True)),
        )
        for e in raw.get("yearly_expenses", [])
    ]
    start_date = _parse_date(r["start_date"], "start_date") or date.today()
    inflation_rate = r["inflation_rate"]
    end_age = r["end_age"]
    return SimulationParams(
        start_date=start_date,
        end_date=_parse_date(r["end_date"], "end_date"),
        end_age=int(end_age) if end_age is not None else None,
        target_member_id=r["target_member"],
        inflation_rate=float(inflation_rate) if inflation_rate is not None else None,
        include_planned_children=bool(r["include_planned_children"]),
        extra_monthly_deposit=float(r["extra_monthly_deposit"]),
        extra_deposits=extra_deposits,
        withdrawal_events=withdrawal_events,
        yearly_expenses=yearly_expenses,
        withdrawal_policy=r["withdrawal_policy"],
        apply_deposit_fees=bool(r["apply_deposit_fees"]),
        today=_parse_date(r["today"], "today") or date.today(),
    )


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
) -> tuple[Household, SimulationParams, argparse.Namespace]:
    """Parse CLI args, load the household file, resolve and validate.

    Returns (household, params, namespace). Invalid input is reported on stderr
    and exits with status 1.
    namespace: raw argparse.Namespace (for extra CLI args added via add_args_fn).
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    config = load_config(args.config)
    r = resolve(args, config)
    try:
        household = build_household(config)
        params = build_params(r, config)
    except ValueError as e:
        print(f"Invalid household file: {e}", file=sys.stderr)
        raise SystemExit(1)

    errors = validate_household(household) + validate_params(params, household.accounts, household.members)
    if errors:
        for error in errors:
            print(f"  ✗ {error}", file=sys.stderr)
        raise SystemExit(1)
    return household, params, args
