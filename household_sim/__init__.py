"""Household Net Worth Projection Package."""

from household_sim.models import (
    Account,
    Dependent,
    IncomeRecord,
    ExpenseRule,
    ExpenseCatalog,
    Goal,
    ExtraDeposit,
    WithdrawalEvent,
    YearlyExpense,
    Household,
    SimulationParams,
    TimelinePoint,
    SimulationSummary,
    GoalAnalysis,
    SimulationResult,
    DEFAULT_INFLATION_RATE,
    SKIP,
    ALLOW_NEGATIVE,
    BORROW,
)
from household_sim.simulation import (
    run_simulation,
    simulate_household,
    resolve_end_date,
    income_at,
    validate_params,
    validate_rules,
    validate_household,
    DEFAULT_HORIZON_YEARS,
)
from household_sim.triggers import ExpenseTracker, in_window, recurrence_fires
from household_sim.ledger import AccountState, step_account
from household_sim.withdrawals import withdraw
from household_sim.catalogs import default_catalog, estimated_total, resolve_catalogs
from household_sim.goals import analyze_goals, goal_progress, proportional_share
from household_sim.scenarios import SCENARIOS, run_scenarios

__all__ = [
    "Account",
    "Dependent",
    "IncomeRecord",
    "ExpenseRule",
    "ExpenseCatalog",
    "Goal",
    "ExtraDeposit",
    "WithdrawalEvent",
    "YearlyExpense",
    "Household",
    "SimulationParams",
    "TimelinePoint",
    "SimulationSummary",
    "GoalAnalysis",
    "SimulationResult",
    "DEFAULT_INFLATION_RATE",
    "run_simulation",
    "simulate_household",
    "resolve_end_date",
    "income_at",
    "validate_params",
    "validate_rules",
    "validate_household",
    "DEFAULT_HORIZON_YEARS",
    "ExpenseTracker",
    "in_window",
    "recurrence_fires",
    "AccountState",
    "step_account",
    "SKIP",
    "ALLOW_NEGATIVE",
    "BORROW",
    "withdraw",
    "default_catalog",
    "estimated_total",
    "resolve_catalogs",
    "analyze_goals",
    "goal_progress",
    "proportional_share",
    "SCENARIOS",
    "run_scenarios",
]
