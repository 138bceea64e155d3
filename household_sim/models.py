"""Household snapshot records, simulation parameters and result shapes."""

import dataclasses
from dataclasses import dataclass, field
from datetime import date

from household_sim.timeutil import age_in_months

# Member roles
SELF = "self"
SPOUSE = "spouse"
CHILD = "child"
PLANNED_CHILD = "planned_child"
MEMBER_TYPES = (SELF, SPOUSE, CHILD, PLANNED_CHILD)
INCOME_MEMBER_TYPES = (SELF, SPOUSE)
CHILD_MEMBER_TYPES = (CHILD, PLANNED_CHILD)

# Expense rule trigger kinds
AGE_MONTHS = "age_months"
AGE_YEARS = "age_years"
LIFE_EVENT = "event"
TRIGGER_KINDS = (AGE_MONTHS, AGE_YEARS, LIFE_EVENT)

# Expense rule recurrences
ONCE = "once"
MONTHLY = "monthly"
QUARTERLY = "quarterly"
YEARLY = "yearly"
RECURRENCES = (ONCE, MONTHLY, QUARTERLY, YEARLY)

# Withdrawal policies, see withdrawals.py
SKIP = "skip"
ALLOW_NEGATIVE = "allow_negative"
BORROW = "borrow"
POLICIES = (SKIP, ALLOW_NEGATIVE, BORROW)

DEFAULT_INFLATION_RATE = 2.5  # %/year, household default when unset
DEFAULT_YEARLY_EXPENSE_MONTH = 7


@dataclass
class Account:
    """Savings/investment account. Rates are annual percentages (5.0 = 5%)."""

    id: str
    name: str
    balance: float
    annual_return: float = 0.0
    management_fee: float = 0.0
    deposit_fee: float = 0.0
    monthly_deposit: float = 0.0
    employer_deposit: float = 0.0


@dataclass
class Dependent:
    """Family member considered in planning."""

    id: str
    name: str
    member_type: str
    birth_date: date | None = None
    expected_birth_date: date | None = None

    def birth_reference(self) -> date | None:
        """Known birth date, else expected birth date, else None."""
        return self.birth_date or self.expected_birth_date

    def age_months(self, as_of: date) -> int | None:
        ref = self.birth_reference()
        if ref is None:
            return None
        return age_in_months(ref, as_of)

    def age_years(self, as_of: date) -> int | None:
        months = self.age_months(as_of)
        if months is None:
            return None
        return months // 12


@dataclass
class IncomeRecord:
    """Monthly income effective from a date until superseded."""

    member_id: str
    amount: float
    effective_date: date


@dataclass
class ExpenseRule:
    """Conditional child expense defined in today's money."""

    id: str
    name: str
    trigger: str
    trigger_value: int
    amount: float
    recurrence: str
    trigger_value_end: int | None = None
    sort_order: int = 0


@dataclass
class ExpenseCatalog:
    """Named, reusable set of expense rules (a child expense template)."""

    id: str
    name: str
    rules: list[ExpenseRule] = field(default_factory=list)
    is_default: bool = False


@dataclass
class Goal:
    id: str
    name: str
    target_amount: float
    target_date: date | None = None
    target_age: int | None = None
    linked_account_id: str | None = None
    linked_member_id: str | None = None
    monthly_contribution: float = 0.0
    current_amount: float = 0.0
    priority: int = 5


@dataclass
class ExtraDeposit:
    date: date
    amount: float
    account_id: str | None = None
    description: str = ""


@dataclass
class WithdrawalEvent:
    date: date
    amount: float
    account_id: str | None = None
    description: str = ""


@dataclass
class YearlyExpense:
    """Recurring expense paid once a year in a fixed calendar month."""

    name: str
    amount: float
    month: int = DEFAULT_YEARLY_EXPENSE_MONTH
    adjust_for_inflation: bool = True


@dataclass
class Household:
    """Consistent snapshot of everything a run reads, as supplied by the data layer.

    assignments: child id -> catalog id; unassigned children use the default catalog.
    """

    accounts: list[Account] = field(default_factory=list)
    members: list[Dependent] = field(default_factory=list)
    income: list[IncomeRecord] = field(default_factory=list)
    catalogs: list[ExpenseCatalog] = field(default_factory=list)
    assignments: dict[str, str] = field(default_factory=dict)
    goals: list[Goal] = field(default_factory=list)
    inflation_rate: float = DEFAULT_INFLATION_RATE


@dataclass
class SimulationParams:
    """Parameters of one projection run.

    inflation_rate: %/year override; None falls back to the household default.
    today: reference date for goal contribution math; None uses start_date.
    """

    start_date: date
    end_date: date | None = None
    end_age: int | None = None
    target_member_id: str | None = None
    inflation_rate: float | None = None
    include_planned_children: bool = True
    extra_monthly_deposit: float = 0.0
    extra_deposits: list[ExtraDeposit] = field(default_factory=list)
    withdrawal_events: list[WithdrawalEvent] = field(default_factory=list)
    yearly_expenses: list[YearlyExpense] = field(default_factory=list)
    withdrawal_policy: str = SKIP
    apply_deposit_fees: bool = False
    today: date | None = None


@dataclass
class TimelinePoint:
    """Monthly snapshot. Cumulative totals are nominal."""

    date: date
    total_assets: float
    total_assets_real: float
    total_deposits: float
    total_withdrawals: float
    total_returns: float
    total_fees: float
    total_child_expenses: float
    monthly_income: float
    monthly_income_real: float
    inflation_factor: float
    accounts_breakdown: dict[str, float] = field(default_factory=dict)
    events: list[str] = field(default_factory=list)


@dataclass
class SimulationSummary:
    final_balance: float
    final_balance_real: float
    total_deposited: float
    total_withdrawn: float
    total_returns: float
    total_returns_real: float
    total_fees: float
    total_child_expenses: float
    effective_return_rate: float
    effective_return_rate_real: float
    total_inflation_factor: float


@dataclass
class GoalAnalysis:
    goal_id: str
    goal_name: str
    target_amount: float
    target_date: date | None
    projected_amount: float
    is_achievable: bool
    shortfall: float
    required_extra_monthly: float


@dataclass
class SimulationResult:
    timeline: list[TimelinePoint]
    summary: SimulationSummary
    goals_analysis: list[GoalAnalysis]
    end_date: date

    def to_dict(self) -> dict:
        """Serializable form: dataclass fields with ISO-formatted dates."""
        return _isoformat_dates(dataclasses.asdict(self))


def _isoformat_dates(value):
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _isoformat_dates(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_isoformat_dates(v) for v in value]
    return value
