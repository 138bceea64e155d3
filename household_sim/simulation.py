"""Core simulation engine: month-by-month household net worth projection."""

import copy
from datetime import date

from household_sim.catalogs import resolve_catalogs
from household_sim.goals import analyze_goals
from household_sim.ledger import AccountState, step_account
from household_sim.models import (
    CHILD_MEMBER_TYPES,
    DEFAULT_INFLATION_RATE,
    INCOME_MEMBER_TYPES,
    LIFE_EVENT,
    MEMBER_TYPES,
    PLANNED_CHILD,
    POLICIES,
    RECURRENCES,
    SELF,
    TRIGGER_KINDS,
    Account,
    Dependent,
    ExpenseRule,
    Goal,
    Household,
    IncomeRecord,
    SimulationParams,
    SimulationResult,
    SimulationSummary,
    TimelinePoint,
)
from household_sim.timeutil import (
    add_years,
    first_of_next_month,
    inflation_factor,
    same_month,
    years_between,
)
from household_sim.triggers import ExpenseTracker
from household_sim.withdrawals import withdraw, withdraw_from, withdraw_partial

# Horizon resolution
DEFAULT_HORIZON_YEARS = 30
ASSUMED_CURRENT_AGE = 30  # end_age fallback when the target member has no birth date

# Input bounds checked by validate_params (the engine itself never re-validates)
MIN_END_AGE = 20
MAX_END_AGE = 120
MAX_INFLATION_RATE = 20.0
MAX_ABS_RATE = 100.0


def validate_params(
    params: SimulationParams,
    accounts: list[Account],
    dependents: list[Dependent] | None = None,
) -> list[str]:
    """Check inputs before a run. Returns list of error messages."""
    errors = []
    if params.end_age is not None and not MIN_END_AGE <= params.end_age <= MAX_END_AGE:
        errors.append(f"end_age {params.end_age} is outside {MIN_END_AGE}-{MAX_END_AGE}")
    if params.inflation_rate is not None and not 0 <= params.inflation_rate <= MAX_INFLATION_RATE:
        errors.append(f"inflation_rate {params.inflation_rate}% is outside 0-{MAX_INFLATION_RATE:.0f}%")
    if params.extra_monthly_deposit < 0:
        errors.append("extra_monthly_deposit must not be negative")
    if params.withdrawal_policy not in POLICIES:
        errors.append(
            f"unknown withdrawal_policy '{params.withdrawal_policy}' (expected one of {', '.join(POLICIES)})"
        )
    for expense in params.yearly_expenses:
        if not 1 <= expense.month <= 12:
            errors.append(f"yearly expense '{expense.name}': month {expense.month} is outside 1-12")
        if expense.amount < 0:
            errors.append(f"yearly expense '{expense.name}': amount must not be negative")
    for event in [*params.extra_deposits, *params.withdrawal_events]:
        if event.amount < 0:
            errors.append(f"one-off event on {event.date.isoformat()}: amount must not be negative")

    account_ids = {a.id for a in accounts}
    for event in [*params.extra_deposits, *params.withdrawal_events]:
        if event.account_id is not None and event.account_id not in account_ids:
            errors.append(f"one-off event on {event.date.isoformat()}: unknown account '{event.account_id}'")
    for account in accounts:
        if account.balance < 0:
            errors.append(f"account '{account.name}': balance must not be negative")
        if abs(account.annual_return) > MAX_ABS_RATE:
            errors.append(f"account '{account.name}': annual_return {account.annual_return}% is out of range")
        for label in ("management_fee", "deposit_fee", "monthly_deposit", "employer_deposit"):
            if getattr(account, label) < 0:
                errors.append(f"account '{account.name}': {label} must not be negative")

    for dep in dependents or []:
        if dep.member_type not in MEMBER_TYPES:
            errors.append(f"member '{dep.name}': unknown member_type '{dep.member_type}'")
    return errors


def validate_rules(rules: list[ExpenseRule]) -> list[str]:
    """Check expense rules. Returns list of error messages."""
    errors = []
    rule_ids = [r.id for r in rules]
    if len(set(rule_ids)) != len(rule_ids):
        errors.append("duplicate rule ids")
    for rule in rules:
        if rule.trigger not in TRIGGER_KINDS:
            errors.append(f"rule '{rule.name}': unknown trigger '{rule.trigger}'")
        if rule.recurrence not in RECURRENCES:
            errors.append(f"rule '{rule.name}': unknown recurrence '{rule.recurrence}'")
        if rule.trigger_value < 0:
            errors.append(f"rule '{rule.name}': trigger_value must not be negative")
        if rule.trigger_value_end is not None:
            if rule.trigger == LIFE_EVENT:
                errors.append(f"rule '{rule.name}': life events take no trigger_value_end")
            elif rule.trigger_value_end < rule.trigger_value:
                errors.append(f"rule '{rule.name}': trigger_value_end is before trigger_value")
        if rule.amount < 0:
            errors.append(f"rule '{rule.name}': amount must not be negative")
    return errors


def validate_household(household: Household) -> list[str]:
    """Check references between household records. Returns list of error messages."""
    errors = []
    account_ids = [a.id for a in household.accounts]
    if len(set(account_ids)) != len(account_ids):
        errors.append("duplicate account ids")
    member_ids = {m.id for m in household.members}
    child_ids = {m.id for m in household.members if m.member_type in CHILD_MEMBER_TYPES}
    catalog_ids = {c.id for c in household.catalogs}

    for member in household.members:
        if member.member_type not in MEMBER_TYPES:
            errors.append(f"member '{member.name}': unknown member_type '{member.member_type}'")
    for record in household.income:
        if record.member_id not in member_ids:
            errors.append(f"income record: unknown member '{record.member_id}'")
    for child_id, catalog_id in household.assignments.items():
        if child_id not in child_ids:
            errors.append(f"catalog assignment: '{child_id}' is not a child")
        if catalog_id not in catalog_ids:
            errors.append(f"catalog assignment: unknown catalog '{catalog_id}'")
    for catalog in household.catalogs:
        errors.extend(f"catalog '{catalog.name}': {e}" for e in validate_rules(catalog.rules))
    for goal in household.goals:
        if goal.target_amount <= 0:
            errors.append(f"goal '{goal.name}': target_amount must be positive")
        if goal.linked_account_id is not None and goal.linked_account_id not in account_ids:
            errors.append(f"goal '{goal.name}': unknown account '{goal.linked_account_id}'")
        if goal.linked_member_id is not None and goal.linked_member_id not in member_ids:
            errors.append(f"goal '{goal.name}': unknown member '{goal.linked_member_id}'")
    if not 0 <= household.inflation_rate <= MAX_INFLATION_RATE:
        errors.append(f"default_inflation_rate {household.inflation_rate}% is outside 0-{MAX_INFLATION_RATE:.0f}%")
    return errors


def active_dependents(dependents: list[Dependent], include_planned_children: bool) -> list[Dependent]:
    """Dependents the run considers; planned children only when opted in."""
    if include_planned_children:
        return list(dependents)
    return [d for d in dependents if d.member_type != PLANNED_CHILD]


def resolve_end_date(params: SimulationParams, dependents: list[Dependent]) -> date:
    """Resolve the simulation horizon.

    Explicit end_date, else end_age of the target member (target_member_id, else the
    'self' member), else DEFAULT_HORIZON_YEARS. A horizon not after start_date falls
    back to DEFAULT_HORIZON_YEARS.
    """
    start = params.start_date
    if params.end_date is not None:
        end = params.end_date
    elif params.end_age is not None:
        if params.target_member_id is not None:
            target = next((d for d in dependents if d.id == params.target_member_id), None)
        else:
            target = next((d for d in dependents if d.member_type == SELF), None)
        try:
            if target is not None and target.birth_date is not None:
                end = add_years(target.birth_date, params.end_age)
            else:
                end = add_years(start, params.end_age - ASSUMED_CURRENT_AGE)
        except (ValueError, OverflowError):
            # outside the representable calendar
            end = start
    else:
        end = add_years(start, DEFAULT_HORIZON_YEARS)

    if end <= start:
        end = add_years(start, DEFAULT_HORIZON_YEARS)
    return end


def income_at(records: list[IncomeRecord], as_of: date) -> float:
    """Household monthly income at as_of: latest effective record per member, summed."""
    latest: dict[str, IncomeRecord] = {}
    for record in records:
        if record.effective_date > as_of:
            continue
        current = latest.get(record.member_id)
        if current is None or record.effective_date > current.effective_date:
            latest[record.member_id] = record
    return sum(r.amount for r in latest.values())


def _income_records(records: list[IncomeRecord], dependents: list[Dependent]) -> list[IncomeRecord]:
    """Drop records of members that are not income sources (children, excluded members)."""
    non_earners = {d.id for d in dependents if d.member_type not in INCOME_MEMBER_TYPES}
    return [r for r in records if r.member_id not in non_earners]


def _fmt_amount(amount: float) -> str:
    return f"{amount:,.0f}"


def run_simulation(
    params: SimulationParams,
    accounts: list[Account],
    dependents: list[Dependent] | None = None,
    catalogs_by_dependent: dict[str, list[ExpenseRule]] | None = None,
    goals: list[Goal] | None = None,
    inflation_rate_default: float = DEFAULT_INFLATION_RATE,
    income_history: list[IncomeRecord] | None = None,
) -> SimulationResult:
    """Project household net worth month by month from start_date to the resolved end date.

    The first timeline point is the opening snapshot; growth and recurring deposits
    accrue once per elapsed month after it. Inputs are never mutated.
    """
    all_dependents = list(dependents or [])
    dependents = active_dependents(all_dependents, params.include_planned_children)
    active_ids = {d.id for d in dependents}
    catalogs_by_dependent = {
        dep_id: rules for dep_id, rules in (catalogs_by_dependent or {}).items()
        if dep_id in active_ids
    }
    children = [
        d for d in dependents
        if d.member_type in CHILD_MEMBER_TYPES and d.id in catalogs_by_dependent
    ]
    income_records = _income_records(list(income_history or []), all_dependents)
    goals = list(goals or [])

    rate = params.inflation_rate if params.inflation_rate is not None else inflation_rate_default
    start_date = params.start_date
    end_date = resolve_end_date(params, dependents)

    states = [AccountState.from_account(copy.deepcopy(a)) for a in accounts]
    states_by_id = {s.id: s for s in states}
    extra_share = params.extra_monthly_deposit / len(states) if states else 0.0
    policy = params.withdrawal_policy
    tracker = ExpenseTracker()

    def in_horizon(d: date) -> bool:
        return start_date <= d <= end_date

    total_deposits = 0.0
    total_withdrawals = 0.0
    total_returns = 0.0
    total_fees = 0.0
    total_child_expenses = 0.0

    timeline: list[TimelinePoint] = []
    current = start_date
    while current <= end_date:
        events: list[str] = []
        elapsed_years = years_between(start_date, current)
        inflation = inflation_factor(elapsed_years, rate)

        # Recurring deposits, returns and fees (not at the opening snapshot)
        if current != start_date:
            for state in states:
                step = step_account(
                    state, inflation, extra_share, params.apply_deposit_fees,
                )
                total_deposits += step.deposits
                total_returns += step.returns
                total_fees += step.fees

        # Child expenses
        for child in children:
            due = tracker.due_expenses(child, catalogs_by_dependent[child.id], current, inflation)
            for rule, amount in due:
                total_child_expenses += amount
                total_withdrawals += withdraw(states, amount, policy)
                events.append(f"{rule.name} - {child.name} ({_fmt_amount(amount)})")

        # One-off deposits
        for extra in params.extra_deposits:
            if not (same_month(extra.date, current) and in_horizon(extra.date)):
                continue
            target = states_by_id.get(extra.account_id) if extra.account_id else (states[0] if states else None)
            if target is None:
                continue
            target.balance += extra.amount
            total_deposits += extra.amount
            events.append(f"Extra deposit: {extra.description} ({_fmt_amount(extra.amount)})")

        # One-off withdrawals
        for event in params.withdrawal_events:
            if not (same_month(event.date, current) and in_horizon(event.date)):
                continue
            target = states_by_id.get(event.account_id) if event.account_id else (states[0] if states else None)
            if target is None:
                continue
            withdrawn = withdraw_from(states, target, event.amount, policy)
            if withdrawn > 0:
                total_withdrawals += withdrawn
                events.append(f"Withdrawal: {event.description} ({_fmt_amount(withdrawn)})")

        # Yearly expenses
        for expense in params.yearly_expenses:
            if current.month != expense.month:
                continue
            amount = expense.amount * inflation if expense.adjust_for_inflation else expense.amount
            withdrawn = withdraw_partial(states, amount, policy)
            if withdrawn > 0:
                total_withdrawals += withdrawn
                events.append(f"{expense.name} ({_fmt_amount(withdrawn)})")

        total_assets = sum(s.balance for s in states)
        base_income = income_at(income_records, current)
        timeline.append(TimelinePoint(
            date=current,
            total_assets=total_assets,
            total_assets_real=total_assets / inflation,
            total_deposits=total_deposits,
            total_withdrawals=total_withdrawals,
            total_returns=total_returns,
            total_fees=total_fees,
            total_child_expenses=total_child_expenses,
            monthly_income=base_income * inflation,
            monthly_income_real=base_income,
            inflation_factor=inflation,
            accounts_breakdown={s.id: s.balance for s in states},
            events=events,
        ))

        current = first_of_next_month(current)

    summary = _summarize(
        start_date, end_date, rate, accounts, states,
        total_deposits, total_withdrawals, total_returns, total_fees, total_child_expenses,
    )
    today = params.today or params.start_date
    goals_analysis = analyze_goals(goals, timeline, summary.final_balance, today, dependents)
    return SimulationResult(
        timeline=timeline, summary=summary, goals_analysis=goals_analysis, end_date=end_date,
    )


def _summarize(
    start_date: date,
    end_date: date,
    rate: float,
    accounts: list[Account],
    states: list[AccountState],
    total_deposits: float,
    total_withdrawals: float,
    total_returns: float,
    total_fees: float,
    total_child_expenses: float,
) -> SimulationSummary:
    """Final metrics. The inflation factor covers the whole horizon, not the last point."""
    total_inflation = inflation_factor(years_between(start_date, end_date), rate)
    final_balance = sum(s.balance for s in states)
    final_balance_real = final_balance / total_inflation
    initial_balance = sum(float(a.balance) for a in accounts)

    if initial_balance > 0:
        effective_return = (final_balance / initial_balance - 1) * 100
        effective_return_real = (final_balance_real / initial_balance - 1) * 100
    else:
        effective_return = 0.0
        effective_return_real = 0.0

    return SimulationSummary(
        final_balance=final_balance,
        final_balance_real=final_balance_real,
        total_deposited=total_deposits,
        total_withdrawn=total_withdrawals,
        total_returns=total_returns,
        total_returns_real=total_returns / total_inflation,
        total_fees=total_fees,
        total_child_expenses=total_child_expenses,
        effective_return_rate=effective_return,
        effective_return_rate_real=effective_return_real,
        total_inflation_factor=total_inflation,
    )


def simulate_household(household: Household, params: SimulationParams) -> SimulationResult:
    """Resolve each child's expense catalog and run the projection for a household snapshot."""
    catalogs_by_dependent = resolve_catalogs(
        household.members, household.catalogs, household.assignments,
        params.include_planned_children,
    )
    return run_simulation(
        params,
        household.accounts,
        household.members,
        catalogs_by_dependent,
        household.goals,
        household.inflation_rate,
        household.income,
    )
