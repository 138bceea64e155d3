"""Goal feasibility against a completed timeline."""

import math
from dataclasses import dataclass
from datetime import date

from household_sim.models import Dependent, Goal, GoalAnalysis, TimelinePoint
from household_sim.timeutil import add_years, months_between


def proportional_share(total_assets: float, target_amount: float, final_balance: float) -> float:
    """Projected amount for a goal not tied to an account.

    Scales the point's total assets by target / final balance. This is a proxy, not
    a per-goal allocation; it is kept separate so another policy can replace it.
    """
    if final_balance == 0:
        return 0.0
    return total_assets * (target_amount / final_balance)


def resolve_target_date(goal: Goal, dependents: list[Dependent]) -> date | None:
    """Goal target date, or linked member's birth + target_age when only an age is set."""
    if goal.target_date is not None:
        return goal.target_date
    if goal.target_age is None or goal.linked_member_id is None:
        return None
    member = next((d for d in dependents if d.id == goal.linked_member_id), None)
    if member is None or member.birth_reference() is None:
        return None
    return add_years(member.birth_reference(), goal.target_age)


def find_point(timeline: list[TimelinePoint], target_date: date | None) -> TimelinePoint | None:
    """First point at or after target_date; the final point when undated."""
    if not timeline:
        return None
    if target_date is None:
        return timeline[-1]
    return next((p for p in timeline if p.date >= target_date), None)


def projected_amount(
    goal: Goal, point: TimelinePoint | None, final_balance: float,
    share_policy=proportional_share,
) -> float:
    if point is None:
        return 0.0
    if goal.linked_account_id is not None:
        return point.accounts_breakdown.get(goal.linked_account_id, 0.0)
    return share_policy(point.total_assets, goal.target_amount, final_balance)


def required_extra_monthly(shortfall: float, target_date: date, today: date) -> float:
    """Flat monthly top-up closing the shortfall by target_date, counted from today."""
    months = max(1, months_between(today, target_date))
    return float(math.ceil(shortfall / months))


def analyze_goals(
    goals: list[Goal],
    timeline: list[TimelinePoint],
    final_balance: float,
    today: date,
    dependents: list[Dependent] | None = None,
    share_policy=proportional_share,
) -> list[GoalAnalysis]:
    dependents = dependents or []
    analyses = []
    for goal in goals:
        target_date = resolve_target_date(goal, dependents)
        point = find_point(timeline, target_date)
        projected = projected_amount(goal, point, final_balance, share_policy)
        achievable = projected >= goal.target_amount
        shortfall = 0.0 if achievable else goal.target_amount - projected
        extra = 0.0
        if not achievable and target_date is not None:
            extra = required_extra_monthly(shortfall, target_date, today)
        analyses.append(GoalAnalysis(
            goal_id=goal.id,
            goal_name=goal.name,
            target_amount=goal.target_amount,
            target_date=target_date,
            projected_amount=projected,
            is_achievable=achievable,
            shortfall=shortfall,
            required_extra_monthly=extra,
        ))
    return analyses


@dataclass
class GoalProgress:
    progress_percent: int
    months_remaining: int | None
    required_monthly: float | None


def goal_progress(goal: Goal, today: date) -> GoalProgress:
    """Progress of the goal's saved amount, independent of any projection."""
    if goal.target_amount > 0:
        percent = round(goal.current_amount / goal.target_amount * 100)
    else:
        percent = 0
    months_remaining = None
    required = None
    if goal.target_date is not None:
        months_remaining = max(0, months_between(today, goal.target_date))
        if months_remaining > 0:
            remaining = goal.target_amount - goal.current_amount
            required = float(max(0, math.ceil(remaining / months_remaining)))
    return GoalProgress(percent, months_remaining, required)
