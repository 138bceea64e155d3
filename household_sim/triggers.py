"""Child expense trigger evaluation.

A rule fires in a simulated month when both dimensions agree:

- the trigger window (by trigger kind) contains the dependent's current age
- the recurrence selects this month among the window's eligible months

The two are evaluated independently so each (trigger, recurrence) pair can be
checked in isolation.
"""

from datetime import date

from household_sim import models
from household_sim.models import Dependent, ExpenseRule
from household_sim.timeutil import age_in_months


def in_window(
    rule: ExpenseRule, age_months: int, age_years: int, month: int, birth_month: int,
) -> bool:
    """Whether the rule's trigger window is open at this age and calendar month."""
    match rule.trigger:
        case models.AGE_MONTHS:
            return _in_range(age_months, rule.trigger_value, rule.trigger_value_end)
        case models.AGE_YEARS:
            return _in_range(age_years, rule.trigger_value, rule.trigger_value_end)
        case models.LIFE_EVENT:
            return age_years == rule.trigger_value and month == birth_month
        case _:
            return False


def _in_range(age: int, start: int, end: int | None) -> bool:
    if end is None:
        return age == start
    return start <= age <= end


def recurrence_fires(
    recurrence: str, eligible_index: int, month: int, birth_month: int,
) -> bool:
    """Whether the eligible_index-th eligible month (0-based) is a payment month."""
    match recurrence:
        case models.ONCE:
            return eligible_index == 0
        case models.MONTHLY:
            return True
        case models.QUARTERLY:
            return eligible_index % 3 == 0
        case models.YEARLY:
            return month == birth_month
        case _:
            return False


class ExpenseTracker:
    """Per-run state: how many eligible months each (dependent, rule) has seen.

    Rules are keyed by their position in the sorted catalog, so rules sharing an id
    keep separate counters.
    """

    def __init__(self):
        self._eligible_counts: dict[tuple[str, int], int] = {}

    def due_expenses(
        self,
        dependent: Dependent,
        rules: list[ExpenseRule],
        as_of: date,
        inflation: float,
    ) -> list[tuple[ExpenseRule, float]]:
        """Rules firing for this dependent this month, with inflated amounts.

        Dependents without a birth reference, or not yet born at as_of, never fire.
        """
        birth = dependent.birth_reference()
        if birth is None or birth > as_of:
            return []
        age_months = age_in_months(birth, as_of)
        age_years = age_months // 12

        due = []
        for position, rule in enumerate(sorted(rules, key=lambda r: r.sort_order)):
            if not in_window(rule, age_months, age_years, as_of.month, birth.month):
                continue
            key = (dependent.id, position)
            index = self._eligible_counts.get(key, 0)
            self._eligible_counts[key] = index + 1
            if recurrence_fires(rule.recurrence, index, as_of.month, birth.month):
                due.append((rule, rule.amount * inflation))
        return due
