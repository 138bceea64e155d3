"""Tests for expense trigger windows, recurrences and ExpenseTracker."""

from datetime import date

import pytest
from household_sim.models import (
    AGE_MONTHS,
    AGE_YEARS,
    CHILD,
    LIFE_EVENT,
    MONTHLY,
    ONCE,
    PLANNED_CHILD,
    QUARTERLY,
    YEARLY,
    Dependent,
    ExpenseRule,
)
from household_sim.timeutil import first_of_next_month, months_between
from household_sim.triggers import ExpenseTracker, in_window, recurrence_fires


def _rule(trigger, value, end=None, recurrence=MONTHLY, amount=100.0, rule_id="r1", sort_order=0):
    return ExpenseRule(
        id=rule_id, name=f"rule {rule_id}", trigger=trigger, trigger_value=value,
        trigger_value_end=end, amount=amount, recurrence=recurrence, sort_order=sort_order,
    )


def _months(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current = first_of_next_month(current)


def _fire_dates(tracker, child, rules, start, end, inflation=1.0):
    fired = []
    for current in _months(start, end):
        for rule, amount in tracker.due_expenses(child, rules, current, inflation):
            fired.append((current, rule.id, amount))
    return fired


class TestInWindow:
    @pytest.mark.parametrize(
        "age_months, expected", [(0, True), (1, False)],
    )
    def test_age_months_pulse(self, age_months, expected):
        rule = _rule(AGE_MONTHS, 0)
        assert in_window(rule, age_months, 0, 5, 5) is expected

    @pytest.mark.parametrize(
        "age_months, expected", [(0, False), (1, True), (12, True), (13, False)],
    )
    def test_age_months_range_inclusive(self, age_months, expected):
        rule = _rule(AGE_MONTHS, 1, 12)
        assert in_window(rule, age_months, age_months // 12, 5, 5) is expected

    @pytest.mark.parametrize(
        "age_years, expected", [(5, False), (6, True), (9, True), (12, True), (13, False)],
    )
    def test_age_years_range_inclusive(self, age_years, expected):
        rule = _rule(AGE_YEARS, 6, 12)
        assert in_window(rule, age_years * 12, age_years, 1, 1) is expected

    def test_age_years_pulse(self):
        rule = _rule(AGE_YEARS, 5)
        assert in_window(rule, 60, 5, 1, 1)
        assert not in_window(rule, 72, 6, 1, 1)

    def test_event_needs_age_and_birth_month(self):
        rule = _rule(LIFE_EVENT, 13, recurrence=ONCE)
        assert in_window(rule, 160, 13, 4, 4)
        assert not in_window(rule, 160, 13, 5, 4)
        assert not in_window(rule, 170, 14, 4, 4)

    def test_unknown_trigger_never_opens(self):
        rule = _rule("graduation", 18)
        assert not in_window(rule, 216, 18, 1, 1)


class TestRecurrenceFires:
    def test_once_only_first_eligible_month(self):
        assert recurrence_fires(ONCE, 0, 3, 7)
        assert not recurrence_fires(ONCE, 1, 3, 7)

    def test_monthly_always(self):
        assert all(recurrence_fires(MONTHLY, i, (i % 12) + 1, 7) for i in range(24))

    @pytest.mark.parametrize("index, expected", [(0, True), (1, False), (2, False), (3, True), (6, True), (7, False)])
    def test_quarterly_every_third_eligible_month(self, index, expected):
        assert recurrence_fires(QUARTERLY, index, 1, 1) is expected

    def test_yearly_in_birth_month(self):
        assert recurrence_fires(YEARLY, 5, 7, 7)
        assert not recurrence_fires(YEARLY, 0, 6, 7)

    def test_unknown_recurrence(self):
        assert not recurrence_fires("weekly", 0, 1, 1)


class TestExpenseTracker:
    def setup_method(self):
        self.tracker = ExpenseTracker()
        self.child = Dependent(id="c1", name="Kid", member_type=CHILD, birth_date=date(2020, 1, 1))

    def test_age_years_monthly_boundary(self):
        """Ages 6-12 monthly: from the month age 6 is reached through the last month at 12."""
        rule = _rule(AGE_YEARS, 6, 12)
        fired = _fire_dates(self.tracker, self.child, [rule], date(2025, 1, 1), date(2034, 1, 1))
        assert len(fired) == 84
        assert fired[0][0] == date(2026, 1, 1)
        assert fired[-1][0] == date(2032, 12, 1)

    def test_age_months_once_at_birth(self):
        child = Dependent(id="c2", name="Baby", member_type=CHILD, birth_date=date(2024, 1, 1))
        rule = _rule(AGE_MONTHS, 0, recurrence=ONCE)
        fired = _fire_dates(self.tracker, child, [rule], date(2024, 1, 1), date(2024, 12, 1))
        assert [d for d, _, _ in fired] == [date(2024, 1, 1)]

    def test_born_mid_month_fires_first_month_after_birth(self):
        child = Dependent(id="c3", name="Baby", member_type=CHILD, birth_date=date(2024, 1, 15))
        rule = _rule(AGE_MONTHS, 0, recurrence=ONCE)
        fired = _fire_dates(self.tracker, child, [rule], date(2024, 1, 1), date(2024, 6, 1))
        assert [d for d, _, _ in fired] == [date(2024, 2, 1)]

    def test_once_over_range_fires_on_first_eligible_month(self):
        rule = _rule(AGE_YEARS, 1, 3, recurrence=ONCE)
        fired = _fire_dates(self.tracker, self.child, [rule], date(2020, 1, 1), date(2025, 1, 1))
        assert len(fired) == 1
        assert self.child.age_years(fired[0][0]) == 1

    def test_quarterly_spacing(self):
        rule = _rule(AGE_YEARS, 2, 3, recurrence=QUARTERLY)
        fired = _fire_dates(self.tracker, self.child, [rule], date(2020, 1, 1), date(2025, 1, 1))
        dates = [d for d, _, _ in fired]
        assert len(dates) >= 7
        assert self.child.age_years(dates[0]) == 2
        assert all(months_between(a, b) == 3 for a, b in zip(dates, dates[1:]))

    def test_yearly_fires_in_birth_month_inside_window(self):
        child = Dependent(id="c4", name="Kid", member_type=CHILD, birth_date=date(2024, 3, 10))
        rule = _rule(AGE_YEARS, 1, 3, recurrence=YEARLY)
        fired = _fire_dates(self.tracker, child, [rule], date(2024, 1, 1), date(2030, 1, 1))
        assert [d for d, _, _ in fired] == [date(2026, 3, 1), date(2027, 3, 1), date(2028, 3, 1)]

    def test_life_event_fires_once(self):
        child = Dependent(id="c5", name="Kid", member_type=CHILD, birth_date=date(2024, 3, 10))
        rule = _rule(LIFE_EVENT, 1, recurrence=ONCE)
        fired = _fire_dates(self.tracker, child, [rule], date(2024, 1, 1), date(2028, 12, 1))
        assert [d for d, _, _ in fired] == [date(2026, 3, 1)]

    def test_amount_scaled_by_inflation(self):
        rule = _rule(AGE_YEARS, 6, 12, amount=1000.0)
        due = self.tracker.due_expenses(self.child, [rule], date(2026, 1, 1), 1.2)
        assert due[0][1] == pytest.approx(1200.0)

    def test_planned_child_uses_expected_birth_date(self):
        planned = Dependent(
            id="p1", name="Planned", member_type=PLANNED_CHILD, expected_birth_date=date(2025, 6, 1),
        )
        rule = _rule(AGE_MONTHS, 0, recurrence=ONCE)
        assert self.tracker.due_expenses(planned, [rule], date(2025, 5, 1), 1.0) == []
        assert len(self.tracker.due_expenses(planned, [rule], date(2025, 6, 1), 1.0)) == 1

    def test_no_birth_reference_never_fires(self):
        unknown = Dependent(id="u1", name="Unknown", member_type=PLANNED_CHILD)
        rule = _rule(AGE_MONTHS, 0, recurrence=ONCE)
        assert self.tracker.due_expenses(unknown, [rule], date(2025, 1, 1), 1.0) == []

    def test_rules_in_sort_order(self):
        rules = [
            _rule(AGE_YEARS, 6, 12, rule_id="b", sort_order=2),
            _rule(AGE_YEARS, 6, 12, rule_id="a", sort_order=1),
        ]
        due = self.tracker.due_expenses(self.child, rules, date(2026, 1, 1), 1.0)
        assert [r.id for r, _ in due] == ["a", "b"]

    def test_counts_are_per_dependent(self):
        sibling = Dependent(id="c6", name="Twin", member_type=CHILD, birth_date=date(2020, 1, 1))
        rule = _rule(AGE_YEARS, 6, 12, recurrence=ONCE)
        assert len(self.tracker.due_expenses(self.child, [rule], date(2026, 1, 1), 1.0)) == 1
        assert len(self.tracker.due_expenses(sibling, [rule], date(2026, 1, 1), 1.0)) == 1
        assert self.tracker.due_expenses(self.child, [rule], date(2026, 2, 1), 1.0) == []

    def test_rules_sharing_an_id_count_separately(self):
        rules = [
            _rule(AGE_YEARS, 1, 3, recurrence=ONCE, rule_id="x", sort_order=0),
            _rule(AGE_YEARS, 6, 7, recurrence=ONCE, rule_id="x", sort_order=1),
        ]
        fired = _fire_dates(self.tracker, self.child, rules, date(2020, 1, 1), date(2029, 1, 1))
        assert [d for d, _, _ in fired] == [date(2021, 1, 1), date(2026, 1, 1)]
