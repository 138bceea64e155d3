"""Child expense catalogs: the default template, assignment and cost estimates."""

from household_sim.models import (
    AGE_MONTHS,
    AGE_YEARS,
    CHILD,
    LIFE_EVENT,
    MONTHLY,
    ONCE,
    PLANNED_CHILD,
    YEARLY,
    Dependent,
    ExpenseCatalog,
    ExpenseRule,
)

DEFAULT_CATALOG_ID = "default"

# (name, trigger, value, value_end, amount, recurrence), today's money per payment
_DEFAULT_RULES: tuple[tuple[str, str, int, int | None, float, str], ...] = (
    ("Birth and initial equipment", AGE_MONTHS, 0, None, 10000, ONCE),
    ("First-year monthly costs", AGE_MONTHS, 1, 12, 3000, MONTHLY),
    ("Daycare", AGE_YEARS, 1, 3, 3500, MONTHLY),
    ("Kindergarten", AGE_YEARS, 3, 6, 1500, MONTHLY),
    ("Primary school", AGE_YEARS, 6, 12, 1000, MONTHLY),
    ("Coming-of-age celebration", LIFE_EVENT, 13, None, 15000, ONCE),
    ("High school", AGE_YEARS, 13, 18, 1200, MONTHLY),
    ("Graduation trip", LIFE_EVENT, 18, None, 10000, ONCE),
    ("National service", AGE_YEARS, 18, 21, 500, MONTHLY),
    ("Bachelor's degree", AGE_YEARS, 21, 24, 3000, MONTHLY),
    ("Wedding", LIFE_EVENT, 25, None, 250000, ONCE),
)


def default_catalog() -> ExpenseCatalog:
    """Fresh copy of the standard child expense template."""
    rules = [
        ExpenseRule(
            id=f"{DEFAULT_CATALOG_ID}-{i}",
            name=name,
            trigger=trigger,
            trigger_value=value,
            trigger_value_end=value_end,
            amount=amount,
            recurrence=recurrence,
            sort_order=i,
        )
        for i, (name, trigger, value, value_end, amount, recurrence) in enumerate(_DEFAULT_RULES, start=1)
    ]
    return ExpenseCatalog(id=DEFAULT_CATALOG_ID, name="Standard child costs", rules=rules, is_default=True)


def estimated_total(catalog: ExpenseCatalog) -> float:
    """Rough lifetime cost of a catalog in today's money.

    monthly and yearly rules count one payment per unit of their window;
    once and quarterly rules count a single payment.
    """
    total = 0.0
    for rule in catalog.rules:
        if rule.recurrence in (MONTHLY, YEARLY) and rule.trigger_value_end is not None:
            total += rule.amount * (rule.trigger_value_end - rule.trigger_value + 1)
        else:
            total += rule.amount
    return total


def resolve_catalogs(
    dependents: list[Dependent],
    catalogs: list[ExpenseCatalog],
    assignments: dict[str, str] | None = None,
    include_planned_children: bool = True,
) -> dict[str, list[ExpenseRule]]:
    """Map each child's id to its expense rules.

    A child uses its assigned catalog (assignments: child id -> catalog id), else the
    household's default catalog. Children with neither are left out; planned children
    are left out unless include_planned_children.
    """
    assignments = assignments or {}
    by_id = {c.id: c for c in catalogs}
    default = next((c for c in catalogs if c.is_default), None)

    resolved: dict[str, list[ExpenseRule]] = {}
    for dep in dependents:
        if dep.member_type == PLANNED_CHILD and not include_planned_children:
            continue
        if dep.member_type not in (CHILD, PLANNED_CHILD):
            continue
        catalog = by_id.get(assignments.get(dep.id, ""), default)
        if catalog is None:
            continue
        resolved[dep.id] = sorted(catalog.rules, key=lambda r: r.sort_order)
    return resolved
