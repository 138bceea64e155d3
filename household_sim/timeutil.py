"""Calendar arithmetic, inflation factors and age computation."""

from datetime import date

from dateutil.relativedelta import relativedelta

DAYS_PER_YEAR = 365.25
DAYS_PER_MONTH = 30.44  # age month counting; trigger firings depend on this exact value


def inflation_factor(elapsed_years: float, annual_rate: float) -> float:
    """Multiplier turning today's money into nominal money after elapsed_years.

    annual_rate is a percentage (2.5 = 2.5%/year).
    """
    return (1 + annual_rate / 100) ** elapsed_years


def years_between(start: date, end: date) -> float:
    """Fractional years between two dates on a 365.25-day year."""
    return (end - start).days / DAYS_PER_YEAR


def age_in_months(birth: date, as_of: date) -> int:
    """Whole months of age at as_of (30.44-day months, floored)."""
    return int((as_of - birth).days // DAYS_PER_MONTH)


def age_in_years(birth: date, as_of: date) -> int:
    return age_in_months(birth, as_of) // 12


def add_years(d: date, years: int) -> date:
    """Same calendar day `years` later (Feb 29 clamps to Feb 28)."""
    return d + relativedelta(years=years)


def first_of_next_month(d: date) -> date:
    return d.replace(day=1) + relativedelta(months=1)


def months_between(start: date, end: date) -> int:
    """Calendar month difference, ignoring the day of month. Negative if end < start."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month
