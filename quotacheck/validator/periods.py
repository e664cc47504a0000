# ==============================================================================
# quotacheck/validator/periods.py
# ------------------------------------------------------------------------------
# Calendar and fiscal-period helpers: 'Mon-YY' labels, fiscal halves and
# normalization of spreadsheet date cells.
# ==============================================================================

import re
from collections import namedtuple
from datetime import date, datetime, timedelta

import pandas as pd

from .errors import PeriodParseError
from .schema import H1_MONTHS, H2_MONTHS, MONTH_LABELS

_PERIOD_PATTERN = re.compile(r'^(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)-(\d{2})$', re.IGNORECASE)
_EXCEL_EPOCH = datetime(1899, 12, 31)

FiscalHalf = namedtuple('FiscalHalf', ['name', 'year', 'first_month', 'last_month', 'month_keys'])


def parse_period_label(label):
    """
    Parses a submission/processing period label such as 'Jan-26'.

    Returns:
        tuple: (year, month) with a four-digit year and a 1-based month.

    Raises:
        PeriodParseError: If the label is not a three-letter month, a hyphen
            and a two-digit year.
    """
    match = _PERIOD_PATTERN.match(str(label or '').strip())
    if not match:
        raise PeriodParseError(label)
    month = [m.lower() for m in MONTH_LABELS].index(match.group(1).lower()) + 1
    year = 2000 + int(match.group(2))
    return year, month


def format_period_label(value):
    """Formats a date as its 'Mon-YY' period label."""
    return f"{MONTH_LABELS[value.month - 1]}-{str(value.year)[-2:]}"


def sort_period_labels(labels):
    """Sorts 'Mon-YY' labels chronologically, dropping duplicates."""
    return sorted(set(labels), key=parse_period_label)


def fiscal_half(year, month):
    """
    Returns the fiscal half a submission period falls in.

    The fiscal year begins in July: calendar months 7-12 form H1 and months
    1-6 form H2. Both halves are anchored on the period's calendar year.
    """
    if month >= 7:
        return FiscalHalf('H1', year, 7, 12, H1_MONTHS)
    return FiscalHalf('H2', year, 1, 6, H2_MONTHS)


def processing_months(today=None):
    """
    Lists the LMS processing periods available on a given day: every month
    from the start of the current fiscal year (July) through the current month.
    """
    today = today or date.today()
    if today.month >= 7:
        months = [(today.year, m) for m in range(7, today.month + 1)]
    else:
        months = [(today.year - 1, m) for m in range(7, 13)]
        months += [(today.year, m) for m in range(1, today.month + 1)]
    return [format_period_label(date(y, m, 1)) for y, m in months]


def excel_serial_to_date(serial):
    """
    Converts an Excel serial day number to a date.

    Serial 1 is 1900-01-01. Excel also counts a fictitious 1900-02-29
    (serial 60), so serials above 59 are shifted back one day.
    """
    adjusted = serial - 1 if serial > 59 else serial
    return (_EXCEL_EPOCH + timedelta(days=int(adjusted))).date()


def parse_date(value):
    """
    Normalizes a raw date cell to a date, or None when it holds no date.

    Accepts native date/datetime cells, Excel serial numbers (> 1),
    'Mon-YY' labels (the first of that month) and other date-like strings.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        if value != value or value <= 1:  # NaN or not a plausible serial
            return None
        return excel_serial_to_date(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _PERIOD_PATTERN.match(text):
            year, month = parse_period_label(text)
            return date(year, month, 1)
        parsed = pd.to_datetime(text, errors='coerce')
        if pd.isna(parsed):
            return None
        return parsed.date()
    return None
