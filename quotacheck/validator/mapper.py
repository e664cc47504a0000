# ==============================================================================
# quotacheck/validator/mapper.py
# ------------------------------------------------------------------------------
# Infers column positions from header rows. Quota workbooks come in several
# layouts, so positions are detected once per sheet and handed explicitly to
# the record builders.
# ==============================================================================

import logging
from collections import namedtuple

from .errors import InputShapeError
from .schema import (LEGACY_MONTH_COLUMNS, MONTHS, QUOTA_METADATA_FALLBACKS,
                     REFERENCE_COLUMNS, REFERENCE_HEADER_MARKER,
                     REFERENCE_HEADER_SCAN_ROWS, SECONDARY_MARKER, Y2_MARKER)

QuotaColumnMap = namedtuple('QuotaColumnMap', [
    'submission_month', 'eid', 'name', 'level', 'rep_region', 'quota_start_date', 'dual_metric',
    'y1',          # month -> column, always complete (legacy fallback)
    'y2y3',        # month -> column (-1 when that month is missing) or None when absent
    'comp2_y1',
    'comp2_y2y3',
])


def _metadata_field(text):
    """Names the metadata column a header labels, or None."""
    lower = text.lower()
    if lower.startswith('submission'):
        return 'submission_month'
    if text == 'EID':
        return 'eid'
    if text == 'Name':
        return 'name'
    if text == 'Level':
        return 'level'
    if 'rep region' in lower:
        return 'rep_region'
    if 'quota start' in lower:
        return 'quota_start_date'
    if 'single/dual' in lower or 'dual metric' in lower:
        return 'dual_metric'
    return None


def header_month(text):
    """
    Returns the month a header cell names, or None.

    A cell names a month when it is exactly the abbreviation or ends with a
    separator followed by it ('Comp1: Y1 - JAN', 'Y2 & Y3\\nJAN').
    """
    upper = text.upper()
    for month in MONTHS:
        if text == month or upper.endswith(f'- {month}') or upper.endswith(f'\n{month}'):
            return month
    return None


def _complete_bucket(found):
    if not found:
        return None
    return {month: found.get(month, -1) for month in MONTHS}


def detect_quota_columns(header):
    """
    Maps a quota-sheet header row to column positions.

    Month columns are sorted into four buckets by the markers in their
    header: COMP2 selects the secondary component, Y2 the combined
    year-2-and-3 amounts. The first column seen for a (bucket, month) pair
    wins. Missing primary Y1 months fall back to the legacy fixed layout;
    the other buckets are only present when at least one month was found.

    Args:
        header (list): The raw header cell values.

    Returns:
        QuotaColumnMap: The detected positions.
    """
    metadata = {}
    found = {'y1': {}, 'y2y3': {}, 'comp2_y1': {}, 'comp2_y2y3': {}}

    for col, cell in enumerate(header):
        if cell is None:
            continue
        text = str(cell).strip()

        field = _metadata_field(text)
        if field:
            metadata[field] = col

        month = header_month(text)
        if month is None:
            continue

        upper = text.upper()
        is_comp2 = SECONDARY_MARKER in upper
        is_y2y3 = Y2_MARKER in upper
        if is_comp2 and is_y2y3:
            bucket = 'comp2_y2y3'
        elif is_comp2:
            bucket = 'comp2_y1'
        elif is_y2y3:
            bucket = 'y2y3'
        else:
            bucket = 'y1'
        found[bucket].setdefault(month, col)

    y1 = {month: found['y1'].get(month, LEGACY_MONTH_COLUMNS[month]) for month in MONTHS}
    if not found['y1']:
        logging.debug("No Y1 month headers detected; using the legacy fixed month columns.")

    positions = {field: metadata.get(field, fallback) for field, fallback in QUOTA_METADATA_FALLBACKS.items()}
    return QuotaColumnMap(
        y1=y1,
        y2y3=_complete_bucket(found['y2y3']),
        comp2_y1=_complete_bucket(found['comp2_y1']),
        comp2_y2y3=_complete_bucket(found['comp2_y2y3']),
        **positions,
    )


def locate_reference_header(rows):
    """
    Finds the roster header row: the first of the leading rows holding a cell
    that contains 'employee id' (case-insensitive).

    Raises:
        InputShapeError: If no such row exists.
    """
    for index, row in enumerate(rows[:REFERENCE_HEADER_SCAN_ROWS]):
        if not row:
            continue
        for cell in row:
            if cell is not None and REFERENCE_HEADER_MARKER in str(cell).strip().lower():
                return index
    raise InputShapeError('Could not find header row with "Employee ID" in reference file')


def map_reference_columns(header):
    """Maps roster fields to columns by exact header label, with fixed fallbacks."""
    labels = {}
    for col, cell in enumerate(header or []):
        if cell is not None:
            labels[str(cell).strip()] = col
    return {field: labels.get(label, fallback) for field, (label, fallback) in REFERENCE_COLUMNS.items()}
