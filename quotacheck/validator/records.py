# ==============================================================================
# quotacheck/validator/records.py
# ------------------------------------------------------------------------------
# Typed domain records and the builders that turn raw sheet rows (lists of
# cell values) into them. Records are immutable once built.
# ==============================================================================

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from .periods import parse_date
from .schema import (BUCKET_COMP2_Y1, BUCKET_COMP2_Y2Y3, BUCKET_Y1, BUCKET_Y2Y3,
                     DUAL_METRIC_FLAG, LMS_COLUMNS, LMS_MONTHS, MONTHS,
                     PLACEHOLDER_EIDS, PLACEHOLDER_PREFIX)

# A month -> raw value map. Values are numbers, strings or None.
MonthlyAmounts = Dict[str, Any]


# --- Cell helpers ---

def cell_value(row, index):
    """Returns the raw value at a column position, or None when out of range."""
    if index is None or index < 0 or index >= len(row):
        return None
    return row[index]


def cell_text(row, index):
    """Returns the trimmed text of a cell ('' for empty cells)."""
    value = cell_value(row, index)
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, date):
        value = value.isoformat()
    return str(value).strip()


def is_placeholder_eid(eid):
    """True for blank, '-' and to-be-hired ('TBH...') identifiers."""
    eid = (eid or '').strip()
    return eid in PLACEHOLDER_EIDS or eid.lower().startswith(PLACEHOLDER_PREFIX)


def read_month_columns(row, month_columns):
    """Reads one amount bucket; month columns mapped to -1 read as None."""
    return {month: cell_value(row, month_columns.get(month, -1)) for month in MONTHS}


# --- Records ---

@dataclass(frozen=True)
class QuotaRecord:
    """One quota-plan line of the fiscal-half workbook."""
    sheet: str
    row: int
    eid: str
    name: str
    level: str
    rep_region: str
    dual_metric: str
    quota_start_date: Optional[date]
    submission_month: Optional[date]
    # bucket name -> monthly amounts; a missing key means the bucket is not
    # applicable to this file, an all-None map means it is applicable but empty.
    buckets: Dict[str, MonthlyAmounts]

    @property
    def is_dual_metric(self):
        return self.dual_metric.upper() == DUAL_METRIC_FLAG

    @property
    def is_placeholder(self):
        return is_placeholder_eid(self.eid)

    def bucket(self, name):
        return self.buckets.get(name)

    def has_bucket(self, name):
        return name in self.buckets

    @property
    def key(self):
        """Traceability key of the source row."""
        return f"{self.sheet}-{self.row}"


@dataclass(frozen=True)
class ReferenceRecord:
    """One roster entry: an employee's HR status snapshot."""
    eid: str
    full_name: str
    active_status: Optional[str]
    on_leave: Optional[str]
    country: Optional[str]
    job_title: Optional[str]

    def ref_info(self):
        return {'active_status': self.active_status, 'on_leave': self.on_leave, 'country': self.country}


@dataclass(frozen=True)
class LmsQuotaRecord:
    """One per-employee line of the LMS monthly-processing workbook."""
    row: int
    name: str
    employee_id: str
    manager_id: str
    manager_name: str
    geo: str
    tier: str
    segment: str
    sd_group: str
    team: str
    component: str
    plan_type: str
    recent_event: str
    quota_effective_date: Optional[date]
    notes: str
    q3_quota: Any
    q4_quota: Any
    h2_quota: Any
    rev1_monthly: MonthlyAmounts
    q3_global_quota: Any
    q4_global_quota: Any
    h2_global_quota: Any
    rev2_monthly: MonthlyAmounts
    book_count_monthly: MonthlyAmounts

    # Shared attribute names with QuotaRecord so identity checks can take either.
    @property
    def eid(self):
        return self.employee_id

    @property
    def is_placeholder(self):
        return is_placeholder_eid(self.employee_id)

    @property
    def key(self):
        return f"LMS-{self.row}"


# --- Builders ---

def build_quota_record(row, column_map, sheet, row_number):
    """
    Builds a QuotaRecord from one data row.

    Args:
        row (list): The raw cell values of the row.
        column_map (QuotaColumnMap): Column positions detected for the sheet.
        sheet (str): Source sheet label.
        row_number (int): 1-based sheet row, for traceability.

    Returns:
        QuotaRecord or None: None when the submission cell holds no date.
    """
    submission_month = parse_date(cell_value(row, column_map.submission_month))
    if submission_month is None:
        return None

    buckets = {BUCKET_Y1: read_month_columns(row, column_map.y1)}
    for name, columns in ((BUCKET_Y2Y3, column_map.y2y3),
                          (BUCKET_COMP2_Y1, column_map.comp2_y1),
                          (BUCKET_COMP2_Y2Y3, column_map.comp2_y2y3)):
        if columns is not None:
            buckets[name] = read_month_columns(row, columns)

    return QuotaRecord(
        sheet=sheet,
        row=row_number,
        eid=cell_text(row, column_map.eid),
        name=cell_text(row, column_map.name),
        level=cell_text(row, column_map.level),
        rep_region=cell_text(row, column_map.rep_region),
        dual_metric=cell_text(row, column_map.dual_metric) if column_map.dual_metric >= 0 else '',
        quota_start_date=parse_date(cell_value(row, column_map.quota_start_date)),
        submission_month=submission_month,
        buckets=buckets,
    )


def build_reference_record(row, columns):
    """Builds a ReferenceRecord; returns None for rows without an identifier."""
    eid = cell_text(row, columns['eid'])
    if not eid:
        return None
    return ReferenceRecord(
        eid=eid,
        full_name=cell_text(row, columns['full_name']),
        active_status=cell_text(row, columns['active_status']) or None,
        on_leave=cell_text(row, columns['on_leave']) or None,
        country=cell_text(row, columns['country']) or None,
        job_title=cell_text(row, columns['job_title']) or None,
    )


def _read_lms_months(row, jan_column):
    return {month: cell_value(row, jan_column + offset) for offset, month in enumerate(LMS_MONTHS)}


def build_lms_record(row, row_number):
    """Builds an LmsQuotaRecord; returns None for rows without an employee id."""
    text = lambda field: cell_text(row, LMS_COLUMNS[field])
    raw = lambda field: cell_value(row, LMS_COLUMNS[field])

    employee_id = text('employee_id')
    if not employee_id:
        return None

    return LmsQuotaRecord(
        row=row_number,
        name=text('name'),
        employee_id=employee_id,
        manager_id=text('manager_id'),
        manager_name=text('manager_name'),
        geo=text('geo'),
        tier=text('tier'),
        segment=text('segment'),
        sd_group=text('sd_group'),
        team=text('team'),
        component=text('component'),
        plan_type=text('plan_type'),
        recent_event=text('recent_event'),
        quota_effective_date=parse_date(raw('quota_effective_date')),
        notes=text('notes'),
        q3_quota=raw('q3_quota'),
        q4_quota=raw('q4_quota'),
        h2_quota=raw('h2_quota'),
        rev1_monthly=_read_lms_months(row, LMS_COLUMNS['rev1_jan']),
        q3_global_quota=raw('q3_global_quota'),
        q4_global_quota=raw('q4_global_quota'),
        h2_global_quota=raw('h2_global_quota'),
        rev2_monthly=_read_lms_months(row, LMS_COLUMNS['rev2_jan']),
        book_count_monthly=_read_lms_months(row, LMS_COLUMNS['book_jan']),
    )


def build_roster_index(reference_records):
    """Groups roster entries by identifier, preserving file order."""
    index = {}
    for ref in reference_records:
        index.setdefault(ref.eid, []).append(ref)
    return index
