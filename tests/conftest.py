# tests/conftest.py

import pytest
import pandas as pd
from io import StringIO
from datetime import date, datetime

from openpyxl import Workbook

from quotacheck.validator.records import LmsQuotaRecord, QuotaRecord, ReferenceRecord, build_roster_index
from quotacheck.validator.regions import RegionTables
from quotacheck.validator.schema import (BUCKET_COMP2_Y1, BUCKET_COMP2_Y2Y3, BUCKET_Y1, BUCKET_Y2Y3,
                                         LMS_COLUMN_COUNT, LMS_COLUMNS, LMS_MONTHS, MONTHS)

# --- Roster data shared by the check, resolver and engine tests ---
# E4 and E7 have two roster entries each; E8 has an unmapped country, E9 none.
ROSTER_CSV = """eid,full_name,active_status,on_leave,country,job_title
E1,Aiko Tanaka,Yes,,Japan,Account Executive
E2,Ben Ortiz,No,,Japan,Account Executive
E3,Chloe Martin,Yes,Yes,France,Solutions Engineer
E4,Dev Patel,No,,India,Account Executive
E4,Dev Patel,Yes,,India,Account Executive
E5,Erin Walsh,Yes,,United States of America,Sales Director
E6,Feng Li,Yes,Yes,Singapore,Account Executive
E7,Gita Rao,No,,Japan,Account Executive
E7,Gita Rao,Yes,Yes,Japan,Account Executive
E8,Hugo Silva,Yes,,Atlantis,Account Executive
E9,Ines Costa,Yes,,,Account Executive
"""


@pytest.fixture
def roster():
    """The roster as ReferenceRecords, in file order."""
    df = pd.read_csv(StringIO(ROSTER_CSV), dtype=str).fillna('')
    return [
        ReferenceRecord(eid=r.eid, full_name=r.full_name, active_status=r.active_status or None,
                        on_leave=r.on_leave or None, country=r.country or None, job_title=r.job_title or None)
        for r in df.itertuples(index=False)
    ]


@pytest.fixture
def roster_index(roster):
    return build_roster_index(roster)


@pytest.fixture
def tables():
    return RegionTables()


@pytest.fixture
def apac_countries(tables):
    return tables.countries_for_region('APAC')


# --- Record factories ---

def _amounts(overrides, default):
    amounts = {month: default for month in MONTHS}
    amounts.update(overrides or {})
    return amounts


@pytest.fixture
def make_record():
    """
    Builds a QuotaRecord. Y1 defaults to 1000 in every month; the optional
    buckets are absent unless given, and given buckets start out blank.
    """
    def _make(eid='E1', sheet='LTS Quota', row=7, rep_region='APAC', dual_metric='Single',
              start=date(2025, 7, 1), submitted=date(2025, 8, 1),
              y1=None, y2y3=None, comp2_y1=None, comp2_y2y3=None):
        buckets = {BUCKET_Y1: _amounts(y1, 1000)}
        for name, overrides in ((BUCKET_Y2Y3, y2y3), (BUCKET_COMP2_Y1, comp2_y1),
                                (BUCKET_COMP2_Y2Y3, comp2_y2y3)):
            if overrides is not None:
                buckets[name] = _amounts(overrides, None)
        return QuotaRecord(sheet=sheet, row=row, eid=eid, name=f"Rep {eid}", level='L5',
                           rep_region=rep_region, dual_metric=dual_metric, quota_start_date=start,
                           submission_month=submitted, buckets=buckets)
    return _make


@pytest.fixture
def make_lms_record():
    """Builds an LmsQuotaRecord; monthly amounts default to 100 for Rev 1 and blank for Rev 2."""
    def _make(employee_id='E1', row=2, geo='APAC', component='Rev 1 Only', plan_type='Semi',
              effective=date(2026, 1, 1), rev1=None, rev2=None):
        rev1_monthly = {month: 100 for month in LMS_MONTHS}
        rev1_monthly.update(rev1 or {})
        rev2_monthly = {month: None for month in LMS_MONTHS}
        rev2_monthly.update(rev2 or {})
        return LmsQuotaRecord(
            row=row, name=f"Rep {employee_id}", employee_id=employee_id, manager_id='M1',
            manager_name='Manager One', geo=geo, tier='T1', segment='Enterprise', sd_group='G1',
            team='Team A', component=component, plan_type=plan_type, recent_event='',
            quota_effective_date=effective, notes='', q3_quota=None, q4_quota=None, h2_quota=None,
            rev1_monthly=rev1_monthly, q3_global_quota=None, q4_global_quota=None, h2_global_quota=None,
            rev2_monthly=rev2_monthly, book_count_monthly={month: None for month in LMS_MONTHS})
    return _make


# --- Workbook builders ---

QUOTA_HEADER = (['Submission Month', 'EID', 'Name', 'Level', 'Rep Region', 'Quota Start Date',
                 'Single/Dual Metric'] + [f"Y1 - {m}" for m in MONTHS])


def quota_row(eid, submitted, start=datetime(2025, 7, 1), rep_region='APAC', amounts=None):
    values = [amounts.get(m, 1000) if amounts else 1000 for m in MONTHS]
    return [submitted, eid, f"Rep {eid}", 'L5', rep_region, start, 'Single'] + values


def _quota_sheet(ws, rows):
    # Rows 1-4 are template banners, row 5 the header, row 6 an example line.
    ws.append(['FY Quota Submission Template'])
    ws.append(['Fill in one line per quota plan'])
    ws.append(['Do not change the headers'])
    ws.append(['Version 3'])
    ws.append(QUOTA_HEADER)
    ws.append(['Example', 'E000', 'Jane Example'])
    for row in rows:
        ws.append(row)


@pytest.fixture
def quota_workbook(tmp_path):
    """
    Writes a quota workbook: two visible quota sheets, a hidden quota sheet,
    an Instructions sheet and a summary sheet.
    """
    wb = Workbook()
    lts = wb.active
    lts.title = 'LTS Quota'
    _quota_sheet(lts, [
        quota_row('E1', datetime(2025, 8, 1)),
        quota_row('E2', datetime(2025, 8, 1), amounts={'OCT': 0}),
        [None, 'E3', 'No submission date'],
        quota_row('TBH 1', datetime(2025, 7, 1)),
    ])
    _quota_sheet(wb.create_sheet('LSS Quotas'), [
        quota_row('E1', datetime(2025, 8, 1)),
    ])
    hidden = wb.create_sheet('Old Quota')
    _quota_sheet(hidden, [quota_row('E5', datetime(2025, 8, 1))])
    hidden.sheet_state = 'hidden'
    wb.create_sheet('Instructions').append(['Read me first'])
    wb.create_sheet('Summary').append(['Totals'])

    path = tmp_path / 'quota.xlsx'
    wb.save(path)
    return str(path)


@pytest.fixture
def roster_workbook(tmp_path):
    """Writes the roster with two banner rows above the header."""
    df = pd.read_csv(StringIO(ROSTER_CSV), dtype=str)
    wb = Workbook()
    ws = wb.active
    ws.title = 'Roster'
    ws.append(['HR Roster Export'])
    ws.append(['Generated nightly'])
    ws.append(['Employee ID', 'Full Legal Name', 'Active Status', 'On Leave', 'Country', 'Job Title'])
    for r in df.itertuples(index=False):
        ws.append([None if pd.isna(v) else v for v in r])
    ws.append([None, 'Row without an identifier'])

    path = tmp_path / 'roster.xlsx'
    wb.save(path)
    return str(path)


def lms_row(employee_id, geo='APAC', component='Rev 1 Only', plan_type='Semi',
            effective=datetime(2026, 1, 1), rev1=None, rev2=None):
    row = [None] * LMS_COLUMN_COUNT
    row[LMS_COLUMNS['name']] = f"Rep {employee_id}" if employee_id else 'Open seat'
    row[LMS_COLUMNS['employee_id']] = employee_id
    row[LMS_COLUMNS['geo']] = geo
    row[LMS_COLUMNS['component']] = component
    row[LMS_COLUMNS['plan_type']] = plan_type
    row[LMS_COLUMNS['quota_effective_date']] = effective
    for offset, month in enumerate(LMS_MONTHS):
        row[LMS_COLUMNS['rev1_jan'] + offset] = (rev1 or {}).get(month, 100)
        row[LMS_COLUMNS['rev2_jan'] + offset] = (rev2 or {}).get(month)
    return row


@pytest.fixture
def lms_workbook(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.title = 'LMS'
    ws.append([f"Column {i + 1}" for i in range(LMS_COLUMN_COUNT)])
    ws.append(lms_row('E1'))
    ws.append(lms_row('E6'))
    ws.append(lms_row(None))
    ws.append(lms_row('E99', geo='SA', plan_type='Qtrly', effective=datetime(2026, 2, 1)))

    path = tmp_path / 'lms.xlsx'
    wb.save(path)
    return str(path)
