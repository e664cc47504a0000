# ==============================================================================
# quotacheck/main/reports.py
# ------------------------------------------------------------------------------
# Turns validation results into report tables (pandas DataFrames) and writes
# them as CSV. Every row is traceable to its source sheet and row.
# ==============================================================================

import logging
import os

import pandas as pd

from quotacheck.validator.periods import fiscal_half, parse_period_label
from quotacheck.validator.results import STATUS_FAIL, STATUS_SKIP
from quotacheck.validator.schema import BUCKET_TITLES, BUCKET_Y1, BUCKETS


def _iso(value):
    return value.isoformat() if value is not None else ''


def _ref(result, field):
    return (result.ref_info or {}).get(field) or ''


def _select(identity, status_filter):
    if status_filter == 'fail':
        return [r for r in identity if r.status in (STATUS_FAIL, STATUS_SKIP)]
    return list(identity)


# --- Fiscal-half runs ---

def identity_table(results, status_filter='all'):
    """Check 1 rows; the 'fail' filter keeps failed and skipped records."""
    rows = []
    for r in _select(results.identity, status_filter):
        row = {'Sheet': r.record.sheet, 'Row': r.record.row, 'EID': r.record.eid, 'Name': r.record.name}
        if results.region_resolved:
            row['Market Segment'] = r.record.rep_region
        row.update({'Status': r.status.upper(), 'Reason': r.reason})
        if results.region_resolved:
            row.update({'Region Match': r.region.match_type, 'Region Comment': r.region.comment})
        row.update({
            'Ref Active Status': _ref(r, 'active_status'),
            'Ref On Leave': _ref(r, 'on_leave'),
            'Ref Country': _ref(r, 'country'),
        })
        rows.append(row)
    columns = ['Sheet', 'Row', 'EID', 'Name', 'Status', 'Reason',
               'Ref Active Status', 'Ref On Leave', 'Ref Country']
    if results.region_resolved:
        columns[4:4] = ['Market Segment']
        columns[7:7] = ['Region Match', 'Region Comment']
    return pd.DataFrame(rows, columns=columns)


def duplicates_table(results):
    """One row per occurrence of every duplicated EID."""
    rows = []
    for group in results.duplicates:
        for rec in group.occurrences:
            rows.append({'EID': group.eid, 'Occurrences': len(group.occurrences),
                         'Sheet': rec.sheet, 'Row': rec.row, 'Name': rec.name})
    return pd.DataFrame(rows, columns=['EID', 'Occurrences', 'Sheet', 'Row', 'Name'])


def completeness_table(results):
    """
    Check 3 rows with missing-month lists and the per-month value snapshots.
    Bucket column groups other than Y1 appear only when some result has them.
    """
    findings = results.completeness
    month_keys = fiscal_half(*parse_period_label(results.period)).month_keys
    buckets = [b for b in BUCKETS if b == BUCKET_Y1 or any(r.buckets[b].present for r in findings)]

    columns = ['Sheet', 'Row', 'EID', 'Name']
    if results.region_resolved:
        columns.append('Market Segment')
    columns += ['Dual Metric', 'Quota Start Date', 'Half']
    if results.region_resolved:
        columns += ['Region Match', 'Region Comment']
    for bucket in buckets:
        columns.append(f"Missing ({BUCKET_TITLES[bucket]})")
        columns += [f"{bucket}-{m}" for m in month_keys]

    rows = []
    for r in findings:
        rec = r.record
        row = {'Sheet': rec.sheet, 'Row': rec.row, 'EID': rec.eid, 'Name': rec.name,
               'Market Segment': rec.rep_region, 'Dual Metric': rec.dual_metric,
               'Quota Start Date': _iso(rec.quota_start_date), 'Half': r.half}
        if results.region_resolved:
            row.update({'Region Match': r.region.match_type, 'Region Comment': r.region.comment})
        for bucket in buckets:
            finding = r.buckets[bucket]
            row[f"Missing ({BUCKET_TITLES[bucket]})"] = ', '.join(finding.missing_months)
            for m in month_keys:
                row[f"{bucket}-{m}"] = finding.values.get(m)
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def combined_table(results):
    """All findings of a fiscal-half run in one table."""
    rows = []
    for r in results.identity:
        rows.append(['V1-EID Check', r.record.sheet, r.record.row, r.record.eid, r.record.name,
                     r.status.upper(), r.reason])
    for group in results.duplicates:
        for rec in group.occurrences:
            rows.append(['V2-Duplicate', rec.sheet, rec.row, group.eid, rec.name,
                         'DUPLICATE', f"Appears {len(group.occurrences)} times"])
    for r in results.completeness:
        details = [f"Start: {_iso(r.record.quota_start_date)}"]
        for bucket in BUCKETS:
            missing = r.buckets[bucket].missing_months
            if missing:
                details.append(f"{BUCKET_TITLES[bucket]}: {', '.join(missing)}")
        rows.append(['V3-Missing Quota', r.record.sheet, r.record.row, r.record.eid, r.record.name,
                     'MISSING', '; '.join(details)])
    return pd.DataFrame(rows, columns=['Validation', 'Sheet', 'Row', 'EID', 'Name', 'Status/Issue', 'Details'])


# --- LMS runs ---

def lms_identity_table(results, status_filter='all'):
    rows = []
    for r in _select(results.identity, status_filter):
        rec = r.record
        rows.append({
            'Row': rec.row, 'EID': rec.employee_id, 'Name': rec.name, 'Geo': rec.geo,
            'Tier': rec.tier, 'Component': rec.component, 'Status': r.status.upper(),
            'Reason': r.reason, 'Ref Active Status': _ref(r, 'active_status'),
            'Ref On Leave': _ref(r, 'on_leave'), 'Ref Country': _ref(r, 'country'),
        })
    return pd.DataFrame(rows, columns=['Row', 'EID', 'Name', 'Geo', 'Tier', 'Component', 'Status',
                                       'Reason', 'Ref Active Status', 'Ref On Leave', 'Ref Country'])


def lms_alignment_table(results):
    """One row per alignment issue."""
    rows = []
    for r in results.alignment:
        rec = r.record
        for issue in r.issues:
            rows.append({
                'Row': rec.row, 'EID': rec.employee_id, 'Name': rec.name,
                'Component': rec.component, 'Plan Type': rec.plan_type,
                'Effective Date': _iso(rec.quota_effective_date),
                'Issue Column': issue.column, 'Issue Type': issue.issue_type,
                'Expected': issue.expected_behavior, 'Actual Value': issue.actual_value,
            })
    return pd.DataFrame(rows, columns=['Row', 'EID', 'Name', 'Component', 'Plan Type', 'Effective Date',
                                       'Issue Column', 'Issue Type', 'Expected', 'Actual Value'])


def lms_on_leave_table(results):
    """One row per quota column that triggered an on-leave finding."""
    rows = []
    for r in results.on_leave:
        rec = r.record
        for column, value in r.quota_columns_with_values:
            rows.append({
                'Row': rec.row, 'EID': rec.employee_id, 'Name': rec.name,
                'Component': rec.component, 'Processing Month': r.processing_month,
                'On Leave': r.ref_info.get('on_leave') or '', 'Quota Column': column, 'Quota Value': value,
            })
    return pd.DataFrame(rows, columns=['Row', 'EID', 'Name', 'Component', 'Processing Month',
                                       'On Leave', 'Quota Column', 'Quota Value'])


def lms_combined_table(results):
    rows = []
    for r in results.identity:
        rows.append(['V1-EID Check', r.record.row, r.record.employee_id, r.record.name,
                     r.status.upper(), r.reason])
    for r in results.alignment:
        details = '; '.join(f"{i.column}: {i.issue_type} (actual={'' if i.actual_value is None else i.actual_value})"
                            for i in r.issues)
        rows.append(['V2-Alignment', r.record.row, r.record.employee_id, r.record.name,
                     f"{len(r.issues)} issue(s)",
                     f"Effective: {_iso(r.record.quota_effective_date)}; {details}"])
    for r in results.on_leave:
        columns = '; '.join(f"{column}={value}" for column, value in r.quota_columns_with_values)
        rows.append(['V3-On Leave', r.record.row, r.record.employee_id, r.record.name,
                     'ON_LEAVE_WITH_QUOTA', f"Month: {r.processing_month}; {columns}"])
    return pd.DataFrame(rows, columns=['Validation', 'Row', 'EID', 'Name', 'Status/Issue', 'Details'])


# --- Export ---

def report_tables(results):
    """Returns {file name: DataFrame} for every report of a run."""
    if hasattr(results, 'alignment'):
        return {
            'lms_v1_eid_reference_check_all.csv': lms_identity_table(results),
            'lms_v1_eid_reference_check_fail.csv': lms_identity_table(results, 'fail'),
            'lms_v2_quota_alignment.csv': lms_alignment_table(results),
            'lms_v3_on_leave_quota.csv': lms_on_leave_table(results),
            'lms_validation_results_all.csv': lms_combined_table(results),
        }
    prefix = 'overlay_' if results.region_resolved else ''
    return {
        f'{prefix}v1_eid_reference_check_all.csv': identity_table(results),
        f'{prefix}v1_eid_reference_check_fail.csv': identity_table(results, 'fail'),
        f'{prefix}v2_duplicate_eids.csv': duplicates_table(results),
        f'{prefix}v3_missing_quota_amounts.csv': completeness_table(results),
        f'{prefix}validation_results_all.csv': combined_table(results),
    }


def write_csv(df, filepath):
    """Writes a report as UTF-8 with a byte-order mark so spreadsheet tools detect the encoding."""
    df.to_csv(filepath, index=False, encoding='utf-8-sig')


def export_results(results, export_dir):
    """
    Writes every report of a run into a folder.

    Returns:
        list: The paths written.
    """
    os.makedirs(export_dir, exist_ok=True)
    written = []
    for filename, df in report_tables(results).items():
        path = os.path.join(export_dir, filename)
        write_csv(df, path)
        written.append(path)
        logging.info(f"Wrote {len(df)} rows to {path}")
    return written
