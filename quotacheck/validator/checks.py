# ==============================================================================
# quotacheck/validator/checks.py
# ------------------------------------------------------------------------------
# The record-level checks: identity against the roster (Check 1), duplicate
# identifiers (Check 2) and quota completeness over a fiscal half (Check 3).
# ==============================================================================

import logging

from .periods import fiscal_half
from .results import (STATUS_FAIL, STATUS_PASS, STATUS_SKIP, BucketFinding,
                      CompletenessResult, DuplicateGroup, IdentityResult)
from .schema import (ACTIVE_STATUS_OK, BUCKET_COMP2_Y1, BUCKET_COMP2_Y2Y3,
                     BUCKET_Y1, BUCKETS, MONTH_TO_CAL)


# --- Check 1: identity against the roster ---

def roster_violations(ref, valid_countries, region, tables):
    """Lists every condition a roster entry violates for the selected region."""
    issues = []
    if ref.active_status != ACTIVE_STATUS_OK:
        issues.append(f'Active Status="{ref.active_status or "(blank)"}" (expected Yes)')
    if ref.on_leave:
        issues.append(f'On Leave="{ref.on_leave}" (expected blank)')
    if not ref.country or ref.country not in valid_countries:
        country_region = tables.region_of_country(ref.country)
        region_note = f" (Region: {country_region})" if country_region else ''
        issues.append(f'Country="{ref.country or "(blank)"}"{region_note} - not in {region}')
    return issues


def check_identity(record, roster_index, valid_countries, region, tables, resolution=None):
    """
    Checks one record's identifier against the roster.

    Placeholder identifiers are skipped. Roster entries are examined in file
    order and the first entry without violations passes the record. When no
    entry passes, the reason lists the violations of the last entry examined.

    Returns:
        IdentityResult: The verdict with the roster entry that supports it.
    """
    if record.is_placeholder:
        return IdentityResult(record, STATUS_SKIP, 'TBH / Blank EID', region=resolution)

    refs = roster_index.get(record.eid)
    if not refs:
        return IdentityResult(record, STATUS_FAIL, 'EID not found in reference file', region=resolution)

    last_issues, last_ref = [], None
    for ref in refs:
        issues = roster_violations(ref, valid_countries, region, tables)
        last_ref = ref
        if not issues:
            return IdentityResult(record, STATUS_PASS, '', ref.ref_info(), region=resolution)
        last_issues = issues

    return IdentityResult(record, STATUS_FAIL, '; '.join(last_issues), last_ref.ref_info(), region=resolution)


# --- Check 2: duplicate identifiers ---

def find_duplicates(records, resolutions=None):
    """
    Groups non-placeholder records by identifier and reports every
    identifier that occurs more than once, in first-seen order.

    Args:
        records (list): Records of one submission period.
        resolutions (dict): Optional record key -> RegionResolution, attached
            to each group for region-resolved runs.
    """
    groups = {}
    for record in records:
        if record.is_placeholder:
            continue
        groups.setdefault(record.eid, []).append(record)

    duplicates = []
    for eid, occurrences in groups.items():
        if len(occurrences) < 2:
            continue
        regions = None
        if resolutions is not None:
            regions = {rec.key: resolutions[rec.key] for rec in occurrences}
        duplicates.append(DuplicateGroup(eid, tuple(occurrences), regions))
        logging.debug(f"Duplicate EID {eid}: rows {[rec.key for rec in occurrences]}")
    return duplicates


# --- Check 3: quota completeness ---

def is_quota_value_missing(value):
    """Absent, blank, '-' and numeric zero amounts count as missing."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ('', '-')
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 0
    return False


def effective_start_month(start_date, half):
    """
    Returns the first calendar month of the half that must carry quota, or
    None when the quota starts after the half ends.
    """
    start_year, start_month = start_date.year, start_date.month
    if start_year > half.year or (start_year == half.year and start_month > half.last_month):
        return None
    if start_year < half.year or start_month < half.first_month:
        return half.first_month
    return start_month


def _bucket_applies(record, bucket):
    if not record.has_bucket(bucket):
        return False
    if bucket in (BUCKET_COMP2_Y1, BUCKET_COMP2_Y2Y3):
        return record.is_dual_metric
    return True


def check_completeness(record, half, resolution=None):
    """
    Checks that a record carries quota for every month of the half from its
    effective start month on.

    Returns:
        CompletenessResult or None: None when the record has no start date,
        starts after the half, or has nothing missing.
    """
    if record.quota_start_date is None:
        return None
    start = effective_start_month(record.quota_start_date, half)
    if start is None:
        logging.debug(f"Row {record.key}: quota starts {record.quota_start_date}, after {half.name}; skipped.")
        return None

    findings = {}
    for bucket in BUCKETS:
        applies = bucket == BUCKET_Y1 or _bucket_applies(record, bucket)
        amounts = record.bucket(bucket) if applies else None
        values, missing = {}, []
        for month in half.month_keys:
            value = amounts.get(month) if amounts is not None else None
            values[month] = value
            if applies and MONTH_TO_CAL[month] >= start and is_quota_value_missing(value):
                missing.append(month)
        findings[bucket] = BucketFinding(applies, tuple(missing), values)

    if not any(finding.missing_months for finding in findings.values()):
        return None
    return CompletenessResult(record, half.name, findings, region=resolution)


def check_quota_completeness(records, year, month, resolutions=None):
    """Runs Check 3 over the records of a submission period (year, month)."""
    half = fiscal_half(year, month)
    logging.info(f"Checking quota completeness for {half.name} {half.year} "
                 f"(months {half.first_month}-{half.last_month}).")
    results = []
    for record in records:
        resolution = resolutions.get(record.key) if resolutions is not None else None
        result = check_completeness(record, half, resolution)
        if result is not None:
            results.append(result)
    return results
