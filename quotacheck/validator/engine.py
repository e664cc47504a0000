# ==============================================================================
# quotacheck/validator/engine.py
# ------------------------------------------------------------------------------
# Run orchestration. Each run is a pure function of the parsed records, the
# roster, the selected period and the selected region.
# ==============================================================================

import logging

from .checks import check_identity, check_quota_completeness, find_duplicates
from .errors import InvalidRegionError
from .lms import check_alignment, check_on_leave
from .periods import parse_period_label
from .records import build_roster_index
from .regions import REGIONS, RegionTables
from .resolver import lms_record_in_region, resolve_region
from .results import (LmsValidationResults, ValidationResults,
                      summarize_lms_results, summarize_results)
from .schema import MONTHS


def _prepare_run(title, roster, period, region, tables):
    logging.info("=" * 80)
    logging.info(f"STARTING {title} | period={period} | region={region}")
    logging.info("=" * 80)

    year, month = parse_period_label(period)
    if region not in REGIONS:
        raise InvalidRegionError(f"Unknown region '{region}'. Expected one of: {', '.join(REGIONS)}")

    tables = tables or RegionTables()
    roster_index = build_roster_index(roster)
    valid_countries = tables.countries_for_region(region)
    logging.info(f"Roster: {len(roster)} entries for {len(roster_index)} EIDs; "
                 f"{len(valid_countries)} countries map to {region}.")
    return year, month, tables, roster_index, valid_countries


def records_for_period(records, year, month):
    """Keeps the records whose submission month is (year, month)."""
    return [rec for rec in records
            if rec.submission_month is not None
            and rec.submission_month.year == year and rec.submission_month.month == month]


def run_validation(records, roster, period, region, tables=None):
    """
    Runs Checks 1-3 over the fiscal-half records of one submission period.

    Args:
        records (list): QuotaRecords from every quota sheet.
        roster (list): ReferenceRecords.
        period (str): Submission period label, e.g. 'Jan-26'.
        region (str): The selected region.
        tables (RegionTables): Lookup tables; the defaults when omitted.

    Returns:
        ValidationResults

    Raises:
        PeriodParseError: If the period label is invalid.
        InvalidRegionError: If the region is unknown.
    """
    year, month, tables, roster_index, valid_countries = _prepare_run(
        'QUOTA FILE VALIDATION', roster, period, region, tables)

    target = records_for_period(records, year, month)
    logging.info(f"{len(target)} of {len(records)} records belong to {period}.")

    identity = [check_identity(rec, roster_index, valid_countries, region, tables) for rec in target]
    duplicates = find_duplicates(target)
    completeness = check_quota_completeness(target, year, month)

    summary = summarize_results(identity, duplicates, completeness, len(target))
    return ValidationResults(period, region, identity, duplicates, completeness, summary)


def run_overlay_validation(records, roster, period, region, tables=None):
    """
    Runs Checks 1-3 over the records the region resolver places in the
    selected region. Every finding carries the record's region resolution.
    """
    year, month, tables, roster_index, valid_countries = _prepare_run(
        'REGION-RESOLVED VALIDATION', roster, period, region, tables)

    target = records_for_period(records, year, month)
    resolutions = {}
    included = []
    for rec in target:
        resolution = resolve_region(rec, roster_index, valid_countries, region, tables)
        resolutions[rec.key] = resolution
        if resolution.included:
            included.append(rec)
    logging.info(f"{len(target)} records belong to {period}; {len(included)} resolved into {region}.")

    identity = [check_identity(rec, roster_index, valid_countries, region, tables, resolutions[rec.key])
                for rec in included]
    duplicates = find_duplicates(included, resolutions)
    completeness = check_quota_completeness(included, year, month, resolutions)

    summary = summarize_results(identity, duplicates, completeness, len(included))
    return ValidationResults(period, region, identity, duplicates, completeness, summary, region_resolved=True)


def run_lms_validation(records, roster, period, region, tables=None):
    """
    Runs the LMS checks: identity, quota alignment and on-leave-with-quota.

    Args:
        records (list): LmsQuotaRecords.
        roster (list): ReferenceRecords.
        period (str): Processing period label, e.g. 'Feb-26'.
        region (str): The selected region.
        tables (RegionTables): Lookup tables; the defaults when omitted.

    Returns:
        LmsValidationResults
    """
    year, month, tables, roster_index, valid_countries = _prepare_run(
        'LMS VALIDATION', roster, period, region, tables)
    processing_month = MONTHS[(month - 7) % 12]

    filtered = [rec for rec in records
                if lms_record_in_region(rec, roster_index, valid_countries, region, tables)]
    logging.info(f"{len(filtered)} of {len(records)} LMS records are in {region}.")

    identity = [check_identity(rec, roster_index, valid_countries, region, tables) for rec in filtered]

    alignment, on_leave = [], []
    for rec in filtered:
        if rec.is_placeholder:
            continue
        result = check_alignment(rec)
        if result is not None:
            alignment.append(result)
        result = check_on_leave(rec, roster_index.get(rec.employee_id), processing_month)
        if result is not None:
            on_leave.append(result)

    summary = summarize_lms_results(identity, alignment, on_leave, len(filtered))
    return LmsValidationResults(period, region, identity, alignment, on_leave, summary)
