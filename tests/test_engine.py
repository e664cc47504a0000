# tests/test_engine.py

from datetime import date

import pytest

from quotacheck.validator import (InvalidRegionError, PeriodParseError, run_lms_validation,
                                  run_overlay_validation, run_validation)
from quotacheck.validator.engine import records_for_period
from quotacheck.validator.results import LmsValidationSummary, STATUS_FAIL, ValidationSummary
from quotacheck.validator.schema import ISSUE_SHOULD_BE_ZERO


@pytest.fixture
def quota_records(make_record):
    """Five records submitted for Aug-25 and one for Sep-25."""
    return [
        make_record(eid='E1', row=7),
        make_record(eid='E1', sheet='LSS Quota', row=7, y1={'OCT': 0}),
        make_record(eid='E2', row=8),
        make_record(eid='TBH', row=9, rep_region='NAMER'),
        make_record(eid='E99', row=10, rep_region='EMEA'),
        make_record(eid='E5', row=11, submitted=date(2025, 9, 1)),
    ]


@pytest.fixture
def lms_records(make_lms_record):
    return [
        make_lms_record(employee_id='E1', row=2),
        make_lms_record(employee_id='E6', row=3),
        make_lms_record(employee_id='E5', row=4),
        make_lms_record(employee_id='TBH', row=5, geo='EMEA', plan_type='OKR'),
        make_lms_record(employee_id='E99', row=6, geo='SA', plan_type='Qtrly', effective=date(2026, 2, 1)),
    ]


def test_records_for_period(quota_records):
    assert len(records_for_period(quota_records, 2025, 8)) == 5
    assert [rec.eid for rec in records_for_period(quota_records, 2025, 9)] == ['E5']


# --- 1. Standard run ---

def test_standard_run(quota_records, roster):
    results = run_validation(quota_records, roster, 'Aug-25', 'APAC')

    assert results.summary == ValidationSummary(
        identity_pass=2, identity_fail=2, identity_skip=1,
        duplicate_eids=1, missing_quota=1, total_records=5)
    assert not results.region_resolved
    assert [r.record.key for r in results.completeness] == ['LSS Quota-7']
    assert results.completeness[0].missing_months == ('OCT',)
    assert results.duplicates[0].regions is None
    assert all(r.region is None for r in results.identity)


def test_standard_run_is_repeatable(quota_records, roster):
    assert run_validation(quota_records, roster, 'Aug-25', 'APAC') == \
        run_validation(quota_records, roster, 'Aug-25', 'APAC')


def test_period_without_records(quota_records, roster):
    results = run_validation(quota_records, roster, 'Jan-26', 'APAC')
    assert results.summary.total_records == 0
    assert results.identity == []


# --- 2. Region-resolved run ---

def test_overlay_run_filters_by_resolved_region(quota_records, roster):
    results = run_overlay_validation(quota_records, roster, 'Aug-25', 'APAC')

    assert results.region_resolved
    assert results.summary == ValidationSummary(
        identity_pass=2, identity_fail=1, identity_skip=1,
        duplicate_eids=1, missing_quota=1, total_records=4)
    assert 'E99' not in {r.record.eid for r in results.identity}
    assert set(results.duplicates[0].regions) == {'LTS Quota-7', 'LSS Quota-7'}
    assert results.completeness[0].region.match_type == 'roster_country_match'
    assert {r.record.eid: r.region.match_type for r in results.identity}['TBH'] == 'unresolved'


def test_overlay_run_for_another_region(quota_records, roster):
    results = run_overlay_validation(quota_records, roster, 'Aug-25', 'EMEAL')

    kept = {r.record.eid: r for r in results.identity}
    assert set(kept) == {'TBH', 'E99'}
    assert kept['E99'].region.match_type == 'segment_direct'
    assert kept['E99'].status == STATUS_FAIL


# --- 3. LMS run ---

def test_lms_run(lms_records, roster):
    results = run_lms_validation(lms_records, roster, 'Feb-26', 'APAC')

    assert results.summary == LmsValidationSummary(
        identity_pass=1, identity_fail=2, identity_skip=1,
        alignment_issues=1, on_leave_with_quota=1, total_records=4)

    alignment = results.alignment[0]
    assert alignment.record.employee_id == 'E99'
    assert [i.column for i in alignment.issues] == ['Rev1-JAN', 'Rev1-APR', 'Rev1-MAY', 'Rev1-JUN']
    assert {i.issue_type for i in alignment.issues} == {ISSUE_SHOULD_BE_ZERO}

    on_leave = results.on_leave[0]
    assert on_leave.record.employee_id == 'E6'
    assert on_leave.quota_columns_with_values == (('Rev1-FEB', 100),)


def test_lms_run_outside_january_to_june(lms_records, roster):
    results = run_lms_validation(lms_records, roster, 'Aug-25', 'APAC')
    assert results.on_leave == []
    assert results.summary.alignment_issues == 1


# --- 4. Fatal errors ---

@pytest.mark.parametrize('runner', [run_validation, run_overlay_validation, run_lms_validation])
def test_invalid_period_aborts(runner, roster):
    with pytest.raises(PeriodParseError):
        runner([], roster, 'August 2025', 'APAC')


def test_invalid_region_aborts(quota_records, roster):
    with pytest.raises(InvalidRegionError):
        run_validation(quota_records, roster, 'Aug-25', 'LATAM')
