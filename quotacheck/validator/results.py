# ==============================================================================
# quotacheck/validator/results.py
# ------------------------------------------------------------------------------
# Result snapshots of one validation run and the aggregation of their counts.
# ==============================================================================

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .schema import BUCKET_COMP2_Y1, BUCKET_Y1, BUCKET_Y2Y3

STATUS_PASS = 'pass'
STATUS_FAIL = 'fail'
STATUS_SKIP = 'skip'


@dataclass(frozen=True)
class IdentityResult:
    """Check 1 verdict for one record."""
    record: Any
    status: str
    reason: str
    ref_info: Optional[Dict[str, Optional[str]]] = None
    region: Any = None  # RegionResolution, region-resolved runs only


@dataclass(frozen=True)
class DuplicateGroup:
    """Check 2: every occurrence of an identifier seen more than once."""
    eid: str
    occurrences: Tuple[Any, ...]
    regions: Optional[Dict[str, Any]] = None  # record key -> RegionResolution


@dataclass(frozen=True)
class BucketFinding:
    """Missing months and value snapshot of one amount bucket."""
    present: bool
    missing_months: Tuple[str, ...]
    values: Dict[str, Any]


@dataclass(frozen=True)
class CompletenessResult:
    """Check 3 finding for one record."""
    record: Any
    half: str
    buckets: Dict[str, BucketFinding]
    region: Any = None

    def missing(self, bucket):
        return self.buckets[bucket].missing_months

    @property
    def missing_months(self):
        return self.missing(BUCKET_Y1)

    @property
    def has_y2y3(self):
        return self.buckets[BUCKET_Y2Y3].present

    @property
    def has_comp2(self):
        return self.buckets[BUCKET_COMP2_Y1].present


@dataclass(frozen=True)
class LmsIssue:
    column: str
    month: str
    issue_type: str
    expected_behavior: str
    actual_value: Any


@dataclass(frozen=True)
class AlignmentResult:
    """LMS alignment findings for one record, in reporting order."""
    record: Any
    issues: Tuple[LmsIssue, ...]


@dataclass(frozen=True)
class OnLeaveResult:
    """An active employee on leave who still carries quota this month."""
    record: Any
    ref_info: Dict[str, Optional[str]]
    processing_month: str
    quota_columns_with_values: Tuple[Tuple[str, Any], ...]


@dataclass(frozen=True)
class ValidationSummary:
    identity_pass: int
    identity_fail: int
    identity_skip: int
    duplicate_eids: int
    missing_quota: int
    total_records: int


@dataclass(frozen=True)
class LmsValidationSummary:
    identity_pass: int
    identity_fail: int
    identity_skip: int
    alignment_issues: int
    on_leave_with_quota: int
    total_records: int


@dataclass(frozen=True)
class ValidationResults:
    """Results of a fiscal-half run (standard or region-resolved)."""
    period: str
    region: str
    identity: List[IdentityResult]
    duplicates: List[DuplicateGroup]
    completeness: List[CompletenessResult]
    summary: ValidationSummary
    region_resolved: bool = False


@dataclass(frozen=True)
class LmsValidationResults:
    period: str
    region: str
    identity: List[IdentityResult]
    alignment: List[AlignmentResult]
    on_leave: List[OnLeaveResult]
    summary: LmsValidationSummary


def _count_statuses(identity_results):
    counts = {STATUS_PASS: 0, STATUS_FAIL: 0, STATUS_SKIP: 0}
    for result in identity_results:
        counts[result.status] += 1
    return counts


def summarize_results(identity, duplicates, completeness, total_records):
    """Tallies a fiscal-half run."""
    counts = _count_statuses(identity)
    summary = ValidationSummary(
        identity_pass=counts[STATUS_PASS],
        identity_fail=counts[STATUS_FAIL],
        identity_skip=counts[STATUS_SKIP],
        duplicate_eids=len(duplicates),
        missing_quota=len(completeness),
        total_records=total_records,
    )
    logging.info(f"--- Summary: {summary.identity_pass} pass, {summary.identity_fail} fail, "
                 f"{summary.identity_skip} skip; {summary.duplicate_eids} duplicate EIDs; "
                 f"{summary.missing_quota} records with missing quota (of {total_records}). ---")
    return summary


def summarize_lms_results(identity, alignment, on_leave, total_records):
    """Tallies an LMS run."""
    counts = _count_statuses(identity)
    summary = LmsValidationSummary(
        identity_pass=counts[STATUS_PASS],
        identity_fail=counts[STATUS_FAIL],
        identity_skip=counts[STATUS_SKIP],
        alignment_issues=len(alignment),
        on_leave_with_quota=len(on_leave),
        total_records=total_records,
    )
    logging.info(f"--- Summary: {summary.identity_pass} pass, {summary.identity_fail} fail, "
                 f"{summary.identity_skip} skip; {summary.alignment_issues} alignment findings; "
                 f"{summary.on_leave_with_quota} on leave with quota (of {total_records}). ---")
    return summary
