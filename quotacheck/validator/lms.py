# ==============================================================================
# quotacheck/validator/lms.py
# ------------------------------------------------------------------------------
# Checks specific to the LMS monthly-processing workbook: quota alignment with
# plan type and effective date, and quota carried by employees on leave.
# ==============================================================================

import logging
import re

from .results import AlignmentResult, LmsIssue, OnLeaveResult
from .schema import (ACTIVE_STATUS_OK, COMPONENT_REV2_ONLY, ISSUE_MISSING_AMOUNT,
                     ISSUE_OKR_HAS_AMOUNT, ISSUE_SHOULD_BE_ZERO, ISSUE_STREAM_MISMATCH,
                     LMS_MONTHS, MONTH_TO_CAL, ON_LEAVE_YES, PLAN_OKR, PLAN_QTRLY,
                     PLAN_SEMI, REV1_COMPONENTS, REV2_COMPONENTS)

_LEADING_NUMBER = re.compile(r'^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


def numeric_value(value):
    """
    Reads an amount cell as a number. Strings contribute their leading
    numeric part ('1200 USD' -> 1200); anything unreadable counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return 0 if value != value else value
    match = _LEADING_NUMBER.match(str(value))
    return float(match.group(0)) if match else 0


def has_positive_amount(value):
    return numeric_value(value) > 0


def checked_streams(component):
    """Returns which revenue streams (1, 2) a component classification carries."""
    streams = []
    if component in REV1_COMPONENTS:
        streams.append(1)
    if component in REV2_COMPONENTS:
        streams.append(2)
    return streams


def expected_active_months(effective_month, plan_type):
    """
    Decides, for each month of the Jan-Jun window, whether quota is expected.

    Months before the effective month expect zero. From the effective month
    on: OKR plans expect zero, Semi plans expect amounts through June, Qtrly
    plans through the end of the quarter holding the effective month, and any
    other plan type expects amounts.

    Returns:
        list: (month key, should_have_amount) pairs in calendar order.
    """
    plan = plan_type.lower()
    quarter_end = 3 if effective_month <= 3 else 6
    expectations = []
    for month in LMS_MONTHS:
        cal = MONTH_TO_CAL[month]
        if cal < effective_month or plan == PLAN_OKR:
            expected = False
        elif plan == PLAN_SEMI:
            expected = True
        elif plan == PLAN_QTRLY:
            expected = cal <= quarter_end
        else:
            expected = True
        expectations.append((month, expected))
    return expectations


def _stream_issues(stream, amounts, expectations, plan_type, effective_month):
    is_okr = plan_type.lower() == PLAN_OKR
    issues = []
    for month, should_have_amount in expectations:
        value = amounts.get(month)
        column = f"Rev{stream}-{month}"
        if should_have_amount and not has_positive_amount(value):
            issues.append(LmsIssue(
                column, month, ISSUE_MISSING_AMOUNT,
                f"Expected amount > 0 ({plan_type}, effective from {LMS_MONTHS[effective_month - 1]})",
                value))
        elif not should_have_amount and has_positive_amount(value):
            if is_okr:
                issues.append(LmsIssue(column, month, ISSUE_OKR_HAS_AMOUNT,
                                       'OKR plan type should have 0 quota', value))
            else:
                issues.append(LmsIssue(column, month, ISSUE_SHOULD_BE_ZERO,
                                       'Month before effective date or after quarter end should be 0', value))
    return issues


def _issue_order(issue):
    return (0 if issue.column.startswith('Rev1') else 1, MONTH_TO_CAL[issue.month])


def check_alignment(record):
    """
    Checks an LMS record's monthly amounts against its plan type and
    effective date.

    Records without an effective date, or effective after June, have no
    window to check. For 'Rev 2 Only' components any positive Rev 1 amount
    is reported as a stream mismatch.

    Returns:
        AlignmentResult or None: None when no issue was found or the record
        has no applicable window.
    """
    if record.quota_effective_date is None:
        return None
    effective_cal_month = record.quota_effective_date.month
    if effective_cal_month > 6:
        logging.debug(f"LMS row {record.row}: effective month {effective_cal_month} is outside Jan-Jun; skipped.")
        return None
    effective_month = max(1, effective_cal_month)

    expectations = expected_active_months(effective_month, record.plan_type)
    streams = checked_streams(record.component)

    issues = []
    if 1 in streams:
        issues += _stream_issues(1, record.rev1_monthly, expectations, record.plan_type, effective_month)
    if 2 in streams:
        issues += _stream_issues(2, record.rev2_monthly, expectations, record.plan_type, effective_month)
    if record.component == COMPONENT_REV2_ONLY:
        for month in LMS_MONTHS:
            value = record.rev1_monthly.get(month)
            if has_positive_amount(value):
                issues.append(LmsIssue(
                    f"Rev1-{month}", month, ISSUE_STREAM_MISMATCH,
                    'Rev 2 Only component should not have Rev 1 amounts (blank or 0 expected)',
                    value))

    if not issues:
        return None
    # Rev 1 before Rev 2, then by month; the sort is stable within a month.
    return AlignmentResult(record, tuple(sorted(issues, key=_issue_order)))


def find_on_leave_ref(refs):
    """Returns the first roster entry of an active employee who is on leave."""
    for ref in refs or []:
        if ref.active_status == ACTIVE_STATUS_OK and ref.on_leave == ON_LEAVE_YES:
            return ref
    return None


def check_on_leave(record, refs, processing_month):
    """
    Reports an active employee on leave who still carries quota in the
    processing month.

    Args:
        record (LmsQuotaRecord): The quota line.
        refs (list): The employee's roster entries.
        processing_month (str): Month key of the processing period ('FEB').

    Returns:
        OnLeaveResult or None
    """
    on_leave_ref = find_on_leave_ref(refs)
    if on_leave_ref is None or processing_month not in LMS_MONTHS:
        return None

    triggered = []
    for stream in checked_streams(record.component):
        amounts = record.rev1_monthly if stream == 1 else record.rev2_monthly
        value = amounts.get(processing_month)
        if has_positive_amount(value):
            triggered.append((f"Rev{stream}-{processing_month}", value))

    if not triggered:
        return None
    return OnLeaveResult(record, on_leave_ref.ref_info(), processing_month, tuple(triggered))
