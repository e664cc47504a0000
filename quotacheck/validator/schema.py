# ==============================================================================
# quotacheck/validator/schema.py
# ------------------------------------------------------------------------------
# Defines the expected structure of the uploaded workbooks.
# This module is the single source of truth for layouts and header labels.
# ==============================================================================

# --- Fiscal calendar ---
# The fiscal year starts in July, so month keys are listed in fiscal order.
MONTHS = ['JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC', 'JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN']
H1_MONTHS = ('JUL', 'AUG', 'SEP', 'OCT', 'NOV', 'DEC')
H2_MONTHS = ('JAN', 'FEB', 'MAR', 'APR', 'MAY', 'JUN')
MONTH_TO_CAL = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}
MONTH_LABELS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

# --- Fiscal-half quota workbook (LTS / LSS) ---
QUOTA_HEADER_ROW = 4       # 0-based index of the header row on every quota sheet
QUOTA_FIRST_DATA_ROW = 6   # index 5 holds an example row
EXCLUDED_SHEET = 'instructions'
QUOTA_SHEET_SUFFIXES = ('quota', 'quotas')

# Amount buckets, in reporting order.
BUCKET_Y1 = 'Y1'
BUCKET_Y2Y3 = 'Y2Y3'
BUCKET_COMP2_Y1 = 'C2:Y1'
BUCKET_COMP2_Y2Y3 = 'C2:Y2Y3'
BUCKETS = [BUCKET_Y1, BUCKET_Y2Y3, BUCKET_COMP2_Y1, BUCKET_COMP2_Y2Y3]
BUCKET_TITLES = {
    BUCKET_Y1: 'Y1',
    BUCKET_Y2Y3: 'Y2&Y3',
    BUCKET_COMP2_Y1: 'C2:Y1',
    BUCKET_COMP2_Y2Y3: 'C2:Y2&Y3',
}
SECONDARY_MARKER = 'COMP2'
Y2_MARKER = 'Y2'

# Older LSS files have no month headers; months sit at fixed positions.
LEGACY_MONTH_COLUMNS = {
    'JUL': 23, 'AUG': 24, 'SEP': 25, 'OCT': 26, 'NOV': 27, 'DEC': 28,
    'JAN': 29, 'FEB': 30, 'MAR': 31, 'APR': 32, 'MAY': 33, 'JUN': 34,
}

# Single-occurrence metadata columns and their fixed fallback positions.
# A position of -1 means the column is optional and absent by default.
QUOTA_METADATA_FALLBACKS = {
    'submission_month': 0,
    'eid': 1,
    'name': 2,
    'level': 3,
    'rep_region': 9,
    'quota_start_date': 11,
    'dual_metric': -1,
}
DUAL_METRIC_FLAG = 'DMC'

# --- Reference (roster) workbook ---
REFERENCE_HEADER_MARKER = 'employee id'
REFERENCE_HEADER_SCAN_ROWS = 20
REFERENCE_COLUMNS = {
    # field: (exact header label, fallback position)
    'eid': ('Employee ID', 0),
    'full_name': ('Full Legal Name', 3),
    'active_status': ('Active Status', 8),
    'on_leave': ('On Leave', 9),
    'country': ('Country', 28),
    'job_title': ('Job Title', 15),
}
ACTIVE_STATUS_OK = 'Yes'
ON_LEAVE_YES = 'Yes'

# --- LMS monthly-processing workbook ---
LMS_FIRST_DATA_ROW = 1
LMS_COLUMNS = {
    'name': 0,                  # A
    'employee_id': 1,           # B
    'manager_id': 2,            # C
    'manager_name': 3,          # D
    'geo': 4,                   # E
    'tier': 5,                  # F
    'segment': 6,               # G
    'sd_group': 7,              # H
    'team': 8,                  # I
    'component': 9,             # J
    'plan_type': 10,            # K
    'recent_event': 11,         # L
    'quota_effective_date': 12, # M
    'notes': 13,                # N
    'q3_quota': 14,             # O
    'q4_quota': 15,             # P
    'h2_quota': 16,             # Q
    'rev1_jan': 17,             # R..W
    'q3_global_quota': 23,      # X
    'q4_global_quota': 24,      # Y
    'h2_global_quota': 25,      # Z
    'rev2_jan': 26,             # AA..AF
    'book_jan': 32,             # AG..AL
}
LMS_COLUMN_COUNT = 38
LMS_MONTHS = H2_MONTHS

COMPONENT_NON_SA = 'Non-SA'
COMPONENT_REV1_ONLY = 'Rev 1 Only'
COMPONENT_REV2_ONLY = 'Rev 2 Only'
COMPONENT_BOTH = 'Rev 1 & Rev 2'
REV1_COMPONENTS = (COMPONENT_NON_SA, COMPONENT_REV1_ONLY, COMPONENT_BOTH)
REV2_COMPONENTS = (COMPONENT_REV2_ONLY, COMPONENT_BOTH)

PLAN_SEMI = 'semi'
PLAN_QTRLY = 'qtrly'
PLAN_OKR = 'okr'

# Issue kinds reported by the LMS alignment check.
ISSUE_MISSING_AMOUNT = 'missing_amount'
ISSUE_SHOULD_BE_ZERO = 'should_be_zero'
ISSUE_OKR_HAS_AMOUNT = 'okr_has_amount'
ISSUE_STREAM_MISMATCH = 'rev2_only_has_rev1'

# --- Placeholder identities ---
PLACEHOLDER_EIDS = ('', '-')
PLACEHOLDER_PREFIX = 'tbh'
