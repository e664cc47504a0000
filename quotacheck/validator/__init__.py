from quotacheck.validator.engine import run_lms_validation, run_overlay_validation, run_validation
from quotacheck.validator.errors import InputShapeError, InvalidRegionError, PeriodParseError, QuotaCheckError
from quotacheck.validator.extraction import read_lms_workbook, read_quota_workbook, read_reference_workbook
