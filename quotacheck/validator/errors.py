# ==============================================================================
# quotacheck/validator/errors.py
# ------------------------------------------------------------------------------
# Errors that abort a validation run. Per-record anomalies never raise.
# ==============================================================================

class QuotaCheckError(Exception):
    """Base class for every error that stops a run before results exist."""


class InputShapeError(QuotaCheckError, ValueError):
    """A workbook is unreadable or a required sheet/header was not found."""


class InvalidRegionError(QuotaCheckError, ValueError):
    """The selected region is not one of the known regions."""


class PeriodParseError(QuotaCheckError, ValueError):
    """A period label is not of the form 'Mon-YY'."""

    def __init__(self, label):
        self.label = label
        super().__init__(f"Invalid submission month: {label}")


class RegionTableError(QuotaCheckError, ValueError):
    """A region lookup table override is unreadable or names an unknown region."""
