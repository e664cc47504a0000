# ==============================================================================
# quotacheck/validator/extraction.py
# ------------------------------------------------------------------------------
# Reads uploaded workbooks into typed records. openpyxl is used directly so
# that absolute row positions and hidden-sheet flags are preserved.
# ==============================================================================

import logging
import os
from collections import namedtuple

from openpyxl import load_workbook

from config import Config
from .errors import InputShapeError
from .mapper import detect_quota_columns, locate_reference_header, map_reference_columns
from .periods import format_period_label, sort_period_labels
from .records import build_lms_record, build_quota_record, build_reference_record
from .schema import (EXCLUDED_SHEET, LMS_FIRST_DATA_ROW, QUOTA_FIRST_DATA_ROW,
                     QUOTA_HEADER_ROW, QUOTA_SHEET_SUFFIXES)

ParsedQuotaFile = namedtuple('ParsedQuotaFile', ['records', 'submission_months'])


def open_workbook(filepath):
    """
    Opens a workbook with cached cell values.

    Raises:
        InputShapeError: If the file has an unsupported extension or cannot be read.
    """
    extension = os.path.splitext(str(filepath))[1].lower()
    if extension not in Config.ALLOWED_EXTENSIONS:
        raise InputShapeError(f"Unsupported file type '{extension}'. Please provide an .xlsx workbook.")
    try:
        return load_workbook(filepath, data_only=True)
    except Exception as e:
        raise InputShapeError(f"The workbook '{os.path.basename(str(filepath))}' is invalid or unreadable: {e}") from e


def sheet_rows(worksheet):
    """Returns every row of a sheet as a list of raw cell values."""
    return [list(row) for row in worksheet.iter_rows(values_only=True)]


def is_quota_sheet(worksheet):
    """Visible sheets whose name ends in 'quota'/'quotas', except 'Instructions'."""
    lower = worksheet.title.strip().lower()
    if lower == EXCLUDED_SHEET:
        return False
    if worksheet.sheet_state != 'visible':
        return False
    return lower.endswith(QUOTA_SHEET_SUFFIXES)


def extract_quota_records(sheets):
    """
    Builds quota records from already-decoded sheets.

    Args:
        sheets (list): (sheet label, rows) pairs, in workbook order.

    Returns:
        ParsedQuotaFile: The records and the sorted submission period labels.
    """
    records = []
    periods = set()
    for label, rows in sheets:
        if len(rows) <= QUOTA_HEADER_ROW or not rows[QUOTA_HEADER_ROW]:
            logging.info(f"Sheet '{label}' has no header row; skipping.")
            continue
        column_map = detect_quota_columns(rows[QUOTA_HEADER_ROW])

        sheet_count = 0
        for index in range(QUOTA_FIRST_DATA_ROW, len(rows)):
            row = rows[index]
            if not row:
                continue
            record = build_quota_record(row, column_map, label, index + 1)
            if record is None:
                continue
            records.append(record)
            periods.add(format_period_label(record.submission_month))
            sheet_count += 1
        logging.info(f"Sheet '{label}': {sheet_count} quota rows read.")

    return ParsedQuotaFile(records, sort_period_labels(periods))


def extract_rows(filepath, sheet_filter=None):
    """
    Decodes a workbook into its sheets of rows.

    Args:
        filepath (str): Path to the workbook.
        sheet_filter (callable): Optional predicate on a worksheet; sheets it
            rejects are left out.

    Returns:
        list: (sheet title, rows) pairs in workbook order.
    """
    wb = open_workbook(filepath)
    sheets = []
    for ws in wb.worksheets:
        if sheet_filter is not None and not sheet_filter(ws):
            logging.debug(f"Ignoring sheet '{ws.title}' (state: {ws.sheet_state}).")
            continue
        sheets.append((ws.title, sheet_rows(ws)))
    return sheets


def read_quota_workbook(filepath):
    """Reads a fiscal-half (LTS/LSS) quota workbook."""
    sheets = extract_rows(filepath, is_quota_sheet)
    if not sheets:
        logging.warning(f"No visible quota sheets found in '{filepath}'.")
    return extract_quota_records(sheets)


def extract_reference_records(rows):
    """Builds roster entries from the rows of the roster sheet."""
    header_index = locate_reference_header(rows)
    columns = map_reference_columns(rows[header_index])
    logging.debug(f"Roster header at row {header_index + 1}; columns: {columns}")

    records = []
    for row in rows[header_index + 1:]:
        if not row:
            continue
        ref = build_reference_record(row, columns)
        if ref is not None:
            records.append(ref)
    return records


def read_reference_workbook(filepath):
    """Reads the first sheet of a roster workbook."""
    wb = open_workbook(filepath)
    records = extract_reference_records(sheet_rows(wb.worksheets[0]))
    logging.info(f"Reference file: {len(records)} roster entries read.")
    return records


def extract_lms_records(rows):
    """Builds LMS records; the header is the first row and rows without an employee id are skipped."""
    records = []
    for index in range(LMS_FIRST_DATA_ROW, len(rows)):
        row = rows[index]
        if not row:
            continue
        record = build_lms_record(row, index + 1)
        if record is not None:
            records.append(record)
    return records


def read_lms_workbook(filepath):
    """Reads the first sheet of an LMS quota workbook."""
    wb = open_workbook(filepath)
    records = extract_lms_records(sheet_rows(wb.worksheets[0]))
    logging.info(f"LMS quota file: {len(records)} rows read.")
    return records
