from __future__ import annotations

import io
import logging
import math
from datetime import date, datetime
from pathlib import Path
from typing import BinaryIO, List, Union

import pandas as pd

from pulse.errors import UploadRejected

logger = logging.getLogger(__name__)

SALES_SHEET_NAME = "Sales"

WorkbookSource = Union[str, Path, bytes, BinaryIO]
# openpyxl reads xlsx only
UPLOAD_EXTENSIONS = ["xlsx"]

MISSING_SHEET_MESSAGE = "ERROR: 'Sales' sheet not found in the selected Excel file."
UNREADABLE_MESSAGE = "SYSTEM ERROR: Failed to parse Excel file structure."


def cell_text(value: object) -> str:
    """Display text for a raw cell value.

    Dates render like Excel's long date format so month names survive;
    integral floats drop the trailing ``.0``.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (pd.Timestamp, datetime, date)):
        if pd.isna(value):
            return ""
        return f"{value:%A}, {value:%B} {value.day:02d}, {value.year}"
    if value is pd.NaT or value is pd.NA:
        return ""
    return str(value).strip()


def find_sales_sheet(sheet_names: List[str]) -> str:
    for name in sheet_names:
        if str(name).strip().lower() == SALES_SHEET_NAME.lower():
            return name
    raise UploadRejected(MISSING_SHEET_MESSAGE, reason="missing_sheet")


def _as_buffer(source: WorkbookSource) -> Union[str, Path, BinaryIO]:
    if isinstance(source, (bytes, bytearray)):
        return io.BytesIO(source)
    return source


def read_sales_grid(source: WorkbookSource) -> List[List[str]]:
    """Read the "Sales" sheet as a row-major grid of cell text.

    The whole read happens before anything is classified, so a failure here
    leaves nothing half-imported.
    """
    try:
        xls = pd.ExcelFile(_as_buffer(source))
    except Exception as exc:
        logger.info("workbook could not be opened: %s", exc)
        raise UploadRejected(UNREADABLE_MESSAGE, reason="unreadable") from exc

    with xls:
        sheet_name = find_sales_sheet([str(n) for n in xls.sheet_names])
        try:
            raw = pd.read_excel(xls, sheet_name=sheet_name, header=None, dtype=object)
        except Exception as exc:
            logger.info("sheet %r could not be read: %s", sheet_name, exc)
            raise UploadRejected(UNREADABLE_MESSAGE, reason="unreadable") from exc

    return [[cell_text(v) for v in row] for row in raw.itertuples(index=False, name=None)]
