"""Native Excel workbook reader producing raw cell grids."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Sequence
from pathlib import Path

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.worksheet.worksheet import Worksheet

from social_report.services.grid_scanner import is_blank_row
from social_report.utils.exceptions import (
    UnsupportedFormatError,
    WorkbookParseError,
)
from social_report.utils.logging import get_logger
from social_report.workbook import CellValue, RawWorkbook, Row, header_keys

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = frozenset({".xlsx", ".xlsm", ".xltx", ".xltm"})


class WorkbookReader:
    """Materialize every sheet of a workbook as a grid of cell values.

    Cells carry openpyxl's computed values: numbers, strings, booleans,
    ``datetime`` for date-formatted cells and None for empty cells.
    """

    def read_bytes(self, content: bytes, filename: str | None = None) -> RawWorkbook:
        """Read a workbook from uploaded bytes.

        Raises:
            UnsupportedFormatError: If the filename extension is not an
                OOXML spreadsheet.
            WorkbookParseError: If the bytes cannot be parsed as a workbook.
        """
        self._check_extension(filename)

        try:
            workbook = load_workbook(
                filename=io.BytesIO(content), data_only=True, read_only=True
            )
        except (
            InvalidFileException,
            zipfile.BadZipFile,
            KeyError,
            ValueError,
            OSError,
        ) as e:
            logger.warning(
                "Workbook could not be parsed",
                filename=filename,
                error=str(e),
            )
            raise WorkbookParseError(
                message=f"Could not read the uploaded file as a spreadsheet: {e}",
                filename=filename,
                details={"parse_error": str(e)},
            ) from e

        try:
            sheet_names = list(workbook.sheetnames)
            grids = {
                name: self._read_grid(workbook[name]) for name in sheet_names
            }
        finally:
            workbook.close()

        logger.debug("Workbook read", filename=filename, sheets=len(sheet_names))
        return RawWorkbook(sheet_names=sheet_names, grids=grids)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _check_extension(filename: str | None) -> None:
        if not filename:
            return
        extension = Path(filename).suffix.lower()
        if extension not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFormatError(
                message=(
                    f"Unsupported file type '{extension or filename}'. "
                    "Upload an .xlsx workbook."
                ),
                extension=extension or None,
                filename=filename,
            )

    @staticmethod
    def _read_grid(sheet: Worksheet) -> list[list[CellValue]]:
        rows = [list(values) for values in sheet.iter_rows(values_only=True)]
        # Read-only sheets pad to the stored dimension; drop trailing blank rows.
        while rows and is_blank_row(rows[-1]):
            rows.pop()
        return rows


def grid_to_records(grid: Sequence[Sequence[CellValue]]) -> list[Row]:
    """Row-object view of a whole sheet.

    The first non-blank row supplies the keys (see ``header_keys``); each
    later non-blank row becomes a mapping with None for missing cells.
    Header text is trimmed the same way the grid scanner trims table
    headers, so both views key a column like ``" Date "`` as ``"Date"``.
    """
    start = 0
    while start < len(grid) and is_blank_row(grid[start]):
        start += 1
    if start >= len(grid):
        return []

    headers = [
        "" if cell is None else str(cell).strip() for cell in grid[start]
    ]
    keys = header_keys(headers)
    records: list[Row] = []
    for row in grid[start + 1 :]:
        if is_blank_row(row):
            continue
        records.append(
            {key: row[i] if i < len(row) else None for i, key in enumerate(keys)}
        )
    return records
