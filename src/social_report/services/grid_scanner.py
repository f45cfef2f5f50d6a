"""Blank-row delimited sub-table detection over raw sheet grids.

Analytics exports stack several tables on one sheet, separated by one or
more fully blank rows. Each contiguous non-blank region whose first row has
at least one header and which has at least one data row is emitted as a
``DetectedTable``; anything smaller is treated as noise and dropped.
"""

from __future__ import annotations

from collections.abc import Sequence

from social_report.workbook import CellValue, DetectedTable, RawWorkbook, TableMeta
from social_report.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_RESERVED_SHEET_NAME = "Sheet1"


def is_blank_row(row: Sequence[CellValue] | None) -> bool:
    """A row is blank when it is missing or every cell is None or ""."""
    if row is None:
        return True
    return all(cell is None or cell == "" for cell in row)


def _header_text(cell: CellValue) -> str:
    if cell is None:
        return ""
    return str(cell).strip()


def scan_grid(
    sheet_name: str, grid: Sequence[Sequence[CellValue]]
) -> list[DetectedTable]:
    """Split one sheet's grid into sub-tables.

    Args:
        sheet_name: Name recorded in each table's meta.
        grid: Rows of cells; rows may be ragged.

    Returns:
        Detected tables in row order, ``table_index`` starting at 0.
    """
    tables: list[DetectedTable] = []
    current_start: int | None = None
    table_index = 0
    row_count = len(grid)

    # Index row_count is a sentinel blank row closing the last table.
    for i in range(row_count + 1):
        row = grid[i] if i < row_count else None

        if current_start is None:
            if not is_blank_row(row):
                current_start = i
            continue

        if i < row_count and not is_blank_row(row):
            continue

        end_row = i - 1
        header_row = current_start
        if end_row > header_row:
            headers = tuple(_header_text(cell) for cell in grid[header_row])
            data_rows = tuple(tuple(r) for r in grid[header_row + 1 : end_row + 1])
            if any(headers) and data_rows:
                tables.append(
                    DetectedTable(
                        meta=TableMeta(
                            sheet_name=sheet_name,
                            table_index=table_index,
                            header_row=header_row,
                            start_row=current_start,
                            end_row=end_row,
                        ),
                        headers=headers,
                        rows=data_rows,
                    )
                )
                table_index += 1
            else:
                logger.debug(
                    "Discarded headerless region",
                    sheet=sheet_name,
                    start_row=current_start,
                    end_row=end_row,
                )
        else:
            logger.debug(
                "Discarded single-row region", sheet=sheet_name, row=current_start
            )
        current_start = None

    return tables


def scan_workbook(
    workbook: RawWorkbook,
    reserved_sheet_name: str = DEFAULT_RESERVED_SHEET_NAME,
) -> list[DetectedTable]:
    """Scan every sheet in workbook order, skipping the placeholder sheet."""
    reserved = reserved_sheet_name.lower()
    tables: list[DetectedTable] = []
    for sheet_name in workbook.sheet_names:
        if sheet_name.lower() == reserved:
            logger.debug("Skipping reserved sheet", sheet=sheet_name)
            continue
        tables.extend(scan_grid(sheet_name, workbook.grid(sheet_name)))
    return tables
