"""Test fixtures and helpers for building sample analytics workbooks.

Workbooks are built in memory with openpyxl so tests never depend on
binary files checked into the repository.

Example usage:
    from tests.fixtures import build_workbook_bytes, sample_export_sheets

    content = build_workbook_bytes(sample_export_sheets())
"""

import io
from datetime import datetime
from typing import Any

from openpyxl import Workbook

from social_report.workbook import MetricType, NormalizedTable, NormalizedTableMeta

Grid = list[list[Any]]


def build_workbook_bytes(sheets: dict[str, Grid]) -> bytes:
    """Serialize ``{sheet name: rows}`` into .xlsx bytes.

    Args:
        sheets: Sheet grids in workbook order; None cells stay empty.

    Returns:
        The workbook as bytes.
    """
    wb = Workbook()
    default = wb.active
    for index, (name, grid) in enumerate(sheets.items()):
        ws = default if index == 0 else wb.create_sheet(name)
        ws.title = name
        for row in grid:
            ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def sample_export_sheets() -> dict[str, Grid]:
    """A small export shaped like the real Facebook/Instagram workbooks."""
    return {
        "Sheet1": [["placeholder"], ["ignored"]],
        "Facebook": [
            ["Date", "Profile Name", "Followers", "Reach", "Total Impressions"],
            [datetime(2024, 1, 1), "Fevicryl", 100, 500, 900],
            [datetime(2024, 1, 2), "Fevicryl", 110, 510, 950],
        ],
        "Instagram": [
            ["Date", "Followers", "Reach", "Engagement Rate (Shares + Saves)"],
            [datetime(2024, 1, 1), 40, 200, 0.05],
        ],
        "facebook_post": [
            ["Created Time (UTC)", "Perma Link", "Reach", "Likes"],
            [datetime(2024, 1, 1), "https://fb.example/p1", 50, 7],
        ],
        "Calculations": [
            [
                "Month",
                "SUM of Total Impressions",
                None,
                "Month",
                "SUM of Total Impressions",
                "SUM of Post Video Views",
                "SUM of Post Video Views",
            ],
            ["January", 1000, None, "Jan", 1850, 30, 45],
            ["February", 1200, None, "Feb", 2100, 35, 60],
            [],
            ["Notes"],
        ],
    }


def make_normalized(
    columns: list[str],
    rows: list[dict[str, Any]],
    metric_type: MetricType = MetricType.REACH,
    sheet_name: str = "Facebook",
) -> NormalizedTable:
    """Build a NormalizedTable directly, bypassing detection."""
    return NormalizedTable(
        meta=NormalizedTableMeta(
            sheet_name=sheet_name,
            table_index=0,
            header_row=0,
            start_row=0,
            end_row=len(rows),
            metric_type=metric_type,
            table_type="platform_main",
        ),
        columns=columns,
        rows=rows,
    )
