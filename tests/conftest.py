from __future__ import annotations

from datetime import datetime

import pytest

from social_report.workbook import (
    DetectedTable,
    RawWorkbook,
    TableMeta,
)
from tests.fixtures import build_workbook_bytes, sample_export_sheets


@pytest.fixture
def sample_workbook_bytes() -> bytes:
    return build_workbook_bytes(sample_export_sheets())


@pytest.fixture
def sample_raw_workbook() -> RawWorkbook:
    """The sample export as the reader would materialize it."""
    sheets = sample_export_sheets()
    return RawWorkbook(sheet_names=list(sheets), grids=sheets)


@pytest.fixture
def facebook_table() -> DetectedTable:
    return DetectedTable(
        meta=TableMeta(
            sheet_name="Facebook", table_index=0, header_row=0, start_row=0, end_row=2
        ),
        headers=("Date", "Followers", "Reach"),
        rows=(
            (datetime(2024, 1, 1), 100, 500),
            (datetime(2024, 1, 2), 110, 510),
        ),
    )


@pytest.fixture
def facebook_post_table() -> DetectedTable:
    return DetectedTable(
        meta=TableMeta(
            sheet_name="facebook_post",
            table_index=0,
            header_row=0,
            start_row=0,
            end_row=1,
        ),
        headers=("Created Time (UTC)", "Perma Link", "Reach"),
        rows=((datetime(2024, 1, 1), "p1", 50),),
    )

