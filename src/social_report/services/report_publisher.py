"""Publishing the merged reporting dataset to a multi-tab spreadsheet.

The destination is abstracted behind ``ReportWriter``: a writer creates the
spreadsheet resource with the five fixed tabs and then receives one bulk
write per tab (header row followed by value rows). ``XlsxReportWriter``
renders a local workbook; remote spreadsheet services plug in by
implementing the same two methods.
"""

from __future__ import annotations

import io
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import pandas as pd

from social_report.services.reporting import REPORT_COLUMNS, REPORT_TABS
from social_report.utils.exceptions import PublishError
from social_report.utils.logging import get_logger
from social_report.workbook import CellValue, MergedDataset, Row, serialize_cell

logger = get_logger(__name__)

DEFAULT_REPORT_TITLE = "Looker Social Reporting"


@dataclass
class PublishedReport:
    """Identifier and optional URL of a created reporting spreadsheet."""

    report_id: str
    title: str
    tabs: list[str]
    url: str | None = None


class ReportWriter(Protocol):
    """Destination of a reporting spreadsheet."""

    def create(self, title: str, tab_titles: Sequence[str]) -> PublishedReport:
        """Create the spreadsheet resource with the given tabs."""
        ...

    def write_tab(self, tab_title: str, values: list[list[CellValue]]) -> None:
        """Write a header row plus value rows starting at the tab's A1."""
        ...


def rows_to_values(
    rows: Sequence[Row], columns: Sequence[str]
) -> list[list[CellValue]]:
    """Project rows onto ``columns`` in order, rendering dates as ISO-8601."""
    return [[serialize_cell(row.get(column)) for column in columns] for row in rows]


def publish_dataset(
    dataset: MergedDataset,
    writer: ReportWriter,
    title: str = DEFAULT_REPORT_TITLE,
) -> PublishedReport:
    """Create the reporting spreadsheet and write the five tabs.

    Raises:
        PublishError: If the writer fails; carries the downstream status and
            message when the writer exposes them.
    """
    tab_titles = list(REPORT_TABS.values())
    writer_name = type(writer).__name__

    try:
        report = writer.create(title, tab_titles)
    except PublishError:
        raise
    except Exception as e:
        logger.error("Report creation failed", writer=writer_name, error=str(e))
        raise PublishError(
            message=f"Failed to create reporting spreadsheet: {e}",
            status=getattr(e, "status", None),
        ) from e

    for metric_type, table in dataset.tables():
        tab = REPORT_TABS[metric_type]
        columns = REPORT_COLUMNS[metric_type]
        values = [list(columns), *rows_to_values(table.rows, columns)]
        try:
            writer.write_tab(tab, values)
        except PublishError:
            raise
        except Exception as e:
            logger.log_publish_call(
                writer_name, tab, 0, success=False, error_message=str(e)
            )
            raise PublishError(
                message=f"Failed to write tab '{tab}': {e}",
                status=getattr(e, "status", None),
                tab=tab,
            ) from e
        logger.log_publish_call(writer_name, tab, len(values) - 1)

    return report


class XlsxReportWriter:
    """Render the reporting spreadsheet as an in-memory .xlsx workbook."""

    def __init__(self) -> None:
        self._title: str | None = None
        self._tabs: dict[str, pd.DataFrame] = {}

    def create(self, title: str, tab_titles: Sequence[str]) -> PublishedReport:
        self._title = title
        self._tabs = {tab: pd.DataFrame() for tab in tab_titles}
        return PublishedReport(
            report_id=str(uuid.uuid4()), title=title, tabs=list(tab_titles)
        )

    def write_tab(self, tab_title: str, values: list[list[CellValue]]) -> None:
        if tab_title not in self._tabs:
            raise PublishError(
                message=f"Tab '{tab_title}' was not created", tab=tab_title
            )
        header, *rows = values
        self._tabs[tab_title] = pd.DataFrame(rows, columns=header)

    def to_bytes(self) -> bytes:
        """Serialize every written tab, in creation order."""
        if self._title is None:
            raise PublishError(message="Reporting spreadsheet was not created")
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as excel:
            for tab, frame in self._tabs.items():
                frame.to_excel(excel, sheet_name=tab, index=False)
        return buffer.getvalue()
