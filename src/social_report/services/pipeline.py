"""End-to-end workbook processing: read, detect, normalize, merge, build.

Every call works on fresh objects built from the uploaded bytes; nothing is
cached between calls.
"""

from __future__ import annotations

from social_report.config import Settings
from social_report.services.dashboard_builder import (
    DashboardConfig,
    build_dashboard_model,
    load_workbook_data,
)
from social_report.services.grid_scanner import scan_workbook
from social_report.services.metric_tagger import tag_tables
from social_report.services.report_publisher import (
    PublishedReport,
    ReportWriter,
    XlsxReportWriter,
    publish_dataset,
)
from social_report.services.reporting import build_reporting_dataset
from social_report.services.table_merger import build_merged_dataset
from social_report.services.workbook_reader import WorkbookReader
from social_report.utils.exceptions import FileTooLargeError
from social_report.utils.logging import LogContext, get_logger, timed_operation
from social_report.workbook import (
    DashboardModel,
    DetectedTable,
    MergedDataset,
    RawWorkbook,
)

logger = get_logger(__name__)


class WorkbookPipeline:
    """Facade over the detection and normalization services."""

    def __init__(self, settings: Settings, reader: WorkbookReader | None = None):
        self._settings = settings
        self._reader = reader or WorkbookReader()

    @property
    def dashboard_config(self) -> DashboardConfig:
        return DashboardConfig(max_charts=self._settings.max_charts_per_section)

    def read(self, content: bytes, filename: str | None = None) -> RawWorkbook:
        """Parse uploaded bytes into a raw workbook.

        Raises:
            FileTooLargeError: If the upload exceeds the configured limit.
            UnsupportedFormatError: If the file is not an .xlsx workbook.
            WorkbookParseError: If the bytes are not a readable workbook.
        """
        if len(content) > self._settings.max_file_size_bytes:
            raise FileTooLargeError(
                file_size=len(content),
                max_size=self._settings.max_file_size_bytes,
                filename=filename,
            )
        with timed_operation(logger, "read_workbook") as metrics:
            workbook = self._reader.read_bytes(content, filename)
            metrics.sheets_scanned = len(workbook.sheet_names)
        return workbook

    def detect_tables(self, workbook: RawWorkbook) -> list[DetectedTable]:
        with timed_operation(logger, "scan_workbook") as metrics:
            tables = scan_workbook(workbook, self._settings.reserved_sheet_name)
            metrics.sheets_scanned = len(workbook.sheet_names)
            metrics.tables_detected = len(tables)
            metrics.rows_processed = sum(len(t.rows) for t in tables)
        return tables

    def normalize(self, content: bytes, filename: str | None = None) -> MergedDataset:
        """Detected tables, normalized per metric type and merged."""
        with LogContext(workbook=filename, operation="normalize"):
            tables = self.detect_tables(self.read(content, filename))
            with timed_operation(logger, "merge_tables") as metrics:
                dataset = build_merged_dataset(tag_tables(tables))
                metrics.rows_processed = sum(
                    len(table.rows) for _, table in dataset.tables()
                )
        return dataset

    def build_dashboard(
        self, content: bytes, filename: str | None = None
    ) -> DashboardModel:
        with LogContext(workbook=filename, operation="dashboard"):
            workbook = self.read(content, filename)
            with timed_operation(logger, "build_dashboard") as metrics:
                data = load_workbook_data(
                    workbook, self._settings.classifier_thresholds
                )
                model = build_dashboard_model(data, self.dashboard_config)
                metrics.sheets_scanned = len(data.sheets)
                metrics.rows_processed = sum(len(s.rows) for s in model.sheets)
        return model

    def build_reporting(
        self, content: bytes, filename: str | None = None
    ) -> MergedDataset:
        """The five canonical publish tabs for an uploaded workbook."""
        with LogContext(workbook=filename, operation="reporting"):
            tables = self.detect_tables(self.read(content, filename))
            with timed_operation(logger, "build_reporting") as metrics:
                dataset = build_reporting_dataset(tables)
                metrics.rows_processed = sum(
                    len(table.rows) for _, table in dataset.tables()
                )
        return dataset

    def publish(
        self,
        content: bytes,
        writer: ReportWriter,
        filename: str | None = None,
    ) -> PublishedReport:
        dataset = self.build_reporting(content, filename)
        with LogContext(workbook=filename, operation="publish"):
            return publish_dataset(dataset, writer, self._settings.report_title)

    def export_reporting(
        self, content: bytes, filename: str | None = None
    ) -> tuple[PublishedReport, bytes]:
        """Publish to a local .xlsx workbook and return its bytes."""
        writer = XlsxReportWriter()
        report = self.publish(content, writer, filename)
        return report, writer.to_bytes()
