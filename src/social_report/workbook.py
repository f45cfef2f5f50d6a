"""Dataclasses representing a parsed analytics workbook and its derived models."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

CellValue = str | int | float | bool | datetime | date | None
"""A raw spreadsheet value as materialized by the workbook reader."""

Row = dict[str, CellValue]


class ColumnType(str, Enum):
    """Semantic type inferred for a column."""

    DATE = "date"
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"
    TEXT = "text"
    MIXED = "mixed"
    EMPTY = "empty"
    UNKNOWN = "unknown"


class Platform(str, Enum):
    """Social platform a sheet belongs to."""

    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    UNKNOWN = "unknown"


class SheetKind(str, Enum):
    """Structural kind of a sheet."""

    PLATFORM_MAIN = "platform_main"
    POST_LEVEL = "post_level"
    MONTHLY_SUMMARY = "monthly_summary"
    OTHER = "other"


class MetricType(str, Enum):
    """Report category a table is merged into."""

    OVERVIEW = "overview"
    REACH = "reach"
    VIEWS = "views"
    IMPRESSIONS = "impressions"
    ENGAGEMENT = "engagement"
    OTHER = "other"


REPORT_METRIC_TYPES: tuple[MetricType, ...] = (
    MetricType.OVERVIEW,
    MetricType.REACH,
    MetricType.VIEWS,
    MetricType.IMPRESSIONS,
    MetricType.ENGAGEMENT,
)


# --------------------------------------------------------------------------- #
# Raw workbook and detected tables
# --------------------------------------------------------------------------- #


@dataclass
class RawWorkbook:
    """Materialized workbook: ordered sheet names and one cell grid per sheet."""

    sheet_names: list[str]
    grids: dict[str, list[list[CellValue]]]

    def grid(self, sheet_name: str) -> list[list[CellValue]]:
        return self.grids.get(sheet_name, [])


@dataclass(frozen=True)
class TableMeta:
    """Location of a detected table inside its sheet (0-based row indices)."""

    sheet_name: str
    table_index: int
    header_row: int
    start_row: int
    end_row: int


def header_keys(headers: list[str] | tuple[str, ...]) -> list[str]:
    """Turn raw header text into unique row-object keys.

    Repeated headers receive ``_1``, ``_2``... suffixes in order of
    appearance and empty headers become ``__EMPTY``, matching how
    spreadsheet readers key row objects.
    """
    seen: dict[str, int] = {}
    keys: list[str] = []
    for header in headers:
        base = header if header else "__EMPTY"
        count = seen.get(base, 0)
        key = base if count == 0 else f"{base}_{count}"
        while key in seen:
            count += 1
            key = f"{base}_{count}"
        seen[base] = count + 1
        seen.setdefault(key, 1)
        keys.append(key)
    return keys


@dataclass(frozen=True)
class DetectedTable:
    """One contiguous sub-table found inside a sheet."""

    meta: TableMeta
    headers: tuple[str, ...]
    rows: tuple[tuple[CellValue, ...], ...]

    def cell(self, row_index: int, column_index: int) -> CellValue:
        """Return a cell, reading missing cells of ragged rows as None."""
        row = self.rows[row_index]
        if column_index < len(row):
            return row[column_index]
        return None

    def records(self) -> list[Row]:
        """Rows as mappings keyed by de-duplicated header keys."""
        keys = header_keys(self.headers)
        return [
            {key: self.cell(i, col) for col, key in enumerate(keys)}
            for i in range(len(self.rows))
        ]


# --------------------------------------------------------------------------- #
# Normalized tables
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class NormalizedTableMeta(TableMeta):
    """Table location plus platform, metric type and table type tags."""

    platform: Platform = Platform.UNKNOWN
    metric_type: MetricType = MetricType.OTHER
    table_type: str = ""


@dataclass
class NormalizedTable:
    """Rows keyed by canonical column names; every row carries every column."""

    meta: NormalizedTableMeta
    columns: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "meta": {
                "sheet_name": self.meta.sheet_name,
                "table_index": self.meta.table_index,
                "header_row": self.meta.header_row,
                "start_row": self.meta.start_row,
                "end_row": self.meta.end_row,
                "platform": self.meta.platform.value,
                "metric_type": self.meta.metric_type.value,
                "table_type": self.meta.table_type,
            },
            "columns": list(self.columns),
            "rows": [
                {key: serialize_cell(value) for key, value in row.items()}
                for row in self.rows
            ],
        }


@dataclass
class MergedDataset:
    """One merged table per report tab."""

    overview: NormalizedTable
    reach: NormalizedTable
    views: NormalizedTable
    impressions: NormalizedTable
    engagement: NormalizedTable

    def tables(self) -> Iterator[tuple[MetricType, NormalizedTable]]:
        """Yield ``(metric_type, table)`` in report tab order."""
        for metric_type in REPORT_METRIC_TYPES:
            yield metric_type, getattr(self, metric_type.value)

    def to_dict(self) -> dict[str, Any]:
        return {metric.value: table.to_dict() for metric, table in self.tables()}


# --------------------------------------------------------------------------- #
# Per-sheet load path
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ColumnMeta:
    """Raw header, canonical display name and inferred type of a column."""

    name: str
    normalized_name: str
    type: ColumnType


@dataclass
class SheetMeta:
    name: str
    platform: Platform
    kind: SheetKind
    row_count: int
    columns: list[ColumnMeta]


@dataclass
class SheetData:
    """A logical spreadsheet tab with its row objects."""

    name: str
    rows: list[Row]
    meta: SheetMeta


@dataclass
class WorkbookData:
    sheets: list[SheetData]


# --------------------------------------------------------------------------- #
# Dashboard view specifications
# --------------------------------------------------------------------------- #


class ChartType(str, Enum):
    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    SCATTER = "scatter"
    TABLE = "table"
    KPI = "kpi"


class ChartFieldRole(str, Enum):
    X = "x"
    Y = "y"
    SERIES = "series"
    VALUE = "value"


class SectionId(str, Enum):
    OVERVIEW = "overview"
    REACH = "reach"
    VIEWS = "views"
    IMPRESSIONS = "impressions"
    ENGAGEMENT = "engagement"


@dataclass(frozen=True)
class ChartField:
    role: ChartFieldRole
    column: str


@dataclass(frozen=True)
class ChartConfig:
    """Declarative chart binding; columns are resolved by the renderer."""

    id: str
    section: SectionId
    title: str
    type: ChartType
    fields: tuple[ChartField, ...]
    platforms: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "section": self.section.value,
            "title": self.title,
            "type": self.type.value,
            "fields": [
                {"role": f.role.value, "column": f.column} for f in self.fields
            ],
        }
        if self.platforms is not None:
            data["platforms"] = list(self.platforms)
        return data


@dataclass
class SectionModel:
    id: SectionId
    title: str
    charts: list[ChartConfig]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.value,
            "title": self.title,
            "charts": [chart.to_dict() for chart in self.charts],
        }


@dataclass
class DashboardModel:
    """Sheets with data plus the five fixed dashboard sections."""

    sheets: list[SheetData]
    sections: list[SectionModel]

    def section(self, section_id: SectionId) -> SectionModel:
        for section in self.sections:
            if section.id == section_id:
                return section
        raise KeyError(section_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheets": [
                {
                    "name": sheet.name,
                    "meta": {
                        "name": sheet.meta.name,
                        "platform": sheet.meta.platform.value,
                        "kind": sheet.meta.kind.value,
                        "row_count": sheet.meta.row_count,
                        "columns": [
                            {
                                "name": c.name,
                                "normalized_name": c.normalized_name,
                                "type": c.type.value,
                            }
                            for c in sheet.meta.columns
                        ],
                    },
                }
                for sheet in self.sheets
            ],
            "sections": [section.to_dict() for section in self.sections],
        }


def serialize_cell(value: CellValue) -> CellValue:
    """Render date values as ISO-8601 strings; pass everything else through."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
