"""Assign detected tables to report metric types and normalize their columns."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from social_report.services.column_classifier import is_populated
from social_report.services.name_normalizer import normalize_column_name
from social_report.services.sheet_classifier import classify_sheet
from social_report.workbook import (
    DetectedTable,
    MetricType,
    NormalizedTable,
    NormalizedTableMeta,
    Row,
)

MAIN_SHEETS: tuple[str, ...] = ("Facebook", "Instagram", "Youtube")
POST_SHEETS: tuple[str, ...] = ("facebook_post", "instagram_post", "youtube_post")
SUMMARY_SHEETS: tuple[str, ...] = ("Calculations", "Instagram_Source")

METRIC_SHEET_ROSTERS: dict[MetricType, tuple[str, ...]] = {
    MetricType.OVERVIEW: MAIN_SHEETS,
    MetricType.REACH: MAIN_SHEETS + POST_SHEETS,
    MetricType.VIEWS: MAIN_SHEETS + POST_SHEETS + SUMMARY_SHEETS,
    MetricType.IMPRESSIONS: ("Facebook", "Instagram") + SUMMARY_SHEETS,
    MetricType.ENGAGEMENT: MAIN_SHEETS + POST_SHEETS,
}
"""Exact sheet names feeding each report tab."""


def metric_types_for_sheet(
    sheet_name: str,
    rosters: Mapping[MetricType, tuple[str, ...]] = METRIC_SHEET_ROSTERS,
) -> list[MetricType]:
    """Every metric type whose roster lists ``sheet_name``, in roster order."""
    return [metric for metric, sheets in rosters.items() if sheet_name in sheets]


def normalize_table(
    table: DetectedTable, metric_type: MetricType = MetricType.OTHER
) -> NormalizedTable:
    """Re-key a detected table by canonical column names.

    Blank headers are dropped. Headers that normalize to the same name share
    one column; the first non-null value among them wins.
    """
    classification = classify_sheet(table.meta.sheet_name)

    sources: dict[str, list[int]] = {}
    for index, header in enumerate(table.headers):
        if not header:
            continue
        sources.setdefault(normalize_column_name(header), []).append(index)
    columns = list(sources)

    rows: list[Row] = []
    for row_index in range(len(table.rows)):
        row: Row = {}
        for column, indices in sources.items():
            value = None
            for index in indices:
                candidate = table.cell(row_index, index)
                if is_populated(candidate):
                    value = candidate
                    break
            row[column] = value
        rows.append(row)

    meta = NormalizedTableMeta(
        sheet_name=table.meta.sheet_name,
        table_index=table.meta.table_index,
        header_row=table.meta.header_row,
        start_row=table.meta.start_row,
        end_row=table.meta.end_row,
        platform=classification.platform,
        metric_type=metric_type,
        table_type=classification.kind.value,
    )
    return NormalizedTable(meta=meta, columns=columns, rows=rows)


def tag_tables(
    tables: Iterable[DetectedTable],
    rosters: Mapping[MetricType, tuple[str, ...]] = METRIC_SHEET_ROSTERS,
) -> list[NormalizedTable]:
    """Normalize tables once per metric type they feed.

    A table from a sheet in several rosters yields one normalized copy per
    roster; a table in no roster yields a single ``OTHER`` copy.
    """
    tagged: list[NormalizedTable] = []
    for table in tables:
        metric_types = metric_types_for_sheet(table.meta.sheet_name, rosters)
        if not metric_types:
            tagged.append(normalize_table(table, MetricType.OTHER))
            continue
        for metric_type in metric_types:
            tagged.append(normalize_table(table, metric_type))
    return tagged
