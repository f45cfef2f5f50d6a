"""Cross-table merging of normalized tables into per-metric datasets."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from social_report.services.column_classifier import is_number
from social_report.workbook import (
    CellValue,
    MergedDataset,
    MetricType,
    NormalizedTable,
    NormalizedTableMeta,
    Platform,
    Row,
)


def empty_meta(metric_type: MetricType) -> NormalizedTableMeta:
    """Meta of a merged table that no source table contributed to."""
    return NormalizedTableMeta(
        sheet_name="virtual",
        table_index=0,
        header_row=0,
        start_row=0,
        end_row=0,
        platform=Platform.UNKNOWN,
        metric_type=metric_type,
        table_type=f"{metric_type.value}_merged",
    )


def merge_tables(
    tables: Iterable[NormalizedTable], metric_type: MetricType
) -> NormalizedTable:
    """Union the tables tagged ``metric_type`` into one wide table.

    Columns are the first-seen-order union of the contributing tables'
    columns; rows are concatenated table by table and padded with None for
    columns their table lacked. With no contributing table the result has no
    columns and no rows.
    """
    matching = [t for t in tables if t.meta.metric_type == metric_type]

    columns: list[str] = []
    seen: set[str] = set()
    for table in matching:
        for column in table.columns:
            if column not in seen:
                seen.add(column)
                columns.append(column)

    rows: list[Row] = [
        {column: row.get(column) for column in columns}
        for table in matching
        for row in table.rows
    ]

    meta = matching[0].meta if matching else empty_meta(metric_type)
    return NormalizedTable(meta=meta, columns=columns, rows=rows)


def build_merged_dataset(tables: Sequence[NormalizedTable]) -> MergedDataset:
    """Merge tagged tables into the five report datasets."""
    return MergedDataset(
        overview=merge_tables(tables, MetricType.OVERVIEW),
        reach=merge_tables(tables, MetricType.REACH),
        views=merge_tables(tables, MetricType.VIEWS),
        impressions=merge_tables(tables, MetricType.IMPRESSIONS),
        engagement=merge_tables(tables, MetricType.ENGAGEMENT),
    )


def first_number(
    row: Mapping[str, CellValue], aliases: Sequence[str]
) -> float | int | None:
    """Value of the first alias holding a number; later aliases are ignored."""
    for alias in aliases:
        value = row.get(alias)
        if is_number(value):
            return value  # type: ignore[return-value]
    return None


def first_string(
    row: Mapping[str, CellValue], aliases: Sequence[str]
) -> str | None:
    """Value of the first alias holding a non-blank string."""
    for alias in aliases:
        value = row.get(alias)
        if isinstance(value, str) and value.strip():
            return value
    return None
