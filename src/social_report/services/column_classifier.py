"""Semantic type inference for spreadsheet columns."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from social_report.workbook import CellValue, ColumnType

DEFAULT_SAMPLE_SIZE = 200
DEFAULT_CATEGORICAL_RATIO = 0.6
DEFAULT_CATEGORICAL_MAX_DISTINCT = 50


@dataclass(frozen=True)
class ClassifierThresholds:
    """Sampling and categorical thresholds used by ``classify_column``."""

    sample_size: int = DEFAULT_SAMPLE_SIZE
    categorical_ratio: float = DEFAULT_CATEGORICAL_RATIO
    categorical_max_distinct: int = DEFAULT_CATEGORICAL_MAX_DISTINCT


DEFAULT_THRESHOLDS = ClassifierThresholds()


def is_populated(value: CellValue) -> bool:
    return value is not None and value != ""


def is_number(value: object) -> bool:
    """int or float, excluding bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def classify_column(
    values: Iterable[CellValue],
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> ColumnType:
    """Infer the semantic type of a column from its leading populated values.

    Only the first ``thresholds.sample_size`` populated values are looked at,
    so a column that turns textual further down is still reported by its
    head.

    Args:
        values: Column cells in row order.
        thresholds: Sample cap and categorical thresholds.

    Returns:
        The inferred ColumnType; never ``UNKNOWN``.
    """
    sample: list[CellValue] = []
    for value in values:
        if not is_populated(value):
            continue
        sample.append(value)
        if len(sample) >= thresholds.sample_size:
            break

    if not sample:
        return ColumnType.EMPTY

    # datetime is a subclass of date
    if all(isinstance(v, date) for v in sample):
        return ColumnType.DATE

    if all(is_number(v) for v in sample):
        return ColumnType.NUMERIC

    if all(isinstance(v, str) for v in sample):
        distinct = len(set(sample))
        ratio = distinct / len(sample)
        if (
            ratio < thresholds.categorical_ratio
            and distinct <= thresholds.categorical_max_distinct
        ):
            return ColumnType.CATEGORICAL
        return ColumnType.TEXT

    return ColumnType.MIXED
