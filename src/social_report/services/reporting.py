"""Canonical reporting rows for the five publish tabs.

Each tab is fed by a fixed list of source sheets. For every source the
canonical fields are read from the sheet's detected tables through ordered
alias lists: the first alias holding a value of the expected kind wins.
Missing sheets and missing columns simply contribute nothing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from social_report.services.metric_tagger import (
    METRIC_SHEET_ROSTERS,
    metric_types_for_sheet,
)
from social_report.services.sheet_classifier import classify_sheet
from social_report.services.table_merger import (
    first_number,
    first_string,
    merge_tables,
)
from social_report.utils.logging import get_logger
from social_report.workbook import (
    CellValue,
    DetectedTable,
    MergedDataset,
    MetricType,
    NormalizedTable,
    NormalizedTableMeta,
    Row,
)

logger = get_logger(__name__)

REPORT_TABS: dict[MetricType, str] = {
    MetricType.OVERVIEW: "Overview",
    MetricType.REACH: "Reach",
    MetricType.VIEWS: "Views",
    MetricType.IMPRESSIONS: "Impressions",
    MetricType.ENGAGEMENT: "Engagement",
}
"""Destination tab title per metric type, in publish order."""

REPORT_COLUMNS: dict[MetricType, tuple[str, ...]] = {
    MetricType.OVERVIEW: (
        "Platform",
        "Date",
        "Followers",
        "TotalImpressions",
        "Reach",
        "EngagementRate",
        "VideoViews",
    ),
    MetricType.REACH: (
        "Platform",
        "Date",
        "ProfileName",
        "Post",
        "Reach",
        "OrganicReach",
        "PaidReach",
        "ViralReach",
    ),
    MetricType.VIEWS: (
        "Platform",
        "Date",
        "ProfileName",
        "Post",
        "Views",
        "VideoViews",
        "WatchTimeMinutes",
    ),
    MetricType.IMPRESSIONS: (
        "Platform",
        "Date",
        "ProfileName",
        "Post",
        "TotalImpressions",
        "OrganicImpressions",
        "PaidImpressions",
        "ViralImpressions",
        "Month",
    ),
    MetricType.ENGAGEMENT: (
        "Platform",
        "Date",
        "ProfileName",
        "Post",
        "Likes",
        "Comments",
        "Saves",
        "Shares",
        "EngagementRate",
        "NetSentimentScore",
    ),
}
"""Declared column order of each publish tab."""


class FieldKind(str, Enum):
    NUMBER = "number"
    STRING = "string"
    VALUE = "value"


@dataclass(frozen=True)
class FieldRule:
    """Ordered raw-header aliases for one canonical field."""

    kind: FieldKind
    aliases: tuple[str, ...]

    def extract(self, record: Mapping[str, CellValue]) -> CellValue:
        if self.kind == FieldKind.NUMBER:
            return first_number(record, self.aliases)
        if self.kind == FieldKind.STRING:
            return first_string(record, self.aliases)
        for alias in self.aliases:
            value = record.get(alias)
            if value is not None:
                return value
        return None


def number(*aliases: str) -> FieldRule:
    return FieldRule(FieldKind.NUMBER, aliases)


def text(*aliases: str) -> FieldRule:
    return FieldRule(FieldKind.STRING, aliases)


def raw(*aliases: str) -> FieldRule:
    return FieldRule(FieldKind.VALUE, aliases)


@dataclass(frozen=True)
class SourceSpec:
    """One source sheet of a publish tab and how to read its fields.

    Canonical columns without a rule are written as None.
    """

    platform: str
    sheet_name: str
    fields: Mapping[str, FieldRule] = field(default_factory=dict)

    def build_row(
        self, record: Mapping[str, CellValue], columns: Sequence[str]
    ) -> Row:
        row: Row = {}
        for column in columns:
            if column == "Platform":
                row[column] = self.platform
                continue
            rule = self.fields.get(column)
            row[column] = rule.extract(record) if rule else None
        return row


_MAIN_DATE = raw("Date")
_POST_DATE = raw("Created Time (UTC)")
_PROFILE = text("Profile Name")
_POST = text("Perma Link", "Text")
_MONTH = text("Month_1", "Month")


def _reach_fields(date: FieldRule, post: FieldRule | None) -> dict[str, FieldRule]:
    fields = {
        "Date": date,
        "ProfileName": _PROFILE,
        "Reach": number("Reach"),
        "OrganicReach": number("Organic Reach"),
        "PaidReach": number("Paid Reach"),
        "ViralReach": number("Viral Reach"),
    }
    if post is not None:
        fields["Post"] = post
    return fields


REPORT_SOURCES: dict[MetricType, tuple[SourceSpec, ...]] = {
    MetricType.OVERVIEW: (
        SourceSpec(
            "Facebook",
            "Facebook",
            {
                "Date": _MAIN_DATE,
                "Followers": number("Followers", "Fans"),
                "TotalImpressions": number("Total Impressions", "Impressions"),
                "Reach": number("Reach"),
                "VideoViews": number("Video Views"),
            },
        ),
        SourceSpec(
            "Instagram",
            "Instagram",
            {
                "Date": _MAIN_DATE,
                "Followers": number("Followers"),
                "TotalImpressions": number("Total Impressions", "Impressions"),
                "Reach": number("Reach"),
                "EngagementRate": number("Engagement Rate (Shares + Saves)"),
                "VideoViews": number("Post Video Views", "Views"),
            },
        ),
        SourceSpec(
            "Youtube",
            "Youtube",
            {
                "Date": _MAIN_DATE,
                "Followers": number("Followers Count"),
                "VideoViews": number("videoViews", "Video Views"),
            },
        ),
    ),
    MetricType.REACH: (
        SourceSpec("Facebook", "Facebook", _reach_fields(_MAIN_DATE, None)),
        SourceSpec("Instagram", "Instagram", _reach_fields(_MAIN_DATE, None)),
        SourceSpec("Youtube", "Youtube", _reach_fields(_MAIN_DATE, None)),
        SourceSpec("Facebook", "facebook_post", _reach_fields(_POST_DATE, _POST)),
        SourceSpec("Instagram", "instagram_post", _reach_fields(_POST_DATE, _POST)),
        SourceSpec("Youtube", "youtube_post", _reach_fields(_POST_DATE, _POST)),
    ),
    MetricType.VIEWS: (
        *(
            SourceSpec(
                platform,
                platform,
                {
                    "Date": _MAIN_DATE,
                    "ProfileName": _PROFILE,
                    "Views": number("Views"),
                    "VideoViews": number(
                        "Video Views", "Post Video Views", "videoViews"
                    ),
                    "WatchTimeMinutes": number("Estimated Minutes Watched"),
                },
            )
            for platform in ("Facebook", "Instagram", "Youtube")
        ),
        *(
            SourceSpec(
                platform,
                f"{platform.lower()}_post",
                {
                    "Date": _POST_DATE,
                    "ProfileName": _PROFILE,
                    "Post": _POST,
                    "Views": number("Views"),
                    "VideoViews": number("Video Views"),
                    "WatchTimeMinutes": number("Estimated Minutes Watched"),
                },
            )
            for platform in ("Facebook", "Instagram", "Youtube")
        ),
        SourceSpec(
            "All",
            "Calculations",
            {"VideoViews": number("SUM of Post Video Views_1")},
        ),
        SourceSpec(
            "Instagram",
            "Instagram_Source",
            {
                "Views": number("Video Views"),
                "VideoViews": number("SUM of Post Video Views"),
            },
        ),
    ),
    MetricType.IMPRESSIONS: (
        *(
            SourceSpec(
                platform,
                platform,
                {
                    "Date": _MAIN_DATE,
                    "ProfileName": _PROFILE,
                    "TotalImpressions": number("Total Impressions", "Impressions"),
                    "OrganicImpressions": number("Organic Impressions"),
                    "PaidImpressions": number("Paid Impressions"),
                    "ViralImpressions": number("Viral Impressions"),
                },
            )
            for platform in ("Facebook", "Instagram")
        ),
        SourceSpec(
            "All",
            "Calculations",
            {
                "TotalImpressions": number("SUM of Total Impressions_1"),
                "Month": _MONTH,
            },
        ),
        SourceSpec("Instagram", "Instagram_Source", {"Month": _MONTH}),
    ),
    MetricType.ENGAGEMENT: (
        *(
            SourceSpec(
                platform,
                platform,
                {
                    "Date": _MAIN_DATE,
                    "ProfileName": _PROFILE,
                    "Likes": number("Likes"),
                    "Comments": number("Comments"),
                    "Saves": number("Saves"),
                    "Shares": number("Shares"),
                    "EngagementRate": number("Engagement Rate (Shares + Saves)"),
                    "NetSentimentScore": number("Net Sentiment Score"),
                },
            )
            for platform in ("Facebook", "Instagram", "Youtube")
        ),
        *(
            SourceSpec(
                platform,
                f"{platform.lower()}_post",
                {
                    "Date": _POST_DATE,
                    "ProfileName": _PROFILE,
                    "Post": _POST,
                    "Likes": number("Likes", "Video Likes"),
                    "Comments": number("Comments", "Video Comments"),
                    "Saves": number("Saves"),
                    "Shares": number("Shares"),
                    "NetSentimentScore": number(
                        "Net Sentiment Score", "Net Sentiment Score_1"
                    ),
                },
            )
            for platform in ("Facebook", "Instagram", "Youtube")
        ),
    ),
}
"""Source sheets per publish tab, in row emission order."""


def build_source_table(
    source: SourceSpec,
    table: DetectedTable,
    metric_type: MetricType,
) -> NormalizedTable:
    """Canonical rows of one detected table read through ``source``'s rules."""
    columns = list(REPORT_COLUMNS[metric_type])
    classification = classify_sheet(table.meta.sheet_name)
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
    rows = [source.build_row(record, columns) for record in table.records()]
    return NormalizedTable(meta=meta, columns=columns, rows=rows)


def build_report_table(
    tables: Iterable[DetectedTable],
    metric_type: MetricType,
    sources: Mapping[MetricType, Sequence[SourceSpec]] = REPORT_SOURCES,
    rosters: Mapping[MetricType, tuple[str, ...]] = METRIC_SHEET_ROSTERS,
) -> NormalizedTable:
    """Merge every source of one tab into a single table.

    Only tables from sheets on the tab's metric roster are read; a source
    whose sheet is off the roster contributes no rows.
    """
    by_sheet: dict[str, list[DetectedTable]] = {}
    for table in tables:
        sheet_name = table.meta.sheet_name
        if metric_type in metric_types_for_sheet(sheet_name, rosters):
            by_sheet.setdefault(sheet_name, []).append(table)

    source_tables = [
        build_source_table(source, table, metric_type)
        for source in sources[metric_type]
        for table in by_sheet.get(source.sheet_name, [])
    ]
    merged = merge_tables(source_tables, metric_type)
    logger.debug(
        "Report tab assembled",
        tab=REPORT_TABS[metric_type],
        sources=len(source_tables),
        rows=len(merged.rows),
    )
    return merged


def build_reporting_dataset(
    tables: Sequence[DetectedTable],
    sources: Mapping[MetricType, Sequence[SourceSpec]] = REPORT_SOURCES,
    rosters: Mapping[MetricType, tuple[str, ...]] = METRIC_SHEET_ROSTERS,
) -> MergedDataset:
    """Build the five publish tabs from the workbook's detected tables."""
    tabs = {
        metric_type: build_report_table(tables, metric_type, sources, rosters)
        for metric_type in REPORT_TABS
    }
    return MergedDataset(
        overview=tabs[MetricType.OVERVIEW],
        reach=tabs[MetricType.REACH],
        views=tabs[MetricType.VIEWS],
        impressions=tabs[MetricType.IMPRESSIONS],
        engagement=tabs[MetricType.ENGAGEMENT],
    )
