"""Per-sheet workbook loading and dashboard model assembly.

The dashboard model is purely declarative: charts bind canonical column
names and the renderer resolves them against whatever rows it is handed.
Some bindings (``Watch Time``, ``Sentiment``...) are never produced by the
current exports; they are kept so the renderer can show an empty state.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from social_report.services.column_classifier import (
    DEFAULT_THRESHOLDS,
    ClassifierThresholds,
    classify_column,
)
from social_report.services.name_normalizer import normalize_column_name
from social_report.services.sheet_classifier import classify_sheet
from social_report.services.workbook_reader import grid_to_records
from social_report.utils.logging import get_logger
from social_report.workbook import (
    ChartConfig,
    ChartField,
    ChartFieldRole,
    ChartType,
    ColumnMeta,
    ColumnType,
    DashboardModel,
    Platform,
    RawWorkbook,
    Row,
    SectionId,
    SectionModel,
    SheetData,
    SheetKind,
    SheetMeta,
    WorkbookData,
)

logger = get_logger(__name__)

X = ChartFieldRole.X
Y = ChartFieldRole.Y
SERIES = ChartFieldRole.SERIES
VALUE = ChartFieldRole.VALUE

PLATFORM_LABELS: dict[Platform, str] = {
    Platform.FACEBOOK: "Facebook",
    Platform.INSTAGRAM: "Instagram",
    Platform.YOUTUBE: "Youtube",
}


@dataclass(frozen=True)
class DashboardConfig:
    """Constants the section builders depend on."""

    max_charts: int = 6
    platforms: tuple[str, ...] = ("facebook", "instagram", "youtube")
    reach_date_sheets: tuple[str, ...] = ("Facebook", "Instagram", "Youtube")
    fallback_date_column: str = "Date"
    profile_column: str = "Profile Name"


DEFAULT_DASHBOARD_CONFIG = DashboardConfig()


# --------------------------------------------------------------------------- #
# Per-sheet load path
# --------------------------------------------------------------------------- #


def build_sheet_meta(
    name: str,
    rows: Sequence[Row],
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> SheetMeta:
    """Describe a sheet: platform, kind and one ColumnMeta per key of row 0."""
    column_names = list(rows[0].keys()) if rows else []
    columns = [
        ColumnMeta(
            name=column,
            normalized_name=normalize_column_name(column),
            type=classify_column((row.get(column) for row in rows), thresholds),
        )
        for column in column_names
    ]
    classification = classify_sheet(name)
    return SheetMeta(
        name=name,
        platform=classification.platform,
        kind=classification.kind,
        row_count=len(rows),
        columns=columns,
    )


def load_workbook_data(
    workbook: RawWorkbook,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> WorkbookData:
    """Build the row-object view of every sheet, in workbook order."""
    sheets: list[SheetData] = []
    for name in workbook.sheet_names:
        rows = grid_to_records(workbook.grid(name))
        sheets.append(
            SheetData(
                name=name, rows=rows, meta=build_sheet_meta(name, rows, thresholds)
            )
        )
    return WorkbookData(sheets=sheets)


# --------------------------------------------------------------------------- #
# Section builders
# --------------------------------------------------------------------------- #


def first_date_column(sheet: SheetData) -> str | None:
    for column in sheet.meta.columns:
        if column.type == ColumnType.DATE:
            return column.name
    return None


def main_sheet_date_column(sheets: Sequence[SheetData]) -> str | None:
    """First date column of the first platform-main sheet, if any."""
    for sheet in sheets:
        if sheet.meta.kind == SheetKind.PLATFORM_MAIN:
            return first_date_column(sheet)
    return None


def _fields(*pairs: tuple[ChartFieldRole, str]) -> tuple[ChartField, ...]:
    return tuple(ChartField(role=role, column=column) for role, column in pairs)


def build_overview_section(
    sheets: Sequence[SheetData], config: DashboardConfig
) -> SectionModel:
    section = SectionId.OVERVIEW
    date_column = main_sheet_date_column(sheets)
    charts = [
        ChartConfig(
            id="overview-kpis",
            section=section,
            title="All Platforms KPIs",
            type=ChartType.KPI,
            fields=_fields(
                (VALUE, "Followers"),
                (VALUE, "Total Impressions"),
                (VALUE, "Reach"),
                (VALUE, "Engagement Rate"),
                (VALUE, "Video Views"),
            ),
        )
    ]
    if date_column:
        charts.append(
            ChartConfig(
                id="overview-time-series",
                section=section,
                title="Followers / Reach / Impressions Over Time",
                type=ChartType.LINE,
                fields=_fields(
                    (X, date_column),
                    (Y, "Followers"),
                    (Y, "Reach"),
                    (Y, "Total Impressions"),
                ),
                platforms=config.platforms,
            )
        )
    charts.append(
        ChartConfig(
            id="overview-platform-comparison",
            section=section,
            title="Platform Comparison (Impressions / Reach / Video Views)",
            type=ChartType.BAR,
            fields=_fields((X, "Platform"), (Y, "Total Impressions")),
        )
    )
    charts.append(
        ChartConfig(
            id="overview-engagement-rate",
            section=section,
            title="Engagement Rate Over Time",
            type=ChartType.LINE,
            fields=_fields(
                (X, date_column or config.fallback_date_column),
                (Y, "Engagement Rate"),
            ),
        )
    )
    return SectionModel(
        id=section, title="Overview", charts=charts[: config.max_charts]
    )


def build_reach_section(
    sheets: Sequence[SheetData], config: DashboardConfig
) -> SectionModel:
    section = SectionId.REACH

    date_column = None
    for sheet_name in config.reach_date_sheets:
        sheet = next((s for s in sheets if s.meta.name == sheet_name), None)
        date_column = first_date_column(sheet) if sheet else None
        if date_column:
            break

    charts = [
        ChartConfig(
            id="reach-kpis",
            section=section,
            title="Reach KPIs",
            type=ChartType.KPI,
            fields=_fields(
                (VALUE, "Reach"),
                (VALUE, "Organic Reach"),
                (VALUE, "Paid Reach"),
                (VALUE, "Viral Reach"),
            ),
        ),
        ChartConfig(
            id="reach-time-series",
            section=section,
            title="Reach Over Time by Platform",
            type=ChartType.LINE,
            fields=_fields(
                (X, date_column or config.fallback_date_column), (Y, "Reach")
            ),
            platforms=config.platforms,
        ),
        ChartConfig(
            id="reach-breakdown",
            section=section,
            title="Reach Breakdown (Organic / Paid / Viral)",
            type=ChartType.PIE,
            fields=_fields((SERIES, "Reach Type"), (VALUE, "Reach")),
        ),
        ChartConfig(
            id="reach-top-posts",
            section=section,
            title="Top Posts By Reach",
            type=ChartType.BAR,
            fields=_fields((X, "Post"), (Y, "Reach")),
        ),
    ]
    return SectionModel(
        id=section, title="Detailed Reach", charts=charts[: config.max_charts]
    )


def build_views_section(
    sheets: Sequence[SheetData], config: DashboardConfig
) -> SectionModel:
    section = SectionId.VIEWS
    date_column = main_sheet_date_column(sheets) or config.fallback_date_column
    charts = [
        ChartConfig(
            id="views-kpis",
            section=section,
            title="Views KPIs",
            type=ChartType.KPI,
            fields=_fields(
                (VALUE, "Views"),
                (VALUE, "Video Views"),
                (VALUE, "Watch Time"),
                (VALUE, "Average View Duration"),
            ),
        ),
        ChartConfig(
            id="views-time-series",
            section=section,
            title="Views Over Time",
            type=ChartType.LINE,
            fields=_fields((X, date_column), (Y, "Video Views")),
        ),
        ChartConfig(
            id="views-top-videos",
            section=section,
            title="Top Videos By Views",
            type=ChartType.BAR,
            fields=_fields((X, "Post"), (Y, "Video Views")),
        ),
        ChartConfig(
            id="views-monthly-summary",
            section=section,
            title="Monthly Views Summary",
            type=ChartType.BAR,
            fields=_fields((X, "Month"), (Y, "Post Video Views (Sum)")),
        ),
        ChartConfig(
            id="views-scatter-reach-vs-views",
            section=section,
            title="Reach vs Video Views",
            type=ChartType.SCATTER,
            fields=_fields((X, "Reach"), (Y, "Video Views")),
        ),
    ]
    return SectionModel(
        id=section, title="Detailed Views", charts=charts[: config.max_charts]
    )


def build_impressions_section(
    sheets: Sequence[SheetData], config: DashboardConfig
) -> SectionModel:
    section = SectionId.IMPRESSIONS
    date_column = main_sheet_date_column(sheets) or config.fallback_date_column
    charts = [
        ChartConfig(
            id="impressions-kpis",
            section=section,
            title="Impressions KPIs",
            type=ChartType.KPI,
            fields=_fields(
                (VALUE, "Total Impressions"),
                (VALUE, "Organic Impressions"),
                (VALUE, "Paid Impressions"),
                (VALUE, "Viral Impressions"),
            ),
        ),
        ChartConfig(
            id="impressions-time-series",
            section=section,
            title="Impressions Over Time",
            type=ChartType.LINE,
            fields=_fields((X, date_column), (Y, "Total Impressions")),
        ),
        ChartConfig(
            id="impressions-breakdown",
            section=section,
            title="Impressions Breakdown (Organic / Paid / Viral)",
            type=ChartType.PIE,
            fields=_fields(
                (SERIES, "Impression Type"), (VALUE, "Total Impressions")
            ),
        ),
        ChartConfig(
            id="impressions-monthly",
            section=section,
            title="Monthly Impressions Summary",
            type=ChartType.BAR,
            fields=_fields((X, "Month"), (Y, "Total Impressions (Sum)")),
        ),
    ]
    return SectionModel(
        id=section, title="Detailed Impressions", charts=charts[: config.max_charts]
    )


def build_engagement_section(
    sheets: Sequence[SheetData], config: DashboardConfig
) -> SectionModel:
    section = SectionId.ENGAGEMENT
    date_column = main_sheet_date_column(sheets) or config.fallback_date_column
    charts = [
        ChartConfig(
            id="engagement-kpis",
            section=section,
            title="Engagement KPIs",
            type=ChartType.KPI,
            fields=_fields(
                (VALUE, "Likes"),
                (VALUE, "Comments"),
                (VALUE, "Saves"),
                (VALUE, "Shares"),
                (VALUE, "Engagement Rate"),
            ),
        ),
        ChartConfig(
            id="engagement-time-series",
            section=section,
            title="Engagement Over Time",
            type=ChartType.LINE,
            fields=_fields(
                (X, date_column), (Y, "Likes"), (Y, "Comments"), (Y, "Shares")
            ),
        ),
        ChartConfig(
            id="engagement-leaderboard",
            section=section,
            title="Post-Level Engagement Leaderboard",
            type=ChartType.BAR,
            fields=_fields((X, "Post"), (Y, "Engagement")),
        ),
        ChartConfig(
            id="engagement-sentiment",
            section=section,
            title="Sentiment Breakdown",
            type=ChartType.BAR,
            fields=_fields((X, "Sentiment"), (Y, "Count")),
        ),
    ]
    return SectionModel(
        id=section, title="Detailed Engagement", charts=charts[: config.max_charts]
    )


def build_dashboard_model(
    workbook: WorkbookData, config: DashboardConfig = DEFAULT_DASHBOARD_CONFIG
) -> DashboardModel:
    """Assemble the five dashboard sections from the sheets that have rows."""
    sheets = [sheet for sheet in workbook.sheets if sheet.meta.row_count > 0]
    sections = [
        build_overview_section(sheets, config),
        build_reach_section(sheets, config),
        build_views_section(sheets, config),
        build_impressions_section(sheets, config),
        build_engagement_section(sheets, config),
    ]
    logger.debug(
        "Dashboard model built",
        sheets=len(sheets),
        charts=sum(len(s.charts) for s in sections),
    )
    return DashboardModel(sheets=sheets, sections=sections)


# --------------------------------------------------------------------------- #
# Filters
# --------------------------------------------------------------------------- #


def platform_label(platform: Platform) -> str:
    return PLATFORM_LABELS.get(platform, platform.value)


def available_platforms(model: DashboardModel) -> list[Platform]:
    """Known platforms of the loaded sheets, in first-seen order."""
    platforms: list[Platform] = []
    for sheet in model.sheets:
        platform = sheet.meta.platform
        if platform != Platform.UNKNOWN and platform not in platforms:
            platforms.append(platform)
    return platforms


def available_profiles(
    model: DashboardModel,
    limit: int = 50,
    config: DashboardConfig = DEFAULT_DASHBOARD_CONFIG,
) -> list[str]:
    """Distinct non-blank profile names across all sheets, capped at ``limit``."""
    names: dict[str, None] = {}
    for sheet in model.sheets:
        for row in sheet.rows:
            value = row.get(config.profile_column)
            if isinstance(value, str) and value.strip():
                names.setdefault(value, None)
    return list(names)[:limit]


def filter_sheet_rows(
    model: DashboardModel,
    platform: str = "all",
    profile: str = "all",
    config: DashboardConfig = DEFAULT_DASHBOARD_CONFIG,
) -> dict[str, list[Row]]:
    """Rows per sheet narrowed to a platform and/or profile.

    Each returned row starts with a ``Platform`` display label; a row's own
    ``Platform`` cell, if any, takes precedence.
    """
    result: dict[str, list[Row]] = {}
    for sheet in model.sheets:
        if platform != "all" and sheet.meta.platform.value != platform:
            result[sheet.name] = []
            continue
        rows = sheet.rows
        if profile != "all":
            rows = [r for r in rows if r.get(config.profile_column) == profile]
        label = platform_label(sheet.meta.platform)
        result[sheet.name] = [{"Platform": label, **row} for row in rows]
    return result
