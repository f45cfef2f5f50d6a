"""Platform and structural kind inference from sheet names."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from social_report.workbook import Platform, SheetKind

SheetPredicate = Callable[[str], bool]

PLATFORM_RULES: tuple[tuple[SheetPredicate, Platform], ...] = (
    (lambda lower: "facebook" in lower, Platform.FACEBOOK),
    (lambda lower: "instagram" in lower, Platform.INSTAGRAM),
    (lambda lower: "youtube" in lower, Platform.YOUTUBE),
)
"""Ordered (predicate on lower-cased name, platform) pairs."""

MAIN_SHEET_NAMES = frozenset({"facebook", "instagram", "youtube"})

KIND_RULES: tuple[tuple[SheetPredicate, SheetKind], ...] = (
    (lambda lower: lower.endswith("_post"), SheetKind.POST_LEVEL),
    (
        lambda lower: "calculations" in lower or "source" in lower,
        SheetKind.MONTHLY_SUMMARY,
    ),
    (lambda lower: lower in MAIN_SHEET_NAMES, SheetKind.PLATFORM_MAIN),
)
"""Ordered (predicate on lower-cased name, kind) pairs."""


@dataclass(frozen=True)
class SheetClassification:
    platform: Platform
    kind: SheetKind


def classify_platform(sheet_name: str) -> Platform:
    lower = sheet_name.lower()
    for predicate, platform in PLATFORM_RULES:
        if predicate(lower):
            return platform
    return Platform.UNKNOWN


def classify_kind(sheet_name: str) -> SheetKind:
    lower = sheet_name.lower()
    for predicate, kind in KIND_RULES:
        if predicate(lower):
            return kind
    return SheetKind.OTHER


def classify_sheet(sheet_name: str) -> SheetClassification:
    """Infer platform and kind for a sheet, e.g. ``instagram_post`` is an
    Instagram post-level sheet and ``Calculations`` an unknown-platform
    monthly summary."""
    return SheetClassification(
        platform=classify_platform(sheet_name),
        kind=classify_kind(sheet_name),
    )
