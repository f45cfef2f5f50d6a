"""Canonical display names for raw export headers.

Pivot-style summary sheets repeat headers such as ``SUM of Reach`` with
``_1``/``_2`` suffixes added by the spreadsheet reader. The rule table maps
those families onto one fixed display name; anything else goes through the
generic clean-up.
"""

from __future__ import annotations

import re

HeaderRule = tuple[re.Pattern[str], str]

HEADER_RULES: tuple[HeaderRule, ...] = (
    (re.compile(r"month(_\d+)?", re.IGNORECASE), "Month"),
    (re.compile(r"sum of followers(_\d+)?", re.IGNORECASE), "Followers (Sum)"),
    (
        re.compile(r"sum of total impressions(_\d+)?", re.IGNORECASE),
        "Total Impressions (Sum)",
    ),
    (re.compile(r"sum of reach(_\d+)?", re.IGNORECASE), "Reach (Sum)"),
    (
        re.compile(r"sum of post video views(_\d+)?", re.IGNORECASE),
        "Post Video Views (Sum)",
    ),
    (re.compile(r"followers \(as of 1st\)", re.IGNORECASE), "Followers (As of 1st)"),
    (
        re.compile(r"followers \(as of last day\)", re.IGNORECASE),
        "Followers (As of last day)",
    ),
)
"""Ordered (pattern, canonical name) pairs; first full match wins."""

_WHITESPACE = re.compile(r"\s+")
_WORD_START = re.compile(r"\b\w")


def match_header_rule(
    header: str, rules: tuple[HeaderRule, ...] = HEADER_RULES
) -> str | None:
    """Return the canonical name of the first rule matching ``header``."""
    for pattern, canonical in rules:
        if pattern.fullmatch(header):
            return canonical
    return None


def normalize_column_name(
    raw: str, rules: tuple[HeaderRule, ...] = HEADER_RULES
) -> str:
    """Map a raw header onto its canonical display name.

    Blank headers are returned unchanged. Stable: normalizing an already
    normalized name returns it as is.
    """
    trimmed = raw.strip()
    if not trimmed:
        return raw

    canonical = match_header_rule(trimmed, rules)
    if canonical is not None:
        return canonical

    cleaned = _WHITESPACE.sub(" ", trimmed.replace("_", " ")).strip()
    # e.g. "sum_of_reach" only matches its rule once cleaned
    canonical = match_header_rule(cleaned, rules)
    if canonical is not None:
        return canonical
    return _WORD_START.sub(lambda m: m.group(0).upper(), cleaned)
