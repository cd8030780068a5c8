"""Hardcoded keyword classification.

A fixed-vocabulary alternative to the database rules. Unlike
classify_level, these functions never return None: anything that does not
match falls back to Level.LOW.
"""

import re
from collections.abc import Sequence

from incident_tracker.models.classification import IncidentLevel, Level

HIGH_URGENCY_KEYWORDS: tuple[re.Pattern[str], ...] = (
    re.compile("緊急"),
    re.compile("至急"),
    re.compile("クリティカル"),
    re.compile("停止"),
    re.compile("障害"),
)

# Broader vocabulary for callers that want medium/low tiers as well
URGENCY_PATTERNS: dict[Level, tuple[re.Pattern[str], ...]] = {
    Level.HIGH: (
        re.compile("緊急"),
        re.compile("至急"),
        re.compile("クリティカル"),
        re.compile("停止"),
        re.compile("即座"),
    ),
    Level.MEDIUM: (
        re.compile("エラー"),
        re.compile("不具合"),
        re.compile("問題"),
        re.compile("対応"),
    ),
}

IMPACT_PATTERNS: dict[Level, tuple[re.Pattern[str], ...]] = {
    Level.HIGH: (
        re.compile("全ユーザー"),
        re.compile("すべて.*お客様"),
        re.compile("全体"),
        re.compile("サービス全体"),
    ),
    Level.MEDIUM: (
        re.compile("複数のお客様"),
        re.compile("複数.*ユーザー"),
        re.compile("一部.*お客様"),
        re.compile("特定.*機能"),
        re.compile("部分的"),
    ),
    Level.LOW: (
        re.compile("特定ユーザー.*のみ"),
        re.compile("個別"),
        re.compile("限定的"),
        re.compile("一人.*お客様"),
    ),
}


def matches_any_pattern(text: str | None, patterns: Sequence[re.Pattern[str]]) -> bool:
    """True if any pattern matches anywhere in ``text``."""
    if not text:
        return False
    return any(pattern.search(text) for pattern in patterns)


def match_level(
    text: str | None, table: dict[Level, tuple[re.Pattern[str], ...]]
) -> Level | None:
    """Return the highest level in ``table`` with a matching pattern, or None."""
    for level in sorted(table, key=lambda lvl: lvl.rank, reverse=True):
        if matches_any_pattern(text, table[level]):
            return level
    return None


def classify_urgency_keywords(text: str | None) -> Level:
    """High if any high-urgency keyword appears, otherwise low."""
    if matches_any_pattern(text, HIGH_URGENCY_KEYWORDS):
        return Level.HIGH
    # TODO: add a medium tier once URGENCY_PATTERNS[MEDIUM] has been validated on real traffic
    return Level.LOW


def classify_impact_keywords(text: str | None) -> Level:
    """Impact from user-scope phrases; defaults to low."""
    text = text or ""
    if "全ユーザー" in text:
        return Level.HIGH
    if "複数ユーザー" in text:
        return Level.MEDIUM
    return Level.LOW


def determine_incident_level(urgency: Level, impact: Level) -> IncidentLevel:
    """Outage when urgency is at least medium or impact is high, else bug."""
    if urgency in (Level.HIGH, Level.MEDIUM) or impact == Level.HIGH:
        return IncidentLevel.OUTAGE
    return IncidentLevel.BUG
