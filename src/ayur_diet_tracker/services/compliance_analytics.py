"""Compliance analytics shared by listings and patient reports.

Both functions are pure: they never mutate their input, perform no I/O and
never raise. Out-of-range percentages are accepted as-is; range checks belong
to the write path.
"""

import math
from collections.abc import Sequence

from ayur_diet_tracker.domain.compliance import (
    ComplianceEntry,
    ComplianceSummary,
    DayScore,
    Trend,
)

TREND_THRESHOLD = 5
MIN_ENTRIES_FOR_TREND = 4
RECENT_WINDOW_DAYS = 7


def summarize(entries: Sequence[ComplianceEntry]) -> ComplianceSummary:
    """Summarize compliance entries regardless of the order they arrive in.

    ``total_records`` counts every entry, including those without a recorded
    percentage. The trend compares the older half of the valid entries to the
    newer half.
    """
    if not entries:
        return _empty_summary(total_records=0)

    ordered = sorted(entries, key=_chronological)
    valid = _recorded(ordered)
    if not valid:
        return _empty_summary(total_records=len(entries))

    # max/min keep the first of equal values, i.e. the earliest date.
    best = max(valid, key=_percentage)
    worst = min(valid, key=_percentage)

    return ComplianceSummary(
        average_compliance=round_half_up(_mean(valid)),
        total_records=len(entries),
        trend=_midpoint_trend(valid),
        best_day=_day_score(best),
        worst_day=_day_score(worst),
    )


def recent_window_trend(
    entries: Sequence[ComplianceEntry], window_size: int = RECENT_WINDOW_DAYS
) -> Trend:
    """Compare the most recent window of entries to the one before it.

    Entries are expected newest first; they are re-sorted that way so a caller
    passing ascending rows still gets the recency comparison. Windows are cut
    by position over every entry; a window averages only its recorded
    percentages.
    """
    ordered = sorted(entries, key=_chronological, reverse=True)
    recent = _recorded(ordered[:window_size])
    previous = _recorded(ordered[window_size : 2 * window_size])
    if not recent or not previous:
        return Trend.STABLE

    recent_avg = _mean(recent)
    previous_avg = _mean(previous)
    if recent_avg > previous_avg + TREND_THRESHOLD:
        return Trend.IMPROVING
    if recent_avg < previous_avg - TREND_THRESHOLD:
        return Trend.DECLINING
    return Trend.STABLE


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 rounding up."""
    return math.floor(value + 0.5)


def _midpoint_trend(valid: list[ComplianceEntry]) -> Trend:
    if len(valid) < MIN_ENTRIES_FOR_TREND:
        return Trend.STABLE
    midpoint = len(valid) // 2
    difference = _mean(valid[midpoint:]) - _mean(valid[:midpoint])
    if difference > TREND_THRESHOLD:
        return Trend.IMPROVING
    if difference < -TREND_THRESHOLD:
        return Trend.DECLINING
    return Trend.STABLE


def _chronological(entry: ComplianceEntry) -> tuple[str, bool, float]:
    return (
        entry.date,
        entry.compliance_percentage is None,
        entry.compliance_percentage or 0,
    )


def _recorded(entries: list[ComplianceEntry]) -> list[ComplianceEntry]:
    return [entry for entry in entries if entry.compliance_percentage is not None]


def _empty_summary(total_records: int) -> ComplianceSummary:
    return ComplianceSummary(
        average_compliance=0,
        total_records=total_records,
        trend=Trend.STABLE,
        best_day=None,
        worst_day=None,
    )


def _percentage(entry: ComplianceEntry) -> float:
    return entry.compliance_percentage or 0


def _mean(entries: list[ComplianceEntry]) -> float:
    return sum(_percentage(entry) for entry in entries) / len(entries)


def _day_score(entry: ComplianceEntry) -> DayScore:
    return DayScore(date=entry.date, compliance_percentage=_percentage(entry))
