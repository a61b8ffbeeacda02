"""
Read-only views over a row snapshot: date windows, category filters and
plan-vs-actual summary statistics.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .calendar_window import Calendar, is_elapsed, parse_date
from .errors import InvalidInput, RowNotFound
from .hierarchy import Hierarchy
from .store import RowSnapshot, StoreCountSeries, round1


@dataclass(frozen=True)
class DateWindow:
    indices: tuple[int, ...]
    dates: tuple[str, ...]
    weekdays: tuple[str, ...]


@dataclass(frozen=True)
class PlanSummary:
    avg_actual: float = 0.0
    avg_plan_past: float = 0.0
    avg_plan_future: float = 0.0
    rate: float = 0.0
    diff_percent: float = 0.0
    diff_value: float = 0.0
    has_past: bool = False
    has_future: bool = False
    total_plan_future: float = 0.0


def filter_window(calendar: Calendar, start_date: str, end_date: str) -> DateWindow:
    start = parse_date(start_date).isoformat()
    end = parse_date(end_date).isoformat()
    if start > end:
        raise InvalidInput(f"Window start {start_date} is after end {end_date}.")
    indices = tuple(idx for idx, d in enumerate(calendar.dates) if start <= d <= end)
    return DateWindow(
        indices=indices,
        dates=tuple(calendar.dates[i] for i in indices),
        weekdays=tuple(calendar.weekdays[i] for i in indices),
    )


def select_rows(
    rows: Iterable[RowSnapshot],
    hierarchy: Hierarchy,
    group_id: str | None = None,
    leaf: str | None = None,
) -> list[RowSnapshot]:
    """Rows of one group (with its leaves) or of one leaf, across every region."""
    if group_id and leaf:
        raise InvalidInput("Filter by a group or by a leaf category, not both.")
    if group_id:
        group = hierarchy.group(group_id)
        if group is None:
            raise InvalidInput(
                f"Unsupported group '{group_id}'. Use one of {[g.id for g in hierarchy.groups]}."
            )
        wanted = {group.id, *group.children}
    elif leaf:
        if leaf not in hierarchy.leaves:
            raise InvalidInput(f"Unsupported category '{leaf}'.")
        wanted = {leaf}
    else:
        return list(rows)
    return [row for row in rows if row.node in wanted]


def slice_rows(rows: Iterable[RowSnapshot], window: DateWindow) -> list[dict[str, Any]]:
    sliced = []
    for row in rows:
        item = row.to_dict()
        item["plan_values"] = [row.plan_values[i] for i in window.indices]
        item["actual_values"] = [row.actual_values[i] for i in window.indices]
        item["original_indices"] = list(window.indices)
        sliced.append(item)
    return sliced


def slice_store_counts(
    series: Iterable[StoreCountSeries], window: DateWindow
) -> list[StoreCountSeries]:
    return [
        StoreCountSeries(region=s.region, counts=tuple(s.counts[i] for i in window.indices))
        for s in series
    ]


def _pick(rows: Sequence[RowSnapshot], row_ids: Iterable[str]) -> list[RowSnapshot]:
    by_id = {row.id: row for row in rows}
    picked = []
    for rid in row_ids:
        if rid not in by_id:
            raise RowNotFound(rid)
        picked.append(by_id[rid])
    return picked


def summarize(
    rows: Sequence[RowSnapshot],
    row_ids: Iterable[str],
    calendar: Calendar,
    start_date: str,
    end_date: str,
    today: str,
) -> PlanSummary:
    """
    Daily averages over the window, split at today.

    Elapsed dates (strictly before today) contribute actual and plan; today and
    later contribute plan only. Per-date values are summed across the selected
    rows before averaging over the number of dates.
    """
    targets = _pick(rows, row_ids)
    if not targets:
        return PlanSummary()

    window = filter_window(calendar, start_date, end_date)
    actual_sum = 0.0
    past_plan_sum = 0.0
    past_count = 0
    future_plan_sum = 0.0
    future_count = 0

    for idx, date_str in zip(window.indices, window.dates):
        daily_plan = sum(row.plan_values[idx] for row in targets)
        if is_elapsed(date_str, today):
            actual_sum += sum(row.actual_values[idx] or 0.0 for row in targets)
            past_plan_sum += daily_plan
            past_count += 1
        else:
            future_plan_sum += daily_plan
            future_count += 1

    avg_actual = actual_sum / past_count if past_count else 0.0
    avg_plan_past = past_plan_sum / past_count if past_count else 0.0
    avg_plan_future = future_plan_sum / future_count if future_count else 0.0
    rate = actual_sum / past_plan_sum * 100 if past_plan_sum > 0 else 0.0
    diff_percent = (actual_sum - past_plan_sum) / past_plan_sum * 100 if past_plan_sum > 0 else 0.0

    return PlanSummary(
        avg_actual=avg_actual,
        avg_plan_past=avg_plan_past,
        avg_plan_future=avg_plan_future,
        rate=rate,
        diff_percent=diff_percent,
        diff_value=avg_actual - avg_plan_past,
        has_past=past_count > 0,
        has_future=future_count > 0,
        total_plan_future=future_plan_sum,
    )


def summarize_rows(
    rows: Sequence[RowSnapshot],
    row_ids: Iterable[str],
    calendar: Calendar,
    start_date: str,
    end_date: str,
    today: str,
) -> dict[str, PlanSummary]:
    return {
        rid: summarize(rows, [rid], calendar, start_date, end_date, today)
        for rid in row_ids
    }


def daily_deviation(row: RowSnapshot, window: DateWindow, today: str) -> list[float | None]:
    """Percent gap of actual over plan per date; None where it cannot be read."""
    deviations: list[float | None] = []
    for idx, date_str in zip(window.indices, window.dates):
        actual = row.actual_values[idx]
        plan = row.plan_values[idx]
        if not is_elapsed(date_str, today) or actual is None or plan == 0:
            deviations.append(None)
        else:
            deviations.append(round1((actual - plan) / plan * 100))
    return deviations
