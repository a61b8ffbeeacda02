"""
Agent-facing tools over the sales plan board.

Every tool takes plain strings/numbers and returns a JSON-able dict. Invalid
input comes back as an ``{"error": ...}`` payload instead of an exception so an
LLM caller can correct itself.
"""

from __future__ import annotations

from typing import Any

from .board import PlanBoard
from .calendar_window import add_days
from .errors import InvalidInput, PlanBoardError
from .hierarchy import COMPOSITE_REGION, ROOT_NODE, row_id
from .queries import PlanSummary
from .settings import PlanSettings

# Default review window: one week back, two weeks ahead of today.
LOOKBACK_DAYS = 7
LOOKAHEAD_DAYS = 14

_BOARD: PlanBoard | None = None


def get_board() -> PlanBoard:
    global _BOARD
    if _BOARD is None:
        _BOARD = PlanBoard.initialize(PlanSettings.from_env())
    return _BOARD


def use_board(board: PlanBoard | None) -> None:
    """Swap the process board (None regenerates on next use)."""
    global _BOARD
    _BOARD = board


def _normalize_region(board: PlanBoard, region: str) -> str | None:
    if not region:
        return COMPOSITE_REGION
    cleaned = region.strip()
    for candidate in board.hierarchy.regions:
        if candidate.lower() == cleaned.lower():
            return candidate
    if cleaned.lower() in {"network", "all", "overall"}:
        return COMPOSITE_REGION
    return None


def _resolve_window(board: PlanBoard, start_date: str, end_date: str) -> tuple[str, str]:
    start = start_date.strip() if start_date else add_days(board.today, -LOOKBACK_DAYS)
    end = end_date.strip() if end_date else add_days(board.today, LOOKAHEAD_DAYS)
    return start, end


def _summary_payload(summary: PlanSummary) -> dict[str, Any]:
    return {
        "avg_actual": round(summary.avg_actual, 1) if summary.has_past else None,
        "avg_plan_past": round(summary.avg_plan_past, 1) if summary.has_past else None,
        "avg_plan_future": round(summary.avg_plan_future, 1) if summary.has_future else None,
        "achievement_rate_pct": round(summary.rate, 2),
        "diff_pct": round(summary.diff_percent, 2),
        "avg_daily_gap": round(summary.diff_value, 1),
        "has_past": summary.has_past,
        "has_future": summary.has_future,
        "total_plan_future": round(summary.total_plan_future, 1),
    }


def _error(exc: PlanBoardError, **extra: Any) -> dict[str, Any]:
    return {"error": str(exc), **extra}


def fetch_plan_summary(
    start_date: str = "",
    end_date: str = "",
    region: str = "",
    group: str = "",
    category: str = "",
) -> dict[str, Any]:
    """
    Fetch plan-vs-actual summary for one scope over a date window.

    Args:
        start_date: Optional window start (YYYY-MM-DD). Defaults to a week before today.
        end_date: Optional window end (YYYY-MM-DD). Defaults to two weeks after today.
        region: Optional region (Total, SH, JS). Defaults to the store-weighted network.
        group: Optional category group id (e.g. fresh_dept).
        category: Optional leaf category name (e.g. Bakery). Takes precedence over group.
    """
    board = get_board()
    cleaned_region = _normalize_region(board, region)
    if not cleaned_region:
        return {
            "error": f"Unsupported region '{region}'.",
            "available_regions": list(board.hierarchy.regions),
        }

    node = ROOT_NODE
    if category:
        node = category.strip()
        if node not in board.hierarchy.leaves:
            return {
                "error": f"Unsupported category '{category}'.",
                "available_categories": list(board.hierarchy.leaves),
            }
    elif group:
        node = group.strip()
        if board.hierarchy.group(node) is None:
            return {
                "error": f"Unsupported group '{group}'.",
                "available_groups": [g.id for g in board.hierarchy.groups],
            }

    start, end = _resolve_window(board, start_date, end_date)
    target = row_id(cleaned_region, node)
    try:
        summary = board.summary([target], start, end)
    except PlanBoardError as exc:
        return _error(exc, row_id=target)

    return {
        "filters": {
            "start_date": start,
            "end_date": end,
            "region": cleaned_region,
            "node": node,
            "today": board.today,
        },
        "row_id": target,
        "row_name": board.get_row(target).name,
        "summary": _summary_payload(summary),
    }


def _rank_by_rate(entries: list[dict[str, Any]]) -> dict[str, Any]:
    measurable = [e for e in entries if e["summary"]["has_past"]]
    if not measurable:
        return {"top": None, "bottom": None}
    ordered = sorted(measurable, key=lambda e: e["summary"]["achievement_rate_pct"])
    return {"bottom": ordered[0], "top": ordered[-1]}


def investigate_plan_performance(
    start_date: str = "",
    end_date: str = "",
    region: str = "",
) -> dict[str, Any]:
    """
    Analyst-style plan review for one region:
    1) Region baseline vs plan
    2) Group breakdown
    3) Leaf categories ranked by achievement rate
    4) Largest single-day deviations as anomaly candidates
    """
    board = get_board()
    cleaned_region = _normalize_region(board, region)
    if not cleaned_region:
        return {
            "error": f"Unsupported region '{region}'.",
            "available_regions": list(board.hierarchy.regions),
        }
    start, end = _resolve_window(board, start_date, end_date)
    hierarchy = board.hierarchy

    root_id = row_id(cleaned_region, ROOT_NODE)
    group_ids = [row_id(cleaned_region, g.id) for g in hierarchy.groups]
    leaf_ids = [row_id(cleaned_region, leaf) for leaf in hierarchy.leaves]
    try:
        baseline = board.summary([root_id], start, end)
        by_row = board.breakdown(group_ids + leaf_ids, start, end)
        view = board.window(start, end)
    except InvalidInput as exc:
        return _error(exc, start_date=start, end_date=end)

    groups = [
        {"row_id": rid, "name": board.get_row(rid).name, "summary": _summary_payload(by_row[rid])}
        for rid in group_ids
    ]
    leaves = [
        {"row_id": rid, "name": board.get_row(rid).name, "summary": _summary_payload(by_row[rid])}
        for rid in leaf_ids
    ]
    leaf_extrema = _rank_by_rate(leaves)

    cells = []
    for rid in leaf_ids:
        for date_str, deviation in zip(view["dates"], view["deviation"][rid]):
            if deviation is not None:
                cells.append({"row_id": rid, "date": date_str, "deviation_pct": deviation})
    ordered_cells = sorted(cells, key=lambda c: c["deviation_pct"])
    anomaly_candidates = ordered_cells[:2] + list(reversed(ordered_cells[-2:])) if ordered_cells else []

    bottom = leaf_extrema["bottom"]["name"] if leaf_extrema["bottom"] else None
    top = leaf_extrema["top"]["name"] if leaf_extrema["top"] else None
    return {
        "scope": {"region": cleaned_region, "start_date": start, "end_date": end, "today": board.today},
        "baseline": {"row_id": root_id, "summary": _summary_payload(baseline)},
        "groups": groups,
        "leaf_top": leaf_extrema["top"],
        "leaf_bottom": leaf_extrema["bottom"],
        "anomaly_candidates": anomaly_candidates,
        "recommended_next_questions": [
            f"Why is '{bottom}' trailing plan, and is the gap concentrated on specific days?",
            f"Can the pace of '{top}' be sustained through the remaining planned days?",
            "Do store-count changes explain shifts in the network-weighted view?",
        ]
        if leaf_extrema["top"]
        else [],
    }


def update_plan_value(row: str, date: str, value: float) -> dict[str, Any]:
    """
    Set one plan cell and return the recomputed dependents.

    Args:
        row: Row id (e.g. SH_Bakery, JS_fresh_dept, Total_total).
        date: Date of the cell (YYYY-MM-DD).
        value: New plan value.
    """
    board = get_board()
    try:
        date_index = board.calendar.index_of(date.strip())
        before = {r.id: r.plan_values[date_index] for r in board.get_rows()}
        rows = board.set_plan_value(row.strip(), date_index, value)
    except PlanBoardError as exc:
        return _error(exc, row=row, date=date)

    changed = [
        {"row_id": r.id, "before": before[r.id], "after": r.plan_values[date_index]}
        for r in rows
        if r.plan_values[date_index] != before[r.id]
    ]
    return {"row_id": row.strip(), "date": date.strip(), "date_index": date_index, "changed": changed}


def update_store_count(region: str, date: str, count: int) -> dict[str, Any]:
    """
    Set the operating store count of a region on one date; re-weights the network view.

    Args:
        region: Concrete region code (SH or JS).
        date: Date of the count (YYYY-MM-DD).
        count: Non-negative store count.
    """
    board = get_board()
    try:
        date_index = board.calendar.index_of(date.strip())
        counts, rows = board.set_store_count(region.strip().upper(), date_index, count)
    except PlanBoardError as exc:
        return _error(exc, region=region, date=date)

    return {
        "region": region.strip().upper(),
        "date": date.strip(),
        "date_index": date_index,
        "store_counts": {s.region: s.counts[date_index] for s in counts},
        "network_rows": [
            {
                "row_id": r.id,
                "plan": r.plan_values[date_index],
                "actual": r.actual_values[date_index],
            }
            for r in rows
            if r.region == COMPOSITE_REGION
        ],
    }
