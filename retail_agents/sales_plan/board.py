"""
PlanBoard: the surface the rest of the application talks to.

One board owns one row store; edits go through the update engine and every
read is answered from the store's last published snapshot.
"""

from __future__ import annotations

from typing import Any

from .engine import UpdateEngine
from .generator import generate_plan_store
from .hierarchy import Hierarchy
from .queries import (
    PlanSummary,
    daily_deviation,
    filter_window,
    select_rows,
    slice_rows,
    slice_store_counts,
    summarize,
    summarize_rows,
)
from .settings import PlanSettings
from .store import RowSnapshot, RowStore, StoreCountSeries


class PlanBoard:
    def __init__(self, store: RowStore):
        self.store = store
        self.engine = UpdateEngine(store)

    @classmethod
    def initialize(
        cls,
        settings: PlanSettings | None = None,
        hierarchy: Hierarchy | None = None,
        seed: int | None = None,
    ) -> "PlanBoard":
        return cls(generate_plan_store(settings=settings, hierarchy=hierarchy, seed=seed))

    @property
    def calendar(self):
        return self.store.calendar

    @property
    def hierarchy(self) -> Hierarchy:
        return self.store.hierarchy

    @property
    def today(self) -> str:
        return self.store.today

    def get_rows(self) -> tuple[RowSnapshot, ...]:
        return self.store.snapshot()

    def get_row(self, row_id: str) -> RowSnapshot:
        return self.store.row_snapshot(row_id)

    def get_store_counts(self) -> tuple[StoreCountSeries, ...]:
        return self.store.store_counts()

    def set_plan_value(self, row_id: str, date_index: int, value: float) -> tuple[RowSnapshot, ...]:
        return self.engine.set_plan_value(row_id, date_index, value)

    def set_store_count(
        self, region: str, date_index: int, count: int
    ) -> tuple[tuple[StoreCountSeries, ...], tuple[RowSnapshot, ...]]:
        return self.engine.set_store_count(region, date_index, count)

    def summary(self, row_ids: list[str], start_date: str, end_date: str) -> PlanSummary:
        return summarize(self.get_rows(), row_ids, self.calendar, start_date, end_date, self.today)

    def breakdown(self, row_ids: list[str], start_date: str, end_date: str) -> dict[str, PlanSummary]:
        return summarize_rows(self.get_rows(), row_ids, self.calendar, start_date, end_date, self.today)

    def window(
        self,
        start_date: str,
        end_date: str,
        group_id: str | None = None,
        leaf: str | None = None,
    ) -> dict[str, Any]:
        """Window-aligned rows, counts and per-date deviation for display."""
        window = filter_window(self.calendar, start_date, end_date)
        rows = select_rows(self.get_rows(), self.hierarchy, group_id=group_id, leaf=leaf)
        return {
            "dates": list(window.dates),
            "weekdays": list(window.weekdays),
            "store_counts": [
                {"region": s.region, "counts": list(s.counts)}
                for s in slice_store_counts(self.get_store_counts(), window)
            ],
            "rows": slice_rows(rows, window),
            "deviation": {row.id: daily_deviation(row, window, self.today) for row in rows},
        }
