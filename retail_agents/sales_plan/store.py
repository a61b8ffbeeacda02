"""
Row store: the working set of plan/actual rows and per-region store counts.

Rows are mutated in place only inside ``mutation()``. Readers get immutable
snapshots; after each mutation only the rows that changed are re-frozen and
every other row snapshot is reused.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from numbers import Integral
from typing import Any, Iterator

from .calendar_window import Calendar
from .errors import HierarchyIntegrityError, InvalidDateIndex, InvalidRegion, RowNotFound
from .hierarchy import COMPOSITE_REGION, Hierarchy, row_id


def round1(value: float) -> float:
    return round(float(value), 1)


@dataclass
class Row:
    id: str
    parent_id: str | None
    level: int
    region: str
    node: str
    name: str
    plan_values: list[float]
    actual_values: list[float | None]

    def freeze(self) -> "RowSnapshot":
        return RowSnapshot(
            id=self.id,
            parent_id=self.parent_id,
            level=self.level,
            region=self.region,
            node=self.node,
            name=self.name,
            plan_values=tuple(self.plan_values),
            actual_values=tuple(self.actual_values),
        )


@dataclass(frozen=True)
class RowSnapshot:
    id: str
    parent_id: str | None
    level: int
    region: str
    node: str
    name: str
    plan_values: tuple[float, ...]
    actual_values: tuple[float | None, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parent_id": self.parent_id,
            "level": self.level,
            "region": self.region,
            "node": self.node,
            "name": self.name,
            "plan_values": list(self.plan_values),
            "actual_values": list(self.actual_values),
        }


@dataclass(frozen=True)
class StoreCountSeries:
    region: str
    counts: tuple[int, ...]


class RowStore:
    """Owns rows, counts and the single mutation lock."""

    def __init__(
        self,
        calendar: Calendar,
        hierarchy: Hierarchy,
        today: str,
        rows: list[Row],
        store_counts: dict[str, list[int]],
    ):
        self.calendar = calendar
        self.hierarchy = hierarchy
        self.today = today
        self._rows: dict[str, Row] = {row.id: row for row in rows}
        self._order = [row.id for row in rows]
        self._counts = store_counts
        self._lock = threading.Lock()
        self._touched: set[str] = set()
        self._counts_touched = False

        self._frozen: dict[str, RowSnapshot] = {rid: row.freeze() for rid, row in self._rows.items()}
        self._rows_snapshot: tuple[RowSnapshot, ...] = tuple(self._frozen[rid] for rid in self._order)
        self._counts_snapshot = self._freeze_counts()

    # --- reads: last published snapshot, no locking ---

    def snapshot(self) -> tuple[RowSnapshot, ...]:
        return self._rows_snapshot

    def store_counts(self) -> tuple[StoreCountSeries, ...]:
        return self._counts_snapshot

    def row_snapshot(self, rid: str) -> RowSnapshot:
        try:
            return self._frozen[rid]
        except KeyError:
            raise RowNotFound(rid) from None

    # --- mutation side ---

    @contextmanager
    def mutation(self) -> Iterator["RowStore"]:
        """Serialize writers; republish touched rows once the writer is done."""
        with self._lock:
            self._touched = set()
            self._counts_touched = False
            try:
                yield self
            finally:
                self._publish()

    def get(self, rid: str) -> Row:
        try:
            return self._rows[rid]
        except KeyError:
            raise RowNotFound(rid) from None

    def require(self, region: str, node: str) -> Row:
        """Lookup used during propagation; a miss is a broken hierarchy, not user error."""
        rid = row_id(region, node)
        try:
            return self._rows[rid]
        except KeyError:
            raise HierarchyIntegrityError(f"Expected row '{rid}' is missing.") from None

    def children_of(self, parent: Row) -> list[Row]:
        children = [row for row in self._rows.values() if row.parent_id == parent.id]
        if not children:
            raise HierarchyIntegrityError(f"Row '{parent.id}' has no children to aggregate.")
        return children

    def rows_at_level(self, region: str, level: int) -> list[Row]:
        return [row for row in self._rows.values() if row.region == region and row.level == level]

    def composite_rows(self) -> list[Row]:
        return [row for row in self._rows.values() if row.region == COMPOSITE_REGION]

    def check_index(self, date_index: int) -> None:
        if isinstance(date_index, bool) or not isinstance(date_index, Integral):
            raise InvalidDateIndex(f"Date index must be an integer, got {date_index!r}.")
        if not 0 <= date_index < len(self.calendar):
            raise InvalidDateIndex(f"Date index {date_index} is outside 0..{len(self.calendar) - 1}.")

    def check_concrete_region(self, region: str) -> None:
        if region not in self._counts:
            raise InvalidRegion(
                f"Unsupported region '{region}'. Use one of {sorted(self._counts)}."
            )

    def count_at(self, region: str, date_index: int) -> int:
        return self._counts[region][date_index]

    def set_count(self, region: str, date_index: int, count: int) -> None:
        self._counts[region][date_index] = count
        self._counts_touched = True

    def set_plan(self, row: Row, date_index: int, value: float) -> None:
        row.plan_values[date_index] = value
        self._touched.add(row.id)

    def set_actual(self, row: Row, date_index: int, value: float | None) -> None:
        row.actual_values[date_index] = value
        self._touched.add(row.id)

    def _publish(self) -> None:
        if self._touched:
            for rid in self._touched:
                self._frozen[rid] = self._rows[rid].freeze()
            self._rows_snapshot = tuple(self._frozen[rid] for rid in self._order)
        if self._counts_touched:
            self._counts_snapshot = self._freeze_counts()

    def _freeze_counts(self) -> tuple[StoreCountSeries, ...]:
        return tuple(
            StoreCountSeries(region=region, counts=tuple(counts))
            for region, counts in self._counts.items()
        )
