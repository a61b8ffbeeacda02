"""
Point edits on the row store.

Each operation validates its arguments and resolves every row it will touch
before the first write, then applies the writes under the store's mutation
lock. A rejected call leaves the store exactly as it was.
"""

from __future__ import annotations

import logging
import math
from numbers import Integral, Real

from .errors import InvalidValue
from .hierarchy import COMPOSITE_REGION, ROOT_NODE
from .rollup import sum_plan, weighted_actual, weighted_mean
from .store import Row, RowSnapshot, RowStore, StoreCountSeries, round1

logger = logging.getLogger(__name__)


class UpdateEngine:
    def __init__(self, store: RowStore):
        self.store = store
        region_a, region_b = store.hierarchy.concrete_regions
        self._region_a = region_a
        self._region_b = region_b

    def set_plan_value(self, row_id: str, date_index: int, value: float) -> tuple[RowSnapshot, ...]:
        store = self.store
        if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
            raise InvalidValue(f"Plan value must be a finite number, got {value!r}.")

        with store.mutation():
            target = store.get(row_id)
            store.check_index(date_index)
            if target.region == COMPOSITE_REGION:
                # Network rows are a manual override here: the inverse split
                # back into the two regions is undefined, so nothing propagates.
                store.set_plan(target, date_index, round1(value))
                logger.debug(f"Plan override on network row {row_id}[{date_index}] = {value}")
            else:
                self._propagate_plan(target, date_index, value)
        # Read after the block so the edit has been published.
        return store.snapshot()

    def _propagate_plan(self, target: Row, date_index: int, value: float) -> None:
        store = self.store
        parent = None
        if target.level == 3:
            parent = store.require(target.region, store.hierarchy.parent_node(target.node))
        siblings = store.children_of(parent) if parent is not None else []
        region_root = store.require(target.region, ROOT_NODE)
        region_groups = store.rows_at_level(target.region, 2)
        merges = [target.node]
        if parent is not None:
            merges.append(parent.node)
        if target.node != ROOT_NODE:
            merges.append(ROOT_NODE)
        merge_rows = [self._merge_inputs(node) for node in merges]

        store.set_plan(target, date_index, round1(value))
        if parent is not None:
            store.set_plan(parent, date_index, sum_plan([r.plan_values[date_index] for r in siblings]))
        store.set_plan(
            region_root, date_index, sum_plan([r.plan_values[date_index] for r in region_groups])
        )
        for composite, row_a, row_b in merge_rows:
            store.set_plan(composite, date_index, self._weighted_plan(row_a, row_b, date_index))

        logger.debug(
            f"Plan edit {target.id}[{date_index}] = {value}; "
            f"recomputed {len(merge_rows)} network rows"
        )

    def set_store_count(
        self, region: str, date_index: int, count: int
    ) -> tuple[tuple[StoreCountSeries, ...], tuple[RowSnapshot, ...]]:
        store = self.store
        store.check_concrete_region(region)
        if isinstance(count, bool) or not isinstance(count, Integral):
            raise InvalidValue(f"Store count must be an integer, got {count!r}.")
        if count < 0:
            raise InvalidValue(f"Store count must be non-negative, got {count}.")

        with store.mutation():
            store.check_index(date_index)
            merge_rows = [self._merge_inputs(row.node) for row in store.composite_rows()]

            store.set_count(region, date_index, int(count))
            for composite, row_a, row_b in merge_rows:
                store.set_plan(composite, date_index, self._weighted_plan(row_a, row_b, date_index))
                store.set_actual(composite, date_index, self._weighted_actual(row_a, row_b, date_index))

            logger.debug(
                f"Store count {region}[{date_index}] = {count}; "
                f"re-weighted {len(merge_rows)} network rows"
            )
        return store.store_counts(), store.snapshot()

    def _merge_inputs(self, node: str) -> tuple[Row, Row, Row]:
        return (
            self.store.require(COMPOSITE_REGION, node),
            self.store.require(self._region_a, node),
            self.store.require(self._region_b, node),
        )

    def _weights(self, date_index: int) -> tuple[int, int]:
        return (
            self.store.count_at(self._region_a, date_index),
            self.store.count_at(self._region_b, date_index),
        )

    def _weighted_plan(self, row_a: Row, row_b: Row, date_index: int) -> float:
        count_a, count_b = self._weights(date_index)
        return weighted_mean(row_a.plan_values[date_index], row_b.plan_values[date_index], count_a, count_b)

    def _weighted_actual(self, row_a: Row, row_b: Row, date_index: int) -> float | None:
        count_a, count_b = self._weights(date_index)
        return weighted_actual(
            row_a.actual_values[date_index], row_b.actual_values[date_index], count_a, count_b
        )
