"""
Synthetic plan/actual generation for the plan board.

Leaves get randomized plan and actual series; every aggregate is derived from
them so the store starts out closed under summation and store weighting.
"""

from __future__ import annotations

import logging
import random
from typing import Any

from .calendar_window import Calendar, build_calendar, is_elapsed
from .hierarchy import (
    COMPOSITE_REGION,
    REGION_PROFILES,
    ROOT_NODE,
    Hierarchy,
    default_hierarchy,
    row_id,
)
from .rollup import sum_actual, sum_plan, weighted_actual, weighted_mean
from .settings import PlanSettings
from .store import Row, RowStore, round1

logger = logging.getLogger(__name__)

PLAN_VOLATILITY = 0.4
WEEKEND_UPLIFT = 1.3
ACTUAL_NOISE = 0.1
# Roughly one elapsed day in ten gets a +/-20% excursion.
EXCURSION_CHANCE = 0.1
EXCURSION_FACTORS = (1.2, 0.8)
BASE_RATE_SPREAD = 20.0

FALLBACK_PROFILE: dict[str, Any] = {"store_base": 50, "store_jitter": 2, "base_rate": 35.0}


def _profile(region: str) -> dict[str, Any]:
    return REGION_PROFILES.get(region, FALLBACK_PROFILE)


def _store_counts(rng: random.Random, region: str, days: int) -> list[int]:
    profile = _profile(region)
    jitter = profile["store_jitter"]
    return [max(0, profile["store_base"] + rng.randint(-jitter, jitter)) for _ in range(days)]


def _leaf_series(
    rng: random.Random, calendar: Calendar, today: str, base: float
) -> tuple[list[float], list[float | None]]:
    plans: list[float] = []
    actuals: list[float | None] = []
    for idx, date_str in enumerate(calendar.dates):
        plan = base * (1 + rng.uniform(-PLAN_VOLATILITY / 2, PLAN_VOLATILITY / 2))
        if calendar.is_weekend(idx):
            plan *= WEEKEND_UPLIFT
        plan = round1(plan)
        plans.append(plan)

        if not is_elapsed(date_str, today):
            actuals.append(None)
            continue
        actual = plan * (1 + rng.uniform(-ACTUAL_NOISE, ACTUAL_NOISE))
        if rng.random() < EXCURSION_CHANCE:
            actual *= rng.choice(EXCURSION_FACTORS)
        actuals.append(round1(actual))
    return plans, actuals


def _summed(children: list[Row], days: int) -> tuple[list[float], list[float | None]]:
    plans = [sum_plan([c.plan_values[i] for c in children]) for i in range(days)]
    actuals = [sum_actual([c.actual_values[i] for c in children]) for i in range(days)]
    return plans, actuals


def _weighted(
    row_a: Row, row_b: Row, counts_a: list[int], counts_b: list[int]
) -> tuple[list[float], list[float | None]]:
    days = len(counts_a)
    plans = [
        weighted_mean(row_a.plan_values[i], row_b.plan_values[i], counts_a[i], counts_b[i])
        for i in range(days)
    ]
    actuals = [
        weighted_actual(row_a.actual_values[i], row_b.actual_values[i], counts_a[i], counts_b[i])
        for i in range(days)
    ]
    return plans, actuals


def generate_plan_store(
    settings: PlanSettings | None = None,
    hierarchy: Hierarchy | None = None,
    seed: int | None = None,
) -> RowStore:
    settings = settings or PlanSettings()
    hierarchy = hierarchy or default_hierarchy()
    rng = random.Random(settings.seed if seed is None else seed)

    calendar = build_calendar(settings.start_date, settings.end_date)
    days = len(calendar)
    concrete = hierarchy.concrete_regions
    if len(concrete) != 2:
        raise ValueError(f"Expected two concrete regions, got {concrete}.")

    counts = {region: _store_counts(rng, region, days) for region in concrete}
    rows: dict[str, Row] = {}

    for region in concrete:
        base_rate = _profile(region)["base_rate"]
        for group in hierarchy.groups:
            for leaf in group.children:
                base = base_rate + rng.uniform(0, BASE_RATE_SPREAD)
                plans, actuals = _leaf_series(rng, calendar, settings.today, base)
                rows[row_id(region, leaf)] = Row(
                    id=row_id(region, leaf),
                    parent_id=row_id(region, group.id),
                    level=3,
                    region=region,
                    node=leaf,
                    name=leaf,
                    plan_values=plans,
                    actual_values=actuals,
                )

        for group in hierarchy.groups:
            children = [rows[row_id(region, leaf)] for leaf in group.children]
            plans, actuals = _summed(children, days)
            rows[row_id(region, group.id)] = Row(
                id=row_id(region, group.id),
                parent_id=row_id(region, ROOT_NODE),
                level=2,
                region=region,
                node=group.id,
                name=group.name,
                plan_values=plans,
                actual_values=actuals,
            )

        groups = [rows[row_id(region, group.id)] for group in hierarchy.groups]
        plans, actuals = _summed(groups, days)
        rows[row_id(region, ROOT_NODE)] = Row(
            id=row_id(region, ROOT_NODE),
            parent_id=None,
            level=1,
            region=region,
            node=ROOT_NODE,
            name=hierarchy.region_name(region),
            plan_values=plans,
            actual_values=actuals,
        )

    # Network rows merge the two regions' own rows node by node, aggregates
    # included, instead of re-summing the merged leaves.
    region_a, region_b = concrete
    for node in hierarchy.nodes():
        plans, actuals = _weighted(
            rows[row_id(region_a, node)],
            rows[row_id(region_b, node)],
            counts[region_a],
            counts[region_b],
        )
        source = rows[row_id(region_a, node)]
        rows[row_id(COMPOSITE_REGION, node)] = Row(
            id=row_id(COMPOSITE_REGION, node),
            parent_id=None if node == ROOT_NODE else row_id(COMPOSITE_REGION, hierarchy.parent_node(node)),
            level=source.level,
            region=COMPOSITE_REGION,
            node=node,
            name=hierarchy.composite_name if node == ROOT_NODE else source.name,
            plan_values=plans,
            actual_values=actuals,
        )

    ordered = [rows[row_id(region, node)] for region in hierarchy.regions for node in hierarchy.nodes()]
    logger.info(
        f"Generated {len(ordered)} rows over {days} days "
        f"({calendar.dates[0]}..{calendar.dates[-1]}, today={settings.today})"
    )
    return RowStore(
        calendar=calendar,
        hierarchy=hierarchy,
        today=settings.today,
        rows=ordered,
        store_counts=counts,
    )
