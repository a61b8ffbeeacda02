"""
Aggregation arithmetic shared by the generator and the update engine.
Every result is rounded to one decimal where it is computed.
"""

from collections.abc import Sequence

from .store import round1


def weighted_mean(value_a: float, value_b: float, count_a: int, count_b: int) -> float:
    total = count_a + count_b
    if total == 0:
        return 0.0
    return round1((value_a * count_a + value_b * count_b) / total)


def weighted_actual(
    value_a: float | None, value_b: float | None, count_a: int, count_b: int
) -> float | None:
    if value_a is None or value_b is None:
        return None
    return weighted_mean(value_a, value_b, count_a, count_b)


def sum_plan(values: Sequence[float]) -> float:
    return round1(sum(values))


def sum_actual(values: Sequence[float | None]) -> float | None:
    # A parent only has an actual when every child reported one.
    if not values or any(v is None for v in values):
        return None
    return round1(sum(values))
