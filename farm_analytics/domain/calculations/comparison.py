"""Comparison engine shared by the cost and productivity aggregators.

Two variation figures live here on purpose and must not be merged:

- `summarize_in_input_order` reports the change between the first and the
  last item in the order the caller supplied (cost comparisons).
- `rank_by_descending` sorts items by value and reports the mean change
  between adjacent ranked items (productivity comparisons).
"""

from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation, 0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    return float(np.std(values))


def percent_change(first: float, last: float) -> Optional[float]:
    """Relative change from `first` to `last` in percent, None when `first` is zero."""
    if first == 0:
        return None
    return (last - first) / first * 100


@dataclass
class InputOrderSummary(Generic[T]):
    """Summary of items kept in caller order."""

    lowest: T
    highest: T
    mean: float
    variation_pct: Optional[float]  # first vs last item, None for a single item


@dataclass
class RankedSummary(Generic[T]):
    """Summary of items ranked from highest to lowest value."""

    ranked: List[T]
    best: T
    worst: T
    mean: float
    mean_variation_pct: Optional[float]  # mean change between adjacent ranked items


def summarize_in_input_order(items: Sequence[T], key: Callable[[T], float]) -> InputOrderSummary[T]:
    """
    Min, max, mean and first-vs-last variation without reordering.

    Ties for min/max resolve to the first item encountered.

    Raises:
        ValueError: If there are no items
    """
    if not items:
        raise ValueError("Cannot summarize an empty comparison")
    values = [key(item) for item in items]
    variation = percent_change(values[0], values[-1]) if len(items) > 1 else None
    return InputOrderSummary(
        lowest=min(items, key=key),
        highest=max(items, key=key),
        mean=mean(values),
        variation_pct=variation,
    )


def rank_by_descending(items: Sequence[T], key: Callable[[T], float]) -> RankedSummary[T]:
    """
    Rank items by value (stable, highest first) and average adjacent changes.

    Raises:
        ValueError: If there are no items
    """
    if not items:
        raise ValueError("Cannot rank an empty comparison")
    ranked = sorted(items, key=key, reverse=True)
    values = [key(item) for item in ranked]

    if len(ranked) == 1:
        mean_variation: Optional[float] = 0.0
    else:
        changes = [
            change
            for change in (percent_change(prev, cur) for prev, cur in zip(values, values[1:]))
            if change is not None
        ]
        mean_variation = mean(changes) if changes else None

    return RankedSummary(
        ranked=ranked,
        best=ranked[0],
        worst=ranked[-1],
        mean=mean(values),
        mean_variation_pct=mean_variation,
    )
