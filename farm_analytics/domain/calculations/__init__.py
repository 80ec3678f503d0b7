"""Pure calculations shared by the aggregators."""

from .units import (
    hours_from_duration,
    estimated_labor_hours,
    to_kilograms,
    yield_per_area,
)
from .comparison import (
    percent_change,
    summarize_in_input_order,
    rank_by_descending,
    mean,
    population_std,
)
from .trend import fit_linear_trend, average_interval_days

__all__ = [
    "hours_from_duration",
    "estimated_labor_hours",
    "to_kilograms",
    "yield_per_area",
    "percent_change",
    "summarize_in_input_order",
    "rank_by_descending",
    "mean",
    "population_std",
    "fit_linear_trend",
    "average_interval_days",
]
