"""Configurable benchmarks, weights and thresholds."""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from ..calculations.units import COST_LABOR_HOURS, EFFICIENCY_LABOR_HOURS

DEFAULT_EXPECTED_YIELDS = {
    "cereal": 5000.0,
    "horticultural": 20000.0,
    "fruit": 15000.0,
    "vine": 8000.0,
    "olive": 3000.0,
    "tuber": 25000.0,
    "oilseed": 3500.0,
    "other": 10000.0,
}


def _known(cls, definition: Dict[str, Any]) -> Dict[str, Any]:
    names = cls.__dataclass_fields__.keys()
    return {k: v for k, v in definition.items() if k in names}


@dataclass(frozen=True)
class CostBenchmarks:
    """Rates and defaults used to price an activity."""

    default_equipment_hourly_cost: float = 50.0
    default_product_unit_price: float = 5.0
    labor_hourly_rate: float = 10.0
    default_states: Tuple[str, ...] = ("completed", "pending")
    efficiency_time_weight: float = 0.6
    efficiency_cost_weight: float = 0.4
    efficiency_benchmark_cost_per_hour: float = 100.0
    default_time_efficiency: float = 50.0
    hours_per_activity: float = 8.0
    labor_hours: Dict[str, float] = field(default_factory=lambda: dict(COST_LABOR_HOURS))

    @classmethod
    def from_dict(cls, definition: Dict[str, Any]) -> "CostBenchmarks":
        """Create benchmarks from a settings dictionary, ignoring unknown keys."""
        values = _known(cls, definition)
        if "default_states" in values:
            values["default_states"] = tuple(values["default_states"])
        return cls(**values)


@dataclass(frozen=True)
class EfficiencyBenchmarks:
    """Weights and expectations for operational efficiency and trends."""

    time_weight: float = 0.4
    cost_weight: float = 0.4
    yield_weight: float = 0.2
    benchmark_cost_per_hour: float = 75.0
    default_time_efficiency: float = 50.0
    trend_min_points: int = 3
    forecast_periods: int = 3
    default_harvest_interval_days: float = 365.0
    labor_hours: Dict[str, float] = field(default_factory=lambda: dict(EFFICIENCY_LABOR_HOURS))
    expected_yields: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_EXPECTED_YIELDS))

    @classmethod
    def from_dict(cls, definition: Dict[str, Any], expected_yields: Dict[str, float] = None) -> "EfficiencyBenchmarks":
        values = _known(cls, definition)
        if expected_yields is not None:
            values["expected_yields"] = dict(expected_yields)
        return cls(**values)

    def expected_yield(self, crop_type: str) -> float:
        """Expected kg/ha for a crop type, falling back to the `other` benchmark."""
        return self.expected_yields.get(crop_type, self.expected_yields["other"])


@dataclass(frozen=True)
class AlertThresholds:
    """Limits used by the default alert and insight rules."""

    cost_high_water_mark: float = 10000.0
    equipment_share_limit: float = 0.7
    minimum_expected_ratio_pct: float = 60.0
    productivity_drop_pct: float = -15.0
    exceptional_ratio_pct: float = 120.0
    strong_trend_strength: float = 0.10
    high_variation_pct: float = 20.0

    @classmethod
    def from_dict(cls, definition: Dict[str, Any]) -> "AlertThresholds":
        return cls(**_known(cls, definition))
