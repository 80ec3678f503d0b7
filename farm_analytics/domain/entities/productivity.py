"""Productivity entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .date_range import DateRange


@dataclass(frozen=True)
class HarvestRecord:
    """One completed harvest normalized to kg/ha."""

    activity_id: str
    date: datetime
    quantity: float
    unit: Optional[str]
    productivity: float  # kg/ha

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_id": self.activity_id,
            "date": self.date,
            "quantity": self.quantity,
            "unit": self.unit,
            "productivity": self.productivity,
        }


@dataclass
class ParcelProductivity:
    """Harvest history and derived productivity of a parcel."""

    parcel_id: str
    parcel_name: str
    area: float
    soil_type: Optional[str]
    crop_id: Optional[str]
    crop_name: Optional[str]
    crop_type: Optional[str]
    harvests: List[HarvestRecord] = field(default_factory=list)
    average_productivity: float = 0.0
    variation_pct: Optional[float] = None  # first vs last harvest
    expected_yield: Optional[float] = None
    expected_ratio_pct: Optional[float] = None  # average vs expected, in percent
    ended_within: Optional[DateRange] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parcel_id": self.parcel_id,
            "parcel_name": self.parcel_name,
            "area": self.area,
            "soil_type": self.soil_type,
            "crop": {"id": self.crop_id, "name": self.crop_name, "type": self.crop_type},
            "period": self.ended_within,
            "harvests": self.harvests,
            "metrics": {
                "average_productivity": self.average_productivity,
                "variation_pct": self.variation_pct,
                "expected_yield": self.expected_yield,
                "expected_ratio_pct": self.expected_ratio_pct,
            },
        }


@dataclass(frozen=True)
class ParcelShare:
    """A parcel's contribution to its crop's productivity."""

    parcel_id: str
    parcel_name: str
    area: float
    average_productivity: float
    expected_ratio_pct: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parcel_id": self.parcel_id,
            "parcel_name": self.parcel_name,
            "area": self.area,
            "average_productivity": self.average_productivity,
            "expected_ratio_pct": self.expected_ratio_pct,
        }


@dataclass
class CropProductivity:
    """Area-weighted productivity across the parcels of a crop."""

    crop_id: str
    crop_name: str
    crop_type: Optional[str]
    parcels: List[ParcelShare] = field(default_factory=list)
    total_area: float = 0.0
    average_productivity: float = 0.0
    expected_ratio_pct: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "crop_id": self.crop_id,
            "crop_name": self.crop_name,
            "crop_type": self.crop_type,
            "parcels": self.parcels,
            "metrics": {
                "total_area": self.total_area,
                "average_productivity": self.average_productivity,
                "expected_ratio_pct": self.expected_ratio_pct,
            },
        }


@dataclass(frozen=True)
class TrendPoint:
    period: int
    productivity: float
    date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"period": self.period, "productivity": self.productivity, "date": self.date}


@dataclass(frozen=True)
class Forecast:
    period: int
    productivity: float
    date: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"period": self.period, "productivity": self.productivity, "date": self.date}


@dataclass
class ProductivityTrend:
    """Linear trend of a parcel's productivity with forward forecasts."""

    parcel_id: str
    parcel_name: str
    points: List[TrendPoint]
    slope: float
    intercept: float
    direction: str  # ascending, descending or stable
    strength: float  # |slope| / mean productivity
    forecasts: List[Forecast]
    r_squared: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parcel_id": self.parcel_id,
            "parcel_name": self.parcel_name,
            "points": self.points,
            "trend": {
                "slope": self.slope,
                "intercept": self.intercept,
                "direction": self.direction,
                "strength": self.strength,
            },
            "forecasts": self.forecasts,
            "r_squared": self.r_squared,
        }


@dataclass
class ActivityEfficiency:
    activity_id: str
    kind: str
    start: datetime
    end: Optional[datetime]
    parcel_id: Optional[str]
    responsible_id: Optional[str]
    efficiency: float
    total_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "activity_id": self.activity_id,
            "kind": self.kind,
            "start": self.start,
            "end": self.end,
            "parcel_id": self.parcel_id,
            "responsible_id": self.responsible_id,
            "efficiency": self.efficiency,
            "total_cost": self.total_cost,
        }


@dataclass
class EfficiencyAnalysis:
    """Operational efficiency over a filtered set of completed activities."""

    kind: Optional[str]
    period: Optional[DateRange]
    responsible_id: Optional[str]
    activities: List[ActivityEfficiency] = field(default_factory=list)
    mean_efficiency: float = 0.0
    efficiency_std: float = 0.0
    mean_completion_hours: float = 0.0
    completed_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind or "all",
            "period": self.period,
            "responsible_id": self.responsible_id or "all",
            "activities": self.activities,
            "metrics": {
                "mean_efficiency": self.mean_efficiency,
                "efficiency_std": self.efficiency_std,
                "mean_completion_hours": self.mean_completion_hours,
                "completed_count": self.completed_count,
            },
        }


@dataclass(frozen=True)
class PerformanceEntry:
    """A compared parcel, crop or period with its mean productivity."""

    key: str
    label: str
    average_productivity: float
    detail: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "average_productivity": self.average_productivity,
            "detail": self.detail,
        }


@dataclass
class PerformanceComparison:
    """
    Entries ranked by productivity, highest first.

    `mean_variation_pct` averages the change between adjacent ranked
    entries, unlike the first-vs-last figure of cost comparisons.
    """

    comparison_type: str
    entries: List[PerformanceEntry]
    best: str
    worst: str
    mean_productivity: float
    mean_variation_pct: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.comparison_type,
            "entries": self.entries,
            "metrics": {
                "best": self.best,
                "worst": self.worst,
                "mean_productivity": self.mean_productivity,
                "mean_variation_pct": self.mean_variation_pct,
            },
        }
