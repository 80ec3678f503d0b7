"""Domain entities."""

from .crop import Crop, CropType
from .parcel import Parcel
from .equipment import Equipment
from .product import Product
from .person import Person
from .activity import Activity, ActivityKind, ActivityState, EquipmentUsage, ProductUsage
from .date_range import DateRange
from .activity_query import ActivityQuery
from .benchmarks import CostBenchmarks, EfficiencyBenchmarks, AlertThresholds
from .results import ErrorKind, OperationResult, to_jsonable
from .alerts import Alert, AlertRule, Insight
from .cost import (
    ActivityCost,
    CostAggregate,
    CostBucket,
    CostComparison,
    CostComparisonItem,
    RateSource,
    ResolvedRate,
)
from .productivity import (
    CropProductivity,
    EfficiencyAnalysis,
    HarvestRecord,
    ParcelProductivity,
    PerformanceComparison,
    ProductivityTrend,
)

__all__ = [
    "Crop",
    "CropType",
    "Parcel",
    "Equipment",
    "Product",
    "Person",
    "Activity",
    "ActivityKind",
    "ActivityState",
    "EquipmentUsage",
    "ProductUsage",
    "DateRange",
    "ActivityQuery",
    "CostBenchmarks",
    "EfficiencyBenchmarks",
    "AlertThresholds",
    "ErrorKind",
    "OperationResult",
    "to_jsonable",
    "Alert",
    "AlertRule",
    "Insight",
    "ActivityCost",
    "CostAggregate",
    "CostBucket",
    "CostComparison",
    "CostComparisonItem",
    "RateSource",
    "ResolvedRate",
    "CropProductivity",
    "EfficiencyAnalysis",
    "HarvestRecord",
    "ParcelProductivity",
    "PerformanceComparison",
    "ProductivityTrend",
]
