"""Unit normalization and labor estimation."""

from typing import Mapping, Optional

from ..exceptions import InvalidInputError

# Workday conventions: 8h day, 5-day week, 20-day month
HOURS_PER_TIME_UNIT = {
    "minute": 1 / 60,
    "hour": 1.0,
    "day": 8.0,
    "week": 40.0,
    "month": 160.0,
}

KG_PER_MASS_UNIT = {
    "kg": 1.0,
    "g": 0.001,
    "ton": 1000.0,
    "lb": 0.453592,
    "oz": 0.0283495,
    "unit": 0.2,  # placeholder weight for counted produce
}

# Labor benchmark used to price activities
COST_LABOR_HOURS = {
    "preparation": 8.0,
    "planting": 6.0,
    "treatment": 4.0,
    "harvest": 10.0,
    "maintenance": 5.0,
}

# Labor benchmark used for operational efficiency
EFFICIENCY_LABOR_HOURS = {
    "preparation": 12.0,
    "planting": 8.0,
    "treatment": 6.0,
    "harvest": 10.0,
    "maintenance": 7.0,
    "irrigation": 5.0,
    "pruning": 8.0,
}

DEFAULT_LABOR_HOURS = 8.0


def _unit_key(unit: Optional[str]) -> str:
    return (getattr(unit, "value", unit) or "").strip().lower()


def hours_from_duration(amount: Optional[float], unit: Optional[str]) -> float:
    """
    Convert a duration to hours.

    Unknown units are treated as hours already.

    Args:
        amount: Duration amount (None or 0 gives 0)
        unit: One of minute, hour, day, week, month

    Returns:
        Duration in hours
    """
    if not amount:
        return 0.0
    factor = HOURS_PER_TIME_UNIT.get(_unit_key(unit))
    if factor is None:
        return float(amount)
    return amount * factor


def estimated_labor_hours(
    activity_kind: Optional[str],
    table: Mapping[str, float] = COST_LABOR_HOURS,
    default: float = DEFAULT_LABOR_HOURS,
) -> float:
    """Benchmark labor hours for an activity kind, `default` when the kind is unknown."""
    return float(table.get(_unit_key(activity_kind), default))


def to_kilograms(quantity: float, unit: Optional[str]) -> float:
    """Convert a harvested quantity to kilograms. Unknown units count as kilograms."""
    return quantity * KG_PER_MASS_UNIT.get(_unit_key(unit), 1.0)


def yield_per_area(quantity: float, unit: Optional[str], area: Optional[float]) -> float:
    """
    Productivity in kg/ha.

    Args:
        quantity: Harvested quantity
        unit: Mass unit of the quantity
        area: Parcel area in hectares

    Returns:
        Kilograms per hectare

    Raises:
        InvalidInputError: If the area is missing or not positive
    """
    if area is None or area <= 0:
        raise InvalidInputError(f"Area must be positive to compute productivity, got {area}")
    return to_kilograms(quantity, unit) / area
