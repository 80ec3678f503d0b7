"""Use case for cost alerts and insights."""

from typing import Any, List, Mapping, Optional

from ..entities.alerts import Alert, Insight
from ..entities.benchmarks import AlertThresholds
from .alert_registry import AlertRegistry, as_mapping


def _bucket_total(value: Any) -> float:
    if isinstance(value, Mapping):
        return float(value.get("total", 0.0))
    if hasattr(value, "total"):
        return float(value.total)
    return float(value)


class AssessCostsUseCase:
    """Rule-based alerts and insights over a cost aggregate."""

    def __init__(self, registry: AlertRegistry, thresholds: Optional[AlertThresholds] = None):
        self.registry = registry
        self.thresholds = thresholds or AlertThresholds()

    def alerts(self, aggregate: Any) -> List[Alert]:
        """
        Default rules plus configured rules.

        Args:
            aggregate: CostAggregate or its serialized mapping

        Returns:
            List of triggered alerts
        """
        data = as_mapping(aggregate)
        total = float(data.get("total") or 0.0)
        equipment = float(data.get("equipment") or 0.0)
        alerts = []

        if total > self.thresholds.cost_high_water_mark:
            alerts.append(
                Alert(
                    type="HIGH_TOTAL_COST",
                    message=f"High total cost: {total:.2f}",
                    level="high",
                    suggestion="Review costs by category to find reduction opportunities",
                )
            )

        if total > 0 and equipment / total > self.thresholds.equipment_share_limit:
            alerts.append(
                Alert(
                    type="DISPROPORTIONATE_EQUIPMENT_COST",
                    message=f"Equipment accounts for {equipment / total * 100:.2f}% of the total cost",
                    level="medium",
                    suggestion="Optimize equipment use or negotiate better rates",
                )
            )

        alerts.extend(self.registry.evaluate(data))
        return alerts

    def insights(self, aggregate: Any) -> List[Insight]:
        """Most expensive activity kind and equipment; ties go to the first entry."""
        data = as_mapping(aggregate)
        insights = []

        by_kind = data.get("by_activity_kind") or {}
        if by_kind:
            kind, total = max(by_kind.items(), key=lambda item: _bucket_total(item[1]))
            insights.append(
                Insight(
                    type="MOST_EXPENSIVE_ACTIVITY_KIND",
                    message=f"The most expensive activity kind was '{kind}' with {_bucket_total(total):.2f}",
                    impact="high",
                )
            )

        by_equipment = data.get("by_equipment") or {}
        if by_equipment:
            equipment_id, bucket = max(by_equipment.items(), key=lambda item: _bucket_total(item[1]))
            name = bucket.get("name") if isinstance(bucket, Mapping) else getattr(bucket, "name", None)
            insights.append(
                Insight(
                    type="MOST_USED_EQUIPMENT",
                    message=(
                        f"The most used equipment was '{name or equipment_id}' "
                        f"with a cost of {_bucket_total(bucket):.2f}€"
                    ),
                    impact="medium",
                )
            )

        return insights
