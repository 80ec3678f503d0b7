"""Use case for productivity alerts and insights."""

from typing import Any, List, Optional

from ..entities.alerts import Alert, Insight
from ..entities.benchmarks import AlertThresholds
from .alert_registry import AlertRegistry, as_mapping


class AssessProductivityUseCase:
    """Rule-based alerts and insights over productivity results."""

    def __init__(self, registry: AlertRegistry, thresholds: Optional[AlertThresholds] = None):
        self.registry = registry
        self.thresholds = thresholds or AlertThresholds()

    def alerts(self, result: Any) -> List[Alert]:
        data = as_mapping(result)
        metrics = data.get("metrics") or {}
        alerts = []

        ratio = metrics.get("expected_ratio_pct")
        if ratio is not None and ratio < self.thresholds.minimum_expected_ratio_pct:
            alerts.append(
                Alert(
                    type="PRODUCTIVITY_BELOW_EXPECTED",
                    message=f"Productivity is at {ratio:.2f}% of the expected yield",
                    level="high",
                    suggestion="Check soil conditions, applied treatments and cultivation practices",
                )
            )

        variation = metrics.get("variation_pct")
        if variation is not None and variation < self.thresholds.productivity_drop_pct:
            alerts.append(
                Alert(
                    type="SIGNIFICANT_PRODUCTIVITY_DROP",
                    message=f"Productivity dropped {abs(variation):.2f}%",
                    level="medium",
                    suggestion="Analyze weather factors, management and activity history",
                )
            )

        alerts.extend(self.registry.evaluate(data))
        return alerts

    def insights(self, result: Any) -> List[Insight]:
        """
        Insights for parcel/crop productivity, trends and comparisons.

        Comparison variation is judged by magnitude since ranked entries
        always decrease.
        """
        data = as_mapping(result)
        metrics = data.get("metrics") or {}
        trend = data.get("trend") or {}
        insights = []

        ratio = metrics.get("expected_ratio_pct")
        if ratio is not None and ratio > self.thresholds.exceptional_ratio_pct:
            insights.append(
                Insight(
                    type="EXCEPTIONAL_PRODUCTIVITY",
                    message=f"Productivity at {ratio:.2f}% of the expected yield",
                    impact="positive",
                    action="Document the practices used so they can be replicated",
                )
            )

        if trend.get("direction") == "ascending" and (trend.get("strength") or 0) > self.thresholds.strong_trend_strength:
            insights.append(
                Insight(
                    type="STRONG_POSITIVE_TREND",
                    message="Strong positive productivity trend detected",
                    impact="positive",
                    action="Keep or intensify the current practices",
                )
            )

        variation = metrics.get("mean_variation_pct")
        if variation is not None and abs(variation) > self.thresholds.high_variation_pct:
            insights.append(
                Insight(
                    type="HIGH_VARIATION_BETWEEN_ITEMS",
                    message=f"Large variation ({abs(variation):.2f}%) between compared items",
                    impact="neutral",
                    action="Investigate the causes of the differences to improve every item",
                )
            )

        return insights
