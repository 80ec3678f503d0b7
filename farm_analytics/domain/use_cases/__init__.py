"""Use cases - core business operations."""

from .compute_activity_cost import ComputeActivityCostUseCase
from .consolidate_costs import ConsolidateCostsUseCase, ConsolidationContext
from .compute_operational_efficiency import ComputeOperationalEfficiencyUseCase
from .analyze_productivity_trend import AnalyzeProductivityTrendUseCase
from .alert_registry import AlertRegistry
from .assess_costs import AssessCostsUseCase
from .assess_productivity import AssessProductivityUseCase

__all__ = [
    "ComputeActivityCostUseCase",
    "ConsolidateCostsUseCase",
    "ConsolidationContext",
    "ComputeOperationalEfficiencyUseCase",
    "AnalyzeProductivityTrendUseCase",
    "AlertRegistry",
    "AssessCostsUseCase",
    "AssessProductivityUseCase",
]
