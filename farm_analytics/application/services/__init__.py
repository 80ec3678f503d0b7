"""Application services."""

from .cost_aggregator_service import CostAggregatorService
from .productivity_aggregator_service import ProductivityAggregatorService
from .command_dispatcher import (
    Command,
    CommandDispatcher,
    CostCommand,
    ProductivityCommand,
    build_cost_dispatcher,
    build_productivity_dispatcher,
)

__all__ = [
    "CostAggregatorService",
    "ProductivityAggregatorService",
    "Command",
    "CommandDispatcher",
    "CostCommand",
    "ProductivityCommand",
    "build_cost_dispatcher",
    "build_productivity_dispatcher",
]
