"""Builds repositories, services and dispatchers from settings."""

import logging
from pathlib import Path
from typing import Dict, Optional, Union

from ..application.services.command_dispatcher import (
    CommandDispatcher,
    build_cost_dispatcher,
    build_productivity_dispatcher,
)
from ..application.services.cost_aggregator_service import CostAggregatorService
from ..application.services.productivity_aggregator_service import ProductivityAggregatorService
from ..domain.entities.benchmarks import AlertThresholds, CostBenchmarks, EfficiencyBenchmarks
from ..infrastructure.repositories.csv_farm_repository import CsvFarmRepository
from ..infrastructure.repositories.in_memory_farm_repository import InMemoryFarmRepository
from config.settings import (
    ALERT_SETTINGS,
    COST_SETTINGS,
    DATA_DIR,
    EFFICIENCY_SETTINGS,
    EXPECTED_YIELD_KG_PER_HA,
)

logger = logging.getLogger(__name__)


def load_repository(data_dir: Optional[Union[str, Path]] = None) -> InMemoryFarmRepository:
    """CSV repository for `data_dir` (DATA_DIR by default), empty in-memory one if it is absent."""
    data_dir = Path(data_dir or DATA_DIR)
    if not (data_dir / "activities.csv").exists():
        logger.warning(f"No farm data in {data_dir}, starting with an empty repository")
        return InMemoryFarmRepository()
    return CsvFarmRepository(str(data_dir))


def build_dispatchers(repository: InMemoryFarmRepository) -> Dict[str, CommandDispatcher]:
    """Cost and productivity dispatchers sharing one repository."""
    cost_benchmarks = CostBenchmarks.from_dict(COST_SETTINGS)
    thresholds = AlertThresholds.from_dict(ALERT_SETTINGS)

    cost_service = CostAggregatorService(
        activity_repo=repository,
        reference_repo=repository,
        benchmarks=cost_benchmarks,
        thresholds=thresholds,
    )
    productivity_service = ProductivityAggregatorService(
        activity_repo=repository,
        reference_repo=repository,
        cost_benchmarks=cost_benchmarks,
        efficiency_benchmarks=EfficiencyBenchmarks.from_dict(
            EFFICIENCY_SETTINGS, EXPECTED_YIELD_KG_PER_HA
        ),
        thresholds=thresholds,
    )
    return {
        "costs": build_cost_dispatcher(cost_service),
        "productivity": build_productivity_dispatcher(productivity_service),
    }
