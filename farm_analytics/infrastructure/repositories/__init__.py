"""Concrete repository implementations."""

from .in_memory_farm_repository import InMemoryFarmRepository
from .csv_farm_repository import CsvFarmRepository

__all__ = [
    "InMemoryFarmRepository",
    "CsvFarmRepository",
]
