"""CSV farm repository implementation."""

import logging
from collections import defaultdict
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from ...domain.entities.activity import Activity, EquipmentUsage, ProductUsage
from ...domain.entities.crop import Crop
from ...domain.entities.equipment import Equipment
from ...domain.entities.parcel import Parcel
from ...domain.entities.person import Person
from ...domain.entities.product import Product
from .in_memory_farm_repository import InMemoryFarmRepository

logger = logging.getLogger(__name__)

REQUIRED_FILES = ("activities.csv", "parcels.csv")


def _text(value: Any) -> Optional[str]:
    return None if pd.isna(value) else str(value).strip()


def _number(value: Any) -> Optional[float]:
    return None if pd.isna(value) else float(value)


def _timestamp(value: Any):
    return None if pd.isna(value) else pd.to_datetime(value).to_pydatetime()


class CsvFarmRepository(InMemoryFarmRepository):
    """
    Farm data loaded once from a directory of CSV files.

    Expected files (header row first):
        activities.csv       id, kind, state, start, end, parcel_id, responsible_id,
                             quantity_harvested, harvest_unit
        parcels.csv          id, name, area, soil_type, crop_id
        crops.csv            id, name, crop_type
        equipment.csv        id, name, type, hourly_cost
        products.csv         id, name, type, price_per_unit
        people.csv           id, name
        equipment_usage.csv  activity_id, equipment_id, time_used, time_unit
        product_usage.csv    activity_id, product_id, quantity, unit

    Only activities.csv and parcels.csv are required.
    """

    def __init__(self, data_dir: str):
        """
        Initialize repository.

        Args:
            data_dir: Directory holding the CSV files
        """
        self.data_dir = Path(data_dir)
        if not self.data_dir.exists():
            raise FileNotFoundError(f"Farm data directory not found: {data_dir}")
        for name in REQUIRED_FILES:
            if not (self.data_dir / name).exists():
                raise FileNotFoundError(f"Required farm data file not found: {self.data_dir / name}")

        logger.info(f"Loading farm data from {self.data_dir}")
        super().__init__(
            activities=self._load_activities(),
            parcels=self._load_parcels(),
            crops=self._load_crops(),
            equipment=self._load_equipment(),
            products=self._load_products(),
            people=self._load_people(),
        )
        logger.info(f"Loaded farm data: {self.summary()}")

    def _read(self, name: str) -> pd.DataFrame:
        path = self.data_dir / name
        if not path.exists():
            logger.debug(f"Optional file {name} not present")
            return pd.DataFrame()
        try:
            return pd.read_csv(path, dtype=str, skipinitialspace=True)
        except Exception as e:
            logger.error(f"Error reading CSV file {path}: {e}")
            raise

    def _load_parcels(self) -> List[Parcel]:
        return [
            Parcel(
                id=_text(row["id"]),
                name=_text(row["name"]),
                area=_number(row["area"]),
                soil_type=_text(row.get("soil_type")),
                crop_id=_text(row.get("crop_id")),
            )
            for _, row in self._read("parcels.csv").iterrows()
        ]

    def _load_crops(self) -> List[Crop]:
        return [
            Crop(
                id=_text(row["id"]),
                name=_text(row["name"]),
                crop_type=_text(row.get("crop_type")) or "other",
            )
            for _, row in self._read("crops.csv").iterrows()
        ]

    def _load_equipment(self) -> List[Equipment]:
        return [
            Equipment(
                id=_text(row["id"]),
                name=_text(row["name"]),
                type=_text(row.get("type")),
                hourly_cost=_number(row.get("hourly_cost")),
            )
            for _, row in self._read("equipment.csv").iterrows()
        ]

    def _load_products(self) -> List[Product]:
        return [
            Product(
                id=_text(row["id"]),
                name=_text(row["name"]),
                type=_text(row.get("type")),
                price_per_unit=_number(row.get("price_per_unit")),
            )
            for _, row in self._read("products.csv").iterrows()
        ]

    def _load_people(self) -> List[Person]:
        return [
            Person(id=_text(row["id"]), name=_text(row["name"]))
            for _, row in self._read("people.csv").iterrows()
        ]

    def _load_usage(self) -> Dict[str, Dict[str, list]]:
        """Equipment and product lines grouped by activity id."""
        usage: Dict[str, Dict[str, list]] = defaultdict(lambda: {"equipment": [], "products": []})

        for _, row in self._read("equipment_usage.csv").iterrows():
            usage[_text(row["activity_id"])]["equipment"].append(
                EquipmentUsage(
                    equipment_id=_text(row.get("equipment_id")),
                    time_used=_number(row.get("time_used")) or 0.0,
                    time_unit=_text(row.get("time_unit")) or "hour",
                )
            )

        for _, row in self._read("product_usage.csv").iterrows():
            usage[_text(row["activity_id"])]["products"].append(
                ProductUsage(
                    product_id=_text(row.get("product_id")),
                    quantity=_number(row.get("quantity")) or 0.0,
                    unit=_text(row.get("unit")),
                )
            )

        return usage

    def _load_activities(self) -> List[Activity]:
        usage = self._load_usage()
        activities = []
        for _, row in self._read("activities.csv").iterrows():
            activity_id = _text(row["id"])
            lines = usage.get(activity_id, {"equipment": [], "products": []})
            activities.append(
                Activity(
                    id=activity_id,
                    kind=_text(row["kind"]),
                    state=_text(row["state"]),
                    start=_timestamp(row["start"]),
                    end=_timestamp(row.get("end")),
                    parcel_id=_text(row["parcel_id"]),
                    responsible_id=_text(row.get("responsible_id")),
                    equipment=list(lines["equipment"]),
                    products=list(lines["products"]),
                    quantity_harvested=_number(row.get("quantity_harvested")),
                    harvest_unit=_text(row.get("harvest_unit")),
                )
            )
        return activities
