"""In-memory farm repository implementation."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ...domain.entities.activity import Activity
from ...domain.entities.activity_query import ActivityQuery
from ...domain.entities.crop import Crop
from ...domain.entities.equipment import Equipment
from ...domain.entities.parcel import Parcel
from ...domain.entities.person import Person
from ...domain.entities.product import Product
from ...domain.repositories.activity_repository import ActivityRepository
from ...domain.repositories.reference_repository import ReferenceRepository

logger = logging.getLogger(__name__)


class InMemoryFarmRepository(ActivityRepository, ReferenceRepository):
    """Activities and reference entities held in dictionaries keyed by id."""

    def __init__(
        self,
        activities: Iterable[Activity] = (),
        parcels: Iterable[Parcel] = (),
        crops: Iterable[Crop] = (),
        equipment: Iterable[Equipment] = (),
        products: Iterable[Product] = (),
        people: Iterable[Person] = (),
    ):
        self.activities: Dict[str, Activity] = {a.id: a for a in activities}
        self.parcels: Dict[str, Parcel] = {p.id: p for p in parcels}
        self.crops: Dict[str, Crop] = {c.id: c for c in crops}
        self.equipment: Dict[str, Equipment] = {e.id: e for e in equipment}
        self.products: Dict[str, Product] = {p.id: p for p in products}
        self.people: Dict[str, Person] = {p.id: p for p in people}

    def add_activity(self, activity: Activity) -> None:
        self.activities[activity.id] = activity

    def add_parcel(self, parcel: Parcel) -> None:
        self.parcels[parcel.id] = parcel

    def summary(self) -> Dict[str, int]:
        return {
            "activities": len(self.activities),
            "parcels": len(self.parcels),
            "crops": len(self.crops),
            "equipment": len(self.equipment),
            "products": len(self.products),
            "people": len(self.people),
        }

    # Reference expansion returns new objects; stored entities are never shared

    def _expand_parcel(self, parcel: Parcel) -> Parcel:
        return replace(parcel, crop=self.crops.get(parcel.crop_id) if parcel.crop_id else None)

    def _expand(self, activity: Activity) -> Activity:
        parcel = self.parcels.get(activity.parcel_id)
        return replace(
            activity,
            equipment=[
                replace(line, equipment=self.equipment.get(line.equipment_id))
                for line in activity.equipment
            ],
            products=[
                replace(line, product=self.products.get(line.product_id))
                for line in activity.products
            ],
            parcel=self._expand_parcel(parcel) if parcel else None,
            responsible=self.people.get(activity.responsible_id) if activity.responsible_id else None,
        )

    # ActivityRepository

    async def get_activity(self, activity_id: str) -> Optional[Activity]:
        activity = self.activities.get(activity_id)
        return self._expand(activity) if activity else None

    async def find_activities(self, query: ActivityQuery) -> List[Activity]:
        matched = [
            expanded
            for expanded in (self._expand(a) for a in self.activities.values())
            if query.matches(expanded)
        ]
        if query.order_by_end:
            # open activities go last
            matched.sort(key=lambda a: (a.end is None, a.end or datetime.max))
        logger.debug(f"Query {query} matched {len(matched)} activities")
        return matched

    # ReferenceRepository

    async def get_parcel(self, parcel_id: str) -> Optional[Parcel]:
        parcel = self.parcels.get(parcel_id)
        return self._expand_parcel(parcel) if parcel else None

    async def find_parcels(self, crop_id: str) -> List[Parcel]:
        return [self._expand_parcel(p) for p in self.parcels.values() if p.crop_id == crop_id]

    async def get_crop(self, crop_id: str) -> Optional[Crop]:
        return self.crops.get(crop_id)

    async def get_equipment(self, equipment_id: str) -> Optional[Equipment]:
        return self.equipment.get(equipment_id)

    async def get_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

    async def get_person(self, person_id: str) -> Optional[Person]:
        return self.people.get(person_id)
