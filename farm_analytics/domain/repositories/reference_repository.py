"""Reference data repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional
from ..entities.crop import Crop
from ..entities.equipment import Equipment
from ..entities.parcel import Parcel
from ..entities.person import Person
from ..entities.product import Product


class ReferenceRepository(ABC):
    """Abstract repository for parcels, crops, equipment, products and people."""

    @abstractmethod
    async def get_parcel(self, parcel_id: str) -> Optional[Parcel]:
        """Retrieve a parcel with its crop expanded, None if absent."""
        pass

    @abstractmethod
    async def find_parcels(self, crop_id: str) -> List[Parcel]:
        """
        Retrieve the parcels growing a crop.

        Args:
            crop_id: Crop identifier

        Returns:
            List of Parcel entities (possibly empty)
        """
        pass

    @abstractmethod
    async def get_crop(self, crop_id: str) -> Optional[Crop]:
        pass

    @abstractmethod
    async def get_equipment(self, equipment_id: str) -> Optional[Equipment]:
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    async def get_person(self, person_id: str) -> Optional[Person]:
        pass
