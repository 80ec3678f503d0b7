"""Shared fixtures: a small farm held in memory."""

from datetime import datetime

import pytest

from farm_analytics.application.services.cost_aggregator_service import CostAggregatorService
from farm_analytics.application.services.productivity_aggregator_service import (
    ProductivityAggregatorService,
)
from farm_analytics.domain.entities.activity import Activity, EquipmentUsage, ProductUsage
from farm_analytics.domain.entities.crop import Crop
from farm_analytics.domain.entities.equipment import Equipment
from farm_analytics.domain.entities.parcel import Parcel
from farm_analytics.domain.entities.person import Person
from farm_analytics.domain.entities.product import Product
from farm_analytics.infrastructure.repositories.in_memory_farm_repository import (
    InMemoryFarmRepository,
)


def build_farm() -> InMemoryFarmRepository:
    """
    Two wheat parcels and a greenhouse.

    Costs with the default rates (labor €10/h):
        h1  harvest,     p1, 10h, tractor 4h (€200), fertilizer 12.5 (€62.5)  -> 362.5
        h2  harvest,     p2, 10h, sprayer 2h (€60)                            -> 160.0
        t1  treatment,   p1, open, fertilizer 4 (€20)                         -> 60.0
        s1  planting,    p2, cancelled
        g1  preparation, p3, 8h, tractor 1 day (€400)                         -> 480.0
    """
    crops = [
        Crop(id="c1", name="Wheat", crop_type="cereal"),
        Crop(id="c2", name="Tomato", crop_type="horticultural"),
    ]
    parcels = [
        Parcel(id="p1", name="North field", area=5.0, soil_type="clay", crop_id="c1"),
        Parcel(id="p2", name="South field", area=10.0, soil_type="loam", crop_id="c1"),
        Parcel(id="p3", name="Greenhouse", area=2.0, crop_id="c2"),
    ]
    equipment = [
        Equipment(id="e1", name="Tractor", type="tractor", hourly_cost=50.0),
        Equipment(id="e2", name="Sprayer", type="sprayer", hourly_cost=30.0),
    ]
    products = [
        Product(id="f1", name="Fertilizer NPK", type="fertilizer", price_per_unit=5.0),
        Product(id="sd1", name="Wheat seed", type="seed", price_per_unit=2.0),
    ]
    people = [Person(id="u1", name="Ana"), Person(id="u2", name="Rui")]

    activities = [
        Activity(
            id="h1",
            kind="harvest",
            state="completed",
            start=datetime(2024, 7, 1, 8),
            end=datetime(2024, 7, 1, 18),
            parcel_id="p1",
            responsible_id="u1",
            equipment=[EquipmentUsage("e1", 4, "hour")],
            products=[ProductUsage("f1", 12.5, "kg")],
            quantity_harvested=25000,
            harvest_unit="kg",
        ),
        Activity(
            id="h2",
            kind="harvest",
            state="completed",
            start=datetime(2024, 7, 2, 8),
            end=datetime(2024, 7, 2, 18),
            parcel_id="p2",
            responsible_id="u2",
            equipment=[EquipmentUsage("e2", 2, "hour")],
            quantity_harvested=30,
            harvest_unit="ton",
        ),
        Activity(
            id="t1",
            kind="treatment",
            state="pending",
            start=datetime(2024, 5, 10, 9),
            parcel_id="p1",
            responsible_id="u1",
            products=[ProductUsage("f1", 4, "l")],
        ),
        Activity(
            id="s1",
            kind="planting",
            state="cancelled",
            start=datetime(2024, 3, 1, 8),
            end=datetime(2024, 3, 1, 14),
            parcel_id="p2",
            products=[ProductUsage("sd1", 100, "kg")],
        ),
        Activity(
            id="g1",
            kind="preparation",
            state="completed",
            start=datetime(2024, 2, 1, 8),
            end=datetime(2024, 2, 1, 16),
            parcel_id="p3",
            responsible_id="u2",
            equipment=[EquipmentUsage("e1", 1, "day")],
        ),
    ]

    return InMemoryFarmRepository(
        activities=activities,
        parcels=parcels,
        crops=crops,
        equipment=equipment,
        products=products,
        people=people,
    )


@pytest.fixture
def farm():
    return build_farm()


@pytest.fixture
def cost_service(farm):
    return CostAggregatorService(farm, farm)


@pytest.fixture
def productivity_service(farm):
    return ProductivityAggregatorService(farm, farm)
