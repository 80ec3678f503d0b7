"""Example usage of the farm analytics aggregators."""

import asyncio
import json
import logging
from datetime import datetime

from farm_analytics.domain.entities.activity import Activity, EquipmentUsage, ProductUsage
from farm_analytics.domain.entities.crop import Crop
from farm_analytics.domain.entities.equipment import Equipment
from farm_analytics.domain.entities.parcel import Parcel
from farm_analytics.domain.entities.product import Product
from farm_analytics.infrastructure.repositories.in_memory_farm_repository import (
    InMemoryFarmRepository,
)
from farm_analytics.presentation.wiring import build_dispatchers

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def sample_farm() -> InMemoryFarmRepository:
    """A vineyard with three yearly harvests and some field work."""
    activities = [
        Activity(
            id=f"harvest-{year}",
            kind="harvest",
            state="completed",
            start=datetime(year, 9, 15, 7),
            end=datetime(year, 9, 15, 17),
            parcel_id="p1",
            equipment=[EquipmentUsage("e1", 6, "hour")],
            quantity_harvested=kilograms,
            harvest_unit="kg",
        )
        for year, kilograms in ((2022, 21000), (2023, 24000), (2024, 27500))
    ]
    activities.append(
        Activity(
            id="treatment-2024",
            kind="treatment",
            state="completed",
            start=datetime(2024, 5, 2, 8),
            end=datetime(2024, 5, 2, 12),
            parcel_id="p1",
            products=[ProductUsage("f1", 40, "l")],
        )
    )
    return InMemoryFarmRepository(
        activities=activities,
        parcels=[Parcel(id="p1", name="Hillside vineyard", area=3.0, crop_id="c1")],
        crops=[Crop(id="c1", name="Touriga Nacional", crop_type="vine")],
        equipment=[Equipment(id="e1", name="Harvester", hourly_cost=80.0)],
        products=[Product(id="f1", name="Copper fungicide", type="fungicide", price_per_unit=7.5)],
    )


async def main():
    """Example usage."""
    dispatchers = build_dispatchers(sample_farm())
    costs = dispatchers["costs"]
    productivity = dispatchers["productivity"]

    # Example 1: Parcel costs
    print("=" * 60)
    print("Example 1: Parcel costs")
    print("=" * 60)
    result = await costs.dispatch({"kind": "compute-parcel-costs", "payload": {"parcel_id": "p1"}})
    if result["ok"]:
        value = result["value"]
        print(f"Total: {value['total']:.2f} (equipment {value['equipment']:.2f}, "
              f"product {value['product']:.2f}, labor {value['labor']:.2f})")
        print(f"Cost per hectare: {value['metrics']['cost_per_area']:.2f}")
    else:
        logger.error(f"Cost aggregation failed: {result['detail']}")

    # Example 2: Productivity trend
    print("\n" + "=" * 60)
    print("Example 2: Productivity trend")
    print("=" * 60)
    trend = await productivity.dispatch({"kind": "analyze-trends", "payload": {"parcel_id": "p1"}})
    print(json.dumps(trend, indent=2))

    # Example 3: Insights on the trend
    print("\n" + "=" * 60)
    print("Example 3: Insights")
    print("=" * 60)
    if trend["ok"]:
        insights = await productivity.dispatch(
            {"kind": "generate-insights", "payload": {"data": trend["value"]}}
        )
        for insight in insights["value"]:
            print(f"- {insight['type']}: {insight['message']}")


if __name__ == "__main__":
    asyncio.run(main())
