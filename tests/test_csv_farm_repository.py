"""Tests for CsvFarmRepository."""

import asyncio
from datetime import datetime

import pytest

from farm_analytics.application.services.cost_aggregator_service import CostAggregatorService
from farm_analytics.domain.entities.activity_query import ActivityQuery
from farm_analytics.infrastructure.repositories.csv_farm_repository import CsvFarmRepository

FILES = {
    "parcels.csv": "id,name,area,soil_type,crop_id\np1,North field,5,clay,c1\np2,South field,10,,c1\n",
    "crops.csv": "id,name,crop_type\nc1,Wheat,cereal\n",
    "equipment.csv": "id,name,type,hourly_cost\ne1,Tractor,tractor,50\ne2,Old sprayer,sprayer,\n",
    "products.csv": "id,name,type,price_per_unit\nf1,Fertilizer NPK,fertilizer,5\n",
    "people.csv": "id,name\nu1,Ana\n",
    "activities.csv": (
        "id,kind,state,start,end,parcel_id,responsible_id,quantity_harvested,harvest_unit\n"
        "h1,harvest,completed,2024-07-01 08:00,2024-07-01 18:00,p1,u1,25000,kg\n"
        "t1,treatment,pending,2024-05-10 09:00,,p1,u1,,\n"
        "m1,maintenance,completed,2024-06-01 08:00,2024-06-01 13:00,p2,,,\n"
    ),
    "equipment_usage.csv": "activity_id,equipment_id,time_used,time_unit\nh1,e1,4,hour\nm1,e2,1,day\n",
    "product_usage.csv": "activity_id,product_id,quantity,unit\nh1,f1,12.5,kg\nt1,f1,4,l\n",
}


@pytest.fixture
def data_dir(tmp_path):
    for name, content in FILES.items():
        (tmp_path / name).write_text(content, encoding="utf-8")
    return tmp_path


def test_loads_entities(data_dir):
    """Test every CSV file is parsed into entities."""
    repo = CsvFarmRepository(str(data_dir))

    assert repo.summary() == {
        "activities": 3,
        "parcels": 2,
        "crops": 1,
        "equipment": 2,
        "products": 1,
        "people": 1,
    }
    assert repo.parcels["p2"].soil_type is None
    assert repo.equipment["e2"].hourly_cost is None

    harvest = repo.activities["h1"]
    assert harvest.start == datetime(2024, 7, 1, 8)
    assert harvest.quantity_harvested == 25000
    assert harvest.equipment[0].equipment_id == "e1"
    assert harvest.products[0].quantity == 12.5
    assert repo.activities["t1"].end is None
    assert repo.activities["m1"].responsible_id is None


def test_queries_expand_references(data_dir):
    """Test queries return activities with parcel, crop and people expanded."""
    repo = CsvFarmRepository(str(data_dir))
    activities = asyncio.run(repo.find_activities(ActivityQuery(crop_id="c1", states=("completed",))))

    assert {a.id for a in activities} == {"h1", "m1"}
    harvest = next(a for a in activities if a.id == "h1")
    assert harvest.parcel.crop.name == "Wheat"
    assert harvest.responsible.name == "Ana"
    assert harvest.equipment[0].equipment.name == "Tractor"
    # stored entities stay unexpanded
    assert repo.activities["h1"].parcel is None


def test_costs_from_csv(data_dir):
    """Test the cost aggregator over CSV data, including a default rate."""
    repo = CsvFarmRepository(str(data_dir))
    service = CostAggregatorService(repo, repo)

    north = asyncio.run(service.costs_for_parcel("p1")).value
    assert north.total == pytest.approx(422.5)

    south = asyncio.run(service.costs_for_parcel("p2")).value
    # unpriced sprayer for one day at €50/h plus 5h maintenance labor
    assert south.total == pytest.approx(8 * 50 + 50)
    assert south.activities[0].resolution_failures == ["e2"]


def test_optional_files_may_be_absent(tmp_path):
    """Test only activities and parcels are required."""
    (tmp_path / "parcels.csv").write_text(FILES["parcels.csv"], encoding="utf-8")
    (tmp_path / "activities.csv").write_text(FILES["activities.csv"], encoding="utf-8")

    repo = CsvFarmRepository(str(tmp_path))
    assert repo.summary()["crops"] == 0
    assert repo.activities["h1"].equipment == []


def test_missing_required_files(tmp_path):
    """Test a missing directory or required file raises."""
    with pytest.raises(FileNotFoundError):
        CsvFarmRepository(str(tmp_path / "nowhere"))
    with pytest.raises(FileNotFoundError):
        CsvFarmRepository(str(tmp_path))
