import json

import pytest
from pydantic import ValidationError

from drivewise.catalog import (
    get_vehicle_by_id,
    get_vehicles_by_category,
    load_catalog,
    search_vehicles,
)


def test_catalog_loads_full_lineup():
    catalog = load_catalog()
    assert len(catalog) == 22
    assert len({v.id for v in catalog}) == 22
    assert all(1 <= v.reliability <= 5 for v in catalog)


def test_vehicles_are_frozen():
    camry = get_vehicle_by_id("camry-le")
    with pytest.raises(ValidationError):
        camry.msrp = 1


def test_lookup_by_id():
    camry = get_vehicle_by_id("camry-le")
    assert camry.msrp == 28400
    assert camry.display_name == "2024 Camry LE"
    assert get_vehicle_by_id("missing") is None


def test_lookup_by_category():
    assert len(get_vehicles_by_category("all")) == 22
    trucks = get_vehicles_by_category("Truck")
    assert {v.model for v in trucks} == {"Tacoma"}
    assert get_vehicles_by_category("Minivan") == ()


def test_search_is_case_insensitive_on_model_and_trim():
    assert {v.id for v in search_vehicles("rav4")} >= {"rav4-le", "rav4-prime-se"}
    assert {v.id for v in search_vehicles("trd pro")} == {"tacoma-trd-pro", "4runner-trd-pro"}
    assert search_vehicles("corvette") == ()


def test_custom_catalog_file(tmp_path):
    path = tmp_path / "cars.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "x",
                    "model": "X",
                    "trim": "Base",
                    "year": 2024,
                    "msrp": 20000,
                    "category": "Sedan",
                    "fuel_type": "Gas",
                    "mpg": "30/35",
                    "mpg_combined": 32,
                    "seating": 5,
                    "reliability": 4.0,
                }
            ]
        )
    )
    catalog = load_catalog(str(path))
    assert [v.id for v in catalog] == ["x"]
    assert get_vehicle_by_id("x", catalog).image == ""
    assert get_vehicle_by_id("camry-le", catalog) is None
