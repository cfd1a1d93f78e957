"""Static vehicle catalog.

The lineup ships as ``data/vehicles.json`` and is read once into an immutable
tuple of frozen :class:`VehicleData` records.  Ranking functions receive the
catalog as an argument and default to this one.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from .models import VehicleData

CATALOG_PATH = Path(__file__).resolve().parent / "data" / "vehicles.json"

Catalog = Tuple[VehicleData, ...]


@lru_cache()
def load_catalog(path: Optional[str] = None) -> Catalog:
    """Load and validate the vehicle lineup."""
    source = Path(path) if path else CATALOG_PATH
    with source.open("r", encoding="utf-8") as f:
        rows = json.load(f)
    return tuple(VehicleData(**row) for row in rows)


def _resolve(catalog: Optional[Catalog]) -> Catalog:
    return load_catalog() if catalog is None else catalog


def get_vehicle_by_id(vehicle_id: str, catalog: Optional[Catalog] = None) -> Optional[VehicleData]:
    for vehicle in _resolve(catalog):
        if vehicle.id == vehicle_id:
            return vehicle
    return None


def get_vehicles_by_category(category: str, catalog: Optional[Catalog] = None) -> Catalog:
    """Vehicles in ``category``; ``"all"`` returns the whole lineup."""
    vehicles = _resolve(catalog)
    if category == "all":
        return vehicles
    return tuple(v for v in vehicles if v.category == category)


def search_vehicles(query: str, catalog: Optional[Catalog] = None) -> Catalog:
    """Case-insensitive match on model or trim name."""
    q = query.lower()
    return tuple(
        v for v in _resolve(catalog) if q in v.model.lower() or q in v.trim.lower()
    )
