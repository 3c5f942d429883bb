"""
Read-only fleet, excursion and add-on catalogs.

The JSON files under `catalog/data/` are produced by the deployment pipeline
and loaded once; nothing mutates the records at runtime.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from core.errors import NotFoundError
from models.vehicle import AddOn, ExcursionPackage, Vehicle

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"

# Car add-ons are charged per rental day, excursion add-ons once per booking.
ADD_ONS: Dict[str, AddOn] = {
    addon.key: addon
    for addon in (
        AddOn(key="gps", label="GPS Navigation", price=5, service="car", per_day=True),
        AddOn(key="babySeat", label="Baby Seat", price=8, service="car", per_day=True),
        AddOn(key="insurance", label="Extra Insurance", price=15, service="car", per_day=True),
        AddOn(key="driver", label="Driver Service", price=40, service="car", per_day=True),
        AddOn(key="guide", label="Professional Guide", price=30, service="excursion", per_day=False),
        AddOn(key="lunch", label="Traditional Lunch", price=25, service="excursion", per_day=False),
        AddOn(key="airportDropoff", label="Airport Drop-off", price=40, service="excursion", per_day=False),
    )
}

# Older excursion links send the drop-off add-on as "airport".
ADD_ON_ALIASES = {"airport": "airportDropoff"}


def add_ons_for(service: str) -> List[AddOn]:
    return [addon for addon in ADD_ONS.values() if addon.service == service]


def normalize_add_ons(keys: Iterable[str]) -> List[str]:
    """Strip blanks, resolve aliases and drop duplicates while keeping order."""
    seen: List[str] = []
    for key in keys:
        key = (key or "").strip()
        if not key:
            continue
        key = ADD_ON_ALIASES.get(key, key)
        if key not in seen:
            seen.append(key)
    return seen


class CatalogStore:
    def __init__(self, vehicles: Iterable[Vehicle], excursions: Iterable[ExcursionPackage]):
        self._vehicles: Tuple[Vehicle, ...] = tuple(vehicles)
        self._excursions: Tuple[ExcursionPackage, ...] = tuple(excursions)
        self._vehicles_by_id = {v.id: v for v in self._vehicles}
        self._excursions_by_id = {e.id: e for e in self._excursions}

    @classmethod
    def from_directory(cls, directory: Path = DATA_DIR) -> "CatalogStore":
        with open(directory / "vehicles.json", encoding="utf-8") as fh:
            vehicles = [Vehicle(**raw) for raw in json.load(fh)]
        with open(directory / "excursions.json", encoding="utf-8") as fh:
            excursions = [ExcursionPackage(**raw) for raw in json.load(fh)]
        logger.info("Loaded catalog: %d vehicles, %d excursions", len(vehicles), len(excursions))
        return cls(vehicles, excursions)

    def list_vehicles(self) -> List[Vehicle]:
        return list(self._vehicles)

    def list_excursions(self) -> List[ExcursionPackage]:
        return list(self._excursions)

    def find_vehicle(self, vehicle_id: Optional[str]) -> Optional[Vehicle]:
        return self._vehicles_by_id.get(vehicle_id or "")

    def find_excursion(self, excursion_id: Optional[str]) -> Optional[ExcursionPackage]:
        return self._excursions_by_id.get(excursion_id or "")

    def get_vehicle(self, vehicle_id: Optional[str]) -> Vehicle:
        vehicle = self.find_vehicle(vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle '{vehicle_id}' not found", redirect_to="/fleet")
        return vehicle

    def get_excursion(self, excursion_id: Optional[str]) -> ExcursionPackage:
        excursion = self.find_excursion(excursion_id)
        if excursion is None:
            raise NotFoundError(f"Excursion '{excursion_id}' not found", redirect_to="/excursions")
        return excursion


_default_catalog: Optional[CatalogStore] = None


def get_catalog() -> CatalogStore:
    """FastAPI dependency returning the process-wide catalog, loading it on first use."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = CatalogStore.from_directory()
    return _default_catalog
