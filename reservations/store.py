# reservations/store.py

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional, Type

from bson import ObjectId
from fastapi import Request
from pydantic import BaseModel
from pymongo.errors import PyMongoError

from core.errors import NotFoundError, UpstreamError
from models.reservation import (
    AirportTransferReservationRow,
    CarReservationRow,
    ExcursionReservationRow,
    ReservationBase,
    ReservationStatus,
    ReservationType,
)

logger = logging.getLogger(__name__)

ROW_MODELS: Dict[ReservationType, Type[BaseModel]] = {
    ReservationType.CAR: CarReservationRow,
    ReservationType.EXCURSION: ExcursionReservationRow,
    ReservationType.AIRPORT: AirportTransferReservationRow,
}

DEFAULT_PICKUP_LOCATION = "Tunis"


class AdminReservations(BaseModel):
    car_reservations: List[CarReservationRow] = []
    excursion_reservations: List[ExcursionReservationRow] = []
    airport_reservations: List[AirportTransferReservationRow] = []


def _to_row(kind: ReservationType, doc: dict):
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return ROW_MODELS[kind](**doc)


class ReservationStore:
    """Async access to the three reservation collections."""

    def __init__(self, db):
        self.db = db

    async def insert(self, kind: ReservationType, record: ReservationBase):
        doc = record.model_dump(mode="json")
        if kind is ReservationType.CAR and not doc.get("pickup_location"):
            doc["pickup_location"] = DEFAULT_PICKUP_LOCATION
        doc["status"] = doc.get("status") or ReservationStatus.PENDING.value
        doc["created_at"] = datetime.utcnow()

        collection = self.db[kind.collection]
        try:
            result = await collection.insert_one(doc)
            new_doc = await collection.find_one({"_id": result.inserted_id})
        except PyMongoError as exc:
            logger.error("Insert into %s failed: %s", kind.collection, exc)
            raise UpstreamError(str(exc))

        if not new_doc:
            raise UpstreamError("Reservation could not be saved. Please try again.")
        return _to_row(kind, new_doc)

    async def select_all(self, kind: ReservationType, order_by: Optional[str] = None, ascending: bool = True):
        cursor = self.db[kind.collection].find()
        cursor = cursor.sort(order_by or kind.date_field, 1 if ascending else -1)
        try:
            docs = await cursor.to_list(length=None)
        except PyMongoError as exc:
            logger.error("Select from %s failed: %s", kind.collection, exc)
            raise UpstreamError(str(exc))
        return [_to_row(kind, doc) for doc in docs]

    async def get(self, kind: ReservationType, reservation_id: str):
        if not ObjectId.is_valid(reservation_id):
            raise NotFoundError(f"Reservation '{reservation_id}' not found")
        try:
            doc = await self.db[kind.collection].find_one({"_id": ObjectId(reservation_id)})
        except PyMongoError as exc:
            raise UpstreamError(str(exc))
        if not doc:
            raise NotFoundError(f"Reservation '{reservation_id}' not found")
        return _to_row(kind, doc)

    async def update_status(self, kind: ReservationType, reservation_id: str, status: ReservationStatus) -> None:
        if not ObjectId.is_valid(reservation_id):
            raise NotFoundError(f"Reservation '{reservation_id}' not found")
        try:
            result = await self.db[kind.collection].update_one(
                {"_id": ObjectId(reservation_id)},
                {"$set": {"status": status.value}},
            )
        except PyMongoError as exc:
            logger.error("Status update on %s/%s failed: %s", kind.collection, reservation_id, exc)
            raise UpstreamError(str(exc))
        if result.matched_count == 0:
            raise NotFoundError(f"Reservation '{reservation_id}' not found")

    async def fetch_admin_reservations(self) -> AdminReservations:
        cars, excursions, transfers = await asyncio.gather(
            self.select_all(ReservationType.CAR, "pickup_date"),
            self.select_all(ReservationType.EXCURSION, "date"),
            self.select_all(ReservationType.AIRPORT, "date"),
        )
        return AdminReservations(
            car_reservations=cars,
            excursion_reservations=excursions,
            airport_reservations=transfers,
        )


def get_reservation_store(request: Request) -> ReservationStore:
    return ReservationStore(request.app.mongodb)
