# bookings.py

from fastapi import APIRouter, Body, Depends, Request
from pydantic import BaseModel
from typing import Annotated

from bookings.handoff import parse_handoff
from bookings.session import COUNTRY_CODES, BookingSession, CustomerDetails, SessionRegistry
from catalog.store import CatalogStore, get_catalog
from core.errors import BookingError, to_http_exception
from models.configuration import AnyConfiguration
from models.reservation import PaymentMethod
from reservations.store import ReservationStore, get_reservation_store

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


# --- Request Models ---

class HandoffRequest(BaseModel):
    query: str


class ConfirmRequest(BaseModel):
    payment_method: PaymentMethod = PaymentMethod.AGENCY


# --- Dependencies ---

def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.booking_sessions


def get_booking_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> BookingSession:
    try:
        return registry.get(session_id)
    except BookingError as exc:
        raise to_http_exception(exc)


# --- Booking Session Endpoints ---

@router.get("/country-codes")
async def country_codes():
    return COUNTRY_CODES


@router.post("/sessions", status_code=201)
async def create_session(
    configuration: Annotated[AnyConfiguration, Body(discriminator="type")],
    catalog: CatalogStore = Depends(get_catalog),
    registry: SessionRegistry = Depends(get_session_registry),
):
    try:
        session = registry.add(BookingSession(configuration, catalog))
    except BookingError as exc:
        raise to_http_exception(exc)
    return session.snapshot()


@router.post("/sessions/from-query", status_code=201)
async def create_session_from_query(
    payload: HandoffRequest,
    catalog: CatalogStore = Depends(get_catalog),
    registry: SessionRegistry = Depends(get_session_registry),
):
    """Starts checkout from the configuration pages' query string; the price is recomputed."""
    try:
        handoff = parse_handoff(payload.query, catalog)
        session = registry.add(BookingSession(handoff.configuration, catalog, handoff.handed_off_total))
    except BookingError as exc:
        raise to_http_exception(exc)
    return session.snapshot()


@router.get("/sessions/{session_id}")
async def get_session(session: BookingSession = Depends(get_booking_session)):
    return session.snapshot()


@router.post("/sessions/{session_id}/advance")
async def advance(session: BookingSession = Depends(get_booking_session)):
    try:
        session.advance()
    except BookingError as exc:
        raise to_http_exception(exc)
    return session.snapshot()


@router.post("/sessions/{session_id}/details")
async def submit_details(details: CustomerDetails, session: BookingSession = Depends(get_booking_session)):
    try:
        session.submit_details(details)
    except BookingError as exc:
        raise to_http_exception(exc)
    return session.snapshot()


@router.post("/sessions/{session_id}/confirm")
async def confirm(
    payload: ConfirmRequest,
    session: BookingSession = Depends(get_booking_session),
    store: ReservationStore = Depends(get_reservation_store),
):
    """Persists the reservation; on a store failure the session stays at payment selection."""
    try:
        await session.confirm(store, payload.payment_method)
    except BookingError as exc:
        raise to_http_exception(exc)
    return session.snapshot()


@router.post("/sessions/{session_id}/back")
async def back(session: BookingSession = Depends(get_booking_session)):
    try:
        session.back()
    except BookingError as exc:
        raise to_http_exception(exc)
    return session.snapshot()


@router.get("/sessions/{session_id}/receipt")
async def receipt(session: BookingSession = Depends(get_booking_session)):
    try:
        return session.receipt()
    except BookingError as exc:
        raise to_http_exception(exc)


@router.delete("/sessions/{session_id}", status_code=200)
async def abandon_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    registry.discard(session_id)
    return {"message": "Booking session discarded"}
