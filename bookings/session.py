"""
Checkout state machine: review -> customer details -> payment -> confirmed.

A session owns one service configuration, re-prices it with the pricing
engine and, on confirmation, persists the reservation through the store.
"""

import logging
import time
import uuid
from collections import OrderedDict
from datetime import date, datetime
from enum import Enum
from typing import Callable, List, Literal, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel

from catalog.store import ADD_ONS, CatalogStore
from core.config import BOOKING_SESSION_LIMIT, BOOKING_SESSION_TTL_MINUTES, CONFIRM_CARD_PAYMENTS
from core.errors import NotFoundError, TransitionError, UpstreamError, ValidationError
from bookings.reference import generate_reference_code
from models.configuration import (
    AirportTransferConfiguration,
    CarRentalConfiguration,
    ExcursionConfiguration,
)
from models.reservation import (
    AirportTransferReservationCreate,
    CarReservationCreate,
    ExcursionReservationCreate,
    PaymentMethod,
    ReservationBase,
    ReservationStatus,
    ReservationType,
)
from pricing.engine import AIRPORT_LABELS, VEHICLE_CLASS_LABELS, Quote, quote_configuration

logger = logging.getLogger(__name__)

COUNTRY_CODES = [
    {"code": "+216", "country": "Tunisia"},
    {"code": "+33", "country": "France"},
    {"code": "+1", "country": "USA/Canada"},
    {"code": "+44", "country": "UK"},
    {"code": "+49", "country": "Germany"},
    {"code": "+39", "country": "Italy"},
    {"code": "+34", "country": "Spain"},
    {"code": "+213", "country": "Algeria"},
    {"code": "+212", "country": "Morocco"},
    {"code": "+20", "country": "Egypt"},
    {"code": "+971", "country": "UAE"},
    {"code": "+966", "country": "Saudi Arabia"},
    {"code": "+90", "country": "Turkey"},
    {"code": "+32", "country": "Belgium"},
    {"code": "+41", "country": "Switzerland"},
]
DEFAULT_PHONE_PREFIX = "+216"


class BookingStep(str, Enum):
    REVIEWING = "reviewing"
    DETAILS_CAPTURE = "details_capture"
    PAYMENT_SELECTION = "payment_selection"
    CONFIRMED = "confirmed"


STEP_ORDER = [
    BookingStep.REVIEWING,
    BookingStep.DETAILS_CAPTURE,
    BookingStep.PAYMENT_SELECTION,
    BookingStep.CONFIRMED,
]


class CustomerDetails(BaseModel):
    name: str = ""
    email: str = ""
    phone_prefix: str = DEFAULT_PHONE_PREFIX
    phone: str = ""
    driver_license: Optional[str] = None
    nationality: Optional[str] = None
    date_of_birth: Optional[date] = None
    id_type: Literal["id", "passport"] = "id"
    id_number: Optional[str] = None

    @property
    def full_phone(self) -> str:
        phone = self.phone.strip()
        if phone.startswith("+"):
            return phone
        return f"{self.phone_prefix}{phone}"


def initial_status(payment_method: PaymentMethod, confirm_card: bool = CONFIRM_CARD_PAYMENTS) -> ReservationStatus:
    # No payment is captured; a card choice alone marks the booking confirmed.
    if confirm_card and payment_method == PaymentMethod.CARD:
        return ReservationStatus.CONFIRMED
    return ReservationStatus.PENDING


def validate_details(details: CustomerDetails, needs_license: bool) -> CustomerDetails:
    required = {"name": details.name, "email": details.email, "phone": details.phone}
    if needs_license:
        required["driver_license"] = details.driver_license
    missing = [field for field, value in required.items() if not (value or "").strip()]
    if missing:
        raise ValidationError(
            "Please complete all required information before confirming.", fields=missing
        )
    try:
        normalized = validate_email(details.email.strip(), check_deliverability=False).normalized
    except EmailNotValidError as exc:
        raise ValidationError(str(exc), fields=["email"])
    return details.model_copy(update={
        "name": details.name.strip(),
        "email": normalized,
        "phone": details.phone.strip(),
        "driver_license": details.driver_license.strip() if details.driver_license else None,
    })


class BookingSession:
    def __init__(
        self,
        configuration,
        catalog: CatalogStore,
        handed_off_total: Optional[int] = None,
        session_id: Optional[str] = None,
    ):
        if configuration is None:
            raise NotFoundError("No active booking. Please configure your reservation again.", redirect_to="/fleet")
        self.id = session_id or uuid.uuid4().hex
        self.configuration = configuration
        self.catalog = catalog
        self.quote: Quote = quote_configuration(configuration, catalog)
        self.handed_off_total = handed_off_total
        self.step = BookingStep.REVIEWING
        self.customer: Optional[CustomerDetails] = None
        self.payment_method = PaymentMethod.AGENCY
        self.error: Optional[str] = None
        self.reference_code: Optional[str] = None
        self.reservation_id: Optional[str] = None
        self.reservation = None
        self.created_at = datetime.utcnow()
        self._submitting = False

        if self.price_mismatch:
            logger.warning(
                "Handed-off total %s differs from recomputed total %s for %s booking",
                handed_off_total, self.total, configuration.type,
            )

    @property
    def total(self) -> int:
        return self.quote.total

    @property
    def price_mismatch(self) -> bool:
        return self.handed_off_total is not None and self.handed_off_total != self.total

    @property
    def needs_driver_license(self) -> bool:
        return isinstance(self.configuration, CarRentalConfiguration)

    def _require(self, step: BookingStep) -> None:
        if self.step != step:
            raise TransitionError(f"Booking is at step '{self.step.value}', expected '{step.value}'")

    def advance(self) -> BookingStep:
        self._require(BookingStep.REVIEWING)
        self.step = BookingStep.DETAILS_CAPTURE
        return self.step

    def submit_details(self, details: CustomerDetails) -> BookingStep:
        self._require(BookingStep.DETAILS_CAPTURE)
        try:
            self.customer = validate_details(details, self.needs_driver_license)
        except ValidationError as exc:
            self.error = exc.message
            raise
        self.error = None
        self.step = BookingStep.PAYMENT_SELECTION
        return self.step

    def select_payment(self, payment_method: PaymentMethod) -> None:
        self._require(BookingStep.PAYMENT_SELECTION)
        self.payment_method = PaymentMethod(payment_method)

    def back(self) -> BookingStep:
        if self.step in (BookingStep.REVIEWING, BookingStep.CONFIRMED):
            raise TransitionError(f"Cannot go back from step '{self.step.value}'")
        self.step = STEP_ORDER[STEP_ORDER.index(self.step) - 1]
        self.error = None
        return self.step

    def build_reservation(self, reference_code: str) -> Tuple[ReservationType, ReservationBase]:
        """Package configuration, recomputed total and customer into a store insert."""
        customer = self.customer
        common = dict(
            reference_code=reference_code,
            total_price=self.total,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.full_phone,
            payment_method=self.payment_method,
            status=initial_status(self.payment_method),
        )
        config = self.configuration
        if isinstance(config, CarRentalConfiguration):
            vehicle = self.catalog.get_vehicle(config.car_id)
            return ReservationType.CAR, CarReservationCreate(
                car_id=vehicle.id,
                car_name=f"{vehicle.name} {vehicle.model}",
                pickup_date=config.pickup_date,
                return_date=config.return_date,
                pickup_location=config.pickup_location,
                return_location=config.return_location or None,
                add_ons=self.quote.add_ons,
                driver_license=customer.driver_license,
                **common,
            )
        if isinstance(config, ExcursionConfiguration):
            package = self.catalog.get_excursion(config.excursion_id)
            return ReservationType.EXCURSION, ExcursionReservationCreate(
                excursion_id=package.id,
                excursion_title=package.title,
                date=config.date,
                persons=config.persons,
                car_type=config.car_type,
                add_ons=self.quote.add_ons,
                **common,
            )
        if isinstance(config, AirportTransferConfiguration):
            return ReservationType.AIRPORT, AirportTransferReservationCreate(
                airport=config.airport,
                pickup_location=config.pickup_location,
                date=config.date,
                time=config.time,
                passengers=config.passengers,
                car_preference=config.car_preference,
                **common,
            )
        raise TypeError(f"Unsupported service configuration: {type(config).__name__}")

    async def confirm(self, store, payment_method: Optional[PaymentMethod] = None) -> BookingStep:
        self._require(BookingStep.PAYMENT_SELECTION)
        if self._submitting:
            raise TransitionError("This booking is already being submitted.")
        if payment_method is not None:
            self.select_payment(payment_method)

        kind, record = self.build_reservation(generate_reference_code())
        self._submitting = True
        self.error = None
        try:
            row = await store.insert(kind, record)
        except UpstreamError as exc:
            self.error = exc.message
            logger.error("Booking %s could not be saved: %s", self.id, exc.message)
            raise
        finally:
            self._submitting = False

        self.reservation = row
        self.reservation_id = row.id
        self.reference_code = row.reference_code or row.id
        self.step = BookingStep.CONFIRMED
        logger.info("Reservation %s saved (%s, total %s)", self.reference_code, kind.value, self.total)
        return self.step

    def receipt(self) -> dict:
        """Data for the booking confirmation document."""
        self._require(BookingStep.CONFIRMED)
        customer_rows = [
            ["Full Name", self.customer.name],
            ["Email", self.customer.email],
            ["Phone", self.customer.full_phone],
        ]
        if self.needs_driver_license and self.customer.driver_license:
            customer_rows.append(["Driver's License", self.customer.driver_license])
        return {
            "reference": self.reference_code,
            "issued_on": (self.reservation.created_at if self.reservation else self.created_at).date().isoformat(),
            "total_price": self.total,
            "payment_method": self.payment_method.value,
            "customer": customer_rows,
            "details": self._detail_rows(),
        }

    def _detail_rows(self) -> List[List[str]]:
        config = self.configuration
        if isinstance(config, CarRentalConfiguration):
            vehicle = self.catalog.get_vehicle(config.car_id)
            days = self.quote.days
            rows = [
                ["Service Type", "Car Rental"],
                ["Vehicle", f"{vehicle.name} - {vehicle.model}"],
                ["Year", str(vehicle.year)],
                ["Pickup Location", config.pickup_location.capitalize()],
                ["Return Location", (config.return_location or config.pickup_location).capitalize()],
                ["Pickup Date", config.pickup_date.isoformat()],
                ["Return Date", config.return_date.isoformat()],
                ["Rental Period", f"{days} {'day' if days == 1 else 'days'}"],
            ]
        elif isinstance(config, ExcursionConfiguration):
            package = self.catalog.get_excursion(config.excursion_id)
            rows = [
                ["Service Type", "Excursion"],
                ["Excursion", package.title],
                ["Destination", package.destination],
                ["Date", config.date.isoformat()],
                ["Number of Persons", str(config.persons)],
                ["Vehicle Type", VEHICLE_CLASS_LABELS[config.car_type]],
            ]
        else:
            rows = [
                ["Service Type", "Airport Transfer"],
                ["Airport", AIRPORT_LABELS[config.airport]],
                ["Pickup/Drop-off Location", config.pickup_location.capitalize()],
                ["Date", config.date.isoformat()],
                ["Time", config.time or "N/A"],
                ["Passengers", str(config.passengers)],
                ["Vehicle", VEHICLE_CLASS_LABELS[config.car_preference]],
            ]
        if self.quote.add_ons:
            rows.append(["Add-ons", ", ".join(ADD_ONS[key].label for key in self.quote.add_ons)])
        return rows

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "step": self.step.value,
            "configuration": self.configuration.model_dump(mode="json"),
            "quote": self.quote.model_dump(),
            "handed_off_total": self.handed_off_total,
            "price_mismatch": self.price_mismatch,
            "customer": self.customer.model_dump(mode="json") if self.customer else None,
            "payment_method": self.payment_method.value,
            "reference_code": self.reference_code,
            "reservation_id": self.reservation_id,
            "error": self.error,
        }


class SessionRegistry:
    """
    In-process booking sessions, least recently used first.

    Sessions idle for longer than `ttl_seconds` are evicted on the next add or
    lookup, confirmed ones included, and the oldest session is dropped once
    `max_sessions` is reached. An evicted session answers like a missing one.
    """

    def __init__(
        self,
        ttl_seconds: float = BOOKING_SESSION_TTL_MINUTES * 60,
        max_sessions: int = BOOKING_SESSION_LIMIT,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[str, Tuple[BookingSession, float]]" = OrderedDict()

    def _evict_expired(self, now: float) -> None:
        while self._sessions:
            session_id, (_, last_seen) = next(iter(self._sessions.items()))
            if now - last_seen <= self.ttl_seconds:
                break
            del self._sessions[session_id]
            logger.debug("Booking session %s expired", session_id)

    def add(self, session: BookingSession) -> BookingSession:
        now = self._clock()
        self._evict_expired(now)
        while self._sessions and len(self._sessions) >= self.max_sessions:
            session_id, _ = self._sessions.popitem(last=False)
            logger.info("Booking session %s evicted, registry full", session_id)
        self._sessions[session.id] = (session, now)
        self._sessions.move_to_end(session.id)
        return session

    def get(self, session_id: str) -> BookingSession:
        now = self._clock()
        self._evict_expired(now)
        entry = self._sessions.get(session_id)
        if entry is None:
            raise NotFoundError("No active booking. Please configure your reservation again.", redirect_to="/fleet")
        self._sessions[session_id] = (entry[0], now)
        self._sessions.move_to_end(session_id)
        return entry[0]

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)
