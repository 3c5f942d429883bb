# main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    CANCELLED_BLOCKS_AVAILABILITY,
    CONFIRM_CARD_PAYMENTS,
    CORS_ORIGINS,
)
from core.logging import configure_logging
from database.connection import create_client, get_database

# Import routers
from admin.admin import router as admin_router
from auth.auth import router as auth_router
from availability.availability import router as availability_router
from bookings.bookings import router as bookings_router
from catalog.catalog import router as catalog_router
from pricing.pricing import router as pricing_router

from auth.sessions import ensure_admin_user, session_manager
from bookings.session import SessionRegistry
from catalog.store import get_catalog

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="JK Cars Booking API", version="1.0.0")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.booking_sessions = SessionRegistry()


def log_session_change(event, session):
    logger.info("Admin %s: %s", session.admin.email, event)


session_manager.subscribe(log_session_change)


@app.on_event("startup")
async def startup_db_client():
    get_catalog()
    app.mongodb_client = create_client()
    app.mongodb = get_database(app.mongodb_client)
    await ensure_admin_user(app.mongodb, ADMIN_EMAIL, ADMIN_PASSWORD)
    logger.info("Connected to MongoDB")
    if CONFIRM_CARD_PAYMENTS:
        logger.warning("Card bookings are stored as confirmed without any payment capture")
    if CANCELLED_BLOCKS_AVAILABILITY:
        logger.warning("Cancelled car reservations still block vehicle availability")


@app.on_event("shutdown")
async def shutdown_db_client():
    app.mongodb_client.close()
    logger.info("MongoDB connection closed")


# Include all routers
app.include_router(catalog_router)
app.include_router(pricing_router)
app.include_router(availability_router)
app.include_router(bookings_router)
app.include_router(auth_router)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
