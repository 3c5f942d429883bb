from fastapi import APIRouter, Body, Depends
from typing import Annotated

from catalog.store import CatalogStore, get_catalog
from core.errors import BookingError, to_http_exception
from models.configuration import AnyConfiguration
from pricing.engine import Quote, quote_configuration

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


@router.post("/quote", response_model=Quote)
async def quote(
    configuration: Annotated[AnyConfiguration, Body(discriminator="type")],
    catalog: CatalogStore = Depends(get_catalog),
):
    """Live total for a car rental, excursion or airport transfer configuration."""
    try:
        return quote_configuration(configuration, catalog)
    except BookingError as exc:
        raise to_http_exception(exc)
