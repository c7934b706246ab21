"""API dependencies — session factory, listing services and API-key authentication.

The collectors open one session each so they can run concurrently; routes
therefore depend on the session *factory*, not on a request-scoped session.
Tests override get_session_factory to point at a throwaway database.
"""
import secrets
from typing import Annotated, List, Optional

from fastapi import Depends, HTTPException, Query, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_hub.config import settings
from listing_hub.database import async_session_factory
from listing_hub.schemas.listing_schema import FilterSpec, parse_price_range
from listing_hub.services.aggregator import ListingAggregator, build_aggregator
from listing_hub.services.currency_service import CurrencyPreferences, SqlPreferenceStore


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory shared by the collectors and the preference store."""
    return async_session_factory


SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


def get_aggregator(session_factory: SessionFactory) -> ListingAggregator:
    return build_aggregator(session_factory)


def get_currency_preferences(session_factory: SessionFactory) -> CurrencyPreferences:
    return CurrencyPreferences(SqlPreferenceStore(session_factory))


# ---------------------------------------------------------------------------
# Query parameters → FilterSpec
# ---------------------------------------------------------------------------

def get_filter_spec(
    type: Optional[str] = Query(None, description="Exact property type, e.g. Apartment"),
    locations: Optional[List[str]] = Query(None, description="Repeat for several locations"),
    min_price: Optional[float] = Query(None),
    max_price: Optional[float] = Query(None),
    price_range: Optional[str] = Query(None, description="'500000-1000000' or '5000000+'"),
    min_beds: Optional[float] = Query(None),
    min_baths: Optional[float] = Query(None),
    furnishing_status: Optional[str] = Query(None),
    completion_status: Optional[str] = Query(None),
    amenities: Optional[List[str]] = Query(None, description="Repeat; all must be present"),
) -> FilterSpec:
    """Explicit min/max price win over the bounds parsed from price_range."""
    range_min, range_max = parse_price_range(price_range)
    return FilterSpec(
        type=type,
        locations=locations,
        min_price=min_price if min_price is not None else range_min,
        max_price=max_price if max_price is not None else range_max,
        min_beds=min_beds,
        min_baths=min_baths,
        furnishing_status=furnishing_status,
        completion_status=completion_status,
        amenities=amenities,
    )


# ---------------------------------------------------------------------------
# API Key authentication
# ---------------------------------------------------------------------------

_api_key_header = APIKeyHeader(
    name="X-API-Key",
    auto_error=False,
    description="API key. Configured via API_KEY in .env",
)


async def verify_api_key(
    api_key: Annotated[str | None, Security(_api_key_header)],
) -> str:
    """Validate the X-API-Key header (constant-time compare).

    With no API_KEY configured the endpoints are open; startup logs a warning.

    Raises:
        HTTPException 401: key missing or wrong.
    """
    if not settings.api_key:
        return ""

    if not api_key or not secrets.compare_digest(api_key, settings.api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key. Use the X-API-Key header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    return api_key


RequireApiKey = Depends(verify_api_key)
