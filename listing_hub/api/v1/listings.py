"""Listings API router — the agent listing surfaces.
/api/v1/agents/{agent_id}/...

Each route runs the pipeline from scratch: load → filter → sort, then either
paginate (list views) or de-overlap (map view).
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_hub.api.deps import (
    get_aggregator,
    get_currency_preferences,
    get_filter_spec,
    get_session_factory,
)
from listing_hub.api.responses import ok
from listing_hub.config import settings
from listing_hub.schemas.base_schema import ApiResponse, Meta
from listing_hub.schemas.listing_schema import FilterSpec, ListingCard, ListingRecord, Page, SortKey
from listing_hub.schemas.map_schema import ListingMap
from listing_hub.services.aggregator import ListingAggregator, load_marketplace_catalog
from listing_hub.services.currency_service import CurrencyPreferences, format_price, normalize_currency
from listing_hub.services.filter_service import filter_listings
from listing_hub.services.map_service import compute_viewport, deoverlap, map_markers
from listing_hub.services.pagination_service import paginate
from listing_hub.services.sort_service import sort_listings

router = APIRouter()


async def _display_currency(
    prefs: CurrencyPreferences,
    currency: Optional[str],
    viewer_id: Optional[str],
) -> str:
    if currency:
        return normalize_currency(currency)
    return await prefs.get(viewer_id)


def _cards(records: List[ListingRecord], currency: str) -> List[ListingCard]:
    return [
        ListingCard.model_validate(
            {**record.model_dump(), "display_price": format_price(record.price, currency)}
        )
        for record in records
    ]


def _page_response(records: List[ListingRecord], page: int, page_size: int, currency: str) -> Page[ListingCard]:
    window = paginate(records, page_size, page)
    return Page[ListingCard](
        items=_cards(window.items, currency),
        total_pages=window.total_pages,
        total=window.total,
        page=window.page,
        page_size=window.page_size,
    )


@router.get("/{agent_id}/listings", response_model=ApiResponse[Page[ListingCard]])
async def list_agent_listings(
    agent_id: str,
    request: Request,
    spec: FilterSpec = Depends(get_filter_spec),
    aggregator: ListingAggregator = Depends(get_aggregator),
    prefs: CurrencyPreferences = Depends(get_currency_preferences),
    sort: str = Query(SortKey.DEFAULT.value, description="default, priceAsc, priceDesc"),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    currency: Optional[str] = Query(None, description="Display currency; defaults to the viewer's preference"),
    viewer_id: Optional[str] = Query(None),
):
    """Direct, marketplace and developer-unit listings for one agent, filtered, sorted and paged."""
    records = await aggregator.load_listings(agent_id)
    ordered = sort_listings(filter_listings(records, spec), sort)
    display = await _display_currency(prefs, currency, viewer_id)
    data = _page_response(ordered, page, page_size, display)
    return ok(
        data,
        "Listings loaded successfully",
        request,
        meta=Meta(page=data.page, page_size=data.page_size, total=data.total),
    )


@router.get("/{agent_id}/listings/map", response_model=ApiResponse[ListingMap])
async def map_agent_listings(
    agent_id: str,
    request: Request,
    spec: FilterSpec = Depends(get_filter_spec),
    aggregator: ListingAggregator = Depends(get_aggregator),
    sort: str = Query(SortKey.DEFAULT.value),
):
    """Map markers for the agent's listings, with stacked coordinates fanned out."""
    records = await aggregator.load_listings(agent_id)
    ordered = sort_listings(filter_listings(records, spec), sort)
    markers = map_markers(deoverlap(ordered))
    return ok(
        ListingMap(
            markers=markers,
            viewport=compute_viewport(markers),
            unmapped=len(ordered) - len(markers),
        ),
        "Listing map built successfully",
        request,
    )


@router.get("/{agent_id}/marketplace", response_model=ApiResponse[Page[ListingCard]])
async def browse_marketplace(
    agent_id: str,
    request: Request,
    spec: FilterSpec = Depends(get_filter_spec),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    prefs: CurrencyPreferences = Depends(get_currency_preferences),
    sort: str = Query(SortKey.DEFAULT.value),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    currency: Optional[str] = Query(None),
    viewer_id: Optional[str] = Query(None),
):
    """Other agents' shared listings that ``agent_id`` has not added yet."""
    records = await load_marketplace_catalog(agent_id, session_factory)
    ordered = sort_listings(filter_listings(records, spec), sort)
    display = await _display_currency(prefs, currency, viewer_id)
    data = _page_response(ordered, page, page_size, display)
    return ok(
        data,
        "Marketplace listings loaded successfully",
        request,
        meta=Meta(page=data.page, page_size=data.page_size, total=data.total),
    )
