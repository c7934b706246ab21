"""Pydantic schemas for map rendering of listings."""
from typing import List, Optional

from pydantic import BaseModel

from listing_hub.schemas.base_schema import CamelModel
from listing_hub.schemas.listing_schema import Provenance


class MapMarker(CamelModel):
    id: str
    provenance: Provenance
    title: str
    price: float
    lat: float
    lng: float
    slug: Optional[str] = None


class MapBounds(BaseModel):
    south: float
    west: float
    north: float
    east: float


class MapViewport(CamelModel):
    """Either a center + zoom (zero or one marker) or bounds to fit."""

    center_lat: float
    center_lng: float
    zoom: Optional[int] = None
    bounds: Optional[MapBounds] = None


class ListingMap(CamelModel):
    markers: List[MapMarker]
    viewport: MapViewport
    unmapped: int = 0
