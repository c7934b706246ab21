"""Map service — marker de-overlap, marker extraction and viewport fitting.

deoverlap() keeps markers that share a coordinate from stacking on the same
pixel. Records are processed in input order with a running count per
coordinate (rounded to ``precision`` decimals): the first keeps its position,
the Nth gets ``offset_distance * (N - 1)`` added to both lat and lng, which
fans duplicates out along a diagonal. It is a deterministic heuristic, not a
real spreading layout: same input order, same output.

Records whose lat/lng are missing or do not parse as finite floats are passed
through untouched and do not take part in collision counting.
"""
import math
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from listing_hub.config import settings
from listing_hub.schemas.listing_schema import ListingRecord
from listing_hub.schemas.map_schema import MapBounds, MapMarker, MapViewport


def parse_coordinate(value) -> Optional[float]:
    """float() for numbers and numeric strings; None for anything unmappable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def coordinates_of(record: ListingRecord) -> Optional[Tuple[float, float]]:
    lat = parse_coordinate(record.lat)
    lng = parse_coordinate(record.lng)
    if lat is None or lng is None:
        return None
    return lat, lng


def deoverlap(
    records: Sequence[ListingRecord],
    offset_distance: Optional[float] = None,
    precision: Optional[int] = None,
) -> List[ListingRecord]:
    """Return copies of ``records`` with colliding coordinates fanned out."""
    if offset_distance is None:
        offset_distance = settings.marker_offset_distance
    if precision is None:
        precision = settings.marker_coordinate_precision

    # A single marker cannot collide; consumers center on it instead of fitting bounds.
    if len(records) <= 1:
        return [record.model_copy() for record in records]

    seen: Dict[Tuple[float, float], int] = {}
    result: List[ListingRecord] = []

    for record in records:
        coords = coordinates_of(record)
        if coords is None:
            result.append(record.model_copy())
            continue

        lat, lng = coords
        key = (round(lat, precision), round(lng, precision))
        count = seen.get(key, 0) + 1
        seen[key] = count

        shift = offset_distance * (count - 1)
        result.append(record.model_copy(update={"lat": lat + shift, "lng": lng + shift}))

    return result


def map_markers(records: Iterable[ListingRecord]) -> List[MapMarker]:
    """Markers for the mappable records, in order. Run deoverlap() first."""
    markers: List[MapMarker] = []
    for record in records:
        coords = coordinates_of(record)
        if coords is None:
            continue
        markers.append(
            MapMarker(
                id=record.id,
                provenance=record.provenance,
                title=record.title,
                price=record.price,
                lat=coords[0],
                lng=coords[1],
                slug=record.slug,
            )
        )
    return markers


def compute_viewport(markers: Sequence[MapMarker]) -> MapViewport:
    """Where the map should look.

    No markers: the default center. One marker: centered on it at street zoom.
    Several: bounds fitting all of them.
    """
    if not markers:
        lat, lng = settings.default_map_center
        return MapViewport(center_lat=lat, center_lng=lng)

    if len(markers) == 1:
        only = markers[0]
        return MapViewport(center_lat=only.lat, center_lng=only.lng, zoom=settings.single_marker_zoom)

    bounds = MapBounds(
        south=min(m.lat for m in markers),
        west=min(m.lng for m in markers),
        north=max(m.lat for m in markers),
        east=max(m.lng for m in markers),
    )
    return MapViewport(
        center_lat=(bounds.south + bounds.north) / 2,
        center_lng=(bounds.west + bounds.east) / 2,
        bounds=bounds,
    )
