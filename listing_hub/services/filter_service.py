"""Filter engine — applies a FilterSpec to a list of ListingRecords.

Predicates, all conjunctive, checked in this order:
- type:               exact match on property_type
- locations:          record location must be one of the requested labels
- min_price/max_price inclusive bounds on price
- min_beds/min_baths: record value >= bound; a record with no value fails
                      once a bound is set (0 is a value and compares normally)
- furnishing_status,
  completion_status:  exact match
- amenities:          record amenities must include every requested tag

Empty ``locations`` / ``amenities`` lists impose no constraint.
"""
from typing import Iterable, List, Optional

from listing_hub.schemas.listing_schema import FilterSpec, ListingRecord


def _meets_minimum(value: Optional[float], bound: Optional[float]) -> bool:
    if bound is None:
        return True
    if value is None:
        return False
    return value >= bound


def matches(record: ListingRecord, spec: FilterSpec) -> bool:
    """True when ``record`` satisfies every constraint set on ``spec``."""
    if spec.type is not None and record.property_type != spec.type:
        return False
    if spec.locations and record.location not in spec.locations:
        return False
    if spec.min_price is not None and record.price < spec.min_price:
        return False
    if spec.max_price is not None and record.price > spec.max_price:
        return False
    if not _meets_minimum(record.bedrooms, spec.min_beds):
        return False
    if not _meets_minimum(record.bathrooms, spec.min_baths):
        return False
    if spec.furnishing_status is not None and record.furnishing_status != spec.furnishing_status:
        return False
    if spec.completion_status is not None and record.completion_status != spec.completion_status:
        return False
    if spec.amenities and not record.amenities.issuperset(spec.amenities):
        return False
    return True


def filter_listings(records: Iterable[ListingRecord], spec: Optional[FilterSpec] = None) -> List[ListingRecord]:
    """Return a new list with the records matching ``spec`` (all of them when spec is None)."""
    if spec is None:
        return list(records)
    return [record for record in records if matches(record, spec)]
