"""Sort engine — stable total orders over ListingRecords."""
from datetime import datetime, timezone
from typing import Iterable, List, Union

from listing_hub.schemas.listing_schema import ListingRecord, SortKey

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _created_at(record: ListingRecord) -> datetime:
    return record.created_at or _EPOCH


def sort_listings(records: Iterable[ListingRecord], key: Union[SortKey, str, None] = SortKey.DEFAULT) -> List[ListingRecord]:
    """Return a new list ordered by ``key``.

    Ties keep their input order for every key (``sorted`` is stable, and
    ``reverse=True`` preserves the order of equal elements), so repeated
    calls page identically.
    """
    sort_key = SortKey.parse(key)

    if sort_key is SortKey.PRICE_ASC:
        return sorted(records, key=lambda r: r.price)
    if sort_key is SortKey.PRICE_DESC:
        return sorted(records, key=lambda r: r.price, reverse=True)
    # Newest first; missing timestamps count as the epoch and end up last.
    return sorted(records, key=_created_at, reverse=True)
