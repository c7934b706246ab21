"""Pydantic schemas for the unified listing pipeline.

ListingRecord is the one shape every listing surface works with, whatever
collection it was read from. Attributes are snake_case in Python and
camelCase on the wire (``propertyType``, ``createdAt``...).
"""
import re
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Generic, List, Optional, Tuple, TypeVar, Union

from pydantic import ConfigDict, Field, field_serializer, field_validator, model_validator

from listing_hub.core.exceptions import ConfigurationError
from listing_hub.schemas.base_schema import CamelModel

T = TypeVar("T")


class Provenance(str, Enum):
    DIRECT = "direct"
    MARKETPLACE = "marketplace"
    DEVELOPER_UNIT = "developerUnit"


# Concatenation order of the aggregate; also the tie-break order for stable sorts.
PROVENANCE_ORDER: Tuple[Provenance, ...] = (
    Provenance.DIRECT,
    Provenance.MARKETPLACE,
    Provenance.DEVELOPER_UNIT,
)


class ContractType(str, Enum):
    SALE = "Sale"
    RENT = "Rent"


class FurnishingStatus(str, Enum):
    FURNISHED = "Furnished"
    UNFURNISHED = "Unfurnished"
    SEMI_FURNISHED = "Semi-Furnished"


class CompletionStatus(str, Enum):
    READY = "Ready"
    OFF_PLAN = "Off-Plan"
    OFF_PLAN_RESALE = "Off-plan resale"


class PropertyType(str, Enum):
    APARTMENT = "Apartment"
    HOUSE = "House"
    VILLA = "Villa"
    LAND = "Land"
    TOWN_HOUSE = "Town house"
    PENTHOUSE = "Penthouse"


class SortKey(str, Enum):
    DEFAULT = "default"
    PRICE_ASC = "priceAsc"
    PRICE_DESC = "priceDesc"

    @classmethod
    def parse(cls, value: Union[str, "SortKey", None]) -> "SortKey":
        """Accept the enum values plus the dashboard's snake_case spellings."""
        if value is None or value == "":
            return cls.DEFAULT
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        aliases = {"price_asc": cls.PRICE_ASC, "price_desc": cls.PRICE_DESC, "newest": cls.DEFAULT}
        if value in aliases:
            return aliases[value]
        raise ConfigurationError(f"Unknown sort key: '{value}'")


class ListingRecord(CamelModel):
    """A listing from any source, tagged with where it came from.

    ``id`` is only unique within its provenance. Numeric attributes use None
    for "unknown"; 0 is a real value. ``lat``/``lng`` may still be numeric
    strings as stored upstream.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    provenance: Provenance
    title: str = ""
    description: Optional[str] = None
    property_type: Optional[str] = None
    contract_type: Optional[ContractType] = None
    price: float = Field(0, ge=0, allow_inf_nan=False)
    location: Optional[str] = None

    bedrooms: Optional[float] = Field(None, ge=0)
    bathrooms: Optional[float] = Field(None, ge=0)
    sqft: Optional[float] = Field(None, ge=0)

    furnishing_status: Optional[str] = None
    completion_status: Optional[str] = None
    amenities: FrozenSet[str] = frozenset()

    lat: Optional[Union[float, str]] = None
    lng: Optional[Union[float, str]] = None
    created_at: Optional[datetime] = None

    images: List[str] = []
    slug: Optional[str] = None
    agent_id: Optional[str] = None
    project_id: Optional[str] = None
    developer_name: Optional[str] = None
    handover_date: Optional[str] = None
    payment_plan: Optional[str] = None
    units_available: Optional[int] = None

    @field_validator("amenities", mode="before")
    @classmethod
    def _none_amenities(cls, v):
        return frozenset() if v is None else v

    @field_validator("contract_type", mode="before")
    @classmethod
    def _loose_contract_type(cls, v):
        # Stored as free text; "rent" reads as Rent, anything unrecognised as unknown.
        if v is None or isinstance(v, ContractType):
            return v
        label = str(v).strip().lower()
        for contract in ContractType:
            if contract.value.lower() == label:
                return contract
        return None

    @field_validator("images", mode="before")
    @classmethod
    def _none_images(cls, v):
        return [] if v is None else v

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive datetimes; comparisons need one convention.
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_serializer("amenities")
    def _serialize_amenities(self, amenities: FrozenSet[str]) -> List[str]:
        return sorted(amenities)


class ListingCard(ListingRecord):
    """ListingRecord plus its price rendered in the viewer's currency."""

    display_price: str


class FilterSpec(CamelModel):
    """Declarative listing filter. Every field is optional; unset means no constraint.

    A record matches ``locations`` when its location is one of them, and
    ``amenities`` when it carries every tag listed. Empty lists count as unset.
    """

    model_config = ConfigDict(frozen=True)

    type: Optional[str] = None
    locations: Optional[List[str]] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_beds: Optional[float] = None
    min_baths: Optional[float] = None
    furnishing_status: Optional[str] = None
    completion_status: Optional[str] = None
    amenities: Optional[List[str]] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "FilterSpec":
        for name in ("min_price", "max_price", "min_beds", "min_baths"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ConfigurationError(
                f"min_price ({self.min_price}) is greater than max_price ({self.max_price})"
            )
        return self

    @classmethod
    def from_price_range(cls, price_range: Optional[str], **fields) -> "FilterSpec":
        """Build a spec from the profile search's price-range value.

        "500000-1000000" sets both bounds, "5000000+" only the minimum.
        """
        min_price, max_price = parse_price_range(price_range)
        return cls(min_price=min_price, max_price=max_price, **fields)


_RANGE_PATTERN = re.compile(r"^\s*(\d+)?\s*-\s*(\d+)?\s*$")
_OPEN_RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*\+\s*$")


def parse_price_range(price_range: Optional[str]) -> Tuple[Optional[float], Optional[float]]:
    """Parse '500000-1000000' / '5000000+' into (min, max)."""
    if not price_range:
        return None, None

    open_match = _OPEN_RANGE_PATTERN.match(price_range)
    if open_match:
        return float(open_match.group(1)), None

    match = _RANGE_PATTERN.match(price_range)
    if not match or not any(match.groups()):
        raise ConfigurationError(f"Malformed price range: '{price_range}'")
    low, high = match.groups()
    return (float(low) if low else None, float(high) if high else None)


class Page(CamelModel, Generic[T]):
    """One fixed-size window of an ordered collection."""

    items: List[T]
    total_pages: int
    total: int
    page: int
    page_size: int
