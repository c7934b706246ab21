"""Pydantic schemas for the currency endpoints."""
from typing import Dict

from pydantic import Field

from listing_hub.schemas.base_schema import CamelModel


class CurrencyRates(CamelModel):
    base: str
    rates: Dict[str, float]


class FormattedPrice(CamelModel):
    price: float
    currency: str
    amount: float
    formatted: str


class CurrencyPreferenceRead(CamelModel):
    user_id: str
    currency: str


class CurrencyPreferenceUpdate(CamelModel):
    currency: str = Field(..., min_length=3, max_length=3)
