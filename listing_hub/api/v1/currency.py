"""Currency API router — rates, price formatting and display preference.
/api/v1/currency"""
from fastapi import APIRouter, Depends, Query, Request

from listing_hub.api.deps import get_currency_preferences
from listing_hub.api.responses import ok
from listing_hub.config import settings
from listing_hub.schemas.base_schema import ApiResponse
from listing_hub.schemas.currency_schema import (
    CurrencyPreferenceRead,
    CurrencyPreferenceUpdate,
    CurrencyRates,
    FormattedPrice,
)
from listing_hub.services.currency_service import CurrencyPreferences, convert_price, format_price

router = APIRouter()


@router.get("/rates", response_model=ApiResponse[CurrencyRates])
async def get_rates(request: Request):
    """Static conversion table against the base currency."""
    return ok(
        CurrencyRates(base=settings.base_currency, rates=settings.currency_rates),
        "Currency rates retrieved successfully",
        request,
    )


@router.get("/format", response_model=ApiResponse[FormattedPrice])
async def format_amount(
    request: Request,
    price: float = Query(..., ge=0, allow_inf_nan=False, description="Price in the base currency"),
    currency: str = Query(...),
):
    """Convert and format one base-currency price."""
    formatted = format_price(price, currency)
    return ok(
        FormattedPrice(
            price=price,
            currency=currency.strip().upper(),
            amount=float(convert_price(price, currency)),
            formatted=formatted,
        ),
        "Price formatted successfully",
        request,
    )


@router.get("/preferences/{user_id}", response_model=ApiResponse[CurrencyPreferenceRead])
async def get_preference(
    user_id: str,
    request: Request,
    prefs: CurrencyPreferences = Depends(get_currency_preferences),
):
    """The user's display currency, or the configured default."""
    return ok(
        CurrencyPreferenceRead(user_id=user_id, currency=await prefs.get(user_id)),
        "Currency preference retrieved successfully",
        request,
    )


@router.put("/preferences/{user_id}", response_model=ApiResponse[CurrencyPreferenceRead])
async def set_preference(
    user_id: str,
    payload: CurrencyPreferenceUpdate,
    request: Request,
    prefs: CurrencyPreferences = Depends(get_currency_preferences),
):
    """Store the user's display currency."""
    code = await prefs.set(user_id, payload.currency)
    return ok(
        CurrencyPreferenceRead(user_id=user_id, currency=code),
        "Currency preference updated successfully",
        request,
    )
