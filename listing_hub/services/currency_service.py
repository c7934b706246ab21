"""Currency service — display-time price conversion and per-user currency preference.

Prices are stored in the base currency (settings.base_currency). Conversion
multiplies by a static rate from settings.currency_rates; rates are supplied,
never fetched. An unsupported currency code is a caller bug and raises
ConfigurationError.

The preferred display currency lives behind PreferenceStore so the web layer
can use the database while tests use InMemoryPreferenceStore.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Optional, Protocol, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_hub.config import settings
from listing_hub.core.exceptions import ConfigurationError
from listing_hub.core.logging import get_logger
from listing_hub.models.preference_model import UserPreference

logger = get_logger(__name__)

Number = Union[int, float, Decimal]


def _rates(rates: Optional[Mapping[str, float]]) -> Mapping[str, float]:
    return settings.currency_rates if rates is None else rates


def supported_currencies(rates: Optional[Mapping[str, float]] = None) -> List[str]:
    return sorted(_rates(rates))


def normalize_currency(currency: str, rates: Optional[Mapping[str, float]] = None) -> str:
    """Upper-cased code, or ConfigurationError when there is no rate for it."""
    rates = _rates(rates)
    code = (currency or "").strip().upper()
    if code not in rates:
        raise ConfigurationError(
            f"Unsupported currency: '{currency}'",
            detail={"supported": sorted(rates)},
        )
    return code


def convert_price(
    price: Number,
    currency: str,
    rates: Optional[Mapping[str, float]] = None,
) -> Decimal:
    """Convert a base-currency price into ``currency``, rounded half-up to whole units."""
    table = _rates(rates)
    code = normalize_currency(currency, table)
    # str() round-trip keeps 0.27 as 0.27 instead of its binary expansion.
    converted = Decimal(str(price)) * Decimal(str(table[code]))
    if not converted.is_finite():
        raise ConfigurationError(f"Price must be a finite number, got {price}")
    return converted.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def format_price(
    price: Number,
    currency: str,
    rates: Optional[Mapping[str, float]] = None,
) -> str:
    """'USD 270,000' for format_price(1_000_000, 'USD') with the default rates."""
    code = normalize_currency(currency, _rates(rates))
    amount = convert_price(price, code, rates)
    return f"{code} {amount:,}"


class PreferenceStore(Protocol):
    async def get_currency(self, user_id: str) -> Optional[str]: ...

    async def set_currency(self, user_id: str, currency: str) -> None: ...


class InMemoryPreferenceStore:
    """Dict-backed store; lives as long as the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get_currency(self, user_id: str) -> Optional[str]:
        return self._data.get(user_id)

    async def set_currency(self, user_id: str, currency: str) -> None:
        self._data[user_id] = currency


class SqlPreferenceStore:
    """Store backed by the user_preferences table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_currency(self, user_id: str) -> Optional[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserPreference.currency).where(UserPreference.user_id == user_id)
            )
            return result.scalar_one_or_none()

    async def set_currency(self, user_id: str, currency: str) -> None:
        async with self._session_factory() as session:
            try:
                pref = await session.get(UserPreference, user_id)
                if pref is None:
                    session.add(UserPreference(user_id=user_id, currency=currency))
                else:
                    pref.currency = currency
                await session.commit()
            except Exception:
                await session.rollback()
                raise


class CurrencyPreferences:
    """Reads and writes a user's display currency through a PreferenceStore."""

    def __init__(
        self,
        store: PreferenceStore,
        default: Optional[str] = None,
        rates: Optional[Mapping[str, float]] = None,
    ):
        self._store = store
        self._rates = _rates(rates)
        self.default = normalize_currency(default or settings.default_currency, self._rates)

    async def get(self, user_id: Optional[str]) -> str:
        if not user_id:
            return self.default
        stored = await self._store.get_currency(user_id)
        if stored is None or stored.upper() not in self._rates:
            return self.default
        return stored.upper()

    async def set(self, user_id: str, currency: str) -> str:
        code = normalize_currency(currency, self._rates)
        await self._store.set_currency(user_id, code)
        logger.info("Currency preference for %s set to %s", user_id, code)
        return code

    async def format_for(self, user_id: Optional[str], price: Number) -> str:
        return format_price(price, await self.get(user_id), self._rates)
