"""Source collectors — read one listing collection each and re-key it for ListingRecord.

Three collectors feed the aggregator:
- direct:        properties owned by the agent
- marketplace:   other agents' shared properties the agent opted into
- developerUnit: developer unit types the agent displays on their page

Each collector opens its own session so the aggregator can run them
concurrently. They return plain dicts keyed by ListingRecord field names and
never set ``provenance``; the aggregator stamps it. An empty collection is
``[]``. A failed fetch raises SourceUnavailable with the cause chained.
"""
import re
from decimal import Decimal
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_hub.core.exceptions import SourceUnavailable
from listing_hub.core.logging import get_logger
from listing_hub.models.agent_property_model import AgentProperty
from listing_hub.models.property_model import Property
from listing_hub.models.unit_type_model import AgentUnitType, UnitType
from listing_hub.schemas.listing_schema import Provenance

logger = get_logger(__name__)

Collector = Callable[[str], Awaitable[List[Dict[str, Any]]]]

_FETCH_ERRORS = (SQLAlchemyError, OSError)


def _to_float(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def property_row_to_dict(prop: Property) -> Dict[str, Any]:
    """Re-key a properties row from storage column names to ListingRecord fields."""
    return {
        "id": prop.id,
        "title": prop.title,
        "description": prop.description,
        "property_type": prop.type,
        "contract_type": prop.contract_type,
        "price": _to_float(prop.price) or 0.0,
        "location": prop.location,
        "bedrooms": prop.bedrooms,
        "bathrooms": prop.bathrooms,
        "sqft": prop.sqft,
        "furnishing_status": prop.furnishing_status,
        "completion_status": prop.completion_status,
        "amenities": list(prop.amenities or []),
        "lat": prop.lat,
        "lng": prop.lng,
        "created_at": prop.created_at,
        "images": list(prop.images or []),
        "slug": prop.slug,
        "agent_id": prop.agent_id,
        "handover_date": prop.handover_date,
        "payment_plan": prop.payment_plan,
    }


_NUMBER_PATTERN = re.compile(r"\d[\d,\s]*(?:\.\d+)?")


def parse_range_start(raw: Optional[str]) -> Optional[float]:
    """Lower end of a developer range string: '1,200,000 - 1,800,000' → 1200000.0."""
    if not raw:
        return None
    match = _NUMBER_PATTERN.search(raw)
    if not match:
        return None
    try:
        return float(re.sub(r"[,\s]", "", match.group()))
    except ValueError:
        return None


def unit_row_to_dict(unit: UnitType, project: Property) -> Dict[str, Any]:
    """Flatten a unit type with its parent project into ListingRecord fields.

    Location, coordinates and status come from the project. Price and size are
    the starting values of the unit's ranges; a unit without a usable price
    range shows the project's price.
    """
    price = parse_range_start(unit.price_range)
    if price is None:
        price = _to_float(project.price) or 0.0

    return {
        "id": unit.id,
        "title": f"{project.title} - {unit.name}",
        "description": unit.notes or project.description,
        "property_type": project.type or "Apartment",
        "contract_type": project.contract_type or "Sale",
        "price": price,
        "location": project.location,
        "sqft": parse_range_start(unit.size_range),
        "completion_status": project.completion_status,
        "amenities": list(project.amenities or []),
        "lat": project.lat,
        "lng": project.lng,
        "created_at": unit.created_at,
        "images": list(unit.images or project.images or []),
        "slug": project.slug,
        "agent_id": project.agent_id,
        "project_id": project.id,
        "developer_name": "Developer" if project.creator_id else None,
        "handover_date": project.handover_date,
        "payment_plan": project.payment_plan,
        "units_available": unit.units_available,
    }


async def _run_fetch(
    source: Provenance,
    agent_id: str,
    session_factory: async_sessionmaker[AsyncSession],
    fetch: Callable[[AsyncSession, str], Awaitable[List[Dict[str, Any]]]],
) -> List[Dict[str, Any]]:
    try:
        async with session_factory() as session:
            rows = await fetch(session, agent_id)
    except _FETCH_ERRORS as e:
        logger.warning(
            "Source %s failed for agent %s: %s", source.value, agent_id, str(e),
            extra={"agent_id": agent_id, "source": source.value},
        )
        raise SourceUnavailable(
            f"Could not load {source.value} listings",
            source=source.value,
            detail=str(e),
        ) from e

    logger.debug(
        "Source %s returned %d rows", source.value, len(rows),
        extra={"agent_id": agent_id, "source": source.value, "count": len(rows)},
    )
    return rows


async def _fetch_direct(session: AsyncSession, agent_id: str) -> List[Dict[str, Any]]:
    result = await session.execute(
        select(Property)
        .where(Property.agent_id == agent_id, Property.creator_type == "agent")
        .order_by(Property.created_at.desc())
    )
    return [property_row_to_dict(p) for p in result.scalars().all()]


async def _fetch_marketplace(session: AsyncSession, agent_id: str) -> List[Dict[str, Any]]:
    # Outer join so opt-ins pointing at deleted properties come back as None and are dropped.
    result = await session.execute(
        select(AgentProperty, Property)
        .outerjoin(Property, AgentProperty.property_id == Property.id)
        .where(AgentProperty.agent_id == agent_id, AgentProperty.status == "active")
        .order_by(AgentProperty.created_at.desc())
    )
    return [property_row_to_dict(prop) for _, prop in result.all() if prop is not None]


async def _fetch_developer_units(session: AsyncSession, agent_id: str) -> List[Dict[str, Any]]:
    result = await session.execute(
        select(UnitType, Property)
        .join(AgentUnitType, AgentUnitType.unit_type_id == UnitType.id)
        .join(Property, UnitType.project_id == Property.id)
        .where(AgentUnitType.agent_id == agent_id)
        .order_by(AgentUnitType.created_at.desc())
    )
    return [unit_row_to_dict(unit, project) for unit, project in result.all()]


async def _fetch_marketplace_catalog(session: AsyncSession, agent_id: str) -> List[Dict[str, Any]]:
    added = select(AgentProperty.property_id).where(
        AgentProperty.agent_id == agent_id,
        AgentProperty.status == "active",
    )
    result = await session.execute(
        select(Property)
        .where(
            Property.shared.is_(True),
            Property.agent_id != agent_id,
            Property.id.not_in(added),
        )
        .order_by(Property.created_at.desc())
    )
    return [property_row_to_dict(p) for p in result.scalars().all()]


async def collect_direct_properties(
    agent_id: str, session_factory: async_sessionmaker[AsyncSession]
) -> List[Dict[str, Any]]:
    """Properties the agent owns, newest first."""
    return await _run_fetch(Provenance.DIRECT, agent_id, session_factory, _fetch_direct)


async def collect_marketplace_properties(
    agent_id: str, session_factory: async_sessionmaker[AsyncSession]
) -> List[Dict[str, Any]]:
    """Marketplace properties with an active opt-in by the agent."""
    return await _run_fetch(Provenance.MARKETPLACE, agent_id, session_factory, _fetch_marketplace)


async def collect_developer_units(
    agent_id: str, session_factory: async_sessionmaker[AsyncSession]
) -> List[Dict[str, Any]]:
    """Developer unit types the agent shows on their page."""
    return await _run_fetch(Provenance.DEVELOPER_UNIT, agent_id, session_factory, _fetch_developer_units)


async def collect_marketplace_catalog(
    agent_id: str, session_factory: async_sessionmaker[AsyncSession]
) -> List[Dict[str, Any]]:
    """Shared properties of other agents that this agent has not opted into yet."""
    return await _run_fetch(Provenance.MARKETPLACE, agent_id, session_factory, _fetch_marketplace_catalog)


def database_collectors(session_factory: async_sessionmaker[AsyncSession]) -> Dict[Provenance, Collector]:
    """The three aggregate collectors bound to one session factory."""
    return {
        Provenance.DIRECT: partial(collect_direct_properties, session_factory=session_factory),
        Provenance.MARKETPLACE: partial(collect_marketplace_properties, session_factory=session_factory),
        Provenance.DEVELOPER_UNIT: partial(collect_developer_units, session_factory=session_factory),
    }
