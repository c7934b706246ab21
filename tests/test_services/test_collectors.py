"""Tests for the database collectors — row re-keying, opt-ins, developer units."""
import pytest
from sqlalchemy.exc import OperationalError

from listing_hub.core.exceptions import SourceUnavailable
from listing_hub.schemas.listing_schema import Provenance
from listing_hub.services.aggregator import load_listings, load_marketplace_catalog
from listing_hub.services.collectors import (
    collect_developer_units,
    collect_direct_properties,
    collect_marketplace_properties,
    parse_range_start,
)
from tests.conftest import (
    hours_later,
    make_opt_in,
    make_property,
    make_unit_link,
    make_unit_type,
)


class TestParseRangeStart:
    def test_range(self):
        assert parse_range_start("1,200,000 - 1,800,000") == 1_200_000

    def test_single_value(self):
        assert parse_range_start("AED 950,000") == 950_000

    def test_decimal(self):
        assert parse_range_start("750.5 - 900") == 750.5

    def test_empty_or_text(self):
        assert parse_range_start(None) is None
        assert parse_range_start("on request") is None


class TestDirectCollector:
    @pytest.mark.asyncio
    async def test_rekeys_storage_columns(self, session_factory, db_session):
        db_session.add(make_property("agent-1", title="Marina Loft", type="Penthouse", slug="marina-loft"))
        await db_session.commit()

        rows = await collect_direct_properties("agent-1", session_factory)

        assert len(rows) == 1
        row = rows[0]
        assert row["property_type"] == "Penthouse"
        assert row["title"] == "Marina Loft"
        assert row["price"] == 1_000_000
        assert row["amenities"] == ["Pool", "Gym"]
        assert "provenance" not in row

    @pytest.mark.asyncio
    async def test_only_own_agent_listings(self, session_factory, db_session):
        db_session.add_all([
            make_property("agent-1"),
            make_property("agent-2"),
            make_property("agent-1", creator_type="developer"),
        ])
        await db_session.commit()

        rows = await collect_direct_properties("agent-1", session_factory)
        assert len(rows) == 1

    @pytest.mark.asyncio
    async def test_empty_collection(self, session_factory):
        assert await collect_direct_properties("nobody", session_factory) == []

    @pytest.mark.asyncio
    async def test_storage_error_becomes_source_unavailable(self):
        def broken_factory():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        with pytest.raises(SourceUnavailable) as exc_info:
            await collect_direct_properties("agent-1", broken_factory)

        assert exc_info.value.source == Provenance.DIRECT.value
        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestMarketplaceCollector:
    @pytest.mark.asyncio
    async def test_active_opt_ins_only(self, session_factory, db_session):
        shared = make_property("agent-2", shared=True, title="Shared Villa")
        removed = make_property("agent-3", shared=True, title="Removed")
        db_session.add_all([shared, removed])
        db_session.add_all([
            make_opt_in("agent-1", shared),
            make_opt_in("agent-1", removed, status="removed"),
        ])
        await db_session.commit()

        rows = await collect_marketplace_properties("agent-1", session_factory)

        assert [r["title"] for r in rows] == ["Shared Villa"]
        assert rows[0]["agent_id"] == "agent-2"


class TestDeveloperUnitCollector:
    @pytest.mark.asyncio
    async def test_unit_inherits_project_fields(self, session_factory, db_session):
        project = make_property(
            "dev-1",
            creator_type="developer",
            creator_id="dev-1",
            title="Creek Heights",
            location="Dubai Creek Harbour",
            completion_status="Off-Plan",
            handover_date="Q4 2026",
            lat=25.2,
            lng=55.35,
        )
        unit = make_unit_type(project, name="2BR Type A")
        db_session.add_all([project, unit])
        db_session.add(make_unit_link("agent-1", unit))
        await db_session.commit()

        rows = await collect_developer_units("agent-1", session_factory)

        assert len(rows) == 1
        row = rows[0]
        assert row["title"] == "Creek Heights - 2BR Type A"
        assert row["price"] == 1_200_000
        assert row["sqft"] == 750
        assert row["location"] == "Dubai Creek Harbour"
        assert row["completion_status"] == "Off-Plan"
        assert row["project_id"] == project.id
        assert row["developer_name"] == "Developer"
        assert (row["lat"], row["lng"]) == (25.2, 55.35)

    @pytest.mark.asyncio
    async def test_unit_without_price_range_uses_project_price(self, session_factory, db_session):
        project = make_property("dev-1", creator_type="developer", price=3_000_000)
        unit = make_unit_type(project, price_range=None)
        db_session.add_all([project, unit])
        db_session.add(make_unit_link("agent-1", unit))
        await db_session.commit()

        rows = await collect_developer_units("agent-1", session_factory)
        assert rows[0]["price"] == 3_000_000


class TestDatabaseAggregate:
    @pytest.mark.asyncio
    async def test_three_sources_in_order(self, session_factory, db_session):
        own = make_property("agent-1", title="Own")
        shared = make_property("agent-2", shared=True, title="Shared")
        project = make_property("dev-1", creator_type="developer", title="Project")
        unit = make_unit_type(project, name="Studio")
        db_session.add_all([own, shared, project, unit])
        db_session.add_all([make_opt_in("agent-1", shared), make_unit_link("agent-1", unit)])
        await db_session.commit()

        records = await load_listings("agent-1", session_factory)

        assert [(r.title, r.provenance) for r in records] == [
            ("Own", Provenance.DIRECT),
            ("Shared", Provenance.MARKETPLACE),
            ("Project - Studio", Provenance.DEVELOPER_UNIT),
        ]

    @pytest.mark.asyncio
    async def test_marketplace_catalog_excludes_own_and_added(self, session_factory, db_session):
        added = make_property("agent-2", shared=True, title="Already added")
        available = make_property("agent-3", shared=True, title="Available", created_at=hours_later(1))
        private = make_property("agent-3", shared=False, title="Private")
        own = make_property("agent-1", shared=True, title="Own shared")
        db_session.add_all([added, available, private, own])
        db_session.add(make_opt_in("agent-1", added))
        await db_session.commit()

        records = await load_marketplace_catalog("agent-1", session_factory)

        assert [r.title for r in records] == ["Available"]
        assert records[0].provenance == Provenance.MARKETPLACE
