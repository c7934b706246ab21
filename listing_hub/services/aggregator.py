"""Aggregator — merges the three source collectors into one tagged listing list.

Load sequence:
1. All collectors start at once (asyncio.gather) and are awaited together.
2. If any collector failed, a single SourceUnavailable naming every failed
   source is raised and nothing from the successful ones is returned.
3. Otherwise rows are concatenated in PROVENANCE_ORDER and validated into
   ListingRecords with their provenance stamped.

Ids are source-local: a marketplace row and a direct row with the same id
are both kept.
"""
import asyncio
import time
from typing import Dict, List, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listing_hub.core.exceptions import ConfigurationError, SourceUnavailable
from listing_hub.core.logging import ensure_correlation_id, get_logger
from listing_hub.schemas.listing_schema import PROVENANCE_ORDER, ListingRecord, Provenance
from listing_hub.services.collectors import Collector, collect_marketplace_catalog, database_collectors

logger = get_logger(__name__)


class ListingAggregator:
    """Fan-out/fan-in over one collector per provenance."""

    def __init__(self, collectors: Mapping[Provenance, Collector]):
        missing = [p.value for p in PROVENANCE_ORDER if p not in collectors]
        if missing:
            raise ConfigurationError(f"No collector registered for: {', '.join(missing)}")
        self._collectors: Dict[Provenance, Collector] = dict(collectors)

    async def load_listings(self, agent_id: str) -> List[ListingRecord]:
        """Load every listing shown for ``agent_id``, all-or-nothing."""
        ensure_correlation_id()
        started = time.monotonic()

        results = await asyncio.gather(
            *(self._collectors[p](agent_id) for p in PROVENANCE_ORDER),
            return_exceptions=True,
        )

        failures: List[SourceUnavailable] = []
        for provenance, result in zip(PROVENANCE_ORDER, results):
            if isinstance(result, SourceUnavailable):
                failures.append(result)
            elif isinstance(result, asyncio.CancelledError):
                raise result
            elif isinstance(result, Exception):
                # Collectors are expected to wrap their own errors; anything else is still a failed source.
                wrapped = SourceUnavailable(
                    f"Could not load {provenance.value} listings",
                    source=provenance.value,
                    detail=str(result),
                )
                wrapped.__cause__ = result
                failures.append(wrapped)

        if failures:
            sources = ", ".join(f.source or "unknown" for f in failures)
            logger.error(
                "Listing load failed for agent %s (sources: %s)", agent_id, sources,
                extra={"agent_id": agent_id},
            )
            error = SourceUnavailable(
                f"Listings unavailable: {sources}",
                failures=failures,
                detail=[f.detail for f in failures],
            )
            raise error from failures[0]

        records: List[ListingRecord] = []
        for provenance, rows in zip(PROVENANCE_ORDER, results):
            records.extend(
                ListingRecord.model_validate({**row, "provenance": provenance})
                for row in rows
            )

        logger.info(
            "Loaded %d listings for agent %s", len(records), agent_id,
            extra={
                "agent_id": agent_id,
                "count": len(records),
                "duration": round(time.monotonic() - started, 3),
            },
        )
        return records


def build_aggregator(session_factory: async_sessionmaker[AsyncSession]) -> ListingAggregator:
    """Aggregator wired to the database collectors."""
    return ListingAggregator(database_collectors(session_factory))


async def load_listings(
    agent_id: str,
    session_factory: async_sessionmaker[AsyncSession],
) -> List[ListingRecord]:
    """Entry point used by the listing surfaces."""
    return await build_aggregator(session_factory).load_listings(agent_id)


async def load_marketplace_catalog(
    agent_id: str,
    session_factory: async_sessionmaker[AsyncSession],
) -> List[ListingRecord]:
    """Shared listings the agent can still add, for the marketplace tab."""
    rows = await collect_marketplace_catalog(agent_id, session_factory)
    return [
        ListingRecord.model_validate({**row, "provenance": Provenance.MARKETPLACE})
        for row in rows
    ]


class ListingFeed:
    """Last published listings for one agent, refreshed from scratch on demand.

    Every refresh re-runs the whole load. A refresh publishes only if it is
    still the newest one started and the feed has not been closed, so a slow
    response can never overwrite a newer one. A failed refresh leaves the
    previous publication in place and re-raises.
    """

    def __init__(self, aggregator: ListingAggregator, agent_id: str):
        self._aggregator = aggregator
        self.agent_id = agent_id
        self._generation = 0
        self._closed = False
        self._records: Optional[List[ListingRecord]] = None

    @property
    def records(self) -> List[ListingRecord]:
        return list(self._records or [])

    @property
    def loaded(self) -> bool:
        return self._records is not None

    @property
    def closed(self) -> bool:
        return self._closed

    async def refresh(self) -> bool:
        """Reload and publish. Returns False when the result was superseded and dropped."""
        if self._closed:
            return False

        self._generation += 1
        generation = self._generation

        records = await self._aggregator.load_listings(self.agent_id)

        if self._closed or generation != self._generation:
            logger.debug(
                "Discarding stale listing load for agent %s (generation %d < %d)",
                self.agent_id, generation, self._generation,
                extra={"agent_id": self.agent_id},
            )
            return False

        self._records = records
        return True

    def close(self) -> None:
        """Abandon the feed; in-flight refreshes finish without publishing."""
        self._closed = True
