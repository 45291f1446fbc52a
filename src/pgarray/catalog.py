"""Catalog metadata lookups for array type registration.

Registration only needs (array OID, scalar OID) for a type name. The live
lookup is an asyncpg round trip against pg_type; its result is captured in
a CatalogSnapshot so that registration itself stays synchronous.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple

import asyncpg

from pgarray.errors import CatalogLookupError
from pgarray.tracing import trace_catalog_operation

logger = logging.getLogger(__name__)

CATALOG_QUERY = """
    SELECT typname, oid, typarray
    FROM pg_type
    WHERE typarray <> 0
    ORDER BY oid
"""


class CatalogLookup(Protocol):
    """Resolves a type name to its (array OID, scalar OID) pair."""

    def lookup_type(self, typname: str) -> Optional[Tuple[int, int]]:
        """Return (array_oid, scalar_oid), or None when the type does not exist."""
        ...


class CatalogSnapshot:
    """Immutable pg_type rows keyed by type name."""

    def __init__(self, rows: Mapping[str, Tuple[int, int]]) -> None:
        self._rows: Dict[str, Tuple[int, int]] = {
            name: (int(array_oid), int(scalar_oid))
            for name, (array_oid, scalar_oid) in rows.items()
        }

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "CatalogSnapshot":
        """Build a snapshot from pg_type rows with typname, oid and typarray."""
        return cls({row["typname"]: (row["typarray"], row["oid"]) for row in records})

    def lookup_type(self, typname: str) -> Optional[Tuple[int, int]]:
        return self._rows.get(typname)

    def __contains__(self, typname: object) -> bool:
        return typname in self._rows

    def __len__(self) -> int:
        return len(self._rows)


async def fetch_catalog_snapshot(
    conn: Any,
    provider: str = "postgres",
    timeout: Optional[float] = None,
    trace: Optional[bool] = None,
) -> CatalogSnapshot:
    """Load array-capable pg_type rows from a live asyncpg connection.

    Args:
        conn: An asyncpg connection (or anything with an async fetch()).
        provider: Dialect name recorded on the tracing span.
        timeout: Seconds to wait for the round trip.
        trace: Force tracing on or off; None follows ARRAY_TRACE_CATALOG.

    Raises:
        CatalogLookupError: If the query fails or times out.
    """

    async def _run():
        return await asyncio.wait_for(conn.fetch(CATALOG_QUERY), timeout=timeout)

    try:
        rows = await trace_catalog_operation(
            "pgarray.catalog.fetch",
            provider=provider,
            sql=CATALOG_QUERY,
            operation=_run(),
            enabled=trace,
        )
    except asyncio.TimeoutError as exc:
        raise CatalogLookupError(f"catalog lookup timed out after {timeout}s") from exc
    except Exception as exc:
        raise CatalogLookupError(f"catalog lookup failed: {exc}") from exc

    snapshot = CatalogSnapshot.from_records(rows)
    logger.info("Loaded %d array-capable types from %s catalog", len(snapshot), provider)
    return snapshot


async def load_catalog_snapshot(
    dsn: str,
    provider: str = "postgres",
    timeout: Optional[float] = None,
    trace: Optional[bool] = None,
) -> CatalogSnapshot:
    """Open a short-lived asyncpg connection and load a catalog snapshot.

    Raises:
        CatalogLookupError: If the connection or the query fails.
    """
    try:
        conn: asyncpg.Connection = await asyncpg.connect(dsn, timeout=timeout or 60)
    except (OSError, asyncio.TimeoutError, asyncpg.PostgresError) as exc:
        raise CatalogLookupError(f"could not connect for catalog lookup: {exc}") from exc
    try:
        return await fetch_catalog_snapshot(conn, provider=provider, timeout=timeout, trace=trace)
    finally:
        await conn.close()
