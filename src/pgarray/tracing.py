"""OTEL tracing for catalog round trips."""

import hashlib
from typing import Awaitable, Optional

from pgarray.config import get_env_bool


def trace_enabled() -> bool:
    """Return True when catalog tracing is enabled via ARRAY_TRACE_CATALOG."""
    return bool(get_env_bool("ARRAY_TRACE_CATALOG", False))


def _hash_sql(sql: str) -> str:
    return hashlib.sha256(sql.encode("utf-8")).hexdigest()


async def trace_catalog_operation(
    name: str,
    provider: str,
    sql: Optional[str],
    operation: Awaitable,
    enabled: Optional[bool] = None,
):
    """Await a catalog operation inside an OTEL span when tracing is enabled.

    Args:
        name: Span name.
        provider: Dialect name recorded as db.provider.
        sql: Statement text; only its hash is recorded.
        operation: The awaitable to run.
        enabled: Overrides the ARRAY_TRACE_CATALOG setting when not None.
    """
    if enabled is None:
        enabled = trace_enabled()
    if not enabled:
        return await operation

    from opentelemetry import trace

    tracer = trace.get_tracer("pgarray")
    with tracer.start_as_current_span(name) as span:
        span.set_attribute("db.provider", provider)
        span.set_attribute("db.operation", "catalog.fetch")
        if sql:
            span.set_attribute("db.statement_hash", _hash_sql(sql))
        try:
            result = await operation
            span.set_attribute("db.status", "ok")
            if isinstance(result, list):
                span.set_attribute("catalog.row_count", len(result))
            return result
        except Exception:
            span.set_attribute("db.status", "error")
            raise
