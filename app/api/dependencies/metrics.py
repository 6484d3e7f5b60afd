"""Shared MetricsQueryLayer for API routes.

One layer (and one result cache) per process, created on first use.
"""

from __future__ import annotations

from loguru import logger

from app.config.settings import settings
from app.db.procedures import SqlProcedureClient
from app.metrics.cache import QueryCache
from app.metrics.queries import MetricsQueryLayer

_metrics_layer: MetricsQueryLayer | None = None


def get_metrics_layer() -> MetricsQueryLayer:
    global _metrics_layer
    if _metrics_layer is None:
        _metrics_layer = MetricsQueryLayer(
            client=SqlProcedureClient(),
            cache=QueryCache(ttl_seconds=settings.query_cache_ttl_seconds),
        )
        logger.info(f"Metrics query layer initialized (cache ttl={settings.query_cache_ttl_seconds}s)")
    return _metrics_layer
