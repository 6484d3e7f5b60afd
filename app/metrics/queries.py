"""KPI queries backed by server-side procedures.

Every query forwards its filters to one fixed procedure, validates the JSON
result against a schema and caches it for the configured freshness window.
Queries without a client id fail before any remote call. Remote errors are
propagated unchanged and never retried here.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from typing import Any, TypeVar

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from app.config.settings import settings
from app.db.procedures import ProcedureClient
from app.metrics.cache import QueryCache
from app.metrics.errors import MissingClientIdError, ResponseShapeError
from app.metrics.schemas import (
    Granularity,
    IssuesAnalysis,
    NetworkHealth,
    PerformanceTrendPoint,
    RoutePerformance,
    SLACompliance,
    TransitDayBucket,
    TransitRouteDistribution,
    TransitTimeDistribution,
    TransitTimeRow,
)

T = TypeVar("T")

TRANSIT_DISTRIBUTION_MIN_DAYS = 365

_route_list = TypeAdapter(list[RoutePerformance])
_trend_list = TypeAdapter(list[PerformanceTrendPoint])
_transit_rows = TypeAdapter(list[TransitTimeRow])


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def compute_date_range(days: int, today: date | None = None) -> tuple[date, date]:
    """Return (today - days, today) as UTC calendar dates.

    Raises:
        ValueError: If days is negative
    """
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")
    end = today or utc_today()
    return end - timedelta(days=days), end


def _validate(adapter_or_model: Any, payload: Any, procedure: str) -> Any:
    try:
        if isinstance(adapter_or_model, TypeAdapter):
            return adapter_or_model.validate_python(payload if payload is not None else [])
        return adapter_or_model.model_validate(payload)
    except ValidationError as e:
        logger.error(f"[METRICS] {procedure} returned unexpected shape: {e.error_count()} error(s)")
        raise ResponseShapeError(procedure, str(e)) from e


def build_transit_distribution(rows: list[TransitTimeRow]) -> TransitTimeDistribution:
    """Pivot per-cell rows into one distribution per destination city."""
    routes: dict[str, TransitRouteDistribution] = {}
    for row in rows:
        route = routes.get(row.ciudad_destino)
        if route is None:
            route = TransitRouteDistribution(
                ciudad_destino=row.ciudad_destino,
                clasificacion=row.clasificacion_destino,
                total_events=row.total_events_route,
                standard_days=row.standard_days,
            )
            routes[row.ciudad_destino] = route
        route.distribution[row.transit_days] = TransitDayBucket(
            count=row.event_count,
            cumulative_percentage=row.cumulative_percentage,
        )

    if not rows:
        return TransitTimeDistribution()

    days = [row.transit_days for row in rows]
    return TransitTimeDistribution(
        routes=sorted(routes.values(), key=lambda r: r.ciudad_destino),
        min_day=min(days),
        max_day=max(days),
    )


class MetricsQueryLayer:
    """Parameterized read-only KPI queries for one dashboard backend.

    Args:
        client: Procedure collaborator (SqlProcedureClient in production)
        cache: Result cache; a fresh one with the configured TTL if omitted
        today: Clock returning the current UTC date
    """

    def __init__(
        self,
        client: ProcedureClient,
        cache: QueryCache | None = None,
        today: Callable[[], date] = utc_today,
    ):
        self.client = client
        self.cache = cache if cache is not None else QueryCache(ttl_seconds=settings.query_cache_ttl_seconds)
        self._today = today

    def _date_params(self, days: int) -> dict[str, str]:
        start, end = compute_date_range(days, self._today())
        return {"p_start_date": start.isoformat(), "p_end_date": end.isoformat()}

    def _run(self, operation: str, procedure: str, params: dict[str, Any], parse: Callable[[Any], T]) -> T:
        key = (operation, *sorted(params.items()))

        def load() -> T:
            logger.info(f"[METRICS] {operation}: calling {procedure}")
            return parse(self.client.call(procedure, params))

        return self.cache.get_or_call(key, load)

    def network_health(
        self,
        client_id: int | None,
        days: int | None = None,
        carrier_id: int | None = None,
        product_id: int | None = None,
    ) -> NetworkHealth:
        if not client_id:
            raise MissingClientIdError("network_health")
        days = settings.default_metrics_days if days is None else days
        params = {
            "p_cliente_id": client_id,
            **self._date_params(days),
            "p_carrier_id": carrier_id,
            "p_producto_id": product_id,
        }
        return self._run(
            "network_health",
            "calculate_network_health",
            params,
            lambda payload: _validate(NetworkHealth, payload, "calculate_network_health"),
        )

    def sla_compliance(self, client_id: int | None, days: int | None = None) -> SLACompliance:
        if not client_id:
            raise MissingClientIdError("sla_compliance")
        days = settings.default_metrics_days if days is None else days
        params = {"p_cliente_id": client_id, **self._date_params(days)}
        return self._run(
            "sla_compliance",
            "calculate_sla_compliance",
            params,
            lambda payload: _validate(SLACompliance, payload, "calculate_sla_compliance"),
        )

    def route_performance(self, client_id: int | None, days: int | None = None) -> list[RoutePerformance]:
        if not client_id:
            raise MissingClientIdError("route_performance")
        days = settings.default_metrics_days if days is None else days
        params = {"p_cliente_id": client_id, **self._date_params(days)}
        return self._run(
            "route_performance",
            "get_route_performance",
            params,
            lambda payload: _validate(_route_list, payload, "get_route_performance"),
        )

    def performance_trends(
        self,
        client_id: int | None,
        days_back: int | None = None,
        granularity: Granularity = "day",
        carrier_id: int | None = None,
        product_id: int | None = None,
    ) -> list[PerformanceTrendPoint]:
        """Per-period trend points. The procedure computes its own window from days_back."""
        if not client_id:
            raise MissingClientIdError("performance_trends")
        days_back = settings.default_trend_days if days_back is None else days_back
        if days_back < 0:
            raise ValueError(f"days_back must be >= 0, got {days_back}")
        if granularity not in ("day", "week", "month"):
            raise ValueError(f"granularity must be day, week or month, got {granularity!r}")
        params = {
            "p_cliente_id": client_id,
            "p_days_back": days_back,
            "p_granularity": granularity,
            "p_carrier_id": carrier_id,
            "p_producto_id": product_id,
        }
        return self._run(
            "performance_trends",
            "get_performance_trends",
            params,
            lambda payload: _validate(_trend_list, payload, "get_performance_trends"),
        )

    def issues_analysis(self, client_id: int | None, days: int | None = None) -> IssuesAnalysis:
        if not client_id:
            raise MissingClientIdError("issues_analysis")
        days = settings.default_metrics_days if days is None else days
        params = {"p_cliente_id": client_id, **self._date_params(days)}
        return self._run(
            "issues_analysis",
            "analyze_issues",
            params,
            lambda payload: _validate(IssuesAnalysis, payload, "analyze_issues"),
        )

    def transit_time_distribution(
        self,
        client_id: int | None,
        ciudad_origen: str | None,
        days: int | None = None,
        carrier_id: int | None = None,
        product_id: int | None = None,
    ) -> TransitTimeDistribution:
        """Transit-day histogram per destination city for one origin city.

        Returns the empty default (days 1..10) without a remote call when
        client or origin city is missing. The window is at least one year.
        """
        if not client_id or not ciudad_origen:
            return TransitTimeDistribution()
        days = settings.default_metrics_days if days is None else days
        params = {
            "p_cliente_id": client_id,
            "p_ciudad_origen": ciudad_origen,
            **self._date_params(max(days, TRANSIT_DISTRIBUTION_MIN_DAYS)),
            "p_carrier_id": carrier_id,
            "p_producto_id": product_id,
        }
        return self._run(
            "transit_time_distribution",
            "get_transit_time_distribution",
            params,
            lambda payload: build_transit_distribution(
                _validate(_transit_rows, payload, "get_transit_time_distribution")
            ),
        )
