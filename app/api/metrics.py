"""KPI endpoints for the network performance dashboard.

Each endpoint is a thin wrapper over MetricsQueryLayer. A missing client id
is a 400; procedure or database failures are a 502 and are never retried.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from app.api.dependencies.auth import get_current_email
from app.api.dependencies.metrics import get_metrics_layer
from app.metrics.errors import MissingClientIdError, ResponseShapeError
from app.metrics.queries import MetricsQueryLayer
from app.metrics.schemas import (
    Granularity,
    IssuesAnalysis,
    NetworkHealth,
    PerformanceTrendPoint,
    RoutePerformance,
    SLACompliance,
    TransitTimeDistribution,
)

router = APIRouter(prefix="/metrics", tags=["metrics"], dependencies=[Depends(get_current_email)])

T = TypeVar("T")


def _run_query(operation: str, query: Callable[[], T]) -> T:
    try:
        return query()
    except MissingClientIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ResponseShapeError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    except SQLAlchemyError as e:
        logger.error(f"[METRICS] {operation} failed: {type(e).__name__}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"{operation} query failed") from e
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.get("/network-health", response_model=NetworkHealth)
def network_health(
    client_id: int | None = None,
    days: int | None = Query(default=None, ge=0),
    carrier_id: int | None = None,
    product_id: int | None = None,
    layer: MetricsQueryLayer = Depends(get_metrics_layer),
):
    return _run_query("network_health", lambda: layer.network_health(client_id, days, carrier_id, product_id))


@router.get("/sla-compliance", response_model=SLACompliance)
def sla_compliance(
    client_id: int | None = None,
    days: int | None = Query(default=None, ge=0),
    layer: MetricsQueryLayer = Depends(get_metrics_layer),
):
    return _run_query("sla_compliance", lambda: layer.sla_compliance(client_id, days))


@router.get("/route-performance", response_model=list[RoutePerformance])
def route_performance(
    client_id: int | None = None,
    days: int | None = Query(default=None, ge=0),
    layer: MetricsQueryLayer = Depends(get_metrics_layer),
):
    return _run_query("route_performance", lambda: layer.route_performance(client_id, days))


@router.get("/performance-trends", response_model=list[PerformanceTrendPoint])
def performance_trends(
    client_id: int | None = None,
    days_back: int | None = Query(default=None, ge=0),
    granularity: Granularity = "day",
    carrier_id: int | None = None,
    product_id: int | None = None,
    layer: MetricsQueryLayer = Depends(get_metrics_layer),
):
    return _run_query(
        "performance_trends",
        lambda: layer.performance_trends(client_id, days_back, granularity, carrier_id, product_id),
    )


@router.get("/issues", response_model=IssuesAnalysis)
def issues_analysis(
    client_id: int | None = None,
    days: int | None = Query(default=None, ge=0),
    layer: MetricsQueryLayer = Depends(get_metrics_layer),
):
    return _run_query("issues_analysis", lambda: layer.issues_analysis(client_id, days))


@router.get("/transit-time-distribution", response_model=TransitTimeDistribution)
def transit_time_distribution(
    client_id: int | None = None,
    ciudad_origen: str | None = None,
    days: int | None = Query(default=None, ge=0),
    carrier_id: int | None = None,
    product_id: int | None = None,
    layer: MetricsQueryLayer = Depends(get_metrics_layer),
):
    return _run_query(
        "transit_time_distribution",
        lambda: layer.transit_time_distribution(client_id, ciudad_origen, days, carrier_id, product_id),
    )
