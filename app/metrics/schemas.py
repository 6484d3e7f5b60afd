"""Result schemas for the KPI stored procedures.

Each procedure returns a fixed JSON shape. The models here validate that
shape at the boundary so malformed payloads fail where they enter.
"""

from typing import Literal

from pydantic import BaseModel, Field

Granularity = Literal["day", "week", "month"]


class NetworkHealth(BaseModel):
    health_score: float | None = Field(..., description="Composite network health score")
    on_time_rate: float | None = Field(..., description="Share of events delivered within standard transit time")
    valid_rate: float | None = Field(..., description="Share of validated events")
    avg_transit_time: float | None = Field(..., description="Average transit time in days")
    issue_rate: float | None = Field(..., description="Share of events with an open issue")
    total_events: int = Field(..., description="Events in the window")


class ComplianceCheck(BaseModel):
    actual: float | None
    target: float | None
    status: str = Field(..., description="compliant | warning | critical")


class SLACompliance(BaseModel):
    on_time_compliance: ComplianceCheck
    valid_rate_compliance: ComplianceCheck
    transit_time_compliance: ComplianceCheck
    issue_rate_compliance: ComplianceCheck


class RoutePerformance(BaseModel):
    nodo_origen: str
    nodo_destino: str
    ciudad_origen: str | None = None
    ciudad_destino: str | None = None
    clasificacion_origen: str | None = None
    clasificacion_destino: str | None = None
    total_events: int
    on_time_events: int
    on_time_rate: float | None
    avg_transit_time: float | None
    route_score: float | None


class PerformanceTrendPoint(BaseModel):
    period_date: str = Field(..., description="Start of the bucket, ISO date")
    total_events: int
    on_time_rate: float | None
    avg_transit_time: float | None
    issue_count: int


class IssueSummary(BaseModel):
    open_count: int
    in_progress_count: int
    resolved_count: int
    total_count: int


class IssueTypeCount(BaseModel):
    tipo: str
    count: int


class AffectedRoute(BaseModel):
    nodo_origen: str
    nodo_destino: str
    issue_count: int


class IssuesAnalysis(BaseModel):
    summary: IssueSummary
    by_type: list[IssueTypeCount] = Field(default_factory=list)
    affected_routes: list[AffectedRoute] = Field(default_factory=list)


class TransitTimeRow(BaseModel):
    """One (destination city, transit days) cell as returned by the procedure."""

    ciudad_destino: str
    clasificacion_destino: str | None = None
    total_events_route: int
    standard_days: int | None = None
    transit_days: int
    event_count: int
    cumulative_percentage: float


class TransitDayBucket(BaseModel):
    count: int
    cumulative_percentage: float


class TransitRouteDistribution(BaseModel):
    ciudad_destino: str
    clasificacion: str | None = None
    total_events: int
    standard_days: int | None = None
    distribution: dict[int, TransitDayBucket] = Field(default_factory=dict)


class TransitTimeDistribution(BaseModel):
    routes: list[TransitRouteDistribution] = Field(default_factory=list)
    min_day: int = 1
    max_day: int = 10
