"""Week window endpoints for the allocation grid column headers."""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

from fastapi import APIRouter
from pydantic import BaseModel

from app.calendar.weeks import calculate_week_range, locate_week

router = APIRouter(prefix="/calendar", tags=["calendar"])


class WeekBucketResponse(BaseModel):
    offset: int
    monday_date: date
    start_date: date
    end_date: date
    label: str


class WeekLocationResponse(BaseModel):
    day: date
    offset: int | None


@router.get("/weeks", response_model=list[WeekBucketResponse])
def weeks(reference_date: date):
    """Seven week buckets (offsets -2..+4) around reference_date."""
    return [WeekBucketResponse(**asdict(bucket)) for bucket in calculate_week_range(reference_date)]


@router.get("/weeks/locate", response_model=WeekLocationResponse)
def locate(reference_date: date, day: date):
    """Offset of the bucket containing day, null if day is outside the window."""
    return WeekLocationResponse(day=day, offset=locate_week(day, calculate_week_range(reference_date)))
