"""
Conflict detection API routes.

Stateless: every request carries the appointment snapshot to check against.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from washplanner.api.dependencies import get_conflict_service
from washplanner.lib.metrics import get_metrics_collector
from washplanner.models.appointments import (
    Appointment,
    AppointmentCandidate,
    ISO_DATE_PATTERN,
    Period,
)
from washplanner.models.results import (
    ConflictCheck,
    DayCapacity,
    IntegrityReport,
    MonthFeasibility,
)
from washplanner.services.conflict_service import ConflictService


# Pydantic schemas
class ConflictCheckRequest(BaseModel):
    """Candidate slot plus the bookings to check it against."""
    candidate: AppointmentCandidate
    appointments: List[Appointment] = Field(default_factory=list)
    exclude_id: Optional[int] = Field(None, description="Appointment id to ignore (the one being moved)")


class DayCapacityRequest(BaseModel):
    date: str = Field(..., pattern=ISO_DATE_PATTERN)
    appointments: List[Appointment] = Field(default_factory=list)


class AvailableSlotsRequest(BaseModel):
    date: str = Field(..., pattern=ISO_DATE_PATTERN)
    period: Period
    appointments: List[Appointment] = Field(default_factory=list)


class AvailableSlotsResponse(BaseModel):
    date: str
    period: Period
    slots: List[str]


class FeasibilityRequest(BaseModel):
    customer_id: int
    year: int = Field(..., ge=1970, le=9999)
    month: int = Field(..., ge=1, le=12)
    required_visits: int = Field(..., ge=0)
    appointments: List[Appointment] = Field(default_factory=list)


class IntegrityRequest(BaseModel):
    appointments: List[Appointment] = Field(default_factory=list)


# Router
router = APIRouter(prefix="/conflicts", tags=["conflicts"])


@router.post("/check", response_model=ConflictCheck)
def check_conflict(
    payload: ConflictCheckRequest,
    service: ConflictService = Depends(get_conflict_service),
) -> ConflictCheck:
    """
    Check one candidate slot for exact-time, capacity and duplicate-day conflicts.
    
    Returns every triggered conflict, not just the first.
    """
    result = service.check_conflict(payload.candidate, payload.appointments, payload.exclude_id)
    
    metrics = get_metrics_collector()
    for conflict in result.conflicts:
        metrics.increment_conflicts(conflict_type=conflict.type.value)
    
    return result


@router.post("/capacity", response_model=DayCapacity)
def day_capacity(
    payload: DayCapacityRequest,
    service: ConflictService = Depends(get_conflict_service),
) -> DayCapacity:
    """Used and remaining capacity per period for one day."""
    return service.day_capacity(payload.date, payload.appointments)


@router.post("/slots", response_model=AvailableSlotsResponse)
def available_slots(
    payload: AvailableSlotsRequest,
    service: ConflictService = Depends(get_conflict_service),
) -> AvailableSlotsResponse:
    """Free slot times of a period on a date, in slot-table order."""
    slots = service.available_time_slots(payload.date, payload.period, payload.appointments)
    return AvailableSlotsResponse(date=payload.date, period=payload.period, slots=slots)


@router.post("/feasibility", response_model=MonthFeasibility)
def month_feasibility(
    payload: FeasibilityRequest,
    service: ConflictService = Depends(get_conflict_service),
) -> MonthFeasibility:
    return service.can_schedule_customer_in_month(
        payload.customer_id,
        payload.year,
        payload.month,
        payload.required_visits,
        payload.appointments,
    )


@router.post("/integrity", response_model=IntegrityReport)
def validate_integrity(
    payload: IntegrityRequest,
    service: ConflictService = Depends(get_conflict_service),
) -> IntegrityReport:
    """Audit a full appointment set for double bookings and over-capacity periods."""
    return service.validate_integrity(payload.appointments)
