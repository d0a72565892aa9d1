"""
Capacity planning API routes.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from washplanner.api.dependencies import get_capacity_service
from washplanner.models.appointments import Appointment
from washplanner.models.results import MonthlyUtilization, OptimalDistribution
from washplanner.services.capacity_service import CapacityService


# Pydantic schemas
class MonthlyUtilizationRequest(BaseModel):
    year: int = Field(..., ge=1970, le=9999)
    month: int = Field(..., ge=1, le=12)
    appointments: List[Appointment] = Field(default_factory=list)


# Router
router = APIRouter(prefix="/capacity", tags=["capacity"])


@router.post("/utilization", response_model=MonthlyUtilization)
def monthly_utilization(
    payload: MonthlyUtilizationRequest,
    service: CapacityService = Depends(get_capacity_service),
) -> MonthlyUtilization:
    """Share of the month's capacity taken by non-cancelled appointments."""
    return service.monthly_utilization(payload.appointments, payload.year, payload.month)


@router.get("/distribution", response_model=OptimalDistribution)
def optimal_distribution(
    total: int = Query(..., description="Number of appointments to spread"),
    service: CapacityService = Depends(get_capacity_service),
) -> OptimalDistribution:
    """
    Fewest days that can hold `total` appointments and the per-day split.
    
    Query parameters:
    - total: number of appointments (zero or negative yields all zeros)
    """
    return service.optimal_distribution(total)
