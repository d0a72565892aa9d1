"""
Schedule generation API routes.

Responses carry the generated appointments; persisting them is the
caller's job.
"""
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from washplanner.api.dependencies import get_bulk_scheduler_service, get_scheduler_service
from washplanner.lib.validators import (
    PREFERRED_DAYS_REQUIRED,
    is_valid_saudi_mobile,
    normalize_saudi_mobile,
    validate_preferred_days,
)
from washplanner.models.appointments import Appointment
from washplanner.models.customers import Customer
from washplanner.models.results import BulkScheduleResult, ScheduleGenerationResult
from washplanner.services.bulk_scheduler_service import BulkSchedulerService, DEFAULT_CHUNK_SIZE
from washplanner.services.scheduler_service import SchedulerService


# Pydantic schemas
class CustomerScheduleRequest(BaseModel):
    """
    One customer's monthly schedule request.

    This is the intake path: the customer must name exactly three distinct
    preferred days and a Saudi mobile number, which is stored in local form.
    """
    customer: Customer
    year: int = Field(..., ge=1970, le=9999)
    month: int = Field(..., ge=1, le=12)
    appointments: List[Appointment] = Field(default_factory=list, description="Existing bookings")

    @field_validator("customer")
    @classmethod
    def validate_intake(cls, customer: Customer) -> Customer:
        if not validate_preferred_days(customer.preferred_days):
            raise ValueError(f"preferred_days must name exactly {PREFERRED_DAYS_REQUIRED} distinct weekdays")
        phone = normalize_saudi_mobile(customer.phone)
        if not is_valid_saudi_mobile(phone):
            raise ValueError("phone must be a Saudi mobile number (05XXXXXXXX or +9665XXXXXXXX)")
        return customer.model_copy(update={"phone": phone})


class BulkScheduleRequest(BaseModel):
    """Monthly schedule request for a batch of customers."""
    customers: List[Customer]
    year: int = Field(..., ge=1970, le=9999)
    month: int = Field(..., ge=1, le=12)
    appointments: List[Appointment] = Field(default_factory=list, description="Existing bookings")
    chunk_size: int = Field(DEFAULT_CHUNK_SIZE, ge=1, description="Customers per processing chunk")


# Router
router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("/customer", response_model=ScheduleGenerationResult)
def schedule_customer(
    payload: CustomerScheduleRequest,
    service: SchedulerService = Depends(get_scheduler_service),
) -> ScheduleGenerationResult:
    """
    Generate a customer's visits for the month.
    
    A partial or failed schedule is still a 200 response; check `success`
    and `warnings`.
    """
    return service.schedule_customer(payload.customer, payload.year, payload.month, payload.appointments)


@router.post("/bulk", response_model=BulkScheduleResult)
async def schedule_bulk(
    payload: BulkScheduleRequest,
    service: BulkSchedulerService = Depends(get_bulk_scheduler_service),
) -> BulkScheduleResult:
    """
    Schedule a batch of customers, VIPs first then by join date.
    
    Runs in chunks and yields to the event loop between them.
    """
    return await service.schedule_bulk_async(
        payload.customers,
        payload.year,
        payload.month,
        payload.appointments,
        chunk_size=payload.chunk_size,
    )
