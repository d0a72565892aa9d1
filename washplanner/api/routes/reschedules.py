"""
Rescheduling API routes.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from washplanner.api.dependencies import get_rescheduling_service
from washplanner.api.middleware.error_handler import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)
from washplanner.models.appointments import Appointment, ISO_DATE_PATTERN, RescheduleRequest
from washplanner.models.customers import Customer
from washplanner.models.results import BulkRescheduleItem, RescheduleResult, SlotSuggestion
from washplanner.services.rescheduling_service import ReschedulingService


# Pydantic schemas
class SuggestSlotRequest(BaseModel):
    customer: Customer
    after_date: str = Field(..., pattern=ISO_DATE_PATTERN)
    appointments: List[Appointment] = Field(default_factory=list)


class SuggestSlotResponse(BaseModel):
    found: bool
    suggestion: Optional[SlotSuggestion] = None


class AutoRescheduleRequest(BaseModel):
    """Move one appointment; `appointments` must contain it unless `request.new_date` is set."""
    request: RescheduleRequest
    customer: Customer
    appointments: List[Appointment] = Field(default_factory=list)


class BulkRescheduleRequest(BaseModel):
    appointment_ids: List[int] = Field(..., min_length=1)
    customers: List[Customer]
    appointments: List[Appointment] = Field(default_factory=list)


# Router
router = APIRouter(prefix="/reschedules", tags=["reschedules"])


@router.post("/suggest", response_model=SuggestSlotResponse)
def suggest_next_slot(
    payload: SuggestSlotRequest,
    service: ReschedulingService = Depends(get_rescheduling_service),
) -> SuggestSlotResponse:
    """First free slot on a preferred day inside the reschedule window."""
    suggestion = service.suggest_next_slot(payload.customer, payload.after_date, payload.appointments)
    return SuggestSlotResponse(found=suggestion is not None, suggestion=suggestion)


@router.post("/auto", response_model=RescheduleResult)
def auto_reschedule(
    payload: AutoRescheduleRequest,
    service: ReschedulingService = Depends(get_rescheduling_service),
) -> RescheduleResult:
    """
    Replace an appointment with the next free slot.
    
    Raises:
        NotFoundException: Appointment not in the snapshot and no anchor date given
        BadRequestException: Appointment belongs to another customer
        ConflictException: The suggested slot failed re-validation
    """
    original = next(
        (a for a in payload.appointments if a.id == payload.request.appointment_id),
        None,
    )
    if original is None and payload.request.new_date is None:
        raise NotFoundException("Appointment", str(payload.request.appointment_id))
    if original is not None and original.customer_id != payload.customer.id:
        raise BadRequestException(
            "Appointment does not belong to the given customer",
            details={"appointment_id": original.id, "customer_id": payload.customer.id},
        )
    
    result = service.auto_reschedule(payload.request, payload.customer, payload.appointments)
    if result.conflicts:
        raise ConflictException(result.message, details={"conflicts": result.conflicts})
    return result


@router.post("/bulk", response_model=List[BulkRescheduleItem])
def bulk_auto_reschedule(
    payload: BulkRescheduleRequest,
    service: ReschedulingService = Depends(get_rescheduling_service),
) -> List[BulkRescheduleItem]:
    """
    Reschedule several absences in the order given.
    
    Raises:
        NotFoundException: Any id is missing from the snapshot
    """
    by_id: Dict[int, Appointment] = {a.id: a for a in payload.appointments}
    missing = [i for i in payload.appointment_ids if i not in by_id]
    if missing:
        raise NotFoundException("Appointment", ",".join(str(i) for i in missing))
    
    customers_map = {c.id: c for c in payload.customers}
    absences = [by_id[i] for i in payload.appointment_ids]
    return service.bulk_auto_reschedule(absences, customers_map, payload.appointments)
