"""
Wait-list priority API routes.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from washplanner.api.dependencies import get_priority_service
from washplanner.models.customers import Customer
from washplanner.models.results import Compensation
from washplanner.models.waitlist import WaitListEntry
from washplanner.services.compensation import compensation_for
from washplanner.services.priority_service import PriorityService


# Pydantic schemas
class PriorityScoreRequest(BaseModel):
    customer: Customer
    waiting_since: datetime
    now: Optional[datetime] = Field(None, description="Reference time; defaults to the server clock")


class PriorityScoreResponse(BaseModel):
    customer_id: int
    score: int


class WaitListRequest(BaseModel):
    entries: List[WaitListEntry]
    customers: List[Customer] = Field(default_factory=list)
    now: Optional[datetime] = None


class CompensationResponse(BaseModel):
    missed_count: int
    compensation: Optional[Compensation] = None


# Router
router = APIRouter(prefix="/priority", tags=["priority"])


@router.post("/score", response_model=PriorityScoreResponse)
def priority_score(
    payload: PriorityScoreRequest,
    service: PriorityService = Depends(get_priority_service),
) -> PriorityScoreResponse:
    score = service.priority_score(payload.customer, payload.waiting_since, now=payload.now)
    return PriorityScoreResponse(customer_id=payload.customer.id, score=score)


@router.post("/wait-list", response_model=List[WaitListEntry])
def sort_wait_list(
    payload: WaitListRequest,
    service: PriorityService = Depends(get_priority_service),
) -> List[WaitListEntry]:
    """Wait-list entries ordered by descending priority, scores filled in."""
    customers_map = {c.id: c for c in payload.customers}
    return service.sort_wait_list(payload.entries, customers_map, now=payload.now)


@router.get("/compensation", response_model=CompensationResponse)
def compensation(
    missed_count: int = Query(..., ge=0, description="Visits missed in the current cycle"),
) -> CompensationResponse:
    return CompensationResponse(missed_count=missed_count, compensation=compensation_for(missed_count))
