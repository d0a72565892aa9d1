"""
Wait-list model - customers waiting for a freed slot.
"""
from datetime import datetime
from typing import List, Optional
import enum

from pydantic import BaseModel, Field

from washplanner.models.customers import PreferredPeriod, Weekday


class WaitListStatus(str, enum.Enum):
    WAITING = "waiting"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class WaitListEntry(BaseModel):
    """A customer's request for the next freed slot."""
    id: int
    customer_id: int
    customer_name: str = ""
    phone: str = ""
    preferred_days: List[Weekday] = Field(default_factory=list)
    preferred_period: PreferredPeriod = PreferredPeriod.FLEXIBLE
    priority_score: float = 0
    requested_at: datetime
    expires_at: Optional[datetime] = None
    status: WaitListStatus = WaitListStatus.WAITING
    notes: Optional[str] = None
