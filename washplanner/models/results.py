"""
Value objects returned by the scheduling engine.

None of these are persisted; they carry outcomes back to the caller, which
decides what to store.
"""
from typing import List, Optional
import enum

from pydantic import BaseModel, Field

from washplanner.models.appointments import Appointment, Period
from washplanner.models.customers import Customer, PreferredPeriod, Weekday


class ConflictType(str, enum.Enum):
    EXACT_TIME = "exact_time"
    CAPACITY = "capacity"
    CUSTOMER_DUPLICATE = "customer_duplicate"


class ConflictDetail(BaseModel):
    type: ConflictType
    message: str
    appointment_id: Optional[int] = None


class ConflictCheck(BaseModel):
    """Outcome of checking one candidate slot against existing bookings."""
    has_conflict: bool
    conflicts: List[ConflictDetail] = Field(default_factory=list)


class DayCapacity(BaseModel):
    """
    Per-day utilisation. Available counts go negative only when the input
    already violates capacity.
    """
    morning_used: int
    morning_available: int
    evening_used: int
    evening_available: int
    total_used: int
    total_available: int


class MonthFeasibility(BaseModel):
    possible: bool
    reason: Optional[str] = None
    available_days: int


class IssueSeverity(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"


class IntegrityIssue(BaseModel):
    severity: IssueSeverity
    kind: ConflictType
    message: str
    appointment_ids: List[int] = Field(default_factory=list)


class IntegrityReport(BaseModel):
    valid: bool
    issues: List[IntegrityIssue] = Field(default_factory=list)


class AppointmentComparison(BaseModel):
    same_time: bool
    same_customer: bool
    same_date: bool


class SlotSuggestion(BaseModel):
    date: str
    time: str
    period: Period


class ScheduleGenerationRequest(BaseModel):
    """What to generate for one customer in one month."""
    customer_id: int
    year: int = Field(ge=1970, le=9999)
    month: int = Field(ge=1, le=12)
    preferred_days: List[Weekday]
    preferred_period: PreferredPeriod
    total_washes: int = Field(ge=0)
    
    @classmethod
    def for_customer(cls, customer: Customer, year: int, month: int) -> "ScheduleGenerationRequest":
        return cls(
            customer_id=customer.id,
            year=year,
            month=month,
            preferred_days=customer.preferred_days,
            preferred_period=customer.preferred_period,
            total_washes=customer.total_washes,
        )


class ScheduleGenerationResult(BaseModel):
    success: bool
    schedule: List[Appointment] = Field(default_factory=list)
    message: str
    warnings: List[str] = Field(default_factory=list)


class CustomerScheduleOutcome(BaseModel):
    customer: Customer
    result: ScheduleGenerationResult


class BulkScheduleResult(BaseModel):
    success: bool
    results: List[CustomerScheduleOutcome] = Field(default_factory=list)
    total_scheduled: int = 0
    total_failed: int = 0
    
    @property
    def appointments(self) -> List[Appointment]:
        """Every appointment produced by the run, in processing order."""
        return [apt for outcome in self.results for apt in outcome.result.schedule]


class RescheduleResult(BaseModel):
    success: bool
    new_appointment: Optional[Appointment] = None
    message: str
    conflicts: List[str] = Field(default_factory=list)


class BulkRescheduleItem(BaseModel):
    appointment_id: int
    result: RescheduleResult


class MonthlyUtilization(BaseModel):
    total_capacity: int
    used_slots: int
    available_slots: int
    utilization_rate: float


class OptimalDistribution(BaseModel):
    morning_per_day: int
    evening_per_day: int
    total_days_needed: int


class Compensation(BaseModel):
    type: str
    count: int
