"""
Appointment model - one scheduled wash visit.
"""
from datetime import datetime, timezone
from typing import Optional
import enum

from pydantic import BaseModel, ConfigDict, Field

from washplanner.models.customers import CarSize, Weekday


ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^(?:[01]\d|2[0-3]):[0-5]\d$"


class Period(str, enum.Enum):
    """Bookable part of the day."""
    MORNING = "morning"
    EVENING = "evening"


class AppointmentStatus(str, enum.Enum):
    """
    Appointment status state machine.
    upcoming → in_progress → completed; upcoming → missed | rescheduled | cancelled.
    """
    UPCOMING = "upcoming"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    MISSED = "missed"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    
    @property
    def is_active(self) -> bool:
        """Whether an appointment in this state still occupies its slot."""
        return self not in (AppointmentStatus.CANCELLED, AppointmentStatus.RESCHEDULED)


class RescheduledBy(str, enum.Enum):
    SYSTEM = "system"
    MANUAL = "manual"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AppointmentCandidate(BaseModel):
    """A slot under consideration, before it becomes an Appointment."""
    customer_id: Optional[int] = None
    date: str = Field(pattern=ISO_DATE_PATTERN)
    time: str = Field(pattern=TIME_PATTERN)
    period: Optional[Period] = None


class Appointment(BaseModel):
    """
    Appointment entity - a single visit owned by one customer.
    
    Customer name/phone/car fields are a snapshot taken when the appointment
    is created; later edits to the customer do not flow back into existing
    appointments. The model is frozen: derive changed copies with
    `model_copy(update=...)`.
    """
    model_config = ConfigDict(frozen=True)
    
    id: int
    customer_id: int
    
    # Customer snapshot
    customer_name: str = ""
    phone: str = ""
    car_type: str = ""
    car_size: CarSize = CarSize.SMALL
    
    # Slot
    date: str = Field(pattern=ISO_DATE_PATTERN)
    day_name: Weekday
    time: str = Field(pattern=TIME_PATTERN)
    period: Period
    
    wash_number: int = Field(ge=1)
    status: AppointmentStatus = AppointmentStatus.UPCOMING
    
    # Payment
    price: float = 0.0
    is_paid: bool = True
    is_free: bool = False
    
    notes: Optional[str] = None
    
    # Timestamps
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    
    # Rescheduling
    was_rescheduled: bool = False
    original_date: Optional[str] = None
    reschedule_reason: Optional[str] = None
    rescheduled_by: Optional[RescheduledBy] = None
    
    @property
    def is_active(self) -> bool:
        return self.status.is_active
    
    def __repr__(self) -> str:
        return (
            f"<Appointment(id={self.id}, customer_id={self.customer_id}, "
            f"date={self.date}, time={self.time}, status={self.status.value})>"
        )


class RescheduleRequest(BaseModel):
    """Ask the rescheduler to move an appointment."""
    appointment_id: int
    new_date: Optional[str] = Field(
        default=None,
        pattern=ISO_DATE_PATTERN,
        description="Anchor date for the search; defaults to the appointment's own date",
    )
    reason: Optional[str] = None
    is_automatic: bool = True
