"""
Customer model - wash subscribers and their scheduling preferences.
"""
from datetime import date
from typing import List, Optional
import enum

from pydantic import BaseModel, Field


class Weekday(str, enum.Enum):
    """Weekday labels used for preferred days and appointment day names."""
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"


class PreferredPeriod(str, enum.Enum):
    """Part of the day a customer prefers to be visited in."""
    MORNING = "morning"
    EVENING = "evening"
    FLEXIBLE = "flexible"


class CustomerStatus(str, enum.Enum):
    """Subscription state."""
    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class CarSize(str, enum.Enum):
    SMALL = "small"
    LARGE = "large"


class Customer(BaseModel):
    """
    Customer entity - a wash subscriber.
    
    Wash counters (remaining/completed/missed) are maintained by the
    status-transition actions outside the engine; the scheduler only reads
    them. `preferred_days` is not length-checked here: the schedule request
    schema enforces the three-day rule at intake, imported records may not.
    """
    id: int
    name: str
    phone: str = ""
    email: Optional[str] = None
    
    # Car
    car_type: str = ""
    car_size: CarSize = CarSize.SMALL
    plate_number: Optional[str] = None
    car_color: Optional[str] = None
    
    # Subscription
    subscription_start: Optional[date] = None
    subscription_end: Optional[date] = None
    total_washes: int = Field(default=10, ge=0)
    paid_washes: int = Field(default=8, ge=0)
    free_washes: int = Field(default=2, ge=0)
    remaining_washes: int = Field(default=10, ge=0)
    completed_washes: int = Field(default=0, ge=0)
    missed_washes: int = Field(default=0, ge=0)
    monthly_price: float = 80.0
    status: CustomerStatus = CustomerStatus.ACTIVE
    
    # Scheduling preferences
    preferred_days: List[Weekday] = Field(default_factory=list)
    preferred_period: PreferredPeriod = PreferredPeriod.FLEXIBLE
    
    is_vip: bool = False
    join_date: date
    
    def __repr__(self) -> str:
        return f"<Customer(id={self.id}, name={self.name!r}, vip={self.is_vip})>"
