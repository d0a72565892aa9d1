"""
Scheduling rules for the wash planner.

Provides centralized configuration for:
- Period slot tables (morning / evening)
- Period and daily capacities
- Subscription policy (visits per cycle, paid/free split, price)
- Spacing rules (minimum gap, rescheduling search window)

Defaults come from environment-backed settings and can be overridden at
runtime (tests, admin tooling) via set_scheduling_rules().
"""
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from washplanner.lib.logging import get_logger
from washplanner.lib.settings import settings
from washplanner.lib.validators import is_valid_time_24h
from washplanner.models.appointments import Period


logger = get_logger(__name__)


class SchedulingRules(BaseModel):
    """
    Capacity model and subscription policy consumed by every scheduling service.
    
    A slot is the atomic allocatable unit: each (date, time) pair holds at
    most one active booking, and the period capacity caps how many slots of
    a period can be used on a single day.
    """
    
    morning_slots: List[str] = Field(
        default_factory=lambda: list(settings.morning_slots),
        min_length=1,
        description="Bookable times in the morning period, ascending"
    )
    evening_slots: List[str] = Field(
        default_factory=lambda: list(settings.evening_slots),
        min_length=1,
        description="Bookable times in the evening period, ascending"
    )
    
    morning_capacity: int = Field(default_factory=lambda: settings.morning_capacity, ge=1, le=500)
    evening_capacity: int = Field(default_factory=lambda: settings.evening_capacity, ge=1, le=500)
    daily_capacity: int = Field(default_factory=lambda: settings.daily_capacity, ge=1, le=1000)
    
    visits_per_cycle: int = Field(default_factory=lambda: settings.visits_per_cycle, ge=1, le=31)
    paid_visits: int = Field(default_factory=lambda: settings.paid_visits, ge=0, le=31)
    price_per_wash: float = Field(default_factory=lambda: settings.price_per_wash, ge=0)
    
    min_gap_days: int = Field(
        default_factory=lambda: settings.min_gap_days,
        ge=1,
        le=30,
        description="Minimum days between two visits of the same customer"
    )
    reschedule_window_days: int = Field(
        default_factory=lambda: settings.reschedule_window_days,
        ge=1,
        le=365,
        description="Last day offset the rescheduler will look at"
    )
    
    @field_validator("morning_slots", "evening_slots")
    @classmethod
    def _check_slot_table(cls, slots: List[str]) -> List[str]:
        for slot in slots:
            if not is_valid_time_24h(slot):
                raise ValueError(f"invalid slot time '{slot}', expected HH:MM")
        if any(a >= b for a, b in zip(slots, slots[1:])):
            raise ValueError("slot times must be strictly ascending")
        return slots
    
    @model_validator(mode="after")
    def _check_consistency(self) -> "SchedulingRules":
        if self.paid_visits > self.visits_per_cycle:
            raise ValueError("paid_visits cannot exceed visits_per_cycle")
        if set(self.morning_slots) & set(self.evening_slots):
            raise ValueError("morning and evening slot tables overlap")
        if self.reschedule_window_days < self.min_gap_days:
            raise ValueError("reschedule_window_days must be at least min_gap_days")
        return self
    
    @property
    def free_visits(self) -> int:
        return self.visits_per_cycle - self.paid_visits
    
    def slots_for(self, period: Period) -> List[str]:
        """Slot table for a period."""
        if period is Period.MORNING:
            return self.morning_slots
        return self.evening_slots
    
    def capacity_for(self, period: Period) -> int:
        """Concurrent booking capacity for a period."""
        if period is Period.MORNING:
            return self.morning_capacity
        return self.evening_capacity
    
    def period_for_time(self, time: str) -> Optional[Period]:
        """Period whose slot table contains `time`, or None for an off-table time."""
        if time in self.morning_slots:
            return Period.MORNING
        if time in self.evening_slots:
            return Period.EVENING
        return None


# Global configuration instance (can be overridden)
_scheduling_rules: Optional[SchedulingRules] = None


def get_scheduling_rules() -> SchedulingRules:
    """
    Get scheduling rules.
    
    Returns:
        SchedulingRules instance with current settings
    """
    global _scheduling_rules
    if _scheduling_rules is None:
        _scheduling_rules = SchedulingRules()
        logger.info("Initialized default scheduling rules")
    return _scheduling_rules


def set_scheduling_rules(rules: SchedulingRules) -> None:
    """
    Override scheduling rules.
    
    Args:
        rules: New SchedulingRules configuration
    """
    global _scheduling_rules
    _scheduling_rules = rules
    logger.info("Updated scheduling rules", extra={
        "morning_capacity": rules.morning_capacity,
        "evening_capacity": rules.evening_capacity,
        "min_gap_days": rules.min_gap_days,
    })


def reset_scheduling_rules() -> None:
    """Reset rules to the settings-backed defaults (useful for testing)."""
    global _scheduling_rules
    _scheduling_rules = None
    logger.info("Reset scheduling rules to defaults")
