"""
Month-level capacity figures for planning and reporting.
"""
import calendar
import math
from typing import Iterable, Optional

from washplanner.lib.rules import SchedulingRules, get_scheduling_rules
from washplanner.models.appointments import Appointment, AppointmentStatus
from washplanner.models.results import MonthlyUtilization, OptimalDistribution


class CapacityService:
    """Service computing monthly capacity and utilisation."""
    
    def __init__(self, rules: Optional[SchedulingRules] = None):
        self._rules = rules
    
    @property
    def rules(self) -> SchedulingRules:
        return self._rules or get_scheduling_rules()
    
    def monthly_capacity(self, year: int, month: int) -> int:
        """Days in the month times the daily capacity."""
        return calendar.monthrange(year, month)[1] * self.rules.daily_capacity
    
    def monthly_utilization(
        self,
        appointments: Iterable[Appointment],
        year: int,
        month: int,
    ) -> MonthlyUtilization:
        """
        Share of the month's capacity taken by non-cancelled appointments.
        
        Rescheduled-away appointments still count here, matching how the
        monthly reports have always been produced.
        """
        prefix = f"{year:04d}-{month:02d}-"
        total_capacity = self.monthly_capacity(year, month)
        used = sum(
            1 for a in appointments
            if a.date.startswith(prefix) and a.status is not AppointmentStatus.CANCELLED
        )
        return MonthlyUtilization(
            total_capacity=total_capacity,
            used_slots=used,
            available_slots=total_capacity - used,
            utilization_rate=used / total_capacity * 100 if total_capacity else 0.0,
        )
    
    def optimal_distribution(self, total_appointments: int) -> OptimalDistribution:
        """
        Fewest days that can hold `total_appointments`, and the per-day
        morning/evening split proportional to the period capacities.
        """
        rules = self.rules
        if total_appointments <= 0:
            return OptimalDistribution(morning_per_day=0, evening_per_day=0, total_days_needed=0)
        
        days_needed = math.ceil(total_appointments / rules.daily_capacity)
        per_day = total_appointments / days_needed
        morning_ratio = rules.morning_capacity / rules.daily_capacity
        return OptimalDistribution(
            morning_per_day=math.floor(per_day * morning_ratio + 0.5),
            evening_per_day=math.floor(per_day * (1 - morning_ratio) + 0.5),
            total_days_needed=days_needed,
        )
