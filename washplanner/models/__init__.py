"""
Domain models package.
Import all models here so callers can use `from washplanner.models import ...`.
"""
from washplanner.models.customers import Customer, Weekday, PreferredPeriod, CustomerStatus, CarSize
from washplanner.models.appointments import (
    Appointment,
    AppointmentCandidate,
    AppointmentStatus,
    Period,
    RescheduledBy,
    RescheduleRequest,
)
from washplanner.models.waitlist import WaitListEntry, WaitListStatus
from washplanner.models.results import (
    ConflictType,
    ConflictDetail,
    ConflictCheck,
    DayCapacity,
    MonthFeasibility,
    IssueSeverity,
    IntegrityIssue,
    IntegrityReport,
    AppointmentComparison,
    SlotSuggestion,
    ScheduleGenerationRequest,
    ScheduleGenerationResult,
    CustomerScheduleOutcome,
    BulkScheduleResult,
    RescheduleResult,
    BulkRescheduleItem,
    MonthlyUtilization,
    OptimalDistribution,
    Compensation,
)

__all__ = [
    "Customer",
    "Weekday",
    "PreferredPeriod",
    "CustomerStatus",
    "CarSize",
    "Appointment",
    "AppointmentCandidate",
    "AppointmentStatus",
    "Period",
    "RescheduledBy",
    "RescheduleRequest",
    "WaitListEntry",
    "WaitListStatus",
    "ConflictType",
    "ConflictDetail",
    "ConflictCheck",
    "DayCapacity",
    "MonthFeasibility",
    "IssueSeverity",
    "IntegrityIssue",
    "IntegrityReport",
    "AppointmentComparison",
    "SlotSuggestion",
    "ScheduleGenerationRequest",
    "ScheduleGenerationResult",
    "CustomerScheduleOutcome",
    "BulkScheduleResult",
    "RescheduleResult",
    "BulkRescheduleItem",
    "MonthlyUtilization",
    "OptimalDistribution",
    "Compensation",
]
