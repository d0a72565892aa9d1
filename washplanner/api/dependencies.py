"""
API dependencies for FastAPI dependency injection.

Every request gets services bound to the scheduling rules in force at the
time of the call.
"""
from fastapi import Depends

from washplanner.lib.rules import SchedulingRules, get_scheduling_rules
from washplanner.services.bulk_scheduler_service import BulkSchedulerService
from washplanner.services.capacity_service import CapacityService
from washplanner.services.conflict_service import ConflictService
from washplanner.services.priority_service import PriorityService
from washplanner.services.rescheduling_service import ReschedulingService
from washplanner.services.scheduler_service import SchedulerService


def get_rules() -> SchedulingRules:
    return get_scheduling_rules()


def get_conflict_service(rules: SchedulingRules = Depends(get_rules)) -> ConflictService:
    return ConflictService(rules)


def get_capacity_service(rules: SchedulingRules = Depends(get_rules)) -> CapacityService:
    return CapacityService(rules)


def get_scheduler_service(
    rules: SchedulingRules = Depends(get_rules),
    conflicts: ConflictService = Depends(get_conflict_service),
) -> SchedulerService:
    return SchedulerService(rules, conflicts)


def get_bulk_scheduler_service(
    scheduler: SchedulerService = Depends(get_scheduler_service),
) -> BulkSchedulerService:
    return BulkSchedulerService(scheduler)


def get_rescheduling_service(
    rules: SchedulingRules = Depends(get_rules),
    conflicts: ConflictService = Depends(get_conflict_service),
) -> ReschedulingService:
    return ReschedulingService(rules, conflicts)


def get_priority_service() -> PriorityService:
    return PriorityService()
