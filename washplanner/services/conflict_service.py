"""
Conflict detection for wash appointments.

Checks a candidate slot against existing bookings for:
- Exact time collisions (same date and time)
- Period capacity (morning / evening limits)
- Customer duplicates (same customer twice on one day)

Also answers capacity questions (per day, per month) and audits a whole
appointment set for integrity violations. Only active appointments occupy
capacity; cancelled and rescheduled-away records are ignored everywhere.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from washplanner.lib.dates import generate_month_dates
from washplanner.lib.logging import get_logger
from washplanner.lib.rules import SchedulingRules, get_scheduling_rules
from washplanner.models.appointments import Appointment, AppointmentCandidate, Period
from washplanner.models.results import (
    AppointmentComparison,
    ConflictCheck,
    ConflictDetail,
    ConflictType,
    DayCapacity,
    IntegrityIssue,
    IntegrityReport,
    IssueSeverity,
    MonthFeasibility,
)


logger = get_logger(__name__)

Candidate = Union[Appointment, AppointmentCandidate]


class BookingIndex:
    """
    Lookup tables over the active appointments of a working set.
    
    Built once per scheduling run and extended with every visit the run
    places, so later candidates see earlier placements without rescanning
    the whole list.
    """
    
    def __init__(self, appointments: Iterable[Appointment] = (), exclude_id: Optional[int] = None):
        self._by_slot: Dict[Tuple[str, str], Appointment] = {}
        self._by_customer_day: Dict[Tuple[int, str], Appointment] = {}
        self._period_counts: Dict[Tuple[str, Period], int] = defaultdict(int)
        self._day_counts: Dict[str, int] = defaultdict(int)
        self._exclude_id = exclude_id
        for appointment in appointments:
            self.add(appointment)
    
    def add(self, appointment: Appointment) -> None:
        """Register an appointment; inactive or excluded ones are ignored."""
        if not appointment.is_active:
            return
        if self._exclude_id is not None and appointment.id == self._exclude_id:
            return
        self._by_slot.setdefault((appointment.date, appointment.time), appointment)
        self._by_customer_day.setdefault((appointment.customer_id, appointment.date), appointment)
        self._period_counts[(appointment.date, appointment.period)] += 1
        self._day_counts[appointment.date] += 1
    
    def booked_at(self, date: str, time: str) -> Optional[Appointment]:
        return self._by_slot.get((date, time))
    
    def customer_booking(self, customer_id: int, date: str) -> Optional[Appointment]:
        return self._by_customer_day.get((customer_id, date))
    
    def period_count(self, date: str, period: Period) -> int:
        return self._period_counts.get((date, period), 0)
    
    def day_count(self, date: str) -> int:
        return self._day_counts.get(date, 0)


class ConflictService:
    """Service for detecting booking conflicts and summarising capacity."""
    
    def __init__(self, rules: Optional[SchedulingRules] = None):
        self._rules = rules
    
    @property
    def rules(self) -> SchedulingRules:
        return self._rules or get_scheduling_rules()
    
    def check_conflict(
        self,
        candidate: Candidate,
        existing_appointments: Iterable[Appointment],
        exclude_id: Optional[int] = None,
    ) -> ConflictCheck:
        """
        Check one candidate slot against existing appointments.
        
        Args:
            candidate: Appointment or bare candidate (date, time, optional period/customer)
            existing_appointments: Current bookings
            exclude_id: Appointment id to ignore (the record being edited)
        
        Returns:
            ConflictCheck listing every triggered conflict; the three checks
            run independently, so one candidate can trigger several.
        """
        index = BookingIndex(existing_appointments, exclude_id=exclude_id)
        return self.check_against_index(candidate, index)
    
    def check_against_index(self, candidate: Candidate, index: BookingIndex) -> ConflictCheck:
        """Same as check_conflict, against a prebuilt BookingIndex."""
        rules = self.rules
        conflicts: List[ConflictDetail] = []
        
        # 1. Exact time
        clash = index.booked_at(candidate.date, candidate.time)
        if clash is not None:
            conflicts.append(ConflictDetail(
                type=ConflictType.EXACT_TIME,
                message=(
                    f"Another appointment is booked on {candidate.date} at "
                    f"{candidate.time}: {clash.customer_name or f'customer {clash.customer_id}'}"
                ),
                appointment_id=clash.id,
            ))
        
        # 2. Period capacity
        period = candidate.period or rules.period_for_time(candidate.time)
        if period is not None:
            used = index.period_count(candidate.date, period)
            capacity = rules.capacity_for(period)
            if used >= capacity:
                conflicts.append(ConflictDetail(
                    type=ConflictType.CAPACITY,
                    message=f"The {period.value} period on {candidate.date} is full ({used}/{capacity})",
                ))
        
        # 3. Customer already booked that day
        if candidate.customer_id is not None:
            duplicate = index.customer_booking(candidate.customer_id, candidate.date)
            if duplicate is not None:
                conflicts.append(ConflictDetail(
                    type=ConflictType.CUSTOMER_DUPLICATE,
                    message=f"Customer already has an appointment on {candidate.date}",
                    appointment_id=duplicate.id,
                ))
        
        return ConflictCheck(has_conflict=bool(conflicts), conflicts=conflicts)
    
    def check_bulk_conflicts(
        self,
        candidates: Sequence[Candidate],
        existing_appointments: Iterable[Appointment],
    ) -> List[Tuple[Candidate, ConflictCheck]]:
        """Check each candidate independently against the same snapshot."""
        index = BookingIndex(existing_appointments)
        return [(candidate, self.check_against_index(candidate, index)) for candidate in candidates]
    
    def is_time_slot_available(
        self,
        date: str,
        time: str,
        period: Period,
        existing_appointments: Iterable[Appointment],
    ) -> bool:
        """Free at the exact time and the period still has capacity."""
        index = BookingIndex(existing_appointments)
        if index.booked_at(date, time) is not None:
            return False
        return index.period_count(date, period) < self.rules.capacity_for(period)
    
    def available_time_slots(
        self,
        date: str,
        period: Period,
        existing_appointments: Iterable[Appointment],
        slot_table: Optional[Sequence[str]] = None,
    ) -> List[str]:
        """
        Slots of the table not held by an active appointment on `date`.
        
        Args:
            date: ISO date
            period: Period whose slot table is used when `slot_table` is omitted
            existing_appointments: Current bookings
            slot_table: Explicit slot list; order is preserved in the result
        """
        index = BookingIndex(existing_appointments)
        return self.available_slots_from_index(date, period, index, slot_table)
    
    def available_slots_from_index(
        self,
        date: str,
        period: Period,
        index: BookingIndex,
        slot_table: Optional[Sequence[str]] = None,
    ) -> List[str]:
        table = self.rules.slots_for(period) if slot_table is None else slot_table
        return [time for time in table if index.booked_at(date, time) is None]
    
    def day_capacity(self, date: str, existing_appointments: Iterable[Appointment]) -> DayCapacity:
        """Used and remaining capacity per period for one day."""
        return self.day_capacity_from_index(date, BookingIndex(existing_appointments))
    
    def day_capacity_from_index(self, date: str, index: BookingIndex) -> DayCapacity:
        rules = self.rules
        morning_used = index.period_count(date, Period.MORNING)
        evening_used = index.period_count(date, Period.EVENING)
        total_used = index.day_count(date)
        return DayCapacity(
            morning_used=morning_used,
            morning_available=rules.morning_capacity - morning_used,
            evening_used=evening_used,
            evening_available=rules.evening_capacity - evening_used,
            total_used=total_used,
            total_available=rules.daily_capacity - total_used,
        )
    
    def can_schedule_customer_in_month(
        self,
        customer_id: int,
        year: int,
        month: int,
        required_visits: int,
        existing_appointments: Iterable[Appointment],
    ) -> MonthFeasibility:
        """
        Necessary (not sufficient) feasibility test: the month must contain
        at least `required_visits` days with spare capacity.
        """
        index = BookingIndex(existing_appointments)
        open_days = [
            date for date in generate_month_dates(year, month)
            if self.day_capacity_from_index(date, index).total_available > 0
        ]
        
        if len(open_days) < required_visits:
            logger.info(
                "Month infeasible for customer",
                extra={
                    "customer_id": customer_id,
                    "year": year,
                    "month": month,
                    "available_days": len(open_days),
                    "required_visits": required_visits,
                },
            )
            return MonthFeasibility(
                possible=False,
                reason=(
                    f"Available days ({len(open_days)}) are fewer than "
                    f"the required washes ({required_visits})"
                ),
                available_days=len(open_days),
            )
        
        return MonthFeasibility(possible=True, available_days=len(open_days))
    
    @staticmethod
    def compare_appointments(first: Candidate, second: Candidate) -> AppointmentComparison:
        return AppointmentComparison(
            same_time=first.date == second.date and first.time == second.time,
            same_customer=first.customer_id == second.customer_id,
            same_date=first.date == second.date,
        )
    
    def validate_integrity(self, appointments: Iterable[Appointment]) -> IntegrityReport:
        """
        Audit a full appointment set.
        
        Reports every (date, time) held by more than one active appointment
        and every (date, period) over capacity. Used after the fact; the
        schedulers only prevent new violations.
        """
        rules = self.rules
        by_slot: Dict[Tuple[str, str], List[int]] = defaultdict(list)
        by_period: Dict[Tuple[str, Period], List[int]] = defaultdict(list)
        
        for appointment in appointments:
            if not appointment.is_active:
                continue
            by_slot[(appointment.date, appointment.time)].append(appointment.id)
            by_period[(appointment.date, appointment.period)].append(appointment.id)
        
        issues: List[IntegrityIssue] = []
        
        for (date, time), ids in by_slot.items():
            if len(ids) > 1:
                issues.append(IntegrityIssue(
                    severity=IssueSeverity.ERROR,
                    kind=ConflictType.EXACT_TIME,
                    message=f"Time conflict on {date} at {time}: {len(ids)} appointments",
                    appointment_ids=ids,
                ))
        
        for (date, period), ids in sorted(by_period.items(), key=lambda item: (item[0][0], item[0][1].value)):
            capacity = rules.capacity_for(period)
            if len(ids) > capacity:
                issues.append(IntegrityIssue(
                    severity=IssueSeverity.ERROR,
                    kind=ConflictType.CAPACITY,
                    message=f"{period.value.capitalize()} capacity exceeded on {date}: {len(ids)}/{capacity}",
                    appointment_ids=ids,
                ))
        
        if issues:
            logger.warning("Schedule integrity violations found", extra={"issue_count": len(issues)})
        
        return IntegrityReport(
            valid=not any(issue.severity is IssueSeverity.ERROR for issue in issues),
            issues=issues,
        )
