"""
Monthly schedule generation for a single customer.

Distributes the customer's owed visits across a month:
- Preferred weekdays first, least congested days first
- Minimum gap between any two visits of the run
- Preferred period first, the other period as fallback
- A second pass over every remaining day of the month (ignoring weekday
  preference) when the preferred days cannot hold all visits

Failures are reported as results, never raised.
"""
from typing import List, NamedTuple, Optional, Sequence

from washplanner.lib.dates import days_between, generate_month_dates, weekday_name
from washplanner.lib.ids import IdAllocator
from washplanner.lib.logging import get_logger
from washplanner.lib.metrics import get_metrics_collector
from washplanner.lib.rules import SchedulingRules, get_scheduling_rules
from washplanner.models.appointments import Appointment, AppointmentCandidate, Period
from washplanner.models.customers import CarSize, Customer, PreferredPeriod
from washplanner.models.results import ScheduleGenerationRequest, ScheduleGenerationResult
from washplanner.services.conflict_service import BookingIndex, ConflictService


logger = get_logger(__name__)


class _Placement(NamedTuple):
    id: int
    date: str
    time: str
    period: Period


class SchedulerService:
    """Service generating one customer's visits for a month."""
    
    def __init__(
        self,
        rules: Optional[SchedulingRules] = None,
        conflict_service: Optional[ConflictService] = None,
    ):
        self._rules = rules
        self.conflicts = conflict_service or ConflictService(rules)
    
    @property
    def rules(self) -> SchedulingRules:
        return self._rules or get_scheduling_rules()
    
    def schedule_customer(
        self,
        customer: Customer,
        year: int,
        month: int,
        existing_appointments: Sequence[Appointment],
    ) -> ScheduleGenerationResult:
        """
        Generate the customer's visits for `year`-`month`.
        
        Args:
            customer: Customer whose preferences and wash total drive the run
            year: Target year
            month: Target month (1-12)
            existing_appointments: Bookings the new visits must not collide with
        
        Returns:
            ScheduleGenerationResult with the new appointments sorted by date
        """
        try:
            request = ScheduleGenerationRequest.for_customer(customer, year, month)
        except ValueError as exc:
            logger.warning("Invalid schedule request", extra={"customer_id": customer.id, "error": str(exc)})
            return ScheduleGenerationResult(
                success=False,
                message=f"Schedule generation failed: {exc}",
            )
        return self.generate(request, existing_appointments, customer=customer)
    
    def generate(
        self,
        request: ScheduleGenerationRequest,
        existing_appointments: Sequence[Appointment],
        customer: Optional[Customer] = None,
    ) -> ScheduleGenerationResult:
        """
        Run the allocation for a request.
        
        `customer`, when given, supplies the name/phone/car snapshot copied
        onto each appointment; without it those fields stay blank.
        """
        warnings: List[str] = []
        metrics = get_metrics_collector()
        
        try:
            rules = self.rules
            all_dates = generate_month_dates(request.year, request.month)
            preferred_days = set(request.preferred_days)
            preferred_dates = [d for d in all_dates if weekday_name(d) in preferred_days]
            
            if not preferred_dates:
                metrics.increment_scheduling_runs(outcome="failed")
                logger.warning(
                    "No preferred days in month",
                    extra={"customer_id": request.customer_id, "year": request.year, "month": request.month},
                )
                return ScheduleGenerationResult(
                    success=False,
                    message="No preferred days available in this month",
                    warnings=warnings,
                )
            
            index = BookingIndex(existing_appointments)
            ids = IdAllocator(a.id for a in existing_appointments)
            placements: List[_Placement] = []
            
            # Least congested days first; sorted() keeps calendar order on ties
            ranked_dates = sorted(
                preferred_dates,
                key=lambda d: -self.conflicts.day_capacity_from_index(d, index).total_available,
            )
            
            for date in ranked_dates:
                if len(placements) >= request.total_washes:
                    break
                if not self._respects_gap(date, placements, rules.min_gap_days):
                    continue
                placement = self._place_on_date(
                    request.customer_id, date, request.preferred_period, index, ids
                )
                if placement is None:
                    warnings.append(f"Could not schedule on {date}")
                    continue
                placements.append(placement)
            
            # Fallback: any unused day of the month, period treated as flexible
            if len(placements) < request.total_washes:
                used_dates = {p.date for p in placements}
                for date in all_dates:
                    if len(placements) >= request.total_washes:
                        break
                    if date in used_dates or not self._respects_gap(date, placements, rules.min_gap_days):
                        continue
                    placement = self._place_on_date(
                        request.customer_id, date, PreferredPeriod.FLEXIBLE, index, ids
                    )
                    if placement is not None:
                        placements.append(placement)
                        used_dates.add(date)
            
            if not placements:
                metrics.increment_scheduling_runs(outcome="failed")
                logger.warning(
                    "Failed to schedule any visit",
                    extra={"customer_id": request.customer_id, "year": request.year, "month": request.month},
                )
                return ScheduleGenerationResult(
                    success=False,
                    message="Failed to schedule any appointment",
                    warnings=warnings,
                )
            
            schedule = self._build_schedule(placements, request.customer_id, customer, rules)
            placed = len(schedule)
            
            if placed < request.total_washes:
                warnings.append(f"Only {placed} of {request.total_washes} washes were scheduled")
                message = f"Partial schedule generated: {placed}/{request.total_washes}"
                outcome = "partial"
            else:
                message = "Schedule generated successfully"
                outcome = "full"
            
            metrics.increment_scheduling_runs(outcome=outcome)
            metrics.increment_appointments_scheduled(source="scheduler", amount=placed)
            logger.info(
                "Generated customer schedule",
                extra={
                    "customer_id": request.customer_id,
                    "year": request.year,
                    "month": request.month,
                    "placed": placed,
                    "requested": request.total_washes,
                },
            )
            
            return ScheduleGenerationResult(
                success=True,
                schedule=schedule,
                message=message,
                warnings=warnings,
            )
        
        except Exception as exc:
            logger.exception(
                "Schedule generation crashed",
                extra={"customer_id": request.customer_id},
            )
            metrics.increment_scheduling_runs(outcome="failed")
            return ScheduleGenerationResult(
                success=False,
                message=f"Schedule generation failed: {exc}",
                warnings=warnings,
            )
    
    @staticmethod
    def _respects_gap(date: str, placements: Sequence[_Placement], min_gap_days: int) -> bool:
        return all(abs(days_between(p.date, date)) >= min_gap_days for p in placements)
    
    def period_order(
        self,
        preferred_period: PreferredPeriod,
        date: str,
        index: BookingIndex,
    ) -> List[Period]:
        """
        Periods to try on `date`, best first.
        
        Flexible customers get whichever period has more room that day;
        morning wins a tie.
        """
        if preferred_period is PreferredPeriod.MORNING:
            return [Period.MORNING, Period.EVENING]
        if preferred_period is PreferredPeriod.EVENING:
            return [Period.EVENING, Period.MORNING]
        capacity = self.conflicts.day_capacity_from_index(date, index)
        if capacity.morning_available >= capacity.evening_available:
            return [Period.MORNING, Period.EVENING]
        return [Period.EVENING, Period.MORNING]
    
    def _place_on_date(
        self,
        customer_id: int,
        date: str,
        preferred_period: PreferredPeriod,
        index: BookingIndex,
        ids: IdAllocator,
    ) -> Optional[_Placement]:
        """Book the first conflict-free slot on `date` and record it in the index."""
        rules = self.rules
        for period in self.period_order(preferred_period, date, index):
            for time in rules.slots_for(period):
                candidate = AppointmentCandidate(
                    customer_id=customer_id, date=date, time=time, period=period
                )
                if self.conflicts.check_against_index(candidate, index).has_conflict:
                    continue
                placement = _Placement(id=ids.next(), date=date, time=time, period=period)
                index.add(Appointment(
                    id=placement.id,
                    customer_id=customer_id,
                    date=date,
                    day_name=weekday_name(date),
                    time=time,
                    period=period,
                    wash_number=1,
                ))
                return placement
        return None
    
    @staticmethod
    def _build_schedule(
        placements: Sequence[_Placement],
        customer_id: int,
        customer: Optional[Customer],
        rules: SchedulingRules,
    ) -> List[Appointment]:
        """Materialise placements in date order; wash numbers follow the calendar."""
        schedule = []
        ordered = sorted(placements, key=lambda p: (p.date, p.time))
        for wash_number, placement in enumerate(ordered, start=1):
            is_paid = wash_number <= rules.paid_visits
            schedule.append(Appointment(
                id=placement.id,
                customer_id=customer_id,
                customer_name=customer.name if customer else "",
                phone=customer.phone if customer else "",
                car_type=customer.car_type if customer else "",
                car_size=customer.car_size if customer else CarSize.SMALL,
                date=placement.date,
                day_name=weekday_name(placement.date),
                time=placement.time,
                period=placement.period,
                wash_number=wash_number,
                price=rules.price_per_wash,
                is_paid=is_paid,
                is_free=not is_paid,
            ))
        return schedule
