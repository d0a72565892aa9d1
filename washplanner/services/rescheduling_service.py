"""
Rescheduling of missed or absent appointments.

Searches forward from the affected date over the customer's preferred
weekdays and periods for the next free slot, re-validates it with the
conflict detector, and produces the replacement appointment. The original
appointment is left untouched; flipping its status is the caller's job.
"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from washplanner.lib.dates import add_days, weekday_name
from washplanner.lib.ids import IdAllocator
from washplanner.lib.logging import get_logger
from washplanner.lib.metrics import get_metrics_collector
from washplanner.lib.rules import SchedulingRules, get_scheduling_rules
from washplanner.models.appointments import (
    Appointment,
    AppointmentCandidate,
    AppointmentStatus,
    Period,
    RescheduledBy,
    RescheduleRequest,
)
from washplanner.models.customers import Customer, PreferredPeriod
from washplanner.models.results import BulkRescheduleItem, RescheduleResult, SlotSuggestion
from washplanner.services.conflict_service import BookingIndex, ConflictService


logger = get_logger(__name__)

DEFAULT_ABSENCE_REASON = "Customer absent"
BULK_ABSENCE_REASON = "Bulk absence"


class ReschedulingService:
    """Service proposing and building replacement appointments."""
    
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
    
    @staticmethod
    def periods_to_try(preferred_period: PreferredPeriod) -> List[Period]:
        if preferred_period is PreferredPeriod.MORNING:
            return [Period.MORNING]
        if preferred_period is PreferredPeriod.EVENING:
            return [Period.EVENING]
        return [Period.MORNING, Period.EVENING]
    
    def suggest_next_slot(
        self,
        customer: Customer,
        after_date: str,
        appointments: Iterable[Appointment],
    ) -> Optional[SlotSuggestion]:
        """
        First free slot on a preferred weekday, from `after_date` + min gap
        through `after_date` + window (inclusive). Periods already at capacity
        are skipped.
        
        Args:
            customer: Customer whose preferred days and period bound the search
            after_date: ISO date the search is anchored at
            appointments: Current bookings
        
        Returns:
            SlotSuggestion, or None when the window holds no free slot
        """
        rules = self.rules
        index = BookingIndex(appointments)
        preferred_days = set(customer.preferred_days)
        periods = self.periods_to_try(customer.preferred_period)
        
        for offset in range(rules.min_gap_days, rules.reschedule_window_days + 1):
            candidate_date = add_days(after_date, offset)
            if weekday_name(candidate_date) not in preferred_days:
                continue
            for period in periods:
                if index.period_count(candidate_date, period) >= rules.capacity_for(period):
                    continue
                free = self.conflicts.available_slots_from_index(candidate_date, period, index)
                if free:
                    return SlotSuggestion(date=candidate_date, time=free[0], period=period)
        return None
    
    def auto_reschedule(
        self,
        request: RescheduleRequest,
        customer: Customer,
        all_appointments: Sequence[Appointment],
        original: Optional[Appointment] = None,
    ) -> RescheduleResult:
        """
        Build a replacement for the appointment named in `request`.
        
        Args:
            request: Which appointment to move, optional anchor date and reason
            customer: Owner of the appointment
            all_appointments: Current bookings (the old appointment included)
            original: The appointment itself, when it is not part of `all_appointments`
        
        Returns:
            RescheduleResult carrying the new upcoming appointment on success
        """
        metrics = get_metrics_collector()
        actor = RescheduledBy.SYSTEM if request.is_automatic else RescheduledBy.MANUAL
        
        try:
            old = next((a for a in all_appointments if a.id == request.appointment_id), original)
            anchor = request.new_date or (old.date if old is not None else None)
            if anchor is None:
                metrics.increment_reschedules(outcome="not_found", rescheduled_by=actor.value)
                return RescheduleResult(
                    success=False,
                    message=f"Appointment {request.appointment_id} not found and no anchor date given",
                )
            
            suggestion = self.suggest_next_slot(customer, anchor, all_appointments)
            if suggestion is None:
                metrics.increment_reschedules(outcome="no_slot", rescheduled_by=actor.value)
                logger.warning(
                    "No slot available for rescheduling",
                    extra={"appointment_id": request.appointment_id, "customer_id": customer.id, "anchor": anchor},
                )
                return RescheduleResult(
                    success=False,
                    message=(
                        f"No available slot within {self.rules.reschedule_window_days} days "
                        f"on the preferred days and periods"
                    ),
                )
            
            candidate = AppointmentCandidate(
                customer_id=customer.id,
                date=suggestion.date,
                time=suggestion.time,
                period=suggestion.period,
            )
            check = self.conflicts.check_conflict(
                candidate, all_appointments, exclude_id=request.appointment_id
            )
            if check.has_conflict:
                metrics.increment_reschedules(outcome="conflict", rescheduled_by=actor.value)
                return RescheduleResult(
                    success=False,
                    message="Could not reschedule because of time or capacity conflicts",
                    conflicts=[c.message for c in check.conflicts],
                )
            
            new_appointment = self._build_replacement(
                old, customer, suggestion, request, actor, all_appointments
            )
            metrics.increment_reschedules(outcome="success", rescheduled_by=actor.value)
            metrics.increment_appointments_scheduled(source="rescheduler")
            logger.info(
                "Appointment rescheduled",
                extra={
                    "appointment_id": request.appointment_id,
                    "new_appointment_id": new_appointment.id,
                    "date": suggestion.date,
                    "time": suggestion.time,
                },
            )
            return RescheduleResult(
                success=True,
                new_appointment=new_appointment,
                message=f"Suggested new appointment on {suggestion.date} at {suggestion.time}",
            )
        
        except Exception as exc:
            logger.exception("Rescheduling crashed", extra={"appointment_id": request.appointment_id})
            metrics.increment_reschedules(outcome="error", rescheduled_by=actor.value)
            return RescheduleResult(success=False, message=f"Rescheduling failed: {exc}")
    
    def bulk_auto_reschedule(
        self,
        appointments: Iterable[Appointment],
        customers_map: Dict[int, Customer],
        all_appointments: Sequence[Appointment],
    ) -> List[BulkRescheduleItem]:
        """
        Reschedule many absences.
        
        Each accepted replacement joins the working set before the next
        absence is processed, so two absentees are never offered the same
        slot. A missing customer fails only its own item.
        """
        working = list(all_appointments)
        items: List[BulkRescheduleItem] = []
        
        for appointment in appointments:
            customer = customers_map.get(appointment.customer_id)
            if customer is None:
                items.append(BulkRescheduleItem(
                    appointment_id=appointment.id,
                    result=RescheduleResult(success=False, message="Customer not found"),
                ))
                continue
            
            result = self.auto_reschedule(
                RescheduleRequest(
                    appointment_id=appointment.id,
                    new_date=appointment.date,
                    reason=BULK_ABSENCE_REASON,
                    is_automatic=True,
                ),
                customer,
                working,
                original=appointment,
            )
            if result.success and result.new_appointment is not None:
                working.append(result.new_appointment)
            items.append(BulkRescheduleItem(appointment_id=appointment.id, result=result))
        
        rescheduled = sum(1 for item in items if item.result.success)
        logger.info(
            "Bulk reschedule finished",
            extra={"requested": len(items), "rescheduled": rescheduled},
        )
        return items
    
    def _build_replacement(
        self,
        old: Optional[Appointment],
        customer: Customer,
        suggestion: SlotSuggestion,
        request: RescheduleRequest,
        actor: RescheduledBy,
        all_appointments: Sequence[Appointment],
    ) -> Appointment:
        now = datetime.now(timezone.utc)
        new_id = IdAllocator(a.id for a in all_appointments).next()
        if old is not None and new_id <= old.id:
            new_id = old.id + 1
        
        changes = {
            "id": new_id,
            "date": suggestion.date,
            "day_name": weekday_name(suggestion.date),
            "time": suggestion.time,
            "period": suggestion.period,
            "status": AppointmentStatus.UPCOMING,
            "was_rescheduled": True,
            "original_date": old.date if old is not None else None,
            "reschedule_reason": request.reason or DEFAULT_ABSENCE_REASON,
            "rescheduled_by": actor,
            "completed_at": None,
            "created_at": now,
            "updated_at": now,
        }
        
        if old is not None:
            return old.model_copy(update=changes)
        
        rules = self.rules
        return Appointment(
            customer_id=customer.id,
            customer_name=customer.name,
            phone=customer.phone,
            car_type=customer.car_type,
            car_size=customer.car_size,
            wash_number=1,
            price=rules.price_per_wash,
            **changes,
        )
