"""
Priority scoring for wait-list ordering and tie-breaking.

Score components (additive):
- VIP customer: +50
- Tenure: +2 per full 30-day month since joining, capped at +30
- Waiting time: +1 per full hour waited, capped at +20
- Low balance (fewer than 3 washes remaining): +10
- Perfect attendance (no misses, more than 5 completed): +15
"""
from datetime import datetime, time, timezone
from typing import Dict, Iterable, List, Optional

from washplanner.lib.logging import get_logger
from washplanner.models.customers import Customer
from washplanner.models.waitlist import WaitListEntry


logger = get_logger(__name__)

VIP_BONUS = 50
TENURE_POINTS_PER_MONTH = 2
TENURE_CAP = 30
WAIT_POINTS_PER_HOUR = 1
WAIT_CAP = 20
LOW_BALANCE_THRESHOLD = 3
LOW_BALANCE_BONUS = 10
ATTENDANCE_MIN_COMPLETED = 5
ATTENDANCE_BONUS = 15

_SECONDS_PER_HOUR = 3600
_DAYS_PER_MONTH = 30


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PriorityService:
    """Service scoring customers for wait-list order."""
    
    def priority_score(
        self,
        customer: Customer,
        waiting_since: datetime,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Compute a customer's priority; higher means served first.
        
        Args:
            customer: Customer being scored
            waiting_since: When the customer started waiting
            now: Reference time (default: current UTC time); naive values are UTC
        
        Returns:
            Non-negative integer score
        """
        now = _as_utc(now or datetime.now(timezone.utc))
        score = 0
        
        if customer.is_vip:
            score += VIP_BONUS
        
        joined = datetime.combine(customer.join_date, time.min, tzinfo=timezone.utc)
        months = max(0, (now - joined).days // _DAYS_PER_MONTH)
        score += min(months * TENURE_POINTS_PER_MONTH, TENURE_CAP)
        
        waited_hours = max(0, int((now - _as_utc(waiting_since)).total_seconds() // _SECONDS_PER_HOUR))
        score += min(waited_hours * WAIT_POINTS_PER_HOUR, WAIT_CAP)
        
        if customer.remaining_washes < LOW_BALANCE_THRESHOLD:
            score += LOW_BALANCE_BONUS
        
        if customer.missed_washes == 0 and customer.completed_washes > ATTENDANCE_MIN_COMPLETED:
            score += ATTENDANCE_BONUS
        
        return score
    
    def sort_wait_list(
        self,
        entries: Iterable[WaitListEntry],
        customers_map: Dict[int, Customer],
        now: Optional[datetime] = None,
    ) -> List[WaitListEntry]:
        """
        Order wait-list entries by descending priority.
        
        Returned entries carry their computed `priority_score`. Equal scores
        keep input order; entries whose customer is unknown go last, in
        input order, with their score unchanged.
        """
        now = now or datetime.now(timezone.utc)
        scored = []
        unknown = []
        for entry in entries:
            customer = customers_map.get(entry.customer_id)
            if customer is None:
                unknown.append(entry)
                continue
            score = self.priority_score(customer, entry.requested_at, now=now)
            scored.append(entry.model_copy(update={"priority_score": score}))
        
        if unknown:
            logger.warning(
                "Wait-list entries reference unknown customers",
                extra={"entry_ids": [e.id for e in unknown]},
            )
        
        scored.sort(key=lambda e: -e.priority_score)
        return scored + unknown
