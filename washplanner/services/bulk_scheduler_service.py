"""
Bulk scheduling: many customers, one month, shared capacity.

Customers are processed one after another against an accumulating set of
appointments, so every customer sees the capacity consumed by the ones
scheduled before it. Priority order: VIP first, then longest-standing.
"""
import asyncio
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from washplanner.lib.logging import get_logger
from washplanner.models.appointments import Appointment
from washplanner.models.customers import Customer
from washplanner.models.results import BulkScheduleResult, CustomerScheduleOutcome
from washplanner.services.scheduler_service import SchedulerService


logger = get_logger(__name__)

DEFAULT_CHUNK_SIZE = 10


class BulkSchedulerService:
    """Service scheduling a batch of customers sequentially."""
    
    def __init__(self, scheduler: Optional[SchedulerService] = None):
        self.scheduler = scheduler or SchedulerService()
    
    @staticmethod
    def order_customers(customers: Iterable[Customer]) -> List[Customer]:
        """VIP first, then ascending join date; input order breaks ties."""
        return sorted(customers, key=lambda c: (not c.is_vip, c.join_date))
    
    def schedule_bulk(
        self,
        customers: Iterable[Customer],
        year: int,
        month: int,
        existing_appointments: Sequence[Appointment] = (),
    ) -> BulkScheduleResult:
        """
        Schedule every customer for the month.
        
        Args:
            customers: Customers to schedule (any order)
            year: Target year
            month: Target month
            existing_appointments: Bookings already in place
        
        Returns:
            BulkScheduleResult; `success` is False if any customer got no visit
        """
        ordered = self.order_customers(customers)
        result, _ = self._fold(ordered, year, month, list(existing_appointments))
        logger.info(
            "Bulk schedule finished",
            extra={
                "customers": len(ordered),
                "total_scheduled": result.total_scheduled,
                "total_failed": result.total_failed,
            },
        )
        return result
    
    def iter_chunks(
        self,
        customers: Iterable[Customer],
        year: int,
        month: int,
        existing_appointments: Sequence[Appointment] = (),
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> Iterator[BulkScheduleResult]:
        """
        Schedule in chunks, yielding one result per chunk.
        
        Ordering is applied to the whole batch before chunking, and each
        chunk runs against the appointments of all earlier chunks, so the
        concatenated outcome equals a single schedule_bulk call. Callers can
        persist or stop between chunks.
        """
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        
        ordered = self.order_customers(customers)
        accumulated = list(existing_appointments)
        for start in range(0, len(ordered), chunk_size):
            chunk = ordered[start:start + chunk_size]
            result, accumulated = self._fold(chunk, year, month, accumulated)
            logger.debug(
                "Bulk schedule chunk finished",
                extra={"chunk_start": start, "chunk_size": len(chunk), "scheduled": result.total_scheduled},
            )
            yield result
    
    async def schedule_bulk_async(
        self,
        customers: Iterable[Customer],
        year: int,
        month: int,
        existing_appointments: Sequence[Appointment] = (),
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> BulkScheduleResult:
        """Chunked bulk scheduling that yields to the event loop between chunks."""
        chunks = []
        for chunk in self.iter_chunks(customers, year, month, existing_appointments, chunk_size):
            chunks.append(chunk)
            await asyncio.sleep(0)
        return self.merge_results(chunks)
    
    @staticmethod
    def merge_results(results: Iterable[BulkScheduleResult]) -> BulkScheduleResult:
        """Fold chunk results into one batch result."""
        outcomes: List[CustomerScheduleOutcome] = []
        total_scheduled = 0
        total_failed = 0
        for result in results:
            outcomes.extend(result.results)
            total_scheduled += result.total_scheduled
            total_failed += result.total_failed
        return BulkScheduleResult(
            success=total_failed == 0,
            results=outcomes,
            total_scheduled=total_scheduled,
            total_failed=total_failed,
        )
    
    def _fold(
        self,
        ordered: Sequence[Customer],
        year: int,
        month: int,
        accumulated: List[Appointment],
    ) -> Tuple[BulkScheduleResult, List[Appointment]]:
        """Schedule `ordered` in sequence; returns the result and the grown appointment set."""
        outcomes: List[CustomerScheduleOutcome] = []
        total_scheduled = 0
        total_failed = 0
        
        for customer in ordered:
            result = self.scheduler.schedule_customer(customer, year, month, accumulated)
            outcomes.append(CustomerScheduleOutcome(customer=customer, result=result))
            
            if result.success:
                accumulated = accumulated + result.schedule
                total_scheduled += len(result.schedule)
            else:
                total_failed += 1
        
        return (
            BulkScheduleResult(
                success=total_failed == 0,
                results=outcomes,
                total_scheduled=total_scheduled,
                total_failed=total_failed,
            ),
            accumulated,
        )
