"""
Unit tests for the conflict detector.
"""
import pytest

from washplanner.lib.dates import generate_month_dates, minutes_to_time
from washplanner.lib.rules import SchedulingRules
from washplanner.models.appointments import AppointmentCandidate, AppointmentStatus, Period
from washplanner.models.results import ConflictType
from washplanner.services.conflict_service import BookingIndex, ConflictService


DAY = "2025-10-10"


@pytest.fixture
def service():
    return ConflictService()


@pytest.fixture
def full_morning(make_appointment):
    """15 morning bookings on DAY by 15 different customers."""
    return [
        make_appointment(i + 1, 100 + i, DAY, minutes_to_time(7 * 60 + 10 * i))
        for i in range(15)
    ]


@pytest.mark.unit
def test_no_conflict_on_empty_day(service):
    candidate = AppointmentCandidate(customer_id=1, date=DAY, time="09:00", period=Period.MORNING)
    
    result = service.check_conflict(candidate, [])
    
    assert result.has_conflict is False
    assert result.conflicts == []


@pytest.mark.unit
def test_exact_time_conflict(service, make_appointment):
    existing = [make_appointment(1, 1, DAY, "09:00", customer_name="Ali")]
    candidate = AppointmentCandidate(customer_id=2, date=DAY, time="09:00", period=Period.MORNING)
    
    result = service.check_conflict(candidate, existing)
    
    assert result.has_conflict is True
    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.type is ConflictType.EXACT_TIME
    assert conflict.appointment_id == 1
    assert conflict.message == "Another appointment is booked on 2025-10-10 at 09:00: Ali"


@pytest.mark.unit
def test_capacity_conflict(service, full_morning):
    candidate = AppointmentCandidate(customer_id=99, date=DAY, time="11:30", period=Period.MORNING)
    
    result = service.check_conflict(candidate, full_morning)
    
    assert [c.type for c in result.conflicts] == [ConflictType.CAPACITY]
    assert result.conflicts[0].message == "The morning period on 2025-10-10 is full (15/15)"


@pytest.mark.unit
def test_capacity_period_derived_from_time(service, full_morning):
    """A candidate without a period is judged against the period its time belongs to."""
    morning = AppointmentCandidate(customer_id=99, date=DAY, time="11:30")
    evening = AppointmentCandidate(customer_id=99, date=DAY, time="13:00")
    
    assert service.check_conflict(morning, full_morning).has_conflict is True
    assert service.check_conflict(evening, full_morning).has_conflict is False


@pytest.mark.unit
def test_customer_duplicate_conflict(service, make_appointment):
    existing = [make_appointment(1, 7, DAY, "07:00")]
    candidate = AppointmentCandidate(customer_id=7, date=DAY, time="13:00", period=Period.EVENING)
    
    result = service.check_conflict(candidate, existing)
    
    assert [c.type for c in result.conflicts] == [ConflictType.CUSTOMER_DUPLICATE]
    assert result.conflicts[0].message == "Customer already has an appointment on 2025-10-10"


@pytest.mark.unit
def test_conflicts_accumulate(service, make_appointment):
    """Exact time and duplicate day are reported together."""
    existing = [make_appointment(1, 7, DAY, "07:00")]
    candidate = AppointmentCandidate(customer_id=7, date=DAY, time="07:00", period=Period.MORNING)
    
    result = service.check_conflict(candidate, existing)
    
    assert [c.type for c in result.conflicts] == [
        ConflictType.EXACT_TIME,
        ConflictType.CUSTOMER_DUPLICATE,
    ]


@pytest.mark.unit
def test_inactive_appointments_are_ignored(service, make_appointment):
    existing = [
        make_appointment(1, 1, DAY, "09:00", status=AppointmentStatus.CANCELLED),
        make_appointment(2, 2, DAY, "09:30", status=AppointmentStatus.RESCHEDULED),
    ]
    
    for time in ("09:00", "09:30"):
        candidate = AppointmentCandidate(customer_id=2, date=DAY, time=time, period=Period.MORNING)
        assert service.check_conflict(candidate, existing).has_conflict is False


@pytest.mark.unit
def test_exclude_id_ignores_the_record_being_moved(service, make_appointment):
    existing = [make_appointment(1, 1, DAY, "09:00")]
    candidate = AppointmentCandidate(customer_id=1, date=DAY, time="09:00", period=Period.MORNING)
    
    assert service.check_conflict(candidate, existing, exclude_id=1).has_conflict is False


@pytest.mark.unit
def test_check_bulk_conflicts_uses_same_snapshot(service, make_appointment):
    existing = [make_appointment(1, 1, DAY, "09:00")]
    candidates = [
        AppointmentCandidate(customer_id=2, date=DAY, time="09:00", period=Period.MORNING),
        AppointmentCandidate(customer_id=3, date=DAY, time="09:30", period=Period.MORNING),
        AppointmentCandidate(customer_id=4, date=DAY, time="09:30", period=Period.MORNING),
    ]
    
    results = service.check_bulk_conflicts(candidates, existing)
    
    assert [check.has_conflict for _, check in results] == [True, False, False]
    assert results[0][0] is candidates[0]


@pytest.mark.unit
def test_is_time_slot_available(service, make_appointment, full_morning):
    existing = [make_appointment(1, 1, DAY, "13:00", period=Period.EVENING)]
    
    assert service.is_time_slot_available(DAY, "13:00", Period.EVENING, existing) is False
    assert service.is_time_slot_available(DAY, "13:30", Period.EVENING, existing) is True
    assert service.is_time_slot_available(DAY, "11:30", Period.MORNING, full_morning) is False


@pytest.mark.unit
def test_available_time_slots(service, make_appointment):
    existing = [
        make_appointment(1, 1, DAY, "07:00"),
        make_appointment(2, 2, DAY, "08:00"),
        make_appointment(3, 3, "2025-10-11", "07:30"),
    ]
    
    slots = service.available_time_slots(DAY, Period.MORNING, existing)
    
    assert len(slots) == 9
    assert slots[0] == "07:30"
    assert "07:00" not in slots
    assert "08:00" not in slots


@pytest.mark.unit
def test_available_time_slots_with_custom_table(service, make_appointment):
    existing = [make_appointment(1, 1, DAY, "10:00")]
    
    slots = service.available_time_slots(DAY, Period.MORNING, existing, slot_table=["10:30", "10:00", "09:00"])
    
    assert slots == ["10:30", "09:00"]


@pytest.mark.unit
def test_day_capacity(service, make_appointment, full_morning):
    evening = [
        make_appointment(100 + i, 200 + i, DAY, minutes_to_time(13 * 60 + 30 * i), period=Period.EVENING)
        for i in range(10)
    ]
    
    capacity = service.day_capacity(DAY, full_morning + evening)
    
    assert capacity.morning_used == 15
    assert capacity.morning_available == 0
    assert capacity.evening_used == 10
    assert capacity.evening_available == 8
    assert capacity.total_used == 25
    assert capacity.total_available == 8


@pytest.mark.unit
def test_can_schedule_customer_in_month(service):
    result = service.can_schedule_customer_in_month(1, 2025, 10, 10, [])
    
    assert result.possible is True
    assert result.available_days == 31
    assert result.reason is None


@pytest.mark.unit
def test_cannot_schedule_when_days_are_full(make_appointment):
    rules = SchedulingRules(morning_capacity=1, evening_capacity=1, daily_capacity=1)
    service = ConflictService(rules)
    existing = [
        make_appointment(i + 1, 100 + i, iso_date, "07:00")
        for i, iso_date in enumerate(generate_month_dates(2025, 10)[:25])
    ]
    
    result = service.can_schedule_customer_in_month(1, 2025, 10, 10, existing)
    
    assert result.possible is False
    assert result.available_days == 6
    assert result.reason == "Available days (6) are fewer than the required washes (10)"


@pytest.mark.unit
def test_compare_appointments():
    first = AppointmentCandidate(customer_id=1, date=DAY, time="09:00")
    second = AppointmentCandidate(customer_id=1, date=DAY, time="09:30")
    
    comparison = ConflictService.compare_appointments(first, second)
    
    assert comparison.same_time is False
    assert comparison.same_customer is True
    assert comparison.same_date is True


@pytest.mark.unit
def test_validate_integrity_reports_double_booking(service, make_appointment):
    appointments = [
        make_appointment(1, 1, DAY, "09:00"),
        make_appointment(2, 2, DAY, "09:00"),
        make_appointment(3, 3, DAY, "09:30"),
    ]
    
    report = service.validate_integrity(appointments)
    
    assert report.valid is False
    assert len(report.issues) == 1
    issue = report.issues[0]
    assert issue.kind is ConflictType.EXACT_TIME
    assert issue.appointment_ids == [1, 2]


@pytest.mark.unit
def test_validate_integrity_reports_over_capacity(service, make_appointment, full_morning):
    extra = make_appointment(50, 50, DAY, "11:30")
    
    report = service.validate_integrity(full_morning + [extra])
    
    assert report.valid is False
    assert [issue.kind for issue in report.issues] == [ConflictType.CAPACITY]
    assert len(report.issues[0].appointment_ids) == 16


@pytest.mark.unit
def test_validate_integrity_clean_set(service, full_morning):
    report = service.validate_integrity(full_morning)
    
    assert report.valid is True
    assert report.issues == []


@pytest.mark.unit
def test_booking_index_tracks_counts(make_appointment):
    index = BookingIndex([
        make_appointment(1, 1, DAY, "07:00"),
        make_appointment(2, 2, DAY, "13:00", period=Period.EVENING),
        make_appointment(3, 3, DAY, "13:30", period=Period.EVENING, status=AppointmentStatus.CANCELLED),
    ])
    
    assert index.day_count(DAY) == 2
    assert index.period_count(DAY, Period.EVENING) == 1
    assert index.booked_at(DAY, "13:30") is None
    assert index.customer_booking(1, DAY).id == 1
