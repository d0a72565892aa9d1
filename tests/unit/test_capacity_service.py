"""
Unit tests for capacity planning and the compensation rule.
"""
import pytest

from washplanner.lib.rules import SchedulingRules
from washplanner.models.appointments import AppointmentStatus
from washplanner.services.capacity_service import CapacityService
from washplanner.services.compensation import compensation_for


@pytest.fixture
def service():
    return CapacityService()


@pytest.mark.unit
def test_monthly_capacity(service):
    assert service.monthly_capacity(2025, 2) == 28 * 33
    assert service.monthly_capacity(2024, 2) == 29 * 33


@pytest.mark.unit
def test_monthly_utilization(service, make_appointment):
    appointments = [
        make_appointment(1, 1, "2025-10-02", "07:00"),
        make_appointment(2, 2, "2025-10-02", "07:30", status=AppointmentStatus.COMPLETED),
        make_appointment(3, 3, "2025-10-03", "07:00", status=AppointmentStatus.CANCELLED),
        make_appointment(4, 4, "2025-11-01", "07:00"),
    ]
    
    utilization = service.monthly_utilization(appointments, 2025, 10)
    
    assert utilization.total_capacity == 31 * 33
    assert utilization.used_slots == 2
    assert utilization.available_slots == 31 * 33 - 2
    assert utilization.utilization_rate == pytest.approx(2 / (31 * 33) * 100)


@pytest.mark.unit
def test_optimal_distribution(service):
    result = service.optimal_distribution(66)
    
    assert result.total_days_needed == 2
    assert result.morning_per_day == 15
    assert result.evening_per_day == 18


@pytest.mark.unit
def test_optimal_distribution_partial_day(service):
    result = service.optimal_distribution(10)
    
    assert result.total_days_needed == 1
    assert result.morning_per_day == 5
    assert result.evening_per_day == 5


@pytest.mark.unit
@pytest.mark.parametrize("total", [0, -4])
def test_optimal_distribution_nothing_to_place(service, total):
    result = service.optimal_distribution(total)
    
    assert (result.morning_per_day, result.evening_per_day, result.total_days_needed) == (0, 0, 0)


@pytest.mark.unit
def test_capacity_follows_rules():
    service = CapacityService(SchedulingRules(daily_capacity=10))
    
    assert service.monthly_capacity(2025, 10) == 310


@pytest.mark.unit
def test_compensation_for():
    assert compensation_for(2) is None
    
    compensation = compensation_for(3)
    assert compensation.type == "free_wash"
    assert compensation.count == 1
    assert compensation_for(7).count == 1
