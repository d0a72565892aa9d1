"""
Shared fixtures for unit and integration tests.
"""
from datetime import date

import pytest

from washplanner.lib.dates import weekday_name
from washplanner.lib.metrics import reset_metrics
from washplanner.lib.rules import reset_scheduling_rules
from washplanner.models.appointments import Appointment, AppointmentStatus, Period
from washplanner.models.customers import Customer, PreferredPeriod, Weekday


@pytest.fixture(autouse=True)
def reset_global_state():
    """Every test starts from default rules and empty counters."""
    reset_scheduling_rules()
    reset_metrics()
    yield
    reset_scheduling_rules()
    reset_metrics()


@pytest.fixture
def make_customer():
    """Factory for Customer records with sensible defaults."""
    def _make(
        customer_id: int = 1,
        preferred_days=(Weekday.SUNDAY, Weekday.TUESDAY, Weekday.THURSDAY),
        preferred_period: PreferredPeriod = PreferredPeriod.MORNING,
        **overrides,
    ) -> Customer:
        fields = {
            "id": customer_id,
            "name": f"Customer {customer_id}",
            "phone": "0501234567",
            "car_type": "Sedan",
            "preferred_days": list(preferred_days),
            "preferred_period": preferred_period,
            "join_date": date(2024, 1, 1),
        }
        fields.update(overrides)
        return Customer(**fields)
    
    return _make


@pytest.fixture
def make_appointment():
    """Factory for Appointment records; day_name follows the date."""
    def _make(
        appointment_id: int,
        customer_id: int,
        iso_date: str,
        time: str,
        period: Period = Period.MORNING,
        status: AppointmentStatus = AppointmentStatus.UPCOMING,
        **overrides,
    ) -> Appointment:
        fields = {
            "id": appointment_id,
            "customer_id": customer_id,
            "customer_name": f"Customer {customer_id}",
            "date": iso_date,
            "day_name": weekday_name(iso_date),
            "time": time,
            "period": period,
            "wash_number": 1,
            "status": status,
        }
        fields.update(overrides)
        return Appointment(**fields)
    
    return _make
