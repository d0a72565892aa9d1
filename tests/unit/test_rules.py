"""
Unit tests for scheduling rules configuration.
"""
import pytest

from washplanner.lib.rules import (
    SchedulingRules,
    get_scheduling_rules,
    reset_scheduling_rules,
    set_scheduling_rules,
)
from washplanner.models.appointments import Period


@pytest.mark.unit
def test_scheduling_rules_defaults():
    """Default rules carry the standard capacity model and subscription policy."""
    rules = SchedulingRules()
    
    assert rules.morning_capacity == 15
    assert rules.evening_capacity == 18
    assert rules.daily_capacity == 33
    assert rules.morning_slots[0] == "07:00"
    assert rules.morning_slots[-1] == "12:00"
    assert len(rules.morning_slots) == 11
    assert rules.evening_slots[0] == "13:00"
    assert rules.evening_slots[-1] == "19:00"
    assert len(rules.evening_slots) == 13
    assert rules.visits_per_cycle == 10
    assert rules.paid_visits == 8
    assert rules.free_visits == 2
    assert rules.min_gap_days == 3
    assert rules.reschedule_window_days == 30


@pytest.mark.unit
def test_slot_and_capacity_lookup():
    rules = SchedulingRules()
    
    assert rules.slots_for(Period.EVENING) == rules.evening_slots
    assert rules.capacity_for(Period.MORNING) == 15
    assert rules.period_for_time("09:30") is Period.MORNING
    assert rules.period_for_time("18:00") is Period.EVENING
    assert rules.period_for_time("12:30") is None


@pytest.mark.unit
def test_scheduling_rules_validation():
    """Invalid rule combinations are rejected."""
    with pytest.raises(ValueError):
        SchedulingRules(morning_slots=["07:00", "7:30"])
    
    with pytest.raises(ValueError):
        SchedulingRules(morning_slots=["08:00", "07:00"])
    
    with pytest.raises(ValueError):
        SchedulingRules(paid_visits=11, visits_per_cycle=10)
    
    with pytest.raises(ValueError):
        SchedulingRules(morning_slots=["07:00", "13:00"])
    
    with pytest.raises(ValueError):
        SchedulingRules(min_gap_days=5, reschedule_window_days=4)
    
    with pytest.raises(ValueError):
        SchedulingRules(morning_capacity=0)


@pytest.mark.unit
def test_get_set_reset_scheduling_rules():
    default = get_scheduling_rules()
    assert get_scheduling_rules() is default
    
    custom = SchedulingRules(min_gap_days=2)
    set_scheduling_rules(custom)
    assert get_scheduling_rules() is custom
    
    reset_scheduling_rules()
    assert get_scheduling_rules().min_gap_days == 3
