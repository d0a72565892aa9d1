"""
Compensation policy for customers with repeated missed visits.
"""
from typing import Optional

from washplanner.models.results import Compensation

MISSED_VISITS_FOR_FREE_WASH = 3


def compensation_for(missed_count: int) -> Optional[Compensation]:
    """One free wash once a customer has missed 3 or more visits."""
    if missed_count >= MISSED_VISITS_FOR_FREE_WASH:
        return Compensation(type="free_wash", count=1)
    return None
