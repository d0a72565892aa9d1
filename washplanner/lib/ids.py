"""
Sequential id allocation for records created by the engine.
"""
from typing import Iterable


class IdAllocator:
    """
    Hands out increasing integer ids above every id already in use.
    
    Example:
        ids = IdAllocator([3, 7])
        ids.next()  # 8
        ids.next()  # 9
    """
    
    def __init__(self, existing_ids: Iterable[int] = (), start: int = 1):
        self._next = max([start - 1, *existing_ids]) + 1
    
    def next(self) -> int:
        value = self._next
        self._next += 1
        return value
