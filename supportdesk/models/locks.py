"""
Lock entity.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Lock:
    """
    A short-lived mutex record.
    
    Attributes:
        resource_id: What is locked, e.g. ``record:update:<id>``
        acquired_at: Clock reading at acquisition (seconds)
        holder_token: Random token of the holder
        timeout: Lease the holder acquired the lock with (seconds)
    """
    
    resource_id: str
    acquired_at: float
    holder_token: str
    timeout: float
    
    def age(self, now: float) -> float:
        return now - self.acquired_at
    
    def is_live(self, now: float) -> bool:
        return self.age(now) < self.timeout
