"""
Plain reading records handed to the analytics helpers.

The ORM model stays inside the storage layer; everything else works on
these immutable snapshots.
"""
from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class ReadingDraft:
    """A validated reading that has not been stored yet."""
    systolic: int
    diastolic: int
    pulse: Optional[int] = None
    notes: Optional[str] = None
    category: Optional[str] = None


@dataclass(frozen=True)
class Reading:
    """A stored reading. `timestamp` is milliseconds since the epoch."""
    id: int
    systolic: int
    diastolic: int
    timestamp: int
    pulse: Optional[int] = None
    notes: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self):
        return asdict(self)
