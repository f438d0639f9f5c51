"""
Reading storage.

`ReadingStore` is the contract the routes and CLI depend on. Stores are
built explicitly with the session and clock they use; `get_store()` builds
the SQL one for the current app.
"""
import itertools
import logging
from abc import ABC, abstractmethod
from typing import List

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from bplog.models.records import Reading, ReadingDraft
from bplog.utils.ranges import to_millis

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    """The backing store could not be read or written. Safe to retry."""


class ReadingStore(ABC):
    """Append-only collection of readings keyed by id."""

    def __init__(self, clock):
        self.clock = clock

    def _now_ms(self):
        return to_millis(self.clock())

    @abstractmethod
    def get_all(self) -> List[Reading]:
        """All readings, oldest first."""

    @abstractmethod
    def add(self, draft: ReadingDraft) -> Reading:
        """Store a validated draft, assigning its id and timestamp."""

    @abstractmethod
    def delete_by_id(self, reading_id) -> bool:
        """Delete one reading. Unknown ids are not an error; returns whether a row went away."""

    @abstractmethod
    def delete_all(self) -> int:
        """Delete every reading and return how many were removed."""


class MemoryReadingStore(ReadingStore):

    def __init__(self, clock, readings=None):
        super().__init__(clock)
        self._readings = list(readings or [])
        start = max((r.id for r in self._readings), default=0) + 1
        self._ids = itertools.count(start)

    def get_all(self):
        return sorted(self._readings, key=lambda r: (r.timestamp, r.id))

    def add(self, draft):
        reading = Reading(
            id=next(self._ids),
            systolic=draft.systolic,
            diastolic=draft.diastolic,
            timestamp=self._now_ms(),
            pulse=draft.pulse,
            notes=draft.notes,
            category=draft.category,
        )
        self._readings.append(reading)
        return reading

    def delete_by_id(self, reading_id):
        before = len(self._readings)
        self._readings = [r for r in self._readings if r.id != reading_id]
        return len(self._readings) != before

    def delete_all(self):
        count = len(self._readings)
        self._readings = []
        return count


class SqlReadingStore(ReadingStore):
    """Store backed by the `blood_pressure_readings` table."""

    def __init__(self, session, clock):
        super().__init__(clock)
        self.session = session

    def _fail(self, action, error):
        self.session.rollback()
        logger.error('Reading store %s failed: %s', action, error)
        raise StorageUnavailable(f'Could not {action} readings. Please try again.') from error

    def get_all(self):
        from bplog.models.reading import BloodPressureReading
        try:
            rows = (self.session.query(BloodPressureReading)
                    .order_by(BloodPressureReading.timestamp.asc(), BloodPressureReading.id.asc())
                    .all())
        except SQLAlchemyError as e:
            self._fail('load', e)
        return [row.to_record() for row in rows]

    def add(self, draft):
        from bplog.models.reading import BloodPressureReading
        row = BloodPressureReading(
            systolic=draft.systolic,
            diastolic=draft.diastolic,
            pulse=draft.pulse,
            notes=draft.notes,
            category=draft.category,
            timestamp=self._now_ms(),
        )
        try:
            self.session.add(row)
            self.session.commit()
            # commit expires the row; reading it back hits the database again
            return row.to_record()
        except SQLAlchemyError as e:
            self._fail('save', e)

    def delete_by_id(self, reading_id):
        from bplog.models.reading import BloodPressureReading
        try:
            count = (self.session.query(BloodPressureReading)
                     .filter(BloodPressureReading.id == reading_id)
                     .delete())
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('delete', e)
        return count > 0

    def delete_all(self):
        from bplog.models.reading import BloodPressureReading
        try:
            count = self.session.query(BloodPressureReading).delete()
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail('delete', e)
        return count


def get_store() -> ReadingStore:
    """Build a SQL store for the current app context."""
    from bplog import db
    return SqlReadingStore(db.session, current_app.config['CLOCK'])
