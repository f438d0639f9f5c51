from .records import Reading, ReadingDraft
from .reading import BloodPressureReading
