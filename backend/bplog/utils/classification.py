"""Blood pressure severity bands."""
from enum import Enum


class SeverityCategory(Enum):
    OPTIMAL = 'Optimal'
    NORMAL = 'Normal'
    ELEVATED = 'Elevated'
    HIGH = 'High'


def classify_bp(systolic: int, diastolic: int) -> SeverityCategory:
    """Classify a blood pressure reading into a category.

    Rules are evaluated top to bottom and the first match wins, so 125/95
    is High even though the systolic value alone is only Normal.
    """
    if systolic >= 140 or diastolic >= 90:
        return SeverityCategory.HIGH
    if systolic >= 130 or diastolic >= 80:
        return SeverityCategory.ELEVATED
    if systolic >= 120:
        return SeverityCategory.NORMAL
    return SeverityCategory.OPTIMAL
