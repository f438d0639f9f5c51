"""
Averages over a set of readings for the stats cards and trend chart.
"""
import math
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional

from bplog.utils.ranges import local_datetime


@dataclass(frozen=True)
class Averages:
    systolic: Optional[int]
    diastolic: Optional[int]
    pulse: Optional[int]
    count: int
    pulse_count: int

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class DailyAverage:
    date: date
    systolic: int
    diastolic: int
    pulse: Optional[int]
    count: int

    def to_dict(self):
        data = asdict(self)
        data['date'] = self.date.isoformat()
        return data


def _mean(values):
    """Mean rounded to a whole unit, .5 rounding up."""
    return math.floor(sum(values) / len(values) + 0.5) if values else None


def aggregate(readings) -> Averages:
    """Mean systolic, diastolic and pulse over `readings`.

    An empty input gives None means and zero counts. Readings without a
    pulse are left out of the pulse mean's denominator.
    """
    readings = list(readings)
    pulses = [r.pulse for r in readings if r.pulse is not None]
    return Averages(
        systolic=_mean([r.systolic for r in readings]),
        diastolic=_mean([r.diastolic for r in readings]),
        pulse=_mean(pulses),
        count=len(readings),
        pulse_count=len(pulses),
    )


def aggregate_by_day(readings, tz=None) -> list:
    """Per-day averages keyed by the local calendar date in `tz`, oldest day first."""
    groups = defaultdict(list)
    for reading in readings:
        groups[local_datetime(reading.timestamp, tz).date()].append(reading)

    series = []
    for day in sorted(groups):
        averages = aggregate(groups[day])
        series.append(DailyAverage(
            date=day,
            systolic=averages.systolic,
            diastolic=averages.diastolic,
            pulse=averages.pulse,
            count=averages.count,
        ))
    return series


def group_by_day(readings, tz=None) -> list:
    """History view grouping: [(date, [readings...])] newest day first, newest reading first."""
    groups = defaultdict(list)
    for reading in sorted(readings, key=lambda r: r.timestamp, reverse=True):
        groups[local_datetime(reading.timestamp, tz).date()].append(reading)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


def latest_reading(readings):
    return max(readings, key=lambda r: r.timestamp, default=None)
