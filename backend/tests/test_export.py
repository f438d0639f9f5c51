"""
Tests for the PDF report.
"""
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from bplog.utils.aggregation import aggregate
from bplog.utils.export import generate_readings_pdf
from conftest import make_reading

UTC = ZoneInfo("UTC")
NOW = datetime(2024, 6, 15, 14, 30, tzinfo=UTC)


def test_report_with_readings():
    readings = [
        make_reading(i, 120 + i, 80, NOW - timedelta(hours=i), pulse=60 + i if i % 2 else None)
        for i in range(1, 30)
    ]
    pdf = generate_readings_pdf(readings, aggregate(readings), generated_at=NOW,
                                range_label="Last 30 days", tz=UTC)
    data = pdf.read()
    assert data.startswith(b"%PDF")
    assert len(data) > 1000


def test_report_without_readings():
    pdf = generate_readings_pdf([], aggregate([]), generated_at=NOW, tz=UTC)
    assert pdf.getvalue().startswith(b"%PDF")
