"""
Shared test fixtures and configuration.
"""
import os
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from bplog import create_app, db  # noqa: E402
from bplog.models.records import Reading  # noqa: E402
from bplog.utils.ranges import to_millis  # noqa: E402

UTC = ZoneInfo("UTC")


class FrozenClock:
    """Callable clock the tests can move by hand."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_reading(id, systolic, diastolic, when, pulse=None, notes=None, category=None):
    return Reading(
        id=id,
        systolic=systolic,
        diastolic=diastolic,
        timestamp=to_millis(when),
        pulse=pulse,
        notes=notes,
        category=category,
    )


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 6, 15, 14, 30, tzinfo=UTC))


@pytest.fixture(scope="session")
def audit_log_file(tmp_path_factory):
    return str(tmp_path_factory.mktemp("logs") / "audit.log")


@pytest.fixture
def app(clock, audit_log_file):
    app = create_app(test_config={
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "APP_TIMEZONE": "UTC",
        "AUDIT_LOG_FILE": audit_log_file,
        "CLOCK": clock,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()
