"""
Seed script to populate the database with a few weeks of demo readings.
Run from backend/: python seed.py
"""
import random
from datetime import timedelta

from bplog import create_app, db
from bplog.models.records import ReadingDraft
from bplog.storage import SqlReadingStore

DAYS = 45
LABELS = ['morning', 'evening', None]


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()
        now = app.config['CLOCK']()
        rng = random.Random(42)
        added = 0
        for days_ago in range(DAYS, 0, -1):
            for hour in (8, 20):
                taken_at = (now - timedelta(days=days_ago)).replace(
                    hour=hour, minute=rng.randint(0, 59), second=0, microsecond=0)
                store = SqlReadingStore(db.session, lambda t=taken_at: t)
                systolic = rng.randint(108, 152)
                store.add(ReadingDraft(
                    systolic=systolic,
                    diastolic=min(systolic, rng.randint(68, 96)),
                    pulse=rng.choice([None, rng.randint(58, 92)]),
                    category=rng.choice(LABELS),
                ))
                added += 1
        print(f"Added {added} demo readings.")


if __name__ == "__main__":
    seed()
