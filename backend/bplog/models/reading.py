"""
Blood Pressure Reading model.
"""
from datetime import datetime, timezone
from bplog import db
from bplog.models.records import Reading


class BloodPressureReading(db.Model):
    """
    Blood pressure reading table.
    Rows are append-only: created once, hard deleted, never updated.
    """
    __tablename__ = 'blood_pressure_readings'
    # Deleted ids are never handed out again
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)

    # Blood pressure values
    systolic = db.Column(db.Integer, nullable=False)
    diastolic = db.Column(db.Integer, nullable=False)
    pulse = db.Column(db.Integer, nullable=True)

    notes = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(50), nullable=True)

    # Milliseconds since the epoch, set once by the store
    timestamp = db.Column(db.BigInteger, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    def to_record(self):
        return Reading(
            id=self.id,
            systolic=self.systolic,
            diastolic=self.diastolic,
            timestamp=self.timestamp,
            pulse=self.pulse,
            notes=self.notes,
            category=self.category,
        )

    def __repr__(self):
        return f'<BloodPressureReading {self.id}: {self.systolic}/{self.diastolic}>'
