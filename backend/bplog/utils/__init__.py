from .audit_logger import audit_log
from .classification import SeverityCategory, classify_bp
from .ranges import TimeRange, filter_by_range
from .aggregation import aggregate, aggregate_by_day
from .csv_codec import to_csv, from_csv, import_readings
from .validators import ValidationError, validate_reading
