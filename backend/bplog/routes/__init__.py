"""
Reading API routes.
"""
import logging
from flask import Blueprint, current_app, jsonify, request

from bplog.storage import StorageUnavailable
from bplog.utils.classification import classify_bp
from bplog.utils.ranges import TimeRange, local_datetime

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__)


@api_bp.errorhandler(StorageUnavailable)
def storage_unavailable(error):
    return jsonify({'error': str(error), 'retryable': True}), 503


def range_arg(default=TimeRange.MONTH):
    """Read ?range= from the query string. Raises ValueError for unknown values."""
    return TimeRange.parse(request.args.get('range'), default=default)


def now():
    return current_app.config['CLOCK']()


def reading_json(reading):
    """Reading dict with its severity band and local time for display."""
    data = reading.to_dict()
    data['severity'] = classify_bp(reading.systolic, reading.diastolic).value
    data['recorded_at'] = local_datetime(reading.timestamp, current_app.config['TZ']).isoformat()
    return data


# Import submodules to register routes on api_bp
from . import readings  # noqa: E402, F401
from . import exports   # noqa: E402, F401
