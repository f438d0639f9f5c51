"""Reading log, stats and trend routes."""
from flask import current_app, request, jsonify

from bplog.storage import get_store
from bplog.utils.aggregation import aggregate, aggregate_by_day, group_by_day, latest_reading
from bplog.utils.audit_logger import audit_log
from bplog.utils.ranges import filter_by_range
from bplog.utils.validators import ValidationError, validate_reading
from . import api_bp, now, range_arg, reading_json


@api_bp.route('/readings', methods=['GET'])
def list_readings():
    """Readings inside ?range=, newest first, capped at ?limit=."""
    try:
        time_range = range_arg()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    default_limit = current_app.config['READINGS_LIST_LIMIT']
    limit = request.args.get('limit', default_limit, type=int)
    limit = max(1, min(limit, 1000))

    readings = filter_by_range(get_store().get_all(), time_range, now())
    newest_first = sorted(readings, key=lambda r: r.timestamp, reverse=True)

    return jsonify({
        'range': time_range.value,
        'total_count': len(newest_first),
        'readings': [reading_json(r) for r in newest_first[:limit]],
    }), 200


@api_bp.route('/readings/grouped', methods=['GET'])
def grouped_readings():
    """History view: readings inside ?range= grouped by local calendar day."""
    try:
        time_range = range_arg()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    readings = filter_by_range(get_store().get_all(), time_range, now())
    groups = group_by_day(readings, current_app.config['TZ'])

    return jsonify({
        'range': time_range.value,
        'days': [
            {'date': day.isoformat(), 'readings': [reading_json(r) for r in items]}
            for day, items in groups
        ],
    }), 200


@api_bp.route('/readings/latest', methods=['GET'])
def get_latest_reading():
    reading = latest_reading(get_store().get_all())
    if reading is None:
        return jsonify({'error': 'No readings recorded yet'}), 404
    return jsonify(reading_json(reading)), 200


@api_bp.route('/readings', methods=['POST'])
def create_reading():
    """Validate and store a new reading. Nothing is saved when validation fails."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body is required'}), 400

    try:
        draft = validate_reading(data)
    except ValidationError as e:
        return jsonify(e.to_dict()), 400

    reading = get_store().add(draft)

    audit_log('CREATE', 'reading', resource_id=str(reading.id))

    return jsonify(reading_json(reading)), 201


@api_bp.route('/readings/<int(signed=True):reading_id>', methods=['DELETE'])
def delete_reading(reading_id):
    """Hard delete. Deleting an id that does not exist still succeeds."""
    removed = get_store().delete_by_id(reading_id)

    audit_log('DELETE', 'reading', resource_id=str(reading_id),
              details={'removed': removed})

    return '', 204


@api_bp.route('/readings', methods=['DELETE'])
def delete_all_readings():
    count = get_store().delete_all()

    audit_log('DELETE', 'readings', details={'action': 'delete_all', 'count': count})

    return jsonify({'deleted': count}), 200


@api_bp.route('/stats', methods=['GET'])
def get_stats():
    """Average systolic/diastolic/pulse for ?range=."""
    try:
        time_range = range_arg()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    readings = filter_by_range(get_store().get_all(), time_range, now())
    averages = aggregate(readings)

    return jsonify({'range': time_range.value, **averages.to_dict()}), 200


@api_bp.route('/trends', methods=['GET'])
def get_trends():
    """Daily average series for the trend chart."""
    try:
        time_range = range_arg()
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    readings = filter_by_range(get_store().get_all(), time_range, now())
    series = aggregate_by_day(readings, current_app.config['TZ'])

    return jsonify({
        'range': time_range.value,
        'days': [day.to_dict() for day in series],
    }), 200
