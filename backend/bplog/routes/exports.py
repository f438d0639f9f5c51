"""CSV and PDF export / CSV import routes."""
from flask import current_app, request, jsonify, Response, send_file

from bplog.storage import get_store
from bplog.utils.aggregation import aggregate
from bplog.utils.audit_logger import audit_log
from bplog.utils.csv_codec import CsvFormatError, export_filename, import_readings, to_csv
from bplog.utils.export import generate_readings_pdf
from bplog.utils.ranges import TimeRange, filter_by_range
from . import api_bp, now, range_arg

RANGE_LABELS = {
    TimeRange.TODAY: 'Today',
    TimeRange.WEEK: 'Last 7 days',
    TimeRange.MONTH: 'Last 30 days',
    TimeRange.THREE_MONTHS: 'Last 90 days',
    TimeRange.YEAR: 'Last 365 days',
    TimeRange.ALL: 'All time',
}


@api_bp.route('/export/csv', methods=['GET'])
def export_csv():
    """Download every reading as CSV."""
    readings = get_store().get_all()
    csv_text = to_csv(readings, current_app.config['TZ'])
    filename = export_filename(now().date())

    audit_log('EXPORT', 'readings', details={'format': 'csv', 'count': len(readings)})

    return Response(
        csv_text,
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


@api_bp.route('/import/csv', methods=['POST'])
def import_csv():
    """Import readings from {"csv": "..."}. Bad rows are dropped, good rows are kept."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get('csv'), str):
        return jsonify({'error': 'Request body must contain a "csv" string'}), 400

    try:
        result = import_readings(get_store(), data['csv'])
    except CsvFormatError as e:
        return jsonify({'error': str(e)}), 400

    audit_log('IMPORT', 'readings', details={'format': 'csv', **result.to_dict()})

    return jsonify(result.to_dict()), 200


@api_bp.route('/export/pdf', methods=['GET'])
def export_pdf():
    """PDF summary of the readings inside ?range= (default: all)."""
    try:
        time_range = range_arg(default=TimeRange.ALL)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400

    current = now()
    readings = filter_by_range(get_store().get_all(), time_range, current)
    pdf = generate_readings_pdf(
        readings,
        aggregate(readings),
        generated_at=current,
        range_label=RANGE_LABELS[time_range],
        tz=current_app.config['TZ'],
    )

    audit_log('EXPORT', 'readings', details={'format': 'pdf', 'count': len(readings),
                                             'range': time_range.value})

    return send_file(
        pdf,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=f'blood-pressure-report-{current.date().isoformat()}.pdf',
    )
