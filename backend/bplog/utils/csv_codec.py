"""
CSV export and import of readings.

Export quotes every field. Import finds columns by header name, so files
with reordered or extra columns still load, and it drops rows it cannot
parse instead of failing the whole file.
"""
import csv
import io
import logging
from dataclasses import dataclass

from bplog.utils.ranges import local_datetime
from bplog.utils.validators import ValidationError, parse_int, validate_reading

logger = logging.getLogger(__name__)

HEADER = ['Date', 'Systolic', 'Diastolic', 'Pulse', 'Notes']

_COLUMN_ALIASES = {
    'date': 'date',
    'timestamp': 'date',
    'systolic': 'systolic',
    'diastolic': 'diastolic',
    'pulse': 'pulse',
    'notes': 'notes',
}


class CsvFormatError(ValueError):
    """The file has no usable header row."""


@dataclass
class CsvImport:
    rows: list
    skipped: int = 0


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0
    rejected: int = 0

    def to_dict(self):
        return {'imported': self.imported, 'skipped': self.skipped, 'rejected': self.rejected}


def export_filename(today) -> str:
    return f'blood-pressure-{today.isoformat()}.csv'


def to_csv(readings, tz=None) -> str:
    """Serialize readings to CSV text with the header row first."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(HEADER)

    for reading in readings:
        writer.writerow([
            local_datetime(reading.timestamp, tz).strftime('%Y-%m-%dT%H:%M'),
            reading.systolic,
            reading.diastolic,
            reading.pulse if reading.pulse is not None else '',
            reading.notes or '',
        ])

    return output.getvalue()


def _column_index(header):
    columns = {}
    for position, name in enumerate(header):
        key = _COLUMN_ALIASES.get(name.lstrip('\ufeff').strip().lower())
        if key and key not in columns:
            columns[key] = position
    if 'systolic' not in columns or 'diastolic' not in columns:
        raise CsvFormatError('CSV header must contain Systolic and Diastolic columns')
    return columns


def from_csv(text: str) -> CsvImport:
    """Parse CSV text into raw reading dicts.

    Rows whose systolic or diastolic is not an integer are skipped and
    counted. A row the csv module cannot read at all (an unclosed quote
    running past the field size limit) ends decoding; rows before it are
    kept and the remainder counts as one skipped row. Blank lines are
    ignored. The dicts still have to go through
    `validate_reading` before they are stored.
    """
    reader = csv.reader(io.StringIO(text))
    columns = None
    result = CsvImport(rows=[])

    while True:
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as e:
            if columns is None:
                raise CsvFormatError(f'CSV header could not be read: {e}') from e
            # csv.reader cannot resync after a broken row; the remainder counts as one skip
            logger.warning('Stopping CSV decode at line %d: %s', reader.line_num, e)
            result.skipped += 1
            break

        if not any(cell.strip() for cell in row):
            continue
        if columns is None:
            columns = _column_index(row)
            continue

        line_no = reader.line_num
        record = {}
        for key, position in columns.items():
            record[key] = row[position].strip() if position < len(row) else ''

        if parse_int(record['systolic']) is None or parse_int(record['diastolic']) is None:
            logger.debug('Skipping CSV line %d: unparsable systolic/diastolic', line_no)
            result.skipped += 1
            continue

        result.rows.append(record)

    if columns is None:
        raise CsvFormatError('CSV file is empty')
    return result


def import_readings(store, text: str) -> ImportResult:
    """Decode CSV text and add each row through the manual-entry path.

    Each imported reading gets a fresh id and timestamp from the store; the
    Date column of the file is not restored.
    """
    decoded = from_csv(text)
    result = ImportResult(skipped=decoded.skipped)

    for record in decoded.rows:
        try:
            draft = validate_reading(record)
        except ValidationError as e:
            logger.debug('Rejecting CSV row %r: %s', record, e.message)
            result.rejected += 1
            continue
        store.add(draft)
        result.imported += 1

    logger.info('CSV import: %d imported, %d skipped, %d rejected',
                result.imported, result.skipped, result.rejected)
    return result
