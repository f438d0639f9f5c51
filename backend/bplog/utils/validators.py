"""
Input validation for blood pressure readings.
"""
import re

from bplog.models.records import ReadingDraft

SYSTOLIC_RANGE = (50, 250)
DIASTOLIC_RANGE = (30, 150)
PULSE_RANGE = (30, 200)

MAX_NOTES_LENGTH = 1000
MAX_CATEGORY_LENGTH = 50

_INTEGER_RE = re.compile(r'^[+-]?[0-9]+$')


class ValidationError(Exception):
    """A reading candidate broke a rule. Only the first broken rule is reported."""
    code = 'invalid'

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        return {'error': self.message, 'code': self.code, 'field': self.field}


class MissingField(ValidationError):
    code = 'missing_field'


class OutOfRange(ValidationError):
    code = 'out_of_range'


class InvalidRelation(ValidationError):
    code = 'invalid_relation'


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def parse_int(value):
    """Parse an int from an int or a plain ASCII-digit string. Floats with a fraction are rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    text = str(value).strip()
    if not _INTEGER_RE.match(text):
        return None
    return int(text)


def _check_range(field, label, value, bounds):
    low, high = bounds
    parsed = parse_int(value)
    if parsed is None or parsed < low or parsed > high:
        raise OutOfRange(f'Please enter a valid {label} value ({low}-{high})', field=field)
    return parsed


def validate_reading(data: dict) -> ReadingDraft:
    """Validate blood pressure reading input.

    Rules are checked in a fixed order and the first failure is raised:
    required fields, systolic range, diastolic range, pulse range (only when
    a pulse is supplied), then systolic >= diastolic. Equal values pass.

    Returns:
        ReadingDraft with parsed integers and normalised notes/category.

    Raises:
        MissingField, OutOfRange, InvalidRelation
    """
    systolic = data.get('systolic')
    diastolic = data.get('diastolic')
    if _is_blank(systolic) or _is_blank(diastolic):
        field = 'systolic' if _is_blank(systolic) else 'diastolic'
        raise MissingField('Both systolic and diastolic values are required', field=field)

    s = _check_range('systolic', 'systolic', systolic, SYSTOLIC_RANGE)
    d = _check_range('diastolic', 'diastolic', diastolic, DIASTOLIC_RANGE)

    pulse = data.get('pulse')
    p = None
    if not _is_blank(pulse):
        p = _check_range('pulse', 'pulse', pulse, PULSE_RANGE)

    if s < d:
        raise InvalidRelation('Systolic value must be higher than diastolic value',
                              field='diastolic')

    notes = data.get('notes')
    notes = str(notes).strip() if notes is not None else ''
    if len(notes) > MAX_NOTES_LENGTH:
        raise OutOfRange(f'Notes must be {MAX_NOTES_LENGTH} characters or fewer', field='notes')

    category = data.get('category')
    category = str(category).strip().lower() if category is not None else ''
    if len(category) > MAX_CATEGORY_LENGTH:
        raise OutOfRange(f'Category must be {MAX_CATEGORY_LENGTH} characters or fewer',
                         field='category')
    if category == 'general':
        category = ''

    return ReadingDraft(
        systolic=s,
        diastolic=d,
        pulse=p,
        notes=notes or None,
        category=category or None,
    )
