import datetime

from bson import ObjectId

from .constants import BLOOD_TYPES
from .exceptions import ValidationError


def now_iso():
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def serialize_doc(doc):
    if not doc:
        return None
    doc = dict(doc)
    doc['id'] = str(doc.pop('_id'))
    doc.pop('password', None)
    return doc


def to_object_id(value, label='ID'):
    if not value or not ObjectId.is_valid(value):
        raise ValidationError(f"Invalid {label} format.")
    return ObjectId(value)


def request_body(request):
    """The parsed JSON body, which must be an object."""
    if not isinstance(request.data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return request.data


def require_fields(data, *fields, message=None):
    missing = [f for f in fields if data.get(f) in (None, '')]
    if missing:
        raise ValidationError(message or f"{', '.join(missing)} required")


def validate_blood_type(value):
    if value not in BLOOD_TYPES:
        raise ValidationError(f"Invalid blood type. Must be one of {', '.join(BLOOD_TYPES)}.")
    return value


def parse_units(value, allow_zero=True, label='Units'):
    # JSON booleans are ints in Python; they are not unit counts.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be a whole number.")
    if value < 0 or (value == 0 and not allow_zero):
        qualifier = 'non-negative' if allow_zero else 'greater than 0'
        raise ValidationError(f"{label} must be {qualifier}.")
    return value


def parse_expiry(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError("expiryDate must be an ISO-8601 date string.")
    try:
        datetime.datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValidationError("expiryDate must be an ISO-8601 date string.")
    return value


def parse_coordinate(value, label, limit):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label} format.")
    # NaN fails every comparison, so it is rejected here too.
    if not -limit <= number <= limit:
        raise ValidationError(f"Invalid {label} format.")
    return number
