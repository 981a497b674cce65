"""
This module defines the record types kept by POTS Log.

Each class mirrors one stored collection. Records are persisted with the
camelCase keys used by the backup format, so every class offers a
`to_dict()` / `from_dict()` pair instead of relying on `__dict__`.
`from_dict()` is lenient: missing numbers read as 0 and missing text as "".

The module also holds the small input-parsing helpers that decide, per field,
whether a blank or non-numeric value is rejected or falls back to 0.
"""
# potslog/models.py

from datetime import datetime

from potslog.config import POSITIONS
from potslog.errors import MissingInputError


def local_now():
    """Returns the current time as a timezone-aware datetime in local time."""
    return datetime.now().astimezone()


def parse_timestamp(value):
    """Parses an ISO-8601 timestamp into an aware datetime.

    A trailing 'Z' is accepted. Naive values are taken to be local time.

    Raises:
        ValueError: If the value is not a valid ISO-8601 timestamp.
    """
    if isinstance(value, datetime):
        timestamp = value
    else:
        timestamp = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if timestamp.tzinfo is None:
        timestamp = timestamp.astimezone()
    return timestamp


def _stamp(timestamp, date):
    """Returns the (timestamp, date) strings for a new record."""
    if timestamp is None:
        timestamp = local_now()
    if isinstance(timestamp, datetime):
        timestamp = parse_timestamp(timestamp)
        return timestamp.isoformat(), date or timestamp.astimezone().date().isoformat()
    if date is None:
        date = parse_timestamp(timestamp).astimezone().date().isoformat()
    return timestamp, date


def _stored_text(value):
    """Returns a stored string field as-is, or '' for null and non-string values."""
    return value if isinstance(value, str) else ''


def _as_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_int(raw, field, required=True):
    """Reads an integer from form input.

    Args:
        raw: The raw value (str, int, float or None).
        field (str): Human-readable field name used in error messages.
        required (bool): If False, blank or non-numeric input falls back to 0.

    Returns:
        int: The parsed value. Fractions are truncated.

    Raises:
        MissingInputError: If the field is required and blank or non-numeric.
    """
    if isinstance(raw, bool):
        raw = None
    text = str(raw).strip() if raw is not None else ""
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        if required:
            raise MissingInputError(field)
        return 0


def parse_positive_int(raw, field):
    """Reads a required integer that must be greater than zero."""
    value = parse_int(raw, field)
    if value <= 0:
        raise MissingInputError(field, f"Please enter a valid {field}.")
    return value


def require_text(raw, field):
    """Returns stripped text, or raises MissingInputError when blank."""
    text = (raw or "").strip()
    if not text:
        raise MissingInputError(field)
    return text


class VitalReading:
    """A single vital-sign reading.

    Attributes:
        timestamp (str): ISO-formatted time the reading was taken.
        date (str): Local calendar day of `timestamp` (YYYY-MM-DD).
        position (str): 'sitting', 'standing' or 'lying'.
        heart_rate (int): Beats per minute.
        systolic (int): Systolic blood pressure (mmHg).
        diastolic (int): Diastolic blood pressure (mmHg).
        sodium (int): Sodium intake in mg.
        fluid (int): Fluid intake in ml.
    """
    def __init__(self, position, heart_rate, systolic, diastolic, sodium=0, fluid=0, timestamp=None, date=None):
        self.timestamp, self.date = _stamp(timestamp, date)
        self.position = position
        self.heart_rate = heart_rate
        self.systolic = systolic
        self.diastolic = diastolic
        self.sodium = sodium
        self.fluid = fluid

    def to_dict(self):
        return {
            "timestamp": self.timestamp,
            "date": self.date,
            "position": self.position,
            "heartRate": self.heart_rate,
            "systolic": self.systolic,
            "diastolic": self.diastolic,
            "sodium": self.sodium,
            "fluid": self.fluid,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            position=data.get('position', ''),
            heart_rate=_as_int(data.get('heartRate')),
            systolic=_as_int(data.get('systolic')),
            diastolic=_as_int(data.get('diastolic')),
            sodium=_as_int(data.get('sodium')),
            fluid=_as_int(data.get('fluid')),
            timestamp=_stored_text(data.get('timestamp')),
            date=_stored_text(data.get('date')),
        )

    @classmethod
    def from_form(cls, position, heart_rate, systolic, diastolic, sodium=None, fluid=None, timestamp=None):
        """Builds a reading from raw form values.

        Heart rate and blood pressure are required; sodium and fluid fall back
        to 0 when left blank.

        Raises:
            MissingInputError: If a required value is missing or the position is unknown.
        """
        if position not in POSITIONS:
            raise MissingInputError("position", "Please choose a position (sitting, standing or lying).")
        return cls(
            position=position,
            heart_rate=parse_int(heart_rate, "heart rate"),
            systolic=parse_int(systolic, "systolic pressure"),
            diastolic=parse_int(diastolic, "diastolic pressure"),
            sodium=parse_int(sodium, "sodium", required=False),
            fluid=parse_int(fluid, "fluid", required=False),
            timestamp=timestamp,
        )


class SymptomEntry:
    """A saved set of symptom severities.

    Attributes:
        timestamp (str): ISO-formatted time of the entry.
        date (str): Local calendar day of `timestamp`.
        symptoms (dict): Symptom name mapped to a severity from 0 to 5.
        notes (str): Free-text notes.
    """
    def __init__(self, symptoms, notes="", timestamp=None, date=None):
        self.timestamp, self.date = _stamp(timestamp, date)
        self.symptoms = dict(symptoms)
        self.notes = notes

    def to_dict(self):
        return {
            "timestamp": self.timestamp,
            "date": self.date,
            "symptoms": dict(self.symptoms),
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data):
        symptoms = data.get('symptoms')
        if not isinstance(symptoms, dict):
            symptoms = {}
        return cls(
            symptoms={name: _as_int(value) for name, value in symptoms.items()},
            notes=data.get('notes') or '',
            timestamp=_stored_text(data.get('timestamp')),
            date=_stored_text(data.get('date')),
        )


class SymptomForm:
    """In-progress symptom selections owned by one UI session.

    Selections live here until `PotsLogService.log_symptoms` commits them,
    after which the form is cleared.
    """
    def __init__(self):
        self.selections = {}

    def select(self, symptom, severity):
        self.selections[symptom] = int(severity)

    def clear(self):
        self.selections.clear()

    def snapshot(self):
        return dict(self.selections)


class Medication:
    """A medication in the user's schedule.

    Attributes:
        medication_id (int): Unique id derived from the creation time.
        name (str): Medication name.
        dosage (str): Dose description, e.g. "10 mg".
        frequency (str): How often it is taken.
        times (str): Free-text schedule, e.g. "8am, 8pm".
    """
    def __init__(self, medication_id, name, dosage="", frequency="", times=""):
        self.medication_id = medication_id
        self.name = name
        self.dosage = dosage
        self.frequency = frequency
        self.times = times

    def to_dict(self):
        return {
            "id": self.medication_id,
            "name": self.name,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "times": self.times,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            medication_id=_as_int(data.get('id')),
            name=data.get('name') or '',
            dosage=data.get('dosage') or '',
            frequency=data.get('frequency') or '',
            times=data.get('times') or '',
        )


def new_medication_id(existing_ids, now=None):
    """Returns a millisecond timestamp id not already present in `existing_ids`."""
    now = now or local_now()
    candidate = int(now.timestamp() * 1000)
    taken = set(existing_ids)
    while candidate in taken:
        candidate += 1
    return candidate


class MedicationLogEntry:
    """A dose marked as taken.

    The medication name is copied at the time of taking, so the entry still
    reads correctly after the medication itself is deleted.
    """
    def __init__(self, medication_id, name, timestamp=None, date=None):
        self.medication_id = medication_id
        self.name = name
        self.timestamp, self.date = _stamp(timestamp, date)

    def to_dict(self):
        return {
            "id": self.medication_id,
            "name": self.name,
            "timestamp": self.timestamp,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            medication_id=_as_int(data.get('id')),
            name=data.get('name') or '',
            timestamp=_stored_text(data.get('timestamp')),
            date=_stored_text(data.get('date')),
        )


class EmergencyContacts:
    """Primary contact and physician details. Only one set is ever stored."""
    def __init__(self, contact_name="", contact_phone="", physician_name="", physician_phone=""):
        self.contact_name = contact_name
        self.contact_phone = contact_phone
        self.physician_name = physician_name
        self.physician_phone = physician_phone

    def to_dict(self):
        return {
            "contactName": self.contact_name,
            "contactPhone": self.contact_phone,
            "physicianName": self.physician_name,
            "physicianPhone": self.physician_phone,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            contact_name=data.get('contactName') or '',
            contact_phone=data.get('contactPhone') or '',
            physician_name=data.get('physicianName') or '',
            physician_phone=data.get('physicianPhone') or '',
        )
