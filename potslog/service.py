"""
This module provides the application logic for POTS Log.

It defines the `PotsLogService` class, which is responsible for:
- Logging vitals, symptoms and doses, and managing the medication list.
- Saving and presenting emergency contacts.
- Feeding the dashboard and reports with aggregated views.
- CSV export, JSON backup and restore, and clearing all data.

Every method that creates a record accepts an optional `now` so callers (and
tests) can control the timestamp; it defaults to the current local time.
"""
# potslog/service.py

import logging

from potslog import aggregator, config, exporter, importer
from potslog.models import (
    EmergencyContacts,
    Medication,
    MedicationLogEntry,
    SymptomEntry,
    VitalReading,
    local_now,
    new_medication_id,
    require_text,
)
from potslog.store import RecordStore

logger = logging.getLogger(__name__)


def _today(now):
    return now.astimezone().date().isoformat()


class PotsLogService:
    """Manages all records and derived views for a single user."""
    def __init__(self, store=None):
        """Initializes the service.

        Args:
            store (RecordStore, optional): The backing store. A store on `config.DATA_FILE` is created if omitted.
        """
        self.store = store or RecordStore()

    @property
    def anomalies(self):
        """Collections whose stored content could not be read, mapped to the reason."""
        return dict(self.store.anomalies)

    # Typed collection access

    def get_vitals(self):
        return [VitalReading.from_dict(v) for v in self.store.read('vitals')]

    def get_symptoms(self):
        return [SymptomEntry.from_dict(s) for s in self.store.read('symptoms')]

    def get_medications(self):
        return [Medication.from_dict(m) for m in self.store.read('medications')]

    def get_med_log(self):
        return [MedicationLogEntry.from_dict(m) for m in self.store.read('medLog')]

    # Vitals

    def log_vitals(self, position, heart_rate, systolic, diastolic, sodium=None, fluid=None, now=None):
        """Validates and appends a manually entered vitals reading.

        Raises:
            MissingInputError: If heart rate, blood pressure or position is missing.
        """
        reading = VitalReading.from_form(position, heart_rate, systolic, diastolic, sodium, fluid, timestamp=now or local_now())
        self.store.append('vitals', reading.to_dict())
        return reading

    def quick_add_water(self, now=None):
        """Logs a glass of water as a sitting reading with only fluid set."""
        reading = VitalReading(
            position='sitting', heart_rate=0, systolic=0, diastolic=0,
            sodium=0, fluid=config.WATER_QUICK_ADD_ML, timestamp=now or local_now(),
        )
        self.store.append('vitals', reading.to_dict())
        return reading

    def get_today_vitals(self, now=None):
        """Returns today's readings, newest first."""
        today = _today(now or local_now())
        return [v for v in reversed(self.get_vitals()) if v.date == today]

    def complete_orthostatic_test(self, test, raw_standing_heart_rate, now=None):
        """Finishes an orthostatic test and saves its two readings.

        Args:
            test (OrthostaticTest): A test waiting for the standing heart rate.
            raw_standing_heart_rate: The standing heart rate as entered.

        Returns:
            OrthostaticResult

        Raises:
            MissingInputError: If the heart rate is not a positive integer. Nothing is saved.
        """
        result = test.submit_standing(raw_standing_heart_rate)
        now = now or local_now()
        readings = [
            VitalReading('lying', result.lying_heart_rate, 0, 0, timestamp=now),
            VitalReading('standing', result.standing_heart_rate, 0, 0, timestamp=now),
        ]
        vitals = self.store.read('vitals')
        vitals.extend(r.to_dict() for r in readings)
        self.store.write('vitals', vitals)
        logger.info("Orthostatic test saved (increase %s BPM)", result.delta)
        return result

    # Symptoms

    def log_symptoms(self, form, notes="", now=None):
        """Saves the selections held in `form` and clears it.

        Args:
            form (SymptomForm): The in-progress selections.
            notes (str): Free-text notes.
        """
        entry = SymptomEntry(form.snapshot(), notes=notes or "", timestamp=now or local_now())
        self.store.append('symptoms', entry.to_dict())
        form.clear()
        return entry

    def get_today_symptoms(self, now=None):
        today = _today(now or local_now())
        return [s for s in reversed(self.get_symptoms()) if s.date == today]

    # Medications

    def add_medication(self, name, dosage="", frequency="", times="", now=None):
        """Adds a medication to the schedule.

        Raises:
            MissingInputError: If the name is blank.
        """
        name = require_text(name, "a medication name")
        medications = self.store.read('medications')
        medication_id = new_medication_id((m.get('id') for m in medications), now)
        medication = Medication(medication_id, name, (dosage or "").strip(), (frequency or "").strip(), (times or "").strip())
        medications.append(medication.to_dict())
        self.store.write('medications', medications)
        return medication

    def delete_medication(self, medication_id):
        """Removes a medication. Logged doses that reference it are kept.

        Returns:
            bool: True if a medication was removed.
        """
        medications = self.store.read('medications')
        remaining = [m for m in medications if m.get('id') != medication_id]
        if len(remaining) == len(medications):
            return False
        self.store.write('medications', remaining)
        return True

    def take_medication(self, medication_id, now=None):
        """Logs a dose of the given medication as taken now.

        Raises:
            KeyError: If no medication has this id.
        """
        for medication in self.get_medications():
            if medication.medication_id == medication_id:
                entry = MedicationLogEntry(medication_id, medication.name, timestamp=now or local_now())
                self.store.append('medLog', entry.to_dict())
                return entry
        raise KeyError(f"Unknown medication id: {medication_id}")

    def get_today_med_log(self, now=None):
        today = _today(now or local_now())
        return [m for m in reversed(self.get_med_log()) if m.date == today]

    # Emergency contacts

    def save_emergency_contacts(self, contact_name, contact_phone, physician_name, physician_phone):
        """Replaces the stored emergency contacts."""
        contacts = EmergencyContacts(
            (contact_name or "").strip(), (contact_phone or "").strip(),
            (physician_name or "").strip(), (physician_phone or "").strip(),
        )
        self.store.write('emergency', [contacts.to_dict()])
        return contacts

    def get_emergency_contacts(self):
        """Returns the saved contacts, or None if none were saved."""
        contacts = self.store.read('emergency')
        if not contacts:
            return None
        return EmergencyContacts.from_dict(contacts[0])

    def emergency_alert(self):
        """Builds the emergency message.

        Returns:
            tuple: (message, dial_link). `dial_link` is a "tel:" URI for the primary
                   contact, or None when no contacts are set up or no phone is saved.
        """
        contacts = self.get_emergency_contacts()
        if contacts is None:
            return "⚠ EMERGENCY MODE ACTIVATED\n\nPlease set up emergency contacts in the Reports page.", None
        message = (
            "EMERGENCY ALERT\n\n"
            f"Primary Contact: {contacts.contact_name}\nPhone: {contacts.contact_phone}\n\n"
            f"Physician: {contacts.physician_name}\nPhone: {contacts.physician_phone}\n\n"
            "Call emergency services if needed: 911"
        )
        dial_link = f"tel:{contacts.contact_phone}" if contacts.contact_phone else None
        return message, dial_link

    # Derived views

    def dashboard(self, now=None):
        return aggregator.daily_summary(self.get_vitals(), _today(now or local_now()))

    def recent_activity(self):
        return aggregator.recent_activity(self.get_vitals(), self.get_symptoms(), self.get_med_log())

    def weekly_summary(self, now=None):
        return aggregator.weekly_summary(
            self.get_vitals(), self.get_symptoms(), self.get_med_log(),
            len(self.store.read('medications')), now or local_now(),
        )

    def generate_report(self, start, end):
        return aggregator.date_range_report(self.get_vitals(), self.get_symptoms(), self.get_med_log(), start, end)

    # Export / import

    def export_csv(self, start, end):
        """Returns (filename, csv_text, row_count) for the vitals in [start, end]."""
        frame = exporter.vitals_frame(self.get_vitals(), start, end)
        return exporter.csv_filename(start, end), exporter.frame_to_csv(frame), len(frame)

    def backup(self, now=None):
        """Returns (filename, json_text) for a full backup."""
        now = now or local_now()
        return exporter.backup_filename(_today(now)), exporter.backup_json(self.store.snapshot(), now)

    def restore(self, text):
        """Replaces all data with the contents of a backup.

        Raises:
            ImportParseError: If the backup cannot be parsed; existing data is kept.
        """
        collections = importer.restore_backup(self.store, text)
        logger.info("Restored backup")
        return {name: len(records) for name, records in collections.items()}

    def clear_all_data(self):
        self.store.clear()
