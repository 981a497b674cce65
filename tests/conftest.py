"""
Pytest configuration file for the POTS Log test suite.

This file defines shared fixtures used across the test modules:
- A `RecordStore` backed by a temporary data file, so tests never touch real data.
- A `PotsLogService` built on that store.
- A fixed "now" in local time, so dates derived from timestamps are predictable.
"""
from datetime import datetime, timedelta

import pytest

from potslog.models import SymptomForm
from potslog.service import PotsLogService
from potslog.store import RecordStore

NOW = datetime(2026, 10, 19, 9, 30).astimezone()
TODAY = "2026-10-19"


def at(days_ago=0, hours=0, minutes=0):
    """Returns a local timestamp relative to NOW."""
    return NOW - timedelta(days=days_ago, hours=hours, minutes=minutes)


def symptom_form(selections):
    """Builds a SymptomForm with the given severities already selected."""
    form = SymptomForm()
    for name, severity in selections.items():
        form.select(name, severity)
    return form


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "pots_records.json"


@pytest.fixture
def store(data_file):
    """Provides an empty store on a temporary file."""
    return RecordStore(str(data_file))


@pytest.fixture
def service(store):
    """Provides a service instance on an isolated, empty store."""
    return PotsLogService(store)


@pytest.fixture
def populated_service(service):
    """
    Provides a service with a few days of data.

    Contains four vitals readings (two of them today), two symptom entries,
    two medications, two doses of the first one and a set of emergency contacts.
    """
    service.log_vitals("sitting", 72, 118, 76, sodium=2000, fluid=500, now=at(days_ago=2))
    service.log_vitals("standing", 104, 110, 72, sodium=1500, now=at(days_ago=1))
    service.log_vitals("sitting", 80, 120, 80, sodium=3000, fluid=750, now=at(hours=2))
    service.quick_add_water(now=at(hours=1))

    service.log_symptoms(symptom_form({"Dizziness": 3, "Fatigue": 2}), "Worse after lunch", now=at(days_ago=1))
    service.log_symptoms(symptom_form({"Brain Fog": 4}), now=at(minutes=45))

    fludro = service.add_medication("Fludrocortisone", "0.1 mg", "Daily", "8am", now=at(days_ago=3))
    service.add_medication("Midodrine", "5 mg", "3x daily", "8am, 12pm, 4pm", now=at(days_ago=3))
    service.take_medication(fludro.medication_id, now=at(days_ago=1))
    service.take_medication(fludro.medication_id, now=at(minutes=30))

    service.save_emergency_contacts("Sam Rivera", "555-0100", "Dr. Patel", "555-0199")
    return service
