"""
This module builds the files offered for download from the Reports page.

- `vitals_csv` turns the vitals in a date range into a CSV table using pandas.
- `backup_json` serialises every collection into a single JSON snapshot that
  `potslog.importer` can restore.
"""
# potslog/exporter.py

import json

import pandas as pd

from potslog.aggregator import require_date_range
from potslog.formatting import format_time
from potslog.store import COLLECTIONS

CSV_COLUMNS = ['Date', 'Time', 'Position', 'Heart Rate', 'Systolic', 'Diastolic', 'Sodium', 'Fluid']


def vitals_frame(vitals, start, end):
    """Returns a DataFrame with one row per reading whose date is within [start, end].

    Args:
        vitals (list[VitalReading]): Readings in stored order.
        start (str): First day (YYYY-MM-DD), inclusive.
        end (str): Last day (YYYY-MM-DD), inclusive.

    Raises:
        MissingInputError: If either date is missing.
    """
    start, end = require_date_range(start, end)
    rows = [
        [v.date, format_time(v.timestamp), v.position, v.heart_rate, v.systolic, v.diastolic, v.sodium, v.fluid]
        for v in vitals
        if start <= v.date <= end
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def frame_to_csv(frame):
    return frame.to_csv(index=False, lineterminator='\n')


def vitals_csv(vitals, start, end):
    """Returns the CSV text for the vitals within [start, end]."""
    return frame_to_csv(vitals_frame(vitals, start, end))


def csv_filename(start, end):
    return f"pots_data_{start}_to_{end}.csv"


def backup_snapshot(collections, now):
    """Builds the backup object from a `RecordStore.snapshot()`-style mapping."""
    snapshot = {name: collections.get(name, []) for name in COLLECTIONS}
    snapshot['exportDate'] = now.isoformat()
    return snapshot


def backup_json(collections, now):
    """Returns the pretty-printed JSON backup."""
    return json.dumps(backup_snapshot(collections, now), indent=2)


def backup_filename(today):
    return f"pots_backup_{today}.json"
