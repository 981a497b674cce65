"""
This module provides the local key-value store behind POTS Log.

The medium is a single JSON file mapping storage keys to strings, where each
string is the JSON text of one record collection. The `RecordStore` class
offers whole-collection reads and writes; callers read, modify and write back
entire collections.

A stored value that cannot be parsed is not treated as "no data". It is logged,
remembered in `RecordStore.anomalies`, and reads return whatever records are
still readable (often none) so the app stays usable while the UI warns the user.
"""
# potslog/store.py

import json
import logging

from potslog import config
from potslog.errors import StoreReadAnomaly

logger = logging.getLogger(__name__)

DATA_KEYS = {
    "vitals": "pots_vitals",
    "symptoms": "pots_symptoms",
    "medications": "pots_medications",
    "medLog": "pots_med_log",
    "emergency": "pots_emergency",
}

COLLECTIONS = tuple(DATA_KEYS)

MEDIUM = "medium"


class RecordStore:
    """Whole-collection persistence over a JSON file."""
    def __init__(self, data_file=None):
        """Loads the medium from disk.

        Args:
            data_file (str, optional): Path of the JSON file. Defaults to `config.DATA_FILE`.
        """
        self.data_file = data_file or config.DATA_FILE
        self.anomalies = {}
        self._data = self._load_data()

    def _load_data(self):
        """Loads the key -> string mapping from the data file.

        Returns:
            dict: The stored mapping, or an empty one if the file is missing or unreadable.
        """
        try:
            with open(self.data_file, 'r', encoding='utf-8') as f:
                raw = f.read()
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            self._flag(MEDIUM, f"cannot read {self.data_file} ({e})")
            return {}
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self._flag(MEDIUM, f"invalid JSON ({e})")
            return {}
        if not isinstance(data, dict):
            self._flag(MEDIUM, "expected a JSON object")
            return {}
        return data

    def _save_data(self):
        with open(self.data_file, 'w', encoding='utf-8') as f:
            json.dump(self._data, f, indent=2)

    def _flag(self, name, reason):
        logger.warning("Stored data for %s is unreadable: %s", name, reason)
        self.anomalies[name] = reason

    @staticmethod
    def _key(collection):
        try:
            return DATA_KEYS[collection]
        except KeyError:
            raise KeyError(f"Unknown collection: {collection}") from None

    def read(self, collection, strict=False):
        """Returns every record of a collection, in stored order.

        Args:
            collection (str): One of `COLLECTIONS`.
            strict (bool): Raise instead of returning [] for corrupt content.

        Returns:
            list: The records as dictionaries; empty if never written. Elements
                that are not JSON objects are left out.

        Raises:
            StoreReadAnomaly: In strict mode, if the stored value is not a JSON
                list of objects.
        """
        raw = self._data.get(self._key(collection))
        if raw is None:
            return []
        objects = []
        try:
            records = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            reason = f"invalid JSON ({e})"
        else:
            if not isinstance(records, list):
                reason = f"expected a list, found {type(records).__name__}"
            else:
                objects = [record for record in records if isinstance(record, dict)]
                if len(objects) == len(records):
                    return records
                # Readable records are kept; the rest are dropped on the next write.
                reason = f"{len(records) - len(objects)} record(s) are not JSON objects"
        self._flag(collection, reason)
        if strict:
            raise StoreReadAnomaly(collection, reason)
        return objects

    def write(self, collection, records):
        """Replaces a whole collection and saves the medium."""
        self.write_many({collection: records})

    def write_many(self, collections):
        """Replaces several collections with a single save.

        Args:
            collections (dict): Collection name mapped to its new list of records.
        """
        keys = {self._key(name): name for name in collections}
        for key, name in keys.items():
            self._data[key] = json.dumps(list(collections[name]))
            self.anomalies.pop(name, None)
        self.anomalies.pop(MEDIUM, None)
        self._save_data()
        logger.info(
            "Saved %s",
            ", ".join(f"{name} ({len(collections[name])} records)" for name in collections),
        )

    def append(self, collection, record):
        """Appends one record dictionary to a collection."""
        records = self.read(collection)
        records.append(record)
        self.write(collection, records)

    def snapshot(self):
        """Returns every collection keyed by collection name."""
        return {name: self.read(name) for name in COLLECTIONS}

    def clear(self):
        """Removes every collection from the medium."""
        for key in DATA_KEYS.values():
            self._data.pop(key, None)
        self.anomalies.clear()
        self._save_data()
        logger.info("Cleared all stored collections")
