"""
This module restores a JSON backup produced by `potslog.exporter`.

The whole file is parsed and checked before anything is written, so a bad file
never leaves the store half-replaced. Missing collections restore as empty;
`exportDate` and any unknown fields are ignored.
"""
# potslog/importer.py

import json
import logging

from potslog.errors import ImportParseError
from potslog.store import COLLECTIONS

logger = logging.getLogger(__name__)


def parse_backup(text):
    """Parses backup text into a collection-name -> records mapping.

    Args:
        text (str or bytes): The content of the backup file.

    Returns:
        dict: One list per collection in `COLLECTIONS`.

    Raises:
        ImportParseError: If the text is not JSON, the top level is not an object,
            or a collection field holds something other than a list of objects.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ImportParseError(f"Backup file is not UTF-8 text: {e}") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportParseError(f"Backup file is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ImportParseError("Backup file must contain a JSON object.")

    collections = {}
    for name in COLLECTIONS:
        records = data.get(name)
        if records is None:
            records = []
        if not isinstance(records, list):
            raise ImportParseError(f"Backup field '{name}' must be a list.")
        if not all(isinstance(record, dict) for record in records):
            raise ImportParseError(f"Backup field '{name}' must be a list of objects.")
        collections[name] = records
    return collections


def restore_backup(store, text):
    """Replaces every collection in `store` with the contents of a backup.

    Returns:
        dict: The restored collections.

    Raises:
        ImportParseError: If the backup cannot be parsed. The store is left untouched.
    """
    try:
        collections = parse_backup(text)
    except ImportParseError as e:
        logger.warning("Backup restore aborted: %s", e)
        raise
    store.write_many(collections)
    return collections
