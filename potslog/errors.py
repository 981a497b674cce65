"""
Exception types raised by the POTS Log core.

The Streamlit layer catches these and turns them into user-facing messages;
nothing in the core retries.
"""
# potslog/errors.py


class MissingInputError(ValueError):
    """A required field was empty or could not be read as a number."""

    def __init__(self, field, message=None):
        self.field = field
        super().__init__(message or f"Please enter {field}.")


class ImportParseError(ValueError):
    """A backup file could not be parsed into the expected structure."""


class StoreReadAnomaly(Exception):
    """A stored collection exists but its content is not a valid JSON list."""

    def __init__(self, collection, reason):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Stored data for '{collection}' is unreadable: {reason}")
