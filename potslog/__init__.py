"""Core of POTS Log: records, storage, aggregation, import/export and the orthostatic test."""
