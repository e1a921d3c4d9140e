"""Exceptions raised by the Sieve engine.

Out-of-vocabulary terms and empty queries are not errors; everything in
this module signals a broken input or a broken index.
"""

from __future__ import annotations


class SieveError(Exception):
    """Base class for all Sieve errors."""


class IndexConsistencyError(SieveError, RuntimeError):
    """A posting references a document with no (positive) norm record."""

    def __init__(self, doc_id: int, term_id: int | None = None):
        self.doc_id = doc_id
        self.term_id = term_id
        where = f" (posting of term {term_id})" if term_id is not None else ""
        super().__init__(f"Document {doc_id} has no norm record{where}.")


class StopwordLoadError(SieveError, OSError):
    """The stopword list could not be read."""


class IndexFormatError(SieveError, ValueError):
    """An index dump does not have the expected shape."""


class ConfigError(SieveError, ValueError):
    def __init__(self, path: str, errors: list[str]):
        self.path = path
        self.errors = errors
        super().__init__(f"Invalid config {path}: " + "; ".join(errors))
