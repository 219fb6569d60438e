"""
Exception hierarchy for the engine.

Adapters translate their driver errors into these so the application
layer and the CLI only ever handle one family of exceptions.
"""


class VocabMasterError(Exception):
    """Base class for all engine errors."""


class ValidationError(VocabMasterError, ValueError):
    """Malformed input (quality, response time, progress bounds, XP)."""


class PersistenceError(VocabMasterError):
    """The store collaborator failed to read or write."""


class SessionStateError(VocabMasterError):
    """A session operation was invoked in a phase that does not allow it."""
