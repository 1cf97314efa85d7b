"""
Exception hierarchy for Worx Notes.
"""


class WorxNotesError(Exception):
    """Base class for all application errors."""


class ConfigurationError(WorxNotesError):
    """Required startup configuration is missing."""


class ValidationError(WorxNotesError):
    """User input was rejected before anything was written."""


class RecordNotFoundError(WorxNotesError):
    """No repair sheet exists with the requested id."""

    def __init__(self, record_id: str):
        super().__init__(f"Repair sheet {record_id} not found")
        self.record_id = record_id


class BackendError(WorxNotesError):
    """A record or file operation against the backend failed."""


class SuggestionError(WorxNotesError):
    """The suggestion could not be delivered."""
