"""
Exception hierarchy for the migration-waves tool.

The planning core raises these; the CLI catches them and renders them as
validation messages.
"""


class MigrationWavesError(Exception):
    """Base class for all migration-waves errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(MigrationWavesError):
    """Invalid thresholds, wave sizes or settings supplied by the caller."""


class IngestionError(MigrationWavesError):
    """An input file could not be read or parsed into repository records."""
