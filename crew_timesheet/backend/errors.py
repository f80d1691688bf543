"""Exceptions shared across the timesheet backend."""

from __future__ import annotations


class TimesheetError(Exception):
    """Base class for timesheet errors."""


class CsvHeaderError(TimesheetError):
    """Raised when CSV text has no line starting with ``Date,``."""


class ConfigError(TimesheetError):
    """Raised when configuration values are invalid."""


class CollaboratorError(TimesheetError):
    """Raised when an external service call fails."""


class TranscriptionError(CollaboratorError):
    """Raised when speech-to-text fails or returns nothing."""


class CsvGenerationError(CollaboratorError):
    """Raised when the language model does not return usable CSV."""


class ReportGenerationError(CollaboratorError):
    """Raised when the language model does not return a report."""
