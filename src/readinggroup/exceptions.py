"""Custom exception hierarchy for the readinggroup package."""

from __future__ import annotations


class ReadingGroupError(Exception):
    """Base error for all reading group related exceptions."""


class ValidationError(ReadingGroupError):
    """Raised when input data cannot be validated."""
