"""
Custom exception hierarchy for srbTranslit.

This module provides a structured exception hierarchy for consistent
error handling across the application.
"""


class SrbTranslitException(Exception):
    """Base exception for all srbTranslit errors."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class StorageError(SrbTranslitException):
    """Persisted state could not be read or written."""

    pass


class InjectionError(SrbTranslitException):
    """The engine could not be run against a tab (forbidden page, closed tab)."""

    pass


class ConfigurationError(SrbTranslitException):
    """Configuration validation errors (invalid settings, missing values)."""

    pass


class ValidationError(SrbTranslitException):
    """Input validation errors (invalid hostnames, malformed messages)."""

    pass


class UnknownCommandError(ValidationError):
    """An inbound message named a command that does not exist."""

    def __init__(self, message: str = "unknown_message"):
        super().__init__(message, code="unknown_message")
