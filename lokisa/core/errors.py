"""
Error kinds raised by the Lokisa core.

The HTTP layer translates them to responses (see lokisa.main); the core
itself never deals in status codes.
"""


class LokisaError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LokisaError):
    """Malformed input: out-of-range coordinate, missing required field."""


class NotFoundError(LokisaError):
    """Referenced issue or support record does not exist."""


class ConflictError(LokisaError):
    """Duplicate support attempt or unique constraint violation."""


class ConfigurationError(LokisaError):
    """Routing configuration cannot produce any recipient."""
