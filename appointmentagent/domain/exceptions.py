"""
Domain-specific exception hierarchy for the appointment agent.
"""


class AppointmentAgentError(Exception):
    """Base class for all application-level errors."""


class AppointmentValidationError(AppointmentAgentError):
    """Raised when caller input is rejected before any calendar call."""


class InvalidDateError(AppointmentValidationError):
    """Raised when a date argument is not a recognized calendar date."""


class InvalidTimeError(AppointmentValidationError):
    """Raised when a time argument is not a recognized 24-hour wall-clock time."""


class InvalidDurationError(AppointmentValidationError):
    """Raised when a requested slot duration is not a positive number of minutes."""


class InvalidInputError(AppointmentValidationError):
    """Raised when a booking request is incomplete or its times are out of order."""


class CollaboratorError(AppointmentAgentError):
    """Raised when calendar data cannot be fetched, written or trusted."""


class AuthenticationError(CollaboratorError):
    """Raised when calendar credentials cannot be loaded."""
