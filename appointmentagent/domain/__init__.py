"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    AppointmentAgentError,
    AppointmentValidationError,
    AuthenticationError,
    CollaboratorError,
    InvalidDateError,
    InvalidDurationError,
    InvalidInputError,
    InvalidTimeError,
)
from .models import BookedEvent, BookingRequest, TimeRange, WorkingHours, WorkingWindow
from .slot_calculator import SlotCalculator

__all__ = [
    "AppointmentAgentError",
    "AppointmentValidationError",
    "AuthenticationError",
    "BookedEvent",
    "BookingRequest",
    "CollaboratorError",
    "InvalidDateError",
    "InvalidDurationError",
    "InvalidInputError",
    "InvalidTimeError",
    "SlotCalculator",
    "TimeRange",
    "WorkingHours",
    "WorkingWindow",
]
