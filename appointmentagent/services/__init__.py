"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .appointment_service import AppointmentService, CalendarClientProtocol, create_service

__all__ = ["AppointmentService", "CalendarClientProtocol", "create_service"]
