"""
appointmentagent - open appointment slots and bookings on top of Google Calendar.
"""

__version__ = "0.1.0"
