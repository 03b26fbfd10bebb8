"""
Appointment Booking API

A FastAPI backend for booking service appointments, with per-user booking
limits, administrator oversight and WhatsApp notifications.
"""

__version__ = "1.0.0"
