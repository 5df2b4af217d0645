"""
Clinic Scheduling API

Structure:
    api/
    ├── __init__.py              # This file
    ├── appointments/            # Appointments domain
    │   └── __init__.py          # Re-exports from appointment_api
    ├── shared/                  # Shared utilities
    │   ├── __init__.py
    │   ├── security.py          # Rate limiting, organization scoping
    │   └── validators.py        # Input validators
    └── appointment_api.py       # Whitelisted endpoints

Usage:
    frappe.call("clinic_scheduling.api.appointments.get_available_slots", ...)
"""

from . import appointments
from . import shared

__all__ = [
    "appointments",
    "shared",
]
