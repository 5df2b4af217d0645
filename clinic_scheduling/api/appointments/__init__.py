"""
Appointments API Domain

Handles availability queries and the appointment lifecycle.
"""

# Re-export endpoints from appointment_api for new-style imports
from clinic_scheduling.api.appointment_api import (
    # Availability
    get_available_slots,
    check_availability,
    get_business_hours,
    # Agenda
    get_appointments,
    get_appointment,
    # CRUD
    create_appointment,
    update_appointment,
    update_appointment_status,
    delete_appointment,
)

__all__ = [
    # Availability
    "get_available_slots",
    "check_availability",
    "get_business_hours",
    # Agenda
    "get_appointments",
    "get_appointment",
    # CRUD
    "create_appointment",
    "update_appointment",
    "update_appointment_status",
    "delete_appointment",
]
