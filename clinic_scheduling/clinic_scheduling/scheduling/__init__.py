"""
Scheduling Services Module

Core business logic for appointment scheduling (no Frappe imports):
- Interval model and overlap predicate (intervals.py)
- Slot grid generation (slots.py)
- Business hours filter (business_hours.py)
- Overlap detection (overlap.py)
- Per-slot availability (availability.py)
- Appointment lifecycle (lifecycle.py)
- Booking orchestration (booking.py)

Frappe-backed repositories live in frappe_store.py.
"""
