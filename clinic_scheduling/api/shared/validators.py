"""
Scheduling Validators

Input validation for the clinic scheduling API. Date and datetime arguments
are parsed here, so endpoints receive date / datetime objects instead of
strings.
"""

import re
from datetime import date, datetime
from typing import Optional

import frappe
from frappe import _
from frappe.utils import get_datetime, getdate

from clinic_scheduling.clinic_scheduling.scheduling.models import AppointmentStatus

# Nombres generados (APT-00001), emails de User o nombres de servicio
DOCNAME_PATTERN = re.compile(r"^[\w@.+\- ]{1,140}$", re.UNICODE)

DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATETIME_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}[ T]\d{2}:\d{2}(:\d{2})?$")


def _require(value, field_name: str) -> str:
    if value in (None, ""):
        frappe.throw(_("{0} es requerido").format(field_name), frappe.ValidationError)
    return str(value).strip()


def validate_date_string(date_str: str, field_name: str = "date") -> date:
    """
    Parse a YYYY-MM-DD argument.

    Returns:
        date: the parsed calendar date

    Raises:
        frappe.ValidationError: missing value, other shape, or impossible date (2026-02-30)
    """
    value = _require(date_str, field_name)

    # getdate() acepta muchos formatos; la API solo acepta ISO
    if not DATE_SHAPE.match(value):
        frappe.throw(
            _("Formato de {0} inválido. Use YYYY-MM-DD").format(field_name), frappe.ValidationError
        )

    try:
        return getdate(value)
    except (ValueError, frappe.ValidationError):
        frappe.throw(_("{0} no es una fecha válida: {1}").format(field_name, value), frappe.ValidationError)


def validate_datetime_string(datetime_str: str, field_name: str = "datetime") -> datetime:
    """
    Parse a wall-clock datetime (YYYY-MM-DD HH:MM[:SS], "T" separator allowed).

    Offsets are rejected: values are in the organization's zone.

    Returns:
        datetime: naive datetime
    """
    value = _require(datetime_str, field_name)

    if not DATETIME_SHAPE.match(value):
        frappe.throw(
            _("Formato de {0} inválido. Use YYYY-MM-DD HH:MM:SS").format(field_name),
            frappe.ValidationError,
        )

    try:
        return get_datetime(value.replace("T", " "))
    except (ValueError, frappe.ValidationError):
        frappe.throw(
            _("{0} no es una fecha/hora válida: {1}").format(field_name, value), frappe.ValidationError
        )


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (appointment, professional User, patient, service).

    Only word characters, spaces and @ . + - are allowed, which covers
    generated names and emails and keeps markup or SQL out of filters.
    """
    value = _require(name, field_name)

    if not DOCNAME_PATTERN.match(value):
        frappe.throw(_("{0} inválido: {1}").format(field_name, value), frappe.ValidationError)

    return value


def validate_duration(duration: Optional[str], field_name: str = "duration") -> Optional[int]:
    """
    Validate an optional duration in minutes.

    Returns:
        int | None: positive number of minutes, or None if not provided
    """
    if duration in (None, ""):
        return None

    try:
        minutes = int(str(duration).strip())
    except ValueError:
        minutes = 0

    if minutes <= 0:
        frappe.throw(_("{0} debe ser un número positivo").format(field_name), frappe.ValidationError)

    return minutes


def validate_status(status: str, field_name: str = "status") -> AppointmentStatus:
    try:
        return AppointmentStatus(str(status or "").strip())
    except ValueError:
        allowed = ", ".join(s.value for s in AppointmentStatus)
        frappe.throw(
            _("{0} inválido. Valores permitidos: {1}").format(field_name, allowed), frappe.ValidationError
        )
