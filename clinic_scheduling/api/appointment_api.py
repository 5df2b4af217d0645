"""
Appointment API Endpoints

Whitelisted functions for the clinic agenda (authenticated users only).
Every endpoint is scoped to the session user's organization and rate limited
by IP address.
"""

from contextlib import contextmanager
from datetime import datetime, time
from typing import Any, Dict, Iterator, List, Optional

import frappe
from frappe import _
from frappe.utils import add_days, cint

from clinic_scheduling.clinic_scheduling.scheduling.availability import get_day_availability
from clinic_scheduling.clinic_scheduling.scheduling.exceptions import SchedulingError
from clinic_scheduling.clinic_scheduling.scheduling.frappe_store import (
	BUSINESS_HOURS_DOCTYPE,
	BUSINESS_HOURS_FIELDS,
	FrappeAppointmentRepository,
	SlotUnavailableError,
	appointment_to_dict,
	business_hours_from_row,
	get_booking_service,
	get_business_hours_repository,
	get_grid_config,
	get_service_duration,
	load_appointment,
)
from clinic_scheduling.clinic_scheduling.scheduling.intervals import TimeInterval
from clinic_scheduling.clinic_scheduling.scheduling.models import AppointmentListQuery, BookingRequest, Weekday
from clinic_scheduling.api.shared import (
	check_rate_limit,
	get_current_organization,
	validate_date_string,
	validate_datetime_string,
	validate_docname,
	validate_duration,
	validate_status,
)


@contextmanager
def _scheduling_errors(endpoint: str) -> Iterator[None]:
	"""
	Traduce errores del motor a errores de validación de Frappe.

	Los errores de validación se propagan tal cual; cualquier otro error
	(DB, conectividad) se registra y se propaga sin modificar.
	"""
	try:
		yield
	except SchedulingError as e:
		frappe.throw(_(str(e)), frappe.ValidationError)
	except frappe.ValidationError:
		raise
	except Exception:
		frappe.log_error(title=f"Clinic Scheduling API: {endpoint}", message=frappe.get_traceback())
		raise


def _parse_interval(start_datetime: str, end_datetime: str) -> TimeInterval:
	start = validate_datetime_string(start_datetime, "start_datetime")
	end = validate_datetime_string(end_datetime, "end_datetime")
	return TimeInterval(start, end)


@frappe.whitelist(methods=["GET"])
def get_available_slots(
	professional: str,
	date: str,
	duration: Optional[str] = None,
	service: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Obtiene el estado de todos los slots de un día para un profesional.

	Rate limited: 30 requests per minute per IP.

	Args:
		professional: User del profesional
		date: fecha (YYYY-MM-DD)
		duration: duración en minutos (opcional, default 60)
		service: Clinic Service cuya duración se usa si no se envía duration

	Returns:
		dict: {
			"date": "2026-03-02",
			"professional": "doctor@clinic.com",
			"business_hours": {"weekday": "Monday", "start_time": "09:00", ...} | None,
			"booked_slots": ["11:00"],
			"available_slots": [
				{"time": "07:00", "display_time": "7:00 AM", "status": "OUTSIDE_HOURS", "is_business_hours": False},
				...
			]
		}

	Example:
		```javascript
		frappe.call({
			method: "clinic_scheduling.api.appointments.get_available_slots",
			args: {professional: "doctor@clinic.com", date: "2026-03-02", service: "Consulta"},
		});
		```
	"""
	check_rate_limit("get_available_slots", limit=30, seconds=60)

	professional = validate_docname(professional, "professional")
	target_date = validate_date_string(date, "date")
	duration_minutes = validate_duration(duration)
	organization = get_current_organization()

	with _scheduling_errors("get_available_slots"):
		config = get_grid_config()

		if duration_minutes is None and service:
			duration_minutes = get_service_duration(validate_docname(service, "service"))
		if duration_minutes is None:
			duration_minutes = config.default_duration_minutes

		availability = get_day_availability(
			FrappeAppointmentRepository(),
			get_business_hours_repository(config),
			professional,
			target_date,
			duration_minutes,
			organization_id=organization,
			config=config,
		)

	return availability.to_dict()


@frappe.whitelist(methods=["GET"])
def check_availability(
	professional: str,
	start_datetime: str,
	end_datetime: str,
	exclude_appointment: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Verifica si un horario está libre para el profesional.

	Rate limited: 30 requests per minute per IP.

	Returns:
		dict: {"available": bool, "conflict": nombre de la cita en conflicto | None}
	"""
	check_rate_limit("check_availability", limit=30, seconds=60)

	professional = validate_docname(professional, "professional")
	if exclude_appointment:
		exclude_appointment = validate_docname(exclude_appointment, "exclude_appointment")
	organization = get_current_organization()

	with _scheduling_errors("check_availability"):
		interval = _parse_interval(start_datetime, end_datetime)
		conflict = get_booking_service(organization).find_conflict(
			professional,
			interval,
			exclude_appointment_id=exclude_appointment,
		)

	return {
		"available": conflict is None,
		"conflict": conflict.id if conflict else None,
	}


@frappe.whitelist(methods=["GET"])
def get_appointments(
	status: Optional[str] = None,
	professional: Optional[str] = None,
	patient: Optional[str] = None,
	start_date: Optional[str] = None,
	end_date: Optional[str] = None,
	page: Optional[str] = None,
	page_length: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Agenda de la organización, ordenada por inicio y paginada.

	Rate limited: 30 requests per minute per IP.

	Args:
		status: filtra por estado (incluye Cancelled / No Show si se piden)
		professional: User del profesional
		patient: paciente
		start_date: primer día incluido (YYYY-MM-DD)
		end_date: último día incluido (YYYY-MM-DD)
		page: página, desde 1 (default 1)
		page_length: citas por página (default 50)

	Returns:
		dict: {
			"data": [appointment dict, ...],
			"pagination": {"page": 1, "page_length": 50, "total": 120, "total_pages": 3}
		}
	"""
	check_rate_limit("get_appointments", limit=30, seconds=60)

	target_status = validate_status(status) if status else None
	if professional:
		professional = validate_docname(professional, "professional")
	if patient:
		patient = validate_docname(patient, "patient")
	first_day = validate_date_string(start_date, "start_date") if start_date else None
	last_day = validate_date_string(end_date, "end_date") if end_date else None
	organization = get_current_organization()

	with _scheduling_errors("get_appointments"):
		query = AppointmentListQuery(
			organization_id=organization,
			professional_id=professional,
			patient_id=patient,
			status=target_status,
			start_from=datetime.combine(first_day, time.min) if first_day else None,
			start_before=datetime.combine(add_days(last_day, 1), time.min) if last_day else None,
			page=cint(page) or 1,
			page_length=cint(page_length) or 50,
		)

		repository = FrappeAppointmentRepository()
		appointments = repository.list_appointments(query)
		total = repository.count_appointments(query)

	return {
		"data": [appointment_to_dict(a) for a in appointments],
		"pagination": {
			"page": query.page,
			"page_length": query.page_length,
			"total": total,
			"total_pages": -(-total // query.page_length),
		},
	}


@frappe.whitelist(methods=["GET"])
def get_appointment(appointment: str) -> Dict[str, Any]:
	"""
	Detalle de una cita no eliminada de la organización.

	Rate limited: 30 requests per minute per IP.

	Raises:
		frappe.DoesNotExistError: "Cita no encontrada"
	"""
	check_rate_limit("get_appointment", limit=30, seconds=60)

	appointment = validate_docname(appointment, "appointment")
	organization = get_current_organization()

	with _scheduling_errors("get_appointment"):
		current = load_appointment(appointment, organization)

	return appointment_to_dict(current)


@frappe.whitelist(methods=["POST"])
def create_appointment(
	professional: str,
	patient: str,
	start_datetime: str,
	end_datetime: str,
	service: Optional[str] = None,
	notes: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Crea una cita en estado Pending si el profesional está libre.

	Rate limited: 10 requests per minute per IP (write operation).

	Raises:
		SlotUnavailableError (409): el profesional ya tiene una cita en ese horario
	"""
	check_rate_limit("create_appointment", limit=10, seconds=60)

	professional = validate_docname(professional, "professional")
	patient = validate_docname(patient, "patient")
	if service:
		service = validate_docname(service, "service")
	organization = get_current_organization()

	with _scheduling_errors("create_appointment"):
		outcome = get_booking_service(organization).book(BookingRequest(
			professional_id=professional,
			patient_id=patient,
			interval=_parse_interval(start_datetime, end_datetime),
			organization_id=organization,
			service_id=service,
			notes=notes,
		))

	if not outcome.success:
		frappe.throw(_(outcome.conflict.message), SlotUnavailableError)

	return appointment_to_dict(outcome.appointment)


@frappe.whitelist(methods=["POST", "PUT"])
def update_appointment(
	appointment: str,
	start_datetime: Optional[str] = None,
	end_datetime: Optional[str] = None,
	professional: Optional[str] = None,
	notes: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Actualiza horario, profesional y/o notas de una cita.

	Si cambia el horario o el profesional se vuelve a validar el
	solapamiento, excluyendo la propia cita.

	Rate limited: 10 requests per minute per IP (write operation).
	"""
	check_rate_limit("update_appointment", limit=10, seconds=60)

	appointment = validate_docname(appointment, "appointment")
	if professional:
		professional = validate_docname(professional, "professional")
	organization = get_current_organization()

	with _scheduling_errors("update_appointment"):
		current = load_appointment(appointment, organization)
		service = get_booking_service(organization)

		updated = current
		if start_datetime or end_datetime or professional:
			interval = None
			if start_datetime or end_datetime:
				start = validate_datetime_string(start_datetime, "start_datetime") if start_datetime else current.start
				end = validate_datetime_string(end_datetime, "end_datetime") if end_datetime else current.end
				interval = TimeInterval(start, end)

			outcome = service.reschedule(current, interval, professional)
			if not outcome.success:
				frappe.throw(_(outcome.conflict.message), SlotUnavailableError)
			updated = outcome.appointment

		# Las notas se pueden editar en cualquier estado
		if notes is not None:
			updated = service.update_notes(updated, notes)

	return appointment_to_dict(updated)


@frappe.whitelist(methods=["POST", "PUT"])
def update_appointment_status(
	appointment: str,
	status: str,
	cancellation_reason: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Cambia el estado de una cita según el ciclo de vida.

	Cancelled requiere cancellation_reason.

	Rate limited: 10 requests per minute per IP (write operation).
	"""
	check_rate_limit("update_appointment_status", limit=10, seconds=60)

	appointment = validate_docname(appointment, "appointment")
	target = validate_status(status)
	organization = get_current_organization()

	with _scheduling_errors("update_appointment_status"):
		current = load_appointment(appointment, organization)
		updated = get_booking_service(organization).change_status(current, target, cancellation_reason)

	return appointment_to_dict(updated)


@frappe.whitelist(methods=["POST", "DELETE"])
def delete_appointment(appointment: str) -> Dict[str, Any]:
	"""
	Eliminación lógica: la cita deja de ocupar la agenda.

	Rate limited: 10 requests per minute per IP (write operation).
	"""
	check_rate_limit("delete_appointment", limit=10, seconds=60)

	appointment = validate_docname(appointment, "appointment")
	organization = get_current_organization()

	with _scheduling_errors("delete_appointment"):
		current = load_appointment(appointment, organization)
		get_booking_service(organization).delete(current)

	return {"success": True, "message": _("Cita eliminada exitosamente")}


@frappe.whitelist(methods=["GET"])
def get_business_hours() -> List[Dict[str, Any]]:
	"""
	Horario semanal de la organización, ordenado de lunes a domingo.

	Rate limited: 30 requests per minute per IP.
	"""
	check_rate_limit("get_business_hours", limit=30, seconds=60)

	organization = get_current_organization()

	with _scheduling_errors("get_business_hours"):
		rows = frappe.get_all(
			BUSINESS_HOURS_DOCTYPE,
			filters={"organization": organization},
			fields=BUSINESS_HOURS_FIELDS,
			order_by="creation asc",
		)
		schedule = [business_hours_from_row(row) for row in rows]

	weekday_order = list(Weekday)
	schedule.sort(key=lambda hours: weekday_order.index(hours.weekday))

	return [hours.to_dict() for hours in schedule]
