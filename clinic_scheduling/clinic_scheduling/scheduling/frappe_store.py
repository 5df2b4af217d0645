"""
Frappe Store

Frappe-backed implementations of the repository ports:
- FrappeAppointmentRepository: active Clinic Appointments of a professional and the agenda listing
- FrappeBusinessHoursRepository: Business Hours per weekday
- FrappeAppointmentWriter: write path + row lock for check-then-insert
- FrappeCacheBackend: Redis cache (frappe.cache) for CachedBusinessHoursRepository
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import frappe
from frappe import _
from frappe.utils import cint, get_datetime, now_datetime

from .booking import BookingService
from .cache import CachedBusinessHoursRepository
from .exceptions import InvalidRange
from .intervals import TimeInterval
from .models import (
	INACTIVE_STATUSES,
	Appointment,
	AppointmentListQuery,
	AppointmentQuery,
	AppointmentStatus,
	BookingRequest,
	BusinessHours,
	Weekday,
)
from .settings import SlotGridConfig
from .slots import parse_clock_time

APPOINTMENT_DOCTYPE = "Clinic Appointment"
BUSINESS_HOURS_DOCTYPE = "Business Hours"
SERVICE_DOCTYPE = "Clinic Service"
PROFESSIONAL_DOCTYPE = "User"

APPOINTMENT_FIELDS = [
	"name",
	"organization",
	"professional",
	"patient",
	"service",
	"start_datetime",
	"end_datetime",
	"status",
	"cancellation_reason",
	"notes",
	"deleted_at",
]

BUSINESS_HOURS_FIELDS = ["organization", "weekday", "start_time", "end_time", "enabled"]


class SlotUnavailableError(frappe.ValidationError):
	"""El profesional ya tiene una cita activa en el horario solicitado."""

	http_status_code = 409


# ===== CONVERSIONS =====

def appointment_from_row(row: Any) -> Appointment:
	"""Convierte un row de frappe.get_all (o un Document) en Appointment."""
	return Appointment(
		id=row.get("name"),
		professional_id=row.get("professional"),
		patient_id=row.get("patient"),
		interval=TimeInterval(
			get_datetime(row.get("start_datetime")),
			get_datetime(row.get("end_datetime")),
		),
		status=AppointmentStatus(row.get("status") or AppointmentStatus.PENDING.value),
		organization_id=row.get("organization"),
		service_id=row.get("service"),
		notes=row.get("notes"),
		cancellation_reason=row.get("cancellation_reason"),
		deleted=bool(row.get("deleted_at")),
	)


def appointment_to_dict(appointment: Appointment) -> Dict[str, Any]:
	return {
		"name": appointment.id,
		"organization": appointment.organization_id,
		"professional": appointment.professional_id,
		"patient": appointment.patient_id,
		"service": appointment.service_id,
		"start_datetime": appointment.start.strftime("%Y-%m-%d %H:%M:%S"),
		"end_datetime": appointment.end.strftime("%Y-%m-%d %H:%M:%S"),
		"status": appointment.status.value,
		"cancellation_reason": appointment.cancellation_reason,
		"notes": appointment.notes,
	}


def business_hours_from_row(row: Any) -> BusinessHours:
	return BusinessHours(
		weekday=Weekday(row.get("weekday")),
		start_time=parse_clock_time(row.get("start_time")),
		end_time=parse_clock_time(row.get("end_time")),
		enabled=bool(cint(row.get("enabled"))),
		organization_id=row.get("organization"),
	)


# ===== REPOSITORIES =====

class FrappeAppointmentRepository:
	def list_active_for_professional(self, query: AppointmentQuery) -> List[Appointment]:
		"""
		Consulta appointments con:
			- professional = X
			- status not in ("Cancelled", "No Show")
			- deleted_at no seteado
			- start < range_end AND end > range_start (si hay rango)
			- name != exclude_appointment_id
		"""
		filters: Dict[str, Any] = {
			"professional": query.professional_id,
			"status": ["not in", [status.value for status in INACTIVE_STATUSES]],
			"deleted_at": ["is", "not set"],
		}

		if query.organization_id:
			filters["organization"] = query.organization_id
		if query.range_end is not None:
			filters["start_datetime"] = ["<", query.range_end]
		if query.range_start is not None:
			filters["end_datetime"] = [">", query.range_start]
		if query.exclude_appointment_id:
			filters["name"] = ["!=", query.exclude_appointment_id]

		rows = frappe.get_all(
			APPOINTMENT_DOCTYPE,
			filters=filters,
			fields=APPOINTMENT_FIELDS,
			order_by="start_datetime asc",
		)

		return [appointment_from_row(row) for row in rows]

	def list_appointments(self, query: AppointmentListQuery) -> List[Appointment]:
		rows = frappe.get_all(
			APPOINTMENT_DOCTYPE,
			filters=_list_filters(query),
			fields=APPOINTMENT_FIELDS,
			order_by="start_datetime asc, name asc",
			limit_start=query.offset,
			limit_page_length=query.page_length,
		)

		return [appointment_from_row(row) for row in rows]

	def count_appointments(self, query: AppointmentListQuery) -> int:
		return frappe.db.count(APPOINTMENT_DOCTYPE, filters=_list_filters(query))


def _list_filters(query: AppointmentListQuery) -> List[List[Any]]:
	"""Filtros en forma de lista: start_datetime aparece dos veces con un rango."""
	filters: List[List[Any]] = [["deleted_at", "is", "not set"]]

	if query.organization_id:
		filters.append(["organization", "=", query.organization_id])
	if query.professional_id:
		filters.append(["professional", "=", query.professional_id])
	if query.patient_id:
		filters.append(["patient", "=", query.patient_id])
	if query.status is not None:
		filters.append(["status", "=", query.status.value])
	if query.start_from is not None:
		filters.append(["start_datetime", ">=", query.start_from])
	if query.start_before is not None:
		filters.append(["start_datetime", "<", query.start_before])

	return filters


class FrappeBusinessHoursRepository:
	def get(self, organization_id: Optional[str], weekday: Weekday) -> Optional[BusinessHours]:
		filters: Dict[str, Any] = {"weekday": weekday.value, "enabled": 1}
		if organization_id:
			filters["organization"] = organization_id

		# Si hay duplicados, gana el registro más antiguo
		rows = frappe.get_all(
			BUSINESS_HOURS_DOCTYPE,
			filters=filters,
			fields=BUSINESS_HOURS_FIELDS,
			order_by="creation asc",
			limit=1,
		)

		return business_hours_from_row(rows[0]) if rows else None


class FrappeCacheBackend:
	"""Adaptador de frappe.cache (Redis) para CachedBusinessHoursRepository."""

	def get_value(self, key: str) -> Any:
		return frappe.cache.get_value(key)

	def set_value(self, key: str, value: Any, expires_in_sec: int) -> None:
		frappe.cache.set_value(key, value, expires_in_sec=expires_in_sec)

	def delete_value(self, key: str) -> None:
		frappe.cache.delete_value(key)


class FrappeAppointmentWriter:
	"""
	Write path de Clinic Appointment.

	Los documentos se guardan con flags.overlap_checked para que el controller
	no repita el chequeo que BookingService ya hizo dentro de atomic().
	"""

	@contextmanager
	def atomic(self, professional_id: str) -> Iterator[None]:
		"""
		Bloquea la fila del profesional (SELECT ... FOR UPDATE).

		El lock dura hasta el commit de la transacción del request, así dos
		reservas simultáneas para el mismo profesional se serializan.
		"""
		if not frappe.db.get_value(PROFESSIONAL_DOCTYPE, professional_id, "name", for_update=True):
			frappe.throw(_("Profesional no encontrado"), frappe.DoesNotExistError)
		yield

	def create(self, request: BookingRequest) -> Appointment:
		doc = frappe.get_doc({
			"doctype": APPOINTMENT_DOCTYPE,
			"organization": request.organization_id,
			"professional": request.professional_id,
			"patient": request.patient_id,
			"service": request.service_id,
			"start_datetime": request.interval.start,
			"end_datetime": request.interval.end,
			"status": request.status.value,
			"notes": request.notes,
		})
		doc.flags.overlap_checked = True
		doc.insert()
		return appointment_from_row(doc)

	def update_interval(
		self,
		appointment_id: str,
		interval: TimeInterval,
		professional_id: Optional[str] = None
	) -> Appointment:
		doc = frappe.get_doc(APPOINTMENT_DOCTYPE, appointment_id)
		doc.start_datetime = interval.start
		doc.end_datetime = interval.end
		if professional_id:
			doc.professional = professional_id
		doc.flags.overlap_checked = True
		doc.save()
		return appointment_from_row(doc)

	def update_status(
		self,
		appointment_id: str,
		status: AppointmentStatus,
		cancellation_reason: Optional[str] = None
	) -> Appointment:
		doc = frappe.get_doc(APPOINTMENT_DOCTYPE, appointment_id)
		doc.status = status.value
		doc.cancellation_reason = cancellation_reason
		doc.save()
		return appointment_from_row(doc)

	def update_notes(self, appointment_id: str, notes: Optional[str]) -> Appointment:
		doc = frappe.get_doc(APPOINTMENT_DOCTYPE, appointment_id)
		doc.notes = notes
		doc.save()
		return appointment_from_row(doc)

	def soft_delete(self, appointment_id: str) -> Appointment:
		doc = frappe.get_doc(APPOINTMENT_DOCTYPE, appointment_id)
		doc.deleted_at = now_datetime()
		doc.save()
		return appointment_from_row(doc)


# ===== FACTORIES =====

def get_grid_config() -> SlotGridConfig:
	"""Configuración de la grilla desde site_config.json."""
	return SlotGridConfig.from_mapping(frappe.conf or {})


def validate_grid_config() -> None:
	"""Hook after_migrate: falla temprano si la configuración es inválida."""
	try:
		config = get_grid_config()
	except InvalidRange as e:
		frappe.throw(_("Configuración de agenda inválida: {0}").format(e))

	frappe.logger("clinic_scheduling").info(
		f"Slot grid: {config.grid()!r}, default duration {config.default_duration_minutes} min"
	)


def get_business_hours_repository(
	config: Optional[SlotGridConfig] = None
) -> CachedBusinessHoursRepository:
	config = config or get_grid_config()
	return CachedBusinessHoursRepository(
		FrappeBusinessHoursRepository(),
		FrappeCacheBackend(),
		ttl_seconds=config.business_hours_cache_ttl,
	)


def get_booking_service(organization: Optional[str] = None) -> BookingService:
	return BookingService(
		FrappeAppointmentRepository(),
		FrappeAppointmentWriter(),
		organization_id=organization,
	)


def get_service_duration(service: str) -> int:
	"""Duración configurada del Clinic Service."""
	duration = frappe.db.get_value(SERVICE_DOCTYPE, service, "duration_minutes")
	if duration is None:
		frappe.throw(_("Servicio '{0}' no encontrado").format(service), frappe.DoesNotExistError)
	return cint(duration)


def load_appointment(name: str, organization: Optional[str] = None) -> Appointment:
	"""
	Obtiene una cita no eliminada de la organización.

	Raises:
		frappe.DoesNotExistError: si no existe, está eliminada o es de otra organización
	"""
	filters: Dict[str, Any] = {"name": name, "deleted_at": ["is", "not set"]}
	if organization:
		filters["organization"] = organization

	rows = frappe.get_all(APPOINTMENT_DOCTYPE, filters=filters, fields=APPOINTMENT_FIELDS, limit=1)
	if not rows:
		frappe.throw(_("Cita no encontrada"), frappe.DoesNotExistError)

	return appointment_from_row(rows[0])
