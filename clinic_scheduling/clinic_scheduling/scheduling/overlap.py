"""
Overlap Detection Service

Detects scheduling conflicts (overlaps) between a candidate interval and the
active appointments of a professional. Only active appointments count:
Cancelled, No Show and soft-deleted rows never block a slot.
"""

from typing import Iterable, Optional

from .intervals import TimeInterval, overlaps
from .models import Appointment, AppointmentQuery
from .repositories import ActiveAppointmentRepository


def first_conflict(
	appointments: Iterable[Appointment],
	candidate: TimeInterval,
	exclude_appointment_id: Optional[str] = None
) -> Optional[Appointment]:
	"""
	Recorre un snapshot de citas y retorna la primera que se solapa.

	Args:
		appointments: citas del profesional (snapshot del repositorio)
		candidate: intervalo a validar
		exclude_appointment_id: cita a ignorar (la que se está editando)

	Returns:
		Appointment en conflicto, o None
	"""
	for appointment in appointments:
		if exclude_appointment_id is not None and appointment.id == exclude_appointment_id:
			continue
		# El repositorio ya filtra, pero un snapshot viejo puede traer inactivas
		if not appointment.is_active:
			continue
		if overlaps(appointment.interval, candidate):
			return appointment

	return None


def find_conflict(
	repository: ActiveAppointmentRepository,
	professional_id: str,
	candidate: TimeInterval,
	exclude_appointment_id: Optional[str] = None,
	organization_id: Optional[str] = None,
	window: Optional[TimeInterval] = None
) -> Optional[Appointment]:
	"""
	Detecta si el profesional ya tiene una cita activa en el intervalo.

	Args:
		repository: fuente de citas activas
		professional_id: profesional a validar
		candidate: intervalo propuesto [start, end)
		exclude_appointment_id: cita a excluir (para reprogramaciones)
		organization_id: restringe la búsqueda a la organización
		window: rango de consulta; None = rango abierto (create/update)

	Returns:
		La primera cita en conflicto, o None si el horario está libre.
		Con varios conflictos se reporta cualquiera de ellos.
	"""
	query = AppointmentQuery(
		professional_id=professional_id,
		organization_id=organization_id,
		range_start=window.start if window else None,
		range_end=window.end if window else None,
		exclude_appointment_id=exclude_appointment_id,
	)

	return first_conflict(
		repository.list_active_for_professional(query),
		candidate,
		exclude_appointment_id,
	)


def is_available(
	repository: ActiveAppointmentRepository,
	professional_id: str,
	candidate: TimeInterval,
	exclude_appointment_id: Optional[str] = None,
	organization_id: Optional[str] = None
) -> bool:
	return find_conflict(
		repository,
		professional_id,
		candidate,
		exclude_appointment_id=exclude_appointment_id,
		organization_id=organization_id,
	) is None
