"""
Booking Service

Write side of the scheduling engine. Every path that can change the time or
the professional of an appointment runs the overlap check and the write
inside writer.atomic(professional_id), so two concurrent requests for the same
slot cannot both pass the check. The guarantee comes from the writer (row
lock, serializable transaction); the pure checks alone cannot provide it.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .intervals import TimeInterval
from .lifecycle import apply_transition, ensure_editable, requires_overlap_check
from .models import Appointment, AppointmentStatus, BookingRequest
from .overlap import find_conflict
from .repositories import ActiveAppointmentRepository, AppointmentWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictDetected:
	"""Resultado de negocio esperado: el horario ya está ocupado."""

	candidate: TimeInterval
	conflicting: Appointment

	@property
	def message(self) -> str:
		return "El profesional ya tiene una cita en ese horario"


@dataclass(frozen=True)
class BookingOutcome:
	appointment: Optional[Appointment] = None
	conflict: Optional[ConflictDetected] = None

	@property
	def success(self) -> bool:
		return self.conflict is None


class BookingService:
	"""
	Orquesta validación de solapamientos y persistencia.

	Flujo:
	1. El intervalo ya viene validado (TimeInterval rechaza end <= start)
	2. Dentro de writer.atomic(profesional): find_conflict -> create/update
	3. Conflicto -> BookingOutcome(conflict=...), nunca una excepción
	"""

	def __init__(
		self,
		appointments: ActiveAppointmentRepository,
		writer: AppointmentWriter,
		organization_id: Optional[str] = None
	) -> None:
		self.appointments = appointments
		self.writer = writer
		self.organization_id = organization_id

	def find_conflict(
		self,
		professional_id: str,
		interval: TimeInterval,
		exclude_appointment_id: Optional[str] = None
	) -> Optional[Appointment]:
		return find_conflict(
			self.appointments,
			professional_id,
			interval,
			exclude_appointment_id=exclude_appointment_id,
			organization_id=self.organization_id,
		)

	def check_availability(
		self,
		professional_id: str,
		interval: TimeInterval,
		exclude_appointment_id: Optional[str] = None
	) -> bool:
		return self.find_conflict(professional_id, interval, exclude_appointment_id) is None

	def book(self, request: BookingRequest) -> BookingOutcome:
		"""Crea una cita si el profesional está libre en el intervalo."""
		with self.writer.atomic(request.professional_id):
			conflict = self.find_conflict(request.professional_id, request.interval)
			if conflict is not None:
				logger.info(
					"Booking rejected for professional %s at %s-%s: overlaps appointment %s",
					request.professional_id,
					request.interval.start,
					request.interval.end,
					conflict.id,
				)
				return BookingOutcome(conflict=ConflictDetected(request.interval, conflict))

			appointment = self.writer.create(request)

		logger.info(
			"Appointment %s booked for professional %s (%s-%s)",
			appointment.id,
			appointment.professional_id,
			appointment.start,
			appointment.end,
		)
		return BookingOutcome(appointment=appointment)

	def reschedule(
		self,
		appointment: Appointment,
		interval: Optional[TimeInterval] = None,
		professional_id: Optional[str] = None
	) -> BookingOutcome:
		"""
		Cambia horario y/o profesional de una cita existente.

		La propia cita se excluye del chequeo para que no choque consigo misma.

		Sin cambios de horario ni de profesional no hay nada que validar, ni
		siquiera en estado terminal.

		Raises:
			InvalidTransition: si la cita está en estado terminal y el
				horario o el profesional cambian
		"""
		if not requires_overlap_check(appointment, interval, professional_id):
			return BookingOutcome(appointment=appointment)

		ensure_editable(appointment)

		target_interval = interval or appointment.interval
		target_professional = professional_id or appointment.professional_id

		with self.writer.atomic(target_professional):
			conflict = self.find_conflict(
				target_professional,
				target_interval,
				exclude_appointment_id=appointment.id,
			)
			if conflict is not None:
				logger.info(
					"Reschedule of %s rejected: overlaps appointment %s",
					appointment.id,
					conflict.id,
				)
				return BookingOutcome(conflict=ConflictDetected(target_interval, conflict))

			updated = self.writer.update_interval(
				appointment.id,
				target_interval,
				professional_id=target_professional,
			)

		logger.info(
			"Appointment %s moved to %s-%s (professional %s)",
			updated.id,
			updated.start,
			updated.end,
			updated.professional_id,
		)
		return BookingOutcome(appointment=updated)

	def change_status(
		self,
		appointment: Appointment,
		status: AppointmentStatus,
		cancellation_reason: Optional[str] = None
	) -> Appointment:
		"""
		Aplica una transición del ciclo de vida y la persiste.

		Raises:
			InvalidTransition: transición no permitida o cancelación sin motivo
		"""
		transitioned = apply_transition(appointment, status, cancellation_reason)
		if transitioned.status == appointment.status:
			return appointment

		updated = self.writer.update_status(
			appointment.id,
			transitioned.status,
			cancellation_reason=transitioned.cancellation_reason,
		)
		logger.info("Appointment %s: %s -> %s", updated.id, appointment.status.value, updated.status.value)
		return updated

	def update_notes(self, appointment: Appointment, notes: Optional[str]) -> Appointment:
		"""Las notas no afectan la agenda: se editan en cualquier estado."""
		if notes == appointment.notes:
			return appointment
		return self.writer.update_notes(appointment.id, notes)

	def delete(self, appointment: Appointment) -> Appointment:
		"""Soft delete: la cita deja de ocupar agenda pero no se borra."""
		deleted = self.writer.soft_delete(appointment.id)
		logger.info("Appointment %s soft-deleted", appointment.id)
		return deleted
