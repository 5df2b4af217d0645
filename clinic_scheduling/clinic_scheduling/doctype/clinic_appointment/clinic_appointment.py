# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Clinic Appointment DocType

Appointment of a patient with a professional. Guards the scheduling
invariant for edits made from Desk: no two active appointments of the same
professional may overlap.
"""

from typing import Optional

import frappe
from frappe import _
from frappe.model.document import Document
from frappe.utils import get_datetime

from clinic_scheduling.clinic_scheduling.scheduling.exceptions import InvalidInterval, InvalidTransition
from clinic_scheduling.clinic_scheduling.scheduling.frappe_store import (
	FrappeAppointmentRepository,
	FrappeAppointmentWriter,
	SlotUnavailableError,
	appointment_from_row,
)
from clinic_scheduling.clinic_scheduling.scheduling.intervals import TimeInterval
from clinic_scheduling.clinic_scheduling.scheduling.lifecycle import (
	ensure_editable,
	requires_overlap_check,
	validate_transition,
)
from clinic_scheduling.clinic_scheduling.scheduling.models import (
	INACTIVE_STATUSES,
	AppointmentStatus,
)
from clinic_scheduling.clinic_scheduling.scheduling.overlap import find_conflict


class ClinicAppointment(Document):
	"""
	Clinic Appointment with lifecycle and overlap validation.

	Flujo:
	1. Se crea en Pending (BookingService o Desk)
	2. Cambios de horario/profesional vuelven a validar solapamientos
	3. Cancelled / No Show / Completed / Rescheduled son estados terminales
	4. Nunca se borra físicamente: deleted_at marca la eliminación lógica
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.

		Ejecuta:
		1. Validar campos requeridos
		2. Validar start_datetime < end_datetime
		3. Validar transición de estado contra la versión guardada
		4. Validar solapamientos si cambió horario o profesional
		"""
		self._validate_required_fields()
		interval = self._validate_interval()
		self._validate_status_transition(interval)
		self._validate_overlaps(interval)

	def on_trash(self) -> None:
		frappe.throw(_("Las citas no se eliminan físicamente. Use la eliminación lógica."))

	# ===== VALIDATION METHODS =====

	def _validate_required_fields(self) -> None:
		if not self.professional:
			frappe.throw(_("Profesional es requerido"))

		if not self.patient:
			frappe.throw(_("Paciente es requerido"))

		if not self.status:
			self.status = AppointmentStatus.PENDING.value

	def _validate_interval(self) -> TimeInterval:
		if not self.start_datetime or not self.end_datetime:
			frappe.throw(_("Start DateTime y End DateTime son requeridos"))

		try:
			return TimeInterval(get_datetime(self.start_datetime), get_datetime(self.end_datetime))
		except InvalidInterval:
			frappe.throw(_("La hora de fin debe ser posterior a la hora de inicio"))

	def _validate_status_transition(self, interval: TimeInterval) -> None:
		"""
		Valida el cambio de estado y el motivo de cancelación.

		El motivo solo se conserva cuando la cita queda Cancelled.
		"""
		status = AppointmentStatus(self.status)
		before = self._doc_before_save()

		if before is None:
			if status != AppointmentStatus.PENDING:
				frappe.throw(_("Una cita nueva debe crearse en estado Pending"))
		else:
			previous = appointment_from_row(before)

			try:
				if status != previous.status:
					validate_transition(previous.status, status, self.cancellation_reason)
				if requires_overlap_check(previous, interval, self.professional):
					ensure_editable(previous)
			except InvalidTransition as e:
				frappe.throw(_(str(e)))

		if status != AppointmentStatus.CANCELLED:
			self.cancellation_reason = None

	def _validate_overlaps(self, interval: TimeInterval) -> None:
		"""
		Bloquea si el profesional ya tiene una cita activa en el horario.

		Se omite cuando BookingService ya validó dentro de su unidad atómica
		(flags.overlap_checked), o si la cita no ocupa agenda.
		"""
		if self.flags.overlap_checked:
			return

		if self.deleted_at or AppointmentStatus(self.status) in INACTIVE_STATUSES:
			return

		before = self._doc_before_save()
		if before is not None and not requires_overlap_check(
			appointment_from_row(before), interval, self.professional
		):
			return

		with FrappeAppointmentWriter().atomic(self.professional):
			conflict = find_conflict(
				FrappeAppointmentRepository(),
				self.professional,
				interval,
				exclude_appointment_id=None if self.is_new() else self.name,
				organization_id=self.organization,
			)

		if conflict is not None:
			frappe.throw(
				_("El profesional ya tiene una cita en ese horario ({0})").format(conflict.id),
				SlotUnavailableError,
			)

	def _doc_before_save(self) -> Optional[Document]:
		if self.is_new():
			return None
		return self.get_doc_before_save()
