"""
Appointment Lifecycle

Valid status transitions:

	Pending -> Confirmed -> Completed
	Pending | Confirmed -> Cancelled | No Show | Rescheduled

Completed, Cancelled, No Show and Rescheduled are terminal. Rescheduled is a
plain status tag: it does not link to the appointment that replaced it.
"""

from dataclasses import replace
from typing import Dict, FrozenSet, Optional

from .exceptions import InvalidTransition
from .intervals import TimeInterval
from .models import Appointment, AppointmentStatus

S = AppointmentStatus

TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
	S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED, S.NO_SHOW, S.RESCHEDULED}),
	S.CONFIRMED: frozenset({S.COMPLETED, S.CANCELLED, S.NO_SHOW, S.RESCHEDULED}),
	S.COMPLETED: frozenset(),
	S.CANCELLED: frozenset(),
	S.NO_SHOW: frozenset(),
	S.RESCHEDULED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def is_terminal(status: AppointmentStatus) -> bool:
	return status in TERMINAL_STATUSES


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
	if is_terminal(current):
		return False
	# Repetir el mismo estado no terminal no cambia nada
	return target == current or target in TRANSITIONS[current]


def validate_transition(
	current: AppointmentStatus,
	target: AppointmentStatus,
	cancellation_reason: Optional[str] = None
) -> None:
	"""
	Valida un cambio de estado.

	Raises:
		InvalidTransition: si el estado actual es terminal, la transición no
			existe, o se cancela sin motivo
	"""
	if is_terminal(current):
		raise InvalidTransition(
			f"La cita está en estado terminal ({current.value}) y no puede pasar a {target.value}"
		)

	if not can_transition(current, target):
		raise InvalidTransition(f"Transición no permitida: {current.value} -> {target.value}")

	if target == S.CANCELLED and not (cancellation_reason or "").strip():
		raise InvalidTransition("Se requiere un motivo de cancelación")


def apply_transition(
	appointment: Appointment,
	target: AppointmentStatus,
	cancellation_reason: Optional[str] = None
) -> Appointment:
	"""
	Retorna la cita con el nuevo estado.

	El motivo de cancelación solo se conserva en Cancelled; en cualquier otro
	estado queda en None.
	"""
	validate_transition(appointment.status, target, cancellation_reason)

	return replace(
		appointment,
		status=target,
		cancellation_reason=cancellation_reason.strip() if target == S.CANCELLED else None,
	)


def requires_overlap_check(
	appointment: Appointment,
	interval: Optional[TimeInterval] = None,
	professional_id: Optional[str] = None
) -> bool:
	"""True si la edición cambia start, end o profesional."""
	if interval is not None and interval != appointment.interval:
		return True
	if professional_id is not None and professional_id != appointment.professional_id:
		return True
	return False


def ensure_editable(appointment: Appointment) -> None:
	"""Una cita en estado terminal no puede cambiar de horario ni de profesional."""
	if is_terminal(appointment.status):
		raise InvalidTransition(
			f"No se puede modificar el horario de una cita en estado {appointment.status.value}"
		)
