"""
Repository Ports

Contracts the scheduling core expects from the persistence layer.
Implementations: memory.py (in-process) and frappe_store.py (Frappe ORM).
"""

from typing import ContextManager, List, Optional, Protocol, runtime_checkable

from .intervals import TimeInterval
from .models import (
	Appointment,
	AppointmentListQuery,
	AppointmentQuery,
	AppointmentStatus,
	BookingRequest,
	BusinessHours,
	Weekday,
)


@runtime_checkable
class ActiveAppointmentRepository(Protocol):
	def list_active_for_professional(self, query: AppointmentQuery) -> List[Appointment]:
		"""
		Citas activas del profesional que intersectan el rango de la consulta.

		Debe excluir Cancelled, No Show y citas eliminadas (soft delete).
		"""
		...


@runtime_checkable
class AppointmentReader(Protocol):
	def list_appointments(self, query: AppointmentListQuery) -> List[Appointment]:
		"""Agenda filtrada y paginada, ordenada por inicio. Nunca incluye eliminadas."""
		...

	def count_appointments(self, query: AppointmentListQuery) -> int:
		"""Total de citas que cumplen el filtro, sin paginar."""
		...


@runtime_checkable
class BusinessHoursRepository(Protocol):
	def get(self, organization_id: Optional[str], weekday: Weekday) -> Optional[BusinessHours]:
		"""Horario habilitado del día, o None. Con duplicados gana el primero."""
		...


@runtime_checkable
class AppointmentWriter(Protocol):
	"""
	Write path. create / update_interval solo se llaman dentro de atomic()
	y después de que el chequeo de solapamiento pasó.
	"""

	def atomic(self, professional_id: str) -> ContextManager[None]:
		"""Serializa chequeo + escritura para un profesional."""
		...

	def create(self, request: BookingRequest) -> Appointment:
		...

	def update_interval(
		self,
		appointment_id: str,
		interval: TimeInterval,
		professional_id: Optional[str] = None
	) -> Appointment:
		...

	def update_status(
		self,
		appointment_id: str,
		status: AppointmentStatus,
		cancellation_reason: Optional[str] = None
	) -> Appointment:
		...

	def update_notes(self, appointment_id: str, notes: Optional[str]) -> Appointment:
		"""Notas libres; permitido en cualquier estado."""
		...

	def soft_delete(self, appointment_id: str) -> Appointment:
		...
