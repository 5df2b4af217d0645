"""
In-memory repositories.

Reference implementation of the repository ports, used by the test suite and
by anything that needs the engine without a Frappe site. atomic() holds one
lock per professional, which is what makes check-then-insert safe here.
"""

import itertools
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional

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


class InMemoryAppointmentStore:
	"""ActiveAppointmentRepository + AppointmentWriter sobre un dict."""

	def __init__(self, appointments: Iterable[Appointment] = ()) -> None:
		self._appointments: Dict[str, Appointment] = {a.id: a for a in appointments}
		self._ids = itertools.count(1)
		self._guard = threading.Lock()
		self._locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)

	def get(self, appointment_id: str) -> Appointment:
		try:
			return self._appointments[appointment_id]
		except KeyError:
			raise LookupError(f"Cita no encontrada: {appointment_id}") from None

	def add(self, appointment: Appointment) -> Appointment:
		with self._guard:
			self._appointments[appointment.id] = appointment
		return appointment

	def list_active_for_professional(self, query: AppointmentQuery) -> List[Appointment]:
		with self._guard:
			snapshot = list(self._appointments.values())

		return sorted(
			(a for a in snapshot if a.is_active and query.matches(a)),
			key=lambda a: a.start,
		)

	@contextmanager
	def atomic(self, professional_id: str) -> Iterator[None]:
		with self._guard:
			lock = self._locks[professional_id]
		with lock:
			yield

	def list_appointments(self, query: AppointmentListQuery) -> List[Appointment]:
		with self._guard:
			snapshot = list(self._appointments.values())

		matching = sorted((a for a in snapshot if query.matches(a)), key=lambda a: (a.start, a.id))
		return matching[query.offset:query.offset + query.page_length]

	def count_appointments(self, query: AppointmentListQuery) -> int:
		with self._guard:
			return sum(1 for a in self._appointments.values() if query.matches(a))

	def _next_id(self) -> str:
		# Los ids sembrados en el constructor no se reutilizan
		while True:
			appointment_id = f"APT-{next(self._ids):05d}"
			if appointment_id not in self._appointments:
				return appointment_id

	def create(self, request: BookingRequest) -> Appointment:
		with self._guard:
			appointment_id = self._next_id()
			appointment = Appointment(
				id=appointment_id,
				professional_id=request.professional_id,
				patient_id=request.patient_id,
				interval=request.interval,
				status=request.status,
				organization_id=request.organization_id,
				service_id=request.service_id,
				notes=request.notes,
			)
			self._appointments[appointment_id] = appointment
		return appointment

	def _update(self, appointment_id: str, **changes) -> Appointment:
		with self._guard:
			updated = replace(self.get(appointment_id), **changes)
			self._appointments[appointment_id] = updated
		return updated

	def update_interval(
		self,
		appointment_id: str,
		interval: TimeInterval,
		professional_id: Optional[str] = None
	) -> Appointment:
		changes = {"interval": interval}
		if professional_id is not None:
			changes["professional_id"] = professional_id
		return self._update(appointment_id, **changes)

	def update_status(
		self,
		appointment_id: str,
		status: AppointmentStatus,
		cancellation_reason: Optional[str] = None
	) -> Appointment:
		return self._update(appointment_id, status=status, cancellation_reason=cancellation_reason)

	def update_notes(self, appointment_id: str, notes: Optional[str]) -> Appointment:
		return self._update(appointment_id, notes=notes)

	def soft_delete(self, appointment_id: str) -> Appointment:
		return self._update(appointment_id, deleted=True)


class InMemoryBusinessHoursRepository:
	def __init__(self, hours: Iterable[BusinessHours] = ()) -> None:
		self._hours = list(hours)

	def add(self, hours: BusinessHours) -> None:
		self._hours.append(hours)

	def get(self, organization_id: Optional[str], weekday: Weekday) -> Optional[BusinessHours]:
		# Con registros duplicados gana el primero
		for hours in self._hours:
			if hours.weekday != weekday or not hours.enabled:
				continue
			if organization_id is not None and hours.organization_id != organization_id:
				continue
			return hours
		return None
