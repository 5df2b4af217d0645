"""
Scheduling Domain Models

Value types shared by the scheduling services and the repositories.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from .exceptions import InvalidRange
from .intervals import TimeInterval
from .slots import format_clock_time


class AppointmentStatus(str, Enum):
	"""Estados de una cita. Los valores coinciden con el Select del DocType."""

	PENDING = "Pending"
	CONFIRMED = "Confirmed"
	COMPLETED = "Completed"
	CANCELLED = "Cancelled"
	NO_SHOW = "No Show"
	RESCHEDULED = "Rescheduled"


# Estados que no ocupan la agenda del profesional
INACTIVE_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW})


class Weekday(str, Enum):
	MONDAY = "Monday"
	TUESDAY = "Tuesday"
	WEDNESDAY = "Wednesday"
	THURSDAY = "Thursday"
	FRIDAY = "Friday"
	SATURDAY = "Saturday"
	SUNDAY = "Sunday"

	@classmethod
	def from_date(cls, value: date) -> "Weekday":
		# date.weekday(): lunes = 0; no depende del locale como strftime("%A")
		return list(cls)[value.weekday()]


@dataclass(frozen=True)
class Appointment:
	id: str
	professional_id: str
	patient_id: str
	interval: TimeInterval
	status: AppointmentStatus = AppointmentStatus.PENDING
	organization_id: Optional[str] = None
	service_id: Optional[str] = None
	notes: Optional[str] = None
	cancellation_reason: Optional[str] = None
	deleted: bool = False

	@property
	def is_active(self) -> bool:
		"""Solo las citas activas participan en la detección de solapamientos."""
		return not self.deleted and self.status not in INACTIVE_STATUSES

	@property
	def start(self) -> datetime:
		return self.interval.start

	@property
	def end(self) -> datetime:
		return self.interval.end


@dataclass(frozen=True)
class BusinessHours:
	"""Horario de atención de una organización para un día de la semana."""

	weekday: Weekday
	start_time: time
	end_time: time
	enabled: bool = True
	organization_id: Optional[str] = None

	def __post_init__(self) -> None:
		if self.end_time <= self.start_time:
			raise InvalidRange(
				f"{self.weekday.value}: Start Time ({format_clock_time(self.start_time)}) "
				f"debe ser menor que End Time ({format_clock_time(self.end_time)})"
			)

	def to_dict(self) -> dict:
		return {
			"weekday": self.weekday.value,
			"start_time": format_clock_time(self.start_time),
			"end_time": format_clock_time(self.end_time),
			"enabled": self.enabled,
		}


@dataclass(frozen=True)
class AppointmentQuery:
	"""
	Filtro tipado para el repositorio de citas activas.

	range_start / range_end en None significan rango abierto. El repositorio
	devuelve las citas cuyo intervalo intersecta [range_start, range_end).
	"""

	professional_id: str
	organization_id: Optional[str] = None
	range_start: Optional[datetime] = None
	range_end: Optional[datetime] = None
	exclude_appointment_id: Optional[str] = None

	def matches(self, appointment: Appointment) -> bool:
		if appointment.professional_id != self.professional_id:
			return False
		if self.organization_id is not None and appointment.organization_id != self.organization_id:
			return False
		if self.exclude_appointment_id is not None and appointment.id == self.exclude_appointment_id:
			return False
		if self.range_end is not None and appointment.start >= self.range_end:
			return False
		if self.range_start is not None and appointment.end <= self.range_start:
			return False
		return True


@dataclass(frozen=True)
class AppointmentListQuery:
	"""
	Filtro tipado para listar la agenda (incluye citas inactivas).

	Rango por inicio de la cita: start_from <= start < start_before.
	Las citas eliminadas (soft delete) nunca se listan.
	"""

	organization_id: Optional[str] = None
	professional_id: Optional[str] = None
	patient_id: Optional[str] = None
	status: Optional[AppointmentStatus] = None
	start_from: Optional[datetime] = None
	start_before: Optional[datetime] = None
	page: int = 1
	page_length: int = 50

	def __post_init__(self) -> None:
		if self.page < 1 or self.page_length < 1:
			raise InvalidRange(f"Paginación inválida: page={self.page}, page_length={self.page_length}")

	@property
	def offset(self) -> int:
		return (self.page - 1) * self.page_length

	def matches(self, appointment: Appointment) -> bool:
		if appointment.deleted:
			return False
		if self.organization_id is not None and appointment.organization_id != self.organization_id:
			return False
		if self.professional_id is not None and appointment.professional_id != self.professional_id:
			return False
		if self.patient_id is not None and appointment.patient_id != self.patient_id:
			return False
		if self.status is not None and appointment.status != self.status:
			return False
		if self.start_from is not None and appointment.start < self.start_from:
			return False
		if self.start_before is not None and appointment.start >= self.start_before:
			return False
		return True


@dataclass(frozen=True)
class BookingRequest:
	professional_id: str
	patient_id: str
	interval: TimeInterval
	organization_id: Optional[str] = None
	service_id: Optional[str] = None
	notes: Optional[str] = None
	status: AppointmentStatus = field(default=AppointmentStatus.PENDING)
