"""
Availability Service

Classifies every slot of the day grid for a professional, a date and a
requested duration, considering:
- Existing active appointments (BOOKED)
- Business hours of the weekday (AVAILABLE / OUTSIDE_HOURS)

BOOKED takes priority over the hours check: a slot taken by an appointment
outside nominal hours (an exception booking) is not offerable either.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Optional

from .business_hours import is_within_hours
from .exceptions import InvalidInterval
from .intervals import TimeInterval
from .models import AppointmentQuery, BusinessHours, Weekday
from .overlap import first_conflict
from .repositories import ActiveAppointmentRepository, BusinessHoursRepository
from .settings import SlotGridConfig
from .slots import format_clock_time, format_display_time


class SlotStatus(str, Enum):
	AVAILABLE = "AVAILABLE"
	BOOKED = "BOOKED"
	OUTSIDE_HOURS = "OUTSIDE_HOURS"


@dataclass(frozen=True)
class Slot:
	time: time
	status: SlotStatus
	is_business_hours: bool

	@property
	def label(self) -> str:
		return format_clock_time(self.time)

	@property
	def display_label(self) -> str:
		return format_display_time(self.time)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"time": self.label,
			"display_time": self.display_label,
			"status": self.status.value,
			"is_business_hours": self.is_business_hours,
		}


@dataclass
class DayAvailability:
	date: date
	professional_id: str
	business_hours: Optional[BusinessHours]
	booked_starts: List[str] = field(default_factory=list)
	slots: List[Slot] = field(default_factory=list)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"date": self.date.isoformat(),
			"professional": self.professional_id,
			"business_hours": self.business_hours.to_dict() if self.business_hours else None,
			"booked_slots": self.booked_starts,
			"available_slots": [slot.to_dict() for slot in self.slots],
		}


def classify_slot(booked: bool, in_hours: bool) -> SlotStatus:
	if booked:
		return SlotStatus.BOOKED
	if in_hours:
		return SlotStatus.AVAILABLE
	return SlotStatus.OUTSIDE_HOURS


def get_day_availability(
	appointments: ActiveAppointmentRepository,
	business_hours: BusinessHoursRepository,
	professional_id: str,
	target_date: date,
	duration_minutes: int,
	organization_id: Optional[str] = None,
	config: Optional[SlotGridConfig] = None
) -> DayAvailability:
	"""
	Obtiene la clasificación de todos los slots de un día.

	Args:
		appointments: repositorio de citas activas
		business_hours: repositorio de horarios de atención
		professional_id: profesional consultado
		target_date: fecha (date object)
		duration_minutes: duración del servicio solicitado
		organization_id: organización del profesional
		config: ventana y granularidad de la grilla

	Returns:
		DayAvailability con un Slot por cada punto de la grilla, ordenados

	Algoritmo:
		1. Generar la grilla del día (07:00-23:00 cada 30 min por defecto)
		2. Obtener el horario de atención del weekday
		3. Obtener UNA vez las citas activas que intersectan la ventana
		4. Para cada slot t:
			a. candidate = [date@t, date@t + duration)
			b. booked = hay conflicto con alguna cita
			c. in_hours = start_time <= t < end_time
			d. BOOKED > AVAILABLE > OUTSIDE_HOURS
	"""
	if duration_minutes <= 0:
		raise InvalidInterval(f"La duración debe ser un número positivo (recibido: {duration_minutes})")

	config = config or SlotGridConfig()
	grid = config.grid()

	hours = business_hours.get(organization_id, Weekday.from_date(target_date))

	candidates = [
		(slot_time, TimeInterval.from_duration(datetime.combine(target_date, slot_time), duration_minutes))
		for slot_time in grid
	]

	# Ventana que cubre todos los candidatos (el último puede pasar de medianoche)
	window = TimeInterval(candidates[0][1].start, candidates[-1][1].end)
	snapshot = appointments.list_active_for_professional(AppointmentQuery(
		professional_id=professional_id,
		organization_id=organization_id,
		range_start=window.start,
		range_end=window.end,
	))

	slots = []
	for slot_time, candidate in candidates:
		booked = first_conflict(snapshot, candidate) is not None
		in_hours = is_within_hours(slot_time, hours)
		slots.append(Slot(
			time=slot_time,
			status=classify_slot(booked, in_hours),
			is_business_hours=in_hours,
		))

	booked_starts = sorted(
		format_clock_time(appointment.start.time())
		for appointment in snapshot
		if appointment.is_active and appointment.start.date() == target_date
	)

	return DayAvailability(
		date=target_date,
		professional_id=professional_id,
		business_hours=hours,
		booked_starts=booked_starts,
		slots=slots,
	)


def compute_availability(
	appointments: ActiveAppointmentRepository,
	business_hours: BusinessHoursRepository,
	professional_id: str,
	target_date: date,
	duration_minutes: int,
	organization_id: Optional[str] = None,
	config: Optional[SlotGridConfig] = None
) -> List[Slot]:
	"""Lista ordenada de slots; siempre cubre la grilla completa."""
	return get_day_availability(
		appointments,
		business_hours,
		professional_id,
		target_date,
		duration_minutes,
		organization_id=organization_id,
		config=config,
	).slots
