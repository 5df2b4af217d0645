"""
Slot Generation Service

Generates the fixed grid of candidate start times for a day window.
The grid is organization-agnostic: business hours are applied downstream
(availability.py) so the caller always receives the whole day with a
status per slot instead of a list with holes.
"""

from datetime import datetime, time, timedelta
from typing import Iterator, Union

from .exceptions import InvalidRange

MINUTES_PER_HOUR = 60


def parse_clock_time(time_value: Union[time, timedelta, str]) -> time:
	"""
	Convierte diferentes formatos de tiempo a datetime.time.

	Args:
		time_value: time, timedelta (desde medianoche, como lo devuelve
			MariaDB para columnas Time) o string "HH:MM" / "HH:MM:SS"

	Returns:
		datetime.time object
	"""
	if isinstance(time_value, time):
		return time_value
	elif isinstance(time_value, timedelta):
		# timedelta representa tiempo desde medianoche
		return (datetime.min + time_value).time()
	elif isinstance(time_value, str):
		parts = time_value.strip().split(":")
		if len(parts) not in (2, 3):
			raise ValueError(f"Formato de hora inválido: {time_value!r}. Use HH:MM")
		hours, minutes = int(parts[0]), int(parts[1])
		seconds = int(float(parts[2])) if len(parts) == 3 else 0
		return time(hours, minutes, seconds)
	else:
		raise ValueError(f"Cannot convert {type(time_value)} to time")


def time_to_minutes(value: time) -> int:
	"""Minutos desde medianoche."""
	return value.hour * MINUTES_PER_HOUR + value.minute


def minutes_to_time(minutes: int) -> time:
	return time(minutes // MINUTES_PER_HOUR, minutes % MINUTES_PER_HOUR)


def format_clock_time(value: time) -> str:
	"""HH:MM, 24 horas, con ceros a la izquierda."""
	return f"{value.hour:02d}:{value.minute:02d}"


def format_display_time(value: time) -> str:
	"""Etiqueta para UI: 9:00 AM, 12:30 PM."""
	hour = value.hour % 12 or 12
	suffix = "AM" if value.hour < 12 else "PM"
	return f"{hour}:{value.minute:02d} {suffix}"


class SlotGrid:
	"""
	Secuencia perezosa y finita de horas: day_start, day_start + grid, ... < day_end.

	Se puede recorrer varias veces; cada iteración genera los valores de nuevo.
	"""

	def __init__(self, day_start: time, day_end: time, grid_minutes: int) -> None:
		if grid_minutes <= 0:
			raise InvalidRange(f"El intervalo de la grilla debe ser positivo (recibido: {grid_minutes})")
		if day_end <= day_start:
			raise InvalidRange(
				f"El fin del día ({format_clock_time(day_end)}) debe ser posterior "
				f"al inicio ({format_clock_time(day_start)})"
			)

		self.day_start = day_start
		self.day_end = day_end
		self.grid_minutes = grid_minutes

	def __iter__(self) -> Iterator[time]:
		end_minutes = time_to_minutes(self.day_end)
		minutes = time_to_minutes(self.day_start)
		while minutes < end_minutes:
			yield minutes_to_time(minutes)
			minutes += self.grid_minutes

	def __len__(self) -> int:
		span = time_to_minutes(self.day_end) - time_to_minutes(self.day_start)
		return -(-span // self.grid_minutes)

	def __repr__(self) -> str:
		return (
			f"SlotGrid({format_clock_time(self.day_start)}-{format_clock_time(self.day_end)}, "
			f"every {self.grid_minutes} min)"
		)


def generate_time_slots(
	day_start: Union[time, str],
	day_end: Union[time, str],
	grid_minutes: int
) -> SlotGrid:
	"""
	Genera todas las horas posibles de inicio para un día.

	Args:
		day_start: inicio de la ventana (ej. 07:00)
		day_end: fin de la ventana, excluido (ej. 23:00)
		grid_minutes: granularidad en minutos (ej. 30)

	Returns:
		SlotGrid: secuencia reiniciable de datetime.time

	Raises:
		InvalidRange: si day_end <= day_start o grid_minutes <= 0
	"""
	return SlotGrid(parse_clock_time(day_start), parse_clock_time(day_end), grid_minutes)
