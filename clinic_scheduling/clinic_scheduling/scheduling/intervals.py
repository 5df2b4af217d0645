"""
Interval Model

Half-open time intervals [start, end) and the overlap predicate used by
every scheduling check.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from .exceptions import InvalidInterval


@dataclass(frozen=True)
class TimeInterval:
	"""
	Intervalo semiabierto [start, end).

	El fin no pertenece al intervalo, así dos citas consecutivas
	(end1 == start2) no se solapan.
	"""

	start: datetime
	end: datetime

	def __post_init__(self) -> None:
		if self.end <= self.start:
			raise InvalidInterval(
				f"La hora de fin ({self.end}) debe ser posterior a la hora de inicio ({self.start})"
			)

	@classmethod
	def from_duration(cls, start: datetime, minutes: int) -> "TimeInterval":
		"""Construye [start, start + minutes)."""
		if minutes <= 0:
			raise InvalidInterval(f"La duración debe ser un número positivo (recibido: {minutes})")
		return cls(start, start + timedelta(minutes=minutes))

	@property
	def duration_minutes(self) -> int:
		return int((self.end - self.start).total_seconds() // 60)

	def overlaps(self, other: "TimeInterval") -> bool:
		return overlaps(self, other)

	def contains(self, instant: datetime) -> bool:
		return contains(self, instant)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
	"""
	Dos intervalos se solapan si a.start < b.end AND a.end > b.start.

	Equivale a los tres casos (empieza durante, termina durante, contiene)
	para intervalos no degenerados, que TimeInterval garantiza.
	"""
	return a.start < b.end and a.end > b.start


def contains(interval: TimeInterval, instant: datetime) -> bool:
	return interval.start <= instant < interval.end
