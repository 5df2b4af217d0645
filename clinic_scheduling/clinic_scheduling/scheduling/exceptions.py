"""
Scheduling Exceptions

Errores del motor de agendamiento. Los conflictos de horario NO son
excepciones: se devuelven como ConflictDetected (ver booking.py).
"""


class SchedulingError(Exception):
	"""Base class for scheduling errors."""


class InvalidInterval(SchedulingError, ValueError):
	"""El fin del intervalo no es posterior al inicio (o la duración no es positiva)."""


class InvalidRange(SchedulingError, ValueError):
	"""Límites de generación de slots o de horario de atención mal configurados."""


class InvalidTransition(SchedulingError):
	"""Cambio de estado no permitido por el ciclo de vida de la cita."""
