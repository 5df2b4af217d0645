"""
Business-Hours Filter

Decides whether a grid slot starts inside the organization's opening hours.
"""

from datetime import time
from typing import Optional

from .models import BusinessHours


def is_within_hours(clock_time: time, hours: Optional[BusinessHours]) -> bool:
	"""
	Verifica si una hora cae dentro del horario de atención.

	Sin horario configurado (o deshabilitado) para el día, ningún slot es
	AVAILABLE. El rango es semiabierto: un slot que empieza exactamente a la
	hora de cierre queda fuera.
	"""
	if hours is None or not hours.enabled:
		return False

	return hours.start_time <= clock_time < hours.end_time
