"""
Scheduling Settings

Slot grid configuration. Validated on construction so that a malformed
window is reported when the configuration is loaded (migrate / startup),
never in the middle of an availability request.
"""

from dataclasses import dataclass
from datetime import time
from typing import Any, Mapping

from .exceptions import InvalidRange
from .slots import SlotGrid, generate_time_slots, parse_clock_time

DEFAULT_DAY_START = time(7, 0)
DEFAULT_DAY_END = time(23, 0)
DEFAULT_GRID_MINUTES = 30
DEFAULT_DURATION_MINUTES = 60
DEFAULT_BUSINESS_HOURS_CACHE_TTL = 300

# Claves en site_config.json
CONFIG_PREFIX = "scheduling_"


@dataclass(frozen=True)
class SlotGridConfig:
	day_start: time = DEFAULT_DAY_START
	day_end: time = DEFAULT_DAY_END
	grid_minutes: int = DEFAULT_GRID_MINUTES
	default_duration_minutes: int = DEFAULT_DURATION_MINUTES
	business_hours_cache_ttl: int = DEFAULT_BUSINESS_HOURS_CACHE_TTL

	def __post_init__(self) -> None:
		# SlotGrid valida day_start < day_end y grid_minutes > 0
		self.grid()

		if self.default_duration_minutes <= 0:
			raise InvalidRange(
				f"La duración por defecto debe ser positiva (recibido: {self.default_duration_minutes})"
			)
		if self.business_hours_cache_ttl <= 0:
			raise InvalidRange(
				f"El TTL del cache de horarios debe ser positivo (recibido: {self.business_hours_cache_ttl})"
			)

	def grid(self) -> SlotGrid:
		return generate_time_slots(self.day_start, self.day_end, self.grid_minutes)

	@classmethod
	def from_mapping(cls, conf: Mapping[str, Any]) -> "SlotGridConfig":
		"""
		Construye la configuración desde site_config (o cualquier mapping).

		Claves soportadas: scheduling_day_start, scheduling_day_end,
		scheduling_grid_minutes, scheduling_default_duration,
		scheduling_business_hours_cache_ttl.
		"""
		def _get(key: str, default: Any) -> Any:
			value = conf.get(CONFIG_PREFIX + key)
			return default if value in (None, "") else value

		try:
			return cls(
				day_start=parse_clock_time(_get("day_start", DEFAULT_DAY_START)),
				day_end=parse_clock_time(_get("day_end", DEFAULT_DAY_END)),
				grid_minutes=int(_get("grid_minutes", DEFAULT_GRID_MINUTES)),
				default_duration_minutes=int(_get("default_duration", DEFAULT_DURATION_MINUTES)),
				business_hours_cache_ttl=int(
					_get("business_hours_cache_ttl", DEFAULT_BUSINESS_HOURS_CACHE_TTL)
				),
			)
		except InvalidRange:
			raise
		except (TypeError, ValueError) as e:
			raise InvalidRange(f"Configuración de agenda inválida: {e}") from e
