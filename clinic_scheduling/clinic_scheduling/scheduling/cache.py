"""
Business Hours Cache

Business hours change rarely and are read on every availability query.
The cache is an explicit, injected component with a bounded TTL and explicit
invalidation; the backend is pluggable (in-process dict here, Frappe's Redis
cache in frappe_store.py).
"""

import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from .models import BusinessHours, Weekday
from .repositories import BusinessHoursRepository

# Marca "no hay horario" para poder cachear el None
_NO_HOURS = "__none__"


class CacheBackend(Protocol):
	def get_value(self, key: str) -> Any:
		...

	def set_value(self, key: str, value: Any, expires_in_sec: int) -> None:
		...

	def delete_value(self, key: str) -> None:
		...


class TTLCache:
	"""Cache en memoria con expiración. Thread-safe."""

	def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
		self._clock = clock
		self._entries: Dict[str, Tuple[float, Any]] = {}
		self._lock = threading.Lock()

	def get_value(self, key: str) -> Any:
		with self._lock:
			entry = self._entries.get(key)
			if entry is None:
				return None
			expires_at, value = entry
			if self._clock() >= expires_at:
				del self._entries[key]
				return None
			return value

	def set_value(self, key: str, value: Any, expires_in_sec: int) -> None:
		with self._lock:
			self._entries[key] = (self._clock() + expires_in_sec, value)

	def delete_value(self, key: str) -> None:
		with self._lock:
			self._entries.pop(key, None)

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()


def business_hours_cache_key(organization_id: Optional[str], weekday: Weekday) -> str:
	return f"clinic_scheduling:business_hours:{organization_id or '-'}:{weekday.value}"


class CachedBusinessHoursRepository:
	"""Envuelve un BusinessHoursRepository con cache TTL."""

	def __init__(
		self,
		repository: BusinessHoursRepository,
		backend: CacheBackend,
		ttl_seconds: int
	) -> None:
		self.repository = repository
		self.backend = backend
		self.ttl_seconds = ttl_seconds

	def get(self, organization_id: Optional[str], weekday: Weekday) -> Optional[BusinessHours]:
		key = business_hours_cache_key(organization_id, weekday)
		cached = self.backend.get_value(key)
		if cached == _NO_HOURS:
			return None
		if isinstance(cached, BusinessHours):
			return cached

		hours = self.repository.get(organization_id, weekday)
		self.backend.set_value(key, hours if hours is not None else _NO_HOURS, self.ttl_seconds)
		return hours

	def invalidate(self, organization_id: Optional[str], weekday: Weekday) -> None:
		self.backend.delete_value(business_hours_cache_key(organization_id, weekday))
