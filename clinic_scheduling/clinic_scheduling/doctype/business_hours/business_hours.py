# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

"""
Business Hours DocType

Horario de atención de la organización por día de la semana.
El motor de disponibilidad consulta un único registro habilitado por día.
"""

import frappe
from frappe import _
from frappe.model.document import Document

from clinic_scheduling.clinic_scheduling.scheduling.exceptions import InvalidRange
from clinic_scheduling.clinic_scheduling.scheduling.frappe_store import (
	BUSINESS_HOURS_DOCTYPE,
	business_hours_from_row,
	get_business_hours_repository,
)
from clinic_scheduling.clinic_scheduling.scheduling.models import Weekday


class BusinessHours(Document):
	"""
	Business Hours with validation and cache invalidation.

	Validations:
	- weekday, start_time, end_time required
	- start_time < end_time
	- Warn on another enabled record for the same weekday (first one wins)
	"""

	def validate(self) -> None:
		"""
		Validación antes de guardar.
		"""
		self._validate_required_fields()
		self._validate_times()
		self._check_duplicate_weekday()

	def on_update(self) -> None:
		self._invalidate_cache()

	def on_trash(self) -> None:
		self._invalidate_cache()

	def _validate_required_fields(self) -> None:
		"""Valida campos requeridos."""
		if not self.weekday:
			frappe.throw(_("Weekday es requerido"))

		if not self.start_time or not self.end_time:
			frappe.throw(_("Start Time y End Time son requeridos"))

	def _validate_times(self) -> None:
		"""Valida que start_time < end_time."""
		try:
			business_hours_from_row(self)
		except InvalidRange as e:
			frappe.throw(_(str(e)))

	def _check_duplicate_weekday(self) -> None:
		"""
		Advierte si ya existe otro horario habilitado para el mismo día.
		No bloquea, solo informa: el motor usa el registro más antiguo.
		"""
		if not self.enabled:
			return

		duplicates = frappe.get_all(
			BUSINESS_HOURS_DOCTYPE,
			filters={
				"organization": self.organization,
				"weekday": self.weekday,
				"enabled": 1,
				"name": ["!=", self.name],
			},
			pluck="name",
		)

		if duplicates:
			frappe.msgprint(
				_("Ya existe un horario habilitado para {0} ({1}). Se usará el más antiguo.").format(
					self.weekday, ", ".join(duplicates)
				),
				indicator="orange",
				alert=True
			)

	def _invalidate_cache(self) -> None:
		"""Invalida el cache del día actual y del anterior si cambió el weekday."""
		repository = get_business_hours_repository()
		repository.invalidate(self.organization, Weekday(self.weekday))

		before = self.get_doc_before_save()
		if before and before.weekday and before.weekday != self.weekday:
			repository.invalidate(before.organization, Weekday(before.weekday))
