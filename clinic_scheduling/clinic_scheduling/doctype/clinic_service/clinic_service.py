# Copyright (c) 2026, Sebastian Ortiz Valencia and contributors
# For license information, please see license.txt

import frappe
from frappe import _
from frappe.model.document import Document


class ClinicService(Document):
	"""Servicio ofrecido; su duración define el largo de los slots consultados."""

	def validate(self) -> None:
		if not self.duration_minutes or self.duration_minutes <= 0:
			frappe.throw(_("La duración debe ser mayor a 0 minutos"))
