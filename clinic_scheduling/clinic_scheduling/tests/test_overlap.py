"""
Tests for scheduling/overlap.py

Tests conflict detection against the active appointments of a professional.
"""

import unittest
from datetime import datetime

from clinic_scheduling.clinic_scheduling.scheduling.intervals import TimeInterval
from clinic_scheduling.clinic_scheduling.scheduling.memory import InMemoryAppointmentStore
from clinic_scheduling.clinic_scheduling.scheduling.models import Appointment, AppointmentStatus
from clinic_scheduling.clinic_scheduling.scheduling.overlap import find_conflict, first_conflict, is_available


def at(hour, minute=0):
	return datetime(2026, 3, 2, hour, minute)


def make_appointment(appointment_id, start, end, professional="dr.ruiz@clinica.co", **kwargs):
	return Appointment(
		id=appointment_id,
		professional_id=professional,
		patient_id="PAC-001",
		interval=TimeInterval(start, end),
		**kwargs
	)


class TestFindConflict(unittest.TestCase):
	"""Tests for overlap detection."""

	def setUp(self):
		self.store = InMemoryAppointmentStore([
			make_appointment("APT-1", at(10), at(11)),
		])

	def test_overlapping_candidate(self):
		conflict = find_conflict(self.store, "dr.ruiz@clinica.co", TimeInterval(at(10, 30), at(11, 30)))
		self.assertEqual(conflict.id, "APT-1")

	def test_back_to_back_is_free(self):
		self.assertIsNone(find_conflict(self.store, "dr.ruiz@clinica.co", TimeInterval(at(11), at(12))))
		self.assertIsNone(find_conflict(self.store, "dr.ruiz@clinica.co", TimeInterval(at(9), at(10))))

	def test_candidate_containing_existing(self):
		conflict = find_conflict(self.store, "dr.ruiz@clinica.co", TimeInterval(at(9), at(12)))
		self.assertIsNotNone(conflict)

	def test_other_professional_not_affected(self):
		self.assertTrue(is_available(self.store, "dra.gomez@clinica.co", TimeInterval(at(10), at(11))))

	def test_exclusion_ignores_only_that_appointment(self):
		self.store.add(make_appointment("APT-2", at(11), at(12)))

		# Moving APT-1 onto itself is fine
		self.assertIsNone(find_conflict(
			self.store, "dr.ruiz@clinica.co", TimeInterval(at(10), at(11)), exclude_appointment_id="APT-1"
		))
		# Moving APT-1 onto APT-2 is not
		conflict = find_conflict(
			self.store, "dr.ruiz@clinica.co", TimeInterval(at(10, 30), at(11, 30)), exclude_appointment_id="APT-1"
		)
		self.assertEqual(conflict.id, "APT-2")

	def test_inactive_appointments_do_not_block(self):
		store = InMemoryAppointmentStore([
			make_appointment("APT-C", at(10), at(11), status=AppointmentStatus.CANCELLED),
			make_appointment("APT-N", at(10), at(11), status=AppointmentStatus.NO_SHOW),
			make_appointment("APT-D", at(10), at(11), deleted=True),
		])
		self.assertTrue(is_available(store, "dr.ruiz@clinica.co", TimeInterval(at(10), at(11))))

	def test_completed_and_rescheduled_still_block(self):
		for status in (AppointmentStatus.COMPLETED, AppointmentStatus.RESCHEDULED, AppointmentStatus.CONFIRMED):
			store = InMemoryAppointmentStore([make_appointment("APT-X", at(10), at(11), status=status)])
			self.assertFalse(is_available(store, "dr.ruiz@clinica.co", TimeInterval(at(10), at(11))))

	def test_organization_scope(self):
		store = InMemoryAppointmentStore([
			make_appointment("APT-1", at(10), at(11), organization_id="Sede Norte"),
		])
		self.assertIsNone(find_conflict(
			store, "dr.ruiz@clinica.co", TimeInterval(at(10), at(11)), organization_id="Sede Sur"
		))
		self.assertIsNotNone(find_conflict(
			store, "dr.ruiz@clinica.co", TimeInterval(at(10), at(11)), organization_id="Sede Norte"
		))


class TestFirstConflict(unittest.TestCase):

	def test_skips_inactive_rows_in_snapshot(self):
		snapshot = [make_appointment("APT-C", at(10), at(11), status=AppointmentStatus.CANCELLED)]
		self.assertIsNone(first_conflict(snapshot, TimeInterval(at(10), at(11))))

	def test_empty_snapshot(self):
		self.assertIsNone(first_conflict([], TimeInterval(at(10), at(11))))
