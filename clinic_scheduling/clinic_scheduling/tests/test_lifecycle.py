"""
Tests for scheduling/lifecycle.py

Tests the appointment status state machine.
"""

import unittest
from datetime import datetime

from clinic_scheduling.clinic_scheduling.scheduling.exceptions import InvalidTransition
from clinic_scheduling.clinic_scheduling.scheduling.intervals import TimeInterval
from clinic_scheduling.clinic_scheduling.scheduling.lifecycle import (
	TERMINAL_STATUSES,
	apply_transition,
	can_transition,
	ensure_editable,
	requires_overlap_check,
	validate_transition,
)
from clinic_scheduling.clinic_scheduling.scheduling.models import Appointment, AppointmentStatus as S


def make_appointment(status=S.PENDING, **kwargs):
	return Appointment(
		id="APT-00001",
		professional_id="dr.ruiz@clinica.co",
		patient_id="PAC-001",
		interval=TimeInterval(datetime(2026, 3, 2, 10), datetime(2026, 3, 2, 11)),
		status=status,
		**kwargs
	)


class TestTransitions(unittest.TestCase):
	"""Tests for allowed and forbidden transitions."""

	def test_happy_path(self):
		self.assertTrue(can_transition(S.PENDING, S.CONFIRMED))
		self.assertTrue(can_transition(S.CONFIRMED, S.COMPLETED))

	def test_pending_cannot_complete(self):
		self.assertFalse(can_transition(S.PENDING, S.COMPLETED))
		with self.assertRaises(InvalidTransition):
			validate_transition(S.PENDING, S.COMPLETED)

	def test_exits_from_pending_and_confirmed(self):
		for current in (S.PENDING, S.CONFIRMED):
			for target in (S.CANCELLED, S.NO_SHOW, S.RESCHEDULED):
				self.assertTrue(can_transition(current, target), f"{current} -> {target}")

	def test_terminal_states(self):
		self.assertEqual(TERMINAL_STATUSES, {S.COMPLETED, S.CANCELLED, S.NO_SHOW, S.RESCHEDULED})

		for current in TERMINAL_STATUSES:
			for target in S:
				self.assertFalse(can_transition(current, target))
				with self.assertRaises(InvalidTransition):
					validate_transition(current, target, cancellation_reason="motivo")

	def test_confirmed_cannot_go_back_to_pending(self):
		self.assertFalse(can_transition(S.CONFIRMED, S.PENDING))

	def test_same_status_is_noop_for_non_terminal(self):
		validate_transition(S.PENDING, S.PENDING)
		validate_transition(S.CONFIRMED, S.CONFIRMED)

	def test_cancel_requires_reason(self):
		with self.assertRaises(InvalidTransition):
			validate_transition(S.CONFIRMED, S.CANCELLED)
		with self.assertRaises(InvalidTransition):
			validate_transition(S.CONFIRMED, S.CANCELLED, cancellation_reason="   ")

		validate_transition(S.CONFIRMED, S.CANCELLED, cancellation_reason="Paciente enfermo")


class TestApplyTransition(unittest.TestCase):

	def test_reason_kept_only_when_cancelled(self):
		cancelled = apply_transition(make_appointment(), S.CANCELLED, "  Paciente enfermo ")
		self.assertEqual(cancelled.status, S.CANCELLED)
		self.assertEqual(cancelled.cancellation_reason, "Paciente enfermo")

		confirmed = apply_transition(make_appointment(), S.CONFIRMED, "ignorado")
		self.assertIsNone(confirmed.cancellation_reason)

	def test_original_is_unchanged(self):
		appointment = make_appointment()
		apply_transition(appointment, S.CONFIRMED)
		self.assertEqual(appointment.status, S.PENDING)


class TestEditability(unittest.TestCase):

	def test_requires_overlap_check(self):
		appointment = make_appointment()

		self.assertFalse(requires_overlap_check(appointment))
		self.assertFalse(requires_overlap_check(appointment, appointment.interval, appointment.professional_id))
		self.assertTrue(requires_overlap_check(
			appointment, TimeInterval(datetime(2026, 3, 2, 12), datetime(2026, 3, 2, 13))
		))
		self.assertTrue(requires_overlap_check(appointment, professional_id="dra.gomez@clinica.co"))

	def test_terminal_appointment_not_editable(self):
		with self.assertRaises(InvalidTransition):
			ensure_editable(make_appointment(S.COMPLETED))

		ensure_editable(make_appointment(S.CONFIRMED))
