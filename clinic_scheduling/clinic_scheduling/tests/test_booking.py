"""
Tests for scheduling/booking.py

Tests booking, rescheduling and status changes against the in-memory store,
including concurrent requests for the same slot.
"""

import threading
import unittest
from contextlib import contextmanager
from datetime import datetime

from clinic_scheduling.clinic_scheduling.scheduling.booking import BookingService
from clinic_scheduling.clinic_scheduling.scheduling.exceptions import InvalidTransition
from clinic_scheduling.clinic_scheduling.scheduling.intervals import TimeInterval
from clinic_scheduling.clinic_scheduling.scheduling.memory import InMemoryAppointmentStore
from clinic_scheduling.clinic_scheduling.scheduling.models import (
	Appointment,
	AppointmentQuery,
	AppointmentStatus,
	BookingRequest,
)

PROFESSIONAL = "dr.ruiz@clinica.co"


def at(hour, minute=0):
	return datetime(2026, 3, 2, hour, minute)


def request_for(start, end, patient="PAC-001", professional=PROFESSIONAL):
	return BookingRequest(
		professional_id=professional,
		patient_id=patient,
		interval=TimeInterval(start, end),
	)


class TestBookingService(unittest.TestCase):
	"""Tests for the booking flow."""

	def setUp(self):
		self.store = InMemoryAppointmentStore()
		self.service = BookingService(self.store, self.store)

	def test_book_free_slot(self):
		outcome = self.service.book(request_for(at(10), at(11)))

		self.assertTrue(outcome.success)
		self.assertEqual(outcome.appointment.status, AppointmentStatus.PENDING)
		self.assertEqual(self.store.get(outcome.appointment.id), outcome.appointment)

	def test_book_conflict_returns_outcome(self):
		first = self.service.book(request_for(at(10), at(11))).appointment
		outcome = self.service.book(request_for(at(10, 30), at(11, 30), patient="PAC-002"))

		self.assertFalse(outcome.success)
		self.assertIsNone(outcome.appointment)
		self.assertEqual(outcome.conflict.conflicting.id, first.id)
		self.assertEqual(outcome.conflict.message, "El profesional ya tiene una cita en ese horario")

	def test_back_to_back_bookings(self):
		self.assertTrue(self.service.book(request_for(at(10), at(11))).success)
		self.assertTrue(self.service.book(request_for(at(11), at(12))).success)

	def test_reschedule_excludes_itself(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment

		outcome = self.service.reschedule(appointment, TimeInterval(at(10, 30), at(11, 30)))

		self.assertTrue(outcome.success)
		self.assertEqual(outcome.appointment.start, at(10, 30))

	def test_reschedule_onto_other_appointment(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		other = self.service.book(request_for(at(12), at(13), patient="PAC-002")).appointment

		outcome = self.service.reschedule(appointment, TimeInterval(at(12, 30), at(13, 30)))

		self.assertFalse(outcome.success)
		self.assertEqual(outcome.conflict.conflicting.id, other.id)
		self.assertEqual(self.store.get(appointment.id).start, at(10))

	def test_reschedule_to_other_professional(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		self.service.book(request_for(at(10), at(11), professional="dra.gomez@clinica.co"))

		outcome = self.service.reschedule(appointment, professional_id="dra.gomez@clinica.co")

		self.assertFalse(outcome.success)

	def test_reschedule_without_changes(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		outcome = self.service.reschedule(appointment)

		self.assertTrue(outcome.success)
		self.assertEqual(outcome.appointment, appointment)

	def test_terminal_appointment_cannot_be_rescheduled(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		completed = self.store.update_status(appointment.id, AppointmentStatus.COMPLETED)

		with self.assertRaises(InvalidTransition):
			self.service.reschedule(completed, TimeInterval(at(14), at(15)))

	def test_terminal_appointment_without_changes(self):
		"""Resending the current time or professional is not an edit."""
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		completed = self.store.update_status(appointment.id, AppointmentStatus.COMPLETED)

		self.assertTrue(self.service.reschedule(completed).success)
		self.assertTrue(self.service.reschedule(completed, completed.interval, PROFESSIONAL).success)

	def test_notes_editable_in_terminal_state(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		completed = self.store.update_status(appointment.id, AppointmentStatus.COMPLETED)

		updated = self.service.update_notes(completed, "Control en 3 meses")

		self.assertEqual(updated.notes, "Control en 3 meses")
		self.assertEqual(updated.status, AppointmentStatus.COMPLETED)
		self.assertEqual(self.store.get(appointment.id).notes, "Control en 3 meses")

	def test_cancel_frees_the_slot(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		cancelled = self.service.change_status(appointment, AppointmentStatus.CANCELLED, "Paciente enfermo")

		self.assertEqual(cancelled.cancellation_reason, "Paciente enfermo")
		self.assertTrue(self.service.check_availability(PROFESSIONAL, TimeInterval(at(10), at(11))))

	def test_cancel_without_reason(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment

		with self.assertRaises(InvalidTransition):
			self.service.change_status(appointment, AppointmentStatus.CANCELLED)

	def test_same_status_is_noop(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		self.assertIs(self.service.change_status(appointment, AppointmentStatus.PENDING), appointment)

	def test_soft_delete_frees_the_slot(self):
		appointment = self.service.book(request_for(at(10), at(11))).appointment
		deleted = self.service.delete(appointment)

		self.assertTrue(deleted.deleted)
		self.assertTrue(self.service.book(request_for(at(10), at(11), patient="PAC-002")).success)


class TestConcurrentBooking(unittest.TestCase):
	"""Check-then-insert must be serialized per professional."""

	def test_only_one_concurrent_booking_wins(self):
		store = InMemoryAppointmentStore()
		service = BookingService(store, store)
		workers = 8
		barrier = threading.Barrier(workers)
		outcomes = []
		outcomes_lock = threading.Lock()

		def book(patient):
			barrier.wait()
			outcome = service.book(request_for(at(10), at(11), patient=patient))
			with outcomes_lock:
				outcomes.append(outcome)

		threads = [threading.Thread(target=book, args=(f"PAC-{i:03d}",)) for i in range(workers)]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()

		self.assertEqual(sum(1 for o in outcomes if o.success), 1)
		self.assertEqual(len(store.list_active_for_professional(AppointmentQuery(PROFESSIONAL))), 1)

	def test_unserialized_writer_double_books(self):
		"""Without a real atomic() both requests pass the check before either inserts."""
		store = InMemoryAppointmentStore()
		both_checked = threading.Barrier(2)

		class UnlockedWriter:
			@contextmanager
			def atomic(self, professional_id):
				yield

			def create(self, request):
				both_checked.wait()
				return store.create(request)

		service = BookingService(store, UnlockedWriter())
		outcomes = []

		def book(patient):
			outcomes.append(service.book(request_for(at(10), at(11), patient=patient)))

		threads = [threading.Thread(target=book, args=(p,)) for p in ("PAC-001", "PAC-002")]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()

		self.assertTrue(all(o.success for o in outcomes))
		self.assertEqual(len(store.list_active_for_professional(AppointmentQuery(PROFESSIONAL))), 2)


class TestInMemoryStoreIds(unittest.TestCase):

	def seeded(self, appointment_id, hour, patient):
		return Appointment(
			id=appointment_id,
			professional_id=PROFESSIONAL,
			patient_id=patient,
			interval=TimeInterval(at(hour), at(hour + 1)),
		)

	def test_booking_does_not_overwrite_seeded_appointments(self):
		store = InMemoryAppointmentStore([
			self.seeded("APT-00001", 8, "PAC-008"),
			self.seeded("APT-00002", 9, "PAC-009"),
		])
		service = BookingService(store, store)

		outcome = service.book(request_for(at(10), at(11)))

		self.assertTrue(outcome.success)
		self.assertEqual(outcome.appointment.id, "APT-00003")
		self.assertEqual(store.get("APT-00001").patient_id, "PAC-008")
		self.assertEqual(store.get("APT-00002").patient_id, "PAC-009")
		self.assertEqual(len(store.list_active_for_professional(AppointmentQuery(PROFESSIONAL))), 3)

	def test_gaps_between_seeded_ids_are_used(self):
		store = InMemoryAppointmentStore([self.seeded("APT-00002", 8, "PAC-008")])

		first = store.create(request_for(at(10), at(11)))
		second = store.create(request_for(at(12), at(13)))

		self.assertEqual(first.id, "APT-00001")
		self.assertEqual(second.id, "APT-00003")
