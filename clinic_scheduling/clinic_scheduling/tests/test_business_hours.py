"""
Tests for scheduling/business_hours.py
"""

import unittest
from datetime import time

from clinic_scheduling.clinic_scheduling.scheduling.business_hours import is_within_hours
from clinic_scheduling.clinic_scheduling.scheduling.exceptions import InvalidRange
from clinic_scheduling.clinic_scheduling.scheduling.models import BusinessHours, Weekday


class TestIsWithinHours(unittest.TestCase):

	def setUp(self):
		self.hours = BusinessHours(Weekday.MONDAY, time(9, 0), time(17, 0))

	def test_inside(self):
		self.assertTrue(is_within_hours(time(9, 0), self.hours))
		self.assertTrue(is_within_hours(time(16, 30), self.hours))

	def test_closing_time_is_outside(self):
		self.assertFalse(is_within_hours(time(17, 0), self.hours))

	def test_before_opening(self):
		self.assertFalse(is_within_hours(time(8, 30), self.hours))

	def test_no_hours_configured(self):
		self.assertFalse(is_within_hours(time(10, 0), None))

	def test_disabled_day(self):
		hours = BusinessHours(Weekday.SUNDAY, time(9, 0), time(17, 0), enabled=False)
		self.assertFalse(is_within_hours(time(10, 0), hours))

	def test_inverted_hours_rejected(self):
		with self.assertRaises(InvalidRange):
			BusinessHours(Weekday.MONDAY, time(17, 0), time(9, 0))
