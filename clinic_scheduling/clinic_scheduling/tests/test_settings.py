"""
Tests for scheduling/settings.py
"""

import unittest
from datetime import time

from clinic_scheduling.clinic_scheduling.scheduling.exceptions import InvalidRange
from clinic_scheduling.clinic_scheduling.scheduling.settings import SlotGridConfig


class TestSlotGridConfig(unittest.TestCase):

	def test_defaults(self):
		config = SlotGridConfig()

		self.assertEqual(config.day_start, time(7, 0))
		self.assertEqual(config.day_end, time(23, 0))
		self.assertEqual(config.grid_minutes, 30)
		self.assertEqual(config.default_duration_minutes, 60)
		self.assertEqual(len(config.grid()), 32)

	def test_from_site_config(self):
		config = SlotGridConfig.from_mapping({
			"scheduling_day_start": "08:00",
			"scheduling_day_end": "20:00",
			"scheduling_grid_minutes": "15",
			"scheduling_default_duration": 45,
			"db_name": "_1bd3e0294da19198",
		})

		self.assertEqual(config.day_start, time(8, 0))
		self.assertEqual(config.grid_minutes, 15)
		self.assertEqual(config.default_duration_minutes, 45)
		self.assertEqual(len(config.grid()), 48)

	def test_empty_values_fall_back_to_defaults(self):
		self.assertEqual(SlotGridConfig.from_mapping({"scheduling_day_start": ""}), SlotGridConfig())

	def test_invalid_window(self):
		with self.assertRaises(InvalidRange):
			SlotGridConfig(day_start=time(20, 0), day_end=time(8, 0))

	def test_malformed_values(self):
		for conf in (
			{"scheduling_grid_minutes": "treinta"},
			{"scheduling_day_end": "25h"},
			{"scheduling_grid_minutes": 0},
			{"scheduling_default_duration": -1},
		):
			with self.assertRaises(InvalidRange):
				SlotGridConfig.from_mapping(conf)
