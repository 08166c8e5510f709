"""
Tests for trajectory sampling

Run with:
    python -m pytest tests/test_sampler.py -v
"""

import math
import unittest
from unittest import mock

import numpy as np

from trajectory_service.errors import PropagationError
from trajectory_service.sampler import (
    ROW_FIELDS,
    TrajectoryFailure,
    TrajectorySuccess,
    sample,
    sample_count,
    sample_trajectory,
)
from trajectory_service.sgp4_propagator import initialize, propagate
from trajectory_service.tle_parser import parse_tle


class TestSampleCount(unittest.TestCase):

    def test_ninety_hours_ten_minutes(self):
        self.assertEqual(sample_count(90 * 60.0, 10.0), 541)

    def test_floor(self):
        self.assertEqual(sample_count(95.0, 10.0), 10)
        self.assertEqual(sample_count(99.999, 10.0), 10)
        self.assertEqual(sample_count(100.0, 10.0), 11)

    def test_zero_duration(self):
        self.assertEqual(sample_count(0.0, 1.0), 1)

    def test_negative_duration_gives_epoch_sample(self):
        self.assertEqual(sample_count(-30.0, 10.0), 1)

    def test_invalid_step(self):
        for step in (0.0, -1.0, float("nan"), float("inf")):
            with self.assertRaises(ValueError):
                sample_count(60.0, step)

    def test_invalid_duration(self):
        for duration in (float("nan"), float("inf")):
            with self.assertRaises(ValueError):
                sample_count(duration, 1.0)

    def test_unbounded_count(self):
        with self.assertRaises(ValueError):
            sample_count(1e300, 1e-10)

    def test_large_negative_duration_gives_epoch_sample(self):
        self.assertEqual(sample_count(-1e300, 1e-10), 1)


class TestTrajectorySampler(unittest.TestCase):

    def setUp(self):
        self.line1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
        self.line2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"
        self.record = parse_tle(self.line1, self.line2, "ISS (ZARYA)")

    def test_sample_count_matches_floor(self):
        for duration, step in ((0.0, 1.0), (1.0, 1.0), (59.0, 7.5), (90.0, 10.0), (3.3, 0.5)):
            trajectory = sample(self.record, duration, step)
            self.assertEqual(len(trajectory), math.floor(duration / step) + 1)

    def test_ninety_hours(self):
        trajectory = sample(self.record, 90 * 60.0, 10.0)
        self.assertEqual(len(trajectory), 541)
        self.assertEqual(trajectory[-1].elapsed_minutes, 5400.0)

    def test_elapsed_time_strictly_increasing(self):
        trajectory = sample(self.record, 120.0, 7.0)
        elapsed = [s.elapsed_minutes for s in trajectory]
        self.assertTrue(all(b > a for a, b in zip(elapsed, elapsed[1:])))
        for i, s in enumerate(trajectory):
            self.assertEqual(s.index, i)
            self.assertEqual(s.elapsed_minutes, i * 7.0)
            self.assertAlmostEqual(
                s.julian_date, self.record.julian_date + i * 7.0 / 1440.0, places=9
            )

    def test_zero_duration_is_epoch_state(self):
        trajectory = sample(self.record, 0.0, 1.0)
        self.assertEqual(len(trajectory), 1)
        epoch_state = propagate(initialize(self.record), 0.0)
        np.testing.assert_array_equal(trajectory[0].inertial.position_km, epoch_state.position_km)
        np.testing.assert_array_equal(
            trajectory[0].inertial.velocity_km_s, epoch_state.velocity_km_s
        )
        self.assertEqual(trajectory[0].julian_date, self.record.julian_date)

    def test_sample_rows(self):
        trajectory = sample(self.record, 30.0, 10.0)
        first = trajectory[0]
        row = first.as_row()
        self.assertEqual(len(row), len(ROW_FIELDS))
        np.testing.assert_array_equal(row[:3], first.inertial.position_km)
        np.testing.assert_array_equal(row[3:6], first.inertial.velocity_km_s)
        self.assertEqual(row[6], first.geodetic.latitude_deg)
        self.assertEqual(row[7], first.geodetic.longitude_deg)
        self.assertEqual(row[8], first.geodetic.altitude_km)

        self.assertLessEqual(abs(row[6]), 52.0)
        self.assertGreater(row[8], 350.0)
        self.assertLess(row[8], 450.0)

        as_dict = first.as_dict()
        self.assertEqual(as_dict["index"], 0)
        self.assertEqual(as_dict["alt_km"], row[8])

        array = trajectory.to_array()
        self.assertEqual(array.shape, (4, 9))

    def test_success_result(self):
        result = sample_trajectory(self.record, 10.0, 5.0)
        self.assertIsInstance(result, TrajectorySuccess)
        self.assertEqual(len(result.trajectory), 3)
        self.assertEqual(result.trajectory.step_minutes, 5.0)

    def test_invalid_step_checked_before_propagation(self):
        with mock.patch("trajectory_service.sampler.propagate") as propagate_mock:
            with self.assertRaises(ValueError):
                sample(self.record, 60.0, 0.0)
            propagate_mock.assert_not_called()


class TestDecayingOrbit(unittest.TestCase):

    def setUp(self):
        self.record = parse_tle(
            "1 44444U 19999A   23259.50000000  .10000000  00000-0  50000-2 0  9991",
            "2 44444  51.6400 100.0000 0005000  90.0000 270.0000 16.50000000 99990",
        )
        state = initialize(self.record)
        self.expected_index = None
        for index in range(14401):
            try:
                propagate(state, float(index))
            except PropagationError:
                self.expected_index = index
                break

    def test_failure_identifies_first_failing_sample(self):
        self.assertIsNotNone(self.expected_index)
        with self.assertRaises(PropagationError) as ctx:
            sample(self.record, 14400.0, 1.0)
        self.assertEqual(ctx.exception.sample_index, self.expected_index)
        self.assertIn(f"sample {self.expected_index}", str(ctx.exception))

    def test_failure_result_has_no_samples(self):
        result = sample_trajectory(self.record, 14400.0, 1.0)
        self.assertIsInstance(result, TrajectoryFailure)
        self.assertEqual(result.sample_index, self.expected_index)
        self.assertEqual(result.error.sample_index, self.expected_index)

    def test_short_span_before_decay_succeeds(self):
        trajectory = sample(self.record, self.expected_index - 1.0, 1.0)
        self.assertEqual(len(trajectory), self.expected_index)


if __name__ == "__main__":
    unittest.main()
