"""
Tests for geodetic conversion

Run with:
    python -m pytest tests/test_geodetic.py -v
"""

import math
import unittest

import numpy as np

from trajectory_service.constants import WGS84_ELLIPSOID
from trajectory_service.geodetic import ecef_to_geodetic, geodetic_to_ecef, to_geodetic


class TestEcefToGeodetic(unittest.TestCase):

    def test_equator_prime_meridian(self):
        result = ecef_to_geodetic([6378.137, 0.0, 0.0])
        self.assertAlmostEqual(result.latitude_deg, 0.0, places=10)
        self.assertAlmostEqual(result.longitude_deg, 0.0, places=10)
        self.assertAlmostEqual(result.altitude_km, 0.0, places=9)

    def test_longitude_quadrants(self):
        self.assertAlmostEqual(ecef_to_geodetic([0.0, 7000.0, 0.0]).longitude_deg, 90.0)
        self.assertAlmostEqual(ecef_to_geodetic([0.0, -7000.0, 0.0]).longitude_deg, -90.0)
        self.assertAlmostEqual(abs(ecef_to_geodetic([-7000.0, 0.0, 0.0]).longitude_deg), 180.0)

    def test_north_pole(self):
        b = WGS84_ELLIPSOID.polar_radius_km
        result = ecef_to_geodetic([0.0, 0.0, b + 400.0])
        self.assertAlmostEqual(result.latitude_deg, 90.0, places=12)
        self.assertEqual(result.longitude_rad, 0.0)
        self.assertAlmostEqual(result.altitude_km, 400.0, places=9)

    def test_south_pole(self):
        b = WGS84_ELLIPSOID.polar_radius_km
        result = ecef_to_geodetic([0.0, 0.0, -b - 10.0])
        self.assertAlmostEqual(result.latitude_deg, -90.0, places=12)
        self.assertEqual(result.longitude_rad, 0.0)
        self.assertAlmostEqual(result.altitude_km, 10.0, places=9)

    def test_origin(self):
        result = ecef_to_geodetic([0.0, 0.0, 0.0])
        self.assertEqual(result.latitude_rad, 0.0)
        self.assertEqual(result.longitude_rad, 0.0)

    def test_near_pole_off_axis(self):
        b = WGS84_ELLIPSOID.polar_radius_km
        result = ecef_to_geodetic([1e-3, 0.0, b + 500.0])
        self.assertAlmostEqual(result.latitude_deg, 90.0, places=4)
        self.assertAlmostEqual(result.altitude_km, 500.0, places=6)

    def test_alias(self):
        self.assertIs(to_geodetic, ecef_to_geodetic)


class TestGeodeticRoundTrip(unittest.TestCase):

    def test_round_trip(self):
        rng = np.random.default_rng(20060811)
        for _ in range(200):
            lat = rng.uniform(-89.9, 89.9)
            lon = rng.uniform(-179.9, 179.9)
            alt = rng.uniform(-5.0, 40000.0)
            position = geodetic_to_ecef(math.radians(lat), math.radians(lon), alt)

            result = ecef_to_geodetic(position)
            self.assertAlmostEqual(result.latitude_deg, lat, places=8)
            self.assertAlmostEqual(result.longitude_deg, lon, places=8)
            self.assertAlmostEqual(result.altitude_km, alt, delta=1e-6)

            back = geodetic_to_ecef(result.latitude_rad, result.longitude_rad, result.altitude_km)
            self.assertLess(np.linalg.norm(back - position), 1e-6)

    def test_known_location(self):
        # 45 N 0 E on the ellipsoid surface
        position = geodetic_to_ecef(math.radians(45.0), 0.0, 0.0)
        a = WGS84_ELLIPSOID.equatorial_radius_km
        e2 = WGS84_ELLIPSOID.eccentricity_squared
        n = a / math.sqrt(1.0 - e2 * 0.5)
        self.assertAlmostEqual(position[0], n * math.sqrt(0.5), places=9)
        self.assertAlmostEqual(position[2], n * (1.0 - e2) * math.sqrt(0.5), places=9)


if __name__ == "__main__":
    unittest.main()
