"""
SGP4 Cross-Validation Suite

Compares the propagator against the reference sgp4 library (Vallado's
C++ code) for near-Earth, deep-space, synchronous and half-day resonant
element sets from the 2006 verification set, and checks that decay is
detected at the same time.

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import unittest

import numpy as np
from sgp4.api import WGS72, WGS84, Satrec

from trajectory_service.constants import WGS72 as WGS72_MODEL
from trajectory_service.errors import PropagationError
from trajectory_service.sgp4_propagator import initialize, propagate
from trajectory_service.tle_parser import parse_tle


class SGP4ValidationSuite(unittest.TestCase):
    """Validation against the sgp4 library"""

    def setUp(self):
        self.near_earth = {
            "25544": (  # ISS
                "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995",
                "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598",
            ),
            "00005": (  # Vanguard 1, e = 0.186
                "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753",
                "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667",
            ),
            "06251": (  # Higher drag
                "1 06251U 62025E   06176.82412014  .00008885  00000-0  12808-3 0  3985",
                "2 06251  58.0579  54.0425 0030035 139.1568 221.1854 15.56387291  6774",
            ),
            "28057": (  # Near circular, sun-synchronous
                "1 28057U 03049A   06177.78615833  .00000060  00000-0  35940-4 0  1836",
                "2 28057  98.4283 247.6961 0000884  88.1964 271.9322 14.35478080140550",
            ),
        }
        self.deep_space = {
            "11801": (  # Deep space, no resonance
                "1 11801U          80230.29629788  .01431103  00000-0  14311-1 0    13",
                "2 11801  46.7916 230.4354 7318036  47.4722  10.4117  2.28537848    13",
            ),
            "28129": (  # 12 hour, circular (no resonance)
                "1 28129U 03058A   06175.57071136 -.00000104  00000-0  10000-3 0   459",
                "2 28129  54.7298 324.8098 0048506 266.2640  93.1663  2.00562768 18443",
            ),
            "08195": (  # Molniya, half-day resonance
                "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813",
                "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656",
            ),
            "09880": (  # Molniya, half-day resonance
                "1 09880U 77021A   06176.56157475  .00000421  00000-0  10000-3 0  9814",
                "2 09880  64.5968 349.3786 7069051 270.0229  16.3320  2.00813614112380",
            ),
            "28626": (  # Geostationary, synchronous resonance and Lyddane
                "1 28626U 05008A   06176.46683397 -.00000205  00000-0  10000-3 0  2190",
                "2 28626   0.0019 286.9433 0000335  13.7918  55.6504  1.00270176  4891",
            ),
        }
        self.near_times = [0.0, 30.0, 90.0, 360.0, 720.0, 1440.0, -720.0]
        self.deep_times = [0.0, 120.0, 720.0, 1440.0, 4320.0, 10080.0, -1440.0]

    def _compare(self, line1, line2, times, pos_tol, vel_tol, whichconst=WGS84, model=None):
        satrec = Satrec.twoline2rv(line1, line2, whichconst)
        if model is None:
            record = parse_tle(line1, line2)
        else:
            record = parse_tle(line1, line2, gravity_model=model)
        state = initialize(record)

        for tsince in times:
            error, r_ref, v_ref = satrec.sgp4_tsince(tsince)
            self.assertEqual(error, 0, f"reference failed at t={tsince}")
            result = propagate(state, tsince)
            pos_error = np.linalg.norm(result.position_km - np.array(r_ref))
            vel_error = np.linalg.norm(result.velocity_km_s - np.array(v_ref))
            self.assertLess(
                pos_error, pos_tol,
                f"{record.satnum} t={tsince}: position differs by {pos_error:.3e} km",
            )
            self.assertLess(
                vel_error, vel_tol,
                f"{record.satnum} t={tsince}: velocity differs by {vel_error:.3e} km/s",
            )

    def test_near_earth(self):
        for satnum, (line1, line2) in self.near_earth.items():
            with self.subTest(satnum=satnum):
                self._compare(line1, line2, self.near_times, 1e-3, 1e-6)

    def test_near_earth_wgs72(self):
        line1, line2 = self.near_earth["00005"]
        self._compare(line1, line2, self.near_times, 1e-3, 1e-6, WGS72, WGS72_MODEL)

    def test_deep_space(self):
        for satnum, (line1, line2) in self.deep_space.items():
            with self.subTest(satnum=satnum):
                self._compare(line1, line2, self.deep_times, 1e-2, 1e-5)

    def test_decay_detected_at_same_time(self):
        line1 = "1 44444U 19999A   23259.50000000  .10000000  00000-0  50000-2 0  9991"
        line2 = "2 44444  51.6400 100.0000 0005000  90.0000 270.0000 16.50000000 99990"
        satrec = Satrec.twoline2rv(line1, line2, WGS84)
        state = initialize(parse_tle(line1, line2))

        for minute in range(14401):
            error, _, _ = satrec.sgp4_tsince(float(minute))
            try:
                propagate(state, float(minute))
                code = 0
            except PropagationError as e:
                code = e.code
            self.assertEqual(code, error, f"error codes differ at t={minute} min")
            if error:
                break
        else:
            self.fail("reference propagation never failed")


if __name__ == "__main__":
    unittest.main()
