"""
Tests for the TLE parser

Run with:
    python -m pytest tests/test_tle_parser.py -v
"""

import math
import unittest
from datetime import datetime, timezone

from trajectory_service.constants import WGS72, WGS84
from trajectory_service.errors import ElementRangeError, FormatError
from trajectory_service.tle_parser import (
    TLEParser,
    compute_checksum,
    days_to_mdhms,
    julian_day,
    parse_tle,
)


def _replace(line, start, text):
    """Overwrite columns starting at 0-based ``start``."""
    return line[:start] + text + line[start + len(text):]


class TestTLEParser(unittest.TestCase):
    """Test cases for TLE parser functionality"""

    def setUp(self):
        self.parser = TLEParser()

        # ISS TLE data for testing
        self.iss_line1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
        self.iss_line2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"
        self.iss_name = "ISS (ZARYA)"

    def test_parse_tle_basic(self):
        record = self.parser.parse_tle(self.iss_line1, self.iss_line2, self.iss_name)

        self.assertEqual(record.satnum, 25544)
        self.assertEqual(record.name, self.iss_name)
        self.assertEqual(record.classification, "U")
        self.assertEqual(record.intl_designator, "98067A")
        self.assertEqual(record.epoch_year, 2023)
        self.assertAlmostEqual(record.epoch_days, 259.5758, places=8)
        self.assertAlmostEqual(record.inclination_deg, 51.6416, places=10)
        self.assertAlmostEqual(record.eccentricity, 0.0004263, places=12)
        self.assertAlmostEqual(record.mean_motion_rev_per_day, 15.49541986, places=8)
        self.assertAlmostEqual(record.bstar, 0.21844e-3, places=12)
        self.assertEqual(record.nddot, 0.0)
        self.assertEqual(record.ephemeris_type, 0)
        self.assertEqual(record.element_number, 999)
        self.assertEqual(record.revolution_number, 41559)
        self.assertIs(record.gravity_model, WGS84)

    def test_units_are_radians_and_rad_per_minute(self):
        record = parse_tle(self.iss_line1, self.iss_line2)

        self.assertAlmostEqual(record.inclination, math.radians(51.6416), places=12)
        self.assertAlmostEqual(record.raan, math.radians(220.9944), places=12)
        self.assertAlmostEqual(record.arg_perigee, math.radians(122.0101), places=12)
        self.assertAlmostEqual(record.mean_anomaly, math.radians(312.2755), places=12)
        self.assertAlmostEqual(record.mean_motion, 15.49541986 * 2 * math.pi / 1440.0, places=12)
        self.assertAlmostEqual(
            record.ndot, 0.00012022 * 2 * math.pi / (1440.0 * 1440.0), places=15
        )

    def test_epoch_julian_date(self):
        record = parse_tle(self.iss_line1, self.iss_line2)

        # 2023-01-01 00:00 UT is JD 2459945.5
        self.assertEqual(record.jd_epoch, 2460203.5)
        self.assertAlmostEqual(record.jd_epoch_fraction, 0.5758, places=9)
        self.assertAlmostEqual(record.julian_date, 2460204.0758, places=8)
        self.assertAlmostEqual(record.epoch_1950, 2460204.0758 - 2433281.5, places=8)

        expected = datetime(2023, 9, 16, 13, 49, 9, 120000, tzinfo=timezone.utc)
        delta = abs((record.epoch_datetime - expected).total_seconds())
        self.assertLess(delta, 1e-3)

    def test_trailing_newlines_are_stripped(self):
        record = parse_tle(self.iss_line1 + "\r\n", self.iss_line2 + "\n")
        self.assertEqual(record.satnum, 25544)
        self.assertEqual(record.line1, self.iss_line1)

    def test_checksum(self):
        self.assertEqual(compute_checksum(self.iss_line1), 5)
        self.assertEqual(compute_checksum(self.iss_line2), 8)

    def test_bad_checksum_rejected(self):
        bad_line1 = _replace(self.iss_line1, 68, "4")
        with self.assertRaises(FormatError) as ctx:
            parse_tle(bad_line1, self.iss_line2)
        self.assertIn("checksum", str(ctx.exception))

    def test_checksum_verification_can_be_disabled(self):
        bad_line1 = _replace(self.iss_line1, 68, "4")
        record = parse_tle(bad_line1, self.iss_line2, verify_checksum=False)
        self.assertEqual(record.satnum, 25544)

    def test_wrong_length_rejected(self):
        with self.assertRaises(FormatError):
            parse_tle(self.iss_line1[:68], self.iss_line2)
        with self.assertRaises(FormatError):
            parse_tle(self.iss_line1, self.iss_line2 + "0")

    def test_wrong_line_number_rejected(self):
        with self.assertRaises(FormatError):
            parse_tle(self.iss_line2, self.iss_line1)

    def test_non_numeric_field_rejected(self):
        bad_line2 = _replace(self.iss_line2, 8, " 51.64X6")
        with self.assertRaises(FormatError) as ctx:
            parse_tle(self.iss_line1, bad_line2, verify_checksum=False)
        self.assertIn("Line 2", str(ctx.exception))
        self.assertIn("inclination", str(ctx.exception))

    def test_separator_column_must_be_blank(self):
        bad_line1 = _replace(self.iss_line1, 17, "0")
        with self.assertRaises(FormatError):
            parse_tle(bad_line1, self.iss_line2, verify_checksum=False)

    def test_catalog_number_mismatch_rejected(self):
        other_line2 = _replace(self.iss_line2, 2, "25545")
        with self.assertRaises(FormatError):
            parse_tle(self.iss_line1, other_line2, verify_checksum=False)

    def test_alpha5_catalog_number(self):
        line1 = _replace(self.iss_line1, 2, "A0001")
        line2 = _replace(self.iss_line2, 2, "A0001")
        record = parse_tle(line1, line2, verify_checksum=False)
        self.assertEqual(record.satnum, 100001)

    def test_alpha5_skips_i_and_o(self):
        line1 = _replace(self.iss_line1, 2, "J0000")
        line2 = _replace(self.iss_line2, 2, "J0000")
        record = parse_tle(line1, line2, verify_checksum=False)
        # J follows H directly, so it is the ninth letter (index 8)
        self.assertEqual(record.satnum, 180000)

        line1 = _replace(self.iss_line1, 2, "I0000")
        line2 = _replace(self.iss_line2, 2, "I0000")
        with self.assertRaises(FormatError):
            parse_tle(line1, line2, verify_checksum=False)

    def test_exponent_fields(self):
        line1 = _replace(self.iss_line1, 44, "-12345-5")
        line1 = _replace(line1, 53, " 28098-4")
        record = parse_tle(line1, self.iss_line2, verify_checksum=False)
        self.assertAlmostEqual(record.bstar, 0.28098e-4, places=15)
        nddot_rev = record.nddot * (1440.0 / (2 * math.pi)) * 1440.0 * 1440.0
        self.assertAlmostEqual(nddot_rev, -0.12345e-5, places=15)

    def test_two_digit_year_rule(self):
        line1 = _replace(self.iss_line1, 18, "56")
        record = parse_tle(line1, self.iss_line2, verify_checksum=False)
        self.assertEqual(record.epoch_year, 2056)

        line1 = _replace(self.iss_line1, 18, "57")
        record = parse_tle(line1, self.iss_line2, verify_checksum=False)
        self.assertEqual(record.epoch_year, 1957)

    def test_inclination_out_of_range(self):
        bad_line2 = _replace(self.iss_line2, 8, "190.0000")
        with self.assertRaises(ElementRangeError):
            parse_tle(self.iss_line1, bad_line2, verify_checksum=False)

    def test_zero_mean_motion_rejected(self):
        bad_line2 = _replace(self.iss_line2, 52, " 0.00000000")
        with self.assertRaises(ElementRangeError):
            parse_tle(self.iss_line1, bad_line2, verify_checksum=False)

    def test_range_errors_are_value_errors(self):
        bad_line2 = _replace(self.iss_line2, 34, "400.0000")
        with self.assertRaises(ValueError):
            parse_tle(self.iss_line1, bad_line2, verify_checksum=False)

    def test_parser_carries_gravity_model(self):
        parser = TLEParser(gravity_model=WGS72)
        record = parser.parse_tle(self.iss_line1, self.iss_line2)
        self.assertIs(record.gravity_model, WGS72)

    def test_epoch_datetime_day_fraction(self):
        line1 = _replace(self.iss_line1, 18, "23001.50000000")
        record = parse_tle(line1, self.iss_line2, verify_checksum=False)
        self.assertEqual(record.epoch_datetime, datetime(2023, 1, 1, 12, 0, tzinfo=timezone.utc))

    def test_non_ascii_digits_rejected(self):
        # Superscript two passes str.isdigit but is not a TLE digit
        cases = [
            (_replace(self.iss_line1, 64, "\u00b2999"), self.iss_line2),
            (_replace(self.iss_line1, 2, "2554\u00b2"), self.iss_line2),
            (self.iss_line1, _replace(self.iss_line2, 26, "000426\u00b2")),
            (self.iss_line1, _replace(self.iss_line2, 8, " 5\u0661.6416")),
        ]
        for line1, line2 in cases:
            with self.subTest(line1=line1, line2=line2):
                with self.assertRaises(FormatError):
                    parse_tle(line1, line2, verify_checksum=False)

    def test_non_ascii_checksum_digit_rejected(self):
        line1 = self.iss_line1[:68] + "\u00b2"
        with self.assertRaises(FormatError):
            parse_tle(line1, self.iss_line2)
        self.assertEqual(compute_checksum(line1), compute_checksum(self.iss_line1))


class TestCalendarHelpers(unittest.TestCase):
    """Day-of-year and Julian date helpers"""

    def test_days_to_mdhms(self):
        month, day, hour, minute, second = days_to_mdhms(2023, 259.5)
        self.assertEqual((month, day, hour, minute), (9, 16, 12, 0))
        self.assertAlmostEqual(second, 0.0, places=6)

    def test_days_to_mdhms_leap_year(self):
        month, day, _, _, _ = days_to_mdhms(2024, 60.0)
        self.assertEqual((month, day), (2, 29))
        month, day, _, _, _ = days_to_mdhms(2023, 60.0)
        self.assertEqual((month, day), (3, 1))

    def test_julian_day_j2000(self):
        jd, fraction = julian_day(2000, 1, 1, 12, 0, 0.0)
        self.assertEqual(jd, 2451544.5)
        self.assertAlmostEqual(fraction, 0.5, places=12)


if __name__ == "__main__":
    unittest.main()
