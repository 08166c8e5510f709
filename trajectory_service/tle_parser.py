"""
TLE Parser Module

Parses Two-Line Element (TLE) sets into an immutable mean-element record.

Parsing is purely textual: fixed-column fields, the implied-decimal
exponent notation used for the drag terms, checksum validation and the
two-digit epoch year convention. No propagation happens here; the record
is handed to the SGP4 propagator.

Field layout (1-based columns):

    Line 1: 1 line number, 3-7 catalog number, 8 classification,
            10-17 international designator, 19-20 epoch year,
            21-32 epoch day, 34-43 ndot/2, 45-52 nddot/6, 54-61 B*,
            63 ephemeris type, 65-68 element number, 69 checksum
    Line 2: 1 line number, 3-7 catalog number, 9-16 inclination,
            18-25 RAAN, 27-33 eccentricity, 35-42 argument of perigee,
            44-51 mean anomaly, 53-63 mean motion, 64-68 revolution
            number, 69 checksum
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Tuple

from trajectory_service.constants import (
    DEG2RAD,
    JD_1950,
    RAD2DEG,
    WGS84,
    XPDOTP,
    GravityModel,
)
from trajectory_service.errors import ElementRangeError, FormatError

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69

# 0-based columns that must be blank
_LINE1_BLANKS = (1, 8, 17, 32, 43, 52, 61, 63)
_LINE2_BLANKS = (1, 7, 16, 25, 33, 42, 51)

# Alpha-5 catalog numbers: letters I and O are skipped
_ALPHA5_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"


@dataclass(frozen=True)
class TleRecord:
    """
    Mean elements of one satellite at its TLE epoch.

    Angles are in radians, mean motion in rad/min (Kozai convention, as
    published), ndot in rad/min^2 and nddot in rad/min^3. The epoch Julian
    date is split into ``jd_epoch`` (midnight, ending in .5) and
    ``jd_epoch_fraction`` to keep precision.
    """

    satnum: int
    classification: str
    intl_designator: str
    epoch_year: int
    epoch_days: float
    jd_epoch: float
    jd_epoch_fraction: float
    ndot: float
    nddot: float
    bstar: float
    ephemeris_type: int
    element_number: int
    inclination: float
    raan: float
    eccentricity: float
    arg_perigee: float
    mean_anomaly: float
    mean_motion: float
    revolution_number: int
    gravity_model: GravityModel = WGS84
    name: str = ""
    line1: str = field(default="", repr=False)
    line2: str = field(default="", repr=False)

    @property
    def julian_date(self) -> float:
        return self.jd_epoch + self.jd_epoch_fraction

    @property
    def epoch_1950(self) -> float:
        """Epoch in days since 1949 December 31 00:00 UT."""
        return (self.jd_epoch - JD_1950) + self.jd_epoch_fraction

    @property
    def mean_motion_rev_per_day(self) -> float:
        return self.mean_motion * XPDOTP

    @property
    def inclination_deg(self) -> float:
        return self.inclination * RAD2DEG

    @property
    def epoch_datetime(self) -> datetime:
        start = datetime(self.epoch_year, 1, 1, tzinfo=timezone.utc)
        return start + timedelta(days=self.epoch_days - 1.0)


def _is_digits(text: str) -> bool:
    return text.isascii() and text.isdigit()


def compute_checksum(line: str) -> int:
    """Mod-10 checksum over the first 68 characters (digits, '-' counts as 1)."""
    checksum = 0
    for char in line[:68]:
        if _is_digits(char):
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def days_to_mdhms(year: int, days: float) -> Tuple[int, int, int, int, float]:
    """
    Convert a day-of-year with fraction to month, day, hour, minute, second.

    Args:
        year: Four-digit year
        days: Day of year, 1.0 being January 1 00:00

    Returns:
        Tuple of (month, day, hour, minute, second)
    """
    month_lengths = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
    if year % 4 == 0:
        month_lengths[1] = 29

    dayofyr = int(math.floor(days))
    month = 1
    elapsed = 0
    while dayofyr > elapsed + month_lengths[month - 1] and month < 12:
        elapsed += month_lengths[month - 1]
        month += 1
    day = dayofyr - elapsed

    temp = (days - dayofyr) * 24.0
    hour = int(math.floor(temp))
    temp = (temp - hour) * 60.0
    minute = int(math.floor(temp))
    second = (temp - minute) * 60.0
    return month, day, hour, minute, second


def julian_day(
    year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: float = 0.0
) -> Tuple[float, float]:
    """
    Julian date for a Gregorian calendar date, valid 1900 to 2100.

    Returns:
        Tuple of (jd, fraction) where jd ends in .5 (midnight) and fraction
        is the elapsed part of the day
    """
    jd = (
        367.0 * year
        - math.floor(7 * (year + math.floor((month + 9) / 12.0)) * 0.25)
        + math.floor(275 * month / 9.0)
        + day
        + 1721013.5
    )
    fraction = (second + minute * 60.0 + hour * 3600.0) / 86400.0
    if abs(fraction) > 1.0:
        whole = math.floor(fraction)
        jd += whole
        fraction -= whole
    return jd, fraction


def _parse_float(line: str, start: int, end: int, line_number: int, label: str) -> float:
    text = line[start:end]
    message = f"Line {line_number} columns {start + 1}-{end}: {label} '{text}' is not numeric"
    if not text.isascii():
        raise FormatError(message)
    try:
        value = float(text)
    except ValueError:
        raise FormatError(message) from None
    if not math.isfinite(value):
        raise FormatError(
            f"Line {line_number} columns {start + 1}-{end}: {label} '{text}' is not finite"
        )
    return value


def _parse_int(
    line: str, start: int, end: int, line_number: int, label: str, blank_ok: bool = False
) -> int:
    text = line[start:end]
    if blank_ok and not text.strip():
        return 0
    if not _is_digits(text.strip()):
        raise FormatError(
            f"Line {line_number} columns {start + 1}-{end}: {label} '{text}' is not an integer"
        )
    return int(text)


def _parse_catalog_number(line: str, line_number: int) -> int:
    text = line[2:7]
    head, tail = text[0], text[1:]
    if head.isalpha() and _is_digits(tail):
        index = _ALPHA5_LETTERS.find(head.upper())
        if index < 0:
            raise FormatError(
                f"Line {line_number} columns 3-7: invalid Alpha-5 catalog number '{text}'"
            )
        return (index + 10) * 10000 + int(tail)
    if not _is_digits(text.strip()):
        raise FormatError(
            f"Line {line_number} columns 3-7: catalog number '{text}' is not numeric"
        )
    return int(text)


def _parse_exponent_field(line: str, start: int, line_number: int, label: str) -> float:
    """
    Decode the implied-decimal exponent notation, e.g. ' 28098-4' = 0.28098e-4.

    The eight-character field holds a mantissa sign, five mantissa digits
    (leading decimal point implied), an exponent sign and one exponent digit.
    """
    text = line[start:start + 8]
    sign_char = text[0]
    digits = text[1:6].replace(" ", "0")
    exp_sign = text[6]
    exp_digit = text[7]

    if (
        sign_char not in " +-"
        or not _is_digits(digits)
        or exp_sign not in " +-"
        or not _is_digits(exp_digit)
    ):
        raise FormatError(
            f"Line {line_number} columns {start + 1}-{start + 8}: "
            f"{label} '{text}' is not in exponent notation"
        )

    mantissa = float("0." + digits)
    if sign_char == "-":
        mantissa = -mantissa
    exponent = int(exp_digit)
    if exp_sign == "-":
        exponent = -exponent
    return mantissa * 10.0 ** exponent


def _check_layout(line: str, line_number: int, blanks: Tuple[int, ...], verify_checksum: bool):
    if len(line) != TLE_LINE_LENGTH:
        raise FormatError(
            f"Line {line_number} must be {TLE_LINE_LENGTH} characters, got {len(line)}"
        )
    if line[0] != str(line_number):
        raise FormatError(f"Line {line_number} must start with '{line_number}', got '{line[0]}'")
    for column in blanks:
        if line[column] != " ":
            raise FormatError(
                f"Line {line_number} column {column + 1} must be blank, got '{line[column]}'"
            )
    if verify_checksum:
        if not _is_digits(line[68]):
            raise FormatError(f"Line {line_number} checksum '{line[68]}' is not a digit")
        expected = compute_checksum(line)
        if int(line[68]) != expected:
            raise FormatError(
                f"Line {line_number} checksum mismatch: found {line[68]}, computed {expected}"
            )


def _require_range(value: float, low: float, high: float, label: str, high_inclusive=True):
    above = value > high if high_inclusive else value >= high
    if value < low or above:
        bracket = "]" if high_inclusive else ")"
        raise ElementRangeError(f"{label} {value} is outside [{low}, {high}{bracket}")


def parse_tle(
    line1: str,
    line2: str,
    name: str = "",
    gravity_model: GravityModel = WGS84,
    verify_checksum: bool = True,
) -> TleRecord:
    """
    Parse a TLE pair into a TleRecord.

    Args:
        line1: First line of TLE
        line2: Second line of TLE
        name: Optional satellite name
        gravity_model: Gravity constants the record will be propagated with
        verify_checksum: Reject lines whose column-69 checksum does not match

    Returns:
        TleRecord

    Raises:
        FormatError: Wrong length, bad checksum, or malformed field
        ElementRangeError: A decoded field is outside its valid range
    """
    if line1 is None or line2 is None:
        raise FormatError("TLE lines cannot be None")
    line1 = line1.rstrip("\r\n")
    line2 = line2.rstrip("\r\n")

    _check_layout(line1, 1, _LINE1_BLANKS, verify_checksum)
    _check_layout(line2, 2, _LINE2_BLANKS, verify_checksum)

    satnum = _parse_catalog_number(line1, 1)
    satnum2 = _parse_catalog_number(line2, 2)
    if satnum != satnum2:
        raise FormatError(f"Catalog numbers differ between lines: {satnum} vs {satnum2}")

    # Line 1
    classification = line1[7]
    intl_designator = line1[9:17].strip()
    two_digit_year = _parse_int(line1, 18, 20, 1, "epoch year")
    epoch_days = _parse_float(line1, 20, 32, 1, "epoch day")
    ndot = _parse_float(line1, 33, 43, 1, "first derivative of mean motion")
    nddot = _parse_exponent_field(line1, 44, 1, "second derivative of mean motion")
    bstar = _parse_exponent_field(line1, 53, 1, "B* drag term")
    ephemeris_type = _parse_int(line1, 62, 63, 1, "ephemeris type", blank_ok=True)
    element_number = _parse_int(line1, 64, 68, 1, "element set number", blank_ok=True)

    # Line 2
    inclination_deg = _parse_float(line2, 8, 16, 2, "inclination")
    raan_deg = _parse_float(line2, 17, 25, 2, "right ascension of ascending node")
    ecc_text = line2[26:33]
    if not _is_digits(ecc_text.replace(" ", "0")):
        raise FormatError(f"Line 2 columns 27-33: eccentricity '{ecc_text}' is not numeric")
    eccentricity = float("0." + ecc_text.replace(" ", "0"))
    arg_perigee_deg = _parse_float(line2, 34, 42, 2, "argument of perigee")
    mean_anomaly_deg = _parse_float(line2, 43, 51, 2, "mean anomaly")
    mean_motion_rev_day = _parse_float(line2, 52, 63, 2, "mean motion")
    revolution_number = _parse_int(line2, 63, 68, 2, "revolution number", blank_ok=True)

    if mean_motion_rev_day <= 0.0:
        raise ElementRangeError(f"Mean motion must be positive, got {mean_motion_rev_day} rev/day")
    _require_range(eccentricity, 0.0, 1.0, "Eccentricity", high_inclusive=False)
    _require_range(inclination_deg, 0.0, 180.0, "Inclination (deg)")
    _require_range(raan_deg, 0.0, 360.0, "Right ascension of ascending node (deg)")
    _require_range(arg_perigee_deg, 0.0, 360.0, "Argument of perigee (deg)")
    _require_range(mean_anomaly_deg, 0.0, 360.0, "Mean anomaly (deg)")
    if epoch_days < 1.0 or epoch_days >= 367.0:
        raise ElementRangeError(f"Epoch day {epoch_days} is outside [1, 367)")

    year = 2000 + two_digit_year if two_digit_year < 57 else 1900 + two_digit_year
    month, day, hour, minute, second = days_to_mdhms(year, epoch_days)
    jd_epoch, jd_epoch_fraction = julian_day(year, month, day, hour, minute, second)

    record = TleRecord(
        satnum=satnum,
        classification=classification,
        intl_designator=intl_designator,
        epoch_year=year,
        epoch_days=epoch_days,
        jd_epoch=jd_epoch,
        jd_epoch_fraction=jd_epoch_fraction,
        ndot=ndot / (XPDOTP * 1440.0),
        nddot=nddot / (XPDOTP * 1440.0 * 1440.0),
        bstar=bstar,
        ephemeris_type=ephemeris_type,
        element_number=element_number,
        inclination=inclination_deg * DEG2RAD,
        raan=raan_deg * DEG2RAD,
        eccentricity=eccentricity,
        arg_perigee=arg_perigee_deg * DEG2RAD,
        mean_anomaly=mean_anomaly_deg * DEG2RAD,
        mean_motion=mean_motion_rev_day / XPDOTP,
        revolution_number=revolution_number,
        gravity_model=gravity_model,
        name=name,
        line1=line1,
        line2=line2,
    )
    logger.debug(
        f"Parsed TLE {satnum} epoch {year}/{epoch_days:.8f} "
        f"n={mean_motion_rev_day:.8f} rev/day e={eccentricity:.7f}"
    )
    return record


class TLEParser:
    """
    Parser for Two-Line Element (TLE) sets.

    Holds the parsing options shared by a batch of TLEs (gravity model and
    checksum policy) and produces TleRecord instances.
    """

    def __init__(self, gravity_model: GravityModel = WGS84, verify_checksum: bool = True):
        self.gravity_model = gravity_model
        self.verify_checksum = verify_checksum

    def parse_tle(self, line1: str, line2: str, name: str = "") -> TleRecord:
        """
        Parse TLE lines into a TleRecord.

        Args:
            line1: First line of TLE
            line2: Second line of TLE
            name: Optional satellite name

        Returns:
            TleRecord with this parser's gravity model attached
        """
        return parse_tle(
            line1,
            line2,
            name=name,
            gravity_model=self.gravity_model,
            verify_checksum=self.verify_checksum,
        )
