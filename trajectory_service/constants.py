"""
Constants and Gravity Models

Physical constants used by the SGP4/SDP4 propagator, the frame
transformations and the geodetic conversion.

Gravity models follow Vallado et al. (2006, AAS 06-675), Appendix B:
WGS-72 "old" (the original Spacetrack Report #3 values), WGS-72 and WGS-84.

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import math
from typing import Dict, NamedTuple

PI = math.pi
TWOPI = 2.0 * math.pi
DEG2RAD = math.pi / 180.0
RAD2DEG = 180.0 / math.pi
X2O3 = 2.0 / 3.0
XPDOTP = 1440.0 / TWOPI  # rev/day to rad/min
MINUTES_PER_DAY = 1440.0

# Julian date of 1949 December 31 00:00 UT (SGP4 epoch origin)
JD_1950 = 2433281.5
# Julian date of J2000.0
JD_J2000 = 2451545.0

# Earth rotation rate (rad/s), as used by the TEME to ECEF transformation
EARTH_ROTATION_RATE: float = 7.29211514670698e-05

# Period boundary between near-Earth and deep-space regimes (minutes)
DEEP_SPACE_PERIOD_MINUTES: float = 225.0


class GravityModel(NamedTuple):
    """Earth gravity constants for one model."""

    name: str
    tumin: float  # minutes in one time unit
    mu: float  # km^3/s^2
    radiusearthkm: float  # km
    xke: float  # sqrt(GM) in earth radii^1.5 / min
    j2: float
    j3: float
    j4: float
    j3oj2: float


def _gravity_model(name, mu, radiusearthkm, j2, j3, j4, xke=None):
    if xke is None:
        xke = 60.0 / math.sqrt(radiusearthkm * radiusearthkm * radiusearthkm / mu)
    return GravityModel(
        name=name,
        tumin=1.0 / xke,
        mu=mu,
        radiusearthkm=radiusearthkm,
        xke=xke,
        j2=j2,
        j3=j3,
        j4=j4,
        j3oj2=j3 / j2,
    )


WGS72OLD = _gravity_model(
    "wgs72old", 398600.79964, 6378.135,
    0.001082616, -0.00000253881, -0.00000165597,
    xke=0.0743669161,
)
WGS72 = _gravity_model(
    "wgs72", 398600.8, 6378.135,
    0.001082616, -0.00000253881, -0.00000165597,
)
WGS84 = _gravity_model(
    "wgs84", 398600.5, 6378.137,
    0.00108262998905, -0.00000253215306, -0.00000161098761,
)

GRAVITY_MODELS: Dict[str, GravityModel] = {
    model.name: model for model in (WGS72OLD, WGS72, WGS84)
}


def get_gravity_model(name: str) -> GravityModel:
    """
    Look up a gravity model by name.

    Args:
        name: One of ``wgs72old``, ``wgs72`` or ``wgs84`` (case-insensitive)

    Returns:
        The matching GravityModel

    Raises:
        ValueError: If the name is not a known model
    """
    try:
        return GRAVITY_MODELS[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown gravity model '{name}'; expected one of {sorted(GRAVITY_MODELS)}"
        ) from None


class Ellipsoid(NamedTuple):
    """Reference ellipsoid for geodetic conversions (km)."""

    name: str
    equatorial_radius_km: float
    flattening: float

    @property
    def polar_radius_km(self) -> float:
        return self.equatorial_radius_km * (1.0 - self.flattening)

    @property
    def eccentricity_squared(self) -> float:
        f = self.flattening
        return 2.0 * f - f * f


WGS84_ELLIPSOID = Ellipsoid("wgs84", 6378.137, 1.0 / 298.257223563)
