"""
Geodetic Conversion

Earth-fixed Cartesian position to geodetic latitude, longitude and
altitude above the reference ellipsoid, by successive substitution on the
geodetic latitude (Vallado, Algorithm 12). Converges to 1e-12 rad within a
few iterations for any orbit altitude; the iteration is capped and the
last estimate returned if the cap is reached.
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from trajectory_service.constants import RAD2DEG, WGS84_ELLIPSOID, Ellipsoid
from trajectory_service.numerics import fixed_point

logger = logging.getLogger(__name__)

GEODETIC_TOLERANCE = 1.0e-12
GEODETIC_MAX_ITERATIONS = 10

# Below this distance from the polar axis (km) longitude is undefined
POLAR_AXIS_EPSILON = 1.0e-8


@dataclass(frozen=True)
class GeodeticPosition:
    latitude_rad: float
    longitude_rad: float
    altitude_km: float

    @property
    def latitude_deg(self) -> float:
        return self.latitude_rad * RAD2DEG

    @property
    def longitude_deg(self) -> float:
        return self.longitude_rad * RAD2DEG


def ecef_to_geodetic(
    position_km: Sequence[float],
    ellipsoid: Ellipsoid = WGS84_ELLIPSOID,
    tolerance: float = GEODETIC_TOLERANCE,
    max_iterations: int = GEODETIC_MAX_ITERATIONS,
) -> GeodeticPosition:
    """
    Convert an Earth-fixed position to geodetic coordinates.

    Args:
        position_km: ECEF position [x, y, z] (km)
        ellipsoid: Reference ellipsoid
        tolerance: Convergence tolerance on latitude (rad)
        max_iterations: Iteration cap

    Returns:
        GeodeticPosition with longitude in (-pi, pi]. On the polar axis the
        longitude is 0 and the latitude is +/-90 deg by the sign of z.
    """
    x, y, z = (float(c) for c in position_km)
    a = ellipsoid.equatorial_radius_km
    e2 = ellipsoid.eccentricity_squared
    rho = math.hypot(x, y)

    if rho < POLAR_AXIS_EPSILON:
        if z > 0.0:
            latitude = math.pi / 2.0
        elif z < 0.0:
            latitude = -math.pi / 2.0
        else:
            latitude = 0.0
        return GeodeticPosition(latitude, 0.0, abs(z) - ellipsoid.polar_radius_km)

    longitude = math.atan2(y, x)

    def update(latitude: float) -> float:
        sinphi = math.sin(latitude)
        c = a / math.sqrt(1.0 - e2 * sinphi * sinphi)
        return math.atan2(z + c * e2 * sinphi, rho)

    # Geocentric latitude as the starting estimate
    result = fixed_point(update, math.atan2(z, rho), tolerance, max_iterations)
    if not result.converged:
        logger.warning(
            f"Geodetic latitude did not converge in {result.iterations} iterations "
            f"for position ({x:.3f}, {y:.3f}, {z:.3f}) km"
        )
    latitude = result.value

    sinphi = math.sin(latitude)
    cosphi = math.cos(latitude)
    c = a / math.sqrt(1.0 - e2 * sinphi * sinphi)
    if abs(cosphi) > 1.0e-3:
        altitude = rho / cosphi - c
    else:
        altitude = z / sinphi - c * (1.0 - e2)

    return GeodeticPosition(latitude, longitude, altitude)


def geodetic_to_ecef(
    latitude_rad: float,
    longitude_rad: float,
    altitude_km: float,
    ellipsoid: Ellipsoid = WGS84_ELLIPSOID,
) -> np.ndarray:
    """Forward transform: geodetic coordinates to ECEF position (km)."""
    a = ellipsoid.equatorial_radius_km
    e2 = ellipsoid.eccentricity_squared
    sinphi = math.sin(latitude_rad)
    cosphi = math.cos(latitude_rad)
    c = a / math.sqrt(1.0 - e2 * sinphi * sinphi)
    s = c * (1.0 - e2)
    return np.array(
        [
            (c + altitude_km) * cosphi * math.cos(longitude_rad),
            (c + altitude_km) * cosphi * math.sin(longitude_rad),
            (s + altitude_km) * sinphi,
        ]
    )


to_geodetic = ecef_to_geodetic
