"""
Reference Frame Transformations

SGP4 produces states in TEME (True Equator, Mean Equinox). Earth-fixed
coordinates are obtained by a rotation about Z through Greenwich mean
sidereal time (IAU-82), with the Earth-rotation term applied to velocity:

    r_ecef = R3(gmst) r_teme
    v_ecef = R3(gmst) v_teme - omega x r_ecef

Polar motion and the equation of the equinoxes are not applied.

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753, Appendix C.
"""

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np

from trajectory_service.constants import DEG2RAD, EARTH_ROTATION_RATE, JD_J2000, TWOPI


class Frame(str, Enum):
    TEME = "teme"
    ECEF = "ecef"


@dataclass(frozen=True, eq=False)
class InertialStateVector:
    """Position (km) and velocity (km/s) tagged with the frame they are expressed in."""

    position_km: np.ndarray
    velocity_km_s: np.ndarray
    frame: Frame = Frame.TEME

    def as_array(self) -> np.ndarray:
        """Return ``[x, y, z, vx, vy, vz]``."""
        return np.concatenate((self.position_km, self.velocity_km_s))


def gstime(jdut1: float) -> float:
    """
    Greenwich mean sidereal time (IAU-82).

    Args:
        jdut1: Julian date (UT1)

    Returns:
        GMST in radians, in [0, 2pi)
    """
    tut1 = (jdut1 - JD_J2000) / 36525.0
    temp = (
        -6.2e-6 * tut1 * tut1 * tut1
        + 0.093104 * tut1 * tut1
        + (876600.0 * 3600.0 + 8640184.812866) * tut1
        + 67310.54841
    )
    # 360 deg / 86400 s = 1/240
    temp = math.fmod(temp * DEG2RAD / 240.0, TWOPI)
    if temp < 0.0:
        temp += TWOPI
    return temp


def _rotation(theta: float) -> np.ndarray:
    c = math.cos(theta)
    s = math.sin(theta)
    return np.array([[c, s, 0.0], [-s, c, 0.0], [0.0, 0.0, 1.0]])


def _omega_cross(position: np.ndarray) -> np.ndarray:
    return np.array(
        [-EARTH_ROTATION_RATE * position[1], EARTH_ROTATION_RATE * position[0], 0.0]
    )


def teme_to_ecef(state: InertialStateVector, julian_date: float) -> InertialStateVector:
    """
    Rotate a TEME state into the Earth-fixed frame.

    Args:
        state: TEME position/velocity
        julian_date: UT1 Julian date of the state

    Returns:
        InertialStateVector tagged Frame.ECEF
    """
    if state.frame is not Frame.TEME:
        raise ValueError(f"Expected a TEME state, got {state.frame.value}")

    rotation = _rotation(gstime(julian_date))
    r_ecef = rotation @ state.position_km
    v_ecef = rotation @ state.velocity_km_s - _omega_cross(r_ecef)
    return InertialStateVector(r_ecef, v_ecef, Frame.ECEF)


def ecef_to_teme(state: InertialStateVector, julian_date: float) -> InertialStateVector:
    """Inverse of :func:`teme_to_ecef`."""
    if state.frame is not Frame.ECEF:
        raise ValueError(f"Expected an ECEF state, got {state.frame.value}")

    rotation_t = _rotation(gstime(julian_date)).T
    r_teme = rotation_t @ state.position_km
    v_teme = rotation_t @ (state.velocity_km_s + _omega_cross(state.position_km))
    return InertialStateVector(r_teme, v_teme, Frame.TEME)


to_earth_fixed = teme_to_ecef
