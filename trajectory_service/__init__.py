"""
TLE Trajectory Service

Propagates a satellite from a Two-Line Element set with SGP4/SDP4 and
samples TEME position/velocity together with geodetic latitude,
longitude and altitude at a fixed cadence.

Modules:
    tle_parser: TLE text to an immutable mean-element record
    sgp4_propagator: SGP4 initialization and near-Earth propagation
    deep_space: SDP4 lunar/solar and resonance terms
    frames: TEME to Earth-fixed rotation
    geodetic: Earth-fixed to geodetic conversion
    sampler: Fixed-cadence trajectory sampling
    boundary: (n, 9) array entry point for hosts
    app: Flask HTTP adapter

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

__version__ = "1.0.0"

from trajectory_service.boundary import flatten, propagate_from_tle
from trajectory_service.errors import (
    AllocationError,
    ElementRangeError,
    FormatError,
    InvalidOrbitError,
    PropagationError,
    TrajectoryError,
)
from trajectory_service.sampler import Trajectory, TrajectorySample, sample
from trajectory_service.sgp4_propagator import SGP4Propagator, initialize, propagate
from trajectory_service.tle_parser import TLEParser, TleRecord, parse_tle

__all__ = [
    "AllocationError",
    "ElementRangeError",
    "FormatError",
    "InvalidOrbitError",
    "PropagationError",
    "SGP4Propagator",
    "TLEParser",
    "TleRecord",
    "Trajectory",
    "TrajectoryError",
    "TrajectorySample",
    "flatten",
    "initialize",
    "parse_tle",
    "propagate",
    "propagate_from_tle",
    "sample",
]
