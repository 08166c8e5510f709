"""
Host Boundary

Single entry point used by hosts that only deal in TLE text and numeric
arrays: two TLE lines, a duration in hours and a step in minutes in; an
``(n, 9)`` float array out, one row per sample:

    [x, y, z, vx, vy, vz, lat_deg, lon_deg, alt_km]

Position and velocity are TEME (km, km/s); latitude/longitude are geodetic
degrees and altitude is km above the WGS-84 ellipsoid.
"""

import logging

import numpy as np

from trajectory_service.constants import get_gravity_model
from trajectory_service.errors import AllocationError
from trajectory_service.sampler import ROW_FIELDS, TrajectoryFailure, sample_count, sample_trajectory
from trajectory_service.tle_parser import parse_tle

logger = logging.getLogger(__name__)

VALUES_PER_SAMPLE = len(ROW_FIELDS)


def allocate_output(count: int) -> np.ndarray:
    """
    Allocate the output buffer for ``count`` samples.

    Raises:
        AllocationError: If numpy cannot provide the buffer
    """
    try:
        return np.empty((count, VALUES_PER_SAMPLE), dtype=np.float64)
    except (MemoryError, ValueError, OverflowError) as e:
        raise AllocationError(
            f"Cannot allocate output for {count} samples x {VALUES_PER_SAMPLE} values: {e}"
        ) from e


def propagate_from_tle(
    line1: str,
    line2: str,
    duration_hours: float,
    step_minutes: float,
    gravity_model: str = "wgs84",
    verify_checksum: bool = True,
    opsmode: str = "i",
) -> np.ndarray:
    """
    Parse a TLE and sample its trajectory.

    Args:
        line1: First TLE line
        line2: Second TLE line
        duration_hours: Span to cover from epoch (hours)
        step_minutes: Sampling interval (minutes, > 0)
        gravity_model: 'wgs72old', 'wgs72' or 'wgs84'
        verify_checksum: Reject lines with a bad checksum
        opsmode: SGP4 operation mode, 'i' or 'a'

    Returns:
        numpy array of shape (floor(60 * duration_hours / step_minutes) + 1, 9)

    Raises:
        FormatError, ElementRangeError: Invalid TLE text
        ValueError: Invalid duration, step or gravity model name
        InvalidOrbitError: The elements cannot be initialized
        PropagationError: A sample failed; ``sample_index`` identifies it
        AllocationError: The output buffer could not be allocated
    """
    record = parse_tle(
        line1,
        line2,
        gravity_model=get_gravity_model(gravity_model),
        verify_checksum=verify_checksum,
    )
    duration_minutes = duration_hours * 60.0
    count = sample_count(duration_minutes, step_minutes)
    output = allocate_output(count)

    try:
        result = sample_trajectory(record, duration_minutes, step_minutes, opsmode)
    except MemoryError as e:
        raise AllocationError(f"Out of memory while sampling {count} points: {e}") from e
    if isinstance(result, TrajectoryFailure):
        raise result.error

    for row, trajectory_sample in enumerate(result.trajectory):
        output[row] = trajectory_sample.as_row()

    logger.debug(f"Satellite {record.satnum}: produced {count} rows")
    return output


def flatten(array: np.ndarray) -> np.ndarray:
    """Flat layout with nine consecutive values per sample."""
    return np.ascontiguousarray(array, dtype=np.float64).reshape(-1)
