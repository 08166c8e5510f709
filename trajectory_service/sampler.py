"""
Trajectory Sampler

Propagates one TLE at a fixed cadence and converts every sample to
Earth-fixed and geodetic coordinates.

Sample count is ``floor(duration / step) + 1``: sample ``i`` is taken
``i * step`` minutes after epoch, so the last sample may fall short of the
requested duration. A negative duration yields the single epoch sample.

A failure at any sample aborts the whole trajectory; no partial output is
returned.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple, Union

import numpy as np

from trajectory_service.constants import MINUTES_PER_DAY
from trajectory_service.errors import PropagationError
from trajectory_service.frames import InertialStateVector, teme_to_ecef
from trajectory_service.geodetic import GeodeticPosition, ecef_to_geodetic
from trajectory_service.sgp4_propagator import PropagationState, initialize, propagate
from trajectory_service.tle_parser import TleRecord

logger = logging.getLogger(__name__)

ROW_FIELDS = ("x", "y", "z", "vx", "vy", "vz", "lat_deg", "lon_deg", "alt_km")


@dataclass(frozen=True, eq=False)
class TrajectorySample:
    index: int
    elapsed_minutes: float
    julian_date: float
    inertial: InertialStateVector
    earth_fixed: InertialStateVector
    geodetic: GeodeticPosition

    def as_row(self) -> List[float]:
        """TEME position/velocity followed by geodetic lat/lon (deg) and altitude (km)."""
        return [
            *(float(c) for c in self.inertial.position_km),
            *(float(c) for c in self.inertial.velocity_km_s),
            self.geodetic.latitude_deg,
            self.geodetic.longitude_deg,
            self.geodetic.altitude_km,
        ]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "elapsed_minutes": self.elapsed_minutes,
            "julian_date": self.julian_date,
            **dict(zip(ROW_FIELDS, self.as_row())),
        }


@dataclass(frozen=True, eq=False)
class Trajectory:
    record: TleRecord
    step_minutes: float
    duration_minutes: float
    samples: Tuple[TrajectorySample, ...]

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self):
        return iter(self.samples)

    def __getitem__(self, index):
        return self.samples[index]

    def to_array(self) -> np.ndarray:
        """Samples as an (n, 9) array in ``ROW_FIELDS`` order."""
        return np.array([s.as_row() for s in self.samples], dtype=float).reshape(-1, 9)


@dataclass(frozen=True)
class TrajectorySuccess:
    trajectory: Trajectory


@dataclass(frozen=True)
class TrajectoryFailure:
    sample_index: int
    error: PropagationError


TrajectoryResult = Union[TrajectorySuccess, TrajectoryFailure]


def _validate(total_duration_minutes: float, step_minutes: float):
    if not math.isfinite(total_duration_minutes):
        raise ValueError(f"Duration must be finite, got {total_duration_minutes}")
    if not math.isfinite(step_minutes):
        raise ValueError(f"Step must be finite, got {step_minutes}")
    if step_minutes <= 0.0:
        raise ValueError(f"Step must be positive, got {step_minutes} min")


def sample_count(total_duration_minutes: float, step_minutes: float) -> int:
    """
    Number of samples for a duration and step: ``floor(D / S) + 1``.

    Raises:
        ValueError: If the step is not positive, either argument is not finite
            or the number of steps does not fit a finite count
    """
    _validate(total_duration_minutes, step_minutes)
    ratio = total_duration_minutes / step_minutes
    if ratio < 0.0:
        return 1
    if not math.isfinite(ratio):
        raise ValueError(
            f"Duration {total_duration_minutes} min with step {step_minutes} min "
            f"gives an unbounded number of samples"
        )
    return int(math.floor(ratio)) + 1


def sample_state(state: PropagationState, index: int, elapsed_minutes: float) -> TrajectorySample:
    """Propagate one sample and derive its Earth-fixed and geodetic forms."""
    inertial = propagate(state, elapsed_minutes)
    julian_date = state.record.julian_date + elapsed_minutes / MINUTES_PER_DAY
    earth_fixed = teme_to_ecef(inertial, julian_date)
    geodetic = ecef_to_geodetic(earth_fixed.position_km)
    return TrajectorySample(
        index=index,
        elapsed_minutes=elapsed_minutes,
        julian_date=julian_date,
        inertial=inertial,
        earth_fixed=earth_fixed,
        geodetic=geodetic,
    )


def sample_trajectory(
    record: TleRecord,
    total_duration_minutes: float,
    step_minutes: float,
    opsmode: str = "i",
) -> TrajectoryResult:
    """
    Sample a trajectory, stopping at the first failing sample.

    Returns:
        TrajectorySuccess with every sample, or TrajectoryFailure naming the
        first sample that could not be propagated

    Raises:
        ValueError: Invalid duration or step
        InvalidOrbitError: The record cannot be initialized
    """
    count = sample_count(total_duration_minutes, step_minutes)
    state = initialize(record, opsmode)

    samples = []
    for index in range(count):
        elapsed = index * step_minutes
        try:
            samples.append(sample_state(state, index, elapsed))
        except PropagationError as e:
            logger.warning(
                f"Satellite {record.satnum}: propagation failed at sample {index} "
                f"(t={elapsed:.3f} min): {e.reason}"
            )
            return TrajectoryFailure(sample_index=index, error=e.with_sample_index(index))

    logger.info(
        f"Satellite {record.satnum}: sampled {count} points every {step_minutes} min "
        f"({state.method} method)"
    )
    trajectory = Trajectory(
        record=record,
        step_minutes=step_minutes,
        duration_minutes=total_duration_minutes,
        samples=tuple(samples),
    )
    return TrajectorySuccess(trajectory)


def sample(
    record: TleRecord,
    total_duration_minutes: float,
    step_minutes: float,
    opsmode: str = "i",
) -> Trajectory:
    """
    Sample a trajectory or raise on the first failure.

    Args:
        record: Parsed TLE
        total_duration_minutes: Span to cover from epoch (minutes)
        step_minutes: Sampling interval (minutes, > 0)
        opsmode: SGP4 operation mode, 'i' or 'a'

    Returns:
        Trajectory with ``floor(D / S) + 1`` samples

    Raises:
        ValueError: Invalid duration or step
        InvalidOrbitError: The record cannot be initialized
        PropagationError: A sample failed; ``sample_index`` identifies it
    """
    result = sample_trajectory(record, total_duration_minutes, step_minutes, opsmode)
    if isinstance(result, TrajectoryFailure):
        raise result.error
    return result.trajectory
