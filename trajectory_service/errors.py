"""
Error Taxonomy

Every failure the trajectory pipeline can signal has its own exception
type so that callers can tell bad input from an invalid orbit, a failed
sample, or a failed output allocation.

SGP4 propagation error codes (Vallado et al. 2006):

    1  mean eccentricity >= 1.0 or < -0.001
    2  mean motion <= 0.0
    3  perturbed eccentricity < 0.0 or > 1.0
    4  semi-latus rectum < 0.0
    6  satellite has decayed
"""

from typing import Optional

PROPAGATION_ERROR_MESSAGES = {
    1: "Mean eccentricity is outside the range 0.0 to 1.0",
    2: "Mean motion has dropped to zero or below",
    3: "Perturbed eccentricity is outside the range 0.0 to 1.0",
    4: "Semi-latus rectum has dropped below zero",
    6: "Satellite has decayed",
}

ECCENTRICITY_OUT_OF_RANGE = 1
MEAN_MOTION_NOT_POSITIVE = 2
PERTURBED_ECCENTRICITY_OUT_OF_RANGE = 3
SEMI_LATUS_RECTUM_NEGATIVE = 4
SATELLITE_DECAYED = 6


class TrajectoryError(Exception):
    """Base class for all trajectory pipeline errors."""


class FormatError(TrajectoryError, ValueError):
    """A TLE line has the wrong length, a bad checksum, or a malformed field."""


class ElementRangeError(TrajectoryError, ValueError):
    """A decoded TLE field lies outside its physically valid range."""


class InvalidOrbitError(TrajectoryError):
    """Derived orbital quantities are invalid at initialization."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class PropagationError(TrajectoryError):
    """
    The SGP4 solution failed at a specific time.

    Attributes:
        code: SGP4 error code (see PROPAGATION_ERROR_MESSAGES)
        tsince: Minutes since epoch at which the failure occurred
        sample_index: Index of the failing trajectory sample, when known
    """

    def __init__(
        self,
        code: int,
        tsince: float,
        detail: str = "",
        sample_index: Optional[int] = None,
    ):
        self.code = code
        self.tsince = tsince
        self.detail = detail
        self.sample_index = sample_index
        super().__init__(self._format())

    @property
    def reason(self) -> str:
        return PROPAGATION_ERROR_MESSAGES.get(self.code, f"Unknown SGP4 error {self.code}")

    @property
    def decayed(self) -> bool:
        return self.code == SATELLITE_DECAYED

    def with_sample_index(self, index: int) -> "PropagationError":
        """Return a copy of this error tagged with the failing sample index."""
        return PropagationError(self.code, self.tsince, self.detail, sample_index=index)

    def _format(self) -> str:
        message = f"SGP4 error {self.code} at t={self.tsince:.3f} min: {self.reason}"
        if self.detail:
            message += f" ({self.detail})"
        if self.sample_index is not None:
            message = f"Propagation failed at sample {self.sample_index}: {message}"
        return message

    def __reduce__(self):
        return (
            PropagationError,
            (self.code, self.tsince, self.detail, self.sample_index),
        )


class AllocationError(TrajectoryError, MemoryError):
    """The output buffer for a trajectory could not be allocated."""
