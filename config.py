"""
Trajectory Service Configuration

Runtime settings for the trajectory service, read from environment
variables, and the reference TLE used by the demo and the health check.

Environment variables:
    TRAJECTORY_GRAVITY_MODEL    wgs72old | wgs72 | wgs84 (default wgs84)
    TRAJECTORY_OPSMODE          i (improved) | a (AFSPC) (default i)
    TRAJECTORY_VERIFY_CHECKSUM  true | false (default true)
    TRAJECTORY_MAX_SAMPLES      largest trajectory served over HTTP (default 100000)
    TRAJECTORY_HOST             bind address (default 0.0.0.0)
    TRAJECTORY_PORT             bind port (default 5000)
    LOG_LEVEL                   logging level name (default INFO)

Reference TLE:
    ISS (ZARYA), epoch 2023-09-16. The health check only needs a valid
    element set, so the age of the epoch does not matter.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict

REFERENCE_TLE: Dict[str, Any] = {
    'name': 'ISS (ZARYA)',
    'norad_id': 25544,
    'line1': '1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995',
    'line2': '2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598',
    'epoch': '2023-09-16T13:49:09Z',
    'mean_motion': 15.49541986,
    'inclination': 51.6416,
    'eccentricity': 0.0004263
}

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class ServiceConfig:
    gravity_model: str = 'wgs84'
    opsmode: str = 'i'
    verify_checksum: bool = True
    max_samples: int = 100000
    host: str = '0.0.0.0'
    port: int = 5000
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Build a configuration from the TRAJECTORY_* environment variables."""
        return cls(
            gravity_model=os.getenv('TRAJECTORY_GRAVITY_MODEL', 'wgs84').lower(),
            opsmode=os.getenv('TRAJECTORY_OPSMODE', 'i').lower(),
            verify_checksum=_env_bool('TRAJECTORY_VERIFY_CHECKSUM', True),
            max_samples=int(os.getenv('TRAJECTORY_MAX_SAMPLES', '100000')),
            host=os.getenv('TRAJECTORY_HOST', '0.0.0.0'),
            port=int(os.getenv('TRAJECTORY_PORT', '5000')),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)
