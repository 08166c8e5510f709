"""
TLE Trajectory Demonstration

Parses a TLE, samples its trajectory at a fixed cadence and prints TEME
position/velocity together with geodetic latitude, longitude and altitude.

Usage:
    python demo.py [--hours H] [--step S] [--gravity MODEL] [--csv FILE] [--verbose]
    python demo.py --line1 "1 ..." --line2 "2 ..."

Arguments:
    --hours: Duration to sample from epoch (default 1.5)
    --step: Sampling interval in minutes (default 10)
    --gravity: wgs72old, wgs72 or wgs84 (default wgs84)
    --csv: Also write the samples to a CSV file
    --verbose: Enable debug logging

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
"""

import argparse
import logging
import sys

import numpy as np

from config import REFERENCE_TLE
from logging_config import configure_logging, get_logger
from trajectory_service.constants import get_gravity_model
from trajectory_service.errors import TrajectoryError
from trajectory_service.sampler import ROW_FIELDS, Trajectory, sample
from trajectory_service.tle_parser import TleRecord, TLEParser

logger = get_logger(__name__)


def describe_elements(record: TleRecord) -> None:
    """
    Log the decoded mean elements.

    Parameters
    ----------
    record : TleRecord
        Parsed TLE
    """
    logger.info(f"NORAD ID: {record.satnum} {record.name}".rstrip())
    logger.info(f"Epoch: {record.epoch_datetime.isoformat()} (JD {record.julian_date:.8f})")
    logger.info(f"Inclination: {record.inclination_deg:.4f} degrees")
    logger.info(f"Eccentricity: {record.eccentricity:.7f}")
    logger.info(f"Mean Motion: {record.mean_motion_rev_per_day:.8f} rev/day")
    logger.info(f"B* Drag: {record.bstar:.8e}")


def print_table(trajectory: Trajectory) -> None:
    """
    Print one line per sample.

    Parameters
    ----------
    trajectory : Trajectory
        Sampled trajectory
    """
    print(
        f"{'t(min)':>8} {'x(km)':>11} {'y(km)':>11} {'z(km)':>11} "
        f"{'vx':>9} {'vy':>9} {'vz':>9} {'lat':>9} {'lon':>10} {'alt(km)':>10}"
    )
    for s in trajectory:
        x, y, z, vx, vy, vz, lat, lon, alt = s.as_row()
        print(
            f"{s.elapsed_minutes:8.1f} {x:11.3f} {y:11.3f} {z:11.3f} "
            f"{vx:9.5f} {vy:9.5f} {vz:9.5f} {lat:9.4f} {lon:10.4f} {alt:10.3f}"
        )


def main() -> int:
    """Main demonstration entry point."""
    parser = argparse.ArgumentParser(description="TLE Trajectory Demonstration")
    parser.add_argument("--line1", default=REFERENCE_TLE["line1"], help="TLE line 1")
    parser.add_argument("--line2", default=REFERENCE_TLE["line2"], help="TLE line 2")
    parser.add_argument("--name", default=None, help="Satellite name")
    parser.add_argument("--hours", type=float, default=1.5, help="Duration in hours")
    parser.add_argument("--step", type=float, default=10.0, help="Step in minutes")
    parser.add_argument("--gravity", default="wgs84", help="Gravity model")
    parser.add_argument("--opsmode", default="i", choices=("a", "i"), help="SGP4 operation mode")
    parser.add_argument("--csv", default=None, help="Write samples to this CSV file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--quiet-propagation", action="store_true",
                        help="Hide per-sample propagation warnings")

    args = parser.parse_args()

    configure_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        package_level=logging.ERROR if args.quiet_propagation else None,
    )

    name = args.name
    if name is None:
        name = REFERENCE_TLE["name"] if args.line1 == REFERENCE_TLE["line1"] else ""

    try:
        tle_parser = TLEParser(gravity_model=get_gravity_model(args.gravity))
        record = tle_parser.parse_tle(args.line1, args.line2, name)
        describe_elements(record)
        trajectory = sample(record, args.hours * 60.0, args.step, opsmode=args.opsmode)
    except (TrajectoryError, ValueError) as e:
        logger.error(f"Trajectory failed: {e}")
        return 1

    print_table(trajectory)

    if args.csv:
        np.savetxt(args.csv, trajectory.to_array(), delimiter=",",
                   header=",".join(ROW_FIELDS), comments="")
        logger.info(f"Saved {len(trajectory)} samples to {args.csv}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
