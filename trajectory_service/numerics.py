"""
Bounded Iteration Helpers

Both the SGP4 Kepler solve and the geodetic latitude inversion are small
fixed-point iterations with a tolerance and a hard iteration cap. They
never loop unboundedly: when the cap is reached the best estimate is
returned together with ``converged=False`` and the caller decides whether
that matters.
"""

import math
from typing import Callable, NamedTuple


class IterationResult(NamedTuple):
    """Outcome of a bounded iteration."""

    value: float
    iterations: int
    converged: bool


def fixed_point(
    update: Callable[[float], float],
    initial: float,
    tolerance: float,
    max_iterations: int,
) -> IterationResult:
    """
    Iterate ``x = update(x)`` until successive values agree within tolerance.

    Args:
        update: Function producing the next estimate from the current one
        initial: Starting estimate
        tolerance: Absolute convergence tolerance on successive estimates
        max_iterations: Maximum number of update calls

    Returns:
        IterationResult with the last estimate, the number of updates made,
        and whether the tolerance was met
    """
    value = initial
    for iteration in range(1, max_iterations + 1):
        next_value = update(value)
        if not math.isfinite(next_value):
            return IterationResult(value, iteration, False)
        if abs(next_value - value) < tolerance:
            return IterationResult(next_value, iteration, True)
        value = next_value
    return IterationResult(value, max_iterations, False)


class KeplerSolution(NamedTuple):
    """Eccentric longitude from the SGP4 form of Kepler's equation."""

    eo1: float
    sineo1: float
    coseo1: float
    iterations: int
    converged: bool


KEPLER_TOLERANCE = 1.0e-12
KEPLER_MAX_ITERATIONS = 10
KEPLER_MAX_STEP = 0.95


def solve_kepler(
    u: float,
    axnl: float,
    aynl: float,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> KeplerSolution:
    """
    Solve ``u = E + aynl*cos(E) - axnl*sin(E)`` for E with clamped Newton steps.

    Each Newton correction is limited to +/-0.95 rad so that highly eccentric
    orbits cannot overshoot. ``sineo1``/``coseo1`` are the trigonometric values
    evaluated in the final iteration, which is what the SGP4 short-period
    terms consume.

    Args:
        u: Mean longitude minus node (rad)
        axnl: e*cos(argument of perigee) including long-period terms
        aynl: e*sin(argument of perigee) including long-period terms
        tolerance: Stop once the correction is below this (rad)
        max_iterations: Hard cap on Newton steps

    Returns:
        KeplerSolution
    """
    eo1 = u
    sineo1 = math.sin(eo1)
    coseo1 = math.cos(eo1)
    tem5 = 9999.9
    iterations = 0
    while abs(tem5) >= tolerance and iterations < max_iterations:
        sineo1 = math.sin(eo1)
        coseo1 = math.cos(eo1)
        tem5 = 1.0 - coseo1 * axnl - sineo1 * aynl
        tem5 = (u - aynl * coseo1 + axnl * sineo1 - eo1) / tem5
        if abs(tem5) >= KEPLER_MAX_STEP:
            tem5 = KEPLER_MAX_STEP if tem5 > 0.0 else -KEPLER_MAX_STEP
        eo1 = eo1 + tem5
        iterations += 1
    return KeplerSolution(eo1, sineo1, coseo1, iterations, abs(tem5) < tolerance)
