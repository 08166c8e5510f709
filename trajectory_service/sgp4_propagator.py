"""
SGP4/SDP4 Orbit Propagator

Analytic propagation of TLE mean elements following the 2006 revision of
Spacetrack Report #3. Initialization derives everything that does not
depend on time once and freezes it in a PropagationState; propagation is
then a pure function of (state, tsince).

Regimes are selected at initialization:

    NearEarthRegime   period < 225 min. Perigees below 220 km use the
                      simplified drag model (no d2..d4, t3cof..t5cof).
    DeepSpaceRegime   period >= 225 min. Lunar/solar secular and periodic
                      terms plus optional synchronous or half-day
                      resonance (see deep_space.py).

Outputs are TEME position in km and velocity in km/s.

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
    Hoots, F. R., & Roehrich, R. L. (1980). Spacetrack Report No. 3.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from trajectory_service.constants import (
    DEEP_SPACE_PERIOD_MINUTES,
    JD_1950,
    PI,
    TWOPI,
    X2O3,
    GravityModel,
)
from trajectory_service.deep_space import (
    DeepSpaceSecularRates,
    LunarSolarTerms,
    Resonance,
    dpper,
    dscom,
    dsinit,
    dspace,
)
from trajectory_service.errors import (
    ECCENTRICITY_OUT_OF_RANGE,
    MEAN_MOTION_NOT_POSITIVE,
    PERTURBED_ECCENTRICITY_OUT_OF_RANGE,
    SATELLITE_DECAYED,
    SEMI_LATUS_RECTUM_NEGATIVE,
    InvalidOrbitError,
    PropagationError,
)
from trajectory_service.frames import Frame, InertialStateVector, gstime
from trajectory_service.numerics import solve_kepler
from trajectory_service.tle_parser import TleRecord

logger = logging.getLogger(__name__)

OPSMODES = ("a", "i")

# Guard for the 1/(1 + cos i) singularity at 180 deg inclination
TEMP4 = 1.5e-12


@dataclass(frozen=True)
class SecularTerms:
    """Epoch-derived quantities shared by both regimes."""

    no_unkozai: float  # rad/min
    semi_major_axis: float  # earth radii
    gsto: float  # rad
    con41: float
    x1mth2: float
    x7thm1: float
    cc1: float
    cc4: float
    mdot: float
    argpdot: float
    nodedot: float
    nodecf: float
    t2cof: float
    xlcof: float
    aycof: float


@dataclass(frozen=True)
class NearEarthDragTerms:
    """Higher-order drag terms, present only for perigees above 220 km."""

    d2: float
    d3: float
    d4: float
    t3cof: float
    t4cof: float
    t5cof: float
    cc5: float
    omgcof: float
    xmcof: float
    delmo: float
    sinmao: float
    eta: float


@dataclass(frozen=True)
class NearEarthRegime:
    simplified: bool
    drag: Optional[NearEarthDragTerms]


@dataclass(frozen=True)
class DeepSpaceRegime:
    lunar_solar: LunarSolarTerms
    secular: DeepSpaceSecularRates
    resonance: Optional[Resonance]


Regime = Union[NearEarthRegime, DeepSpaceRegime]


@dataclass(frozen=True)
class PropagationState:
    """Immutable result of SGP4 initialization for one TLE."""

    record: TleRecord
    gravity: GravityModel
    opsmode: str
    secular: SecularTerms
    regime: Regime

    @property
    def is_deep_space(self) -> bool:
        return isinstance(self.regime, DeepSpaceRegime)

    @property
    def method(self) -> str:
        """'d' for deep space, 'n' for near Earth."""
        return "d" if self.is_deep_space else "n"

    @property
    def period_minutes(self) -> float:
        return TWOPI / self.secular.no_unkozai


def _afspc_gstime(epoch: float) -> float:
    """Sidereal time used by the AFSPC code, epoch in days since 1950."""
    ts70 = epoch - 7305.0
    ds70 = math.floor(ts70 + 1.0e-8)
    tfrac = ts70 - ds70
    c1 = 1.72027916940703639e-2
    thgr70 = 1.7321343856509374
    fk5r = 5.07551419432269442e-15
    c1p2p = c1 + TWOPI
    gsto = math.fmod(thgr70 + c1 * ds70 + c1p2p * tfrac + ts70 * ts70 * fk5r, TWOPI)
    if gsto < 0.0:
        gsto += TWOPI
    return gsto


def initialize(record: TleRecord, opsmode: str = "i") -> PropagationState:
    """
    Derive the SGP4 propagation state from a parsed TLE.

    Args:
        record: Parsed TLE
        opsmode: 'i' (improved, IAU-82 sidereal time) or 'a' (AFSPC)

    Returns:
        PropagationState

    Raises:
        ValueError: If opsmode is unknown
        InvalidOrbitError: If derived quantities are invalid or the state
            at epoch cannot be computed
    """
    if opsmode not in OPSMODES:
        raise ValueError(f"opsmode must be one of {OPSMODES}, got '{opsmode}'")

    grav = record.gravity_model
    re = grav.radiusearthkm
    xke = grav.xke
    j2 = grav.j2
    j3oj2 = grav.j3oj2
    j4 = grav.j4

    ecco = record.eccentricity
    inclo = record.inclination
    argpo = record.arg_perigee
    nodeo = record.raan
    mo = record.mean_anomaly
    bstar = record.bstar
    epoch = record.epoch_1950

    ss = 78.0 / re + 1.0
    qzms2t = ((120.0 - 78.0) / re) ** 4

    # initl: recover the un-Kozai'd mean motion
    eccsq = ecco * ecco
    omeosq = 1.0 - eccsq
    rteosq = math.sqrt(omeosq)
    cosio = math.cos(inclo)
    cosio2 = cosio * cosio

    ak = math.pow(xke / record.mean_motion, X2O3)
    d1 = 0.75 * j2 * (3.0 * cosio2 - 1.0) / (rteosq * omeosq)
    del_ = d1 / (ak * ak)
    adel = ak * (1.0 - del_ * del_ - del_ * (1.0 / 3.0 + 134.0 * del_ * del_ / 81.0))
    del_ = d1 / (adel * adel)
    no = record.mean_motion / (1.0 + del_)

    if not math.isfinite(no) or no <= 0.0:
        raise InvalidOrbitError(
            f"Satellite {record.satnum}: un-Kozai mean motion {no} is not positive"
        )

    ao = math.pow(xke / no, X2O3)
    if not math.isfinite(ao) or ao < 1.0:
        raise InvalidOrbitError(
            f"Satellite {record.satnum}: semi-major axis {ao:.6f} earth radii is inside the Earth"
        )

    sinio = math.sin(inclo)
    po = ao * omeosq
    con42 = 1.0 - 5.0 * cosio2
    con41 = -con42 - cosio2 - cosio2
    posq = po * po
    rp = ao * (1.0 - ecco)

    if opsmode == "a":
        gsto = _afspc_gstime(epoch)
    else:
        gsto = gstime(epoch + JD_1950)

    # sgp4init
    simplified = rp < (220.0 / re + 1.0)

    sfour = ss
    qzms24 = qzms2t
    perige = (rp - 1.0) * re
    if perige < 156.0:
        sfour = perige - 78.0
        if perige < 98.0:
            sfour = 20.0
        qzms24 = ((120.0 - sfour) / re) ** 4
        sfour = sfour / re + 1.0

    pinvsq = 1.0 / posq
    tsi = 1.0 / (ao - sfour)
    eta = ao * ecco * tsi
    etasq = eta * eta
    eeta = ecco * eta
    psisq = abs(1.0 - etasq)
    coef = qzms24 * tsi ** 4
    coef1 = coef / psisq ** 3.5
    cc2 = coef1 * no * (
        ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
        + 0.375 * j2 * tsi / psisq * con41 * (8.0 + 3.0 * etasq * (8.0 + etasq))
    )
    cc1 = bstar * cc2
    cc3 = 0.0
    if ecco > 1.0e-4:
        cc3 = -2.0 * coef * tsi * j3oj2 * no * sinio / ecco
    x1mth2 = 1.0 - cosio2
    cc4 = 2.0 * no * coef1 * ao * omeosq * (
        eta * (2.0 + 0.5 * etasq)
        + ecco * (0.5 + 2.0 * etasq)
        - j2 * tsi / (ao * psisq) * (
            -3.0 * con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
            + 0.75 * x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * math.cos(2.0 * argpo)
        )
    )
    cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

    cosio4 = cosio2 * cosio2
    temp1 = 1.5 * j2 * pinvsq * no
    temp2 = 0.5 * temp1 * j2 * pinvsq
    temp3 = -0.46875 * j4 * pinvsq * pinvsq * no
    mdot = (
        no
        + 0.5 * temp1 * rteosq * con41
        + 0.0625 * temp2 * rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4)
    )
    argpdot = (
        -0.5 * temp1 * con42
        + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
        + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4)
    )
    xhdot1 = -temp1 * cosio
    nodedot = xhdot1 + (
        0.5 * temp2 * (4.0 - 19.0 * cosio2) + 2.0 * temp3 * (3.0 - 7.0 * cosio2)
    ) * cosio
    xpidot = argpdot + nodedot
    omgcof = bstar * cc3 * math.cos(argpo)
    xmcof = 0.0
    if ecco > 1.0e-4:
        xmcof = -X2O3 * coef * bstar / eeta
    nodecf = 3.5 * omeosq * xhdot1 * cc1
    t2cof = 1.5 * cc1
    if abs(cosio + 1.0) > TEMP4:
        xlcof = -0.25 * j3oj2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
    else:
        xlcof = -0.25 * j3oj2 * sinio * (3.0 + 5.0 * cosio) / TEMP4
    aycof = -0.5 * j3oj2 * sinio
    delmo = (1.0 + eta * math.cos(mo)) ** 3
    sinmao = math.sin(mo)
    x7thm1 = 7.0 * cosio2 - 1.0

    secular = SecularTerms(
        no_unkozai=no,
        semi_major_axis=ao,
        gsto=gsto,
        con41=con41,
        x1mth2=x1mth2,
        x7thm1=x7thm1,
        cc1=cc1,
        cc4=cc4,
        mdot=mdot,
        argpdot=argpdot,
        nodedot=nodedot,
        nodecf=nodecf,
        t2cof=t2cof,
        xlcof=xlcof,
        aycof=aycof,
    )

    regime: Regime
    if TWOPI / no >= DEEP_SPACE_PERIOD_MINUTES:
        geometry, lunar_solar = dscom(epoch, ecco, argpo, 0.0, inclo, nodeo, no)
        rates, resonance = dsinit(
            xke, geometry, argpo, gsto, mo, mdot, no, nodeo, nodedot, xpidot,
            ecco, eccsq, inclo,
        )
        regime = DeepSpaceRegime(lunar_solar=lunar_solar, secular=rates, resonance=resonance)
    elif simplified:
        regime = NearEarthRegime(simplified=True, drag=None)
    else:
        cc1sq = cc1 * cc1
        d2 = 4.0 * ao * tsi * cc1sq
        temp = d2 * tsi * cc1 / 3.0
        d3 = (17.0 * ao + sfour) * temp
        d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * cc1
        drag = NearEarthDragTerms(
            d2=d2,
            d3=d3,
            d4=d4,
            t3cof=d2 + 2.0 * cc1sq,
            t4cof=0.25 * (3.0 * d3 + cc1 * (12.0 * d2 + 10.0 * cc1sq)),
            t5cof=0.2 * (
                3.0 * d4 + 12.0 * cc1 * d3 + 6.0 * d2 * d2 + 15.0 * cc1sq * (2.0 * d2 + cc1sq)
            ),
            cc5=cc5,
            omgcof=omgcof,
            xmcof=xmcof,
            delmo=delmo,
            sinmao=sinmao,
            eta=eta,
        )
        regime = NearEarthRegime(simplified=False, drag=drag)

    state = PropagationState(
        record=record, gravity=grav, opsmode=opsmode, secular=secular, regime=regime
    )

    try:
        propagate(state, 0.0)
    except PropagationError as e:
        raise InvalidOrbitError(
            f"Satellite {record.satnum}: state at epoch is invalid: {e.reason}", code=e.code
        ) from e

    logger.debug(
        f"Initialized satellite {record.satnum}: method={state.method}, "
        f"period={state.period_minutes:.2f} min, perigee={perige:.1f} km"
    )
    return state


def propagate(state: PropagationState, tsince: float) -> InertialStateVector:
    """
    Propagate to ``tsince`` minutes from epoch.

    Args:
        state: Result of :func:`initialize`
        tsince: Minutes since the TLE epoch (may be negative)

    Returns:
        TEME InertialStateVector (km, km/s)

    Raises:
        PropagationError: With the SGP4 error code on failure
    """
    grav = state.gravity
    record = state.record
    sec = state.secular
    regime = state.regime
    xke = grav.xke
    j2 = grav.j2
    j3oj2 = grav.j3oj2
    vkmpersec = grav.radiusearthkm * xke / 60.0
    bstar = record.bstar
    no = sec.no_unkozai
    deep = isinstance(regime, DeepSpaceRegime)

    t = tsince
    xmdf = record.mean_anomaly + sec.mdot * t
    argpdf = record.arg_perigee + sec.argpdot * t
    nodedf = record.raan + sec.nodedot * t
    argpm = argpdf
    mm = xmdf
    t2 = t * t
    nodem = nodedf + sec.nodecf * t2
    tempa = 1.0 - sec.cc1 * t
    tempe = bstar * sec.cc4 * t
    templ = sec.t2cof * t2

    if isinstance(regime, NearEarthRegime) and regime.drag is not None:
        drag = regime.drag
        delomg = drag.omgcof * t
        delmtemp = 1.0 + drag.eta * math.cos(xmdf)
        delm = drag.xmcof * (delmtemp * delmtemp * delmtemp - drag.delmo)
        temp = delomg + delm
        mm = xmdf + temp
        argpm = argpdf - temp
        t3 = t2 * t
        t4 = t3 * t
        tempa = tempa - drag.d2 * t2 - drag.d3 * t3 - drag.d4 * t4
        tempe = tempe + bstar * drag.cc5 * (math.sin(mm) - drag.sinmao)
        templ = templ + drag.t3cof * t3 + t4 * (drag.t4cof + t * drag.t5cof)

    nm = no
    em = record.eccentricity
    inclm = record.inclination
    if deep:
        em, argpm, inclm, mm, nodem, nm = dspace(
            regime.secular, regime.resonance, record.arg_perigee, sec.argpdot, t,
            sec.gsto, no, em, argpm, inclm, mm, nodem, nm,
        )

    if nm <= 0.0:
        raise PropagationError(MEAN_MOTION_NOT_POSITIVE, tsince, f"nm={nm:.6e}")

    am = math.pow(xke / nm, X2O3) * tempa * tempa
    nm = xke / math.pow(am, 1.5)
    em = em - tempe

    if em >= 1.0 or em < -0.001:
        raise PropagationError(ECCENTRICITY_OUT_OF_RANGE, tsince, f"em={em:.6f}")
    if em < 1.0e-6:
        em = 1.0e-6

    mm = mm + no * templ
    xlm = mm + argpm + nodem
    nodem = math.fmod(nodem, TWOPI)
    argpm = math.fmod(argpm, TWOPI)
    xlm = math.fmod(xlm, TWOPI)
    mm = math.fmod(xlm - argpm - nodem, TWOPI)

    sinim = math.sin(inclm)
    cosim = math.cos(inclm)

    ep = em
    xincp = inclm
    argpp = argpm
    nodep = nodem
    mp = mm
    sinip = sinim
    cosip = cosim
    con41 = sec.con41
    x1mth2 = sec.x1mth2
    x7thm1 = sec.x7thm1
    xlcof = sec.xlcof
    aycof = sec.aycof

    if deep:
        ep, xincp, nodep, argpp, mp = dpper(
            regime.lunar_solar, t, ep, xincp, nodep, argpp, mp, state.opsmode
        )
        if xincp < 0.0:
            xincp = -xincp
            nodep = nodep + PI
            argpp = argpp - PI
        if ep < 0.0 or ep > 1.0:
            raise PropagationError(PERTURBED_ECCENTRICITY_OUT_OF_RANGE, tsince, f"ep={ep:.6f}")

        sinip = math.sin(xincp)
        cosip = math.cos(xincp)
        aycof = -0.5 * j3oj2 * sinip
        if abs(cosip + 1.0) > TEMP4:
            xlcof = -0.25 * j3oj2 * sinip * (3.0 + 5.0 * cosip) / (1.0 + cosip)
        else:
            xlcof = -0.25 * j3oj2 * sinip * (3.0 + 5.0 * cosip) / TEMP4

    # Long-period periodics
    axnl = ep * math.cos(argpp)
    temp = 1.0 / (am * (1.0 - ep * ep))
    aynl = ep * math.sin(argpp) + temp * aycof
    xl = mp + argpp + nodep + temp * xlcof * axnl

    u = math.fmod(xl - nodep, TWOPI)
    kepler = solve_kepler(u, axnl, aynl)
    if not kepler.converged:
        logger.warning(
            f"Kepler solve for satellite {record.satnum} did not converge at "
            f"t={tsince:.3f} min after {kepler.iterations} iterations"
        )
    sineo1 = kepler.sineo1
    coseo1 = kepler.coseo1

    # Short-period periodics
    ecose = axnl * coseo1 + aynl * sineo1
    esine = axnl * sineo1 - aynl * coseo1
    el2 = axnl * axnl + aynl * aynl
    pl = am * (1.0 - el2)
    if pl < 0.0:
        raise PropagationError(SEMI_LATUS_RECTUM_NEGATIVE, tsince, f"pl={pl:.6f}")

    rl = am * (1.0 - ecose)
    rdotl = math.sqrt(am) * esine / rl
    rvdotl = math.sqrt(pl) / rl
    betal = math.sqrt(1.0 - el2)
    temp = esine / (1.0 + betal)
    sinu = am / rl * (sineo1 - aynl - axnl * temp)
    cosu = am / rl * (coseo1 - axnl + aynl * temp)
    su = math.atan2(sinu, cosu)
    sin2u = (cosu + cosu) * sinu
    cos2u = 1.0 - 2.0 * sinu * sinu
    temp = 1.0 / pl
    temp1 = 0.5 * j2 * temp
    temp2 = temp1 * temp

    if deep:
        cosisq = cosip * cosip
        con41 = 3.0 * cosisq - 1.0
        x1mth2 = 1.0 - cosisq
        x7thm1 = 7.0 * cosisq - 1.0

    mrt = rl * (1.0 - 1.5 * temp2 * betal * con41) + 0.5 * temp1 * x1mth2 * cos2u
    su = su - 0.25 * temp2 * x7thm1 * sin2u
    xnode = nodep + 1.5 * temp2 * cosip * sin2u
    xinc = xincp + 1.5 * temp2 * cosip * sinip * cos2u
    mvt = rdotl - nm * temp1 * x1mth2 * sin2u / xke
    rvdot = rvdotl + nm * temp1 * (x1mth2 * cos2u + 1.5 * con41) / xke

    if mrt < 1.0:
        raise PropagationError(SATELLITE_DECAYED, tsince, f"radius={mrt:.6f} earth radii")

    # Orientation vectors
    sinsu = math.sin(su)
    cossu = math.cos(su)
    snod = math.sin(xnode)
    cnod = math.cos(xnode)
    sini = math.sin(xinc)
    cosi = math.cos(xinc)
    xmx = -snod * cosi
    xmy = cnod * cosi
    uvec = np.array([xmx * sinsu + cnod * cossu, xmy * sinsu + snod * cossu, sini * sinsu])
    vvec = np.array([xmx * cossu - cnod * sinsu, xmy * cossu - snod * sinsu, sini * cossu])

    position = mrt * uvec * grav.radiusearthkm
    velocity = (mvt * uvec + rvdot * vvec) * vkmpersec
    return InertialStateVector(position, velocity, Frame.TEME)


class SGP4Propagator:
    """
    Convenience wrapper binding one TLE to its propagation state.

    Example:
        >>> record = parse_tle(line1, line2)
        >>> propagator = SGP4Propagator(record)
        >>> state = propagator.propagate(90.0)
        >>> state.position_km
    """

    def __init__(self, record: TleRecord, opsmode: str = "i"):
        self.record = record
        self.state = initialize(record, opsmode)

    @property
    def method(self) -> str:
        return self.state.method

    def propagate(self, tsince: float) -> InertialStateVector:
        return propagate(self.state, tsince)

    def propagate_to_julian_date(self, julian_date: float) -> InertialStateVector:
        """Propagate to an absolute UT1 Julian date."""
        tsince = (julian_date - self.record.julian_date) * 1440.0
        return propagate(self.state, tsince)
