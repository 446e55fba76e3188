"""Analytic lunar longitude models.

The series model follows the truncated ELP-2000/82 theory as tabulated by
Meeus (*Astronomical Algorithms*, 2nd ed., ch. 47): five fundamental
arguments expressed as quartic polynomials in Julian centuries, plus a table
of periodic terms in units of 1e-6 degrees.  It reproduces the geometric
longitude to roughly 10″, which places nakshatra boundaries to within a
minute of time.

The mean-motion model keeps only ``L′``.  It is offered as an explicit
fallback, not a silent substitute: without the periodic terms the Moon can be
several degrees off and boundary crossings move by hours.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import NamedTuple

from astro.sidereal import (
    AyanamsaService,
    LinearLahiriAyanamsaService,
    julian_date,
    linear_lahiri_ayanamsa,
)

__all__ = [
    "DEGREES_PER_CIRCLE",
    "FundamentalArguments",
    "MeanLunarLongitude",
    "SeriesLunarLongitude",
    "fundamental_arguments",
    "julian_centuries",
    "julian_date",
    "mean_longitude",
    "sidereal_longitude",
    "to_sidereal",
    "tropical_longitude",
    "wrap_degrees",
]

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fundamental constants (Meeus, *Astronomical Algorithms*, 2nd ed.)
# ---------------------------------------------------------------------------
DEGREES_PER_CIRCLE = 360.0
J2000_JD = 2451545.0
DAYS_PER_CENTURY = 36525.0
PERIODIC_TERM_UNIT = 1e-6  # table coefficients are millionths of a degree

# Meeus table 47.A: multiples of (D, M, M′, F) and the sine coefficient of
# the longitude term.
LONGITUDE_TERMS: tuple[tuple[int, int, int, int, int], ...] = (
    (0, 0, 1, 0, 6288774),
    (2, 0, -1, 0, 1274027),
    (2, 0, 0, 0, 658314),
    (0, 0, 2, 0, 213618),
    (0, 1, 0, 0, -185116),
    (0, 0, 0, 2, -114332),
    (2, 0, -2, 0, 58793),
    (2, -1, -1, 0, 57066),
    (2, 0, 1, 0, 53322),
    (2, -1, 0, 0, 45758),
    (0, 1, -1, 0, -40923),
    (1, 0, 0, 0, -34720),
    (0, 1, 1, 0, -30383),
    (2, 0, 0, -2, 15327),
    (0, 0, 1, 2, -12528),
    (0, 0, 1, -2, 10980),
    (4, 0, -1, 0, 10675),
    (0, 0, 3, 0, 10034),
    (4, 0, -2, 0, 8548),
    (2, 1, -1, 0, -7888),
    (2, 1, 0, 0, -6766),
    (1, 0, -1, 0, -5163),
    (1, 1, 0, 0, 4987),
    (2, -1, 1, 0, 4036),
    (2, 0, 2, 0, 3994),
    (4, 0, 0, 0, 3861),
    (2, 0, -3, 0, 3665),
    (0, 1, -2, 0, -2689),
    (2, 0, -1, 2, -2602),
    (2, -1, -2, 0, 2390),
    (1, 0, 1, 0, -2348),
    (2, -2, 0, 0, 2236),
    (0, 1, 2, 0, -2120),
    (0, 2, 0, 0, -2069),
    (2, -2, -1, 0, 2048),
    (2, 0, 1, -2, -1773),
    (2, 0, 0, 2, -1595),
    (4, -1, -1, 0, 1215),
    (0, 0, 2, 2, -1110),
    (3, 0, -1, 0, -892),
    (2, 1, 1, 0, -810),
    (4, -1, -2, 0, 759),
    (0, 2, -1, 0, -713),
    (2, 2, -1, 0, -700),
    (2, 1, -2, 0, 691),
    (2, -1, 0, -2, 596),
    (4, 0, 1, 0, 549),
    (0, 0, 4, 0, 537),
    (4, -1, 0, 0, 520),
    (1, 0, -2, 0, -487),
    (2, 1, 0, -2, -399),
    (0, 0, 2, -2, -381),
    (1, 1, 1, 0, 351),
    (3, 0, -2, 0, -340),
    (4, 0, -3, 0, 330),
    (2, -1, 2, 0, 327),
    (0, 2, 1, 0, -323),
    (1, 1, -1, 0, 299),
    (2, 0, 3, 0, 294),
)


class FundamentalArguments(NamedTuple):
    """Angular arguments of the lunar theory, all in degrees (unwrapped)."""

    mean_longitude: float  # L′
    elongation: float  # D
    sun_anomaly: float  # M
    moon_anomaly: float  # M′
    latitude_argument: float  # F
    venus_argument: float  # A1
    jupiter_argument: float  # A2
    eccentricity: float  # E, dimensionless


def wrap_degrees(angle: float) -> float:
    """Normalise ``angle`` into ``[0, 360)``."""

    wrapped = math.fmod(angle, DEGREES_PER_CIRCLE)
    if wrapped < 0.0:
        wrapped += DEGREES_PER_CIRCLE
    # fmod of a tiny negative value can round up to exactly 360 above
    if wrapped >= DEGREES_PER_CIRCLE:
        wrapped -= DEGREES_PER_CIRCLE
    return wrapped


def julian_centuries(instant: datetime) -> float:
    return (julian_date(instant) - J2000_JD) / DAYS_PER_CENTURY


def mean_longitude(t: float) -> float:
    """Moon's mean longitude ``L′`` (degrees) for ``t`` Julian centuries."""

    return (
        218.3164477
        + 481267.88123421 * t
        - 0.0015786 * t**2
        + t**3 / 538841.0
        - t**4 / 65194000.0
    )


def fundamental_arguments(t: float) -> FundamentalArguments:
    """Evaluate Meeus eqs. 47.1-47.6 for ``t`` Julian centuries from J2000."""

    elongation = (
        297.8501921
        + 445267.1114034 * t
        - 0.0018819 * t**2
        + t**3 / 545868.0
        - t**4 / 113065000.0
    )
    sun_anomaly = (
        357.5291092
        + 35999.0502909 * t
        - 0.0001536 * t**2
        + t**3 / 24490000.0
    )
    moon_anomaly = (
        134.9633964
        + 477198.8675055 * t
        + 0.0087414 * t**2
        + t**3 / 69699.0
        - t**4 / 14712000.0
    )
    latitude_argument = (
        93.2720950
        + 483202.0175233 * t
        - 0.0036539 * t**2
        - t**3 / 3526000.0
        + t**4 / 863310000.0
    )
    return FundamentalArguments(
        mean_longitude=mean_longitude(t),
        elongation=elongation,
        sun_anomaly=sun_anomaly,
        moon_anomaly=moon_anomaly,
        latitude_argument=latitude_argument,
        venus_argument=119.75 + 131.849 * t,
        jupiter_argument=53.09 + 479264.290 * t,
        eccentricity=1.0 - 0.002516 * t - 0.0000074 * t**2,
    )


def _periodic_sum(args: FundamentalArguments) -> float:
    """Return ΣL in millionths of a degree."""

    d = math.radians(args.elongation)
    m = math.radians(args.sun_anomaly)
    mp = math.radians(args.moon_anomaly)
    f = math.radians(args.latitude_argument)

    total = 0.0
    for d_mult, m_mult, mp_mult, f_mult, coefficient in LONGITUDE_TERMS:
        term = coefficient * math.sin(
            d_mult * d + m_mult * m + mp_mult * mp + f_mult * f
        )
        # Terms involving the Sun's anomaly shrink with Earth's eccentricity.
        if m_mult:
            term *= args.eccentricity ** abs(m_mult)
        total += term

    total += 3958.0 * math.sin(math.radians(args.venus_argument))
    total += 1962.0 * math.sin(
        math.radians(args.mean_longitude - args.latitude_argument)
    )
    total += 318.0 * math.sin(math.radians(args.jupiter_argument))
    return total


def tropical_longitude(instant: datetime) -> float:
    """Return the Moon's geometric tropical longitude in degrees, ``[0, 360)``."""

    args = fundamental_arguments(julian_centuries(instant))
    return wrap_degrees(args.mean_longitude + _periodic_sum(args) * PERIODIC_TERM_UNIT)


def to_sidereal(tropical_deg: float, ayanamsa_deg: float) -> float:
    """Subtract the ayanamsa from a normalised tropical longitude.

    The offset is small, so two conditional corrections keep the result in
    ``[0, 360)``.
    """

    sidereal = tropical_deg - ayanamsa_deg
    if sidereal < 0.0:
        sidereal += DEGREES_PER_CIRCLE
    if sidereal >= DEGREES_PER_CIRCLE:
        sidereal -= DEGREES_PER_CIRCLE
    return sidereal


@dataclass
class SeriesLunarLongitude:
    """Longitude provider backed by the periodic-term series."""

    ayanamsa_service: AyanamsaService = field(
        default_factory=LinearLahiriAyanamsaService
    )

    def tropical_longitude(self, instant: datetime) -> float:
        return tropical_longitude(instant)

    def sidereal_longitude(self, instant: datetime) -> float:
        return to_sidereal(
            tropical_longitude(instant), self.ayanamsa_service.lahiri(instant)
        )


@dataclass
class MeanLunarLongitude:
    """Longitude provider using the mean motion ``L′`` alone.

    This is a calibration choice with a visible cost: periodic perturbations
    of up to ~8° are ignored, so nakshatra boundaries can shift by hours.
    """

    ayanamsa_service: AyanamsaService = field(
        default_factory=LinearLahiriAyanamsaService
    )

    def __post_init__(self) -> None:
        logger.warning(
            "Using mean-motion lunar longitude; nakshatra boundaries may be "
            "off by hours compared with the periodic-series model"
        )

    def tropical_longitude(self, instant: datetime) -> float:
        return wrap_degrees(mean_longitude(julian_centuries(instant)))

    def sidereal_longitude(self, instant: datetime) -> float:
        return to_sidereal(
            self.tropical_longitude(instant), self.ayanamsa_service.lahiri(instant)
        )


def sidereal_longitude(instant: datetime) -> float:
    """Return the Moon's sidereal longitude (series model, linear Lahiri)."""

    return to_sidereal(tropical_longitude(instant), linear_lahiri_ayanamsa(instant))
