"""Sidereal support utilities, including ayanamsa computations.

Two Lahiri models are available.  The linear model (J2000 offset plus a fixed
50.29″/yr precession rate) is the default used for nakshatra windows; the
cubic 1900.0 polynomial is kept for comparison with classic jyotiṣa tables.
Both are reached through :class:`AyanamsaService` so callers never depend on
the formula directly.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol

__all__ = [
    "AyanamsaService",
    "LinearLahiriAyanamsaService",
    "LongitudeProvider",
    "PolynomialLahiriAyanamsaService",
    "J2000",
    "LAHIRI_AT_J2000",
    "LAHIRI_REFERENCE_EPOCH_JD",
    "PRECESSION_RATE_DEG_PER_YEAR",
    "UNIX_EPOCH",
    "UNIX_EPOCH_JD",
    "ensure_aware",
    "julian_date",
    "lahiri_mean_ayanamsa",
    "linear_lahiri_ayanamsa",
]

# ---------------------------------------------------------------------------
# Module level constants (Lahiri ayanamsa definition; Meeus 1998, ch. 27)
# ---------------------------------------------------------------------------
J2000 = datetime(2000, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
"""Reference epoch of the linear model (2000-01-01 12:00 UTC)."""

LAHIRI_AT_J2000 = 23.85575  # degrees at J2000.0
PRECESSION_RATE_DEG_PER_YEAR = 50.29 / 3600.0
JULIAN_YEAR = timedelta(days=365.25)

LAHIRI_REFERENCE_EPOCH_JD = 2415020.5
"""Julian day of 1900-01-01 00:00 (BPHS Lahiri reference)."""

LAHIRI_C0 = 22.460148  # degrees at epoch 1900.0 (22°27'36.53")
LAHIRI_C1 = 1.396042   # degrees/century (mean precession in longitude)
LAHIRI_C2 = 0.000308   # degrees/century^2 (Meeus eq. 27.3)
LAHIRI_C3 = 0.00000002 # degrees/century^3 (empirical refinement)

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
UNIX_EPOCH_JD = 2440587.5


class AyanamsaService(Protocol):
    """Protocol used by the longitude providers to request ayanamsa values."""

    def lahiri(self, instant: datetime) -> float:
        """Return Lahiri ayanamsa in degrees for the supplied UTC instant."""


class LongitudeProvider(Protocol):
    """Anything able to report the Moon's sidereal longitude.

    Implementations must return degrees normalised to ``[0, 360)`` and must be
    deterministic in ``instant``; the period search relies on both.
    """

    def sidereal_longitude(self, instant: datetime) -> float:
        """Return the sidereal ecliptic longitude of the Moon in degrees."""


@dataclass
class LinearLahiriAyanamsaService:
    """Default service: J2000 offset advanced at a constant precession rate."""

    def lahiri(self, instant: datetime) -> float:  # type: ignore[override]
        return linear_lahiri_ayanamsa(instant)


@dataclass
class PolynomialLahiriAyanamsaService:
    """Service backed by the historical cubic Lahiri polynomial."""

    def lahiri(self, instant: datetime) -> float:  # type: ignore[override]
        return lahiri_mean_ayanamsa(instant)


def ensure_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        raise ValueError("datetime must be timezone-aware to avoid UTC drift")
    return instant


def julian_date(instant: datetime) -> float:
    """Return the Julian date of ``instant`` (UTC treated as the time scale)."""

    return (ensure_aware(instant) - UNIX_EPOCH) / timedelta(days=1) + UNIX_EPOCH_JD


def linear_lahiri_ayanamsa(instant: datetime) -> float:
    """Return the linear Lahiri ayanamsa in degrees.

    ``A(t) = 23.85575 + years * 50.29/3600`` where ``years`` is the time since
    J2000 in Julian years of 365.25 days.  The value is deliberately left
    unwrapped; it stays near 24° for any realistic calendar date.
    """

    years = (ensure_aware(instant) - J2000) / JULIAN_YEAR
    return LAHIRI_AT_J2000 + years * PRECESSION_RATE_DEG_PER_YEAR


def lahiri_mean_ayanamsa(instant: datetime) -> float:
    """Return the Lahiri ayanamsa (mean sidereal offset) in degrees.

    Parameters
    ----------
    instant:
        Timezone-aware datetime.  The polynomial below uses Julian centuries
        from 1900.0, matching the canonical Lahiri reference.  The result is
        wrapped to ``[0, 360)`` degrees.
    """

    centuries = (julian_date(instant) - LAHIRI_REFERENCE_EPOCH_JD) / 36525.0
    ayanamsa = (
        LAHIRI_C0
        + centuries
        * (
            LAHIRI_C1
            + centuries * (LAHIRI_C2 - centuries * LAHIRI_C3)
        )
    )
    wrapped = math.fmod(ayanamsa, 360.0)
    return wrapped + 360.0 if wrapped < 0.0 else wrapped
