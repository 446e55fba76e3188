"""Locate the time window during which the Moon occupies a nakshatra band.

The search brackets a boundary crossing with coarse steps, then walks back
over the last coarse interval with fine steps.  The coarse step must be
shorter than the shortest possible stay inside the band, otherwise a whole
transit could be stepped over; the fine step sets the precision of the
returned instants.

Boundary convention: ``Period.start`` is the first fine-grid probe inside the
band, ``Period.end`` is the first fine-grid probe outside it (last inside
probe plus one fine step).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional

from astro.lunar import SeriesLunarLongitude
from astro.sidereal import UNIX_EPOCH, LongitudeProvider, ensure_aware
from nakshatra.band import SWATI, Band

__all__ = [
    "DEFAULT_COARSE_STEP",
    "DEFAULT_FINE_STEP",
    "DEFAULT_HORIZON",
    "MAX_LUNAR_SPEED_DEG_PER_HOUR",
    "Period",
    "PeriodLocator",
    "SearchExhausted",
    "iter_periods",
    "locate",
    "step_while",
]

logger = logging.getLogger(__name__)

DEFAULT_COARSE_STEP = timedelta(hours=1)
DEFAULT_FINE_STEP = timedelta(minutes=1)
DEFAULT_HORIZON = timedelta(days=30)

# Perigee speed of the Moon is about 15.4°/day.
MAX_LUNAR_SPEED_DEG_PER_HOUR = 0.65

_RESUME_GAP = timedelta(milliseconds=1)


class SearchExhausted(RuntimeError):
    """Raised when a scan moves past its horizon without a band transition."""

    def __init__(self, reference: datetime, horizon: timedelta) -> None:
        super().__init__(
            f"No band transition within {horizon} of {reference.isoformat()}"
        )
        self.reference = reference
        self.horizon = horizon


@dataclass(frozen=True)
class Period:
    """A maximal stay of the Moon inside a band."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("period end precedes its start")

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def key(self) -> int:
        """Start as Unix milliseconds, stable across repeated searches."""

        return (self.start - UNIX_EPOCH) // timedelta(milliseconds=1)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end


def step_while(
    predicate: Callable[[datetime], bool],
    origin: datetime,
    step: timedelta,
    *,
    holds: bool = True,
    horizon: timedelta,
) -> datetime:
    """Step from ``origin`` while ``predicate(probe) == holds``.

    Returns the first probe for which the predicate no longer equals
    ``holds``.  ``step`` may be negative.  Raises :class:`SearchExhausted`
    once a probe lies more than ``horizon`` away from ``origin``.
    """

    probe = origin
    while predicate(probe) == holds:
        probe += step
        if abs(probe - origin) > horizon:
            raise SearchExhausted(origin, horizon)
    return probe


class PeriodLocator:
    """Find the current or next period the Moon spends inside ``band``.

    Parameters
    ----------
    provider:
        Source of sidereal lunar longitudes.  Defaults to the periodic-series
        model with the linear Lahiri ayanamsa.
    band:
        Target arc; Swati unless stated otherwise.
    coarse_step, fine_step:
        Bracketing and refinement increments.
    horizon:
        How far ahead to look for the next entry before giving up.
    """

    def __init__(
        self,
        provider: Optional[LongitudeProvider] = None,
        band: Band = SWATI,
        *,
        coarse_step: timedelta = DEFAULT_COARSE_STEP,
        fine_step: timedelta = DEFAULT_FINE_STEP,
        horizon: timedelta = DEFAULT_HORIZON,
    ) -> None:
        if fine_step <= timedelta(0) or coarse_step <= timedelta(0):
            raise ValueError("search steps must be positive")
        if fine_step >= coarse_step:
            raise ValueError("fine step must be shorter than coarse step")
        min_dwell = timedelta(hours=band.width_deg / MAX_LUNAR_SPEED_DEG_PER_HOUR)
        if coarse_step >= min_dwell:
            raise ValueError(
                f"coarse step {coarse_step} could skip a transit of {band.name or band} "
                f"(minimum stay {min_dwell})"
            )
        if horizon <= coarse_step:
            raise ValueError("search horizon must exceed the coarse step")

        self.provider = provider or SeriesLunarLongitude()
        self.band = band
        self.coarse_step = coarse_step
        self.fine_step = fine_step
        self.horizon = horizon
        # A fine walk may overshoot the coarse interval by one step when the
        # fine step does not divide the coarse step.
        self._refine_span = coarse_step + fine_step

    def in_band(self, instant: datetime) -> bool:
        return self.band.contains(self.provider.sidereal_longitude(instant))

    def locate(self, reference: datetime) -> Period:
        """Return the period containing ``reference``, or the next one."""

        ensure_aware(reference)
        if self.in_band(reference):
            logger.debug("%s is inside %s", reference, self.band.name)
            start = self._start_from_inside(reference)
            end = self._end_from_inside(reference)
        else:
            logger.debug("%s is outside %s; searching ahead", reference, self.band.name)
            start = self._next_start(reference)
            end = self._end_from_inside(start)
        period = Period(start=start, end=end)
        logger.debug("%s period %s -> %s", self.band.name, period.start, period.end)
        return period

    def iter_periods(self, reference: datetime) -> Iterator[Period]:
        """Yield successive periods starting with ``locate(reference)``."""

        while True:
            period = self.locate(reference)
            yield period
            reference = period.end + _RESUME_GAP

    def _start_from_inside(self, reference: datetime) -> datetime:
        outside = step_while(
            self.in_band, reference, -self.coarse_step, horizon=self.horizon
        )
        return step_while(
            self.in_band, outside, self.fine_step, holds=False, horizon=self._refine_span
        )

    def _next_start(self, reference: datetime) -> datetime:
        inside = step_while(
            self.in_band, reference, self.coarse_step, holds=False, horizon=self.horizon
        )
        before = step_while(
            self.in_band, inside, -self.fine_step, horizon=self._refine_span
        )
        return before + self.fine_step

    def _end_from_inside(self, inside: datetime) -> datetime:
        outside = step_while(
            self.in_band, inside, self.coarse_step, horizon=self.horizon
        )
        last_inside = step_while(
            self.in_band, outside, -self.fine_step, holds=False, horizon=self._refine_span
        )
        return last_inside + self.fine_step


def locate(
    reference: datetime,
    *,
    provider: Optional[LongitudeProvider] = None,
    band: Band = SWATI,
) -> Period:
    """Locate the Swati (or ``band``) period containing or following ``reference``."""

    return PeriodLocator(provider, band).locate(reference)


def iter_periods(
    reference: datetime,
    *,
    provider: Optional[LongitudeProvider] = None,
    band: Band = SWATI,
) -> Iterator[Period]:
    return PeriodLocator(provider, band).iter_periods(reference)
