"""Report the current or upcoming window of a nakshatra (Swati by default).

Example::

    nakshatra-window --datetime 2024-03-01T00:00:00Z --count 3

The reference longitude of the Moon is printed first, followed by one line
per period.  Settings not given on the command line are read from
``NAKSHATRA_*`` environment variables.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from itertools import islice
from typing import Optional, Sequence

from pydantic import ValidationError

from astro.ephemeris import KernelAcquisitionError
from astro.lunar import DEGREES_PER_CIRCLE, wrap_degrees
from nakshatra.config import Settings, build_locator
from nakshatra.locator import Period, SearchExhausted

__all__ = ["format_dms", "format_period", "main"]

def format_dms(angle: float, *, precision: int = 2) -> str:
    """Format a degree value as D°M′S″ with configurable precision."""

    wrapped = wrap_degrees(angle)
    degrees = int(wrapped)
    minutes_total = (wrapped - degrees) * 60.0
    minutes = int(minutes_total)
    seconds = round((minutes_total - minutes) * 60.0, precision)

    if seconds >= 60.0:
        seconds -= 60.0
        minutes += 1
    if minutes >= 60:
        minutes -= 60
        degrees = (degrees + 1) % int(DEGREES_PER_CIRCLE)

    return f"{degrees:03d}°{minutes:02d}′{seconds:0{4 + precision}.{precision}f}″"


def format_period(period: Period, reference: datetime) -> str:
    status = "active" if period.contains(reference) else "upcoming"
    hours = period.duration.total_seconds() / 3600.0
    return (
        f"{period.start.isoformat()} -> {period.end.isoformat()}"
        f"  ({hours:.2f} h, {status})"
    )


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--datetime", help="ISO-8601 reference timestamp with offset (default: now)"
    )
    parser.add_argument("--nakshatra", help="Nakshatra name or 1-based index")
    parser.add_argument(
        "--provider", choices=("series", "mean", "skyfield"), help="Lunar longitude model"
    )
    parser.add_argument(
        "--count", type=int, default=1, help="Number of consecutive periods to list"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log search steps")
    return parser.parse_args(argv)


def _parse_datetime(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    normalised = value.strip()
    if normalised.endswith("Z"):
        normalised = normalised[:-1] + "+00:00"
    dt = datetime.fromisoformat(normalised)
    if dt.tzinfo is None:
        raise ValueError("Datetime must include a timezone offset")
    return dt.astimezone(timezone.utc)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides = {}
    if args.nakshatra:
        overrides["nakshatra"] = args.nakshatra
    if args.provider:
        overrides["provider"] = args.provider

    try:
        reference = _parse_datetime(args.datetime)
        locator = build_locator(Settings(**overrides))
        longitude = locator.provider.sidereal_longitude(reference)
        periods = list(islice(locator.iter_periods(reference), max(args.count, 1)))
    except KernelAcquisitionError as exc:
        print(f"Kernel warning: {exc}", file=sys.stderr)
        return 2
    except SearchExhausted as exc:
        print(f"Search failed: {exc}", file=sys.stderr)
        return 2
    except (ValueError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    band = locator.band
    print(f"Reference          : {reference.isoformat()}")
    print(f"Moon (sidereal)    : {format_dms(longitude)} ({longitude:.6f}°)")
    print(
        f"{band.name:<19}: {format_dms(band.start_deg)} - {format_dms(band.end_deg)}"
    )
    for period in periods:
        print(format_period(period, reference))
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
