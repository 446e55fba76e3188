"""Skyfield-based lunar ephemeris for nakshatra window searches.

This module is the high-fidelity counterpart of :mod:`astro.lunar`.  It wraps
Skyfield's JPL Development ephemerides behind the same ``LongitudeProvider``
contract, so the period search never knows which model it is driving.  A
kernel is looked up locally first; DE421 is fetched through Skyfield's own
loader only when nothing usable is on disk.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

from skyfield.api import Loader, Time, Timescale, load, load_file

from astro.lunar import to_sidereal, wrap_degrees
from astro.sidereal import AyanamsaService, LinearLahiriAyanamsaService, ensure_aware

__all__ = [
    "DOWNLOAD_KERNEL_NAME",
    "KERNEL_CANDIDATE_NAMES",
    "SKYFIELD_HOME_DIRECTORY",
    "KernelAcquisitionError",
    "SkyfieldEphemeris",
    "SkyfieldLunarLongitude",
    "find_kernel",
    "kernel_candidates",
    "load_kernel",
]

logger = logging.getLogger(__name__)

SKYFIELD_HOME_DIRECTORY = Path.home() / ".skyfield"

# DE440s covers 1550-2650; DE421 is the small kernel Skyfield downloads.
KERNEL_CANDIDATE_NAMES: tuple[str, ...] = ("de440s.bsp", "de440.bsp", "de421.bsp")
DOWNLOAD_KERNEL_NAME = "de421.bsp"


class KernelAcquisitionError(FileNotFoundError):
    """Raised when no suitable JPL kernel could be located or fetched."""


def kernel_candidates(directory: Optional[Path] = None) -> Iterator[Path]:
    """Yield kernel paths to try, best kernel first within each directory.

    ``directory`` is searched before the Skyfield cache in ``~/.skyfield``.
    """

    directories = [] if directory is None else [Path(directory).expanduser()]
    directories.append(SKYFIELD_HOME_DIRECTORY)
    for base in directories:
        for name in KERNEL_CANDIDATE_NAMES:
            yield base / name


def find_kernel(
    path: Optional[Path] = None, directory: Optional[Path] = None
) -> Optional[Path]:
    """Return the kernel to load, or ``None`` when nothing is on disk.

    An explicit ``path`` wins and must exist.
    """

    if path is not None:
        explicit = Path(path).expanduser()
        if not explicit.is_file():
            raise KernelAcquisitionError(f"Configured ephemeris '{explicit}' does not exist.")
        return explicit.resolve()

    for candidate in kernel_candidates(directory):
        if candidate.is_file():
            return candidate.resolve()
    return None


def load_kernel(
    path: Optional[Path] = None,
    directory: Optional[Path] = None,
    *,
    allow_download: bool = True,
):
    """Open a JPL kernel, downloading DE421 into ``~/.skyfield`` if needed."""

    found = find_kernel(path, directory)
    if found is not None:
        logger.debug("Loading ephemeris %s", found)
        return load_file(str(found))

    if not allow_download:
        raise KernelAcquisitionError(
            f"No kernel among {', '.join(KERNEL_CANDIDATE_NAMES)} found locally."
        )

    loader = Loader(str(SKYFIELD_HOME_DIRECTORY))
    try:
        kernel = loader(DOWNLOAD_KERNEL_NAME)
    except OSError as exc:
        raise KernelAcquisitionError(
            f"No JPL kernel available locally and downloading {DOWNLOAD_KERNEL_NAME} "
            f"failed: {exc}. Set NAKSHATRA_EPHEMERIS_PATH to a local kernel."
        ) from exc
    logger.info("Downloaded %s to %s", DOWNLOAD_KERNEL_NAME, SKYFIELD_HOME_DIRECTORY)
    return kernel


class SkyfieldEphemeris:
    """Earth and Moon segments of a JPL kernel plus a Skyfield timescale.

    Parameters
    ----------
    path:
        Explicit kernel file.
    directory:
        Extra directory searched for kernels before ``~/.skyfield``.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        directory: Optional[Path] = None,
        *,
        allow_download: bool = True,
    ) -> None:
        kernel = load_kernel(path, directory, allow_download=allow_download)
        self._timescale = load.timescale()
        self._earth = kernel["earth"]
        self._moon = kernel["moon"]

    @property
    def timescale(self) -> Timescale:
        return self._timescale

    def to_time(self, dt: datetime) -> Time:
        """Convert a timezone-aware :class:`datetime` into Skyfield ``Time``."""

        return self._timescale.from_datetime(ensure_aware(dt).astimezone(timezone.utc))

    def moon_longitude(self, time: Time) -> float:
        """Return the Moon's apparent ecliptic longitude of date (degrees)."""

        apparent = self._earth.at(time).observe(self._moon).apparent()
        _, lon_angle, _ = apparent.ecliptic_latlon(epoch=time)
        return wrap_degrees(lon_angle.degrees)


class SkyfieldLunarLongitude:
    """Longitude provider reading the Moon from a JPL kernel."""

    def __init__(
        self,
        ephemeris: Optional[SkyfieldEphemeris] = None,
        ayanamsa_service: Optional[AyanamsaService] = None,
    ) -> None:
        self._ephemeris = ephemeris or SkyfieldEphemeris()
        self._ayanamsa = ayanamsa_service or LinearLahiriAyanamsaService()

    def tropical_longitude(self, instant: datetime) -> float:
        return self._ephemeris.moon_longitude(self._ephemeris.to_time(instant))

    def sidereal_longitude(self, instant: datetime) -> float:
        return to_sidereal(
            self.tropical_longitude(instant), self._ayanamsa.lahiri(instant)
        )
