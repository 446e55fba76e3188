"""Nakshatra bands on the sidereal ecliptic.

The circle is cut into 27 equal divisions of 13°20′ starting at 0° sidereal.
A :class:`Band` is a half-open arc ``[start_deg, end_deg)``; when the start
lies above the end the arc wraps through 0°.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from astro.lunar import wrap_degrees

__all__ = [
    "Band",
    "NAKSHATRA_COUNT",
    "NAKSHATRA_NAMES",
    "NAKSHATRA_SPAN_DEGREES",
    "SWATI",
    "in_band",
]

NAKSHATRA_COUNT = 27
NAKSHATRA_SPAN_DEGREES = 360.0 / NAKSHATRA_COUNT

NAKSHATRA_NAMES: tuple[str, ...] = (
    "Ashwini",
    "Bharani",
    "Krittika",
    "Rohini",
    "Mrigashira",
    "Ardra",
    "Punarvasu",
    "Pushya",
    "Ashlesha",
    "Magha",
    "Purva Phalguni",
    "Uttara Phalguni",
    "Hasta",
    "Chitra",
    "Swati",
    "Vishakha",
    "Anuradha",
    "Jyeshtha",
    "Mula",
    "Purva Ashadha",
    "Uttara Ashadha",
    "Shravana",
    "Dhanishta",
    "Shatabhisha",
    "Purva Bhadrapada",
    "Uttara Bhadrapada",
    "Revati",
)

_ALIASES = {"swathi": "swati", "swaati": "swati"}


@dataclass(frozen=True)
class Band:
    """Half-open arc of sidereal longitude."""

    start_deg: float
    end_deg: float
    name: str = ""

    def __post_init__(self) -> None:
        start = wrap_degrees(self.start_deg)
        end = wrap_degrees(self.end_deg)
        if start == end:
            raise ValueError("band must have a non-zero width")
        object.__setattr__(self, "start_deg", start)
        object.__setattr__(self, "end_deg", end)

    @property
    def wraps(self) -> bool:
        return self.start_deg > self.end_deg

    @property
    def width_deg(self) -> float:
        return wrap_degrees(self.end_deg - self.start_deg)

    def contains(self, longitude: float) -> bool:
        """Return True when ``longitude`` lies in ``[start_deg, end_deg)``."""

        if self.wraps:
            return longitude >= self.start_deg or longitude < self.end_deg
        return self.start_deg <= longitude < self.end_deg

    @classmethod
    def for_nakshatra(cls, nakshatra: Union[int, str]) -> "Band":
        """Build the band of a nakshatra from its 1-based index or its name."""

        index = _nakshatra_index(nakshatra)
        # n * 360 / 27 keeps integral boundaries such as 200° exact
        start = (index - 1) * 360.0 / NAKSHATRA_COUNT
        end = index * 360.0 / NAKSHATRA_COUNT
        return cls(start, end, NAKSHATRA_NAMES[index - 1])


def _nakshatra_index(nakshatra: Union[int, str]) -> int:
    if isinstance(nakshatra, str):
        key = nakshatra.strip().lower()
        if key.isdigit():
            return _nakshatra_index(int(key))
        key = _ALIASES.get(key, key)
        for position, name in enumerate(NAKSHATRA_NAMES, start=1):
            if name.lower() == key:
                return position
        raise ValueError(f"Unknown nakshatra: {nakshatra!r}")
    if not 1 <= nakshatra <= NAKSHATRA_COUNT:
        raise ValueError(
            f"Nakshatra index must be between 1 and {NAKSHATRA_COUNT}, got {nakshatra}"
        )
    return nakshatra


SWATI = Band.for_nakshatra(15)


def in_band(longitude: float, band: Band = SWATI) -> bool:
    return band.contains(longitude)
