"""Runtime configuration for nakshatra window searches.

Values come from ``NAKSHATRA_*`` environment variables or a ``.env`` file.
CI runners pass empty strings for unset variables, so empty values fall back
to the field defaults.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from astro.ephemeris import SkyfieldEphemeris, SkyfieldLunarLongitude
from astro.lunar import MeanLunarLongitude, SeriesLunarLongitude
from astro.sidereal import (
    AyanamsaService,
    LinearLahiriAyanamsaService,
    LongitudeProvider,
    PolynomialLahiriAyanamsaService,
)
from nakshatra.band import Band
from nakshatra.locator import MAX_LUNAR_SPEED_DEG_PER_HOUR, PeriodLocator

__all__ = ["Settings", "build_ayanamsa_service", "build_locator", "build_provider"]

_SETTINGS_FIELD_DEFAULTS = {
    "nakshatra": "Swati",
    "provider": "series",
    "ayanamsa": "linear",
    "coarse_step_minutes": 60.0,
    "fine_step_seconds": 60.0,
    "search_horizon_days": 30.0,
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NAKSHATRA_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    nakshatra: str = Field("Swati", description="Name or 1-based index of the target nakshatra")
    provider: Literal["series", "mean", "skyfield"] = Field(
        "series", description="Lunar longitude model"
    )
    ayanamsa: Literal["linear", "polynomial"] = Field(
        "linear", description="Lahiri ayanamsa model"
    )
    coarse_step_minutes: float = Field(60.0, gt=0, description="Coarse search step in minutes")
    fine_step_seconds: float = Field(60.0, gt=0, description="Fine search step in seconds")
    search_horizon_days: float = Field(30.0, gt=0, description="How far ahead to search, in days")
    ephemeris_path: Optional[Path] = Field(None, description="Explicit JPL kernel file")
    ephemeris_directory: Optional[Path] = Field(
        None, description="Extra directory searched for JPL kernels"
    )

    @field_validator(
        "nakshatra",
        "provider",
        "ayanamsa",
        "coarse_step_minutes",
        "fine_step_seconds",
        "search_horizon_days",
        mode="before",
    )
    @classmethod
    def empty_str_to_default(cls, v, info):
        if v == "":
            return _SETTINGS_FIELD_DEFAULTS[info.field_name]
        return v

    @field_validator("ephemeris_path", "ephemeris_directory", mode="before")
    @classmethod
    def empty_str_to_none(cls, v):
        if v == "":
            return None
        return v

    @field_validator("nakshatra", mode="before")
    @classmethod
    def index_to_str(cls, v):
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("nakshatra")
    @classmethod
    def known_nakshatra(cls, v):
        Band.for_nakshatra(v)
        return v

    @model_validator(mode="after")
    def search_steps_consistent(self):
        if self.fine_step_seconds >= self.coarse_step_minutes * 60:
            raise ValueError(
                f"fine_step_seconds ({self.fine_step_seconds}) must be shorter than "
                f"coarse_step_minutes ({self.coarse_step_minutes})"
            )
        min_dwell_minutes = self.band.width_deg / MAX_LUNAR_SPEED_DEG_PER_HOUR * 60
        if self.coarse_step_minutes >= min_dwell_minutes:
            raise ValueError(
                f"coarse_step_minutes ({self.coarse_step_minutes}) could skip a transit "
                f"of {self.band.name} (minimum stay {min_dwell_minutes:.0f} minutes)"
            )
        if self.search_horizon_days * 1440 <= self.coarse_step_minutes:
            raise ValueError("search_horizon_days must exceed the coarse step")
        return self

    @property
    def band(self) -> Band:
        return Band.for_nakshatra(self.nakshatra)

    @property
    def coarse_step(self) -> timedelta:
        return timedelta(minutes=self.coarse_step_minutes)

    @property
    def fine_step(self) -> timedelta:
        return timedelta(seconds=self.fine_step_seconds)

    @property
    def search_horizon(self) -> timedelta:
        return timedelta(days=self.search_horizon_days)


def build_ayanamsa_service(settings: Settings) -> AyanamsaService:
    if settings.ayanamsa == "polynomial":
        return PolynomialLahiriAyanamsaService()
    return LinearLahiriAyanamsaService()


def build_provider(settings: Settings) -> LongitudeProvider:
    """Instantiate the longitude model named by ``settings.provider``."""

    ayanamsa_service = build_ayanamsa_service(settings)
    if settings.provider == "mean":
        return MeanLunarLongitude(ayanamsa_service)
    if settings.provider == "skyfield":
        ephemeris = SkyfieldEphemeris(
            path=settings.ephemeris_path, directory=settings.ephemeris_directory
        )
        return SkyfieldLunarLongitude(ephemeris, ayanamsa_service)
    return SeriesLunarLongitude(ayanamsa_service)


def build_locator(settings: Optional[Settings] = None) -> PeriodLocator:
    settings = settings or Settings()
    return PeriodLocator(
        build_provider(settings),
        settings.band,
        coarse_step=settings.coarse_step,
        fine_step=settings.fine_step,
        horizon=settings.search_horizon,
    )
