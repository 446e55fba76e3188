import datetime
import logging

import pytest

from astro.lunar import (
    MeanLunarLongitude,
    SeriesLunarLongitude,
    julian_centuries,
    julian_date,
    sidereal_longitude,
    to_sidereal,
    tropical_longitude,
    wrap_degrees,
)
from astro.sidereal import J2000, PolynomialLahiriAyanamsaService, linear_lahiri_ayanamsa

UTC = datetime.timezone.utc


def test_julian_date_of_unix_epoch():
    assert julian_date(datetime.datetime(1970, 1, 1, tzinfo=UTC)) == 2440587.5


def test_julian_centuries_zero_at_j2000():
    assert julian_centuries(J2000) == 0.0


def test_meeus_example_47a():
    # Meeus, Astronomical Algorithms, example 47.a: 1992 April 12, 0h.
    dt = datetime.datetime(1992, 4, 12, tzinfo=UTC)
    assert tropical_longitude(dt) == pytest.approx(133.162655, abs=0.01)


@pytest.mark.parametrize("angle,expected", [
    (0.0, 0.0),
    (360.0, 0.0),
    (725.5, 5.5),
    (-10.0, 350.0),
    (-1e-18, 0.0),
])
def test_wrap_degrees(angle, expected):
    assert wrap_degrees(angle) == pytest.approx(expected)
    assert 0.0 <= wrap_degrees(angle) < 360.0


@pytest.mark.parametrize("tropical,ayanamsa,expected", [
    (193.0, 24.0, 169.0),
    (10.0, 24.0, 346.0),
    (0.0, 0.0, 0.0),
    (359.5, -1.0, 0.5),
])
def test_to_sidereal(tropical, ayanamsa, expected):
    assert to_sidereal(tropical, ayanamsa) == pytest.approx(expected)


def test_sidereal_longitude_always_normalised():
    start = datetime.datetime(1990, 1, 1, tzinfo=UTC)
    for step in range(0, 2000):
        instant = start + datetime.timedelta(hours=97 * step + 0.37 * step)
        value = sidereal_longitude(instant)
        assert 0.0 <= value < 360.0


def test_sidereal_is_tropical_minus_ayanamsa():
    dt = datetime.datetime(2024, 5, 20, 6, 30, tzinfo=UTC)
    expected = (tropical_longitude(dt) - linear_lahiri_ayanamsa(dt)) % 360.0
    assert sidereal_longitude(dt) == pytest.approx(expected)


def test_sidereal_longitude_is_deterministic():
    dt = datetime.datetime(2031, 7, 9, 22, 15, 3, 250000, tzinfo=UTC)
    assert sidereal_longitude(dt) == sidereal_longitude(dt)


def test_moon_advances_about_13_degrees_per_day():
    dt = datetime.datetime(2024, 3, 1, tzinfo=UTC)
    delta = (tropical_longitude(dt + datetime.timedelta(days=1)) - tropical_longitude(dt)) % 360.0
    assert 11.5 < delta < 15.5


def test_series_provider_uses_injected_ayanamsa():
    dt = datetime.datetime(2024, 3, 1, tzinfo=UTC)
    provider = SeriesLunarLongitude(PolynomialLahiriAyanamsaService())
    expected = to_sidereal(tropical_longitude(dt), PolynomialLahiriAyanamsaService().lahiri(dt))
    assert provider.sidereal_longitude(dt) == expected


def test_default_series_provider_matches_module_function():
    dt = datetime.datetime(2024, 3, 1, 13, 0, tzinfo=UTC)
    assert SeriesLunarLongitude().sidereal_longitude(dt) == sidereal_longitude(dt)


def test_mean_provider_warns_about_calibration(caplog):
    with caplog.at_level(logging.WARNING, logger="astro.lunar"):
        MeanLunarLongitude()
    assert "mean-motion" in caplog.text


def test_mean_provider_stays_within_perturbation_range():
    provider = MeanLunarLongitude()
    start = datetime.datetime(2024, 1, 1, tzinfo=UTC)
    for day in range(0, 60, 3):
        dt = start + datetime.timedelta(days=day)
        diff = (provider.tropical_longitude(dt) - tropical_longitude(dt) + 180.0) % 360.0 - 180.0
        assert abs(diff) < 10.0
