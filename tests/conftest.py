import datetime
import os

import pytest

UTC = datetime.timezone.utc
T0 = datetime.datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)


class LinearLongitude:
    """Moon stand-in moving at a constant rate from ``base_deg`` at ``origin``."""

    def __init__(self, base_deg=180.0, deg_per_hour=0.55, origin=T0):
        self.base_deg = base_deg
        self.deg_per_hour = deg_per_hour
        self.origin = origin
        self.calls = 0

    def sidereal_longitude(self, instant):
        self.calls += 1
        hours = (instant - self.origin) / datetime.timedelta(hours=1)
        return (self.base_deg + self.deg_per_hour * hours) % 360.0


class ConstantLongitude:
    """Longitude that never moves; used to drive searches to exhaustion."""

    def __init__(self, value=0.0):
        self.value = value
        self.calls = 0

    def sidereal_longitude(self, instant):
        self.calls += 1
        return self.value


@pytest.fixture
def linear_moon():
    """0.55°/h from 180° at T0: enters Swati at T0+727.27 min, leaves at T0+2181.8 min."""
    return LinearLongitude()


@pytest.fixture
def stalled_moon():
    return ConstantLongitude(0.0)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer NAKSHATRA_* variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("NAKSHATRA_") and key != "NAKSHATRA_EPHEMERIS_PATH":
            monkeypatch.delenv(key, raising=False)
    yield
