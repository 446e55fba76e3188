import datetime

import pytest

from astro.sidereal import (
    J2000,
    LinearLahiriAyanamsaService,
    PolynomialLahiriAyanamsaService,
    UNIX_EPOCH,
    julian_date,
    lahiri_mean_ayanamsa,
    linear_lahiri_ayanamsa,
)

UTC = datetime.timezone.utc


def test_linear_ayanamsa_at_epoch_is_exact():
    assert linear_lahiri_ayanamsa(J2000) == 23.85575


def test_linear_ayanamsa_advances_one_year():
    one_year_later = J2000 + datetime.timedelta(days=365.25)
    assert linear_lahiri_ayanamsa(one_year_later) == pytest.approx(23.85575 + 50.29 / 3600)


def test_linear_ayanamsa_before_epoch_decreases():
    assert linear_lahiri_ayanamsa(datetime.datetime(1950, 1, 1, tzinfo=UTC)) < 23.85575


def test_linear_ayanamsa_ignores_offset_representation():
    ist = datetime.timezone(datetime.timedelta(hours=5, minutes=30))
    local = datetime.datetime(2000, 1, 1, 17, 30, tzinfo=ist)
    assert linear_lahiri_ayanamsa(local) == 23.85575


def test_naive_datetime_rejected():
    with pytest.raises(ValueError):
        linear_lahiri_ayanamsa(datetime.datetime(2000, 1, 1, 12))


def test_polynomial_model_agrees_with_linear_near_j2000():
    dt = datetime.datetime(2024, 6, 1, tzinfo=UTC)
    assert lahiri_mean_ayanamsa(dt) == pytest.approx(linear_lahiri_ayanamsa(dt), abs=0.05)


def test_services_delegate_to_models():
    dt = datetime.datetime(2010, 3, 4, 5, 6, tzinfo=UTC)
    assert LinearLahiriAyanamsaService().lahiri(dt) == linear_lahiri_ayanamsa(dt)
    assert PolynomialLahiriAyanamsaService().lahiri(dt) == lahiri_mean_ayanamsa(dt)


def test_julian_date_anchors():
    assert julian_date(UNIX_EPOCH) == 2440587.5
    assert julian_date(J2000) == 2451545.0


def test_polynomial_model_at_its_1900_epoch():
    epoch = datetime.datetime(1900, 1, 1, tzinfo=UTC)
    assert lahiri_mean_ayanamsa(epoch) == pytest.approx(22.460148)


def test_julian_date_shared_with_lunar_module():
    from astro import lunar
    from nakshatra import cli

    assert lunar.julian_date is julian_date
    assert cli.DEGREES_PER_CIRCLE is lunar.DEGREES_PER_CIRCLE
