from __future__ import annotations

import numpy as np
import pytest

from accelspec.exceptions import InvalidInputError
from accelspec.units import (
    G_STANDARD,
    AccelerationUnit,
    conversion_factor,
    displacement_to_cm,
    from_si,
    parse_unit,
    to_si,
    velocity_to_cm,
)


@pytest.mark.parametrize(
    "label, expected",
    [
        ("m/s²", AccelerationUnit.MPS2),
        ("mps2", AccelerationUnit.MPS2),
        ("gal", AccelerationUnit.GAL),
        ("Gal", AccelerationUnit.GAL),
        ("cm/s2", AccelerationUnit.GAL),
        ("galOrCmPerS2", AccelerationUnit.GAL),
        (" g ", AccelerationUnit.G),
        (None, AccelerationUnit.MPS2),
        (AccelerationUnit.G, AccelerationUnit.G),
    ],
)
def test_parse_unit_labels(label, expected) -> None:
    assert parse_unit(label) is expected


def test_unknown_unit_is_identity_in_lenient_mode(caplog: pytest.LogCaptureFixture) -> None:
    data = [1.0, -2.5, 3.0]
    with caplog.at_level("WARNING", logger="accelspec.units"):
        assert parse_unit("furlongs/fortnight²") is AccelerationUnit.UNKNOWN
    assert "Unrecognised acceleration unit" in caplog.text
    np.testing.assert_array_equal(to_si(data, "furlongs/fortnight²"), data)
    np.testing.assert_array_equal(from_si(data, "furlongs/fortnight²"), data)


def test_unknown_unit_rejected_in_strict_mode() -> None:
    with pytest.raises(InvalidInputError):
        parse_unit("ft/s2", strict=True)


def test_conversion_factors() -> None:
    assert to_si([100.0], "gal")[0] == pytest.approx(1.0)
    assert to_si([1.0], "g")[0] == pytest.approx(9.80665)
    assert conversion_factor("gal") == 0.01
    assert conversion_factor("g") == G_STANDARD
    assert conversion_factor("m/s2") == 1.0


@pytest.mark.parametrize("unit", ["m/s2", "gal", "g"])
def test_round_trip(unit: str) -> None:
    rng = np.random.default_rng(7)
    x = rng.normal(scale=50.0, size=257)
    np.testing.assert_allclose(from_si(to_si(x, unit), unit), x, rtol=1e-12, atol=1e-12)


def test_conversion_does_not_mutate_input() -> None:
    x = np.array([1.0, 2.0, 3.0])
    y = to_si(x, "m/s2")
    y[0] = 99.0
    assert x[0] == 1.0
    to_si(x, "g")
    np.testing.assert_array_equal(x, [1.0, 2.0, 3.0])


def test_display_helpers() -> None:
    np.testing.assert_allclose(velocity_to_cm([0.5]), [50.0])
    np.testing.assert_allclose(displacement_to_cm([-0.02]), [-2.0])
