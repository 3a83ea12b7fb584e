from __future__ import annotations

import numpy as np
import pytest

from accelspec.exceptions import InvalidInputError
from accelspec.response import (
    DEFAULT_DAMPINGS,
    ResponseSpectrumConfig,
    ResponseSpectrumResult,
    compute_response_spectrum,
    generate_log_periods,
    sdof_peak_response,
)


def _record(fs: float = 100.0, duration: float = 10.0) -> np.ndarray:
    rng = np.random.default_rng(42)
    n = int(fs * duration)
    envelope = np.sin(np.pi * np.arange(n) / n) ** 2
    return rng.normal(scale=0.5, size=n) * envelope


@pytest.mark.parametrize(
    "pmin, pmax, div",
    [(0.02, 10.0, 200), (0.1, 1.0, 1), (0.05, 5.0, 37), (1.0, 1.5, 10)],
)
def test_period_grid(pmin: float, pmax: float, div: int) -> None:
    periods = generate_log_periods(pmin, pmax, div)
    assert periods.size == div + 1
    assert np.all(np.diff(periods) > 0)
    assert periods[0] == pmin
    assert periods[-1] == pytest.approx(pmax, rel=1e-12)
    ratio = (pmax / pmin) ** (1 / div)
    np.testing.assert_allclose(periods[1:] / periods[:-1], ratio, rtol=1e-12)


@pytest.mark.parametrize("pmin, pmax, div", [(0.0, 1.0, 10), (-1.0, 1.0, 10), (2.0, 1.0, 10), (1.0, 1.0, 10), (0.1, 1.0, 0)])
def test_period_grid_rejects_invalid_range(pmin: float, pmax: float, div: int) -> None:
    with pytest.raises(InvalidInputError):
        generate_log_periods(pmin, pmax, div)


def test_config_defaults_and_mapping() -> None:
    cfg = ResponseSpectrumConfig()
    assert (cfg.period_min, cfg.period_max, cfg.period_divisions) == (0.02, 10.0, 200)
    assert cfg.dampings == DEFAULT_DAMPINGS

    merged = ResponseSpectrumConfig.from_mapping({"periodMax": 5.0, "dampings": [0.05]})
    assert merged.period_min == 0.02
    assert merged.period_max == 5.0
    assert merged.dampings == (0.05,)
    assert ResponseSpectrumConfig.from_mapping({"period_divisions": 20}).period_divisions == 20
    assert ResponseSpectrumConfig.from_mapping(None) == cfg
    assert ResponseSpectrumConfig.from_mapping(merged.to_dict()) == merged


def test_config_rejects_unknown_keys_and_bad_dampings() -> None:
    with pytest.raises(InvalidInputError):
        ResponseSpectrumConfig.from_mapping({"periodMaximum": 3.0})
    with pytest.raises(InvalidInputError):
        ResponseSpectrumConfig(dampings=(0.05, 1.0)).validate()
    with pytest.raises(InvalidInputError):
        ResponseSpectrumConfig(dampings=(-0.01,)).validate()
    with pytest.raises(InvalidInputError):
        ResponseSpectrumConfig(dampings=()).validate()


@pytest.mark.parametrize(
    "options",
    [
        {"dampings": 0.05},
        {"dampings": ["a lot"]},
        {"periodMin": None},
        {"periodMax": "long"},
        {"periodDivisions": None},
        {"periodDivisions": float("nan")},
        {"periodDivisions": 2.5},
    ],
)
def test_config_rejects_malformed_values(options: dict) -> None:
    with pytest.raises(InvalidInputError):
        ResponseSpectrumConfig.from_mapping(options).validate()


def test_config_coerces_numeric_strings() -> None:
    cfg = ResponseSpectrumConfig.from_mapping({"periodMin": "0.1", "periodDivisions": 20.0})
    assert cfg.period_min == 0.1
    assert cfg.period_divisions == 20
    assert isinstance(cfg.period_divisions, int)
    assert cfg.validate() is cfg


def test_default_config_shape() -> None:
    result = compute_response_spectrum(_record(), 100.0, "m/s2")
    assert result.periods.size == 201
    assert result.dampings == (0.02, 0.03, 0.05)
    for spectra in (result.acceleration, result.velocity, result.displacement):
        assert spectra.shape == (3, 201)
        assert np.all(spectra >= 0)
        assert np.all(np.isfinite(spectra))

    payload = result.to_dict()
    assert set(payload) == {"periods", "dampings", "acceleration", "velocity", "displacement"}
    assert len(payload["acceleration"]) == 3
    assert all(len(row) == 201 for row in payload["displacement"])


def test_dampings_keep_given_order() -> None:
    result = compute_response_spectrum(
        _record(), 100.0, config={"dampings": [0.05, 0.0, 0.2], "periodDivisions": 20})
    assert result.dampings == (0.05, 0.0, 0.2)
    alone = compute_response_spectrum(_record(), 100.0, config={"dampings": [0.2], "periodDivisions": 20})
    np.testing.assert_array_equal(result.displacement[2], alone.displacement[0])


def test_single_pair_matches_sweep() -> None:
    acc = _record()
    result = compute_response_spectrum(acc, 100.0, config={"periodDivisions": 10, "dampings": [0.05]})
    sa, sv, sd = sdof_peak_response(acc, 0.01, result.periods[4], 0.05)
    assert sa == result.acceleration[0, 4]
    assert sv == result.velocity[0, 4]
    assert sd == result.displacement[0, 4]


def test_newmark_step_by_hand() -> None:
    # Two samples: one step of the average acceleration method from rest.
    ag = np.array([0.0, 1.0])
    dt, T, h = 0.1, 1.0, 0.05
    w = 2 * np.pi / T
    k, c = w**2, 2 * h * w
    a0, a1, a2 = 1 / (0.25 * dt**2), 0.5 / (0.25 * dt), 1 / (0.25 * dt)
    d1 = -1.0 / (k + a0 + a1 * c)
    acc1 = a0 * d1
    v1 = dt * 0.5 * acc1
    sa, sv, sd = sdof_peak_response(ag, dt, T, h)
    assert sd == pytest.approx(abs(d1))
    assert sv == pytest.approx(abs(v1))
    assert sa == pytest.approx(abs(acc1 + 1.0))


def test_zero_record_gives_zero_spectra() -> None:
    result = compute_response_spectrum(np.zeros(500), 100.0, config={"periodDivisions": 5})
    assert np.all(result.acceleration == 0)
    assert np.all(result.velocity == 0)
    assert np.all(result.displacement == 0)


def test_short_period_acceleration_tends_to_pga() -> None:
    fs = 200.0
    t = np.arange(0, 10, 1 / fs)
    acc = np.sin(2 * np.pi * t) * np.sin(np.pi * t / 10) ** 2  # smooth 1 Hz motion
    result = compute_response_spectrum(acc, fs, config={"periodMin": 0.02, "periodMax": 0.05,
                                                         "periodDivisions": 2, "dampings": [0.05]})
    pga = np.max(np.abs(acc))
    assert result.acceleration[0, 0] == pytest.approx(pga, rel=0.15)


def test_resonance_peak() -> None:
    fs = 100.0
    t = np.arange(0, 50, 1 / fs)
    acc = np.sin(2 * np.pi * t)  # natural period 1 s, 50 cycles
    result = compute_response_spectrum(
        acc, fs, config={"periodMin": 0.1, "periodMax": 10.0, "periodDivisions": 2, "dampings": [0.001]})
    np.testing.assert_allclose(result.periods, [0.1, 1.0, 10.0])
    sd = result.displacement[0]
    assert sd[1] > 5 * sd[0]
    assert sd[1] > 5 * sd[2]


def test_unit_scaling() -> None:
    acc = _record()
    cfg = {"periodDivisions": 8}
    si = compute_response_spectrum(acc, 100.0, "m/s2", cfg)
    gal = compute_response_spectrum(acc * 100.0, 100.0, "gal", cfg)
    g = compute_response_spectrum(acc / 9.80665, 100.0, "g", cfg)
    np.testing.assert_allclose(gal.acceleration, si.acceleration, rtol=1e-9)
    np.testing.assert_allclose(g.displacement, si.displacement, rtol=1e-9)


def test_pseudo_spectra_and_lookup() -> None:
    result = compute_response_spectrum(_record(), 100.0, config={"periodDivisions": 10})
    w = 2 * np.pi / result.periods
    np.testing.assert_allclose(result.pseudo_acceleration, w**2 * result.displacement)
    np.testing.assert_allclose(result.pseudo_velocity, w * result.displacement)
    row = result.spectrum_for(0.03)
    np.testing.assert_array_equal(row["Sd"], result.displacement[1])
    with pytest.raises(KeyError):
        result.spectrum_for(0.5)


def test_result_dict_round_trip() -> None:
    result = compute_response_spectrum(_record(), 100.0, config={"periodDivisions": 4})
    back = ResponseSpectrumResult.from_dict(result.to_dict())
    np.testing.assert_array_equal(back.periods, result.periods)
    np.testing.assert_array_equal(back.acceleration, result.acceleration)
    assert back.dampings == result.dampings


@pytest.mark.parametrize(
    "samples, fs",
    [([1.0], 100.0), ([], 100.0), ([0.0, 1.0], 0.0), ([0.0, 1.0], -1.0), ([0.0, float("inf")], 100.0)],
)
def test_invalid_input(samples, fs) -> None:
    with pytest.raises(InvalidInputError):
        compute_response_spectrum(samples, fs)


def test_input_is_not_mutated() -> None:
    acc = _record()
    before = acc.copy()
    compute_response_spectrum(acc, 100.0, "gal", {"periodDivisions": 3})
    np.testing.assert_array_equal(acc, before)
