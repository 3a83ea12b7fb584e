"""
Baseline correction and time integration of acceleration records.

Velocity and displacement are obtained with two independent passes of
linear detrend + composite trapezoidal rule. The second pass detrends the
integrated velocity itself, so each stage gets its own drift removal.
"""

import logging
from typing import Dict, Sequence

import numpy as np
from scipy import integrate as sp_integrate

from ._checks import as_record, check_sampling_rate
from .units import UnitLike, to_si

log = logging.getLogger(__name__)


# =============================================================================
# PUBLIC API
# =============================================================================

def remove_baseline(x: Sequence[float]) -> np.ndarray:
    """Subtracts the least-squares straight line fitted over sample index.

    The line ``y = slope * i + intercept`` is obtained in closed form from the
    running sums of i, y, i*y and i^2.

    Parameters
    ----------
    x : Sequence[float]
        Input series. Not modified.

    Returns
    -------
    np.ndarray
        Detrended copy of `x`. Series shorter than 2 points are returned
        unchanged (as a copy).
    """
    y = np.array(x, dtype=float)
    n = y.size
    if n < 2:
        return y

    i = np.arange(n, dtype=float)
    sum_i = np.sum(i)
    sum_y = np.sum(y)
    sum_iy = np.sum(i * y)
    sum_ii = np.sum(i * i)

    slope = (n * sum_iy - sum_i * sum_y) / (n * sum_ii - sum_i * sum_i)
    intercept = (sum_y - slope * sum_i) / n
    return y - (slope * i + intercept)


def integrate(x: Sequence[float], dt: float, detrend: bool = True) -> np.ndarray:
    """Cumulative trapezoidal integral of `x` with ``y[0] = 0``.

    Parameters
    ----------
    x : Sequence[float]
        Uniformly sampled integrand.
    dt : float
        Time step (s).
    detrend : bool, optional
        Remove the linear baseline from `x` before integrating.
        Default is True.

    Returns
    -------
    np.ndarray
        Integrated series, same length as `x`. Inputs with fewer than two
        points give ``[0.0]``.
    """
    data = np.array(x, dtype=float)
    if data.size < 2:
        return np.zeros(1)
    if detrend:
        data = remove_baseline(data)
    return sp_integrate.cumulative_trapezoid(data, dx=dt, initial=0)


def time_vector(n: int, sampling_rate: float) -> np.ndarray:
    """Sample times ``i / sampling_rate`` for ``i`` in ``[0, n)``."""
    fs = check_sampling_rate(sampling_rate)
    return np.arange(n, dtype=float) / fs


def compute_velocity_and_displacement(
    samples: Sequence[float],
    sampling_rate: float,
    unit: UnitLike = 'm/s2',
    detrend: bool = True) -> Dict[str, np.ndarray]:
    """Velocity and displacement histories of an acceleration record.

    Parameters
    ----------
    samples : Sequence[float]
        Acceleration record in `unit`.
    sampling_rate : float
        Sampling frequency (Hz).
    unit : str or AccelerationUnit, optional
        Unit of `samples`. Default is m/s^2.
    detrend : bool, optional
        Baseline-correct each integration stage. Default is True.

    Returns
    -------
    Dict[str, np.ndarray]
        - 'velocity' (np.ndarray): Velocity history (m/s).
        - 'displacement' (np.ndarray): Displacement history (m).

    Raises
    ------
    InvalidInputError
        Fewer than two samples or a non-positive sampling rate.
    """
    fs = check_sampling_rate(sampling_rate)
    acc = to_si(as_record(samples), unit)
    dt = 1 / fs

    velocity = integrate(acc, dt, detrend=detrend)
    displacement = integrate(velocity, dt, detrend=detrend)

    log.debug("Integrated %d samples: max |v|=%.4e m/s, max |d|=%.4e m",
              acc.size, np.max(np.abs(velocity)), np.max(np.abs(displacement)))
    return {'velocity': velocity, 'displacement': displacement}
