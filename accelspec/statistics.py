"""
Descriptive statistics of a raw sample sequence.

Population (biased) estimators throughout: variance divides by n, and
skewness/kurtosis are the standardized third/fourth moments. A constant
series has zero skewness and zero excess kurtosis.
"""

import logging
from typing import Any, Dict, Sequence

import numpy as np
from scipy import stats

from ._checks import as_record, check_sampling_rate

log = logging.getLogger(__name__)


def _data(x: Sequence[float]) -> np.ndarray:
    return as_record(x, min_length=1, name='data')


# =============================================================================
# PUBLIC API
# =============================================================================

def max_value(x: Sequence[float]) -> float:
    return float(np.max(_data(x)))


def min_value(x: Sequence[float]) -> float:
    return float(np.min(_data(x)))


def mean(x: Sequence[float]) -> float:
    return float(np.mean(_data(x)))


def variance(x: Sequence[float]) -> float:
    """Population variance, sum((x - mean)^2) / n."""
    return float(np.var(_data(x)))


def standard_deviation(x: Sequence[float]) -> float:
    return float(np.sqrt(variance(x)))


def rms(x: Sequence[float]) -> float:
    """Root mean square, sqrt(sum(x^2) / n)."""
    data = _data(x)
    return float(np.sqrt(np.mean(data * data)))


def median(x: Sequence[float]) -> float:
    return float(np.median(_data(x)))


def peak_to_peak(x: Sequence[float]) -> float:
    return float(np.ptp(_data(x)))


def _finite_or_zero(value: float) -> float:
    # scipy returns NaN when the spread is lost in rounding (nearly constant data)
    value = float(value)
    return value if np.isfinite(value) else 0.0


def skewness(x: Sequence[float]) -> float:
    """Population skewness.

    0 for a constant or numerically constant series (where scipy cannot
    resolve the spread and yields NaN).
    """
    data = _data(x)
    if np.std(data) == 0:
        return 0.0
    return _finite_or_zero(stats.skew(data, bias=True))


def kurtosis(x: Sequence[float]) -> float:
    """Excess (Fisher) kurtosis, population form; 0 for a (numerically) constant series."""
    data = _data(x)
    if np.std(data) == 0:
        return 0.0
    return _finite_or_zero(stats.kurtosis(data, fisher=True, bias=True))


def compute_all(x: Sequence[float], sampling_rate: float) -> Dict[str, Any]:
    """All statistics of a record in one pass-friendly bundle.

    Parameters
    ----------
    x : Sequence[float]
        Sample sequence (any unit).
    sampling_rate : float
        Sampling frequency (Hz), used for the record duration.

    Returns
    -------
    Dict[str, Any]
        Keys: 'count', 'duration' (count / sampling_rate, s), 'max', 'min',
        'mean', 'std', 'rms', 'peakToPeak', 'median', 'skewness', 'kurtosis'.
    """
    fs = check_sampling_rate(sampling_rate)
    data = _data(x)
    count = int(data.size)
    max_val = float(np.max(data))
    min_val = float(np.min(data))

    result = {
        'count': count,
        'duration': count / fs,
        'max': max_val,
        'min': min_val,
        'mean': mean(data),
        'std': standard_deviation(data),
        'rms': rms(data),
        'peakToPeak': max_val - min_val,
        'median': median(data),
        'skewness': skewness(data),
        'kurtosis': kurtosis(data),
    }
    log.debug("Statistics of %d samples: mean=%.4g, std=%.4g", count, result['mean'], result['std'])
    return result


def format_number(value: float, precision: int = 4) -> str:
    """Formats a statistic for display.

    Scientific notation for ``|value| >= 1000`` or ``0 < |value| < 0.001``,
    fixed-point with `precision` decimals otherwise.
    """
    magnitude = abs(value)
    if magnitude >= 1000 or (magnitude < 0.001 and value != 0):
        return f"{value:.{precision}e}"
    return f"{value:.{precision}f}"
